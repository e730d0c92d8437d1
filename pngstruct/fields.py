"""
A Field is "fundamental" datatype from the format point of view, something directly
packable/unpackable from a chunk's payload.

The fields don't hold values: they are declared as class attributes of a Chunk
and describe how to validate, read and write the value stored in the chunk instance.
"""
import logging
import struct
from enum import Enum

from .meta import FieldBase, Endianess
from .exceptions import InvalidFieldValueException


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, *args, name=None, default=None):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.default = default

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.name)

    def value_from_default(self):
        return self.default

    def validate(self, value, chain=None):
        '''Returns the value to store, raising InvalidFieldValueException
        if it's not acceptable for this field.'''
        return value

    def _invalid(self, message, chain):
        return InvalidFieldValueException(message, chain=[self.name] + (chain or []))

    def size(self, value):
        raise NotImplementedError(f"method {self.__class__.__name__}.size() not implemented")

    def pack(self, stream, value):
        raise NotImplementedError('you need to implement this in the subclass')

    def unpack(self, stream):
        raise NotImplementedError('you need to implement this in the subclass')


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes.

    The main advantage is the possibility to indicate via the "enum" argument some subclass
    of enum.Enum so to have directly a representation of the integer value of the field itself;
    in that case the values outside the enumeration are refused.
    """

    def __init__(self, format, default=0, enum=None, endianess=Endianess.BIG_ENDIAN, **kw):
        self.format = format
        self.enum = enum
        self.endianess = endianess
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%s, %s)>' % (self.__class__.__name__, self.name, self.get_format())

    def value_from_default(self):
        if not self.enum:
            return super().value_from_default()

        return self.enum(self.default)

    def get_format(self):
        return '%s%s' % ('<' if self.endianess == Endianess.LITTLE_ENDIAN else '>', self.format)

    def size(self, value=None):
        return struct.calcsize(self.get_format())

    def validate(self, value, chain=None):
        if self.enum:
            if isinstance(value, Enum) and not isinstance(value, self.enum):
                raise self._invalid(f'{value!r} is not a member of {self.enum.__name__}', chain)

            try:
                return self.enum(value)
            except ValueError:
                raise self._invalid(f'{value!r} is not a valid {self.enum.__name__}', chain)

        if isinstance(value, bool) or not isinstance(value, int):
            raise self._invalid(f'{value!r} is not an integer', chain)

        try:
            struct.pack(self.get_format(), value)
        except struct.error as e:
            raise self._invalid(f'{value!r} is out of range ({e})', chain)

        return value

    def _raw_from_value(self, value):
        return value if not self.enum else value.value

    def pack(self, stream, value):
        stream.write(struct.pack(self.get_format(), self._raw_from_value(value)))

    def unpack(self, stream):
        raw = stream.read_exact(self.size())
        return struct.unpack(self.get_format(), raw)[0]


class StringField(Field):
    """Represent a contiguous chunk of bytes of fixed length."""

    def __init__(self, n=None, **kw):
        if n is None and 'default' not in kw:
            raise ValueError(f"StringField must have 'n' or 'default' indicated!")

        self.length = n or len(kw['default'])

        super().__init__(**kw)

    def value_from_default(self):
        return b'\x00' * self.length if not self.default else self.default

    def size(self, value=None):
        return self.length

    def validate(self, value, chain=None):
        if not isinstance(value, (bytes, bytearray)):
            raise self._invalid(f'{value!r} is not a binary string', chain)

        if len(value) != self.length:
            raise self._invalid(f'you are trying to set a value with the wrong size (that is {self.length} bytes)', chain)

        return bytes(value)

    def pack(self, stream, value):
        stream.write(value)

    def unpack(self, stream):
        return stream.read_exact(self.length)


class PaddingField(Field):
    '''Takes as much stream as possible'''

    def __init__(self, **kw):
        kw.setdefault('default', b'')
        super().__init__(**kw)

    def size(self, value):
        return len(value)

    def validate(self, value, chain=None):
        if not isinstance(value, (bytes, bytearray)):
            raise self._invalid(f'{value!r} is not a binary string', chain)

        return bytes(value)

    def pack(self, stream, value):
        stream.write(value)

    def unpack(self, stream):
        return stream.read_all()
