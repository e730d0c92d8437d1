from enum import Enum, auto

import pytest

from pngstruct.core import Chunk
from pngstruct.meta import Endianess
from pngstruct.streams import Stream
from pngstruct.exceptions import InvalidFieldValueException, UnpackException
from pngstruct.fields import StructField, StringField, PaddingField


def test_structfield_pack_unpack():
    """Check that the struct format is followed with the big-endian as default."""
    field = StructField('I')

    assert field.size() == 4
    assert field.value_from_default() == 0

    stream = Stream(b'')
    field.pack(stream, 0xcafe)

    assert stream.getvalue() == b'\x00\x00\xca\xfe'

    assert field.unpack(Stream(b'\x01\x02\x03\x04')) == 0x01020304


def test_structfield_little_endian():
    field = StructField('I', endianess=Endianess.LITTLE_ENDIAN)

    assert field.unpack(Stream(b'\x01\x02\x03\x04')) == 0x04030201


def test_structfield_validate_range():
    field = StructField('B', name='byte')

    assert field.validate(0xff) == 0xff

    with pytest.raises(InvalidFieldValueException) as excinfo:
        field.validate(0x100)

    assert excinfo.value.chain == ['byte']

    with pytest.raises(InvalidFieldValueException):
        field.validate(-1)

    with pytest.raises(InvalidFieldValueException):
        field.validate('1')


def test_structfield_enum():
    class DummyEnum(Enum):
        NONE = 0
        FIRST = auto()
        SECOND = auto()

    field = StructField('I', enum=DummyEnum)

    assert field.value_from_default() == DummyEnum.NONE
    assert field.validate(2) == DummyEnum.SECOND
    assert field.validate(DummyEnum.FIRST) == DummyEnum.FIRST

    with pytest.raises(InvalidFieldValueException):
        field.validate(4)

    class OtherEnum(Enum):
        FIRST = 1

    with pytest.raises(InvalidFieldValueException):
        field.validate(OtherEnum.FIRST)

    stream = Stream(b'')
    field.pack(stream, DummyEnum.SECOND)

    assert stream.getvalue() == b'\x00\x00\x00\x02'


def test_stringfield():
    field = StringField(0x10)

    assert field.size() == 0x10
    assert field.value_from_default() == b'\x00' * 0x10

    with pytest.raises(InvalidFieldValueException):
        field.validate(b'kebab')

    data = bytes(range(0x10))

    assert field.validate(data) == data
    assert field.unpack(Stream(data + b'\xff')) == data

    with pytest.raises(UnpackException):
        field.unpack(Stream(data[:4]))


def test_paddingfield():
    field = PaddingField()

    assert field.value_from_default() == b''
    assert field.unpack(Stream(b'\x01\x02\x03')) == b'\x01\x02\x03'
    assert field.validate(bytearray(b'\x01')) == b'\x01'


def test_chunk_fields():
    """Check that building a Chunk from fields behaves correctly."""
    class Dummy(Chunk):
        a = StructField('I', default=0xbad)
        b = StringField(0x10)
        c = StructField('H', default=0xbeef)

    dummy = Dummy()

    assert dummy.get_ordered_fields_name() == ['a', 'b', 'c']
    assert dummy.a == 0xbad
    assert dummy.b == b'\x00' * 0x10
    assert dummy.size == 0x16
    assert dummy.raw == (
        b'\x00\x00\x0b\xad' +
        b'\x00' * 0x10 +
        b'\xbe\xef'
    )

    dummy.a = 1

    assert dummy.raw[:4] == b'\x00\x00\x00\x01'

    with pytest.raises(InvalidFieldValueException) as excinfo:
        dummy.c = 0x10000

    assert excinfo.value.chain == ['c', 'Dummy']


def test_chunk_inheritance():
    '''subclasses inherit fields'''
    class Father(Chunk):
        field_a = StringField(0x2)
        field_b = StructField('I')

    class Son(Father):
        field_c = StringField(0x3)

    son = Son()
    son.unpack(Stream(b'AA' + b'\x01\x02\x03\x04' + b'BBB'), 9)

    assert son.get_ordered_fields_name() == ['field_a', 'field_b', 'field_c']
    assert son.field_b == 0x01020304
    assert son.field_c == b'BBB'


def test_chunk_unknown_field():
    class Dummy(Chunk):
        a = StructField('I')

    with pytest.raises(AttributeError):
        Dummy(b=1)
