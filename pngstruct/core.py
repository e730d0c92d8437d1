"""
Core module for the abstraction of a chunk type.

Each chunk type is a subclass of Chunk: the class itself is the handler
(it knows how to parse, aggregate and create its instances) and the instances
are the chunks found into (or going to) the stream.

The phases a chunk type takes part to are

 - decoding: parse() for each record of this type, then decode_data() once
   to fold all the instances into the data object
 - encoding: encode_data() once to create the instances from the options, then
   compose() for each instance

The pipeline passes around explicitly a ChunkContext with the instances found so far,
so no chunk needs to know the container it lives in.
"""
import logging
import threading
from collections import OrderedDict
from typing import Dict, List

from .meta import MetaChunk
from .streams import Stream
from .properties import is_critical
from .exceptions import (
    FormatException,
    InvalidLengthException,
    DuplicateChunkException,
    MultipleNotAllowedException,
    InvalidFieldValueException,
)


logger = logging.getLogger(__name__)


class ChunkContext(object):
    '''Instances collected during a decoding, by type and in stream order.

    The append is serialized so that parse() calls on independent records
    could be run concurrently.'''

    def __init__(self):
        self._chunks: Dict[bytes, List["Chunk"]] = OrderedDict()
        self._order: List["Chunk"] = []
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._order)

    def __iter__(self):
        return iter(self._order)

    def add_chunk(self, chunk):
        with self._lock:
            self._chunks.setdefault(chunk.get_type(), []).append(chunk)
            self._order.append(chunk)

    def get_chunks(self, type_id) -> List["Chunk"]:
        return list(self._chunks.get(type_id, []))

    def get_chunks_by_class(self, cls) -> List["Chunk"]:
        return [_ for _ in self._order if isinstance(_, cls)]

    def get_first_chunk(self, type_id):
        chunks = self._chunks.get(type_id)
        return chunks[0] if chunks else None


class Chunk(object, metaclass=MetaChunk):
    """
    Together with Field is the main class that defines a format: the class
    attributes describe the chunk type, the fields declared describe the payload.

    Subclasses must define

     - type: the four bytes identifying the chunk type
     - sequence: the position of the chunk type in an encoded stream
     - name: the key of the data object (and of the options) owned by the type

    and optionally the constraints on the length of the payload and on the
    number of occurrences of the chunk type.
    """
    type: bytes = None
    sequence: int = None
    name: str = None

    # exact length of the payload, None if variable
    length: int = None
    # constraints for variable-length payloads
    min_length: int = 0
    max_length: int = None
    length_multiple: int = 1

    multiple: bool = True

    def __init__(self, **kwargs):
        for field_name, value in kwargs.items():
            if field_name not in self._meta.fields:
                raise AttributeError(f'chunk {self.get_type_name()} has no field named \'{field_name}\'')
            setattr(self, field_name, value)

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.fields

    def get_fields(self):
        '''It returns a list of couples (name, value) for each field.'''
        return [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

    def __repr__(self):
        msg = []
        for field_name, value in self.get_fields():
            msg.append('%s=%r' % (field_name, value))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __eq__(self, other):
        if not isinstance(other, Chunk):
            return NotImplemented
        return self.get_type() == other.get_type() and self.get_fields() == other.get_fields()

    def __hash__(self):
        return id(self)

    def get_type(self) -> bytes:
        return self.type

    def get_type_name(self) -> str:
        type_id = self.get_type()
        return type_id.decode('latin1') if type_id else self.__class__.__name__

    @classmethod
    def get_sequence(cls) -> int:
        return cls.sequence

    @classmethod
    def is_critical(cls) -> bool:
        return is_critical(cls.type)

    @property
    def size(self):
        return sum(getattr(self.__class__, _).size(value) for _, value in self.get_fields())

    @property
    def raw(self):
        stream = Stream(b'')
        self.compose(stream, {})
        return stream.getvalue()

    def to_data(self):
        return {field_name: value for field_name, value in self.get_fields()}

    # Validation

    @classmethod
    def check_occurrence(cls, context, strict):
        if strict and not cls.multiple and context.get_first_chunk(cls.type) is not None:
            raise DuplicateChunkException(f'Only one {cls.type.decode()} is allowed in the data.')

    @classmethod
    def check_length(cls, length, strict):
        type_name = cls.type.decode('latin1') if cls.type else cls.__name__
        if cls.length is not None:
            if (strict and length != cls.length) or length < cls.length:
                raise InvalidLengthException(
                    f'The length of chunk {type_name} should be {cls.length}, but got {length}.')
            return

        if length < cls.min_length or (cls.max_length is not None and length > cls.max_length):
            raise InvalidLengthException(
                f'The length of chunk {type_name} should be between {cls.min_length} and {cls.max_length}, but got {length}.')

        if length % cls.length_multiple:
            raise InvalidLengthException(
                f'The length of chunk {type_name} should be a multiple of {cls.length_multiple}, but got {length}.')

    # Phase 1 (decoding)

    @classmethod
    def parse(cls, stream, length, strict, context, options=None, type_id=None):
        '''Parsing of chunk data: returns a new instance reading exactly
        "length" bytes from the stream, whatever is used of them.

        "type_id" is the identifier of the record, only the handlers of more
        than one chunk type need it.'''
        cls.check_occurrence(context, strict)
        cls.check_length(length, strict)

        payload = Stream(stream.read_exact(length))

        chunk = cls()
        chunk.unpack(payload, length)

        if payload.remaining():
            cls.logger.warning('ignoring %d trailing bytes of chunk %s', payload.remaining(), chunk.get_type_name())

        return chunk

    def unpack(self, stream, length):
        for field_name in self.get_ordered_fields_name():
            field = getattr(self.__class__, field_name)
            self.logger.debug('unpacking %s.%s at offset %d' % (self.__class__.__name__, field_name, stream.tell()))
            try:
                setattr(self, field_name, field.unpack(stream))
            except FormatException as e:
                if not isinstance(e, InvalidFieldValueException):
                    e.chain.append(field_name)
                raise

    # Phase 5 (decoding)

    @classmethod
    def decode_data(cls, data, strict, context, options=None):
        '''Gathers chunk-data from decoded chunks into the data object'''
        chunks = context.get_chunks(cls.type)

        if not chunks:
            return

        if strict and not cls.multiple and len(chunks) != 1:
            raise MultipleNotAllowedException(f'Not more than one chunk allowed for {cls.type.decode()}.')

        data[cls.name] = chunks[0].to_data()

    # Phase 1 (encoding)

    @classmethod
    def encode_data(cls, data, options) -> List["Chunk"]:
        '''Returns a list of chunks to be added to the data-stream'''
        section = options.get(cls.name) if cls.name else None

        if section is None:
            return []

        chunk = cls()
        for field_name, value in section.items():
            if field_name not in cls._meta.fields:
                cls.logger.debug('ignoring option \'%s\' for chunk %s' % (field_name, chunk.get_type_name()))
                continue
            if value is not None:
                setattr(chunk, field_name, value)

        return [chunk]

    # Phase 4 (encoding)

    def compose(self, stream, options):
        '''Composing of chunk data: writes the fields in the order they are declared'''
        for field_name, value in self.get_fields():
            self.logger.debug('packing %s.%s' % (self.__class__.__name__, field_name))
            getattr(self.__class__, field_name).pack(stream, value)
