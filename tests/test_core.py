from enum import Enum

import pytest

from pngstruct.core import Chunk, ChunkContext
from pngstruct.fields import StructField, PaddingField
from pngstruct.streams import Stream
from pngstruct.registry import ChunkRegistry
from pngstruct.properties import (
    is_critical,
    is_public,
    is_reserved_valid,
    is_safe_to_copy,
    validate_type_id,
)
from pngstruct.images.png.chunks import UnknownChunk
from pngstruct.exceptions import (
    InvalidChunkTypeException,
    InvalidLengthException,
    DuplicateChunkException,
    MultipleNotAllowedException,
    InvalidFieldValueException,
    UnknownCriticalChunkException,
)


class Kind(Enum):
    A = 0
    B = 1


class DummyChunk(Chunk):
    type = b'duMy'
    sequence = 10
    name = 'dummy'
    length = 3
    multiple = False

    a = StructField('H')
    b = StructField('B', default=7)


class RepeatChunk(Chunk):
    type = b'rePt'
    sequence = 5
    name = 'repeat'
    min_length = 1
    max_length = 4

    data = PaddingField()


def test_parse_exact_length():
    stream = Stream(b'\x00\x01\x02')

    chunk = DummyChunk.parse(stream, 3, True, ChunkContext())

    assert chunk.a == 1
    assert chunk.b == 2
    assert stream.tell() == 3


def test_parse_lenient_skips_trailing_bytes():
    stream = Stream(b'\x00\x01\x02\xff\xff' + b'\xaa')

    chunk = DummyChunk.parse(stream, 5, False, ChunkContext())

    assert (chunk.a, chunk.b) == (1, 2)
    assert stream.tell() == 5
    assert stream.read_uint8() == 0xaa


def test_parse_invalid_length():
    with pytest.raises(InvalidLengthException):
        DummyChunk.parse(Stream(b'\x00\x01\x02\xff\xff'), 5, True, ChunkContext())

    for strict in (True, False):
        with pytest.raises(InvalidLengthException):
            DummyChunk.parse(Stream(b'\x00\x01'), 2, strict, ChunkContext())


def test_parse_variable_length():
    for length in (0, 5):
        with pytest.raises(InvalidLengthException):
            RepeatChunk.check_length(length, False)

    chunk = RepeatChunk.parse(Stream(b'\x01\x02\x03'), 3, True, ChunkContext())

    assert chunk.data == b'\x01\x02\x03'


def test_parse_duplicate():
    context = ChunkContext()
    context.add_chunk(DummyChunk.parse(Stream(b'\x00\x01\x02'), 3, True, context))

    with pytest.raises(DuplicateChunkException):
        DummyChunk.parse(Stream(b'\x00\x03\x04'), 3, True, context)

    context.add_chunk(DummyChunk.parse(Stream(b'\x00\x03\x04'), 3, False, context))

    assert len(context.get_chunks(DummyChunk.type)) == 2


def test_decode_data_absent():
    data = {'other': 1}

    DummyChunk.decode_data(data, True, ChunkContext())

    assert data == {'other': 1}


def test_decode_data_multiple():
    context = ChunkContext()
    context.add_chunk(DummyChunk(a=1, b=2))
    context.add_chunk(DummyChunk(a=3, b=4))

    with pytest.raises(MultipleNotAllowedException):
        DummyChunk.decode_data({}, True, context)

    data = {}
    DummyChunk.decode_data(data, False, context)

    assert data == {'dummy': {'a': 1, 'b': 2}}


def test_encode_data():
    assert DummyChunk.encode_data({}, {}) == []

    chunks = DummyChunk.encode_data({}, {'dummy': {'a': 5}})

    assert chunks == [DummyChunk(a=5, b=7)]
    assert chunks[0].raw == b'\x00\x05\x07'

    with pytest.raises(InvalidFieldValueException):
        DummyChunk.encode_data({}, {'dummy': {'b': 0x100}})


def test_parse_invalid_field_value():
    class EnumChunk(Chunk):
        type = b'enUm'
        sequence = 1
        length = 1

        value = StructField('B', enum=Kind)

    with pytest.raises(InvalidFieldValueException):
        EnumChunk.parse(Stream(b'\x02'), 1, False, ChunkContext())


def test_context_order():
    context = ChunkContext()
    first, second, third = RepeatChunk(data=b'1'), DummyChunk(), RepeatChunk(data=b'2')

    for chunk in (first, second, third):
        context.add_chunk(chunk)

    assert list(context) == [first, second, third]
    assert context.get_chunks(b'rePt') == [first, third]
    assert context.get_first_chunk(b'duMy') is second
    assert context.get_first_chunk(b'noNe') is None
    assert context.get_chunks_by_class(RepeatChunk) == [first, third]


def test_registry_order():
    registry = ChunkRegistry([DummyChunk, RepeatChunk])

    assert list(registry) == [RepeatChunk, DummyChunk]
    assert registry.get(b'duMy') is DummyChunk
    assert b'rePt' in registry
    assert registry.get(b'noNe') is None
    assert len(registry) == 2


def test_registry_rejects_duplicates():
    class SameType(Chunk):
        type = b'duMy'
        sequence = 42

    class SameSequence(Chunk):
        type = b'saMe'
        sequence = 10

    registry = ChunkRegistry([DummyChunk])

    with pytest.raises(ValueError):
        registry.register(SameType)

    with pytest.raises(ValueError):
        registry.register(SameSequence)


def test_registry_resolve_unknown():
    registry = ChunkRegistry([DummyChunk], fallback=UnknownChunk)

    with pytest.raises(UnknownCriticalChunkException):
        registry.resolve(b'CRIT', True)

    assert registry.resolve(b'CRIT', False) is UnknownChunk
    assert registry.resolve(b'anCi', True) is UnknownChunk
    assert registry.resolve(b'duMy', True) is DummyChunk

    assert ChunkRegistry([DummyChunk]).resolve(b'anCi', True) is None


def test_registry_fallback_sequence():
    class SameSequenceOfFallback(Chunk):
        type = b'faLl'
        sequence = UnknownChunk.sequence

    with pytest.raises(ValueError):
        ChunkRegistry([DummyChunk, SameSequenceOfFallback], fallback=UnknownChunk)


def test_unknown_chunk_keeps_type():
    context = ChunkContext()

    for type_id, payload in ((b'tEXt', b'a'), (b'zzZz', b'b'), (b'tEXt', b'c')):
        context.add_chunk(UnknownChunk.parse(Stream(payload), len(payload), True, context, type_id=type_id))

    assert all(type(_) is UnknownChunk for _ in context)
    assert [_.get_type() for _ in context] == [b'tEXt', b'zzZz', b'tEXt']
    assert UnknownChunk.type is None
    assert len(context.get_chunks(b'tEXt')) == 2

    data = {}
    UnknownChunk.decode_data(data, True, context)

    assert data == {'unknown_chunks': [
        {'type': b'tEXt', 'data': b'a'},
        {'type': b'zzZz', 'data': b'b'},
        {'type': b'tEXt', 'data': b'c'},
    ]}

    with pytest.raises(InvalidChunkTypeException):
        UnknownChunk.parse(Stream(b''), 0, True, context, type_id=b'no')

    with pytest.raises(InvalidChunkTypeException):
        UnknownChunk.encode_data({}, {'unknown_chunks': [{'type': b't3Xt', 'data': b''}]})


def test_type_properties():
    assert is_critical(b'IHDR')
    assert not is_critical(b'pHYs')
    assert is_public(b'pHYs')
    assert not is_public(b'prIv')
    assert is_reserved_valid(b'pHYs')
    assert not is_reserved_valid(b'phys')
    assert is_safe_to_copy(b'pHYs')
    assert not is_safe_to_copy(b'IDAT')

    for type_id in (b'tEXt', b'sRGB', b'iCCP', b'tIME'):
        assert not is_critical(type_id)

    with pytest.raises(InvalidChunkTypeException):
        is_critical(b'pH1s')


def test_validate_type_id():
    assert validate_type_id(b'pHYs') == b'pHYs'

    for type_id in (b'pHY', b'pH1s', 'pHYs'):
        with pytest.raises(InvalidChunkTypeException):
            validate_type_id(type_id)
