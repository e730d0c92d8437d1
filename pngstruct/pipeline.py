"""
Pipelines moving between a stream of records and the data object.

A record is laid out as

    length  (4 bytes, big-endian, count of payload bytes)
    type    (4 bytes, identifier)
    payload (length bytes)
    crc     (4 bytes, over type and payload)

The Decoder reads the records, hands each payload to the handler of its type
and then asks every handler to fold its instances into the data object; the
Encoder does the reverse, asking every handler for its instances and composing
them in sequence order.
"""
import logging
from collections import namedtuple

from .core import ChunkContext
from .streams import Stream
from .properties import DecodePhase, validate_type_id
from .common import crc
from .exceptions import FormatException, InvalidLengthException, InvalidChunkTypeException


logger = logging.getLogger(__name__)

# the length is a 4-byte unsigned integer but cannot exceed 2^31 - 1
MAX_LENGTH = 0x7fffffff

ChunkRecord = namedtuple('ChunkRecord', ['length', 'type', 'payload', 'crc'])


def read_record(stream, verify_crc=True):
    length = stream.read_uint32be()

    if length > MAX_LENGTH:
        raise InvalidLengthException(f'record length 0x{length:08x} exceeds 2^31 - 1')

    type_id = validate_type_id(stream.read_exact(4))
    payload = stream.read_exact(length)
    checksum = stream.read_uint32be()

    crc.verify(type_id, payload, checksum, strict=verify_crc)

    return ChunkRecord(length, type_id, payload, checksum)


def write_record(stream, type_id, payload):
    if len(payload) > MAX_LENGTH:
        raise InvalidLengthException(f'payload of {len(payload)} bytes for chunk {type_id!r} is too big')

    stream.write_uint32be(len(payload))
    stream.write(type_id)
    stream.write(payload)
    stream.write_uint32be(crc.calculate(type_id, payload))


class Decoder(object):
    '''Transforms a stream of records into the data object.

    It's a one-shot object: each call to decode() starts from scratch and
    nothing is kept if something goes wrong.'''

    def __init__(self, registry, strict=True, verify_crc=None):
        self.registry = registry
        self.strict = strict
        self.verify_crc = strict if verify_crc is None else verify_crc
        self.phase = DecodePhase.START
        self.logger = logging.getLogger(__name__)

    def decode(self, stream, options=None):
        options = options if options is not None else {}
        stream = stream if isinstance(stream, Stream) else Stream(stream)

        self.phase = DecodePhase.START
        context = ChunkContext()

        self.phase = DecodePhase.READING_RECORDS
        self.read_records(stream, context, options)

        self.phase = DecodePhase.AGGREGATING
        data = self.aggregate(context, options)

        self.phase = DecodePhase.DONE

        return data

    def read_records(self, stream, context, options):
        while stream.remaining():
            offset = stream.tell()
            record = read_record(stream, verify_crc=self.verify_crc)

            self.logger.debug('record %s of %d bytes at offset %d' % (record.type, record.length, offset))

            try:
                self.parse_record(record, context, options)
            except FormatException as e:
                e.chain.append(record.type.decode('latin1'))
                raise

            if record.type == self.registry.terminal:
                if stream.remaining():
                    self.logger.warning('ignoring %d bytes after the terminal chunk', stream.remaining())
                break

        return context

    def parse_record(self, record, context, options):
        handler = self.registry.resolve(record.type, self.strict)

        if handler is None:
            return None

        chunk = handler.parse(Stream(record.payload), record.length, self.strict, context, options, type_id=record.type)
        context.add_chunk(chunk)

        return chunk

    def aggregate(self, context, options):
        data = {}

        handlers = self.registry.handlers()
        if self.registry.fallback is not None:
            handlers.append(self.registry.fallback)

        for handler in handlers:
            self.logger.debug('decoding data of %s' % handler.__name__)
            handler.decode_data(data, self.strict, context, options)

        return data


class Encoder(object):
    '''Transforms the data object into a stream of records.

    The options are merged on top of the data object so that the output of a
    decoding can be encoded back as it is.'''

    def __init__(self, registry):
        self.registry = registry
        self.logger = logging.getLogger(__name__)

    def encode(self, data, options=None):
        options = dict(data, **(options or {}))

        chunks = self.collect(data, options)

        # the sort is stable so chunks of the same type keep their order
        chunks.sort(key=lambda _: _.get_sequence())

        stream = Stream(b'')
        for chunk in chunks:
            self.logger.debug('composing %r' % chunk)
            payload = Stream(b'')
            chunk.compose(payload, options)
            write_record(stream, chunk.get_type(), payload.getvalue())

        return stream.getvalue()

    def collect(self, data, options):
        chunks = []
        for handler in self.registry.handlers():
            instances = handler.encode_data(data, options)
            self.logger.debug('%s contributes %d chunks' % (handler.__name__, len(instances)))
            chunks.extend(instances)

        if self.registry.fallback is None:
            return chunks

        for chunk in self.registry.fallback.encode_data(data, options):
            type_id = chunk.get_type()
            if type_id in self.registry or type_id == self.registry.terminal:
                raise InvalidChunkTypeException(
                    f'chunk type {type_id!r} has its own handler, it cannot be passed through')
            chunks.append(chunk)

        return chunks
