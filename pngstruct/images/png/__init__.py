'''
# Portable Network Graphics

Format created to replace patent-emcumbered GIF files.

The specification is at <http://www.libpng.org/pub/png/spec/1.2/PNG-Contents.html> and
is available a full test-suite with a lot of PNG images covering all
the possible cases at <http://www.schaik.com/pngsuite/>.

A PNG file is the signature followed by a sequence of chunks, the last one being IEND:

    >>> data = decode('image.png')
    >>> data['physical_size']
    {'x_pixel_per_unit': 2835, 'y_pixel_per_unit': 2835, 'unit': <PhysicalUnit.METER: 1>}
    >>> blob = encode(data, {'physical_size': {'unit': PhysicalUnit.UNKNOWN}})

'''
import logging

from pngstruct.core import Chunk
from pngstruct import fields
from pngstruct.streams import Stream
from pngstruct.registry import ChunkRegistry
from pngstruct.pipeline import Decoder, Encoder
from pngstruct.exceptions import MagicException, UnpackException

from .chunks import (
    PNGColorType,
    PNGCompressionType,
    PNGFilterType,
    PNGInterlaceType,
    IHDRChunk,
    GAMAChunk,
    PLTEEntry,
    PLTEChunk,
    IDATChunk,
    IENDChunk,
    UnknownChunk,
)
from .phys import PhysicalUnit, PHYsChunk


logger = logging.getLogger(__name__)

PNG_SIGNATURE = b'\x89\x50\x4e\x47\x0d\x0a\x1a\x0a'


class PNGHeader(Chunk):
    magic = fields.StringField(8, default=PNG_SIGNATURE)

    def validate(self):
        return self.magic == PNG_SIGNATURE


registry = ChunkRegistry(
    [
        IHDRChunk,
        GAMAChunk,
        PHYsChunk,
        PLTEChunk,
        IDATChunk,
        IENDChunk,
    ],
    fallback=UnknownChunk,
    terminal=IENDChunk.type,
)


def decode(obj, strict=True, options=None, registry=registry, verify_crc=None):
    '''Returns the data object from a path, raw bytes or a binary file.'''
    stream = obj if isinstance(obj, Stream) else Stream(obj)

    header = PNGHeader()
    try:
        header.unpack(stream, len(PNG_SIGNATURE))
    except UnpackException as e:
        raise MagicException('the stream is too short to be a PNG', chain=e.chain)

    if not header.validate():
        logger.debug('wrong signature %r' % header.magic)
        raise MagicException('the signature doesn\'t correspond to a PNG')

    return Decoder(registry, strict=strict, verify_crc=verify_crc).decode(stream, options)


def encode(data, options=None, registry=registry):
    '''Returns the bytes of the PNG built from the data object; the options
    override the keys of the data object.'''
    header = PNGHeader()

    return header.raw + Encoder(registry).encode(data, options)
