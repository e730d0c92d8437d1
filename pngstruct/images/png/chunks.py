'''
Standard chunk types of a PNG file, apart from pHYs that lives in its own module.

 1. IHDR: contains image's width, height, bit depth, color type, compression method, filter method and interlace method
 2. PLTE: contains the palette data
 3. IDAT: contains the actual image data (compressed)
 4. IEND: is the terminator chunk

plus gAMA and a passthrough for every chunk type we don't know about.
'''
from enum import Enum
from typing import List

from pngstruct.core import Chunk
from pngstruct import fields
from pngstruct.properties import validate_type_id
from pngstruct.exceptions import MultipleNotAllowedException


class PNGColorType(Enum):
    '''The color type definition of the PNG is a little tricky and doesn't seem
    to follow a bit-mask. We are going to list all the valid cases.'''
    GRAYSCALE = 0x00
    RGB       = 0x02
    RGB_PALETTE = 0x03
    GS_ALPHA    = 0x04
    RGBA        = 0x06


class PNGCompressionType(Enum):
    '''There is only one method of compression'''
    DEFLATE = 0x00


class PNGFilterType(Enum):
    '''This indicates the preprocessing method applied to the image data before compression. At present, only filter method 0 is defined'''
    ADAPTIVE = 0x00


class PNGInterlaceType(Enum):
    NONE  = 0x00
    ADAM7 = 0x01


class IHDRChunk(Chunk):
    '''
    Width and height give the image dimensions in pixels.
    Bit depth is a single-byte integer giving the number of bits per sample or per palette index (not per pixel).
    Color type is a single-byte integer that describes the interpretation of the image data.
    '''
    type = b'IHDR'
    sequence = 0
    name = 'header'
    length = 13
    multiple = False

    width       = fields.StructField('I')
    height      = fields.StructField('I')
    depth       = fields.StructField('B', default=8)
    color       = fields.StructField('B', enum=PNGColorType, default=PNGColorType.GRAYSCALE)
    compression = fields.StructField('B', enum=PNGCompressionType, default=PNGCompressionType.DEFLATE)
    filter      = fields.StructField('B', enum=PNGFilterType, default=PNGFilterType.ADAPTIVE)
    interlace   = fields.StructField('B', enum=PNGInterlaceType, default=PNGInterlaceType.NONE)

    def __str__(self):
        return '%dx%dx%d' % (
            self.width,
            self.height,
            self.depth,
        )


class GAMAChunk(Chunk):
    '''Gamma times 100000, the default is the one of sRGB (1/2.2).'''
    type = b'gAMA'
    sequence = 100
    name = 'gamma'
    length = 4
    multiple = False

    gamma = fields.StructField('I', default=45455)


class PLTEEntry(Chunk):
    red   = fields.StructField('B')
    green = fields.StructField('B')
    blue  = fields.StructField('B')

    @property
    def pixel(self):
        return (self.red, self.green, self.blue)


class PLTEChunk(Chunk):
    '''From 1 to 256 palette entries, each a three-byte series (red, green, blue).

    In the data object the key "palette" holds the list of (red, green, blue) tuples.'''
    type = b'PLTE'
    sequence = 200
    name = 'palette'
    min_length = 3
    max_length = 3 * 256
    length_multiple = 3
    multiple = False

    def __init__(self, entries=None):
        super().__init__()
        self.entries: List[PLTEEntry] = []

        for pixel in entries or []:
            self.append(pixel)

    def __len__(self):
        return len(self.entries)

    def __getitem__(self, item):
        return self.entries[item]

    def append(self, pixel):
        if isinstance(pixel, PLTEEntry):
            self.entries.append(pixel)
            return

        red, green, blue = pixel
        self.entries.append(PLTEEntry(red=red, green=green, blue=blue))

    def get_fields(self):
        return [('entries', self.entries)]

    @property
    def size(self):
        return 3 * len(self.entries)

    def to_data(self):
        return [_.pixel for _ in self.entries]

    def unpack(self, stream, length):
        for _ in range(length // 3):
            entry = PLTEEntry()
            entry.unpack(stream, 3)
            self.entries.append(entry)

    def compose(self, stream, options):
        for entry in self.entries:
            entry.compose(stream, options)

    @classmethod
    def encode_data(cls, data, options):
        palette = options.get(cls.name)

        if palette is None:
            return []

        cls.check_length(3 * len(palette), strict=True)

        return [cls(palette)]


class IDATChunk(Chunk):
    '''In a PNG file, the concatenation of the contents of all the IDAT chunks makes up a zlib datastream,
    the boundaries between IDAT chunks are arbitrary and can fall anywhere in the zlib datastream.

    The key "image_data" of the data object holds the concatenation, that is
    split again in pieces of at most "max_size" bytes when encoding. As an option
    it can also be given as

        {'data': b'...', 'chunk_size': 16}

    to choose the size of the pieces.
    '''
    type = b'IDAT'
    sequence = 500
    name = 'image_data'
    max_size = 0x2000

    data = fields.PaddingField()

    @classmethod
    def decode_data(cls, data, strict, context, options=None):
        chunks = context.get_chunks(cls.type)

        if not chunks:
            return

        data[cls.name] = b''.join(_.data for _ in chunks)

    @classmethod
    def encode_data(cls, data, options):
        image_data = options.get(cls.name)

        if image_data is None:
            return []

        max_size = cls.max_size
        if isinstance(image_data, dict):
            max_size = image_data.get('chunk_size') or max_size
            image_data = image_data.get('data', b'')

        if max_size <= 0:
            raise ValueError(f'the size of the {cls.type.decode()} pieces must be positive, got {max_size}')

        if not image_data:
            return [cls(data=b'')]

        return [cls(data=image_data[_:_ + max_size]) for _ in range(0, len(image_data), max_size)]


class IENDChunk(Chunk):
    '''The IEND chunk must appear last. It marks the end of the PNG datastream. The chunk's data field is empty.

    It doesn't own anything in the data object but it's always emitted.'''
    type = b'IEND'
    sequence = 1000
    length = 0
    multiple = False

    @classmethod
    def decode_data(cls, data, strict, context, options=None):
        if strict and len(context.get_chunks(cls.type)) > 1:
            raise MultipleNotAllowedException(f'Not more than one chunk allowed for {cls.type.decode()}.')

    @classmethod
    def encode_data(cls, data, options):
        return [cls()]


class UnknownChunk(Chunk):
    '''Passthrough for the chunk types without a handler: the payload is kept as it is.

    The key "unknown_chunks" of the data object holds the list of

        {'type': b'tEXt', 'data': b'...'}

    in the order they were found; they are encoded back just before IEND.

    A single class handles every unknown type, the identifier is kept by the instance.
    '''
    sequence = 900
    name = 'unknown_chunks'

    data = fields.PaddingField()

    def __init__(self, type=None, **kwargs):
        super().__init__(**kwargs)
        if type is not None:
            self.type = validate_type_id(type)

    @classmethod
    def parse(cls, stream, length, strict, context, options=None, type_id=None):
        chunk = super().parse(stream, length, strict, context, options, type_id=type_id)
        chunk.type = validate_type_id(type_id)

        return chunk

    @classmethod
    def decode_data(cls, data, strict, context, options=None):
        chunks = context.get_chunks_by_class(cls)

        if not chunks:
            return

        data[cls.name] = [{'type': _.get_type(), 'data': _.data} for _ in chunks]

    @classmethod
    def encode_data(cls, data, options):
        items = options.get(cls.name)

        if items is None:
            return []

        return [cls(type=_['type'], data=_['data']) for _ in items]
