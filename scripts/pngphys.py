#!/usr/bin/env python3
'''
Dump the chunks of a PNG file and optionally rewrite its physical pixel dimensions

 $ pngphys.py red.png
 $ pngphys.py red.png out.png 2835 2835 meter
'''
import logging
import sys
import os

from pngstruct.streams import Stream
from pngstruct.pipeline import read_record
from pngstruct.properties import is_critical
from pngstruct.images.png import (
    PNG_SIGNATURE,
    PhysicalUnit,
    decode,
    encode,
)


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)
logger.setLevel(level=logging.INFO if 'DEBUG' not in os.environ else logging.DEBUG)
if 'DEBUG' in os.environ:
    logging.getLogger('pngstruct').setLevel(logging.DEBUG)


def usage(progname):
    print(f'usage: {progname} <png file path> [<output path> <x ppu> <y ppu> [meter|unknown]]')
    sys.exit(1)


def dump_chunks(filepath):
    stream = Stream(filepath)
    stream.skip(len(PNG_SIGNATURE))

    idx = 0
    while stream.remaining():
        record = read_record(stream, verify_crc=False)
        print(f'[{idx:02d}] {record.type.decode("latin1")} length={record.length:<8d} crc=0x{record.crc:08x} critical={is_critical(record.type)}')
        idx += 1


if __name__ == '__main__':
    if len(sys.argv) not in (2, 5, 6):
        usage(sys.argv[0])

    filepath = sys.argv[1]

    dump_chunks(filepath)

    data = decode(filepath, strict=False)

    physical_size = data.get('physical_size')
    print(f'physical size: {physical_size}' if physical_size else 'no physical size')

    if len(sys.argv) == 2:
        sys.exit(0)

    output, x, y = sys.argv[2:5]
    unit = PhysicalUnit[sys.argv[5].upper()] if len(sys.argv) == 6 else PhysicalUnit.METER

    blob = encode(data, {
        'physical_size': {
            'x_pixel_per_unit': int(x),
            'y_pixel_per_unit': int(y),
            'unit': unit,
        },
    })

    with open(output, 'wb') as f:
        f.write(blob)

    logger.info('written %d bytes to \'%s\'', len(blob), output)
