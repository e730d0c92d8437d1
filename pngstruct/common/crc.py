'''
Checksum of the records of a chunked stream.
'''
import logging
from zlib import crc32

from ..exceptions import ChecksumException


logger = logging.getLogger(__name__)


def calculate(type_id, payload):
    """standard CRC methods with pre and post conditioning, as defined by ISO 3309 [ISO-3309]
    or ITU-T V.42 [ITU-V42]. The CRC polynomial employed is

      x^32+x^26+x^23+x^22+x^16+x^12+x^11+x^10+x^8+x^7+x^5+x^4+x^2+x+1

    The 32-bit CRC register is initialized to all 1's, and then the data from each byte is processed
    from the least significant bit (1) to the most significant bit (128). After all the data bytes are processed,
    the CRC register is inverted (its ones complement is taken). This value is transmitted (stored in the file)
    MSB first.

    It's computed over the chunk type and chunk data, but not the length.

    See <https://www.w3.org/TR/PNG-Structure.html#CRC-algorithm>.
    """
    return crc32(type_id + payload) & 0xffffffff


def verify(type_id, payload, expected, strict=True):
    value = calculate(type_id, payload)

    if value == expected:
        return True

    message = f'CRC mismatch for chunk {type_id!r}: expected 0x{expected:08x}, calculated 0x{value:08x}'
    if strict:
        raise ChecksumException(message)

    logger.warning(message)

    return False
