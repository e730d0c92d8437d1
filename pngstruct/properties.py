'''
Properties of the chunk type identifiers.

A type identifier is made of four ASCII letters and each one carries a property
in its fifth bit (the one giving the case of the letter):

 1. ancillary bit: 0 (uppercase) means critical, i.e. the decoder must understand it
 2. private bit: 0 (uppercase) means public, i.e. registered by the standard
 3. reserved bit: must be 0 (uppercase) in the current version of the standard
 4. safe-to-copy bit: 1 (lowercase) means that editors can copy it even if they
    don't know it, after modifying the critical chunks

See <https://www.w3.org/TR/png/#5Chunk-naming-conventions>.
'''
import logging
from enum import Enum, auto

from bitstring import Bits

from .exceptions import InvalidChunkTypeException


logger = logging.getLogger(__name__)

TYPE_ID_SIZE = 4
# position of the property bit inside a byte, counting from the most significant
PROPERTY_BIT = 2


class DecodePhase(Enum):
    '''Enum to state the actual phase of a decoder'''
    START           = 0
    READING_RECORDS = auto()
    AGGREGATING     = auto()
    DONE            = auto()


def validate_type_id(type_id):
    if not isinstance(type_id, bytes) or len(type_id) != TYPE_ID_SIZE:
        raise InvalidChunkTypeException(f'chunk type {type_id!r} must be {TYPE_ID_SIZE} bytes')

    if not type_id.isalpha():
        raise InvalidChunkTypeException(f'chunk type {type_id!r} must be made of ASCII letters')

    return type_id


def get_property_bits(type_id):
    '''Returns the tuple (ancillary, private, reserved, safe_to_copy)'''
    bits = Bits(validate_type_id(type_id))

    return tuple(bits[8 * _ + PROPERTY_BIT] for _ in range(TYPE_ID_SIZE))


def is_critical(type_id):
    return not get_property_bits(type_id)[0]


def is_public(type_id):
    return not get_property_bits(type_id)[1]


def is_reserved_valid(type_id):
    return not get_property_bits(type_id)[2]


def is_safe_to_copy(type_id):
    return get_property_bits(type_id)[3]
