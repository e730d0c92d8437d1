'''
# Physical pixel dimensions

The pHYs chunk specifies the intended pixel size or aspect ratio for display of the image.

    Pixels per unit, X axis: 4 bytes (PNG unsigned integer)
    Pixels per unit, Y axis: 4 bytes (PNG unsigned integer)
    Unit specifier:          1 byte

When the unit specifier is 0, the chunk defines pixel aspect ratio only; the actual
size of the pixels remains unspecified. When it's 1 the unit is the metre.

See <https://www.w3.org/TR/png/#11pHYs>.
'''
from enum import Enum

from pngstruct.core import Chunk
from pngstruct import fields


# an inch is 0.0254 metres
METERS_PER_INCH = 0.0254


class PhysicalUnit(Enum):
    UNKNOWN = 0x00
    METER   = 0x01


class PHYsChunk(Chunk):
    '''It must precede the first IDAT chunk and at most one is allowed.

    The data object (and the options) use the key "physical_size" like

        {'x_pixel_per_unit': 2835, 'y_pixel_per_unit': 2835, 'unit': PhysicalUnit.METER}

    with one pixel per unspecified unit as default.
    '''
    type = b'pHYs'
    sequence = 140
    name = 'physical_size'
    length = 9
    multiple = False

    x_pixel_per_unit = fields.StructField('I', default=1)
    y_pixel_per_unit = fields.StructField('I', default=1)
    unit             = fields.StructField('B', enum=PhysicalUnit, default=PhysicalUnit.UNKNOWN)

    def __str__(self):
        return '%dx%d per %s' % (
            self.x_pixel_per_unit,
            self.y_pixel_per_unit,
            self.unit.name.lower(),
        )

    @classmethod
    def from_dpi(cls, x_dpi, y_dpi=None):
        y_dpi = x_dpi if y_dpi is None else y_dpi
        return cls(
            x_pixel_per_unit=int(x_dpi / METERS_PER_INCH + 0.5),
            y_pixel_per_unit=int(y_dpi / METERS_PER_INCH + 0.5),
            unit=PhysicalUnit.METER,
        )

    def is_unit_unknown(self):
        return self.unit == PhysicalUnit.UNKNOWN

    def is_unit_in_meter(self):
        return self.unit == PhysicalUnit.METER

    @property
    def dpi(self):
        '''Dots per inch as a couple (x, y), None if the unit is unknown'''
        if not self.is_unit_in_meter():
            return None

        return (
            self.x_pixel_per_unit * METERS_PER_INCH,
            self.y_pixel_per_unit * METERS_PER_INCH,
        )
