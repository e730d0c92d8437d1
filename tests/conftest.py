import io
import pathlib
import struct
import zlib

import pytest


@pytest.fixture
def test_root_dir():
    return pathlib.Path(__file__).parent


@pytest.fixture
def make_record():
    '''Returns a function building the bytes of a record (length, type, payload, crc)'''
    def _make_record(type_id, payload, crc=None):
        if crc is None:
            crc = zlib.crc32(type_id + payload) & 0xffffffff
        return struct.pack('>I', len(payload)) + type_id + payload + struct.pack('>I', crc)

    return _make_record


@pytest.fixture
def pillow_png():
    '''Returns a function creating with Pillow the bytes of a small RGB PNG'''
    from PIL import Image

    def _pillow_png(size=(5, 10), color=(255, 0, 0), **params):
        image = Image.new('RGB', size, color)
        output = io.BytesIO()
        image.save(output, format='PNG', **params)
        return output.getvalue()

    return _pillow_png
