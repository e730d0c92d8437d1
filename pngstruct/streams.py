import io
import logging
import os
import struct
from contextlib import contextmanager

from .exceptions import UnpackException


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around bytes/file object to
    uniform its properties: mainly we need sequential big-endian
    reads and writes that fail loudly when the data is over.'''
    def __init__(self, obj):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self._type = type(obj)
        self.obj = obj
        self.history = []
        self._owned = False

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, self.init_file)

        init_method()

    def __getattr__(self, name):
        return getattr(self.obj, name)

    def __repr__(self):
        return '<%s(%s @ %d)>' % (self.__class__.__name__, self._type.__name__, self.obj.tell())

    def init_str(self):
        '''We think this is a path'''
        logger.debug('opening path \'%s\'' % self.obj)
        self.obj = open(self.obj, 'rb')
        self._owned = True

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)

    def init_bytearray(self):
        self.obj = io.BytesIO(bytes(self.obj))

    def init_file(self):
        '''Already a binary file-like object, we use it as it is'''
        if isinstance(self.obj, os.PathLike):
            self.obj = os.fspath(self.obj)
            return self.init_str()

        if not hasattr(self.obj, 'read'):
            raise ValueError('\'%s\' is the wrong kind of object to use as stream' % self._type.__name__)

    def __del__(self):
        # only the files we opened ourselves
        if getattr(self, '_owned', False):
            self.obj.close()

    def close(self):
        self.obj.close()

    def tell(self):
        return self.obj.tell()

    def seek(self, offset):
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        self.obj.seek(offset)

    @property
    def size(self):
        with self.saved():
            return self.obj.seek(0, io.SEEK_END)

    def remaining(self):
        return self.size - self.tell()

    def skip(self, n):
        self.seek(self.tell() + n)

    def read_exact(self, n):
        data = self.obj.read(n)
        if len(data) != n:
            raise UnpackException(
                'expected %d bytes at offset %d, got %d' % (n, self.tell() - len(data), len(data)))

        return data

    def read_all(self):
        return self.obj.read()

    def _read_struct(self, fmt):
        return struct.unpack(fmt, self.read_exact(struct.calcsize(fmt)))[0]

    def read_uint8(self):
        return self._read_struct('>B')

    def read_uint16be(self):
        return self._read_struct('>H')

    def read_uint32be(self):
        return self._read_struct('>I')

    def write(self, data):
        return self.obj.write(data)

    def write_uint8(self, value):
        return self.write(struct.pack('>B', value))

    def write_uint16be(self, value):
        return self.write(struct.pack('>H', value))

    def write_uint32be(self, value):
        return self.write(struct.pack('>I', value))

    def getvalue(self):
        return self.obj.getvalue()

    def save(self):
        self.history.append(self.obj.tell())

    def restore(self):
        old_seek = self.history.pop()
        self.obj.seek(old_seek)

    @contextmanager
    def saved(self):
        self.save()
        try:
            yield self
        finally:
            self.restore()
