import logging
from collections import OrderedDict

from .properties import validate_type_id, is_critical
from .exceptions import UnknownCriticalChunkException


logger = logging.getLogger(__name__)


class ChunkRegistry(object):
    '''Mapping between chunk type identifiers and the Chunk subclasses handling them.

    It's meant to be filled once and then only read by the pipelines:

        registry = ChunkRegistry([IHDRChunk, IENDChunk], fallback=UnknownChunk, terminal=b'IEND')

    The iteration gives the handlers ordered by their sequence, that is the order
    the chunk types must appear into an encoded stream.

    The fallback handler receives every unknown type, so its parse() must keep
    the "type_id" it's called with. Its sequence is reserved like the others.
    '''

    def __init__(self, handlers=(), fallback=None, terminal=None):
        self._handlers = OrderedDict()
        self.fallback = fallback
        self.terminal = terminal

        for handler in handlers:
            self.register(handler)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(_.type.decode() for _ in self))

    def __contains__(self, type_id):
        return type_id in self._handlers

    def __len__(self):
        return len(self._handlers)

    def __iter__(self):
        return iter(self.handlers())

    def register(self, handler):
        type_id = validate_type_id(handler.type)

        if type_id in self._handlers:
            raise ValueError(f'chunk type {type_id!r} already registered with {self._handlers[type_id].__name__}')

        if handler.get_sequence() is None:
            raise ValueError(f'{handler.__name__} must define a sequence')

        others = list(self._handlers.values())
        if self.fallback is not None:
            others.append(self.fallback)

        for other in others:
            if other.get_sequence() == handler.get_sequence():
                raise ValueError(
                    f'{handler.__name__} has the same sequence ({handler.get_sequence()}) of {other.__name__}')

        logger.debug('registering %s for chunk type %s' % (handler.__name__, type_id))
        self._handlers[type_id] = handler

        return handler

    def get(self, type_id):
        return self._handlers.get(type_id)

    def handlers(self):
        return sorted(self._handlers.values(), key=lambda _: _.get_sequence())

    def resolve(self, type_id, strict):
        '''Returns the handler for the chunk type, falling back to the
        passthrough handler for the unknown ones (None if there is none).'''
        handler = self.get(type_id)

        if handler is not None:
            return handler

        if strict and is_critical(type_id):
            raise UnknownCriticalChunkException(f'chunk {type_id!r} is critical but unknown')

        if self.fallback is None:
            logger.warning('chunk %r is unknown and there is no fallback for it, skipping', type_id)
            return None

        if is_critical(type_id):
            logger.warning('chunk %r is critical but unknown, keeping it as it is', type_id)
        else:
            logger.debug('chunk %r is unknown, keeping it as it is' % type_id)

        return self.fallback
