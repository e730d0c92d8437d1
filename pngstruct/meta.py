import logging
from enum import Enum, auto


class Endianess(Enum):
    LITTLE_ENDIAN = auto()
    BIG_ENDIAN    = auto()


class FieldDescriptor(object):
    """Wrapper around field access of a Chunk related class.

    The value lives in the instance's __dict__, every assignment goes
    through Field.validate() so there is exactly one place checking the domain."""

    def __init__(self, field_instance: "Field", field_name: str):
        self.logger = logging.getLogger(f"{self.__module__}.{self.__class__.__name__}")
        self.field = field_instance
        self.field.name = field_name

    def __get__(self, instance, type=None):
        if instance is None:
            return self.field

        data = instance.__dict__

        if self.field.name not in data:
            self.logger.debug("default value for field named '%s'", self.field.name)
            data[self.field.name] = self.field.value_from_default()

        return data[self.field.name]

    def __set__(self, instance, value):
        self.logger.debug("__set__ from %s for field named '%s'", instance.__class__.__name__, self.field.name)
        instance.__dict__[self.field.name] = self.field.validate(value, chain=[instance.get_type_name()])


class FieldBase(object):

    def contribute_to_chunk(self, cls, name):
        if not getattr(cls, name, None):
            setattr(cls, name, FieldDescriptor(self, name))
        else:
            raise AttributeError(f'field {name} is already present in class {cls.__name__}')


class Meta(object):
    """Class containing metadata about the abstraction"""

    def __init__(self):
        self.fields = []


class MetaChunk(type):

    def __new__(cls, names, bases, attrs):
        '''All of this is a big hack, maybe too inspired by how Django does a similar thing!'''
        module = attrs.pop('__module__')
        classcell = attrs.pop('__classcell__', None)

        new_attrs = {
            '__module__': module,
        }
        if classcell is not None:
            new_attrs['__classcell__'] = classcell
        new_cls = super(MetaChunk, cls).__new__(cls, names, bases, new_attrs)

        new_cls._meta = Meta()

        # handle inheritance
        parents = [_ for _ in bases if isinstance(_, MetaChunk)]
        for parent in parents:
            for obj_name in parent._meta.fields:
                if obj_name in new_cls._meta.fields:
                    continue
                new_cls._meta.fields.append(obj_name)

        for obj_name, obj in attrs.items():
            new_cls.add_to_class(obj_name, obj)

        new_cls.logger = logging.getLogger(f'{module}.{names}')

        return new_cls

    def add_to_class(cls, name, value):
        if hasattr(value, 'contribute_to_chunk'):
            cls._meta.fields.append(name)
            value.contribute_to_chunk(cls, name)
        else:
            setattr(cls, name, value)
