from abc import ABC, abstractmethod
from typing import ClassVar
from .endian import Endian, NATIVE_ENDIAN


class Readable(ABC):
    @abstractmethod
    def read(self, stream):
        """Populates this object from the stream's current position"""
        pass


class Writable(ABC):
    @abstractmethod
    def write(self, stream):
        """Writes this object at the stream's current position"""
        pass


class Loadable(ABC):
    @classmethod
    @abstractmethod
    def load_from(cls, stream, endian: Endian=None, encoding: str=None):
        pass


class Loader(Loadable):
    """Wraps a default constructible Readable type so it can be loaded like a Loadable"""
    item_type = None

    def __init__(self, item):
        self.item = item

    @classmethod
    def of(cls, item_type) -> type:
        return type(cls)("Loader[{}]".format(item_type.__name__), (cls, ), {"item_type": item_type})

    @classmethod
    def load_from(cls, stream, endian: Endian=None, encoding: str=None) -> "Loader":
        if cls.item_type is None:
            raise TypeError("Loader has no item type, use Loader.of(item_type)")
        if endian is not None:
            stream.endian = endian
        if encoding is not None:
            stream.encoding = encoding
        return cls(stream.read_item(cls.item_type))


class Magic:
    """Mixin for formats whose magic string tells the byte order of the rest of the file"""
    BE_MAGIC: ClassVar[str] = None
    LE_MAGIC: ClassVar[str] = None
    _endian = NATIVE_ENDIAN

    @property
    def endian(self) -> Endian:
        return self._endian

    @endian.setter
    def endian(self, value: Endian):
        self._endian = value

    def set_endian(self, stream, encoding: str=None) -> Endian:
        if self.BE_MAGIC is None:
            raise TypeError("{} has no BE_MAGIC".format(type(self).__name__))
        s = stream.read_string(len(self.BE_MAGIC), encoding)
        if s == self.BE_MAGIC:
            self.endian = Endian.BIG
        elif s == self.LE_MAGIC:
            self.endian = Endian.LITTLE
        else:
            self.endian = NATIVE_ENDIAN
        return self.endian
