import sys
from enum import Enum


class Endian(Enum):
    """Byte order, valued by its structlib prefix"""
    LITTLE = "<"
    BIG = ">"

    @property
    def prefix(self) -> str:
        return self.value


NATIVE_ENDIAN = Endian.LITTLE if sys.byteorder == "little" else Endian.BIG
