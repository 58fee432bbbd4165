from dataclasses import field
from .endian import Endian
from .serialization import BinaryStream


def from_bytes(item_type, data, endian: Endian=None, encoding: str="utf-8"):
    """Reads an item from an array of bytes"""
    stream = BinaryStream(buf=bytearray(data), endian=endian, encoding=encoding)
    return stream.read_item(item_type)


def to_bytes(item, endian: Endian=None, encoding: str="utf-8") -> bytes:
    """Writes an item to an array of bytes"""
    stream = BinaryStream(endian=endian, encoding=encoding)
    stream.write_item(item)
    return stream.to_bytes()


def magic_bytes(s: str) -> list[int]:
    return list(map(ord, s))


def magic_field(s: str):
    return field(default_factory=lambda: magic_bytes(s))


def bytes_to_string(data, encoding: str="utf-8") -> str:
    """Decodes data up to the first NUL, or all of it if there is none"""
    data = bytes(data)
    end = data.find(b"\0")
    if end >= 0:
        data = data[:end]
    return data.decode(encoding)


def align_up(n: int, to: int) -> int:
    return (n + to - 1) // to * to
