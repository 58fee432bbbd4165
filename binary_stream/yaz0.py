"""Yaz0 compression.

A Yaz0 file is a 16 byte big-endian header (magic, uncompressed size, 8 reserved bytes)
followed by groups of one control byte and up to 8 tokens, most significant bit first.
A set bit is a literal byte, a clear bit is a back-reference into the already decoded output:
    b1 b2       length = (b1 >> 4) + 2          (3..17)
    b1 b2 b3    length = b3 + 0x12, if b1 >> 4 == 0 (18..273)
with distance = ((b1 & 0xf) << 8 | b2) + 1 (1..4096).
"""
from dataclasses import dataclass, field
from warnings import warn
from .endian import Endian
from .serialization import BinaryStream, Serializable, Numeric, FixedArray
from .util import magic_field, align_up


U8 = Numeric.U8
U32 = Numeric.U32

MAGIC = b"Yaz0"
HEADER_SIZE = 0x10


class Yaz0Error(Exception):
    pass


class TruncatedStreamError(Yaz0Error):
    pass


class CorruptStreamError(Yaz0Error):
    pass


@dataclass
class Yaz0Header(Serializable):
    magic: FixedArray(U8, 4) = magic_field("Yaz0")
    uncompressed_size: U32 = 0
    reserved: FixedArray(U8, 8) = field(default_factory=list)


def is_yaz0(data) -> bool:
    return bytes(data[:4]) == MAGIC


class Decoder:
    def __init__(self, compressed_buf: bytes):
        self.compressed_buf = compressed_buf
        self.header = None
        self.decompressed_buf = bytearray()
        self._read_cursor = 0
        self._write_cursor = 0

    def _read_header(self):
        if len(self.compressed_buf) < HEADER_SIZE:
            raise TruncatedStreamError("Header is {} bytes long, expected {}".format(len(self.compressed_buf), HEADER_SIZE))
        (self.header, self._read_cursor) = Yaz0Header.deserialize_from(bytes(self.compressed_buf[:HEADER_SIZE]), endian=Endian.BIG)
        self.decompressed_buf = bytearray(self.header.uncompressed_size)

    def _read_byte(self) -> int:
        if self._read_cursor >= len(self.compressed_buf):
            raise TruncatedStreamError("Input ended after {} of {} bytes were decoded".format(self._write_cursor, len(self.decompressed_buf)))
        b = self.compressed_buf[self._read_cursor]
        self._read_cursor += 1
        return b

    def _copy_back_reference(self):
        b1 = self._read_byte()
        b2 = self._read_byte()
        distance = ((b1 & 0xf) << 8 | b2) + 1
        length = b1 >> 4
        if length == 0:
            length = self._read_byte() + 0x12
        else:
            length += 2
        copy_src = self._write_cursor - distance
        if copy_src < 0:
            raise CorruptStreamError("Back-reference at output offset {} reaches {} bytes back".format(self._write_cursor, distance))
        end = min(self._write_cursor + length, len(self.decompressed_buf))
        # One byte at a time, the source may overlap the bytes being written
        for dst in range(self._write_cursor, end):
            self.decompressed_buf[dst] = self.decompressed_buf[copy_src]
            copy_src += 1
        overrun = self._write_cursor + length - end
        self._write_cursor = end
        if overrun > 0:
            raise CorruptStreamError("Back-reference runs {} bytes past the uncompressed size".format(overrun))

    def decompress(self):
        self._read_header()
        out_len = len(self.decompressed_buf)
        while self._write_cursor < out_len:
            block = self._read_byte()
            for _ in range(8):
                if block & 0x80:
                    self.decompressed_buf[self._write_cursor] = self._read_byte()
                    self._write_cursor += 1
                else:
                    self._copy_back_reference()
                block <<= 1
                if self._write_cursor >= out_len or self._read_cursor >= len(self.compressed_buf):
                    break


def decompress(compressed_buf: bytes, strict=False) -> bytes:
    """Data without the Yaz0 magic is returned unchanged.
    A truncated or corrupt stream raises with strict, otherwise it only warns
    and whatever was decoded is returned, zero filled up to the uncompressed size."""
    if not is_yaz0(compressed_buf):
        return bytes(compressed_buf)
    dec = Decoder(compressed_buf)
    try:
        dec.decompress()
    except Yaz0Error as err:
        if strict:
            raise
        warn("Yaz0 warning: {}".format(err), stacklevel=2)
    return bytes(dec.decompressed_buf)


class Encoder:
    # Only the nearest 0x400 of the 0x1000 addressable bytes are searched
    SEARCH_WINDOW = 0x400
    MAX_MATCH = 0x111

    def __init__(self, uncompressed_buf: bytes):
        self._read_cursor = 0
        self._uncompressed_buf = bytes(uncompressed_buf)
        self._uncompressed_len = len(self._uncompressed_buf)
        self._compressed_buf = bytearray()

    def find_match(self, position: int) -> tuple[int, int]:
        """Returns (distance, length) of the longest earlier run equal to the data at position.
        Nearer runs win ties. A length below 3 means nothing was found."""
        buf = self._uncompressed_buf
        max_len = min(Encoder.MAX_MATCH, self._uncompressed_len - position)
        best_distance = 0
        best_len = 0
        if max_len < 3:
            return (best_distance, best_len)
        min_pos = max(position - Encoder.SEARCH_WINDOW, 0)
        prefix = buf[position:position + 3]
        # Candidates start before position but may run into it
        candidate = buf.rfind(prefix, min_pos, position + 2)
        while candidate >= 0:
            cur_len = 3
            while cur_len < max_len and buf[candidate + cur_len] == buf[position + cur_len]:
                cur_len += 1
            if cur_len > best_len:
                best_len = cur_len
                best_distance = position - candidate
                if best_len == max_len:
                    break
            candidate = buf.rfind(prefix, min_pos, candidate + 2)
        return (best_distance, best_len)

    def _write_back_reference(self, distance: int, length: int):
        back = distance - 1
        if length >= 0x12:
            self._compressed_buf.append((back >> 8) & 0xf)
            self._compressed_buf.append(back & 0xff)
            self._compressed_buf.append((length - 0x12) & 0xff)
        else:
            self._compressed_buf.append(((back >> 8) & 0xf) | ((length - 2) << 4))
            self._compressed_buf.append(back & 0xff)

    def compress(self) -> bytearray:
        header = BinaryStream(endian=Endian.BIG)
        Yaz0Header(uncompressed_size=self._uncompressed_len).serialize_into(header)
        self._compressed_buf += header.buffer
        while self._read_cursor < self._uncompressed_len:
            control_offset = len(self._compressed_buf)
            self._compressed_buf.append(0)
            control = 0
            for bit in range(8):
                if self._read_cursor >= self._uncompressed_len:
                    break
                (distance, length) = self.find_match(self._read_cursor)
                if length > 2:
                    self._write_back_reference(distance, length)
                    self._read_cursor += length
                else:
                    control |= 0x80 >> bit
                    self._compressed_buf.append(self._uncompressed_buf[self._read_cursor])
                    self._read_cursor += 1
            self._compressed_buf[control_offset] = control
        padding = align_up(len(self._compressed_buf), 4) - len(self._compressed_buf)
        self._compressed_buf += bytearray(padding)
        return self._compressed_buf


def compress(uncompressed_buf: bytes) -> bytes:
    enc = Encoder(uncompressed_buf)
    return bytes(enc.compress())
