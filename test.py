from dataclasses import dataclass, field
from io import BytesIO, SEEK_END
import random
import unittest
from binary_stream import yaz0
from binary_stream.endian import Endian, NATIVE_ENDIAN
from binary_stream.interfaces import Readable, Writable, Loader, Magic
from binary_stream.seek import Seek, seek_task
from binary_stream.serialization import Serializable, SerializationError, Numeric, BinaryStream, FixedArray
from binary_stream.util import from_bytes, to_bytes, bytes_to_string


U8 = Numeric.U8
U16 = Numeric.U16
U32 = Numeric.U32
I8 = Numeric.I8
I16 = Numeric.I16
I32 = Numeric.I32
F32 = Numeric.F32
F64 = Numeric.F64


@dataclass
class MyBasicStruct(Serializable):
    x: F32 = 0.0
    y: F32 = 0.0
    z: F32 = 0.0


@dataclass
class MyFlexStruct(Serializable):
    flags: U32 = 0
    vertices: list[MyBasicStruct] = field(default_factory=list)


@dataclass
class MyUnalignedStruct(Serializable):
    foo: U16 = 0
    bar: U16 = 0
    buz: U16 = 0


@dataclass
class MyBufferStruct(Serializable):
    data_count: U32 = 0
    data: bytearray = field(default_factory=bytearray)


@dataclass
class MyFixedArrayStruct(Serializable):
    name: FixedArray(U8, 16) = field(default_factory=list)
    flags: U32 = 0


@dataclass
class MyNestedStruct(Serializable):
    head: MyUnalignedStruct = field(default_factory=MyUnalignedStruct)
    count: I32 = 0
    _cache: list = field(default_factory=list)


@dataclass
class MyBadStruct(Serializable):
    label: str = "nope"
    value: U8 = 0


@dataclass
class MyMagicStruct(Serializable, Magic):
    BE_MAGIC = "BEMG"
    LE_MAGIC = "GMEB"
    value: U32 = 0

    def read(self, stream):
        stream.endian = self.set_endian(stream)
        super().read(stream)


@dataclass
class MyUnmarkedStruct(Serializable, Magic):
    value: U32 = 0


class MyPair(Readable, Writable):
    def __init__(self, a=0, b=0):
        self.a = a
        self.b = b

    def read(self, stream):
        self.a = stream.read_u16()
        self.b = stream.read_u16()

    def write(self, stream):
        stream.write_u16(self.a)
        stream.write_u16(self.b)


class TestSerialization(unittest.TestCase):
    def test_basic_struct_instance_size(self):
        self.assertEqual(MyBasicStruct().instance_size(), 12)

    def test_basic_struct_type_size(self):
        self.assertEqual(MyBasicStruct.type_size(), 12)

    def test_flex_struct_instance_size(self):
        vertices = [MyBasicStruct(), MyBasicStruct()]
        self.assertEqual(MyFlexStruct(vertices=vertices).instance_size(), 4 + 12 * 2)

    def test_flex_struct_type_size(self):
        self.assertEqual(MyFlexStruct.type_size(), 4)

    def test_buffer_struct_type_size(self):
        self.assertEqual(MyBufferStruct.type_size(), 4)

    def test_nested_struct_type_size(self):
        self.assertEqual(MyNestedStruct.type_size(), 10)

    def test_binary_stream_pack(self):
        buf = BinaryStream()
        fmt = Numeric.format_of_type(U32)
        size = Numeric.size_of_format(fmt)
        buf.pack(fmt, 123)
        self.assertEqual(buf.capacity, size)
        self.assertEqual(buf.offset, size)

    def test_serialize_basic_struct_unaligned(self):
        buf = BinaryStream()
        item = MyUnalignedStruct()
        item.serialize_into(buf)
        self.assertEqual(buf.offset, 6)

    def test_serialize_basic_struct_aligned(self):
        buf = BinaryStream()
        item = MyUnalignedStruct()
        item.serialize_into(buf, 4)
        self.assertEqual(buf.offset, 8)

    def test_serialize_buffer_member(self):
        buf = BinaryStream(endian=Endian.LITTLE)
        data = b"\xde\xad\xbe\xef"
        item = MyBufferStruct(data=data, data_count=len(data))
        offset = item.serialize_into(buf)
        self.assertEqual(offset, 0)
        self.assertEqual(buf.buffer[0], len(data))
        self.assertEqual(buf.buffer[4:8], data)

    def test_fixed_array(self):
        buf = BinaryStream(endian=Endian.LITTLE)
        item = MyFixedArrayStruct(name=list(str.encode("deadbeef")), flags=0xdeadbeef)
        item.serialize_into(buf)
        self.assertEqual(buf.buffer[0:8], b"deadbeef")
        self.assertEqual(buf.buffer[8:16], b"\0\0\0\0\0\0\0\0")
        self.assertEqual(buf.buffer[16:24], b"\xef\xbe\xad\xde")
        # Padding does not leak back into the object
        self.assertEqual(len(item.name), 8)

    def test_fixed_array_truncated(self):
        buf = BinaryStream(endian=Endian.LITTLE)
        item = MyFixedArrayStruct(name=list(range(20)))
        with self.assertWarns(UserWarning):
            item.serialize_into(buf)
        self.assertEqual(buf.buffer[0:16], bytes(range(16)))
        self.assertEqual(buf.offset, 20)

    def test_big_endian_struct(self):
        buf = BinaryStream(endian=Endian.BIG)
        MyUnalignedStruct(foo=1, bar=2, buz=0x0304).serialize_into(buf)
        self.assertEqual(buf.to_bytes(), b"\x00\x01\x00\x02\x03\x04")

    def test_nested_struct_skips_private_members(self):
        buf = BinaryStream(endian=Endian.LITTLE)
        item = MyNestedStruct(head=MyUnalignedStruct(foo=7), count=-1, _cache=[1, 2, 3])
        item.serialize_into(buf)
        self.assertEqual(buf.to_bytes(), b"\x07\x00\x00\x00\x00\x00\xff\xff\xff\xff")

    def test_format_of_member(self):
        self.assertEqual(MyUnalignedStruct.format_of_member("foo"), "H")
        self.assertIsNone(MyBadStruct.format_of_member("label"))
        self.assertIsNone(MyBadStruct.format_of_member("missing"))

    def test_unserializable_member_warns(self):
        buf = BinaryStream()
        with self.assertWarns(UserWarning):
            MyBadStruct(value=9).serialize_into(buf)
        self.assertEqual(buf.to_bytes(), b"\x09")

    def test_out_of_range_value(self):
        buf = BinaryStream()
        with self.assertRaises(SerializationError):
            MyUnalignedStruct(foo=0x10000).serialize_into(buf)


class TestDeserialization(unittest.TestCase):
    def test_basic_struct_deserialize(self):
        buf = b"\x00\x00\x80\x3f\x00\x00\x80\x3f\x00\x00\x80\x3f"
        (result, offset) = MyBasicStruct.deserialize_from(buf)
        self.assertEqual(offset, 12)
        self.assertEqual(result.x, 1.0)
        self.assertEqual(result.y, 1.0)
        self.assertEqual(result.z, 1.0)

    def test_fixed_array(self):
        buf = b"deadbeef\0\0\0\0\0\0\0\0\xef\xbe\xad\xde"
        (result, offset) = MyFixedArrayStruct.deserialize_from(buf)
        self.assertEqual(offset, 20)
        self.assertEqual(bytes(result.name[0:8]).decode(), "deadbeef")
        self.assertEqual(result.flags, 0xdeadbeef)

    def test_nested_struct_big_endian(self):
        buf = b"\xff\xff\x00\x01\x00\x02\x00\x03\x00\x01\x00\x02\x00\x00\x00\x09"
        (result, offset) = MyNestedStruct.deserialize_from(buf, offset=2, endian=Endian.BIG)
        self.assertEqual(offset, 12)
        self.assertEqual(result.head, MyUnalignedStruct(foo=1, bar=2, buz=3))
        self.assertEqual(result.count, 0x00010002)

    def test_variable_sized_member_keeps_default(self):
        buf = b"\x02\x00\x00\x00"
        (result, offset) = MyFlexStruct.deserialize_from(buf)
        self.assertEqual(offset, 4)
        self.assertEqual(result.flags, 2)
        self.assertEqual(result.vertices, [])

    def test_read_sequence(self):
        buf = b"\x01\x00\x02\x00\x03\x00\x04\x00\x05\x00\x06\x00"
        items = MyUnalignedStruct.read_sequence(buf, 0, 2)
        self.assertEqual(items, [MyUnalignedStruct(1, 2, 3), MyUnalignedStruct(4, 5, 6)])
        self.assertEqual(MyUnalignedStruct.read_sequence(buf, 0, 0), [])

    def test_load_from_stream(self):
        stream = BinaryStream(buf=b"\x00\x01\x00\x02\x00\x03")
        item = stream.load(MyUnalignedStruct, endian=Endian.BIG)
        self.assertEqual(item, MyUnalignedStruct(1, 2, 3))
        self.assertEqual(stream.endian, Endian.BIG)

    def test_short_buffer(self):
        with self.assertRaises(EOFError):
            MyBasicStruct.deserialize_from(b"\x00\x00\x80\x3f")


class TestBinaryStream(unittest.TestCase):
    def test_default_endian_is_native(self):
        self.assertEqual(BinaryStream().endian, NATIVE_ENDIAN)

    def test_typed_writes(self):
        stream = BinaryStream(endian=Endian.BIG)
        stream.write_u8(0xab)
        stream.write_i16(-2)
        stream.write_u32(0x01020304)
        stream.write_u64(5)
        self.assertEqual(stream.to_bytes(), b"\xab\xff\xfe\x01\x02\x03\x04" + b"\0" * 7 + b"\x05")

    def test_typed_reads(self):
        data = b"\x01\x02\x03\x04\x05\x06\x07\x08"
        little = BinaryStream(buf=data, endian=Endian.LITTLE)
        big = BinaryStream(buf=data, endian=Endian.BIG)
        self.assertEqual(little.read_u16(), 0x0201)
        self.assertEqual(big.read_u16(), 0x0102)
        self.assertEqual(little.read_u32(), 0x06050403)
        self.assertEqual(big.read_i32(), 0x03040506)
        self.assertEqual(little.read_i8(), 7)
        self.assertEqual(big.read_u8(), 7)

    def test_float_round_trip(self):
        stream = BinaryStream(endian=Endian.BIG)
        stream.write_f32(1.5)
        stream.write_f64(-0.25)
        stream.seek(0)
        self.assertEqual(stream.read_f32(), 1.5)
        self.assertEqual(stream.read_f64(), -0.25)

    def test_explicit_byte_order_wins(self):
        stream = BinaryStream(endian=Endian.LITTLE)
        stream.pack(">H", 1)
        self.assertEqual(stream.to_bytes(), b"\x00\x01")

    def test_read_bytes(self):
        stream = BinaryStream(buf=b"abcdef")
        self.assertEqual(stream.read_bytes(4), b"abcd")
        with self.assertRaises(ValueError):
            stream.read_bytes(-1)
        with self.assertRaises(EOFError):
            stream.read_bytes(3)
        self.assertEqual(stream.offset, 4)
        self.assertEqual(stream.read(10), b"ef")
        self.assertEqual(stream.read(), b"")

    def test_unpack_past_end(self):
        stream = BinaryStream(buf=b"\x01\x02")
        with self.assertRaises(EOFError):
            stream.read_u32()

    def test_write_past_end_grows(self):
        stream = BinaryStream(buf=b"ab")
        stream.seek(4)
        stream.write(b"cd")
        self.assertEqual(stream.to_bytes(), b"ab\0\0cd")
        self.assertEqual(len(stream), 6)

    def test_overwrite_in_place(self):
        stream = BinaryStream(buf=b"abcdef")
        stream.seek(2)
        self.assertEqual(stream.write(b"XY"), 2)
        self.assertEqual(stream.to_bytes(), b"abXYef")

    def test_append(self):
        stream = BinaryStream(buf=b"abc")
        self.assertEqual(stream.append(b"de"), 3)
        self.assertEqual(stream.offset, 5)

    def test_grow(self):
        stream = BinaryStream(size=2)
        stream.grow_to(6)
        self.assertEqual(stream.capacity, 6)
        with self.assertRaises(ValueError):
            stream.grow_to(4)

    def test_seek(self):
        stream = BinaryStream(size=10)
        self.assertEqual(stream.seek(-3, SEEK_END), 7)
        self.assertEqual(stream.skip(2), 9)
        with self.assertRaises(ValueError):
            stream.seek(-1)

    def test_align_to(self):
        stream = BinaryStream(size=16)
        stream.seek(5)
        self.assertEqual(stream.align_to(4), 8)
        self.assertEqual(stream.align_to(4), 8)

    def test_align_to_rejects_zero(self):
        stream = BinaryStream(size=4)
        stream.seek(3)
        with self.assertRaises(ValueError):
            stream.align_to(0)
        self.assertEqual(stream.offset, 3)

    def test_strings(self):
        stream = BinaryStream()
        stream.write_string("hi")
        stream.write_nt_string("there")
        stream.write_nt_strings("ab", "cd")
        self.assertEqual(stream.to_bytes(), b"hithere\0ab\0cd\0")
        stream.seek(0)
        self.assertEqual(stream.read_string(2), "hi")
        self.assertEqual(stream.read_nt_string(), "there")
        self.assertEqual(stream.read_nt_string(), "ab")
        self.assertEqual(stream.read_nt_string(), "cd")

    def test_string_encoding(self):
        stream = BinaryStream(encoding="latin-1")
        stream.write_string("é")
        stream.write_string("é", "utf-8")
        self.assertEqual(stream.to_bytes(), b"\xe9\xc3\xa9")

    def test_read_nt_string_at_restores_position(self):
        stream = BinaryStream(buf=b"xx\0name\0")
        stream.seek(1)
        self.assertEqual(stream.read_nt_string_at(3), "name")
        self.assertEqual(stream.offset, 1)

    def test_unterminated_string(self):
        stream = BinaryStream(buf=b"abc")
        with self.assertRaises(EOFError):
            stream.read_nt_string()

    def test_from_io(self):
        source = BytesIO(b"\x01\x02\x03\x04")
        source.seek(3)
        stream = BinaryStream.from_io(source, endian=Endian.BIG)
        self.assertEqual(source.tell(), 3)
        self.assertEqual(stream.offset, 0)
        self.assertEqual(stream.read_u32(), 0x01020304)

    def test_items(self):
        stream = BinaryStream(endian=Endian.LITTLE)
        self.assertEqual(stream.write_item(MyPair(1, 2)), 0)
        self.assertEqual(stream.write_item(MyPair(3, 4)), 4)
        stream.seek(4)
        pair = stream.read_item(MyPair)
        self.assertEqual((pair.a, pair.b), (3, 4))


class TestSeek(unittest.TestCase):
    def test_restores_position(self):
        f = BytesIO(b"0123456789")
        f.seek(2)
        with Seek(f, 6) as moved:
            self.assertEqual(moved.read(2), b"67")
        self.assertEqual(f.tell(), 2)

    def test_restores_position_on_error(self):
        stream = BinaryStream(size=8)
        with self.assertRaises(EOFError):
            with Seek(stream, 6):
                stream.read_u32()
        self.assertEqual(stream.offset, 0)

    def test_exec_task(self):
        f = BytesIO(b"abcdef")
        seek = Seek(f, -2, SEEK_END)
        self.assertEqual(seek.exec_task(lambda s: s.read()), b"ef")
        seek.restore()
        self.assertEqual(f.tell(), 0)

    def test_seek_task(self):
        stream = BinaryStream(buf=b"\x00\x00\x00\x2a", endian=Endian.BIG)
        self.assertEqual(seek_task(stream, 0, lambda s: s.read_u32()), 42)
        self.assertEqual(stream.offset, 0)


class TestInterfaces(unittest.TestCase):
    def test_loader(self):
        stream = BinaryStream(buf=b"\x00\x01\x00\x02")
        loaded = stream.load(Loader.of(MyPair), endian=Endian.BIG)
        self.assertEqual((loaded.item.a, loaded.item.b), (1, 2))

    def test_loader_without_type(self):
        with self.assertRaises(TypeError):
            Loader.load_from(BinaryStream())

    def test_magic_big_endian(self):
        item = from_bytes(MyMagicStruct, b"BEMG\x00\x00\x01\x02")
        self.assertEqual(item.endian, Endian.BIG)
        self.assertEqual(item.value, 0x0102)

    def test_magic_little_endian(self):
        item = from_bytes(MyMagicStruct, b"GMEB\x02\x01\x00\x00")
        self.assertEqual(item.endian, Endian.LITTLE)
        self.assertEqual(item.value, 0x0102)

    def test_magic_unknown(self):
        item = MyMagicStruct()
        stream = BinaryStream(buf=b"????")
        self.assertEqual(item.set_endian(stream), NATIVE_ENDIAN)

    def test_magic_missing(self):
        stream = BinaryStream(buf=b"BEMG")
        with self.assertRaisesRegex(TypeError, "MyUnmarkedStruct has no BE_MAGIC"):
            MyUnmarkedStruct().set_endian(stream)
        self.assertEqual(stream.offset, 0)

    def test_magic_endian_is_not_serialized(self):
        item = from_bytes(MyMagicStruct, b"BEMG\x00\x00\x01\x02")
        self.assertEqual(to_bytes(item, Endian.LITTLE), b"\x02\x01\x00\x00")


class TestUtil(unittest.TestCase):
    def test_from_bytes(self):
        item = from_bytes(MyUnalignedStruct, b"\x00\x01\x00\x02\x00\x03", Endian.BIG)
        self.assertEqual(item, MyUnalignedStruct(1, 2, 3))

    def test_to_bytes(self):
        self.assertEqual(to_bytes(MyPair(1, 2), Endian.BIG), b"\x00\x01\x00\x02")

    def test_bytes_to_string(self):
        self.assertEqual(bytes_to_string(b"name\0\0junk"), "name")
        self.assertEqual(bytes_to_string([0x59, 0x61, 0x7a, 0x30]), "Yaz0")
        self.assertEqual(bytes_to_string(b"\0abc"), "")
        self.assertEqual(bytes_to_string(b"\xe9t\xe9", "latin-1"), "\xe9t\xe9")


def yaz0_header(size: int) -> bytes:
    return b"Yaz0" + size.to_bytes(4, "big") + b"\0" * 8


class TestYaz0Header(unittest.TestCase):
    def test_serialize(self):
        buf = BinaryStream(endian=Endian.BIG)
        yaz0.Yaz0Header(uncompressed_size=0x12345678).serialize_into(buf)
        self.assertEqual(buf.to_bytes(), yaz0_header(0x12345678))

    def test_type_size(self):
        self.assertEqual(yaz0.Yaz0Header.type_size(), yaz0.HEADER_SIZE)

    def test_deserialize_ignores_reserved(self):
        data = b"Yaz0\x00\x00\x01\x00" + b"\xff" * 8
        (header, offset) = yaz0.Yaz0Header.deserialize_from(data, endian=Endian.BIG)
        self.assertEqual(offset, 16)
        self.assertEqual(header.uncompressed_size, 0x100)


class TestYaz0Decompress(unittest.TestCase):
    def test_pass_through(self):
        for data in (b"", b"Ya", b"Yaz1 not compressed", bytes(range(64))):
            self.assertEqual(yaz0.decompress(data), data)

    def test_is_yaz0(self):
        self.assertTrue(yaz0.is_yaz0(yaz0_header(0)))
        self.assertFalse(yaz0.is_yaz0(b"yaz0"))

    def test_empty(self):
        self.assertEqual(yaz0.decompress(yaz0_header(0)), b"")

    def test_literals_and_overlapping_reference(self):
        # "ab", then 5 bytes copied from 2 back
        data = yaz0_header(7) + b"\xc0ab\x30\x01"
        self.assertEqual(yaz0.decompress(data), b"abababa")

    def test_long_reference(self):
        # "x", then 0x12 + 0x02 bytes copied from 1 back
        data = yaz0_header(21) + b"\x80x\x00\x00\x02"
        self.assertEqual(yaz0.decompress(data), b"x" * 21)

    def test_trailing_padding_ignored(self):
        data = yaz0_header(1) + b"\x80z\0\0"
        self.assertEqual(yaz0.decompress(data), b"z")

    def test_truncated_stream(self):
        data = b"hello world hello world"
        compressed = yaz0.compress(data)[:20]
        with self.assertRaises(yaz0.TruncatedStreamError):
            yaz0.decompress(compressed, strict=True)
        with self.assertWarns(UserWarning):
            result = yaz0.decompress(compressed)
        self.assertEqual(result, b"hel" + b"\0" * (len(data) - 3))

    def test_truncated_header(self):
        with self.assertRaises(yaz0.TruncatedStreamError):
            yaz0.decompress(b"Yaz0\x00\x00", strict=True)
        with self.assertWarns(UserWarning):
            self.assertEqual(yaz0.decompress(b"Yaz0\x00\x00"), b"")

    def test_reference_before_start(self):
        data = yaz0_header(4) + b"\x00\x10\x00"
        with self.assertRaises(yaz0.CorruptStreamError):
            yaz0.decompress(data, strict=True)
        with self.assertWarns(UserWarning):
            self.assertEqual(yaz0.decompress(data), b"\0\0\0\0")

    def test_reference_past_end(self):
        data = yaz0_header(2) + b"\x80a\x10\x00"
        with self.assertRaises(yaz0.CorruptStreamError):
            yaz0.decompress(data, strict=True)
        with self.assertWarns(UserWarning):
            self.assertEqual(yaz0.decompress(data), b"aa")

    def test_decoder_keeps_header(self):
        dec = yaz0.Decoder(yaz0.compress(b"abc"))
        dec.decompress()
        self.assertEqual(dec.header.uncompressed_size, 3)
        self.assertEqual(bytes(dec.header.magic), b"Yaz0")


class TestYaz0Compress(unittest.TestCase):
    def assertRoundTrip(self, data: bytes):
        compressed = yaz0.compress(data)
        self.assertEqual(len(compressed) % 4, 0)
        self.assertEqual(compressed[4:8], len(data).to_bytes(4, "big"))
        self.assertEqual(yaz0.decompress(compressed, strict=True), data)

    def test_empty(self):
        self.assertEqual(yaz0.compress(b""), yaz0_header(0))

    def test_single_byte(self):
        self.assertEqual(yaz0.compress(b"q"), yaz0_header(1) + b"\x80q\0\0")

    def test_all_literals(self):
        for n in (1, 7, 8, 13, 200, 255):
            data = bytes(range(n))
            compressed = yaz0.compress(data)
            expected_size = 16 + (n + 7) // 8 + n
            expected_size += -expected_size % 4
            self.assertEqual(len(compressed), expected_size)
            self.assertEqual(yaz0.decompress(compressed), data)

    def test_all_literals_control_bytes(self):
        compressed = yaz0.compress(bytes(range(13)))
        self.assertEqual(compressed[16], 0xff)
        self.assertEqual(compressed[16 + 9], 0xf8)

    def test_max_run(self):
        data = b"\0" * 300
        compressed = yaz0.compress(data)
        # Literal, then 273 and 26 bytes from 1 back
        self.assertEqual(compressed, yaz0_header(300) + b"\x80\x00" + b"\x00\x00\xff" + b"\x00\x00\x08")
        self.assertEqual(yaz0.decompress(compressed), data)

    def test_length_17_uses_short_form(self):
        compressed = yaz0.compress(b"\x01" * 18)
        self.assertEqual(compressed, yaz0_header(18) + b"\x80\x01\xf0\x00")

    def test_length_18_uses_long_form(self):
        compressed = yaz0.compress(b"\x01" * 19)
        self.assertEqual(compressed, yaz0_header(19) + b"\x80\x01\x00\x00\x00\0\0\0")

    def test_nearest_match_wins_ties(self):
        data = b"abcXabcYabc"
        self.assertEqual(yaz0.Encoder(data).find_match(8), (4, 3))
        compressed = yaz0.compress(data)
        self.assertEqual(compressed, yaz0_header(11) + b"\xf4abcX\x10\x03Y\x10\x03\0\0")

    def test_longer_match_wins(self):
        data = b"abcdZabcYabcd"
        self.assertEqual(yaz0.Encoder(data).find_match(9), (9, 4))

    def test_no_match(self):
        enc = yaz0.Encoder(b"abcdefab")
        self.assertEqual(enc.find_match(4), (0, 0))
        # Too close to the end for a 3 byte match
        self.assertEqual(enc.find_match(6), (0, 0))

    def test_search_window(self):
        inside = b"XYZ" + b"\0" * 1021 + b"XYZ"
        outside = b"XYZ" + b"\0" * 1022 + b"XYZ"
        self.assertEqual(yaz0.Encoder(inside).find_match(1024), (1024, 3))
        self.assertEqual(yaz0.Encoder(outside).find_match(1025), (0, 0))

    def test_match_capped_by_remaining_input(self):
        data = b"abcabcab"
        self.assertEqual(yaz0.Encoder(data).find_match(3), (3, 5))

    def test_round_trip(self):
        rng = random.Random(1234)
        samples = [
            b"",
            b"a",
            b"ab",
            b"abc",
            b"\0" * 5000,
            b"hello world " * 300,
            bytes(range(256)) * 20,
            rng.randbytes(4096),
            bytes(rng.choice(b"ab") for _ in range(3000)),
            rng.randbytes(700) + b"\xff" * 1500 + rng.randbytes(700),
        ]
        for data in samples:
            with self.subTest(size=len(data)):
                self.assertRoundTrip(data)

    def test_compresses_redundant_data(self):
        data = b"The quick brown fox jumps over the lazy dog. " * 100
        self.assertLess(len(yaz0.compress(data)), len(data) // 4)

    def test_accepts_bytearray_and_memoryview(self):
        data = b"spam and eggs and spam and eggs"
        self.assertEqual(yaz0.compress(bytearray(data)), yaz0.compress(data))
        self.assertEqual(yaz0.compress(memoryview(data)), yaz0.compress(data))


if __name__ == '__main__':
    unittest.main()
