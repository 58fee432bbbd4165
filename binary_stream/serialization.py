import sys
from types import ModuleType
from io import SEEK_SET, SEEK_CUR, SEEK_END
from dataclasses import dataclass, field
from typing import NewType, ClassVar, get_type_hints, get_args, get_origin, Annotated
from struct import calcsize, pack_into, unpack_from, error as StructError
from warnings import warn
from operator import itemgetter
from .endian import Endian, NATIVE_ENDIAN
from .interfaces import Readable, Writable, Loadable
from .seek import seek_task


class SerializationError(Exception):
    pass


def typehint_of_name(name: str, ns=sys.modules[__name__]):
    if not isinstance(ns, (type, ModuleType)):
        ns = type(ns)
    return get_type_hints(ns).get(name)


def serializable_members(cls) -> dict:
    """Annotated members of cls in declaration order, base classes first. ClassVars are left out."""
    return {name: tp for (name, tp) in get_type_hints(cls).items() if get_origin(tp) is not ClassVar}


def FixedArray(tp, length):
    return NewType("FixedArray", Annotated[tp, length])


def is_fixed_array(tp) -> bool:
    return getattr(tp, "__name__", None) == "FixedArray" and hasattr(tp, "__supertype__")


class Numeric:
    """Contains numeric types"""

    type_info = {
        # newtype name: python type, structlib format without byte order
        "U8": (int, "B"),
        "U16": (int, "H"),
        "U32": (int, "L"),
        "U64": (int, "Q"),
        "I8": (int, "b"),
        "I16": (int, "h"),
        "I32": (int, "l"),
        "I64": (int, "q"),
        "F32": (float, "f"),
        "F64": (float, "d"),
    }

    type_sizes = {
        "B": 1,
        "H": 2,
        "L": 4,
        "Q": 8,
        "b": 1,
        "h": 2,
        "l": 4,
        "q": 8,
        "f": 4,
        "d": 8,
    }

    @staticmethod
    def format_of_type(tp) -> str:
        """Returns the structlib format of the given type"""
        entry = Numeric.type_info.get(getattr(tp, "__name__", None))
        if not entry:
            return None
        return entry[1]

    @staticmethod
    def size_of_format(fmt: str) -> int:
        size_sum = 0
        for ch in fmt:
            size_sum += Numeric.type_sizes.get(ch, 0)
        return size_sum


# Create NewTypes and store them in Numeric class
def generate_numeric_types():
    for name in Numeric.type_info:
        (tp, fmt) = Numeric.type_info[name]
        setattr(Numeric, name, NewType(name, tp))
generate_numeric_types()


class BinaryStream:
    """In-memory byte buffer with a cursor that grows when written past its end.
    Numbers use the stream's byte order and strings its encoding unless told otherwise."""

    def __init__(self, *args, size=0, buf=None, endian: Endian=None, encoding: str="utf-8"):
        if buf is None:
            self.buffer = bytearray(size)
        elif isinstance(buf, bytearray):
            self.buffer = buf
        else:
            self.buffer = bytearray(buf)
        self.offset = 0
        self.endian = NATIVE_ENDIAN if endian is None else endian
        self.encoding = encoding

    @classmethod
    def from_io(cls, source, endian: Endian=None, encoding: str="utf-8") -> "BinaryStream":
        """Copies the entire contents of a seekable file object without moving its position"""
        data = seek_task(source, 0, lambda s: s.read())
        return cls(buf=bytearray(data), endian=endian, encoding=encoding)

    @property
    def capacity(self) -> int:
        return len(self.buffer)

    def __len__(self) -> int:
        return len(self.buffer)

    def grow_by(self, by: int):
        self.buffer += bytearray(by)

    def grow_to(self, to: int):
        if self.capacity > to:
            raise ValueError("Failed to grow BinaryStream because it is already bigger than requested size ({}/{})".format(self.capacity, to))
        self.grow_by(to - self.capacity)

    def _reserve(self, size: int):
        remaining = self.capacity - self.offset
        if size > remaining:
            self.grow_by(size - remaining)

    def tell(self) -> int:
        return self.offset

    def seek(self, offset: int, whence=SEEK_SET) -> int:
        if whence == SEEK_SET:
            target = offset
        elif whence == SEEK_CUR:
            target = self.offset + offset
        elif whence == SEEK_END:
            target = self.capacity + offset
        else:
            raise ValueError("Invalid whence ({})".format(whence))
        if target < 0:
            raise ValueError("Cannot seek to negative offset ({})".format(target))
        self.offset = target
        return self.offset

    def seek_to_end(self):
        self.offset = self.capacity

    def skip(self, count: int) -> int:
        return self.seek(count, SEEK_CUR)

    def align_to(self, alignment: int) -> int:
        """Moves the cursor forward to the next multiple of alignment, if not already on one"""
        if alignment < 1:
            raise ValueError("Alignment must be at least 1 ({})".format(alignment))
        return self.seek((self.offset + alignment - 1) // alignment * alignment)

    def write(self, data) -> int:
        """Returns absolute offset of where data was written"""
        offset_before = self.offset
        self._reserve(len(data))
        self.buffer[self.offset:self.offset + len(data)] = data
        self.offset += len(data)
        return offset_before

    def append(self, other) -> int:
        self.seek_to_end()
        return self.write(other)

    def read(self, count: int=-1) -> bytes:
        """Reads up to count bytes, or everything left if count is negative"""
        end = self.capacity if count < 0 else min(self.offset + count, self.capacity)
        data = bytes(self.buffer[self.offset:end])
        self.offset = max(self.offset, end)
        return data

    def read_bytes(self, count: int) -> bytes:
        """Reads exactly count bytes"""
        if count < 0:
            raise ValueError("Byte count cannot be negative ({})".format(count))
        available = max(self.capacity - self.offset, 0)
        if count > available:
            raise EOFError("Attempted to read {} bytes with only {} available".format(count, available))
        return self.read(count)

    def _format(self, fmt: str) -> str:
        if fmt and fmt[0] in "<>!=@":
            return fmt
        return self.endian.prefix + fmt

    def pack(self, fmt: str, *vals) -> int:
        """Returns absolute offset of where data was written"""
        fmt = self._format(fmt)
        offset_before = self.offset
        item_size = calcsize(fmt)
        self._reserve(item_size)
        pack_into(fmt, self.buffer, self.offset, *vals)
        self.offset += item_size
        return offset_before

    def unpack(self, fmt: str) -> tuple:
        fmt = self._format(fmt)
        item_size = calcsize(fmt)
        available = max(self.capacity - self.offset, 0)
        if item_size > available:
            raise EOFError("Attempted to unpack {} bytes with only {} available".format(item_size, available))
        values = unpack_from(fmt, self.buffer, self.offset)
        self.offset += item_size
        return values

    def read_i8(self) -> int:
        return self.unpack("b")[0]

    def read_u8(self) -> int:
        return self.unpack("B")[0]

    def read_i16(self) -> int:
        return self.unpack("h")[0]

    def read_u16(self) -> int:
        return self.unpack("H")[0]

    def read_i32(self) -> int:
        return self.unpack("l")[0]

    def read_u32(self) -> int:
        return self.unpack("L")[0]

    def read_i64(self) -> int:
        return self.unpack("q")[0]

    def read_u64(self) -> int:
        return self.unpack("Q")[0]

    def read_f32(self) -> float:
        return self.unpack("f")[0]

    def read_f64(self) -> float:
        return self.unpack("d")[0]

    def write_i8(self, value: int) -> int:
        return self.pack("b", value)

    def write_u8(self, value: int) -> int:
        return self.pack("B", value)

    def write_i16(self, value: int) -> int:
        return self.pack("h", value)

    def write_u16(self, value: int) -> int:
        return self.pack("H", value)

    def write_i32(self, value: int) -> int:
        return self.pack("l", value)

    def write_u32(self, value: int) -> int:
        return self.pack("L", value)

    def write_i64(self, value: int) -> int:
        return self.pack("q", value)

    def write_u64(self, value: int) -> int:
        return self.pack("Q", value)

    def write_f32(self, value: float) -> int:
        return self.pack("f", value)

    def write_f64(self, value: float) -> int:
        return self.pack("d", value)

    def read_string(self, length: int, encoding: str=None) -> str:
        return self.read_bytes(length).decode(encoding or self.encoding)

    def read_nt_string(self, encoding: str=None) -> str:
        end = self.buffer.find(b"\0", self.offset)
        if end < 0:
            raise EOFError("Unterminated string at offset {}".format(self.offset))
        data = self.read_bytes(end - self.offset)
        self.offset += 1
        return data.decode(encoding or self.encoding)

    def read_nt_string_at(self, offset: int, whence=SEEK_SET, encoding: str=None) -> str:
        return seek_task(self, offset, lambda s: s.read_nt_string(encoding), whence)

    def write_string(self, value: str, encoding: str=None) -> int:
        return self.write(value.encode(encoding or self.encoding))

    def write_nt_string(self, value: str, encoding: str=None) -> int:
        offset = self.write_string(value, encoding)
        self.write(b"\0")
        return offset

    def write_nt_strings(self, *values: str, encoding: str=None) -> int:
        return self.write_nt_string("\0".join(values), encoding)

    def read_item(self, item_type):
        """Default constructs item_type and lets it read itself"""
        item = item_type()
        item.read(self)
        return item

    def write_item(self, item) -> int:
        offset_before = self.offset
        item.write(self)
        return offset_before

    def load(self, item_type, endian: Endian=None, encoding: str=None):
        return item_type.load_from(self, endian, encoding)

    def to_bytes(self) -> bytes:
        return bytes(self.buffer)


def is_serializable_type(tp) -> bool:
    return isinstance(tp, type) and get_origin(tp) is None and issubclass(tp, Serializable)


class Serializable(Readable, Writable, Loadable):
    """Base for dataclasses whose annotated members describe their binary layout.
    Members whose name starts with an underscore are skipped."""

    @classmethod
    def format_of_member(cls, member: str) -> str:
        return Numeric.format_of_type(typehint_of_name(member, cls))

    @staticmethod
    def _size_visitor(**kwargs) -> bool:
        (fmt, ctx) = itemgetter("fmt", "ctx")(kwargs)
        if fmt:
            ctx["size_sum"] += Numeric.size_of_format(fmt)
        return True

    def instance_size(self) -> int:
        """Will also include size of data inside any list type members."""
        ctx = {"size_sum": 0}
        self._visit(self, ctx, Serializable._size_visitor)
        return ctx["size_sum"]

    @classmethod
    def type_size(cls) -> int:
        """Similar to sizeof(). Size of lists and buffers is considered to be 0."""
        ctx = {"size_sum": 0}
        cls._visit(cls, ctx, Serializable._size_visitor)
        return ctx["size_sum"]

    @classmethod
    def _warn_unserializable(cls, name):
        warn("Serializable class \"{}\" has unserializable member \"{}\"".format(cls.__name__, name), stacklevel=2)

    @classmethod
    def _visit(cls, value, ctx: dict, visitor, *args, name=None, tp=None) -> bool:
        if name is not None and name.startswith("_"):
            return True
        is_instance = isinstance(value, Serializable)
        is_class = is_serializable_type(value)
        if is_instance or is_class:
            members = serializable_members(value) if is_class else value.__dict__
            for member_name in members:
                member_value = members[member_name]
                if is_instance:
                    member_type = typehint_of_name(member_name, value)
                else:
                    member_type = member_value
                if not value._visit(member_value, ctx, visitor, name=member_name, tp=member_type):
                    return False
            return True
        is_list = type(value) is list
        is_tuple = type(value) is tuple
        is_fixed = is_fixed_array(tp)
        if is_list or is_tuple or is_fixed:
            if is_fixed:
                (elem_type, expected_length) = get_args(tp.__supertype__)
                elem_types = (elem_type, )
                length = expected_length
                if is_list or is_tuple:
                    if len(value) > expected_length:
                        warn("FixedArray member '{}' of class '{}' was truncated during serialization".format(name, cls.__name__))
                        value = value[:expected_length]
                    elif len(value) < expected_length:
                        # Pad with zeros
                        value = list(value) + [0] * (expected_length - len(value))
            else:
                container_type = tp if tp is not None else typehint_of_name(name, cls)
                elem_types = get_args(container_type) if container_type is not None else ()
                length = len(value)
            if len(elem_types) < 1:
                cls._warn_unserializable(name)
                return True
            for i in range(length):
                # Lists have one element type, tuples have n
                elem_type = elem_types[i] if is_tuple and not is_fixed else elem_types[0]
                # Visiting a type rather than an instance only yields element types
                elem_value = value[i] if is_list or is_tuple else elem_type
                if not cls._visit(elem_value, ctx, visitor, name=name, tp=elem_type):
                    return False
            return True
        fmt = None
        if type(value) is bytes or type(value) is bytearray:
            tp = type(value)
        elif value is bytes or value is bytearray or get_origin(value) in (list, tuple):
            # Variable sized, contributes nothing to the type's size
            pass
        else:
            # Value is primitive
            # Determine format from type or name
            if tp is not None:
                fmt = Numeric.format_of_type(tp)
            elif name is not None:
                fmt = cls.format_of_member(name)
            if fmt is None:
                cls._warn_unserializable(name)
                return True
        return visitor(value=value, name=name, tp=tp, fmt=fmt, ctx=ctx)

    @staticmethod
    def _serializer_visitor(**kwargs) -> bool:
        (name, value, ctx, fmt, tp) = itemgetter("name", "value", "ctx", "fmt", "tp")(kwargs)
        offset = None
        if fmt:
            try:
                offset = ctx["buf"].pack(fmt, value)
            except StructError as err:
                # Rethrow with more info
                orig_msg = err.args[0]
                raise SerializationError("Serialization error in member '{}' with value '{}' and type '{}': {}".format(name, value, tp, orig_msg)) from err
        elif tp is bytes or tp is bytearray:
            offset = ctx["buf"].write(value)
        if offset is not None and ctx["first_offset"] is None:
            ctx["first_offset"] = offset
        return True

    def serialize_into(self, buf: BinaryStream, alignment=None) -> int:
        """Writes serializable members of this object into given buffer.
        Returns absolute offset of where data was written."""
        item = self
        if alignment is not None:
            offset_after = buf.offset + self.instance_size()
            if offset_after % alignment != 0:
                padding = ((offset_after // alignment) + 1) * alignment - offset_after
                item = AlignmentHelper(wrapped=self, padding=[0] * padding)
        ctx = {"first_offset": None, "buf": buf}
        self._visit(item, ctx, Serializable._serializer_visitor)
        if ctx["first_offset"] is None:
            raise SerializationError("Serialization error: Did not write anything")
        return ctx["first_offset"]

    def write(self, stream: BinaryStream):
        self.serialize_into(stream)

    @classmethod
    def _read_value(cls, stream: BinaryStream, tp):
        if is_serializable_type(tp):
            return stream.read_item(tp)
        if is_fixed_array(tp):
            (elem_type, length) = get_args(tp.__supertype__)
            return [cls._read_value(stream, elem_type) for _ in range(length)]
        fmt = Numeric.format_of_type(tp)
        if fmt is None:
            # Length is not known from the type alone
            return None
        (value, ) = stream.unpack(fmt)
        return value

    def read(self, stream: BinaryStream):
        """Variable sized members keep whatever value they had"""
        for (name, tp) in serializable_members(type(self)).items():
            if name.startswith("_"):
                continue
            value = self._read_value(stream, tp)
            if value is not None:
                setattr(self, name, value)

    @classmethod
    def load_from(cls, stream: BinaryStream, endian: Endian=None, encoding: str=None):
        if endian is not None:
            stream.endian = endian
        if encoding is not None:
            stream.encoding = encoding
        return stream.read_item(cls)

    @classmethod
    def deserialize_from(cls, buf, offset=0, endian: Endian=Endian.LITTLE):
        """Assumes class has default constructor"""
        stream = BinaryStream(buf=buf, endian=endian)
        stream.seek(offset)
        result = stream.read_item(cls)
        return (result, stream.offset)

    @classmethod
    def read_sequence(cls, buf, offset, count, endian: Endian=Endian.LITTLE) -> list:
        items = []
        if count < 1:
            return items
        stream = BinaryStream(buf=buf, endian=endian)
        stream.seek(offset)
        for _ in range(count):
            items.append(stream.read_item(cls))
        return items


@dataclass
class AlignmentHelper(Serializable):
    wrapped: Serializable = None
    padding: list[Numeric.U8] = field(default_factory=list)
