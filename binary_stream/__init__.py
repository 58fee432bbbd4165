from .endian import Endian, NATIVE_ENDIAN
from .interfaces import Readable, Writable, Loadable, Loader, Magic
from .seek import Seek, seek_task
from .serialization import BinaryStream, Serializable, SerializationError, Numeric, FixedArray
from .util import from_bytes, to_bytes
from . import yaz0
