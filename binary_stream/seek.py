from io import SEEK_SET


class Seek:
    """Temporarily moves a stream to another position.
    The original position is restored when leaving the with block."""

    def __init__(self, stream, offset: int, whence=SEEK_SET):
        self.stream = stream
        self.original_position = stream.tell()
        stream.seek(offset, whence)

    def __enter__(self):
        return self.stream

    def __exit__(self, exc_type, exc_value, traceback):
        self.restore()
        return False

    def restore(self):
        self.stream.seek(self.original_position, SEEK_SET)

    def exec_task(self, func):
        return func(self.stream)


def seek_task(stream, offset: int, func, whence=SEEK_SET):
    """Calls func(stream) at the given offset and returns its result"""
    with Seek(stream, offset, whence) as moved:
        return func(moved)
