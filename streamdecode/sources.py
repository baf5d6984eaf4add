from abc import ABC, abstractmethod
from typing import Iterable, Optional, Union

_EXHAUSTED = object()


class ByteSource(ABC):
    """
    The only capability the decoder needs from its input.

    `read_byte` returns the next byte as an int in [0, 255], or None once the
    source is cleanly exhausted. A failure of the underlying medium is signalled
    by raising (typically OSError), which the decoder reports as SourceReadFailure.
    """

    @abstractmethod
    def read_byte(self) -> Optional[int]:
        raise NotImplementedError()


class BufferSource(ByteSource):
    def __init__(self, data: Union[bytes, bytearray, memoryview]):
        self.data = memoryview(data).cast("B")
        self.pos = 0

    def read_byte(self) -> Optional[int]:
        if self.pos >= len(self.data):
            return None
        byte = self.data[self.pos]
        self.pos += 1
        return byte

    def remaining(self) -> int:
        return len(self.data) - self.pos


class StreamSource(ByteSource):
    """
    Reads one byte at a time from a binary file-like object.

    The stream is borrowed, never closed. Wrap raw files in io.BufferedReader
    (open(path, "rb") already does) so single-byte reads stay cheap.
    """

    def __init__(self, stream):
        self.stream = stream

    def read_byte(self) -> Optional[int]:
        chunk = self.stream.read(1)
        if chunk is None:
            # non-blocking stream with no data ready, not the end of the stream
            raise BlockingIOError("stream has no data available")
        if not isinstance(chunk, (bytes, bytearray)):
            raise TypeError(
                f"StreamSource requires a binary stream, got {type(chunk).__name__}"
            )
        if not chunk:
            return None
        return chunk[0]


class IterableSource(ByteSource):
    def __init__(self, iterable: Iterable[int]):
        self.iterator = iter(iterable)

    def read_byte(self) -> Optional[int]:
        byte = next(self.iterator, _EXHAUSTED)
        if byte is _EXHAUSTED:
            return None
        if not isinstance(byte, int):
            raise TypeError(f"item: {byte!r} is not an int")
        if not 0 <= byte <= 255:
            raise ValueError(f"item: {byte} is not in the range [0, 255]")
        return byte


def as_byte_source(obj) -> ByteSource:
    if isinstance(obj, ByteSource):
        return obj
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return BufferSource(obj)
    if hasattr(obj, "read"):
        return StreamSource(obj)
    if isinstance(obj, str):
        raise TypeError("cannot decode a str, pass its encoded bytes instead")
    try:
        return IterableSource(obj)
    except TypeError:
        raise TypeError(f"cannot use {type(obj).__name__} as a byte source") from None
