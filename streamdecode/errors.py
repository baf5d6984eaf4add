import enum
from typing import Optional, Tuple


class DecodeErrorKind(enum.Enum):
    INVALID_LEAD_BYTE = "InvalidLeadByte"
    UNEXPECTED_EOF = "UnexpectedEof"
    INVALID_CONTINUATION_BYTE = "InvalidContinuationByte"
    INVALID_SCALAR_VALUE = "InvalidScalarValue"
    OVERLONG_ENCODING = "OverlongEncoding"
    SOURCE_READ_FAILURE = "SourceReadFailure"


class ReentrantUseError(RuntimeError):
    """Raised when a decoder is entered again while a decode call is still running."""


class DecoderError(Exception):
    """
    Base class for every failure reported by the UTF-8 decoder.

    Instances are returned inside a DecodeResult rather than raised, so the
    caller decides whether to raise, log or skip them.

    Attributes:
    - offset (int): byte offset in the source at which the failed sequence started.
    - consumed (Tuple[int, ...]): raw bytes read while attempting the sequence,
      including the byte that caused the failure.
    """

    kind: Optional[DecodeErrorKind] = None
    description = "decoding failed"

    def __init__(self, offset: int, consumed: Tuple[int, ...] = ()):
        self.offset = offset
        self.consumed = tuple(consumed)
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        raw = " ".join(f"{b:02X}" for b in self.consumed)
        if raw:
            return f"{self.description} at byte {self.offset} (bytes: {raw})"
        return f"{self.description} at byte {self.offset}"

    def _init_args(self) -> tuple:
        return (self.offset, self.consumed)

    def __reduce__(self):
        # args holds the formatted message, rebuild from the constructor arguments instead
        return (type(self), self._init_args())

    def __repr__(self):
        return f"{type(self).__name__}(offset={self.offset}, consumed={self.consumed!r})"

    def __eq__(self, other):
        if not isinstance(other, DecoderError):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.offset == other.offset
            and self.consumed == other.consumed
        )

    def __hash__(self):
        return hash((self.kind, self.offset, self.consumed))


class InvalidLeadByte(DecoderError):
    kind = DecodeErrorKind.INVALID_LEAD_BYTE
    description = "invalid lead byte"


class UnexpectedEof(DecoderError):
    kind = DecodeErrorKind.UNEXPECTED_EOF
    description = "stream ended in the middle of a sequence"


class InvalidContinuationByte(DecoderError):
    kind = DecodeErrorKind.INVALID_CONTINUATION_BYTE
    description = "invalid continuation byte"


class InvalidScalarValue(DecoderError):
    kind = DecodeErrorKind.INVALID_SCALAR_VALUE
    description = "not a unicode scalar value"

    def __init__(self, offset: int, consumed: Tuple[int, ...] = (), value: int = -1):
        self.value = value
        super().__init__(offset, consumed)

    def _format_message(self) -> str:
        return f"{super()._format_message()}: U+{self.value:04X}"

    def _init_args(self) -> tuple:
        return (self.offset, self.consumed, self.value)


class OverlongEncoding(DecoderError):
    kind = DecodeErrorKind.OVERLONG_ENCODING
    description = "overlong encoding"

    def __init__(self, offset: int, consumed: Tuple[int, ...] = (), value: int = -1):
        self.value = value
        super().__init__(offset, consumed)

    def _format_message(self) -> str:
        return f"{super()._format_message()}: U+{self.value:04X}"

    def _init_args(self) -> tuple:
        return (self.offset, self.consumed, self.value)


class SourceReadFailure(DecoderError):
    """Wraps an exception raised by the byte source itself, e.g. an I/O fault."""

    kind = DecodeErrorKind.SOURCE_READ_FAILURE
    description = "byte source failed"

    def __init__(
        self,
        offset: int,
        consumed: Tuple[int, ...] = (),
        cause: Optional[BaseException] = None,
    ):
        self.cause = cause
        super().__init__(offset, consumed)
        self.__cause__ = cause

    def _format_message(self) -> str:
        return f"{super()._format_message()}: {self.cause!r}"

    def _init_args(self) -> tuple:
        return (self.offset, self.consumed, self.cause)
