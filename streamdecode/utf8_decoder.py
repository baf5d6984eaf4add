"""
Pull-based UTF-8 decoder for the front of a lexer.

The decoder reads exactly as many bytes as the current sequence needs from a
borrowed byte source and hands back one character per call:

    with open("document.json", "rb") as f:
        decoder = Utf8Decoder(f)
        for char in decoder:
            ...

Validation is deliberately light. Structurally malformed sequences, surrogates
and values above U+10FFFF are rejected; overlong encodings are accepted unless
the decoder is built with `reject_overlong=True`.

A decoder must only be used by one caller at a time.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional

from streamdecode.errors import (
    DecodeErrorKind,
    DecoderError,
    InvalidContinuationByte,
    InvalidLeadByte,
    InvalidScalarValue,
    OverlongEncoding,
    ReentrantUseError,
    SourceReadFailure,
    UnexpectedEof,
)
from streamdecode.sources import BufferSource, ByteSource, as_byte_source
from streamdecode.utf8_utils import (
    CONTINUATION_MASK,
    is_continuation,
    is_overlong,
    is_scalar_value,
    lead_payload,
    sequence_length,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodeResult:
    """
    Outcome of a single `decode_next` call.

    Attributes:
    - char (Optional[str]): the decoded character, set only on success.
    - error (Optional[DecoderError]): the reason no character could be produced.

    When both are None the source was exhausted at a sequence boundary, i.e. a
    clean end of stream. Use the shared END_OF_STREAM instance to compare against.
    """

    char: Optional[str] = None
    error: Optional[DecoderError] = None

    @property
    def ok(self) -> bool:
        return self.char is not None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def is_eof(self) -> bool:
        return self.char is None and self.error is None

    @property
    def codepoint(self) -> Optional[int]:
        if self.char is None:
            return None
        return ord(self.char)


END_OF_STREAM = DecodeResult()

# single byte results never change, build them once
_ASCII_RESULTS = tuple(DecodeResult(chr(byte)) for byte in range(0x80))


class Utf8Decoder:
    def __init__(self, source, reject_overlong: bool = False):
        self.source: ByteSource = as_byte_source(source)
        self.reject_overlong = reject_overlong
        # total bytes pulled from the source, only used for error offsets
        self.bytes_consumed = 0
        # error that ended the most recent `chars()` iteration, if any
        self.last_error: Optional[DecoderError] = None
        self._decoding = False

    def decode_next(self) -> DecodeResult:
        """
        Decode the next character from the source.

        Returns a DecodeResult holding either the character, the error that
        prevented decoding one, or nothing at all for a clean end of stream.
        Bytes read during a failed attempt stay consumed, the following call
        starts with the next unread byte.
        """
        if self._decoding:
            raise ReentrantUseError("Utf8Decoder does not support concurrent or re-entrant use")
        self._decoding = True
        try:
            return self._decode_sequence()
        finally:
            self._decoding = False

    def _decode_sequence(self) -> DecodeResult:
        offset = self.bytes_consumed
        try:
            lead_byte = self.source.read_byte()
        except ReentrantUseError:
            raise
        except Exception as e:
            return self._fail(SourceReadFailure(offset, (), cause=e))
        if lead_byte is None:
            return END_OF_STREAM
        self.bytes_consumed += 1

        if lead_byte < 0x80:
            return _ASCII_RESULTS[lead_byte]

        length = sequence_length(lead_byte)
        if length == 0:
            return self._fail(InvalidLeadByte(offset, (lead_byte,)))

        value = lead_payload(lead_byte, length)
        consumed = [lead_byte]
        for _ in range(length - 1):
            try:
                byte = self.source.read_byte()
            except ReentrantUseError:
                raise
            except Exception as e:
                return self._fail(SourceReadFailure(offset, consumed, cause=e))
            if byte is None:
                return self._fail(UnexpectedEof(offset, consumed))
            self.bytes_consumed += 1
            consumed.append(byte)
            if not is_continuation(byte):
                return self._fail(InvalidContinuationByte(offset, consumed))
            value = (value << 6) | (byte & CONTINUATION_MASK)

        if not is_scalar_value(value):
            return self._fail(InvalidScalarValue(offset, consumed, value=value))
        if self.reject_overlong and is_overlong(value, length):
            return self._fail(OverlongEncoding(offset, consumed, value=value))
        return DecodeResult(chr(value))

    def _fail(self, error: DecoderError) -> DecodeResult:
        logger.debug("UTF-8 decoding failed: %s", error)
        return DecodeResult(error=error)

    def read_char(self) -> Optional[str]:
        """Return the next character, None at a clean end of stream, raise the DecoderError otherwise."""
        result = self.decode_next()
        if result.error is not None:
            raise result.error
        return result.char

    def __iter__(self) -> Iterator[str]:
        return self.chars()

    def chars(self) -> Iterator[str]:
        """
        Lazily yield decoded characters.

        The iteration ends at the end of the stream AND at the first error of any
        kind. The error is not raised here; it is only kept on `last_error` and
        logged at DEBUG level. Callers that need to tell a clean end from a
        failure should check `last_error` afterwards, use `outcomes()`, or call
        `decode_next()` directly.

        Iterating again continues from the current position of the source, so an
        exhausted decoder yields nothing.
        """
        self.last_error = None
        while True:
            result = self.decode_next()
            if result.char is not None:
                yield result.char
                continue
            if result.error is not None:
                self.last_error = result.error
                logger.debug("stopping character iteration on error: %s", result.error)
            return

    def outcomes(self) -> Iterator[DecodeResult]:
        """
        Lazily yield every DecodeResult up to the end of the stream.

        Malformed sequences are yielded as errors and decoding resumes with the
        next unread byte. A SourceReadFailure is yielded and then ends the
        iteration, since the source is unlikely to recover.
        """
        while True:
            result = self.decode_next()
            if result.is_eof:
                return
            yield result
            if (
                result.error is not None
                and result.error.kind is DecodeErrorKind.SOURCE_READ_FAILURE
            ):
                return


def decode_utf8_string(utf8_bytes: bytes, reject_overlong: bool = False) -> List[int]:
    """Decode a complete buffer into code points, raising the first DecoderError encountered."""
    decoder = Utf8Decoder(BufferSource(utf8_bytes), reject_overlong=reject_overlong)
    code_points = []
    while True:
        char = decoder.read_char()
        if char is None:
            return code_points
        code_points.append(ord(char))
