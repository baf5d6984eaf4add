import pytest

from streamdecode.errors import (
    DecodeErrorKind,
    InvalidContinuationByte,
    InvalidLeadByte,
    ReentrantUseError,
    UnexpectedEof,
)
from streamdecode.sources import ByteSource
from streamdecode.utf8_decoder import END_OF_STREAM, Utf8Decoder, decode_utf8_string
from tests._sources_common import CountingSource, FailingSource

BOUNDARY_CODEPOINTS = [
    0x0,
    0x7F,
    0x80,
    0x7FF,
    0x800,
    0xD7FF,
    0xE000,
    0xFFFD,
    0xFFFF,
    0x10000,
    0x1F600,
    0x10FFFF,
]


def scalar_values(step=101):
    for cp in range(0, 0x110000, step):
        if not 0xD800 <= cp <= 0xDFFF:
            yield cp
    yield from BOUNDARY_CODEPOINTS


def test_round_trip_scalar_values():
    for cp in scalar_values():
        encoded = chr(cp).encode("utf-8")
        source = CountingSource(encoded)
        decoder = Utf8Decoder(source)
        result = decoder.decode_next()
        assert result.ok, f"U+{cp:04X}: {result.error}"
        assert result.codepoint == cp
        assert decoder.bytes_consumed == len(encoded)
        assert source.pos == len(encoded)


def test_ascii_fast_path():
    source = CountingSource(b"\x41")
    decoder = Utf8Decoder(source)
    result = decoder.decode_next()
    assert result.char == "A"
    assert source.reads == 1
    assert decoder.bytes_consumed == 1


def test_two_byte_sequence():
    decoder = Utf8Decoder(b"\xc3\xa9")
    result = decoder.decode_next()
    assert result.char == "é"
    assert decoder.bytes_consumed == 2


def test_three_byte_sequence():
    decoder = Utf8Decoder("\u0939".encode("utf-8"))
    assert decoder.decode_next().char == "\u0939"
    assert decoder.bytes_consumed == 3


def test_four_byte_sequence():
    decoder = Utf8Decoder(b"\xf0\x9f\x98\x80")
    result = decoder.decode_next()
    assert result.codepoint == 0x1F600
    assert decoder.bytes_consumed == 4


def test_truncated_sequence():
    decoder = Utf8Decoder(b"\xc3")
    result = decoder.decode_next()
    assert isinstance(result.error, UnexpectedEof)
    assert result.error.offset == 0
    assert result.error.consumed == (0xC3,)
    assert decoder.bytes_consumed == 1
    # the truncated sequence is gone, what remains is a clean end of stream
    assert decoder.decode_next() is END_OF_STREAM


def test_truncated_three_byte_sequence():
    result = Utf8Decoder(b"\xe2\x82").decode_next()
    assert result.error.kind is DecodeErrorKind.UNEXPECTED_EOF
    assert result.error.consumed == (0xE2, 0x82)


@pytest.mark.parametrize("lead_byte", [0xFF, 0x80, 0xBF, 0xF8, 0xFC])
def test_invalid_lead_byte(lead_byte):
    decoder = Utf8Decoder(bytes([lead_byte]))
    result = decoder.decode_next()
    assert result.error == InvalidLeadByte(0, (lead_byte,))
    assert decoder.bytes_consumed == 1


def test_invalid_continuation_byte():
    decoder = Utf8Decoder(b"\xc3\x41")
    result = decoder.decode_next()
    assert isinstance(result.error, InvalidContinuationByte)
    assert result.error.consumed == (0xC3, 0x41)
    assert decoder.bytes_consumed == 2


def test_failed_sequence_is_not_re_offered():
    decoder = Utf8Decoder(b"\xc3\x41\x42")
    assert decoder.decode_next().error.kind is DecodeErrorKind.INVALID_CONTINUATION_BYTE
    # 0x41 was consumed by the failed attempt, decoding resumes at 0x42
    assert decoder.decode_next().char == "B"
    assert decoder.decode_next().is_eof


def test_decoder_is_usable_after_error():
    decoder = Utf8Decoder(b"\xffA\x80\xc3\xa9")
    kinds = []
    while True:
        result = decoder.decode_next()
        if result.is_eof:
            break
        kinds.append(result.char if result.ok else result.error.kind)
    assert kinds == [
        DecodeErrorKind.INVALID_LEAD_BYTE,
        "A",
        DecodeErrorKind.INVALID_LEAD_BYTE,
        "é",
    ]


def test_error_offsets_point_at_sequence_start():
    decoder = Utf8Decoder(b"ab\xe2\x82x")
    decoder.decode_next()
    decoder.decode_next()
    result = decoder.decode_next()
    assert result.error.offset == 2
    assert result.error.consumed == (0xE2, 0x82, 0x78)
    assert decoder.bytes_consumed == 5


def test_surrogate_is_rejected():
    result = Utf8Decoder(b"\xed\xa0\x80").decode_next()
    assert result.error.kind is DecodeErrorKind.INVALID_SCALAR_VALUE
    assert result.error.value == 0xD800


def test_value_above_max_codepoint_is_rejected():
    result = Utf8Decoder(b"\xf4\x90\x80\x80").decode_next()
    assert result.error.kind is DecodeErrorKind.INVALID_SCALAR_VALUE
    assert result.error.value == 0x110000
    assert "U+110000" in str(result.error)


def test_overlong_accepted_by_default():
    result = Utf8Decoder(b"\xc0\xaf").decode_next()
    assert result.char == "/"


@pytest.mark.parametrize(
    "encoded, value",
    [
        (b"\xc0\xaf", 0x2F),
        (b"\xe0\x80\xaf", 0x2F),
        (b"\xf0\x80\x80\xaf", 0x2F),
        (b"\xe0\x9f\xbf", 0x7FF),
    ],
)
def test_overlong_rejected_on_request(encoded, value):
    decoder = Utf8Decoder(encoded, reject_overlong=True)
    result = decoder.decode_next()
    assert result.error.kind is DecodeErrorKind.OVERLONG_ENCODING
    assert result.error.value == value
    assert decoder.bytes_consumed == len(encoded)


def test_reject_overlong_keeps_minimal_encodings():
    text = "A\u0080\u0800\U00010000"
    assert decode_utf8_string(text.encode("utf-8"), reject_overlong=True) == [
        ord(c) for c in text
    ]


def test_empty_source_is_end_of_stream():
    decoder = Utf8Decoder(b"")
    result = decoder.decode_next()
    assert result is END_OF_STREAM
    assert result.is_eof and not result.is_error
    assert result.codepoint is None
    assert list(decoder) == []


def test_sequential_decoding():
    decoder = Utf8Decoder("Aé😀".encode("utf-8"))
    assert decoder.decode_next().char == "A"
    assert decoder.decode_next().char == "é"
    assert decoder.decode_next().char == "😀"
    assert decoder.decode_next().is_eof
    assert decoder.decode_next().is_eof
    assert decoder.bytes_consumed == 7


def test_source_failure_is_wrapped():
    source = FailingSource(b"A\xe2")
    decoder = Utf8Decoder(source)
    assert decoder.decode_next().char == "A"
    result = decoder.decode_next()
    assert result.error.kind is DecodeErrorKind.SOURCE_READ_FAILURE
    assert isinstance(result.error.cause, OSError)
    assert result.error.__cause__ is result.error.cause
    assert result.error.consumed == (0xE2,)
    # a broken source keeps failing, the decoder itself is not poisoned
    assert decoder.decode_next().error.kind is DecodeErrorKind.SOURCE_READ_FAILURE


def test_read_char_raises_errors():
    decoder = Utf8Decoder(b"A\xff")
    assert decoder.read_char() == "A"
    with pytest.raises(InvalidLeadByte):
        decoder.read_char()
    assert decoder.read_char() is None


def test_decode_utf8_string():
    utf8_bytes = b"Hello, \xe2\x82\xac!"
    assert decode_utf8_string(utf8_bytes) == [72, 101, 108, 108, 111, 44, 32, 8364, 33]
    assert decode_utf8_string(b"") == []
    with pytest.raises(UnexpectedEof):
        decode_utf8_string(b"\xe2\x82")


def test_reentrant_use_is_refused():
    class ReentrantSource(ByteSource):
        def __init__(self):
            self.decoder = None

        def read_byte(self):
            return self.decoder.decode_next()

    source = ReentrantSource()
    decoder = Utf8Decoder(source)
    source.decoder = decoder
    with pytest.raises(ReentrantUseError):
        decoder.decode_next()
    assert decoder.bytes_consumed == 0


def test_decoder_usable_after_reentrant_use_is_refused():
    class ReentrantOnceSource(ByteSource):
        def __init__(self):
            self.decoder = None
            self.calls = 0

        def read_byte(self):
            self.calls += 1
            if self.calls == 1:
                return self.decoder.decode_next()
            return None

    source = ReentrantOnceSource()
    decoder = Utf8Decoder(source)
    source.decoder = decoder
    with pytest.raises(RuntimeError):
        decoder.decode_next()
    assert decoder.decode_next() is END_OF_STREAM
