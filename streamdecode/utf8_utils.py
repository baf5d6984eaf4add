"""
Bit-level helpers for UTF-8 sequences.

Lead byte patterns and the number of payload bits they carry:

    0xxxxxxx  1 byte   7 bits
    110xxxxx  2 bytes  5 bits
    1110xxxx  3 bytes  4 bits
    11110xxx  4 bytes  3 bits
    10xxxxxx  continuation, 6 bits

RFC 2279 style 5 and 6 byte sequences are not recognised.
"""

MAX_CODEPOINT = 0x10FFFF
SURROGATE_MIN = 0xD800
SURROGATE_MAX = 0xDFFF

CONTINUATION_MASK = 0b0011_1111
CONTINUATION_TAG = 0b10

# Sequence length indexed by the high 4 bits of the lead byte, 0 means invalid.
# 0xF8-0xFF share the high nibble of the 4-byte leads and are rejected separately.
_LENGTH_BY_HIGH_BITS = [1, 1, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0, 2, 2, 3, 4]

# Smallest value that needs the given number of bytes, anything lower is overlong.
MIN_VALUE_BY_LENGTH = [0, 0, 0x80, 0x800, 0x10000]


def sequence_length(lead_byte: int) -> int:
    """Total length of the sequence announced by `lead_byte`, or 0 if it cannot start one."""
    if lead_byte >= 0xF8:
        return 0
    return _LENGTH_BY_HIGH_BITS[lead_byte >> 4]


def lead_payload(lead_byte: int, length: int) -> int:
    # a lead byte of an n-byte sequence keeps its low (7 - n) bits, the ASCII case keeps 7
    if length == 1:
        return lead_byte & 0x7F
    mask = (1 << (7 - length)) - 1
    return lead_byte & mask


def is_continuation(byte: int) -> bool:
    return (byte >> 6) == CONTINUATION_TAG


def is_scalar_value(value: int) -> bool:
    return 0 <= value <= MAX_CODEPOINT and not (
        SURROGATE_MIN <= value <= SURROGATE_MAX
    )


def is_overlong(value: int, length: int) -> bool:
    return value < MIN_VALUE_BY_LENGTH[length]
