from typing import Iterable

from termcolor import colored

from streamdecode.utf8_decoder import DecodeResult


def format_outcome(result: DecodeResult) -> str:
    if result.error is not None:
        return colored(f"<{result.error.kind.value}@{result.error.offset}>", "red", attrs=["bold"])
    if result.char is None:
        return colored("<EOF>", "yellow")
    if result.char.isprintable():
        return result.char
    return f"U+{result.codepoint:04X}"


def pprint_outcomes(outcomes: Iterable[DecodeResult]):
    """
    Print decode results on one line, errors in red.

    Typical use is `pprint_outcomes(Utf8Decoder(data).outcomes())` while
    looking at a misbehaving input.
    """
    print("[" + ", ".join(format_outcome(result) for result in outcomes) + "]")
