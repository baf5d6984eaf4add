import argparse
import logging

from streamdecode.logging_config import setup_logging
from streamdecode.utf8_decoder import Utf8Decoder
from streamdecode.utils import pprint_outcomes

logger = logging.getLogger(__name__)


def parse_arguments(args=None):
    parser = argparse.ArgumentParser(description="Decode a UTF-8 file one character at a time")
    parser.add_argument("path", type=str, help="File to decode")
    parser.add_argument(
        "--reject_overlong",
        action="store_true",
        help="Report overlong encodings as errors",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Print every decode result, errors highlighted",
    )
    return parser.parse_args(args)


def main(args=None):
    setup_logging()
    args = parse_arguments(args)

    with open(args.path, "rb") as f:
        decoder = Utf8Decoder(f, reject_overlong=args.reject_overlong)
        if args.show:
            pprint_outcomes(decoder.outcomes())
            return

        n_chars = 0
        n_errors = 0
        for result in decoder.outcomes():
            if result.ok:
                n_chars += 1
            else:
                n_errors += 1
                logger.warning(str(result.error))

    print(f"{args.path}: {n_chars} characters, {n_errors} errors, {decoder.bytes_consumed} bytes")


if __name__ == "__main__":
    main()
