import io
import sys
import time
from dataclasses import dataclass

from streamdecode.logging_config import setup_logging
from streamdecode.utf8_decoder import Utf8Decoder


@dataclass
class BenchmarkingArguments:
    filepath: str
    repeat: int = 3
    buffer_size: int = io.DEFAULT_BUFFER_SIZE


def parse_args():
    raw_args = sys.argv[1:]
    n_passed = len(raw_args)
    if n_passed < 1:
        print("Usage: python time_benchmarking.py <filepath> [repeat] [buffer_size]")
        return
    for i in range(1, n_passed):
        raw_args[i] = int(raw_args[i])
    args = BenchmarkingArguments(*raw_args)
    return args


def time_decode_next(filepath, buffer_size):
    with open(filepath, "rb", buffering=buffer_size) as f:
        decoder = Utf8Decoder(f)
        count = 0
        st = time.perf_counter()
        while decoder.decode_next().ok:
            count += 1
        return count, decoder.bytes_consumed, time.perf_counter() - st


def time_iterator(filepath, buffer_size):
    with open(filepath, "rb", buffering=buffer_size) as f:
        decoder = Utf8Decoder(f)
        st = time.perf_counter()
        count = sum(1 for _ in decoder)
        return count, decoder.bytes_consumed, time.perf_counter() - st


def time_builtin(filepath):
    # baseline: the C implementation decoding the whole file at once, bad bytes become U+FFFD
    with open(filepath, "rb") as f:
        data = f.read()
    st = time.perf_counter()
    text = data.decode("utf-8", errors="replace")
    return len(text), len(data), time.perf_counter() - st


def main():
    setup_logging()
    args = parse_args()
    if args is None:
        return

    for name, run in [
        ("decode_next", lambda: time_decode_next(args.filepath, args.buffer_size)),
        ("iterator", lambda: time_iterator(args.filepath, args.buffer_size)),
        ("bytes.decode", lambda: time_builtin(args.filepath)),
    ]:
        timings = []
        for _ in range(args.repeat):
            n_chars, n_bytes, elapsed = run()
            timings.append(elapsed)
        best = min(timings)
        rate = n_bytes / best / 1e6 if best > 0 else float("inf")
        print(f"{name:>12}: {n_chars} chars, {n_bytes} bytes, best {best:.4f}s ({rate:.2f} MB/s)")


if __name__ == "__main__":
    main()
