"""
Rough timings for gcmstream encryption, decryption and key generation.

Key generation runs Argon2id and is expected to be far slower than either
stream direction. Run with:

    uv run scripts/benchmark_stream.py --rounds 200
"""

from __future__ import annotations

import argparse
import time
from typing import Callable, Dict, List, Optional

from gcmstream.security import create_key_buffer, decrypt_chunks, encrypt_chunks

SAMPLE_LINES = [
    b"Everything that is written into the stream will be encrypted.\n",
    b"But because GCM creates a MAC based on ALL the cipher text,\n",
    b"it's necessary to explicitly finalize the stream.\n",
    b"Otherwise you won't be able to authenticate and decrypt the data.\n",
    b"The decrypter relies on the first 12 bytes being the nonce,\n",
    b"and the last 16 bytes being the MAC;\n",
    b"which is only generated and sent on finalize.\n",
]


def _time_it(fn: Callable[[], object], rounds: int) -> float:
    start = time.perf_counter()
    for _ in range(rounds):
        fn()
    return (time.perf_counter() - start) / rounds


def run_benchmark(rounds: int) -> Dict[str, float]:
    """Return mean seconds per operation for each benchmark case."""
    key = create_key_buffer()
    frame_chunks: List[bytes] = list(encrypt_chunks(SAMPLE_LINES, key))

    return {
        "Encryption": _time_it(lambda: list(encrypt_chunks(SAMPLE_LINES, key)), rounds),
        "Decryption": _time_it(lambda: list(decrypt_chunks(frame_chunks, key)), rounds),
        "Key Generation": _time_it(create_key_buffer, max(1, rounds // 20)),
    }


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Benchmark gcmstream encryption, decryption and key generation."
    )
    parser.add_argument(
        "--rounds",
        type=int,
        default=200,
        help="Iterations per stream benchmark (default: 200)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    results = run_benchmark(args.rounds)
    for name, seconds in results.items():
        print(f"{name:<15} {seconds * 1e6:10.1f} us/op")

    slowest = max(results, key=results.get)
    print(f"Slowest: {slowest}")


if __name__ == "__main__":  # pragma: no cover - CLI entry
    main()
