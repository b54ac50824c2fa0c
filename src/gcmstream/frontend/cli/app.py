"""
Command line front end for gcmstream.

    gcmstream keygen -o secret.key
    gcmstream encrypt --key-file secret.key -i notes.txt -o notes.txt.gcm
    gcmstream decrypt --key-file secret.key -i notes.txt.gcm -o notes.txt

Input and output default to stdin/stdout (``-`` also means the standard
stream). Exit status is 0 on success, 1 when authentication fails and 2 for
bad keys or arguments.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from gcmstream.core.config import StreamConfig, load_config
from gcmstream.core.exceptions import (
    AuthenticationFailureError,
    KeyEncodingError,
    StreamConstructionError,
)
from gcmstream.frontend.cli.logging_config import configure_logging
from gcmstream.security.kdf import create_key_buffer
from gcmstream.security.keys import (
    SUPPORTED_KEY_ENCODINGS,
    encode_key,
    read_key_file,
    write_key_file,
)
from gcmstream.security.stream import (
    decrypt_file_stream,
    decrypt_fileobj,
    decrypt_fileobj_to_path,
    encrypt_file_stream,
    encrypt_fileobj,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_AUTH_FAILED = 1
EXIT_USAGE = 2


def _is_std(path: Optional[str]) -> bool:
    return path is None or path == "-"


def _cmd_keygen(args: argparse.Namespace, config: StreamConfig) -> int:
    key = create_key_buffer()
    if _is_std(args.output):
        print(encode_key(key, args.encoding))
    else:
        write_key_file(args.output, key, args.encoding)
        logger.info("Wrote new key to %s", args.output)
    return EXIT_OK


def _cmd_encrypt(args: argparse.Namespace, config: StreamConfig) -> int:
    key = read_key_file(args.key_file, args.encoding)
    chunk_size = args.chunk_size or config.chunk_size

    if not _is_std(args.input) and not _is_std(args.output):
        written = encrypt_file_stream(args.input, args.output, key, chunk_size=chunk_size)
    elif _is_std(args.input) and _is_std(args.output):
        written = encrypt_fileobj(sys.stdin.buffer, sys.stdout.buffer, key, chunk_size=chunk_size)
        sys.stdout.buffer.flush()
    elif _is_std(args.input):
        with open(args.output, "wb") as outf:
            written = encrypt_fileobj(sys.stdin.buffer, outf, key, chunk_size=chunk_size)
    else:
        with open(args.input, "rb") as inf:
            written = encrypt_fileobj(inf, sys.stdout.buffer, key, chunk_size=chunk_size)
        sys.stdout.buffer.flush()

    logger.info("Encrypted frame of %d bytes", written)
    return EXIT_OK


def _cmd_decrypt(args: argparse.Namespace, config: StreamConfig) -> int:
    key = read_key_file(args.key_file, args.encoding)
    chunk_size = args.chunk_size or config.chunk_size

    if not _is_std(args.output):
        if _is_std(args.input):
            written = decrypt_fileobj_to_path(sys.stdin.buffer, args.output, key, chunk_size=chunk_size)
        else:
            written = decrypt_file_stream(args.input, args.output, key, chunk_size=chunk_size)
    elif _is_std(args.input):
        written = decrypt_fileobj(sys.stdin.buffer, sys.stdout.buffer, key, chunk_size=chunk_size)
        sys.stdout.buffer.flush()
    else:
        with open(args.input, "rb") as inf:
            written = decrypt_fileobj(inf, sys.stdout.buffer, key, chunk_size=chunk_size)
        sys.stdout.buffer.flush()

    logger.info("Decrypted %d bytes", written)
    return EXIT_OK


def _build_arg_parser(config: StreamConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gcmstream",
        description="Stream data through AES-256-GCM (nonce || ciphertext || tag).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    encoding_help = f"Key text encoding (default: {config.key_encoding})"

    keygen = sub.add_parser("keygen", help="Generate a new random key")
    keygen.add_argument("-o", "--output", default=None, help="Key file to write (default: stdout)")
    keygen.add_argument(
        "--encoding", choices=SUPPORTED_KEY_ENCODINGS, default=config.key_encoding, help=encoding_help
    )
    keygen.set_defaults(handler=_cmd_keygen)

    for name, handler, summary in (
        ("encrypt", _cmd_encrypt, "Encrypt input into a single frame"),
        ("decrypt", _cmd_decrypt, "Authenticate and decrypt a frame"),
    ):
        cmd = sub.add_parser(name, help=summary)
        cmd.add_argument("--key-file", required=True, help="Path to an encoded key file")
        cmd.add_argument("-i", "--input", default=None, help="Input file (default: stdin)")
        cmd.add_argument("-o", "--output", default=None, help="Output file (default: stdout)")
        cmd.add_argument(
            "--encoding", choices=SUPPORTED_KEY_ENCODINGS, default=config.key_encoding, help=encoding_help
        )
        cmd.add_argument(
            "--chunk-size",
            type=int,
            default=None,
            help=f"Read size in bytes (default: {config.chunk_size})",
        )
        cmd.set_defaults(handler=handler)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    try:
        config = load_config()
    except ValueError as exc:
        print(f"gcmstream: {exc}", file=sys.stderr)
        return EXIT_USAGE
    parser = _build_arg_parser(config)
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else config.log_level)

    if getattr(args, "chunk_size", None) is not None and args.chunk_size <= 0:
        parser.error("--chunk-size must be positive")

    try:
        return args.handler(args, config)
    except AuthenticationFailureError as exc:
        logger.error("Decryption failed: %s", exc)
        return EXIT_AUTH_FAILED
    except (StreamConstructionError, KeyEncodingError) as exc:
        logger.error("Invalid key: %s", exc)
        return EXIT_USAGE
    except OSError as exc:
        logger.error("I/O error: %s", exc)
        return EXIT_USAGE


if __name__ == "__main__":  # pragma: no cover - CLI entry
    sys.exit(main())
