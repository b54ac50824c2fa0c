"""Runtime configuration for gcmstream, read from environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from gcmstream.security.keys import DEFAULT_KEY_ENCODING, SUPPORTED_KEY_ENCODINGS

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024  # 64KB


@dataclass(frozen=True)
class StreamConfig:
    """Settings the CLI and file helpers need; passed explicitly, never global."""

    key_encoding: str = DEFAULT_KEY_ENCODING
    chunk_size: int = DEFAULT_CHUNK_SIZE
    log_level: str = "INFO"


def load_config(environ: Optional[Mapping[str, str]] = None) -> StreamConfig:
    """
    Build a StreamConfig from the environment.

    Recognised variables:

    - ``GCMSTREAM_KEY_ENCODING``: one of SUPPORTED_KEY_ENCODINGS. An unknown
      value is logged and the default encoding is kept.
    - ``GCMSTREAM_CHUNK_SIZE``: positive integer read size in bytes.
    - ``GCMSTREAM_LOG_LEVEL``: standard logging level name. An unknown name is
      logged and INFO is used.
    """
    env = os.environ if environ is None else environ

    encoding = env.get("GCMSTREAM_KEY_ENCODING", DEFAULT_KEY_ENCODING).strip().lower()
    if encoding not in SUPPORTED_KEY_ENCODINGS:
        logger.warning(
            "Ignoring unsupported key encoding %r; using %s", encoding, DEFAULT_KEY_ENCODING
        )
        encoding = DEFAULT_KEY_ENCODING

    raw_chunk = env.get("GCMSTREAM_CHUNK_SIZE")
    if raw_chunk is None:
        chunk_size = DEFAULT_CHUNK_SIZE
    else:
        try:
            chunk_size = int(raw_chunk)
        except ValueError:
            raise ValueError(f"GCMSTREAM_CHUNK_SIZE must be an integer, got {raw_chunk!r}")
        if chunk_size <= 0:
            raise ValueError("GCMSTREAM_CHUNK_SIZE must be positive")

    log_level = env.get("GCMSTREAM_LOG_LEVEL", "INFO").strip().upper() or "INFO"
    if not isinstance(logging.getLevelName(log_level), int):
        logger.warning("Ignoring unknown log level %r; using INFO", log_level)
        log_level = "INFO"

    return StreamConfig(key_encoding=encoding, chunk_size=chunk_size, log_level=log_level)
