"""Key validation and text encoding helpers.

Keys travel as raw bytes inside the library. For storage in files or
environment variables they are converted to text with one of the supported
encodings; the encoding is always passed explicitly by the caller.
"""

from __future__ import annotations

import base64
import binascii
from pathlib import Path

from gcmstream.core.exceptions import KeyEncodingError, StreamConstructionError

from .framing import KEY_LEN
from .kdf import create_key_buffer

SUPPORTED_KEY_ENCODINGS = ("base64", "base64url", "hex")
DEFAULT_KEY_ENCODING = "base64"


def validate_key(key) -> bytes:
    """Return ``key`` as bytes, or raise if it is missing or of the wrong type.

    Byte sequences are copied into an immutable ``bytes``; strings are UTF-8
    encoded. Length is not checked here.
    """
    if isinstance(key, str) and key:
        return key.encode("utf-8")
    if isinstance(key, (bytes, bytearray, memoryview)) and len(key) > 0:
        return bytes(key)
    raise StreamConstructionError("Key is required; expected a byte sequence or string")


def require_key_length(key: bytes) -> bytes:
    if len(key) != KEY_LEN:
        raise StreamConstructionError(
            f"AES-256-GCM key must be {KEY_LEN} bytes, got {len(key)}"
        )
    return key


def _check_encoding(encoding: str) -> str:
    if encoding not in SUPPORTED_KEY_ENCODINGS:
        raise KeyEncodingError(
            f"Unsupported key encoding {encoding!r}; expected one of {', '.join(SUPPORTED_KEY_ENCODINGS)}"
        )
    return encoding


def encode_key(key: bytes, encoding: str = DEFAULT_KEY_ENCODING) -> str:
    """Encode raw key bytes as text."""
    _check_encoding(encoding)
    if encoding == "hex":
        return bytes(key).hex()
    if encoding == "base64url":
        return base64.urlsafe_b64encode(key).decode("ascii")
    return base64.b64encode(key).decode("ascii")


def decode_key(text: str, encoding: str = DEFAULT_KEY_ENCODING) -> bytes:
    """Decode a key previously produced by :func:`encode_key`."""
    _check_encoding(encoding)
    text = text.strip()
    try:
        if encoding == "hex":
            return bytes.fromhex(text)
        if encoding == "base64url":
            return base64.b64decode(text.encode("ascii"), altchars=b"-_", validate=True)
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise KeyEncodingError(f"Key text is not valid {encoding}") from exc


def create_encoded_key(encoding: str = DEFAULT_KEY_ENCODING) -> str:
    """Generate a new random key and return it encoded as text."""
    _check_encoding(encoding)
    return encode_key(create_key_buffer(), encoding)


def write_key_file(path: str | Path, key: bytes, encoding: str = DEFAULT_KEY_ENCODING) -> Path:
    """Write ``key`` to ``path`` as encoded text, readable by the owner only."""
    path = Path(path).expanduser()
    path.write_text(encode_key(key, encoding) + "\n", encoding="utf-8")
    path.chmod(0o600)
    return path


def read_key_file(path: str | Path, encoding: str = DEFAULT_KEY_ENCODING) -> bytes:
    """Read and decode a key written by :func:`write_key_file`."""
    text = Path(path).expanduser().read_text(encoding="utf-8")
    return decode_key(text, encoding)
