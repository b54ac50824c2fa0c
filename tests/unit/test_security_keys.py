"""
Unit tests for key validation and key encoding helpers.
"""

import base64
import os
import stat
import sys

import pytest

from gcmstream.core.exceptions import KeyEncodingError, StreamConstructionError
from gcmstream.security.keys import (
    DEFAULT_KEY_ENCODING,
    SUPPORTED_KEY_ENCODINGS,
    create_encoded_key,
    decode_key,
    encode_key,
    read_key_file,
    require_key_length,
    validate_key,
    write_key_file,
)


# ==============================================================================
# Tests: validate_key
# ==============================================================================

def test_validate_key_accepts_bytes_like():
    raw = os.urandom(32)
    assert validate_key(raw) == raw
    assert validate_key(bytearray(raw)) == raw
    assert validate_key(memoryview(raw)) == raw
    assert isinstance(validate_key(bytearray(raw)), bytes)


def test_validate_key_encodes_strings_as_utf8():
    assert validate_key("é" * 16) == ("é" * 16).encode("utf-8")


def test_validate_key_does_not_check_length():
    assert validate_key(b"short") == b"short"


@pytest.mark.parametrize("bad", [None, b"", "", bytearray(), 0, 3.14, object()])
def test_validate_key_rejects(bad):
    with pytest.raises(StreamConstructionError, match="Key is required"):
        validate_key(bad)


def test_require_key_length():
    assert require_key_length(b"\x00" * 32) == b"\x00" * 32
    with pytest.raises(StreamConstructionError):
        require_key_length(b"\x00" * 16)


# ==============================================================================
# Tests: encodings
# ==============================================================================

def test_default_encoding_is_base64():
    assert DEFAULT_KEY_ENCODING == "base64"
    assert encode_key(b"\xff" * 3) == base64.b64encode(b"\xff" * 3).decode("ascii")


@pytest.mark.parametrize("encoding", SUPPORTED_KEY_ENCODINGS)
def test_encode_decode(encoding):
    raw = os.urandom(32)
    text = encode_key(raw, encoding)
    assert isinstance(text, str)
    assert decode_key(text, encoding) == raw


def test_decode_strips_whitespace():
    raw = os.urandom(32)
    assert decode_key("  " + encode_key(raw, "hex") + "\n", "hex") == raw


def test_unknown_encoding():
    with pytest.raises(KeyEncodingError, match="Unsupported key encoding"):
        encode_key(b"k", "rot13")
    with pytest.raises(KeyEncodingError):
        decode_key("abcd", "utf-16")
    with pytest.raises(KeyEncodingError):
        create_encoded_key("binary")


@pytest.mark.parametrize("encoding, text", [("base64", "not base64!!"), ("hex", "zz"), ("base64url", "abc")])
def test_decode_invalid_text(encoding, text):
    with pytest.raises(KeyEncodingError, match="not valid"):
        decode_key(text, encoding)


def test_create_encoded_key():
    text = create_encoded_key("hex")
    assert len(decode_key(text, "hex")) == 32


# ==============================================================================
# Tests: key files
# ==============================================================================

def test_key_file_roundtrip(tmp_path):
    raw = os.urandom(32)
    path = write_key_file(tmp_path / "keyfile", raw, "base64url")

    assert path.read_text(encoding="utf-8").strip() == encode_key(raw, "base64url")
    assert read_key_file(path, "base64url") == raw


@pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX permissions")
def test_key_file_is_private(tmp_path):
    path = write_key_file(tmp_path / "keyfile", os.urandom(32))
    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_read_key_file_wrong_encoding(tmp_path):
    path = write_key_file(tmp_path / "keyfile", os.urandom(32), "base64")
    with pytest.raises(KeyEncodingError):
        read_key_file(path, "hex")


@pytest.mark.parametrize("encoding", ["base64", "base64url"])
def test_decode_rejects_stray_characters(encoding):
    text = encode_key(os.urandom(32), encoding)
    corrupted = text[:10] + "$" + text[11:]
    with pytest.raises(KeyEncodingError):
        decode_key(corrupted, encoding)
