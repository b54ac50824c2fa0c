"""Unit tests for the frame layout helpers."""

import pytest

from gcmstream.core.exceptions import (
    AuthenticationFailureError,
    MalformedFrameError,
    TruncatedFrameError,
)
from gcmstream.security.framing import (
    MIN_FRAME_LEN,
    NONCE_LEN,
    TAG_LEN,
    assemble_frame,
    frame_length,
    split_frame,
)


def test_constants_match_aes_gcm():
    assert NONCE_LEN == 12
    assert TAG_LEN == 16
    assert MIN_FRAME_LEN == 28


def test_frame_length():
    assert frame_length(0) == 28
    assert frame_length(5) == 33


def test_assemble_then_split():
    nonce = b"\x01" * NONCE_LEN
    ct = b"ciphertext"
    tag = b"\x02" * TAG_LEN

    frame = assemble_frame(nonce, ct, tag)

    assert frame == nonce + ct + tag
    assert split_frame(frame) == (nonce, ct, tag)


def test_split_empty_message_frame():
    frame = b"n" * NONCE_LEN + b"t" * TAG_LEN
    nonce, ct, tag = split_frame(frame)
    assert ct == b""
    assert nonce == b"n" * NONCE_LEN
    assert tag == b"t" * TAG_LEN


def test_split_rejects_short_frame():
    with pytest.raises(TruncatedFrameError, match="Frame too short"):
        split_frame(b"\x00" * (MIN_FRAME_LEN - 1))


def test_truncated_frame_is_an_authentication_failure():
    # callers catching AuthenticationFailureError also see truncation
    assert issubclass(TruncatedFrameError, AuthenticationFailureError)


@pytest.mark.parametrize(
    "nonce, tag",
    [
        (b"\x00" * 11, b"\x00" * TAG_LEN),
        (b"\x00" * NONCE_LEN, b"\x00" * 15),
    ],
)
def test_assemble_rejects_wrong_sizes(nonce, tag):
    with pytest.raises(MalformedFrameError):
        assemble_frame(nonce, b"", tag)
