"""
Frame layout shared by the encrypting and decrypting streams.

Frame structure (28 + N bytes):
    [nonce:12][ciphertext:N][tag:16]

There is no length prefix or version byte. The tag is located relative to
the end of the stream, so a reader has to see end-of-input before it can
split ciphertext from tag.
"""

from typing import Tuple

from gcmstream.core.exceptions import MalformedFrameError, TruncatedFrameError


NONCE_LEN = 12
TAG_LEN = 16
KEY_LEN = 32
MIN_FRAME_LEN = NONCE_LEN + TAG_LEN


def frame_length(plaintext_len: int) -> int:
    """Return the size of the frame produced for ``plaintext_len`` bytes."""
    return plaintext_len + MIN_FRAME_LEN


def assemble_frame(nonce: bytes, ciphertext: bytes, tag: bytes) -> bytes:
    """
    Assemble a complete frame from its parts.

    Raises:
        MalformedFrameError: If nonce or tag do not have the fixed sizes
    """
    if len(nonce) != NONCE_LEN:
        raise MalformedFrameError(f"Nonce must be {NONCE_LEN} bytes, got {len(nonce)}")
    if len(tag) != TAG_LEN:
        raise MalformedFrameError(f"Tag must be {TAG_LEN} bytes, got {len(tag)}")
    return bytes(nonce) + bytes(ciphertext) + bytes(tag)


def split_frame(frame: bytes) -> Tuple[bytes, bytes, bytes]:
    """
    Split a complete frame into (nonce, ciphertext, tag).

    Raises:
        TruncatedFrameError: If the frame is shorter than MIN_FRAME_LEN
    """
    if len(frame) < MIN_FRAME_LEN:
        raise TruncatedFrameError(
            f"Frame too short: {len(frame)} bytes (minimum {MIN_FRAME_LEN})"
        )
    frame = bytes(frame)
    return frame[:NONCE_LEN], frame[NONCE_LEN:-TAG_LEN], frame[-TAG_LEN:]
