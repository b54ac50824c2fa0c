"""Streaming AES-256-GCM encryption and decryption transforms.

Frame layout (see :mod:`gcmstream.security.framing`):
- 12 bytes: nonce
- N bytes: ciphertext (same length as the plaintext)
- 16 bytes: GCM tag

EncryptionStream emits the nonce before the first ciphertext, streams
ciphertext as soon as plaintext arrives, and emits the tag on finalize().

DecryptionStream cannot know where the ciphertext ends until input ends, so
it keeps every byte after the nonce and only decrypts in finalize(). Nothing
is returned to the caller before the tag has verified.
"""

from __future__ import annotations

import enum
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, Optional, Protocol, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from gcmstream.core.exceptions import (
    AuthenticationFailureError,
    StreamClosedError,
    StreamConstructionError,
    TruncatedFrameError,
)

from .framing import MIN_FRAME_LEN, NONCE_LEN, TAG_LEN
from .kdf import create_salt
from .keys import require_key_length, validate_key

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024  # 64KB

Data = Union[bytes, bytearray, memoryview, str]


class ByteTransform(Protocol):
    """Byte-in, byte-out transform with an explicit completion call."""

    def update(self, data: Data) -> bytes: ...

    def finalize(self) -> bytes: ...

    def close(self) -> None: ...


def _as_bytes(data: Data):
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, memoryview):
        # flatten wide or multi-dimensional views to single bytes
        return data.cast("B") if data.c_contiguous else data.tobytes()
    if isinstance(data, (bytes, bytearray)):
        return data
    raise TypeError(f"expected bytes-like object or str, got {type(data).__name__}")


def _wipe(buf: bytearray) -> None:
    # same-length slice assignment never resizes, so it is safe with live exports
    buf[:] = bytes(len(buf))


def _build_algorithm(key) -> algorithms.AES:
    key = require_key_length(validate_key(key))
    try:
        return algorithms.AES(key)
    except ValueError as exc:
        raise StreamConstructionError(str(exc)) from exc


class EncryptionStream:
    """
    Encrypt a plaintext stream into a single ``nonce || ciphertext || tag`` frame.

    Usage::

        enc = EncryptionStream(key)
        out = enc.update(b"part one") + enc.update(b"part two") + enc.finalize()

    Args:
        key: 32-byte key as a byte sequence or a string (UTF-8 encoded)
        nonce: optional 12-byte nonce; a random one is generated if omitted.
            Never reuse a nonce with the same key.
    """

    def __init__(self, key, nonce: Optional[bytes] = None):
        algorithm = _build_algorithm(key)

        if nonce is None:
            nonce = create_salt(NONCE_LEN)
        elif not isinstance(nonce, (bytes, bytearray, memoryview)) or len(nonce) != NONCE_LEN:
            raise StreamConstructionError(f"Nonce must be a {NONCE_LEN}-byte sequence")

        self._nonce = bytes(nonce)
        self._encryptor = Cipher(algorithm, modes.GCM(self._nonce)).encryptor()
        self._started = False
        self._closed = False
        self._tag: Optional[bytes] = None

    @property
    def nonce(self) -> bytes:
        return self._nonce

    @property
    def tag(self) -> Optional[bytes]:
        """The GCM tag, available once finalize() has run."""
        return self._tag

    @property
    def closed(self) -> bool:
        return self._closed

    def _prefix(self) -> bytes:
        if self._started:
            return b""
        self._started = True
        return self._nonce

    def update(self, data: Data) -> bytes:
        """Encrypt one chunk and return the bytes to send downstream."""
        if self._closed:
            raise StreamClosedError("Encryption stream is already finalized or closed")
        body = self._encryptor.update(_as_bytes(data))
        return self._prefix() + body

    def finalize(self) -> bytes:
        """Finish the stream and return the trailing tag (plus the nonce if nothing was sent yet)."""
        if self._closed:
            raise StreamClosedError("Encryption stream is already finalized or closed")
        prefix = self._prefix()
        tail = self._encryptor.finalize()
        self._tag = self._encryptor.tag
        self.close()
        logger.debug("Encryption stream finalized")
        return prefix + tail + self._tag

    def close(self) -> None:
        """Drop the cipher context; further calls raise StreamClosedError."""
        self._encryptor = None
        self._closed = True

    def __enter__(self) -> "EncryptionStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class DecryptState(enum.Enum):
    COLLECTING_NONCE = "collecting_nonce"
    BUFFERING_CIPHERTEXT = "buffering_ciphertext"
    AUTHENTICATING = "authenticating"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


_TERMINAL_STATES = (DecryptState.DONE, DecryptState.FAILED, DecryptState.CANCELLED)


class DecryptionStream:
    """
    Decrypt a ``nonce || ciphertext || tag`` frame fed in arbitrary chunks.

    update() never returns plaintext; it only collects the nonce and buffers
    the rest. finalize() splits off the trailing tag, decrypts, verifies, and
    returns the whole plaintext, or raises AuthenticationFailureError.

    Memory use grows with the total ciphertext length.
    """

    def __init__(self, key):
        self._algorithm = _build_algorithm(key)
        self._nonce = bytearray(NONCE_LEN)
        self._nonce_read = 0
        self._buffer = bytearray()
        self._decryptor = None
        self._state = DecryptState.COLLECTING_NONCE

    @property
    def state(self) -> DecryptState:
        return self._state

    @property
    def buffered_bytes(self) -> int:
        """Number of post-nonce bytes held while waiting for end-of-input."""
        return len(self._buffer)

    def _ensure_open(self) -> None:
        if self._state in _TERMINAL_STATES or self._state is DecryptState.AUTHENTICATING:
            raise StreamClosedError(f"Decryption stream is {self._state.value}")

    def update(self, data: Data) -> bytes:
        """
        Consume one chunk of frame bytes.

        A chunk may hold part of the nonce, all of it, or the nonce plus
        ciphertext and tag bytes; it is walked once with an offset and
        split across the state boundary as needed. Always returns b"".
        """
        self._ensure_open()
        chunk = _as_bytes(data)
        length = len(chunk)
        offset = 0

        with memoryview(chunk) as view:
            while offset < length:
                if self._state is DecryptState.COLLECTING_NONCE:
                    take = min(NONCE_LEN - self._nonce_read, length - offset)
                    end = self._nonce_read + take
                    self._nonce[self._nonce_read:end] = view[offset:offset + take]
                    self._nonce_read = end
                    offset += take
                    if self._nonce_read == NONCE_LEN:
                        self._decryptor = Cipher(
                            self._algorithm, modes.GCM(bytes(self._nonce))
                        ).decryptor()
                        self._state = DecryptState.BUFFERING_CIPHERTEXT
                else:
                    self._buffer += view[offset:]
                    offset = length
        return b""

    def finalize(self) -> bytes:
        """
        Authenticate everything received and return the plaintext.

        Raises:
            TruncatedFrameError: If fewer than 28 bytes were received
            AuthenticationFailureError: If the tag does not verify
        """
        self._ensure_open()
        self._state = DecryptState.AUTHENTICATING

        received = self._nonce_read + len(self._buffer)
        if self._decryptor is None or len(self._buffer) < TAG_LEN:
            self._fail()
            logger.warning("Decryption failed: frame truncated at %d bytes", received)
            raise TruncatedFrameError(
                f"Frame too short: {received} bytes (minimum {MIN_FRAME_LEN})"
            )

        split = len(self._buffer) - TAG_LEN
        tag = bytes(self._buffer[split:])
        try:
            with memoryview(self._buffer) as view:
                plaintext = self._decryptor.update(view[:split])
            self._decryptor.finalize_with_tag(tag)
        except InvalidTag as exc:
            self._fail()
            logger.warning("Decryption failed: authentication tag mismatch")
            raise AuthenticationFailureError(
                "Unable to authenticate data; wrong key or corrupted/tampered input"
            ) from exc

        self._release()
        self._state = DecryptState.DONE
        logger.debug("Decryption stream authenticated %d bytes", len(plaintext))
        return plaintext

    def _release(self) -> None:
        _wipe(self._nonce)
        _wipe(self._buffer)
        self._buffer = bytearray()
        self._decryptor = None

    def _fail(self) -> None:
        self._release()
        self._state = DecryptState.FAILED

    def close(self) -> None:
        """Discard buffered input; a stream closed before finalize() yields nothing."""
        if self._state in _TERMINAL_STATES:
            return
        self._release()
        self._nonce_read = 0
        self._state = DecryptState.CANCELLED

    def __enter__(self) -> "DecryptionStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# ----------------------------------------------------------------------
# Convenience helpers
# ----------------------------------------------------------------------


def run_transform(transform: ByteTransform, chunks: Iterable[Data]) -> Iterator[bytes]:
    """Drive ``transform`` over ``chunks``, yielding non-empty output in order."""
    with transform:
        for chunk in chunks:
            out = transform.update(chunk)
            if out:
                yield out
        out = transform.finalize()
        if out:
            yield out


def encrypt_chunks(chunks: Iterable[Data], key, nonce: Optional[bytes] = None) -> Iterator[bytes]:
    # build eagerly so key/nonce errors surface at call time, not on first next()
    return run_transform(EncryptionStream(key, nonce), chunks)


def decrypt_chunks(chunks: Iterable[Data], key) -> Iterator[bytes]:
    return run_transform(DecryptionStream(key), chunks)


def encrypt(data: Data, key, nonce: Optional[bytes] = None) -> bytes:
    """Encrypt ``data`` in one call and return the complete frame."""
    stream = EncryptionStream(key, nonce)
    return stream.update(data) + stream.finalize()


def decrypt(frame: Data, key) -> bytes:
    """Authenticate and decrypt a complete frame."""
    stream = DecryptionStream(key)
    stream.update(frame)
    return stream.finalize()


def _read_chunks(src: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    while True:
        chunk = src.read(chunk_size)
        if not chunk:
            break
        yield chunk


def encrypt_fileobj(
    src: BinaryIO, dst: BinaryIO, key, chunk_size: int = CHUNK_SIZE, nonce: Optional[bytes] = None
) -> int:
    """Encrypt ``src`` into ``dst`` chunk by chunk; returns the number of bytes written."""
    written = 0
    for out in encrypt_chunks(_read_chunks(src, chunk_size), key, nonce):
        dst.write(out)
        written += len(out)
    return written


def decrypt_fileobj(src: BinaryIO, dst: BinaryIO, key, chunk_size: int = CHUNK_SIZE) -> int:
    """Decrypt ``src`` into ``dst``; nothing is written unless authentication succeeds."""
    written = 0
    for out in decrypt_chunks(_read_chunks(src, chunk_size), key):
        dst.write(out)
        written += len(out)
    return written


def encrypt_file_stream(in_path: str, out_path: str, key, chunk_size: int = CHUNK_SIZE) -> int:
    with open(in_path, "rb") as inf, open(out_path, "wb") as outf:
        return encrypt_fileobj(inf, outf, key, chunk_size=chunk_size)


def decrypt_fileobj_to_path(src: BinaryIO, out_path: str, key, chunk_size: int = CHUNK_SIZE) -> int:
    """Decrypt ``src`` into the file at ``out_path``.

    Output goes to a temporary file beside ``out_path`` and is moved into
    place only after the tag verifies, so a failed decryption leaves any
    existing file untouched and creates no new one.
    """
    destination = Path(out_path)
    with tempfile.NamedTemporaryFile(
        dir=destination.parent, prefix=".gcmstream-", delete=False
    ) as tmpf:
        tmp_path = Path(tmpf.name)

    try:
        with open(tmp_path, "wb") as outf:
            written = decrypt_fileobj(src, outf, key, chunk_size=chunk_size)
        shutil.move(str(tmp_path), str(destination))
        return written
    finally:
        if tmp_path.exists():
            os.unlink(tmp_path)


def decrypt_file_stream(in_path: str, out_path: str, key, chunk_size: int = CHUNK_SIZE) -> int:
    with open(in_path, "rb") as inf:
        return decrypt_fileobj_to_path(inf, out_path, key, chunk_size=chunk_size)
