"""Streaming AES-256-GCM: frame layout, stream transforms and key helpers.

This package provides:
- EncryptionStream / DecryptionStream producing and consuming
  ``nonce(12) || ciphertext(N) || tag(16)`` frames
- one-shot, iterator and file helpers built on those streams
- random key generation and text encoding of keys
"""

from .framing import NONCE_LEN, TAG_LEN, KEY_LEN, MIN_FRAME_LEN, assemble_frame, split_frame
from .kdf import create_salt, create_key_buffer, derive_key
from .keys import (
    SUPPORTED_KEY_ENCODINGS,
    DEFAULT_KEY_ENCODING,
    validate_key,
    encode_key,
    decode_key,
    create_encoded_key,
    write_key_file,
    read_key_file,
)
from .stream import (
    ByteTransform,
    EncryptionStream,
    DecryptionStream,
    DecryptState,
    encrypt,
    decrypt,
    encrypt_chunks,
    decrypt_chunks,
    encrypt_fileobj,
    decrypt_fileobj,
    decrypt_fileobj_to_path,
    encrypt_file_stream,
    decrypt_file_stream,
)

__all__ = [
    "NONCE_LEN",
    "TAG_LEN",
    "KEY_LEN",
    "MIN_FRAME_LEN",
    "assemble_frame",
    "split_frame",
    "create_salt",
    "create_key_buffer",
    "derive_key",
    "SUPPORTED_KEY_ENCODINGS",
    "DEFAULT_KEY_ENCODING",
    "validate_key",
    "encode_key",
    "decode_key",
    "create_encoded_key",
    "write_key_file",
    "read_key_file",
    "ByteTransform",
    "EncryptionStream",
    "DecryptionStream",
    "DecryptState",
    "encrypt",
    "decrypt",
    "encrypt_chunks",
    "decrypt_chunks",
    "encrypt_fileobj",
    "decrypt_fileobj",
    "decrypt_fileobj_to_path",
    "encrypt_file_stream",
    "decrypt_file_stream",
]
