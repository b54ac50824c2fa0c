"""
Exceptions for gcmstream
Everything derives from GcmStreamError so callers have one general error catcher
"""


class GcmStreamError(Exception):
    # general container for errors
    pass


class StreamConstructionError(GcmStreamError, ValueError):
    # raised when a transform is built with a missing/invalid key or nonce
    pass


class AuthenticationFailureError(GcmStreamError):
    # raised when the GCM tag does not verify (wrong key, tampering, corruption)
    pass


class TruncatedFrameError(AuthenticationFailureError):
    # raised when input ends before a full nonce + tag was received
    pass


class MalformedFrameError(GcmStreamError, ValueError):
    # raised when frame parts have the wrong size
    pass


class StreamClosedError(GcmStreamError, RuntimeError):
    # raised when a finalized or closed stream is used again
    pass


class KeyEncodingError(GcmStreamError, ValueError):
    # raised for an unknown key encoding or text that does not decode
    pass
