"""Exception types raised by the signing pipeline."""


class TlSignerError(Exception):
    """Base class for all tlsigner errors."""


class KeyFormatError(TlSignerError, ValueError):
    """Raised when a PEM private key cannot be used for signing.

    Covers input without a PEM block, unsupported container labels,
    non-EC key material and structurally invalid bytes.
    """


class SigningFailure(TlSignerError):
    """Raised when a signature cannot be produced for a request."""


class SignatureVerificationError(TlSignerError):
    """Raised when a ``Tl-Signature`` does not verify."""


class IncompleteConfigurationError(TlSignerError, ValueError):
    """Raised when signing is enabled without a key id or private key."""
