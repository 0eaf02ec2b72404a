"""PEM loading for elliptic-curve signing keys."""

from __future__ import annotations

import re
from dataclasses import dataclass

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from tlsigner.errors import KeyFormatError

# JWS algorithm for each supported curve.
CURVE_ALGORITHMS: dict[str, str] = {
    "secp256r1": "ES256",
    "secp384r1": "ES384",
    "secp521r1": "ES512",
}

PKCS8_LABEL = "PRIVATE KEY"
SEC1_LABEL = "EC PRIVATE KEY"
SUPPORTED_LABELS = (PKCS8_LABEL, SEC1_LABEL)

_PEM_BLOCK = re.compile(
    r"-----BEGIN (?P<label>[A-Z0-9 ]+)-----"
    r"(?P<body>.*?)"
    r"-----END (?P=label)-----",
    re.DOTALL,
)


@dataclass(frozen=True, slots=True)
class PrivateKeyHandle:
    """Parsed EC private key together with its curve metadata."""

    key: ec.EllipticCurvePrivateKey
    container: str

    @property
    def curve_name(self) -> str:
        return self.key.curve.name

    @property
    def key_size(self) -> int:
        return self.key.curve.key_size

    @property
    def algorithm(self) -> str | None:
        """JWS ``alg`` for this key, or None when the curve has no mapping."""
        return CURVE_ALGORITHMS.get(self.curve_name)

    def public_key(self) -> ec.EllipticCurvePublicKey:
        return self.key.public_key()

    def __repr__(self) -> str:
        return f"PrivateKeyHandle(curve={self.curve_name!r}, container={self.container!r})"


def _first_pem_block(pem: str) -> tuple[str, str]:
    match = _PEM_BLOCK.search(pem)
    if match is None:
        raise KeyFormatError("No PEM object found")
    return match.group("label"), match.group(0)


def load_private_key(pem: str) -> PrivateKeyHandle:
    """Parse an EC private key from PEM text.

    Accepts a PKCS#8 ``PRIVATE KEY`` block or a legacy SEC1 ``EC PRIVATE KEY``
    block. SEC1 blocks may carry the public point as well; only the private
    scalar is kept. When the input holds several blocks the first one is used.

    Args:
        pem: PEM-encoded key text

    Returns:
        Handle wrapping the parsed key

    Raises:
        KeyFormatError: If no PEM block is present, the container is not a
            supported private key format, the key is not elliptic-curve, or
            the encoded bytes are invalid
    """
    if not isinstance(pem, str) or not pem.strip():
        raise KeyFormatError("No PEM object found")

    label, block = _first_pem_block(pem)
    if label not in SUPPORTED_LABELS:
        raise KeyFormatError(f"Unsupported PEM object: {label}")

    try:
        key = serialization.load_pem_private_key(block.encode("ascii"), password=None)
    except UnicodeEncodeError as exc:
        raise KeyFormatError("PEM block contains non-ASCII characters") from exc
    except TypeError as exc:
        # Raised for password-protected keys; no passphrase flow is supported.
        raise KeyFormatError(f"Encrypted private keys are not supported: {exc}") from exc
    except UnsupportedAlgorithm as exc:
        raise KeyFormatError(f"Unsupported key algorithm: {exc}") from exc
    except ValueError as exc:
        raise KeyFormatError(f"Invalid private key data: {exc}") from exc

    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise KeyFormatError("Provided key is not an EC private key")

    return PrivateKeyHandle(key=key, container=label)


def load_public_key(pem: str) -> ec.EllipticCurvePublicKey:
    """Load an EC public key from a ``PUBLIC KEY`` block or derive it from a private key.

    Raises:
        KeyFormatError: If the input holds neither form of EC key
    """
    if not isinstance(pem, str) or not pem.strip():
        raise KeyFormatError("No PEM object found")

    label, block = _first_pem_block(pem)
    if label in SUPPORTED_LABELS:
        return load_private_key(block).public_key()
    if label != "PUBLIC KEY":
        raise KeyFormatError(f"Unsupported PEM object: {label}")

    try:
        key = serialization.load_pem_public_key(block.encode("ascii"))
    except (UnicodeEncodeError, UnsupportedAlgorithm, ValueError) as exc:
        raise KeyFormatError(f"Invalid public key data: {exc}") from exc

    if not isinstance(key, ec.EllipticCurvePublicKey):
        raise KeyFormatError("Provided key is not an EC public key")
    return key


def describe_key(handle: PrivateKeyHandle) -> str:
    """Return a one-line summary suitable for status displays."""
    algorithm = handle.algorithm or "unsupported"
    return f"EC private key ({handle.curve_name}, {algorithm}, {handle.container})"
