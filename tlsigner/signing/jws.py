"""Detached JWS construction for ``Tl-Signature`` headers.

The signature follows the TrueLayer request-signing v2 convention. The JWS
payload is never transmitted; the verifier rebuilds it from the request:

    {METHOD} {path}\\n
    Idempotency-Key: {token}\\n
    {body}

The token is signed as a regular compact JWS and then emitted with its
payload segment emptied (``header..signature``, RFC 7515 appendix F).
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from cryptography.hazmat.primitives.asymmetric import ec
from jwt.api_jws import PyJWS
from jwt.exceptions import PyJWTError
from jwt.utils import base64url_encode

from tlsigner.errors import SignatureVerificationError, SigningFailure
from tlsigner.signing.keys import CURVE_ALGORITHMS, PrivateKeyHandle

logger = logging.getLogger(__name__)

IDEMPOTENCY_KEY_HEADER = "Idempotency-Key"
SIGNATURE_HEADER = "Tl-Signature"
TL_VERSION = "2"

_jws = PyJWS()


@dataclass(frozen=True, slots=True)
class SignatureArtifact:
    """Headers produced for a single signed request."""

    idempotency_key: str
    signature: str


def new_idempotency_key() -> str:
    return str(uuid.uuid4())


def decode_body(body: bytes) -> str:
    """Decode a request body for signing.

    Bodies that are not valid UTF-8 are signed as the empty string rather than
    failing the request. The resulting signature will not match what a
    verifier computes over the real bytes; this leniency keeps binary
    requests flowing through the proxy unblocked.
    """
    if not body:
        return ""
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Request body is not valid UTF-8; using empty body for signing.")
        return ""


def normalize_path(path: str | None) -> str:
    return path if path else "/"


def build_signing_payload(
    method: str,
    path: str | None,
    headers: Sequence[tuple[str, str]],
    body: str,
) -> bytes:
    """Build the canonical signing input for a request."""
    lines = [f"{method.upper()} {normalize_path(path)}\n"]
    for name, value in headers:
        lines.append(f"{name}: {value}\n")
    lines.append(body)
    return "".join(lines).encode("utf-8")


def build_jws_headers(key_id: str, header_names: Sequence[str]) -> dict[str, Any]:
    """Protected header fields added on top of ``alg``.

    ``typ`` is set to None so PyJWT leaves it out of the header.
    """
    return {
        "typ": None,
        "kid": key_id,
        "tl_version": TL_VERSION,
        "tl_headers": ",".join(header_names),
    }


def _resolve_algorithm(curve_name: str) -> str:
    algorithm = CURVE_ALGORITHMS.get(curve_name)
    if algorithm is None:
        raise SigningFailure(f"Unsupported EC curve for JWS signing: {curve_name}")
    return algorithm


def _detach(token: str) -> str:
    header_b64, _, signature_b64 = token.split(".")
    return f"{header_b64}..{signature_b64}"


def sign_request(
    key_id: str,
    key_handle: PrivateKeyHandle,
    method: str,
    path: str | None,
    body: bytes,
) -> SignatureArtifact:
    """Sign a request and mint its idempotency key.

    Args:
        key_id: Value for the JWS ``kid`` header
        key_handle: Loaded EC private key
        method: HTTP method (uppercased for signing)
        path: Request path including any query string; empty means ``/``
        body: Raw request body

    Returns:
        The idempotency key and the detached compact JWS

    Raises:
        SigningFailure: If the curve has no JWS algorithm or signing fails
    """
    token = new_idempotency_key()
    algorithm = _resolve_algorithm(key_handle.curve_name)

    payload = build_signing_payload(
        method, path, [(IDEMPOTENCY_KEY_HEADER, token)], decode_body(body)
    )

    try:
        encoded = _jws.encode(
            payload,
            key_handle.key,
            algorithm=algorithm,
            headers=build_jws_headers(key_id, [IDEMPOTENCY_KEY_HEADER]),
        )
    except (PyJWTError, ValueError, TypeError) as exc:
        raise SigningFailure(f"JWS signing failed: {exc}") from exc

    return SignatureArtifact(idempotency_key=token, signature=_detach(encoded))


def parse_jws_header(signature: str) -> dict[str, Any]:
    """Decode the protected header of a detached compact JWS.

    Raises:
        SignatureVerificationError: If the value is not a detached compact JWS
    """
    parts = signature.split(".")
    if len(parts) != 3:
        raise SignatureVerificationError("Signature is not a compact JWS")
    if parts[1]:
        raise SignatureVerificationError("Signature payload is not detached")
    try:
        return _jws.get_unverified_header(signature)
    except PyJWTError as exc:
        raise SignatureVerificationError(f"Malformed JWS header: {exc}") from exc


def verify_signature(
    public_key: ec.EllipticCurvePublicKey,
    signature: str,
    method: str,
    path: str | None,
    idempotency_key: str,
    body: bytes,
) -> dict[str, Any]:
    """Verify a ``Tl-Signature`` value against request components.

    Returns:
        The decoded JWS header on success

    Raises:
        SignatureVerificationError: On any mismatch or malformed input
    """
    header = parse_jws_header(signature)

    try:
        algorithm = _resolve_algorithm(public_key.curve.name)
    except SigningFailure as exc:
        raise SignatureVerificationError(str(exc)) from exc
    if header.get("alg") != algorithm:
        raise SignatureVerificationError(
            f"JWS alg {header.get('alg')!r} does not match key curve ({algorithm})"
        )

    declared = [name.strip() for name in str(header.get("tl_headers", "")).split(",") if name]
    if IDEMPOTENCY_KEY_HEADER.lower() not in {name.lower() for name in declared}:
        raise SignatureVerificationError("Idempotency-Key is not covered by the signature")

    payload = build_signing_payload(
        method, path, [(IDEMPOTENCY_KEY_HEADER, idempotency_key)], decode_body(body)
    )
    header_b64, _, signature_b64 = signature.split(".")
    attached = f"{header_b64}.{base64url_encode(payload).decode('ascii')}.{signature_b64}"

    try:
        _jws.decode_complete(attached, key=public_key, algorithms=[algorithm])
    except PyJWTError as exc:
        raise SignatureVerificationError("Signature does not match request") from exc

    return header
