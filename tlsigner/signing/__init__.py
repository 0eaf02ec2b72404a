"""Key loading and detached JWS signing primitives."""

from tlsigner.signing.jws import (
    IDEMPOTENCY_KEY_HEADER,
    SIGNATURE_HEADER,
    SignatureArtifact,
    build_signing_payload,
    parse_jws_header,
    sign_request,
    verify_signature,
)
from tlsigner.signing.keys import (
    PrivateKeyHandle,
    describe_key,
    load_private_key,
    load_public_key,
)

__all__ = [
    "IDEMPOTENCY_KEY_HEADER",
    "SIGNATURE_HEADER",
    "PrivateKeyHandle",
    "SignatureArtifact",
    "build_signing_payload",
    "describe_key",
    "load_private_key",
    "load_public_key",
    "parse_jws_header",
    "sign_request",
    "verify_signature",
]
