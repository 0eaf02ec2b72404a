"""Signer port interface for request signatures."""

from typing import Protocol

from tlsigner.signing.jws import SignatureArtifact
from tlsigner.signing.keys import PrivateKeyHandle


class SignerPort(Protocol):
    """Port interface for producing request signatures.

    Side effects: None (pure computation).
    """

    def sign(
        self,
        key_id: str,
        key_handle: PrivateKeyHandle,
        method: str,
        path: str,
        body: bytes,
    ) -> SignatureArtifact:
        """Sign a request.

        Args:
            key_id: Key identifier placed in the JWS ``kid`` header
            key_handle: Private key used for signing
            method: HTTP method
            path: Request path
            body: Raw request body

        Returns:
            Fresh idempotency key and detached signature
        """
        ...
