"""JWS-backed signer adapter."""

from __future__ import annotations

from tlsigner.app.ports import SignerPort
from tlsigner.signing.jws import SignatureArtifact, sign_request
from tlsigner.signing.keys import PrivateKeyHandle


class TlSignatureSigner(SignerPort):
    """Produce TrueLayer-style detached JWS signatures."""

    def sign(
        self,
        key_id: str,
        key_handle: PrivateKeyHandle,
        method: str,
        path: str,
        body: bytes,
    ) -> SignatureArtifact:
        return sign_request(key_id, key_handle, method, path, body)
