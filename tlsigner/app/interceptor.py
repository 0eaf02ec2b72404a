"""Request interceptor attaching ``Tl-Signature`` and ``Idempotency-Key`` headers."""

from __future__ import annotations

import logging

from tlsigner.app.policy import Skip, SigningPolicy
from tlsigner.app.ports import OutboundRequest, SignerPort
from tlsigner.signing.jws import IDEMPOTENCY_KEY_HEADER, SIGNATURE_HEADER

logger = logging.getLogger(__name__)


class RequestInterceptor:
    """Sign outgoing requests according to the active :class:`SigningPolicy`.

    Failures never block transmission: any error is logged and the original
    request is returned unchanged.
    """

    def __init__(self, policy: SigningPolicy, signer: SignerPort) -> None:
        self._policy = policy
        self._signer = signer

    def on_request(self, request: OutboundRequest) -> OutboundRequest:
        try:
            return self._sign(request)
        except Exception as exc:  # noqa: BLE001 - requests must always go out
            logger.error(
                "Error signing %s %s: %s", request.method, request.path, exc, exc_info=True
            )
            return request

    def _sign(self, request: OutboundRequest) -> OutboundRequest:
        decision = self._policy.evaluate(request)
        if isinstance(decision, Skip):
            level = logging.WARNING if decision.reason.is_misconfiguration else logging.DEBUG
            logger.log(
                level,
                "Not signing %s %s: %s",
                request.method,
                request.path,
                decision.reason.message,
            )
            return request

        artifact = self._signer.sign(
            decision.key_id,
            decision.key_handle,
            request.method,
            request.path,
            request.body,
        )

        logger.debug(
            "Signed %s %s (kid=%s, idempotency_key=%s)",
            request.method,
            request.path,
            decision.key_id,
            artifact.idempotency_key,
        )
        return (
            request.with_removed_header(SIGNATURE_HEADER)
            .with_removed_header(IDEMPOTENCY_KEY_HEADER)
            .with_added_header(IDEMPOTENCY_KEY_HEADER, artifact.idempotency_key)
            .with_added_header(SIGNATURE_HEADER, artifact.signature)
        )
