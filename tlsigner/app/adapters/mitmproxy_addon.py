"""mitmproxy addon that signs requests passing through the proxy.

Load with ``mitmdump -s tlsigner/app/adapters/mitmproxy_addon.py``; the addon
bootstraps from ``TLSIGNER_*`` environment settings.
"""

from __future__ import annotations

import logging

from mitmproxy import http

from tlsigner.app.ports import InterceptorPort, OutboundRequest

logger = logging.getLogger(__name__)


def request_from_flow(flow: http.HTTPFlow) -> OutboundRequest:
    """Snapshot a mitmproxy request as an :class:`OutboundRequest`.

    The body is taken as it goes on the wire, before any content-encoding is
    undone, so the signature covers the bytes the server receives.
    """
    request = flow.request
    return OutboundRequest.build(
        method=request.method,
        path=request.path,
        headers=list(request.headers.items(multi=True)),
        body=request.raw_content or b"",
    )


def apply_to_flow(flow: http.HTTPFlow, signed: OutboundRequest) -> None:
    """Replace the flow's headers with those of ``signed``."""
    flow.request.headers = http.Headers(
        [
            (name.encode("utf-8", "surrogateescape"), value.encode("utf-8", "surrogateescape"))
            for name, value in signed.headers
        ]
    )


class TlSignatureAddon:
    """Thin host adapter calling an :class:`InterceptorPort` for every request."""

    def __init__(self, interceptor: InterceptorPort | None = None) -> None:
        self._interceptor = interceptor

    def _resolve(self) -> InterceptorPort:
        if self._interceptor is None:
            from tlsigner.bootstrap import bootstrap_application

            self._interceptor = bootstrap_application().interceptor
        return self._interceptor

    def request(self, flow: http.HTTPFlow) -> None:
        original = request_from_flow(flow)
        try:
            signed = self._resolve().on_request(original)
        except Exception:
            logger.error(
                "Tl-Signature addon failed; forwarding request unchanged: %s %s",
                original.method,
                original.path,
                exc_info=True,
            )
            return
        if signed is original:
            return
        apply_to_flow(flow, signed)
        logger.info("Tl-Signature added: %s %s", signed.method, signed.path)


addons = [TlSignatureAddon()]
