"""Tests for the mitmproxy host adapter."""

import gzip
import logging

import pytest

pytest.importorskip("mitmproxy")

from mitmproxy.test import tflow  # noqa: E402

from tlsigner.app import RequestInterceptor, SigningPolicy  # noqa: E402
from tlsigner.app.adapters import TlSignatureSigner  # noqa: E402
from tlsigner.app.adapters.mitmproxy_addon import TlSignatureAddon, request_from_flow  # noqa: E402
from tlsigner.app.ports import Configuration, OutboundRequest  # noqa: E402
from tlsigner.errors import SignatureVerificationError, SigningFailure  # noqa: E402
from tlsigner.signing import verify_signature  # noqa: E402


def _addon(configuration: Configuration) -> TlSignatureAddon:
    return TlSignatureAddon(RequestInterceptor(SigningPolicy(configuration), TlSignatureSigner()))


def test_addon_signs_flow(signing_configuration, p521_key):
    flow = tflow.tflow()
    flow.request.method = "POST"
    flow.request.path = "/payments"
    flow.request.content = b'{"amount":100}'
    flow.request.headers["Tl-Signature"] = "stale"

    _addon(signing_configuration).request(flow)

    assert flow.request.headers.get_all("Tl-Signature") != ["stale"]
    assert len(flow.request.headers.get_all("Tl-Signature")) == 1
    verify_signature(
        p521_key.public_key(),
        flow.request.headers["Tl-Signature"],
        "POST",
        "/payments",
        flow.request.headers["Idempotency-Key"],
        b'{"amount":100}',
    )


def test_addon_leaves_flow_when_disabled():
    flow = tflow.tflow()
    before = list(flow.request.headers.items(multi=True))

    _addon(Configuration(enabled=False)).request(flow)

    assert list(flow.request.headers.items(multi=True)) == before


def test_request_from_flow_keeps_duplicate_headers():
    flow = tflow.tflow()
    flow.request.headers.add("X-Dup", "1")
    flow.request.headers.add("X-Dup", "2")

    request = request_from_flow(flow)

    assert request.header_values("x-dup") == ["1", "2"]


def test_request_from_flow_uses_encoded_body():
    compressed = gzip.compress(b'{"amount":100}')
    flow = tflow.tflow()
    flow.request.headers["content-encoding"] = "gzip"
    flow.request.raw_content = compressed

    assert request_from_flow(flow).body == compressed


def test_addon_signs_body_as_sent(signing_configuration, p521_key):
    flow = tflow.tflow()
    flow.request.method = "POST"
    flow.request.path = "/payments"
    flow.request.headers["content-encoding"] = "gzip"
    flow.request.raw_content = gzip.compress(b'{"amount":100}')

    _addon(signing_configuration).request(flow)

    signature = flow.request.headers["Tl-Signature"]
    idempotency_key = flow.request.headers["Idempotency-Key"]
    verify_signature(
        p521_key.public_key(),
        signature,
        "POST",
        "/payments",
        idempotency_key,
        flow.request.raw_content,
    )
    with pytest.raises(SignatureVerificationError):
        verify_signature(
            p521_key.public_key(),
            signature,
            "POST",
            "/payments",
            idempotency_key,
            b'{"amount":100}',
        )


class _ExplodingInterceptor:
    def on_request(self, request: OutboundRequest) -> OutboundRequest:
        raise SigningFailure("boom")


def test_addon_forwards_flow_when_interceptor_raises(caplog):
    flow = tflow.tflow()
    before = list(flow.request.headers.items(multi=True))

    with caplog.at_level(logging.ERROR):
        TlSignatureAddon(_ExplodingInterceptor()).request(flow)

    assert list(flow.request.headers.items(multi=True)) == before
    assert "forwarding request unchanged" in caplog.text


def test_addon_forwards_flow_when_bootstrap_fails(monkeypatch, caplog):
    def broken_bootstrap():
        raise RuntimeError("settings unavailable")

    monkeypatch.setattr("tlsigner.bootstrap.bootstrap_application", broken_bootstrap)
    flow = tflow.tflow()
    before = list(flow.request.headers.items(multi=True))

    with caplog.at_level(logging.ERROR):
        TlSignatureAddon().request(flow)

    assert list(flow.request.headers.items(multi=True)) == before
    assert "settings unavailable" in caplog.text
