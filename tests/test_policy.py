"""Tests for the signing policy gate and its configuration swaps."""

import threading

import pytest

from tlsigner.app import SignWith, SigningPolicy, Skip, SkipReason
from tlsigner.app.ports import Configuration, OutboundRequest
from tlsigner.errors import KeyFormatError

REQUEST = OutboundRequest.build("POST", "/payments", body=b"{}")


def test_default_policy_is_disabled():
    decision = SigningPolicy().evaluate(REQUEST)
    assert decision == Skip(SkipReason.DISABLED)


def test_signs_with_complete_configuration(signing_configuration):
    policy = SigningPolicy(signing_configuration)

    decision = policy.evaluate(REQUEST)

    assert isinstance(decision, SignWith)
    assert decision.key_id == "kid-123"
    assert decision.key_handle.curve_name == "secp521r1"


def test_evaluate_requires_a_request(signing_configuration):
    with pytest.raises(TypeError):
        SigningPolicy(signing_configuration).evaluate()  # type: ignore[call-arg]


@pytest.mark.parametrize(
    ("overrides", "reason"),
    [
        ({"enabled": False}, SkipReason.DISABLED),
        ({"key_id": ""}, SkipReason.MISSING_KEY_ID),
        ({"key_id": "   "}, SkipReason.MISSING_KEY_ID),
        ({"private_key_pem": ""}, SkipReason.MISSING_KEY),
    ],
)
def test_skip_reasons(signing_configuration, overrides, reason):
    configuration = signing_configuration.model_copy(update=overrides)
    # model_copy bypasses validators; rebuild to apply stripping.
    configuration = Configuration(**configuration.model_dump())

    decision = SigningPolicy(configuration).evaluate(REQUEST)

    assert decision == Skip(reason)


def test_disabled_wins_over_missing_fields():
    decision = SigningPolicy(Configuration(enabled=False)).evaluate(REQUEST)
    assert decision.reason is SkipReason.DISABLED
    assert not decision.reason.is_misconfiguration


def test_skip_reason_categories():
    assert SkipReason.MISSING_KEY_ID.is_misconfiguration
    assert SkipReason.MISSING_KEY.is_misconfiguration
    assert "certificate id" in SkipReason.MISSING_KEY_ID.message
    assert "private key" in SkipReason.MISSING_KEY.message


def test_invalid_key_leaves_previous_state(signing_configuration, rsa_pem):
    policy = SigningPolicy(signing_configuration)
    before = policy.snapshot

    with pytest.raises(KeyFormatError):
        policy.configure(
            Configuration(enabled=True, key_id="other-kid", private_key_pem=rsa_pem)
        )

    assert policy.snapshot is before
    assert policy.configuration.key_id == "kid-123"
    assert isinstance(policy.evaluate(REQUEST), SignWith)


def test_configure_without_key_clears_handle(signing_configuration):
    policy = SigningPolicy(signing_configuration)

    policy.configure(Configuration(enabled=True, key_id="kid-123"))

    assert policy.key_handle is None
    assert policy.evaluate(REQUEST) == Skip(SkipReason.MISSING_KEY)


def test_configuration_repr_hides_pem(signing_configuration):
    assert "BEGIN" not in repr(signing_configuration)


def test_configuration_is_frozen(signing_configuration):
    with pytest.raises(Exception):
        signing_configuration.enabled = False  # type: ignore[misc]


def test_readers_never_observe_torn_updates(p521_pem, p256_pem):
    """Concurrent readers see a kid and key from the same configuration."""
    config_a = Configuration(enabled=True, key_id="kid-a", private_key_pem=p521_pem)
    config_b = Configuration(enabled=True, key_id="kid-b", private_key_pem=p256_pem)
    expected = {"kid-a": "secp521r1", "kid-b": "secp256r1"}

    policy = SigningPolicy(config_a)
    stop = threading.Event()
    mismatches: list[tuple[str, str]] = []

    def reader() -> None:
        while not stop.is_set():
            decision = policy.evaluate(REQUEST)
            if not isinstance(decision, SignWith):
                mismatches.append(("skip", str(decision)))
                continue
            if expected[decision.key_id] != decision.key_handle.curve_name:
                mismatches.append((decision.key_id, decision.key_handle.curve_name))

    threads = [threading.Thread(target=reader) for _ in range(4)]
    for thread in threads:
        thread.start()
    try:
        for index in range(50):
            policy.configure(config_b if index % 2 == 0 else config_a)
    finally:
        stop.set()
        for thread in threads:
            thread.join()

    assert mismatches == []
