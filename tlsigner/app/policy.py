"""Signing policy: holds the active configuration and gates each request."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum

from tlsigner.app.ports import Configuration, OutboundRequest
from tlsigner.signing.keys import PrivateKeyHandle, load_private_key

logger = logging.getLogger(__name__)


class SkipReason(str, Enum):
    """Why a request was left unsigned."""

    DISABLED = "disabled"
    MISSING_KEY_ID = "misconfigured-kid"
    MISSING_KEY = "misconfigured-key"

    @property
    def message(self) -> str:
        return _SKIP_MESSAGES[self]

    @property
    def is_misconfiguration(self) -> bool:
        return self is not SkipReason.DISABLED


_SKIP_MESSAGES = {
    SkipReason.DISABLED: "signing disabled",
    SkipReason.MISSING_KEY_ID: "certificate id not configured; skipping signing",
    SkipReason.MISSING_KEY: "private key not configured or invalid; skipping signing",
}


@dataclass(frozen=True, slots=True)
class Skip:
    reason: SkipReason


@dataclass(frozen=True, slots=True)
class SignWith:
    key_id: str
    key_handle: PrivateKeyHandle


SigningDecision = Skip | SignWith


@dataclass(frozen=True, slots=True)
class PolicySnapshot:
    """Configuration paired with the key parsed from it."""

    configuration: Configuration
    key_handle: PrivateKeyHandle | None


class SigningPolicy:
    """Single-writer, multi-reader holder of the signing configuration.

    Writers parse the key before taking the lock and then publish a complete
    :class:`PolicySnapshot` in one assignment. Readers grab the current
    snapshot once per decision, so a key id is never paired with a key from a
    different configuration.
    """

    def __init__(self, configuration: Configuration | None = None) -> None:
        self._write_lock = threading.Lock()
        self._snapshot = PolicySnapshot(configuration=Configuration(), key_handle=None)
        if configuration is not None:
            self.configure(configuration)

    @property
    def snapshot(self) -> PolicySnapshot:
        return self._snapshot

    @property
    def configuration(self) -> Configuration:
        return self._snapshot.configuration

    @property
    def key_handle(self) -> PrivateKeyHandle | None:
        return self._snapshot.key_handle

    def configure(self, configuration: Configuration) -> None:
        """Adopt ``configuration``, parsing its private key first.

        Raises:
            KeyFormatError: If the PEM cannot be parsed; the active
                configuration is left untouched
        """
        key_handle = None
        if configuration.has_private_key:
            key_handle = load_private_key(configuration.private_key_pem)

        snapshot = PolicySnapshot(configuration=configuration, key_handle=key_handle)
        with self._write_lock:
            self._snapshot = snapshot

        logger.info(
            "Signing configuration applied (enabled=%s, key_id=%r, key=%s)",
            configuration.enabled,
            configuration.key_id,
            "loaded" if key_handle is not None else "absent",
        )

    def evaluate(self, request: OutboundRequest) -> SigningDecision:  # noqa: ARG002
        """Decide whether ``request`` should be signed.

        The request is accepted for future per-request rules; the current
        policy depends only on configuration.
        """
        snapshot = self._snapshot
        configuration = snapshot.configuration

        if not configuration.enabled:
            return Skip(SkipReason.DISABLED)
        if not configuration.has_key_id:
            return Skip(SkipReason.MISSING_KEY_ID)
        if snapshot.key_handle is None:
            return Skip(SkipReason.MISSING_KEY)
        return SignWith(key_id=configuration.key_id, key_handle=snapshot.key_handle)
