"""Command objects for applying and validating signing configuration.

Callers (CLI, host adapters, tests) use these instead of mutating the
policy or the configuration store directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tlsigner.app.policy import SigningPolicy
from tlsigner.app.ports import Configuration, ConfigStorePort
from tlsigner.errors import IncompleteConfigurationError
from tlsigner.signing.keys import PrivateKeyHandle, load_private_key

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApplyConfiguration:
    """Validate, activate and persist a new :class:`Configuration`.

    The policy is updated before the store; if key parsing fails neither
    changes. With ``require_complete`` an enabled configuration must carry
    both a key id and a private key.
    """

    policy: SigningPolicy
    store: ConfigStorePort | None = None
    require_complete: bool = True

    def __call__(self, configuration: Configuration) -> Configuration:
        if self.require_complete and configuration.enabled:
            if not configuration.has_key_id:
                raise IncompleteConfigurationError(
                    "Certificate ID (kid) is required when signing is enabled."
                )
            if not configuration.has_private_key:
                raise IncompleteConfigurationError(
                    "Private key is required when signing is enabled."
                )

        self.policy.configure(configuration)
        if self.store is not None:
            self.store.save(configuration)
        return configuration


@dataclass(slots=True)
class ValidateKey:
    """Parse a PEM key without touching any configuration."""

    def __call__(self, pem: str) -> PrivateKeyHandle:
        handle = load_private_key(pem.strip())
        logger.debug("Validated %r", handle)
        return handle
