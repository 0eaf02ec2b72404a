"""Application bootstrap wiring ports, adapters, and services."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tlsigner.app import (
    ApplyConfiguration,
    RequestInterceptor,
    SigningPolicy,
    ValidateKey,
)
from tlsigner.app.adapters import SettingsConfigStore, TlSignatureSigner
from tlsigner.app.ports import Configuration, ConfigStorePort, SignerPort
from tlsigner.config import Settings, get_settings
from tlsigner.errors import KeyFormatError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApplicationContainer:
    """Aggregates wired services and adapters for hosts and the CLI layer."""

    settings: Settings
    config_store: ConfigStorePort
    policy: SigningPolicy
    signer: SignerPort
    interceptor: RequestInterceptor
    apply_configuration: ApplyConfiguration
    validate_key: ValidateKey


def load_startup_configuration(policy: SigningPolicy, store: ConfigStorePort) -> None:
    """Seed ``policy`` from ``store`` without failing startup.

    A stored key that cannot be read or parsed is logged and dropped; the
    enabled flag and key id are kept so requests are skipped as misconfigured.
    """
    try:
        configuration = store.load()
    except (OSError, KeyFormatError) as exc:
        logger.error("Failed to read stored signing configuration: %s", exc)
        return

    try:
        policy.configure(configuration)
    except KeyFormatError as exc:
        logger.error("Failed to parse stored private key: %s", exc)
        policy.configure(
            Configuration(
                enabled=configuration.enabled,
                key_id=configuration.key_id,
            )
        )


def bootstrap_application(
    settings: Settings | None = None,
    *,
    config_store: ConfigStorePort | None = None,
) -> ApplicationContainer:
    """Instantiate adapters and services for host and CLI consumption."""

    active_settings = settings or get_settings()
    store = config_store or SettingsConfigStore(active_settings)

    policy = SigningPolicy()
    load_startup_configuration(policy, store)

    signer = TlSignatureSigner()
    interceptor = RequestInterceptor(policy, signer)

    logger.info("tlsigner loaded (enabled=%s)", policy.configuration.enabled)

    return ApplicationContainer(
        settings=active_settings,
        config_store=store,
        policy=policy,
        signer=signer,
        interceptor=interceptor,
        apply_configuration=ApplyConfiguration(policy=policy, store=store),
        validate_key=ValidateKey(),
    )
