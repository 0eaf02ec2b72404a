"""Pytest configuration and fixtures."""

from collections.abc import Generator
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from tlsigner.app.ports import Configuration
from tlsigner.config import Settings
from tlsigner.signing import PrivateKeyHandle, load_private_key


def _pkcs8_pem(key) -> str:
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("ascii")


def _sec1_pem(key) -> str:
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture(scope="session")
def p521_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP521R1())


@pytest.fixture(scope="session")
def p256_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def p384_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP384R1())


@pytest.fixture(scope="session")
def p521_pem(p521_key) -> str:
    """P-521 key in a PKCS#8 ``PRIVATE KEY`` block."""
    return _pkcs8_pem(p521_key)


@pytest.fixture(scope="session")
def p521_sec1_pem(p521_key) -> str:
    """Same P-521 key as a legacy ``EC PRIVATE KEY`` key-pair block."""
    return _sec1_pem(p521_key)


@pytest.fixture(scope="session")
def p256_pem(p256_key) -> str:
    return _pkcs8_pem(p256_key)


@pytest.fixture(scope="session")
def secp256k1_pem() -> str:
    """EC key on a curve without a JWS algorithm mapping."""
    return _pkcs8_pem(ec.generate_private_key(ec.SECP256K1()))


@pytest.fixture(scope="session")
def rsa_pem() -> str:
    return _pkcs8_pem(rsa.generate_private_key(public_exponent=65537, key_size=2048))


@pytest.fixture(scope="session")
def p521_public_pem(p521_key) -> str:
    return p521_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("ascii")


@pytest.fixture
def p521_handle(p521_pem: str) -> PrivateKeyHandle:
    return load_private_key(p521_pem)


@pytest.fixture
def signing_configuration(p521_pem: str) -> Configuration:
    return Configuration(enabled=True, key_id="kid-123", private_key_pem=p521_pem)


@pytest.fixture
def key_file(tmp_path: Path, p521_pem: str) -> Path:
    path = tmp_path / "signing-key.pem"
    path.write_text(p521_pem, encoding="utf-8")
    return path


@pytest.fixture
def override_settings(key_file: Path) -> Generator[Settings, None, None]:
    """Provide isolated tlsigner settings scoped to tests."""

    import tlsigner.config as config_module

    original_settings = getattr(config_module, "_settings", None)

    settings = config_module.Settings(
        _env_file=None,
        enabled=True,
        key_id="kid-123",
        private_key_path=key_file,
    )

    config_module._settings = settings

    try:
        yield settings
    finally:
        config_module._settings = original_settings
