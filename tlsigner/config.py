"""Configuration management with Pydantic settings."""

from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from tlsigner.app.ports.config_store import Configuration
from tlsigner.errors import KeyFormatError


class Settings(BaseSettings):
    """tlsigner configuration settings.

    Precedence: CLI flag > environment variable > .env file > defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="TLSIGNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    enabled: bool = Field(
        default=False,
        description="Attach Tl-Signature headers to outgoing requests",
    )

    key_id: str = Field(
        default="",
        description="Certificate id (kid) registered with the verifying service",
    )

    private_key: SecretStr | None = Field(
        default=None,
        description="Inline PEM-encoded EC private key",
    )

    private_key_path: Path | None = Field(
        default=None,
        description="Path to a PEM-encoded EC private key (used when private_key is unset)",
    )

    log_level: str = Field(
        default="WARNING",
        description="Log level used by the CLI",
    )

    def get_private_key_pem(self) -> str:
        """Return the configured PEM text, or an empty string when none is set.

        Raises:
            FileNotFoundError: If ``private_key_path`` points to a missing file
            KeyFormatError: If the key file is not UTF-8 text (e.g. a DER key)
        """
        if self.private_key is not None:
            inline = self.private_key.get_secret_value().strip()
            if inline:
                return inline

        if self.private_key_path is not None:
            path = self.private_key_path.expanduser()
            if not path.exists():
                raise FileNotFoundError(f"Private key file not found: {path}")
            try:
                return path.read_text(encoding="utf-8")
            except UnicodeDecodeError as exc:
                raise KeyFormatError(f"Private key file is not PEM text: {path}") from exc

        return ""

    def to_configuration(self) -> Configuration:
        """Build the signing :class:`Configuration` described by these settings."""
        return Configuration(
            enabled=self.enabled,
            key_id=self.key_id,
            private_key_pem=self.get_private_key_pem(),
        )


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance (useful for testing)."""
    global _settings
    _settings = settings
