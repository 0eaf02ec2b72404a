"""Configuration store port and the signing configuration record."""

from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Configuration(BaseModel):
    """Signing configuration supplied by the settings store.

    Replaced wholesale on every save; never mutated in place.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=False, description="Sign outgoing requests")
    key_id: str = Field(default="", description="Certificate id sent as the JWS kid")
    private_key_pem: str = Field(
        default="",
        repr=False,
        description="PEM-encoded EC private key (PKCS#8 or SEC1)",
    )

    @field_validator("key_id", "private_key_pem", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value

    @property
    def has_key_id(self) -> bool:
        return bool(self.key_id)

    @property
    def has_private_key(self) -> bool:
        return bool(self.private_key_pem)


class ConfigStorePort(Protocol):
    """Port interface for the external configuration store.

    Side effects: Adapter-defined (may read environment or files).
    """

    def load(self) -> Configuration:
        """Return the stored configuration."""
        ...

    def save(self, configuration: Configuration) -> None:
        """Replace the stored configuration."""
        ...
