"""Application configuration via environment variables."""

from dataclasses import dataclass
from enum import Enum

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PROTECTED_PATH = "/hangfire"


class SecretMode(str, Enum):
    """How the configured secret is stored."""

    PLAINTEXT = "plaintext"
    HASHED = "hashed"


class GateSettings(BaseSettings):
    """Dashboard authentication settings (``Hangfire:*`` keys)."""

    model_config = SettingsConfigDict(
        env_prefix="HANGFIRE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    username: str | None = Field(
        default=None,
        description="Dashboard username. If unset, authentication is disabled.",
    )
    password: str | None = Field(
        default=None,
        description="Plaintext dashboard password",
    )
    password_phc: str | None = Field(
        default=None,
        description="Password hash record (preferred over a plaintext password)",
    )
    local_authentication_bypass_enabled: bool = Field(
        default=False,
        description="Skip authentication for requests from the local machine",
    )
    url: str = Field(
        default=DEFAULT_PROTECTED_PATH,
        description="Path prefix that requires authentication",
    )

    @field_validator("username", "password", "password_phc", mode="before")
    @classmethod
    def blank_as_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("url", mode="before")
    @classmethod
    def validate_url(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_PROTECTED_PATH
        if isinstance(value, str) and not value.startswith("/"):
            raise ValueError("url must start with '/'")
        return value

    @model_validator(mode="after")
    def single_secret_mode(self) -> "GateSettings":
        # One mode per deployment; never guess which one was meant
        if self.password is not None and self.password_phc is not None:
            raise ValueError("Set either password or password_phc, not both")
        return self


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DASHGUARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Root log level")

    gate: GateSettings = Field(default_factory=GateSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid:
            msg = f"Invalid log level: {v}. Must be one of {valid}"
            raise ValueError(msg)
        return upper


@dataclass(frozen=True)
class GateConfig:
    """Resolved gate configuration, built once and shared by all requests."""

    username: str | None = None
    credential_secret: str | None = None
    secret_mode: SecretMode = SecretMode.HASHED
    protected_path_prefix: str = DEFAULT_PROTECTED_PATH
    local_bypass_enabled: bool = False

    @property
    def auth_enabled(self) -> bool:
        return self.username is not None and self.credential_secret is not None

    @classmethod
    def from_settings(cls, settings: GateSettings) -> "GateConfig":
        """Build the gate snapshot from loaded settings."""
        if settings.password_phc is not None:
            secret, mode = settings.password_phc, SecretMode.HASHED
        else:
            secret, mode = settings.password, SecretMode.PLAINTEXT

        return cls(
            username=settings.username,
            credential_secret=secret,
            secret_mode=mode,
            protected_path_prefix=settings.url,
            local_bypass_enabled=settings.local_authentication_bypass_enabled,
        )


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
