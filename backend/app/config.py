"""Application configuration using pydantic-settings."""

import warnings

from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientKey(BaseModel):
    """A single API client entry in the static key registry."""

    name: str
    active: bool = True


class ClientKeyRegistry(BaseModel):
    """Static API key -> client mapping, loaded from ``CLIENT_API_KEYS``.

    Expected JSON shape::

        {"keys": {"<api-key>": {"name": "Acme Surveyors", "active": true}}}
    """

    keys: dict[str, ClientKey] = {}

    def lookup(self, api_key: str) -> ClientKey | None:
        return self.keys.get(api_key)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Disrepair Overlap API"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"  # development, staging, production

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # API clients
    client_api_keys: ClientKeyRegistry = ClientKeyRegistry()
    frontend_header: str = "X-Disrepair-Frontend"

    # Rate limiting (requests per window)
    api_key_rate_limit: int = 30
    frontend_rate_limit: int = 60
    rate_limit_window_seconds: int = 3600

    # Validation
    reject_inverted_periods: bool = True

    # Frontend
    frontend_url: str = ""
    cors_origins: list[str] = ["*"]

    @model_validator(mode="after")
    def _ensure_frontend_in_cors(self) -> "Settings":
        """Ensure the configured frontend_url is in cors_origins unless all origins are allowed."""
        if self.frontend_url and "*" not in self.cors_origins and self.frontend_url not in self.cors_origins:
            self.cors_origins.append(self.frontend_url)
        return self

    @model_validator(mode="after")
    def _validate_client_keys(self) -> "Settings":
        """Warn when production runs without any configured API clients."""
        if self.environment == "production" and not self.client_api_keys.keys:
            warnings.warn(
                "CLIENT_API_KEYS is empty; every request without the frontend header will be rejected. "
                'Set it to a JSON object such as {"keys": {"<key>": {"name": "Client"}}}.',
                UserWarning,
                stacklevel=1,
            )
        return self


settings = Settings()
