"""dashgate configuration via pydantic-settings."""

import warnings
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_DEFAULTS = {
    "admin_api_key": "insecure-admin-key-change-me",
}


class DashgateSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DASHGATE_")

    environment: str = "development"

    # Database
    db_url: str = "sqlite+aiosqlite:///./data/dashgate.db"

    # API
    api_title: str = "dashgate"
    api_version: str = "0.1.0"
    admin_api_key: str = "insecure-admin-key-change-me"
    host: str = "0.0.0.0"
    port: int = 8080
    api_prefix: str = "/api"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Where tenants present their key on proxied requests
    api_key_header: str = "X-Api-Key"
    api_key_query_param: str = "apiKey"
    api_key_prefix: str = "dgk_"

    # Argon2id cost parameters (memory_cost is in KiB)
    hash_time_cost: int = 3
    hash_memory_cost: int = 65536
    hash_parallelism: int = 4

    log_level: str = "INFO"

    def validate_for_production(self) -> None:
        """Raise if insecure defaults are used in non-development environments."""
        insecure_fields = [
            field
            for field, default in _INSECURE_DEFAULTS.items()
            if getattr(self, field) == default
        ]

        if self.environment != "development" and insecure_fields:
            env_vars = ", ".join(f"DASHGATE_{f.upper()}" for f in insecure_fields)
            raise RuntimeError(
                f"Insecure default values detected in '{self.environment}' environment. "
                f"Set these environment variables to secure values: {env_vars}. "
                "Generate secrets with: python -c \"import secrets; print(secrets.token_urlsafe(48))\""
            )

        if insecure_fields:
            warnings.warn(
                "Using insecure default admin key, set DASHGATE_ADMIN_API_KEY for production",
                UserWarning,
                stacklevel=2,
            )


@lru_cache
def get_settings() -> DashgateSettings:
    settings = DashgateSettings()
    settings.validate_for_production()
    return settings
