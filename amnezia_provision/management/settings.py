from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from amnezia_provision.management.constants import (
    DEFAULT_APP_VERSION,
    DEFAULT_OS_VERSION,
    DEFAULT_TUNNEL_PROTOCOL,
    VPN_LINK_PREFIX,
)


class Settings(BaseSettings):

    os_version: str = DEFAULT_OS_VERSION
    app_version: str = DEFAULT_APP_VERSION

    request_timeout_seconds: float = 30.0

    link_prefix: str = VPN_LINK_PREFIX
    tunnel_protocol: str = DEFAULT_TUNNEL_PROTOCOL

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="AMNEZIA_PROVISION_",
        extra="ignore",
    )

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"request_timeout_seconds must be positive, got {v}")
        return v

    @field_validator("os_version", "app_version", "tunnel_protocol")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("value cannot be blank")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        normalized = v.upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return normalized


@lru_cache
def get_settings():
    return Settings()
