"""Application configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from pydantic import Field
from pydantic_settings import BaseSettings

from crypto_ledger.constants import FIAT_SYMBOL
from crypto_ledger.models import OverdraftPolicy

DEFAULT_TIMEZONE = "UTC"


class AppSettings(BaseSettings):
    """Configuration options for the crypto-ledger service."""

    app_name: str = Field(default="Crypto Ledger Portfolio Engine")
    api_prefix: str = Field(default="/portfolio")
    timezone: str = Field(
        default=DEFAULT_TIMEZONE,
        description="IANA zone used to decide which calendar day is 'today' for history series.",
    )
    base_currency: str = Field(
        default=FIAT_SYMBOL,
        description="Fiat symbol whose use as payment never debits a held asset.",
    )
    overdraft_policy: OverdraftPolicy = Field(
        default=OverdraftPolicy.ALLOW,
        description="allow: keep legacy behaviour, clamp: never go negative, reject: fail the request.",
    )
    log_level: str = Field(default="INFO")

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="crypto-ledger")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_insecure: bool = Field(default=True)
    telemetry_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    class Config:
        env_prefix = "LEDGER_"
        env_file = ".env"
        env_file_encoding = "utf-8"

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitized dict for logging purposes."""

        payload = self.model_dump(mode="json")
        endpoint = payload.get("telemetry_otlp_endpoint")
        if endpoint:
            parts = urlsplit(endpoint)
            if parts.password:
                netloc = f"{parts.username}:***@{parts.hostname}"
                if parts.port:
                    netloc = f"{netloc}:{parts.port}"
                payload["telemetry_otlp_endpoint"] = urlunsplit(parts._replace(netloc=netloc))
        return payload


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """Return cached application settings with optional overrides."""

    if overrides:
        return AppSettings(**overrides)
    return AppSettings()
