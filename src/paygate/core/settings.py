"""
Central configuration for paygate.

This module provides a single, typed configuration object that reads from
environment variables (12-factor style) using Pydantic Settings.

Usage:

    from paygate.core.settings import get_settings

    settings = get_settings()
    credentials = settings.to_credentials()

Environment variables:
    PAYGATE_APP_ID, PAYGATE_MCH_ID
    PAYGATE_KEY                       V2 symmetric secret
    PAYGATE_V3_KEY                    V3 AEAD secret (32 bytes)
    PAYGATE_CERTIFICATE               PKCS#12/PEM path or base64 PKCS#12
    PAYGATE_CERTIFICATE_PASSWORD      PKCS#12 password (defaults to mch id)
    PAYGATE_CERTIFICATE_PRIVATE_KEY   PEM key path for a PEM certificate
    PAYGATE_BASE_URL, PAYGATE_TIMEOUT, PAYGATE_LOG_LEVEL
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from paygate.protocol import fields
from paygate.protocol.models import GatewayCredentials
from paygate.security.certificates import load_client_certificate


class GatewaySettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PAYGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_id: str = Field(default="", description="Application id (appid).")
    mch_id: str = Field(default="", description="Merchant id (mch_id).")
    key: str = Field(default="", description="V2 symmetric signing secret.")
    v3_key: str = Field(default="", description="V3 key used to decrypt platform certificates.")

    certificate: str = Field(
        default="",
        description="Merchant certificate: PKCS#12 or PEM file path, or base64 PKCS#12.",
    )
    certificate_password: Optional[str] = Field(
        default=None,
        description="PKCS#12 password; the merchant id when unset.",
    )
    certificate_private_key: Optional[str] = Field(
        default=None,
        description="Path to the PEM private key when certificate is a PEM file.",
    )

    base_url: str = Field(default=fields.DEFAULT_BASE_URL, description="Gateway base URL.")
    timeout: float = Field(default=10.0, description="HTTP timeout in seconds.")
    log_level: str = Field(default="INFO", description="Log level (DEBUG/INFO/WARNING/ERROR).")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        v = (v or "INFO").upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"invalid log level: {v}")
        return v

    @field_validator("v3_key")
    @classmethod
    def _validate_v3_key(cls, v: str) -> str:
        if v and len(v.encode("utf-8")) != 32:
            raise ValueError("PAYGATE_V3_KEY must be exactly 32 bytes")
        return v

    def to_credentials(self) -> GatewayCredentials:
        certificate = None
        if self.certificate:
            certificate = load_client_certificate(
                self.certificate,
                password=self.certificate_password or self.mch_id,
                private_key_path=self.certificate_private_key,
            )

        return GatewayCredentials(
            app_id=self.app_id,
            mch_id=self.mch_id,
            key=self.key,
            v3_key=self.v3_key,
            certificate=certificate,
        )


@lru_cache(maxsize=1)
def get_settings() -> GatewaySettings:
    """
    Cached accessor for GatewaySettings.

    Usage:
        from paygate.core.settings import get_settings
        settings = get_settings()
    """
    return GatewaySettings()
