from __future__ import annotations

from typing import Optional

from paygate.core.client import GatewayClient
from paygate.core.settings import GatewaySettings, get_settings
from paygate.security.cache import CertificateCache
from paygate.transport.http import HTTPTransport
from paygate.utils.logging import configure_logging


def create_client_from_env(
    settings: Optional[GatewaySettings] = None,
    *,
    platform_certificates: Optional[CertificateCache] = None,
) -> GatewayClient:
    """
    Factory configuring a GatewayClient from PAYGATE_* environment variables.

    Pass platform_certificates to share downloaded platform certificates
    between clients.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    client_certificates = CertificateCache("client")
    transport = HTTPTransport(
        base_url=settings.base_url,
        timeout=settings.timeout,
        client_certificates=client_certificates,
    )
    return GatewayClient(
        settings.to_credentials(),
        transport,
        client_certificates=client_certificates,
        platform_certificates=platform_certificates,
    )
