from .core.client import GatewayClient
from .core.factory import create_client_from_env
from .protocol import (
    AuthMode,
    CallResult,
    CallStatus,
    GatewayCredentials,
    HTTPMethod,
    SignType,
    V2Request,
    V2Response,
    V2SdkRequest,
    V3Request,
    V3Response,
    V3SdkRequest,
)
from .security.cache import CertificateCache
from .security.certificates import CertificateRecord
from .transport.base import Transport

__all__ = [
    "GatewayClient",
    "create_client_from_env",
    "AuthMode",
    "CallResult",
    "CallStatus",
    "GatewayCredentials",
    "HTTPMethod",
    "SignType",
    "V2Request",
    "V2Response",
    "V2SdkRequest",
    "V3Request",
    "V3Response",
    "V3SdkRequest",
    "CertificateCache",
    "CertificateRecord",
    "Transport",
]
