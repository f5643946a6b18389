from .enums import AuthMode, CallStatus, ErrorCode, HTTPMethod, SignType
from .errors import (
    PaygateError,
    ConfigurationError,
    TransportError,
    ResponseParseError,
    SignatureVerificationError,
    CertificateUnavailableError,
    UnsupportedAlgorithmError,
    DecryptionError,
)
from .models import (
    GatewayCredentials,
    EncryptedCertificatePayload,
    PlatformCertificateEntry,
    V2Reply,
    V3Reply,
    V2Response,
    V3Response,
    PlatformCertificatesResponse,
    CallResult,
)
from .requests import V2Request, V2SdkRequest, V3Request, V3SdkRequest, platform_certificates_request

__all__ = [
    "AuthMode",
    "CallStatus",
    "ErrorCode",
    "HTTPMethod",
    "SignType",
    "PaygateError",
    "ConfigurationError",
    "TransportError",
    "ResponseParseError",
    "SignatureVerificationError",
    "CertificateUnavailableError",
    "UnsupportedAlgorithmError",
    "DecryptionError",
    "GatewayCredentials",
    "EncryptedCertificatePayload",
    "PlatformCertificateEntry",
    "V2Reply",
    "V3Reply",
    "V2Response",
    "V3Response",
    "PlatformCertificatesResponse",
    "CallResult",
    "V2Request",
    "V2SdkRequest",
    "V3Request",
    "V3SdkRequest",
    "platform_certificates_request",
]
