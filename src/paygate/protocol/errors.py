from typing import Optional
from .enums import ErrorCode


class PaygateError(Exception):
    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.code = code or ErrorCode.INTERNAL_ERROR


class ConfigurationError(PaygateError):
    """Raised when a required credential field is missing."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR)


class TransportError(PaygateError):
    """Raised when the transport fails to deliver a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, ErrorCode.TRANSPORT_ERROR)
        self.status_code = status_code


class ResponseParseError(PaygateError):
    """Raised when a response body does not have the expected shape."""

    def __init__(self, message: str, body: str = "", status_code: Optional[int] = None):
        super().__init__(message, ErrorCode.RESPONSE_PARSE_ERROR)
        self.body = body
        self.status_code = status_code


class SignatureVerificationError(PaygateError):
    """Raised when a response signature is missing or does not match."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.SIGNATURE_ERROR)


class CertificateUnavailableError(PaygateError):
    """Raised when a platform certificate is still unknown after a refresh."""

    def __init__(self, message: str, serial: str = ""):
        super().__init__(message, ErrorCode.CERTIFICATE_UNAVAILABLE)
        self.serial = serial


class UnsupportedAlgorithmError(PaygateError):
    """Raised when an encrypted certificate names an unknown algorithm."""

    def __init__(self, message: str, algorithm: str = ""):
        super().__init__(message, ErrorCode.UNSUPPORTED_ALGORITHM)
        self.algorithm = algorithm


class DecryptionError(PaygateError):
    """Raised when an AEAD payload cannot be decrypted."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.DECRYPTION_ERROR)
