from enum import Enum


class ErrorCode(str, Enum):
    CONFIGURATION_ERROR = "configuration_error"
    TRANSPORT_ERROR = "transport_error"
    RESPONSE_PARSE_ERROR = "response_parse_error"
    SIGNATURE_ERROR = "signature_error"
    CERTIFICATE_UNAVAILABLE = "certificate_unavailable"
    UNSUPPORTED_ALGORITHM = "unsupported_algorithm"
    DECRYPTION_ERROR = "decryption_error"
    INTERNAL_ERROR = "internal_error"


class SignType(str, Enum):
    MD5 = "MD5"
    HMAC_SHA256 = "HMAC-SHA256"


class AuthMode(str, Enum):
    PLAIN = "plain"
    CERTIFICATE = "certificate"


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"


class CallStatus(str, Enum):
    SUCCESS = "success"
    PARSE_FAILED = "parse_failed"
    VERIFICATION_FAILED = "verification_failed"
    CERTIFICATE_UNAVAILABLE = "certificate_unavailable"
