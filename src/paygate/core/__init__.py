from .client import GatewayClient
from .factory import create_client_from_env
from .settings import GatewaySettings, get_settings
from .verifier import ResponseVerifier, check_v2_response

__all__ = [
    "GatewayClient",
    "create_client_from_env",
    "GatewaySettings",
    "get_settings",
    "ResponseVerifier",
    "check_v2_response",
]
