from .models import GatewayCredentials
from .errors import ConfigurationError


def require_fields(credentials: GatewayCredentials, *names: str) -> None:
    """Raise ConfigurationError for the first empty credential field."""
    if credentials is None:
        raise ConfigurationError("credentials are required")
    for name in names:
        value = getattr(credentials, name)
        if value is None or value == "":
            raise ConfigurationError(f"{name} is required")


def require_private_key(credentials: GatewayCredentials) -> None:
    require_fields(credentials, "certificate")
    if not credentials.certificate.has_private_key:
        raise ConfigurationError("certificate must include its private key")
