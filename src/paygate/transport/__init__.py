from .base import Transport
from .http import HTTPTransport

__all__ = ["Transport", "HTTPTransport"]
