from .json import json_dumps, json_loads
from .nonce import new_nonce, unix_timestamp
from .logging import configure_logging

__all__ = ["json_dumps", "json_loads", "new_nonce", "unix_timestamp", "configure_logging"]
