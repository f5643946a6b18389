"""
JSON helpers for V3 bodies.

The request body is signed as the exact string sent, so serialization is
compact and keeps non-ASCII characters as-is.
"""

import json
from typing import Any, Union


def json_dumps(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


def json_loads(body: Union[str, bytes]) -> Any:
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    return json.loads(body)
