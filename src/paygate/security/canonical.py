"""
Parameter canonicalization for the V2 (symmetric) protocol.

The canonical string is the exact byte sequence a V2 signature is computed
over, so signer and verifier must produce it identically:

    k1=v1&k2=v2&...&key=<secret>

- keys sorted ascending by code point
- entries with empty or missing values dropped
- reserved signature fields (sign, sign_type) dropped
"""

from __future__ import annotations

from typing import AbstractSet, Mapping, Optional
from urllib.parse import urlencode

from paygate.protocol import fields


def _signable_items(
    parameters: Mapping[str, Optional[str]],
    exclude: AbstractSet[str],
):
    for name in sorted(parameters):
        value = parameters[name]
        if value is None or value == "":
            continue
        if name in exclude:
            continue
        yield name, value


def canonicalize(
    parameters: Mapping[str, Optional[str]],
    secret: Optional[str] = None,
    exclude: AbstractSet[str] = fields.RESERVED_FIELDS,
) -> str:
    parts = [f"{name}={value}" for name, value in _signable_items(parameters, exclude)]
    if secret is not None:
        parts.append(f"{fields.KEY}={secret}")
    return "&".join(parts)


def build_query(parameters: Mapping[str, Optional[str]]) -> str:
    """URL-encoded query of the non-empty parameters, sorted by key."""
    items = [
        (name, value)
        for name, value in sorted(parameters.items())
        if value is not None and value != ""
    ]
    return urlencode(items)
