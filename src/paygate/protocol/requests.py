"""
Request variants for both protocol generations.

Each variant exposes exactly what the pipeline needs: its parameters, whether
the response must be verified, and the endpoint. Business endpoints build
these with their own fields; the pipeline never looks inside them.

    V2Request      XML call, optionally bound to the client certificate
    V2SdkRequest   parameters signed locally for a client-side SDK
    V3Request      JSON GET/POST call
    V3SdkRequest   parameters signed locally with the merchant private key
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from . import fields
from .enums import AuthMode, HTTPMethod, SignType
from paygate.utils.json import json_dumps


def _present(parameters: Dict[str, Optional[str]]) -> Dict[str, str]:
    return {name: value for name, value in parameters.items() if value is not None}


@dataclass
class V2Request:
    endpoint: str
    parameters: Dict[str, Optional[str]] = field(default_factory=dict)
    sign_type: SignType = SignType.MD5
    auth_mode: AuthMode = AuthMode.PLAIN
    needs_verification: bool = True

    @property
    def requires_certificate(self) -> bool:
        return self.auth_mode == AuthMode.CERTIFICATE

    def get_parameters(self) -> Dict[str, str]:
        return _present(self.parameters)


@dataclass
class V2SdkRequest:
    parameters: Dict[str, Optional[str]] = field(default_factory=dict)
    sign_type: SignType = SignType.MD5

    def get_parameters(self) -> Dict[str, str]:
        return _present(self.parameters)


@dataclass
class V3Request:
    method: HTTPMethod
    endpoint: str
    body: Optional[Dict[str, Any]] = None
    needs_verification: bool = True

    def __post_init__(self) -> None:
        self.method = HTTPMethod(self.method)
        if self.method == HTTPMethod.GET and self.body is not None:
            raise ValueError("GET requests carry no body")

    def get_parameters(self) -> Dict[str, Any]:
        return dict(self.body or {})

    def serialize_body(self) -> str:
        if self.body is None:
            return ""
        return json_dumps(self.body)


@dataclass
class V3SdkRequest:
    """
    Client-side payment parameters signed with the merchant private key.

    sign_fields lists, in order, the parameters that make up the signed
    message; each value is newline-terminated.
    """

    parameters: Dict[str, str] = field(default_factory=dict)
    sign_fields: List[str] = field(default_factory=list)
    signature_field: str = "paySign"
    sign_type_field: Optional[str] = "signType"

    def get_parameters(self) -> Dict[str, str]:
        return dict(self.parameters)


def platform_certificates_request() -> V3Request:
    """Unverified certificate list call used to refill the platform cache."""
    return V3Request(
        method=HTTPMethod.GET,
        endpoint=fields.CERTIFICATES_PATH,
        needs_verification=False,
    )
