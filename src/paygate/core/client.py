"""
Gateway client: one logical call per method.

    V2: validate → sign → send → parse XML → check sign → result
    V3: validate → send → parse JSON → resolve platform cert → verify → result

Verification gates visibility: a response that fails verification is never
handed to the caller. try_* methods return a CallResult; the plain methods
unwrap it and raise.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, TypeVar

from paygate.core.verifier import ResponseVerifier, check_v2_response
from paygate.protocol import fields
from paygate.protocol.enums import CallStatus, SignType
from paygate.protocol.errors import (
    CertificateUnavailableError,
    ResponseParseError,
    SignatureVerificationError,
)
from paygate.protocol.models import (
    CallResult,
    GatewayCredentials,
    PlatformCertificatesResponse,
    V2Response,
    V3Response,
)
from paygate.protocol.requests import (
    V2Request,
    V2SdkRequest,
    V3Request,
    V3SdkRequest,
    platform_certificates_request,
)
from paygate.protocol.validators import require_fields, require_private_key
from paygate.security.cache import CertificateCache
from paygate.security.canonical import build_query
from paygate.security.signature import build_message, sign_sha256_rsa, sign_with_key
from paygate.transport.base import Transport
from paygate.transport.http import HTTPTransport
from paygate.utils.json import json_loads
from paygate.utils.nonce import new_nonce
from paygate.utils.xml import from_xml

logger = logging.getLogger(__name__)

R = TypeVar("R")

V2ResponseFactory = Callable[[Dict[str, str], str], R]
V3ResponseFactory = Callable[[Dict[str, Any], str, int], R]


class GatewayClient:
    """
    Client for both protocol generations of the payment gateway.

    The two certificate caches are injected or created per client; share
    them between clients to share downloaded platform certificates.

    Example:
        async with GatewayClient(credentials) as client:
            response = await client.execute_v2(V2Request(endpoint="/pay/orderquery", parameters={...}))
    """

    def __init__(
        self,
        credentials: GatewayCredentials,
        transport: Optional[Transport] = None,
        *,
        client_certificates: Optional[CertificateCache] = None,
        platform_certificates: Optional[CertificateCache] = None,
        base_url: str = fields.DEFAULT_BASE_URL,
        timeout: float = 10.0,
    ) -> None:
        self._credentials = credentials
        if client_certificates is None:
            client_certificates = CertificateCache("client")
        if platform_certificates is None:
            platform_certificates = CertificateCache("platform")
        self._client_certificates = client_certificates
        self._platform_certificates = platform_certificates
        if transport is None:
            transport = HTTPTransport(
                base_url=base_url,
                timeout=timeout,
                client_certificates=client_certificates,
            )
        self._transport = transport
        self._verifier = ResponseVerifier(self._platform_certificates, self._fetch_platform_certificates)

    @property
    def credentials(self) -> GatewayCredentials:
        return self._credentials

    @property
    def client_certificates(self) -> CertificateCache:
        return self._client_certificates

    @property
    def platform_certificates(self) -> CertificateCache:
        return self._platform_certificates

    def close(self) -> None:
        """Close the transport; removes any client key files it wrote."""
        self._transport.close()

    def __enter__(self) -> "GatewayClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    async def __aenter__(self) -> "GatewayClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ----------------------------------------------------------------------
    # V2
    # ----------------------------------------------------------------------
    async def execute_v2(
        self,
        request: V2Request,
        response_factory: V2ResponseFactory = V2Response.from_parameters,
    ):
        result = await self.try_execute_v2(request, response_factory)
        return result.unwrap()

    async def try_execute_v2(
        self,
        request: V2Request,
        response_factory: V2ResponseFactory = V2Response.from_parameters,
    ) -> CallResult:
        self._validate_v2(certificate=request.requires_certificate)

        parameters = self._sign_v2(request.get_parameters(), request.sign_type)

        certificate_serial = ""
        if request.requires_certificate:
            certificate_serial = self._register_client_certificate()

        try:
            reply = await self._transport.send_v2(request.endpoint, parameters, certificate_serial)
        except ResponseParseError as e:
            return CallResult.failure(CallStatus.PARSE_FAILED, e)

        try:
            response_parameters = from_xml(reply.body)
        except ValueError as e:
            return CallResult.failure(
                CallStatus.PARSE_FAILED,
                ResponseParseError(str(e), body=reply.body, status_code=reply.status_code),
            )

        try:
            response = _build(response_factory, reply.body, reply.status_code, response_parameters, reply.body)
        except ResponseParseError as e:
            return CallResult.failure(CallStatus.PARSE_FAILED, e)

        if request.needs_verification:
            try:
                check_v2_response(response_parameters, self._credentials.key, request.sign_type)
            except SignatureVerificationError as e:
                return CallResult.failure(CallStatus.VERIFICATION_FAILED, e)

        return CallResult.success(response)

    def page_url_v2(self, request: V2Request, response_factory: Callable[[str], R]) -> R:
        """
        Sign the request and build a redirect URL instead of calling it.

        response_factory turns the URL into the caller's response type.
        """
        self._validate_v2()
        parameters = self._sign_v2(request.get_parameters(), request.sign_type)

        separator = "&" if "?" in request.endpoint else "?"
        return response_factory(request.endpoint + separator + build_query(parameters))

    def sdk_execute_v2(self, request: V2SdkRequest) -> Dict[str, str]:
        """Sign client-side SDK parameters with the merchant key."""
        self._validate_v2()
        parameters = request.get_parameters()
        parameters[fields.SIGN] = sign_with_key(parameters, self._credentials.key, request.sign_type)
        return parameters

    def _validate_v2(self, certificate: bool = False) -> None:
        require_fields(self._credentials, "app_id", "mch_id", "key")
        if certificate:
            require_fields(self._credentials, "certificate")

    def _sign_v2(self, parameters: Dict[str, str], sign_type: SignType) -> Dict[str, str]:
        signed = dict(parameters)
        signed.setdefault(fields.APPID, self._credentials.app_id)
        signed.setdefault(fields.MCH_ID, self._credentials.mch_id)
        signed[fields.NONCE_STR] = new_nonce()
        signed[fields.SIGN_TYPE] = sign_type.value
        signed[fields.SIGN] = sign_with_key(signed, self._credentials.key, sign_type)
        return signed

    def _register_client_certificate(self) -> str:
        certificate = self._credentials.certificate
        self._client_certificates.try_insert_if_absent(certificate.serial, certificate)
        return certificate.serial

    # ----------------------------------------------------------------------
    # V3
    # ----------------------------------------------------------------------
    async def execute_v3(
        self,
        request: V3Request,
        response_factory: V3ResponseFactory = V3Response.from_json,
    ):
        result = await self.try_execute_v3(request, response_factory)
        return result.unwrap()

    async def try_execute_v3(
        self,
        request: V3Request,
        response_factory: V3ResponseFactory = V3Response.from_json,
    ) -> CallResult:
        require_fields(self._credentials, "mch_id", "certificate")
        if request.needs_verification:
            require_fields(self._credentials, "v3_key")

        try:
            reply = await self._transport.send_v3(request, self._credentials)
        except ResponseParseError as e:
            return CallResult.failure(CallStatus.PARSE_FAILED, e)

        try:
            data = _parse_json(reply.body, reply.status_code)
            response = _build(response_factory, reply.body, reply.status_code, data, reply.body, reply.status_code)
        except ResponseParseError as e:
            return CallResult.failure(CallStatus.PARSE_FAILED, e)

        if request.needs_verification:
            try:
                await self._verifier.check_v3(reply, self._credentials.v3_key)
            except SignatureVerificationError as e:
                return CallResult.failure(CallStatus.VERIFICATION_FAILED, e)
            except CertificateUnavailableError as e:
                return CallResult.failure(CallStatus.CERTIFICATE_UNAVAILABLE, e)

        return CallResult.success(response)

    def sdk_execute_v3(self, request: V3SdkRequest) -> Dict[str, str]:
        """
        Sign client-side payment parameters with the merchant private key.

        The message is the sign_fields values in order, each newline-terminated.
        """
        require_fields(self._credentials, "app_id", "mch_id")
        require_private_key(self._credentials)

        parameters = request.get_parameters()
        missing = [name for name in request.sign_fields if not parameters.get(name)]
        if missing:
            raise ValueError(f"Missing fields to sign: {', '.join(missing)}")

        message = build_message(*(parameters[name] for name in request.sign_fields))
        if request.sign_type_field:
            parameters[request.sign_type_field] = "RSA"
        parameters[request.signature_field] = sign_sha256_rsa(
            self._credentials.certificate.private_key, message
        )
        return parameters

    async def refresh_platform_certificates(self) -> int:
        """Download the certificate list now instead of on the first miss."""
        require_fields(self._credentials, "mch_id", "certificate", "v3_key")
        return await self._verifier.refresh(self._credentials.v3_key)

    async def _fetch_platform_certificates(self) -> PlatformCertificatesResponse:
        return await self.execute_v3(platform_certificates_request(), PlatformCertificatesResponse.from_json)


def _parse_json(body: str, status_code: int) -> Dict[str, Any]:
    if not body or not body.strip():
        return {}
    try:
        data = json_loads(body)
    except ValueError as e:
        raise ResponseParseError(f"Invalid JSON body: {e}", body=body, status_code=status_code) from e
    if not isinstance(data, dict):
        raise ResponseParseError("JSON body is not an object", body=body, status_code=status_code)
    return data


def _build(factory: Callable[..., R], body: str, status_code: int, *args) -> R:
    try:
        return factory(*args)
    except ResponseParseError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise ResponseParseError(
            f"Cannot build response: {e}", body=body, status_code=status_code
        ) from e
