"""
Data models shared by the signing and verification pipeline.

Models:
- GatewayCredentials: read-only merchant credentials
- EncryptedCertificatePayload / PlatformCertificateEntry: certificate list items
- V2Reply / V3Reply: opaque transport outputs
- V2Response / V3Response / PlatformCertificatesResponse: parsed responses
- CallResult: explicit outcome of one verified call
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Generic, List, Optional, TypeVar

from . import fields
from .enums import CallStatus
from .errors import PaygateError, ResponseParseError

if TYPE_CHECKING:
    from paygate.security.certificates import CertificateRecord


T = TypeVar("T")


@dataclass(frozen=True)
class GatewayCredentials:
    """
    Merchant credentials, supplied by configuration.

    key is the V2 symmetric secret; v3_key is the V3 AEAD secret used to
    decrypt platform certificates. certificate is the merchant certificate
    with its private key.
    """

    app_id: str = ""
    mch_id: str = ""
    key: str = field(default="", repr=False)
    v3_key: str = field(default="", repr=False)
    certificate: Optional["CertificateRecord"] = field(default=None, repr=False)

    @property
    def certificate_serial(self) -> str:
        return self.certificate.serial if self.certificate is not None else ""


# ===========================================================================
# Platform certificate list
# ===========================================================================


@dataclass(frozen=True)
class EncryptedCertificatePayload:
    algorithm: str
    nonce: str
    associated_data: str
    ciphertext: str  # base64, GCM tag appended

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EncryptedCertificatePayload":
        return cls(
            algorithm=data["algorithm"],
            nonce=data["nonce"],
            associated_data=data.get("associated_data") or "",
            ciphertext=data["ciphertext"],
        )


@dataclass(frozen=True)
class PlatformCertificateEntry:
    serial_no: str
    encrypt_certificate: EncryptedCertificatePayload
    effective_time: str = ""
    expire_time: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlatformCertificateEntry":
        return cls(
            serial_no=data["serial_no"],
            encrypt_certificate=EncryptedCertificatePayload.from_dict(data["encrypt_certificate"]),
            effective_time=data.get("effective_time", ""),
            expire_time=data.get("expire_time", ""),
        )


# ===========================================================================
# Transport outputs
# ===========================================================================


@dataclass(frozen=True)
class V2Reply:
    body: str
    status_code: int = 200


@dataclass(frozen=True)
class V3Reply:
    """Authentication headers and body of one V3 response."""

    serial: str
    timestamp: str
    nonce: str
    signature: str
    body: str
    status_code: int


# ===========================================================================
# Responses
# ===========================================================================


@dataclass
class V2Response:
    body: str
    parameters: Dict[str, str] = field(default_factory=dict)

    @property
    def return_code(self) -> Optional[str]:
        return self.parameters.get(fields.RETURN_CODE)

    @property
    def return_msg(self) -> Optional[str]:
        return self.parameters.get(fields.RETURN_MSG)

    @property
    def result_code(self) -> Optional[str]:
        return self.parameters.get(fields.RESULT_CODE)

    @property
    def is_success(self) -> bool:
        return self.return_code == fields.SUCCESS and self.result_code in (None, fields.SUCCESS)

    @classmethod
    def from_parameters(cls, parameters: Dict[str, str], body: str) -> "V2Response":
        return cls(body=body, parameters=dict(parameters))


@dataclass
class V3Response:
    body: str
    status_code: int
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def code(self) -> Optional[str]:
        return self.data.get("code")

    @property
    def message(self) -> Optional[str]:
        return self.data.get("message")

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @classmethod
    def from_json(cls, data: Dict[str, Any], body: str, status_code: int) -> "V3Response":
        return cls(body=body, status_code=status_code, data=data)


@dataclass
class PlatformCertificatesResponse(V3Response):
    certificates: List[PlatformCertificateEntry] = field(default_factory=list)

    @classmethod
    def from_json(
        cls, data: Dict[str, Any], body: str, status_code: int
    ) -> "PlatformCertificatesResponse":
        entries = data.get("data") or []
        if not isinstance(entries, list):
            raise ResponseParseError(
                "Certificate list 'data' is not an array", body=body, status_code=status_code
            )
        try:
            certificates = [PlatformCertificateEntry.from_dict(item) for item in entries]
        except (KeyError, TypeError) as e:
            raise ResponseParseError(
                f"Malformed certificate entry: {e}", body=body, status_code=status_code
            ) from e
        return cls(body=body, status_code=status_code, data=data, certificates=certificates)


# ===========================================================================
# Call outcome
# ===========================================================================


@dataclass
class CallResult(Generic[T]):
    """
    Outcome of one call.

    response is only populated for CallStatus.SUCCESS; a parse or
    verification failure carries the error and never the parsed payload.
    """

    status: CallStatus
    response: Optional[T] = None
    error: Optional[PaygateError] = None

    @property
    def ok(self) -> bool:
        return self.status == CallStatus.SUCCESS

    def unwrap(self) -> T:
        if self.status != CallStatus.SUCCESS:
            raise self.error or PaygateError(f"Call failed: {self.status.value}")
        return self.response  # type: ignore[return-value]

    @classmethod
    def success(cls, response: T) -> "CallResult[T]":
        return cls(status=CallStatus.SUCCESS, response=response)

    @classmethod
    def failure(cls, status: CallStatus, error: PaygateError) -> "CallResult[T]":
        return cls(status=status, error=error)
