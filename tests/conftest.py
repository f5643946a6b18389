"""
Shared fixtures: RSA keys, self-signed certificates, merchant credentials and
an in-memory gateway standing in for the network.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from paygate.protocol import fields
from paygate.protocol.models import GatewayCredentials, V2Reply, V3Reply
from paygate.protocol.requests import V3Request
from paygate.security.aead import AEADAES256GCM
from paygate.security.certificates import CertificateRecord
from paygate.security.signature import build_signature_source, sign_sha256_rsa
from paygate.transport.base import Transport
from paygate.utils.json import json_dumps


V2_KEY = "192006250b4c09247ec02edce69f6a2d"
V3_KEY = "0123456789abcdef0123456789abcdef"
APP_ID = "wxd930ea5d5a258f4f"
MCH_ID = "10000100"

PLATFORM_SERIAL_NUMBER = 0x5157F09EFDC096DE15EBE81A47057A7232F1B8E1
CLIENT_SERIAL_NUMBER = 0x444F4864EA9B34415B2F3B2E8A1C4D6C1234ABCD


def _certificate(private_key, serial_number: int, common_name: str, not_before=None, days=365):
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    not_before = not_before or datetime.now(timezone.utc) - timedelta(days=1)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(serial_number)
        .not_valid_before(not_before)
        .not_valid_after(not_before + timedelta(days=days))
        .sign(private_key, hashes.SHA256())
    )


def _record(private_key, serial_number: int, common_name: str, with_key: bool, **kwargs):
    certificate = _certificate(private_key, serial_number, common_name, **kwargs)
    pem = certificate.public_bytes(serialization.Encoding.PEM)
    return CertificateRecord.from_certificate(
        certificate, pem, private_key if with_key else None
    )


# ===========================================================================
# Keys and certificates
# ===========================================================================


@pytest.fixture(scope="session")
def client_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def platform_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def client_certificate(client_key) -> CertificateRecord:
    return _record(client_key, CLIENT_SERIAL_NUMBER, "merchant", with_key=True)


@pytest.fixture(scope="session")
def platform_certificate(platform_key) -> CertificateRecord:
    return _record(platform_key, PLATFORM_SERIAL_NUMBER, "platform", with_key=False)


@pytest.fixture
def make_record() -> Callable[..., CertificateRecord]:
    """Factory for extra self-signed records: make_record(key, serial_number, ...)."""
    def factory(private_key, serial_number: int, common_name: str = "test", with_key=False, **kwargs):
        return _record(private_key, serial_number, common_name, with_key, **kwargs)

    return factory


@pytest.fixture
def credentials(client_certificate) -> GatewayCredentials:
    return GatewayCredentials(
        app_id=APP_ID,
        mch_id=MCH_ID,
        key=V2_KEY,
        v3_key=V3_KEY,
        certificate=client_certificate,
    )


# ===========================================================================
# In-memory gateway
# ===========================================================================


class FakeGateway(Transport):
    """
    Transport double that answers like the gateway.

    V2: returns v2_body for every call.
    V3: serves the encrypted platform certificate list on /v3/certificates
    and v3_responses[endpoint] elsewhere, signing every body with
    signing_key under signing_serial. tamper, when set, rewrites business
    bodies after signing.
    """

    def __init__(self, platform_key, platform_certificate: CertificateRecord):
        self.v2_body = ""
        self.v2_status = 200
        self.v2_calls: List[Tuple[str, Dict[str, str], str]] = []
        self.v3_calls: List[V3Request] = []
        self.v3_responses: Dict[str, Tuple[int, str]] = {}

        self.signing_key = platform_key
        self.signing_serial = platform_certificate.serial
        self.listed: List[Tuple[str, bytes]] = [(platform_certificate.serial, platform_certificate.raw)]
        self.list_algorithm = fields.AEAD_AES_256_GCM
        self.list_status = 200
        self.v3_key = V3_KEY

        self.tamper: Optional[Callable[[str], str]] = None
        self.omit_headers = False
        self.closed = False

    @property
    def certificate_list_calls(self) -> int:
        return sum(1 for r in self.v3_calls if r.endpoint == fields.CERTIFICATES_PATH)

    async def send_v2(self, url, parameters, certificate_serial=""):
        self.v2_calls.append((url, dict(parameters), certificate_serial))
        await asyncio.sleep(0)
        return V2Reply(body=self.v2_body, status_code=self.v2_status)

    async def send_v3(self, request, credentials):
        self.v3_calls.append(request)
        await asyncio.sleep(0)

        if request.endpoint == fields.CERTIFICATES_PATH:
            status, body = self.list_status, self.certificate_list_body()
        else:
            status, body = self.v3_responses.get(request.endpoint, (200, '{"ok":true}'))

        timestamp, nonce = "1700000000", "n1"
        signature = sign_sha256_rsa(self.signing_key, build_signature_source(timestamp, nonce, body))
        if self.tamper is not None and request.endpoint != fields.CERTIFICATES_PATH:
            body = self.tamper(body)

        if self.omit_headers:
            return V3Reply("", "", "", "", body, status)
        return V3Reply(self.signing_serial, timestamp, nonce, signature, body, status)

    def certificate_list_body(self) -> str:
        cipher = AEADAES256GCM(self.v3_key)
        data = []
        for serial, pem in self.listed:
            nonce = AEADAES256GCM.generate_nonce()
            data.append({
                "serial_no": serial,
                "effective_time": "2024-01-01T00:00:00+08:00",
                "expire_time": "2029-01-01T00:00:00+08:00",
                "encrypt_certificate": {
                    "algorithm": self.list_algorithm,
                    "nonce": nonce,
                    "associated_data": "certificate",
                    "ciphertext": cipher.encrypt(nonce, pem, "certificate"),
                },
            })
        return json_dumps({"data": data})

    def close(self):
        self.closed = True


@pytest.fixture
def gateway(platform_key, platform_certificate) -> FakeGateway:
    return FakeGateway(platform_key, platform_certificate)
