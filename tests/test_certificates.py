"""
Tests for certificate parsing and client certificate loading.
"""

import base64
from datetime import datetime, timedelta, timezone

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.serialization import pkcs12

from paygate.protocol.errors import ConfigurationError
from paygate.security.certificates import (
    CertificateRecord,
    format_serial,
    load_client_certificate,
)


def _pkcs12(record: CertificateRecord, password: bytes) -> bytes:
    return pkcs12.serialize_key_and_certificates(
        name=b"merchant",
        key=record.private_key,
        cert=record.certificate,
        cas=None,
        encryption_algorithm=serialization.BestAvailableEncryption(password),
    )


class TestCertificateRecord:
    def test_serial_is_upper_hex(self, platform_certificate):
        assert platform_certificate.serial == "5157F09EFDC096DE15EBE81A47057A7232F1B8E1"
        assert format_serial(255) == "FF"

    def test_from_pem(self, platform_certificate):
        record = CertificateRecord.from_pem(platform_certificate.raw)
        assert record.serial == platform_certificate.serial
        assert record.raw == platform_certificate.raw
        assert not record.has_private_key
        assert record == platform_certificate

    def test_from_pem_with_key(self, client_certificate):
        record = CertificateRecord.from_pem(client_certificate.cert_pem(), key_pem=client_certificate.key_pem())
        assert record.has_private_key
        assert record.public_key.public_numbers() == client_certificate.public_key.public_numbers()

    def test_from_der(self, platform_certificate):
        der = platform_certificate.certificate.public_bytes(serialization.Encoding.DER)
        assert CertificateRecord.from_der(der).serial == platform_certificate.serial

    def test_validity_window(self, make_record, platform_key):
        expired = make_record(
            platform_key, 42, not_before=datetime.now(timezone.utc) - timedelta(days=30), days=10
        )
        assert not expired.is_valid_at()
        assert expired.is_valid_at(expired.not_valid_before + timedelta(days=1))

    def test_key_pem_requires_private_key(self, platform_certificate):
        with pytest.raises(ConfigurationError):
            platform_certificate.key_pem()

    def test_from_pkcs12(self, client_certificate):
        data = _pkcs12(client_certificate, b"10000100")
        record = CertificateRecord.from_pkcs12(data, "10000100")
        assert record.serial == client_certificate.serial
        assert record.has_private_key

    def test_from_pkcs12_wrong_password(self, client_certificate):
        data = _pkcs12(client_certificate, b"10000100")
        with pytest.raises(ConfigurationError):
            CertificateRecord.from_pkcs12(data, "wrong")


class TestLoadClientCertificate:
    def test_pkcs12_file(self, tmp_path, client_certificate):
        path = tmp_path / "apiclient_cert.p12"
        path.write_bytes(_pkcs12(client_certificate, b"10000100"))
        record = load_client_certificate(str(path), password="10000100")
        assert record.serial == client_certificate.serial

    def test_base64_pkcs12(self, client_certificate):
        content = base64.b64encode(_pkcs12(client_certificate, b"secret")).decode()
        record = load_client_certificate(content, password="secret")
        assert record.serial == client_certificate.serial

    def test_pem_pair(self, tmp_path, client_certificate):
        cert_path = tmp_path / "apiclient_cert.pem"
        key_path = tmp_path / "apiclient_key.pem"
        cert_path.write_bytes(client_certificate.cert_pem())
        key_path.write_bytes(client_certificate.key_pem())

        record = load_client_certificate(str(cert_path), private_key_path=str(key_path))
        assert record.serial == client_certificate.serial
        assert record.has_private_key

    def test_neither_file_nor_base64(self):
        with pytest.raises(ConfigurationError):
            load_client_certificate("/no/such/file.p12")
