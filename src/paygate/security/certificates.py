"""
Parsed X.509 certificates keyed by serial number.

A CertificateRecord is created once from raw bytes and never changes:

    # Platform certificate decrypted from the certificate list
    record = CertificateRecord.from_pem(plaintext)

    # Merchant (client) certificate with its private key
    record = CertificateRecord.from_pkcs12(p12_bytes, password=mch_id)
    record = CertificateRecord.from_pem(cert_pem, key_pem=key_pem)

Client records carry a private key, used for mutual TLS and for V3 request
signing. Platform records only carry public key material.
"""

from __future__ import annotations

import base64
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Union

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from cryptography.hazmat.primitives.serialization import pkcs12

from paygate.protocol.errors import ConfigurationError


def format_serial(serial_number: int) -> str:
    """Render an X.509 serial number the way the gateway reports it."""
    return format(serial_number, "X")


@dataclass(frozen=True)
class CertificateRecord:
    serial: str
    certificate: x509.Certificate
    raw: bytes
    private_key: Optional[RSAPrivateKey] = field(default=None, repr=False, compare=False)

    @property
    def not_valid_before(self) -> datetime:
        return self.certificate.not_valid_before_utc

    @property
    def not_valid_after(self) -> datetime:
        return self.certificate.not_valid_after_utc

    @property
    def public_key(self) -> RSAPublicKey:
        key = self.certificate.public_key()
        if not isinstance(key, RSAPublicKey):
            raise TypeError(f"Expected RSA public key, got {type(key).__name__}")
        return key

    @property
    def has_private_key(self) -> bool:
        return self.private_key is not None

    def is_valid_at(self, moment: Optional[datetime] = None) -> bool:
        moment = moment or datetime.now(timezone.utc)
        return self.not_valid_before <= moment <= self.not_valid_after

    def cert_pem(self) -> bytes:
        return self.certificate.public_bytes(serialization.Encoding.PEM)

    def key_pem(self) -> bytes:
        if self.private_key is None:
            raise ConfigurationError(f"Certificate {self.serial} has no private key")
        return self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

    # --- Constructors ------------------------------------------------

    @classmethod
    def from_certificate(
        cls,
        certificate: x509.Certificate,
        raw: bytes,
        private_key: Optional[RSAPrivateKey] = None,
    ) -> "CertificateRecord":
        return cls(
            serial=format_serial(certificate.serial_number),
            certificate=certificate,
            raw=raw,
            private_key=private_key,
        )

    @classmethod
    def from_pem(
        cls,
        cert_pem: Union[bytes, str],
        key_pem: Union[bytes, str, None] = None,
        password: Optional[bytes] = None,
    ) -> "CertificateRecord":
        if isinstance(cert_pem, str):
            cert_pem = cert_pem.encode("utf-8")
        certificate = x509.load_pem_x509_certificate(cert_pem)

        private_key = None
        if key_pem is not None:
            if isinstance(key_pem, str):
                key_pem = key_pem.encode("utf-8")
            private_key = _require_rsa(
                serialization.load_pem_private_key(key_pem, password=password)
            )
        return cls.from_certificate(certificate, cert_pem, private_key)

    @classmethod
    def from_der(cls, cert_der: bytes) -> "CertificateRecord":
        return cls.from_certificate(x509.load_der_x509_certificate(cert_der), cert_der)

    @classmethod
    def from_pkcs12(cls, data: bytes, password: Optional[str] = None) -> "CertificateRecord":
        secret = password.encode("utf-8") if password else None
        try:
            private_key, certificate, _ = pkcs12.load_key_and_certificates(data, secret)
        except ValueError as e:
            raise ConfigurationError(f"Cannot load PKCS#12 certificate: {e}") from e
        if certificate is None:
            raise ConfigurationError("PKCS#12 bundle contains no certificate")
        return cls.from_certificate(certificate, data, _require_rsa(private_key))


def _require_rsa(key) -> Optional[RSAPrivateKey]:
    if key is None:
        return None
    if not isinstance(key, RSAPrivateKey):
        raise ConfigurationError(f"Expected RSA private key, got {type(key).__name__}")
    return key


def load_client_certificate(
    certificate: str,
    password: Optional[str] = None,
    private_key_path: Optional[str] = None,
) -> CertificateRecord:
    """
    Load the merchant certificate from configuration.

    `certificate` is a file path (PKCS#12 or PEM) or base64-encoded PKCS#12
    content. A PEM certificate needs its key in `private_key_path`.
    """
    if os.path.isfile(certificate):
        with open(certificate, "rb") as f:
            data = f.read()
    else:
        try:
            data = base64.b64decode(certificate, validate=True)
        except ValueError as e:
            raise ConfigurationError(
                "certificate is neither a readable file nor base64 content"
            ) from e

    if data.lstrip().startswith(b"-----BEGIN"):
        key_pem = None
        if private_key_path:
            with open(private_key_path, "rb") as f:
                key_pem = f.read()
        return CertificateRecord.from_pem(data, key_pem=key_pem)

    return CertificateRecord.from_pkcs12(data, password)
