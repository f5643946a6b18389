"""
Response verification for both protocol generations.

V2: the gateway signs successful envelopes with the merchant key; the
signature is recomputed over the response's own parameters.

V3: the gateway signs "{timestamp}\\n{nonce}\\n{body}\\n" with the private key
of a platform certificate named by the serial header. Platform certificates
are resolved lazily:

    cache hit  → verify
    cache miss → one unverified certificate list call
               → decrypt + insert-if-absent every unknown entry
               → look up again; still missing ⇒ CertificateUnavailableError

A serial moves from Unknown to Cached and stays there. Cached certificates
are not revalidated; one outside its validity window is logged and still used.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Mapping

from paygate.protocol import fields
from paygate.protocol.enums import SignType
from paygate.protocol.errors import (
    CertificateUnavailableError,
    ResponseParseError,
    SignatureVerificationError,
)
from paygate.protocol.models import PlatformCertificatesResponse, V3Reply
from paygate.security.aead import decrypt_certificate
from paygate.security.cache import CertificateCache
from paygate.security.certificates import CertificateRecord
from paygate.security.signature import (
    build_signature_source,
    verify_sha256_rsa,
    verify_with_key,
)

logger = logging.getLogger(__name__)

FetchCertificates = Callable[[], Awaitable[PlatformCertificatesResponse]]


def check_v2_response(parameters: Mapping[str, str], key: str, sign_type: SignType) -> None:
    """
    Verify the signature of a parsed V2 response.

    Failure envelopes (return_code other than SUCCESS) are not signed by the
    gateway and pass unchecked; they carry no business data.
    """
    return_code = parameters.get(fields.RETURN_CODE)
    if return_code is None:
        raise SignatureVerificationError("sign check fail: return_code is missing")

    if return_code != fields.SUCCESS:
        return

    signature = parameters.get(fields.SIGN)
    if not signature:
        raise SignatureVerificationError("sign check fail: sign is empty")

    if not verify_with_key(parameters, key, sign_type, signature):
        logger.warning("V2 response signature mismatch")
        raise SignatureVerificationError("sign check fail: check sign and data fail")


class ResponseVerifier:
    """
    Verifies V3 responses against the platform certificate cache.

    fetch_certificates performs the unverified certificate list call; it is
    injected so the verifier stays independent of the client pipeline.
    """

    def __init__(self, platform_certificates: CertificateCache, fetch_certificates: FetchCertificates):
        self._platform_certificates = platform_certificates
        self._fetch_certificates = fetch_certificates

    @property
    def platform_certificates(self) -> CertificateCache:
        return self._platform_certificates

    async def check_v3(self, reply: V3Reply, v3_key: str) -> None:
        if not reply.serial:
            raise SignatureVerificationError("sign check fail: serial is empty")

        if not reply.signature:
            raise SignatureVerificationError("sign check fail: signature is empty")

        certificate = await self.load_platform_certificate(reply.serial, v3_key)
        message = build_signature_source(reply.timestamp, reply.nonce, reply.body)

        if not verify_sha256_rsa(certificate.public_key, message, reply.signature):
            logger.warning("V3 response signature mismatch for platform certificate %s", reply.serial)
            raise SignatureVerificationError("sign check fail: check sign and data fail")

    async def load_platform_certificate(self, serial: str, v3_key: str) -> CertificateRecord:
        record = self._platform_certificates.try_get(serial)
        if record is None:
            await self.refresh(v3_key)
            record = self._platform_certificates.try_get(serial)

        if record is None:
            raise CertificateUnavailableError(
                f"Platform certificate {serial} is not in the downloaded list", serial=serial
            )

        if not record.is_valid_at():
            logger.warning(
                "Platform certificate %s is outside its validity window (%s - %s)",
                serial,
                record.not_valid_before.isoformat(),
                record.not_valid_after.isoformat(),
            )
        return record

    async def refresh(self, v3_key: str) -> int:
        """
        Download the platform certificate list and cache unknown entries.

        Returns:
            Number of certificates this call inserted
        """
        logger.info("Refreshing platform certificates")
        try:
            response = await self._fetch_certificates()
        except ResponseParseError as e:
            raise CertificateUnavailableError(f"Download certificates failed: {e}") from e

        if not response.is_success:
            detail = " ".join(p for p in (response.code, response.message) if p)
            raise CertificateUnavailableError(
                f"Download certificates failed: HTTP {response.status_code} {detail}".rstrip()
            )

        inserted = 0
        for entry in response.certificates:
            if entry.serial_no in self._platform_certificates:
                continue

            plaintext = decrypt_certificate(entry.encrypt_certificate, v3_key)
            record = CertificateRecord.from_pem(plaintext)
            if record.serial != entry.serial_no.upper():
                logger.warning(
                    "Listed serial %s differs from certificate serial %s",
                    entry.serial_no,
                    record.serial,
                )
            if self._platform_certificates.try_insert_if_absent(entry.serial_no, record):
                inserted += 1

        logger.info(
            "Platform certificate refresh done: %d listed, %d new",
            len(response.certificates),
            inserted,
        )
        return inserted
