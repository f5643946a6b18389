"""
AEAD_AES_256_GCM
----------------

Decryption of the encrypted platform certificates returned by the V3
certificate list.

- 256-bit key: the UTF-8 bytes of the merchant's V3 key
- nonce and associated data: UTF-8 strings from the payload
- ciphertext: base64, GCM tag appended
"""

from __future__ import annotations

import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from paygate.protocol import fields
from paygate.protocol.errors import DecryptionError, UnsupportedAlgorithmError
from paygate.protocol.models import EncryptedCertificatePayload


class AEADAES256GCM:
    """
    AES-256-GCM keyed with the merchant V3 key.

    encrypt() exists for symmetry and test fixtures; the gateway only ever
    sends ciphertext this way.
    """

    def __init__(self, key: bytes | str):
        if isinstance(key, str):
            key = key.encode("utf-8")

        if len(key) != 32:
            raise DecryptionError("AEAD_AES_256_GCM key must be exactly 32 bytes")

        self._aesgcm = AESGCM(key)

    # --- Key Helpers -------------------------------------------------

    @staticmethod
    def generate_nonce() -> str:
        return base64.b64encode(os.urandom(9)).decode("ascii")  # 12 ASCII chars

    # --- Encrypt -----------------------------------------------------

    def encrypt(self, nonce: str, plaintext: bytes, associated_data: str = "") -> str:
        ciphertext = self._aesgcm.encrypt(
            nonce.encode("utf-8"),
            plaintext,
            associated_data.encode("utf-8") if associated_data else None,
        )
        return base64.b64encode(ciphertext).decode("ascii")

    # --- Decrypt -----------------------------------------------------

    def decrypt(self, nonce: str, ciphertext: str, associated_data: str = "") -> bytes:
        try:
            raw = base64.b64decode(ciphertext, validate=True)
        except (binascii.Error, ValueError):
            raise DecryptionError("Invalid base64 in AEAD ciphertext")

        try:
            return self._aesgcm.decrypt(
                nonce.encode("utf-8"),
                raw,
                associated_data.encode("utf-8") if associated_data else None,
            )
        except InvalidTag:
            raise DecryptionError("AEAD_AES_256_GCM authentication failed")
        except ValueError as e:
            raise DecryptionError(f"AEAD_AES_256_GCM decryption failed: {e}")


def decrypt_certificate(payload: EncryptedCertificatePayload, v3_key: str) -> bytes:
    """
    Decrypt one encrypted platform certificate into its PEM bytes.

    Raises:
        UnsupportedAlgorithmError: payload names another algorithm
        DecryptionError: key length, base64 or tag check failed
    """
    if payload.algorithm != fields.AEAD_AES_256_GCM:
        raise UnsupportedAlgorithmError(
            f"Unknown algorithm: {payload.algorithm}", algorithm=payload.algorithm
        )

    cipher = AEADAES256GCM(v3_key)
    return cipher.decrypt(payload.nonce, payload.ciphertext, payload.associated_data)
