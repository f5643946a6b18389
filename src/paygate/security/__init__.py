"""
paygate security module

- canonical: V2 canonical signing string
- signature: V2 digests, V3 SHA256-with-RSA signing and verification
- aead: AEAD_AES_256_GCM platform certificate decryption
- certificates: parsed certificates keyed by serial
- cache: concurrency-safe certificate store
"""

from .aead import AEADAES256GCM, decrypt_certificate
from .cache import CertificateCache
from .canonical import build_query, canonicalize
from .certificates import CertificateRecord, load_client_certificate
from .signature import (
    build_authorization,
    build_signature_source,
    sign_sha256_rsa,
    sign_with_key,
    verify_sha256_rsa,
    verify_with_key,
)

__all__ = [
    "AEADAES256GCM",
    "decrypt_certificate",
    "CertificateCache",
    "build_query",
    "canonicalize",
    "CertificateRecord",
    "load_client_certificate",
    "build_authorization",
    "build_signature_source",
    "sign_sha256_rsa",
    "sign_with_key",
    "verify_sha256_rsa",
    "verify_with_key",
]
