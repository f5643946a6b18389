"""
Signature computation and verification for both protocol generations.

V2 (symmetric):
- MD5 or HMAC-SHA256 over the canonical string (which ends in &key=<secret>)
- rendered as upper-case hex
- received signatures are upper-cased before a constant-time comparison

V3 (asymmetric):
- SHA256-with-RSA (PKCS#1 v1.5), base64 signatures
- response source string is "{timestamp}\\n{nonce}\\n{body}\\n"
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
from typing import Mapping, Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from paygate.protocol import fields
from paygate.protocol.enums import SignType
from paygate.security.canonical import canonicalize


# --- V2 ------------------------------------------------------------


def sign_with_key(
    parameters: Mapping[str, Optional[str]],
    key: str,
    sign_type: SignType = SignType.MD5,
) -> str:
    """Compute the upper-case hex V2 signature of parameters."""
    content = canonicalize(parameters, secret=key).encode("utf-8")

    if sign_type == SignType.MD5:
        digest = hashlib.md5(content).hexdigest()
    elif sign_type == SignType.HMAC_SHA256:
        digest = hmac.new(key.encode("utf-8"), content, hashlib.sha256).hexdigest()
    else:
        raise ValueError(f"Unsupported sign type: {sign_type}")

    return digest.upper()


def verify_with_key(
    parameters: Mapping[str, Optional[str]],
    key: str,
    sign_type: SignType,
    signature: str,
) -> bool:
    expected = sign_with_key(parameters, key, sign_type)
    return hmac.compare_digest(expected.encode("ascii"), signature.upper().encode("utf-8"))


# --- V3 ------------------------------------------------------------


def build_signature_source(timestamp: str, nonce: str, body: str) -> str:
    return f"{timestamp}\n{nonce}\n{body}\n"


def build_message(*parts: str) -> str:
    """Join parts with newlines, each one newline-terminated."""
    return "".join(f"{part}\n" for part in parts)


def sign_sha256_rsa(private_key: RSAPrivateKey, message: str) -> str:
    signature = private_key.sign(
        message.encode("utf-8"),
        padding.PKCS1v15(),
        hashes.SHA256(),
    )
    return base64.b64encode(signature).decode("ascii")


def verify_sha256_rsa(public_key: RSAPublicKey, message: str, signature: str) -> bool:
    """
    Verify a base64 SHA256-with-RSA signature.

    Returns False for malformed base64 as well as for a mismatch.
    """
    try:
        raw = base64.b64decode(signature, validate=True)
    except (binascii.Error, ValueError):
        return False

    try:
        public_key.verify(raw, message.encode("utf-8"), padding.PKCS1v15(), hashes.SHA256())
        return True
    except InvalidSignature:
        return False


def build_authorization(
    mch_id: str,
    serial_no: str,
    private_key: RSAPrivateKey,
    method: str,
    url: str,
    body: str,
    timestamp: str,
    nonce: str,
) -> str:
    """
    Authorization header value for an outbound V3 request.

    url is the path plus query string, without scheme and host.
    """
    message = build_message(method.upper(), url, timestamp, nonce, body)
    signature = sign_sha256_rsa(private_key, message)
    return (
        f'{fields.AUTHORIZATION_SCHEMA} mchid="{mch_id}",nonce_str="{nonce}",'
        f'signature="{signature}",timestamp="{timestamp}",serial_no="{serial_no}"'
    )
