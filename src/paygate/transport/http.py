"""
HTTP Transport for the payment gateway

- V2: XML POST, optionally over mutual TLS with the client certificate
- V3: JSON GET/POST with a WECHATPAY2-SHA256-RSA2048 Authorization header
- Blocking requests calls run in a worker thread
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import tempfile
import threading
from typing import Dict, Optional, Tuple
from urllib.parse import urlsplit

import requests

from paygate.protocol import fields
from paygate.protocol.errors import ConfigurationError, ResponseParseError, TransportError
from paygate.protocol.models import GatewayCredentials, V2Reply, V3Reply
from paygate.protocol.requests import V3Request
from paygate.protocol.validators import require_private_key
from paygate.security.cache import CertificateCache
from paygate.security.certificates import CertificateRecord
from paygate.security.signature import build_authorization
from paygate.transport.base import Transport
from paygate.utils.nonce import new_nonce, unix_timestamp
from paygate.utils.xml import to_xml

logger = logging.getLogger(__name__)

USER_AGENT = "paygate/0.1"


class HTTPTransport(Transport):
    """
    Sends gateway requests with requests.Session.

    One session is kept per TLS identity: the default session has no client
    certificate, and each client certificate serial gets its own session
    whose certificate is looked up in the shared client certificate cache.
    """

    def __init__(
        self,
        base_url: str = fields.DEFAULT_BASE_URL,
        timeout: float = 10.0,
        client_certificates: Optional[CertificateCache] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        if client_certificates is None:
            client_certificates = CertificateCache("client")
        self._client_certificates = client_certificates
        self._sessions: Dict[str, requests.Session] = {}
        self._lock = threading.Lock()
        self._cert_dir: Optional[str] = None

    @property
    def client_certificates(self) -> CertificateCache:
        return self._client_certificates

    def resolve_url(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return self._base_url + "/" + endpoint.lstrip("/")

    # ------------------------------------------------------------------
    # V2
    # ------------------------------------------------------------------
    async def send_v2(
        self,
        url: str,
        parameters: Dict[str, str],
        certificate_serial: str = "",
    ) -> V2Reply:
        session = self._session(certificate_serial)
        response = await asyncio.to_thread(
            self._request,
            session,
            "POST",
            self.resolve_url(url),
            data=to_xml(parameters).encode("utf-8"),
            headers={"Content-Type": "application/xml; charset=utf-8", "User-Agent": USER_AGENT},
        )

        if response.status_code >= 400:
            raise TransportError(
                f"HTTP {response.status_code} from {url}", status_code=response.status_code
            )

        return V2Reply(body=_decode_body(response, url), status_code=response.status_code)

    # ------------------------------------------------------------------
    # V3
    # ------------------------------------------------------------------
    async def send_v3(self, request: V3Request, credentials: GatewayCredentials) -> V3Reply:
        require_private_key(credentials)

        url = self.resolve_url(request.endpoint)
        body = request.serialize_body()
        headers = {
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
            "Authorization": self._authorization(credentials, request.method.value, url, body),
        }
        if body:
            headers["Content-Type"] = "application/json"

        response = await asyncio.to_thread(
            self._request,
            self._session(),
            request.method.value,
            url,
            data=body.encode("utf-8") if body else None,
            headers=headers,
        )

        # Error statuses are signed too; the caller parses and verifies them.
        return V3Reply(
            serial=response.headers.get(fields.HEADER_SERIAL, ""),
            timestamp=response.headers.get(fields.HEADER_TIMESTAMP, ""),
            nonce=response.headers.get(fields.HEADER_NONCE, ""),
            signature=response.headers.get(fields.HEADER_SIGNATURE, ""),
            body=_decode_body(response, url),
            status_code=response.status_code,
        )

    @staticmethod
    def _authorization(credentials: GatewayCredentials, method: str, url: str, body: str) -> str:
        parts = urlsplit(url)
        path = parts.path + (f"?{parts.query}" if parts.query else "")
        return build_authorization(
            mch_id=credentials.mch_id,
            serial_no=credentials.certificate_serial,
            private_key=credentials.certificate.private_key,
            method=method,
            url=path,
            body=body,
            timestamp=unix_timestamp(),
            nonce=new_nonce(),
        )

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------
    def _request(self, session: requests.Session, method: str, url: str, **kwargs) -> requests.Response:
        try:
            return session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

    def _session(self, certificate_serial: str = "") -> requests.Session:
        with self._lock:
            session = self._sessions.get(certificate_serial)
            if session is not None:
                return session

            session = requests.Session()
            if certificate_serial:
                record = self._client_certificates.try_get(certificate_serial)
                if record is None:
                    raise ConfigurationError(
                        f"client certificate {certificate_serial} is not registered"
                    )
                session.cert = self._write_identity(record)
                logger.debug("Created TLS session for client certificate %s", certificate_serial)

            self._sessions[certificate_serial] = session
            return session

    def _write_identity(self, record: CertificateRecord) -> Tuple[str, str]:
        if self._cert_dir is None:
            self._cert_dir = tempfile.mkdtemp(prefix="paygate_")

        cert_path = os.path.join(self._cert_dir, f"{record.serial}.crt")
        key_path = os.path.join(self._cert_dir, f"{record.serial}.key")
        _write_private(cert_path, record.cert_pem())
        _write_private(key_path, record.key_pem())
        return cert_path, key_path

    def close(self) -> None:
        with self._lock:
            for session in self._sessions.values():
                session.close()
            self._sessions.clear()
            if self._cert_dir is not None:
                shutil.rmtree(self._cert_dir, ignore_errors=True)
                self._cert_dir = None


def _decode_body(response: requests.Response, url: str) -> str:
    try:
        return response.content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ResponseParseError(
            f"Response from {url} is not valid UTF-8: {e}",
            body=response.content.decode("utf-8", errors="replace"),
            status_code=response.status_code,
        ) from e


def _write_private(path: str, data: bytes) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "wb") as f:
        f.write(data)
