from __future__ import annotations

"""
Base transport interface for the gateway client.

This defines the transport boundary:

    signed V2 parameters → [XML] → gateway → V2Reply(body, status_code)
    V3Request            → [JSON + Authorization] → gateway → V3Reply

Transports DO NOT:
  - canonicalize or sign V2 parameters
  - parse response bodies
  - verify response signatures

Transports ONLY:
  - serialize and deliver the request
  - select the TLS identity bound to a client certificate serial
  - authorize V3 requests with the merchant private key
  - hand back the raw body plus the authentication headers

Failures are raised as TransportError and are fatal to the call. A body
that cannot be decoded is raised as ResponseParseError.
"""

from abc import ABC, abstractmethod
from typing import Dict

from paygate.protocol.models import GatewayCredentials, V2Reply, V3Reply
from paygate.protocol.requests import V3Request


class Transport(ABC):
    """
    Abstract base class for all transports.

    Both send methods are coroutines; they are the only suspension points
    of a call.
    """

    @abstractmethod
    async def send_v2(
        self,
        url: str,
        parameters: Dict[str, str],
        certificate_serial: str = "",
    ) -> V2Reply:
        """
        POST signed parameters as a V2 XML document.

        certificate_serial selects the client certificate used for mutual
        TLS; empty means no client identity.
        """
        raise NotImplementedError

    @abstractmethod
    async def send_v3(self, request: V3Request, credentials: GatewayCredentials) -> V3Reply:
        """Send an authorized V3 request and capture its authentication headers."""
        raise NotImplementedError

    def close(self) -> None:
        """Release pooled connections. Default: nothing to release."""
