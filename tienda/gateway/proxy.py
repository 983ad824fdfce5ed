# tienda/gateway/proxy.py
from typing import Dict, Mapping

import requests

from tienda.domain.errors import UpstreamError
from tienda.utils.logging import get_logger

logger = get_logger(__name__)

# connection-level headers are not forwarded in either direction
HOP_BY_HOP = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
    "host",
    "content-length",
}
# requests already decoded the body
RESPONSE_DROP = HOP_BY_HOP | {"content-encoding"}


def request_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    return {k: v for k, v in headers.items() if k.lower() not in HOP_BY_HOP}


def response_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    return {k: v for k, v in headers.items() if k.lower() not in RESPONSE_DROP}


class UpstreamClient:
    """Forwards one request to a backend service. Failures are not retried."""

    def __init__(self, timeout: float, session: requests.Session | None = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def forward(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        params: list,
        body: bytes,
    ) -> requests.Response:
        try:
            return self.session.request(
                method,
                url,
                headers=dict(headers),
                params=params,
                data=body or None,
                timeout=self.timeout,
                allow_redirects=False,
            )
        except requests.RequestException as e:
            logger.error(f"Servicio no disponible {method} {url}: {e}")
            raise UpstreamError("El servicio solicitado no está disponible") from e
