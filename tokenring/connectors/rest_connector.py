import requests
import logging

from ..models import Token
from .base import TokenTransport, TransportError, token_url

logger = logging.getLogger(__name__)


class RestTransport(TokenTransport):
    """
    HTTP transport posting tokens as JSON to ``<address>/token``.

    Responsible ONLY for delivery.
    Does NOT decide fallbacks.
    Does NOT interpret non-success status codes.
    """

    def __init__(self, timeout_seconds: float = 5.0, session: requests.Session = None):
        self.timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    def deliver(self, address: str, token: Token) -> int:
        url = token_url(address)

        logger.debug("[TRANSPORT] POST %s | token=%r", url, token)

        try:
            response = self._session.post(
                url,
                json=token.to_payload(),
                timeout=self.timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"REST transport failure (POST {url}): {e}") from e

        try:
            return response.status_code
        finally:
            response.close()

    def shutdown(self) -> None:
        self._session.close()
