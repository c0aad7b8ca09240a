from __future__ import annotations

from abc import ABC, abstractmethod
from threading import RLock
from typing import TYPE_CHECKING, Dict

from ..models import Token

if TYPE_CHECKING:
    from ..ring.circulator import TokenCirculator


TOKEN_PATH = "/token"


class TransportError(RuntimeError):
    """Destination unreachable, refused the connection, or timed out."""


def token_url(address: str) -> str:
    return f"{address.rstrip('/')}{TOKEN_PATH}"


class TokenTransport(ABC):
    """
    Abstract delivery backend for tokens leaving a node.

    Architectural Role
    -------------------
    TokenCirculator decides *where* a token goes.
    TokenTransport performs the *actual delivery*.

    Transports must:
        • Deliver to the token endpoint of the given node address
        • Return the HTTP-style status code when the node answered
        • Raise TransportError when the node could not be reached
          (including timeouts)
        • Never mutate the token being delivered
    """

    @abstractmethod
    def deliver(self, address: str, token: Token) -> int:
        """
        Hand a token to the node reachable at ``address``.

        Returns
        -------
        int
            Status code reported by the receiving node.

        Raises
        ------
        TransportError
            If the node could not be reached.
        """
        raise NotImplementedError

    def shutdown(self) -> None:
        """Release pooled connections, if any."""
        pass


class LoopbackTransport(TokenTransport):
    """
    In-process transport routing tokens straight to registered circulators.

    Used to run whole rings inside one process (tests, local demos).
    Addresses without a registered circulator behave like dead nodes.
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, "TokenCirculator"] = {}
        self._lock = RLock()

    def register(self, address: str, circulator: "TokenCirculator") -> None:
        with self._lock:
            self._nodes[address.rstrip("/")] = circulator

    def unregister(self, address: str) -> None:
        with self._lock:
            self._nodes.pop(address.rstrip("/"), None)

    def deliver(self, address: str, token: Token) -> int:
        with self._lock:
            circulator = self._nodes.get(address.rstrip("/"))

        if circulator is None:
            raise TransportError(f"No node listening at {token_url(address)}")

        circulator.receive(Token.from_payload(token.to_payload()))
        return 200
