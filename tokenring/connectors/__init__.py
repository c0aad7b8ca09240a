from .base import TokenTransport, LoopbackTransport, TransportError, token_url
from .rest_connector import RestTransport

__all__ = [
    "TokenTransport",
    "LoopbackTransport",
    "RestTransport",
    "TransportError",
    "token_url",
]
