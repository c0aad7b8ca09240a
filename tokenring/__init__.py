"""
tokenring: a logical ring health check.

Each node knows only its next neighbor. An initiator issues a token
that every node signs and forwards; when it comes back, the issuer
records the full path as proof the ring is intact.
"""

from .config import NodeConfig
from .models import Token, CompletedTraversal
from .ring import TokenCirculator, RingStatus, IssueScheduler
from .server import RingNode, create_app

__all__ = [
    "NodeConfig",
    "Token",
    "CompletedTraversal",
    "TokenCirculator",
    "RingStatus",
    "IssueScheduler",
    "RingNode",
    "create_app",
]
