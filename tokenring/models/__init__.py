"""
Core data models for the token ring.

These dataclasses define the packets that move between nodes (Token)
and the record a node keeps once a token has closed its loop
(CompletedTraversal).
"""

from .token import Token
from .traversal import CompletedTraversal

__all__ = ["Token", "CompletedTraversal"]
