from .app import create_app
from .node import RingNode

__all__ = ["create_app", "RingNode"]
