from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Tuple
import time

from .token import Token


@dataclass(frozen=True)
class CompletedTraversal:
    """
    Immutable record of the last token that returned to its issuer.

    Attributes
    ----------
    issuer : str
        Node that created the token.

    issued_at : int
        Unix timestamp when the token was issued.

    completed_at : float
        Unix timestamp when the issuer saw the token come back.

    signers : Tuple[str, ...]
        Full path of public addresses, starting with the issuer.
    """

    issuer: str
    issued_at: int
    signers: Tuple[str, ...]
    completed_at: float = field(default_factory=time.time)

    @classmethod
    def from_token(cls, token: Token) -> "CompletedTraversal":
        return cls(
            issuer=token.issuer,
            issued_at=token.issued_at,
            signers=tuple(token.signers),
        )

    @property
    def completed_at_iso(self) -> str:
        return datetime.fromtimestamp(self.completed_at, tz=timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "issuer": self.issuer,
            "issued_at": self.issued_at,
            "completed_at": self.completed_at,
            "signers": list(self.signers),
        }
