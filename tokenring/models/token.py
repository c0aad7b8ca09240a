from dataclasses import dataclass, field
from typing import Any, Dict, List
import time


@dataclass
class Token:
    """
    A traversal record in flight around the ring.

    The issuer creates the token with its own public address as the
    first signer. Every node that forwards the token appends its own
    public address, so ``signers`` always reflects hop order.

    Architectural Role
    ------------------
    Issuer → Token → neighbor → ... → Issuer

    ``issuer`` and ``issued_at`` never change after creation and
    ``signers[0]`` is the address the token falls back to when a hop
    fails.
    """

    issuer: str
    """Identifier of the node that created the token."""

    issued_at: int = field(default_factory=lambda: int(time.time()))
    """Unix timestamp (seconds) of creation."""

    signers: List[str] = field(default_factory=list)
    """Public addresses of every node that handled the token, in order."""

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def sign(self, address: str) -> None:
        self.signers.append(address)

    @property
    def issuer_address(self) -> str:
        if not self.signers:
            raise ValueError("Token carries no signers")
        return self.signers[0]

    # ------------------------------------------------------------------
    # Wire Format
    # ------------------------------------------------------------------

    def to_payload(self) -> Dict[str, Any]:
        return {
            "issuer": self.issuer,
            "issued_at": self.issued_at,
            "signers": list(self.signers),
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Token":
        return cls(
            issuer=payload["issuer"],
            issued_at=int(payload["issued_at"]),
            signers=list(payload.get("signers") or []),
        )

    # ------------------------------------------------------------------
    # Debug Representation
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"Token(issuer='{self.issuer}', issued_at={self.issued_at}, "
            f"hops={len(self.signers)})"
        )
