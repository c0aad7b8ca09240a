from __future__ import annotations

from dataclasses import replace
from typing import Optional
import logging

from ..models import CompletedTraversal, Token
from .rwlock import ReadWriteLock

logger = logging.getLogger(__name__)


class RingStatus:
    """
    Single-slot store of the last token that completed a full circle.

    Written by the circulator when a token returns to its issuer and
    read by the status endpoint. The slot holds an immutable
    CompletedTraversal built from a copy of the token, so neither the
    writer nor any reader can alter the stored value afterwards.
    """

    def __init__(self) -> None:
        self._last_completed: Optional[CompletedTraversal] = None
        self._completed_count = 0
        self._lock = ReadWriteLock()

    def record(self, token: Token) -> CompletedTraversal:
        # Snapshot outside the lock; writers only hold it for the swap
        record = CompletedTraversal.from_token(token)

        with self._lock.write_locked():
            self._last_completed = record
            self._completed_count += 1

        logger.info(
            "[STATUS] Recorded traversal | issuer=%s | hops=%d",
            record.issuer,
            len(record.signers),
        )
        return record

    def read(self) -> Optional[CompletedTraversal]:
        """Return the last completed traversal, or None if none has completed yet."""
        with self._lock.read_locked():
            current = self._last_completed

        return replace(current) if current is not None else None

    @property
    def completed_count(self) -> int:
        with self._lock.read_locked():
            return self._completed_count
