from .circulator import TokenCirculator, FORWARDED, RETURNED, CLOSED, DROPPED
from .scheduler import IssueScheduler
from .status import RingStatus

__all__ = [
    "TokenCirculator",
    "IssueScheduler",
    "RingStatus",
    "FORWARDED",
    "RETURNED",
    "CLOSED",
    "DROPPED",
]
