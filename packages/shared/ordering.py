"""
Recency ordering for the customer list.

Customers that have been followed up sort first, newest follow-up on top.
Customers without any follow-up come after all of those, newest customer on
top. The two groups compare different timestamps, so the order cannot be
expressed as a single ORDER BY and is applied in Python.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RecencyKey:
    """Timestamps that decide where a customer lands in the list."""

    created_at: datetime
    latest_follow_up_at: Optional[datetime] = None

    @property
    def has_follow_up(self) -> bool:
        return self.latest_follow_up_at is not None

    def sort_tuple(self) -> Tuple[int, float]:
        # Group 0 (followed up) before group 1; newest first inside each group
        if self.latest_follow_up_at is not None:
            return (0, -_timestamp(self.latest_follow_up_at))
        return (1, -_timestamp(self.created_at))


def _timestamp(value: datetime) -> float:
    return value.timestamp() if value.tzinfo else (value - datetime(1970, 1, 1)).total_seconds()


def sort_by_recent_activity(items: Iterable[T], key: Callable[[T], RecencyKey]) -> List[T]:
    """
    Sort items by follow-up recency, then by creation time.

    Args:
        items: Items to sort (customers, rows, dicts...)
        key: Function returning the RecencyKey of an item

    Returns:
        New list in display order
    """
    return sorted(items, key=lambda item: key(item).sort_tuple())
