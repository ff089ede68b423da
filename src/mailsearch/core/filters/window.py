from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone


@dataclass(frozen=True, slots=True)
class DateWindow:
    """Inclusive time range; ``end=None`` means no upper bound.

    Comparison happens at epoch-second resolution. An inverted window
    (start after end) is valid and simply matches nothing.
    """

    start: datetime
    end: datetime | None = None

    def __post_init__(self) -> None:
        if self.start.tzinfo is None:
            raise ValueError("DateWindow.start must be timezone-aware")
        if self.end is not None and self.end.tzinfo is None:
            raise ValueError("DateWindow.end must be timezone-aware")

    @property
    def is_empty(self) -> bool:
        return self.end is not None and _epoch(self.start) > _epoch(self.end)

    def contains(self, timestamp: datetime) -> bool:
        value = _epoch(timestamp)
        if value < _epoch(self.start):
            return False
        return self.end is None or value <= _epoch(self.end)

    def coarse_query(self) -> tuple[date, date | None]:
        """Day-granular ``[since, before)`` bounds for a server-side search.

        The server compares calendar days in its own offset, which can be
        up to a day away from UTC either way, so both bounds are taken in
        UTC and padded by a day. ``before`` gets one more day because it
        is exclusive.
        """
        since = self.start.astimezone(timezone.utc).date() - timedelta(days=1)
        if self.end is None:
            return since, None
        return since, self.end.astimezone(timezone.utc).date() + timedelta(days=2)


def _epoch(value: datetime) -> int:
    return int(value.timestamp())
