"""Month-by-month history assembled from cumulative totals."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from opening_explorer.date import Month
from opening_explorer.stats import Stats


@dataclass
class HistorySegment:
    month: Month
    stats: Stats

    def to_dict(self) -> Dict[str, Any]:
        return {"month": str(self.month), **self.stats.to_dict()}


@dataclass
class HistoryBuilder:
    """Turns running totals per month into per-month differences."""

    last_month: Optional[Month] = None
    until_is_none: bool = True
    segments: List[HistorySegment] = field(default_factory=list)
    last_total: Stats = field(default_factory=Stats)

    @classmethod
    def new_between(cls, since: Optional[Month], until: Optional[Month]) -> HistoryBuilder:
        return cls(last_month=since, until_is_none=until is None)

    def record_difference(self, month: Month, total: Stats) -> None:
        if self.last_month is not None:
            last_month = self.last_month
            while last_month < month:
                self.segments.append(HistorySegment(last_month, Stats()))
                last_month = last_month.add_months_saturating(1)
        self.last_month = month.add_months_saturating(1)

        self.segments.append(HistorySegment(month, total - self.last_total))
        self.last_total = total

    def build(self) -> List[HistorySegment]:
        """Return the segments; without an upper bound, the last (possibly incomplete) month is left out."""
        segments = list(self.segments)
        if self.until_is_none and segments:
            segments.pop()
        return segments