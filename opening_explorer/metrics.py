"""Request counters reported in InfluxDB line-protocol field format."""

from __future__ import annotations

import threading
from collections import Counter
from datetime import timedelta
from enum import Enum
from typing import List, Optional


class Source(Enum):
    ANALYSIS = "analysis"
    MOBILE = "mobile"
    FISHNET = "fishnet"
    OPENING = "opening"
    OPENING_CRAWLER = "openingCrawler"


_SOURCE_FIELDS = {
    Source.FISHNET: "source_fishnet",
    Source.OPENING: "source_opening",
    Source.OPENING_CRAWLER: "source_opening_crawler",
}

_REPORTED_FIELDS = (
    "source_none",
    "source_analysis_lichess",
    "source_analysis_masters",
    "source_fishnet",
    "source_opening",
    "source_opening_crawler",
    "source_analysis_player",
    "source_analysis_player_incomplete",
)

_PLY_GROUPS = 10
_PLY_GROUP_WIDTH = 5


class _PlyStats:
    def __init__(self) -> None:
        self.groups: List[int] = [0] * _PLY_GROUPS

    def inc(self, ply: int) -> None:
        group = ply // _PLY_GROUP_WIDTH
        if 0 <= group < _PLY_GROUPS:
            self.groups[group] += 1

    def to_influx_string(self, prefix: str) -> str:
        return ",".join(
            f"{prefix}{i * _PLY_GROUP_WIDTH}={num}u" for i, num in enumerate(self.groups)
        )


class _HitStats:
    def __init__(self) -> None:
        self.counts: Counter[str] = Counter()
        self.lichess_ply = _PlyStats()
        self.masters_ply = _PlyStats()
        self.player_ply = _PlyStats()

    def _inc_source(self, source: Optional[Source], analysis_field: str) -> None:
        if source is None:
            self.counts["source_none"] += 1
        elif source in (Source.ANALYSIS, Source.MOBILE):
            self.counts[analysis_field] += 1
        else:
            self.counts[_SOURCE_FIELDS[source]] += 1

    def inc_lichess(self, source: Optional[Source], ply: int) -> None:
        self.counts["lichess_miss"] += 1
        self._inc_source(source, "source_analysis_lichess")
        self.lichess_ply.inc(ply)

    def inc_masters(self, source: Optional[Source], ply: int) -> None:
        self.counts["masters_miss"] += 1
        self._inc_source(source, "source_analysis_masters")
        self.masters_ply.inc(ply)

    def inc_player(self, done: bool, ply: int) -> None:
        field = "source_analysis_player" if done else "source_analysis_player_incomplete"
        self.counts[field] += 1
        self.player_ply.inc(ply)

    def to_influx_string(self, prefix: str) -> str:
        parts = [f"{prefix}{name}={self.counts[name]}u" for name in _REPORTED_FIELDS]
        parts.append(self.lichess_ply.to_influx_string(f"{prefix}lichess_ply_"))
        parts.append(self.masters_ply.to_influx_string(f"{prefix}masters_ply_"))
        parts.append(self.player_ply.to_influx_string(f"{prefix}player_ply_"))
        return ",".join(parts)


class ServerStats:
    """Thread-safe counters of all hits and of slow hits."""

    SLOW_DURATION = timedelta(milliseconds=500)

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._hit = _HitStats()
        self._slow_hit = _HitStats()

    def _is_slow(self, duration: timedelta) -> bool:
        return self.SLOW_DURATION <= duration

    def to_influx_string(self) -> str:
        with self._lock:
            return ",".join(
                [self._hit.to_influx_string(""), self._slow_hit.to_influx_string("slow_")]
            )

    def inc_lichess(self, duration: timedelta, source: Optional[Source], ply: int) -> None:
        with self._lock:
            self._hit.inc_lichess(source, ply)
            if self._is_slow(duration):
                self._slow_hit.inc_lichess(source, ply)

    def inc_masters(self, duration: timedelta, source: Optional[Source], ply: int) -> None:
        with self._lock:
            self._hit.inc_masters(source, ply)
            if self._is_slow(duration):
                self._slow_hit.inc_masters(source, ply)

    def inc_player(self, duration: timedelta, done: bool, ply: int) -> None:
        with self._lock:
            self._hit.inc_player(done, ply)
            if self._is_slow(duration):
                self._slow_hit.inc_player(done, ply)