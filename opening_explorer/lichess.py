"""Opening statistics of the whole site, grouped by move, speed and rating."""

from __future__ import annotations

import io
import re
from dataclasses import dataclass, field
from enum import IntEnum
from typing import (
    BinaryIO,
    ClassVar,
    Dict,
    List,
    Optional,
    Protocol,
    Tuple,
    Union,
)

from opening_explorer.game_id import GameId
from opening_explorer.speed import BySpeed, Speed
from opening_explorer.stats import Outcome, Stats
from opening_explorer.uci import RawUci, Uci
from opening_explorer.uint import read_uint, write_uint
from opening_explorer.util import midpoint, sort_by_key_and_truncate

MAX_LICHESS_GAMES = 8
MAX_TOP_GAMES = 4  # <= MAX_LICHESS_GAMES

_U16_RE = re.compile(r"\+?[0-9]+")
_SPEEDS = list(Speed)


class RatingGroup(IntEnum):
    """Rating bands; the value is the band's code in the binary format."""

    GROUP_LOW = 0
    GROUP_1000 = 1
    GROUP_1200 = 2
    GROUP_1400 = 3
    GROUP_1600 = 4
    GROUP_1800 = 5
    GROUP_2000 = 6
    GROUP_2200 = 7
    GROUP_2500 = 8
    GROUP_2800 = 9
    GROUP_3200 = 10

    @classmethod
    def select_avg(cls, avg: int) -> RatingGroup:
        for limit, group in _THRESHOLDS:
            if avg < limit:
                return group
        return cls.GROUP_3200

    @classmethod
    def select(cls, mover_rating: int, opponent_rating: int) -> RatingGroup:
        return cls.select_avg(midpoint(mover_rating, opponent_rating))

    @classmethod
    def parse(cls, text: str) -> RatingGroup:
        if not _U16_RE.fullmatch(text) or int(text) > 0xFFFF:
            raise ValueError(f"invalid rating: {text!r}")
        return cls.select_avg(int(text))


_THRESHOLDS = (
    (1000, RatingGroup.GROUP_LOW),
    (1200, RatingGroup.GROUP_1000),
    (1400, RatingGroup.GROUP_1200),
    (1600, RatingGroup.GROUP_1400),
    (1800, RatingGroup.GROUP_1600),
    (2000, RatingGroup.GROUP_1800),
    (2200, RatingGroup.GROUP_2000),
    (2500, RatingGroup.GROUP_2200),
    (2800, RatingGroup.GROUP_2500),
)


class _QueryFilter(Protocol):
    def contains_speed(self, speed: Speed) -> bool: ...

    def contains_rating_group(self, rating_group: RatingGroup) -> bool: ...

    def top_group(self) -> Optional[RatingGroup]: ...


class _QueryLimits(Protocol):
    moves: int
    top_games: int
    recent_games: int

    def games_wanted(self) -> bool: ...


@dataclass
class LichessGroup:
    stats: Stats = field(default_factory=Stats)
    games: List[Tuple[int, GameId]] = field(default_factory=list)


@dataclass
class PreparedMove:
    uci: Uci
    stats: Stats
    game: Optional[GameId] = None
    average_rating: Optional[int] = None
    average_opponent_rating: Optional[int] = None
    performance: Optional[int] = None


@dataclass
class PreparedResponse:
    total: Stats
    moves: List[PreparedMove]
    recent_games: List[Tuple[Uci, GameId]]
    top_games: List[Tuple[Uci, GameId]]


_SubEntry = BySpeed[Dict[RatingGroup, LichessGroup]]


def _new_sub_entry() -> _SubEntry:
    return BySpeed(*({group: LichessGroup() for group in RatingGroup} for _ in Speed))


def _as_stream(reader: Union[bytes, bytearray, memoryview, BinaryIO]) -> Tuple[io.BytesIO, int]:
    data = bytes(reader) if isinstance(reader, (bytes, bytearray, memoryview)) else reader.read()
    return io.BytesIO(data), len(data)


def _read_header(stream: io.BytesIO) -> Optional[Tuple[Speed, RatingGroup, int]]:
    """Read a group header; None marks the end of a move's groups."""
    chunk = stream.read(1)
    if not chunk:
        raise EOFError("unexpected end of input while reading header")
    n = chunk[0]
    speed_code = n & 7
    if speed_code == 0:
        return None
    if speed_code > len(_SPEEDS):
        raise ValueError("invalid speed")
    group_code = (n >> 3) & 15
    if group_code > RatingGroup.GROUP_3200:
        raise ValueError("invalid rating group")
    single_game = (n >> 7) != 0
    num_games = 1 if single_game else read_uint(stream)
    return _SPEEDS[speed_code - 1], RatingGroup(group_code), num_games


def _write_header(buf: bytearray, speed: Speed, rating_group: RatingGroup, num_games: int) -> None:
    single_game = num_games == 1
    buf.append((_SPEEDS.index(speed) + 1) | (int(rating_group) << 3) | (int(single_game) << 7))
    if not single_game:
        write_uint(buf, num_games)


@dataclass
class LichessEntry:
    """All games through one position, keyed by the move played next."""

    sub_entries: Dict[RawUci, _SubEntry] = field(default_factory=dict)
    min_game_idx: Optional[int] = None
    max_game_idx: Optional[int] = None

    SIZE_HINT: ClassVar[int] = 13

    @classmethod
    def new_single(
        cls,
        uci: Uci,
        speed: Speed,
        game_id: GameId,
        outcome: Outcome,
        mover_rating: int,
        opponent_rating: int,
    ) -> LichessEntry:
        sub_entry = _new_sub_entry()
        sub_entry[speed][RatingGroup.select(mover_rating, opponent_rating)] = LichessGroup(
            stats=Stats.new_single(outcome, mover_rating),
            games=[(0, game_id)],
        )
        return cls(
            sub_entries={RawUci.from_uci(uci): sub_entry},
            min_game_idx=0,
            max_game_idx=0,
        )

    def extend_from_reader(self, reader: Union[bytes, bytearray, BinaryIO]) -> None:
        """Merge an encoded entry; its games are numbered after the ones already held."""
        stream, size = _as_stream(reader)
        base_game_idx = 0 if self.max_game_idx is None else self.max_game_idx + 1

        while stream.tell() < size:
            uci = RawUci.read(stream)
            sub_entry = self.sub_entries.get(uci)
            if sub_entry is None:
                sub_entry = self.sub_entries[uci] = _new_sub_entry()

            while stream.tell() < size:
                header = _read_header(stream)
                if header is None:
                    break
                speed, rating_group, num_games = header
                group = sub_entry[speed][rating_group]
                group.stats += Stats.read(stream)
                for _ in range(num_games):
                    game_idx = base_game_idx + read_uint(stream)
                    self.min_game_idx = (
                        game_idx if self.min_game_idx is None else min(self.min_game_idx, game_idx)
                    )
                    self.max_game_idx = (
                        game_idx if self.max_game_idx is None else max(self.max_game_idx, game_idx)
                    )
                    group.games.append((game_idx, GameId.read(stream)))

    def write(self, buf: bytearray) -> None:
        base = self.min_game_idx or 0
        for i, (uci, sub_entry) in enumerate(self.sub_entries.items()):
            if i > 0:
                buf.append(0)
            uci.write(buf)
            for speed, by_rating_group in sub_entry.items():
                for rating_group, group in by_rating_group.items():
                    if group.stats.is_empty():
                        continue
                    num_games = min(len(group.games), MAX_LICHESS_GAMES)
                    _write_header(buf, speed, rating_group, num_games)
                    group.stats.write(buf)
                    for game_idx, game in group.games[len(group.games) - num_games:]:
                        write_uint(buf, game_idx - base)
                        game.write(buf)

    def _filtered(self, sub_entry: _SubEntry, query: _QueryFilter):
        for speed, by_rating_group in sub_entry.items():
            if query.contains_speed(speed):
                for rating_group, group in by_rating_group.items():
                    if query.contains_rating_group(rating_group):
                        yield speed, rating_group, group

    def total(self, filter: _QueryFilter) -> Stats:
        stats = Stats()
        for sub_entry in self.sub_entries.values():
            for _, _, group in self._filtered(sub_entry, filter):
                stats += group.stats
        return stats

    def prepare(self, filter: _QueryFilter, limits: _QueryLimits) -> PreparedResponse:
        total = Stats()
        moves: List[PreparedMove] = []
        recent_games: List[Tuple[RatingGroup, Speed, int, Uci, GameId]] = []
        games_wanted = limits.games_wanted()

        for raw_uci, sub_entry in self.sub_entries.items():
            uci = raw_uci.to_uci()
            latest_game: Optional[Tuple[int, GameId]] = None
            stats = Stats()

            for speed, rating_group, group in self._filtered(sub_entry, filter):
                stats += group.stats
                for idx, game in group.games:
                    if latest_game is None or latest_game[0] < idx:
                        latest_game = (idx, game)
                if games_wanted:
                    recent_games.extend(
                        (rating_group, speed, idx, uci, game) for idx, game in group.games
                    )

            if not stats.is_empty():
                total += stats
                moves.append(
                    PreparedMove(
                        uci=uci,
                        stats=stats,
                        game=latest_game[1] if latest_game and stats.is_single() else None,
                        average_rating=stats.average_rating(),
                    )
                )

        sort_by_key_and_truncate(moves, limits.moves, lambda row: -row.stats.total())

        top_group = filter.top_group()
        if top_group is not None:
            top_games = [
                row
                for row in recent_games
                if row[0] >= top_group and row[1] is not Speed.CORRESPONDENCE
            ]
            sort_by_key_and_truncate(
                top_games, MAX_TOP_GAMES * 2, lambda row: (-int(row[0]), -row[2])
            )
            sort_by_key_and_truncate(top_games, MAX_TOP_GAMES, lambda row: -row[2])
            top_ids = {row[4] for row in top_games}
            recent_games = [row for row in recent_games if row[4] not in top_ids]
        else:
            top_games = []

        valid_recent_games = MAX_LICHESS_GAMES - len(top_games)
        top_games = top_games[: limits.top_games]

        sort_by_key_and_truncate(
            recent_games, min(valid_recent_games, limits.recent_games), lambda row: -row[2]
        )

        return PreparedResponse(
            total=total,
            moves=moves,
            top_games=[(uci, game) for _, _, _, uci, game in top_games],
            recent_games=[(uci, game) for _, _, _, uci, game in recent_games],
        )