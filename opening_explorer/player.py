"""Opening statistics of a single player, grouped by move, speed and mode."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import (
    BinaryIO,
    ClassVar,
    Collection,
    Dict,
    Iterator,
    List,
    Optional,
    Protocol,
    Tuple,
    Union,
)

from opening_explorer.game_id import GameId
from opening_explorer.lichess import LichessGroup, PreparedMove, PreparedResponse
from opening_explorer.mode import ByMode, Mode
from opening_explorer.speed import BySpeed, Speed
from opening_explorer.stats import Color, Outcome, Stats
from opening_explorer.uci import RawUci, Uci
from opening_explorer.uint import read_uint, write_uint
from opening_explorer.util import sort_by_key_and_truncate

MAX_PLAYER_GAMES = 8  # must fit into 4 bits

_U64_MAX = (1 << 64) - 1
_SPEEDS = list(Speed)
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_REVISIT_COOLDOWN = timedelta(hours=24)
_INDEX_COOLDOWN = timedelta(minutes=2)


class _PlayerFilter(Protocol):
    speeds: Optional[Collection[Speed]]
    modes: Optional[Collection[Mode]]


class _PlayerLimits(Protocol):
    moves: int
    recent_games: int


_SubEntry = BySpeed[ByMode[LichessGroup]]


def _new_sub_entry() -> _SubEntry:
    return BySpeed(*(ByMode(LichessGroup(), LichessGroup()) for _ in Speed))


def _as_stream(reader: Union[bytes, bytearray, memoryview, BinaryIO]) -> Tuple[io.BytesIO, int]:
    data = bytes(reader) if isinstance(reader, (bytes, bytearray, memoryview)) else reader.read()
    return io.BytesIO(data), len(data)


def _read_header(stream: BinaryIO) -> Optional[Tuple[Speed, Mode, int]]:
    """Read a group header; None marks the end of a move's groups."""
    chunk = stream.read(1)
    if not chunk:
        raise EOFError("unexpected end of input while reading header")
    n = chunk[0]
    speed_code = n & 7
    if speed_code == 0:
        return None
    if speed_code > len(_SPEEDS):
        raise ValueError("invalid player header")
    return _SPEEDS[speed_code - 1], Mode.from_rated(bool((n >> 3) & 1)), n >> 4


def _write_header(buf: bytearray, header: Optional[Tuple[Speed, Mode, int]]) -> None:
    if header is None:
        buf.append(0)
        return
    speed, mode, num_games = header
    buf.append(
        ((_SPEEDS.index(speed) + 1) | (int(mode.is_rated()) << 3) | (num_games << 4)) & 0xFF
    )


@dataclass
class PlayerEntry:
    """Games of one player through one position, keyed by the move played next."""

    sub_entries: Dict[RawUci, _SubEntry] = field(default_factory=dict)
    min_game_idx: Optional[int] = None
    max_game_idx: Optional[int] = None

    SIZE_HINT: ClassVar[int] = 13

    @classmethod
    def new_single(
        cls,
        uci: Uci,
        speed: Speed,
        mode: Mode,
        game_id: GameId,
        outcome: Outcome,
        opponent_rating: int,
    ) -> PlayerEntry:
        sub_entry = _new_sub_entry()
        sub_entry[speed][mode] = LichessGroup(
            stats=Stats.new_single(outcome, opponent_rating),
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
                speed, mode, num_games = header
                group = sub_entry[speed][mode]
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
                _write_header(buf, None)
            uci.write(buf)
            for speed, by_mode in sub_entry.items():
                for mode, group in by_mode.items():
                    if group.stats.is_empty():
                        continue
                    num_games = min(len(group.games), MAX_PLAYER_GAMES)
                    _write_header(buf, (speed, mode, num_games))
                    group.stats.write(buf)
                    for game_idx, game in group.games[max(len(group.games) - MAX_PLAYER_GAMES, 0):]:
                        write_uint(buf, game_idx - base)
                        game.write(buf)

    @staticmethod
    def _filtered(sub_entry: _SubEntry, query: _PlayerFilter) -> Iterator[LichessGroup]:
        for speed, by_mode in sub_entry.items():
            if query.speeds is None or speed in query.speeds:
                for mode, group in by_mode.items():
                    if query.modes is None or mode in query.modes:
                        yield group

    def prepare(
        self, color: Color, filter: _PlayerFilter, limits: _PlayerLimits
    ) -> PreparedResponse:
        total = Stats()
        moves: List[PreparedMove] = []
        recent_games: List[Tuple[int, RawUci, GameId]] = []

        for raw_uci, sub_entry in self.sub_entries.items():
            latest_game: Optional[Tuple[int, GameId]] = None
            stats = Stats()

            for group in self._filtered(sub_entry, filter):
                stats += group.stats
                for idx, game in group.games:
                    if latest_game is None or latest_game[0] < idx:
                        latest_game = (idx, game)
                recent_games.extend((idx, raw_uci, game) for idx, game in group.games)

            if not stats.is_empty():
                total += stats
                moves.append(
                    PreparedMove(
                        uci=raw_uci.to_uci(),
                        stats=stats,
                        game=latest_game[1] if latest_game and stats.is_single() else None,
                        average_rating=None,
                        average_opponent_rating=stats.average_rating(),
                        performance=stats.performance(color),
                    )
                )

        sort_by_key_and_truncate(moves, limits.moves, lambda row: -row.stats.total())
        sort_by_key_and_truncate(
            recent_games, min(limits.recent_games, MAX_PLAYER_GAMES), lambda row: -row[0]
        )

        return PreparedResponse(
            total=total,
            moves=moves,
            recent_games=[(raw_uci.to_uci(), game) for _, raw_uci, game in recent_games],
            top_games=[],
        )


class IndexRunKind(Enum):
    INDEX = "index"
    REVISIT = "revisit"


@dataclass(frozen=True)
class IndexRun:
    """A pending run of the indexer over a player's games."""

    kind: IndexRunKind
    created_at: int

    @classmethod
    def index(cls, after: int) -> IndexRun:
        return cls(IndexRunKind.INDEX, after)

    @classmethod
    def revisit(cls, since: int) -> IndexRun:
        return cls(IndexRunKind.REVISIT, since)

    def since(self) -> int:
        if self.kind is IndexRunKind.INDEX:
            # One millisecond later, to avoid overlap; may miss games created
            # in the same millisecond as the previous run's latest.
            return min(self.created_at + 1, _U64_MAX)
        return self.created_at

    def __str__(self) -> str:
        if self.kind is IndexRunKind.INDEX:
            return f"created_at > {self.created_at}"
        return f"created_at >= {self.created_at}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _epoch_seconds(moment: datetime) -> int:
    if moment < _EPOCH:
        raise ValueError("time before unix epoch")
    return (moment - _EPOCH) // timedelta(seconds=1)


@dataclass
class PlayerStatus:
    """Indexing progress of one player."""

    latest_created_at: int = 0
    revisit_ongoing_created_at: Optional[int] = None
    indexed_at: datetime = _EPOCH
    revisited_at: datetime = _EPOCH

    SIZE_HINT: ClassVar[int] = 3 * 8

    def maybe_start_index_run(self) -> Optional[IndexRun]:
        run = self._maybe_revisit_ongoing()
        return run if run is not None else self._maybe_index()

    def _maybe_revisit_ongoing(self) -> Optional[IndexRun]:
        elapsed = max(_now() - self.revisited_at, timedelta(0))
        if elapsed > _REVISIT_COOLDOWN and self.revisit_ongoing_created_at is not None:
            return IndexRun.revisit(self.revisit_ongoing_created_at)
        return None

    def _maybe_index(self) -> Optional[IndexRun]:
        if _now() - self.indexed_at > _INDEX_COOLDOWN:
            return IndexRun.index(self.latest_created_at)
        return None

    def finish_index_run(self, run: IndexRun) -> None:
        self.indexed_at = _now()
        if run.kind is IndexRunKind.REVISIT:
            self.revisited_at = self.indexed_at

    @classmethod
    def read(cls, reader: Union[bytes, bytearray, BinaryIO]) -> PlayerStatus:
        stream, _ = _as_stream(reader) if isinstance(reader, (bytes, bytearray)) else (reader, 0)
        latest_created_at = read_uint(stream)
        revisit = read_uint(stream)
        indexed_at = _EPOCH + timedelta(seconds=read_uint(stream))
        revisited_at = _EPOCH + timedelta(seconds=read_uint(stream))
        return cls(
            latest_created_at=latest_created_at,
            revisit_ongoing_created_at=revisit if revisit != 0 else None,
            indexed_at=indexed_at,
            revisited_at=revisited_at,
        )

    def write(self, buf: bytearray) -> None:
        write_uint(buf, self.latest_created_at)
        write_uint(buf, self.revisit_ongoing_created_at or 0)
        write_uint(buf, _epoch_seconds(self.indexed_at))
        write_uint(buf, _epoch_seconds(self.revisited_at))