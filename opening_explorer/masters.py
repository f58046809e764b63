"""Opening statistics of master games, keeping the highest-rated games per position."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Any, BinaryIO, ClassVar, Dict, List, Mapping, Optional, Protocol, Tuple, Union

from opening_explorer.date import LaxDate
from opening_explorer.game_id import GameId
from opening_explorer.lichess import PreparedMove, PreparedResponse
from opening_explorer.lichess_game import GamePlayer
from opening_explorer.stats import Color, Outcome, Stats
from opening_explorer.uci import RawUci, Uci
from opening_explorer.util import sort_by_key_and_truncate

MAX_MASTERS_GAMES = 15

_U16_MAX = 0xFFFF


class _MastersLimits(Protocol):
    moves: int
    top_games: int


def _parse_player(data: Mapping[str, Any]) -> GamePlayer:
    rating = int(data["rating"])
    if not 0 <= rating <= _U16_MAX:
        raise ValueError(f"rating out of range: {rating}")
    return GamePlayer(name=str(data["name"]), rating=rating)


def _parse_winner(value: Optional[str]) -> Optional[Color]:
    if value is None:
        return None
    try:
        return Color(value)
    except ValueError:
        raise ValueError(f"invalid winner: {value!r}") from None


@dataclass
class MastersGame:
    event: str
    site: str
    date: LaxDate
    round: str
    players: Dict[Color, GamePlayer]
    winner: Optional[Color]
    moves: List[Uci]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MastersGame:
        """Build a game from its JSON form, with players under "white" and "black"."""
        return cls(
            event=str(data["event"]),
            site=str(data["site"]),
            date=LaxDate.parse(str(data["date"])),
            round=str(data["round"]),
            players={
                Color.WHITE: _parse_player(data["white"]),
                Color.BLACK: _parse_player(data["black"]),
            },
            winner=_parse_winner(data.get("winner")),
            moves=[Uci.parse(token) for token in str(data["moves"]).split(" ") if token],
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "event": self.event,
            "site": self.site,
            "date": str(self.date),
            "round": self.round,
        }
        for color in (Color.BLACK, Color.WHITE):
            player = self.players[color]
            result[color.value] = {"name": player.name, "rating": player.rating}
        result["winner"] = None if self.winner is None else str(self.winner)
        result["moves"] = " ".join(str(uci) for uci in self.moves)
        return result

    def outcome(self) -> Outcome:
        return Outcome.from_winner(self.winner)


@dataclass
class MastersGameWithId:
    id: GameId
    game: MastersGame

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MastersGameWithId:
        return cls(id=GameId.parse(str(data["id"])), game=MastersGame.from_dict(data))


@dataclass
class MastersGroup:
    stats: Stats = field(default_factory=Stats)
    games: List[Tuple[int, GameId]] = field(default_factory=list)


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise EOFError("unexpected end of input while reading masters entry")
    return data


@dataclass
class MastersEntry:
    """Master games through one position, keyed by the move played next."""

    groups: Dict[RawUci, MastersGroup] = field(default_factory=dict)

    SIZE_HINT: ClassVar[int] = 14

    @classmethod
    def new_single(
        cls,
        uci: Uci,
        game_id: GameId,
        outcome: Outcome,
        mover_rating: int,
        opponent_rating: int,
    ) -> MastersEntry:
        sort_key = min(mover_rating + opponent_rating, _U16_MAX)
        return cls(
            groups={
                RawUci.from_uci(uci): MastersGroup(
                    stats=Stats.new_single(outcome, mover_rating),
                    games=[(sort_key, game_id)],
                )
            }
        )

    def extend_from_reader(self, reader: Union[bytes, bytearray, BinaryIO]) -> None:
        """Merge an encoded entry into this one."""
        data = bytes(reader) if isinstance(reader, (bytes, bytearray, memoryview)) else reader.read()
        stream = io.BytesIO(data)
        while stream.tell() < len(data):
            uci = RawUci.read(stream)
            group = self.groups.get(uci)
            if group is None:
                group = self.groups[uci] = MastersGroup()
            group.stats += Stats.read(stream)
            num_games = _read_exact(stream, 1)[0]
            for _ in range(num_games):
                sort_key = int.from_bytes(_read_exact(stream, 2), "little")
                group.games.append((sort_key, GameId.read(stream)))

    def write(self, buf: bytearray) -> None:
        """Encode the entry, keeping only the best games across all moves."""
        all_games = [game for group in self.groups.values() for game in group.games]
        if not all_games:
            return
        if len(all_games) > MAX_MASTERS_GAMES:
            lowest_top_game = sorted(all_games, reverse=True)[MAX_MASTERS_GAMES - 1]
        else:
            lowest_top_game = min(all_games)

        for uci, group in self.groups.items():
            uci.write(buf)
            group.stats.write(buf)
            if len(group.games) == 1:
                kept = group.games
            else:
                kept = [game for game in group.games if game >= lowest_top_game]
            buf.append(len(kept) & 0xFF)
            for sort_key, game_id in kept:
                buf.extend(sort_key.to_bytes(2, "little"))
                game_id.write(buf)

    def prepare(self, limits: _MastersLimits) -> PreparedResponse:
        total = Stats()
        moves: List[PreparedMove] = []
        top_games: List[Tuple[int, Uci, GameId]] = []

        for raw_uci, group in self.groups.items():
            total += group.stats
            uci = raw_uci.to_uci()
            single_game = (
                group.games[0][1] if group.stats.is_single() and group.games else None
            )
            moves.append(
                PreparedMove(
                    uci=uci,
                    stats=group.stats,
                    game=single_game,
                    average_rating=group.stats.average_rating(),
                )
            )
            top_games.extend((sort_key, uci, game) for sort_key, game in group.games)

        sort_by_key_and_truncate(
            top_games, min(limits.top_games, MAX_MASTERS_GAMES), lambda row: -row[0]
        )
        sort_by_key_and_truncate(moves, limits.moves, lambda m: -m.stats.total())

        return PreparedResponse(
            total=total,
            moves=moves,
            top_games=[(uci, game) for _, uci, game in top_games],
            recent_games=[],
        )