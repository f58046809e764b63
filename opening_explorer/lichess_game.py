"""Per-game metadata records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, ClassVar, Dict

from opening_explorer.date import Month
from opening_explorer.mode import Mode
from opening_explorer.speed import Speed
from opening_explorer.stats import Color, Outcome
from opening_explorer.uint import read_uint, write_uint

_SPEEDS = list(Speed)
_OUTCOMES = [Outcome(Color.BLACK), Outcome(Color.WHITE), Outcome(None)]


def _read_exact(reader: BinaryIO, size: int) -> bytes:
    data = reader.read(size)
    if len(data) != size:
        raise EOFError("unexpected end of input while reading game")
    return data


@dataclass
class GamePlayer:
    name: str
    rating: int

    def write(self, buf: bytearray) -> None:
        name = self.name.encode("utf-8")
        write_uint(buf, len(name))
        buf.extend(name)
        buf.extend(self.rating.to_bytes(2, "little"))

    @classmethod
    def read(cls, reader: BinaryIO) -> GamePlayer:
        length = read_uint(reader)
        name = _read_exact(reader, length).decode("utf-8")
        rating = int.from_bytes(_read_exact(reader, 2), "little")
        return cls(name, rating)


@dataclass
class LichessGame:
    outcome: Outcome
    speed: Speed
    mode: Mode
    players: Dict[Color, GamePlayer]
    month: Month
    indexed_player: Dict[Color, bool]
    indexed_lichess: bool

    SIZE_HINT: ClassVar[int] = 1 + 2 * (1 + 20 + 2) + 2

    def write(self, buf: bytearray) -> None:
        buf.append(
            _SPEEDS.index(self.speed)
            | (_OUTCOMES.index(self.outcome) << 3)
            | (int(self.mode.is_rated()) << 5)
            | (int(self.indexed_player[Color.WHITE]) << 6)
            | (int(self.indexed_player[Color.BLACK]) << 7)
        )
        self.players[Color.WHITE].write(buf)
        self.players[Color.BLACK].write(buf)
        buf.extend(int(self.month).to_bytes(2, "little"))
        buf.append(int(self.indexed_lichess))

    @classmethod
    def read(cls, reader: BinaryIO) -> LichessGame:
        byte = _read_exact(reader, 1)[0]
        speed_bits = byte & 7
        if speed_bits >= len(_SPEEDS):
            raise ValueError("invalid speed")
        outcome_bits = (byte >> 3) & 3
        if outcome_bits >= len(_OUTCOMES):
            raise ValueError("invalid outcome")
        white = GamePlayer.read(reader)
        black = GamePlayer.read(reader)
        month = Month(int.from_bytes(_read_exact(reader, 2), "little"))
        indexed_lichess = _read_exact(reader, 1)[0] != 0
        return cls(
            outcome=_OUTCOMES[outcome_bits],
            speed=_SPEEDS[speed_bits],
            mode=Mode.from_rated(bool((byte >> 5) & 1)),
            players={Color.WHITE: white, Color.BLACK: black},
            month=month,
            indexed_player={
                Color.WHITE: bool((byte >> 6) & 1),
                Color.BLACK: bool((byte >> 7) & 1),
            },
            indexed_lichess=indexed_lichess,
        )