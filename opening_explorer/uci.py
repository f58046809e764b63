"""UCI moves and their compact 16-bit encoding."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import BinaryIO, Optional

_FILES = "abcdefgh"
_RANKS = "12345678"


class Role(IntEnum):
    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6


_ROLE_CHARS = {
    Role.PAWN: "p",
    Role.KNIGHT: "n",
    Role.BISHOP: "b",
    Role.ROOK: "r",
    Role.QUEEN: "q",
    Role.KING: "k",
}
_CHAR_ROLES = {char: role for role, char in _ROLE_CHARS.items()}


def _square_name(square: int) -> str:
    return _FILES[square % 8] + _RANKS[square // 8]


def _parse_square(text: str) -> int:
    if len(text) != 2 or text[0] not in _FILES or text[1] not in _RANKS:
        raise ValueError(f"invalid square: {text!r}")
    return _FILES.index(text[0]) + 8 * _RANKS.index(text[1])


@dataclass(frozen=True)
class Uci:
    """A move in UCI notation.

    Squares are numbered 0 (a1) to 63 (h8). A null move has no squares, a
    drop has only ``to_square`` and ``drop``, a normal move has both squares
    and an optional promotion.
    """

    from_square: Optional[int] = None
    to_square: Optional[int] = None
    promotion: Optional[Role] = None
    drop: Optional[Role] = None

    def __post_init__(self) -> None:
        for square in (self.from_square, self.to_square):
            if square is not None and not 0 <= square < 64:
                raise ValueError(f"invalid square: {square}")
        if self.drop is not None:
            if self.from_square is not None or self.to_square is None or self.promotion is not None:
                raise ValueError("a drop has a target square and a role only")
        elif (self.from_square is None) != (self.to_square is None):
            raise ValueError("a move needs both squares")
        elif self.from_square is None and self.promotion is not None:
            raise ValueError("a null move has no promotion")

    @classmethod
    def parse(cls, text: str) -> Uci:
        if text == "0000":
            return cls()
        if len(text) == 4 and text[1] == "@":
            role = _CHAR_ROLES.get(text[0].lower()) if text[0].isupper() else None
            if role is None:
                raise ValueError(f"invalid uci: {text!r}")
            return cls(to_square=_parse_square(text[2:]), drop=role)
        if len(text) in (4, 5):
            promotion = None
            if len(text) == 5:
                promotion = _CHAR_ROLES.get(text[4])
                if promotion is None:
                    raise ValueError(f"invalid uci: {text!r}")
            return cls(_parse_square(text[:2]), _parse_square(text[2:4]), promotion)
        raise ValueError(f"invalid uci: {text!r}")

    def __str__(self) -> str:
        if self.drop is not None:
            return f"{_ROLE_CHARS[self.drop].upper()}@{_square_name(self.to_square)}"
        if self.from_square is None:
            return "0000"
        promotion = _ROLE_CHARS[self.promotion] if self.promotion is not None else ""
        return _square_name(self.from_square) + _square_name(self.to_square) + promotion


@dataclass(frozen=True, repr=False)
class RawUci:
    """A move packed into 16 bits: from, to and role."""

    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xFFFF:
            raise ValueError(f"raw uci out of range: {self.value}")

    @classmethod
    def from_uci(cls, uci: Uci) -> RawUci:
        if uci.drop is not None:
            from_square = to_square = uci.to_square
            role = uci.drop
        elif uci.from_square is None:
            from_square = to_square = 0
            role = None
        else:
            from_square, to_square, role = uci.from_square, uci.to_square, uci.promotion
        return cls(from_square | (to_square << 6) | ((int(role) if role else 0) << 12))

    def to_uci(self) -> Uci:
        from_square = self.value & 63
        to_square = (self.value >> 6) & 63
        try:
            role: Optional[Role] = Role(self.value >> 12)
        except ValueError:
            role = None
        if from_square == to_square:
            return Uci(to_square=to_square, drop=role) if role is not None else Uci()
        return Uci(from_square, to_square, role)

    @classmethod
    def read(cls, reader: BinaryIO) -> RawUci:
        data = reader.read(2)
        if len(data) != 2:
            raise EOFError("unexpected end of input while reading move")
        return cls(int.from_bytes(data, "little"))

    def write(self, buf: bytearray) -> None:
        buf.extend(self.value.to_bytes(2, "little"))

    def __repr__(self) -> str:
        return f"RawUci({self.to_uci()})"