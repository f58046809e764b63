"""Eight-character base-62 game identifiers."""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import BinaryIO, ClassVar

_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase
_LENGTH = 8
_LIMIT = len(_ALPHABET) ** _LENGTH


class InvalidGameId(ValueError):
    """Raised for malformed game ids."""

    def __init__(self, message: str = "invalid game id") -> None:
        super().__init__(message)


@dataclass(frozen=True, order=True, repr=False)
class GameId:
    """A game id, stored as its numeric value."""

    value: int

    SIZE: ClassVar[int] = 6

    def __post_init__(self) -> None:
        if not 0 <= self.value < _LIMIT:
            raise InvalidGameId()

    @classmethod
    def parse(cls, text: str) -> GameId:
        if len(text) != _LENGTH:
            raise InvalidGameId()
        n = 0
        for ch in reversed(text):
            digit = _ALPHABET.find(ch)
            if digit < 0:
                raise InvalidGameId()
            n = n * len(_ALPHABET) + digit
        return cls(n)

    def __str__(self) -> str:
        chars = []
        n = self.value
        for _ in range(_LENGTH):
            n, rem = divmod(n, len(_ALPHABET))
            chars.append(_ALPHABET[rem])
        return "".join(chars)

    def __repr__(self) -> str:
        return f"GameId({self})"

    def to_bytes(self) -> bytes:
        return self.value.to_bytes(self.SIZE, "little")

    def write(self, buf: bytearray) -> None:
        buf.extend(self.to_bytes())

    @classmethod
    def read(cls, reader: BinaryIO) -> GameId:
        data = reader.read(cls.SIZE)
        if len(data) != cls.SIZE:
            raise EOFError("unexpected end of input while reading game id")
        return cls(int.from_bytes(data, "little"))