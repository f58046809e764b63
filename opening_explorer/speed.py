"""Time control categories."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Iterator, Tuple, TypeVar

T = TypeVar("T")


class InvalidSpeed(ValueError):
    """Raised for an unknown speed name."""

    def __init__(self, message: str = "invalid speed") -> None:
        super().__init__(message)


class Speed(Enum):
    ULTRA_BULLET = "ultraBullet"
    BULLET = "bullet"
    BLITZ = "blitz"
    RAPID = "rapid"
    CLASSICAL = "classical"
    CORRESPONDENCE = "correspondence"

    @classmethod
    def parse(cls, text: str) -> Speed:
        try:
            return cls(text)
        except ValueError:
            raise InvalidSpeed() from None


_FIELDS = {
    Speed.ULTRA_BULLET: "ultra_bullet",
    Speed.BULLET: "bullet",
    Speed.BLITZ: "blitz",
    Speed.RAPID: "rapid",
    Speed.CLASSICAL: "classical",
    Speed.CORRESPONDENCE: "correspondence",
}


@dataclass
class BySpeed(Generic[T]):
    """One value per speed."""

    ultra_bullet: T
    bullet: T
    blitz: T
    rapid: T
    classical: T
    correspondence: T

    def get(self, speed: Speed) -> T:
        return getattr(self, _FIELDS[speed])

    def __getitem__(self, speed: Speed) -> T:
        return self.get(speed)

    def __setitem__(self, speed: Speed, value: T) -> None:
        setattr(self, _FIELDS[speed], value)

    def items(self) -> Iterator[Tuple[Speed, T]]:
        for speed in Speed:
            yield speed, self.get(speed)

    def __iter__(self) -> Iterator[T]:
        return (value for _, value in self.items())