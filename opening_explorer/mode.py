"""Rated or casual game mode."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Iterator, Tuple, TypeVar

T = TypeVar("T")


class InvalidMode(ValueError):
    """Raised for an unknown mode name."""

    def __init__(self, message: str = "invalid mode") -> None:
        super().__init__(message)


class Mode(Enum):
    RATED = "rated"
    CASUAL = "casual"

    @classmethod
    def from_rated(cls, rated: bool) -> Mode:
        return cls.RATED if rated else cls.CASUAL

    @classmethod
    def parse(cls, text: str) -> Mode:
        try:
            return cls(text)
        except ValueError:
            raise InvalidMode() from None

    def is_rated(self) -> bool:
        return self is Mode.RATED


@dataclass
class ByMode(Generic[T]):
    """One value per mode."""

    rated: T
    casual: T

    def get(self, mode: Mode) -> T:
        return getattr(self, mode.value)

    def __getitem__(self, mode: Mode) -> T:
        return self.get(mode)

    def __setitem__(self, mode: Mode, value: T) -> None:
        setattr(self, mode.value, value)

    def items(self) -> Iterator[Tuple[Mode, T]]:
        for mode in Mode:
            yield mode, self.get(mode)

    def __iter__(self) -> Iterator[T]:
        return (value for _, value in self.items())