"""User names and case-insensitive user ids."""

from __future__ import annotations

import string

_ALLOWED = frozenset((string.ascii_letters + string.digits + "-_").encode("ascii"))
_MAX_LEN = 30


class InvalidUserName(ValueError):
    """Raised for malformed user names."""

    def __init__(self, message: str = "invalid username") -> None:
        super().__init__(message)


def _valid(data: bytes) -> bool:
    return 0 < len(data) <= _MAX_LEN and all(c in _ALLOWED for c in data)


class UserName:
    """A user name as typed; compares case-insensitively."""

    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        if not _valid(name.encode("utf-8")):
            raise InvalidUserName()
        self._name = name

    @classmethod
    def from_bytes(cls, data: bytes) -> UserName:
        if not _valid(data):
            raise InvalidUserName()
        return cls(data.decode("ascii"))

    @classmethod
    def parse(cls, text: str) -> UserName:
        return cls.from_bytes(text.encode("utf-8"))

    def __bytes__(self) -> bytes:
        return self._name.encode("ascii")

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"UserName({self._name!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, UserName):
            return self._name.lower() == other._name.lower()
        if isinstance(other, UserId):
            return self._name.lower() == other.as_lowercase_str()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._name.lower())


class UserId:
    """The lowercase form of a user name."""

    __slots__ = ("_id",)

    def __init__(self, name: UserName) -> None:
        self._id = str(name).lower()

    @classmethod
    def from_name(cls, name: UserName) -> UserId:
        return cls(name)

    def as_lowercase_str(self) -> str:
        return self._id

    def __str__(self) -> str:
        return self._id

    def __repr__(self) -> str:
        return f"UserId({self._id!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, UserId):
            return self._id == other._id
        if isinstance(other, UserName):
            return self._id == str(other).lower()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._id)