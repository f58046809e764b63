import io
import sys
from dataclasses import dataclass
from typing import FrozenSet, Optional

import pytest

from opening_explorer.game_id import GameId
from opening_explorer.lichess import LichessEntry, RatingGroup
from opening_explorer.speed import Speed
from opening_explorer.stats import Color, Outcome
from opening_explorer.uci import RawUci, Uci

UNLIMITED = sys.maxsize


@dataclass
class FakeFilter:
    speeds: Optional[FrozenSet[Speed]] = None
    ratings: Optional[FrozenSet[RatingGroup]] = None
    top: Optional[RatingGroup] = None

    def contains_speed(self, speed):
        return self.speeds is None or speed in self.speeds

    def contains_rating_group(self, rating_group):
        return self.ratings is None or rating_group in self.ratings

    def top_group(self):
        return self.top


@dataclass
class FakeLimits:
    recent_games: int = UNLIMITED
    top_games: int = UNLIMITED
    moves: int = 12

    def games_wanted(self):
        return self.recent_games > 0 or self.top_games > 0


def encode(entry):
    buf = bytearray()
    entry.write(buf)
    return bytes(buf)


def test_lichess_entry():
    uci_a = Uci.parse("g1f3")
    a = LichessEntry.new_single(
        uci_a, Speed.BLITZ, GameId.parse("aaaaaaaa"), Outcome(None), 2000, 2200
    )
    buf = encode(a)
    assert len(buf) == LichessEntry.SIZE_HINT

    deserialized = LichessEntry()
    deserialized.extend_from_reader(io.BytesIO(buf))
    assert len(deserialized.sub_entries) == 1
    assert deserialized.max_game_idx == 0

    uci_b = Uci.parse("d2d4")
    b = LichessEntry.new_single(
        uci_b, Speed.BLITZ, GameId.parse("bbbbbbbb"), Outcome(Color.WHITE), 2000, 2200
    )
    deserialized.extend_from_reader(encode(b))
    assert len(deserialized.sub_entries) == 2
    assert deserialized.max_game_idx == 1

    buf = encode(deserialized)
    deserialized = LichessEntry()
    deserialized.extend_from_reader(buf)
    assert len(deserialized.sub_entries) == 2
    assert deserialized.max_game_idx == 1

    res = deserialized.prepare(
        FakeFilter(ratings=frozenset({RatingGroup.GROUP_2000})), FakeLimits()
    )
    assert res.recent_games == [
        (uci_b, GameId.parse("bbbbbbbb")),
        (uci_a, GameId.parse("aaaaaaaa")),
    ]


def test_write_single_size_hint():
    entry = LichessEntry.new_single(
        Uci.parse("e2e4"),
        Speed.CLASSICAL,
        GameId.parse("abcdefgh"),
        Outcome(Color.WHITE),
        1610,
        1620,
    )
    assert len(encode(entry)) == LichessEntry.SIZE_HINT


@pytest.mark.parametrize(
    "avg, expected",
    [
        (0, RatingGroup.GROUP_LOW),
        (999, RatingGroup.GROUP_LOW),
        (1000, RatingGroup.GROUP_1000),
        (2199, RatingGroup.GROUP_2000),
        (2200, RatingGroup.GROUP_2200),
        (2799, RatingGroup.GROUP_2500),
        (2800, RatingGroup.GROUP_3200),
    ],
)
def test_select_avg(avg, expected):
    assert RatingGroup.select_avg(avg) is expected


def test_select_uses_midpoint():
    assert RatingGroup.select(2000, 2200) is RatingGroup.GROUP_2000
    assert RatingGroup.select(1500, 1600) is RatingGroup.GROUP_1400


def test_parse_rating_group():
    assert RatingGroup.parse("1500") is RatingGroup.GROUP_1400
    with pytest.raises(ValueError):
        RatingGroup.parse("abc")
    with pytest.raises(ValueError):
        RatingGroup.parse("70000")


def test_total_respects_filter():
    entry = LichessEntry.new_single(
        Uci.parse("e2e4"), Speed.BLITZ, GameId.parse("aaaaaaaa"), Outcome(None), 1500, 1500
    )
    assert entry.total(FakeFilter()).draws == 1
    assert entry.total(FakeFilter(speeds=frozenset({Speed.BULLET}))).is_empty()
    assert entry.total(FakeFilter(ratings=frozenset({RatingGroup.GROUP_1400}))).total() == 1


def test_prepare_splits_top_games():
    uci_a = Uci.parse("e2e4")
    uci_b = Uci.parse("d2d4")
    entry = LichessEntry.new_single(
        uci_a, Speed.BLITZ, GameId.parse("aaaaaaaa"), Outcome(None), 2000, 2200
    )
    entry.extend_from_reader(
        encode(
            LichessEntry.new_single(
                uci_b, Speed.BLITZ, GameId.parse("bbbbbbbb"), Outcome(Color.BLACK), 1000, 1000
            )
        )
    )
    res = entry.prepare(FakeFilter(top=RatingGroup.GROUP_2000), FakeLimits())
    assert res.top_games == [(uci_a, GameId.parse("aaaaaaaa"))]
    assert res.recent_games == [(uci_b, GameId.parse("bbbbbbbb"))]
    assert res.total.total() == 2
    assert [m.uci for m in res.moves] == [uci_a, uci_b] or [m.uci for m in res.moves] == [
        uci_b,
        uci_a,
    ]
    by_uci = {m.uci: m for m in res.moves}
    assert by_uci[uci_a].game == GameId.parse("aaaaaaaa")
    assert by_uci[uci_a].average_rating == 2000
    assert by_uci[uci_b].stats.black == 1


def test_prepare_sorts_moves_by_popularity():
    uci_a = Uci.parse("e2e4")
    uci_b = Uci.parse("d2d4")
    entry = LichessEntry.new_single(
        uci_a, Speed.BLITZ, GameId.parse("aaaaaaaa"), Outcome(None), 1500, 1500
    )
    for game in ("bbbbbbbb", "cccccccc"):
        entry.extend_from_reader(
            encode(
                LichessEntry.new_single(
                    uci_b, Speed.BLITZ, GameId.parse(game), Outcome(Color.WHITE), 1500, 1500
                )
            )
        )
    res = entry.prepare(FakeFilter(), FakeLimits(moves=1))
    assert len(res.moves) == 1
    assert res.moves[0].uci == uci_b
    assert res.moves[0].stats.total() == 2
    assert res.moves[0].game is None
    assert res.total.total() == 3


def test_prepare_without_games_wanted():
    entry = LichessEntry.new_single(
        Uci.parse("e2e4"), Speed.BLITZ, GameId.parse("aaaaaaaa"), Outcome(None), 1500, 1500
    )
    res = entry.prepare(FakeFilter(), FakeLimits(recent_games=0, top_games=0))
    assert res.recent_games == []
    assert res.top_games == []
    assert res.moves[0].game == GameId.parse("aaaaaaaa")


def test_write_keeps_latest_games_only():
    uci = Uci.parse("e2e4")
    entry = LichessEntry()
    for i in range(10):
        entry.extend_from_reader(
            encode(
                LichessEntry.new_single(
                    uci, Speed.BLITZ, GameId.parse(f"game{i:04d}"), Outcome(None), 1500, 1500
                )
            )
        )
    assert entry.max_game_idx == 9

    reread = LichessEntry()
    reread.extend_from_reader(encode(entry))
    group = reread.sub_entries[RawUci.from_uci(uci)][Speed.BLITZ][RatingGroup.GROUP_1400]
    assert group.stats.draws == 10
    assert [game for _, game in group.games] == [GameId.parse(f"game{i:04d}") for i in range(2, 10)]

    res = reread.prepare(FakeFilter(), FakeLimits(recent_games=3))
    assert res.recent_games == [
        (uci, GameId.parse("game0009")),
        (uci, GameId.parse("game0008")),
        (uci, GameId.parse("game0007")),
    ]


def test_invalid_header_raises():
    buf = bytearray()
    RawUci.from_uci(Uci.parse("e2e4")).write(buf)
    buf.append(7)
    with pytest.raises(ValueError):
        LichessEntry().extend_from_reader(bytes(buf))


def test_truncated_input_raises():
    buf = encode(
        LichessEntry.new_single(
            Uci.parse("e2e4"), Speed.BLITZ, GameId.parse("aaaaaaaa"), Outcome(None), 1500, 1500
        )
    )
    with pytest.raises(EOFError):
        LichessEntry().extend_from_reader(buf[:-2])