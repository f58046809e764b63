from dataclasses import dataclass

import pytest

from opening_explorer.game_id import GameId, InvalidGameId
from opening_explorer.masters import MastersEntry, MastersGame, MastersGameWithId
from opening_explorer.stats import Color, Outcome
from opening_explorer.uci import RawUci, Uci

E2E4 = Uci.parse("e2e4")
D2D4 = Uci.parse("d2d4")


@dataclass
class Limits:
    moves: int = 12
    top_games: int = 15


def _game_id(n: int) -> GameId:
    return GameId(n)


def test_masters_entry():
    game = GameId.parse("aaaaaaaa")
    a = MastersEntry.new_single(E2E4, game, Outcome(None), 1600, 1700)

    buf = bytearray()
    a.write(buf)
    assert len(buf) == MastersEntry.SIZE_HINT

    deserialized = MastersEntry()
    deserialized.extend_from_reader(bytes(buf))

    group = deserialized.groups[RawUci.from_uci(E2E4)]
    assert group.stats.draws == 1
    assert group.games[0] == (1600 + 1700, game)


def test_empty_entry_writes_nothing():
    buf = bytearray()
    MastersEntry().write(buf)
    assert buf == bytearray()


def test_merge_and_roundtrip():
    entry = MastersEntry()
    for i, uci in enumerate([E2E4, E2E4, D2D4]):
        buf = bytearray()
        MastersEntry.new_single(uci, _game_id(i), Outcome(Color.WHITE), 2500, 2600).write(buf)
        entry.extend_from_reader(bytes(buf))

    assert len(entry.groups) == 2
    e4 = entry.groups[RawUci.from_uci(E2E4)]
    assert e4.stats.white == 2
    assert len(e4.games) == 2

    buf = bytearray()
    entry.write(buf)
    again = MastersEntry()
    again.extend_from_reader(bytes(buf))
    assert again.groups[RawUci.from_uci(E2E4)].stats == e4.stats
    assert sorted(again.groups[RawUci.from_uci(E2E4)].games) == sorted(e4.games)


def test_write_keeps_only_top_games():
    entry = MastersEntry()
    for i in range(20):
        buf = bytearray()
        MastersEntry.new_single(E2E4, _game_id(i), Outcome(None), 1000 + i, 1000).write(buf)
        entry.extend_from_reader(bytes(buf))

    buf = bytearray()
    entry.write(buf)
    again = MastersEntry()
    again.extend_from_reader(bytes(buf))
    group = again.groups[RawUci.from_uci(E2E4)]
    assert group.stats.draws == 20
    assert len(group.games) == 15
    assert min(key for key, _ in group.games) == 2005


def test_prepare():
    entry = MastersEntry()
    inputs = [
        (E2E4, 1, 2000, 2100),
        (E2E4, 2, 2700, 2800),
        (D2D4, 3, 2400, 2500),
    ]
    for uci, n, mover, opponent in inputs:
        buf = bytearray()
        MastersEntry.new_single(uci, _game_id(n), Outcome(Color.BLACK), mover, opponent).write(buf)
        entry.extend_from_reader(bytes(buf))

    res = entry.prepare(Limits())
    assert res.total.black == 3
    assert [m.uci for m in res.moves] == [E2E4, D2D4]
    assert res.moves[0].game is None
    assert res.moves[0].average_rating == 2350
    assert res.moves[1].game == _game_id(3)
    assert res.top_games == [(E2E4, _game_id(2)), (D2D4, _game_id(3)), (E2E4, _game_id(1))]
    assert res.recent_games == []


def test_prepare_respects_limits():
    entry = MastersEntry()
    for n, uci in enumerate([E2E4, D2D4]):
        buf = bytearray()
        MastersEntry.new_single(uci, _game_id(n), Outcome(None), 2000 + n, 2000).write(buf)
        entry.extend_from_reader(bytes(buf))

    res = entry.prepare(Limits(moves=1, top_games=1))
    assert len(res.moves) == 1
    assert res.top_games == [(D2D4, _game_id(1))]


GAME_DATA = {
    "id": "abcdefgh",
    "event": "Example Open",
    "site": "Example City",
    "date": "2020.01.??",
    "round": "1",
    "white": {"name": "Player A", "rating": 2700},
    "black": {"name": "Player B", "rating": 2650},
    "winner": "white",
    "moves": "e2e4 e7e5",
}


def test_game_with_id_from_dict():
    parsed = MastersGameWithId.from_dict(GAME_DATA)
    assert parsed.id == GameId.parse("abcdefgh")
    game = parsed.game
    assert game.event == "Example Open"
    assert str(game.date) == "2020.01.??"
    assert game.players[Color.WHITE].rating == 2700
    assert game.players[Color.BLACK].name == "Player B"
    assert game.moves == [E2E4, Uci.parse("e7e5")]
    assert game.outcome() == Outcome(Color.WHITE)
    assert str(game.outcome()) == "1-0"


def test_game_draw_and_roundtrip():
    data = dict(GAME_DATA)
    del data["winner"]
    data["moves"] = ""
    game = MastersGame.from_dict(data)
    assert game.outcome() == Outcome(None)
    assert game.moves == []
    assert MastersGame.from_dict(game.to_dict()) == game


def test_invalid_game_data():
    with pytest.raises(InvalidGameId):
        MastersGameWithId.from_dict({**GAME_DATA, "id": "short"})
    with pytest.raises(ValueError):
        MastersGame.from_dict({**GAME_DATA, "winner": "nobody"})
    with pytest.raises(ValueError):
        MastersGame.from_dict({**GAME_DATA, "moves": "e2e9"})