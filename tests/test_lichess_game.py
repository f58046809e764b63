import io

import pytest

from opening_explorer.date import InvalidDate, Month
from opening_explorer.lichess_game import GamePlayer, LichessGame
from opening_explorer.mode import Mode
from opening_explorer.speed import Speed
from opening_explorer.stats import Color, Outcome


def make_game(**overrides):
    fields = dict(
        outcome=Outcome(Color.WHITE),
        speed=Speed.BLITZ,
        mode=Mode.RATED,
        players={
            Color.WHITE: GamePlayer("alice", 1500),
            Color.BLACK: GamePlayer("bob", 1600),
        },
        month=Month.parse("2021-06"),
        indexed_player={Color.WHITE: True, Color.BLACK: False},
        indexed_lichess=True,
    )
    fields.update(overrides)
    return LichessGame(**fields)


def roundtrip(game):
    buf = bytearray()
    game.write(buf)
    reader = io.BytesIO(bytes(buf))
    result = LichessGame.read(reader)
    assert reader.read() == b""
    return result


@pytest.mark.parametrize("speed", list(Speed))
@pytest.mark.parametrize("outcome", [Outcome(Color.WHITE), Outcome(Color.BLACK), Outcome()])
@pytest.mark.parametrize("mode", list(Mode))
def test_roundtrip(speed, outcome, mode):
    game = make_game(speed=speed, outcome=outcome, mode=mode)
    assert roundtrip(game) == game


@pytest.mark.parametrize("white", [False, True])
@pytest.mark.parametrize("black", [False, True])
def test_indexed_flags_roundtrip(white, black):
    game = make_game(
        indexed_player={Color.WHITE: white, Color.BLACK: black}, indexed_lichess=False
    )
    assert roundtrip(game) == game


def test_player_wire_format():
    buf = bytearray()
    GamePlayer("ab", 1500).write(buf)
    assert bytes(buf) == b"\x02ab" + (1500).to_bytes(2, "little")
    assert GamePlayer.read(io.BytesIO(bytes(buf))) == GamePlayer("ab", 1500)


def test_invalid_speed_byte():
    with pytest.raises(ValueError):
        LichessGame.read(io.BytesIO(bytes([7])))


def test_invalid_outcome_byte():
    with pytest.raises(ValueError):
        LichessGame.read(io.BytesIO(bytes([3 << 3])))


def test_truncated_input():
    buf = bytearray()
    make_game().write(buf)
    with pytest.raises(EOFError):
        LichessGame.read(io.BytesIO(bytes(buf[:-1])))


def test_invalid_month():
    buf = bytearray()
    make_game().write(buf)
    buf[-3:-1] = (0).to_bytes(2, "little")
    with pytest.raises(InvalidDate):
        LichessGame.read(io.BytesIO(bytes(buf)))