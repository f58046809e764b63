import pytest

from opening_explorer.speed import BySpeed, InvalidSpeed, Speed


@pytest.mark.parametrize(
    "text, speed",
    [
        ("ultraBullet", Speed.ULTRA_BULLET),
        ("bullet", Speed.BULLET),
        ("blitz", Speed.BLITZ),
        ("rapid", Speed.RAPID),
        ("classical", Speed.CLASSICAL),
        ("correspondence", Speed.CORRESPONDENCE),
    ],
)
def test_parse(text, speed):
    assert Speed.parse(text) is speed


@pytest.mark.parametrize("text", ["ultrabullet", "Blitz", "", "daily"])
def test_parse_invalid(text):
    with pytest.raises(InvalidSpeed):
        Speed.parse(text)


def test_roundtrip():
    for speed in Speed:
        assert Speed.parse(speed.value) is speed


def _by_speed():
    return BySpeed(
        ultra_bullet="u", bullet="b", blitz="z", rapid="r", classical="c", correspondence="d"
    )


def test_by_speed_items_order():
    by_speed = _by_speed()
    assert [speed for speed, _ in by_speed.items()] == list(Speed)
    assert list(by_speed) == ["u", "b", "z", "r", "c", "d"]


def test_by_speed_get_and_set():
    by_speed = _by_speed()
    assert by_speed.get(Speed.CORRESPONDENCE) == "d"
    by_speed[Speed.BLITZ] = "new"
    assert by_speed.blitz == "new"
    assert by_speed[Speed.BLITZ] == "new"