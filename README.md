# opening_explorer

Data model for a chess opening explorer. For each position it records
which moves were played, how the games ended and which games to show. The
records use a compact binary format meant for a key-value store, and
several encoded records for the same position can be merged by reading
them into one object.

The package has no dependencies outside the standard library.

## Modules

- `opening_explorer.uint`: `read_uint(reader)` and `write_uint(buf, n)`.
  These handle variable-length unsigned integers of up to 64 bits, 7 bits
  per byte, with the least significant group first.
- `opening_explorer.game_id`: `GameId` is an eight-character base-62 game
  id, stored in six little-endian bytes. It provides `GameId.parse`,
  `str()`, `to_bytes`, `write` and `read`. Bad input raises
  `InvalidGameId`.
- `opening_explorer.date`:
  - `Year` and `Month` are limited to the years 1952 to 3000. They provide
    `parse`, `min_value`, `max_value`, `add_years_saturating` and
    `add_months_saturating`.
  - `Month.from_time_saturating` clamps a `date` or `datetime` into that
    range.
  - `LaxDate` is a PGN-style date such as `2021.??.??`.
  - Bad input raises `InvalidDate`.
- `opening_explorer.mode`: `Mode` (`RATED`, `CASUAL`) and the
  one-value-per-mode container `ByMode`.
- `opening_explorer.speed`: `Speed` (`ULTRA_BULLET` to `CORRESPONDENCE`)
  and the one-value-per-speed container `BySpeed`.
- `opening_explorer.user`:
  - `UserName` holds 1 to 30 ASCII letters, digits, `-` or `_`, and
    compares without regard to case.
  - `UserId` is its lowercase form.
- `opening_explorer.uci`:
  - `Uci` is a move in UCI notation: a normal move, a drop such as `N@e4`,
    or the null move `0000`.
  - `RawUci` packs a move into 16 bits.
  - `Role` names the piece kinds.
- `opening_explorer.stats`:
  - `Color` and `Outcome` describe the sides and the result of a game.
  - `Stats` counts white wins, draws and black wins, plus a rating sum. It
    provides `average_rating()` and `performance(color)`, a performance
    rating taken from the FIDE percentage table, and a compact
    `read`/`write` encoding.
- `opening_explorer.history`:
  - `HistoryBuilder` turns cumulative totals per month into per-month
    `HistorySegment`s and fills any gaps with empty months.
  - If no upper bound is given, `build()` leaves out the last month.
- `opening_explorer.key`:
  - `KeyBuilder` (`player`, `masters`, `lichess`) mixes a 128-bit Zobrist
    hash with a `Variant` and returns a `KeyPrefix`.
  - `KeyPrefix.with_month` and `KeyPrefix.with_year` produce a 14-byte
    `Key`. Keys sort in the same order as their months.
- `opening_explorer.lichess`:
  - `RatingGroup` holds the rating bands.
  - `LichessEntry` holds all games through a position, grouped by move,
    speed and rating band. It provides `new_single`,
    `extend_from_reader`, `write`, `total` and `prepare`.
  - `prepare` returns a `PreparedResponse` of `PreparedMove`s plus recent
    and top games.
- `opening_explorer.player`:
  - `PlayerEntry` holds one player's games, grouped by move, speed and
    mode.
  - `PlayerStatus` decides when a player's games need indexing. Its
    `maybe_start_index_run` returns an `IndexRun` (built with
    `IndexRun.index` or `IndexRun.revisit`, of kind `IndexRunKind`).
    `finish_index_run` records that a run has finished.
- `opening_explorer.masters`:
  - `MastersGame` and `MastersGameWithId` are built from JSON-style dicts
    with `from_dict`. `MastersGame.to_dict` turns a game back into a dict.
  - `MastersEntry` keeps the 15 highest-rated games across all moves of a
    position when it is written.
- `opening_explorer.lichess_game`: `LichessGame` and `GamePlayer`, the
  stored metadata of a game.
- `opening_explorer.metrics`: `ServerStats` is a set of thread-safe hit
  counters by request `Source` and by ply. Hits that take at least 500 ms
  are also counted in a separate set. `to_influx_string()` renders the
  counters as InfluxDB line-protocol fields.
- `opening_explorer.util`:
  - `ply(fullmoves, black_to_move)`.
  - `sort_by_key_and_truncate(items, num, key)`, which works in place.
  - `dedup_by_key(iterable, key)`, for plain or async iterables.
  - `midpoint(a, b)`.
  - `spawn_blocking(semaphore, func)`, which runs `func` in a thread while
    holding an `asyncio.Semaphore`.

## Example

```python
from opening_explorer.game_id import GameId
from opening_explorer.lichess import LichessEntry
from opening_explorer.speed import Speed
from opening_explorer.stats import Color, Outcome
from opening_explorer.uci import Uci

entry = LichessEntry.new_single(
    Uci.parse("e2e4"),
    Speed.CLASSICAL,
    GameId.parse("abcdefgh"),
    Outcome.from_winner(Color.WHITE),
    1610,
    1620,
)

buf = bytearray()
entry.write(buf)

merged = LichessEntry()
merged.extend_from_reader(buf)
merged.extend_from_reader(buf)  # games are numbered after those already held
```

`prepare` takes a query filter and limits that the caller supplies. Any
object with the right members will do:

```python
class AllGames:
    def contains_speed(self, speed):
        return True

    def contains_rating_group(self, rating_group):
        return True

    def top_group(self):
        return None


class Limits:
    moves = 12
    top_games = 4
    recent_games = 4

    def games_wanted(self):
        return True


response = merged.prepare(AllGames(), Limits())
print(response.total.total(), [str(m.uci) for m in response.moves])
```

The other entry types take different objects:

- `PlayerEntry.prepare(color, filter, limits)` expects `filter.speeds` and
  `filter.modes`, each a collection or `None`, and `limits.moves` and
  `limits.recent_games`.
- `MastersEntry.prepare(limits)` expects `limits.moves` and
  `limits.top_games`.

Storage keys:

```python
from opening_explorer.date import Month
from opening_explorer.key import KeyBuilder, Variant

prefix = KeyBuilder.lichess().with_zobrist(Variant.CHESS, 0x1234)
key = prefix.with_month(Month.parse("2023-01"))
assert key.month() == Month.parse("2023-01")
```

## What it does not do

This package is only the data model. It does not include any of the
following:

- an HTTP server or API;
- a database or key-value store;
- indexing of games fetched from elsewhere;
- a command-line tool;
- a chess board. Moves are stored and compared as UCI notation and never
  checked for legality.
- opening names;
- PGN output for master games.

## Tests

```
pip install -e ".[test]"
pytest
```