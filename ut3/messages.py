"""Protocol messages and their JSON form.

All messages are JSON objects with a 'type' field:
  identity:                { type: 'identity', player: 'X'|'O' }
  start:                   { type: 'start' }
  move:                    { type: 'move', pos: <pos> }
  game_won:                { type: 'game_won' }
  game_won_by_opponent:    { type: 'game_won_by_opponent', pos: <pos> }
  game_drawn:              { type: 'game_drawn' }
  game_drawn_by_opponent:  { type: 'game_drawn_by_opponent', pos: <pos> }
  bad_move:                { type: 'bad_move' }
Client to server, one per turn:
  with_focus:              { type: 'with_focus', meta: 1..9, sub: 1..9 }
  without_focus:           { type: 'without_focus', sub: 1..9 }
Index range is the engine's business; the codec only checks shape.
"""
from dataclasses import dataclass
from typing import Optional, Union

from .errors import ProtocolError
from .logic import BoardPos, Player, WithFocus, WithoutFocus


@dataclass(frozen=True)
class Start:
    pass

@dataclass(frozen=True)
class Move:
    # opponent made this move (and the previous one we sent was accepted)
    pos: BoardPos

@dataclass(frozen=True)
class GameWon:
    pass

@dataclass(frozen=True)
class GameWonByOpponent:
    pos: BoardPos

@dataclass(frozen=True)
class GameDrawn:
    pass

@dataclass(frozen=True)
class GameDrawnByOpponent:
    pos: BoardPos

@dataclass(frozen=True)
class BadMove:
    pass

GameUpdate = Union[Start, Move, GameWon, GameWonByOpponent, GameDrawn, GameDrawnByOpponent, BadMove]

_UPDATE_TYPES = {
    "start":                  Start,
    "move":                   Move,
    "game_won":               GameWon,
    "game_won_by_opponent":   GameWonByOpponent,
    "game_drawn":             GameDrawn,
    "game_drawn_by_opponent": GameDrawnByOpponent,
    "bad_move":               BadMove,
}
_UPDATE_NAMES = {cls: name for name, cls in _UPDATE_TYPES.items()}
_CARRIES_POS = (Move, GameWonByOpponent, GameDrawnByOpponent)


def _field(obj, key):
    try:
        return obj[key]
    except (KeyError, TypeError):
        raise ProtocolError(f"missing '{key}' in {obj!r}") from None

def _index(obj, key) -> int:
    v = _field(obj, key)
    # bool is an int subclass; reject it explicitly
    if not isinstance(v, int) or isinstance(v, bool):
        raise ProtocolError(f"'{key}' must be an integer, got {v!r}")
    return v


# ── BoardPos ─────────────────────────────────────────────────────────────────
def encode_pos(pos: BoardPos) -> dict:
    if isinstance(pos, WithFocus):
        return {"type": "with_focus", "meta": pos.meta, "sub": pos.sub}
    return {"type": "without_focus", "sub": pos.sub}

def decode_pos(obj) -> BoardPos:
    kind = _field(obj, "type")
    if kind == "with_focus":
        return WithFocus(_index(obj, "meta"), _index(obj, "sub"))
    if kind == "without_focus":
        return WithoutFocus(_index(obj, "sub"))
    raise ProtocolError(f"unknown board position type {kind!r}")


# ── Identity ─────────────────────────────────────────────────────────────────
def encode_identity(player: Player) -> dict:
    return {"type": "identity", "player": player.value}

def decode_identity(obj) -> Player:
    if _field(obj, "type") != "identity":
        raise ProtocolError(f"expected identity, got {obj!r}")
    try:
        return Player(_field(obj, "player"))
    except ValueError:
        raise ProtocolError(f"unknown player {obj['player']!r}") from None


# ── Game updates ─────────────────────────────────────────────────────────────
def encode_update(update: GameUpdate) -> dict:
    msg = {"type": _UPDATE_NAMES[type(update)]}
    if isinstance(update, _CARRIES_POS):
        msg["pos"] = encode_pos(update.pos)
    return msg

def decode_update(obj) -> GameUpdate:
    kind = _field(obj, "type")
    cls: Optional[type] = _UPDATE_TYPES.get(kind) if isinstance(kind, str) else None
    if cls is None:
        raise ProtocolError(f"unknown update {obj!r}")
    if cls in _CARRIES_POS:
        return cls(decode_pos(_field(obj, "pos")))
    return cls()
