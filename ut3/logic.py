"""Ultimate Tic Tac Toe rules engine.

One evaluator (`Board`) serves both nesting levels: a sub-board is a grid of
`Cell`s, the meta-board is a grid of `TicTacToe` sub-boards, and both kinds of
square report a `SquareState` through `state()`.
"""
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Generic, List, Optional, Protocol, Tuple, TypeVar, Union

from .errors import (GameError, GameOver, IllegalIndex, IncorrectInputVariant, InvalidIndex,
                     NonEmptySquare, SquareNotEmpty, SquareNotOpen, TTTError, TTTGameOver)

WIN_LINES = [
    (0,1,2),(3,4,5),(6,7,8),
    (0,3,6),(1,4,7),(2,5,8),
    (0,4,8),(2,4,6)
]


class Player(Enum):
    X = "X"
    O = "O"

    @property
    def opponent(self) -> "Player":
        return Player.O if self is Player.X else Player.X


# ── Game / square states ─────────────────────────────────────────────────────
class Status(Enum):
    ONGOING = "ongoing"
    WON     = "won"
    DRAWN   = "drawn"


@dataclass(frozen=True)
class GameState:
    status: Status
    winner: Optional[Player] = None

    @classmethod
    def won(cls, player: Player) -> "GameState":
        return cls(Status.WON, player)

    @property
    def ongoing(self) -> bool:
        return self.status is Status.ONGOING

    def __str__(self):
        return f"Won({self.winner.value})" if self.winner else self.status.name.title()

GameState.ONGOING = GameState(Status.ONGOING)
GameState.DRAWN   = GameState(Status.DRAWN)


class SquareKind(Enum):
    MARKED = "marked"   # marked by a player
    CLOSED = "closed"   # not empty, but belongs to no player and cannot be marked
    EMPTY  = "empty"


@dataclass(frozen=True)
class SquareState:
    kind: SquareKind
    player: Optional[Player] = None

    @classmethod
    def marked(cls, player: Player) -> "SquareState":
        return cls(SquareKind.MARKED, player)

SquareState.CLOSED = SquareState(SquareKind.CLOSED)
SquareState.EMPTY  = SquareState(SquareKind.EMPTY)


class Square(Protocol):
    def state(self) -> SquareState: ...


S = TypeVar("S", bound=Square)


@dataclass
class Cell:
    player: Optional[Player] = None

    def state(self) -> SquareState:
        return SquareState.marked(self.player) if self.player is not None else SquareState.EMPTY


# ── Grid evaluator ───────────────────────────────────────────────────────────
class Board(Generic[S]):
    """3x3 grid of squares, stored row-major as nine entries."""

    def __init__(self, squares: List[S]):
        if len(squares) != 9:
            raise ValueError(f"a board holds 9 squares, got {len(squares)}")
        self.squares = squares

    def __getitem__(self, idx: int) -> S:
        return self.squares[idx]

    def __iter__(self):
        return iter(self.squares)

    def won_by(self, player: Player) -> bool:
        mark = SquareState.marked(player)
        return any(all(self.squares[i].state() == mark for i in line) for line in WIN_LINES)

    def is_full(self) -> bool:
        return all(sq.state() != SquareState.EMPTY for sq in self.squares)

    def eval(self) -> GameState:
        # X is checked first; a placement never continues past a win, so
        # both players can't hold a line at once.
        if self.won_by(Player.X):
            return GameState.won(Player.X)
        if self.won_by(Player.O):
            return GameState.won(Player.O)
        if self.is_full():
            return GameState.DRAWN
        return GameState.ONGOING


# ── Sub-board ────────────────────────────────────────────────────────────────
class TicTacToe:
    def __init__(self):
        self.board: Board[Cell] = Board([Cell() for _ in range(9)])
        self._game_state = GameState.ONGOING

    @property
    def game_state(self) -> GameState:
        return self._game_state

    def check(self, idx: int) -> None:
        if not self._game_state.ongoing:
            raise TTTGameOver()
        if not 0 <= idx < 9:
            raise InvalidIndex(idx)
        resident = self.board[idx].player
        if resident is not None:
            raise NonEmptySquare(resident)

    def place(self, player: Player, idx: int) -> None:
        self.check(idx)
        self.board[idx].player = player
        self._game_state = self.board.eval()

    def move_is_valid(self, idx: int) -> bool:
        try:
            self.check(idx)
        except TTTError:
            return False
        return True

    def state(self) -> SquareState:
        if self._game_state.ongoing:
            return SquareState.EMPTY
        if self._game_state.winner:
            return SquareState.marked(self._game_state.winner)
        return SquareState.CLOSED

    def get_line(self, row: int) -> str:
        if not 0 <= row < 3:
            raise InvalidIndex(row)
        cells = self.board.squares[row * 3:row * 3 + 3]
        return "|".join(f" {c.player.value} " if c.player is not None else "   " for c in cells)


# ── Focus & move descriptors ─────────────────────────────────────────────────
@dataclass(frozen=True)
class FreeChoice:
    """Next player may pick any sub-board that is still open."""

@dataclass(frozen=True)
class Constrained:
    board: int   # 0-based meta index

Focus = Union[FreeChoice, Constrained]
FREE_CHOICE = FreeChoice()


def _illegal(i) -> bool:
    return not 1 <= i <= 9

# External indices are 1-based, in the range 1..9
@dataclass(frozen=True)
class WithFocus:
    meta: int
    sub: int

    def is_illegal(self) -> bool:
        return _illegal(self.meta) or _illegal(self.sub)

    def __str__(self):
        return f"{self.meta}/{self.sub}"

@dataclass(frozen=True)
class WithoutFocus:
    sub: int

    def is_illegal(self) -> bool:
        return _illegal(self.sub)

    def __str__(self):
        return str(self.sub)

BoardPos = Union[WithFocus, WithoutFocus]


# ── Meta engine ──────────────────────────────────────────────────────────────
class UltimateTicTacToe:
    def __init__(self):
        self.board: Board[TicTacToe] = Board([TicTacToe() for _ in range(9)])
        self._focus: Focus = FREE_CHOICE
        self._game_state = GameState.ONGOING

    @property
    def focus(self) -> Focus:
        return self._focus

    @property
    def game_state(self) -> GameState:
        return self._game_state

    def loc_from(self, pos: BoardPos) -> Tuple[int, int]:
        # converting from 1-based indexing to 0-based as well
        if isinstance(self._focus, Constrained) and isinstance(pos, WithoutFocus):
            return self._focus.board, pos.sub - 1
        if isinstance(self._focus, FreeChoice) and isinstance(pos, WithFocus):
            return pos.meta - 1, pos.sub - 1
        raise IncorrectInputVariant(f"{type(pos).__name__} not accepted under {self._focus}")

    def _resolve(self, pos: BoardPos) -> Tuple[int, int]:
        if not self._game_state.ongoing:
            raise GameOver()
        if pos.is_illegal():
            raise IllegalIndex(str(pos))
        return self.loc_from(pos)

    @contextmanager
    def _sub_errors(self, pos: BoardPos, meta: int):
        try:
            yield
        except NonEmptySquare as e:
            raise SquareNotEmpty(e.occupant) from e
        except TTTGameOver as e:
            raise SquareNotOpen(f"sub-board {meta + 1} is {self.board[meta].game_state}") from e
        except InvalidIndex as e:
            raise IllegalIndex(str(pos)) from e

    def check_move(self, pos: BoardPos) -> Tuple[int, int]:
        """Raise the error `place` would raise for `pos`, without mutating."""
        meta, square = self._resolve(pos)
        with self._sub_errors(pos, meta):
            self.board[meta].check(square)
        return meta, square

    def move_is_valid(self, pos: BoardPos) -> bool:
        try:
            self.check_move(pos)
        except GameError:
            return False
        return True

    def place(self, player: Player, pos: BoardPos) -> None:
        meta, square = self._resolve(pos)
        with self._sub_errors(pos, meta):
            self.board[meta].place(player, square)
        self._game_state = self.board.eval()
        # the square just played picks the opponent's sub-board
        nxt = self.board[square]
        self._focus = Constrained(square) if nxt.state() == SquareState.EMPTY else FREE_CHOICE

    def valid_moves(self) -> List[BoardPos]:
        if not self._game_state.ongoing:
            return []
        if isinstance(self._focus, Constrained):
            sub_ttt = self.board[self._focus.board]
            return [WithoutFocus(c + 1) for c in range(9) if sub_ttt.move_is_valid(c)]
        return [WithFocus(b + 1, c + 1) for b in range(9) for c in range(9)
                if self.board[b].move_is_valid(c)]

    # ── Display ──────────────────────────────────────────────────────────────
    SMALL_LINE = "---+---+--- # ---+---+--- # ---+---+---"
    BIG_LINE   = "#######################################"

    def board_as_string(self) -> str:
        lines = []
        for row_idx in range(3):
            for line_idx in range(3):
                games = self.board.squares[row_idx * 3:row_idx * 3 + 3]
                lines.append(" # ".join(g.get_line(line_idx) for g in games))
                if line_idx != 2:
                    lines.append(self.SMALL_LINE)
            if row_idx != 2:
                lines.append(self.BIG_LINE)
        return "\n".join(lines) + "\n"
