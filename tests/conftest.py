import random

import pytest

from ut3.errors import ConnectionClosed
from ut3.logic import GameState, Player, UltimateTicTacToe, WithFocus, WithoutFocus

# X wins sub-boards 1, 2 and 3 (the top meta row) with their middle rows while
# every O reply sends X back to the board it needs. The last move closes
# sub-board 2 and the meta row at once.
X_WINS_TOP_ROW = [
    WithFocus(1, 4),     # X  board 1 cell 4 -> O to board 4
    WithoutFocus(2),     # O  -> X to board 2
    WithoutFocus(7),     # X  -> O to board 7
    WithoutFocus(1),     # O  -> X to board 1
    WithoutFocus(5),     # X  -> O to board 5
    WithoutFocus(2),     # O  -> X to board 2
    WithoutFocus(8),     # X  -> O to board 8
    WithoutFocus(3),     # O  -> X to board 3
    WithoutFocus(4),     # X  -> O to board 4
    WithoutFocus(1),     # O  -> X to board 1
    WithoutFocus(6),     # X  wins board 1 -> O to board 6
    WithoutFocus(3),     # O  -> X to board 3
    WithoutFocus(5),     # X  -> O to board 5
    WithoutFocus(3),     # O  -> X to board 3
    WithoutFocus(6),     # X  wins board 3 -> O to board 6
    WithoutFocus(2),     # O  -> X to board 2
    WithoutFocus(9),     # X  wins board 2 and the game
]


def play_moves(game, moves, first=Player.X):
    player = first
    for pos in moves:
        game.place(player, pos)
        player = player.opponent
    return game


def random_playout(seed):
    """Play uniformly random legal moves to the end; return (moves, result)."""
    rng = random.Random(seed)
    game = UltimateTicTacToe()
    moves, player = [], Player.X
    while game.game_state.ongoing:
        pos = rng.choice(game.valid_moves())
        game.place(player, pos)
        moves.append(pos)
        player = player.opponent
    return moves, game.game_state


def drawn_playout():
    for seed in range(500):
        moves, result = random_playout(seed)
        if result == GameState.DRAWN:
            return moves
    raise AssertionError("no drawn game in 500 random playouts")


@pytest.fixture
def game():
    return UltimateTicTacToe()


class FakeConn:
    """Scripted connection: `recv` pops from `inbox`, `send` appends to `sent`."""

    def __init__(self, inbox=None, name="fake"):
        self.inbox = list(inbox or [])
        self.sent = []
        self.reads = 0
        self.closed = False
        self.name = name

    def send(self, payload):
        self.sent.append(payload)

    def recv(self):
        if not self.inbox:
            raise ConnectionClosed(f"{self.name} has nothing left to say")
        self.reads += 1
        return self.inbox.pop(0)

    def close(self):
        self.closed = True

    def __repr__(self):
        return f"<FakeConn {self.name}>"
