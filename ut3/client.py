"""Interactive client: mirrors the server's game and prompts for moves.

The local board only advances on server notices, in the order they arrive.
Our own move is applied once the server reports the opponent's reply (or the
end of the game), never when we send it.
"""
import logging
from typing import Callable, Optional

from .errors import DesyncError, GameError
from .logic import (BoardPos, Constrained, GameState, Player, UltimateTicTacToe,
                    WithFocus, WithoutFocus)
from .messages import (BadMove, GameDrawn, GameDrawnByOpponent, GameUpdate, GameWon,
                       GameWonByOpponent, Move, Start, decode_identity, decode_update, encode_pos)
from .wire import connect

log = logging.getLogger(__name__)

RESULT_TEXT = {
    GameWon:             "You won - yay!",
    GameWonByOpponent:   "You lost - :(",
    GameDrawn:           "Game drawn",
    GameDrawnByOpponent: "Game drawn",
}


class ClientGame:
    def __init__(self, identity: Player):
        self.identity = identity
        self.game = UltimateTicTacToe()
        self.pending: Optional[BoardPos] = None
        self.moves = 0
        self.finished = False

    def submit(self, pos: BoardPos) -> None:
        self.pending = pos

    def _apply(self, player: Player, pos: BoardPos) -> None:
        try:
            self.game.place(player, pos)
        except GameError as e:
            raise DesyncError(f"server accepted {pos} for {player.value}, "
                              f"local board refused it: {type(e).__name__} {e}") from e
        self.moves += 1

    def _confirm_own(self) -> None:
        if self.pending is None:
            raise DesyncError("server confirmed a move we never sent")
        pos, self.pending = self.pending, None
        self._apply(self.identity, pos)

    def _expect(self, state: GameState) -> None:
        if self.game.game_state != state:
            raise DesyncError(f"server says {state}, local board is {self.game.game_state}")

    def apply(self, update: GameUpdate) -> bool:
        """Mirror one server notice; return True when it is our turn to move."""
        if self.finished:
            raise DesyncError(f"{type(update).__name__} after the game ended")

        if isinstance(update, Start):
            if self.moves or self.pending is not None:
                raise DesyncError("start received mid-game")
            return True
        if isinstance(update, BadMove):
            self.pending = None
            return True

        # our previous move is implicitly accepted by anything that follows it
        if isinstance(update, (GameWon, GameDrawn)) or self.pending is not None or self.moves:
            self._confirm_own()
        if isinstance(update, (Move, GameWonByOpponent, GameDrawnByOpponent)):
            self._apply(self.identity.opponent, update.pos)

        if isinstance(update, Move):
            self._expect(GameState.ONGOING)
            return True
        self.finished = True
        if isinstance(update, GameWon):
            self._expect(GameState.won(self.identity))
        elif isinstance(update, GameWonByOpponent):
            self._expect(GameState.won(self.identity.opponent))
        else:
            self._expect(GameState.DRAWN)
        return False


def _read_index(prompt: str, read: Callable[[str], str], out: Callable[[str], None]) -> int:
    while True:
        out(prompt)
        try:
            num = int(read("").strip())
        except ValueError:
            num = 0
        if 1 <= num <= 9:
            return num
        out("invalid input")


def prompt_for_move(game: UltimateTicTacToe, read=input, out=print) -> BoardPos:
    focus = game.focus
    if isinstance(focus, Constrained):
        return WithoutFocus(_read_index(f"playing in square {focus.board + 1}, input subsquare to play in:", read, out))
    meta = _read_index("input supersquare to play in:", read, out)
    return WithFocus(meta, _read_index("input subsquare to play in:", read, out))


def run_client(conn, prompt=prompt_for_move, out=print) -> GameState:
    identity = decode_identity(conn.recv())
    out(f"You are {identity.value}")
    mirror = ClientGame(identity)

    while True:
        update = decode_update(conn.recv())
        log.debug("update %s", update)
        your_turn = mirror.apply(update)
        if isinstance(update, BadMove):
            out("server says you made a bad move >:(")
        out(mirror.game.board_as_string())
        if mirror.finished:
            out(RESULT_TEXT[type(update)])
            return mirror.game.game_state
        if your_turn:
            pos = prompt(mirror.game)
            mirror.submit(pos)
            conn.send(encode_pos(pos))


def play(ip: str, port: int) -> GameState:
    conn = connect(ip, port)
    try:
        return run_client(conn)
    finally:
        conn.close()
