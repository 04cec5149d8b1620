"""Authoritative two-player session.

The session owns both connections and the one engine instance. Only the
connection of the side to act is ever read, so turn alternation is the only
mutual exclusion the engine needs.

A connection is anything with `send(dict)`, `recv() -> dict` and `close()`
(see `ut3.wire.FramedConnection` and `ut3.web.SocketIOConnection`).
"""
import logging
from enum import Enum

from .errors import GameError, SessionFull
from .logic import GameState, Player, UltimateTicTacToe
from .messages import (BadMove, GameDrawn, GameDrawnByOpponent, GameWon, GameWonByOpponent,
                       Move, Start, decode_pos, encode_identity, encode_update)

log = logging.getLogger(__name__)


class SessionState(Enum):
    AWAITING_SECOND_PLAYER = "awaiting_second_player"
    IDENTITY_ASSIGNED      = "identity_assigned"
    TURN_LOOP              = "turn_loop"
    TERMINAL               = "terminal"


class Session:
    def __init__(self, name="session"):
        self.name = name
        self.game = UltimateTicTacToe()
        self.conns = {}
        self.state = SessionState.AWAITING_SECOND_PLAYER
        self.current = Player.X

    @property
    def full(self) -> bool:
        return len(self.conns) == 2

    def join(self, conn) -> Player:
        # first come is X, no randomization
        if self.full:
            raise SessionFull(self.name)
        player = Player.X if Player.X not in self.conns else Player.O
        conn.send(encode_identity(player))
        self.conns[player] = conn
        log.info("[%s] %r seated as %s", self.name, conn, player.value)
        if self.full:
            self.state = SessionState.IDENTITY_ASSIGNED
        return player

    def _send(self, player, update):
        self.conns[player].send(encode_update(update))

    def run(self) -> GameState:
        """Drive the game to a win or draw; transport errors propagate."""
        if self.state is not SessionState.IDENTITY_ASSIGNED:
            raise RuntimeError(f"cannot run session in state {self.state.name}")
        self.state = SessionState.TURN_LOOP
        self._send(self.current, Start())

        while True:
            pos = decode_pos(self.conns[self.current].recv())
            try:
                self.game.check_move(pos)
            except GameError as e:
                log.info("[%s] bad move %s by %s: %s %s", self.name, pos, self.current.value, type(e).__name__, e)
                self._send(self.current, BadMove())
                continue

            self.game.place(self.current, pos)
            result = self.game.game_state
            mover, other = self.current, self.current.opponent

            if result.ongoing:
                self.current = other
                self._send(other, Move(pos))
            elif result.winner:
                self._send(mover, GameWon())
                self._send(other, GameWonByOpponent(pos))
                break
            else:
                self._send(mover, GameDrawn())
                self._send(other, GameDrawnByOpponent(pos))
                break

        self.state = SessionState.TERMINAL
        log.info("[%s] finished: %s", self.name, result)
        return result

    def close(self) -> None:
        self.state = SessionState.TERMINAL
        for conn in self.conns.values():
            conn.close()
