"""Error taxonomy for the engine, the session loop and the transports."""


# ── Sub-board tier ───────────────────────────────────────────────────────────
class TTTError(Exception):
    pass

class InvalidIndex(TTTError):
    pass

class NonEmptySquare(TTTError):
    def __init__(self, occupant):
        super().__init__(f"square already marked by {occupant.value}")
        self.occupant = occupant

class TTTGameOver(TTTError):
    pass


# ── Meta tier ────────────────────────────────────────────────────────────────
class GameError(Exception):
    pass

class IncorrectInputVariant(GameError):
    """The BoardPos shape does not match the current focus."""

class IllegalIndex(GameError):
    pass

class SquareNotOpen(GameError):
    """The addressed sub-board is already won or drawn."""

class SquareNotEmpty(GameError):
    def __init__(self, occupant):
        super().__init__(f"square already marked by {occupant.value}")
        self.occupant = occupant

class GameOver(GameError):
    pass


# ── Transport / protocol tier ────────────────────────────────────────────────
class TransportError(Exception):
    pass

class ConnectionClosed(TransportError):
    pass

class ProtocolError(TransportError):
    """Malformed frame or message."""


class SessionFull(Exception):
    pass


class DesyncError(Exception):
    """The local mirror refused a move the server already accepted."""
