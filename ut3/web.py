"""Socket.IO transport: browser peers play through the same Session loop.

Clients emit 'join' to be seated and 'move' with a board position object.
Every server message is delivered as an 'update' event. Each seated client
gets an inbound queue; the session (a background task) only ever pulls from
the queue of the side to act.
"""
import logging

from flask import Flask, request
from flask_socketio import SocketIO, emit

from . import config
from .errors import ConnectionClosed, TransportError
from .session import Session

log = logging.getLogger(__name__)

socketio = SocketIO()

_CLOSED = object()


class SocketIOConnection:
    def __init__(self, sid, timeout=config.IO_TIMEOUT):
        self.sid = sid
        self.timeout = timeout
        self.inbox = socketio.server.eio.create_queue()
        self.closed = False

    def send(self, payload: dict) -> None:
        if self.closed:
            raise ConnectionClosed(f"{self.sid} is gone")
        socketio.emit('update', payload, to=self.sid)

    def recv(self) -> dict:
        try:
            item = self.inbox.get(timeout=self.timeout)
        except socketio.server.eio.get_queue_empty_exception() as e:
            raise TransportError(f"{self.sid} timed out after {self.timeout}s") from e
        if item is _CLOSED:
            raise ConnectionClosed(f"{self.sid} disconnected")
        return item

    def feed(self, payload) -> None:
        self.inbox.put(payload)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.inbox.put(_CLOSED)

    def __repr__(self):
        return f"<SocketIOConnection {self.sid}>"


class Lobby:
    """Seats joining clients two at a time, first come is X."""

    def __init__(self):
        self.waiting = None
        self.conns = {}
        self.count = 0

    def seat(self, sid):
        conn = SocketIOConnection(sid)
        if self.waiting is None:
            self.count += 1
            self.waiting = Session(f"web-{self.count}")
        session = self.waiting
        session.join(conn)
        self.conns[sid] = conn
        if session.full:
            self.waiting = None
            socketio.start_background_task(_play, session)
        return session

    def drop(self, sid):
        conn = self.conns.pop(sid, None)
        if conn is None:
            return
        conn.close()
        if self.waiting is not None and conn in self.waiting.conns.values():
            log.info("[%s] %r left before an opponent arrived", self.waiting.name, conn)
            self.waiting = None


lobby = Lobby()


def _play(session):
    try:
        session.run()
    except TransportError as e:
        log.error("[%s] aborted: %s", session.name, e)
    finally:
        session.close()
        for conn in session.conns.values():
            lobby.conns.pop(conn.sid, None)


@socketio.on('join')
def join(data=None):
    sid = request.sid
    if sid in lobby.conns:
        emit('already_in_game', {'error': 'You are already in a game.'}); return
    lobby.seat(sid)

@socketio.on('move')
def move(data=None):
    conn = lobby.conns.get(request.sid)
    if conn is None:
        emit('not_in_game', {'error': 'Join a game first.'}); return
    conn.feed(data)

@socketio.on('disconnect')
def disconnect(reason=None):
    lobby.drop(request.sid)


def create_app(async_mode='gevent', **config_overrides):
    global lobby
    app = Flask(__name__)
    app.config['SECRET_KEY'] = config.SECRET_KEY
    app.config.update(config_overrides)
    lobby = Lobby()
    socketio.init_app(app, async_mode=async_mode)
    return app
