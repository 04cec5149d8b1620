import logging

import gevent
from gevent import socket

from . import config
from .errors import TransportError
from .session import Session
from .wire import FramedConnection

log = logging.getLogger(__name__)


class AcceptLimitReached(TransportError):
    pass


def listen(host: str, port: int):
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    listener.bind((host, port))
    listener.listen()
    return listener


def get_stream(listener, err_limit: int = config.ACCEPT_ERR_LIMIT) -> FramedConnection:
    num_times_erred = 0
    while True:
        try:
            sock, addr = listener.accept()
        except OSError as e:
            num_times_erred += 1
            log.warning("Error connecting: %s (%d/%d)", e, num_times_erred, err_limit)
            if num_times_erred >= err_limit:
                raise AcceptLimitReached(f"gave up after {num_times_erred} failed accepts") from e
            continue
        return FramedConnection(sock, peer=f"{addr[0]}:{addr[1]}")


def seat(session: Session, listener, err_limit: int = config.ACCEPT_ERR_LIMIT):
    """Accept connections until one is seated in `session`."""
    while True:
        conn = get_stream(listener, err_limit)
        try:
            return session.join(conn)
        except TransportError as e:
            log.warning("[%s] dropping %r before seating: %s", session.name, conn, e)
            conn.close()


def play(session: Session):
    try:
        return session.run()
    except TransportError as e:
        log.error("[%s] aborted: %s", session.name, e)
        raise
    finally:
        session.close()


def _play_detached(session: Session):
    try:
        play(session)
    except TransportError:
        pass   # already logged, session torn down


def serve(host: str = config.HOST, port: int = config.PORT, forever: bool = False,
          err_limit: int = config.ACCEPT_ERR_LIMIT):
    """Pair incoming connections into sessions.

    Without `forever`, one session is played in the caller and its final
    GameState returned; transport errors propagate. With `forever`, each
    session gets its own greenlet and the server keeps accepting.
    """
    listener = listen(host, port)
    log.info("listening on %s:%d", host, port)
    count = 0
    try:
        while True:
            count += 1
            session = Session(f"game-{count}")
            seat(session, listener, err_limit)
            seat(session, listener, err_limit)
            if not forever:
                return play(session)
            gevent.spawn(_play_detached, session)
    finally:
        listener.close()
