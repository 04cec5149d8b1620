"""Length-framed JSON over a stream socket.

Each frame is a 4-byte big-endian length followed by that many bytes of UTF-8
JSON holding one message object (see `ut3.messages`).
"""
import json
import logging
import struct

from gevent import socket

from . import config
from .errors import ConnectionClosed, ProtocolError, TransportError

log = logging.getLogger(__name__)

HEADER = struct.Struct('!I')
ENCODING = 'utf-8'


def _recv_exactly(sock, n: int) -> bytes:
    buf = bytearray()
    while len(buf) < n:
        chunk = sock.recv(n - len(buf))
        if not chunk:
            raise ConnectionClosed(f"peer closed after {len(buf)} of {n} bytes")
        buf += chunk
    return bytes(buf)


def write_frame(sock, payload: dict, max_frame: int = config.MAX_FRAME) -> None:
    data = json.dumps(payload, separators=(",", ":")).encode(ENCODING)
    if len(data) > max_frame:
        raise ProtocolError(f"frame of {len(data)} bytes exceeds limit {max_frame}")
    sock.sendall(HEADER.pack(len(data)) + data)


def read_frame(sock, max_frame: int = config.MAX_FRAME) -> dict:
    (length,) = HEADER.unpack(_recv_exactly(sock, HEADER.size))
    if length > max_frame:
        raise ProtocolError(f"frame of {length} bytes exceeds limit {max_frame}")
    raw = _recv_exactly(sock, length)
    try:
        obj = json.loads(raw.decode(ENCODING))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ProtocolError(f"invalid frame body: {e}") from e
    if not isinstance(obj, dict):
        raise ProtocolError(f"frame body is not an object: {obj!r}")
    return obj


class FramedConnection:
    """One peer's socket, speaking whole messages."""

    def __init__(self, sock, peer=None, timeout=config.IO_TIMEOUT, max_frame=config.MAX_FRAME):
        self.sock = sock
        self.peer = peer
        self.max_frame = max_frame
        sock.settimeout(timeout)

    def send(self, payload: dict) -> None:
        log.debug("-> %s %s", self.peer, payload)
        try:
            write_frame(self.sock, payload, self.max_frame)
        except OSError as e:
            raise TransportError(f"send to {self.peer} failed: {e}") from e

    def recv(self) -> dict:
        try:
            payload = read_frame(self.sock, self.max_frame)
        except OSError as e:
            raise TransportError(f"receive from {self.peer} failed: {e}") from e
        log.debug("<- %s %s", self.peer, payload)
        return payload

    def close(self) -> None:
        try:
            self.sock.close()
        except OSError as e:
            log.warning("closing %s: %s", self.peer, e)

    def __repr__(self):
        return f"<FramedConnection {self.peer}>"


def connect(ip: str, port: int, timeout=config.IO_TIMEOUT) -> FramedConnection:
    sock = socket.create_connection((ip, port))
    return FramedConnection(sock, peer=f"{ip}:{port}", timeout=timeout)
