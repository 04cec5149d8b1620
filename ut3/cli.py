import argparse
import logging
import sys

from . import config
from .errors import DesyncError, TransportError

log = logging.getLogger(__name__)


def setup_logging(level=config.LOG_LEVEL):
    logger = logging.getLogger("ut3")
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    ))
    logger.addHandler(handler)
    return logger


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ut3", description="Ultimate Tic Tac Toe over the network")
    p.add_argument("--server", action="store_true", help="host a game instead of joining one")
    p.add_argument("-p", "--port", type=int, default=config.PORT)
    p.add_argument("--ip", default=config.IP, help="server address to connect to (client)")
    p.add_argument("--host", default=config.HOST, help="address to bind (server)")
    p.add_argument("--web", action="store_true", help="serve the Socket.IO transport (implies --server)")
    p.add_argument("--forever", action="store_true", help="keep pairing players into new games")
    p.add_argument("--log-level", default=config.LOG_LEVEL,
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"], type=str.upper)
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        if args.web:
            from .web import create_app, socketio
            socketio.run(create_app(), host=args.host, port=args.port)
        elif args.server:
            from .server import serve
            serve(args.host, args.port, forever=args.forever)
        else:
            from .client import play
            play(args.ip, args.port)
    except (TransportError, DesyncError, OSError) as e:
        log.error("%s: %s", type(e).__name__, e)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0
