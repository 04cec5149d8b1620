import logging

import pytest

from ut3 import client, config, server
from ut3.cli import build_parser, main, setup_logging
from ut3.errors import ConnectionClosed, DesyncError


class TestParser:
    def test_defaults_come_from_config(self):
        args = build_parser().parse_args([])
        assert args.port == config.PORT
        assert args.ip == config.IP
        assert args.host == config.HOST
        assert not (args.server or args.web or args.forever)

    def test_server_flags(self):
        args = build_parser().parse_args(["--server", "-p", "4000", "--forever", "--log-level", "debug"])
        assert args.server and args.forever
        assert args.port == 4000
        assert args.log_level == "DEBUG"

    def test_unknown_level_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--log-level", "loud"])


class TestMain:
    def test_server_mode(self, monkeypatch):
        calls = []
        monkeypatch.setattr(server, "serve", lambda host, port, forever: calls.append((host, port, forever)))
        assert main(["--server", "--host", "127.0.0.1", "-p", "4001"]) == 0
        assert calls == [("127.0.0.1", 4001, False)]

    def test_client_mode(self, monkeypatch):
        calls = []
        monkeypatch.setattr(client, "play", lambda ip, port: calls.append((ip, port)))
        assert main(["--ip", "10.1.2.3"]) == 0
        assert calls == [("10.1.2.3", config.PORT)]

    @pytest.mark.parametrize("exc", [ConnectionClosed("bye"), DesyncError("drift"),
                                     ConnectionRefusedError("nobody home")])
    def test_failures_exit_nonzero(self, monkeypatch, exc):
        def boom(ip, port):
            raise exc
        monkeypatch.setattr(client, "play", boom)
        assert main([]) == 1

    def test_interrupt(self, monkeypatch):
        def interrupted(ip, port):
            raise KeyboardInterrupt
        monkeypatch.setattr(client, "play", interrupted)
        assert main([]) == 130


def test_setup_logging_replaces_handlers():
    logger = setup_logging("debug")
    setup_logging("warning")
    assert logger is logging.getLogger("ut3")
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
    setup_logging(config.LOG_LEVEL)
