"""Tests for the JSON message codec."""

import pytest

from ut3.errors import ProtocolError
from ut3.logic import Player, WithFocus, WithoutFocus
from ut3.messages import (BadMove, GameDrawnByOpponent, GameWon, Move, Start, decode_identity,
                          decode_pos, decode_update, encode_identity, encode_pos, encode_update)


class TestBoardPos:
    def test_with_focus(self):
        assert encode_pos(WithFocus(5, 5)) == {"type": "with_focus", "meta": 5, "sub": 5}
        assert decode_pos({"type": "with_focus", "meta": 2, "sub": 9}) == WithFocus(2, 9)

    def test_without_focus(self):
        assert encode_pos(WithoutFocus(3)) == {"type": "without_focus", "sub": 3}
        assert decode_pos({"type": "without_focus", "sub": 3}) == WithoutFocus(3)

    def test_out_of_range_indices_still_decode(self):
        # range is the engine's call, answered with a bad-move notice
        assert decode_pos({"type": "without_focus", "sub": 0}) == WithoutFocus(0)
        assert decode_pos({"type": "with_focus", "meta": 12, "sub": 1}).is_illegal()

    @pytest.mark.parametrize("obj", [
        {"type": "with_focus", "sub": 1},
        {"type": "without_focus"},
        {"type": "without_focus", "sub": "5"},
        {"type": "without_focus", "sub": 5.0},
        {"type": "without_focus", "sub": True},
        {"type": "diagonal", "sub": 5},
        {"sub": 5},
        None,
        [1, 2],
    ])
    def test_malformed(self, obj):
        with pytest.raises(ProtocolError):
            decode_pos(obj)


class TestIdentity:
    def test_both_players(self):
        for player in Player:
            assert decode_identity(encode_identity(player)) is player
        assert encode_identity(Player.O) == {"type": "identity", "player": "O"}

    @pytest.mark.parametrize("obj", [
        {"type": "identity", "player": "Z"},
        {"type": "identity"},
        {"type": "start"},
    ])
    def test_malformed(self, obj):
        with pytest.raises(ProtocolError):
            decode_identity(obj)


class TestUpdates:
    def test_plain_updates(self):
        assert encode_update(Start()) == {"type": "start"}
        assert encode_update(BadMove()) == {"type": "bad_move"}
        assert decode_update({"type": "game_won"}) == GameWon()

    def test_updates_carrying_a_position(self):
        msg = encode_update(Move(WithFocus(5, 5)))
        assert msg == {"type": "move", "pos": {"type": "with_focus", "meta": 5, "sub": 5}}
        assert decode_update(msg) == Move(WithFocus(5, 5))

        drawn = GameDrawnByOpponent(WithoutFocus(7))
        assert decode_update(encode_update(drawn)) == drawn

    @pytest.mark.parametrize("obj", [
        {"type": "move"},
        {"type": "move", "pos": {"type": "without_focus"}},
        {"type": "resign"},
        {"type": ["start"]},
        {},
    ])
    def test_malformed(self, obj):
        with pytest.raises(ProtocolError):
            decode_update(obj)
