import chess
import pytest

from game_replayer import CursorOutOfRangeError
from replay_navigator import (HIGHLIGHT_CHECK, HIGHLIGHT_LAST_MOVE,
                              HIGHLIGHT_RESIGNATION, KEY_BINDINGS, GameViewer,
                              NavAction, reduce_cursor)
from helpers import RUY_LOPEZ_PGN, SCHOLARS_MATE_PGN, WHITE_RESIGNS_PGN


class TestReduceCursor:
    @pytest.mark.parametrize("cursor, action, expected", [
        (0, NavAction.NEXT, 1),
        (5, NavAction.NEXT, 6),
        (6, NavAction.NEXT, 6),
        (3, NavAction.PREV, 2),
        (0, NavAction.PREV, 0),
        (4, NavAction.FIRST, 0),
        (2, NavAction.LAST, 6),
    ])
    def test_transitions(self, cursor, action, expected):
        assert reduce_cursor(cursor, 6, action) == expected

    def test_empty_game(self):
        assert reduce_cursor(0, 0, NavAction.NEXT) == 0
        assert reduce_cursor(0, 0, NavAction.LAST) == 0

    def test_invalid_cursor_raises(self):
        with pytest.raises(CursorOutOfRangeError):
            reduce_cursor(7, 6, NavAction.PREV)

    def test_unknown_action_raises(self):
        with pytest.raises(ValueError):
            reduce_cursor(0, 6, "next")


class TestGameViewer:
    def test_notifies_on_creation(self):
        calls = []
        GameViewer(RUY_LOPEZ_PGN, on_cursor_change=lambda c, t: calls.append((c, t)))
        assert calls == [(0, 6)]

    def test_forward_navigation(self):
        calls = []
        viewer = GameViewer(RUY_LOPEZ_PGN, on_cursor_change=lambda c, t: calls.append((c, t)))
        for expected in range(1, viewer.total + 1):
            assert viewer.dispatch(NavAction.NEXT) == expected
            state = viewer.state
            assert state.last_move_from is not None
            assert state.last_move_to is not None
        assert calls[-1] == (6, 6)

    def test_no_notification_at_bounds(self):
        calls = []
        viewer = GameViewer(RUY_LOPEZ_PGN, on_cursor_change=lambda c, t: calls.append((c, t)))
        viewer.dispatch(NavAction.PREV)
        viewer.dispatch(NavAction.FIRST)
        assert calls == [(0, 6)]

    def test_first_and_last(self):
        viewer = GameViewer(RUY_LOPEZ_PGN)
        viewer.dispatch(NavAction.LAST)
        assert viewer.cursor == 6
        assert not viewer.can_next
        viewer.dispatch(NavAction.FIRST)
        assert viewer.cursor == 0
        assert not viewer.can_prev

    def test_jump_to(self):
        viewer = GameViewer(RUY_LOPEZ_PGN)
        assert viewer.jump_to(4) == 4
        assert viewer.state.last_move_to == "b5"

    @pytest.mark.parametrize("cursor", [-1, 7])
    def test_jump_out_of_range(self, cursor):
        viewer = GameViewer(RUY_LOPEZ_PGN)
        with pytest.raises(CursorOutOfRangeError):
            viewer.jump_to(cursor)
        assert viewer.cursor == 0

    def test_state_cached_until_cursor_moves(self):
        viewer = GameViewer(RUY_LOPEZ_PGN)
        first = viewer.state
        assert viewer.state is first
        viewer.dispatch(NavAction.NEXT)
        assert viewer.state is not first

    def test_headers_read(self):
        viewer = GameViewer(WHITE_RESIGNS_PGN)
        assert viewer.termination == "White resigns"
        assert viewer.result == "0-1"

    def test_end_label_at_last_ply(self):
        viewer = GameViewer(WHITE_RESIGNS_PGN)
        assert viewer.end_label == ""
        viewer.dispatch(NavAction.LAST)
        assert viewer.end_label == "White resigned"

    def test_fallback_when_requested(self):
        viewer = GameViewer("", use_fallback=True)
        assert viewer.is_fallback
        assert viewer.total == 6
        assert not viewer.parsed.moves

    def test_no_fallback_by_default(self):
        viewer = GameViewer("")
        assert not viewer.is_fallback
        assert viewer.total == 0
        assert viewer.end_label == ""


class TestKeyBindings:
    def test_bindings(self):
        assert KEY_BINDINGS["ArrowRight"] is NavAction.NEXT
        assert KEY_BINDINGS["ArrowLeft"] is NavAction.PREV
        assert KEY_BINDINGS["r"] is NavAction.FIRST
        assert KEY_BINDINGS["l"] is NavAction.LAST

    def test_handle_key(self):
        viewer = GameViewer(RUY_LOPEZ_PGN)
        assert viewer.handle_key("ArrowRight")
        assert viewer.cursor == 1
        assert viewer.handle_key("L")
        assert viewer.cursor == 6
        assert viewer.handle_key("ArrowLeft")
        assert viewer.cursor == 5
        assert viewer.handle_key("r")
        assert viewer.cursor == 0

    def test_unbound_key_ignored(self):
        viewer = GameViewer(RUY_LOPEZ_PGN)
        assert not viewer.handle_key("x")
        assert viewer.cursor == 0


class TestSquareHighlights:
    def test_none_at_start(self):
        assert GameViewer(RUY_LOPEZ_PGN).square_highlights() == {}

    def test_last_move(self):
        viewer = GameViewer(RUY_LOPEZ_PGN)
        viewer.dispatch(NavAction.NEXT)
        assert viewer.square_highlights() == {
            "e2": HIGHLIGHT_LAST_MOVE,
            "e4": HIGHLIGHT_LAST_MOVE,
        }

    def test_check_ring_on_side_to_move(self):
        viewer = GameViewer(SCHOLARS_MATE_PGN)
        viewer.dispatch(NavAction.LAST)
        assert viewer.square_highlights() == {
            "h5": HIGHLIGHT_LAST_MOVE,
            "f7": HIGHLIGHT_LAST_MOVE,
            "e8": HIGHLIGHT_CHECK,
        }

    def test_resignation_ring_on_resigning_king(self):
        viewer = GameViewer(WHITE_RESIGNS_PGN)
        viewer.dispatch(NavAction.LAST)
        board = viewer.state.board
        white_king = chess.square_name(board.king(chess.WHITE))
        highlights = viewer.square_highlights()
        assert highlights[white_king] == HIGHLIGHT_RESIGNATION
        assert white_king == "e1"

    def test_no_resignation_ring_before_end(self):
        viewer = GameViewer(WHITE_RESIGNS_PGN)
        viewer.jump_to(5)
        assert HIGHLIGHT_RESIGNATION not in viewer.square_highlights().values()
