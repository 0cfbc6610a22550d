# replay_navigator.py

"""Cursor navigation over a replayed game.

Input devices only translate their events into NavAction values; the cursor
itself moves through the pure `reduce_cursor` function.
"""

from enum import Enum
from typing import Callable, Dict, Optional

from game_replayer import CursorOutOfRangeError, find_king_square, state_at
from pgn_normalizer import normalize
from pgn_parser import PGNParser


HIGHLIGHT_LAST_MOVE = "last-move"
HIGHLIGHT_CHECK = "check"
HIGHLIGHT_RESIGNATION = "resignation"


class NavAction(Enum):
    NEXT = "next"
    PREV = "prev"
    FIRST = "first"
    LAST = "last"


# Keyboard keys (as reported by browser KeyboardEvent.key) -> action
KEY_BINDINGS = {
    "ArrowRight": NavAction.NEXT,
    "ArrowLeft": NavAction.PREV,
    "r": NavAction.FIRST,
    "l": NavAction.LAST,
}


def reduce_cursor(cursor, total, action):
    """Return the cursor after applying `action`. Stays within [0, total]."""
    if not 0 <= cursor <= total:
        raise CursorOutOfRangeError(f"Cursor {cursor!r} outside [0, {total}]")

    if action is NavAction.NEXT:
        return min(total, cursor + 1)
    if action is NavAction.PREV:
        return max(0, cursor - 1)
    if action is NavAction.FIRST:
        return 0
    if action is NavAction.LAST:
        return total
    raise ValueError(f"Unknown navigation action: {action!r}")


def square_highlights(state):
    """Map square name -> highlight kind for a BoardState.

    Later kinds win on a shared square: last move, then check ring on the
    side to move, then resignation ring on the resigning king.
    """
    highlights = {}
    if state.last_move_from:
        highlights[state.last_move_from] = HIGHLIGHT_LAST_MOVE
    if state.last_move_to:
        highlights[state.last_move_to] = HIGHLIGHT_LAST_MOVE

    if state.is_check:
        king_square = find_king_square(state.board, state.board.turn)
        if king_square:
            highlights[king_square] = HIGHLIGHT_CHECK

    if state.at_end and state.resigning_color is not None:
        king_square = find_king_square(state.board, state.resigning_color)
        if king_square:
            highlights[king_square] = HIGHLIGHT_RESIGNATION

    return highlights


class GameViewer:
    """Step-through session for a single PGN.

    Owns the ply cursor and notifies `on_cursor_change(cursor, total)` each
    time it moves (and once on creation). With `use_fallback` an unreadable
    game is replaced by the sample opening; otherwise it has no moves.
    """

    def __init__(self, pgn: Optional[str],
                 on_cursor_change: Optional[Callable[[int, int], None]] = None,
                 use_fallback: bool = False):
        self.pgn = normalize(pgn)
        self.termination = PGNParser.get_header(self.pgn, "Termination")
        self.result = PGNParser.get_header(self.pgn, "Result")

        self.parsed = PGNParser.interpret(self.pgn)
        self.sequence = PGNParser.with_fallback(self.parsed) if use_fallback else self.parsed

        self.on_cursor_change = on_cursor_change
        self._cursor = 0
        self._cached_state = None
        self._notify()

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def total(self) -> int:
        return len(self.sequence)

    @property
    def is_fallback(self) -> bool:
        return self.sequence.is_fallback

    @property
    def state(self):
        """BoardState at the current cursor (rebuilt when the cursor moves)."""
        if self._cached_state is None or self._cached_state.cursor != self._cursor:
            self._cached_state = state_at(self.sequence, self._cursor,
                                          self.termination, self.result)
        return self._cached_state

    @property
    def end_label(self) -> str:
        return self.state.end_label

    @property
    def can_prev(self) -> bool:
        return self._cursor > 0

    @property
    def can_next(self) -> bool:
        return self._cursor < self.total

    def square_highlights(self) -> Dict[str, str]:
        return square_highlights(self.state)

    def dispatch(self, action: NavAction) -> int:
        """Apply a navigation action and return the new cursor."""
        return self._set_cursor(reduce_cursor(self._cursor, self.total, action))

    def jump_to(self, cursor: int) -> int:
        """Move straight to `cursor`; out-of-range values raise."""
        if isinstance(cursor, bool) or not isinstance(cursor, int) or not 0 <= cursor <= self.total:
            raise CursorOutOfRangeError(f"Cursor {cursor!r} outside [0, {self.total}]")
        return self._set_cursor(cursor)

    def handle_key(self, key: str) -> bool:
        """Dispatch the action bound to `key`. Returns False for unbound keys."""
        action = KEY_BINDINGS.get(key) or KEY_BINDINGS.get(key.lower())
        if action is None:
            return False
        self.dispatch(action)
        return True

    def _set_cursor(self, cursor):
        if cursor != self._cursor:
            self._cursor = cursor
            self._notify()
        return self._cursor

    def _notify(self):
        if self.on_cursor_change:
            self.on_cursor_change(self._cursor, self.total)
