"""Board state at any ply of a resolved move sequence."""

import logging
import re
from dataclasses import dataclass
from typing import Optional

import chess


_LOGGER = logging.getLogger(__name__)

# Result header values shown verbatim as the end-of-game label
RESULT_TOKENS = ("1-0", "0-1", "1/2-1/2")

_RESIGN_RE = re.compile(r"resign", re.IGNORECASE)
_WON_BY_RESIGNATION_RE = re.compile(r"\b(white|black)\s+won\s+by\s+resignation",
                                    re.IGNORECASE)
_WHITE_RE = re.compile(r"white", re.IGNORECASE)
_BLACK_RE = re.compile(r"black", re.IGNORECASE)


class CursorOutOfRangeError(IndexError):
    """Raised when a ply cursor lies outside [0, len(sequence)]."""


class EngineInvariantError(RuntimeError):
    """Raised when a move accepted during interpretation fails on replay."""


@dataclass
class BoardState:
    """Position after the first `cursor` moves, with derived display data."""
    board: chess.Board
    cursor: int
    total: int
    last_move_from: Optional[str] = None
    last_move_to: Optional[str] = None
    is_check: bool = False
    end_label: str = ""
    resigning_color: Optional[chess.Color] = None   # set at the final ply only

    @property
    def fen(self):
        return self.board.fen()

    @property
    def at_end(self):
        return self.cursor == self.total


def find_king_square(board, color):
    """Scan the board rank 8 to 1, file a to h, for the king of `color`.

    Returns the square name or None.
    """
    for rank in range(7, -1, -1):
        for file in range(8):
            square = chess.square(file, rank)
            piece = board.piece_at(square)
            if piece and piece.piece_type == chess.KING and piece.color == color:
                return chess.square_name(square)
    return None


def resigning_side(termination):
    """Work out which side resigned from a Termination header.

    Chess.com writes "Black won by resignation", naming the winner, so the
    loser is the other colour. This departs from a plain colour match, which
    would read that text as Black resigning. Otherwise the colour named in the
    text is the one that resigned. Returns chess.WHITE, chess.BLACK or None.
    """
    if not termination or not _RESIGN_RE.search(termination):
        return None

    match = _WON_BY_RESIGNATION_RE.search(termination)
    if match:
        return chess.BLACK if match.group(1).lower() == "white" else chess.WHITE

    if _WHITE_RE.search(termination):
        return chess.WHITE
    if _BLACK_RE.search(termination):
        return chess.BLACK
    return None


def is_drawn(board):
    """Insufficient material, threefold repetition or the fifty-move rule."""
    return (board.is_insufficient_material()
            or board.is_repetition(3)
            or board.is_fifty_moves())


def end_label(board, termination="", result=""):
    """Label for the final position, in order of precedence."""
    if board.is_checkmate():
        return "Checkmate"

    if termination and _RESIGN_RE.search(termination):
        side = resigning_side(termination)
        if side == chess.WHITE:
            return "White resigned"
        if side == chess.BLACK:
            return "Black resigned"
        return "Resignation"

    if board.is_stalemate():
        return "Stalemate"
    if is_drawn(board):
        return "Draw"
    if result in RESULT_TOKENS:
        return result
    return ""


def replay(sequence, cursor):
    """Push the first `cursor` moves onto a fresh board and return it."""
    board = chess.Board()
    for ply in range(cursor):
        move = sequence[ply].to_move()
        if not board.is_legal(move):
            _LOGGER.error("Replay rejected ply %d (%s) in position %s",
                          ply, move.uci(), board.fen())
            raise EngineInvariantError(
                f"Move {move.uci()} at ply {ply} is not legal on replay")
        board.push(move)
    return board


def state_at(sequence, cursor, termination="", result=""):
    """Rebuild the BoardState after `cursor` moves of `sequence`.

    Raises CursorOutOfRangeError if cursor is not in [0, len(sequence)].
    """
    total = len(sequence)
    if isinstance(cursor, bool) or not isinstance(cursor, int) or not 0 <= cursor <= total:
        raise CursorOutOfRangeError(f"Cursor {cursor!r} outside [0, {total}]")

    board = replay(sequence, cursor)
    state = BoardState(board=board, cursor=cursor, total=total,
                       is_check=board.is_check())

    if cursor > 0:
        last = sequence[cursor - 1]
        state.last_move_from = last.from_square
        state.last_move_to = last.to_square

    if cursor == total:
        state.end_label = end_label(board, termination, result)
        state.resigning_color = resigning_side(termination)

    return state
