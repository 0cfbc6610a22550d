# pgn_parser.py

import dataclasses
import functools
import re
from dataclasses import dataclass
from typing import Optional, Tuple

import chess

from pgn_normalizer import normalize


# Shown when a game has nothing replayable (Ruy Lopez, Morphy Defence).
# Callers opt in through PGNParser.with_fallback; interpret() never uses it.
FALLBACK_PGN = "1. e4 e5 2. Nf3 Nc6 3. Bb5 a6 *"

_BLANK_LINE_RE = re.compile(r"\n[ \t]*\n")
_HEADER_LINE_RE = re.compile(r"^\s*\[[^\]\n]*\]\s*$")
_COMMENT_RE = re.compile(r"\{[^}]*\}")
_VARIATION_RE = re.compile(r"\([^()]*\)")
_LINE_COMMENT_RE = re.compile(r";[^\n]*")
_NAG_RE = re.compile(r"\$\d+")
_RESULT_RE = re.compile(r"(?<!\S)(?:1-0|0-1|1/2-1/2|\*)(?!\S)")
_MOVE_NUMBER_RE = re.compile(r"\d+\.(?:\.\.)?")
_ANNOTATION_SUFFIX_RE = re.compile(r"[!?]+$")


@dataclass(frozen=True)
class ResolvedMove:
    """One ply, resolved against the position it was played from."""
    from_square: str            # "e2"
    to_square: str              # "e4"
    promotion: Optional[str]    # "q", "r", "b", "n" or None
    san: str                    # canonical SAN as printed by python-chess
    uci: str

    def to_move(self):
        return chess.Move.from_uci(self.uci)


@dataclass(frozen=True)
class MoveSequence:
    """Ordered moves interpreted from a transcript, parsed as far as possible."""
    moves: Tuple[ResolvedMove, ...] = ()
    token_count: int = 0                 # SAN-like tokens found in the movetext
    rejected_token: Optional[str] = None  # first token the engine refused
    is_fallback: bool = False

    @property
    def is_complete(self):
        """True when every movetext token was resolved."""
        return self.rejected_token is None

    def __len__(self):
        return len(self.moves)

    def __getitem__(self, index):
        return self.moves[index]

    def __iter__(self):
        return iter(self.moves)


class PGNParser:
    """Parses PGN strings into resolved move sequences and header values."""

    @staticmethod
    def get_header(pgn_string, key):
        """Return the value of a [Key "Value"] header tag, or ""."""
        if not pgn_string:
            return ""
        match = re.search(r'\[' + re.escape(key) + r' "(.*?)"\]', pgn_string)
        return match.group(1) if match else ""

    @staticmethod
    def split_sections(text):
        """Split text into (header_block, movetext).

        Everything before the first blank line is the header block, whatever it
        holds. Without a blank line, leading header lines (if any) form the
        header block and the rest is movetext.
        """
        if not text:
            return "", ""

        parts = _BLANK_LINE_RE.split(text, maxsplit=1)
        if len(parts) == 2:
            return parts[0], parts[1]

        lines = text.split("\n")
        header_count = 0
        for line in lines:
            if not _HEADER_LINE_RE.match(line):
                break
            header_count += 1
        return "\n".join(lines[:header_count]), "\n".join(lines[header_count:])

    @staticmethod
    def clean_movetext(movetext):
        """Strip comments, variations, NAGs, results and move numbers."""
        text = _COMMENT_RE.sub(" ", movetext)
        # Innermost first so nested variations go too
        while True:
            stripped = _VARIATION_RE.sub(" ", text)
            if stripped == text:
                break
            text = stripped
        text = _LINE_COMMENT_RE.sub(" ", text)
        text = _NAG_RE.sub(" ", text)
        text = _RESULT_RE.sub(" ", text)
        text = _MOVE_NUMBER_RE.sub(" ", text)
        return " ".join(text.split())

    @staticmethod
    def tokenize(normalized):
        """Return the SAN-like tokens of a normalized transcript."""
        _, movetext = PGNParser.split_sections(normalized)
        cleaned = PGNParser.clean_movetext(movetext)
        return cleaned.split(" ") if cleaned else []

    @staticmethod
    def resolve_token(board, token):
        """Resolve one token against board, permissively.

        Accepts plain SAN (missing or extra check marks, over-specified
        disambiguation, zero castling) and the long algebraic forms that
        parse_san takes, such as "e2e4", "e2-e4" or "Ng1f3". Returns a legal
        chess.Move, or None.
        """
        token = _ANNOTATION_SUFFIX_RE.sub("", token)
        if not token:
            return None

        try:
            move = board.parse_san(token)
        except ValueError:
            return None

        # parse_san turns "--" and friends into a null move
        if not move:
            return None
        return move

    @staticmethod
    @functools.lru_cache(maxsize=256)
    def interpret(normalized):
        """Replay the transcript's tokens from the initial position.

        Stops at the first token the engine rejects and returns the moves
        resolved so far. Never raises.
        """
        tokens = PGNParser.tokenize(normalized or "")
        board = chess.Board()
        moves = []

        for token in tokens:
            move = PGNParser.resolve_token(board, token)
            if move is None:
                return MoveSequence(moves=tuple(moves), token_count=len(tokens),
                                    rejected_token=token)
            moves.append(ResolvedMove(
                from_square=chess.square_name(move.from_square),
                to_square=chess.square_name(move.to_square),
                promotion=chess.piece_symbol(move.promotion) if move.promotion else None,
                san=board.san(move),
                uci=move.uci(),
            ))
            board.push(move)

        return MoveSequence(moves=tuple(moves), token_count=len(tokens))

    @staticmethod
    def parse_moves(pgn_string):
        """Normalize and interpret a raw PGN string."""
        return PGNParser.interpret(normalize(pgn_string))

    @staticmethod
    def with_fallback(sequence):
        """Return sequence, or the fallback opening if it has no moves.

        This is a display convenience: the returned sequence is flagged with
        is_fallback so callers can still tell a real game from a stand-in.
        """
        if len(sequence):
            return sequence
        fallback = PGNParser.interpret(normalize(FALLBACK_PGN))
        return dataclasses.replace(fallback, is_fallback=True)
