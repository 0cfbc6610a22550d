# pgn_normalizer.py

"""Textual clean-up of raw PGN transcripts before move interpretation.

Chess.com (and hand-edited) PGNs arrive with Windows line endings, headers
glued to the movetext, or a move number with no move after it when a game
was cut off. Each repair is a named step so it can be tested on its own;
``normalize`` runs them in order.
"""

import re

_MULTI_BLANK_RE = re.compile(r"\n{3,}")
_BLANK_LINE_RE = re.compile(r"\n[ \t]*\n")
_HEADER_LINE_RE = re.compile(r"^\s*\[[^\]\n]*\]\s*$")
_DANGLING_MOVE_NUMBER_RE = re.compile(r"\s\d+\.(?:\.\.)?\s*$")


def unify_line_endings(text):
    """Convert CRLF / CR line endings to LF and trim outer whitespace."""
    return text.replace("\r\n", "\n").replace("\r", "\n").strip()


def separate_header_block(text):
    """Make sure a header block is followed by exactly one blank line."""
    if not text.startswith("["):
        return text

    text = _MULTI_BLANK_RE.sub("\n\n", text)
    if _BLANK_LINE_RE.search(text):
        return text

    lines = text.split("\n")
    header_count = 0
    for line in lines:
        if not _HEADER_LINE_RE.match(line):
            break
        header_count += 1

    # Nothing to separate: no header lines, or headers only
    if header_count == 0 or header_count == len(lines):
        return text

    return "\n".join(lines[:header_count]) + "\n\n" + "\n".join(lines[header_count:])


def strip_dangling_move_number(text):
    """Drop a trailing move number with no move after it.

    "31. Raxe1 32." becomes "31. Raxe1". Repeated until the text no longer
    ends in a bare move number, so the result is stable under re-runs.
    """
    while True:
        stripped = _DANGLING_MOVE_NUMBER_RE.sub("", text).strip()
        if stripped == text:
            return text
        text = stripped


NORMALIZE_STEPS = (
    unify_line_endings,
    separate_header_block,
    strip_dangling_move_number,
)


def normalize(raw):
    """Return a cleaned PGN string. Never raises; empty input gives ""."""
    if not raw:
        return ""

    text = str(raw)
    for step in NORMALIZE_STEPS:
        text = step(text)
    return text
