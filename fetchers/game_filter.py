# fetchers/game_filter.py
import math
from typing import List

from chessgame import ChessGame

GAMES_PER_PAGE = 10


def sort_newest_first(games: List[ChessGame]) -> List[ChessGame]:
    """Return games ordered by end_time, most recent first."""
    return sorted(games, key=lambda g: g.end_time, reverse=True)


def assign_unique_ids(games: List[ChessGame], username: str) -> List[ChessGame]:
    """Give each game an id of the form "<user>-<end_time>-<index>"."""
    for index, game in enumerate(games):
        game.unique_id = f"{username}-{int(game.end_time.timestamp())}-{index}"
    return games


def total_pages(games: List[ChessGame], per_page: int = GAMES_PER_PAGE) -> int:
    """Number of pages needed to show all games (0 when there are none)."""
    if per_page <= 0:
        raise ValueError("per_page must be positive")
    return math.ceil(len(games) / per_page)


def paginate(games: List[ChessGame], page: int,
             per_page: int = GAMES_PER_PAGE) -> List[ChessGame]:
    """Return the games on a 1-based page.

    The page number is clamped into [1, total_pages], matching the
    Previous / Next buttons that stop at the first and last page.
    """
    pages = total_pages(games, per_page)
    if pages == 0:
        return []
    page = min(max(page, 1), pages)
    start = (page - 1) * per_page
    return games[start:start + per_page]
