#!/usr/bin/env python3
"""CLI to browse a Chess.com player's recent games and replay them move by move."""

import argparse
import asyncio
import logging
import os
import sys

import aiohttp

# Add fetchers/ to import path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "fetchers"))

from chesscom_fetcher import ChessCom_Fetcher, PlayerNotFoundError, DEFAULT_MONTHS
from chessgame import ChessGame
from game_filter import (GAMES_PER_PAGE, assign_unique_ids, paginate,
                         sort_newest_first, total_pages)
from game_replayer import CursorOutOfRangeError
from replay_navigator import GameViewer

USER_AGENT = "chess_history_viewer/1.0"
DEFAULT_PORT = 5050


async def load_games(username, months=DEFAULT_MONTHS):
    """Fetch recent games as ChessGame objects, newest first, with unique ids.

    Network errors and PlayerNotFoundError propagate to the caller.
    """
    fetcher = ChessCom_Fetcher(user_agent=USER_AGENT)
    raw_games = await fetcher.fetch_recent_games(username, months)
    games = [g for g in (ChessGame.from_json(g, username) for g in raw_games) if g is not None]
    return assign_unique_ids(sort_newest_first(games), username)


async def fetch_games(username, months=DEFAULT_MONTHS):
    """Fetch games for the CLI, exiting with status 1 on failure."""
    print(f"Fetching the last {months} months of games for {username}...")
    try:
        games = await load_games(username, months)
    except PlayerNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        print(f"Error: Could not connect to Chess.com API: {e}")
        sys.exit(1)

    print(f"  Found {len(games)} games")
    return games


def print_game_list(games, page=1, per_page=GAMES_PER_PAGE):
    """Print one page of the game list."""
    pages = total_pages(games, per_page)
    page = min(max(page, 1), pages) if pages else 1
    print(f"\n--- Page {page} of {pages} ---")
    for game in paginate(games, page, per_page):
        date = game.end_time.strftime("%Y-%m-%d")
        result = game.result or "?"
        print(f"  {game.white} ({game.white_rating}) vs {game.black} ({game.black_rating})"
              f"  {date} | {game.time_class or 'unknown'} | {result}")
        print(f"    id: {game.unique_id}")


def _format_moves(sequence):
    """Render moves as numbered SAN, e.g. "1. e4 e5 2. Nf3"."""
    parts = []
    for ply, move in enumerate(sequence):
        if ply % 2 == 0:
            parts.append(f"{ply // 2 + 1}.")
        parts.append(move.san)
    return " ".join(parts)


def replay_pgn(pgn_text, ply=None):
    """Print the moves of a PGN and the board after `ply` moves (default: last).

    Raises CursorOutOfRangeError for a ply outside the parsed game.
    """
    viewer = GameViewer(pgn_text)
    parsed = viewer.parsed

    print(f"Moves: {_format_moves(parsed) or '(none)'}")
    if parsed.is_complete:
        print(f"  Parsed all {len(parsed)} plies")
    else:
        print(f"  Parsed {len(parsed)} plies, stopped at token {parsed.rejected_token!r}")

    viewer.jump_to(viewer.total if ply is None else ply)
    state = viewer.state

    print(f"\n--- Position after {state.cursor}/{state.total} plies ---")
    print(state.board)
    print(f"  FEN: {state.fen}")
    if state.last_move_from:
        print(f"  Last move: {state.last_move_from} -> {state.last_move_to}")
    if state.is_check:
        print("  Check!")
    if state.end_label:
        print(f"  End: {state.end_label}")
    highlights = viewer.square_highlights()
    if highlights:
        marks = ", ".join(f"{sq}={kind}" for sq, kind in sorted(highlights.items()))
        print(f"  Highlights: {marks}")
    return state


def main():
    parser = argparse.ArgumentParser(
        description="Browse a Chess.com player's recent games and replay them")
    parser.add_argument("username", nargs="?", default="",
                        help="Chess.com username")
    parser.add_argument("--months", type=int, default=DEFAULT_MONTHS,
                        help=f"How many recent archive months to fetch (default: {DEFAULT_MONTHS})")
    parser.add_argument("--page", type=int, default=1,
                        help="Page of the game list to show (default: 1)")
    parser.add_argument("--per-page", type=int, default=GAMES_PER_PAGE,
                        help=f"Games per page (default: {GAMES_PER_PAGE})")
    parser.add_argument("--web", action="store_true",
                        help="Launch the web viewer after fetching")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT,
                        help=f"Port for the web viewer (default: {DEFAULT_PORT})")
    parser.add_argument("--pgn-file", default="",
                        help="Replay a local PGN file instead of fetching games")
    parser.add_argument("--ply", type=int, default=None,
                        help="With --pgn-file: show the position after N plies (default: last)")
    parser.add_argument("--verbose", action="store_true",
                        help="Show debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    if args.pgn_file:
        if not os.path.isfile(args.pgn_file):
            print(f"Error: PGN file not found at {args.pgn_file}")
            sys.exit(1)
        with open(args.pgn_file, encoding="utf-8-sig", errors="replace") as f:
            pgn_text = f.read()
        try:
            replay_pgn(pgn_text, args.ply)
        except CursorOutOfRangeError as e:
            parser.error(str(e))
        return

    if not args.username:
        parser.error("a Chess.com username or --pgn-file is required")
    if args.per_page <= 0:
        parser.error("--per-page must be positive")

    games = asyncio.run(fetch_games(args.username, args.months))
    if not games:
        print("No games found for this user.")
        sys.exit(0)

    print_game_list(games, args.page, args.per_page)

    if args.web:
        from web_viewer import GameViewerApp
        app = GameViewerApp(
            loader=lambda username: asyncio.run(load_games(username, args.months)),
            username=args.username,
            games=games,
            per_page=args.per_page,
        )
        app.run(port=args.port)


if __name__ == "__main__":
    main()
