# fetchers/chesscom_fetcher.py

import asyncio
import logging
from typing import List

import aiohttp

BASE_URL = "https://api.chess.com/pub/player"
DEFAULT_MONTHS = 3

_LOGGER = logging.getLogger(__name__)


class PlayerNotFoundError(Exception):
    """The archives endpoint answered 404 for this username."""

    def __init__(self, username):
        super().__init__(f'User "{username}" not found on Chess.com')
        self.username = username


class ChessCom_Fetcher:
    """
    Fetches game data from the Chess.com public API.
    """

    def __init__(self, user_agent: str = "chess_history_viewer/1.0"):
        self.headers = {"User-Agent": user_agent}

    async def get_archives(self, username: str) -> List[str]:
        """
        Return a list of monthly archive URLs for the username, oldest first.
        """
        url = f"{BASE_URL}/{username}/games/archives"
        async with aiohttp.ClientSession(headers=self.headers) as session:
            async with session.get(url) as resp:
                if resp.status == 404:
                    raise PlayerNotFoundError(username)
                resp.raise_for_status()
                data = await resp.json()
                return data.get("archives", [])

    async def fetch_games_by_month(self, archive_url: str) -> dict:
        """
        Fetch the games JSON for a single monthly archive URL.
        """
        async with aiohttp.ClientSession(headers=self.headers) as session:
            async with session.get(archive_url) as resp:
                resp.raise_for_status()
                return await resp.json()

    async def fetch_recent_games(self, username: str,
                                 months: int = DEFAULT_MONTHS) -> List[dict]:
        """
        Fetch raw game dicts from the last `months` archive months,
        newest month first. A month that fails to load is skipped.
        """
        archives = await self.get_archives(username)
        recent = list(reversed(archives))[:max(months, 0)]

        games = []
        for url in recent:
            try:
                month_data = await self.fetch_games_by_month(url)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                _LOGGER.warning("Failed to fetch %s: %s", url, e)
                continue
            games.extend(month_data.get("games", []))
        return games
