# web_viewer.py

import logging
import threading
import webbrowser
from typing import Callable, List, Optional

import aiohttp
import chess
import chess.svg
from flask import Flask, abort, render_template_string, request, url_for

from chesscom_fetcher import PlayerNotFoundError
from chessgame import ChessGame
from game_filter import GAMES_PER_PAGE, paginate, total_pages
from game_replayer import CursorOutOfRangeError
from replay_navigator import (HIGHLIGHT_CHECK, HIGHLIGHT_LAST_MOVE,
                              HIGHLIGHT_RESIGNATION, KEY_BINDINGS, GameViewer,
                              NavAction, reduce_cursor)

_LOGGER = logging.getLogger(__name__)

# Square fills per highlight kind (#rrggbbaa, alpha becomes fill-opacity)
HIGHLIGHT_COLORS = {
    HIGHLIGHT_LAST_MOVE: "#ffd70059",
    HIGHLIGHT_CHECK: "#dc2626cc",
    HIGHLIGHT_RESIGNATION: "#ef4444e6",
}

BOARD_SIZE = 480


class GameViewerApp:
    """Flask web app: a player's recent games and a move-by-move board."""

    def __init__(self, loader: Callable[[str], List[ChessGame]],
                 username: str = "", games: Optional[List[ChessGame]] = None,
                 per_page: int = GAMES_PER_PAGE):
        self.loader = loader
        self.username = username
        self.per_page = per_page
        self.games = list(games or [])

    def _load(self, username):
        """Fetch games for a new username. Returns an error message or ""."""
        try:
            games = self.loader(username)
        except PlayerNotFoundError as e:
            self.username, self.games = "", []
            return str(e)
        except (aiohttp.ClientError, OSError) as e:
            _LOGGER.warning("Fetching games for %s failed: %s", username, e)
            self.username, self.games = "", []
            return f"Error: {e}"

        self.username = username
        self.games = games
        if not games:
            return "No games found for this user."
        return ""

    def _find_game(self, game_id):
        for game in self.games:
            if game.unique_id == game_id:
                return game
        return None

    @staticmethod
    def _render_board_svg(viewer):
        """Render the current position with highlight fills."""
        state = viewer.state
        fill = {
            chess.parse_square(square): HIGHLIGHT_COLORS[kind]
            for square, kind in viewer.square_highlights().items()
        }
        return chess.svg.board(state.board, fill=fill, size=BOARD_SIZE)

    @staticmethod
    def _badge_class(label):
        lowered = label.lower()
        if "resign" in lowered:
            return "resign"
        if lowered == "checkmate":
            return "mate"
        return "neutral"

    def _nav_urls(self, game_id, viewer):
        urls = {}
        for action in NavAction:
            target = reduce_cursor(viewer.cursor, viewer.total, action)
            urls[action.value] = url_for("game_detail", game_id=game_id, ply=target)
        return urls

    def _build_app(self):
        """Create and configure the Flask app."""
        app = Flask(__name__)

        @app.route("/")
        def index():
            error = ""
            username = request.args.get("username", "").strip()
            if username and username.lower() != self.username.lower():
                error = self._load(username)

            pages = total_pages(self.games, self.per_page)
            page = request.args.get("page", 1, type=int)
            page = min(max(page, 1), pages) if pages else 1
            return render_template_string(
                _LIST_TEMPLATE,
                username=self.username,
                games=paginate(self.games, page, self.per_page),
                total=len(self.games),
                page=page,
                pages=pages,
                error=error,
            )

        @app.route("/game/<game_id>")
        def game_detail(game_id):
            game = self._find_game(game_id)
            if game is None:
                abort(404)

            viewer = GameViewer(game.pgn, use_fallback=True)
            raw_ply = request.args.get("ply", "0")
            try:
                viewer.jump_to(int(raw_ply))
            except (ValueError, CursorOutOfRangeError):
                abort(400)

            state = viewer.state
            return render_template_string(
                _DETAIL_TEMPLATE,
                game=game,
                pgn=viewer.pgn,
                svg_board=self._render_board_svg(viewer),
                cursor=viewer.cursor,
                total=viewer.total,
                end_label=state.end_label if state.at_end else "",
                badge_class=self._badge_class(state.end_label),
                is_fallback=viewer.is_fallback,
                can_prev=viewer.can_prev,
                can_next=viewer.can_next,
                nav_urls=self._nav_urls(game_id, viewer),
                key_bindings={key: action.value for key, action in KEY_BINDINGS.items()},
            )

        return app

    def run(self, port=5050):
        """Start the Flask app and auto-open browser."""
        app = self._build_app()
        # Open browser after a short delay to let the server start
        url = f"http://127.0.0.1:{port}"
        threading.Timer(1.0, lambda: webbrowser.open(url)).start()
        print(f"\n  Game viewer running at {url}")
        print("  Press Ctrl+C to stop.\n")
        app.run(host="127.0.0.1", port=port, debug=False, use_reloader=False)


_STYLE = r"""
    <style>
        * { box-sizing: border-box; margin: 0; padding: 0; }
        body {
            font-family: system-ui, -apple-system, sans-serif;
            background: #0f172a;
            color: #e2e8f0;
            line-height: 1.6;
        }
        .main { max-width: 1100px; margin: 0 auto; padding: 32px; }
        h1 { font-size: 1.8rem; color: #f8fafc; margin-bottom: 24px; }
        h2 { font-size: 1.2rem; color: #f8fafc; margin-bottom: 12px; }
        a { color: #93c5fd; }
        .card { background: #1e293b; border-radius: 12px; padding: 20px; margin-bottom: 16px; }
        .row { display: flex; justify-content: space-between; align-items: center; }
        .muted { color: #94a3b8; font-size: 0.9rem; }
        .btn {
            display: inline-block; padding: 8px 14px; border-radius: 6px;
            background: #334155; color: #e2e8f0; text-decoration: none;
        }
        .btn.primary { background: #16a34a; }
        .btn.disabled { opacity: 0.4; pointer-events: none; }
        .error { background: #7f1d1d; color: #fecaca; padding: 12px; border-radius: 8px; margin-bottom: 16px; }
        .notice { background: #78350f; color: #fde68a; padding: 8px 12px; border-radius: 8px; margin-bottom: 12px; }
        .badge { display: inline-block; margin-top: 12px; padding: 4px 12px; border-radius: 6px; font-size: 0.8rem; }
        .badge.resign { background: #7f1d1d; color: #fecaca; }
        .badge.mate { background: #064e3b; color: #a7f3d0; }
        .badge.neutral { background: #1f2937; color: #f3f4f6; }
        .layout { display: flex; gap: 32px; flex-wrap: wrap; }
        pre { white-space: pre-wrap; font-size: 0.85rem; }
        input { padding: 10px; border-radius: 6px; border: 1px solid #334155; background: #1e293b; color: #fff; width: 280px; }
    </style>
"""

_LIST_TEMPLATE = r"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Chess Game History</title>
""" + _STYLE + r"""
</head>
<body>
    <main class="main">
        <h1>Chess Game History</h1>
        <form method="get" action="/" class="card">
            <input type="text" name="username" placeholder="Enter Chess.com username" value="">
            <button class="btn primary" type="submit">Fetch Games</button>
        </form>

        {% if error %}<div class="error">{{ error }}</div>{% endif %}

        {% if total %}
            <p class="muted">Found {{ total }} games{% if username %} for {{ username }}{% endif %}</p>
            {% for game in games %}
            <div class="card row">
                <div>
                    <div><strong>{{ game.white }}</strong> <span class="muted">({{ game.white_rating }})</span></div>
                    <div><strong>{{ game.black }}</strong> <span class="muted">({{ game.black_rating }})</span></div>
                    <div class="muted">{{ game.end_time.strftime("%Y-%m-%d") }} &bull; {{ game.time_class or "unknown" }}</div>
                </div>
                <a class="btn primary" href="{{ url_for('game_detail', game_id=game.unique_id) }}">Analyze Game</a>
            </div>
            {% endfor %}
            <div class="row">
                <a class="btn {% if page <= 1 %}disabled{% endif %}" href="?page={{ page - 1 }}">Previous</a>
                <span class="muted">Page {{ page }} of {{ pages }}</span>
                <a class="btn {% if page >= pages %}disabled{% endif %}" href="?page={{ page + 1 }}">Next</a>
            </div>
        {% elif not error %}
            <p class="muted">Enter a Chess.com username to view game history</p>
        {% endif %}
    </main>
</body>
</html>"""

_DETAIL_TEMPLATE = r"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{{ game.white }} vs {{ game.black }}</title>
""" + _STYLE + r"""
</head>
<body>
    <main class="main">
        <a class="btn" href="/">Back to Games</a>
        <h1 style="margin-top: 16px;">Chess Game Analysis</h1>
        <div class="layout">
            <div>
                {% if is_fallback %}
                <div class="notice">This game's moves could not be read; showing a sample opening.</div>
                {% endif %}
                <div class="board">{{ svg_board|safe }}</div>
                {% if end_label %}<div class="badge {{ badge_class }}">{{ end_label }}</div>{% endif %}
                <div class="row" style="margin-top: 12px; gap: 8px;">
                    <a class="btn {% if not can_prev %}disabled{% endif %}" href="{{ nav_urls['prev'] }}" title="Previous (Left Arrow)">&#9664;</a>
                    <a class="btn {% if not can_next %}disabled{% endif %}" href="{{ nav_urls['next'] }}" title="Next (Right Arrow)">&#9654;</a>
                    <a class="btn" href="{{ nav_urls['first'] }}" title="Reset (R)">&#10226; Reset</a>
                    <a class="btn primary" href="{{ nav_urls['last'] }}" title="Latest (L)">&#10515; Latest</a>
                    <span class="muted">{{ cursor }}/{{ total }}</span>
                </div>
            </div>
            <div style="flex: 1; min-width: 320px;">
                <div class="card">
                    <h2>Game Information</h2>
                    <p>White: <strong>{{ game.white }}</strong> <span class="muted">Rating: {{ game.white_rating }}</span></p>
                    <p>Black: <strong>{{ game.black }}</strong> <span class="muted">Rating: {{ game.black_rating }}</span></p>
                    <p>Result: <strong>{{ game.result or "Unknown" }}</strong></p>
                    <p>Date: {{ game.end_time.strftime("%Y-%m-%d") }}</p>
                </div>
                <div class="card">
                    <h2>Game Analysis</h2>
                    <div class="row"><span>Moves</span><span>{{ total }}</span></div>
                    <div class="row"><span>Current Position</span>
                        <span>{% if cursor > 0 %}After {{ cursor }} moves{% else %}Starting position{% endif %}</span></div>
                </div>
                <div class="card">
                    <h2>PGN</h2>
                    <pre>{{ pgn }}</pre>
                </div>
            </div>
        </div>
    </main>

    <script>
    (function() {
        var bindings = {{ key_bindings|tojson }};
        var urls = {{ nav_urls|tojson }};
        document.addEventListener('keydown', function(e) {
            var action = bindings[e.key] || bindings[e.key.toLowerCase()];
            if (action && urls[action]) {
                window.location = urls[action];
            }
        });
    })();
    </script>
</body>
</html>"""
