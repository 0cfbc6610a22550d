# chessgame.py

import datetime

from pgn_parser import PGNParser


class ChessGame:
    def __init__(self, white, black, end_time, white_result, black_result,
                 white_rating=None, black_rating=None, my_color=None,
                 pgn=None, time_class=None, game_url="", unique_id=""):
        self.white = white
        self.black = black
        self.end_time = end_time  # datetime object
        self.white_result = white_result
        self.black_result = black_result
        self.white_rating = white_rating
        self.black_rating = black_rating
        self.my_color = my_color
        self.pgn = pgn
        self.time_class = time_class  # "bullet", "blitz", "rapid", "daily"
        self.game_url = game_url      # Chess.com game URL
        self.unique_id = unique_id    # "<user>-<end_time>-<index>", set after sorting

    @property
    def termination(self):
        return PGNParser.get_header(self.pgn, "Termination")

    @property
    def result(self):
        return PGNParser.get_header(self.pgn, "Result")

    @property
    def opponent(self):
        """Username of the side `my_color` did not play."""
        return self.black if self.my_color == 'white' else self.white

    @classmethod
    def from_json(cls, data, my_username):
        """Build a game from one entry of a Chess.com monthly archive.

        Returns None when my_username played neither side.
        """
        white = data.get('white') or {}
        black = data.get('black') or {}

        sides = {'white': white.get('username', ''), 'black': black.get('username', '')}
        my_color = next((color for color, name in sides.items()
                         if name and name.lower() == my_username.lower()), None)
        if my_color is None:
            return None

        # Archive timestamps are unix seconds; a missing one sorts as "now"
        end_time_unix = data.get('end_time')
        if end_time_unix:
            end_time = datetime.datetime.fromtimestamp(end_time_unix)
        else:
            end_time = datetime.datetime.now()

        return cls(
            white=sides['white'],
            black=sides['black'],
            end_time=end_time,
            white_result=white.get('result', ''),
            black_result=black.get('result', ''),
            white_rating=white.get('rating'),
            black_rating=black.get('rating'),
            my_color=my_color,
            pgn=data.get('pgn'),
            time_class=data.get('time_class'),
            game_url=data.get('url', ''),
        )
