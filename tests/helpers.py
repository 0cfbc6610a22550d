import datetime
from chessgame import ChessGame


RUY_LOPEZ_PGN = """[Event "Live Chess"]
[Site "Chess.com"]
[White "PlayerA"]
[Black "PlayerB"]
[Result "*"]

1. e4 e5 2. Nf3 Nc6 3. Bb5 a6 *"""

SCHOLARS_MATE_PGN = """[Event "Live Chess"]
[Result "1-0"]
[Termination "PlayerA won by checkmate"]

1. e4 e5 2. Qh5 Nc6 3. Bc4 Nf6 4. Qxf7# 1-0"""

WHITE_RESIGNS_PGN = """[Event "Live Chess"]
[Result "0-1"]
[Termination "White resigns"]

1. e4 e5 2. Nf3 Nc6 3. Bb5 a6 0-1"""

# Sam Loyd's ten-move stalemate
STALEMATE_PGN = """[Event "Casual"]
[Result "1/2-1/2"]

1. e3 a5 2. Qh5 Ra6 3. Qxa5 h5 4. h4 Rah6 5. Qxc7 f6 6. Qxd7+ Kf7
7. Qxb7 Qd3 8. Qxb8 Qh7 9. Qxc8 Kg6 10. Qe6 1/2-1/2"""

REPETITION_PGN = """[Event "Casual"]
[Result "1/2-1/2"]

1. Nf3 Nf6 2. Ng1 Ng8 3. Nf3 Nf6 4. Ng1 Ng8 1/2-1/2"""


def make_game_json(white_user="PlayerA", black_user="PlayerB",
                   white_result="win", black_result="resigned",
                   white_rating=1500, black_rating=1480,
                   end_time=None, pgn=None, time_class=None,
                   game_url=""):
    """Build a raw Chess.com game JSON dict for testing."""
    if end_time is None:
        end_time = int(datetime.datetime(2025, 6, 15, 12, 0, 0).timestamp())
    data = {
        "white": {"username": white_user, "result": white_result,
                  "rating": white_rating},
        "black": {"username": black_user, "result": black_result,
                  "rating": black_rating},
        "end_time": end_time,
    }
    if pgn is not None:
        data["pgn"] = pgn
    if time_class is not None:
        data["time_class"] = time_class
    if game_url:
        data["url"] = game_url
    return data


def make_archive_response(games_data):
    """Build a Chess.com monthly archive API response."""
    return {"games": games_data}


def make_chess_game(my_color="white", white_result="win", black_result="resigned",
                    end_time=None, pgn=None, time_class="blitz", game_url="",
                    unique_id=""):
    """Build a ChessGame object directly for filter and viewer tests."""
    if end_time is None:
        end_time = datetime.datetime(2025, 6, 15, 12, 0, 0)
    return ChessGame(
        white="PlayerA",
        black="PlayerB",
        end_time=end_time,
        white_result=white_result,
        black_result=black_result,
        white_rating=1500,
        black_rating=1480,
        my_color=my_color,
        pgn=pgn,
        time_class=time_class,
        game_url=game_url,
        unique_id=unique_id,
    )
