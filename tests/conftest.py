import os
import sys

import pytest

_tests_dir = os.path.dirname(__file__)
_root_dir = os.path.join(_tests_dir, '..')

# fetchers/ modules are imported as top-level modules, viewer.py from the root
sys.path.insert(0, os.path.join(_root_dir, 'fetchers'))
sys.path.insert(0, _root_dir)
# helpers.py lives next to the tests
sys.path.insert(0, _tests_dir)

from pgn_parser import PGNParser  # noqa: E402


@pytest.fixture(autouse=True)
def clear_interpret_cache():
    """interpret() is memoised per text; start each test from a cold cache."""
    PGNParser.interpret.cache_clear()
    yield
