import os
import sys

import pytest


# Ensure the repository root is on sys.path for `from chessrules...` imports
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)


def pytest_collection_modifyitems(config: pytest.Config, items: list) -> None:
    if os.environ.get("CHESSRULES_SLOW") == "1":
        return
    skip_slow = pytest.mark.skip(reason="set CHESSRULES_SLOW=1 to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)
