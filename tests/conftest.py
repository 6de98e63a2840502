import random
import sys
from pathlib import Path

import pytest

# Ensure the package is importable without installation
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from mindmapx.controller import InteractionController  # noqa: E402
from mindmapx.graph import GraphStore  # noqa: E402
from mindmapx.settings import AppSettings  # noqa: E402


@pytest.fixture
def settings():
    return AppSettings()


@pytest.fixture
def store(settings):
    return GraphStore(settings, rng=random.Random(7))


class FakeCapture:
    """Records window-level listeners installed during drags."""

    def __init__(self):
        self.active = 0
        self.acquired = 0
        self.released = 0
        self.on_move = None
        self.on_release = None

    def __call__(self, on_move, on_release):
        self.active += 1
        self.acquired += 1
        self.on_move = on_move
        self.on_release = on_release

        def release():
            self.active -= 1
            self.released += 1

        return release


@pytest.fixture
def capture():
    return FakeCapture()


@pytest.fixture
def controller(settings, capture):
    ctrl = InteractionController(settings, capture=capture, rng=random.Random(11))
    ctrl.start_session()
    return ctrl
