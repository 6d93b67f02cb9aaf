import pytest

from cache import RewriteCache
from config import SimplifyConfig
from engine import RewriteEngine
from expression import symbols


@pytest.fixture
def x():
    return symbols("x")


@pytest.fixture
def y():
    return symbols("y")


@pytest.fixture
def engine():
    """Engine with default options and its own cache."""
    return RewriteEngine(SimplifyConfig(), RewriteCache())


@pytest.fixture
def simp(engine):
    return engine.simplify
