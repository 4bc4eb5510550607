"""Shared test fixtures."""

import random

import pytest

from scenarios import SCENARIO_CLASSIC, SCENARIO_HARDCORE, SCENARIO_REALISTIC
from state import CONFIG_DEFAULTS, new_match


# --- Fixtures ---


@pytest.fixture
def scenario():
    """Classic preset: 11x7, no fog, no weather."""
    return SCENARIO_CLASSIC


@pytest.fixture
def realistic():
    return SCENARIO_REALISTIC


@pytest.fixture
def hardcore():
    return SCENARIO_HARDCORE


@pytest.fixture
def config():
    """Built-in tunables, independent of config.json on disk."""
    return dict(CONFIG_DEFAULTS)


@pytest.fixture
def rng():
    """Deterministic RNG seeded at 42."""
    return random.Random(42)


@pytest.fixture
def match(scenario, config):
    """Fresh classic match at turn 1, before any start command."""
    return new_match(scenario, config=config)


@pytest.fixture
def api_client():
    """Flask test client with the AI answering inline."""
    from app import app

    app.config["TESTING"] = True
    app.config["AI_DELAY"] = 0
    with app.test_client() as client:
        yield client

