"""State-building helpers shared by the test modules."""

import random
from dataclasses import replace

from models import PerSide, Position
from orders import Move, apply_command
from scenarios import SCENARIO_CLASSIC
from state import CONFIG_DEFAULTS, new_match


class FixedRandom:
    """Stand-in RNG whose random() always returns the same value."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value

    def choice(self, seq):
        return seq[0]


def make_state(scenario=SCENARIO_CLASSIC, evader=None, pursuer=None, config=None, **overrides):
    """Fresh match with the sides placed at the given (x, y) cells."""
    state = new_match(scenario, config=config or dict(CONFIG_DEFAULTS))
    evader = Position(*evader) if evader else state.evader_pos
    pursuer = Position(*pursuer) if pursuer else state.pursuer_pos
    return replace(state, positions=PerSide(evader=evader, pursuer=pursuer), **overrides)


def play_round(state, evader_row, pursuer_row, rng=None, config=None):
    """Commit both moves of one round through the reducer."""
    rng = rng or random.Random(0)
    config = config or dict(CONFIG_DEFAULTS)
    state = apply_command(state, Move(evader_row), rng, config)
    return apply_command(state, Move(pursuer_row), rng, config)
