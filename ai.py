"""
One-ply greedy opponent.

choose_move scores every legal row for a side and returns the best one,
breaking ties uniformly at random. It keeps no memory between calls.

Evader: maximise separation from the Pursuer, and secondarily stay near the
middle column so it is not pinned against the edge of its band.

Pursuer: chase the Evader's committed (pending) move if there is one, else
its current position. Strong bonus for ending adjacent, and another when
that lock would win the match this round.
"""

import random
from typing import List, Optional

import numpy as np

from models import Position, Side
from physics import chebyshev_distance, physical_distance
from rules import fallback_row, legal_moves, next_position
from state import MatchState

DISTANCE_WEIGHT = 10
LOCK_BONUS = 120
WINNING_LOCK_BONUS = 100


def _evader_scores(state: MatchState, rows: List[int]) -> np.ndarray:
    scenario = state.scenario
    map_center = (scenario.grid_w - 1) / 2
    targets = [next_position(state.evader_pos, row, scenario) for row in rows]

    distances = np.array([physical_distance(t, state.pursuer_pos, scenario) for t in targets])
    center_bias = -np.abs(np.array([t.x for t in targets]) - map_center)
    return distances * DISTANCE_WEIGHT + center_bias


def _pursuer_scores(state: MatchState, rows: List[int]) -> np.ndarray:
    scenario = state.scenario
    target: Position = state.pending_move or state.evader_pos
    moves = [next_position(state.pursuer_pos, row, scenario) for row in rows]

    distances = np.array([physical_distance(m, target, scenario) for m in moves])
    adjacent = np.array([chebyshev_distance(m, target) <= 1 for m in moves])
    lateral_gap = np.abs(np.array([m.x - target.x for m in moves]))

    scores = -distances * DISTANCE_WEIGHT
    scores = scores + np.where(adjacent, LOCK_BONUS, 0)
    if state.capture_count + 1 >= scenario.win_time:
        scores = scores + np.where(adjacent, WINNING_LOCK_BONUS, 0)
    return scores - lateral_gap


def choose_move(state: MatchState, side: Side, rng: Optional[random.Random] = None) -> int:
    """
    Pick a row for side.

    Args:
        state: Full match state (the AI sees everything, including a pending move)
        side: Side to move
        rng: Random source for tie-breaks (default: fresh random.Random)

    Returns:
        A row from legal_moves, or the centre row if there is none
    """
    rng = rng or random.Random()
    scenario = state.scenario
    rows = legal_moves(side, state.positions.get(side).x, scenario)
    if not rows:
        return fallback_row(scenario)

    if side is Side.EVADER:
        scores = _evader_scores(state, rows)
    else:
        scores = _pursuer_scores(state, rows)

    best = [rows[i] for i in np.flatnonzero(scores == scores.max())]
    return rng.choice(best)
