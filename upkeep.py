"""
Round resolution for orbital pursuit.

Runs when the Pursuer commits, closing the round:
- Reveal the Evader's pending move and apply both moves together
- Update the consecutive-capture counter from the round-end distance
- Check victory conditions (sustained lock, or the turn limit)
- Advance the turn, hand the next round to the Evader
- Step the weather chain when the scenario has weather
"""

import random
from dataclasses import replace
from typing import Any, Dict

from models import PerSide, Position, Side
from physics import physical_distance
from rules import evaluate_win_condition, next_weather, within_capture_range
from state import MatchState, log_event


def update_capture_count(capture_count: int, evader: Position, pursuer: Position, state: MatchState) -> int:
    """Increment while the round ends inside capture range, otherwise reset to 0."""
    if within_capture_range(evader, pursuer, state.scenario):
        return capture_count + 1
    return 0


def resolve_round(state: MatchState, pursuer_target: Position, rng: random.Random,
                  config: Dict[str, Any]) -> MatchState:
    """
    Resolve a completed round.

    Args:
        state: Match state with the Pursuer's fuel already charged
        pursuer_target: Position the Pursuer just committed to
        rng: Random source for the weather chain
        config: Tunables with the weather probabilities

    Returns:
        MatchState at the start of the next round, or GAMEOVER
    """
    scenario = state.scenario
    # pending_move is always set in normal play; fall back to the public position
    final_evader = state.pending_move or state.evader_pos

    capture_count = update_capture_count(state.capture_count, final_evader, pursuer_target, state)
    outcome = evaluate_win_condition(capture_count, state.turn + 1, scenario)

    weather = state.weather
    if scenario.weather_enabled:
        weather = next_weather(weather, rng, config)

    state = log_event(
        state,
        "Round resolved",
        evader=final_evader.to_dict(),
        pursuer=pursuer_target.to_dict(),
        distance_km=round(physical_distance(final_evader, pursuer_target, scenario), 1),
        capture_count=capture_count,
    )

    resolved = replace(
        state,
        positions=PerSide(evader=final_evader, pursuer=pursuer_target),
        turn=state.turn + 1,
        capture_count=capture_count,
        phase=outcome.phase,
        winner=outcome.winner,
        pending_move=None,
        has_scanned=False,
        side_to_act=Side.EVADER,
        weather=weather,
    )

    if outcome.winner is Side.PURSUER:
        resolved = log_event(resolved, "Victory by lock: Pursuer wins", winner=Side.PURSUER.value)
    elif outcome.winner is Side.EVADER:
        resolved = log_event(resolved, "Victory by survival: Evader wins", winner=Side.EVADER.value)
    elif weather is not state.weather:
        resolved = log_event(resolved, f"Weather changed to {weather.value}")
    return resolved
