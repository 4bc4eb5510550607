"""
Rules for orbital pursuit matches.

Movement: each turn a side picks a row (orbit). The chosen row alone fixes the
lateral drift: rows above the centre drift left, rows below drift right, by
|row - centre| columns. The Evader must land inside its column band; the
Pursuer anywhere on the map.

Observation: with weather enabled, scans depend on the time of day (a
4-turn NIGHT/DAWN/DAY/DUSK cycle) and on cloud cover.

Victory: the Pursuer wins once the Evader ends win_time consecutive rounds
inside capture range; the Evader wins by outlasting max_turns.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional

from models import MatchPhase, Position, ScanType, Side, TimeOfDay, Weather
from physics import within_range
from scenarios import Scenario

if TYPE_CHECKING:
    from state import MatchState

# Scan coverage tolerance in km, so a target sitting on the drawn edge counts.
SCAN_EPSILON_KM = 1.0

TIME_OF_DAY_CYCLE = [TimeOfDay.NIGHT, TimeOfDay.DAWN, TimeOfDay.DAY, TimeOfDay.DUSK]


@dataclass(frozen=True)
class ObservationCheck:
    allowed: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class WinCheck:
    phase: MatchPhase
    winner: Optional[Side] = None


def center_row(scenario: Scenario) -> float:
    """Index of the drift-free row. Half-integral when grid_h is even."""
    return (scenario.grid_h - 1) / 2


def drift_for_row(row: int, scenario: Scenario) -> float:
    """Lateral displacement implied by selecting row."""
    return row - center_row(scenario)


def legal_move(side: Side, from_x: int, target_row: int, scenario: Scenario) -> bool:
    """
    Check if moving to target_row from column from_x is legal for side.

    Args:
        side: Side making the move
        from_x: Current column
        target_row: Row being selected
        scenario: Active scenario

    Returns:
        True if the row exists and the resulting column is inside the side's bounds
    """
    if target_row < 0 or target_row >= scenario.grid_h:
        return False

    next_x = from_x + drift_for_row(target_row, scenario)
    # Drift is half-integral on even-height maps; such rows never land on a cell
    if next_x != int(next_x):
        return False

    if side is Side.EVADER:
        return scenario.a_min_x <= next_x <= scenario.a_max_x
    return 0 <= next_x < scenario.grid_w


def legal_moves(side: Side, from_x: int, scenario: Scenario) -> List[int]:
    """All legal rows for side from column from_x, in ascending order."""
    return [row for row in range(scenario.grid_h) if legal_move(side, from_x, row, scenario)]


def next_position(from_pos: Position, target_row: int, scenario: Scenario) -> Position:
    """Position reached by selecting target_row from from_pos."""
    return Position(x=int(from_pos.x + drift_for_row(target_row, scenario)), y=target_row)


def time_of_day(turn: int) -> TimeOfDay:
    """Turn 1 is NIGHT, then DAWN, DAY, DUSK, repeating."""
    return TIME_OF_DAY_CYCLE[(turn - 1) % len(TIME_OF_DAY_CYCLE)]


def observation_allowed(turn: int, weather: Weather, scan_type: ScanType,
                        scenario: Scenario) -> ObservationCheck:
    """
    Check whether a scan of scan_type may be performed.

    The reason string is advisory, for explaining a blocked action to a user.
    """
    if not scenario.weather_enabled:
        return ObservationCheck(allowed=True)

    if weather is Weather.CLOUDY:
        return ObservationCheck(allowed=False, reason='Cloud cover blocks all observation')

    period = time_of_day(turn)
    if period is TimeOfDay.DAY:
        return ObservationCheck(allowed=False, reason='Daylight glare blocks all observation')
    if period in (TimeOfDay.DAWN, TimeOfDay.DUSK) and scan_type is ScanType.LONG:
        return ObservationCheck(
            allowed=False,
            reason=f'Only short-range scans are possible at {period.value}',
        )
    return ObservationCheck(allowed=True)


def within_capture_range(p1: Position, p2: Position, scenario: Scenario) -> bool:
    return within_range(p1, p2, scenario.identification_km, scenario)


def within_visual_range(p1: Position, p2: Position, scenario: Scenario) -> bool:
    return within_range(p1, p2, scenario.visual_km, scenario)


def scan_covers(scan_center: Position, target: Position, scenario: Scenario) -> bool:
    return within_range(scan_center, target, scenario.long_scan_km, scenario, epsilon=SCAN_EPSILON_KM)


def evaluate_win_condition(capture_count: int, turn_after_round: int, scenario: Scenario) -> WinCheck:
    """
    Decide the outcome at a round boundary.

    Args:
        capture_count: Consecutive rounds ended inside capture range, including this one
        turn_after_round: Number of the turn about to start
        scenario: Active scenario

    Returns:
        WinCheck with the next phase and winner (None while playing)
    """
    if capture_count >= scenario.win_time:
        return WinCheck(phase=MatchPhase.GAMEOVER, winner=Side.PURSUER)
    if turn_after_round > scenario.max_turns:
        return WinCheck(phase=MatchPhase.GAMEOVER, winner=Side.EVADER)
    return WinCheck(phase=MatchPhase.PLAYING)


def next_weather(weather: Weather, rng: random.Random, config: Dict) -> Weather:
    """
    One step of the weather chain, evaluated once per completed round.

    Clouds form rarely and clear quickly, so skies are clear most of the time.
    """
    roll = rng.random()
    if weather is Weather.CLEAR:
        return Weather.CLOUDY if roll < config['cloud_in_probability'] else Weather.CLEAR
    return Weather.CLEAR if roll < config['cloud_clear_probability'] else Weather.CLOUDY


def opponent_visible(state: MatchState, viewer: Side) -> bool:
    """
    Check if viewer may currently see the opponent's public position.

    Visible when fog of war is off, the match is over, the two sides are
    within visual range, or the viewer's latest scan pinned the opponent
    where it currently is.
    """
    scenario = state.scenario
    if not scenario.fog_of_war or state.phase is MatchPhase.GAMEOVER:
        return True

    own = state.positions.get(viewer)
    other = state.positions.get(viewer.opponent)
    if within_visual_range(own, other, scenario):
        return True

    scan = state.last_scan.get(viewer)
    return scan is not None and scan.detected_position == other


def fallback_row(scenario: Scenario) -> int:
    """Centre-most row, used as a fallback when a side has no legal move."""
    return math.floor(center_row(scenario))
