"""
Match state for orbital pursuit.

MatchState is an immutable value: every command produces a new state through
orders.apply_command, and the previous one stays valid. A session layer owns
a single current state and threads it explicitly.

Round structure: the Evader commits first and its move is held as
pending_move (hidden from the public positions); the Pursuer's commit then
resolves both moves at once.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from models import (MatchPhase, Mode, PerSide, Position, Resources, ScanResult,
                    Side, Weather)
from rules import opponent_visible
from scenarios import SCENARIO_CLASSIC, Scenario

CONFIG_DEFAULTS: Dict[str, Any] = {
    'fuel_per_row': 1.0,
    'fuel_capacity': 100.0,
    'cloud_in_probability': 0.2,
    'cloud_clear_probability': 0.7,
    'ai_delay_seconds': 0.6,
}


class CommandRejected(Exception):
    """Raised when a command is not legal in the current state."""
    pass


def load_config() -> Dict[str, Any]:
    """
    Load tunables from config.json beside this module, over built-in defaults.

    Returns:
        Dict with every key of CONFIG_DEFAULTS present
    """
    config = dict(CONFIG_DEFAULTS)
    config_path = os.path.join(os.path.dirname(__file__), 'config.json')
    try:
        with open(config_path, 'r') as f:
            config.update(json.load(f))
    except (FileNotFoundError, json.JSONDecodeError):
        # Use defaults if config file is missing or invalid
        pass
    return config


@dataclass(frozen=True)
class MatchState:
    """
    Complete state of one match.

    Only the Evader ever has a pending move. turn advances once per
    completed round. capture_count changes only when a round resolves.
    has_scanned belongs to the side currently acting and is cleared by
    every committed move.
    """
    scenario: Scenario
    positions: PerSide[Position]
    resources: PerSide[Resources]
    mode: Optional[Mode] = None
    human_side: Optional[Side] = None
    phase: MatchPhase = MatchPhase.PLAYING
    turn: int = 1
    side_to_act: Side = Side.EVADER
    pending_move: Optional[Position] = None
    capture_count: int = 0
    winner: Optional[Side] = None
    last_scan: PerSide[Optional[ScanResult]] = field(default_factory=lambda: PerSide.both(None))
    previous_scan: PerSide[Optional[ScanResult]] = field(default_factory=lambda: PerSide.both(None))
    has_scanned: bool = False
    weather: Weather = Weather.CLEAR
    log: Tuple[Dict[str, Any], ...] = ()

    @property
    def evader_pos(self) -> Position:
        return self.positions.evader

    @property
    def pursuer_pos(self) -> Position:
        return self.positions.pursuer

    @property
    def ai_side(self) -> Optional[Side]:
        """Side driven by the computer opponent, or None outside AI matches."""
        if self.mode is not Mode.AI or self.human_side is None:
            return None
        return self.human_side.opponent


def log_event(state: MatchState, event: str, **kwargs) -> MatchState:
    """
    Return state with an event appended to its log.

    Args:
        state: Current match state
        event: Description of the event
        **kwargs: Additional event data to include
    """
    log_entry = {
        'turn': state.turn,
        'side': state.side_to_act.value,
        'event': event,
        **kwargs
    }
    return replace(state, log=state.log + (log_entry,))


def new_match(scenario: Optional[Scenario] = None, mode: Optional[Mode] = None,
              human_side: Optional[Side] = None,
              config: Optional[Dict[str, Any]] = None) -> MatchState:
    """
    Create a fresh match seeded from a scenario.

    Args:
        scenario: Scenario to play (default: classic)
        mode: HOTSEAT or AI; None for an idle state before any start
        human_side: Side controlled by the human in AI mode
        config: Tunables (default: load_config())

    Returns:
        MatchState at turn 1 with the Evader to act
    """
    scenario = scenario or SCENARIO_CLASSIC
    config = config or load_config()
    return MatchState(
        scenario=scenario,
        positions=PerSide(evader=scenario.initial_a_pos, pursuer=scenario.initial_b_pos),
        resources=PerSide.both(Resources(fuel_capacity=config['fuel_capacity'])),
        mode=mode,
        human_side=human_side if mode is Mode.AI else None,
    )


def _scan_to_dict(scan: Optional[ScanResult]) -> Optional[Dict[str, Any]]:
    if scan is None:
        return None
    return {
        'turn': scan.turn,
        'scan_type': scan.scan_type.value,
        'detected_column': scan.detected_column,
        'detected_position': scan.detected_position.to_dict() if scan.detected_position else None,
        'scanned_area': {
            'center': scan.scanned_area.center.to_dict(),
            'radius_km': scan.scanned_area.radius_km,
        } if scan.scanned_area else None,
    }


def _resources_to_dict(resources: Resources) -> Dict[str, Any]:
    return {
        'fuel_used': resources.fuel_used,
        'fuel_remaining': resources.fuel_remaining,
        'scan_points_used': resources.scan_points_used,
    }


def get_match_summary(state: MatchState) -> Dict[str, Any]:
    """
    Full snapshot of a match for API responses. Reveals everything except
    the pending move, which stays hidden until the round resolves.
    """
    return {
        'scenario': state.scenario.id,
        'mode': state.mode.value if state.mode else None,
        'human_side': state.human_side.value if state.human_side else None,
        'phase': state.phase.value,
        'turn': state.turn,
        'side_to_act': state.side_to_act.value,
        'positions': {side.value: state.positions.get(side).to_dict() for side in Side},
        'has_pending_move': state.pending_move is not None,
        'capture_count': state.capture_count,
        'winner': state.winner.value if state.winner else None,
        'resources': {side.value: _resources_to_dict(state.resources.get(side)) for side in Side},
        'last_scan': {side.value: _scan_to_dict(state.last_scan.get(side)) for side in Side},
        'previous_scan': {side.value: _scan_to_dict(state.previous_scan.get(side)) for side in Side},
        'has_scanned': state.has_scanned,
        'weather': state.weather.value,
    }


def get_observation(state: MatchState, viewer: Side) -> Dict[str, Any]:
    """
    Snapshot from one side's point of view under fog of war.

    The opponent's position is None unless rules.opponent_visible allows it,
    and only the viewer's own scan history is included.
    """
    summary = get_match_summary(state)
    opponent = viewer.opponent
    if not opponent_visible(state, viewer):
        summary['positions'][opponent.value] = None
    summary['last_scan'] = {viewer.value: summary['last_scan'][viewer.value]}
    summary['previous_scan'] = {viewer.value: summary['previous_scan'][viewer.value]}
    summary['viewer'] = viewer.value
    return summary
