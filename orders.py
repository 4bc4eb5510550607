"""
Commands and the match reducer.

apply_command maps (state, command) to a new state. Rule violations are not
errors for the caller: validators raise CommandRejected, the reducer catches
it and hands back the very same state object, so "rejected" can be detected
with an identity check.
"""

import logging
import random
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Union

from models import MatchPhase, Mode, Position, Side
from recon import perform_long_scan, perform_short_scan
from rules import legal_move, next_position
from scenarios import Scenario
from state import CommandRejected, MatchState, load_config, log_event, new_match
from upkeep import resolve_round

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartMatch:
    scenario: Scenario
    mode: Mode
    human_side: Optional[Side] = None


@dataclass(frozen=True)
class Move:
    row: int


@dataclass(frozen=True)
class ScanShort:
    pass


@dataclass(frozen=True)
class ScanLong:
    center: Position


@dataclass(frozen=True)
class Reset:
    pass


Command = Union[StartMatch, Move, ScanShort, ScanLong, Reset]


def validate_playing(state: MatchState) -> None:
    if state.phase is not MatchPhase.PLAYING:
        raise CommandRejected("Match is over")


def validate_move(state: MatchState, row: int) -> None:
    """Validate a row selection for the side to act."""
    side = state.side_to_act
    from_x = state.positions.get(side).x
    if not legal_move(side, from_x, row, state.scenario):
        raise CommandRejected(f"Row {row} is not a legal move for {side.name} from column {from_x}")


def start_match(command: StartMatch, config: Dict[str, Any]) -> MatchState:
    """Fresh match from the command's scenario. Accepted in any phase."""
    human_side = command.human_side if command.mode is Mode.AI else None
    if command.mode is Mode.AI and human_side is None:
        raise CommandRejected("AI match needs a human side")
    state = new_match(command.scenario, command.mode, human_side, config)
    return log_event(state, f"Match started: {command.scenario.id} ({command.mode.value})")


def reset_match(state: MatchState, config: Dict[str, Any]) -> MatchState:
    """Back to turn 1 of the loaded scenario, keeping mode and human side."""
    fresh = new_match(state.scenario, state.mode, state.human_side, config)
    return log_event(fresh, f"Match reset: {state.scenario.id}")


def commit_move(state: MatchState, row: int, rng: random.Random, config: Dict[str, Any]) -> MatchState:
    """
    Commit the side to act's row selection.

    The Evader's move is stashed as pending and the public position is left
    alone. The Pursuer's move resolves the round for both sides.

    Args:
        state: Current match state
        row: Selected row
        rng: Random source for the weather step
        config: Tunables (fuel_per_row, weather probabilities)

    Returns:
        New MatchState

    Raises:
        CommandRejected: If the row is not legal for the side to act
    """
    validate_move(state, row)

    side = state.side_to_act
    current = state.positions.get(side)
    target = next_position(current, row, state.scenario)
    fuel_cost = abs(row - current.y) * config['fuel_per_row']
    resources = state.resources.replace(side, state.resources.get(side).burn_fuel(fuel_cost))

    if side is Side.EVADER:
        state = log_event(state, "Evader committed a move", fuel_cost=fuel_cost)
        return replace(
            state,
            pending_move=target,
            resources=resources,
            side_to_act=Side.PURSUER,
            has_scanned=False,
        )

    state = log_event(state, "Pursuer committed a move", fuel_cost=fuel_cost)
    return resolve_round(replace(state, resources=resources), target, rng, config)


def apply_command(state: MatchState, command: Command, rng: Optional[random.Random] = None,
                  config: Optional[Dict[str, Any]] = None) -> MatchState:
    """
    Apply one command to a state.

    Args:
        state: Current match state
        command: StartMatch, Move, ScanShort, ScanLong or Reset
        rng: Random source for stochastic rules (default: fresh random.Random)
        config: Tunables (default: load_config())

    Returns:
        The new state, or state itself if the command was rejected
    """
    rng = rng or random.Random()
    config = config or load_config()
    try:
        if isinstance(command, StartMatch):
            return start_match(command, config)
        if isinstance(command, Reset):
            return reset_match(state, config)

        validate_playing(state)
        if isinstance(command, Move):
            return commit_move(state, command.row, rng, config)
        if isinstance(command, ScanShort):
            return perform_short_scan(state)
        if isinstance(command, ScanLong):
            return perform_long_scan(state, command.center)
    except CommandRejected as e:
        logger.debug("Rejected %s on turn %d: %s", type(command).__name__, state.turn, e)
        return state

    raise TypeError(f"Unknown command: {command!r}")
