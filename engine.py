"""
Session engine: owns the current MatchState, routes human commands into the
reducer and drives the computer opponent.

When a command hands the turn to the AI side, the engine schedules the AI's
move after a short presentational delay. The scheduled task carries a
generation token; starting, resetting or rescheduling bumps the generation,
so a task that fires late finds itself stale and does nothing. It also
re-checks the phase and the side to act before moving.
"""

import logging
import random
import threading
from typing import Any, Callable, Dict, List, Optional

from ai import choose_move
from models import MatchPhase, Mode, Position, ScanType, Side
from orders import Command, Move, Reset, ScanLong, ScanShort, StartMatch, apply_command
from rules import ObservationCheck, legal_move, legal_moves, next_position, observation_allowed, opponent_visible
from scenarios import Scenario
from state import MatchState, get_match_summary, get_observation, load_config, new_match

logger = logging.getLogger(__name__)

Scheduler = Callable[[float, Callable[[], None]], Any]


def timer_scheduler(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """Run callback on a daemon timer thread after delay seconds."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class MatchEngine:
    """
    Query/command surface for one match.

    Commands return True when accepted and False when rejected; a rejected
    command leaves the state untouched.
    """

    def __init__(self, scenario: Optional[Scenario] = None, rng: Optional[random.Random] = None,
                 ai_delay: Optional[float] = None, scheduler: Optional[Scheduler] = None,
                 config: Optional[Dict[str, Any]] = None):
        self.config = config or load_config()
        self.rng = rng or random.Random()
        self.ai_delay = self.config['ai_delay_seconds'] if ai_delay is None else ai_delay
        self.scheduler = scheduler or timer_scheduler
        self._lock = threading.RLock()
        self._state = new_match(scenario, config=self.config)
        self._generation = 0
        self._pending_ai: Any = None

    # --- Queries ---

    @property
    def state(self) -> MatchState:
        return self._state

    @property
    def scenario(self) -> Scenario:
        return self._state.scenario

    @property
    def ai_side(self) -> Optional[Side]:
        return self._state.ai_side

    @property
    def is_human_turn(self) -> bool:
        state = self._state
        if state.phase is not MatchPhase.PLAYING:
            return False
        if state.mode is Mode.HOTSEAT:
            return True
        if state.mode is Mode.AI:
            return state.human_side is state.side_to_act
        return False

    @property
    def ai_pending(self) -> bool:
        return self._pending_ai is not None

    @property
    def events(self) -> List[Dict[str, Any]]:
        return list(self._state.log)

    def snapshot(self) -> Dict[str, Any]:
        return get_match_summary(self._state)

    def observation(self, viewer: Side) -> Dict[str, Any]:
        return get_observation(self._state, viewer)

    def legal_move(self, side: Side, from_x: int, row: int) -> bool:
        return legal_move(side, from_x, row, self.scenario)

    def legal_moves(self, side: Optional[Side] = None, from_x: Optional[int] = None) -> List[int]:
        """Legal rows for side (default: side to act) from from_x (default: its column)."""
        side = side or self._state.side_to_act
        if from_x is None:
            from_x = self._state.positions.get(side).x
        return legal_moves(side, from_x, self.scenario)

    def preview(self, row: int, side: Optional[Side] = None) -> Position:
        """Position side would reach by selecting row, for highlighting."""
        side = side or self._state.side_to_act
        return next_position(self._state.positions.get(side), row, self.scenario)

    def observation_allowed(self, scan_type: ScanType) -> ObservationCheck:
        state = self._state
        return observation_allowed(state.turn, state.weather, scan_type, state.scenario)

    def opponent_visible(self, viewer: Side) -> bool:
        return opponent_visible(self._state, viewer)

    # --- Commands ---

    def start_hotseat(self, scenario: Scenario) -> bool:
        return self._dispatch(StartMatch(scenario=scenario, mode=Mode.HOTSEAT))

    def start_ai_match(self, scenario: Scenario, human_side: Side) -> bool:
        return self._dispatch(StartMatch(scenario=scenario, mode=Mode.AI, human_side=human_side))

    def move(self, row: int) -> bool:
        return self._human_command(Move(row=row))

    def scan_short(self) -> bool:
        return self._human_command(ScanShort())

    def scan_long(self, center: Position) -> bool:
        return self._human_command(ScanLong(center=center))

    def reset(self) -> bool:
        return self._dispatch(Reset())

    def cancel_pending_ai(self) -> None:
        with self._lock:
            self._generation += 1
            self._cancel_handle()

    # --- Internals ---

    def _human_command(self, command: Command) -> bool:
        with self._lock:
            if not self.is_human_turn:
                logger.debug("Ignoring %s: not the human's turn", type(command).__name__)
                return False
            return self._dispatch(command)

    def _dispatch(self, command: Command) -> bool:
        with self._lock:
            previous = self._state
            self._state = apply_command(previous, command, self.rng, self.config)
            accepted = self._state is not previous
            if accepted:
                self._schedule_ai()
            return accepted

    def _cancel_handle(self) -> None:
        handle, self._pending_ai = self._pending_ai, None
        if handle is not None and hasattr(handle, 'cancel'):
            handle.cancel()

    def _schedule_ai(self) -> None:
        self._generation += 1
        self._cancel_handle()

        state = self._state
        ai_side = state.ai_side
        if state.phase is not MatchPhase.PLAYING or ai_side is None or state.side_to_act is not ai_side:
            return

        token = self._generation
        if self.ai_delay <= 0:
            self._run_ai(token)
            return
        logger.debug("AI (%s) move scheduled in %.2fs", ai_side.name, self.ai_delay)
        self._pending_ai = self.scheduler(self.ai_delay, lambda: self._run_ai(token))

    def _run_ai(self, token: int) -> None:
        with self._lock:
            if token != self._generation:
                logger.debug("Dropping stale AI task %d", token)
                return
            self._pending_ai = None

            state = self._state
            ai_side = state.ai_side
            if state.phase is not MatchPhase.PLAYING or ai_side is None or state.side_to_act is not ai_side:
                return

            row = choose_move(state, ai_side, self.rng)
            if not self._dispatch(Move(row=row)):
                logger.warning("AI move to row %d was rejected on turn %d", row, state.turn)
