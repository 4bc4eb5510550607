"""
Reconnaissance: short and long range scans.

A side may scan at most once per round, before committing its move, and only
when observation_allowed permits the scan type for the current turn and
weather. Scans look at the opponent's public position, so the Pursuer can
never see where a pending Evader move is headed.

Short scan: always reveals the opponent's column, never its row.
Long scan: reveals the opponent's exact position if it lies within the
scenario's long_scan_km of the chosen centre; otherwise a miss. The queried
circle is recorded either way. A long scan aimed at a cell off the map is
rejected like any other illegal command.
"""

from dataclasses import replace

from models import Position, ScanArea, ScanResult, ScanType
from rules import observation_allowed, scan_covers
from state import CommandRejected, MatchState, log_event


def validate_scan(state: MatchState, scan_type: ScanType) -> None:
    if state.has_scanned:
        raise CommandRejected(f"{state.side_to_act.name} has already scanned this turn")
    check = observation_allowed(state.turn, state.weather, scan_type, state.scenario)
    if not check.allowed:
        raise CommandRejected(check.reason or "Observation not allowed")


def _record_scan(state: MatchState, result: ScanResult, cost: int) -> MatchState:
    """Store result as the acting side's latest scan, archiving the one before it."""
    side = state.side_to_act
    return replace(
        state,
        previous_scan=state.previous_scan.replace(side, state.last_scan.get(side)),
        last_scan=state.last_scan.replace(side, result),
        resources=state.resources.replace(side, state.resources.get(side).spend_scan_points(cost)),
        has_scanned=True,
    )


def perform_short_scan(state: MatchState) -> MatchState:
    validate_scan(state, ScanType.SHORT)

    target = state.positions.get(state.side_to_act.opponent)
    result = ScanResult(turn=state.turn, scan_type=ScanType.SHORT, detected_column=target.x)

    state = log_event(state, "Short scan", detected_column=target.x)
    return _record_scan(state, result, state.scenario.observation_cost_short)


def perform_long_scan(state: MatchState, center: Position) -> MatchState:
    """
    Scan a circle around center.

    Args:
        state: Current match state
        center: Grid cell the scan is aimed at

    Returns:
        New MatchState with the scan recorded for the side to act

    Raises:
        CommandRejected: If the scan is not allowed now or center is off the map
    """
    validate_scan(state, ScanType.LONG)
    scenario = state.scenario
    if not (0 <= center.x < scenario.grid_w and 0 <= center.y < scenario.grid_h):
        raise CommandRejected(f"Scan centre {center} is outside the map")

    target = state.positions.get(state.side_to_act.opponent)
    detected = target if scan_covers(center, target, scenario) else None
    result = ScanResult(
        turn=state.turn,
        scan_type=ScanType.LONG,
        detected_position=detected,
        scanned_area=ScanArea(center=center, radius_km=scenario.long_scan_km),
    )

    state = log_event(state, "Long scan", center=center.to_dict(), hit=detected is not None)
    return _record_scan(state, result, scenario.observation_cost_long)
