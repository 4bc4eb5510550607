import logging
import random
import uuid
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from engine import MatchEngine
from models import Mode, Position, ScanType, Side
from scenarios import SCENARIO_CUSTOM, SCENARIOS, Scenario, ScenarioError, get_scenario

logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)  # Enable CORS for all routes
matches: Dict[str, MatchEngine] = {}  # In-memory storage for match sessions


def _parse_side(value: Any) -> Optional[Side]:
    """Accept 'A'/'B' or 'EVADER'/'PURSUER'. None if value is missing or unknown."""
    if not isinstance(value, str):
        return None
    value = value.upper()
    for side in Side:
        if value in (side.value, side.name):
            return side
    return None


def _parse_position(value: Any) -> Optional[Position]:
    if not isinstance(value, dict) or 'x' not in value or 'y' not in value:
        return None
    try:
        return Position(int(value['x']), int(value['y']))
    except (TypeError, ValueError, OverflowError):
        return None


def _resolve_scenario(data: Dict[str, Any]) -> Scenario:
    scenario_id = data.get('scenario', 'classic')
    overrides = data.get('custom') or {}
    if not isinstance(overrides, dict):
        raise ScenarioError('custom must be an object of scenario fields')
    if scenario_id == 'custom':
        return Scenario.from_dict(overrides, base=SCENARIO_CUSTOM)
    return get_scenario(scenario_id)


def _ai_delay() -> Optional[float]:
    return app.config.get('AI_DELAY')


def _match_response(match_id: str, engine: MatchEngine, accepted: Optional[bool] = None):
    body: Dict[str, Any] = {'match_id': match_id}
    if accepted is not None:
        body['accepted'] = accepted
    viewer = _parse_side(request.args.get('viewer'))
    body['state'] = engine.observation(viewer) if viewer else engine.snapshot()
    return jsonify(body)


@app.route('/api/scenarios', methods=['GET'])
def list_scenarios():
    """List the scenario presets plus the custom sandbox defaults."""
    return jsonify({'scenarios': [s.to_dict() for s in SCENARIOS + [SCENARIO_CUSTOM]]})


@app.route('/api/match/new', methods=['POST'])
def new_match():
    """Create a match. Body: {mode, scenario, human_side?, custom?, seed?}."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Invalid JSON data'}), 400

    try:
        mode = Mode(data.get('mode', 'hotseat'))
    except ValueError:
        return jsonify({'error': f"Invalid mode: {data.get('mode')}"}), 400

    try:
        scenario = _resolve_scenario(data)
    except ScenarioError as e:
        return jsonify({'error': str(e)}), 400

    human_side = _parse_side(data.get('human_side'))
    if mode is Mode.AI and human_side is None:
        return jsonify({'error': 'AI matches need human_side of A or B'}), 400

    seed = data.get('seed')
    try:
        seed = int(seed) if seed is not None else None
    except (ValueError, TypeError, OverflowError):
        return jsonify({'error': 'Seed must be an integer'}), 400

    engine = MatchEngine(scenario=scenario, rng=random.Random(seed), ai_delay=_ai_delay())
    if mode is Mode.AI:
        engine.start_ai_match(scenario, human_side)
    else:
        engine.start_hotseat(scenario)

    match_id = str(uuid.uuid4())
    matches[match_id] = engine
    logger.info("Match %s created: %s (%s)", match_id, scenario.id, mode.value)
    return jsonify({'match_id': match_id, 'state': engine.snapshot()})


@app.route('/api/match/<match_id>/state', methods=['GET'])
def get_match_state(match_id: str):
    """Current snapshot. ?viewer=A|B applies fog of war for that side."""
    engine = matches.get(match_id)
    if engine is None:
        return jsonify({'error': 'Match not found'}), 404
    return _match_response(match_id, engine)


@app.route('/api/match/<match_id>/legal-moves', methods=['GET'])
def get_legal_moves(match_id: str):
    """Legal rows for the side to act, with the cell each row leads to."""
    engine = matches.get(match_id)
    if engine is None:
        return jsonify({'error': 'Match not found'}), 404

    side = engine.state.side_to_act
    rows = engine.legal_moves(side)
    return jsonify({
        'match_id': match_id,
        'side': side.value,
        'moves': [{'row': row, 'target': engine.preview(row, side).to_dict()} for row in rows],
    })


@app.route('/api/match/<match_id>/observation', methods=['GET'])
def get_observation_window(match_id: str):
    """Whether each scan type is currently allowed, with the reason if not."""
    engine = matches.get(match_id)
    if engine is None:
        return jsonify({'error': 'Match not found'}), 404

    result = {}
    for scan_type in ScanType:
        check = engine.observation_allowed(scan_type)
        result[scan_type.value] = {'allowed': check.allowed, 'reason': check.reason}
    return jsonify({
        'match_id': match_id,
        'has_scanned': engine.state.has_scanned,
        'scans': result,
    })


@app.route('/api/match/<match_id>/move', methods=['POST'])
def submit_move(match_id: str):
    """Commit a row for the side to act. Body: {row}."""
    engine = matches.get(match_id)
    if engine is None:
        return jsonify({'error': 'Match not found'}), 404

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Invalid JSON data'}), 400
    try:
        row = int(data['row'])
    except (KeyError, TypeError, ValueError, OverflowError):
        return jsonify({'error': 'row must be an integer'}), 400

    return _match_response(match_id, engine, accepted=engine.move(row))


@app.route('/api/match/<match_id>/scan', methods=['POST'])
def submit_scan(match_id: str):
    """Scan for the side to act. Body: {type: 'SHORT'} or {type: 'LONG', center: {x, y}}."""
    engine = matches.get(match_id)
    if engine is None:
        return jsonify({'error': 'Match not found'}), 404

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Invalid JSON data'}), 400
    try:
        scan_type = ScanType(str(data.get('type', '')).upper())
    except ValueError:
        return jsonify({'error': f"Invalid scan type: {data.get('type')}"}), 400

    if scan_type is ScanType.SHORT:
        accepted = engine.scan_short()
    else:
        center = _parse_position(data.get('center'))
        if center is None:
            return jsonify({'error': 'Long scans need center {x, y}'}), 400
        accepted = engine.scan_long(center)

    return _match_response(match_id, engine, accepted=accepted)


@app.route('/api/match/<match_id>/reset', methods=['POST'])
def reset_match(match_id: str):
    """Restart the match on the same scenario and mode."""
    engine = matches.get(match_id)
    if engine is None:
        return jsonify({'error': 'Match not found'}), 404
    return _match_response(match_id, engine, accepted=engine.reset())


@app.route('/api/match/<match_id>/log', methods=['GET'])
def get_match_log(match_id: str):
    """Retrieve the match event log."""
    engine = matches.get(match_id)
    if engine is None:
        return jsonify({'error': 'Match not found'}), 404
    state = engine.state
    return jsonify({'match_id': match_id, 'turn': state.turn, 'phase': state.phase.value, 'log': engine.events})


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    app.run(debug=True)
