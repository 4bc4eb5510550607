import re

import pytest


@pytest.fixture
def classic_match(api_client):
    """Create a classic hotseat match and return its id."""
    response = api_client.post('/api/match/new', json={'mode': 'hotseat', 'scenario': 'classic'})
    assert response.status_code == 200
    return response.json['match_id']


def test_list_scenarios(api_client):
    response = api_client.get('/api/scenarios')
    assert response.status_code == 200
    ids = [s['id'] for s in response.json['scenarios']]
    assert ids == ['classic', 'realistic', 'hardcore', 'custom']
    classic = response.json['scenarios'][0]
    assert classic['grid_w'] == 11
    assert classic['initial_a_pos'] == {'x': 5, 'y': 3}


def test_new_match(api_client):
    response = api_client.post('/api/match/new', json={'mode': 'hotseat', 'scenario': 'realistic', 'seed': 42})
    assert response.status_code == 200
    data = response.json
    uuid_pattern = r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$'
    assert re.match(uuid_pattern, data['match_id']) is not None
    assert data['state']['scenario'] == 'realistic'
    assert data['state']['mode'] == 'hotseat'
    assert data['state']['turn'] == 1
    assert data['state']['side_to_act'] == 'A'


def test_new_match_defaults_to_classic_hotseat(api_client):
    response = api_client.post('/api/match/new', json={})
    assert response.status_code == 200
    assert response.json['state']['scenario'] == 'classic'
    assert response.json['state']['mode'] == 'hotseat'


@pytest.mark.parametrize("body", [
    {'mode': 'online'},
    {'scenario': 'galaxy'},
    {'mode': 'ai'},
    {'mode': 'ai', 'human_side': 'C'},
    {'seed': 'abc'},
    {'scenario': 'custom', 'custom': {'warp': 9}},
    {'scenario': 'custom', 'custom': [1, 2]},
])
def test_new_match_rejects_bad_input(api_client, body):
    response = api_client.post('/api/match/new', json=body)
    assert response.status_code == 400
    assert 'error' in response.json


def test_new_match_requires_json(api_client):
    response = api_client.post('/api/match/new', data='nope', content_type='text/plain')
    assert response.status_code == 400


def test_custom_scenario(api_client):
    response = api_client.post('/api/match/new', json={
        'scenario': 'custom',
        'custom': {'grid_w': 25, 'km_per_cell_x': 20, 'initial_b_pos': {'x': 1, 'y': 5}},
    })
    assert response.status_code == 200
    match_id = response.json['match_id']
    state = response.json['state']
    assert state['scenario'] == 'custom'
    assert state['positions']['B'] == {'x': 1, 'y': 5}

    moves = api_client.get(f'/api/match/{match_id}/legal-moves').json
    assert moves['side'] == 'A'


def test_unknown_match_is_404(api_client):
    for path in ('state', 'legal-moves', 'observation', 'log'):
        assert api_client.get(f'/api/match/nope/{path}').status_code == 404
    assert api_client.post('/api/match/nope/move', json={'row': 3}).status_code == 404
    assert api_client.post('/api/match/nope/scan', json={'type': 'SHORT'}).status_code == 404
    assert api_client.post('/api/match/nope/reset').status_code == 404


def test_get_state(api_client, classic_match):
    response = api_client.get(f'/api/match/{classic_match}/state')
    assert response.status_code == 200
    state = response.json['state']
    assert state['positions'] == {'A': {'x': 5, 'y': 3}, 'B': {'x': 1, 'y': 3}}
    assert state['capture_count'] == 0
    assert state['resources']['B']['fuel_remaining'] == 100.0


def test_state_with_viewer_applies_fog(api_client):
    match_id = api_client.post('/api/match/new', json={'scenario': 'realistic'}).json['match_id']
    state = api_client.get(f'/api/match/{match_id}/state?viewer=B').json['state']
    assert state['viewer'] == 'B'
    assert state['positions']['A'] is None
    assert state['positions']['B'] == {'x': 2, 'y': 5}


def test_legal_moves(api_client, classic_match):
    response = api_client.get(f'/api/match/{classic_match}/legal-moves')
    assert response.status_code == 200
    data = response.json
    assert data['side'] == 'A'
    assert [m['row'] for m in data['moves']] == list(range(7))
    assert data['moves'][0]['target'] == {'x': 2, 'y': 0}


def test_move_round_trip(api_client, classic_match):
    response = api_client.post(f'/api/match/{classic_match}/move', json={'row': 5})
    assert response.status_code == 200
    assert response.json['accepted'] is True
    state = response.json['state']
    assert state['side_to_act'] == 'B'
    assert state['has_pending_move'] is True
    assert state['positions']['A'] == {'x': 5, 'y': 3}

    response = api_client.post(f'/api/match/{classic_match}/move', json={'row': 4})
    state = response.json['state']
    assert state['turn'] == 2
    assert state['positions']['A'] == {'x': 7, 'y': 5}
    assert state['positions']['B'] == {'x': 2, 'y': 4}


def test_illegal_move_is_rejected_not_error(api_client, classic_match):
    response = api_client.post(f'/api/match/{classic_match}/move', json={'row': 9})
    assert response.status_code == 200
    assert response.json['accepted'] is False
    assert response.json['state']['side_to_act'] == 'A'


@pytest.mark.parametrize("body", [{}, {'row': 'up'}, {'row': None}])
def test_move_needs_integer_row(api_client, classic_match, body):
    response = api_client.post(f'/api/match/{classic_match}/move', json=body)
    assert response.status_code == 400


def test_ai_match_answers_inline(api_client):
    response = api_client.post('/api/match/new', json={'mode': 'ai', 'human_side': 'A', 'seed': 1})
    match_id = response.json['match_id']
    assert response.json['state']['side_to_act'] == 'A'

    response = api_client.post(f'/api/match/{match_id}/move', json={'row': 3})
    assert response.json['accepted'] is True
    state = response.json['state']
    assert state['turn'] == 2
    assert state['side_to_act'] == 'A'


def test_ai_match_human_pursuer(api_client):
    response = api_client.post('/api/match/new', json={'mode': 'ai', 'human_side': 'PURSUER'})
    state = response.json['state']
    assert state['human_side'] == 'B'
    assert state['side_to_act'] == 'B'
    assert state['has_pending_move'] is True


def test_scan_short(api_client):
    match_id = api_client.post('/api/match/new', json={'scenario': 'realistic'}).json['match_id']
    response = api_client.post(f'/api/match/{match_id}/scan?viewer=A', json={'type': 'short'})
    assert response.status_code == 200
    assert response.json['accepted'] is True
    scan = response.json['state']['last_scan']['A']
    assert scan['detected_column'] == 2

    again = api_client.post(f'/api/match/{match_id}/scan', json={'type': 'SHORT'})
    assert again.json['accepted'] is False


def test_scan_long(api_client):
    match_id = api_client.post('/api/match/new', json={'scenario': 'realistic'}).json['match_id']
    response = api_client.post(f'/api/match/{match_id}/scan?viewer=A',
                               json={'type': 'LONG', 'center': {'x': 3, 'y': 5}})
    assert response.json['accepted'] is True
    state = response.json['state']
    assert state['last_scan']['A']['detected_position'] == {'x': 2, 'y': 5}
    assert state['positions']['B'] == {'x': 2, 'y': 5}


@pytest.mark.parametrize("body", [
    {'type': 'MEDIUM'},
    {'type': 'LONG'},
    {'type': 'LONG', 'center': {'x': 'a', 'y': 1}},
])
def test_scan_bad_input(api_client, classic_match, body):
    response = api_client.post(f'/api/match/{classic_match}/scan', json=body)
    assert response.status_code == 400


def test_observation_window(api_client):
    match_id = api_client.post('/api/match/new', json={'scenario': 'hardcore', 'seed': 3}).json['match_id']
    data = api_client.get(f'/api/match/{match_id}/observation').json
    assert data['has_scanned'] is False
    assert data['scans']['SHORT'] == {'allowed': True, 'reason': None}
    assert data['scans']['LONG']['allowed'] is True


def test_reset(api_client, classic_match):
    api_client.post(f'/api/match/{classic_match}/move', json={'row': 3})
    api_client.post(f'/api/match/{classic_match}/move', json={'row': 3})
    response = api_client.post(f'/api/match/{classic_match}/reset')
    assert response.status_code == 200
    assert response.json['accepted'] is True
    assert response.json['state']['turn'] == 1
    assert response.json['state']['mode'] == 'hotseat'


def test_log(api_client, classic_match):
    api_client.post(f'/api/match/{classic_match}/move', json={'row': 3})
    data = api_client.get(f'/api/match/{classic_match}/log').json
    assert data['turn'] == 1
    assert data['phase'] == 'playing'
    events = [entry['event'] for entry in data['log']]
    assert events[0].startswith('Match started')
    assert events[-1] == 'Evader committed a move'


@pytest.mark.parametrize("custom", [
    {'grid_h': 6},
    {'a_min_x': 15, 'a_max_x': 3, 'initial_a_pos': {'x': 40, 'y': 2}},
    {'initial_b_pos': {'x': 30, 'y': 5}},
    {'win_time': 0},
    {'km_per_cell_y': 0},
    {'fog_of_war': 'false'},
])
def test_new_match_rejects_unplayable_custom_scenario(api_client, custom):
    response = api_client.post('/api/match/new', json={'scenario': 'custom', 'custom': custom})
    assert response.status_code == 400
    assert 'error' in response.json


def test_huge_numbers_are_bad_requests(api_client, classic_match):
    def post_raw(path, body):
        return api_client.post(path, data=body, content_type='application/json')

    assert post_raw('/api/match/new', '{"seed": 1e400}').status_code == 400
    assert post_raw('/api/match/new', '{"scenario": "custom", "custom": {"max_turns": 1e400}}').status_code == 400
    assert post_raw(f'/api/match/{classic_match}/move', '{"row": 1e400}').status_code == 400
    assert post_raw(f'/api/match/{classic_match}/scan',
                    '{"type": "LONG", "center": {"x": 1e400, "y": 1}}').status_code == 400
