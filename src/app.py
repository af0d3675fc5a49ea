"""
Flask web application for the tournament bracket manager.

Serves JSON only; drawing the bracket is left to the client.
"""
import os
import yaml
from functools import wraps
from filelock import FileLock
from flask import Flask, request, jsonify
from bracket.errors import BracketError, MatchNotFound, RoundNotFound, TournamentNotFound
from bracket.manager import TournamentManager
from bracket.models import TournamentData

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))
TOURNAMENTS_FILE = os.path.join(DATA_DIR, 'tournaments.yaml')
LOCK_TIMEOUT_SECONDS = 10


def _data_lock() -> FileLock:
    """Lock guarding every read-modify-write of the data directory."""
    os.makedirs(DATA_DIR, exist_ok=True)
    return FileLock(os.path.join(DATA_DIR, '.lock'), timeout=LOCK_TIMEOUT_SECONDS)


def load_tournament_data() -> TournamentData:
    """Load the tournament registry from YAML."""
    if not os.path.exists(TOURNAMENTS_FILE):
        return TournamentData()
    try:
        with open(TOURNAMENTS_FILE, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        return TournamentData.from_dict(data)
    except Exception as e:
        app.logger.warning(f'Failed to parse {TOURNAMENTS_FILE}: {e}')
        return TournamentData()


def save_tournament_data(data: TournamentData):
    """Save the tournament registry to YAML."""
    os.makedirs(os.path.dirname(TOURNAMENTS_FILE), exist_ok=True)
    with open(TOURNAMENTS_FILE, 'w', encoding='utf-8') as f:
        yaml.dump(data.to_dict(), f, default_flow_style=False, allow_unicode=True, sort_keys=False)


def with_manager(f):
    """Run the view under the data lock with a manager over freshly loaded data."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        with _data_lock():
            manager = TournamentManager(load_tournament_data(), save_callback=save_tournament_data)
            try:
                return f(manager, *args, **kwargs)
            except (TournamentNotFound, MatchNotFound, RoundNotFound) as e:
                return jsonify({'success': False, 'error': str(e)}), 404
            except BracketError as e:
                return jsonify({'success': False, 'error': str(e)}), 400
    return decorated_function


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _tournament_summary(tournament) -> dict:
    return {
        'id': tournament.id,
        'name': tournament.name,
        'sport': tournament.sport,
        'format': tournament.format,
        'seeding': tournament.seeding,
        'teams': list(tournament.teams),
        'has_bracket': tournament.has_bracket,
    }


@app.route('/api/tournaments', methods=['GET'])
@with_manager
def api_list_tournaments(manager):
    """List all tournaments and the active one."""
    return jsonify({
        'active': manager.tournament_data.active_tournament_id,
        'tournaments': [_tournament_summary(t) for t in manager.tournaments],
    })


@app.route('/api/tournaments/create', methods=['POST'])
@with_manager
def api_create_tournament(manager):
    """Create a new tournament and make it active."""
    tournament = manager.create_tournament(_json_body().get('name', ''))
    return jsonify({'success': True, 'tournament': _tournament_summary(tournament)})


@app.route('/api/tournaments/select', methods=['POST'])
@with_manager
def api_select_tournament(manager):
    tournament_id = _json_body().get('id')
    if not tournament_id:
        return jsonify({'success': False, 'error': 'Missing id'}), 400
    tournament = manager.select_tournament(tournament_id)
    return jsonify({'success': True, 'tournament': _tournament_summary(tournament)})


@app.route('/api/tournaments/delete', methods=['POST'])
@with_manager
def api_delete_tournament(manager):
    tournament_id = _json_body().get('id')
    if not tournament_id:
        return jsonify({'success': False, 'error': 'Missing id'}), 400
    manager.delete_tournament(tournament_id)
    return jsonify({'success': True, 'active': manager.tournament_data.active_tournament_id})


@app.route('/api/tournaments/settings', methods=['POST'])
@with_manager
def api_update_settings(manager):
    """Update name, sport, format or seeding of a tournament (active one by default)."""
    data = _json_body()
    tournament = manager.update_settings(
        data.get('id'),
        name=data.get('name'),
        sport=data.get('sport'),
        format=data.get('format'),
        seeding=data.get('seeding'),
    )
    return jsonify({'success': True, 'tournament': _tournament_summary(tournament)})


@app.route('/api/teams/add', methods=['POST'])
@with_manager
def api_add_team(manager):
    data = _json_body()
    name = manager.add_team(data.get('name', ''), data.get('id'))
    return jsonify({'success': True, 'team': name, 'teams': manager.get_tournament(data.get('id')).teams})


@app.route('/api/teams/remove', methods=['POST'])
@with_manager
def api_remove_team(manager):
    data = _json_body()
    manager.remove_team(data.get('name', ''), data.get('id'))
    return jsonify({'success': True, 'teams': manager.get_tournament(data.get('id')).teams})


@app.route('/api/teams/rename', methods=['POST'])
@with_manager
def api_rename_team(manager):
    """AJAX endpoint for editing a team name."""
    data = _json_body()
    old_name = (data.get('old_name') or '').strip()
    manager.rename_team(old_name, data.get('new_name', ''), data.get('id'))
    return jsonify({'success': True, 'teams': manager.get_tournament(data.get('id')).teams})


@app.route('/api/bracket/build', methods=['POST'])
@with_manager
def api_build_bracket(manager):
    """Rebuild the bracket from the team list. Entered scores are discarded."""
    data = _json_body()
    manager.build_bracket(data.get('id'))
    return jsonify({'success': True, 'bracket': manager.get_bracket_display(data.get('id'))})


@app.route('/api/bracket/score', methods=['POST'])
@with_manager
def api_record_score(manager):
    """Set one side's score and recompute every winner in the bracket."""
    data = _json_body()
    match_id = data.get('match_id')
    if not match_id:
        return jsonify({'success': False, 'error': 'Missing match_id'}), 400
    match = manager.record_score(match_id, data.get('side'), data.get('value'), data.get('id'))
    return jsonify({
        'success': True,
        'match': match.to_dict(),
        'placements': manager.get_placements(data.get('id')),
    })


@app.route('/api/bracket', methods=['GET'])
@with_manager
def api_get_bracket(manager):
    """Bracket with round labels and placements, for the renderer."""
    return jsonify(manager.get_bracket_display(request.args.get('id')))


if __name__ == '__main__':
    app.run(debug=True, port=5000)
