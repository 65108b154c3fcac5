from flask import Blueprint, request, jsonify
from referee import get_engine
from referee.errors import SettlementPending

legacy = Blueprint('legacy', __name__)


@legacy.route('/createGame', methods=['POST'])
def create_game():
    data = request.get_json(silent=True) or {}
    match = get_engine().create_match(data.get('playerA'))
    return jsonify({'success': True, 'matchId': match.match_id})


@legacy.route('/joinGame', methods=['POST'])
def join_game():
    data = request.get_json(silent=True) or {}
    get_engine().join_match(str(data.get('matchId') or ''), data.get('playerB'))
    return jsonify({'success': True})


@legacy.route('/makeMove', methods=['POST'])
def make_move():
    data = request.get_json(silent=True) or {}
    try:
        match = get_engine().apply_move(str(data.get('matchId') or ''), data.get('player'), data.get('index'))
    except SettlementPending as exc:
        # Old clients poll /gameState and only need to know the move landed.
        return jsonify({'success': True, 'game': exc.match.to_dict(), 'settlementPending': True})
    return jsonify({'success': True, 'game': match.to_dict()})


@legacy.route('/gameState/<string:match_id>', methods=['GET'])
def game_state(match_id):
    return jsonify(get_engine().get_match(match_id).to_dict())
