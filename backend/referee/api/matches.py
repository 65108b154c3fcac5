from flask import Blueprint, jsonify, request
from referee import get_engine


matches = Blueprint('matches', __name__)


@matches.route('/create', methods=['POST'])
def create_match():
    data = request.get_json(silent=True) or {}
    match = get_engine().create_match(data.get('playerA'))
    return jsonify(match.to_dict()), 201


@matches.route('/join', methods=['POST'])
def join_match():
    data = request.get_json(silent=True) or {}
    match_id = data.get('matchId')
    if not match_id:
        return jsonify({'error': 'matchId is required', 'kind': 'BadRequest'}), 400
    match = get_engine().join_match(str(match_id), data.get('playerB'))
    return jsonify(match.to_dict())


@matches.route('/<string:match_id>/move', methods=['POST'])
def make_move(match_id):
    data = request.get_json(silent=True) or {}
    match = get_engine().apply_move(match_id, data.get('player'), data.get('index'))
    return jsonify(match.to_dict())


@matches.route('/<string:match_id>/state', methods=['GET'])
def get_match_state(match_id):
    return jsonify(get_engine().get_match(match_id).to_dict())


@matches.route('/<string:match_id>/settle', methods=['POST'])
def settle_match(match_id):
    """Retry the attestation for a match whose signing failed earlier."""
    return jsonify(get_engine().settle(match_id).to_dict())


@matches.route('/signer', methods=['GET'])
def signer_info():
    engine = get_engine()
    return jsonify({'address': engine.signer.address, 'chainId': engine.chain_id})
