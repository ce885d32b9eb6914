from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required
from league.models import Match
from league.services.matches.lineup import scoring_match_info
from league.services.matches.aggregation import (
    AggregationError,
    MatchNotFoundError,
    ScoreLockedError,
    get_suggested_handicap,
    set_handicap,
    submit_score,
    update_score,
)


matches = Blueprint('matches', __name__)
admin_matches = Blueprint('admin_matches', __name__)


def _error_response(err: AggregationError):
    if isinstance(err, MatchNotFoundError):
        status = 404
    elif isinstance(err, ScoreLockedError):
        status = 409
    else:
        status = 400
    current_app.logger.info(f"[score] rejected status={status} reason={err}")
    return jsonify({'error': str(err)}), status


def _score_payload():
    data = request.get_json(silent=True) or {}
    return data.get('scoreA'), data.get('scoreB')


@matches.route('/<int:match_id>/score', methods=['POST'])
def submit_match_score(match_id):
    score_a, score_b = _score_payload()
    if score_a is None or score_b is None:
        return jsonify({'error': 'Both scoreA and scoreB are required'}), 400
    try:
        match = submit_score(match_id, score_a, score_b)
    except AggregationError as err:
        return _error_response(err)
    return jsonify({'success': True, 'match': match.to_dict()}), 200


@matches.route('/<int:match_id>/scoring-info', methods=['GET'])
def get_scoring_info(match_id):
    match = Match.query.filter_by(id=match_id).first()
    if not match:
        return jsonify({'error': 'Match not found'}), 404
    return jsonify(scoring_match_info(match).to_dict()), 200


@matches.route('/<int:match_id>/suggested-handicap', methods=['GET'])
def get_match_suggested_handicap(match_id):
    try:
        return jsonify(get_suggested_handicap(match_id)), 200
    except AggregationError as err:
        return _error_response(err)


@admin_matches.route('/<int:match_id>/score', methods=['PUT'])
@login_required
def admin_update_score(match_id):
    data = request.get_json(silent=True) or {}
    # An explicit null clears a score; a missing key is a malformed request
    if 'scoreA' not in data or 'scoreB' not in data:
        return jsonify({'error': 'Both scoreA and scoreB are required'}), 400
    score_a, score_b = data['scoreA'], data['scoreB']
    try:
        match = update_score(match_id, score_a, score_b)
    except AggregationError as err:
        return _error_response(err)
    return jsonify({'success': True, 'match': match.to_dict()}), 200


@admin_matches.route('/<int:match_id>/handicap', methods=['PUT'])
@login_required
def admin_set_handicap(match_id):
    data = request.get_json(silent=True) or {}
    try:
        match = set_handicap(match_id, data.get('handicap'))
    except AggregationError as err:
        return _error_response(err)
    return jsonify({'success': True, 'match': match.to_dict()}), 200
