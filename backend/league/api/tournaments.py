from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required
from league import db, socketio
from league.models import Tournament, utcnow
from league.services.matches.standings import dashboard, matchups_for_week, player_stats
import json


tournaments = Blueprint('tournaments', __name__)
admin_tournaments = Blueprint('admin_tournaments', __name__)


def _week_changed(tournament: Tournament) -> None:
    socketio.emit(
        'week_changed',
        {'tournament_id': tournament.id, 'current_week': tournament.current_week},
        to=f"tournament:{tournament.id}",
        namespace='/ws',
    )


@tournaments.route('', methods=['GET'])
def list_tournaments():
    rows = Tournament.query.order_by(Tournament.created_at.desc(), Tournament.id.desc()).all()
    return jsonify([t.to_dict() for t in rows]), 200


@tournaments.route('/<int:tournament_id>/dashboard', methods=['GET'])
def get_dashboard(tournament_id):
    payload = dashboard(tournament_id)
    if payload is None:
        return jsonify({'error': 'Tournament not found'}), 404
    return jsonify(payload), 200


@tournaments.route('/<int:tournament_id>/weeks/<int:week>/matches', methods=['GET'])
def get_week_matches(tournament_id, week):
    tournament = Tournament.query.filter_by(id=tournament_id).first()
    if not tournament:
        return jsonify({'error': 'Tournament not found'}), 404
    if week < 1 or week > tournament.num_weeks:
        return jsonify({'error': f'Week must be between 1 and {tournament.num_weeks}'}), 400
    return jsonify({
        'tournament_id': tournament.id,
        'week': week,
        'matchups': [wm.to_dict() for wm in matchups_for_week(tournament.id, week)],
    }), 200


@tournaments.route('/<int:tournament_id>/player-stats', methods=['GET'])
def get_player_stats(tournament_id):
    if not Tournament.query.filter_by(id=tournament_id).first():
        return jsonify({'error': 'Tournament not found'}), 404
    return jsonify(player_stats(tournament_id)), 200


@admin_tournaments.route('/<int:tournament_id>/advance-week', methods=['POST'])
@login_required
def advance_week(tournament_id):
    data = request.get_json(silent=True) or {}
    tournament = Tournament.query.filter_by(id=tournament_id).first()
    if not tournament:
        return jsonify({'error': 'Tournament not found'}), 404
    if tournament.status != 'active':
        return jsonify({'error': 'Tournament is not active'}), 400
    if tournament.current_week >= tournament.num_weeks:
        return jsonify({'error': 'Tournament is already at the final week'}), 400

    new_week = tournament.current_week + 1
    week_date = data.get('weekDate')
    if week_date:
        dates = tournament.get_week_dates()
        dates[str(new_week)] = week_date
        tournament.week_dates = json.dumps(dates)
    tournament.current_week = new_week
    tournament.updated_at = utcnow()
    db.session.add(tournament)
    db.session.commit()
    current_app.logger.info(f"[week] tournament={tournament.id} advanced to week {new_week}")
    _week_changed(tournament)
    return jsonify({'success': True, 'newWeek': new_week}), 200


@admin_tournaments.route('/<int:tournament_id>/previous-week', methods=['POST'])
@login_required
def previous_week(tournament_id):
    tournament = Tournament.query.filter_by(id=tournament_id).first()
    if not tournament:
        return jsonify({'error': 'Tournament not found'}), 404
    if tournament.status != 'active':
        return jsonify({'error': 'Tournament is not active'}), 400
    if tournament.current_week <= 1:
        return jsonify({'error': 'Tournament is already at week 1'}), 400

    tournament.current_week -= 1
    tournament.updated_at = utcnow()
    db.session.add(tournament)
    db.session.commit()
    current_app.logger.info(f"[week] tournament={tournament.id} moved back to week {tournament.current_week}")
    _week_changed(tournament)
    return jsonify({'success': True, 'newWeek': tournament.current_week}), 200
