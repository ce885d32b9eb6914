import time

from league import db
from league.models import AdminUser, Team, Tournament
from league.services.live_scoring.engine import MatchInfo, PlayerInfo, initialize
from league.services.live_scoring.persistence import FileStore, StoredSession, serialize_session, storage_key
from league.services.matches.aggregation import submit_score


MATCH = MatchInfo(
    id=1,
    player_a=PlayerInfo(name='Alice', team_color='#EF4444'),
    player_b=PlayerInfo(name='Bob', team_color='#3B82F6'),
)


def _stored(saved_at_seconds):
    session = StoredSession(state=initialize(MATCH, now=1), saved_at=int(saved_at_seconds * 1000))
    return serialize_session(session)


def test_sweep_scoring_sessions_uses_configured_ttl(flask_app, tmp_path):
    flask_app.config['SCORING_STORE_DIR'] = str(tmp_path)
    flask_app.config['SCORING_SESSION_TTL_HOURS'] = 1
    store = FileStore(tmp_path)
    now = time.time()
    store.set(storage_key(1), _stored(now - 2 * 60 * 60))
    store.set(storage_key(2), _stored(now - 30 * 60))

    result = flask_app.test_cli_runner().invoke(args=['sweep-scoring-sessions'])
    assert result.exit_code == 0
    assert 'Removed 1 stale scoring session(s)' in result.output
    assert store.keys() == [storage_key(2)]


def test_recompute_scores_repairs_team_totals(flask_app, seeded):
    submit_score(seeded['match_ids'][0], 11, 9)
    team = db.session.get(Team, seeded['team_a_id'])
    team.total_score = 500
    db.session.commit()

    result = flask_app.test_cli_runner().invoke(args=['recompute-scores', str(seeded['tournament_id'])])
    assert result.exit_code == 0
    assert 'Recomputed 1 matchup(s)' in result.output
    db.session.expire_all()
    assert db.session.get(Team, seeded['team_a_id']).total_score == 11


def test_db_reset_seeds_admin_and_demo_tournament(flask_app):
    result = flask_app.test_cli_runner().invoke(args=['db-reset'])
    assert result.exit_code == 0
    assert 'Demo tournament id=' in result.output

    db.session.expire_all()
    admin = AdminUser.query.filter_by(username='admin').first()
    assert admin is not None
    assert admin.check_password('test-password')
    assert Tournament.query.count() == 1
    assert Team.query.count() == 2
