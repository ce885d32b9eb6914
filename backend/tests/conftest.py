import os
import sys
import pytest

# Ensure the backend root (containing the `league` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from league import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    BCRYPT_LOG_ROUNDS = 4
    MAX_SCORE = 999
    ADMIN_USERNAME = 'admin'
    ADMIN_PASSWORD = 'test-password'
    SCORING_STORE_DIR = os.path.join(CURRENT_DIR, '.scoring-store')
    SCORING_SESSION_TTL_HOURS = 24


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import league.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def seeded(flask_app):
    """Demo tournament: two teams of five, one week-1 matchup of five matches."""
    from league.seed import seed_demo_tournament
    from league.models import Match, Team, WeeklyMatchup

    tournament = seed_demo_tournament()
    db.session.commit()
    teams = Team.query.filter_by(tournament_id=tournament.id).order_by(Team.id).all()
    matchup = WeeklyMatchup.query.filter_by(tournament_id=tournament.id).first()
    matches = Match.query.filter_by(weekly_matchup_id=matchup.id).order_by(Match.position).all()
    return {
        'tournament_id': tournament.id,
        'team_a_id': teams[0].id,
        'team_b_id': teams[1].id,
        'matchup_id': matchup.id,
        'match_ids': [m.id for m in matches],
    }


@pytest.fixture()
def admin_client(flask_app, client):
    from league.models import AdminUser

    admin = AdminUser(username='admin')
    admin.set_password('test-password')
    db.session.add(admin)
    db.session.commit()
    res = client.post('/login', json={'username': 'admin', 'password': 'test-password'})
    assert res.status_code == 200
    return client
