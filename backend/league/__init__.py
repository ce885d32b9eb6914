from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from league.main import main
    flask_app.register_blueprint(main)

    from league.api.matches import matches, admin_matches
    flask_app.register_blueprint(matches, url_prefix='/api/matches')
    flask_app.register_blueprint(admin_matches, url_prefix='/api/admin/matches')

    from league.api.tournaments import tournaments, admin_tournaments
    flask_app.register_blueprint(tournaments, url_prefix='/api/tournaments')
    flask_app.register_blueprint(admin_tournaments, url_prefix='/api/admin/tournaments')

    from league.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from league.models import AdminUser

    @login_manager.user_loader
    def load_user(user_id):
        return AdminUser.query.filter_by(id=int(user_id)).first()

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Admin login required'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from league.seed import seed_demo_tournament
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            admin = AdminUser(username=flask_app.config['ADMIN_USERNAME'])
            admin.set_password(flask_app.config['ADMIN_PASSWORD'])
            db.session.add(admin)
            tournament = seed_demo_tournament()
            db.session.commit()
            print(f'Database has been reset and seeded! Demo tournament id={tournament.id}')

    @click.command('recompute-scores')
    @click.argument('tournament_id', type=int)
    def recompute_scores_command(tournament_id):
        """Re-derives every matchup and team total of a tournament."""
        from league.services.matches.aggregation import recompute_tournament
        with flask_app.app_context():
            count = recompute_tournament(tournament_id)
            print(f'Recomputed {count} matchup(s) for tournament {tournament_id}')

    @click.command('sweep-scoring-sessions')
    def sweep_scoring_sessions_command():
        """Deletes expired or corrupt live scoring sessions from the device store."""
        from league.services.live_scoring.persistence import FileStore, sweep_expired
        ttl_ms = int(flask_app.config['SCORING_SESSION_TTL_HOURS']) * 60 * 60 * 1000
        removed = sweep_expired(FileStore(flask_app.config['SCORING_STORE_DIR']), ttl_ms=ttl_ms)
        print(f'Removed {removed} stale scoring session(s)')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(recompute_scores_command)
    flask_app.cli.add_command(sweep_scoring_sessions_command)

    return flask_app
