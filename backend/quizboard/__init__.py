from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_socketio import SocketIO
import click
import random
from config import Config

db = SQLAlchemy()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CLIENT_ORIGINS') or '*'

    db.init_app(flask_app)
    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Game engine lives for the lifetime of the process
    from quizboard.services.games import EXTENSION_KEY
    from quizboard.services.games.clock import TurnClock
    from quizboard.services.games.engine import GameEngine
    from quizboard.services.games.store import SessionStore

    store = SessionStore(
        board_length=flask_app.config.get('BOARD_LENGTH', 40),
        code_length=flask_app.config.get('GAME_CODE_LENGTH', 6),
    )
    clock = TurnClock(
        turn_duration=flask_app.config.get('TURN_DURATION_SEC', 30),
        answer_duration=flask_app.config.get('ANSWER_DURATION_SEC', 20),
    )
    flask_app.extensions[EXTENSION_KEY] = GameEngine(
        store,
        clock,
        rng=random.Random(),
        min_players=flask_app.config.get('MIN_PLAYERS', 2),
        logger=flask_app.logger,
    )

    # Import and register blueprints here
    from quizboard.routes import main
    flask_app.register_blueprint(main)

    from quizboard.api.games import games
    # Mount game routes under /api to match frontend API client
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from quizboard.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    from quizboard.models import seed_questions

    if flask_app.config.get('AUTO_SEED_QUESTIONS'):
        with flask_app.app_context():
            db.create_all()
            added = seed_questions()
            if added:
                flask_app.logger.info(f"[seed] added {added} default questions")

    @click.command('seed-questions')
    def seed_questions_command():
        """Creates the question table and seeds it if empty."""
        with flask_app.app_context():
            db.create_all()
            added = seed_questions()
            print(f'Seeded {added} questions.')

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            seed_questions()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(seed_questions_command)
    flask_app.cli.add_command(db_reset_command)

    from quizboard.services.games.scheduler import start_sweeper
    start_sweeper(flask_app)

    return flask_app
