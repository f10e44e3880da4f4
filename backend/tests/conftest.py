import os
import sys
import random
import pytest

# Ensure the backend root (containing the `quizboard` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from quizboard import create_app, db, socketio
from quizboard.services.games.clock import TurnClock
from quizboard.services.games.engine import GameEngine
from quizboard.services.games.session import Question
from quizboard.services.games.store import SessionStore


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CLIENT_ORIGINS = '*'
    BOARD_LENGTH = 40
    GAME_CODE_LENGTH = 6
    MIN_PLAYERS = 2
    TURN_DURATION_SEC = 30
    ANSWER_DURATION_SEC = 20
    AUTO_SEED_QUESTIONS = True


QUESTIONS = [
    Question(id=1, text='2 + 2 = ?', options=('3', '4', '5', '6'), correct_index=1),
    Question(id=2, text='Capital of France?', options=('Berlin', 'Paris'), correct_index=1),
]

T0 = 1_000_000.0


class FakeNow:
    """Settable wall clock for deadline tests."""

    def __init__(self, t=T0):
        self.t = t

    def __call__(self):
        return self.t


class ScriptedRandom(random.Random):
    """Dice rolls come from a script; question picks take the first entry."""

    def __init__(self, rolls=()):
        super().__init__(0)
        self.rolls = list(rolls)

    def randint(self, a, b):
        if self.rolls:
            return self.rolls.pop(0)
        return super().randint(a, b)

    def choice(self, seq):
        return seq[0]


@pytest.fixture()
def now():
    return FakeNow()


@pytest.fixture()
def rng():
    return ScriptedRandom()


@pytest.fixture()
def engine(now, rng):
    store = SessionStore(board_length=40, code_length=6)
    clock = TurnClock(turn_duration=30, answer_duration=20, now=now)
    return GameEngine(store, clock, rng=rng, min_players=2)


@pytest.fixture()
def game(engine):
    """A 40-field game with Alice (acting) and Bob connected."""
    code = engine.create_session(QUESTIONS)
    engine.join(code, 'p1', 'Alice', connection_id='sid-1')
    engine.join(code, 'p2', 'Bob', connection_id='sid-2')
    return code


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import quizboard.models  # noqa: F401
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
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')
