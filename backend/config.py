import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///quizboard.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Comma-separated list of origins allowed for CORS and websockets
    CLIENT_ORIGINS = [o.strip() for o in os.environ.get(
        'CLIENT_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173').split(',') if o.strip()]
    BOARD_LENGTH = int(os.environ.get('BOARD_LENGTH', '40'))
    GAME_CODE_LENGTH = int(os.environ.get('GAME_CODE_LENGTH', '6'))
    # Minimum connected players before turns run
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    # Deadlines (seconds)
    TURN_DURATION_SEC = int(os.environ.get('TURN_DURATION_SEC', '30'))
    ANSWER_DURATION_SEC = int(os.environ.get('ANSWER_DURATION_SEC', '20'))
    SWEEP_INTERVAL_SEC = float(os.environ.get('SWEEP_INTERVAL_SEC', '1.0'))
    # Seed the default questions on startup when the table is empty
    AUTO_SEED_QUESTIONS = os.environ.get('AUTO_SEED_QUESTIONS', '1') not in ('0', 'false', 'False')
    # Optional: heartbeat interval for sweeper logs (sec). 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
