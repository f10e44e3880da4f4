"""Game domain services: board, sessions, timers and the state machine.

This package contains pure domain logic that should be imported by
HTTP routes and socket handlers, keeping transport concerns separated
from core game mechanics.
"""

from flask import current_app

EXTENSION_KEY = 'quizboard'


def get_engine(app=None):
    """Return the GameEngine attached to the app (or the current app)."""
    app = app or current_app
    return app.extensions[EXTENSION_KEY]
