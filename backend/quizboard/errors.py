class GameError(Exception):
    """Base class for game-session errors."""


class SessionNotFound(GameError):
    def __init__(self, game_code):
        super().__init__(f"game {game_code} not found")
        self.game_code = game_code


class IllegalTransition(GameError):
    """A command arrived that the session cannot accept in its current phase.

    Raised by the engine's guards and swallowed at the transition boundary:
    the client is left to resynchronise from the next broadcast.
    """


class CreationFailure(GameError):
    """A new session could not be created (code collision, no questions)."""
