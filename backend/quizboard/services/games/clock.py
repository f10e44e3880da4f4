import time
from typing import Callable, Optional

from .session import GameSession


class TurnClock:
    """Arms and checks the two per-session deadlines.

    Deadlines are absolute wall-clock timestamps (seconds since the epoch) so
    clients can render countdowns without a sync handshake. At most one of
    them is set at a time.
    """

    def __init__(self, turn_duration: float = 30, answer_duration: float = 20,
                 now: Optional[Callable[[], float]] = None):
        self.turn_duration = float(turn_duration)
        self.answer_duration = float(answer_duration)
        self.now = now or time.time

    def arm_turn(self, session: GameSession) -> None:
        session.turn_deadline = self.now() + self.turn_duration
        session.answer_deadline = None

    def arm_answer(self, session: GameSession) -> None:
        session.answer_deadline = self.now() + self.answer_duration
        session.turn_deadline = None

    def clear(self, session: GameSession) -> None:
        session.turn_deadline = None
        session.answer_deadline = None

    @staticmethod
    def turn_expired(session: GameSession, now: float) -> bool:
        return session.turn_deadline is not None and now > session.turn_deadline

    @staticmethod
    def answer_expired(session: GameSession, now: float) -> bool:
        return session.answer_deadline is not None and now > session.answer_deadline

    def durations(self):
        return {'turn_duration': self.turn_duration, 'answer_duration': self.answer_duration}
