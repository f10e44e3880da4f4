import random
import string
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Sequence

from quizboard.errors import CreationFailure
from .board import generate_board
from .session import GameSession, Question

CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_CODE_ATTEMPTS = 20


def normalize_code(game_code) -> str:
    return str(game_code or '').strip().upper()


class SessionStore:
    """In-memory registry of live sessions plus the connection -> player map.

    The registry lock only guards the dicts. Each session has its own lock,
    taken through `locked()`, so transitions on different games run in
    parallel while commands and sweeps on the same game are serialised.
    """

    def __init__(self, board_length: int = 40, code_length: int = 6, rng: Optional[random.Random] = None):
        self.board_length = board_length
        self.code_length = code_length
        self._rng = rng or random.Random()
        self._sessions: Dict[str, GameSession] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._connections: Dict[str, str] = {}
        self._registry_lock = threading.Lock()

    def _generate_code(self) -> str:
        return ''.join(self._rng.choices(CODE_ALPHABET, k=self.code_length))

    def create(self, questions: Sequence[Question]) -> str:
        if not questions:
            raise CreationFailure('no questions available')
        board = generate_board(self.board_length)
        with self._registry_lock:
            for _ in range(MAX_CODE_ATTEMPTS):
                code = self._generate_code()
                if code not in self._sessions:
                    break
            else:
                raise CreationFailure(f'could not allocate a unique game code after {MAX_CODE_ATTEMPTS} attempts')
            self._sessions[code] = GameSession(game_code=code, board=board, questions=tuple(questions))
            self._locks[code] = threading.RLock()
        return code

    def get(self, game_code) -> Optional[GameSession]:
        with self._registry_lock:
            return self._sessions.get(normalize_code(game_code))

    def sessions(self) -> List[str]:
        with self._registry_lock:
            return list(self._sessions)

    @contextmanager
    def locked(self, game_code) -> Iterator[Optional[GameSession]]:
        code = normalize_code(game_code)
        with self._registry_lock:
            session = self._sessions.get(code)
            lock = self._locks.get(code)
        if session is None:
            yield None
            return
        with lock:
            yield session

    # ---- connection identity ----

    def bind_connection(self, connection_id: str, player_id: str) -> None:
        with self._registry_lock:
            self._connections[connection_id] = player_id

    def unbind_connection(self, connection_id: str) -> Optional[str]:
        with self._registry_lock:
            return self._connections.pop(connection_id, None)

    def player_for(self, connection_id: str) -> Optional[str]:
        with self._registry_lock:
            return self._connections.get(connection_id)

    def connections_for(self, player_id: str) -> List[str]:
        with self._registry_lock:
            return [sid for sid, pid in self._connections.items() if pid == player_id]
