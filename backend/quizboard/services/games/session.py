from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from .board import BoardField

AWAITING_PLAYERS = 'AWAITING_PLAYERS'
AWAITING_ROLL = 'AWAITING_ROLL'
AWAITING_ANSWER = 'AWAITING_ANSWER'
GAME_OVER = 'GAME_OVER'


@dataclass
class Player:
    id: str
    name: str
    position: int = 0


@dataclass(frozen=True)
class Question:
    id: int
    text: str
    options: Tuple[str, ...]
    correct_index: int

    def public_dict(self):
        # correct_index is never sent to clients
        return {'id': self.id, 'text': self.text, 'options': list(self.options)}


@dataclass(frozen=True)
class PendingAnswer:
    player_id: str
    question_id: int


@dataclass
class GameSession:
    """Authoritative state of one game. Mutated only by GameEngine."""

    game_code: str
    board: List[BoardField]
    questions: Tuple[Question, ...]
    players: List[Player] = field(default_factory=list)
    current_turn: int = 0
    pending_answer: Optional[PendingAnswer] = None
    winner_id: Optional[str] = None
    turn_deadline: Optional[float] = None
    answer_deadline: Optional[float] = None
    connected: Set[str] = field(default_factory=set)
    log: List[str] = field(default_factory=list)

    @property
    def last_index(self) -> int:
        return len(self.board) - 1

    @property
    def acting_player(self) -> Optional[Player]:
        if not self.players:
            return None
        return self.players[self.current_turn]

    def player(self, player_id: str) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def question(self, question_id) -> Optional[Question]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None

    def is_connected(self, player_id: str) -> bool:
        return player_id in self.connected

    def connected_count(self) -> int:
        return sum(1 for p in self.players if p.id in self.connected)

    def advance_turn(self) -> None:
        if self.players:
            self.current_turn = (self.current_turn + 1) % len(self.players)

    def phase(self, min_players: int = 2) -> str:
        if self.winner_id is not None:
            return GAME_OVER
        if self.pending_answer is not None:
            return AWAITING_ANSWER
        if self.connected_count() < min_players:
            return AWAITING_PLAYERS
        return AWAITING_ROLL

    def to_dict(self, min_players: int = 2, durations: Optional[Dict[str, float]] = None):
        """Full snapshot broadcast to every member after each transition."""
        pending = None
        if self.pending_answer is not None:
            pending = {
                'player_id': self.pending_answer.player_id,
                'question_id': self.pending_answer.question_id,
            }
        data = {
            'game_code': self.game_code,
            'phase': self.phase(min_players),
            'players': [
                {
                    'id': p.id,
                    'name': p.name,
                    'position': p.position,
                    'connected': p.id in self.connected,
                }
                for p in self.players
            ],
            'board': [f.to_dict() for f in self.board],
            'current_turn': self.current_turn,
            'pending_answer': pending,
            'log': list(self.log),
            'winner_id': self.winner_id,
            'turn_deadline': self.turn_deadline,
            'answer_deadline': self.answer_deadline,
        }
        if durations:
            data.update(durations)
        return data
