"""Game state machine.

Every transition takes the session lock, applies one command and returns the
outbound messages it produced. Nothing here talks to Socket.IO; the caller
hands the returned list to the dispatcher. Illegal commands are rejected by
raising GameError inside the guards and turned into an empty result at the
transition boundary.
"""

import logging
import random
from collections import namedtuple
from typing import List, Optional

from quizboard.errors import GameError, IllegalTransition, SessionNotFound
from .board import FieldKind
from .clock import TurnClock
from .session import GameSession, PendingAnswer, Player, Question
from .store import SessionStore

Outbound = namedtuple('Outbound', ['event', 'payload', 'to'])

STATE_EVENT = 'game_state'
QUESTION_EVENT = 'question'


def room_for(game_code: str) -> str:
    return f"game:{game_code}"


class GameEngine:
    def __init__(self, store: SessionStore, clock: TurnClock, rng: Optional[random.Random] = None,
                 min_players: int = 2, logger: Optional[logging.Logger] = None):
        self.store = store
        self.clock = clock
        self.rng = rng or random.Random()
        self.min_players = min_players
        self.logger = logger or logging.getLogger(__name__)

    # ---- helpers ----

    def _state(self, session: GameSession) -> Outbound:
        payload = session.to_dict(self.min_players, self.clock.durations())
        return Outbound(STATE_EVENT, payload, room_for(session.game_code))

    def _question(self, session: GameSession, player: Player, question: Question) -> List[Outbound]:
        field = session.board[player.position]
        payload = {
            'game_code': session.game_code,
            'field_kind': field.kind.value,
            'magnitude': field.magnitude,
            'question': question.public_dict(),
        }
        return [Outbound(QUESTION_EVENT, payload, sid) for sid in self.store.connections_for(player.id)]

    def _reject(self, command: str, game_code, player_id, exc: GameError) -> List[Outbound]:
        self.logger.debug(f"[reject] {command} game={game_code} player={player_id}: {exc}")
        return []

    @staticmethod
    def _require_session(session: Optional[GameSession], game_code) -> GameSession:
        if session is None:
            raise SessionNotFound(game_code)
        return session

    def _require_turn(self, session: GameSession, player_id: str) -> Player:
        if session.winner_id is not None:
            raise IllegalTransition('game is over')
        acting = session.acting_player
        if acting is None or acting.id != player_id:
            raise IllegalTransition('not this player\'s turn')
        if not session.is_connected(player_id):
            raise IllegalTransition('player is not connected')
        return acting

    def _arm_next_turn(self, session: GameSession) -> None:
        session.advance_turn()
        self._arm_current_turn(session)

    def _arm_current_turn(self, session: GameSession) -> None:
        acting = session.acting_player
        if acting is not None and session.is_connected(acting.id) and session.connected_count() >= self.min_players:
            self.clock.arm_turn(session)
        else:
            self.clock.clear(session)

    def _declare_winner(self, session: GameSession, player: Player) -> None:
        player.position = session.last_index
        session.winner_id = player.id
        session.pending_answer = None
        self.clock.clear(session)
        session.log.append(f"{player.name} has won the game!")
        self.logger.info(f"[win] game={session.game_code} player={player.id}")

    @staticmethod
    def _idle(session: GameSession) -> bool:
        """No winner, no open question and no deadline running."""
        return (session.winner_id is None and session.pending_answer is None
                and session.turn_deadline is None and session.answer_deadline is None)

    def _resume(self, session: GameSession) -> List[Outbound]:
        """Re-arm a paused session once it can make progress again."""
        if session.winner_id is not None:
            return []
        if session.turn_deadline is not None or session.answer_deadline is not None:
            return []
        pending = session.pending_answer
        if pending is not None:
            if not session.is_connected(pending.player_id):
                return []
            self.clock.arm_answer(session)
            player = session.player(pending.player_id)
            return self._question(session, player, session.question(pending.question_id))
        acting = session.acting_player
        if acting is not None and session.is_connected(acting.id) and session.connected_count() >= self.min_players:
            self.clock.arm_turn(session)
        return []

    # ---- session creation ----

    def create_session(self, questions) -> str:
        game_code = self.store.create(questions)
        self.logger.info(f"[create] game={game_code} questions={len(questions)} board={self.store.board_length}")
        return game_code

    def snapshot(self, game_code) -> Optional[dict]:
        with self.store.locked(game_code) as session:
            if session is None:
                return None
            return self._state(session).payload

    # ---- transitions ----

    def join(self, game_code, player_id: str, name: str, connection_id: Optional[str] = None) -> List[Outbound]:
        released = []
        if connection_id is not None and self.store.get(game_code) is not None:
            previous = self.store.player_for(connection_id)
            if previous is not None and previous != player_id:
                # the socket switches identity; disconnect takes its own session locks
                released = self.disconnect(connection_id)

        with self.store.locked(game_code) as session:
            try:
                session = self._require_session(session, game_code)
            except GameError as exc:
                return released + self._reject('join', game_code, player_id, exc)

            if connection_id is not None:
                self.store.bind_connection(connection_id, player_id)
            connected_before = session.connected_count()
            player = session.player(player_id)
            if player is None:
                player = Player(id=player_id, name=name)
                session.players.append(player)
                session.log.append(f"{name} joined the game")
                self.logger.info(f"[join] game={session.game_code} player={player_id} name={name!r}")
            else:
                player.name = name
                if not session.is_connected(player_id):
                    session.log.append(f"{name} reconnected")
                    self.logger.info(f"[rejoin] game={session.game_code} player={player_id}")
            session.connected.add(player_id)

            if connected_before < self.min_players <= session.connected_count() and self._idle(session):
                # enough players again; an absent acting player is skipped by the sweep
                self.clock.arm_turn(session)
                private = []
            else:
                private = self._resume(session)
            return released + private + [self._state(session)]

    def roll_dice(self, game_code, player_id: str) -> List[Outbound]:
        with self.store.locked(game_code) as session:
            try:
                session = self._require_session(session, game_code)
                player = self._require_turn(session, player_id)
                if session.pending_answer is not None:
                    raise IllegalTransition('a question is waiting for an answer')
                if session.connected_count() < self.min_players:
                    raise IllegalTransition('waiting for players')
                if self.clock.turn_expired(session, self.clock.now()):
                    raise IllegalTransition('turn deadline has passed')
            except GameError as exc:
                return self._reject('roll', game_code, player_id, exc)

            value = self.rng.randint(1, 6)
            player.position = min(player.position + value, session.last_index)
            session.log.append(f"{player.name} rolled {value} -> position {player.position}")
            self.logger.info(
                f"[roll] game={session.game_code} player={player_id} value={value} position={player.position}"
            )

            if player.position >= session.last_index:
                self._declare_winner(session, player)
                return [self._state(session)]

            field = session.board[player.position]
            if not field.is_special:
                self._arm_next_turn(session)
                return [self._state(session)]

            question = self.rng.choice(session.questions)
            session.pending_answer = PendingAnswer(player.id, question.id)
            self.clock.arm_answer(session)
            session.log.append(f"{player.name} landed on a {field.kind.value} field and must answer a question")
            self.logger.info(
                f"[question] game={session.game_code} player={player_id} field={field.kind.value} question={question.id}"
            )
            return self._question(session, player, question) + [self._state(session)]

    def answer_question(self, game_code, player_id: str, question_id, option_index) -> List[Outbound]:
        with self.store.locked(game_code) as session:
            try:
                session = self._require_session(session, game_code)
                pending = session.pending_answer
                if pending is None:
                    raise IllegalTransition('no question is pending')
                self._require_turn(session, player_id)
                if pending.player_id != player_id:
                    raise IllegalTransition('question belongs to another player')
                if pending.question_id != question_id:
                    raise IllegalTransition(f'question {question_id} is not the pending question')
                if self.clock.answer_expired(session, self.clock.now()):
                    raise IllegalTransition('answer deadline has passed')
            except GameError as exc:
                return self._reject('answer', game_code, player_id, exc)

            question = session.question(pending.question_id)
            correct = option_index == question.correct_index
            self.logger.info(
                f"[answer] game={session.game_code} player={player_id} question={question_id} correct={correct}"
            )
            self._resolve_answer(session, correct)
            return [self._state(session)]

    def _resolve_answer(self, session: GameSession, correct: bool, timed_out: bool = False) -> None:
        player = session.player(session.pending_answer.player_id)
        field = session.board[player.position]

        if timed_out:
            session.log.append(f"{player.name} failed to answer in time")
        if field.kind == FieldKind.BOOST and correct:
            player.position = min(player.position + field.magnitude, session.last_index)
            session.log.append(f"{player.name} answered correctly -> BOOST +{field.magnitude}")
        elif field.kind == FieldKind.TRAP and not correct:
            player.position = max(player.position - field.magnitude, 0)
            if timed_out:
                session.log.append(f"{player.name} falls back -> TRAP -{field.magnitude}")
            else:
                session.log.append(f"{player.name} answered incorrectly -> TRAP -{field.magnitude}")
        elif not timed_out:
            verdict = 'correctly' if correct else 'incorrectly'
            session.log.append(f"{player.name} answered {verdict}, no movement")

        session.pending_answer = None
        self.clock.clear(session)

        if player.position >= session.last_index:
            self._declare_winner(session, player)
        else:
            self._arm_next_turn(session)

    def restart(self, game_code) -> List[Outbound]:
        with self.store.locked(game_code) as session:
            try:
                session = self._require_session(session, game_code)
            except GameError as exc:
                return self._reject('restart', game_code, None, exc)

            for p in session.players:
                p.position = 0
            session.winner_id = None
            session.pending_answer = None
            session.current_turn = 0
            session.log.clear()
            self._arm_current_turn(session)
            self.logger.info(f"[restart] game={session.game_code} players={len(session.players)}")
            return [self._state(session)]

    def disconnect(self, connection_id: str) -> List[Outbound]:
        player_id = self.store.unbind_connection(connection_id)
        if player_id is None:
            return []
        if self.store.connections_for(player_id):
            # another tab of the same player is still live
            return []

        out = []
        for game_code in self.store.sessions():
            with self.store.locked(game_code) as session:
                if session is None or not session.is_connected(player_id):
                    continue
                session.connected.discard(player_id)
                player = session.player(player_id)
                session.log.append(f"{player.name} disconnected")
                self.logger.info(f"[disconnect] game={session.game_code} player={player_id}")

                acting = session.acting_player
                is_acting = acting is not None and acting.id == player_id
                running = session.turn_deadline is not None or session.answer_deadline is not None
                if is_acting or session.connected_count() < self.min_players:
                    if is_acting or running:
                        waiting_for = acting.name if is_acting else 'players'
                        session.log.append(f"Game paused, waiting for {waiting_for}")
                        self.logger.info(f"[pause] game={session.game_code}")
                    self.clock.clear(session)
                out.append(self._state(session))
        return out

    def timeout_sweep(self, now: Optional[float] = None) -> List[Outbound]:
        if now is None:
            now = self.clock.now()
        out = []
        for game_code in self.store.sessions():
            with self.store.locked(game_code) as session:
                if session is None or session.winner_id is not None:
                    continue
                if self.clock.answer_expired(session, now) and session.pending_answer is not None:
                    self.logger.info(
                        f"[timeout] game={session.game_code} player={session.pending_answer.player_id} "
                        f"question={session.pending_answer.question_id}"
                    )
                    self._resolve_answer(session, correct=False, timed_out=True)
                    out.append(self._state(session))
                elif self.clock.turn_expired(session, now):
                    player = session.acting_player
                    session.log.append(f"{player.name} skipped (turn timeout)")
                    self.logger.info(f"[skip] game={session.game_code} player={player.id}")
                    self._arm_next_turn(session)
                    out.append(self._state(session))
        return out
