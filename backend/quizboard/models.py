from flask import current_app
from quizboard import db
from quizboard.errors import CreationFailure
from quizboard.services.games.session import Question as QuestionData
from sqlalchemy.exc import SQLAlchemyError
import json

DEFAULT_QUESTIONS = [
    (1, "What is the capital of France?", ["Berlin", "Paris", "Madrid", "Rome"], 1),
    (2, "2 + 2 = ?", ["3", "4", "5", "6"], 1),
    (3, "Which planet is known as the Red Planet?", ["Earth", "Venus", "Mars", "Jupiter"], 2),
]


class Question(db.Model):
    __tablename__ = 'question'
    id = db.Column(db.Integer, primary_key=True)
    text = db.Column(db.Text, nullable=False)
    options = db.Column(db.Text, nullable=False)  # JSON-encoded list of strings
    correct_index = db.Column(db.Integer, nullable=False)

    def option_list(self):
        return json.loads(self.options or '[]')

    def to_data(self):
        return QuestionData(
            id=self.id,
            text=self.text,
            options=tuple(self.option_list()),
            correct_index=self.correct_index,
        )


def load_questions():
    """Load the whole question set for a new session.

    Raises CreationFailure when the repository is unreachable or empty.
    """
    try:
        rows = Question.query.order_by(Question.id).all()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise CreationFailure(f'could not load questions: {exc}') from exc
    questions = []
    for row in rows:
        try:
            options = row.option_list()
        except ValueError:
            current_app.logger.warning(f"[question-skip] id={row.id} options are not valid JSON")
            continue
        if not isinstance(options, list) or len(options) < 2:
            current_app.logger.warning(f"[question-skip] id={row.id} needs at least two options")
            continue
        questions.append(row.to_data())
    if not questions:
        raise CreationFailure('question repository is empty')
    return questions


def seed_questions():
    """Insert the default questions if the table is empty. Returns rows added."""
    if Question.query.count() > 0:
        return 0
    for qid, text, options, correct in DEFAULT_QUESTIONS:
        db.session.add(Question(id=qid, text=text, options=json.dumps(options), correct_index=correct))
    db.session.commit()
    return len(DEFAULT_QUESTIONS)
