from quizboard import db
from quizboard.models import Question, load_questions, seed_questions


def test_health(client):
    res = client.get('/')
    assert res.status_code == 200
    assert res.get_json() == {'status': 'ok'}


def test_create_game(client):
    res = client.post('/api/games/create')
    assert res.status_code == 201
    data = res.get_json()
    assert len(data['game_code']) == 6
    assert data['game_code'].isalnum()
    assert data['game_code'] == data['game_code'].upper()


def test_created_games_have_distinct_codes(client):
    codes = {client.post('/api/games/create').get_json()['game_code'] for _ in range(10)}
    assert len(codes) == 10


def test_state_of_new_game(client):
    code = client.post('/api/games/create').get_json()['game_code']
    res = client.get(f'/api/games/{code}/state')
    assert res.status_code == 200
    state = res.get_json()
    assert state['game_code'] == code
    assert state['phase'] == 'AWAITING_PLAYERS'
    assert state['players'] == []
    assert len(state['board']) == 40
    assert state['board'][7] == {'index': 7, 'kind': 'BOOST', 'magnitude': 3}
    assert state['log'] == []
    assert state['turn_deadline'] is None


def test_state_lookup_ignores_case(client):
    code = client.post('/api/games/create').get_json()['game_code']
    assert client.get(f'/api/games/{code.lower()}/state').status_code == 200


def test_state_of_unknown_game(client):
    res = client.get('/api/games/ZZZZZZ/state')
    assert res.status_code == 404
    assert res.get_json()['error'] == 'Game not found'


def test_create_fails_without_questions(client):
    Question.query.delete()
    db.session.commit()
    res = client.post('/api/games/create')
    assert res.status_code == 503
    assert 'error' in res.get_json()


def test_default_questions_are_seeded(flask_app):
    questions = load_questions()
    assert [q.id for q in questions] == [1, 2, 3]
    assert questions[0].options == ('Berlin', 'Paris', 'Madrid', 'Rome')
    assert questions[0].correct_index == 1
    # seeding twice adds nothing
    assert seed_questions() == 0


def test_malformed_options_are_skipped(flask_app):
    db.session.add(Question(id=4, text="Broken", options="[not json", correct_index=0))
    db.session.add(Question(id=5, text="Lonely", options='["only one"]', correct_index=0))
    db.session.commit()
    assert [q.id for q in load_questions()] == [1, 2, 3]


def test_create_fails_when_every_row_is_malformed(client):
    Question.query.delete()
    db.session.add(Question(id=9, text="Broken", options="{oops", correct_index=0))
    db.session.commit()
    res = client.post('/api/games/create')
    assert res.status_code == 503
    assert 'error' in res.get_json()
