import re

import pytest
from fastapi.testclient import TestClient

from backend import mailer
from backend.auth import jwt_handler, passwords
from backend.main import app
from backend.models.student import Student
from backend.models.user import User
from backend.routes import auth_routes


def _signup_payload(**overrides) -> dict:
    payload = {
        'username': 'ann',
        'email': 'a@b.com',
        'password': 'secret1',
        'firstName': 'Ann',
        'lastName': 'Lee',
        'yearLevelType': 'college',
    }
    payload.update(overrides)
    return payload


def _session_cookie_header(response) -> str:
    return response.headers.get('set-cookie', '')


def test_signup_creates_student_account_and_sets_session_cookie(client, db_session) -> None:
    response = client.post('/signup', json=_signup_payload(strandId='2', courseId=''))

    assert response.status_code == 201
    assert response.json() == {
        'success': True,
        'message': 'User created successfully!',
        'username': 'ann',
        'fullName': 'Ann Lee',
        'email': 'a@b.com',
        'role': 'student',
    }

    users = db_session.query(User).all()
    assert len(users) == 1
    assert users[0].role == 'student'
    assert users[0].hashed_password != 'secret1'
    assert passwords.verify_password('secret1', users[0].hashed_password)

    students = db_session.query(Student).filter(Student.user_id == users[0].id).all()
    assert len(students) == 1
    assert students[0].full_name == 'Ann Lee'
    assert students[0].year_level_type == 'college'
    assert students[0].strand_id == 2
    assert students[0].course_id is None
    assert students[0].tesda_course_id is None

    cookie_header = _session_cookie_header(response)
    assert cookie_header.startswith('jwt=')
    assert 'httponly' in cookie_header.lower()

    payload = jwt_handler.decode_access_token(response.cookies.get('jwt'))
    assert payload['sub'] == str(users[0].id)
    assert payload['role'] == 'student'


def test_signup_full_name_joins_multi_word_names(client) -> None:
    response = client.post('/signup', json=_signup_payload(firstName='Mary Ann', lastName='De Leon'))

    assert response.status_code == 201
    assert response.json()['fullName'] == 'Mary Ann De Leon'


@pytest.mark.parametrize(
    'overrides',
    [
        {'email': 'a @b.com'},
        {'password': 'secret 1'},
        {'password': 'secret\t1'},
        {'email': 'a @b.com', 'firstName': 'Ann3'},
        {'password': 'se cret', 'lastName': 'L#e', 'strandId': 'abc'},
        {'email': 'a b@c.com', 'firstName': 5},
        {'password': 'se cret', 'username': ['ann'], 'yearLevelType': {'level': 1}, 'courseId': [2]},
    ],
)
def test_signup_rejects_whitespace_in_email_or_password(client, db_session, overrides) -> None:
    response = client.post('/signup', json=_signup_payload(**overrides))

    assert response.status_code == 400
    assert response.json() == {'error': 'Email and password cannot contain spaces.'}
    assert db_session.query(User).count() == 0


@pytest.mark.parametrize(
    'overrides',
    [
        {'firstName': 'Ann2'},
        {'lastName': 'Lee!'},
        {'firstName': 'An-n'},
        {'lastName': 'O\'Neil'},
    ],
)
def test_signup_rejects_names_with_digits_or_symbols(client, db_session, overrides) -> None:
    response = client.post('/signup', json=_signup_payload(**overrides))

    assert response.status_code == 400
    assert response.json() == {'error': 'First name and last name can only contain letters and spaces.'}
    assert db_session.query(User).count() == 0
    assert db_session.query(Student).count() == 0


@pytest.mark.parametrize(
    'overrides',
    [
        {'email': 'other@b.com'},
        {'username': 'someone-else'},
    ],
)
def test_signup_rejects_duplicate_username_or_email(client, db_session, overrides) -> None:
    assert client.post('/signup', json=_signup_payload()).status_code == 201

    response = client.post('/signup', json=_signup_payload(**overrides))

    assert response.status_code == 400
    assert response.json() == {'error': 'User already exists!'}
    assert db_session.query(User).count() == 1


def test_signup_accepts_numeric_year_level_and_foreign_keys(client, db_session) -> None:
    response = client.post('/signup', json=_signup_payload(yearLevelType=1, strandId=3, courseId='4'))

    assert response.status_code == 201
    student = db_session.query(Student).one()
    assert student.year_level_type == '1'
    assert student.strand_id == 3
    assert student.course_id == 4


def test_signup_rejects_non_text_names(client, db_session) -> None:
    response = client.post('/signup', json=_signup_payload(firstName=5))

    assert response.status_code == 400
    assert response.json() == {'error': 'First name and last name can only contain letters and spaces.'}
    assert db_session.query(User).count() == 0


def test_signup_rejects_non_integer_foreign_keys(client, db_session) -> None:
    response = client.post('/signup', json=_signup_payload(tesdaCourseId='x1'))

    assert response.status_code == 400
    assert response.json() == {'error': 'tesdaCourseId must be an integer.'}
    assert db_session.query(User).count() == 0


def test_signup_requires_account_fields(client, db_session) -> None:
    payload = _signup_payload()
    del payload['username']

    response = client.post('/signup', json=payload)

    assert response.status_code == 400
    assert 'required' in response.json()['error']
    assert db_session.query(User).count() == 0


def test_signup_returns_generic_error_and_rolls_back_on_unexpected_failure(
    client,
    db_session,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def broken_hash(_password):
        raise RuntimeError('hashing backend unavailable')

    monkeypatch.setattr(auth_routes.passwords, 'hash_password', broken_hash)

    response = client.post('/signup', json=_signup_payload())

    assert response.status_code == 500
    assert response.json() == {'error': 'Internal Server Error'}
    assert 'set-cookie' not in response.headers
    assert db_session.query(User).count() == 0


def test_login_returns_user_and_sets_session_cookie(client, db_session) -> None:
    client.post('/signup', json=_signup_payload())
    user = db_session.query(User).filter(User.email == 'a@b.com').one()

    response = TestClient(app).post('/login', json={'email': 'a@b.com', 'password': 'secret1'})

    assert response.status_code == 200
    assert response.json() == {
        'success': True,
        'message': 'User logged in successfully!',
        'userId': user.id,
        'username': 'ann',
        'email': 'a@b.com',
        'role': 'student',
    }
    assert _session_cookie_header(response).startswith('jwt=')


def test_login_with_wrong_password_sets_no_cookie(client) -> None:
    client.post('/signup', json=_signup_payload())

    response = TestClient(app).post('/login', json={'email': 'a@b.com', 'password': 'wrong'})

    assert response.status_code == 400
    assert response.json() == {'error': 'Wrong password!'}
    assert 'set-cookie' not in response.headers


def test_login_with_unknown_email_sets_no_cookie(client) -> None:
    response = client.post('/login', json={'email': 'nobody@b.com', 'password': 'secret1'})

    assert response.status_code == 400
    assert 'incorrect' in response.json()['error']
    assert 'set-cookie' not in response.headers


def test_login_forwards_unexpected_failures_to_shared_handler(client, monkeypatch: pytest.MonkeyPatch) -> None:
    client.post('/signup', json=_signup_payload())

    def broken_verify(_password, _hashed):
        raise RuntimeError('verification failed')

    monkeypatch.setattr(auth_routes.passwords, 'verify_password', broken_verify)

    response = TestClient(app, raise_server_exceptions=False).post(
        '/login',
        json={'email': 'a@b.com', 'password': 'secret1'},
    )

    assert response.status_code == 500
    assert response.json() == {'error': 'Internal Server Error'}


def test_forgot_password_returns_404_for_unknown_email(client) -> None:
    response = client.post('/forgot-password', json={'email': 'missing@x.com'})

    assert response.status_code == 404
    assert response.json() == {'message': 'User with this email does not exist'}


@pytest.mark.parametrize('payload', [{}, {'email': ''}, {'email': 42}])
def test_forgot_password_reports_missing_email_under_message(client, payload) -> None:
    response = client.post('/forgot-password', json=payload)

    assert response.status_code == 400
    assert response.json() == {'message': 'Email is required.'}


def test_forgot_password_replaces_password_and_mails_it(client, db_session, monkeypatch: pytest.MonkeyPatch) -> None:
    client.post('/signup', json=_signup_payload())
    sent = []
    monkeypatch.setattr(
        auth_routes.mailer,
        'send_new_password_email',
        lambda recipient, new_password: sent.append((recipient, new_password)),
    )

    response = client.post('/forgot-password', json={'email': 'a@b.com'})

    assert response.status_code == 200
    assert response.json() == {'message': 'New password sent to your email.'}
    assert len(sent) == 1
    recipient, new_password = sent[0]
    assert recipient == 'a@b.com'
    assert re.fullmatch(r'[0-9a-f]{16}', new_password)

    user = db_session.query(User).filter(User.email == 'a@b.com').one()
    db_session.refresh(user)
    assert passwords.verify_password(new_password, user.hashed_password)
    assert not passwords.verify_password('secret1', user.hashed_password)

    login_response = TestClient(app).post('/login', json={'email': 'a@b.com', 'password': new_password})
    assert login_response.status_code == 200


def test_forgot_password_returns_server_error_when_mail_fails(client, monkeypatch: pytest.MonkeyPatch) -> None:
    client.post('/signup', json=_signup_payload())

    def failing_send(_recipient, _new_password):
        raise mailer.MailerError('SMTP_HOST is not configured.')

    monkeypatch.setattr(auth_routes.mailer, 'send_new_password_email', failing_send)

    response = client.post('/forgot-password', json={'email': 'a@b.com'})

    assert response.status_code == 500
    assert response.json() == {'message': 'Server error'}


def test_logout_clears_session_cookie(client) -> None:
    response = client.post('/logout')

    assert response.status_code == 200
    assert response.json() == {'message': 'Logged out successfully'}
    cookie_header = _session_cookie_header(response)
    assert cookie_header.startswith('jwt=')
    assert 'Max-Age=0' in cookie_header


def test_me_returns_session_user(client) -> None:
    client.post('/signup', json=_signup_payload())

    response = client.get('/me')

    assert response.status_code == 200
    assert response.json()['username'] == 'ann'
    assert response.json()['role'] == 'student'


def test_me_rejects_missing_or_invalid_session(client) -> None:
    assert client.get('/me').status_code == 401

    client.cookies.set('jwt', 'not-a-token')
    response = client.get('/me')

    assert response.status_code == 401
    assert response.json() == {'error': 'Invalid token'}
