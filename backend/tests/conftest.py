import os
import sys
import pytest
from flask import g

# Ensure the backend root (containing the `arena` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from arena import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Keep password hashing fast in tests
    BCRYPT_LOG_ROUNDS = 4
    PD_TOTAL_ROUNDS = 5
    DEFAULT_GAME_MODE = 'prisoners_dilemma'
    LEADERBOARD_LIMIT = 20


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)

    # Test-client requests reuse the app context held open below, so `g` outlives
    # each request. Drop Flask-Login's per-request user cache as production would.
    @application.teardown_request
    def _reset_login_cache(exc):
        g.pop('_login_user', None)

    with application.app_context():
        # Ensure models are imported so tables are created
        import arena.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


@pytest.fixture()
def connect_player(flask_app):
    """Factory: register a user over HTTP and open a socket with their session."""
    opened = []

    def _connect(username, password='password'):
        http = flask_app.test_client()
        res = http.post('/api/register', json={'username': username, 'password': password})
        assert res.status_code == 201
        sio = socketio.test_client(flask_app, flask_test_client=http, namespace='/ws')
        assert sio.is_connected('/ws')
        # Drop the 'connected' greeting
        sio.get_received('/ws')
        opened.append(sio)
        return sio

    yield _connect
    for sio in opened:
        if sio.is_connected('/ws'):
            sio.disconnect(namespace='/ws')
