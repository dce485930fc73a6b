import os
import sys
import pytest

# Ensure the project root (containing the `bingo` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from bingo import SOCKET_NAMESPACE, create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CREATE_TABLES = False
    ADMIN_SECRET = 'test-admin'
    CORS_ORIGINS = '*'
    ENTRY_FEE = 10
    STARTING_BALANCE = 100
    PAYOUT_RATE = 0.8
    COUNTDOWN_TICKS = 3
    TICK_INTERVAL_SEC = 1
    CALL_INTERVAL_SEC = 5
    SETTLE_DELAY_SEC = 15
    USERNAME_MAX_LENGTH = 32
    # Timers are armed but never started; tests step them with fire()
    ENABLE_TIMERS = False


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import bingo.models  # noqa: F401
        db.create_all()
        yield application
        application.extensions['bingo_round'].cancel_timers()
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def bingo_round(flask_app):
    return flask_app.extensions['bingo_round']


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def connect(flask_app):
    """Factory for Socket.IO test clients on the game namespace."""
    clients = []

    def _connect():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace=SOCKET_NAMESPACE,
        )
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        if test_client.is_connected(SOCKET_NAMESPACE):
            test_client.disconnect(namespace=SOCKET_NAMESPACE)


@pytest.fixture()
def sio_client(connect):
    return connect()
