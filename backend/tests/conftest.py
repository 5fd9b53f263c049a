import os
import sys
import threading
import pytest

# Ensure the backend root (containing the `mancala` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from mancala import create_app, socketio
from mancala.coordinator import SessionCoordinator
from mancala.registry import SessionRegistry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    SOCKETIO_NAMESPACE = '/ws'
    STONES_PER_PIT = 4
    FINISHED_GRACE_SEC = 300
    CANCELLED_GRACE_SEC = 5
    STALE_WAITING_SEC = 600


class RecordingBroadcaster:
    """Collects everything the coordinator would have sent over the wire."""

    def __init__(self):
        self.events = []
        self._lock = threading.Lock()

    def _record(self, *event):
        with self._lock:
            self.events.append(event)

    def subscribe(self, connection_id, game_id):
        self._record('subscribe', connection_id, game_id)

    def unsubscribe(self, connection_id, game_id):
        self._record('unsubscribe', connection_id, game_id)

    def close_topic(self, game_id):
        self._record('close', game_id)

    def publish(self, game_id, snapshot):
        self._record('publish', game_id, snapshot)

    def send_details(self, connection_id, details):
        self._record('details', connection_id, details)

    def send_error(self, connection_id, message):
        self._record('error', connection_id, message)

    def published(self, game_id=None):
        return [e[2] for e in self.events if e[0] == 'publish' and (game_id is None or e[1] == game_id)]

    def details(self, connection_id):
        return [e[2] for e in self.events if e[0] == 'details' and e[1] == connection_id]

    def errors(self, connection_id=None):
        return [e[2] for e in self.events if e[0] == 'error' and (connection_id is None or e[1] == connection_id)]

    def clear(self):
        with self._lock:
            self.events.clear()


class RecordingScheduler:
    def __init__(self):
        self.calls = []

    def call_later(self, delay, fn, *args):
        self.calls.append((delay, fn, args))
        return True


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    """Factory for Socket.IO test clients connected to /ws."""
    clients = []

    def _connect():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/ws'
        )
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected('/ws'):
                test_client.disconnect(namespace='/ws')
        except RuntimeError:
            pass


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def scheduler():
    return RecordingScheduler()


@pytest.fixture()
def registry():
    return SessionRegistry()


@pytest.fixture()
def coordinator(registry, broadcaster, scheduler):
    return SessionCoordinator(
        registry,
        broadcaster,
        scheduler,
        finished_grace_sec=300,
        cancelled_grace_sec=5,
        stale_waiting_sec=600,
    )
