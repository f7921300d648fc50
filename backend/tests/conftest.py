import os
import sys
import threading
import time
import pytest

# Ensure the backend root (containing the `app` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from app import create_app, socketio
from app.services.games import ScheduledCall, SessionManager


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start=1_000_000.0):
        self.now = start

    def __call__(self):
        return self.now


class ManualScheduler:
    def __init__(self, clock):
        self.clock = clock
        self.pending = []

    def call_later(self, delay_ms, callback, *args, name='task'):
        handle = ScheduledCall(name, delay_ms)
        self.pending.append((self.clock.now + delay_ms, handle, callback, args))
        return handle

    def active(self, name=None):
        return [h for _, h, _, _ in self.pending
                if not h.cancelled and not h.fired and (name is None or h.name == name)]

    def advance(self, ms):
        """Move the clock forward, firing due callbacks in deadline order."""
        end = self.clock.now + ms
        while True:
            due = [e for e in self.pending if e[0] <= end and not e[1].fired and not e[1].cancelled]
            if not due:
                break
            entry = min(due, key=lambda e: e[0])
            deadline, handle, callback, args = entry
            self.clock.now = max(self.clock.now, deadline)
            handle.fired = True
            callback(*args)
        self.clock.now = end


class RecordingNotifier:
    def __init__(self):
        self.events = []

    def broadcast(self, event, payload=None, skip=None):
        self.events.append(('broadcast', event, payload, skip))

    def send(self, sid, event, payload=None):
        self.events.append(('send', event, payload, sid))

    def named(self, event):
        return [e for e in self.events if e[1] == event]

    def clear(self):
        self.events = []


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def scheduler(clock):
    return ManualScheduler(clock)


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def make_manager(notifier, scheduler, clock):
    def _make(**overrides):
        settings = dict(duration_ms=30000, target_presses=100, cooldown_ms=200, eviction_delay_ms=5500)
        settings.update(overrides)
        return SessionManager(notifier=notifier, scheduler=scheduler, clock=clock, **settings)
    return _make


@pytest.fixture()
def manager(make_manager):
    return make_manager()


@pytest.fixture()
def flask_app(clock, scheduler):
    class TestConfig:
        TESTING = True
        SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
        HOST = '127.0.0.1'
        PORT = 8080
        CORS_ORIGINS = '*'
        STATIC_FOLDER = 'public'
        LOG_LEVEL = 'DEBUG'
        ROUND_DURATION_MS = 30000
        KEY_PRESS_COOLDOWN_MS = 200
        EVICTION_DELAY_MS = 5500
        TARGET_PRESSES = 10
        SESSION_SCHEDULER = scheduler
        SESSION_CLOCK = clock

    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
    yield test_client
    if test_client.is_connected():
        test_client.disconnect()


class ThreadedSocketIO:
    """Stand-in for the SocketIO object running background tasks on real threads."""

    def __init__(self):
        self.threads = []

    def sleep(self, seconds):
        time.sleep(seconds)

    def start_background_task(self, target, *args, **kwargs):
        thread = threading.Thread(target=target, args=args, kwargs=kwargs, daemon=True)
        self.threads.append(thread)
        thread.start()
        return thread

    def join_all(self, timeout=2.0):
        for thread in list(self.threads):
            thread.join(timeout)


@pytest.fixture()
def threaded_socketio():
    return ThreadedSocketIO()


@pytest.fixture()
def live_app():
    """App wired to the real BackgroundScheduler with short timers."""
    class LiveConfig:
        TESTING = True
        SECRET_KEY = 'test-secret'
        HOST = '127.0.0.1'
        PORT = 8080
        CORS_ORIGINS = '*'
        STATIC_FOLDER = 'public'
        LOG_LEVEL = 'DEBUG'
        ROUND_DURATION_MS = 100
        KEY_PRESS_COOLDOWN_MS = 0
        EVICTION_DELAY_MS = 50
        TARGET_PRESSES = 2
        SESSION_SCHEDULER = None
        SESSION_CLOCK = None

    application = create_app(LiveConfig)
    with application.app_context():
        yield application
