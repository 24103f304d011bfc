"""
Shared fixtures and test doubles for the cart client tests.
"""

import pytest
from socketio.exceptions import ConnectionError as SocketConnectionError


class FakeSocketClient:
    """Stands in for socketio.Client: records calls, lets tests fire events."""

    def __init__(self):
        self.handlers = {}
        self.emitted = []
        self.connect_calls = []
        self.tasks = []
        self.disconnect_calls = 0
        self.shutdown_calls = 0
        self.connect_failures = 0

    def on(self, event, handler=None):
        self.handlers[event] = handler

    def start_background_task(self, target, *args, **kwargs):
        self.tasks.append((target, args, kwargs))

    def run_tasks(self):
        tasks, self.tasks = self.tasks, []
        for target, args, kwargs in tasks:
            target(*args, **kwargs)

    def connect(self, url, **kwargs):
        self.connect_calls.append((url, kwargs))
        if self.connect_failures:
            self.connect_failures -= 1
            raise SocketConnectionError("Connection refused")
        self.fire("connect")

    def emit(self, event, data=None):
        self.emitted.append((event, data))

    def disconnect(self):
        self.disconnect_calls += 1

    def shutdown(self):
        self.shutdown_calls += 1

    def fire(self, event, *args):
        self.handlers[event](*args)


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def fake_socket():
    return FakeSocketClient()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def socket_factory():
    """Callable standing in for socketio.Client that hands out a new fake per call."""
    created = []

    def make(*args, **kwargs):
        created.append(FakeSocketClient())
        return created[-1]

    make.created = created
    return make
