import signal

import pytest

from microplatform.auth import KeyPair, StaticAuth
from microplatform.errors import RuntimeFailure


class FakeRuntime:
    """Runtime double recording every call, optionally failing on one unit."""

    def __init__(self, fail_on=None, start_error=None, stop_error=None):
        self.fail_on = fail_on
        self.start_error = start_error
        self.stop_error = stop_error
        self.created = []
        self.calls = []

    @property
    def created_names(self):
        return [spec.name for spec in self.created]

    def create(self, spec):
        self.calls.append(("create", spec.name))
        if spec.name == self.fail_on:
            raise RuntimeFailure(f"cannot create {spec.name}")
        self.created.append(spec)

    def start(self):
        self.calls.append(("start",))
        if self.start_error is not None:
            raise self.start_error

    def stop(self):
        self.calls.append(("stop",))
        if self.stop_error is not None:
            raise self.stop_error


class FakeSignalWaiter:
    """Signal source that delivers a signal as soon as the server waits."""

    def __init__(self, signum=signal.SIGTERM, on_wait=None):
        self.signum = signum
        self.on_wait = on_wait
        self.installed = False
        self.restored = False
        self.waits = 0

    def install(self):
        self.installed = True

    def restore(self):
        self.restored = True

    def wait(self):
        self.waits += 1
        if self.on_wait is not None:
            self.on_wait()
        return self.signum


@pytest.fixture
def fake_runtime():
    return FakeRuntime()


@pytest.fixture
def fake_waiter():
    return FakeSignalWaiter()


@pytest.fixture
def auth():
    return StaticAuth(KeyPair(public_key="pub-key", private_key="priv-key"))


@pytest.fixture(autouse=True)
def isolated_home(monkeypatch, tmp_path):
    """Keep tests away from the real ~/.config/micro."""
    monkeypatch.setenv("MICRO_HOME", str(tmp_path / "micro_home"))
    for name in ("MICRO_PROFILE", "MICRO_PROXY", "MICRO_RUNTIME", "MICRO_LOG_LEVEL", "MICRO_CONFIG"):
        monkeypatch.delenv(name, raising=False)
