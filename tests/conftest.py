"""
Shared fixtures.

Nothing here touches the real home directory, the real clock or a real
URL opener.
"""

from datetime import datetime, timedelta, timezone

import pytest

from spendqueue.audit import AuditLogger
from spendqueue.config import get_settings
from spendqueue.services.opener import UrlOpenerError


START = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeOpener:
    """Records URLs instead of starting a program."""

    command = "fake-open"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.opened = []

    def open(self, url: str) -> None:
        if self.fail:
            raise UrlOpenerError(self.command, url, f"Can't open purchase URL with '{self.command}'")
        self.opened.append(url)


class RecordingAuditLogger(AuditLogger):
    """Keeps every event for inspection."""

    def __init__(self):
        super().__init__("spendqueue.test")
        self.events = []

    def log(self, event) -> bool:
        self.events.append(event)
        return True

    @property
    def types(self) -> list:
        return [event.event_type for event in self.events]


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def opener():
    return FakeOpener()


@pytest.fixture
def audit_logger():
    return RecordingAuditLogger()


@pytest.fixture
def state_file(tmp_path):
    return tmp_path / "config" / "sq" / "state.json"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Point settings at a temporary state file and a harmless opener."""
    monkeypatch.setenv("SQ_STATE_FILE", str(tmp_path / "env" / "state.json"))
    monkeypatch.setenv("SQ_OPENER_COMMAND", "true")
    monkeypatch.delenv("SQ_BUMP_SEED", raising=False)
    monkeypatch.delenv("SQ_DEFAULT_INTERVAL_DAYS", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def failing_opener():
    return FakeOpener(fail=True)
