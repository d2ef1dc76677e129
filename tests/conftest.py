from __future__ import annotations

import pytest

from onboardkit.config import OnboardingConfig
from onboardkit.drafts import DraftStore
from onboardkit.persistence import DraftIndex, JsonIndexRepository


class ManualTimerHandle:
    def __init__(self, when: float, callback) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualLoop:
    """Stand-in for an event loop whose clock only moves when told to."""

    def __init__(self) -> None:
        self.now = 0.0
        self._timers: list[ManualTimerHandle] = []

    def call_later(self, delay, callback, *args):
        handle = ManualTimerHandle(self.now + delay, lambda: callback(*args))
        self._timers.append(handle)
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self._timers if not t.cancelled and t.when <= target]
            if not due:
                break
            handle = min(due, key=lambda t: t.when)
            handle.cancelled = True
            self.now = handle.when
            handle.callback()
        self._timers = [t for t in self._timers if not t.cancelled]
        self.now = target


@pytest.fixture
def manual_loop() -> ManualLoop:
    return ManualLoop()


@pytest.fixture
def config(tmp_path) -> OnboardingConfig:
    cfg = OnboardingConfig(data_dir=str(tmp_path / "data"))
    cfg.ensure_directories()
    return cfg


@pytest.fixture
def index(config) -> JsonIndexRepository:
    return JsonIndexRepository(config.draft_index_path, DraftIndex)


@pytest.fixture
def store(config, index) -> DraftStore:
    return DraftStore(config.drafts_dir, index, naming=config.customer)
