from datetime import datetime, timedelta, timezone

import pytest
from clearcache.backend.memory import MemoryBackend
from clearcache.model.session import DesktopSession
from clearcache.model.windows import Viewport


class FakeClock:
    """Deterministic clock for the memory backend; advance it between writes."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def viewport() -> Viewport:
    return Viewport(1280, 800, 24)


@pytest.fixture
def session(viewport) -> DesktopSession:
    return DesktopSession(viewport, cascade_step=30, origin=(100, 80))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 3, 5, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def backend(clock) -> MemoryBackend:
    return MemoryBackend(clock=clock)
