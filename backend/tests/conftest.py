from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from services.session_manager import SessionManager
from services.store import SessionStore
from tests.fakes import FakeClock


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store() -> SessionStore:
    return SessionStore()


@pytest_asyncio.fixture()
async def manager(store: SessionStore, clock: FakeClock) -> AsyncIterator[SessionManager]:
    mgr = SessionManager(store, clock=clock, grace_period=30.0, sweep_interval=60.0)
    yield mgr
    await mgr.aclose()
