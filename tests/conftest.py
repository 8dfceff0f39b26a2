"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from folio.registry import (
    Env,
    InstantiateMsg,
    MemoryStore,
    MessageInfo,
    RegisterContent,
    init_registry_storage,
)
from folio.registry import logic

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

REGISTRY_OWNER = "admin"


class ManualClock:
    """Clock returning a settable integer timestamp."""

    def __init__(self, now: int = 1_700_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        """Move the clock forward and return the new time."""
        self.now += seconds
        return self.now


def register_msg(
    title: str = "Guide",
    *,
    target_languages: list[str] | None = None,
    content_hash: str = "h0",
) -> RegisterContent:
    """Build a RegisterContent message with sensible defaults."""
    return RegisterContent(
        title=title,
        description=f"{title} description",
        content_type="text/markdown",
        content_hash=content_hash,
        target_languages=["fr", "de"] if target_languages is None else target_languages,
    )


@pytest.fixture
def clock() -> ManualClock:
    """Return a manual clock starting at a fixed timestamp."""
    return ManualClock()


@pytest.fixture
def store() -> MemoryStore:
    """Return an instantiated in-memory registry store."""
    memory = MemoryStore()
    logic.instantiate(
        memory,
        Env(block_time=0),
        MessageInfo(sender=REGISTRY_OWNER),
        InstantiateMsg(owner=REGISTRY_OWNER),
    )
    return memory


@pytest.fixture
def register(
    store: MemoryStore, clock: ManualClock
) -> cabc.Callable[..., str]:
    """Return a helper registering content in ``store`` and returning its id."""

    def _register(sender: str = "alice", **kwargs: typ.Any) -> str:
        response = logic.execute(
            store,
            Env(block_time=clock()),
            MessageInfo(sender=sender),
            register_msg(**kwargs),
        )
        content_id = response.attribute("content_id")
        assert content_id is not None, "register_content must report content_id"
        return content_id

    return _register


@pytest_asyncio.fixture
async def session_factory(
    tmp_path: Path,
) -> typ.AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Yield an async session factory bound to a fresh SQLite database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'folio_test.db'}")
    try:
        await init_registry_storage(engine)
        yield async_sessionmaker(engine, expire_on_commit=False)
    finally:
        await engine.dispose()
