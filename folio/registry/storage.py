"""Storage collaborators for the content registry.

The registry logic talks to an ordered key-value store through the
:class:`RegistryStore` protocol.  Two implementations are provided:

- :class:`MemoryStore`, an in-process ordered map with snapshot
  transactions, used by tests and embedded hosts;
- :class:`SqlAlchemyStore`, which maps the key space onto the
  ``registry_items`` and ``contents`` tables through a synchronous
  SQLAlchemy ``Session`` (typically the one handed out by
  ``AsyncSession.run_sync``).

Content keys are compared as strings, so ``"10"`` sorts before ``"2"``.
"""

from __future__ import annotations

import bisect
import contextlib
import copy
import typing as typ

import msgspec
from sqlalchemy import JSON, BigInteger, String, Text, select
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from folio.registry.mapping import apply_content, to_content
from folio.registry.models import Config

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from sqlalchemy.ext.asyncio import AsyncEngine
    from sqlalchemy.orm import Session

    from folio.registry.models import Content

CONFIG_KEY = "config"
COUNTER_KEY = "content_count"


class RegistryStore(typ.Protocol):
    """Ordered key-value collaborator consumed by the registry logic."""

    def load_config(self) -> Config | None:
        """Return the stored configuration, if instantiated."""
        ...

    def save_config(self, config: Config) -> None:
        """Persist the configuration singleton."""
        ...

    def load_counter(self) -> int | None:
        """Return the content counter, if instantiated."""
        ...

    def save_counter(self, value: int) -> None:
        """Persist the content counter."""
        ...

    def load_content(self, content_id: str) -> Content | None:
        """Return the content stored under ``content_id``."""
        ...

    def save_content(self, content_id: str, content: Content) -> None:
        """Write the whole content record under ``content_id``."""
        ...

    def scan_contents(
        self,
        start_after: str | None = None,
        limit: int | None = None,
    ) -> cabc.Iterator[tuple[str, Content]]:
        """Yield ``(content_id, content)`` pairs in ascending key order.

        ``start_after`` is an exclusive lower bound.  ``limit`` caps the
        number of pairs yielded when given.
        """
        ...


class MemoryStore:
    """In-memory :class:`RegistryStore` with all-or-nothing transactions."""

    def __init__(self) -> None:
        """Start with an empty, uninstantiated key space."""
        self._config: Config | None = None
        self._counter: int | None = None
        self._contents: dict[str, Content] = {}
        self._keys: list[str] = []

    def load_config(self) -> Config | None:
        """Return the configuration singleton."""
        return self._config

    def save_config(self, config: Config) -> None:
        """Replace the configuration singleton."""
        self._config = config

    def load_counter(self) -> int | None:
        """Return the content counter."""
        return self._counter

    def save_counter(self, value: int) -> None:
        """Replace the content counter."""
        self._counter = value

    def load_content(self, content_id: str) -> Content | None:
        """Return the content stored under ``content_id``."""
        return self._contents.get(content_id)

    def save_content(self, content_id: str, content: Content) -> None:
        """Store ``content``, keeping the key index sorted."""
        if content_id not in self._contents:
            bisect.insort(self._keys, content_id)
        self._contents[content_id] = content

    def scan_contents(
        self,
        start_after: str | None = None,
        limit: int | None = None,
    ) -> cabc.Iterator[tuple[str, Content]]:
        """Yield stored content in ascending key order after ``start_after``."""
        start = 0 if start_after is None else bisect.bisect_right(self._keys, start_after)
        keys = self._keys[start:] if limit is None else self._keys[start : start + limit]
        for key in keys:
            yield key, self._contents[key]

    def __len__(self) -> int:
        """Return the number of stored content records."""
        return len(self._keys)

    @contextlib.contextmanager
    def transaction(self) -> cabc.Iterator[MemoryStore]:
        """Run a block against this store, discarding its writes if it raises.

        Records are immutable structs, so a shallow copy of each container
        is a complete snapshot.
        """
        snapshot = (
            self._config,
            self._counter,
            copy.copy(self._contents),
            copy.copy(self._keys),
        )
        try:
            yield self
        except BaseException:
            self._config, self._counter, self._contents, self._keys = snapshot
            raise


class Base(DeclarativeBase):
    """Declarative base for registry tables."""


class RegistryItem(Base):
    """Singleton entry (configuration or counter) stored as JSON."""

    __tablename__ = "registry_items"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[typ.Any] = mapped_column(JSON)


class ContentRecord(Base):
    """Row holding one content record and its embedded translations."""

    __tablename__ = "contents"

    id: Mapped[str] = mapped_column(String(20), primary_key=True)
    owner: Mapped[str] = mapped_column(String(255), index=True)
    title: Mapped[str] = mapped_column(Text())
    description: Mapped[str] = mapped_column(Text())
    content_type: Mapped[str] = mapped_column(String(255))
    content_hash: Mapped[str] = mapped_column(String(255))
    target_languages: Mapped[list[str]] = mapped_column(JSON, default=list)
    translations: Mapped[list[dict[str, typ.Any]]] = mapped_column(JSON, default=list)
    created_at: Mapped[int] = mapped_column(BigInteger)


class SqlAlchemyStore:
    """:class:`RegistryStore` backed by a synchronous SQLAlchemy session.

    The caller owns the session and its transaction; this class only reads
    and stages writes.

    Parameters
    ----------
    session
        Session bound to a database initialised with
        :func:`init_registry_storage`.

    """

    def __init__(self, session: Session) -> None:
        """Bind the store to ``session``."""
        self._session = session

    def _load_item(self, key: str) -> typ.Any:  # noqa: ANN401 - JSON payload
        item = self._session.get(RegistryItem, key)
        return None if item is None else item.value

    def _save_item(self, key: str, value: object) -> None:
        item = self._session.get(RegistryItem, key)
        if item is None:
            self._session.add(RegistryItem(key=key, value=value))
        else:
            item.value = value

    def load_config(self) -> Config | None:
        """Return the configuration singleton."""
        raw = self._load_item(CONFIG_KEY)
        return None if raw is None else msgspec.convert(raw, Config)

    def save_config(self, config: Config) -> None:
        """Persist the configuration singleton."""
        self._save_item(CONFIG_KEY, msgspec.to_builtins(config))

    def load_counter(self) -> int | None:
        """Return the content counter."""
        raw = self._load_item(COUNTER_KEY)
        return None if raw is None else int(raw)

    def save_counter(self, value: int) -> None:
        """Persist the content counter."""
        self._save_item(COUNTER_KEY, value)

    def load_content(self, content_id: str) -> Content | None:
        """Return the content stored under ``content_id``."""
        record = self._session.get(ContentRecord, content_id)
        return None if record is None else to_content(record)

    def save_content(self, content_id: str, content: Content) -> None:
        """Rewrite the row for ``content_id`` from ``content``."""
        record = self._session.get(ContentRecord, content_id)
        if record is None:
            record = ContentRecord(id=content_id)
            self._session.add(record)
        apply_content(record, content)
        self._session.flush()

    def scan_contents(
        self,
        start_after: str | None = None,
        limit: int | None = None,
    ) -> cabc.Iterator[tuple[str, Content]]:
        """Yield content rows ordered by identifier after ``start_after``."""
        stmt = select(ContentRecord).order_by(ContentRecord.id)
        if start_after is not None:
            stmt = stmt.where(ContentRecord.id > start_after)
        if limit is not None:
            stmt = stmt.limit(limit)
        for record in self._session.scalars(stmt):
            yield record.id, to_content(record)


async def init_registry_storage(engine: AsyncEngine) -> None:
    """Create the registry tables if they are absent."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
