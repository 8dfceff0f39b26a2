"""Async registry service running each call in its own database transaction.

The registry logic is synchronous and storage-agnostic.  This service
bridges it onto an async SQLAlchemy engine: every call opens a session,
begins a transaction and runs the logic through ``AsyncSession.run_sync``
against a :class:`~folio.registry.storage.SqlAlchemyStore`.  The
transaction commits when the logic returns and rolls back when it raises,
so a call's writes land all together or not at all.
"""

from __future__ import annotations

import typing as typ

from sqlalchemy.exc import SQLAlchemyError

from folio.common.time import unix_seconds
from folio.logging import get_logger, log_error, log_info, log_warning
from folio.registry import logic
from folio.registry.errors import RegistryError, StorageFailureError
from folio.registry.models import (
    Env,
    GetContent,
    GetContentByOwner,
    InstantiateMsg,
    ListContent,
    MessageInfo,
)
from folio.registry.storage import SqlAlchemyStore

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
    from sqlalchemy.orm import Session

    from folio.registry.models import (
        AddTranslation,
        Content,
        ContentListResponse,
        ContentResponse,
        ExecuteMsg,
        QueryMsg,
        RegisterContent,
        Response,
    )
    from folio.registry.storage import RegistryStore

type SessionFactory = async_sessionmaker[AsyncSession]
type Clock = cabc.Callable[[], int]

logger = get_logger(__name__)


class ContentRegistryService:
    """Runs registry mutations and queries against a SQL database.

    Parameters
    ----------
    session_factory:
        Async session factory for a database initialised with
        :func:`~folio.registry.storage.init_registry_storage`.
    clock:
        Returns the current time in whole seconds.  Read once per mutation
        and used verbatim for ``created_at``.

    """

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        clock: Clock = unix_seconds,
    ) -> None:
        """Configure the service with a session factory and clock."""
        self._session_factory = session_factory
        self._clock = clock

    async def _run[T](
        self,
        operation: str,
        call: cabc.Callable[[RegistryStore], T],
    ) -> T:
        """Run ``call`` inside one transaction, mapping driver errors."""

        def _bound(session: Session) -> T:
            return call(SqlAlchemyStore(session))

        try:
            async with self._session_factory() as session, session.begin():
                return await session.run_sync(_bound)
        except SQLAlchemyError as exc:
            log_error(logger, "Storage failure during %s: %s", operation, exc, exc_info=exc)
            raise StorageFailureError(operation, type(exc).__name__) from exc
        except StorageFailureError as exc:
            log_error(logger, "Storage failure during %s: %s", operation, exc.reason)
            raise

    def _env(self) -> Env:
        return Env(block_time=self._clock())

    async def is_instantiated(self) -> bool:
        """Return whether the configuration singleton exists."""
        return await self._run(
            "is_instantiated", lambda store: store.load_config() is not None
        )

    async def instantiate(self, sender: str, owner: str) -> Response:
        """Create the configuration and zero the counter.

        Calling this more than once resets the counter; hosts must guard
        against it, for example with :meth:`is_instantiated`.
        """
        info = MessageInfo(sender=sender)
        msg = InstantiateMsg(owner=owner)
        env = self._env()
        response = await self._run(
            "instantiate", lambda store: logic.instantiate(store, env, info, msg)
        )
        log_info(logger, "Instantiated registry for owner %s", owner)
        return response

    async def execute(self, sender: str, msg: ExecuteMsg) -> Response:
        """Apply a mutation on behalf of ``sender``.

        Raises
        ------
        ContentNotFoundError, InvalidLanguageError, DuplicateTranslationError
            When an ``AddTranslation`` is rejected; nothing is written.
        StorageFailureError
            When the database fails or the registry is not instantiated.

        """
        info = MessageInfo(sender=sender)
        env = self._env()
        operation = type(msg).__name__
        try:
            response = await self._run(
                operation, lambda store: logic.execute(store, env, info, msg)
            )
        except StorageFailureError:
            raise
        except RegistryError as exc:
            log_warning(logger, "Rejected %s from %s: %s", operation, sender, exc)
            raise

        log_info(
            logger,
            "%s by %s: %s",
            response.attribute("method"),
            sender,
            response.as_dict(),
        )
        return response

    async def register_content(self, sender: str, msg: RegisterContent) -> str:
        """Register content and return its new identifier."""
        response = await self.execute(sender, msg)
        return typ.cast("str", response.attribute("content_id"))

    async def add_translation(self, sender: str, msg: AddTranslation) -> Response:
        """Attach a translation on behalf of ``sender``."""
        return await self.execute(sender, msg)

    async def query(self, msg: QueryMsg) -> ContentResponse | ContentListResponse:
        """Run a query and return its projection."""
        return await self._run(
            type(msg).__name__, lambda store: logic.query(store, msg)
        )

    async def get_content(self, content_id: str) -> Content:
        """Return the content stored under ``content_id``."""
        response = await self.query(GetContent(content_id=content_id))
        return typ.cast("ContentResponse", response).content

    async def list_content(
        self,
        start_after: str | None = None,
        limit: int | None = None,
    ) -> list[Content]:
        """Return a page of content in ascending identifier order."""
        response = await self.query(ListContent(start_after=start_after, limit=limit))
        return typ.cast("ContentListResponse", response).contents

    async def get_content_by_owner(
        self,
        owner: str,
        start_after: str | None = None,
        limit: int | None = None,
    ) -> list[Content]:
        """Return every content record registered by ``owner``."""
        response = await self.query(
            GetContentByOwner(owner=owner, start_after=start_after, limit=limit)
        )
        return typ.cast("ContentListResponse", response).contents
