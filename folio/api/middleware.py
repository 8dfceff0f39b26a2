"""Lifespan middleware preparing the registry database.

On ASGI startup the middleware creates the registry tables and, when an
owner is configured, instantiates an empty registry.  On shutdown it
disposes of the engine so pooled connections are released.

Usage
-----
Register the middleware when creating the Falcon app::

    app = falcon.asgi.App(
        middleware=[RegistryBootstrap(engine, service, owner="admin")]
    )

"""

from __future__ import annotations

import typing as typ

from folio.logging import get_logger, log_info
from folio.registry.storage import init_registry_storage

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from folio.registry.service import ContentRegistryService

__all__ = ["BOOTSTRAP_SENDER", "RegistryBootstrap"]

logger = get_logger(__name__)

BOOTSTRAP_SENDER = "folio-runtime"


class RegistryBootstrap:
    """Falcon middleware running registry setup on ASGI lifespan events.

    Parameters
    ----------
    engine
        Engine the registry service's sessions are bound to.
    service
        Registry service used to check for and perform instantiation.
    owner
        Owner identity to instantiate with.  ``None`` skips instantiation.

    """

    def __init__(
        self,
        engine: AsyncEngine,
        service: ContentRegistryService,
        *,
        owner: str | None = None,
    ) -> None:
        """Store the collaborators used during startup and shutdown."""
        self._engine = engine
        self._service = service
        self._owner = owner

    async def process_startup(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Create tables and instantiate the registry if it is empty."""
        await init_registry_storage(self._engine)
        if self._owner is None:
            return
        if await self._service.is_instantiated():
            log_info(logger, "Registry already instantiated; keeping existing state")
            return
        await self._service.instantiate(BOOTSTRAP_SENDER, self._owner)

    async def process_shutdown(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Dispose of the engine's connection pool."""
        await self._engine.dispose()
