"""Application factory for the Folio Falcon ASGI application.

Usage
-----
Create a health-only app (no database)::

    app = create_app()

Create a full app with registry endpoints::

    from folio.api.app import AppDependencies, create_app

    app = create_app(AppDependencies(registry_service=service))

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from folio.api.errors import register_error_handlers
from folio.api.health.resources import HealthResource, ReadyResource

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from folio.registry.service import ContentRegistryService

__all__ = ["AppDependencies", "create_app"]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    registry_service
        Service backing the registry endpoints.  When ``None`` only the
        health endpoints are registered.
    engine
        Engine behind ``registry_service``.  When set, tables are created
        on startup and the engine is disposed on shutdown.
    owner
        Owner identity used to instantiate an empty registry on startup.

    """

    registry_service: ContentRegistryService | None = None
    engine: AsyncEngine | None = None
    owner: str | None = None


def _add_registry_routes(app: falcon.asgi.App, service: ContentRegistryService) -> None:
    from folio.api.registry.resources import (
        ContentCollectionResource,
        ContentResource,
        ExecuteResource,
        OwnerContentResource,
        QueryResource,
    )

    app.add_route("/execute", ExecuteResource(service))
    app.add_route("/query", QueryResource(service))
    app.add_route("/contents", ContentCollectionResource(service))
    app.add_route("/contents/{content_id}", ContentResource(service))
    app.add_route("/owners/{owner}/contents", OwnerContentResource(service))


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies.  Without a registry service only
        ``/health`` and ``/ready`` are available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    middleware: list[object] = []

    service = dependencies.registry_service if dependencies is not None else None
    if service is not None and dependencies is not None and dependencies.engine is not None:
        from folio.api.middleware import RegistryBootstrap

        middleware.append(
            RegistryBootstrap(dependencies.engine, service, owner=dependencies.owner)
        )

    app = falcon.asgi.App(middleware=middleware)  # type: ignore[no-matching-overload]  # Falcon stubs

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource())

    if service is not None:
        _add_registry_routes(app, service)

    register_error_handlers(app)
    return app
