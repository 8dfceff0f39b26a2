"""Folio runtime entrypoint.

Provides the ASGI application factory served by Granian.  When
``FOLIO_DATABASE_URL`` is set the app exposes the registry endpoints;
otherwise it starts in health-only mode.

Configuration is driven by environment variables:

- ``FOLIO_HOST``: Bind address (default ``0.0.0.0``)
- ``FOLIO_PORT``: Listen port (default ``8080``)
- ``FOLIO_LOG_LEVEL``: Log level (default ``INFO``)
- ``FOLIO_DATABASE_URL``: Database connection URL (optional)
- ``FOLIO_OWNER``: Registry owner; instantiates an empty database on startup

Run the service directly with ``python -m folio.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from folio.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["create_app", "main"]

logger = get_logger(__name__)

_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid FOLIO_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def create_app() -> falcon.asgi.App:
    """Create the Falcon ASGI application from environment configuration.

    Returns
    -------
    falcon.asgi.App
        Health-only app, or the full registry app when
        ``FOLIO_DATABASE_URL`` is set.

    """
    from folio.api.app import AppDependencies
    from folio.api.app import create_app as _create_api_app

    database_url = os.environ.get("FOLIO_DATABASE_URL")
    if database_url is None:
        return _create_api_app()

    from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

    from folio.registry.service import ContentRegistryService

    engine = create_async_engine(database_url)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    deps = AppDependencies(
        registry_service=ContentRegistryService(session_factory),
        engine=engine,
        owner=os.environ.get("FOLIO_OWNER") or None,
    )
    return _create_api_app(deps)


def main() -> None:
    """Start the Folio runtime server using Granian."""
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("FOLIO_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port = _parse_port(os.environ.get("FOLIO_PORT", "8080"))
    log_level_str = os.environ.get("FOLIO_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid FOLIO_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Starting Folio runtime on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "folio.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
