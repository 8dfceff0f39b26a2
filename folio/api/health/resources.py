"""Probe resources for container liveness and readiness checks.

Both probes are stateless and registered whether or not a database is
configured.
"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe answering ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe answering ``{"status": "ready"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready."""
        resp.media = {"status": "ready"}
        resp.status = HTTPStatus.OK
