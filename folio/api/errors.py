"""Falcon error handlers translating registry errors into HTTP responses.

Usage
-----
Register the handlers on the Falcon app::

    from folio.api.errors import register_error_handlers

    register_error_handlers(app)

"""

from __future__ import annotations

import typing as typ

import falcon

from folio.registry.codec import MessageDecodeError
from folio.registry.errors import (
    ContentNotFoundError,
    DuplicateTranslationError,
    InvalidLanguageError,
    InvalidPaginationError,
    StorageFailureError,
)

if typ.TYPE_CHECKING:
    from falcon.asgi import App, Request, Response

__all__ = [
    "MissingSenderError",
    "handle_bad_request",
    "handle_content_not_found",
    "handle_duplicate_translation",
    "handle_invalid_language",
    "handle_missing_sender",
    "handle_storage_failure",
    "register_error_handlers",
]

SENDER_HEADER = "X-Folio-Sender"


class MissingSenderError(Exception):
    """Raised when a mutation arrives without an authenticated sender."""

    def __init__(self) -> None:
        """Initialise with a message naming the expected header."""
        super().__init__(f"missing {SENDER_HEADER} header")


def _problem(resp: Response, status: str, title: str, description: str) -> None:
    resp.status = status
    resp.media = {"title": title, "description": description}


async def handle_content_not_found(
    _req: Request,
    resp: Response,
    ex: ContentNotFoundError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``ContentNotFoundError`` to HTTP 404."""
    _problem(resp, falcon.HTTP_404, "Content not found", str(ex))
    resp.media["content_id"] = ex.content_id


async def handle_invalid_language(
    _req: Request,
    resp: Response,
    ex: InvalidLanguageError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InvalidLanguageError`` to HTTP 400."""
    _problem(resp, falcon.HTTP_400, "Invalid language", str(ex))
    resp.media["language"] = ex.language


async def handle_duplicate_translation(
    _req: Request,
    resp: Response,
    ex: DuplicateTranslationError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``DuplicateTranslationError`` to HTTP 409."""
    _problem(resp, falcon.HTTP_409, "Duplicate translation", str(ex))
    resp.media["language"] = ex.language


async def handle_storage_failure(
    _req: Request,
    resp: Response,
    ex: StorageFailureError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``StorageFailureError`` to HTTP 503.

    The driver error is not echoed; only the failing operation is named.
    """
    _problem(
        resp,
        falcon.HTTP_503,
        "Storage unavailable",
        f"storage failure during {ex.operation}",
    )


async def handle_bad_request(
    _req: Request,
    resp: Response,
    ex: MessageDecodeError | InvalidPaginationError,
    _params: dict[str, typ.Any],
) -> None:
    """Map decode and pagination errors to HTTP 400."""
    _problem(resp, falcon.HTTP_400, "Invalid input", str(ex))


async def handle_missing_sender(
    _req: Request,
    resp: Response,
    ex: MissingSenderError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``MissingSenderError`` to HTTP 401."""
    _problem(resp, falcon.HTTP_401, "Sender required", str(ex))


def register_error_handlers(app: App) -> None:
    """Attach every registry error handler to ``app``."""
    app.add_error_handler(ContentNotFoundError, handle_content_not_found)
    app.add_error_handler(InvalidLanguageError, handle_invalid_language)
    app.add_error_handler(DuplicateTranslationError, handle_duplicate_translation)
    app.add_error_handler(StorageFailureError, handle_storage_failure)
    app.add_error_handler(MessageDecodeError, handle_bad_request)
    app.add_error_handler(InvalidPaginationError, handle_bad_request)
    app.add_error_handler(MissingSenderError, handle_missing_sender)
