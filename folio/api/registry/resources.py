"""Registry API resources.

Routes
------
- ``POST /execute``: externally tagged mutation, sender in ``X-Folio-Sender``
- ``POST /query``: externally tagged query
- ``GET /contents``: page of content (``start_after``, ``limit``)
- ``GET /contents/{content_id}``: single content record
- ``GET /owners/{owner}/contents``: content registered by ``owner``

Responses are encoded with ``msgspec`` so the JSON matches the registry's
wire layout exactly.
"""

from __future__ import annotations

import typing as typ

import falcon

from folio.api.errors import SENDER_HEADER, MissingSenderError
from folio.registry.codec import decode_execute_msg, decode_query_msg, encode
from folio.registry.models import ContentListResponse, ContentResponse

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from folio.registry.service import ContentRegistryService

__all__ = [
    "ContentCollectionResource",
    "ContentResource",
    "ExecuteResource",
    "OwnerContentResource",
    "QueryResource",
]


def _send(resp: Response, value: object) -> None:
    resp.data = encode(value)
    resp.content_type = falcon.MEDIA_JSON
    resp.status = falcon.HTTP_200


def _sender(req: Request) -> str:
    sender = req.get_header(SENDER_HEADER)
    if not sender:
        raise MissingSenderError
    return sender


class _RegistryResource:
    def __init__(self, service: ContentRegistryService) -> None:
        self._service = service


class ExecuteResource(_RegistryResource):
    """Applies mutations on behalf of the authenticated sender."""

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST /execute.

        The sender header is checked before the body is decoded so
        unauthenticated requests never reach the decoder.
        """
        sender = _sender(req)
        msg = decode_execute_msg(await req.stream.read())
        response = await self._service.execute(sender, msg)
        _send(resp, response)


class QueryResource(_RegistryResource):
    """Runs any query message."""

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST /query."""
        msg = decode_query_msg(await req.stream.read())
        _send(resp, await self._service.query(msg))


class ContentCollectionResource(_RegistryResource):
    """Lists content one page at a time."""

    async def on_get(self, req: Request, resp: Response) -> None:
        """Handle GET /contents."""
        contents = await self._service.list_content(
            start_after=req.get_param("start_after"),
            limit=req.get_param_as_int("limit"),
        )
        _send(resp, ContentListResponse(contents=contents))


class ContentResource(_RegistryResource):
    """Fetches one content record."""

    async def on_get(self, _req: Request, resp: Response, *, content_id: str) -> None:
        """Handle GET /contents/{content_id}."""
        content = await self._service.get_content(content_id)
        _send(resp, ContentResponse(content=content))


class OwnerContentResource(_RegistryResource):
    """Lists content registered by one owner."""

    async def on_get(self, req: Request, resp: Response, *, owner: str) -> None:
        """Handle GET /owners/{owner}/contents."""
        contents = await self._service.get_content_by_owner(
            owner,
            start_after=req.get_param("start_after"),
            limit=req.get_param_as_int("limit"),
        )
        _send(resp, ContentListResponse(contents=contents))
