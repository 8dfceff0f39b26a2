"""Validation and state transitions for the content registry.

Every function here takes a :class:`~folio.registry.storage.RegistryStore`
and the decoded request, reads what it needs, validates, and then writes.
Validation always completes before the first write, so a rejected
mutation leaves the store untouched even without a surrounding
transaction.

Example:
-------
Register content and translate it::

    store = MemoryStore()
    instantiate(store, Env(block_time=0), MessageInfo(sender="admin"),
                InstantiateMsg(owner="admin"))
    resp = execute(store, Env(block_time=10), MessageInfo(sender="alice"),
                   RegisterContent(title="Guide", description="", content_type="text/plain",
                                   content_hash="h0", target_languages=["fr"]))
    content_id = resp.attribute("content_id")  # "1"

"""

from __future__ import annotations

import itertools
import typing as typ

import msgspec

from folio.registry.errors import (
    ContentNotFoundError,
    DuplicateTranslationError,
    InvalidLanguageError,
    InvalidPaginationError,
    StorageFailureError,
)
from folio.registry.models import (
    DEFAULT_LIST_LIMIT,
    AddTranslation,
    Config,
    Content,
    ContentListResponse,
    ContentResponse,
    GetContent,
    GetContentByOwner,
    ListContent,
    RegisterContent,
    Response,
    Translation,
)
from folio.registry.storage import COUNTER_KEY

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from folio.registry.models import (
        Env,
        ExecuteMsg,
        InstantiateMsg,
        MessageInfo,
        QueryMsg,
    )
    from folio.registry.storage import RegistryStore

MAX_LIMIT = 2**32 - 1


def instantiate(
    store: RegistryStore,
    _env: Env,
    info: MessageInfo,
    msg: InstantiateMsg,
) -> Response:
    """Write the configuration and reset the content counter to zero.

    The reported ``owner`` attribute is the calling identity, which may
    differ from the configured owner.
    """
    store.save_config(Config(owner=msg.owner))
    store.save_counter(0)
    return (
        Response()
        .add_attribute("method", "instantiate")
        .add_attribute("owner", info.sender)
    )


def _next_content_id(store: RegistryStore) -> tuple[int, str]:
    count = store.load_counter()
    if count is None:
        raise StorageFailureError.missing_singleton(COUNTER_KEY)
    count += 1
    return count, str(count)


def execute_register_content(
    store: RegistryStore,
    env: Env,
    info: MessageInfo,
    msg: RegisterContent,
) -> Response:
    """Register new content under the next identifier.

    ``target_languages`` is stored exactly as given: duplicates and an
    empty list are both accepted.

    Returns
    -------
    Response
        Attributes ``method``, ``content_id`` and ``owner``.

    Raises
    ------
    StorageFailureError
        If the counter is missing or the store fails.

    """
    count, content_id = _next_content_id(store)
    content = Content(
        owner=info.sender,
        title=msg.title,
        description=msg.description,
        content_type=msg.content_type,
        content_hash=msg.content_hash,
        target_languages=list(msg.target_languages),
        translations=[],
        created_at=env.block_time,
    )
    store.save_content(content_id, content)
    store.save_counter(count)
    return (
        Response()
        .add_attribute("method", "register_content")
        .add_attribute("content_id", content_id)
        .add_attribute("owner", info.sender)
    )


def _load_content(store: RegistryStore, content_id: str) -> Content:
    content = store.load_content(content_id)
    if content is None:
        raise ContentNotFoundError(content_id)
    return content


def execute_add_translation(
    store: RegistryStore,
    env: Env,
    info: MessageInfo,
    msg: AddTranslation,
) -> Response:
    """Append a translation for one of the content's target languages.

    Any identity may translate any content.

    Returns
    -------
    Response
        Attributes ``method``, ``content_id`` and ``language``.

    Raises
    ------
    ContentNotFoundError
        If ``msg.content_id`` is not registered.
    InvalidLanguageError
        If ``msg.language`` is not a target language of the content.
    DuplicateTranslationError
        If ``msg.language`` already has a translation.

    """
    content = _load_content(store, msg.content_id)

    if not content.accepts_language(msg.language):
        raise InvalidLanguageError(msg.content_id, msg.language)

    if content.has_translation(msg.language):
        raise DuplicateTranslationError(msg.content_id, msg.language)

    translation = Translation(
        language=msg.language,
        content_hash=msg.content_hash,
        translator=info.sender,
        created_at=env.block_time,
    )
    updated = msgspec.structs.replace(
        content, translations=[*content.translations, translation]
    )
    store.save_content(msg.content_id, updated)
    return (
        Response()
        .add_attribute("method", "add_translation")
        .add_attribute("content_id", msg.content_id)
        .add_attribute("language", msg.language)
    )


def execute(
    store: RegistryStore,
    env: Env,
    info: MessageInfo,
    msg: ExecuteMsg,
) -> Response:
    """Route a mutation to its handler."""
    match msg:
        case RegisterContent():
            return execute_register_content(store, env, info, msg)
        case AddTranslation():
            return execute_add_translation(store, env, info, msg)
        case _:
            raise TypeError(f"unsupported execute message: {type(msg).__name__}")


def query_content(store: RegistryStore, content_id: str) -> ContentResponse:
    """Return the content stored under ``content_id``.

    Raises
    ------
    ContentNotFoundError
        If nothing is stored under ``content_id``.

    """
    return ContentResponse(content=_load_content(store, content_id))


def _validate_limit(limit: int | None) -> None:
    if limit is not None and not 0 <= limit <= MAX_LIMIT:
        raise InvalidPaginationError("limit", limit)


def list_content(
    store: RegistryStore,
    start_after: str | None = None,
    limit: int | None = None,
) -> ContentListResponse:
    """Return up to ``limit`` records keyed strictly after ``start_after``.

    Keys compare as strings, so after ``"1"`` come ``"10"``, ``"11"``, ...
    before ``"2"``.  ``limit`` defaults to ``DEFAULT_LIST_LIMIT``.

    Raises
    ------
    InvalidPaginationError
        If ``limit`` is negative or exceeds the unsigned 32-bit range.

    """
    _validate_limit(limit)
    effective = DEFAULT_LIST_LIMIT if limit is None else limit
    pairs = store.scan_contents(start_after, effective)
    return ContentListResponse(contents=[content for _, content in pairs])


def query_content_by_owner(
    store: RegistryStore,
    owner: str,
    start_after: str | None = None,
    limit: int | None = None,
) -> ContentListResponse:
    """Return the content registered by ``owner`` in ascending key order.

    The whole key space is scanned.  Without ``limit`` every match is
    returned.
    """
    _validate_limit(limit)
    matches: cabc.Iterator[Content] = (
        content
        for _, content in store.scan_contents(start_after)
        if content.owner == owner
    )
    if limit is not None:
        matches = itertools.islice(matches, limit)
    return ContentListResponse(contents=list(matches))


def query(
    store: RegistryStore,
    msg: QueryMsg,
) -> ContentResponse | ContentListResponse:
    """Route a query to its handler and return the typed projection."""
    match msg:
        case GetContent(content_id=content_id):
            return query_content(store, content_id)
        case ListContent(start_after=start_after, limit=limit):
            return list_content(store, start_after, limit)
        case GetContentByOwner(owner=owner, start_after=start_after, limit=limit):
            return query_content_by_owner(store, owner, start_after, limit)
        case _:
            raise TypeError(f"unsupported query message: {type(msg).__name__}")


def query_binary(store: RegistryStore, msg: QueryMsg) -> bytes:
    """Run :func:`query` and JSON-encode the projection."""
    return msgspec.json.encode(query(store, msg))
