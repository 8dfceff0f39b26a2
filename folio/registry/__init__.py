"""Content registry: registration, translations and ordered listing.

The registry assigns each piece of content a sequential identifier,
accepts at most one translation per declared target language, and lists
content in ascending identifier order.  It provides:

- Pure logic over a pluggable ordered key-value store (``logic``)
- In-memory and SQLAlchemy store implementations (``storage``)
- An async service running each call in one transaction (``service``)
- Externally tagged JSON message decoding (``codec``)

Usage
-----
Register content and add a translation::

    from folio.registry import ContentRegistryService, RegisterContent, AddTranslation

    service = ContentRegistryService(session_factory)
    await service.instantiate(sender="admin", owner="admin")
    content_id = await service.register_content(
        "alice",
        RegisterContent(
            title="Guide",
            description="Getting started",
            content_type="text/markdown",
            content_hash="bafy...",
            target_languages=["fr", "de"],
        ),
    )
    await service.add_translation(
        "bob",
        AddTranslation(content_id=content_id, language="fr", content_hash="bafz..."),
    )

Page through content::

    page = await service.list_content(start_after="5", limit=10)

"""

from folio.registry.errors import (
    ContentNotFoundError,
    DuplicateTranslationError,
    InvalidLanguageError,
    InvalidPaginationError,
    RegistryError,
    StorageFailureError,
)
from folio.registry.models import (
    DEFAULT_LIST_LIMIT,
    AddTranslation,
    Config,
    Content,
    ContentListResponse,
    ContentResponse,
    Env,
    GetContent,
    GetContentByOwner,
    InstantiateMsg,
    ListContent,
    MessageInfo,
    RegisterContent,
    Response,
    Translation,
)
from folio.registry.service import ContentRegistryService
from folio.registry.storage import MemoryStore, SqlAlchemyStore, init_registry_storage

__all__ = [
    "DEFAULT_LIST_LIMIT",
    "AddTranslation",
    "Config",
    "Content",
    "ContentListResponse",
    "ContentNotFoundError",
    "ContentRegistryService",
    "ContentResponse",
    "DuplicateTranslationError",
    "Env",
    "GetContent",
    "GetContentByOwner",
    "InstantiateMsg",
    "InvalidLanguageError",
    "InvalidPaginationError",
    "ListContent",
    "MemoryStore",
    "MessageInfo",
    "RegisterContent",
    "RegistryError",
    "Response",
    "SqlAlchemyStore",
    "StorageFailureError",
    "Translation",
    "init_registry_storage",
]
