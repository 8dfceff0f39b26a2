"""Typed records, messages and projections for the content registry.

All structures are ``msgspec`` structs whose field names are the wire names,
so encoding any of them with ``msgspec.json.encode`` yields the registry's
JSON layout directly.
"""

from __future__ import annotations

import typing as typ

import msgspec

DEFAULT_LIST_LIMIT = 30


class Config(msgspec.Struct, kw_only=True, frozen=True):
    """Registry-wide configuration written once at instantiation.

    Attributes
    ----------
    owner : str
        Identity named as the registry owner.

    """

    owner: str


class Translation(msgspec.Struct, kw_only=True, frozen=True):
    """A completed translation attached to a content record.

    Attributes
    ----------
    language : str
        Language code, always one of the parent's target languages.
    content_hash : str
        Reference to the translated artefact.
    translator : str
        Identity that submitted the translation.
    created_at : int
        Submission time in seconds.

    """

    language: str
    content_hash: str
    translator: str
    created_at: int


class Content(msgspec.Struct, kw_only=True, frozen=True):
    """A registered piece of content.

    Every field except ``translations`` is fixed at registration.
    ``translations`` only ever grows, one entry per language.

    Attributes
    ----------
    owner : str
        Identity that registered the content.
    title : str
        Display title.
    description : str
        Free-form description.
    content_type : str
        Caller-defined content type (for example a MIME type).
    content_hash : str
        Reference to the original artefact.
    target_languages : list[str]
        Languages for which translations may be submitted, in declared order.
    translations : list[Translation]
        Completed translations in submission order.
    created_at : int
        Registration time in seconds.

    """

    owner: str
    title: str
    description: str
    content_type: str
    content_hash: str
    target_languages: list[str] = msgspec.field(default_factory=list)
    translations: list[Translation] = msgspec.field(default_factory=list)
    created_at: int

    def has_translation(self, language: str) -> bool:
        """Return whether ``language`` already has a translation."""
        return any(t.language == language for t in self.translations)

    def accepts_language(self, language: str) -> bool:
        """Return whether ``language`` was declared at registration."""
        return language in self.target_languages


class Env(msgspec.Struct, kw_only=True, frozen=True):
    """Execution environment supplied by the host for a single call."""

    block_time: int


class MessageInfo(msgspec.Struct, kw_only=True, frozen=True):
    """Authenticated caller identity for a single call."""

    sender: str


class InstantiateMsg(msgspec.Struct, kw_only=True, frozen=True):
    """Request to create the registry configuration."""

    owner: str


class RegisterContent(msgspec.Struct, kw_only=True, frozen=True):
    """Mutation registering a new content record."""

    title: str
    description: str
    content_type: str
    content_hash: str
    target_languages: list[str] = msgspec.field(default_factory=list)


class AddTranslation(msgspec.Struct, kw_only=True, frozen=True):
    """Mutation attaching a translation to existing content."""

    content_id: str
    language: str
    content_hash: str


class GetContent(msgspec.Struct, kw_only=True, frozen=True):
    """Query for a single content record."""

    content_id: str


class ListContent(msgspec.Struct, kw_only=True, frozen=True):
    """Query for a page of content in ascending identifier order.

    ``start_after`` is an exclusive bound; ``limit`` defaults to
    ``DEFAULT_LIST_LIMIT``.
    """

    start_after: str | None = None
    limit: int | None = None


class GetContentByOwner(msgspec.Struct, kw_only=True, frozen=True):
    """Query for every content record registered by ``owner``.

    ``start_after`` and ``limit`` are optional; when both are omitted the
    result is unbounded.
    """

    owner: str
    start_after: str | None = None
    limit: int | None = None


type ExecuteMsg = RegisterContent | AddTranslation
type QueryMsg = GetContent | ListContent | GetContentByOwner


class ContentResponse(msgspec.Struct, kw_only=True, frozen=True):
    """Projection returned by ``GetContent``."""

    content: Content


class ContentListResponse(msgspec.Struct, kw_only=True, frozen=True):
    """Projection returned by ``ListContent`` and ``GetContentByOwner``."""

    contents: list[Content] = msgspec.field(default_factory=list)


class Attribute(msgspec.Struct, frozen=True):
    """Key/value pair reported as an observable side effect of a call."""

    key: str
    value: str


class Response(msgspec.Struct, kw_only=True):
    """Result of a mutation: the attributes describing what happened."""

    attributes: list[Attribute] = msgspec.field(default_factory=list)

    def add_attribute(self, key: str, value: str) -> typ.Self:
        """Append an attribute and return ``self`` for chaining."""
        self.attributes.append(Attribute(key, value))
        return self

    def attribute(self, key: str) -> str | None:
        """Return the first value recorded for ``key``, if any."""
        return next((a.value for a in self.attributes if a.key == key), None)

    def as_dict(self) -> dict[str, str]:
        """Return the attributes as a mapping, later keys winning."""
        return {a.key: a.value for a in self.attributes}
