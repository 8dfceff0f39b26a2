"""Mapping helpers between registry structs and database rows."""

from __future__ import annotations

import typing as typ

import msgspec

from folio.registry.models import Content, Translation

if typ.TYPE_CHECKING:
    from folio.registry.storage import ContentRecord


def to_content(record: ContentRecord) -> Content:
    """Convert a ``contents`` row to a :class:`Content` struct.

    Parameters
    ----------
    record
        Row loaded from the ``contents`` table.

    Returns
    -------
    Content
        The content record with its embedded translations.

    """
    return Content(
        owner=record.owner,
        title=record.title,
        description=record.description,
        content_type=record.content_type,
        content_hash=record.content_hash,
        target_languages=list(record.target_languages),
        translations=msgspec.convert(record.translations, list[Translation]),
        created_at=record.created_at,
    )


def apply_content(record: ContentRecord, content: Content) -> None:
    """Overwrite every column of ``record`` from ``content``.

    New lists are assigned so SQLAlchemy detects changes to the JSON
    columns.
    """
    record.owner = content.owner
    record.title = content.title
    record.description = content.description
    record.content_type = content.content_type
    record.content_hash = content.content_hash
    record.target_languages = list(content.target_languages)
    record.translations = typ.cast(
        "list[dict[str, typ.Any]]", msgspec.to_builtins(content.translations)
    )
    record.created_at = content.created_at
