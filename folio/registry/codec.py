"""JSON codec for registry messages.

Messages travel externally tagged with snake_case variant names::

    {"register_content": {"title": "...", "target_languages": ["fr"]}}
    {"list_content": {"start_after": "5", "limit": 10}}

Decoding validates the payload against the matching struct; any problem
surfaces as :class:`MessageDecodeError`.
"""

from __future__ import annotations

import typing as typ

import msgspec

from folio.registry.models import (
    AddTranslation,
    GetContent,
    GetContentByOwner,
    InstantiateMsg,
    ListContent,
    RegisterContent,
)

if typ.TYPE_CHECKING:
    from folio.registry.models import ExecuteMsg, QueryMsg

EXECUTE_VARIANTS: dict[str, type[msgspec.Struct]] = {
    "register_content": RegisterContent,
    "add_translation": AddTranslation,
}
QUERY_VARIANTS: dict[str, type[msgspec.Struct]] = {
    "get_content": GetContent,
    "list_content": ListContent,
    "get_content_by_owner": GetContentByOwner,
}

_envelope_decoder = msgspec.json.Decoder(dict[str, dict[str, typ.Any]])


class MessageDecodeError(ValueError):
    """Raised when a message body cannot be decoded."""

    def __init__(self, reason: str, *, variant: str | None = None) -> None:
        """Initialise with the failure reason and the variant, if known."""
        self.reason = reason
        self.variant = variant
        message = f"{variant}: {reason}" if variant is not None else reason
        super().__init__(message)


def _decode_variant(
    payload: bytes | str,
    variants: dict[str, type[msgspec.Struct]],
) -> msgspec.Struct:
    try:
        envelope = _envelope_decoder.decode(payload)
    except msgspec.DecodeError as exc:
        raise MessageDecodeError(str(exc)) from exc

    if len(envelope) != 1:
        msg = f"expected exactly one variant, got {len(envelope)}"
        raise MessageDecodeError(msg)

    ((tag, fields),) = envelope.items()
    struct_type = variants.get(tag)
    if struct_type is None:
        expected = ", ".join(sorted(variants))
        msg = f"unknown variant (expected one of: {expected})"
        raise MessageDecodeError(msg, variant=tag)

    try:
        return msgspec.convert(fields, struct_type)
    except msgspec.ValidationError as exc:
        raise MessageDecodeError(str(exc), variant=tag) from exc


def decode_execute_msg(payload: bytes | str) -> ExecuteMsg:
    """Decode an externally tagged mutation message."""
    return typ.cast("ExecuteMsg", _decode_variant(payload, EXECUTE_VARIANTS))


def decode_query_msg(payload: bytes | str) -> QueryMsg:
    """Decode an externally tagged query message."""
    return typ.cast("QueryMsg", _decode_variant(payload, QUERY_VARIANTS))


def decode_instantiate_msg(payload: bytes | str) -> InstantiateMsg:
    """Decode an instantiation message (untagged)."""
    try:
        return msgspec.json.decode(payload, type=InstantiateMsg)
    except (msgspec.DecodeError, msgspec.ValidationError) as exc:
        raise MessageDecodeError(str(exc)) from exc


def _tag_for(msg: msgspec.Struct, variants: dict[str, type[msgspec.Struct]]) -> str:
    for tag, struct_type in variants.items():
        if type(msg) is struct_type:
            return tag
    raise TypeError(f"unsupported message: {type(msg).__name__}")


def encode_msg(msg: ExecuteMsg | QueryMsg) -> bytes:
    """Encode a mutation or query message in its externally tagged form."""
    tag = _tag_for(msg, EXECUTE_VARIANTS | QUERY_VARIANTS)
    return msgspec.json.encode({tag: msg})


def encode(value: object) -> bytes:
    """JSON-encode a response or projection."""
    return msgspec.json.encode(value)
