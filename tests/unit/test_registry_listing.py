"""Unit tests for registry queries and pagination."""

from __future__ import annotations

import dataclasses
import typing as typ

import msgspec
import pytest

from folio.registry import (
    DEFAULT_LIST_LIMIT,
    ContentListResponse,
    ContentNotFoundError,
    ContentResponse,
    GetContent,
    GetContentByOwner,
    InvalidPaginationError,
    ListContent,
    MemoryStore,
)
from folio.registry import logic

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    RegisterFn = cabc.Callable[..., str]


def _titles(response: ContentListResponse) -> list[str]:
    return [content.title for content in response.contents]


@pytest.fixture
def twelve(register: RegisterFn) -> list[str]:
    """Register twelve items titled by their identifier."""
    return [register(title=f"item-{n}") for n in range(1, 13)]


@dataclasses.dataclass(frozen=True, slots=True)
class PageParams:
    """ListContent arguments and the expected titles."""

    start_after: str | None
    limit: int | None
    expected: list[str]


LEXICOGRAPHIC = [
    "item-1",
    "item-10",
    "item-11",
    "item-12",
    "item-2",
    "item-3",
    "item-4",
    "item-5",
    "item-6",
    "item-7",
    "item-8",
    "item-9",
]


@pytest.mark.usefixtures("twelve")
@pytest.mark.parametrize(
    "params",
    [
        pytest.param(PageParams(None, None, LEXICOGRAPHIC), id="all"),
        pytest.param(PageParams(None, 3, LEXICOGRAPHIC[:3]), id="first_page"),
        pytest.param(
            PageParams("1", 2, ["item-10", "item-11"]), id="after_one_is_ten"
        ),
        pytest.param(PageParams("5", None, LEXICOGRAPHIC[8:]), id="after_five"),
        pytest.param(PageParams("9", None, []), id="after_last"),
        pytest.param(PageParams("12", 2, ["item-2", "item-3"]), id="after_twelve"),
        pytest.param(PageParams(None, 0, []), id="zero_limit"),
        pytest.param(PageParams("0", 1, ["item-1"]), id="bound_not_a_key"),
    ],
)
def test_list_content_pages(store: MemoryStore, params: PageParams) -> None:
    """ListContent orders identifiers as strings with an exclusive bound."""
    response = logic.list_content(store, params.start_after, params.limit)
    assert _titles(response) == params.expected


def test_list_content_excludes_start_after(
    store: MemoryStore, twelve: list[str]
) -> None:
    """The start_after identifier itself is never returned."""
    response = logic.list_content(store, "5")
    assert "item-5" not in _titles(response)
    assert all(title.removeprefix("item-") > "5" for title in _titles(response))
    assert twelve[4] == "5"


def test_list_content_default_limit(store: MemoryStore, register: RegisterFn) -> None:
    """Without a limit at most DEFAULT_LIST_LIMIT records are returned."""
    for n in range(DEFAULT_LIST_LIMIT + 5):
        register(title=f"t{n}")

    response = logic.list_content(store)

    assert DEFAULT_LIST_LIMIT == 30
    assert len(response.contents) == DEFAULT_LIST_LIMIT
    ids = sorted(str(n) for n in range(1, DEFAULT_LIST_LIMIT + 6))
    expected = [f"t{int(i) - 1}" for i in ids[:DEFAULT_LIST_LIMIT]]
    assert _titles(response) == expected


def test_list_content_empty_registry(store: MemoryStore) -> None:
    """An empty registry lists nothing."""
    assert logic.list_content(store).contents == []


@pytest.mark.parametrize("limit", [-1, 2**32])
def test_list_content_rejects_out_of_range_limit(
    store: MemoryStore, limit: int
) -> None:
    """Limits outside the unsigned 32-bit range are rejected."""
    with pytest.raises(InvalidPaginationError):
        logic.list_content(store, limit=limit)


def test_query_content_returns_record(store: MemoryStore, register: RegisterFn) -> None:
    """GetContent returns the stored record verbatim."""
    content_id = register(title="Atlas")
    response = logic.query(store, GetContent(content_id=content_id))
    assert isinstance(response, ContentResponse)
    assert response.content == store.load_content(content_id)


def test_query_content_missing(store: MemoryStore) -> None:
    """GetContent for an unknown identifier raises ContentNotFoundError."""
    with pytest.raises(ContentNotFoundError):
        logic.query(store, GetContent(content_id="1"))


class TestContentByOwner:
    """Tests for GetContentByOwner."""

    @pytest.fixture
    def mixed(self, register: RegisterFn) -> None:
        """Register content for several owners, crossing the 10 boundary."""
        owners = ["alice", "bob"] * 6
        for n, owner in enumerate(owners, start=1):
            register(owner, title=f"{owner}-{n}")

    @pytest.mark.usefixtures("mixed")
    def test_exact_owner_in_key_order(self, store: MemoryStore) -> None:
        """Only the owner's records are returned, ordered by string key."""
        response = logic.query(store, GetContentByOwner(owner="alice"))
        assert isinstance(response, ContentListResponse)
        assert _titles(response) == [
            "alice-1",
            "alice-11",
            "alice-3",
            "alice-5",
            "alice-7",
            "alice-9",
        ]

    @pytest.mark.usefixtures("mixed")
    def test_unbounded_by_default(self, store: MemoryStore, register: RegisterFn) -> None:
        """The default owner query ignores DEFAULT_LIST_LIMIT."""
        for n in range(DEFAULT_LIST_LIMIT + 1):
            register("carol", title=f"carol-{n}")
        response = logic.query_content_by_owner(store, "carol")
        assert len(response.contents) == DEFAULT_LIST_LIMIT + 1

    @pytest.mark.usefixtures("mixed")
    @pytest.mark.parametrize("owner", ["nobody", "Alice", "alic"])
    def test_no_match(self, store: MemoryStore, owner: str) -> None:
        """Owners are matched exactly; no match yields an empty list."""
        assert logic.query_content_by_owner(store, owner).contents == []

    @pytest.mark.usefixtures("mixed")
    def test_optional_pagination(self, store: MemoryStore) -> None:
        """start_after and limit page through one owner's records."""
        response = logic.query_content_by_owner(store, "bob", start_after="10", limit=2)
        assert _titles(response) == ["bob-12", "bob-2"]


def test_query_binary_encodes_projection(
    store: MemoryStore, register: RegisterFn
) -> None:
    """query_binary returns the JSON encoding of the projection."""
    register(title="Atlas")
    payload = logic.query_binary(store, ListContent(limit=1))
    decoded = msgspec.json.decode(payload)
    assert decoded["contents"][0]["title"] == "Atlas"
    assert decoded["contents"][0]["translations"] == []
