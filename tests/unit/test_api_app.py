"""Unit tests for folio.api.app and the registry HTTP resources.

Usage
-----
Run with pytest::

    pytest tests/unit/test_api_app.py

"""

from __future__ import annotations

from unittest import mock

import falcon
import falcon.asgi
import falcon.testing
import pytest

from folio.api.app import AppDependencies, create_app
from folio.api.middleware import RegistryBootstrap
from folio.registry import (
    AddTranslation,
    Content,
    ContentListResponse,
    ContentNotFoundError,
    DuplicateTranslationError,
    GetContent,
    InvalidLanguageError,
    InvalidPaginationError,
    RegisterContent,
    Response,
    StorageFailureError,
)

SENDER = {"X-Folio-Sender": "alice"}


def _content(title: str = "Guide") -> Content:
    return Content(
        owner="alice",
        title=title,
        description="",
        content_type="text/plain",
        content_hash="h0",
        target_languages=["fr"],
        created_at=10,
    )


@pytest.fixture
def service() -> mock.MagicMock:
    """Build a registry service double with async methods."""
    svc = mock.MagicMock()
    svc.execute = mock.AsyncMock(
        return_value=Response()
        .add_attribute("method", "register_content")
        .add_attribute("content_id", "1")
        .add_attribute("owner", "alice")
    )
    svc.query = mock.AsyncMock(return_value=ContentListResponse(contents=[_content()]))
    svc.get_content = mock.AsyncMock(return_value=_content())
    svc.list_content = mock.AsyncMock(return_value=[_content("a"), _content("b")])
    svc.get_content_by_owner = mock.AsyncMock(return_value=[_content()])
    return svc


@pytest.fixture
def client(service: mock.MagicMock) -> falcon.testing.TestClient:
    """Build a test client with registry routes."""
    return falcon.testing.TestClient(create_app(AppDependencies(registry_service=service)))


class TestCreateApp:
    """Tests for create_app()."""

    def test_health_only(self) -> None:
        """Without a service only the probes are routed."""
        client = falcon.testing.TestClient(create_app())
        assert client.simulate_get("/health").json == {"status": "ok"}
        assert client.simulate_get("/ready").json == {"status": "ready"}
        assert client.simulate_get("/contents").status == falcon.HTTP_404

    def test_returns_falcon_app(self) -> None:
        """create_app() returns a Falcon ASGI App."""
        assert isinstance(create_app(), falcon.asgi.App)

    def test_bootstrap_added_with_engine(self, service: mock.MagicMock) -> None:
        """An engine in the dependencies installs the bootstrap middleware."""
        with mock.patch("folio.api.app.falcon.asgi.App") as app_cls:
            create_app(
                AppDependencies(
                    registry_service=service, engine=mock.MagicMock(), owner="admin"
                )
            )
        middleware = app_cls.call_args.kwargs["middleware"]
        assert len(middleware) == 1
        assert isinstance(middleware[0], RegistryBootstrap)


class TestExecute:
    """Tests for POST /execute."""

    def test_register_content(
        self, client: falcon.testing.TestClient, service: mock.MagicMock
    ) -> None:
        """A decoded mutation is executed for the header's sender."""
        body = {
            "register_content": {
                "title": "Guide",
                "description": "",
                "content_type": "text/plain",
                "content_hash": "h0",
                "target_languages": ["fr"],
            }
        }
        result = client.simulate_post("/execute", json=body, headers=SENDER)

        assert result.status == falcon.HTTP_200
        assert result.json == {
            "attributes": [
                {"key": "method", "value": "register_content"},
                {"key": "content_id", "value": "1"},
                {"key": "owner", "value": "alice"},
            ]
        }
        sender, msg = service.execute.await_args.args
        assert sender == "alice"
        assert isinstance(msg, RegisterContent)
        assert msg.target_languages == ["fr"]

    def test_missing_sender(
        self, client: falcon.testing.TestClient, service: mock.MagicMock
    ) -> None:
        """Mutations without a sender header are refused."""
        result = client.simulate_post("/execute", json={"register_content": {}})
        assert result.status == falcon.HTTP_401
        service.execute.assert_not_awaited()

    def test_undecodable_body(self, client: falcon.testing.TestClient) -> None:
        """Bodies that are not a known variant map to 400."""
        result = client.simulate_post(
            "/execute", json={"transfer": {}}, headers=SENDER
        )
        assert result.status == falcon.HTTP_400
        assert result.json["title"] == "Invalid input"

    @pytest.mark.parametrize(
        ("error", "status", "extra"),
        [
            pytest.param(
                ContentNotFoundError("9"), falcon.HTTP_404, {"content_id": "9"}, id="not_found"
            ),
            pytest.param(
                InvalidLanguageError("1", "es"), falcon.HTTP_400, {"language": "es"}, id="language"
            ),
            pytest.param(
                DuplicateTranslationError("1", "fr"),
                falcon.HTTP_409,
                {"language": "fr"},
                id="duplicate",
            ),
            pytest.param(
                StorageFailureError("AddTranslation", "OperationalError"),
                falcon.HTTP_503,
                {},
                id="storage",
            ),
        ],
    )
    def test_domain_errors(
        self,
        client: falcon.testing.TestClient,
        service: mock.MagicMock,
        error: Exception,
        status: str,
        extra: dict[str, str],
    ) -> None:
        """Registry errors map to their HTTP statuses."""
        service.execute.side_effect = error
        body = {"add_translation": {"content_id": "1", "language": "fr", "content_hash": "h"}}

        result = client.simulate_post("/execute", json=body, headers=SENDER)

        assert result.status == status
        assert set(extra.items()) <= set(result.json.items())
        assert isinstance(service.execute.await_args.args[1], AddTranslation)


class TestQueries:
    """Tests for the query routes."""

    def test_post_query(
        self, client: falcon.testing.TestClient, service: mock.MagicMock
    ) -> None:
        """POST /query decodes and runs any query variant."""
        result = client.simulate_post("/query", json={"get_content": {"content_id": "3"}})
        assert result.status == falcon.HTTP_200
        assert result.json["contents"][0]["title"] == "Guide"
        service.query.assert_awaited_once_with(GetContent(content_id="3"))

    def test_list_contents_params(
        self, client: falcon.testing.TestClient, service: mock.MagicMock
    ) -> None:
        """GET /contents forwards start_after and limit."""
        result = client.simulate_get("/contents", params={"start_after": "5", "limit": "2"})
        assert [c["title"] for c in result.json["contents"]] == ["a", "b"]
        service.list_content.assert_awaited_once_with(start_after="5", limit=2)

    def test_list_contents_defaults(
        self, client: falcon.testing.TestClient, service: mock.MagicMock
    ) -> None:
        """Absent parameters are forwarded as None."""
        client.simulate_get("/contents")
        service.list_content.assert_awaited_once_with(start_after=None, limit=None)

    def test_negative_limit(
        self, client: falcon.testing.TestClient, service: mock.MagicMock
    ) -> None:
        """Pagination errors map to 400."""
        service.list_content.side_effect = InvalidPaginationError("limit", -1)
        result = client.simulate_get("/contents", params={"limit": "-1"})
        assert result.status == falcon.HTTP_400

    def test_get_content(
        self, client: falcon.testing.TestClient, service: mock.MagicMock
    ) -> None:
        """GET /contents/{id} wraps the record in a content response."""
        result = client.simulate_get("/contents/1")
        assert result.json["content"]["owner"] == "alice"
        assert result.json["content"]["translations"] == []
        service.get_content.assert_awaited_once_with("1")

    def test_get_content_missing(
        self, client: falcon.testing.TestClient, service: mock.MagicMock
    ) -> None:
        """Unknown content maps to 404."""
        service.get_content.side_effect = ContentNotFoundError("1")
        assert client.simulate_get("/contents/1").status == falcon.HTTP_404

    def test_owner_contents(
        self, client: falcon.testing.TestClient, service: mock.MagicMock
    ) -> None:
        """GET /owners/{owner}/contents forwards the owner."""
        result = client.simulate_get("/owners/alice/contents")
        assert len(result.json["contents"]) == 1
        service.get_content_by_owner.assert_awaited_once_with(
            "alice", start_after=None, limit=None
        )
