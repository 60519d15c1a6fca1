"""
Tests for the MCP tool layer.

Tests cover:
- ToolResult and annotation serialization
- ToolRegistry validation
- Resource tool rendering
- System tools (list_tools, list_apis, get_api_info, switch_api, configure_api)
- SessionToolFactory per-session wiring
"""

import json

import pytest

from restbridge.result import DELETED, NOT_FOUND, Err, ErrorKind, Ok
from restbridge.tools import (
    SessionToolFactory,
    Tool,
    ToolAnnotations,
    ToolFactory,
    ToolRegistry,
    ToolRegistryError,
    ToolResult,
)
from restbridge.tools.base import TextContent
from restbridge.tools.resource import ResourceOperationTool


# =============================================================================
# Mock Tool for Testing
# =============================================================================


class MockTool(Tool):
    """Mock tool for registry tests."""

    def __init__(self, name: str = "mock_tool", description: str = "A mock tool", schema=None):
        self._name = name
        self._description = description
        self._schema = schema if schema is not None else {"type": "object", "properties": {}}

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def input_schema(self) -> dict:
        return self._schema

    async def execute(self, arguments: dict) -> ToolResult:
        return ToolResult.success("Mock executed")


@pytest.fixture
def factory(catalog, dispatcher):
    return SessionToolFactory(catalog, dispatcher)


@pytest.fixture
def registry(factory, session):
    return factory.build_registry(session)


# =============================================================================
# ToolResult Tests
# =============================================================================


class TestToolResult:
    def test_success_to_dict(self):
        result = ToolResult.success("ok", structured={"a": 1})

        assert result.to_dict() == {
            "content": [{"type": "text", "text": "ok"}],
            "structuredContent": {"a": 1},
        }

    def test_error_to_dict(self):
        data = ToolResult.error("Error fetching books: boom").to_dict()

        assert data["isError"] is True
        assert data["content"][0]["text"] == "Error fetching books: boom"

    def test_text_accessor(self):
        assert ToolResult.success("hello").text == "hello"

    def test_text_joins_blocks(self):
        result = ToolResult((TextContent("a"), TextContent("b")))

        assert result.text == "a\n\nb"

    def test_annotations_for_http_method(self):
        get = ToolAnnotations.for_http_method("get").to_dict()
        delete = ToolAnnotations.for_http_method("DELETE", title="Delete").to_dict()
        post = ToolAnnotations.for_http_method("POST").to_dict()

        assert get["readOnlyHint"] is True
        assert get["destructiveHint"] is False
        assert delete["destructiveHint"] is True
        assert delete["idempotentHint"] is True
        assert delete["title"] == "Delete"
        assert post["idempotentHint"] is False
        assert "title" not in post


# =============================================================================
# ToolRegistry Tests
# =============================================================================


class TestToolRegistry:
    def test_register_and_get(self):
        registry = ToolRegistry()
        registry.register(MockTool())

        assert "mock_tool" in registry
        assert registry.get_required("mock_tool").name == "mock_tool"
        assert registry.list_names() == ["mock_tool"]

    def test_duplicate_rejected(self):
        registry = ToolRegistry()
        registry.register(MockTool())

        with pytest.raises(ToolRegistryError):
            registry.register(MockTool())

    def test_invalid_schema_rejected(self):
        with pytest.raises(ToolRegistryError):
            ToolRegistry().register(MockTool(schema={"type": "array"}))

    def test_missing_description_rejected(self):
        with pytest.raises(ToolRegistryError):
            ToolRegistry().register(MockTool(description=""))

    def test_unregister(self):
        registry = ToolRegistry()
        registry.register(MockTool())

        assert registry.unregister("mock_tool") is True
        assert registry.unregister("mock_tool") is False
        assert registry.get("mock_tool") is None

    def test_get_required_missing(self):
        with pytest.raises(ToolRegistryError):
            ToolRegistry().get_required("nope")


# =============================================================================
# Factory Tests
# =============================================================================


class TestSessionToolFactory:
    def test_satisfies_protocol(self, factory):
        assert isinstance(factory, ToolFactory)

    def test_tool_set(self, registry, catalog):
        names = registry.list_names()

        assert names[: len(catalog)] == catalog.names()
        assert names[len(catalog):] == [
            "list_apis",
            "get_api_info",
            "switch_api",
            "configure_api",
            "list_tools",
        ]

    def test_mcp_schemas(self, registry):
        schemas = {s["name"]: s for s in registry.to_mcp_schemas()}

        assert schemas["get_book_by_id"]["inputSchema"]["required"] == ["id"]
        assert schemas["get_books"]["annotations"]["readOnlyHint"] is True
        assert schemas["get_books"]["annotations"]["destructiveHint"] is False
        assert schemas["delete_book"]["annotations"]["destructiveHint"] is True
        assert schemas["switch_api"]["annotations"]["readOnlyHint"] is False
        assert schemas["list_apis"]["annotations"]["readOnlyHint"] is True

    def test_registries_are_per_session(self, factory, session_store):
        a = session_store.create()
        b = session_store.create()

        assert factory.build_registry(a) is not factory.build_registry(b)


# =============================================================================
# Resource Tool Tests
# =============================================================================


class TestResourceOperationTool:
    """Rendering of each Result shape."""

    def _tool(self, catalog, dispatcher, session, name):
        return ResourceOperationTool(catalog.entry(name), session, catalog, dispatcher)

    @pytest.mark.asyncio
    async def test_list(self, registry, backend):
        backend.respond(200, json=[{"id": 1}, {"id": 2}])

        result = await registry.get_required("get_books").execute({})

        assert not result.is_error
        assert result.text.startswith("Found 2 books:")
        assert result.structured_content == {"items": [{"id": 1}, {"id": 2}]}

    @pytest.mark.asyncio
    async def test_relation(self, registry, backend):
        backend.respond(200, json=[{"id": 9}])

        result = await registry.get_required("get_authors_by_book_id").execute({"idBook": 3})

        assert result.text.startswith("Found 1 authors for book ID 3:")

    @pytest.mark.asyncio
    async def test_details(self, registry, backend):
        backend.respond(200, json={"id": 1, "title": "Dune"})

        result = await registry.get_required("get_book_by_id").execute({"id": 1})

        assert result.text.startswith("Book details:")
        assert json.loads(result.text.split("\n\n", 1)[1]) == {"id": 1, "title": "Dune"}
        assert result.structured_content == {"id": 1, "title": "Dune"}

    @pytest.mark.asyncio
    async def test_not_found(self, registry, backend):
        backend.respond(404)

        result = await registry.get_required("get_book_by_id").execute({"id": 7})

        assert not result.is_error
        assert result.text == "Book with ID 7 not found"
        assert result.structured_content == {"found": False, "id": 7}

    @pytest.mark.asyncio
    async def test_deleted(self, registry, backend):
        backend.respond(200)

        result = await registry.get_required("delete_cover_photo").execute({"id": 7})

        assert result.text == "Successfully deleted cover photo with ID 7"

    @pytest.mark.asyncio
    async def test_created(self, registry, backend):
        backend.respond(200, json={"id": 5, "userName": "u", "password": "p"})

        result = await registry.get_required("create_user").execute(
            {"id": 5, "userName": "u", "password": "p"}
        )

        assert result.text.startswith("Successfully created user:")

    @pytest.mark.asyncio
    async def test_updated(self, registry, backend):
        backend.respond(200, json={"id": 5, "title": "New"})

        result = await registry.get_required("update_activity").execute({"id": 5, "title": "New"})

        assert result.text.startswith("Successfully updated activity:")

    @pytest.mark.asyncio
    async def test_http_error(self, registry, backend):
        backend.respond(500)

        result = await registry.get_required("get_books").execute({})

        assert result.is_error
        assert result.text == "Error fetching books: HTTP error! status: 500"
        assert result.structured_content["status_code"] == 500

    @pytest.mark.asyncio
    async def test_validation_error(self, registry, backend):
        result = await registry.get_required("create_book").execute({"title": "x"})

        assert result.is_error
        assert result.text.startswith("Error creating book: Invalid input for Book:")
        assert backend.requests == []

    def test_render_phrases(self, catalog, dispatcher, session):
        err = Err(kind=ErrorKind.TRANSPORT, message="down")

        assert (
            self._tool(catalog, dispatcher, session, "get_cover_photos_by_book_id")
            .render(err, {})
            .text
            == "Error fetching cover photos for book: down"
        )
        assert (
            self._tool(catalog, dispatcher, session, "delete_user").render(err, {}).text
            == "Error deleting user: down"
        )
        assert (
            self._tool(catalog, dispatcher, session, "get_user_by_id").render(err, {}).text
            == "Error fetching user: down"
        )

    def test_render_markers(self, catalog, dispatcher, session):
        tool = self._tool(catalog, dispatcher, session, "get_author_by_id")

        assert tool.render(Ok(NOT_FOUND), {"id": 2}).text == "Author with ID 2 not found"
        assert (
            self._tool(catalog, dispatcher, session, "delete_author")
            .render(Ok(DELETED), {"id": 2})
            .text
            == "Successfully deleted author with ID 2"
        )

    @pytest.mark.asyncio
    async def test_follows_session_switch(self, registry, backend, session):
        await registry.get_required("switch_api").execute({"api_name": "ChargeNET"})
        await registry.get_required("configure_api").execute(
            {"base_url": "http://charge.test", "auth_header": "tok"}
        )

        await registry.get_required("get_books").execute({})

        assert str(backend.last.url) == "http://charge.test/api/v1/Books"
        assert backend.last.headers["authorization"] == "Bearer tok"


# =============================================================================
# System Tool Tests
# =============================================================================


class TestSystemTools:
    @pytest.mark.asyncio
    async def test_list_tools(self, registry):
        result = await registry.get_required("list_tools").execute({})
        tools = {t["name"]: t for t in result.structured_content["available_tools"]}

        assert len(tools) == len(registry)
        assert "list_tools" in tools
        assert tools["get_book_by_id"]["parameters"] == {
            "id": "number - ID of the book to retrieve"
        }
        assert "parameters" not in tools["get_books"]

    @pytest.mark.asyncio
    async def test_list_apis(self, registry):
        result = await registry.get_required("list_apis").execute({})
        apis = result.structured_content["apis"]

        assert result.text.startswith("Available APIs (2):")
        assert [a["name"] for a in apis] == ["FakeRESTApi", "ChargeNET"]
        assert [a["active"] for a in apis] == [True, False]

    @pytest.mark.asyncio
    async def test_get_api_info(self, registry, session):
        session.activate("ChargeNET")

        result = await registry.get_required("get_api_info").execute({})

        assert result.text.startswith("Current API: ChargeNET Gen.2 API")
        assert result.structured_content["auth"]["headerName"] == "Authorization"
        assert result.structured_content["authConfigured"] is False
        assert "usageExamples" in result.structured_content

    @pytest.mark.asyncio
    async def test_get_api_info_no_auth(self, registry):
        result = await registry.get_required("get_api_info").execute({})

        assert "auth" not in result.structured_content
        assert result.structured_content["authType"] == "none"

    @pytest.mark.asyncio
    async def test_switch_api(self, registry, session):
        result = await registry.get_required("switch_api").execute({"api_name": "ChargeNET"})

        assert not result.is_error
        assert result.text == "Switched to ChargeNET Gen.2 API (https://api.chargenet.com)"
        assert session.active.name == "ChargeNET"

    @pytest.mark.asyncio
    async def test_switch_api_unknown(self, registry, session):
        result = await registry.get_required("switch_api").execute({"api_name": "Nope"})

        assert result.is_error
        assert result.text.startswith("Error switching API: Unknown API profile 'Nope'")
        assert session.active.name == "FakeRESTApi"

    @pytest.mark.asyncio
    async def test_switch_api_requires_name(self, registry):
        result = await registry.get_required("switch_api").execute({})

        assert result.is_error

    def test_switch_api_schema_lists_profiles(self, registry):
        schema = registry.get_required("switch_api").input_schema

        assert schema["properties"]["api_name"]["enum"] == ["FakeRESTApi", "ChargeNET"]

    @pytest.mark.asyncio
    async def test_configure_api(self, registry, session):
        result = await registry.get_required("configure_api").execute(
            {"base_url": "http://localhost:5000", "auth_type": "apikey", "auth_header": "k"}
        )

        assert not result.is_error
        assert result.text.startswith("Configured Fake REST API:")
        assert session.active.base_url == "http://localhost:5000"
        assert session.active.credential == "k"
        assert "\"k\"" not in result.text

    @pytest.mark.asyncio
    async def test_configure_api_requires_something(self, registry):
        result = await registry.get_required("configure_api").execute({})

        assert result.is_error

    @pytest.mark.asyncio
    async def test_configure_api_bad_auth_type(self, registry, session):
        result = await registry.get_required("configure_api").execute({"auth_type": "digest"})

        assert result.is_error
        assert "digest" in result.text
        assert session.active.auth_kind.value == "none"

    @pytest.mark.asyncio
    async def test_configure_api_bad_url(self, registry):
        result = await registry.get_required("configure_api").execute({"base_url": "ftp://x"})

        assert result.is_error

    @pytest.mark.asyncio
    async def test_configure_api_wrong_type(self, registry):
        result = await registry.get_required("configure_api").execute({"base_url": 42})

        assert result.is_error
        assert "base_url" in result.text

    @pytest.mark.asyncio
    async def test_configure_is_session_scoped(self, factory, session_store):
        a = session_store.create()
        b = session_store.create()

        await factory.build_registry(a).get_required("configure_api").execute(
            {"base_url": "http://only-a.test"}
        )

        assert a.active.base_url == "http://only-a.test"
        assert b.active.base_url == "https://fakerestapi.azurewebsites.net"
