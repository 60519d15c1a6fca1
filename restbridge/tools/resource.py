"""
Resource operation tools.

ResourceOperationTool exposes one catalog entry (e.g. get_book_by_id) as a
Tool bound to a caller's session. Execution goes through the catalog and
dispatcher; this module only renders the Result as text:

    Found 2 books:\\n\\n[...]
    Book details:\\n\\n{...}
    Book with ID 7 not found
    Successfully deleted book with ID 7
    Error fetching books: HTTP error! status: 500
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from restbridge.operations import Verb
from restbridge.result import Err, Ok, Result
from restbridge.tools.base import Tool, ToolAnnotations, ToolResult

if TYPE_CHECKING:
    from restbridge.catalog import CatalogEntry, ToolCatalog
    from restbridge.dispatcher import OperationDispatcher
    from restbridge.session import ApiSession

logger = logging.getLogger(__name__)


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _count(data: Any) -> int:
    if isinstance(data, list):
        return len(data)
    return 0 if data is None else 1


class ResourceOperationTool(Tool):
    """
    A Tool for one (resource, verb) catalog entry.

    The tool holds a reference to its session, not a copy of the session's
    configuration: a switch_api or configure_api call in the same session
    is visible to the next execute().

    Example:
        tool = ResourceOperationTool(
            catalog.entry("get_book_by_id"), session, catalog, dispatcher
        )
        result = await tool.execute({"id": 1})
        print(result.text)  # "Book details: ..."
    """

    def __init__(
        self,
        entry: CatalogEntry,
        session: ApiSession,
        catalog: ToolCatalog,
        dispatcher: OperationDispatcher,
    ) -> None:
        self._entry = entry
        self._session = session
        self._catalog = catalog
        self._dispatcher = dispatcher

    @property
    def name(self) -> str:
        return self._entry.name

    @property
    def description(self) -> str:
        return self._entry.description

    @property
    def input_schema(self) -> dict[str, Any]:
        return self._entry.input_schema()

    @property
    def annotations(self) -> ToolAnnotations:
        return ToolAnnotations.for_http_method(
            self._entry.operation.http_method, title=self._entry.description
        )

    async def execute(self, arguments: dict[str, Any]) -> ToolResult:
        result = await self._catalog.invoke(
            self.name, arguments, self._session.active, self._dispatcher
        )
        return self.render(result, arguments)

    def render(self, result: Result, arguments: dict[str, Any]) -> ToolResult:
        """Turn a Result into the text the caller sees."""
        if isinstance(result, Err):
            logger.info(f"[tool:{self.name}] {result.kind.value}: {result.message}")
            return ToolResult.error(
                f"Error {self._failure_phrase()}: {result.message}",
                structured=result.to_dict(),
            )
        return self._render_ok(result, arguments)

    def _failure_phrase(self) -> str:
        schema = self._entry.schema
        verb = self._entry.operation.verb
        if verb is Verb.LIST:
            return f"fetching {schema.plural_label}"
        if verb is Verb.LIST_BY_RELATION and schema.relation is not None:
            return f"fetching {schema.plural_label} for {schema.relation.parent}"
        if verb is Verb.CREATE:
            return f"creating {schema.label}"
        if verb is Verb.UPDATE_BY_ID:
            return f"updating {schema.label}"
        if verb is Verb.DELETE_BY_ID:
            return f"deleting {schema.label}"
        return f"fetching {schema.label}"

    def _render_ok(self, result: Ok, arguments: dict[str, Any]) -> ToolResult:
        schema = self._entry.schema
        verb = self._entry.operation.verb
        data = result.payload
        resource_id = arguments.get(schema.id_field)

        if verb is Verb.GET_BY_ID and result.is_not_found:
            return ToolResult.success(
                f"{schema.label.capitalize()} with ID {resource_id} not found",
                structured={"found": False, schema.id_field: resource_id},
            )

        if verb is Verb.DELETE_BY_ID:
            return ToolResult.success(
                f"Successfully deleted {schema.label} with ID {resource_id}",
                structured={"deleted": True, schema.id_field: resource_id},
            )

        structured = data if isinstance(data, dict) else {"items": data}

        if verb is Verb.LIST:
            text = f"Found {_count(data)} {schema.plural_label}:\n\n{_dump(data)}"
        elif verb is Verb.LIST_BY_RELATION and schema.relation is not None:
            parent_id = arguments.get(schema.relation.param)
            text = (
                f"Found {_count(data)} {schema.plural_label} for "
                f"{schema.relation.parent} ID {parent_id}:\n\n{_dump(data)}"
            )
        elif verb is Verb.CREATE:
            text = f"Successfully created {schema.label}:\n\n{_dump(data)}"
        elif verb is Verb.UPDATE_BY_ID:
            text = f"Successfully updated {schema.label}:\n\n{_dump(data)}"
        else:
            text = f"{schema.label.capitalize()} details:\n\n{_dump(data)}"

        return ToolResult.success(text, structured=structured)
