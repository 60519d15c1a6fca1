"""
Tool Catalog.

The catalog is the cross product of resource schemas and the fixed verb
set. It is built once and is the single lookup table the front end uses:

    describe()               -> discovery entries (name, description, parameters)
    resolve("get_book_by_id") -> Operation(Book, getById, GET, /api/v1/Books/{id})
    invoke(name, args, active) -> Result

Tool names follow a REST-ish convention:

    get_books, create_book, get_book_by_id, update_book, delete_book,
    get_authors_by_book_id

Adding a resource only requires a new ResourceSchema; no dispatch code
changes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .errors import FieldIssue, RestBridgeError, UnknownOperation, ValidationError
from .operations import Operation, Verb, build_operations
from .result import Err, Result
from .schema import (
    FieldType,
    ResourceSchema,
    build_create_payload,
    build_patch_payload,
    json_type_name,
)
from .session import ActiveProfile

if TYPE_CHECKING:
    from .dispatcher import OperationDispatcher

logger = logging.getLogger(__name__)


def _article(label: str) -> str:
    return "an" if label[:1] in "aeiou" else "a"


@dataclass(frozen=True, slots=True)
class ParameterSpec:
    """One tool parameter, as shown in discovery output."""

    name: str
    type: FieldType
    required: bool
    description: str

    def describe(self) -> str:
        text = f"{self.type.value} - {self.description}"
        return text if self.required else f"{text} (optional)"

    def to_json_schema(self) -> dict[str, Any]:
        return {"type": self.type.value, "description": self.description}


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    """A named tool bound to one Operation."""

    name: str
    description: str
    operation: Operation
    schema: ResourceSchema
    parameters: tuple[ParameterSpec, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Discovery view, matching the list_tools output format."""
        data: dict[str, Any] = {"name": self.name, "description": self.description}
        if self.parameters:
            data["parameters"] = {p.name: p.describe() for p in self.parameters}
        return data

    def input_schema(self) -> dict[str, Any]:
        """JSON Schema for the tool arguments."""
        return {
            "type": "object",
            "properties": {p.name: p.to_json_schema() for p in self.parameters},
            "required": [p.name for p in self.parameters if p.required],
        }


def _id_parameter(schema: ResourceSchema, action: str) -> ParameterSpec:
    id_spec = schema.get_field(schema.id_field)
    return ParameterSpec(
        name=schema.id_field,
        type=id_spec.type if id_spec else FieldType.NUMBER,
        required=True,
        description=f"ID of the {schema.label} to {action}",
    )


def _entry_for(schema: ResourceSchema, operation: Operation) -> CatalogEntry:
    label = schema.label
    plural = schema.plural_label
    verb = operation.verb

    if verb is Verb.LIST:
        return CatalogEntry(
            name=f"get_{schema.plural_slug}",
            description=f"Get all {plural} from the API",
            operation=operation,
            schema=schema,
        )

    if verb is Verb.CREATE:
        return CatalogEntry(
            name=f"create_{schema.slug}",
            description=f"Create a new {label}",
            operation=operation,
            schema=schema,
            parameters=tuple(
                ParameterSpec(
                    f.name,
                    f.type,
                    f.required and f.create_default is None,
                    f.description or f.name,
                )
                for f in schema.fields
            ),
        )

    if verb is Verb.GET_BY_ID:
        return CatalogEntry(
            name=f"get_{schema.slug}_by_id",
            description=f"Get details of a specific {label} by ID",
            operation=operation,
            schema=schema,
            parameters=(_id_parameter(schema, "retrieve"),),
        )

    if verb is Verb.LIST_BY_RELATION:
        relation = schema.relation
        if relation is None:
            raise ValueError(f"{schema.resource_name} declares no relation")
        param_spec = schema.get_field(relation.param)
        return CatalogEntry(
            name=f"get_{schema.plural_slug}_by_{relation.parent_slug}_id",
            description=f"Get all {plural} for a specific {relation.parent}",
            operation=operation,
            schema=schema,
            parameters=(
                ParameterSpec(
                    relation.param,
                    param_spec.type if param_spec else FieldType.NUMBER,
                    True,
                    f"ID of the {relation.parent} to get {plural} for",
                ),
            ),
        )

    if verb is Verb.UPDATE_BY_ID:
        return CatalogEntry(
            name=f"update_{schema.slug}",
            description=f"Update an existing {label} by ID",
            operation=operation,
            schema=schema,
            parameters=(_id_parameter(schema, "update"),)
            + tuple(
                ParameterSpec(f.name, f.type, False, f.description or f.name)
                for f in schema.fields
                if f.name != schema.id_field
            ),
        )

    return CatalogEntry(
        name=f"delete_{schema.slug}",
        description=f"Delete {_article(label)} {label} by ID",
        operation=operation,
        schema=schema,
        parameters=(_id_parameter(schema, "delete"),),
    )


class ToolCatalog:
    """
    Lookup table of every (resource, verb) tool.

    Example:
        catalog = ToolCatalog(DEFAULT_SCHEMAS)

        for entry in catalog.describe():
            print(entry["name"])

        op = catalog.resolve("get_book_by_id")
        result = await catalog.invoke("get_book_by_id", {"id": 1}, session.active, dispatcher)
    """

    def __init__(self, schemas: Iterable[ResourceSchema]) -> None:
        self._schemas: dict[str, ResourceSchema] = {}
        self._entries: dict[str, CatalogEntry] = {}
        self._by_key: dict[tuple[str, Verb], CatalogEntry] = {}

        for schema in schemas:
            if schema.resource_name in self._schemas:
                raise ValueError(f"Duplicate resource schema '{schema.resource_name}'")
            self._schemas[schema.resource_name] = schema

            for operation in build_operations(schema):
                entry = _entry_for(schema, operation)
                if entry.name in self._entries:
                    raise ValueError(f"Duplicate tool name '{entry.name}'")
                self._entries[entry.name] = entry
                self._by_key[operation.key] = entry

        logger.info(
            f"[catalog] Built {len(self._entries)} operations "
            f"for {len(self._schemas)} resources"
        )

    @property
    def schemas(self) -> list[ResourceSchema]:
        return list(self._schemas.values())

    def describe(self) -> list[dict[str, Any]]:
        """Ordered discovery entries, one per (resource, verb)."""
        return [entry.to_dict() for entry in self._entries.values()]

    def entries(self) -> list[CatalogEntry]:
        return list(self._entries.values())

    def names(self) -> list[str]:
        return list(self._entries.keys())

    def entry(self, name: str) -> CatalogEntry:
        """
        Raises:
            UnknownOperation: If no tool has this name
        """
        entry = self._entries.get(name)
        if entry is None:
            raise UnknownOperation(name)
        return entry

    def resolve(self, name: str) -> Operation:
        """
        Resolve a tool name to its Operation.

        Raises:
            UnknownOperation: If no tool has this name
        """
        return self.entry(name).operation

    def lookup(self, resource_name: str, verb: Verb) -> CatalogEntry:
        """
        Entry for a (resource, verb) pair.

        Raises:
            UnknownOperation: If the pair is not in the catalog
        """
        entry = self._by_key.get((resource_name, verb))
        if entry is None:
            raise UnknownOperation(f"{resource_name}.{verb.value}")
        return entry

    def prepare(
        self, name: str, arguments: Mapping[str, Any]
    ) -> tuple[CatalogEntry, dict[str, Any], dict[str, Any] | None]:
        """
        Validate arguments and split them into path params and payload.

        Returns:
            (entry, path_params, payload)

        Raises:
            UnknownOperation: If the tool name is unknown
            ValidationError: If arguments do not fit the schema
        """
        entry = self.entry(name)
        schema = entry.schema
        verb = entry.operation.verb

        if verb is Verb.LIST:
            return entry, {}, None

        if verb is Verb.CREATE:
            return entry, {}, build_create_payload(schema, arguments)

        if verb is Verb.UPDATE_BY_ID:
            resource_id = arguments.get(schema.id_field)
            payload = build_patch_payload(schema, resource_id, arguments)
            return entry, {schema.id_field: resource_id}, payload

        # getById, deleteById, listByRelation: path parameters only
        path_params: dict[str, Any] = {}
        issues: list[FieldIssue] = []
        for param in entry.parameters:
            value = arguments.get(param.name)
            if value is None:
                issues.append(FieldIssue(param.name, "missing"))
            elif not param.type.accepts(value):
                issues.append(
                    FieldIssue(
                        param.name,
                        f"expected {param.type.value}, got {json_type_name(value)}",
                    )
                )
            else:
                path_params[param.name] = value
        if issues:
            raise ValidationError(schema.resource_name, issues)
        return entry, path_params, None

    async def invoke(
        self,
        name: str,
        arguments: Mapping[str, Any],
        active: ActiveProfile,
        dispatcher: OperationDispatcher,
    ) -> Result:
        """
        Resolve, validate and dispatch a named call.

        Never raises; validation and lookup failures come back as Err
        without any HTTP request being issued.
        """
        try:
            entry, path_params, payload = self.prepare(name, arguments)
        except RestBridgeError as e:
            logger.info(f"[catalog] Rejected {name}: {e}")
            return Err.from_exception(e)

        return await dispatcher.execute(entry.operation, active, path_params, payload)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __repr__(self) -> str:
        return f"<ToolCatalog resources={list(self._schemas)} operations={len(self._entries)}>"
