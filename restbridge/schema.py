"""
Resource schemas and payload building.

A ResourceSchema declares the field shape of one REST resource. It is the
only per-resource input the adapter needs: tool parameters, request bodies
and validation are all derived from it.

Payload rules:
    create  - every required field present and type-correct, unknown fields
              dropped, declared field order preserved, declared create
              defaults filled in for absent optional fields
    update  - identifier plus ONLY the fields the caller supplied; absent
              fields are never defaulted or sent as null

Validation reports every problem at once:

    ValidationError: Invalid input for Book: title: missing; pageCount: expected number, got string

Usage:
    payload = build_create_payload(BOOK, {"id": 1, "title": "T", ...})
    patch = build_patch_payload(BOOK, 1, {"title": "New"})
    # {"id": 1, "title": "New"}
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import FieldIssue, ValidationError

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def snake_case(name: str) -> str:
    """CoverPhoto -> cover_photo"""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def human_label(name: str) -> str:
    """CoverPhoto -> cover photo"""
    return _CAMEL_BOUNDARY.sub(" ", name).lower()


class FieldType(str, Enum):
    """Primitive JSON types a field may hold."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"

    def accepts(self, value: Any) -> bool:
        if self is FieldType.STRING:
            return isinstance(value, str)
        if self is FieldType.BOOLEAN:
            return isinstance(value, bool)
        # bool is an int subclass but never a number here
        return isinstance(value, (int, float)) and not isinstance(value, bool)


def json_type_name(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """
    One declared field of a resource.

    Attributes:
        name: Field name as sent on the wire
        type: Primitive type
        required: Must be present on create
        description: Shown in tool parameter specs
        create_default: Factory for a value used on create when the caller
            omits the field (never applied to updates)
    """

    name: str
    type: FieldType
    required: bool = True
    description: str = ""
    create_default: Callable[[], Any] | None = field(default=None, compare=False)

    def describe(self, *, optional: bool = False) -> str:
        """Parameter description in the "type - text (optional)" style."""
        text = f"{self.type.value} - {self.description or self.name}"
        if optional or not self.required:
            text += " (optional)"
        return text


@dataclass(frozen=True, slots=True)
class RelationSpec:
    """
    A "list children by parent id" endpoint, e.g. authors of a book.

    Attributes:
        param: Placeholder/argument name (e.g. "idBook")
        path: Path appended to the collection path, containing {param}
        parent: Human label of the parent resource (e.g. "book")
    """

    param: str
    path: str
    parent: str

    @property
    def parent_slug(self) -> str:
        return snake_case(self.parent.replace(" ", ""))


@dataclass(frozen=True, slots=True)
class ResourceSchema:
    """
    Declared shape of one REST resource.

    Attributes:
        resource_name: Singular CamelCase name (e.g. "CoverPhoto")
        plural: Plural CamelCase name (e.g. "CoverPhotos")
        collection_path: Path of the collection (e.g. "/api/v1/CoverPhotos")
        fields: Ordered field declarations
        id_field: Name of the identifier field
        relation: Optional list-by-parent endpoint
    """

    resource_name: str
    plural: str
    collection_path: str
    fields: tuple[FieldSpec, ...]
    id_field: str = "id"
    relation: RelationSpec | None = None

    def __post_init__(self) -> None:
        names = [f.name for f in self.fields]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(
                f"Duplicate field(s) {duplicates} in schema {self.resource_name}"
            )

    @property
    def slug(self) -> str:
        return snake_case(self.resource_name)

    @property
    def plural_slug(self) -> str:
        return snake_case(self.plural)

    @property
    def label(self) -> str:
        return human_label(self.resource_name)

    @property
    def plural_label(self) -> str:
        return human_label(self.plural)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def get_field(self, name: str) -> FieldSpec | None:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None


def _present(inputs: Mapping[str, Any], name: str) -> bool:
    return name in inputs and inputs[name] is not None


def build_create_payload(schema: ResourceSchema, inputs: Mapping[str, Any]) -> dict[str, Any]:
    """
    Build the JSON body for creating a resource.

    Raises:
        ValidationError: Listing every missing or mistyped field
    """
    issues: list[FieldIssue] = []
    payload: dict[str, Any] = {}

    for spec in schema.fields:
        if not _present(inputs, spec.name):
            if spec.create_default is not None:
                payload[spec.name] = spec.create_default()
            elif spec.required:
                issues.append(FieldIssue(spec.name, "missing"))
            continue

        value = inputs[spec.name]
        if not spec.type.accepts(value):
            issues.append(
                FieldIssue(
                    spec.name,
                    f"expected {spec.type.value}, got {json_type_name(value)}",
                )
            )
            continue
        payload[spec.name] = value

    if issues:
        raise ValidationError(schema.resource_name, issues)
    return payload


def build_patch_payload(
    schema: ResourceSchema, resource_id: Any, inputs: Mapping[str, Any]
) -> dict[str, Any]:
    """
    Build the JSON body for updating a resource.

    The identifier comes first, followed by the caller-supplied fields in
    declared order. Fields not mentioned by the caller are left out.

    Raises:
        ValidationError: If the id or a supplied field has the wrong type
    """
    issues: list[FieldIssue] = []

    id_spec = schema.get_field(schema.id_field)
    if resource_id is None:
        issues.append(FieldIssue(schema.id_field, "missing"))
    elif id_spec is not None and not id_spec.type.accepts(resource_id):
        issues.append(
            FieldIssue(
                schema.id_field,
                f"expected {id_spec.type.value}, got {json_type_name(resource_id)}",
            )
        )

    payload: dict[str, Any] = {schema.id_field: resource_id}
    for spec in schema.fields:
        if spec.name == schema.id_field or not _present(inputs, spec.name):
            continue
        value = inputs[spec.name]
        if not spec.type.accepts(value):
            issues.append(
                FieldIssue(
                    spec.name,
                    f"expected {spec.type.value}, got {json_type_name(value)}",
                )
            )
            continue
        payload[spec.name] = value

    if issues:
        raise ValidationError(schema.resource_name, issues)
    return payload
