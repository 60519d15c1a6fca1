"""
Operations: (resource, verb) -> HTTP method + path template.

The verb set is fixed. Every resource gets list/create/getById/updateById/
deleteById; resources declaring a relation also get listByRelation.

    Verb             Method   Path
    list             GET      {collection}
    create           POST     {collection}
    getById          GET      {collection}/{id}
    updateById       PUT      {collection}/{id}
    deleteById       DELETE   {collection}/{id}
    listByRelation   GET      {collection}{relation.path}
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from .schema import ResourceSchema

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


class Verb(str, Enum):
    """CRUD verbs every resource supports."""

    LIST = "list"
    CREATE = "create"
    GET_BY_ID = "getById"
    UPDATE_BY_ID = "updateById"
    DELETE_BY_ID = "deleteById"
    LIST_BY_RELATION = "listByRelation"


_METHODS: dict[Verb, str] = {
    Verb.LIST: "GET",
    Verb.CREATE: "POST",
    Verb.GET_BY_ID: "GET",
    Verb.UPDATE_BY_ID: "PUT",
    Verb.DELETE_BY_ID: "DELETE",
    Verb.LIST_BY_RELATION: "GET",
}


@dataclass(frozen=True, slots=True)
class Operation:
    """
    One (resource, verb) pairing.

    Attributes:
        resource_name: Name of the ResourceSchema
        verb: CRUD verb
        http_method: GET, POST, PUT or DELETE
        path_template: Path with optional {placeholders}
    """

    resource_name: str
    verb: Verb
    http_method: str
    path_template: str

    @property
    def placeholders(self) -> tuple[str, ...]:
        return tuple(_PLACEHOLDER.findall(self.path_template))

    @property
    def is_read(self) -> bool:
        return self.http_method == "GET"

    @property
    def has_body(self) -> bool:
        return self.verb in (Verb.CREATE, Verb.UPDATE_BY_ID)

    @property
    def key(self) -> tuple[str, Verb]:
        return self.resource_name, self.verb


def build_operations(schema: ResourceSchema) -> tuple[Operation, ...]:
    """All operations a resource supports, in catalog order."""
    collection = schema.collection_path.rstrip("/")
    item = f"{collection}/{{{schema.id_field}}}"

    paths: list[tuple[Verb, str]] = [
        (Verb.LIST, collection),
        (Verb.CREATE, collection),
        (Verb.GET_BY_ID, item),
    ]
    if schema.relation is not None:
        paths.append((Verb.LIST_BY_RELATION, f"{collection}{schema.relation.path}"))
    paths += [
        (Verb.UPDATE_BY_ID, item),
        (Verb.DELETE_BY_ID, item),
    ]

    return tuple(
        Operation(
            resource_name=schema.resource_name,
            verb=verb,
            http_method=_METHODS[verb],
            path_template=path,
        )
        for verb, path in paths
    )
