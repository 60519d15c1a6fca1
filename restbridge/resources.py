"""
Built-in resource schemas (FakeRESTApi).

Adding a resource means adding one ResourceSchema here; the catalog derives
every tool and request shape from it.
"""

from __future__ import annotations

from datetime import datetime, timezone

from .schema import FieldSpec, FieldType, RelationSpec, ResourceSchema


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _false() -> bool:
    return False


ACTIVITY = ResourceSchema(
    resource_name="Activity",
    plural="Activities",
    collection_path="/api/v1/Activities",
    fields=(
        FieldSpec("id", FieldType.NUMBER, required=False, description="Activity ID"),
        FieldSpec("title", FieldType.STRING, description="Activity title"),
        FieldSpec(
            "dueDate",
            FieldType.STRING,
            required=False,
            description="Due date in ISO format",
            create_default=_utc_now_iso,
        ),
        FieldSpec(
            "completed",
            FieldType.BOOLEAN,
            required=False,
            description="Whether the activity is completed",
            create_default=_false,
        ),
    ),
)

AUTHOR = ResourceSchema(
    resource_name="Author",
    plural="Authors",
    collection_path="/api/v1/Authors",
    fields=(
        FieldSpec("id", FieldType.NUMBER, description="Author ID"),
        FieldSpec("idBook", FieldType.NUMBER, description="Book ID this author is associated with"),
        FieldSpec("firstName", FieldType.STRING, description="Author's first name"),
        FieldSpec("lastName", FieldType.STRING, description="Author's last name"),
    ),
    relation=RelationSpec(param="idBook", path="/authors/books/{idBook}", parent="book"),
)

BOOK = ResourceSchema(
    resource_name="Book",
    plural="Books",
    collection_path="/api/v1/Books",
    fields=(
        FieldSpec("id", FieldType.NUMBER, description="Book ID"),
        FieldSpec("title", FieldType.STRING, description="Book title"),
        FieldSpec("description", FieldType.STRING, description="Book description"),
        FieldSpec("pageCount", FieldType.NUMBER, description="Number of pages"),
        FieldSpec("excerpt", FieldType.STRING, description="Book excerpt"),
        FieldSpec("publishDate", FieldType.STRING, description="Publish date in ISO format"),
    ),
)

COVER_PHOTO = ResourceSchema(
    resource_name="CoverPhoto",
    plural="CoverPhotos",
    collection_path="/api/v1/CoverPhotos",
    fields=(
        FieldSpec("id", FieldType.NUMBER, description="Cover photo ID"),
        FieldSpec("idBook", FieldType.NUMBER, description="Book ID this cover is for"),
        FieldSpec("url", FieldType.STRING, description="URL of the cover photo"),
    ),
    relation=RelationSpec(param="idBook", path="/books/covers/{idBook}", parent="book"),
)

USER = ResourceSchema(
    resource_name="User",
    plural="Users",
    collection_path="/api/v1/Users",
    fields=(
        FieldSpec("id", FieldType.NUMBER, description="User ID"),
        FieldSpec("userName", FieldType.STRING, description="Username"),
        FieldSpec("password", FieldType.STRING, description="User password"),
    ),
)


DEFAULT_SCHEMAS: tuple[ResourceSchema, ...] = (ACTIVITY, AUTHOR, BOOK, COVER_PHOTO, USER)
