"""
restbridge - expose a REST resource API as MCP-style tools.

A single data-driven engine maps (resource, verb) pairs onto HTTP requests:

- **Resource Schemas**: declared fields drive validation and request bodies
- **Tool Catalog**: every (resource x verb) tool, built from the schemas
- **Operation Dispatcher**: one HTTP call per invocation, normalized into a Result
- **API Profiles**: named backends with auth templates, switchable per session

Quick Start:
    >>> from restbridge import (
    ...     ApiProfileRegistry, SessionStore, ToolCatalog, OperationDispatcher,
    ...     DEFAULT_SCHEMAS,
    ... )
    >>>
    >>> catalog = ToolCatalog(DEFAULT_SCHEMAS)
    >>> dispatcher = OperationDispatcher(timeout=10.0)
    >>> session = SessionStore(ApiProfileRegistry.default()).create()
    >>>
    >>> result = await catalog.invoke("get_book_by_id", {"id": 1}, session.active, dispatcher)
"""

__version__ = "0.1.0"
__license__ = "MIT"

from restbridge.auth import AuthKind, AuthTemplate, AuthTemplateRegistry
from restbridge.catalog import CatalogEntry, ToolCatalog
from restbridge.dispatcher import OperationDispatcher
from restbridge.errors import (
    HttpError,
    InvalidPath,
    RestBridgeError,
    TransportError,
    UnknownAuthKind,
    UnknownOperation,
    UnknownProfile,
    ValidationError,
)
from restbridge.operations import Operation, Verb
from restbridge.profiles import ApiProfile, ApiProfileRegistry
from restbridge.resources import DEFAULT_SCHEMAS
from restbridge.result import DELETED, NOT_FOUND, Err, ErrorKind, Ok, Result
from restbridge.schema import (
    FieldSpec,
    FieldType,
    ResourceSchema,
    build_create_payload,
    build_patch_payload,
)
from restbridge.session import ActiveProfile, ApiSession, SessionStore

__all__ = [
    "__version__",
    "__license__",
    # Auth
    "AuthKind",
    "AuthTemplate",
    "AuthTemplateRegistry",
    # Profiles and sessions
    "ApiProfile",
    "ApiProfileRegistry",
    "ActiveProfile",
    "ApiSession",
    "SessionStore",
    # Schemas
    "FieldSpec",
    "FieldType",
    "ResourceSchema",
    "DEFAULT_SCHEMAS",
    "build_create_payload",
    "build_patch_payload",
    # Operations and dispatch
    "Operation",
    "Verb",
    "OperationDispatcher",
    "CatalogEntry",
    "ToolCatalog",
    # Results
    "Ok",
    "Err",
    "ErrorKind",
    "Result",
    "NOT_FOUND",
    "DELETED",
    # Errors
    "RestBridgeError",
    "ValidationError",
    "UnknownProfile",
    "UnknownOperation",
    "UnknownAuthKind",
    "InvalidPath",
    "TransportError",
    "HttpError",
]
