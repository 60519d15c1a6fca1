"""
Operation Dispatcher.

One generic engine that turns (Operation, ActiveProfile, path params,
payload) into exactly one HTTP request and classifies the outcome into a
Result. There is no per-resource code here: everything resource-specific
comes from the Operation record.

Algorithm:
    1. Resolve path placeholders ({id}, {idBook}, ...) or fail with InvalidPath
    2. Add the auth header if the session has a credential for a non-"none" kind
    3. Issue the request with a bounded timeout (httpx)
    4. Classify:
        no response            -> Err(TRANSPORT)
        2xx                    -> Ok(parsed JSON), Ok(DELETED) for an empty body
        404 on getById         -> Ok(NOT_FOUND)
        any other status       -> Err(HTTP, "HTTP error! status: <code>")

Calls are at-most-once: the dispatcher never retries.

HTTP Client Lifecycle:
    Pass a shared httpx.AsyncClient for connection pooling (the caller
    closes it). Without one, a fresh client is created per call and closed
    afterwards.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from .auth import AuthKind, AuthTemplateRegistry
from .errors import HttpError, InvalidPath, TransportError
from .operations import Operation, Verb
from .result import DELETED, NOT_FOUND, Err, ErrorKind, Ok, Result
from .session import ActiveProfile

logger = logging.getLogger(__name__)


class OperationDispatcher:
    """
    Executes Operations against the session's active API.

    Example:
        dispatcher = OperationDispatcher(timeout=10.0)

        result = await dispatcher.execute(
            operation,                  # GET /api/v1/Books/{id}
            session.active,
            {"id": 1},
            None,
        )
    """

    def __init__(
        self,
        *,
        timeout: float,
        auth_templates: AuthTemplateRegistry | None = None,
        http_client: httpx.AsyncClient | None = None,
        default_headers: dict[str, str] | None = None,
    ) -> None:
        """
        Args:
            timeout: Request timeout in seconds (required, must be > 0)
            auth_templates: Auth header formatting rules
            http_client: Optional shared client (caller manages lifecycle)
            default_headers: Extra headers sent with every request

        Raises:
            ValueError: If timeout is missing or not positive
        """
        if timeout is None or timeout <= 0:
            raise ValueError(f"A positive request timeout is required, got {timeout!r}")
        self._timeout = float(timeout)
        self._auth_templates = auth_templates or AuthTemplateRegistry()
        self._shared_client = http_client
        self._default_headers = default_headers or {}

    @property
    def timeout(self) -> float:
        return self._timeout

    async def execute(
        self,
        operation: Operation,
        active: ActiveProfile,
        path_params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Result:
        """
        Issue one request for the operation and classify the outcome.

        Never raises; every failure is returned as Err.
        """
        tag = f"[dispatcher:{operation.resource_name}.{operation.verb.value}]"

        try:
            url = self.build_url(operation, active.base_url, path_params or {})
        except InvalidPath as e:
            logger.warning(f"{tag} {e}")
            return Err.from_exception(e)

        headers = self.build_headers(active, has_body=payload is not None)
        method = operation.http_method

        if self._shared_client is not None:
            client = self._shared_client
            close_after = False
        else:
            client = httpx.AsyncClient(timeout=self._timeout)
            close_after = True

        logger.info(f"{tag} {method} {url}")

        try:
            response = await client.request(
                method=method,
                url=url,
                json=payload,
                headers=headers,
                timeout=self._timeout,
            )
        except httpx.TimeoutException:
            logger.error(f"{tag} Timeout after {self._timeout}s")
            return Err.from_exception(
                TransportError(f"Request timed out after {self._timeout}s")
            )
        except httpx.HTTPError as e:
            logger.error(f"{tag} Transport error: {e}")
            return Err.from_exception(TransportError(f"Connection failed: {e}"))
        except Exception as e:
            logger.error(f"{tag} Unexpected error: {e}", exc_info=True)
            return Err(kind=ErrorKind.TRANSPORT, message=f"Request failed: {e}")
        finally:
            if close_after:
                await client.aclose()

        logger.info(f"{tag} Response: {response.status_code}")
        return self.classify(operation, response)

    def build_url(
        self, operation: Operation, base_url: str, path_params: dict[str, Any]
    ) -> str:
        """
        Join base URL and resolved path.

        Raises:
            InvalidPath: If a placeholder has no (non-None) value
        """
        missing = [
            name for name in operation.placeholders if path_params.get(name) is None
        ]
        if missing:
            raise InvalidPath(operation.path_template, missing)

        path = operation.path_template
        for name in operation.placeholders:
            path = path.replace(f"{{{name}}}", quote(str(path_params[name]), safe=""))

        return f"{base_url.rstrip('/')}{path}"

    def build_headers(self, active: ActiveProfile, *, has_body: bool) -> dict[str, str]:
        """Accept/Content-Type plus the auth header, if any."""
        headers = {"Accept": "application/json", **self._default_headers}
        if has_body:
            headers["Content-Type"] = "application/json"

        if active.auth_kind is not AuthKind.NONE and active.credential:
            header = self._auth_templates.header_for(active.auth_kind, active.credential)
            if header is not None:
                headers[header[0]] = header[1]
        elif active.auth_kind is not AuthKind.NONE:
            # Backend decides whether to reject the unauthenticated call
            logger.debug(
                f"[dispatcher] No credential configured for {active.name} "
                f"({active.auth_kind.value}); sending without auth header"
            )

        return headers

    def classify(self, operation: Operation, response: httpx.Response) -> Result:
        """Map an HTTP response onto Ok/Err."""
        status = response.status_code

        if 200 <= status < 300:
            if not response.content or not response.content.strip():
                return Ok(DELETED if operation.verb is Verb.DELETE_BY_ID else None)
            try:
                return Ok(response.json())
            except (json.JSONDecodeError, UnicodeDecodeError):
                return Ok(response.text)

        if status == 404 and operation.verb is Verb.GET_BY_ID:
            return Ok(NOT_FOUND)

        error = HttpError(status, _best_effort_body(response))
        logger.warning(
            f"[dispatcher:{operation.resource_name}.{operation.verb.value}] {error.message}"
        )
        return Err.from_exception(error)


def _best_effort_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text[:2000]
