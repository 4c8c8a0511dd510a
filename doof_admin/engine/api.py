"""
Collaborator contracts for the admin API.

The engine never talks to the network itself. It calls an object that
implements AdminApi and treats a `success: false` envelope exactly like a
raised error.
"""

import inspect
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol

from pydantic import BaseModel

from doof_admin.core.models import RowId

CONFLICT_STATUS = 409


class ApiError(Exception):
    """Raised when an admin API call fails."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ConflictError(ApiError):
    """The backend refused a write because of a conflict (e.g. referential integrity)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=CONFLICT_STATUS)


class ApiResponse(BaseModel):
    """Uniform `{success, data, error}` envelope returned by the admin API."""

    success: bool
    data: Any = None
    error: str | None = None
    message: str | None = None
    status_code: int | None = None


class AdminApi(Protocol):
    """CRUD and lookup calls the engine relies on."""

    async def fetch_resource(self, resource_type: str, query: Mapping[str, Any] | None = None) -> Any: ...

    async def create_resource(self, resource_type: str, payload: Mapping[str, Any]) -> Any: ...

    async def update_resource(self, resource_type: str, row_id: RowId, changes: Mapping[str, Any]) -> Any: ...

    async def delete_resource(self, resource_type: str, row_id: RowId) -> Any: ...

    async def approve_submission(self, submission_id: RowId) -> Any: ...

    async def reject_submission(self, submission_id: RowId) -> Any: ...

    async def find_neighborhood_by_zipcode(self, zipcode: str) -> Any: ...


def unwrap_response(response: Any) -> Any:
    """
    Return the payload of an API result.

    Envelopes (ApiResponse or a mapping with a "success" key) are unwrapped;
    anything else is returned as is.

    Raises:
        ConflictError: For a failed envelope with status 409
        ApiError: For any other failed envelope
    """
    if isinstance(response, Mapping) and "success" in response:
        response = ApiResponse(**response)

    if not isinstance(response, ApiResponse):
        return response

    if response.success:
        return response.data

    message = response.error or response.message or "Request failed"
    if response.status_code == CONFLICT_STATUS:
        raise ConflictError(message)
    raise ApiError(message, status_code=response.status_code)


async def call_api(func: Callable[..., Awaitable[Any]], *args: Any) -> Any:
    """Await an API call and unwrap its envelope."""
    return unwrap_response(await func(*args))


async def maybe_await(value: Any) -> Any:
    """Await value if it is awaitable (callbacks may be sync or async)."""
    if inspect.isawaitable(value):
        return await value
    return value
