"""
Pytest configuration and fixtures for doof admin engine tests

This module provides shared fixtures for unit and integration tests: an
in-memory admin API double, resource schemas and sample records.
"""
import asyncio
from collections import defaultdict
from typing import Any

import pytest

from doof_admin.core.models import ResourceSchema
from doof_admin.core.rules import ResourceSchemaBuilder, load_resource_schemas
from doof_admin.engine.api import ApiResponse, ConflictError


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests for a single engine component"
    )
    config.addinivalue_line(
        "markers", "integration: Tests that drive the full admin table engine"
    )


# =======================
# ADMIN API DOUBLE
# =======================

class FakeAdminApi:
    """
    In-memory admin API.

    Records every call in `calls`. Failures are injected per (method, row id)
    through `fail_with`; `hold(method)` returns an asyncio.Event that keeps
    matching calls in flight until it is set.
    """

    def __init__(self, records: dict[str, list[dict[str, Any]]] | None = None):
        self.records: dict[str, list[dict[str, Any]]] = defaultdict(list)
        for resource_type, rows in (records or {}).items():
            self.records[resource_type] = [dict(row) for row in rows]
        self.neighborhoods: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple] = []
        self.failures: dict[tuple[str, Any], Exception | ApiResponse] = {}
        self.fail_counts: dict[tuple[str, Any], int] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.next_id = 1000

    # -- test controls -------------------------------------------------------

    def fail_with(self, method: str, row_id: Any, error: Exception | ApiResponse, times: int | None = None):
        """Make `method` fail for `row_id` (None matches any row)."""
        self.failures[(method, row_id)] = error
        if times is not None:
            self.fail_counts[(method, row_id)] = times

    def hold(self, method: str) -> asyncio.Event:
        """Block calls to `method` until the returned event is set."""
        event = asyncio.Event()
        self.gates[method] = event
        return event

    def calls_to(self, method: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == method]

    async def _enter(self, method: str, row_id: Any = None) -> ApiResponse | None:
        gate = self.gates.get(method)
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)

        for key in ((method, row_id), (method, None)):
            if key in self.failures:
                remaining = self.fail_counts.get(key)
                if remaining is not None:
                    if remaining <= 0:
                        continue
                    self.fail_counts[key] = remaining - 1
                error = self.failures[key]
                if isinstance(error, ApiResponse):
                    return error
                raise error
        return None

    def _find(self, resource_type: str, row_id: Any) -> dict[str, Any] | None:
        for row in self.records[resource_type]:
            if row.get("id") == row_id:
                return row
        return None

    # -- AdminApi ------------------------------------------------------------

    async def fetch_resource(self, resource_type, query=None):
        self.calls.append(("fetch_resource", resource_type, query))
        failure = await self._enter("fetch_resource")
        if failure is not None:
            return failure
        return {"success": True, "data": [dict(row) for row in self.records[resource_type]]}

    async def create_resource(self, resource_type, payload):
        self.calls.append(("create_resource", resource_type, dict(payload)))
        failure = await self._enter("create_resource")
        if failure is not None:
            return failure
        self.next_id += 1
        row = {"id": self.next_id, **payload}
        self.records[resource_type].append(row)
        return {"success": True, "data": dict(row)}

    async def update_resource(self, resource_type, row_id, changes):
        self.calls.append(("update_resource", resource_type, row_id, dict(changes)))
        failure = await self._enter("update_resource", row_id)
        if failure is not None:
            return failure
        row = self._find(resource_type, row_id)
        if row is None:
            return {"success": False, "error": "Not found", "status_code": 404}
        row.update(changes)
        return {"success": True, "data": dict(row)}

    async def delete_resource(self, resource_type, row_id):
        self.calls.append(("delete_resource", resource_type, row_id))
        failure = await self._enter("delete_resource", row_id)
        if failure is not None:
            return failure
        self.records[resource_type] = [r for r in self.records[resource_type] if r.get("id") != row_id]
        return {"success": True, "data": None}

    async def approve_submission(self, submission_id):
        self.calls.append(("approve_submission", submission_id))
        failure = await self._enter("approve_submission", submission_id)
        if failure is not None:
            return failure
        row = self._find("submissions", submission_id)
        if row is not None:
            row["status"] = "approved"
        return {"success": True, "data": row}

    async def reject_submission(self, submission_id):
        self.calls.append(("reject_submission", submission_id))
        failure = await self._enter("reject_submission", submission_id)
        if failure is not None:
            return failure
        row = self._find("submissions", submission_id)
        if row is not None:
            row["status"] = "rejected"
        return {"success": True, "data": row}

    async def find_neighborhood_by_zipcode(self, zipcode):
        self.calls.append(("find_neighborhood_by_zipcode", zipcode))
        failure = await self._enter("find_neighborhood_by_zipcode", zipcode)
        if failure is not None:
            return failure
        return self.neighborhoods.get(zipcode)


# =======================
# DATA FIXTURES
# =======================

SOHO = {"id": 7, "name": "SoHo", "city_id": 1, "city_name": "New York"}


@pytest.fixture
def restaurant_record() -> dict[str, Any]:
    """A stored restaurant as the host would pass it to the engine"""
    return {
        "id": 42,
        "name": "Cafe A",
        "cuisine": "Cafe",
        "address": "123 Main St, New York, NY 10001",
        "zipcode": "10001",
        "phone": "212-555-0100",
        "website": "https://cafe-a.example.com",
        "city_id": 1,
        "city_name": "New York",
        "neighborhood_id": 7,
        "neighborhood_name": "SoHo",
        "tags": ["coffee", "brunch"],
        "created_at": "2024-01-01T00:00:00Z",
    }


@pytest.fixture
def api(restaurant_record) -> FakeAdminApi:
    """Admin API double seeded with restaurants, dishes and submissions"""
    fake = FakeAdminApi({
        "restaurants": [
            restaurant_record,
            {"id": 43, "name": "Diner B", "tags": [], "city_id": 1, "neighborhood_id": None},
            {"id": 44, "name": "Bistro C", "tags": ["french"], "city_id": 2, "neighborhood_id": None},
        ],
        "dishes": [
            {"id": 5, "name": "Pancakes", "restaurant_id": 42, "tags": ["breakfast"]},
        ],
        "submissions": [
            {"id": 9, "type": "restaurant", "status": "pending"},
            {"id": 10, "type": "dish", "status": "approved"},
        ],
    })
    fake.neighborhoods["10001"] = dict(SOHO)
    return fake


@pytest.fixture(scope="session")
def schemas() -> dict[str, ResourceSchema]:
    """Every resource schema from the packaged resource config"""
    return load_resource_schemas()


@pytest.fixture
def restaurant_schema(schemas) -> ResourceSchema:
    return schemas["restaurants"]


@pytest.fixture
def dish_schema(schemas) -> ResourceSchema:
    return schemas["dishes"]


@pytest.fixture
def simple_schema() -> ResourceSchema:
    """Small hand-built schema covering every normalizer kind"""
    return (
        ResourceSchemaBuilder("widgets")
        .add_column("name", required=True)
        .add_column("count", kind="number")
        .add_column("active", kind="boolean")
        .add_column("tags", kind="tags")
        .add_column("size", kind="select", options=["s", "m", "l"])
        .add_column("email", format="email")
        .add_column("internal_note", editable=False)
        .require_on_create("name")
        .build()
    )
