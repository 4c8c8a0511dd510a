"""
Unit tests for the location resolver.
"""

import asyncio

import pytest

from doof_admin.core.models import Draft
from doof_admin.engine.api import ApiResponse
from doof_admin.engine.location_resolver import (
    LocationResolver,
    apply_to_draft,
    clear_neighborhood,
    extract_zipcode,
)


class TestExtractZipcode:
    """Tests for extract_zipcode"""

    @pytest.mark.parametrize("address,expected", [
        ("123 Main St, New York, NY 10001", "10001"),
        ("123 Main St, New York, NY 10001-1234", "10001"),
        ("10013 Broadway", "10013"),
        ("123 Main St", None),
        ("Suite 123456, Somewhere", None),
        ("", None),
        (None, None),
    ])
    def test_extract(self, address, expected):
        assert extract_zipcode(address) == expected


class TestLocationResolver:
    """Tests for LocationResolver"""

    def test_address_without_zipcode_skips_lookup(self, api):
        """Test no zipcode token means lookup_failed without any external call"""
        resolver = LocationResolver(api)

        result = asyncio.run(resolver.resolve_from_address("123 Main St"))

        assert result.lookup_failed
        assert result.neighborhood_id is None
        assert api.calls_to("find_neighborhood_by_zipcode") == []

    def test_address_resolves(self, api):
        resolver = LocationResolver(api)

        result = asyncio.run(resolver.resolve_from_address("1 Spring St, New York, NY 10001"))

        assert not result.lookup_failed
        assert result.neighborhood_id == 7
        assert result.neighborhood_name == "SoHo"
        assert result.city_id == 1
        assert result.city_name == "New York"
        assert result.zipcode == "10001"
        assert api.calls_to("find_neighborhood_by_zipcode") == [("find_neighborhood_by_zipcode", "10001")]

    def test_miss_and_error_look_the_same(self, api):
        """Test a zipcode with no neighborhood and a failing lookup both report lookup_failed"""
        resolver = LocationResolver(api)
        miss = asyncio.run(resolver.resolve_from_zipcode("94105"))

        api.fail_with("find_neighborhood_by_zipcode", None, RuntimeError("lookup down"))
        error = asyncio.run(resolver.resolve_from_zipcode("10001"))

        for result in (miss, error):
            assert result.lookup_failed
            assert result.neighborhood_id is None
            assert result.city_id is None

    def test_failed_envelope_is_a_failure(self, api):
        api.fail_with("find_neighborhood_by_zipcode", None, ApiResponse(success=False, error="boom"))
        resolver = LocationResolver(api)

        result = asyncio.run(resolver.resolve_from_zipcode("10001"))

        assert result.lookup_failed

    def test_non_mapping_result_is_a_failure(self, api):
        """Test an unexpected lookup payload degrades to manual entry instead of raising"""
        api.neighborhoods["10001"] = [{"id": 1}]
        resolver = LocationResolver(api)

        result = asyncio.run(resolver.resolve_from_zipcode("10001"))

        assert result.lookup_failed
        assert result.neighborhood_id is None

    def test_malformed_zipcode_skips_lookup(self, api):
        resolver = LocationResolver(api)

        result = asyncio.run(resolver.resolve_from_zipcode("1000"))

        assert result.lookup_failed
        assert api.calls_to("find_neighborhood_by_zipcode") == []

    def test_zip_plus_four_uses_five_digits(self, api):
        resolver = LocationResolver(api)

        result = asyncio.run(resolver.resolve_from_zipcode(" 10001-0001 "))

        assert result.neighborhood_id == 7


class TestDraftMerge:
    """Tests for apply_to_draft and clear_neighborhood"""

    def _draft(self) -> Draft:
        return Draft(row_id=42, values={
            "city_id": "2", "city_name": "Boston", "neighborhood_id": "3", "neighborhood_name": "Back Bay",
        })

    def test_success_overwrites_location(self, api):
        draft = self._draft()
        draft.lookup_failed = True
        result = asyncio.run(LocationResolver(api).resolve_from_zipcode("10001"))

        apply_to_draft(draft, result)

        assert draft.values["city_id"] == "1"
        assert draft.values["neighborhood_name"] == "SoHo"
        assert draft.lookup_failed is False

    def test_failure_clears_location(self, api):
        draft = self._draft()
        result = asyncio.run(LocationResolver(api).resolve_from_address("no zip here"))

        apply_to_draft(draft, result)

        assert draft.values == {"city_id": "", "city_name": "", "neighborhood_id": "", "neighborhood_name": ""}
        assert draft.lookup_failed is True

    def test_clear_neighborhood(self):
        draft = self._draft()
        clear_neighborhood(draft)
        assert draft.values["neighborhood_id"] == ""
        assert draft.values["neighborhood_name"] == ""
        assert draft.values["city_id"] == "2"
