"""
Location resolver: address / zipcode -> neighborhood and city.

A failed resolution degrades the row to manual city/neighborhood entry
instead of blocking the edit.
"""

import re
from collections.abc import Mapping
from typing import Any

from doof_admin.core.models import Draft, LOCATION_FIELDS, LocationResolution
from doof_admin.engine.api import AdminApi, call_api
from doof_admin.observability import metrics
from doof_admin.observability.logger import get_logger

logger = get_logger(__name__)

ZIPCODE_PATTERN = re.compile(r"\b(\d{5})(?:-\d{4})?\b")


def extract_zipcode(text: str | None) -> str | None:
    """
    Pull the first 5-digit zipcode out of free text.

    A ZIP+4 suffix is accepted and dropped.

    Examples:
        >>> extract_zipcode("123 Main St, New York, NY 10001-1234")
        '10001'
        >>> extract_zipcode("123 Main St") is None
        True
    """
    if not text:
        return None
    match = ZIPCODE_PATTERN.search(str(text))
    return match.group(1) if match else None


class LocationResolver:
    """
    Resolves addresses and zipcodes through the neighborhood-by-zipcode lookup.

    A miss and a failed call are reported the same way (lookup_failed=True).
    """

    def __init__(self, api: AdminApi):
        self.api = api

    async def resolve_from_address(self, address: str | None) -> LocationResolution:
        """
        Resolve a free-text address.

        No zipcode in the address fails immediately, without calling the lookup.
        """
        zipcode = extract_zipcode(address)
        if zipcode is None:
            metrics.increment_counter(metrics.location_lookups_total, 1, source="address", result="skipped")
            logger.debug("No zipcode in address, manual location entry", extra={"address": address})
            return LocationResolution.failed()
        return await self._lookup(zipcode, source="address")

    async def resolve_from_zipcode(self, zipcode: str | None) -> LocationResolution:
        """Resolve a zipcode field value (ZIP+4 accepted)."""
        text = (zipcode or "").strip()
        match = ZIPCODE_PATTERN.fullmatch(text)
        if match is None:
            metrics.increment_counter(metrics.location_lookups_total, 1, source="zipcode", result="skipped")
            return LocationResolution.failed(zipcode=text or None)
        return await self._lookup(match.group(1), source="zipcode")

    async def _lookup(self, zipcode: str, source: str) -> LocationResolution:
        try:
            found = await call_api(self.api.find_neighborhood_by_zipcode, zipcode)
        except Exception as e:
            logger.warning(
                f"Neighborhood lookup failed for zipcode {zipcode}: {e}",
                extra={"zipcode": zipcode, "error_type": type(e).__name__},
            )
            found = None

        if found and not isinstance(found, Mapping):
            logger.warning(
                f"Unexpected neighborhood lookup result for zipcode {zipcode}",
                extra={"zipcode": zipcode, "result_type": type(found).__name__},
            )
            found = None

        if not found:
            metrics.increment_counter(metrics.location_lookups_total, 1, source=source, result="failed")
            return LocationResolution.failed(zipcode=zipcode)

        metrics.increment_counter(metrics.location_lookups_total, 1, source=source, result="resolved")
        return self._from_lookup(zipcode, found)

    @staticmethod
    def _from_lookup(zipcode: str, found: Mapping[str, Any]) -> LocationResolution:
        return LocationResolution(
            neighborhood_id=found.get("id"),
            neighborhood_name=found.get("name"),
            city_id=found.get("city_id"),
            city_name=found.get("city_name"),
            zipcode=zipcode,
        )


def apply_to_draft(draft: Draft, result: LocationResolution) -> None:
    """
    Merge a resolution into a draft.

    Success overwrites the four location fields and clears lookup_failed;
    failure clears them and sets lookup_failed so they can be entered by hand.
    """
    if result.lookup_failed:
        for key in LOCATION_FIELDS:
            draft.values[key] = ""
        draft.lookup_failed = True
        return

    draft.values.update(result.draft_fields())
    draft.lookup_failed = False


def clear_neighborhood(draft: Draft) -> None:
    """Drop the neighborhood reference; it is scoped to the previous city."""
    draft.values["neighborhood_id"] = ""
    draft.values["neighborhood_name"] = ""
