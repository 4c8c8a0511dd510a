"""
LocationResolution model for zipcode -> neighborhood/city lookups (ephemeral).
"""

from typing import Any

from pydantic import BaseModel

LOCATION_FIELDS = ("city_id", "city_name", "neighborhood_id", "neighborhood_name")


class LocationResolution(BaseModel):
    """
    Result of resolving an address or zipcode to a neighborhood and city.

    A zipcode with no neighborhood on file and a failed lookup call both
    produce lookup_failed=True with every location field cleared.
    """

    neighborhood_id: int | None = None
    neighborhood_name: str | None = None
    city_id: int | None = None
    city_name: str | None = None
    zipcode: str | None = None
    lookup_failed: bool = False

    @classmethod
    def failed(cls, zipcode: str | None = None) -> "LocationResolution":
        return cls(zipcode=zipcode, lookup_failed=True)

    def draft_fields(self) -> dict[str, Any]:
        """Location values in their draft (editing) representation."""
        return {
            "city_id": "" if self.city_id is None else str(self.city_id),
            "city_name": self.city_name or "",
            "neighborhood_id": "" if self.neighborhood_id is None else str(self.neighborhood_id),
            "neighborhood_name": self.neighborhood_name or "",
        }
