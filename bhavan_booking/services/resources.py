"""Venue resources: guest rooms, halls and dining areas."""

import logging
from typing import Optional

from bhavan_booking.api.client import ApiClient
from bhavan_booking.domain.entities import Resource

logger = logging.getLogger(__name__)


class ResourceService:
    def __init__(self, client: ApiClient):
        self.client = client

    def fetch_resources(
        self, facility_type: Optional[str] = None, category: Optional[str] = None
    ) -> list[Resource]:
        data = self.client.get(
            "/resources",
            params={"facilityType": facility_type, "category": category},
            fallback_message="Failed to fetch resources",
        )
        resources = [Resource.from_api(r) for r in data.get("data") or []]
        logger.info("Resources fetched: %s", data.get("count", len(resources)))
        return resources

    def fetch_guest_rooms(self) -> dict[str, list[Resource]]:
        """Guest rooms grouped by room category."""
        data = self.client.get(
            "/resources/guest-rooms", fallback_message="Failed to fetch guest rooms"
        )
        grouped = data.get("data") or {}
        if isinstance(grouped, list):
            result: dict[str, list[Resource]] = {}
            for item in grouped:
                room = Resource.from_api(item)
                result.setdefault(room.category or "other", []).append(room)
            return result
        return {
            category: [Resource.from_api(r) for r in rooms or []]
            for category, rooms in grouped.items()
        }

    def fetch_resource(self, resource_id: str) -> Resource:
        data = self.client.get(
            f"/resources/{resource_id}",
            fallback_message="Failed to fetch resource details",
            status_messages={404: "Resource not found"},
        )
        return Resource.from_api(data.get("data") or {})
