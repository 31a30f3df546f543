"""Package catalogue and price quotes."""

from __future__ import annotations

import logging
from typing import Optional

from bhavan_booking.api.client import ApiClient
from bhavan_booking.domain.entities import Package, PricingBreakdown
from bhavan_booking.exceptions import ServerError
from bhavan_booking.utils.dates import DateInput, nights_between, to_api_date

logger = logging.getLogger(__name__)


class PackageService:
    def __init__(self, client: ApiClient):
        self.client = client

    def fetch_packages(self, category: Optional[str] = None) -> list[Package]:
        logger.info("Fetching packages... %s", f"Category: {category}" if category else "All")
        data = self.client.get(
            "/packages",
            params={"category": category},
            fallback_message="Failed to fetch packages",
        )
        packages = [Package.from_api(p) for p in data.get("data") or []]
        logger.info("Packages fetched: %s", data.get("count", len(packages)))
        return packages

    def fetch_package(self, package_id: str) -> Package:
        data = self.client.get(
            f"/packages/{package_id}",
            fallback_message="Failed to fetch package details",
            status_messages={404: "Package not found"},
        )
        package = Package.from_api(data.get("data") or {})
        logger.info("Package details fetched: %s", package.name)
        return package

    def fetch_popular_packages(self) -> list[Package]:
        data = self.client.get(
            "/packages/popular/list",
            fallback_message="Failed to fetch popular packages",
        )
        return [Package.from_api(p) for p in data.get("data") or []]

    def calculate_price(
        self,
        package_id: str,
        check_in: DateInput,
        check_out: DateInput,
        room_quantity: Optional[int] = None,
    ) -> PricingBreakdown:
        payload = {
            "checkInDate": to_api_date(check_in, "checkInDate"),
            "checkOutDate": to_api_date(check_out, "checkOutDate"),
        }
        if room_quantity:
            payload["roomQuantity"] = room_quantity

        data = self.client.post(
            f"/packages/{package_id}/calculate-price",
            json=payload,
            fallback_message="Failed to calculate price",
        )
        pricing = PricingBreakdown.from_api(
            data.get("pricing"), nights=nights_between(check_in, check_out)
        )
        if pricing is None:
            raise ServerError("Failed to calculate price")
        logger.info("Price calculated: %s", pricing.final_amount)
        return pricing
