import pytest

from conftest import make_response

from bhavan_booking.domain.value_objects import Money
from bhavan_booking.exceptions import ServerError
from bhavan_booking.services.packages import PackageService
from bhavan_booking.services.resources import ResourceService


@pytest.fixture
def packages(api_client):
    return PackageService(api_client)


@pytest.fixture
def resources(api_client):
    return ResourceService(api_client)


def test_fetch_packages_by_category(packages, http, package_data):
    http.request.return_value = make_response(200, {"success": True, "count": 1, "data": [package_data]})

    result = packages.fetch_packages("function_hall_only")

    assert [p.id for p in result] == ["pkg-1"]
    assert http.request.call_args.kwargs["params"] == {"category": "function_hall_only"}


def test_fetch_all_packages_sends_no_params(packages, http):
    http.request.return_value = make_response(200, {"data": []})

    assert packages.fetch_packages() == []
    assert http.request.call_args.kwargs["params"] is None


def test_fetch_package_not_found(packages, http):
    http.request.return_value = make_response(404, {})

    with pytest.raises(ServerError) as exc:
        packages.fetch_package("missing")
    assert exc.value.message == "Package not found"


def test_fetch_popular_packages(packages, http, package_data):
    http.request.return_value = make_response(200, {"data": [package_data]})

    assert packages.fetch_popular_packages()[0].name == "Function Hall Package"
    assert http.request.call_args.args[1].endswith("/packages/popular/list")


def test_calculate_price_normalizes_dates(packages, http):
    http.request.return_value = make_response(
        200, {"pricing": {"basePrice": 1500, "numberOfDays": 2, "finalAmount": 3360}}
    )

    pricing = packages.calculate_price("pkg-rooms", "2025-12-10", "2025-12-12", room_quantity=1)

    assert pricing.final_amount == Money(3360)
    assert http.request.call_args.kwargs["json"] == {
        "checkInDate": "10-12-2025",
        "checkOutDate": "12-12-2025",
        "roomQuantity": 1,
    }


def test_calculate_price_without_pricing(packages, http):
    http.request.return_value = make_response(200, {"success": True})

    with pytest.raises(ServerError):
        packages.calculate_price("pkg-1", "10-12-2025", "11-12-2025")


def test_fetch_resources_filters(resources, http):
    http.request.return_value = make_response(
        200, {"count": 1, "data": [{"_id": "r1", "name": "AC Room", "facilityType": "guest_room", "basePrice": 1500}]}
    )

    result = resources.fetch_resources(facility_type="guest_room")

    assert result[0].base_price == Money(1500)
    assert http.request.call_args.kwargs["params"] == {"facilityType": "guest_room"}


def test_fetch_guest_rooms_grouped(resources, http):
    http.request.return_value = make_response(
        200,
        {"data": {"ac": [{"_id": "r1", "name": "AC Room"}], "non_ac": [{"_id": "r2", "name": "Room"}]}},
    )

    grouped = resources.fetch_guest_rooms()

    assert sorted(grouped) == ["ac", "non_ac"]
    assert grouped["ac"][0].id == "r1"


def test_fetch_resource_not_found(resources, http):
    http.request.return_value = make_response(404, {"success": False})

    with pytest.raises(ServerError) as exc:
        resources.fetch_resource("nope")
    assert exc.value.message == "Resource not found"
