"""
Unit tests for API endpoints.

Tests endpoint behavior using FastAPI TestClient against the in-memory
database, with the external geocoder disabled.
"""

import uuid
from datetime import time
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from space_engine.api.dependencies import build_container
from space_engine.api.main import create_app
from space_engine.config import Settings
from space_engine.models.enums import BookingStatus

BOOKING_DATE = "2026-06-13"


@pytest.fixture
def client(engine):
    """Create a test client wired to the test database."""
    settings = Settings(_env_file=None, geocoder_enabled=False)
    app = create_app(build_container(settings, engine=engine))

    with TestClient(app) as client:
        yield client


def _booking_body(vendor_id, start="10:00", end="12:00", **extra):
    body = {
        "vendor_id": str(vendor_id),
        "booking_date": BOOKING_DATE,
        "start_time": start,
        "end_time": end,
    }
    body.update(extra)
    return body


class TestHealthEndpoint:
    """Test /health endpoint."""

    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"
        assert data["database_connected"] is True
        assert data["geocoder_enabled"] is False

    def test_health_check_has_request_id(self, client):
        response = client.get("/health")

        assert "X-Request-ID" in response.headers

    def test_incoming_request_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"

    def test_uninitialized_services(self):
        app = create_app()
        app.state.container = None

        response = TestClient(app).get("/health")

        assert response.status_code == 503
        assert response.json()["error_type"] == "http_error"


class TestAvailabilityEndpoints:
    """Test availability and slot listing."""

    def test_free_interval(self, client, sample_listing):
        response = client.get(
            f"/listings/{sample_listing.id}/availability",
            params={"date": BOOKING_DATE, "start": "10:00", "end": "12:00"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["available"] is True
        assert data["booking_date"] == BOOKING_DATE

    def test_taken_interval(self, client, sample_listing, booking_factory):
        booking_factory(sample_listing, time(11), time(13), BookingStatus.PENDING)

        response = client.get(
            f"/listings/{sample_listing.id}/availability",
            params={"date": BOOKING_DATE, "start": "10:00", "end": "12:00"},
        )

        assert response.json()["available"] is False

    def test_exclude_booking(self, client, sample_listing, booking_factory):
        booking = booking_factory(sample_listing, time(11), time(13))

        response = client.get(
            f"/listings/{sample_listing.id}/availability",
            params={
                "date": BOOKING_DATE,
                "start": "10:00",
                "end": "12:00",
                "exclude_booking_id": str(booking.id),
            },
        )

        assert response.json()["available"] is True

    def test_missing_date(self, client, sample_listing):
        response = client.get(
            f"/listings/{sample_listing.id}/availability",
            params={"start": "10:00", "end": "12:00"},
        )

        assert response.status_code == 422

    def test_slots(self, client, sample_listing, booking_factory):
        booking_factory(sample_listing, time(6), time(7))

        response = client.get(
            f"/listings/{sample_listing.id}/slots",
            params={"date": BOOKING_DATE, "duration_hours": 2},
        )

        assert response.status_code == 200
        slots = response.json()["slots"]
        assert len(slots) == 15
        assert slots[0] == {"start_time": "06:00:00", "end_time": "08:00:00", "available": False}
        assert slots[-1]["end_time"] == "22:00:00"

    def test_availability_unknown_listing(self, client):
        response = client.get(
            f"/listings/{uuid.uuid4()}/availability",
            params={"date": BOOKING_DATE, "start": "10:00", "end": "12:00"},
        )

        assert response.status_code == 404
        assert response.json()["error_type"] == "not_found"

    def test_slots_unknown_listing(self, client):
        response = client.get(f"/listings/{uuid.uuid4()}/slots", params={"date": BOOKING_DATE})

        assert response.status_code == 404
        assert response.json()["error_type"] == "not_found"


class TestPriceEndpoint:
    """Test GET /listings/{id}/price."""

    def test_hourly_quote(self, client, sample_listing):
        response = client.get(
            f"/listings/{sample_listing.id}/price",
            params={"start": "09:00", "end": "12:30"},
        )

        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["total_cost"]) == Decimal("35.00")
        assert Decimal(data["total_hours"]) == Decimal("3.5")
        assert data["rate_applied"] == "hourly"

    def test_daily_quote(self, client, sample_listing):
        response = client.get(
            f"/listings/{sample_listing.id}/price",
            params={"start": "08:00", "end": "20:00"},
        )

        data = response.json()
        assert Decimal(data["total_cost"]) == Decimal("60.00")
        assert data["rate_applied"] == "daily"

    def test_reversed_interval(self, client, sample_listing):
        response = client.get(
            f"/listings/{sample_listing.id}/price",
            params={"start": "12:00", "end": "09:00"},
        )

        assert response.status_code == 422
        assert response.json()["error_type"] == "validation_error"


class TestCreateBookingEndpoint:
    """Test POST /listings/{id}/bookings."""

    def test_create_booking(self, client, sample_listing, vendor_id):
        response = client.post(
            f"/listings/{sample_listing.id}/bookings",
            json=_booking_body(vendor_id, vendor_notes="One van"),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["vendor_id"] == str(vendor_id)
        assert Decimal(data["total_cost"]) == Decimal("20.00")
        assert data["vendor_notes"] == "One van"

    def test_overlap_returns_conflict(self, client, sample_listing, vendor_id):
        first = client.post(f"/listings/{sample_listing.id}/bookings", json=_booking_body(vendor_id))

        response = client.post(
            f"/listings/{sample_listing.id}/bookings",
            json=_booking_body(uuid.uuid4(), start="11:00", end="13:00"),
        )

        assert response.status_code == 409
        data = response.json()
        assert data["error_type"] == "conflict"
        assert data["retryable"] is True
        assert data["details"]["conflicting_booking_id"] == first.json()["id"]

    def test_error_body_carries_request_id(self, client, sample_listing, vendor_id):
        client.post(f"/listings/{sample_listing.id}/bookings", json=_booking_body(vendor_id))

        response = client.post(
            f"/listings/{sample_listing.id}/bookings",
            json=_booking_body(uuid.uuid4()),
            headers={"X-Request-ID": "req-42"},
        )

        assert response.status_code == 409
        assert response.json()["request_id"] == "req-42"
        assert response.headers["X-Request-ID"] == "req-42"

    def test_end_before_start_rejected(self, client, sample_listing, vendor_id):
        response = client.post(
            f"/listings/{sample_listing.id}/bookings",
            json=_booking_body(vendor_id, start="12:00", end="10:00"),
        )

        assert response.status_code == 422

    def test_outside_operating_window(self, client, sample_listing, vendor_id):
        response = client.post(
            f"/listings/{sample_listing.id}/bookings",
            json=_booking_body(vendor_id, start="21:00", end="23:00"),
        )

        assert response.status_code == 422
        assert response.json()["error_type"] == "validation_error"

    def test_unknown_listing(self, client, vendor_id):
        response = client.post(f"/listings/{uuid.uuid4()}/bookings", json=_booking_body(vendor_id))

        assert response.status_code == 404


class TestBookingTransitions:
    """Test confirm, cancel and complete endpoints."""

    def _reserve(self, client, listing, vendor_id):
        response = client.post(f"/listings/{listing.id}/bookings", json=_booking_body(vendor_id))
        return response.json()["id"]

    def test_confirm_with_notes(self, client, sample_listing, vendor_id):
        booking_id = self._reserve(client, sample_listing, vendor_id)

        response = client.post(
            f"/bookings/{booking_id}/confirm",
            json={"venue_owner_notes": "Use the side gate"},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"
        assert response.json()["venue_owner_notes"] == "Use the side gate"

    def test_confirm_without_body(self, client, sample_listing, vendor_id):
        booking_id = self._reserve(client, sample_listing, vendor_id)

        response = client.post(f"/bookings/{booking_id}/confirm")

        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"

    def test_cancel_then_confirm_rejected(self, client, sample_listing, vendor_id):
        booking_id = self._reserve(client, sample_listing, vendor_id)

        cancelled = client.post(f"/bookings/{booking_id}/cancel", json={"reason": "Weather"})
        response = client.post(f"/bookings/{booking_id}/confirm")

        assert cancelled.json()["cancellation_reason"] == "Weather"
        assert response.status_code == 409
        assert response.json()["error_type"] == "invalid_transition"

    def test_complete_confirmed(self, client, sample_listing, vendor_id):
        booking_id = self._reserve(client, sample_listing, vendor_id)
        client.post(f"/bookings/{booking_id}/confirm")

        response = client.post(f"/bookings/{booking_id}/complete")

        assert response.json()["status"] == "completed"

    def test_unknown_booking(self, client):
        response = client.post(f"/bookings/{uuid.uuid4()}/cancel")

        assert response.status_code == 404


class TestBookingStatsEndpoint:
    """Test GET /owners/{id}/booking-stats."""

    def test_stats(self, client, owner_id, sample_listing, booking_factory):
        booking_factory(sample_listing, time(8), time(9), BookingStatus.PENDING)
        booking_factory(sample_listing, time(9), time(10), BookingStatus.COMPLETED, total_cost=Decimal("42.50"))

        response = client.get(f"/owners/{owner_id}/booking-stats")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert data["pending"] == 1
        assert data["completed"] == 1
        assert Decimal(data["total_revenue"]) == Decimal("42.50")

    def test_date_range(self, client, owner_id, sample_listing, booking_factory):
        booking_factory(sample_listing, time(8), time(9))

        response = client.get(
            f"/owners/{owner_id}/booking-stats",
            params={"start_date": "2026-07-01"},
        )

        assert response.json()["total"] == 0

    def test_invalid_date(self, client, owner_id):
        response = client.get(
            f"/owners/{owner_id}/booking-stats",
            params={"start_date": "not a date"},
        )

        assert response.status_code == 400


class TestSearchEndpoint:
    """Test GET /search."""

    def test_gazetteer_search(self, client, listing_factory):
        listing_factory(title="London pitch")
        listing_factory(title="Leeds pitch", city="Leeds", latitude=53.8008, longitude=-1.5491)

        response = client.get("/search", params={"location": "London"})

        assert response.status_code == 200
        data = response.json()
        assert [r["title"] for r in data["results"]] == ["London pitch"]
        assert data["location_source"] == "gazetteer"
        assert data["degraded"] is False
        assert data["results"][0]["distance_km"] == pytest.approx(0.0, abs=0.01)

    def test_explicit_coordinates(self, client, listing_factory):
        listing_factory(title="Leeds pitch", city="Leeds", latitude=53.8008, longitude=-1.5491)

        response = client.get("/search", params={"lat": 53.8, "lng": -1.55, "radius_km": 5})

        data = response.json()
        assert [r["title"] for r in data["results"]] == ["Leeds pitch"]
        assert data["origin_latitude"] == pytest.approx(53.8)

    def test_unresolved_location_degrades_to_text(self, client, listing_factory):
        listing_factory(title="Shoreditch", address="12 Shoreditch High Street")
        listing_factory(title="Camden", address="3 Camden Lock Place")

        response = client.get("/search", params={"location": "Shoreditch"})

        data = response.json()
        assert data["degraded"] is True
        assert [r["title"] for r in data["results"]] == ["Shoreditch"]

    def test_amenities_comma_separated_and_repeated(self, client, listing_factory):
        listing_factory(title="Full", amenities={"electricity_type": "240v", "wifi": True, "shelter": True})
        listing_factory(title="Partial", amenities={"electricity_type": "240v"})

        response = client.get(
            "/search",
            params=[("amenities", "electricity_240v,wifi"), ("amenities", "shelter")],
        )

        assert [r["title"] for r in response.json()["results"]] == ["Full"]

    def test_paging(self, client, listing_factory):
        for _ in range(3):
            listing_factory()

        response = client.get("/search", params={"page_size": 2})

        data = response.json()
        assert len(data["results"]) == 2
        assert data["total"] == 3
        assert data["has_more"] is True

    def test_lat_without_lng(self, client):
        response = client.get("/search", params={"lat": 51.5})

        assert response.status_code == 422

    def test_min_above_max(self, client):
        response = client.get("/search", params={"min_price": 50, "max_price": 10})

        assert response.status_code == 422

    def test_unknown_amenity(self, client):
        response = client.get("/search", params={"amenities": "hot_tub"})

        assert response.status_code == 422
        assert "hot_tub" in response.json()["message"]
