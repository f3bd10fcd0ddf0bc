"""
Tests for booking endpoints: creation, pricing, ownership and cancellation.
"""

import pytest
from httpx import AsyncClient

from onboard.services.booking_service import PNR_ALPHABET


@pytest.mark.asyncio
async def test_create_booking(client: AsyncClient, auth_headers, booking_payload):
    """A new booking is pending and priced at passengers x unit price."""
    response = await client.post("/api/bookings", json=booking_payload(passengers=3), headers=auth_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Booking created successfully"

    booking = data["booking"]
    assert booking["status"] == "pending"
    assert booking["passengerCount"] == 3
    assert booking["unitPrice"] == 15.0
    assert booking["totalAmount"] == 45.0
    assert booking["route"]["from"]["code"] == "JFK"
    assert booking["route"]["to"]["city"] == "London"
    assert len(booking["pnr"]) == 6
    assert set(booking["pnr"]) <= set(PNR_ALPHABET)
    assert booking["ticketUrl"] is None


@pytest.mark.asyncio
async def test_create_booking_with_quoted_price(client: AsyncClient, auth_headers, booking_payload):
    response = await client.post(
        "/api/bookings", json=booking_payload(passengers=2, unitPrice=199.99), headers=auth_headers
    )
    assert response.status_code == 201
    assert response.json()["booking"]["totalAmount"] == 399.98


@pytest.mark.asyncio
async def test_create_booking_unauthenticated(client: AsyncClient, booking_payload):
    response = await client.post("/api/bookings", json=booking_payload())
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_booking_unknown_airport(client: AsyncClient, auth_headers, booking_payload):
    response = await client.post("/api/bookings", json=booking_payload(origin="ZZZ"), headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid airport codes"


@pytest.mark.asyncio
async def test_create_booking_airport_codes_are_case_insensitive(client: AsyncClient, auth_headers, booking_payload):
    response = await client.post(
        "/api/bookings", json=booking_payload(origin="jfk", destination="lhr"), headers=auth_headers
    )
    assert response.status_code == 201
    assert response.json()["booking"]["route"]["from"]["code"] == "JFK"


@pytest.mark.asyncio
async def test_create_booking_requires_terms(client: AsyncClient, auth_headers, booking_payload):
    response = await client.post(
        "/api/bookings", json=booking_payload(termsAccepted=False), headers=auth_headers
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_create_booking_roundtrip_needs_return_date(client: AsyncClient, auth_headers, booking_payload):
    body = booking_payload()
    body["route"]["tripType"] = "roundtrip"
    response = await client.post("/api/bookings", json=body, headers=auth_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_create_booking_passenger_limits(client: AsyncClient, auth_headers, booking_payload):
    for count in (0, 10):
        response = await client.post(
            "/api/bookings", json=booking_payload(passengers=count), headers=auth_headers
        )
        assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_and_get_own_bookings(client: AsyncClient, auth_headers, booking_payload):
    first = await client.post("/api/bookings", json=booking_payload(), headers=auth_headers)
    second = await client.post("/api/bookings", json=booking_payload(destination="CDG"), headers=auth_headers)

    response = await client.get("/api/bookings", headers=auth_headers)
    assert response.status_code == 200
    ids = [b["id"] for b in response.json()["bookings"]]
    assert set(ids) == {first.json()["booking"]["id"], second.json()["booking"]["id"]}

    booking_id = first.json()["booking"]["id"]
    response = await client.get(f"/api/bookings/{booking_id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["booking"]["pnr"] == first.json()["booking"]["pnr"]


@pytest.mark.asyncio
async def test_other_users_booking_is_not_found(client: AsyncClient, pending_booking, register_user):
    other = await register_user(client, email="bob@example.com")
    headers = {"Authorization": f"Bearer {other['token']}"}

    response = await client.get(f"/api/bookings/{pending_booking['id']}", headers=headers)
    assert response.status_code == 404

    response = await client.put(f"/api/bookings/{pending_booking['id']}/cancel", headers=headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_cancel_pending_booking(client: AsyncClient, auth_headers, pending_booking):
    response = await client.put(f"/api/bookings/{pending_booking['id']}/cancel", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["booking"]["status"] == "cancelled"

    # Cancelled is terminal
    response = await client.put(f"/api/bookings/{pending_booking['id']}/cancel", headers=auth_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_cancel_paid_booking_is_rejected(client: AsyncClient, auth_headers, pending_booking, card_details):
    paid = await client.post("/api/payments", json={
        "bookingId": pending_booking["id"],
        "paymentMethod": "card",
        "paymentDetails": card_details,
    }, headers=auth_headers)
    assert paid.status_code == 200

    response = await client.put(f"/api/bookings/{pending_booking['id']}/cancel", headers=auth_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_bookings_on_memory_backend(memory_client: AsyncClient, register_user, booking_payload):
    """The in-process store serves the same API."""
    data = await register_user(memory_client)
    headers = {"Authorization": f"Bearer {data['token']}"}

    response = await memory_client.post("/api/bookings", json=booking_payload(passengers=2), headers=headers)
    assert response.status_code == 201
    booking = response.json()["booking"]
    assert booking["totalAmount"] == 30.0
    assert [p["firstName"] for p in booking["passengers"]] == ["Traveller0", "Traveller1"]

    response = await memory_client.get("/api/bookings", headers=headers)
    assert len(response.json()["bookings"]) == 1
