"""
Tests for guest checkout and lookup by PNR and contact email.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_guest_booking_and_lookup(client: AsyncClient, booking_payload):
    """Guest books CDG -> NRT for two and finds it again by PNR and email."""
    response = await client.post(
        "/api/guest/bookings",
        json=booking_payload(origin="CDG", destination="NRT", passengers=2, contact_email="guest@example.com"),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Guest booking created successfully"
    booking = data["booking"]
    assert booking["isGuest"] is True
    assert booking["userId"] is None

    response = await client.get(
        f"/api/guest/bookings/{booking['pnr']}", params={"email": "guest@example.com"}
    )
    assert response.status_code == 200
    found = response.json()["booking"]
    assert found["id"] == booking["id"]
    assert found["route"]["from"]["code"] == "CDG"
    assert found["route"]["to"]["code"] == "NRT"
    assert found["passengerCount"] == 2


@pytest.mark.asyncio
async def test_guest_lookup_normalizes_case(client: AsyncClient, booking_payload):
    """PNR is matched upper-cased and email lower-cased."""
    response = await client.post("/api/guest/bookings", json=booking_payload(contact_email="Guest@Example.com"))
    pnr = response.json()["booking"]["pnr"]

    response = await client.get(f"/api/guest/bookings/{pnr.lower()}", params={"email": "GUEST@example.COM"})
    assert response.status_code == 200
    assert response.json()["booking"]["pnr"] == pnr


@pytest.mark.asyncio
async def test_guest_lookup_wrong_email_on_existing_pnr(client: AsyncClient, booking_payload):
    first = await client.post("/api/guest/bookings", json=booking_payload(contact_email="one@example.com"))
    second = await client.post("/api/guest/bookings", json=booking_payload(contact_email="two@example.com"))
    assert first.status_code == second.status_code == 201

    response = await client.get(
        f"/api/guest/bookings/{second.json()['booking']['pnr']}", params={"email": "one@example.com"}
    )
    assert response.status_code == 404
    assert response.json()["message"] == "Booking not found or email does not match"


@pytest.mark.asyncio
async def test_guest_lookup_unknown_pnr(client: AsyncClient):
    response = await client.get("/api/guest/bookings/ZZZZZZ", params={"email": "one@example.com"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_guest_lookup_requires_email(client: AsyncClient, booking_payload):
    response = await client.post("/api/guest/bookings", json=booking_payload())
    response = await client.get(f"/api/guest/bookings/{response.json()['booking']['pnr']}")
    assert response.status_code == 400
    assert response.json()["message"] == "PNR and email are required"


@pytest.mark.asyncio
async def test_guest_pays_with_paypal(client: AsyncClient, booking_payload):
    """Guests use the PayPal flow, identified by the contact email."""
    response = await client.post("/api/guest/bookings", json=booking_payload(contact_email="guest@example.com"))
    booking = response.json()["booking"]

    order = await client.post("/api/payments/paypal/create-order", json={
        "bookingId": booking["id"],
        "contactEmail": "guest@example.com",
    })
    assert order.status_code == 200
    order = order.json()
    assert order["demoMode"] is True
    assert order["orderId"].startswith("DEMO-")

    capture = await client.post("/api/payments/paypal/capture", json={
        "bookingId": booking["id"],
        "orderId": order["orderId"],
        "payerId": "DEMOPAYER",
        "contactEmail": "guest@example.com",
    })
    assert capture.status_code == 200, capture.text
    assert capture.json()["booking"]["status"] == "confirmed"
    assert capture.json()["transaction"]["paymentMethod"] == "paypal"


@pytest.mark.asyncio
async def test_guest_paypal_wrong_email(client: AsyncClient, booking_payload):
    response = await client.post("/api/guest/bookings", json=booking_payload(contact_email="guest@example.com"))
    booking = response.json()["booking"]

    response = await client.post("/api/payments/paypal/create-order", json={
        "bookingId": booking["id"],
        "contactEmail": "someone@example.com",
    })
    assert response.status_code == 404

    response = await client.post("/api/payments/paypal/create-order", json={"bookingId": booking["id"]})
    assert response.status_code == 401
