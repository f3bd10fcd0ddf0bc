"""
Tests for payment processing, including concurrent attempts on one booking.
"""

import asyncio
from datetime import datetime

import pytest
from httpx import AsyncClient

from onboard.schemas.payment import PaymentDetails
from onboard.services.payment_service import validate_card


def pay(client, headers, booking_id, method="card", details=None):
    return client.post("/api/payments", json={
        "bookingId": booking_id,
        "paymentMethod": method,
        "paymentDetails": details or {},
    }, headers=headers)


@pytest.mark.asyncio
async def test_end_to_end_card_payment(client: AsyncClient, register_user, booking_payload, card_details):
    """Register, log in, book JFK -> LHR and pay by card: confirmed with a ticket."""
    await register_user(client, email="alice@example.com", password="password123")
    login = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "password123"})
    headers = {"Authorization": f"Bearer {login.json()['token']}"}

    booking = (await client.post("/api/bookings", json=booking_payload(), headers=headers)).json()["booking"]
    assert booking["status"] == "pending"

    response = await pay(client, headers, booking["id"], details=card_details)
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["message"] == "Payment processed successfully"
    assert data["transactionId"].startswith("txn_")
    assert data["transaction"]["status"] == "completed"
    assert data["transaction"]["amount"] == booking["totalAmount"]
    assert data["booking"]["status"] == "confirmed"
    assert data["booking"]["ticketUrl"] == f"/tickets/{booking['pnr']}.pdf"

    ticket = await client.get(data["booking"]["ticketUrl"])
    assert ticket.status_code == 200
    assert ticket.content.startswith(b"%PDF")


@pytest.mark.asyncio
async def test_confirmed_booking_cannot_be_paid_again(client: AsyncClient, auth_headers, pending_booking, card_details):
    first = await pay(client, auth_headers, pending_booking["id"], details=card_details)
    assert first.status_code == 200

    second = await pay(client, auth_headers, pending_booking["id"], details=card_details)
    assert second.status_code == 409
    assert second.json()["message"] == "Booking is not eligible for payment"


@pytest.mark.asyncio
async def test_concurrent_payments_complete_at_most_once(
    client: AsyncClient, auth_headers, pending_booking, card_details
):
    """Two simultaneous attempts on one pending booking: one wins, one is rejected."""
    responses = await asyncio.gather(
        pay(client, auth_headers, pending_booking["id"], details=card_details),
        pay(client, auth_headers, pending_booking["id"], details=card_details),
    )
    assert sorted(r.status_code for r in responses) == [200, 409]

    history = (await client.get("/api/payments/history", headers=auth_headers)).json()["transactions"]
    completed = [t for t in history if t["status"] == "completed"]
    assert len(completed) == 1

    booking = (await client.get(f"/api/bookings/{pending_booking['id']}", headers=auth_headers)).json()["booking"]
    assert booking["status"] == "confirmed"


@pytest.mark.asyncio
async def test_concurrent_payments_on_memory_backend(
    memory_client: AsyncClient, register_user, booking_payload, card_details
):
    data = await register_user(memory_client)
    headers = {"Authorization": f"Bearer {data['token']}"}
    booking = (await memory_client.post("/api/bookings", json=booking_payload(), headers=headers)).json()["booking"]

    responses = await asyncio.gather(*[
        pay(memory_client, headers, booking["id"], details=card_details) for _ in range(5)
    ])
    assert [r.status_code for r in responses].count(200) == 1

    history = (await memory_client.get("/api/payments/history", headers=headers)).json()["transactions"]
    assert [t["status"] for t in history].count("completed") == 1


@pytest.mark.asyncio
async def test_missing_card_details(client: AsyncClient, auth_headers, pending_booking):
    response = await pay(client, auth_headers, pending_booking["id"], details={"cardNumber": "4242424242424242"})
    assert response.status_code == 400
    assert response.json()["message"] == "Missing required card details"


@pytest.mark.asyncio
async def test_invalid_card_is_recorded_as_failed(client: AsyncClient, auth_headers, pending_booking, card_details):
    """Server-side validation failures are stored and the booking stays payable."""
    bad = dict(card_details, cardNumber="1234", cvv="12")
    response = await pay(client, auth_headers, pending_booking["id"], details=bad)
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid card details"
    assert any(e.startswith("cardNumber") for e in body["errors"])
    assert any(e.startswith("cvv") for e in body["errors"])

    history = (await client.get("/api/payments/history", headers=auth_headers)).json()["transactions"]
    assert [t["status"] for t in history] == ["failed"]

    retry = await pay(client, auth_headers, pending_booking["id"], details=card_details)
    assert retry.status_code == 200


@pytest.mark.asyncio
async def test_declined_card_leaves_booking_pending(
    make_settings, serve, register_user, booking_payload, card_details
):
    async for ac in serve(make_settings(CARD_SIMULATION_SUCCESS_RATE=0.0)):
        data = await register_user(ac)
        headers = {"Authorization": f"Bearer {data['token']}"}
        booking = (await ac.post("/api/bookings", json=booking_payload(), headers=headers)).json()["booking"]

        response = await pay(ac, headers, booking["id"], details=card_details)
        assert response.status_code == 400
        assert response.json()["message"] == "Payment failed. Please check your payment details and try again."

        booking = (await ac.get(f"/api/bookings/{booking['id']}", headers=headers)).json()["booking"]
        assert booking["status"] == "pending"
        history = (await ac.get("/api/payments/history", headers=headers)).json()["transactions"]
        assert history[0]["status"] == "failed"
        assert history[0]["failureReason"]


@pytest.mark.asyncio
async def test_pay_someone_elses_booking(client: AsyncClient, pending_booking, register_user, card_details):
    other = await register_user(client, email="mallory@example.com")
    headers = {"Authorization": f"Bearer {other['token']}"}
    response = await pay(client, headers, pending_booking["id"], details=card_details)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_stripe_demo_flow(client: AsyncClient, auth_headers, pending_booking):
    intent = await client.post(
        "/api/payments/stripe/create-intent", json={"bookingId": pending_booking["id"]}, headers=auth_headers
    )
    assert intent.status_code == 200
    intent = intent.json()
    assert intent["demoMode"] is True
    assert intent["amount"] == pending_booking["totalAmount"]

    response = await pay(
        client, auth_headers, pending_booking["id"], method="stripe",
        details={"stripePaymentIntentId": intent["paymentIntentId"]},
    )
    assert response.status_code == 200, response.text
    assert response.json()["transaction"]["stripePaymentIntentId"] == intent["paymentIntentId"]


@pytest.mark.asyncio
async def test_stripe_demo_intent_pays_only_its_booking(
    client: AsyncClient, auth_headers, pending_booking, booking_payload
):
    other = (await client.post("/api/bookings", json=booking_payload(), headers=auth_headers)).json()["booking"]
    intent = (await client.post(
        "/api/payments/stripe/create-intent", json={"bookingId": pending_booking["id"]}, headers=auth_headers
    )).json()

    response = await pay(
        client, auth_headers, other["id"], method="stripe",
        details={"stripePaymentIntentId": intent["paymentIntentId"]},
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Payment does not match this booking"

    response = await pay(
        client, auth_headers, other["id"], method="stripe",
        details={"stripePaymentIntentId": "pi_demo_000000000000000000000000"},
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Unknown payment intent"

    response = await pay(
        client, auth_headers, pending_booking["id"], method="stripe",
        details={"stripePaymentIntentId": intent["paymentIntentId"]},
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_paypal_demo_order_pays_only_its_booking(
    client: AsyncClient, auth_headers, pending_booking, booking_payload
):
    other = (await client.post("/api/bookings", json=booking_payload(), headers=auth_headers)).json()["booking"]
    order = (await client.post(
        "/api/payments/paypal/create-order", json={"bookingId": pending_booking["id"]}, headers=auth_headers
    )).json()

    response = await client.post("/api/payments/paypal/capture", json={
        "bookingId": other["id"],
        "orderId": order["orderId"],
        "payerId": "DEMOPAYER",
    }, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Payment does not match this booking"

    booking = (await client.get(f"/api/bookings/{other['id']}", headers=auth_headers)).json()["booking"]
    assert booking["status"] == "pending"


@pytest.mark.asyncio
async def test_stripe_requires_intent(client: AsyncClient, auth_headers, pending_booking):
    response = await pay(client, auth_headers, pending_booking["id"], method="stripe")
    assert response.status_code == 400
    assert response.json()["message"] == "Missing Stripe payment intent"


@pytest.mark.asyncio
async def test_stripe_config_is_public(client: AsyncClient):
    response = await client.get("/api/payments/stripe/config")
    assert response.status_code == 200
    assert response.json()["demoMode"] is True


@pytest.mark.asyncio
async def test_unconfigured_provider_outside_demo_mode(make_settings, serve, register_user, booking_payload):
    """Without credentials and without demo mode, providers report 503 instead of faking success."""
    async for ac in serve(make_settings(PAYMENTS_DEMO_MODE=False)):
        data = await register_user(ac)
        headers = {"Authorization": f"Bearer {data['token']}"}
        booking = (await ac.post("/api/bookings", json=booking_payload(), headers=headers)).json()["booking"]

        response = await ac.post(
            "/api/payments/stripe/create-intent", json={"bookingId": booking["id"]}, headers=headers
        )
        assert response.status_code == 503

        response = await ac.post(
            "/api/payments/paypal/create-order", json={"bookingId": booking["id"]}, headers=headers
        )
        assert response.status_code == 503


@pytest.mark.asyncio
async def test_paypal_amount_mismatch(client: AsyncClient, auth_headers, pending_booking):
    response = await client.post("/api/payments/paypal/create-order", json={
        "bookingId": pending_booking["id"],
        "amount": pending_booking["totalAmount"] + 1,
    }, headers=auth_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_paypal_wrong_payer_is_declined(client: AsyncClient, auth_headers, pending_booking):
    order = (await client.post(
        "/api/payments/paypal/create-order", json={"bookingId": pending_booking["id"]}, headers=auth_headers
    )).json()
    response = await client.post("/api/payments/paypal/capture", json={
        "bookingId": pending_booking["id"],
        "orderId": order["orderId"],
        "payerId": "SOMEONEELSE",
    }, headers=auth_headers)
    assert response.status_code == 400

    booking = (await client.get(f"/api/bookings/{pending_booking['id']}", headers=auth_headers)).json()["booking"]
    assert booking["status"] == "pending"


@pytest.mark.asyncio
async def test_get_transaction(client: AsyncClient, auth_headers, pending_booking, card_details, register_user):
    paid = (await pay(client, auth_headers, pending_booking["id"], details=card_details)).json()
    transaction_id = paid["transaction"]["id"]

    response = await client.get(f"/api/payments/{transaction_id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["transaction"]["reference"] == paid["transactionId"]

    other = await register_user(client, email="bob@example.com")
    response = await client.get(
        f"/api/payments/{transaction_id}", headers={"Authorization": f"Bearer {other['token']}"}
    )
    assert response.status_code == 404


def test_validate_card_expiry_must_be_in_the_future():
    now = datetime(2026, 5, 15)
    details = PaymentDetails(card_number="4242 4242 4242 4242", cvv="123", cardholder_name="A")

    assert validate_card(details.model_copy(update={"expiry_date": "06/26"}), now) == []
    # The current month has already started
    assert validate_card(details.model_copy(update={"expiry_date": "05/26"}), now) == ["expiryDate: card has expired"]
    assert validate_card(details.model_copy(update={"expiry_date": "13/30"}), now) == ["expiryDate: invalid month"]
    assert validate_card(details.model_copy(update={"expiry_date": "2030-01"}), now) == ["expiryDate: must be MM/YY"]
