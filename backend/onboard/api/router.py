"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter

from onboard.api.routes import admin, airports, auth, bookings, guest, health, payments, support, user

api_router = APIRouter(prefix="/api")
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(airports.router)
api_router.include_router(bookings.router)
api_router.include_router(guest.router)
api_router.include_router(payments.router)
api_router.include_router(user.router)
api_router.include_router(support.router)
api_router.include_router(admin.router)
