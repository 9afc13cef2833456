from __future__ import annotations

from fastapi import APIRouter

from booking_engine.api.routes import availability, bookings, external_events, holds, resources

api_router = APIRouter()

# Public
api_router.include_router(availability.router, prefix="/availability", tags=["availability"])

# Requester
api_router.include_router(holds.router, prefix="/holds", tags=["holds"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])

# Owner
api_router.include_router(resources.router, prefix="/resources", tags=["resources"])
api_router.include_router(external_events.router, prefix="/resources/{resource_id}/external-events", tags=["external-events"])
