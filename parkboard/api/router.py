from __future__ import annotations

from fastapi import APIRouter

from parkboard.api.routes import admin_audit, admin_bookings, bookings, slots

api_router = APIRouter()

api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(slots.router, prefix="/slots", tags=["slots"])

# Admin
api_router.include_router(admin_bookings.router, prefix="/admin", tags=["admin"])
api_router.include_router(admin_audit.router, prefix="/admin", tags=["admin"])
