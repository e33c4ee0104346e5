from fastapi import APIRouter

from hajzi.api.v1 import bookings, health, hotels, rooms

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(bookings.router)
api_router.include_router(hotels.router)
api_router.include_router(rooms.router)
