"""
Hotel listing, moderation, visibility and room creation endpoints.
"""

from fastapi import APIRouter, status

from hajzi.api.deps import (
    HotelServiceDep,
    ModeratorPrincipal,
    OwnerOrAdminPrincipal,
    RoomServiceDep,
)
from hajzi.api.exception_handlers import unwrap_result
from hajzi.schemas.common.response import SuccessResponse
from hajzi.schemas.hotel.hotel_base import HotelCreate, HotelResponse, HotelStatusUpdate
from hajzi.schemas.room.room_base import RoomCreate, RoomResponse

router = APIRouter(prefix="/hotels", tags=["hotels"])


@router.post("", response_model=SuccessResponse[HotelResponse], status_code=status.HTTP_201_CREATED)
def create_hotel(
    payload: HotelCreate,
    principal: OwnerOrAdminPrincipal,
    service: HotelServiceDep,
) -> SuccessResponse[HotelResponse]:
    result = service.create_hotel(principal, payload)
    hotel = unwrap_result(result)
    return SuccessResponse[HotelResponse].create(result.message, HotelResponse.model_validate(hotel))


@router.patch("/{hotel_id}/status", response_model=SuccessResponse[HotelResponse])
def set_hotel_status(
    hotel_id: str,
    payload: HotelStatusUpdate,
    principal: ModeratorPrincipal,
    service: HotelServiceDep,
) -> SuccessResponse[HotelResponse]:
    result = service.set_hotel_status(principal, hotel_id, payload.status)
    hotel = unwrap_result(result)
    return SuccessResponse[HotelResponse].create(result.message, HotelResponse.model_validate(hotel))


@router.post("/{hotel_id}/show", response_model=SuccessResponse[HotelResponse])
def show_hotel(
    hotel_id: str,
    principal: OwnerOrAdminPrincipal,
    service: HotelServiceDep,
) -> SuccessResponse[HotelResponse]:
    result = service.set_hotel_visibility(principal, hotel_id, True)
    hotel = unwrap_result(result)
    return SuccessResponse[HotelResponse].create(result.message, HotelResponse.model_validate(hotel))


@router.post("/{hotel_id}/hide", response_model=SuccessResponse[HotelResponse])
def hide_hotel(
    hotel_id: str,
    principal: OwnerOrAdminPrincipal,
    service: HotelServiceDep,
) -> SuccessResponse[HotelResponse]:
    result = service.set_hotel_visibility(principal, hotel_id, False)
    hotel = unwrap_result(result)
    return SuccessResponse[HotelResponse].create(result.message, HotelResponse.model_validate(hotel))


@router.post(
    "/{hotel_id}/rooms",
    response_model=SuccessResponse[RoomResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_room(
    hotel_id: str,
    payload: RoomCreate,
    principal: OwnerOrAdminPrincipal,
    service: RoomServiceDep,
) -> SuccessResponse[RoomResponse]:
    result = service.create_room(principal, hotel_id, payload)
    room = unwrap_result(result)
    return SuccessResponse[RoomResponse].create(result.message, RoomResponse.model_validate(room))
