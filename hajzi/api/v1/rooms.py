from typing import List, Optional

from fastapi import APIRouter, Query

from hajzi.api.deps import CurrentPrincipal, OwnerOrAdminPrincipal, RoomServiceDep
from hajzi.api.exception_handlers import unwrap_result
from hajzi.schemas.common.response import SuccessResponse
from hajzi.schemas.room.room_base import RoomResponse, RoomStatusUpdate, RoomUpdate

router = APIRouter(prefix="/rooms", tags=["rooms"])


def _room_envelope(result) -> SuccessResponse[RoomResponse]:
    room = unwrap_result(result)
    return SuccessResponse[RoomResponse].create(result.message, RoomResponse.model_validate(room))


@router.get("", response_model=SuccessResponse[List[RoomResponse]])
def list_rooms(
    principal: CurrentPrincipal,
    service: RoomServiceDep,
    hotel_id: Optional[str] = Query(default=None),
) -> SuccessResponse[List[RoomResponse]]:
    result = service.list_rooms(principal, hotel_id)
    rooms = [RoomResponse.model_validate(room) for room in unwrap_result(result)]
    return SuccessResponse[List[RoomResponse]].create(result.message, rooms)


@router.get("/{room_id}", response_model=SuccessResponse[RoomResponse])
def get_room(room_id: str, principal: CurrentPrincipal, service: RoomServiceDep) -> SuccessResponse[RoomResponse]:
    return _room_envelope(service.get_room(principal, room_id))


@router.patch("/{room_id}", response_model=SuccessResponse[RoomResponse])
def update_room(
    room_id: str,
    payload: RoomUpdate,
    principal: OwnerOrAdminPrincipal,
    service: RoomServiceDep,
) -> SuccessResponse[RoomResponse]:
    return _room_envelope(service.update_room(principal, room_id, payload))


@router.patch("/{room_id}/visibility", response_model=SuccessResponse[RoomResponse])
def set_room_visibility(
    room_id: str,
    payload: RoomStatusUpdate,
    principal: OwnerOrAdminPrincipal,
    service: RoomServiceDep,
) -> SuccessResponse[RoomResponse]:
    return _room_envelope(service.set_room_status(principal, room_id, payload.status))
