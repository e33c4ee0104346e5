"""
Room booking endpoints.

Role gates here decide who may reach an endpoint; the booking service
re-checks every booking against the caller.
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from hajzi.api.deps import (
    BookingServiceDep,
    CityAdminPrincipal,
    CurrentPrincipal,
    CustomerPrincipal,
    OwnerOrAdminPrincipal,
    OwnerPrincipal,
    SuperAdminPrincipal,
)
from hajzi.api.exception_handlers import unwrap_result
from hajzi.models.booking.booking import Booking
from hajzi.schemas.booking.booking_base import (
    BookingCreate,
    BookingFilterParams,
    BookingResponse,
    BookingStatusUpdate,
    BookingUpdate,
)
from hajzi.schemas.common.pagination import PaginatedResponse
from hajzi.schemas.common.response import SuccessResponse
from hajzi.services.auth.principal import Principal
from hajzi.services.base.service_result import ServiceResult
from hajzi.services.booking.booking_service import BookingService

router = APIRouter(prefix="/room-bookings", tags=["room-bookings"])

BookingFilters = Annotated[BookingFilterParams, Query()]
BookingEnvelope = SuccessResponse[BookingResponse]
BookingPageEnvelope = SuccessResponse[PaginatedResponse[BookingResponse]]


def _booking_envelope(result: ServiceResult[Booking]) -> BookingEnvelope:
    booking = unwrap_result(result)
    return BookingEnvelope.create(result.message, BookingResponse.model_validate(booking))


def _page_envelope(
    service: BookingService,
    principal: Principal,
    filters: BookingFilterParams,
) -> BookingPageEnvelope:
    result = service.list_bookings(principal, filters)
    page = unwrap_result(result)
    return SuccessResponse.create(result.message, page)


@router.post("", response_model=BookingEnvelope, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate,
    principal: CustomerPrincipal,
    service: BookingServiceDep,
) -> BookingEnvelope:
    return _booking_envelope(service.create_booking(principal, payload))


@router.get("/my-bookings", response_model=BookingPageEnvelope)
def list_my_bookings(
    filters: BookingFilters,
    principal: CustomerPrincipal,
    service: BookingServiceDep,
) -> BookingPageEnvelope:
    return _page_envelope(service, principal, filters)


@router.get("/owner/my-bookings", response_model=BookingPageEnvelope)
def list_owner_bookings(
    filters: BookingFilters,
    principal: OwnerPrincipal,
    service: BookingServiceDep,
) -> BookingPageEnvelope:
    return _page_envelope(service, principal, filters)


@router.get("/admin/all", response_model=BookingPageEnvelope)
def list_all_bookings(
    filters: BookingFilters,
    principal: SuperAdminPrincipal,
    service: BookingServiceDep,
) -> BookingPageEnvelope:
    return _page_envelope(service, principal, filters)


@router.get("/cityadmin/all", response_model=BookingPageEnvelope)
def list_city_bookings(
    filters: BookingFilters,
    principal: CityAdminPrincipal,
    service: BookingServiceDep,
) -> BookingPageEnvelope:
    return _page_envelope(service, principal, filters)


@router.get("/{booking_id}", response_model=BookingEnvelope)
def get_booking(
    booking_id: str,
    principal: CurrentPrincipal,
    service: BookingServiceDep,
) -> BookingEnvelope:
    return _booking_envelope(service.get_booking(principal, booking_id))


@router.put("/{booking_id}", response_model=BookingEnvelope)
def update_booking(
    booking_id: str,
    payload: BookingUpdate,
    principal: CustomerPrincipal,
    service: BookingServiceDep,
) -> BookingEnvelope:
    return _booking_envelope(service.update_booking(principal, booking_id, payload))


@router.delete("/{booking_id}", response_model=BookingEnvelope)
def cancel_booking(
    booking_id: str,
    principal: CustomerPrincipal,
    service: BookingServiceDep,
) -> BookingEnvelope:
    return _booking_envelope(service.cancel_booking(principal, booking_id))


@router.patch("/{booking_id}/status", response_model=BookingEnvelope)
def set_booking_status(
    booking_id: str,
    payload: BookingStatusUpdate,
    principal: OwnerOrAdminPrincipal,
    service: BookingServiceDep,
) -> BookingEnvelope:
    return _booking_envelope(
        service.set_booking_status(principal, booking_id, payload.status, payload.reason)
    )
