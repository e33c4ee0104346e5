"""
FastAPI dependencies: database session, authenticated principal and services.
"""

from typing import Annotated, Callable, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from hajzi.core.exceptions import AuthenticationError, AuthorizationError, InvalidTokenError, TokenExpiredError
from hajzi.core.logging import get_logger, user_id as user_id_var
from hajzi.core.security.jwt_handler import get_jwt_manager
from hajzi.db.session import get_db
from hajzi.models.base.enums import UserRole
from hajzi.models.user.user import User
from hajzi.repositories.user.user_repository import UserRepository
from hajzi.services.auth.principal import Principal, principal_from_user
from hajzi.services.booking.booking_lifecycle import Clock, utc_clock
from hajzi.services.booking.booking_service import BookingService
from hajzi.services.hotel.hotel_service import HotelService
from hajzi.services.room.room_service import RoomService

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

DBSession = Annotated[Session, Depends(get_db)]


def get_current_user(
    db: DBSession,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> User:
    """
    Resolve the bearer token to an active user.

    Raises:
        AuthenticationError: Missing, invalid or expired token, unknown or inactive user
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")

    try:
        payload = get_jwt_manager().verify_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError()
    except jwt.InvalidTokenError as e:
        logger.debug(f"Token rejected: {e}")
        raise InvalidTokenError()

    user = UserRepository(db).find_by_id(payload["user_id"])
    if user is None:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("User account is not active")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def get_current_principal(user: CurrentUser) -> Principal:
    user_id_var.set(user.id)
    return principal_from_user(user)


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


def require_roles(*roles: UserRole) -> Callable[[Principal], Principal]:
    """Route-level role gate; services still check the target."""
    allowed = frozenset(roles)

    def checker(principal: CurrentPrincipal) -> Principal:
        if principal.role not in allowed:
            raise AuthorizationError(
                "Your role cannot access this endpoint",
                required_roles=sorted(role.value for role in allowed),
            )
        return principal

    return checker


def get_clock() -> Clock:
    return utc_clock


def get_booking_service(db: DBSession, clock: Annotated[Clock, Depends(get_clock)]) -> BookingService:
    return BookingService(db, clock=clock)


def get_hotel_service(db: DBSession) -> HotelService:
    return HotelService(db)


def get_room_service(db: DBSession) -> RoomService:
    return RoomService(db)


BookingServiceDep = Annotated[BookingService, Depends(get_booking_service)]
HotelServiceDep = Annotated[HotelService, Depends(get_hotel_service)]
RoomServiceDep = Annotated[RoomService, Depends(get_room_service)]

CustomerPrincipal = Annotated[Principal, Depends(require_roles(UserRole.CUSTOMER))]
OwnerPrincipal = Annotated[Principal, Depends(require_roles(UserRole.OWNER))]
CityAdminPrincipal = Annotated[Principal, Depends(require_roles(UserRole.CITY_ADMIN))]
SuperAdminPrincipal = Annotated[Principal, Depends(require_roles(UserRole.SUPER_ADMIN))]
OwnerOrAdminPrincipal = Annotated[Principal, Depends(require_roles(UserRole.OWNER, UserRole.SUPER_ADMIN))]
ModeratorPrincipal = Annotated[Principal, Depends(require_roles(UserRole.CITY_ADMIN, UserRole.SUPER_ADMIN))]
