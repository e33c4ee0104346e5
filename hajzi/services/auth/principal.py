"""
Authenticated principals.

A principal is the role-tagged identity a request acts as. It is built
from an active User once per request and never changes during it.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional

from hajzi.models.base.enums import UserRole
from hajzi.models.user.user import User

__all__ = [
    "Principal",
    "Customer",
    "Owner",
    "CityAdmin",
    "SuperAdmin",
    "principal_from_user",
]


@dataclass(frozen=True)
class Principal:
    id: str
    role: ClassVar[UserRole]


@dataclass(frozen=True)
class Customer(Principal):
    role: ClassVar[UserRole] = UserRole.CUSTOMER


@dataclass(frozen=True)
class Owner(Principal):
    role: ClassVar[UserRole] = UserRole.OWNER


@dataclass(frozen=True)
class CityAdmin(Principal):
    city_id: Optional[str] = None
    role: ClassVar[UserRole] = UserRole.CITY_ADMIN


@dataclass(frozen=True)
class SuperAdmin(Principal):
    role: ClassVar[UserRole] = UserRole.SUPER_ADMIN


_PRINCIPAL_TYPES = {
    UserRole.CUSTOMER: Customer,
    UserRole.OWNER: Owner,
    UserRole.SUPER_ADMIN: SuperAdmin,
}


def principal_from_user(user: User) -> Principal:
    """Map a loaded user onto its principal variant."""
    if user.role == UserRole.CITY_ADMIN:
        return CityAdmin(id=user.id, city_id=user.city_id)
    return _PRINCIPAL_TYPES[user.role](id=user.id)
