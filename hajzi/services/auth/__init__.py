from hajzi.services.auth.access_control import AccessControl, Action, BookingScope, can_act
from hajzi.services.auth.principal import (
    CityAdmin,
    Customer,
    Owner,
    Principal,
    SuperAdmin,
    principal_from_user,
)

__all__ = [
    "AccessControl",
    "Action",
    "BookingScope",
    "can_act",
    "CityAdmin",
    "Customer",
    "Owner",
    "Principal",
    "SuperAdmin",
    "principal_from_user",
]
