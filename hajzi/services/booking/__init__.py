from hajzi.services.booking.availability_service import AvailabilityService, ranges_overlap
from hajzi.services.booking.booking_lifecycle import BookingLifecycle
from hajzi.services.booking.booking_pricing_service import (
    BookingPricingService,
    calculate_nights,
    calculate_price,
)
from hajzi.services.booking.booking_service import BookingService
from hajzi.services.booking.ownership_resolver import (
    OwnershipChain,
    OwnershipResolver,
    build_whatsapp_link,
    derive_associations,
)

__all__ = [
    "AvailabilityService",
    "ranges_overlap",
    "BookingLifecycle",
    "BookingPricingService",
    "calculate_nights",
    "calculate_price",
    "BookingService",
    "OwnershipChain",
    "OwnershipResolver",
    "build_whatsapp_link",
    "derive_associations",
]
