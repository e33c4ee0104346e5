from hajzi.models.hotel.hotel import Hotel

__all__ = ["Hotel"]
