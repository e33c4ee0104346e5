import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-hajzi-booking-0123456789")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date, datetime, timezone
from decimal import Decimal
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hajzi.api.deps import get_clock
from hajzi.core.security.jwt_handler import JWTManager
from hajzi.db.base import Base, import_models
from hajzi.db.session import get_db
from hajzi.models.base.enums import (
    BookingStatus,
    Currency,
    HotelStatus,
    RoomStatus,
    UserRole,
    UserStatus,
)
from hajzi.models.booking.booking import Booking, BookingNight
from hajzi.models.hotel.hotel import Hotel
from hajzi.models.room.room import Room
from hajzi.models.user.user import User

# Fixed "now" for every time-gated rule: 2025-03-01 12:00 UTC
FIXED_NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

_seq = count(1)


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture
def engine():
    import_models()
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    def _make_user(role=UserRole.CUSTOMER, status=UserStatus.ACTIVE, city_id=None, whatsapp_number=None):
        n = next(_seq)
        user = User(
            full_name=f"User {n}",
            email=f"user{n}@example.com",
            phone=f"7700{n:05d}",
            whatsapp_number=whatsapp_number,
            role=role,
            status=status,
            city_id=city_id,
        )
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def make_hotel(db):
    def _make_hotel(owner, city_id="sanaa", status=HotelStatus.APPROVED, is_visible=True, name=None):
        hotel = Hotel(
            owner_id=owner.id,
            city_id=city_id,
            name=name or f"Hotel {next(_seq)}",
            status=status,
            is_visible=is_visible,
        )
        db.add(hotel)
        db.commit()
        return hotel

    return _make_hotel


@pytest.fixture
def make_room(db):
    def _make_room(hotel, base_price=Decimal("100.00"), status=RoomStatus.VISIBLE, name=None):
        room = Room(
            hotel_id=hotel.id,
            name=name or f"Room {next(_seq)}",
            base_price=base_price,
            currency=Currency.YER,
            capacity=2,
            status=status,
        )
        db.add(room)
        db.commit()
        return room

    return _make_room


@pytest.fixture
def make_booking(db):
    """Insert a booking directly, bypassing the service rules."""

    def _make_booking(customer, room, check_in, check_out, status=BookingStatus.PENDING, full_name="Ali Saleh"):
        hotel = db.get(Hotel, room.hotel_id)
        booking = Booking(
            user_id=customer.id,
            owner_id=hotel.owner_id,
            room_id=room.id,
            hotel_id=hotel.id,
            check_in=check_in,
            check_out=check_out,
            adults=1,
            children=0,
            price=room.base_price * (check_out - check_in).days,
            currency=room.currency,
            status=status,
            full_name=full_name,
            guest_name=full_name,
            phone_number="+967771234567",
        )
        if status in (BookingStatus.PENDING, BookingStatus.CONFIRMED):
            booking.nights = [BookingNight(room_id=room.id, night=night) for night in booking.stay_nights()]
        db.add(booking)
        db.commit()
        return booking

    return _make_booking


@pytest.fixture
def world(make_user, make_hotel, make_room):
    """Owner with an approved hotel and a room in Sana'a, plus a customer."""
    owner = make_user(UserRole.OWNER, whatsapp_number="771234567")
    hotel = make_hotel(owner)
    room = make_room(hotel)
    customer = make_user(UserRole.CUSTOMER)
    return {"owner": owner, "hotel": hotel, "room": room, "customer": customer}


@pytest.fixture
def booking_payload(world):
    def _payload(**overrides):
        payload = {
            "room_id": world["room"].id,
            "check_in": date(2025, 3, 10),
            "check_out": date(2025, 3, 12),
            "adults": 2,
            "children": 0,
            "full_name": "Ali Saleh",
            "guest_name": "Ali Saleh",
            "phone_number": "771234567",
        }
        payload.update(overrides)
        return payload

    return _payload


@pytest.fixture
def app(db):
    from hajzi.main import create_app

    app = create_app()

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_clock] = lambda: fixed_clock
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers():
    jwt_manager = JWTManager()

    def _headers(user):
        return {"Authorization": f"Bearer {jwt_manager.create_access_token(user.id)}"}

    return _headers
