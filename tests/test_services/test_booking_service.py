import threading
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from hajzi.db.base import Base
from hajzi.models.base.enums import BookingStatus, HotelStatus, UserRole
from hajzi.models.booking.booking import Booking, BookingNight
from hajzi.models.hotel.hotel import Hotel
from hajzi.models.room.room import Room
from hajzi.models.user.user import User
from hajzi.schemas.booking.booking_base import BookingCreate, BookingFilterParams, BookingUpdate
from hajzi.services.auth.principal import Customer, principal_from_user
from hajzi.services.base.service_result import ErrorCode
from hajzi.services.booking.booking_service import BookingService


def clock_at(*args):
    now = datetime(*args, tzinfo=timezone.utc)
    return lambda: now


@pytest.fixture
def service(db):
    return BookingService(db, clock=clock_at(2025, 3, 1, 12))


def nights_of(db, booking_id):
    return sorted(
        n.night for n in db.query(BookingNight).filter(BookingNight.booking_id == booking_id).all()
    )


# --- create ---


def test_create_booking_derives_everything_from_the_room(service, db, world, booking_payload):
    customer = principal_from_user(world["customer"])

    result = service.create_booking(customer, BookingCreate(**booking_payload()))

    assert result.is_success, result.error
    booking = result.data
    assert booking.status == BookingStatus.PENDING
    assert booking.user_id == world["customer"].id
    assert booking.hotel_id == world["hotel"].id
    assert booking.owner_id == world["owner"].id
    assert booking.price == Decimal("200.00")
    assert booking.owner_whatsapp_link == "https://wa.me/967771234567"
    assert nights_of(db, booking.id) == [date(2025, 3, 10), date(2025, 3, 11)]
    history = service.repository.find_status_history(booking.id)
    assert [(h.from_status, h.to_status) for h in history] == [(None, BookingStatus.PENDING)]


def test_create_booking_prices_the_full_stay(db, world, booking_payload):
    service = BookingService(db, clock=clock_at(2024, 12, 1))
    payload = booking_payload(check_in=date(2025, 1, 1), check_out=date(2025, 1, 4))

    result = service.create_booking(principal_from_user(world["customer"]), BookingCreate(**payload))

    assert result.data.price == Decimal("300.00")


def test_create_booking_conflicts_with_confirmed_overlap(service, world, make_booking, booking_payload):
    make_booking(world["customer"], world["room"], date(2025, 3, 11), date(2025, 3, 14), BookingStatus.CONFIRMED)

    result = service.create_booking(principal_from_user(world["customer"]), BookingCreate(**booking_payload()))

    assert not result.is_success
    assert result.error_code == ErrorCode.CONFLICT
    assert result.error.details["conflicts"][0]["check_in"] == "2025-03-11"


def test_create_booking_adjacent_to_existing_stay(service, world, make_booking, booking_payload):
    make_booking(world["customer"], world["room"], date(2025, 3, 12), date(2025, 3, 14), BookingStatus.CONFIRMED)

    result = service.create_booking(principal_from_user(world["customer"]), BookingCreate(**booking_payload()))

    assert result.is_success


def test_create_booking_unknown_room(service, world, booking_payload):
    result = service.create_booking(
        principal_from_user(world["customer"]), BookingCreate(**booking_payload(room_id="missing"))
    )

    assert result.error_code == ErrorCode.NOT_FOUND


def test_create_booking_owner_without_owner_role(service, world, make_user, make_hotel, make_room, booking_payload):
    room = make_room(make_hotel(make_user(UserRole.CUSTOMER)))

    result = service.create_booking(
        principal_from_user(world["customer"]), BookingCreate(**booking_payload(room_id=room.id))
    )

    assert result.error_code == ErrorCode.INVALID_STATE


def test_create_booking_in_pending_hotel(service, world, make_hotel, make_room, booking_payload):
    room = make_room(make_hotel(world["owner"], status=HotelStatus.PENDING))

    result = service.create_booking(
        principal_from_user(world["customer"]), BookingCreate(**booking_payload(room_id=room.id))
    )

    assert result.error_code == ErrorCode.INVALID_STATE


def test_only_customers_create_bookings(service, world, booking_payload):
    result = service.create_booking(principal_from_user(world["owner"]), BookingCreate(**booking_payload()))

    assert result.error_code == ErrorCode.INSUFFICIENT_PERMISSIONS


def test_create_booking_with_past_check_in(service, world, booking_payload):
    payload = booking_payload(check_in=date(2025, 2, 27), check_out=date(2025, 3, 2))

    result = service.create_booking(principal_from_user(world["customer"]), BookingCreate(**payload))

    assert result.error_code == ErrorCode.VALIDATION_ERROR
    assert result.error.field == "check_in"


def test_racing_create_loses_on_night_claim(service, db, world, booking_payload, monkeypatch):
    customer = principal_from_user(world["customer"])
    assert service.create_booking(customer, BookingCreate(**booking_payload())).is_success

    # Second writer whose availability scan ran before the first commit
    racer = BookingService(db, clock=clock_at(2025, 3, 1, 12))
    monkeypatch.setattr(racer.availability, "ensure_available", lambda *args, **kwargs: None)
    payload = booking_payload(check_in=date(2025, 3, 11), check_out=date(2025, 3, 13))

    result = racer.create_booking(customer, BookingCreate(**payload))

    assert result.error_code == ErrorCode.CONFLICT
    assert db.query(Booking).count() == 1


def test_concurrent_creates_for_the_same_nights(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'concurrent.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    make_session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    with make_session() as setup:
        owner = User(full_name="Owner", email="owner@example.com", phone="770000001", role=UserRole.OWNER)
        customers = [
            User(full_name=f"Guest {n}", email=f"guest{n}@example.com", phone=f"77000001{n}", role=UserRole.CUSTOMER)
            for n in (1, 2)
        ]
        setup.add_all([owner, *customers])
        setup.flush()
        hotel = Hotel(owner_id=owner.id, city_id="sanaa", name="Dar Al Hajar", status=HotelStatus.APPROVED)
        setup.add(hotel)
        setup.flush()
        room = Room(hotel_id=hotel.id, name="Rock View", base_price=Decimal("100"), capacity=2)
        setup.add(room)
        setup.commit()
        customer_ids = [c.id for c in customers]
        room_id = room.id

    barrier = threading.Barrier(2)
    outcomes = {}

    def book(customer_id):
        session = make_session()
        try:
            service = BookingService(session, clock=clock_at(2025, 3, 1, 12))
            payload = BookingCreate(
                room_id=room_id,
                check_in=date(2025, 3, 10),
                check_out=date(2025, 3, 12),
                full_name="Guest",
                guest_name="Guest",
                phone_number="771234567",
            )
            barrier.wait()
            result = service.create_booking(Customer(id=customer_id), payload)
            outcomes[customer_id] = "ok" if result.is_success else result.error_code
        finally:
            session.close()

    threads = [threading.Thread(target=book, args=(customer_id,)) for customer_id in customer_ids]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    try:
        assert sorted(outcomes.values(), key=str) == sorted(["ok", ErrorCode.CONFLICT], key=str)
        with make_session() as check:
            assert check.query(Booking).count() == 1
            assert check.query(BookingNight).count() == 2
    finally:
        engine.dispose()


def test_create_booking_retries_a_dropped_connection(service, db, world, booking_payload, monkeypatch):
    real_flush = db.flush
    calls = []

    def flush_once_broken(*args, **kwargs):
        calls.append(1)
        if len(calls) == 1:
            raise OperationalError("INSERT INTO bookings", {}, Exception("server closed the connection unexpectedly"))
        return real_flush(*args, **kwargs)

    monkeypatch.setattr(db, "flush", flush_once_broken)

    result = service.create_booking(principal_from_user(world["customer"]), BookingCreate(**booking_payload()))

    assert result.is_success, result.error
    assert len(calls) > 1
    assert db.query(Booking).count() == 1
    assert nights_of(db, result.data.id) == [date(2025, 3, 10), date(2025, 3, 11)]


def test_create_booking_gives_up_after_repeated_connection_loss(service, db, world, booking_payload, monkeypatch):
    calls = []

    def flush_always_broken(*args, **kwargs):
        calls.append(1)
        raise OperationalError("INSERT INTO bookings", {}, Exception("server closed the connection unexpectedly"))

    monkeypatch.setattr(db, "flush", flush_always_broken)

    result = service.create_booking(principal_from_user(world["customer"]), BookingCreate(**booking_payload()))

    assert result.error_code == ErrorCode.INTERNAL_ERROR
    assert len(calls) == service.transactions.max_attempts
    monkeypatch.undo()
    assert db.query(Booking).count() == 0


# --- read ---


def test_get_booking_visibility(service, world, make_user, make_booking):
    booking = make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12))
    stranger = make_user(UserRole.CUSTOMER)
    admin = make_user(UserRole.SUPER_ADMIN)

    assert service.get_booking(principal_from_user(world["customer"]), booking.id).is_success
    assert service.get_booking(principal_from_user(world["owner"]), booking.id).is_success
    assert service.get_booking(principal_from_user(admin), booking.id).is_success
    denied = service.get_booking(principal_from_user(stranger), booking.id)
    assert denied.error_code == ErrorCode.INSUFFICIENT_PERMISSIONS


def test_get_missing_booking(service, world):
    assert service.get_booking(principal_from_user(world["customer"]), "missing").error_code == ErrorCode.NOT_FOUND


# --- update ---


def test_update_dates_reprices_and_reclaims_nights(service, db, world, make_booking):
    booking = make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12))

    result = service.update_booking(
        principal_from_user(world["customer"]),
        booking.id,
        BookingUpdate(check_out=date(2025, 3, 15)),
    )

    assert result.is_success, result.error
    assert result.data.price == Decimal("500.00")
    assert nights_of(db, booking.id) == [date(2025, 3, d) for d in range(10, 15)]


def test_update_to_another_room_rederives_hotel_and_owner(service, world, make_user, make_hotel, make_room, make_booking):
    other_owner = make_user(UserRole.OWNER)
    other_room = make_room(make_hotel(other_owner), base_price=Decimal("80.00"))
    booking = make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12))

    result = service.update_booking(
        principal_from_user(world["customer"]), booking.id, BookingUpdate(room_id=other_room.id)
    )

    assert result.is_success, result.error
    assert result.data.owner_id == other_owner.id
    assert result.data.hotel_id == other_room.hotel_id
    assert result.data.price == Decimal("160.00")
    assert result.data.owner_whatsapp_link is None


def test_update_into_an_occupied_range(service, world, make_user, make_booking):
    other = make_user(UserRole.CUSTOMER)
    make_booking(other, world["room"], date(2025, 3, 12), date(2025, 3, 14), BookingStatus.CONFIRMED)
    booking = make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12))

    result = service.update_booking(
        principal_from_user(world["customer"]), booking.id, BookingUpdate(check_out=date(2025, 3, 13))
    )

    assert result.error_code == ErrorCode.CONFLICT


def test_update_guest_details_and_clear_notes(service, db, world, make_booking):
    booking = make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12))
    booking.notes = "Late arrival"
    db.commit()

    result = service.update_booking(
        principal_from_user(world["customer"]),
        booking.id,
        BookingUpdate(guest_name="Sara Ahmed", notes=None, adults=None),
    )

    assert result.is_success
    assert result.data.guest_name == "Sara Ahmed"
    assert result.data.notes is None
    assert result.data.adults == 1
    assert result.data.price == Decimal("200.00")


def test_update_confirmed_booking(service, world, make_booking):
    booking = make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12), BookingStatus.CONFIRMED)

    result = service.update_booking(principal_from_user(world["customer"]), booking.id, BookingUpdate(adults=2))

    assert result.error_code == ErrorCode.INVALID_TRANSITION


def test_update_inside_modification_window(db, world, make_booking):
    service = BookingService(db, clock=clock_at(2025, 3, 8, 12))
    booking = make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12))

    result = service.update_booking(principal_from_user(world["customer"]), booking.id, BookingUpdate(adults=2))

    assert result.error_code == ErrorCode.INVALID_TRANSITION


def test_update_someone_elses_booking(service, world, make_user, make_booking):
    booking = make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12))

    result = service.update_booking(
        principal_from_user(make_user(UserRole.CUSTOMER)), booking.id, BookingUpdate(adults=2)
    )

    assert result.error_code == ErrorCode.INSUFFICIENT_PERMISSIONS


# --- cancel ---


def test_cancel_ten_hours_before_check_in(db, world, make_booking):
    service = BookingService(db, clock=clock_at(2025, 3, 9, 14))
    booking = make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12), BookingStatus.CONFIRMED)

    result = service.cancel_booking(principal_from_user(world["customer"]), booking.id)

    assert result.error_code == ErrorCode.INVALID_TRANSITION


def test_cancel_thirty_hours_before_check_in_releases_nights(db, world, make_booking):
    service = BookingService(db, clock=clock_at(2025, 3, 8, 18))
    booking = make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12), BookingStatus.CONFIRMED)

    result = service.cancel_booking(principal_from_user(world["customer"]), booking.id)

    assert result.is_success
    assert result.data.status == BookingStatus.CANCELLED
    assert nights_of(db, booking.id) == []


def test_cancel_twice(service, world, make_booking):
    booking = make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12), BookingStatus.CANCELLED)

    result = service.cancel_booking(principal_from_user(world["customer"]), booking.id)

    assert result.error_code == ErrorCode.INVALID_TRANSITION


def test_owner_cannot_cancel(service, world, make_booking):
    booking = make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12))

    result = service.cancel_booking(principal_from_user(world["owner"]), booking.id)

    assert result.error_code == ErrorCode.INSUFFICIENT_PERMISSIONS


# --- status decisions ---


def test_owner_confirms_pending_booking(service, world, make_booking):
    booking = make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12))

    result = service.set_booking_status(principal_from_user(world["owner"]), booking.id, BookingStatus.CONFIRMED)

    assert result.is_success
    assert result.data.status == BookingStatus.CONFIRMED
    assert result.data.confirmed_at is not None


def test_confirming_a_confirmed_booking_is_a_no_op(service, world, make_booking):
    booking = make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12), BookingStatus.CONFIRMED)

    result = service.set_booking_status(principal_from_user(world["owner"]), booking.id, BookingStatus.CONFIRMED)

    assert result.is_success
    assert result.message == "Booking status unchanged"
    assert service.repository.find_status_history(booking.id) == []


def test_confirming_a_cancelled_booking(service, world, make_booking):
    booking = make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12), BookingStatus.CANCELLED)

    result = service.set_booking_status(principal_from_user(world["owner"]), booking.id, BookingStatus.CONFIRMED)

    assert result.error_code == ErrorCode.INVALID_TRANSITION


def test_rejection_frees_the_room(service, db, world, make_user, make_booking):
    booking = make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12))
    admin = principal_from_user(make_user(UserRole.SUPER_ADMIN))

    result = service.set_booking_status(admin, booking.id, BookingStatus.REJECTED)

    assert result.is_success
    assert nights_of(db, booking.id) == []
    assert not service.availability.has_conflict(world["room"].id, date(2025, 3, 10), date(2025, 3, 12))


def test_other_owner_cannot_decide(service, world, make_user, make_booking):
    booking = make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12))

    result = service.set_booking_status(
        principal_from_user(make_user(UserRole.OWNER)), booking.id, BookingStatus.CONFIRMED
    )

    assert result.error_code == ErrorCode.INSUFFICIENT_PERMISSIONS


# --- listings ---


def test_listings_are_scoped_by_role(service, world, make_user, make_hotel, make_room, make_booking):
    aden_owner = make_user(UserRole.OWNER)
    aden_room = make_room(make_hotel(aden_owner, city_id="aden"))
    other_customer = make_user(UserRole.CUSTOMER)
    sanaa_booking = make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12))
    aden_booking = make_booking(other_customer, aden_room, date(2025, 3, 10), date(2025, 3, 12))

    def ids_for(user):
        page = service.list_bookings(principal_from_user(user), BookingFilterParams()).unwrap()
        return {item.id for item in page.items}

    assert ids_for(world["customer"]) == {sanaa_booking.id}
    assert ids_for(world["owner"]) == {sanaa_booking.id}
    assert ids_for(aden_owner) == {aden_booking.id}
    assert ids_for(make_user(UserRole.CITY_ADMIN, city_id="sanaa")) == {sanaa_booking.id}
    assert ids_for(make_user(UserRole.CITY_ADMIN, city_id="taiz")) == set()
    assert ids_for(make_user(UserRole.SUPER_ADMIN)) == {sanaa_booking.id, aden_booking.id}


def test_city_admin_without_city_cannot_list(service, make_user):
    result = service.list_bookings(principal_from_user(make_user(UserRole.CITY_ADMIN)), BookingFilterParams())

    assert result.error_code == ErrorCode.INSUFFICIENT_PERMISSIONS


def test_listing_filters_search_and_pagination(service, world, make_booking):
    make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12), full_name="Ali Saleh")
    make_booking(world["customer"], world["room"], date(2025, 3, 12), date(2025, 3, 14), BookingStatus.CONFIRMED, full_name="Huda Nasser")
    make_booking(world["customer"], world["room"], date(2025, 3, 14), date(2025, 3, 16), BookingStatus.CANCELLED, full_name="Omar Ali")
    customer = principal_from_user(world["customer"])

    confirmed = service.list_bookings(customer, BookingFilterParams(status="confirmed")).unwrap()
    assert [b.full_name for b in confirmed.items] == ["Huda Nasser"]

    everything = service.list_bookings(customer, BookingFilterParams(status="all")).unwrap()
    assert everything.meta.total_items == 3

    found = service.list_bookings(customer, BookingFilterParams(search="ali", sort_by="check_in", sort_dir="asc")).unwrap()
    assert [b.full_name for b in found.items] == ["Ali Saleh", "Omar Ali"]

    page = service.list_bookings(customer, BookingFilterParams(page=2, page_size=2, sort_by="check_in", sort_dir="asc")).unwrap()
    assert [b.check_in for b in page.items] == [date(2025, 3, 14)]
    assert page.meta.total_pages == 2
    assert page.meta.has_previous and not page.meta.has_next


def test_owner_id_filter_is_for_super_admins_only(service, world, make_user, make_hotel, make_room, make_booking):
    other_owner = make_user(UserRole.OWNER)
    other_room = make_room(make_hotel(other_owner))
    make_booking(world["customer"], world["room"], date(2025, 3, 10), date(2025, 3, 12))
    other_booking = make_booking(world["customer"], other_room, date(2025, 3, 10), date(2025, 3, 12))

    admin_page = service.list_bookings(
        principal_from_user(make_user(UserRole.SUPER_ADMIN)), BookingFilterParams(owner_id=other_owner.id)
    ).unwrap()
    assert [b.id for b in admin_page.items] == [other_booking.id]

    customer_page = service.list_bookings(
        principal_from_user(world["customer"]), BookingFilterParams(owner_id=other_owner.id)
    ).unwrap()
    assert customer_page.meta.total_items == 2
