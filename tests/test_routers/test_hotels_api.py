from decimal import Decimal

from hajzi.models.base.enums import HotelStatus, RoomStatus, UserRole

API = "/api/v1"


def test_health(client):
    resp = client.get(f"{API}/health")

    assert resp.status_code == 200
    assert resp.json()["database"] == "ok"


def test_hotel_listing_flow(client, make_user, auth_headers):
    owner = make_user(UserRole.OWNER)
    admin = make_user(UserRole.CITY_ADMIN, city_id="sanaa")

    created = client.post(
        f"{API}/hotels", json={"name": "Burj Al Salam", "city_id": "sanaa"}, headers=auth_headers(owner)
    )
    assert created.status_code == 201
    hotel = created.json()["data"]
    assert hotel["status"] == "pending"

    approved = client.patch(
        f"{API}/hotels/{hotel['id']}/status", json={"status": "approved"}, headers=auth_headers(admin)
    )
    assert approved.status_code == 200
    assert approved.json()["data"]["status"] == "approved"

    room = client.post(
        f"{API}/hotels/{hotel['id']}/rooms",
        json={"name": "Old City View", "base_price": "120.00", "capacity": 2},
        headers=auth_headers(owner),
    )
    assert room.status_code == 201
    assert room.json()["data"]["hotel_id"] == hotel["id"]


def test_owner_cannot_moderate(client, make_user, make_hotel, auth_headers):
    owner = make_user(UserRole.OWNER)
    hotel = make_hotel(owner, status=HotelStatus.PENDING)

    resp = client.patch(f"{API}/hotels/{hotel.id}/status", json={"status": "approved"}, headers=auth_headers(owner))

    assert resp.status_code == 403


def test_room_creation_validation(client, world, auth_headers):
    resp = client.post(
        f"{API}/hotels/{world['hotel'].id}/rooms",
        json={"name": "Cheap", "base_price": "-1"},
        headers=auth_headers(world["owner"]),
    )

    assert resp.status_code == 422
    assert "base_price" in resp.json()["error"]["details"]["field_errors"]


def test_list_rooms(client, world, auth_headers):
    resp = client.get(f"{API}/rooms", params={"hotel_id": world["hotel"].id}, headers=auth_headers(world["customer"]))

    assert resp.status_code == 200
    assert [room["id"] for room in resp.json()["data"]] == [world["room"].id]


def test_hide_and_show_hotel(client, world, auth_headers):
    headers = auth_headers(world["owner"])

    hidden = client.post(f"{API}/hotels/{world['hotel'].id}/hide", headers=headers)
    assert hidden.status_code == 200
    assert hidden.json()["data"]["is_visible"] is False
    assert hidden.json()["message"] == "Hotel is now hidden"

    shown = client.post(f"{API}/hotels/{world['hotel'].id}/show", headers=headers)
    assert shown.status_code == 200
    assert shown.json()["data"]["is_visible"] is True


def test_show_pending_hotel_is_rejected(client, make_user, make_hotel, auth_headers):
    owner = make_user(UserRole.OWNER)
    hotel = make_hotel(owner, status=HotelStatus.PENDING, is_visible=False)

    resp = client.post(f"{API}/hotels/{hotel.id}/show", headers=auth_headers(owner))

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "INVALID_STATE"


def test_customers_cannot_hide_hotels(client, world, auth_headers):
    resp = client.post(f"{API}/hotels/{world['hotel'].id}/hide", headers=auth_headers(world["customer"]))

    assert resp.status_code == 403


def test_get_room(client, world, make_room, auth_headers):
    hidden = make_room(world["hotel"], status=RoomStatus.HIDDEN)

    visible = client.get(f"{API}/rooms/{world['room'].id}", headers=auth_headers(world["customer"]))
    assert visible.status_code == 200
    assert visible.json()["data"]["id"] == world["room"].id

    assert client.get(f"{API}/rooms/{hidden.id}", headers=auth_headers(world["customer"])).status_code == 403
    assert client.get(f"{API}/rooms/{hidden.id}", headers=auth_headers(world["owner"])).status_code == 200
    assert client.get(f"{API}/rooms/missing", headers=auth_headers(world["owner"])).status_code == 404


def test_update_room_and_visibility(client, world, auth_headers):
    headers = auth_headers(world["owner"])

    updated = client.patch(
        f"{API}/rooms/{world['room'].id}", json={"base_price": "180.00", "capacity": 3}, headers=headers
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["capacity"] == 3
    assert Decimal(updated.json()["data"]["base_price"]) == Decimal("180")

    hidden = client.patch(f"{API}/rooms/{world['room'].id}/visibility", json={"status": "hidden"}, headers=headers)
    assert hidden.status_code == 200
    assert hidden.json()["data"]["status"] == "hidden"
    assert hidden.json()["message"] == "Room hidden successfully"


def test_update_room_rejects_unknown_fields(client, world, auth_headers):
    resp = client.patch(
        f"{API}/rooms/{world['room'].id}", json={"hotel_id": "elsewhere"}, headers=auth_headers(world["owner"])
    )

    assert resp.status_code == 422
