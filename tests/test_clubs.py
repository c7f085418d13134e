from app.models import Booking, BookingStatus, Club, ClubStatus, UserRole
from app.routes import clubs
from tests.utils import auth_headers

MANAGER = "mia@club.io"


def test_create_club_requires_manager(client, make_user):
    make_user("ann@club.io")
    r = client.post("/clubs", json={"name": "Book Club"}, headers=auth_headers("ann@club.io"))
    assert r.status_code == 403

    r = client.post("/clubs", json={"name": "Book Club"})
    assert r.status_code == 401


def test_created_club_is_pending_and_hidden(client, make_user):
    make_user(MANAGER, role=UserRole.MANAGER, name="Mia")
    r = client.post(
        "/clubs",
        json={"name": "Book Club", "category": "reading", "price": 15},
        headers=auth_headers(MANAGER),
    )
    assert r.status_code == 201
    club = r.json()
    assert club["status"] == "pending"
    assert club["seller"] == {"email": MANAGER, "name": "Mia", "image": None}

    assert client.get("/clubs").json() == []
    listed = client.get("/clubs", params={"status": "all"}).json()
    assert [c["id"] for c in listed] == [club["id"]]

    assert client.get("/clubs", params={"status": "closed"}).status_code == 400


def test_negative_price_rejected(client, make_user):
    make_user(MANAGER, role=UserRole.MANAGER)
    r = client.post("/clubs", json={"name": "Book Club", "price": -1}, headers=auth_headers(MANAGER))
    assert r.status_code == 400


def test_list_filters(client, make_club):
    make_club(MANAGER, name="Chess Club", category="games")
    make_club(MANAGER, name="Hiking Crew", category="outdoors")
    make_club(MANAGER, name="Go Club", category="games", status=ClubStatus.REJECTED)

    names = {c["name"] for c in client.get("/clubs", params={"category": "games"}).json()}
    assert names == {"Chess Club"}

    names = {c["name"] for c in client.get("/clubs", params={"search": "hik"}).json()}
    assert names == {"Hiking Crew"}


def test_get_club(client, make_club):
    club = make_club(MANAGER)
    assert client.get(f"/clubs/{club.id}").json()["name"] == "Chess Club"

    assert client.get("/clubs/not-a-uuid").status_code == 400
    assert client.get("/clubs/00000000-0000-0000-0000-000000000000").status_code == 404


def test_update_club(client, make_user, make_club):
    make_user(MANAGER, role=UserRole.MANAGER)
    make_user("other@club.io", role=UserRole.MANAGER)
    make_user("root@club.io", role=UserRole.ADMIN)
    club = make_club(MANAGER, price=10)

    r = client.patch(f"/clubs/{club.id}", json={"price": 12}, headers=auth_headers("other@club.io"))
    assert r.status_code == 403

    r = client.patch(f"/clubs/{club.id}", json={"price": 10}, headers=auth_headers(MANAGER))
    assert r.status_code == 400
    assert r.json()["detail"] == "No changes made to club"

    r = client.patch(f"/clubs/{club.id}", json={"price": 12}, headers=auth_headers(MANAGER))
    assert r.status_code == 200
    assert r.json()["price"] == 12

    r = client.patch(f"/clubs/{club.id}", json={"location": "Lyon"}, headers=auth_headers("root@club.io"))
    assert r.status_code == 200


def test_admin_moderates_club(client, make_user, make_club):
    make_user("root@club.io", role=UserRole.ADMIN)
    make_user(MANAGER, role=UserRole.MANAGER)
    club = make_club(MANAGER, status=ClubStatus.PENDING)

    r = client.patch(f"/clubs/{club.id}/status", json={"status": "approved"}, headers=auth_headers(MANAGER))
    assert r.status_code == 403

    r = client.patch(f"/clubs/{club.id}/status", json={"status": "approved"}, headers=auth_headers("root@club.io"))
    assert r.status_code == 200
    assert [c["id"] for c in client.get("/clubs").json()] == [club.id]


def test_delete_blocked_by_active_bookings(client, db, make_user, make_club, make_booking):
    make_user(MANAGER, role=UserRole.MANAGER)
    club = make_club(MANAGER)
    booking = make_booking(club, "ann@club.io", status=BookingStatus.PROCESSING)
    make_booking(club, "bob@club.io", status=BookingStatus.COMPLETED)

    r = client.delete(f"/clubs/{club.id}", headers=auth_headers(MANAGER))
    assert r.status_code == 400
    assert db.query(Club).count() == 1

    booking.status = BookingStatus.CANCELLED
    db.commit()

    r = client.delete(f"/clubs/{club.id}", headers=auth_headers(MANAGER))
    assert r.status_code == 200
    assert r.json()["deleted_count"] == 1
    db.expire_all()
    assert db.query(Club).count() == 0
    # Booking history survives the club
    assert db.query(Booking).count() == 2


def test_join_free_club(client, db, make_user, make_club):
    make_user("ann@club.io", name="Ann")
    club = make_club(MANAGER, price=0)
    headers = auth_headers("ann@club.io")

    r = client.post(f"/clubs/{club.id}/join", headers=headers)
    assert r.status_code == 201
    body = r.json()
    assert body["status"] == "confirmed"
    assert body["customer"]["email"] == "ann@club.io"
    assert body["seller"]["email"] == MANAGER

    r = client.post(f"/clubs/{club.id}/join", headers=headers)
    assert r.status_code == 409

    orders = client.get("/my-orders", headers=headers).json()
    assert [o["club_id"] for o in orders] == [club.id]


def test_rejoin_after_cancel(client, db, make_club):
    club = make_club(MANAGER, price=0)
    headers = auth_headers("ann@club.io")

    first = client.post(f"/clubs/{club.id}/join", headers=headers).json()
    assert client.delete(f"/orders/{first['id']}", headers=headers).status_code == 200

    r = client.post(f"/clubs/{club.id}/join", headers=headers)
    assert r.status_code == 201
    assert db.query(Booking).filter(Booking.customer_email == "ann@club.io").count() == 2


def test_join_paid_club_needs_checkout(client, make_club):
    club = make_club(MANAGER, price=25)
    r = client.post(f"/clubs/{club.id}/join", headers=auth_headers("ann@club.io"))
    assert r.status_code == 400


def test_update_club_rejects_null_required_fields(client, db, make_user, make_club):
    make_user(MANAGER, role=UserRole.MANAGER)
    club = make_club(MANAGER, price=10)

    assert client.patch(f"/clubs/{club.id}", json={"price": None}, headers=auth_headers(MANAGER)).status_code == 400
    assert client.patch(f"/clubs/{club.id}", json={"name": None}, headers=auth_headers(MANAGER)).status_code == 400

    db.expire_all()
    stored = db.query(Club).filter(Club.id == club.id).one()
    assert stored.price == 10
    assert stored.name == "Chess Club"


def test_delete_blocked_by_events(client, db, make_user, make_club, make_event):
    make_user(MANAGER, role=UserRole.MANAGER)
    club = make_club(MANAGER)
    event = make_event(club)

    r = client.delete(f"/clubs/{club.id}", headers=auth_headers(MANAGER))
    assert r.status_code == 400
    assert "event" in r.json()["detail"]

    # The manager still owns the event
    r = client.patch(f"/events/{event.id}", json={"title": "Renamed"}, headers=auth_headers(MANAGER))
    assert r.status_code == 200

    assert client.delete(f"/events/{event.id}", headers=auth_headers(MANAGER)).status_code == 200
    assert client.delete(f"/clubs/{club.id}", headers=auth_headers(MANAGER)).status_code == 200


def test_concurrent_free_join_is_a_conflict(client, db, monkeypatch, make_club, make_booking):
    club = make_club(MANAGER, price=0)
    joined = make_booking(club, "ann@club.io", price=0)
    joined.free_join_key = f"{club.id}:ann@club.io"
    db.commit()
    # The other request's booking is not visible to the duplicate check
    monkeypatch.setattr(clubs, "_active_join", lambda db, club_id, email: None)

    r = client.post(f"/clubs/{club.id}/join", headers=auth_headers("ann@club.io"))
    assert r.status_code == 409

    db.expire_all()
    assert db.query(Booking).count() == 1
    assert db.query(Booking).one().free_join_key == f"{club.id}:ann@club.io"
