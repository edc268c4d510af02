import pytest

from gymapp.config import settings
from gymapp.core.errors import (
    BalanceExceeded,
    BookingLimitReached,
    DuplicateBooking,
    NotAvailable,
    NotFound,
    SubscriptionRequired,
)
from gymapp.core.security import Identity, Role
from gymapp.models.booking import Booking
from gymapp.services import booking_service

from conftest import MONDAY_10, MONDAY_11, TUESDAY_09


def _book(client, headers, trainer_id, when, cost=None):
    body = {"trainerId": trainer_id, "sessionTime": when}
    if cost is not None:
        body["sessionCost"] = cost
    return client.post("/book-session", json=body, headers=headers)


def test_trainer_without_availability_is_never_bookable(db, trainer, member, subscribe):
    subscribe(member)
    for when in (MONDAY_10, TUESDAY_09, "2031-01-01T00:00:00Z"):
        with pytest.raises(NotAvailable):
            booking_service.book_session(db, member.id, trainer.id, when)


def test_book_then_repeat_is_duplicate(client, trainer, member, headers_for, with_availability, subscribe):
    with_availability(trainer)
    subscribe(member)
    r = _book(client, headers_for(member), trainer.id, MONDAY_10)
    assert r.status_code == 201
    booking = r.json()["booking"]
    assert booking["status"] == "pending"
    assert booking["session_time"] == "2030-03-11T10:00:00+00:00"

    r = _book(client, headers_for(member), trainer.id, MONDAY_10)
    assert r.status_code == 400
    assert r.json()["detail"] == "You have already booked this session."


def test_time_not_in_availability_is_rejected(client, trainer, member, headers_for, with_availability, subscribe):
    with_availability(trainer)
    subscribe(member)
    r = _book(client, headers_for(member), trainer.id, "2030-03-11T10:30:00Z")
    assert r.status_code == 400
    assert r.json()["detail"] == "Trainer is not available at the requested time."


def test_invalid_session_time_is_bad_request(client, trainer, member, headers_for, with_availability):
    with_availability(trainer)
    r = _book(client, headers_for(member), trainer.id, "next monday")
    assert r.status_code == 400
    assert "Invalid session time format" in r.json()["detail"]


def test_missing_fields_are_bad_request(client, member, headers_for):
    r = client.post("/book-session", json={"sessionTime": MONDAY_10}, headers=headers_for(member))
    assert r.status_code == 400


def test_unknown_trainer_is_not_found(client, member, headers_for, subscribe):
    subscribe(member)
    r = _book(client, headers_for(member), 999, MONDAY_10)
    assert r.status_code == 404


def test_booking_requires_client_role(client, trainer, headers_for, with_availability):
    with_availability(trainer)
    r = _book(client, headers_for(trainer), trainer.id, MONDAY_10)
    assert r.status_code == 403


def test_booking_requires_token(client, trainer):
    r = client.post("/book-session", json={"trainerId": trainer.id, "sessionTime": MONDAY_10})
    assert r.status_code == 401


def test_subscription_required(db, trainer, member, with_availability):
    with_availability(trainer)
    with pytest.raises(SubscriptionRequired):
        booking_service.book_session(db, member.id, trainer.id, MONDAY_10)


def test_balance_limit(db, make_user, trainer, with_availability, subscribe):
    with_availability(trainer)
    member = make_user(Role.CLIENT, balance_due=190.0, balance_limit=200.0)
    subscribe(member, session_discount=0)

    with pytest.raises(BalanceExceeded):
        booking_service.book_session(db, member.id, trainer.id, MONDAY_10, declared_cost=15)

    booking = booking_service.book_session(db, member.id, trainer.id, MONDAY_10, declared_cost=10)
    assert booking["session_cost"] == 10
    db.refresh(member)
    assert member.balance_due == 200


def test_rejected_booking_leaves_no_trace(db, make_user, trainer, with_availability, subscribe):
    with_availability(trainer)
    member = make_user(Role.CLIENT, balance_due=195.0)
    subscribe(member)
    with pytest.raises(BalanceExceeded):
        booking_service.book_session(db, member.id, trainer.id, MONDAY_10, declared_cost=50)
    db.refresh(member)
    assert member.balance_due == 195
    assert db.query(Booking).count() == 0


def test_discount_applied_to_charge(db, trainer, member, with_availability, subscribe):
    with_availability(trainer)
    subscribe(member, plan_type="premium")  # 10% off
    booking = booking_service.book_session(db, member.id, trainer.id, MONDAY_10, declared_cost=40)
    assert booking["session_cost"] == 36
    db.refresh(member)
    assert member.balance_due == 36


def test_monthly_booking_cap(db, trainer, member, with_availability, subscribe):
    with_availability(trainer)
    subscribe(member, max_bookings_per_month=2)
    booking_service.book_session(db, member.id, trainer.id, MONDAY_10)
    booking_service.book_session(db, member.id, trainer.id, MONDAY_11)
    with pytest.raises(BookingLimitReached):
        booking_service.book_session(db, member.id, trainer.id, TUESDAY_09)


def test_cancelled_bookings_do_not_count_towards_cap(db, trainer, member, with_availability, subscribe):
    with_availability(trainer)
    subscribe(member, max_bookings_per_month=1)
    first = booking_service.book_session(db, member.id, trainer.id, MONDAY_10)
    booking_service.cancel_booking(db, first["id"], Identity(member.id, Role.CLIENT))
    booking_service.book_session(db, member.id, trainer.id, MONDAY_11)


def test_cancelled_slot_can_be_booked_again(db, trainer, member, with_availability, subscribe):
    with_availability(trainer)
    subscribe(member)
    first = booking_service.book_session(db, member.id, trainer.id, MONDAY_10)
    booking_service.cancel_booking(db, first["id"], Identity(member.id, Role.CLIENT))
    second = booking_service.book_session(db, member.id, trainer.id, MONDAY_10)
    assert second["id"] != first["id"]
    with pytest.raises(DuplicateBooking):
        booking_service.book_session(db, member.id, trainer.id, MONDAY_10)


def test_unique_index_rejects_duplicate_that_slips_past_precheck(db, trainer, member, with_availability, subscribe, monkeypatch):
    with_availability(trainer)
    subscribe(member)
    booking_service.book_session(db, member.id, trainer.id, MONDAY_10, declared_cost=20)
    monkeypatch.setattr(booking_service, "_find_active_duplicate", lambda *a, **k: None)

    with pytest.raises(DuplicateBooking):
        booking_service.book_session(db, member.id, trainer.id, MONDAY_10, declared_cost=20)
    db.refresh(member)
    assert member.balance_due == 20
    assert db.query(Booking).count() == 1


def test_direct_booking_without_subscriptions(db, trainer, member, with_availability, monkeypatch):
    monkeypatch.setattr(settings, "require_subscription", False)
    with_availability(trainer)
    booking = booking_service.book_session(db, member.id, trainer.id, MONDAY_10, declared_cost=25)
    assert booking["status"] == "confirmed"
    db.refresh(member)
    assert member.balance_due == 0


def test_list_bookings_in_session_order_with_trainer(client, trainer, member, headers_for, with_availability, subscribe):
    with_availability(trainer)
    subscribe(member)
    _book(client, headers_for(member), trainer.id, TUESDAY_09)
    _book(client, headers_for(member), trainer.id, MONDAY_10)
    r = client.get("/bookings", headers=headers_for(member))
    assert r.status_code == 200
    rows = r.json()
    assert [b["session_time"] for b in rows] == ["2030-03-11T10:00:00+00:00", "2030-03-12T09:00:00+00:00"]
    assert rows[0]["trainer"] == {"id": trainer.id, "username": trainer.username, "specialties": ["strength", "yoga"]}


def test_list_bookings_only_returns_own(client, make_user, trainer, member, headers_for, with_availability, subscribe):
    other = make_user(Role.CLIENT)
    with_availability(trainer)
    subscribe(member)
    subscribe(other)
    _book(client, headers_for(other), trainer.id, MONDAY_10)
    assert client.get("/bookings", headers=headers_for(member)).json() == []


def test_trainer_schedule(client, trainer, member, headers_for, with_availability, subscribe):
    with_availability(trainer)
    subscribe(member)
    _book(client, headers_for(member), trainer.id, MONDAY_10)
    r = client.get("/trainer/bookings", headers=headers_for(trainer))
    assert r.status_code == 200
    assert r.json()[0]["client"] == {"id": member.id, "username": member.username}


def test_cancel_missing_booking_is_not_found(client, member, headers_for):
    r = client.delete("/bookings/12345", headers=headers_for(member))
    assert r.status_code == 404


def test_cancel_twice_returns_cancelled_record_unchanged(client, trainer, member, headers_for, with_availability, subscribe):
    with_availability(trainer)
    subscribe(member)
    booking_id = _book(client, headers_for(member), trainer.id, MONDAY_10).json()["booking"]["id"]

    first = client.delete(f"/bookings/{booking_id}", headers=headers_for(member))
    assert first.status_code == 200
    assert first.json()["booking"]["status"] == "cancelled"
    assert first.json()["booking"]["cancelled_at"] is not None

    second = client.delete(f"/bookings/{booking_id}", headers=headers_for(member))
    assert second.status_code == 200
    assert second.json()["booking"] == first.json()["booking"]


def test_other_client_cannot_cancel(client, make_user, trainer, member, headers_for, with_availability, subscribe):
    with_availability(trainer)
    subscribe(member)
    booking_id = _book(client, headers_for(member), trainer.id, MONDAY_10).json()["booking"]["id"]
    stranger = make_user(Role.CLIENT)
    r = client.delete(f"/bookings/{booking_id}", headers=headers_for(stranger))
    assert r.status_code == 403


def test_trainer_confirms_pending_booking(client, trainer, member, headers_for, with_availability, subscribe):
    with_availability(trainer)
    subscribe(member)
    booking_id = _book(client, headers_for(member), trainer.id, MONDAY_10).json()["booking"]["id"]

    r = client.patch(f"/bookings/{booking_id}/confirm", headers=headers_for(trainer))
    assert r.status_code == 200
    assert r.json()["booking"]["status"] == "confirmed"
    # confirming again is a no-op
    assert client.patch(f"/bookings/{booking_id}/confirm", headers=headers_for(trainer)).status_code == 200


def test_cancelled_booking_cannot_be_confirmed(client, trainer, member, headers_for, with_availability, subscribe):
    with_availability(trainer)
    subscribe(member)
    booking_id = _book(client, headers_for(member), trainer.id, MONDAY_10).json()["booking"]["id"]
    client.delete(f"/bookings/{booking_id}", headers=headers_for(member))
    r = client.patch(f"/bookings/{booking_id}/confirm", headers=headers_for(trainer))
    assert r.status_code == 400


def test_client_cannot_confirm(client, trainer, member, headers_for, with_availability, subscribe):
    with_availability(trainer)
    subscribe(member)
    booking_id = _book(client, headers_for(member), trainer.id, MONDAY_10).json()["booking"]["id"]
    r = client.patch(f"/bookings/{booking_id}/confirm", headers=headers_for(member))
    assert r.status_code == 403


def test_cancel_unknown_booking_in_service(db, member):
    with pytest.raises(NotFound):
        booking_service.cancel_booking(db, 1, Identity(member.id, Role.CLIENT))
