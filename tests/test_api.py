from datetime import date, datetime, time, timedelta, timezone

import pytest

from booking_engine.core.security import create_access_token
from booking_engine.models.hold import Hold
from factories import auth_headers

OWNER = auth_headers("owner-1")
GUEST = auth_headers("guest-1")
PAYMENT = {"X-Payment-Secret": "test-payment-secret"}

EVERY_DAY = [(weekday, time(8), time(20)) for weekday in range(7)]


def parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def day() -> date:
    return datetime.now(tz=timezone.utc).date() + timedelta(days=3)


@pytest.fixture
def resource(make_resource):
    return make_resource(
        rules=EVERY_DAY,
        tz="UTC",
        duration_minutes=60,
        slot_granularity_minutes=60,
        buffer_before_minutes=0,
        buffer_after_minutes=0,
    )


def slot_at(day: date, hour: int) -> dict:
    start = datetime.combine(day, time(hour), tzinfo=timezone.utc)
    return {"start_t": start.isoformat(), "end_t": (start + timedelta(hours=1)).isoformat()}


def place_hold(client, resource, day, hour=10, headers=GUEST):
    return client.post("/api/holds", json={"resource_id": resource.id, **slot_at(day, hour)}, headers=headers)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestAvailability:
    def test_lists_slots(self, client, resource, day):
        res = client.get("/api/availability", params={"resource_id": resource.id, "from": day.isoformat(), "to": day.isoformat()})

        assert res.status_code == 200
        body = res.json()
        assert [parse(s["start_t"]).hour for s in body["slots"]] == list(range(8, 20))
        assert body["resource_info"]["id"] == resource.id
        assert body["resource_info"]["timezone"] == "UTC"

    def test_hold_removes_slot(self, client, resource, day):
        assert place_hold(client, resource, day, hour=10).status_code == 200

        res = client.get("/api/availability", params={"resource_id": resource.id, "from": day.isoformat(), "to": day.isoformat()})

        hours = [parse(s["start_t"]).hour for s in res.json()["slots"]]
        assert 10 not in hours and 9 in hours and 11 in hours

    def test_unknown_resource(self, client, day):
        res = client.get("/api/availability", params={"resource_id": "missing", "from": day.isoformat(), "to": day.isoformat()})
        assert res.status_code == 404
        assert res.json()["code"] == "NOT_FOUND"

    def test_reversed_range(self, client, resource, day):
        res = client.get(
            "/api/availability",
            params={"resource_id": resource.id, "from": day.isoformat(), "to": (day - timedelta(days=1)).isoformat()},
        )
        assert res.status_code == 400

    def test_duration_override_leaves_resource_info_alone(self, client, resource, day):
        res = client.get(
            "/api/availability",
            params={"resource_id": resource.id, "from": day.isoformat(), "to": day.isoformat(), "duration_minutes": 120},
        )

        body = res.json()
        assert body["resource_info"]["duration_minutes"] == 60
        assert all(parse(s["end_t"]) - parse(s["start_t"]) == timedelta(minutes=120) for s in body["slots"])


class TestHolds:
    def test_requires_token(self, client, resource, day):
        assert place_hold(client, resource, day, headers={}).status_code == 401
        assert place_hold(client, resource, day, headers={"Authorization": "Bearer nope"}).status_code == 401

        expired = create_access_token("guest-1", expires_minutes=-1)
        assert place_hold(client, resource, day, headers={"Authorization": f"Bearer {expired}"}).status_code == 401

    def test_create_read_release(self, client, resource, day):
        res = place_hold(client, resource, day)
        assert res.status_code == 200
        body = res.json()
        assert body["resource_name"] == resource.name
        assert parse(body["start_t"]) == datetime.combine(day, time(10), tzinfo=timezone.utc)

        hold_id = body["hold_id"]
        read = client.get(f"/api/holds/{hold_id}", headers=GUEST)
        assert read.status_code == 200
        assert read.json()["is_expired"] is False
        assert client.get(f"/api/holds/{hold_id}", headers=auth_headers("guest-2")).status_code == 404

        released = client.delete(f"/api/holds/{hold_id}", headers=GUEST)
        assert released.status_code == 200
        assert released.json()["status"] == "expired"

    def test_conflict(self, client, resource, day):
        assert place_hold(client, resource, day).status_code == 200

        res = place_hold(client, resource, day, headers=auth_headers("guest-2"))

        assert res.status_code == 409
        assert res.json()["code"] == "SLOT_CONFLICT"

    def test_wrong_duration(self, client, resource, day):
        start = datetime.combine(day, time(10), tzinfo=timezone.utc)
        res = client.post(
            "/api/holds",
            json={"resource_id": resource.id, "start_t": start.isoformat(), "end_t": (start + timedelta(hours=2)).isoformat()},
            headers=GUEST,
        )
        assert res.status_code == 400
        assert res.json()["code"] == "INVALID_DURATION"

    def test_missing_field(self, client, resource, day):
        start = datetime.combine(day, time(10), tzinfo=timezone.utc)
        res = client.post("/api/holds", json={"resource_id": resource.id, "start_t": start.isoformat()}, headers=GUEST)

        assert res.status_code == 400
        assert res.json()["code"] == "VALIDATION_ERROR"


class TestBookings:
    def confirm(self, client, hold_id, headers=GUEST, **extra):
        payload = {"hold_id": hold_id, "customer_name": "Ana Souza", "customer_email": "ana@example.com"}
        payload.update(extra)
        return client.post("/api/bookings/confirm", json=payload, headers=headers)

    def test_confirm_and_list(self, client, resource, day):
        hold_id = place_hold(client, resource, day).json()["hold_id"]

        res = self.confirm(client, hold_id)

        assert res.status_code == 200
        body = res.json()
        assert body["status"] == "pending"
        assert body["payment_status"] == "paid"
        assert body["resource_name"] == resource.name

        mine = client.get("/api/bookings", headers=GUEST).json()
        assert [b["id"] for b in mine] == [body["booking_id"]]
        assert client.get(f"/api/bookings/{body['booking_id']}", headers=auth_headers("guest-2")).status_code == 404

    def test_invalid_email(self, client, resource, day):
        hold_id = place_hold(client, resource, day).json()["hold_id"]
        assert self.confirm(client, hold_id, customer_email="not-an-email").status_code == 400

    def test_missing_customer_email(self, client, resource, day):
        hold_id = place_hold(client, resource, day).json()["hold_id"]
        res = client.post("/api/bookings/confirm", json={"hold_id": hold_id, "customer_name": "Ana Souza"}, headers=GUEST)

        assert res.status_code == 400
        assert res.json()["code"] == "VALIDATION_ERROR"

    def test_foreign_hold(self, client, resource, day):
        hold_id = place_hold(client, resource, day).json()["hold_id"]
        assert self.confirm(client, hold_id, headers=auth_headers("guest-2")).status_code == 404

    def test_expired_hold(self, client, db, resource, day):
        start = datetime.combine(day, time(10), tzinfo=timezone.utc)
        hold = Hold(
            resource_id=resource.id,
            start_t=start,
            end_t=start + timedelta(hours=1),
            created_by="guest-1",
            expires_at=datetime.now(tz=timezone.utc) - timedelta(minutes=1),
        )
        db.add(hold)
        db.commit()

        res = self.confirm(client, hold.id)

        assert res.status_code == 410
        assert res.json()["code"] == "HOLD_EXPIRED"

    def test_cancel(self, client, resource, day):
        hold_id = place_hold(client, resource, day).json()["hold_id"]
        booking_id = self.confirm(client, hold_id).json()["booking_id"]

        res = client.post(f"/api/bookings/{booking_id}/cancel", json={"reason": "Rain"}, headers=GUEST)

        assert res.status_code == 200
        assert res.json()["status"] == "cancelled"
        assert place_hold(client, resource, day, headers=auth_headers("guest-2")).status_code == 200

    def test_payment_status_requires_shared_secret(self, client, resource, day):
        hold_id = place_hold(client, resource, day).json()["hold_id"]
        booking_id = self.confirm(client, hold_id, total_amount="120.00").json()["booking_id"]
        url = f"/api/bookings/{booking_id}/payment-status"

        assert client.post(url, json={"payment_status": "paid"}).status_code == 403
        assert client.post(url, json={"payment_status": "paid"}, headers={"X-Payment-Secret": "wrong"}).status_code == 403

        res = client.post(url, json={"payment_status": "paid"}, headers=PAYMENT)
        assert res.status_code == 200
        assert res.json()["status"] == "confirmed"
        assert res.json()["payment_status"] == "paid"


class TestResourceAdmin:
    def test_create_update_deactivate(self, client):
        res = client.post("/api/resources", json={"name": "Rooftop", "type": "space", "tz": "Europe/Lisbon"}, headers=OWNER)
        assert res.status_code == 200
        created = res.json()
        assert created["owner_id"] == "owner-1"
        assert created["duration_minutes"] == 240

        rid = created["id"]
        assert [r["id"] for r in client.get("/api/resources", headers=OWNER).json()] == [rid]

        patched = client.patch(f"/api/resources/{rid}", json={"duration_minutes": 120}, headers=OWNER)
        assert patched.json()["duration_minutes"] == 120

        deactivated = client.post(f"/api/resources/{rid}/deactivate", headers=OWNER)
        assert deactivated.json()["is_active"] is False

    def test_unknown_timezone(self, client):
        res = client.post("/api/resources", json={"name": "Rooftop", "tz": "Mars/Olympus"}, headers=OWNER)
        assert res.status_code == 400

    def test_out_of_range_config(self, client):
        res = client.post("/api/resources", json={"name": "Rooftop", "duration_minutes": 5}, headers=OWNER)
        assert res.status_code == 400
        assert res.json()["code"] == "VALIDATION_ERROR"

    def test_null_for_required_field(self, client, resource):
        res = client.patch(f"/api/resources/{resource.id}", json={"name": None}, headers=OWNER)

        assert res.status_code == 400
        assert res.json()["details"] == {"fields": ["name"]}
        assert client.get(f"/api/resources/{resource.id}", headers=OWNER).json()["name"] == resource.name

    def test_other_owner_is_forbidden(self, client, resource):
        other = auth_headers("owner-2")
        assert client.get(f"/api/resources/{resource.id}", headers=other).status_code == 403
        assert client.patch(f"/api/resources/{resource.id}", json={"name": "Mine"}, headers=other).status_code == 403

    def test_working_hours(self, client, resource):
        url = f"/api/resources/{resource.id}/working-hours"

        replaced = client.put(url, json={"rules": [{"weekday": 1, "start_time": "09:00", "end_time": "17:00"}]}, headers=OWNER)
        assert replaced.status_code == 200
        assert len(replaced.json()) == 1

        added = client.post(url, json={"weekday": 2, "start_time": "09:00", "end_time": "12:00"}, headers=OWNER)
        assert added.status_code == 200

        bad = client.post(url, json={"weekday": 2, "start_time": "12:00", "end_time": "09:00"}, headers=OWNER)
        assert bad.status_code == 400

        assert client.delete(f"{url}/{added.json()['id']}", headers=OWNER).json() == {"ok": True}
        assert [r["weekday"] for r in client.get(url, headers=OWNER).json()] == [1]

    def test_closed_exception_empties_availability(self, client, resource, day):
        res = client.post(
            f"/api/resources/{resource.id}/exceptions",
            json={"date_from": day.isoformat(), "date_to": day.isoformat(), "kind": "closed", "reason": "Maintenance"},
            headers=OWNER,
        )
        assert res.status_code == 200

        slots = client.get("/api/availability", params={"resource_id": resource.id, "from": day.isoformat(), "to": day.isoformat()}).json()["slots"]
        assert slots == []

        assert client.delete(f"/api/resources/{resource.id}/exceptions/{res.json()['id']}", headers=OWNER).status_code == 200

    def test_open_exception_without_times(self, client, resource, day):
        res = client.post(
            f"/api/resources/{resource.id}/exceptions",
            json={"date_from": day.isoformat(), "date_to": day.isoformat(), "kind": "open"},
            headers=OWNER,
        )
        assert res.status_code == 400


class TestExternalEvents:
    def test_import_upserts_and_blocks_availability(self, client, resource, day):
        url = f"/api/resources/{resource.id}/external-events"
        start = datetime.combine(day, time(12), tzinfo=timezone.utc)
        event = {"start_t": start.isoformat(), "end_t": (start + timedelta(hours=1)).isoformat(), "external_id": "evt-1", "summary": "Private"}

        first = client.post(f"{url}/import", json={"source": "google", "events": [event]}, headers=OWNER)
        assert first.json() == {"ok": True, "created": 1, "updated": 0}

        moved = dict(event, start_t=(start + timedelta(hours=2)).isoformat(), end_t=(start + timedelta(hours=3)).isoformat())
        second = client.post(f"{url}/import", json={"source": "google", "events": [moved]}, headers=OWNER)
        assert second.json() == {"ok": True, "created": 0, "updated": 1}

        events = client.get(url, headers=OWNER).json()
        assert len(events) == 1
        assert parse(events[0]["start_t"]).hour == 14

        slots = client.get("/api/availability", params={"resource_id": resource.id, "from": day.isoformat(), "to": day.isoformat()}).json()["slots"]
        hours = [parse(s["start_t"]).hour for s in slots]
        assert 14 not in hours and 12 in hours

    def test_manual_event_and_delete(self, client, resource, day):
        url = f"/api/resources/{resource.id}/external-events"
        start = datetime.combine(day, time(9), tzinfo=timezone.utc)

        created = client.post(url, json={"start_t": start.isoformat(), "end_t": (start + timedelta(hours=1)).isoformat()}, headers=OWNER)
        assert created.status_code == 200
        assert created.json()["source"] == "manual"

        assert place_hold(client, resource, day, hour=9).status_code == 409

        assert client.delete(f"{url}/{created.json()['id']}", headers=OWNER).json() == {"ok": True}
        assert place_hold(client, resource, day, hour=9).status_code == 200

    def test_requires_ownership(self, client, resource):
        assert client.get(f"/api/resources/{resource.id}/external-events", headers=auth_headers("owner-2")).status_code == 403
