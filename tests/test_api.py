import json
import logging

import pytest

from interview_schedule.utils.tokens import generate_schedule_token

pytestmark = pytest.mark.integration


def book_body(slot_id, **contact):
    contact.setdefault("companyName", "Initech")
    return {"slotId": slot_id, "contact": contact}


# ── Public schedule ──────────────────────────────────────────────────────


def test_public_schedule_lists_merged_slots(client, owner, add_slots, day):
    first, second, onsite = add_slots(owner, day, [
        ("09:00", "09:30", "online"),
        ("09:30", "10:00", "online"),
        ("14:00", "15:00", "onsite"),
    ])

    response = client.get(f"/schedule/{owner.schedule_token}")

    assert response.status_code == 200
    data = response.json()
    assert data["ownerName"] == "Ada Candidate"
    assert data["ownerBufferConfig"] == {"onsiteBlockMinutes": 60, "onlineBlockMinutes": 30}
    assert data["slots"] == [
        {
            "slotIds": [first.id, second.id],
            "date": day.isoformat(),
            "startTime": "09:00",
            "endTime": "10:00",
            "interviewType": "online",
        },
        {
            "slotIds": [onsite.id],
            "date": day.isoformat(),
            "startTime": "14:00",
            "endTime": "15:00",
            "interviewType": "onsite",
        },
    ]


@pytest.mark.parametrize("token", ["not-a-token", "A" * 64, generate_schedule_token()])
def test_unknown_or_malformed_token_is_not_found(client, token):
    response = client.get(f"/schedule/{token}")

    assert response.status_code == 404
    assert response.json()["errorCode"] == "NOT_FOUND"


def test_book_and_cancel_round_trip(client, owner, add_slots, day):
    booked, onsite = add_slots(owner, day, [
        ("09:00", "10:00", "online"),
        ("10:00", "11:00", "onsite"),
    ])
    base = f"/schedule/{owner.schedule_token}"

    response = client.post(f"{base}/book", json=book_body(booked.id, contactEmail="hr@initech.test"))

    assert response.status_code == 201
    data = response.json()
    assert data["blockedSlotIds"] == [onsite.id]
    booking = data["booking"]
    assert booking["slotId"] == booked.id
    assert booking["companyName"] == "Initech"
    assert booking["contactEmail"] == "hr@initech.test"
    assert booking["interviewType"] == "online"
    assert (booking["startTime"], booking["endTime"]) == ("09:00", "10:00")
    assert client.get(base).json()["slots"] == []

    response = client.post(f"{base}/bookings/{booking['id']}/cancel", json={"reason": "Filled"})

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert len(client.get(base).json()["slots"]) == 2


def test_booking_taken_slot_conflicts(client, owner, add_slots, day):
    (slot,) = add_slots(owner, day, [("09:00", "10:00", "online")])
    url = f"/schedule/{owner.schedule_token}/book"
    assert client.post(url, json=book_body(slot.id)).status_code == 201

    response = client.post(url, json=book_body(slot.id, companyName="Globex"))

    assert response.status_code == 409
    assert response.json() == {
        "errorCode": "CONFLICT",
        "message": "This slot is no longer available, please choose another.",
    }


def test_booking_unknown_slot_is_not_found(client, owner):
    response = client.post(f"/schedule/{owner.schedule_token}/book", json=book_body(12345))

    assert response.status_code == 404
    assert response.json()["message"] == "Slot not found"


def test_booking_without_company_is_a_validation_error(client, owner, add_slots, day):
    (slot,) = add_slots(owner, day, [("09:00", "10:00", "online")])

    response = client.post(
        f"/schedule/{owner.schedule_token}/book",
        json={"slotId": slot.id, "contact": {"companyName": "   "}},
    )

    assert response.status_code == 400
    data = response.json()
    assert data["errorCode"] == "VALIDATION_ERROR"
    assert "contact.companyName" in data["details"]


def test_public_cancel_twice_conflicts(client, owner, add_slots, day):
    (slot,) = add_slots(owner, day, [("09:00", "10:00", "online")])
    base = f"/schedule/{owner.schedule_token}"
    booking_id = client.post(f"{base}/book", json=book_body(slot.id)).json()["booking"]["id"]

    assert client.post(f"{base}/bookings/{booking_id}/cancel").status_code == 200
    response = client.post(f"{base}/bookings/{booking_id}/cancel")

    assert response.status_code == 409


def test_public_cancel_of_another_owners_booking_is_forbidden(client, owner, make_owner, add_slots, day):
    other = make_owner(name="Grace")
    (slot,) = add_slots(owner, day, [("09:00", "10:00", "online")])
    booking_id = client.post(
        f"/schedule/{owner.schedule_token}/book", json=book_body(slot.id)
    ).json()["booking"]["id"]

    response = client.post(f"/schedule/{other.schedule_token}/bookings/{booking_id}/cancel")

    assert response.status_code == 403


def test_booking_is_rate_limited_per_ip(client, owner):
    url = f"/schedule/{owner.schedule_token}/book"
    headers = {"X-Forwarded-For": "203.0.113.9"}

    statuses = [client.post(url, json=book_body(999), headers=headers).status_code for _ in range(5)]
    assert statuses == [404] * 5

    response = client.post(url, json=book_body(999), headers=headers)

    assert response.status_code == 429
    assert response.json()["errorCode"] == "RATE_LIMITED"
    assert 1 <= response.json()["retryAfter"] <= 60
    assert response.headers["Retry-After"] == str(response.json()["retryAfter"])
    assert "X-RateLimit-Reset" in response.headers

    other_ip = client.post(url, json=book_body(999), headers={"X-Forwarded-For": "198.51.100.1"})
    assert other_ip.status_code == 404


def test_cancel_has_its_own_budget(client, owner, add_slots, day):
    slots = add_slots(owner, day, [(f"{h:02d}:00", f"{h:02d}:30", "online") for h in range(9, 14)])
    base = f"/schedule/{owner.schedule_token}"
    headers = {"X-Forwarded-For": "203.0.113.10"}

    responses = [client.post(f"{base}/book", json=book_body(s.id), headers=headers) for s in slots]
    assert [r.status_code for r in responses] == [201] * 5

    booking_id = responses[0].json()["booking"]["id"]
    response = client.post(f"{base}/bookings/{booking_id}/cancel", headers=headers)

    assert response.status_code == 200
    assert client.post(f"{base}/book", json=book_body(slots[0].id), headers=headers).status_code == 429


def test_audit_log_masks_schedule_token(client, owner, caplog):
    with caplog.at_level(logging.INFO, logger="interview_schedule.audit"):
        client.get(f"/schedule/{owner.schedule_token}")

    records = [json.loads(r.getMessage()) for r in caplog.records if r.name == "interview_schedule.audit"]
    assert [r["path"] for r in records] == ["/schedule/***"]
    assert owner.schedule_token not in caplog.text



def test_schedule_view_reports_remaining_quota(client, owner):
    response = client.get(f"/schedule/{owner.schedule_token}")

    assert response.headers["X-RateLimit-Limit"] == "30"
    assert response.headers["X-RateLimit-Remaining"] == "29"


# ── Owner side ───────────────────────────────────────────────────────────


def test_owner_routes_require_identity(client, owner):
    assert client.get(f"/owners/{owner.id}/slots").status_code == 401
    assert client.post("/bookings/1/cancel").status_code == 401


def test_create_owner_issues_schedule_token(client, staff_headers):
    response = client.post("/owners", json={"name": "Linus"}, headers=staff_headers)

    assert response.status_code == 201
    data = response.json()
    assert len(data["scheduleToken"]) == 64
    assert data["managedBy"] == int(staff_headers["X-User-Id"])
    assert (data["onsiteBlockMinutes"], data["onlineBlockMinutes"]) == (60, 30)
    assert client.get(f"/schedule/{data['scheduleToken']}").status_code == 200


def test_bulk_create_skips_duplicates_and_rejects_overlaps(client, owner, staff_headers, day):
    url = f"/owners/{owner.id}/slots/bulk"
    slots = [
        {"date": day.isoformat(), "startTime": "09:00", "endTime": "09:30", "interviewType": "online"},
        {"date": day.isoformat(), "startTime": "09:30", "endTime": "10:00"},
    ]

    response = client.post(url, json={"slots": slots}, headers=staff_headers)
    assert response.status_code == 201
    assert response.json()["skipped"] == 0
    assert [s["status"] for s in response.json()["created"]] == ["available", "available"]

    response = client.post(url, json={"slots": slots}, headers=staff_headers)
    assert response.status_code == 201
    assert response.json() == {"created": [], "skipped": 2}

    overlapping = [{"date": day.isoformat(), "startTime": "09:15", "endTime": "09:45"}]
    response = client.post(url, json={"slots": overlapping}, headers=staff_headers)
    assert response.status_code == 400
    assert response.json()["errorCode"] == "VALIDATION_ERROR"


def test_bulk_create_validates_times(client, owner, staff_headers, day):
    bad = [{"date": day.isoformat(), "startTime": "10:00", "endTime": "09:00"}]

    response = client.post(f"/owners/{owner.id}/slots/bulk", json={"slots": bad}, headers=staff_headers)

    assert response.status_code == 400
    assert response.json()["details"] == {"slots.0": ["startTime must be before endTime"]}


def test_owner_lists_slots_and_bookings(client, owner, add_slots, staff_headers, day):
    booked, onsite = add_slots(owner, day, [
        ("09:00", "10:00", "online"),
        ("09:00", "10:00", "onsite"),
    ])
    client.post(f"/schedule/{owner.schedule_token}/book", json=book_body(booked.id))

    slots = client.get(f"/owners/{owner.id}/slots", headers=staff_headers).json()
    bookings = client.get(f"/owners/{owner.id}/bookings", headers=staff_headers).json()

    by_id = {s["id"]: s for s in slots}
    assert by_id[booked.id]["status"] == "booked"
    assert (by_id[onsite.id]["status"], by_id[onsite.id]["blockedById"]) == ("blocked", booked.id)
    assert [b["slotId"] for b in bookings] == [booked.id]


def test_other_staff_cannot_manage_owner(client, owner):
    response = client.get(f"/owners/{owner.id}/slots", headers={"X-User-Id": "12345"})

    assert response.status_code == 403


def test_admin_can_manage_any_owner(client, owner):
    response = client.get(
        f"/owners/{owner.id}/bookings",
        headers={"X-User-Id": "12345", "X-User-Role": "admin"},
    )

    assert response.status_code == 200


def test_staff_cancel(client, owner, add_slots, staff_headers, day):
    (slot,) = add_slots(owner, day, [("09:00", "10:00", "online")])
    booking_id = client.post(
        f"/schedule/{owner.schedule_token}/book", json=book_body(slot.id)
    ).json()["booking"]["id"]

    response = client.post(f"/bookings/{booking_id}/cancel", json={"reason": "Hired"}, headers=staff_headers)

    assert response.status_code == 200
    bookings = client.get(f"/owners/{owner.id}/bookings", headers=staff_headers).json()
    assert bookings[0]["cancelReason"] == "Hired"
    assert bookings[0]["cancelledAt"] is not None


def test_unknown_owner_is_not_found(client, staff_headers):
    response = client.get("/owners/9999/slots", headers=staff_headers)

    assert response.status_code == 404
    assert response.json() == {"errorCode": "NOT_FOUND", "message": "Owner not found"}


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "redis": None}
