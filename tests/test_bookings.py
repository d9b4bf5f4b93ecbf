from datetime import date, datetime

import pytest

from conftest import auth_headers, run
from app.core import rate_limit
from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.schemas.booking import BookingCreate
from app.services import booking_service
from app.services.booking_service import TransitionError, check_transition


def booking_payload(project_type="AIR_ONLY", **extra):
    body = {
        "projectType": project_type,
        "customer": {"name": "김철수", "email": "kim@cdc-travel.com", "phone": "010-0000-0000"},
        "dates": {"start": "2026-12-01", "end": "2026-12-05"},
        "paxInfo": {"adults": 2, "children": 1},
        "flightDetails": {"route": "ICN-CEB"},
        "packageInfo": {"name": "세부 패키지"},
        "customRequirements": "회의실 필요",
    }
    body.update(extra)
    return body


def _generate(project_type, now):
    async def go():
        async with AsyncSessionLocal() as db:
            number = await booking_service.generate_booking_number(db, project_type, now=now)
            await db.commit()
            return number
    return run(go())


def test_booking_number_sequence_per_type_and_day():
    day1 = datetime(2026, 10, 17, 9, 0)
    assert _generate("AIR_ONLY", day1) == "CDC-AIR-261017-001"
    assert _generate("AIR_ONLY", day1) == "CDC-AIR-261017-002"
    assert _generate("CINT_PACKAGE", day1) == "CDC-PKG-261017-001"
    assert _generate("CINT_INCENTIVE_GROUP", day1) == "CDC-ISG-261017-001"

    # 날짜가 바뀌면 001부터
    day2 = datetime(2026, 10, 18, 9, 0)
    assert _generate("AIR_ONLY", day2) == "CDC-AIR-261018-001"


def test_check_transition_rules():
    check_transition("INQUIRY", "QUOTE_REQUESTED")
    with pytest.raises(TransitionError) as exc:
        check_transition("INQUIRY", "TICKETED")
    assert exc.value.code == "invalid_transition"
    assert exc.value.allowed == ["QUOTE_REQUESTED", "CANCELLED", "ON_HOLD"]

    with pytest.raises(TransitionError) as exc:
        check_transition("INQUIRY", "INQUIRY")
    assert exc.value.code == "already_in_status"

    with pytest.raises(TransitionError) as exc:
        check_transition("INQUIRY", "NOPE")
    assert exc.value.code == "invalid_status"

    assert booking_service.allowed_transitions("COMPLETED") == []


@pytest.mark.parametrize("change,key", [
    ({"projectType": "UNKNOWN"}, "project_type_required"),
    ({"customer": {"name": "", "email": "a@b.com"}}, "customer_required"),
    ({"dates": {"start": "2026-12-05", "end": "2026-12-01"}}, "invalid_date_range"),
    ({"paxInfo": {"adults": 0}}, "adults_required"),
    ({"flightDetails": None}, "flight_details_required"),
])
def test_validate_booking_create(change, key):
    data = BookingCreate.model_validate(booking_payload(**change))
    assert booking_service.validate_booking_create(data) == key


def test_validate_type_specific_blocks():
    pkg = BookingCreate.model_validate(booking_payload("CINT_PACKAGE", packageInfo=None))
    assert booking_service.validate_booking_create(pkg) == "package_info_required"
    isg = BookingCreate.model_validate(booking_payload("CINT_INCENTIVE_GROUP", customRequirements="  "))
    assert booking_service.validate_booking_create(isg) == "custom_requirements_required"


def test_create_booking(staff_client, staff_user):
    res = staff_client.post("/bookings", json=booking_payload())
    assert res.status_code == 201, res.text
    booking = res.json()
    today = date.today().strftime("%y%m%d")
    assert booking["bookingNumber"] == f"CDC-AIR-{today}-001"
    assert booking["primaryTeam"] == "AIR"
    assert booking["status"] == "ACTIVE"
    assert booking["currentStep"] == "INQUIRY"
    assert booking["paxInfo"]["total"] == 3
    assert booking["pricing"]["currency"] == "PHP"
    assert booking["assignedTo"] == [str(staff_user.id)]
    assert booking["dates"] == {"start": "2026-12-01", "end": "2026-12-05"}

    second = staff_client.post("/bookings", json=booking_payload("CINT_PACKAGE")).json()
    assert second["primaryTeam"] == "CINT"
    assert second["bookingNumber"].startswith("CDC-PKG-")


def test_create_booking_validation_message(staff_client):
    res = staff_client.post("/bookings?lang=en", json=booking_payload(customer=None))
    assert res.status_code == 400
    assert res.json()["detail"] == "Customer name and email are required."


def test_list_filters_and_pagination(staff_client):
    staff_client.post("/bookings", json=booking_payload(priority="HIGH", tags=["vip"]))
    staff_client.post("/bookings", json=booking_payload("CINT_PACKAGE", priority="LOW"))
    staff_client.post("/bookings", json=booking_payload(
        "CINT_INCENTIVE_GROUP", customer={"name": "Lee Corp", "email": "lee@corp.com"},
    ))

    res = staff_client.get("/bookings", params={"team": "CINT"})
    assert res.status_code == 200
    assert res.json()["totalCount"] == 2

    assert staff_client.get("/bookings", params={"team": "SALES"}).status_code == 400

    vip = staff_client.get("/bookings", params={"tags": "vip,other"}).json()
    assert vip["totalCount"] == 1

    found = staff_client.get("/bookings", params={"searchText": "lee corp"}).json()
    assert [b["projectType"] for b in found["bookings"]] == ["CINT_INCENTIVE_GROUP"]

    by_priority = staff_client.get("/bookings", params={"sortField": "priority", "sortDirection": "desc"}).json()
    assert [b["priority"] for b in by_priority["bookings"]] == ["HIGH", "MEDIUM", "LOW"]

    page = staff_client.get("/bookings", params={"pageSize": 2, "page": 1}).json()
    assert len(page["bookings"]) == 2
    assert page["hasMore"] is True
    last = staff_client.get("/bookings", params={"pageSize": 2, "page": 2}).json()
    assert len(last["bookings"]) == 1
    assert last["hasMore"] is False


def test_update_booking(staff_client):
    booking = staff_client.post("/bookings", json=booking_payload()).json()

    res = staff_client.put(f"/bookings/{booking['id']}", json={"paxInfo": {"adults": 4, "infants": 1}})
    assert res.status_code == 200
    assert res.json()["paxInfo"]["total"] == 5

    bad = staff_client.put(f"/bookings/{booking['id']}", json={"dates": {"end": "2026-11-01"}})
    assert bad.status_code == 400

    res = staff_client.put(f"/bookings/{booking['id']}", json={"dates": {"end": "2026-12-10"}, "notes": "연장"})
    assert res.json()["dates"] == {"start": "2026-12-01", "end": "2026-12-10"}
    assert res.json()["notes"] == "연장"


def test_status_change_and_history(staff_client):
    booking = staff_client.post("/bookings", json=booking_payload()).json()
    url = f"/bookings/{booking['id']}/status"

    res = staff_client.put(url, json={"newStatus": "QUOTE_REQUESTED", "notes": "견적 요청"})
    assert res.status_code == 200
    body = res.json()
    assert body["previousStep"] == "INQUIRY"
    assert body["newStep"] == "QUOTE_REQUESTED"
    assert body["booking"]["status"] == "ACTIVE"

    bad = staff_client.put(url, json={"newStatus": "TICKETED"})
    assert bad.status_code == 400
    detail = bad.json()["detail"]
    assert detail["currentStatus"] == "QUOTE_REQUESTED"
    assert detail["allowedTransitions"] == ["QUOTE_RECEIVED", "CANCELLED", "ON_HOLD"]
    assert detail["requestedStatus"] == "TICKETED"

    same = staff_client.put(url, json={"newStatus": "QUOTE_REQUESTED"})
    assert same.status_code == 400

    hold = staff_client.put(url, json={"newStatus": "ON_HOLD"}).json()
    assert hold["booking"]["status"] == "ON_HOLD"

    history = staff_client.get(f"/bookings/{booking['id']}/history").json()
    assert history["currentStep"] == "ON_HOLD"
    assert history["allowedTransitions"] == ["QUOTE_REQUESTED", "CANCELLED"]
    # 최신순
    assert [h["toStep"] for h in history["history"]] == ["ON_HOLD", "QUOTE_REQUESTED", "INQUIRY"]
    assert history["history"][0]["fromStep"] == "QUOTE_REQUESTED"
    created = history["history"][-1]
    assert created["automaticChange"] is True
    assert created["fromStep"] is None


def test_cancel_sets_status(staff_client):
    booking = staff_client.post("/bookings", json=booking_payload()).json()
    res = staff_client.put(f"/bookings/{booking['id']}/status", json={"newStatus": "CANCELLED"})
    assert res.json()["booking"]["status"] == "CANCELLED"
    assert res.json()["booking"]["currentStep"] == "CANCELLED"


def test_delete_requires_admin(client, staff_user, admin_user):
    booking = client.post("/bookings", json=booking_payload(), headers=auth_headers(staff_user)).json()

    denied = client.delete(f"/bookings/{booking['id']}", headers=auth_headers(staff_user))
    assert denied.status_code == 403

    ok = client.delete(f"/bookings/{booking['id']}", headers=auth_headers(admin_user))
    assert ok.status_code == 200
    assert client.get(f"/bookings/{booking['id']}", headers=auth_headers(admin_user)).status_code == 404


class _CountingRedis:
    def __init__(self):
        self.count = 0

    async def incr(self, key):
        # 분 경계를 넘어도 누적되도록 키는 무시
        self.count += 1
        return self.count

    async def expire(self, key, seconds):
        return True


def test_create_booking_rate_limited(staff_client, monkeypatch):
    fake = _CountingRedis()

    async def fake_client():
        return fake

    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(settings, "BOOKING_RATE_LIMIT_PER_MINUTE", 2)
    monkeypatch.setattr(rate_limit, "get_redis_client", fake_client)

    assert staff_client.post("/bookings", json=booking_payload()).status_code == 201
    assert staff_client.post("/bookings", json=booking_payload()).status_code == 201
    res = staff_client.post("/bookings?lang=en", json=booking_payload())
    assert res.status_code == 429
    assert res.json()["detail"] == "Too many requests. Please try again later."
    assert staff_client.get("/bookings").json()["totalCount"] == 2


def test_rate_limit_fails_open_without_redis(staff_client, monkeypatch):
    async def no_redis():
        raise ConnectionError("redis down")

    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(rate_limit, "get_redis_client", no_redis)
    assert staff_client.post("/bookings", json=booking_payload()).status_code == 201


def test_confirm_booking(staff_client, staff_user):
    booking = staff_client.post("/bookings", json=booking_payload()).json()
    url = f"/bookings/{booking['id']}"

    assert staff_client.get(f"/bookings/confirmed/{booking['id']}").status_code == 400

    for step in ("QUOTE_REQUESTED", "QUOTE_RECEIVED", "CUSTOMER_NOTIFIED"):
        staff_client.put(f"{url}/status", json={"newStatus": step})

    res = staff_client.post(f"{url}/confirm")
    assert res.status_code == 200, res.text
    confirmed = res.json()["booking"]
    assert res.json()["message"] == "예약이 확정되었습니다."
    assert confirmed["confirmedBy"] == staff_user.email
    assert confirmed["confirmedAt"] is not None
    assert confirmed["currentStep"] == "CONFIRMED"

    history = staff_client.get(f"{url}/history").json()["history"]
    assert history[0]["toStep"] == "CONFIRMED"
    assert history[0]["automaticChange"] is True

    again = staff_client.post(f"{url}/confirm?lang=en")
    assert again.status_code == 400
    assert again.json()["detail"] == "Booking is already confirmed."

    fetched = staff_client.get(f"/bookings/confirmed/{booking['id']}")
    assert fetched.status_code == 200
    updated = staff_client.put(f"/bookings/confirmed/{booking['id']}", json={"notes": "잔금 대기"})
    assert updated.status_code == 200
    assert updated.json()["notes"] == "잔금 대기"


def test_confirm_keeps_step_when_not_allowed(staff_client):
    booking = staff_client.post("/bookings", json=booking_payload()).json()
    res = staff_client.post(f"/bookings/{booking['id']}/confirm")
    assert res.status_code == 200
    assert res.json()["booking"]["currentStep"] == "INQUIRY"
    assert res.json()["booking"]["confirmedAt"] is not None


def test_confirm_rejects_cancelled(staff_client):
    booking = staff_client.post("/bookings", json=booking_payload()).json()
    staff_client.put(f"/bookings/{booking['id']}/status", json={"newStatus": "CANCELLED"})
    res = staff_client.post(f"/bookings/{booking['id']}/confirm")
    assert res.status_code == 400
    assert res.json()["detail"] == "취소되었거나 완료된 예약은 확정할 수 없습니다."
