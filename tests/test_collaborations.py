from conftest import auth_headers
from test_bookings import booking_payload


def collab_payload(**extra):
    body = {
        "requestedToTeam": "CINT",
        "type": "LAND_QUOTE_REQUEST",
        "priority": "HIGH",
        "title": "세부 랜드 견적",
        "description": "3박 4일 호텔/차량 견적 부탁드립니다.",
    }
    body.update(extra)
    return body


def _booking(client):
    return client.post("/bookings", json=booking_payload()).json()


def test_create_and_list_for_booking(staff_client, staff_user):
    booking = _booking(staff_client)
    res = staff_client.post(f"/bookings/{booking['id']}/collaborate", json=collab_payload())
    assert res.status_code == 201, res.text
    req = res.json()
    assert req["status"] == "PENDING"
    assert req["requestedBy"] == {"team": "AIR", "userId": str(staff_user.id), "userName": staff_user.email}
    assert req["requestedTo"] == {"team": "CINT", "userIds": []}

    second = staff_client.post(
        f"/bookings/{booking['id']}/collaborate",
        json=collab_payload(type="PRICING_REVIEW", title="가격 검토"),
    ).json()

    listed = staff_client.get(f"/bookings/{booking['id']}/collaborate").json()
    assert listed["bookingNumber"] == booking["bookingNumber"]
    assert listed["totalCount"] == 2
    assert [r["id"] for r in listed["requests"]] == [second["id"], req["id"]]

    only_pricing = staff_client.get(f"/bookings/{booking['id']}/collaborate?type=PRICING_REVIEW").json()
    assert [r["title"] for r in only_pricing["requests"]] == ["가격 검토"]


def test_create_validation(staff_client):
    booking = _booking(staff_client)
    url = f"/bookings/{booking['id']}/collaborate"

    same_team = staff_client.post(url, json=collab_payload(requestedToTeam="AIR"))
    assert same_team.status_code == 400
    assert same_team.json()["detail"] == "같은 팀에게는 협업 요청을 할 수 없습니다."

    bad_type = staff_client.post(f"{url}?lang=en", json=collab_payload(type="COFFEE"))
    assert bad_type.status_code == 400
    assert bad_type.json()["detail"] == "Please choose a valid collaboration type."

    assert staff_client.post(url, json=collab_payload(title="  ")).status_code == 400
    assert staff_client.post(url, json=collab_payload(priority="ASAP")).status_code == 400
    assert staff_client.get(url).json()["totalCount"] == 0


def test_team_inbox_filters(staff_client):
    booking = _booking(staff_client)
    staff_client.post(f"/bookings/{booking['id']}/collaborate", json=collab_payload())

    inbox = staff_client.get("/collaborations?requestedToTeam=CINT").json()
    assert inbox["totalCount"] == 1
    assert staff_client.get("/collaborations?requestedToTeam=AIR").json()["totalCount"] == 0
    assert staff_client.get("/collaborations?requestedByTeam=AIR&status=PENDING").json()["totalCount"] == 1
    assert staff_client.get("/collaborations?status=COMPLETED").json()["totalCount"] == 0


def test_respond_and_update(staff_client, staff_user):
    booking = _booking(staff_client)
    req = staff_client.post(f"/bookings/{booking['id']}/collaborate", json=collab_payload()).json()
    url = f"/collaborations/{req['id']}"

    res = staff_client.put(url, json={"status": "IN_PROGRESS", "response": "내일까지 회신드립니다."})
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["status"] == "IN_PROGRESS"
    assert body["respondedBy"]["userId"] == str(staff_user.id)
    assert body["respondedBy"]["respondedAt"] is not None

    notes_only = staff_client.put(url, json={"notes": "호텔 2곳 비교"}).json()
    assert notes_only["notes"] == "호텔 2곳 비교"
    assert notes_only["response"] == "내일까지 회신드립니다."

    empty = staff_client.put(url, json={})
    assert empty.status_code == 400
    assert empty.json()["detail"] == "수정할 내용이 없습니다."

    bad = staff_client.put(url, json={"status": "DONE"})
    assert bad.status_code == 400
    assert staff_client.get(url).json()["status"] == "IN_PROGRESS"


def test_delete_request(staff_client):
    booking = _booking(staff_client)
    req = staff_client.post(f"/bookings/{booking['id']}/collaborate", json=collab_payload()).json()

    assert staff_client.delete(f"/collaborations/{req['id']}").status_code == 200
    assert staff_client.get(f"/collaborations/{req['id']}").status_code == 404


def test_deleting_booking_removes_requests(client, staff_user, admin_user):
    booking = client.post("/bookings", json=booking_payload(), headers=auth_headers(staff_user)).json()
    client.post(
        f"/bookings/{booking['id']}/collaborate", json=collab_payload(), headers=auth_headers(staff_user),
    )

    assert client.delete(f"/bookings/{booking['id']}", headers=auth_headers(admin_user)).status_code == 200
    remaining = client.get("/collaborations", headers=auth_headers(admin_user)).json()
    assert remaining["totalCount"] == 0
