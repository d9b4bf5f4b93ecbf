import base64
import os

from sqlalchemy.ext.asyncio import AsyncSession

from app.api.travel_agents import overlay_key
from images import open_bytes, png_bytes


def ta_payload(**extra):
    body = {
        "companyName": "Sunshine Tours",
        "taCode": "TA-001",
        "phone": "+63-32-000-0000",
        "address": "Cebu City",
        "email": "sunshine@tours.ph",
        "contactPersons": [{"name": "Maria", "position": "Manager"}],
    }
    body.update(extra)
    return body


def logo_data_url() -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes((120, 80))).decode()


def _path_of(url: str) -> str:
    return os.path.join(os.environ["UPLOAD_DIRECTORY"], *url[len("/static/"):].split("/"))


def test_create_requires_fields(admin_client):
    res = admin_client.post("/tas?lang=en", json=ta_payload(companyName="", email=""))
    assert res.status_code == 400
    assert "companyName" in res.json()["detail"]
    assert "email" in res.json()["detail"]


def test_create_sanitizes_and_logs(admin_client):
    res = admin_client.post("/tas", json=ta_payload(companyName="<b>Sunshine</b> Tours"))
    assert res.status_code == 201
    ta = res.json()
    assert ta["companyName"] == "Sunshine Tours"
    assert ta["contactPersons"][0]["name"] == "Maria"
    assert ta["overlayImage"] is None

    activities = admin_client.get("/users/activity").json()["activities"]
    assert [a["action"] for a in activities] == ["taCreate"]


def test_update_with_logo_renders_overlay(admin_client, storage):
    logo_url = storage.save_bytes(png_bytes((120, 80)), content_type="image/png", key="ta-logos/1_logo.png")
    ta = admin_client.post("/tas", json=ta_payload(logo=logo_url)).json()

    res = admin_client.put(f"/tas/{ta['id']}", json=ta_payload(logo=logo_url, phone="+63-32-111-1111"))
    assert res.status_code == 200
    updated = res.json()
    overlay = updated["overlayImage"]
    assert overlay.startswith("/static/ta-overlays/Sunshine_Tours_")
    assert overlay.endswith(".png")

    with open(_path_of(overlay), "rb") as f:
        img = open_bytes(f.read())
    assert img.size == (2480, 250)

    # 다시 수정하면 이전 오버레이는 지워진다
    again = admin_client.put(f"/tas/{ta['id']}", json=ta_payload(logo=logo_url)).json()
    assert again["overlayImage"] != overlay
    assert not os.path.exists(_path_of(overlay))


def test_update_with_broken_logo_still_succeeds(admin_client):
    ta = admin_client.post("/tas", json=ta_payload()).json()
    broken = "data:image/png;base64," + base64.b64encode(b"garbage").decode()
    res = admin_client.put(f"/tas/{ta['id']}", json=ta_payload(logo=broken))
    assert res.status_code == 200
    # 로고를 읽지 못해도 텍스트만으로 오버레이가 만들어진다
    assert res.json()["overlayImage"].endswith(".png")


def test_regenerate_overlay_requires_logo(admin_client):
    ta = admin_client.post("/tas", json=ta_payload()).json()
    res = admin_client.post(f"/tas/{ta['id']}/regenerate-overlay")
    assert res.status_code == 400

    admin_client.put(f"/tas/{ta['id']}", json=ta_payload(logo=logo_data_url()))
    res = admin_client.post(f"/tas/{ta['id']}/regenerate-overlay")
    assert res.status_code == 200
    assert res.json()["overlayImage"].startswith("/static/ta-overlays/")


def test_delete_logo_clears_fields(admin_client, storage):
    logo_url = storage.save_bytes(png_bytes(), content_type="image/png", key="ta-logos/2_logo.png")
    ta = admin_client.post("/tas", json=ta_payload(logo=logo_url)).json()
    overlay = admin_client.put(f"/tas/{ta['id']}", json=ta_payload(logo=logo_url)).json()["overlayImage"]

    res = admin_client.delete(f"/tas/{ta['id']}/logo")
    assert res.status_code == 200
    fetched = admin_client.get(f"/tas/{ta['id']}").json()
    assert fetched["logo"] is None
    assert fetched["overlayImage"] is None
    assert not os.path.exists(_path_of(logo_url))
    assert not os.path.exists(_path_of(overlay))


def test_delete_ta(admin_client):
    ta = admin_client.post("/tas", json=ta_payload()).json()
    res = admin_client.delete(f"/tas/{ta['id']}")
    assert res.status_code == 200
    assert admin_client.get(f"/tas/{ta['id']}").status_code == 404
    actions = {a["action"] for a in admin_client.get("/users/activity").json()["activities"]}
    assert actions == {"taCreate", "taDelete"}


def test_email_history_empty(admin_client):
    ta = admin_client.post("/tas", json=ta_payload()).json()
    res = admin_client.get(f"/tas/{ta['id']}/email-history")
    assert res.status_code == 200
    assert res.json() == []


def test_overlay_key_keeps_punctuation_distinct():
    assert overlay_key("A&B Tours").startswith("ta-overlays/A_B_Tours_")
    assert overlay_key("AB Tours").startswith("ta-overlays/AB_Tours_")
    assert overlay_key("여행사").startswith("ta-overlays/___")


def test_update_commit_failure_removes_new_overlay(admin_client, storage, monkeypatch):
    logo_url = storage.save_bytes(png_bytes((120, 80)), content_type="image/png", key="ta-logos/3_logo.png")
    ta = admin_client.post("/tas", json=ta_payload(logo=logo_url)).json()
    assert storage.list_prefix("ta-overlays/") == []

    async def broken_commit(self):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(AsyncSession, "commit", broken_commit)
    res = admin_client.put(f"/tas/{ta['id']}", json=ta_payload(logo=logo_url))
    monkeypatch.undo()

    assert res.status_code == 500
    assert storage.list_prefix("ta-overlays/") == []
    assert admin_client.get(f"/tas/{ta['id']}").json()["overlayImage"] is None
