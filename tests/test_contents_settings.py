from conftest import auth_headers


def test_contents_crud_and_filters(admin_client):
    base = {"title": {"ko": "세부 음식", "en": "Cebu food"}, "body": {"ko": "레촌", "en": "Lechon"}}
    food = admin_client.post("/contents", json={**base, "category": "food"})
    assert food.status_code == 201
    draft = admin_client.post("/contents", json={**base, "category": "tips", "isPublished": False}).json()

    assert len(admin_client.get("/contents").json()) == 2
    assert len(admin_client.get("/contents", params={"category": "food"}).json()) == 1
    published = admin_client.get("/contents", params={"publishedOnly": "true"}).json()
    assert [c["category"] for c in published] == ["food"]

    res = admin_client.put(f"/contents/{draft['id']}", json={"isPublished": True})
    assert res.json()["isPublished"] is True
    assert res.json()["title"]["en"] == "Cebu food"

    assert admin_client.delete(f"/contents/{draft['id']}").status_code == 200
    assert admin_client.get(f"/contents/{draft['id']}").status_code == 404


def test_contents_reject_unknown_category(admin_client):
    res = admin_client.post("/contents", json={"title": "x", "body": "y", "category": "nightlife"})
    assert res.status_code == 422


def test_site_settings_defaults(client):
    res = client.get("/settings/site")
    assert res.status_code == 200
    body = res.json()
    assert body["siteName"] == {"ko": "CDC Travel", "en": "CDC Travel"}
    assert body["contactEmail"] == "info@cdc-travel.com"
    assert body["socialMedia"]["kakao"] == ""
    assert body["defaultLanguage"] == "ko"
    assert body["timezone"] == "Asia/Seoul"


def test_site_settings_upsert_is_admin_only(client, admin_user, staff_user):
    payload = {
        "siteName": {"ko": "씨디씨 트래블", "en": "CDC Travel"},
        "contactPhone": "+63-2-123-4567",
        "socialMedia": {"facebook": "https://facebook.com/cdc"},
        "defaultLanguage": "en",
    }
    denied = client.put("/settings/site", json=payload, headers=auth_headers(staff_user))
    assert denied.status_code == 403

    for phone in ("+63-2-123-4567", "+63-2-765-4321"):
        res = client.put("/settings/site", json={**payload, "contactPhone": phone}, headers=auth_headers(admin_user))
        assert res.status_code == 200

    body = client.get("/settings/site").json()
    assert body["siteName"]["ko"] == "씨디씨 트래블"
    assert body["contactPhone"] == "+63-2-765-4321"
    assert body["socialMedia"] == {"facebook": "https://facebook.com/cdc", "kakao": "", "viber": "", "instagram": ""}
    assert body["defaultLanguage"] == "en"
