import os


def _create(client, title_ko, **extra):
    body = {"url": "https://cdn.example.com/banner.jpg", "title": {"ko": title_ko, "en": title_ko + " EN"}}
    body.update(extra)
    res = client.post("/banners", json=body)
    assert res.status_code == 201, res.text
    return res.json()


def test_create_appends_to_end(admin_client):
    first = _create(admin_client, "첫번째")
    second = _create(admin_client, "두번째", leftBackgroundColor="#123456")
    assert first["order"] == 1
    assert second["order"] == 2
    assert second["leftBackgroundColor"] == "#123456"


def test_list_is_public_and_filters_active(admin_client):
    _create(admin_client, "노출")
    _create(admin_client, "숨김", active=False)

    admin_client.headers.pop("Authorization")
    all_banners = admin_client.get("/banners").json()
    assert [b["title"]["ko"] for b in all_banners] == ["노출", "숨김"]

    active = admin_client.get("/banners", params={"activeOnly": "true"}).json()
    assert [b["title"]["ko"] for b in active] == ["노출"]


def test_write_requires_login(client):
    res = client.post("/banners", json={"url": "https://cdn.example.com/a.jpg"})
    assert res.status_code == 401


def test_reorder(admin_client):
    a = _create(admin_client, "A")
    b = _create(admin_client, "B")
    c = _create(admin_client, "C")

    res = admin_client.put("/banners/order", json={"ids": [c["id"], a["id"], b["id"]]})
    assert res.status_code == 200
    assert res.json()["success"] is True

    titles = [x["title"]["ko"] for x in admin_client.get("/banners").json()]
    assert titles == ["C", "A", "B"]


def test_reorder_rejects_duplicates_and_unknown_ids(admin_client):
    a = _create(admin_client, "A")
    dup = admin_client.put("/banners/order", json={"ids": [a["id"], a["id"]]})
    assert dup.status_code == 400

    unknown = admin_client.put("/banners/order", json={"ids": [a["id"], "00000000-0000-0000-0000-000000000001"]})
    assert unknown.status_code == 404


def test_partial_update_keeps_other_fields(admin_client):
    banner = _create(admin_client, "원래", link="https://cdc-travel.com/promo")
    res = admin_client.put(f"/banners/{banner['id']}", json={"active": False})
    assert res.status_code == 200
    body = res.json()
    assert body["active"] is False
    assert body["link"] == "https://cdc-travel.com/promo"
    assert body["title"]["ko"] == "원래"


def test_delete_removes_stored_file(admin_client, storage):
    url = storage.save_bytes(b"fake-image", content_type="image/jpeg", key="banners/1_a.jpg")
    path = os.path.join(os.environ["UPLOAD_DIRECTORY"], "banners", "1_a.jpg")
    assert os.path.exists(path)

    banner = _create(admin_client, "삭제대상", url=url)
    res = admin_client.delete(f"/banners/{banner['id']}?lang=en")
    assert res.status_code == 200
    assert res.json()["message"] == "Banner deleted successfully."
    assert not os.path.exists(path)
    assert admin_client.get(f"/banners/{banner['id']}").status_code == 404


def test_delete_tolerates_external_url(admin_client):
    banner = _create(admin_client, "외부")
    res = admin_client.delete(f"/banners/{banner['id']}")
    assert res.status_code == 200
