import os

from app.core.config import settings
from images import png_bytes


def _upload(client, name="가을 프로모션", data=None, content_type="image/png"):
    return client.post(
        "/posters",
        data={"name": name},
        files={"file": ("promo.png", data or png_bytes(), content_type)},
    )


def _path_of(url: str) -> str:
    return os.path.join(os.environ["UPLOAD_DIRECTORY"], *url[len("/static/"):].split("/"))


def test_upload_converts_to_webp(admin_client, admin_user):
    res = _upload(admin_client, name="Autumn Sale 2026")
    assert res.status_code == 201, res.text
    poster = res.json()
    assert poster["url"].startswith("/static/posters/")
    assert poster["url"].endswith("_Autumn_Sale_2026.webp")
    assert poster["originalName"] == "promo.png"
    assert poster["size"] > 0
    assert poster["originalSize"] == len(png_bytes())
    assert poster["createdBy"] == str(admin_user.id)

    with open(_path_of(poster["url"]), "rb") as f:
        assert f.read(12)[8:12] == b"WEBP"


def test_rejects_non_image(admin_client):
    res = _upload(admin_client, data=b"%PDF-1.4", content_type="application/pdf")
    assert res.status_code == 400


def test_rejects_corrupt_image(admin_client):
    res = _upload(admin_client, data=b"not really a png", content_type="image/png")
    assert res.status_code == 400


def test_rejects_too_large(admin_client, monkeypatch):
    monkeypatch.setattr(settings, "MAX_POSTER_BYTES", 10)
    res = _upload(admin_client)
    assert res.status_code == 400


def test_requires_name(admin_client):
    res = _upload(admin_client, name="  ")
    assert res.status_code == 400


def test_replace_file_deletes_previous(admin_client):
    poster = _upload(admin_client, name="old").json()
    old_path = _path_of(poster["url"])
    assert os.path.exists(old_path)

    res = admin_client.put(
        f"/posters/{poster['id']}",
        data={"name": "new"},
        files={"file": ("new.png", png_bytes(color=(0, 0, 255, 255)), "image/png")},
    )
    assert res.status_code == 200
    updated = res.json()
    assert updated["name"] == "new"
    assert updated["url"] != poster["url"]
    assert not os.path.exists(old_path)
    assert os.path.exists(_path_of(updated["url"]))


def test_rename_only_keeps_file(admin_client):
    poster = _upload(admin_client, name="keep").json()
    res = admin_client.put(f"/posters/{poster['id']}", data={"name": "renamed"})
    assert res.status_code == 200
    assert res.json()["url"] == poster["url"]
    assert res.json()["name"] == "renamed"


def test_delete_removes_file(admin_client):
    poster = _upload(admin_client).json()
    path = _path_of(poster["url"])
    res = admin_client.delete(f"/posters/{poster['id']}")
    assert res.status_code == 200
    assert not os.path.exists(path)
    assert admin_client.get("/posters").json() == []
