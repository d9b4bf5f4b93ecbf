import os


def _path_of(key: str) -> str:
    return os.path.join(os.environ["UPLOAD_DIRECTORY"], *key.split("/"))


def test_upload_default_folder(admin_client):
    res = admin_client.post("/files/upload", files={"file": ("my photo.jpg", b"jpeg-bytes", "image/jpeg")})
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["originalName"] == "my photo.jpg"
    assert body["fileName"].startswith("uploads/")
    assert body["fileName"].endswith("_my_photo.jpg")
    assert body["url"] == "/static/" + body["fileName"]
    with open(_path_of(body["fileName"]), "rb") as f:
        assert f.read() == b"jpeg-bytes"


def test_upload_custom_folder_is_sanitized(admin_client):
    res = admin_client.post(
        "/files/upload",
        data={"folder": "../ta-logos"},
        files={"file": ("../../evil.png", b"x", "image/png")},
    )
    assert res.status_code == 200
    assert res.json()["fileName"].startswith("ta-logos/")
    assert ".." not in res.json()["fileName"]


def test_upload_requires_login(client):
    res = client.post("/files/upload", files={"file": ("a.txt", b"x", "text/plain")})
    assert res.status_code == 401


def test_delete_by_url(admin_client):
    url = admin_client.post("/files/upload", files={"file": ("a.txt", b"x", "text/plain")}).json()["url"]
    res = admin_client.post("/files/delete", json={"url": url})
    assert res.status_code == 200
    assert not os.path.exists(_path_of(url[len("/static/"):]))

    again = admin_client.post("/files/delete", json={"url": url})
    assert again.status_code == 404


def test_delete_rejects_foreign_url(admin_client):
    res = admin_client.post("/files/delete?lang=en", json={"url": "https://elsewhere.com/a.png"})
    assert res.status_code == 400
    assert res.json()["detail"] == "Invalid storage URL."


def test_cleanup_reports_failures(admin_client):
    uploaded = admin_client.post("/files/upload", files={"file": ("a.txt", b"x", "text/plain")}).json()
    res = admin_client.post("/files/cleanup", json={
        "fileNames": [uploaded["fileName"], "uploads/missing.txt"],
        "thumbnailFileNames": [],
    })
    assert res.status_code == 200
    body = res.json()
    assert body["deleted"] == [uploaded["fileName"]]
    assert body["failed"] == ["uploads/missing.txt"]


def test_cleanup_requires_list(admin_client):
    assert admin_client.post("/files/cleanup", json={}).status_code == 400
