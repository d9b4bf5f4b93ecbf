import os


def spot_payload(name_ko="보라카이 화이트비치", name_en="Boracay White Beach", **extra):
    body = {
        "name": {"ko": name_ko, "en": name_en},
        "description": {"ko": "하얀 모래 해변", "en": "White sand beach"},
        "address": {"ko": "보라카이", "en": "Boracay"},
        "region": {"ko": "아클란", "en": "Aklan"},
        "country": {"ko": "필리핀", "en": "Philippines"},
        "type": ["beach"],
        "bestTime": ["dry"],
        "tags": ["해변"],
        "imageUrl": "https://cdn.example.com/boracay.jpg",
        "price": {"KRW": "50000", "PHP": "2000"},
    }
    body.update(extra)
    return body


def test_create_spot_requires_fields(admin_client):
    res = admin_client.post("/spots?lang=en", json={"name": {"ko": "이름만", "en": ""}, "type": []})
    assert res.status_code == 400
    detail = res.json()["detail"]
    assert detail.startswith("Required fields are missing:")
    assert "name" in detail
    assert "imageUrl" in detail
    assert "bestTime" in detail


def test_spot_crud_and_filters(admin_client):
    a = admin_client.post("/spots", json=spot_payload()).json()
    admin_client.post("/spots", json=spot_payload(
        name_ko="세부 시티", name_en="Cebu City",
        region={"ko": "세부", "en": "Cebu"}, type=["city"],
    ))

    names = [s["name"]["ko"] for s in admin_client.get("/spots").json()]
    assert names == ["보라카이 화이트비치", "세부 시티"]

    by_region = admin_client.get("/spots", params={"region": "Cebu"}).json()
    assert [s["name"]["en"] for s in by_region] == ["Cebu City"]

    by_type = admin_client.get("/spots", params={"type": "beach"}).json()
    assert [s["id"] for s in by_type] == [a["id"]]

    by_q = admin_client.get("/spots", params={"q": "화이트비치"}).json()
    assert len(by_q) == 1

    res = admin_client.put(f"/spots/{a['id']}", json={"tags": ["해변", "스노클링"]})
    assert res.status_code == 200
    assert res.json()["tags"] == ["해변", "스노클링"]
    assert res.json()["price"]["PHP"] == "2000"


def test_spot_update_removes_replaced_images(admin_client, storage):
    old_url = storage.save_bytes(b"old", content_type="image/jpeg", key="spots/1_old.jpg")
    path = os.path.join(os.environ["UPLOAD_DIRECTORY"], "spots", "1_old.jpg")
    spot = admin_client.post("/spots", json=spot_payload(imageUrl=old_url)).json()

    res = admin_client.put(f"/spots/{spot['id']}", json={"imageUrl": "https://cdn.example.com/new.jpg"})
    assert res.status_code == 200
    assert not os.path.exists(path)


def test_include_items_by_kind(admin_client):
    admin_client.post("/include-items", json={"kind": "included", "text": {"ko": "왕복 항공권", "en": "Round-trip flight"}})
    admin_client.post("/include-items", json={"kind": "not_included", "text": {"ko": "개인 경비", "en": "Personal expenses"}})

    included = admin_client.get("/include-items", params={"kind": "included"}).json()
    assert [i["text"]["en"] for i in included] == ["Round-trip flight"]
    assert len(admin_client.get("/include-items").json()) == 2


def product_payload(**extra):
    body = {
        "title": {"ko": "세부 3박 4일", "en": "Cebu 4 days"},
        "region": {"ko": "세부", "en": "Cebu"},
        "country": {"ko": "필리핀", "en": "Philippines"},
        "price": {"KRW": "990000", "PHP": "39000", "USD": "750"},
        "duration": {"startDate": "2026-11-01", "endDate": "2026-11-04"},
        "schedule": [
            {"day": 7, "spots": [{"spotId": "spot-1", "spotName": {"ko": "오슬롭", "en": "Oslob"}}]},
            {"day": 9, "spots": [{"spotId": "spot-2", "spotName": "Kawasan"}]},
        ],
        "highlights": [{"spotId": "spot-2", "spotName": {"ko": "카와산", "en": "Kawasan"}}],
        "includedItems": ["왕복 항공권", "  ", ""],
    }
    body.update(extra)
    return body


def test_product_create_normalizes(admin_client):
    res = admin_client.post("/products?lang=en", json=product_payload())
    assert res.status_code == 201, res.text
    product = res.json()
    assert [d["day"] for d in product["schedule"]] == [1, 2]
    assert product["schedule"][1]["spots"][0]["spotName"] == {"ko": "Kawasan", "en": "Kawasan"}
    assert product["includedItems"] == ["왕복 항공권"]
    assert product["priceText"] == "₩990000 ₱39000 $750"
    assert product["mainPrice"] == "₱39000"
    assert product["duration"]["startDate"] == "2026-11-01"


def test_product_highlight_must_be_in_schedule(admin_client):
    res = admin_client.post("/products", json=product_payload(
        highlights=[{"spotId": "elsewhere", "spotName": "Elsewhere"}],
    ))
    assert res.status_code == 400


def test_product_price_not_set(admin_client):
    res = admin_client.post("/products?lang=en", json=product_payload(price=None))
    assert res.json()["priceText"] == "Price not set"


def test_product_update_and_delete(admin_client):
    product = admin_client.post("/products", json=product_payload()).json()

    res = admin_client.put(f"/products/{product['id']}", json={"title": {"ko": "세부 4박 5일", "en": "Cebu 5 days"}})
    assert res.status_code == 200
    assert res.json()["title"]["ko"] == "세부 4박 5일"
    assert len(res.json()["schedule"]) == 2

    assert admin_client.delete(f"/products/{product['id']}").status_code == 200
    assert admin_client.get(f"/products/{product['id']}").status_code == 404
