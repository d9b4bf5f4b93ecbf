import pytest

from app.core.i18n import (
    localize,
    normalize_list,
    parse_accept_language,
    php_price,
    price_display_text,
    t,
)


def test_localize_fallbacks():
    assert localize({"ko": "서울", "en": "Seoul"}, "en") == "Seoul"
    assert localize({"ko": "서울", "en": ""}, "en") == "서울"
    assert localize({"en": "Seoul"}, "ko") == ""
    assert localize("그대로", "en") == "그대로"
    assert localize(None, "ko") == ""


@pytest.mark.parametrize("header,expected", [
    ("en-US,en;q=0.9,ko;q=0.8", "en"),
    ("fr-FR, ko;q=0.5, en;q=0.7", "en"),
    ("ko-KR", "ko"),
    ("ja,zh", None),
    ("", None),
])
def test_parse_accept_language(header, expected):
    assert parse_accept_language(header) == expected


def test_message_catalog_localizes_entity_names():
    assert t("not_found", "en", name="product") == "Product not found."
    assert t("not_found", "ko", name="spot") == "스팟을(를) 찾을 수 없습니다."
    assert t("emails_sent", "ko", count=3) + t("emails_failed_suffix", "ko", count=1) == (
        "3명의 TA에게 이메일이 발송되었습니다. (1명 실패)"
    )
    assert t("no_such_key", "en") == "no_such_key"


def test_price_helpers():
    price = {"KRW": "100000", "PHP": "", "USD": "80"}
    assert price_display_text(price, "ko") == "₩100000 $80"
    assert price_display_text({"KRW": "", "PHP": ""}, "en") == "Price not set"
    assert price_display_text(None, "ko") == "가격 미지정"
    assert php_price(price) == "₩100000"
    assert php_price({"PHP": "3500", "KRW": "100000"}) == "₱3500"
    assert php_price(None) == "-"


def test_normalize_list():
    assert normalize_list({"0": "a", "1": "b"}) == ["a", "b"]
    assert normalize_list(["a"]) == ["a"]
    assert normalize_list(None) == []


def test_lang_query_beats_header(client):
    res = client.get("/auth/me?lang=en", headers={"Accept-Language": "ko-KR"})
    assert res.status_code == 401
    assert res.json()["detail"] != client.get("/auth/me", headers={"Accept-Language": "ko-KR"}).json()["detail"]
