"""
다국어(ko/en) 메시지 및 로케일 유틸리티

관리자 화면은 한국어/영어 두 가지로만 동작한다.
- 응답 메시지는 MESSAGES 카탈로그에서 키로 조회한다.
- 언어는 ?lang= 쿼리 → Accept-Language 헤더 → DEFAULT_LANGUAGE 순으로 결정한다.
- {ko, en} 쌍으로 저장된 문자열은 localize()로 꺼낸다(요청 언어 → ko → 빈 문자열).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import Query, Request

from app.core.config import settings


SUPPORTED_LANGUAGES = ("ko", "en")


ENTITY_NAMES: Dict[str, Dict[str, str]] = {
    "user": {"ko": "사용자", "en": "User"},
    "banner": {"ko": "배너", "en": "Banner"},
    "spot": {"ko": "스팟", "en": "Spot"},
    "include_item": {"ko": "포함/불포함 항목", "en": "Include item"},
    "product": {"ko": "상품", "en": "Product"},
    "booking": {"ko": "예약", "en": "Booking"},
    "poster": {"ko": "전단지", "en": "Poster"},
    "ta": {"ko": "TA", "en": "TA"},
    "content": {"ko": "여행정보", "en": "Travel info"},
    "settings": {"ko": "설정", "en": "Settings"},
    "activity": {"ko": "활동 기록", "en": "Activity"},
    "email_history": {"ko": "이메일 기록", "en": "Email history"},
    "file": {"ko": "파일", "en": "File"},
    "collaboration": {"ko": "협업 요청", "en": "Collaboration request"},
}


MESSAGES: Dict[str, Dict[str, str]] = {
    # 인증/권한
    "auth_required": {"ko": "인증 토큰이 필요합니다.", "en": "Authentication token is required."},
    "invalid_token": {"ko": "인증 정보가 유효하지 않습니다.", "en": "Invalid authentication credentials."},
    "invalid_refresh_token": {"ko": "유효하지 않은 리프레시 토큰입니다.", "en": "Invalid refresh token."},
    "admin_required": {"ko": "관리자 권한이 필요합니다.", "en": "Admin access required."},
    "user_disabled": {"ko": "비활성화된 계정입니다.", "en": "This account has been disabled."},
    "login_failed": {"ko": "이메일 또는 패스워드가 올바르지 않습니다.", "en": "Incorrect email or password."},
    "email_taken": {"ko": "이미 등록된 이메일입니다.", "en": "This email is already registered."},
    "rate_limited": {
        "ko": "요청이 너무 많습니다. 잠시 후 다시 시도해주세요.",
        "en": "Too many requests. Please try again later.",
    },
    # 공통 CRUD
    "not_found": {"ko": "{name}을(를) 찾을 수 없습니다.", "en": "{name} not found."},
    "list_failed": {"ko": "{name} 목록 조회에 실패했습니다.", "en": "Failed to load {name} list."},
    "save_failed": {"ko": "{name} 저장에 실패했습니다.", "en": "Failed to save {name}."},
    "update_failed": {"ko": "{name} 수정에 실패했습니다.", "en": "Failed to update {name}."},
    "delete_failed": {"ko": "{name} 삭제에 실패했습니다.", "en": "Failed to delete {name}."},
    "created": {"ko": "{name}이(가) 성공적으로 등록되었습니다.", "en": "{name} created successfully."},
    "updated": {"ko": "{name}이(가) 성공적으로 수정되었습니다.", "en": "{name} updated successfully."},
    "deleted": {"ko": "{name}이(가) 성공적으로 삭제되었습니다.", "en": "{name} deleted successfully."},
    "missing_fields": {"ko": "필수 필드가 누락되었습니다: {fields}", "en": "Required fields are missing: {fields}"},
    "duplicate_ids": {"ko": "중복된 ID가 포함되어 있습니다.", "en": "Duplicate ids in request."},
    "order_saved": {"ko": "순서가 저장되었습니다.", "en": "Order saved."},
    "settings_saved": {"ko": "설정이 성공적으로 저장되었습니다.", "en": "Settings saved successfully."},
    # 파일
    "no_file": {"ko": "파일이 없습니다.", "en": "No file provided."},
    "images_only": {"ko": "이미지 파일만 업로드 가능합니다.", "en": "Only image files can be uploaded."},
    "file_too_large": {"ko": "파일 크기는 {limit}MB 이하여야 합니다.", "en": "File size must be {limit}MB or less."},
    "invalid_image": {"ko": "이미지를 처리할 수 없습니다.", "en": "The image could not be processed."},
    "invalid_storage_url": {"ko": "유효하지 않은 스토리지 URL입니다.", "en": "Invalid storage URL."},
    "upload_failed": {"ko": "파일 업로드에 실패했습니다.", "en": "Upload failed."},
    "file_list_required": {"ko": "삭제할 파일 목록이 필요합니다.", "en": "A list of files to delete is required."},
    "files_deleted": {"ko": "{count}개 파일이 삭제되었습니다.", "en": "{count} file(s) deleted."},
    "files_failed_suffix": {"ko": " ({count}개 실패)", "en": " ({count} failed)"},
    # 활동 기록
    "activity_required": {"ko": "액션과 상세 정보가 필요합니다.", "en": "Action and details are required."},
    # TA / 이메일
    "ta_ids_required": {"ko": "TA ID가 필요합니다.", "en": "TA ids are required."},
    "attachment_required": {"ko": "첨부파일이 필요합니다.", "en": "An attachment is required."},
    "session_required": {"ko": "세션 ID가 필요합니다.", "en": "A session id is required."},
    "image_generation_failed": {
        "ko": "이미지 처리 중 오류가 발생했습니다.",
        "en": "An error occurred while processing images.",
    },
    "emails_sent": {
        "ko": "{count}명의 TA에게 이메일이 발송되었습니다.",
        "en": "Email sent to {count} TA(s).",
    },
    "emails_failed_suffix": {"ko": " ({count}명 실패)", "en": " ({count} failed)"},
    "email_send_failed": {"ko": "이메일 발송에 실패했습니다.", "en": "Failed to send email."},
    "logo_deleted": {"ko": "로고가 삭제되었습니다.", "en": "Logo deleted."},
    "delivery_status_required": {
        "ko": "변경할 상태(deliveryStatus 또는 readStatus)가 필요합니다.",
        "en": "deliveryStatus or readStatus is required.",
    },
    "delivery_status_updated": {
        "ko": "수신확인 상태가 업데이트되었습니다.",
        "en": "Delivery status updated.",
    },
    # 예약
    "invalid_team": {"ko": "team 파라미터는 AIR 또는 CINT여야 합니다.", "en": "team must be AIR or CINT."},
    "project_type_required": {
        "ko": "projectType이 필요합니다. (AIR_ONLY, CINT_PACKAGE, CINT_INCENTIVE_GROUP 중 하나)",
        "en": "projectType is required (one of AIR_ONLY, CINT_PACKAGE, CINT_INCENTIVE_GROUP).",
    },
    "customer_required": {
        "ko": "고객 정보 (이름, 이메일)가 필요합니다.",
        "en": "Customer name and email are required.",
    },
    "dates_required": {"ko": "예약 날짜 정보가 필요합니다.", "en": "Booking dates are required."},
    "invalid_date_range": {"ko": "종료일은 시작일 이후여야 합니다.", "en": "End date must not be before start date."},
    "adults_required": {
        "ko": "성인 승객 수가 1명 이상이어야 합니다.",
        "en": "At least one adult passenger is required.",
    },
    "flight_details_required": {
        "ko": "AIR_ONLY 프로젝트는 항공편 정보가 필요합니다.",
        "en": "AIR_ONLY bookings require flight details.",
    },
    "package_info_required": {
        "ko": "CINT_PACKAGE 프로젝트는 패키지 정보가 필요합니다.",
        "en": "CINT_PACKAGE bookings require package info.",
    },
    "custom_requirements_required": {
        "ko": "CINT_INCENTIVE_GROUP 프로젝트는 맞춤 요구사항이 필요합니다.",
        "en": "CINT_INCENTIVE_GROUP bookings require custom requirements.",
    },
    "invalid_status": {"ko": "유효한 상태를 입력해주세요.", "en": "Please provide a valid status."},
    "already_in_status": {"ko": "이미 해당 상태입니다.", "en": "The booking is already in that status."},
    "invalid_transition": {
        "ko": "현재 상태에서 해당 상태로 변경할 수 없습니다.",
        "en": "Cannot change to that status from the current status.",
    },
    "status_changed": {
        "ko": "상태가 성공적으로 변경되었습니다. ({previous} → {current})",
        "en": "Status changed successfully. ({previous} → {current})",
    },
    "booking_confirmed": {"ko": "예약이 확정되었습니다.", "en": "Booking confirmed successfully."},
    "already_confirmed": {"ko": "이미 확정된 예약입니다.", "en": "Booking is already confirmed."},
    "booking_closed": {
        "ko": "취소되었거나 완료된 예약은 확정할 수 없습니다.",
        "en": "Cancelled or completed bookings cannot be confirmed.",
    },
    "booking_not_confirmed": {"ko": "확정되지 않은 예약입니다.", "en": "Booking is not confirmed."},
    # 협업 요청
    "invalid_collab_team": {
        "ko": "요청받을 팀을 지정해주세요. (AIR 또는 CINT)",
        "en": "Please choose the team to request (AIR or CINT).",
    },
    "invalid_collab_type": {
        "ko": "유효한 협업 요청 타입을 선택해주세요.",
        "en": "Please choose a valid collaboration type.",
    },
    "collab_title_required": {"ko": "협업 요청 제목을 입력해주세요.", "en": "A request title is required."},
    "collab_description_required": {
        "ko": "협업 요청 내용을 입력해주세요.",
        "en": "A request description is required.",
    },
    "collab_same_team": {
        "ko": "같은 팀에게는 협업 요청을 할 수 없습니다.",
        "en": "You cannot send a collaboration request to the same team.",
    },
    "invalid_priority": {"ko": "유효한 우선순위를 입력해주세요.", "en": "Please provide a valid priority."},
    "nothing_to_update": {"ko": "수정할 내용이 없습니다.", "en": "Nothing to update."},
    # 상품
    "invalid_highlight": {
        "ko": "하이라이트는 일정에 포함된 스팟이어야 합니다.",
        "en": "Highlights must be spots included in the schedule.",
    },
    # 가격
    "price_not_set": {"ko": "가격 미지정", "en": "Price not set"},
}


def normalize_lang(value: Optional[str]) -> Optional[str]:
    """'ko-KR', 'en_US', 'EN' 등을 ko/en 으로 정규화한다. 알 수 없으면 None"""
    if not value:
        return None
    key = str(value).strip().lower().replace("_", "-").split("-")[0]
    return key if key in SUPPORTED_LANGUAGES else None


def parse_accept_language(header: Optional[str]) -> Optional[str]:
    """Accept-Language 헤더에서 지원 언어를 q값 우선순위로 고른다."""
    if not header:
        return None
    candidates = []
    for idx, part in enumerate(header.split(",")):
        piece = part.strip()
        if not piece:
            continue
        tag, _, params = piece.partition(";")
        q = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                q = float(params[2:])
            except ValueError:
                q = 0.0
        lang = normalize_lang(tag)
        if lang:
            candidates.append((-q, idx, lang))
    if not candidates:
        return None
    candidates.sort()
    return candidates[0][2]


def get_lang(
    request: Request,
    lang: Optional[str] = Query(None, description="응답 언어 (ko|en)"),
) -> str:
    """요청 언어 의존성"""
    return (
        normalize_lang(lang)
        or parse_accept_language(request.headers.get("accept-language"))
        or settings.DEFAULT_LANGUAGE
    )


def t(key: str, lang: str, **kwargs: Any) -> str:
    """메시지 카탈로그 조회. 'name' 인자에 엔티티 키를 넘기면 현지화된 이름으로 바꾼다."""
    entry = MESSAGES.get(key)
    if entry is None:
        return key
    template = entry.get(lang) or entry.get("ko") or key
    name = kwargs.get("name")
    if isinstance(name, str) and name in ENTITY_NAMES:
        kwargs["name"] = ENTITY_NAMES[name].get(lang) or ENTITY_NAMES[name]["ko"]
    try:
        return template.format(**kwargs)
    except (KeyError, IndexError):
        return template


def localize(value: Any, lang: str) -> str:
    """{ko, en} 값에서 요청 언어 문자열을 꺼낸다. 문자열은 그대로 반환한다."""
    if value is None:
        return ""
    if isinstance(value, dict):
        return str(value.get(lang) or value.get("ko") or "")
    if isinstance(value, str):
        return value
    return ""


def is_localized_text(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and isinstance(value.get("ko"), str)
        and isinstance(value.get("en"), str)
    )


def is_currency_price(value: Any) -> bool:
    """{KRW, PHP, USD} 형태의 통화별 가격인지 확인"""
    if not isinstance(value, dict):
        return False
    keys = ("KRW", "PHP", "USD")
    if not any(k in value for k in keys):
        return False
    return all(value.get(k) is None or isinstance(value.get(k), str) for k in keys)


def php_price(price: Any) -> str:
    """표시용 대표 가격 (PHP > KRW > USD 순)"""
    if not price:
        return "-"
    if isinstance(price, str):
        return price
    if is_currency_price(price):
        if (price.get("PHP") or "").strip():
            return f"₱{price['PHP']}"
        if (price.get("KRW") or "").strip():
            return f"₩{price['KRW']}"
        if (price.get("USD") or "").strip():
            return f"${price['USD']}"
    if is_localized_text(price):
        return price.get("ko") or price.get("en") or "-"
    return "-"


def price_display_text(price: Any, lang: str = "ko") -> str:
    """가격 표시 문자열 (통화가 여러 개면 공백으로 이어 붙인다)"""
    not_set = t("price_not_set", lang)
    if not price:
        return not_set
    if isinstance(price, str):
        return price
    if is_currency_price(price):
        parts = []
        if (price.get("KRW") or "").strip():
            parts.append(f"₩{price['KRW']}")
        if (price.get("PHP") or "").strip():
            parts.append(f"₱{price['PHP']}")
        if (price.get("USD") or "").strip():
            parts.append(f"${price['USD']}")
        return " ".join(parts) if parts else not_set
    if is_localized_text(price):
        return price.get(lang) or price.get("ko") or price.get("en") or not_set
    return not_set


def normalize_list(value: Any) -> List[Any]:
    """인덱스 키 dict({"0": a, "1": b})로 저장된 배열을 list로 되돌린다."""
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        return list(value.values())
    return []
