"""
공통 Pydantic 스키마

- 관리자 화면과의 호환을 위해 요청/응답 JSON은 camelCase 필드명을 쓴다 (CamelModel).
- 다국어 문자열은 {ko, en} 쌍(LocalizedText), 가격은 통화별 문자열(CurrencyPrice)로 주고받는다.
"""

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Optional
import re


def sanitize_text(value: Optional[str], max_length: Optional[int] = None) -> Optional[str]:
    """입력 텍스트를 정리한다(태그 제거 + trim)."""
    if value is None:
        return None
    text = re.sub(r"<[^>]*>", "", str(value)).strip()
    if max_length is not None and len(text) > max_length:
        raise ValueError(f"최대 {max_length}자까지 입력할 수 있습니다.")
    return text


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class LocalizedText(BaseModel):
    """한국어/영어 문자열 쌍"""

    model_config = ConfigDict(extra="ignore")

    ko: str = ""
    en: str = ""

    @model_validator(mode="before")
    @classmethod
    def accept_plain_string(cls, v):
        # 단일 언어로 저장된 과거 값은 두 언어에 같은 값을 채운다
        if isinstance(v, str):
            return {"ko": v, "en": v}
        return v

    @field_validator("ko", "en", mode="before")
    @classmethod
    def strip_value(cls, v):
        if v is None:
            return ""
        return str(v).strip()

    def is_complete(self) -> bool:
        return bool(self.ko and self.en)


class CurrencyPrice(BaseModel):
    """통화별 가격 (값은 표시용 문자열)"""

    model_config = ConfigDict(extra="ignore")

    KRW: Optional[str] = None
    PHP: Optional[str] = None
    USD: Optional[str] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str
