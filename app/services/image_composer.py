"""
이미지 변환/합성
- WebP 변환, 썸네일 생성
- TA 로고 합성 (이메일 첨부 이미지)
- TA 오버레이 배너 렌더링 (로고 + 회사 정보)
"""
import base64
import io
import os
import logging
from typing import Optional, Tuple
from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError
import aiohttp

from app.services.storage import Storage

logger = logging.getLogger(__name__)


class ImageComposer:
    """Pillow 기반 이미지 처리"""

    WEBP_QUALITY = 85
    THUMB_SIZE = (400, 300)
    THUMB_QUALITY = 70

    # 이메일 이미지 로고 합성 (좌상단 여백 50px, 최대 200x200)
    LOGO_BOX = (200, 200)
    LOGO_POSITION = (50, 50)

    # TA 오버레이 배너
    OVERLAY_WIDTH = 2480
    OVERLAY_HEIGHT = 250
    OVERLAY_LOGO_LEFT = 50
    OVERLAY_TEXT_RIGHT_MARGIN = 100

    def __init__(self, font_path: Optional[str] = None):
        # 우선순위: 전달된 경로 > 환경변수(OVERLAY_FONT_PATH)
        env_font = (os.getenv("OVERLAY_FONT_PATH") or "").strip()
        self.font_path = font_path or (env_font if env_font else None)

    def _get_font(self, size: int, bold: bool = False) -> ImageFont.ImageFont:
        """폰트 객체 반환"""
        if self.font_path and os.path.exists(self.font_path):
            try:
                return ImageFont.truetype(self.font_path, size)
            except OSError as e:
                logger.warning(f"Failed to load custom font: {e}")

        font_candidates = [
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf" if bold else "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
            "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf" if bold else "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
            "/usr/share/fonts/truetype/nanum/NanumGothic.ttf",
            "/System/Library/Fonts/Supplemental/Arial.ttf",
            "C:/Windows/Fonts/arial.ttf",
        ]
        for path in font_candidates:
            if os.path.exists(path):
                try:
                    return ImageFont.truetype(path, size)
                except OSError:
                    continue

        # Pillow 10.1+ 는 기본 폰트 크기 지정 가능
        try:
            return ImageFont.load_default(size=size)
        except TypeError:
            return ImageFont.load_default()

    @staticmethod
    def open_image(data: bytes) -> Image.Image:
        """바이트를 이미지로 연다. 이미지가 아니면 ValueError"""
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
            return img
        except (UnidentifiedImageError, OSError) as e:
            raise ValueError(f"invalid image data: {e}") from e

    @staticmethod
    def _encode(img: Image.Image, fmt: str, **kwargs) -> bytes:
        if fmt == "WEBP" and img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGBA" if "A" in img.getbands() else "RGB")
        output = io.BytesIO()
        img.save(output, format=fmt, **kwargs)
        return output.getvalue()

    def to_webp(self, data: bytes, quality: Optional[int] = None) -> bytes:
        """이미지를 WebP 로 변환"""
        img = self.open_image(data)
        return self._encode(img, "WEBP", quality=quality or self.WEBP_QUALITY)

    def thumbnail(self, data: bytes, size: Tuple[int, int] = None, quality: Optional[int] = None) -> bytes:
        """비율 유지, size 안에 맞춘 WebP 썸네일"""
        img = self.open_image(data)
        img.thumbnail(size or self.THUMB_SIZE, Image.Resampling.LANCZOS)
        return self._encode(img, "WEBP", quality=quality or self.THUMB_QUALITY)

    def composite_logo(self, base: bytes, logo: bytes) -> bytes:
        """원본 이미지 좌상단에 로고를 합성해 WebP 로 반환"""
        canvas = self.open_image(base).convert("RGBA")
        mark = self.open_image(logo).convert("RGBA")
        mark.thumbnail(self.LOGO_BOX, Image.Resampling.LANCZOS)
        canvas.alpha_composite(mark, dest=self.LOGO_POSITION)
        return self._encode(canvas, "WEBP", quality=self.WEBP_QUALITY)

    def render_ta_overlay(
        self,
        company_name: str,
        phone: str,
        email: str,
        logo: Optional[bytes] = None,
    ) -> bytes:
        """
        TA 오버레이 배너(2480x250, 흰 배경) PNG 생성

        - 로고: 왼쪽(50px) 높이 250에 맞춤. 로고 처리 실패 시 텍스트만 그린다.
        - 회사명/전화/이메일: 오른쪽 정렬 (x = width - 100)
        """
        width, height = self.OVERLAY_WIDTH, self.OVERLAY_HEIGHT
        canvas = Image.new("RGBA", (width, height), (255, 255, 255, 255))

        if logo:
            try:
                mark = self.open_image(logo).convert("RGBA")
                ratio = height / float(mark.height)
                new_w = max(1, min(int(mark.width * ratio), width // 2))
                mark = mark.resize((new_w, height), Image.Resampling.LANCZOS)
                canvas.alpha_composite(mark, dest=(self.OVERLAY_LOGO_LEFT, 0))
            except ValueError as e:
                logger.warning(f"[overlay] 로고 처리 실패: {e}")

        draw = ImageDraw.Draw(canvas)
        right = width - self.OVERLAY_TEXT_RIGHT_MARGIN
        lines = [
            (company_name, 120, 100, True, (51, 51, 51)),
            (phone, 40, 160, False, (102, 102, 102)),
            (email, 40, 220, False, (102, 102, 102)),
        ]
        for text, size, baseline, bold, color in lines:
            if not text:
                continue
            font = self._get_font(size, bold=bold)
            # 기준선(baseline) 우측 정렬
            _, _, text_w, text_h = draw.textbbox((0, 0), text, font=font)
            draw.text((right - text_w, baseline - text_h), text, font=font, fill=color)

        return self._encode(canvas.convert("RGB"), "PNG", optimize=True)

    async def fetch_bytes(self, source: str, storage: Optional[Storage] = None) -> bytes:
        """URL/데이터 URL/스토리지 URL 에서 이미지 바이트를 가져온다."""
        if source.startswith("data:"):
            _, _, payload = source.partition(",")
            return base64.b64decode(payload)
        if storage is not None:
            key = storage.key_from_url(source)
            if key:
                return storage.read_bytes(key)
        return await self._download_image(source)

    async def _download_image(self, url: str) -> bytes:
        """이미지 다운로드"""
        async with aiohttp.ClientSession() as session:
            async with session.get(url, timeout=aiohttp.ClientTimeout(total=30)) as resp:
                if resp.status >= 400:
                    raise ValueError(f"Failed to download image: HTTP {resp.status}")
                return await resp.read()
