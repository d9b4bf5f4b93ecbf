"""
이메일 발송 서비스
"""

from dataclasses import dataclass
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from typing import List, Optional, Sequence
import smtplib
import ssl
import asyncio
import logging

from app.core.config import settings


logger = logging.getLogger(__name__)


@dataclass
class MailAttachment:
    filename: str
    content_type: str
    data: bytes


def _build_message(
    to_email: str,
    subject: str,
    text: str,
    attachments: Sequence[MailAttachment],
    reply_to: Optional[str],
    message_id: str,
) -> MIMEMultipart:
    msg = MIMEMultipart("mixed")
    msg["Subject"] = subject
    msg["From"] = formataddr((settings.EMAIL_FROM_NAME, settings.EMAIL_FROM_ADDRESS))
    msg["To"] = to_email
    msg["Message-ID"] = message_id
    if reply_to:
        msg["Reply-To"] = reply_to

    msg.attach(MIMEText(text, "plain", "utf-8"))

    for att in attachments:
        maintype, _, subtype = (att.content_type or "application/octet-stream").partition("/")
        part = MIMEApplication(att.data, _subtype=subtype or "octet-stream")
        part.replace_header("Content-Type", f"{maintype}/{subtype or 'octet-stream'}")
        part.add_header("Content-Disposition", "attachment", filename=("utf-8", "", att.filename))
        msg.attach(part)
    return msg


def _send_email_sync(to_email: str, msg: MIMEMultipart) -> None:
    """동기 SMTP 전송 (스레드 풀에서 실행)"""
    if not settings.SMTP_HOST:
        # 개발 환경: 실제 발송 없이 로그로 대체
        logger.info("[DEV] 이메일 미발송 (SMTP 미설정) → 제목: %s, 수신자: %s", msg["Subject"], to_email)
        return

    context = ssl.create_default_context()
    if settings.SMTP_USE_SSL:
        with smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, context=context) as server:
            if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
                server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.sendmail(settings.EMAIL_FROM_ADDRESS, [to_email], msg.as_string())
    else:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
            if settings.SMTP_USE_TLS:
                server.starttls(context=context)
            if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
                server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.sendmail(settings.EMAIL_FROM_ADDRESS, [to_email], msg.as_string())


async def send_email(
    to_email: str,
    subject: str,
    text: str,
    attachments: Optional[List[MailAttachment]] = None,
    reply_to: Optional[str] = None,
) -> str:
    """첨부파일 포함 메일 발송 (비동기). 발송한 Message-ID 를 반환한다."""
    domain = (settings.EMAIL_FROM_ADDRESS.split("@", 1) + ["localhost"])[1]
    message_id = make_msgid(domain=domain)
    msg = _build_message(to_email, subject, text, attachments or [], reply_to, message_id)
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, _send_email_sync, to_email, msg)
    return message_id
