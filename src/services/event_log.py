"""Audit trail of processed SES notifications."""
from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from src.db import models
from src.utils.sns import dumps_payload


def record_email_event(
    db: Session,
    event_type: str,
    payload: dict[str, Any],
    email_id: str | None = None,
    signature_verified: bool | None = None,
    topic_arn: str | None = None,
) -> models.EmailEvent:
    mail = payload.get("mail") or {}
    event = models.EmailEvent(
        event_type=event_type,
        ses_message_id=mail.get("messageId") if isinstance(mail, dict) else None,
        email_id=email_id,
        topic_arn=topic_arn,
        payload_json=dumps_payload(payload),
        signature_verified=signature_verified,
    )
    db.add(event)
    db.flush()
    return event
