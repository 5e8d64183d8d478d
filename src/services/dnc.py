"""Do-not-contact bookkeeping."""
from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import Session

from src.db import models
from src.db.models import DncReason
from src.utils.logger import logger


class DoNotContactModel:
    """Creates and updates suppression entries for contacts and bare addresses."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def add_dnc_for_contact(
        self,
        contact_id: int,
        channel: str = "email",
        reason: DncReason = DncReason.BOUNCED,
        comments: str = "",
        channel_id: str | None = None,
    ) -> models.DoNotContact:
        """Mark a contact as not contactable on a channel.

        An existing entry for the same contact and channel is reused; its reason
        and comments are only overwritten when the reason changes.
        """

        contact = self.db.get(models.Contact, contact_id)
        if contact is None:
            raise ValueError(f"Contact {contact_id} not found")

        existing = (
            self.db.query(models.DoNotContact)
            .filter(models.DoNotContact.contact_id == contact_id, models.DoNotContact.channel == channel)
            .first()
        )
        return self._upsert(existing, contact_id, contact.email, channel, reason, comments, channel_id)

    def add_dnc_for_address(
        self,
        email: str,
        channel: str = "email",
        reason: DncReason = DncReason.BOUNCED,
        comments: str = "",
        channel_id: str | None = None,
    ) -> models.DoNotContact:
        """Suppress an address that does not belong to any known contact."""

        existing = (
            self.db.query(models.DoNotContact)
            .filter(
                models.DoNotContact.contact_id.is_(None),
                func.lower(models.DoNotContact.email) == email.lower(),
                models.DoNotContact.channel == channel,
            )
            .first()
        )
        return self._upsert(existing, None, email, channel, reason, comments, channel_id)

    def is_contactable(self, email: str, channel: str = "email") -> bool:
        entry = (
            self.db.query(models.DoNotContact.id)
            .filter(func.lower(models.DoNotContact.email) == email.lower(), models.DoNotContact.channel == channel)
            .first()
        )
        return entry is None

    def _upsert(
        self,
        existing: models.DoNotContact | None,
        contact_id: int | None,
        email: str,
        channel: str,
        reason: DncReason,
        comments: str,
        channel_id: str | None,
    ) -> models.DoNotContact:
        if existing is not None:
            if existing.reason != int(reason):
                logger.info("Updating DNC %s for %s from reason %s to %s", existing.id, email, existing.reason, int(reason))
                existing.reason = int(reason)
                existing.comments = comments
                existing.channel_id = channel_id
                self.db.add(existing)
                self.db.flush()
            return existing

        entry = models.DoNotContact(
            contact_id=contact_id,
            email=email,
            channel=channel,
            channel_id=channel_id,
            reason=int(reason),
            comments=comments,
        )
        self.db.add(entry)
        self.db.flush()
        return entry
