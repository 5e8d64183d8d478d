"""Contact lookup by email address."""
from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy import func
from sqlalchemy.orm import Session

from src.db import models


@dataclass
class ContactFinderResult:
    contacts: list[models.Contact] = field(default_factory=list)

    def get_contacts(self) -> list[models.Contact]:
        return self.contacts


class ContactFinder:
    """Finds the contacts that own an email address."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_address(self, address: str) -> ContactFinderResult:
        normalized = address.strip().lower()
        if not normalized:
            return ContactFinderResult()
        contacts = (
            self.db.query(models.Contact)
            .filter(func.lower(models.Contact.email) == normalized)
            .order_by(models.Contact.id)
            .all()
        )
        return ContactFinderResult(contacts=contacts)
