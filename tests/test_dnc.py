"""Tests for contact lookup and do-not-contact bookkeeping."""
from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.db import models
from src.db.models import DncReason
from src.services.contacts import ContactFinder
from src.services.dnc import DoNotContactModel


def _make_db_session():
    engine = create_engine("sqlite:///:memory:", future=True)
    models.Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(bind=engine)
    return SessionLocal()


def test_find_by_address_is_case_insensitive():
    db = _make_db_session()
    db.add_all([models.Contact(email="Jane@Example.com"), models.Contact(email="jane@example.com")])
    db.add(models.Contact(email="other@example.com"))
    db.commit()

    result = ContactFinder(db).find_by_address(" JANE@example.COM ")

    assert len(result.get_contacts()) == 2
    assert ContactFinder(db).find_by_address("").get_contacts() == []


def test_same_reason_keeps_first_comments():
    db = _make_db_session()
    contact = models.Contact(email="jane@example.com")
    db.add(contact)
    db.commit()
    dnc_model = DoNotContactModel(db)

    first = dnc_model.add_dnc_for_contact(contact.id, "email", DncReason.BOUNCED, "first")
    second = dnc_model.add_dnc_for_contact(contact.id, "email", DncReason.BOUNCED, "second")

    assert first.id == second.id
    assert second.comments == "first"
    assert db.query(models.DoNotContact).count() == 1


def test_channels_are_tracked_separately():
    db = _make_db_session()
    contact = models.Contact(email="jane@example.com")
    db.add(contact)
    db.commit()
    dnc_model = DoNotContactModel(db)

    dnc_model.add_dnc_for_contact(contact.id, "email", DncReason.UNSUBSCRIBED, "email")
    dnc_model.add_dnc_for_contact(contact.id, "sms", DncReason.UNSUBSCRIBED, "sms")

    assert db.query(models.DoNotContact).count() == 2
    assert dnc_model.is_contactable("jane@example.com", "email") is False
    assert dnc_model.is_contactable("someone@example.com", "email") is True


def test_unknown_contact_raises():
    db = _make_db_session()

    with pytest.raises(ValueError):
        DoNotContactModel(db).add_dnc_for_contact(404, "email", DncReason.BOUNCED, "")
