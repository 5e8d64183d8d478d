"""Database models for contacts, suppression and callback events."""
from __future__ import annotations

from enum import IntEnum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import declarative_base, relationship

from src.utils.datetime import utcnow

Base = declarative_base()


class DncReason(IntEnum):
    """Why a contact must not be emailed."""

    CONTACTABLE = 0
    UNSUBSCRIBED = 1
    BOUNCED = 2
    MANUAL = 3


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), nullable=False, index=True)
    first_name = Column(String(120), nullable=True)
    last_name = Column(String(120), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    do_not_contact = relationship("DoNotContact", back_populates="contact", cascade="all")


class DoNotContact(Base):
    __tablename__ = "do_not_contact"

    id = Column(Integer, primary_key=True)
    # NULL when the address had no matching contact at the time of the callback.
    contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=True, index=True)
    email = Column(String(320), nullable=False, index=True)
    channel = Column(String(50), nullable=False, default="email")
    channel_id = Column(String(255), nullable=True)
    reason = Column(Integer, nullable=False, default=DncReason.BOUNCED.value)
    comments = Column(Text, nullable=True)
    date_added = Column(DateTime(timezone=True), default=utcnow)

    contact = relationship("Contact", back_populates="do_not_contact")


class EmailEvent(Base):
    __tablename__ = "email_events"

    id = Column(Integer, primary_key=True)
    event_type = Column(String(50), nullable=False)
    ses_message_id = Column(String(255), nullable=True, index=True)
    email_id = Column(String(255), nullable=True, index=True)
    topic_arn = Column(String(512), nullable=True)
    payload_json = Column(Text, nullable=False)
    signature_verified = Column(Boolean, nullable=True)
    received_at = Column(DateTime(timezone=True), default=utcnow)
