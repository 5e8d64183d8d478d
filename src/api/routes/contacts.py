"""Contact management endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy import func
from sqlalchemy.orm import Session

from src.db import models
from src.db.session import get_db

router = APIRouter(prefix="/contacts", tags=["contacts"])


class ContactCreate(BaseModel):
    email: str
    first_name: str | None = None
    last_name: str | None = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        value = value.strip()
        if "@" not in value:
            raise ValueError("email must be valid")
        return value


class ContactResponse(BaseModel):
    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None

    model_config = ConfigDict(from_attributes=True)


def _get_contact(db: Session, contact_id: int) -> models.Contact:
    contact = db.query(models.Contact).filter(models.Contact.id == contact_id).first()
    if contact is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    return contact


@router.post("/", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
def add_contact(payload: ContactCreate, db: Session = Depends(get_db)) -> ContactResponse:
    """Create a contact unless the address is already known."""

    existing = db.query(models.Contact).filter(func.lower(models.Contact.email) == payload.email.lower()).first()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Contact already exists")

    contact = models.Contact(email=payload.email, first_name=payload.first_name, last_name=payload.last_name)
    db.add(contact)
    db.commit()
    db.refresh(contact)
    return ContactResponse.model_validate(contact)


@router.get("/", response_model=list[ContactResponse])
def list_contacts(email: str | None = Query(default=None), db: Session = Depends(get_db)) -> list[ContactResponse]:
    """List contacts, optionally filtered by email address."""

    query = db.query(models.Contact)
    if email is not None:
        query = query.filter(func.lower(models.Contact.email) == email.strip().lower())
    contacts = query.order_by(models.Contact.id).all()
    return [ContactResponse.model_validate(c) for c in contacts]


@router.get("/{contact_id}", response_model=ContactResponse)
def get_contact(contact_id: int, db: Session = Depends(get_db)) -> ContactResponse:
    return ContactResponse.model_validate(_get_contact(db, contact_id))


@router.delete("/{contact_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_contact(contact_id: int, db: Session = Depends(get_db)) -> Response:
    """Remove a contact together with its do-not-contact entries."""

    contact = _get_contact(db, contact_id)
    db.delete(contact)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
