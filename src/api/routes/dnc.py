"""Do-not-contact list endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy import func
from sqlalchemy.orm import Session

from src.db import models
from src.db.models import DncReason
from src.db.session import get_db
from src.services.contacts import ContactFinder
from src.services.dnc import DoNotContactModel

router = APIRouter(prefix="/dnc", tags=["dnc"])


class DncCreate(BaseModel):
    email: str
    comments: str | None = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        value = value.strip()
        if "@" not in value:
            raise ValueError("email must be valid")
        return value


class DncResponse(BaseModel):
    id: int
    contact_id: int | None = None
    email: str
    channel: str
    channel_id: str | None = None
    reason: DncReason
    comments: str | None = None

    model_config = ConfigDict(from_attributes=True)


@router.get("/", response_model=list[DncResponse])
def list_dnc(
    email: str | None = Query(default=None),
    reason: int | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[DncResponse]:
    """List do-not-contact entries filtered by address and/or reason."""

    query = db.query(models.DoNotContact)
    if email is not None:
        query = query.filter(func.lower(models.DoNotContact.email) == email.strip().lower())
    if reason is not None:
        query = query.filter(models.DoNotContact.reason == reason)
    entries = query.order_by(models.DoNotContact.id).all()
    return [DncResponse.model_validate(entry) for entry in entries]


@router.get("/check")
def check_contactable(email: str = Query(...), db: Session = Depends(get_db)) -> dict[str, str | bool]:
    """Tell whether an address may be emailed."""

    address = email.strip()
    return {"email": address, "contactable": DoNotContactModel(db).is_contactable(address)}


@router.post("/", response_model=list[DncResponse], status_code=status.HTTP_201_CREATED)
def add_manual_dnc(payload: DncCreate, db: Session = Depends(get_db)) -> list[DncResponse]:
    """Manually suppress an address for every contact that uses it."""

    dnc_model = DoNotContactModel(db)
    contacts = ContactFinder(db).find_by_address(payload.email).get_contacts()
    comments = payload.comments or "Manually added"
    if contacts:
        entries = [dnc_model.add_dnc_for_contact(c.id, "email", DncReason.MANUAL, comments) for c in contacts]
    else:
        entries = [dnc_model.add_dnc_for_address(payload.email, "email", DncReason.MANUAL, comments)]
    db.commit()
    return [DncResponse.model_validate(entry) for entry in entries]


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def remove_dnc(entry_id: int, db: Session = Depends(get_db)) -> Response:
    """Make an address contactable again."""

    entry = db.query(models.DoNotContact).filter(models.DoNotContact.id == entry_id).first()
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Do-not-contact entry not found")
    db.delete(entry)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
