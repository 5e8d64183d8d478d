"""Inbound mailer transport webhooks (Amazon SNS/SES feedback)."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from src.core.events import ON_TRANSPORT_WEBHOOK, EventDispatcher, TransportWebhookEvent
from src.core.translator import Translator, get_translator
from src.db.session import get_db
from src.services.callback_subscriber import CallbackSubscriber
from src.services.contacts import ContactFinder
from src.services.dnc import DoNotContactModel

router = APIRouter(prefix="/mailer", tags=["callbacks"])


def get_dispatcher(
    db: Session = Depends(get_db),
    translator: Translator = Depends(get_translator),
) -> EventDispatcher:
    """Dispatcher with every transport subscriber registered for this request."""

    dispatcher = EventDispatcher()
    dispatcher.add_subscriber(
        CallbackSubscriber(
            db=db,
            translator=translator,
            finder=ContactFinder(db),
            dnc_model=DoNotContactModel(db),
        )
    )
    return dispatcher


@router.post("/callback")
async def mailer_callback(
    request: Request,
    db: Session = Depends(get_db),
    dispatcher: EventDispatcher = Depends(get_dispatcher),
    translator: Translator = Depends(get_translator),
) -> Response:
    """Hand the raw webhook to the transport subscribers and return their response."""

    body = await request.body()
    # subscribers block on SubscribeURL fetches and openssl
    event = await run_in_threadpool(
        dispatcher.dispatch, ON_TRANSPORT_WEBHOOK, TransportWebhookEvent(body, request.headers)
    )
    if event.response is None:
        return CallbackSubscriber.create_response(
            translator.trans("sns.callback.transport.unsupported"),
            False,
            status.HTTP_404_NOT_FOUND,
        )

    await run_in_threadpool(db.commit)
    return event.response
