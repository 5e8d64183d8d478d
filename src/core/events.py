"""Minimal event bus used to let mailer transports claim webhook requests."""
from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Mapping

from fastapi import Response

ON_TRANSPORT_WEBHOOK = "mailer.on_transport_webhook"


class TransportWebhookEvent:
    """Raw webhook request handed to transport subscribers."""

    def __init__(self, request_body: bytes, headers: Mapping[str, str] | None = None) -> None:
        self.request_body = request_body
        self.headers = dict(headers or {})
        self.response: Response | None = None

    def get_content(self) -> str:
        return self.request_body.decode("utf-8")

    def set_response(self, response: Response) -> None:
        self.response = response

    def is_handled(self) -> bool:
        return self.response is not None


class EventDispatcher:
    """Calls listeners by descending priority until one of them sets a response."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[tuple[int, Callable[[Any], None]]]] = defaultdict(list)

    def add_listener(self, event_name: str, listener: Callable[[Any], None], priority: int = 0) -> None:
        self._listeners[event_name].append((priority, listener))
        # sort is stable, so equal priorities keep registration order
        self._listeners[event_name].sort(key=lambda item: -item[0])

    def add_subscriber(self, subscriber: Any) -> None:
        for event_name, (method_name, priority) in subscriber.get_subscribed_events().items():
            self.add_listener(event_name, getattr(subscriber, method_name), priority)

    def dispatch(self, event_name: str, event: TransportWebhookEvent) -> TransportWebhookEvent:
        for _, listener in self._listeners.get(event_name, []):
            listener(event)
            if event.is_handled():
                break
        return event
