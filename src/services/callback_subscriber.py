"""Amazon SNS/SES callback handling for the SES API mailer transport."""
from __future__ import annotations

import json
import logging
import re
from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from src.core.config import Settings, settings as default_settings
from src.core.dsn import SES_API_SCHEME, Dsn, InvalidDsnError
from src.core.events import ON_TRANSPORT_WEBHOOK, TransportWebhookEvent
from src.core.translator import Translator
from src.db.models import DncReason
from src.services.contacts import ContactFinder
from src.services.dnc import DoNotContactModel
from src.services.event_log import record_email_event
from src.utils.logger import logger as default_logger
from src.utils.sns import fetch_subscribe_url, is_allowed_subscribe_url, verify_sns_signature

PROCESSED = "PROCESSED"

_ADDRESS_IN_BRACKETS = re.compile(r"<([^<>]*)>[^<]*$", re.S)


def _section(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, dict) else {}


def _items(section: dict[str, Any], key: str) -> list[Any]:
    value = section.get(key)
    return value if isinstance(value, list) else []


class CallbackSubscriber:
    """Turns SNS deliveries of SES feedback into do-not-contact entries."""

    def __init__(
        self,
        db: Session,
        translator: Translator,
        finder: ContactFinder,
        dnc_model: DoNotContactModel,
        app_settings: Settings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.db = db
        self.translator = translator
        self.finder = finder
        self.dnc_model = dnc_model
        self.settings = app_settings or default_settings
        self.logger = logger or default_logger
        self._signature_verified: bool | None = None
        self._topic_arn: str | None = None

    @staticmethod
    def get_subscribed_events() -> dict[str, tuple[str, int]]:
        return {ON_TRANSPORT_WEBHOOK: ("process_callback_request", 0)}

    def process_callback_request(self, event: TransportWebhookEvent) -> None:
        try:
            dsn = Dsn.from_string(self.settings.mailer_dsn)
        except InvalidDsnError as exc:
            self.logger.error("Cannot parse mailer DSN: %s", exc)
            return

        if dsn.scheme != SES_API_SCHEME:
            return

        self.logger.debug("start process_callback_request - Amazon SNS Webhook")

        try:
            payload = json.loads(event.get_content())
        except (UnicodeDecodeError, json.JSONDecodeError):
            payload = None
        if not isinstance(payload, dict):
            self.logger.error("SNS: Invalid JSON Payload")
            event.set_response(self.create_response(self._trans("sns.callback.json.invalid"), False))
            return

        message_type = self._resolve_type(payload, ("Type", "eventType", "notificationType"))
        if message_type is None:
            event.set_response(self.create_response(self._trans("sns.callback.json.invalid_payload_type"), False))
            return

        rejection = self._check_envelope(payload)
        if rejection is not None:
            event.set_response(self.create_response(self._trans(rejection), False, status.HTTP_403_FORBIDDEN))
            return

        result = self.process_json_payload(payload, message_type)
        response = self.create_response(result["message"], not result["has_error"])

        self.logger.debug("end process_callback_request - Amazon SNS Webhook")
        event.set_response(response)

    @staticmethod
    def create_response(message: str, success: bool, status_code: int | None = None) -> JSONResponse:
        if status_code is None:
            status_code = status.HTTP_200_OK if success else status.HTTP_400_BAD_REQUEST
        return JSONResponse(content={"message": message, "success": success}, status_code=status_code)

    def process_json_payload(self, payload: dict[str, Any], message_type: Any) -> dict[str, Any]:
        type_found = True
        has_error = False
        message = PROCESSED

        if message_type == "SubscriptionConfirmation":
            reason = self._confirm_subscription(payload.get("SubscribeURL"))
            if reason is not None:
                self.logger.error("Callback to SubscribeURL from Amazon SNS failed reason=%s", reason)
                has_error = True
                message = self._trans("sns.callback.subscribe.error")

        elif message_type == "Notification":
            inner = self._decode_notification(payload.get("Message"))
            inner_type = self._resolve_type(inner, ("notificationType", "eventType")) if inner else None
            if inner_type is None:
                self.logger.error("AmazonCallback: Invalid Notification JSON Payload")
                has_error = True
                message = self._trans("sns.callback.notification.json_invalid")
            else:
                return self.process_json_payload(inner, inner_type)

        elif message_type == "Delivery":
            self._record(message_type, payload)

        elif message_type == "Complaint":
            email_id = self.get_email_header(payload)
            complaint = _section(payload, "complaint")
            feedback_type = str(complaint.get("complaintFeedbackType") or "unknown")
            for recipient in _items(complaint, "complainedRecipients"):
                address = self._recipient_address(recipient)
                if address is None:
                    continue
                self.add_failure_by_address(
                    self.cleanup_email_address(address), feedback_type, DncReason.UNSUBSCRIBED, email_id
                )
                self.logger.debug("Marked email '%s' as complaint: %s", address, feedback_type)
            self._record(message_type, payload, email_id)

        elif message_type == "Bounce":
            email_id = self.get_email_header(payload)
            bounce = _section(payload, "bounce")
            if bounce.get("bounceType") == "Permanent":
                sub_type = bounce.get("bounceSubType") or "unknown"
                for recipient in _items(bounce, "bouncedRecipients"):
                    address = self._recipient_address(recipient)
                    if address is None:
                        continue
                    diagnostic = recipient.get("diagnosticCode") or "unknown"
                    comments = f"HARD: AWS: {sub_type}: {diagnostic}"
                    self.add_failure_by_address(
                        self.cleanup_email_address(address), comments, DncReason.BOUNCED, email_id
                    )
                    self.logger.debug("Marked email '%s' as hard bounced: %s", address, comments)
            else:
                self.logger.debug("Ignored non-permanent (soft) bounce from AWS SES.")
            self._record(message_type, payload, email_id)

        else:
            type_found = False
            self.logger.warning(
                "SES webhook payload, unknown type. type=%s payload=%s", message_type, json.dumps(payload)
            )

        if not type_found:
            message = self._trans("sns.callback.unknown_type")

        return {"has_error": has_error, "message": message}

    @staticmethod
    def cleanup_email_address(email: str) -> str:
        """Reduce ``"Name <addr@example.com>"`` to ``addr@example.com``."""

        match = _ADDRESS_IN_BRACKETS.search(email)
        if match:
            return match.group(1).strip()
        return email.strip()

    @staticmethod
    def get_email_header(payload: dict[str, Any]) -> str | None:
        for header in _items(_section(payload, "mail"), "headers"):
            if isinstance(header, dict) and str(header.get("name", "")).upper() == "X-EMAIL-ID":
                value = header.get("value")
                return value if isinstance(value, str) else None
        return None

    def add_failure_by_address(
        self,
        address: str,
        comments: str,
        dnc_reason: DncReason = DncReason.BOUNCED,
        channel_id: str | None = None,
    ) -> None:
        result = self.finder.find_by_address(address)
        contacts = result.get_contacts()
        if not contacts:
            self.logger.debug("No contact found for '%s', suppressing the address only", address)
            self.dnc_model.add_dnc_for_address(address, "email", dnc_reason, comments, channel_id)
            return
        for contact in contacts:
            self.dnc_model.add_dnc_for_contact(contact.id, "email", dnc_reason, comments, channel_id)

    def _confirm_subscription(self, subscribe_url: Any) -> str | None:
        """Return why confirming failed, or None on success."""

        if not subscribe_url or not isinstance(subscribe_url, str):
            return "Missing SubscribeURL"
        if self.settings.sns_validate_subscribe_url:
            allowed, reason = is_allowed_subscribe_url(subscribe_url)
            if not allowed:
                return reason
        try:
            status_code, body = fetch_subscribe_url(subscribe_url, self.settings.sns_http_timeout_seconds)
        except Exception as exc:
            return str(exc)
        if status_code != status.HTTP_200_OK:
            return f"HTTP Code {status_code}, {body}"
        self.logger.info("Callback to SubscribeURL from Amazon SNS successfully")
        return None

    def _check_envelope(self, payload: dict[str, Any]) -> str | None:
        """Return a translation key when the SNS envelope must be rejected."""

        allowed_arns = self.settings.sns_allowed_topic_arns
        if "Type" not in payload:
            # bare SES bodies carry neither a topic nor a signature
            if self.settings.sns_verify_signatures:
                self.logger.warning("Rejected unsigned payload without an SNS envelope")
                return "sns.callback.signature.invalid"
            if allowed_arns:
                self.logger.warning("Rejected payload without an SNS envelope")
                return "sns.callback.topic.not_allowed"
            return None

        self._topic_arn = payload.get("TopicArn")
        if allowed_arns and self._topic_arn not in allowed_arns:
            self.logger.warning("Rejected SNS message from topic %s", self._topic_arn)
            return "sns.callback.topic.not_allowed"

        if self.settings.sns_verify_signatures:
            ok, reason = verify_sns_signature(payload, self.settings.sns_http_timeout_seconds)
            self._signature_verified = ok
            if not ok:
                self.logger.warning("SNS signature verification failed: %s", reason)
                return "sns.callback.signature.invalid"
        return None

    @staticmethod
    def _decode_notification(raw_message: Any) -> dict[str, Any] | None:
        if not isinstance(raw_message, str):
            return None
        try:
            decoded = json.loads(raw_message)
        except json.JSONDecodeError:
            return None
        return decoded if isinstance(decoded, dict) else None

    @staticmethod
    def _resolve_type(payload: dict[str, Any], keys: tuple[str, ...]) -> Any:
        for key in keys:
            if payload.get(key) is not None:
                return payload[key]
        return None

    def _recipient_address(self, recipient: Any) -> str | None:
        address = recipient.get("emailAddress") if isinstance(recipient, dict) else None
        if not isinstance(address, str) or not address.strip():
            self.logger.warning("Skipping recipient without emailAddress: %s", recipient)
            return None
        return address

    def _record(self, event_type: str, payload: dict[str, Any], email_id: str | None = None) -> None:
        record_email_event(
            self.db,
            event_type,
            payload,
            email_id=email_id,
            signature_verified=self._signature_verified,
            topic_arn=self._topic_arn,
        )

    def _trans(self, key: str) -> str:
        return self.translator.trans(key, "validators")
