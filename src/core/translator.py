"""Message catalogs for user-facing callback responses."""
from __future__ import annotations

from functools import lru_cache

from src.core.config import settings

DEFAULT_LOCALE = "en"

CATALOGS: dict[str, dict[str, dict[str, str]]] = {
    "en": {
        "validators": {
            "sns.callback.json.invalid": "The request body is not valid JSON.",
            "sns.callback.json.invalid_payload_type": "The payload does not contain a message type.",
            "sns.callback.subscribe.error": "Confirming the Amazon SNS subscription failed.",
            "sns.callback.notification.json_invalid": "The Amazon SNS notification message is not valid JSON.",
            "sns.callback.unknown_type": "Unknown Amazon SNS/SES message type.",
            "sns.callback.signature.invalid": "The Amazon SNS message signature could not be verified.",
            "sns.callback.topic.not_allowed": "The Amazon SNS topic is not allowed.",
            "sns.callback.transport.unsupported": "No mailer transport handles this callback.",
        },
    },
    "nl": {
        "validators": {
            "sns.callback.json.invalid": "De inhoud van het verzoek is geen geldige JSON.",
            "sns.callback.json.invalid_payload_type": "De payload bevat geen berichttype.",
            "sns.callback.subscribe.error": "Het bevestigen van het Amazon SNS-abonnement is mislukt.",
            "sns.callback.notification.json_invalid": "Het Amazon SNS-notificatiebericht is geen geldige JSON.",
            "sns.callback.unknown_type": "Onbekend Amazon SNS/SES-berichttype.",
            "sns.callback.signature.invalid": "De handtekening van het Amazon SNS-bericht kon niet worden geverifieerd.",
            "sns.callback.topic.not_allowed": "Het Amazon SNS-onderwerp is niet toegestaan.",
            "sns.callback.transport.unsupported": "Geen mailer-transport verwerkt deze callback.",
        },
    },
    "de": {
        "validators": {
            "sns.callback.json.invalid": "Der Inhalt der Anfrage ist kein gültiges JSON.",
            "sns.callback.json.invalid_payload_type": "Die Nutzlast enthält keinen Nachrichtentyp.",
            "sns.callback.subscribe.error": "Die Bestätigung des Amazon SNS-Abonnements ist fehlgeschlagen.",
            "sns.callback.notification.json_invalid": "Die Amazon SNS-Benachrichtigung ist kein gültiges JSON.",
            "sns.callback.unknown_type": "Unbekannter Amazon SNS/SES-Nachrichtentyp.",
            "sns.callback.signature.invalid": "Die Signatur der Amazon SNS-Nachricht konnte nicht verifiziert werden.",
            "sns.callback.topic.not_allowed": "Das Amazon SNS-Thema ist nicht zugelassen.",
            "sns.callback.transport.unsupported": "Kein Mailer-Transport verarbeitet diesen Callback.",
        },
    },
}


class Translator:
    """Look up messages by key, falling back to English and then to the key itself."""

    def __init__(self, locale: str = DEFAULT_LOCALE) -> None:
        self.locale = locale

    def trans(self, key: str, domain: str = "validators") -> str:
        for locale in (self.locale, DEFAULT_LOCALE):
            message = CATALOGS.get(locale, {}).get(domain, {}).get(key)
            if message is not None:
                return message
        return key


@lru_cache()
def get_translator() -> Translator:
    """Translator for the configured locale."""

    return Translator(settings.locale)
