"""SNS helper utilities for signature verification and subscriptions."""
from __future__ import annotations

import base64
import json
import subprocess
import tempfile
from typing import Any
from urllib.error import HTTPError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

from src.utils.logger import logger

# SignatureVersion 1 signs with SHA1, version 2 with SHA256.
_SIGNATURE_DIGESTS = {"1": "-sha1", "2": "-sha256"}


def _is_sns_host(host: str) -> bool:
    return host == "sns.amazonaws.com" or (host.startswith("sns.") and host.endswith(".amazonaws.com"))


def is_allowed_cert_url(cert_url: str) -> tuple[bool, str]:
    """Validate SNS SigningCertURL host and path."""
    parsed = urlparse(cert_url)
    if parsed.scheme != "https":
        return False, "SigningCertURL must use https"
    if not parsed.hostname:
        return False, "SigningCertURL missing hostname"
    if not _is_sns_host(parsed.hostname):
        return False, "SigningCertURL hostname is not allowed"
    if not parsed.path.startswith("/SimpleNotificationService-"):
        return False, "SigningCertURL path is not allowed"
    return True, "ok"


def is_allowed_subscribe_url(subscribe_url: str) -> tuple[bool, str]:
    """Validate that a SubscribeURL points at an SNS endpoint."""
    parsed = urlparse(subscribe_url)
    if parsed.scheme != "https":
        return False, "SubscribeURL must use https"
    if not parsed.hostname:
        return False, "SubscribeURL missing hostname"
    if not _is_sns_host(parsed.hostname):
        return False, "SubscribeURL hostname is not allowed"
    return True, "ok"


def _build_string_to_sign(payload: dict[str, Any]) -> str:
    message_type = payload.get("Type")
    if message_type == "Notification":
        fields = ["Message", "MessageId", "Subject", "Timestamp", "TopicArn", "Type"]
    else:
        fields = ["Message", "MessageId", "SubscribeURL", "Timestamp", "Token", "TopicArn", "Type"]

    parts: list[str] = []
    for field in fields:
        value = payload.get(field)
        if value is None:
            continue
        parts.append(field)
        parts.append(str(value))
    return "\n".join(parts) + "\n"


def _fetch_url(url: str, timeout_seconds: int) -> bytes:
    request = Request(url, method="GET")
    with urlopen(request, timeout=timeout_seconds) as response:
        return response.read()


def _run_openssl(args: list[str], input_bytes: bytes | None, timeout_seconds: int) -> subprocess.CompletedProcess:
    return subprocess.run(
        args,
        input=input_bytes,
        capture_output=True,
        check=False,
        timeout=timeout_seconds,
    )


def verify_sns_signature(payload: dict[str, Any], timeout_seconds: int) -> tuple[bool, str]:
    """Verify SNS signature using the SigningCertURL."""
    signature_b64 = payload.get("Signature")
    cert_url = payload.get("SigningCertURL")
    digest = _SIGNATURE_DIGESTS.get(str(payload.get("SignatureVersion")))
    if digest is None:
        return False, "Unsupported SignatureVersion"
    if not signature_b64 or not cert_url:
        return False, "Missing Signature or SigningCertURL"

    allowed, reason = is_allowed_cert_url(cert_url)
    if not allowed:
        return False, reason

    try:
        cert_pem = _fetch_url(cert_url, timeout_seconds)
    except Exception as exc:  # pragma: no cover - network errors
        logger.warning("Failed to fetch SNS cert: %s", exc)
        return False, "Failed to fetch SigningCertURL"

    try:
        signature = base64.b64decode(signature_b64)
    except Exception:
        return False, "Invalid Signature encoding"

    data_to_sign = _build_string_to_sign(payload).encode("utf-8")

    try:
        with tempfile.NamedTemporaryFile() as cert_file, tempfile.NamedTemporaryFile() as pubkey_file, tempfile.NamedTemporaryFile() as data_file, tempfile.NamedTemporaryFile() as sig_file:
            cert_file.write(cert_pem)
            cert_file.flush()
            pubkey_result = _run_openssl(
                ["openssl", "x509", "-pubkey", "-noout", "-in", cert_file.name],
                input_bytes=None,
                timeout_seconds=timeout_seconds,
            )
            if pubkey_result.returncode != 0:
                return False, "Failed to extract public key"
            pubkey_file.write(pubkey_result.stdout)
            pubkey_file.flush()

            data_file.write(data_to_sign)
            data_file.flush()
            sig_file.write(signature)
            sig_file.flush()

            verify_result = _run_openssl(
                ["openssl", "dgst", digest, "-verify", pubkey_file.name, "-signature", sig_file.name, data_file.name],
                input_bytes=None,
                timeout_seconds=timeout_seconds,
            )
            if verify_result.returncode != 0:
                return False, "Signature verification failed"
    except FileNotFoundError:
        return False, "openssl is not available for signature verification"
    except Exception:
        return False, "Signature verification error"

    return True, "ok"


def fetch_subscribe_url(subscribe_url: str, timeout_seconds: int) -> tuple[int, str]:
    """GET the SubscribeURL and return the status code and body.

    HTTP error statuses are returned rather than raised. Connection failures propagate.
    """
    request = Request(subscribe_url, method="GET")
    try:
        with urlopen(request, timeout=timeout_seconds) as response:
            return response.status, response.read().decode("utf-8", errors="replace")
    except HTTPError as exc:
        return exc.code, exc.read().decode("utf-8", errors="replace")


def dumps_payload(payload: dict[str, Any], max_bytes: int = 32768) -> str:
    raw = json.dumps(payload, separators=(",", ":"), ensure_ascii=True)
    if len(raw) > max_bytes:
        return raw[:max_bytes]
    return raw
