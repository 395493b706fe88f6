"""
Solapi SMS/LMS client.
https://docs.solapi.com/

Message type is chosen by byte length: more than 90 UTF-8 bytes is sent as
LMS, anything shorter as SMS. Send failures never raise; callers get a
result dict and record the outcome.
"""
import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timezone
from typing import Optional

import httpx

from admitlead.utils.phone import digits_only, mask_phone

logger = logging.getLogger(__name__)

SMS_MAX_BYTES = 90
SEND_PATH = "/messages/v4/send"


def get_byte_length(text: str) -> int:
    """UTF-8 byte length (Korean characters count 3)."""
    return len(text.encode("utf-8"))


def get_message_type(text: str) -> str:
    return "LMS" if get_byte_length(text) > SMS_MAX_BYTES else "SMS"


def _iso_now() -> str:
    """UTC timestamp in millisecond ISO format, as Solapi expects."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def build_auth_header(api_key: str, api_secret: str, date: Optional[str] = None, salt: Optional[str] = None) -> str:
    """HMAC-SHA256 authorization header: signature = HMAC(secret, date + salt)."""
    date = date or _iso_now()
    salt = salt or secrets.token_hex(32)
    signature = hmac.new(
        api_secret.encode("utf-8"),
        (date + salt).encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"HMAC-SHA256 apiKey={api_key}, date={date}, salt={salt}, signature={signature}"


def _failure(error: str) -> dict:
    return {"success": False, "message_id": None, "error": error}


async def send_message(
    to: str,
    text: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> dict:
    """
    Send an SMS/LMS through Solapi.

    Returns: {"success": bool, "message_id": str|None, "error": str|None}
    """
    from admitlead.config import get_settings
    settings = get_settings()

    if not settings.solapi_api_key or not settings.solapi_api_secret or not settings.solapi_sender_phone:
        logger.error("Solapi credentials not configured")
        return _failure("Solapi credentials are not configured")

    recipient = digits_only(to)
    message_type = get_message_type(text)
    body = {
        "message": {
            "to": recipient,
            "from": digits_only(settings.solapi_sender_phone),
            "text": text,
            "type": message_type,
        }
    }

    logger.info("Sending %s to %s", message_type, mask_phone(recipient))
    try:
        async with httpx.AsyncClient(
            base_url=settings.solapi_api_url,
            timeout=settings.solapi_timeout_seconds,
            transport=transport,
        ) as client:
            response = await client.post(
                SEND_PATH,
                headers={
                    "Authorization": build_auth_header(settings.solapi_api_key, settings.solapi_api_secret),
                    "Content-Type": "application/json",
                },
                json=body,
            )
    except httpx.HTTPError as e:
        logger.error("Solapi network error: %s", str(e))
        return _failure("Network error while contacting Solapi")

    try:
        data = response.json()
    except ValueError:
        data = {}

    if response.is_error:
        error_message = data.get("errorMessage") if isinstance(data, dict) else None
        logger.error(
            "Solapi API error %s: %s", response.status_code, error_message,
            extra={"error_code": data.get("errorCode") if isinstance(data, dict) else None},
        )
        return _failure(error_message or "Message send failed")

    message_id = data.get("messageId") if isinstance(data, dict) else None
    logger.info("Solapi message sent: %s", message_id)
    return {"success": True, "message_id": message_id, "error": None}
