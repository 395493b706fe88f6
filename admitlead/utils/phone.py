"""
Phone number normalization for Korean numbers.

Leads are matched across submissions by exact string equality on the
normalized form, so normalization must be deterministic and idempotent:
    01012345678     -> 010-1234-5678
    010 1234 5678   -> 010-1234-5678
    0212345678      -> 021-234-5678
Anything that is not 10 or 11 digits is returned untouched.
"""
import re
from typing import Optional

_NON_DIGITS = re.compile(r"\D")


def digits_only(phone: Optional[str]) -> str:
    """Strip every non-digit character (the format Solapi expects)."""
    if not phone:
        return ""
    return _NON_DIGITS.sub("", phone)


def normalize_phone(phone: Optional[str]) -> str:
    """Canonical dashed form of a phone number, or the input unchanged when it can't be formatted."""
    if not phone:
        return ""

    digits = digits_only(phone)
    if len(digits) == 11:
        return f"{digits[:3]}-{digits[3:7]}-{digits[7:]}"
    if len(digits) == 10:
        return f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"
    return phone


def mask_phone(phone: Optional[str]) -> str:
    """Mask phone number for logging - show first 6 characters only."""
    if not phone:
        return "unknown"
    if len(phone) > 6:
        return phone[:6] + "***"
    return phone
