"""North American phone number normalization."""
import re

PHONE_MODE_NORMALIZE = "normalize"
PHONE_MODE_RAW = "raw"
PHONE_MODES = (PHONE_MODE_NORMALIZE, PHONE_MODE_RAW)

_NON_DIGITS = re.compile(r"\D")


def format_phone_e164(phone: str | None) -> str | None:
    """
    Return phone as +1XXXXXXXXXX, or None if it is empty or not a valid
    North American length. Handles (123) 456-7890, 123-456-7890, 1234567890,
    1 123 456 7890 and the like.
    """
    if not phone:
        return None
    digits = _NON_DIGITS.sub("", phone)
    if len(digits) == 10:
        return f"+1{digits}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    # Wrong length: treated as no phone, the submission still goes through
    return None


def resolve_phone(phone: str | None, mode: str = PHONE_MODE_NORMALIZE) -> str | None:
    """Apply the configured phone mode: normalize to E.164 or keep the raw string."""
    if mode == PHONE_MODE_RAW:
        return (phone or "").strip() or None
    return format_phone_e164(phone)
