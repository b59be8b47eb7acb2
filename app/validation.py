"""Marketing form input validation."""
import re
from dataclasses import dataclass
from typing import Mapping

from app.errors import ValidationError

NAME_MODE_SPLIT = "split"
NAME_MODE_FULL = "full"
NAME_MODES = (NAME_MODE_SPLIT, NAME_MODE_FULL)

CONSENT_FIELD = "confirm-policies"
CONSENT_VALUE = "on"
CAPTCHA_FIELD = "cf-turnstile-response"

EMAIL_RE = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*"
    r"\.[A-Za-z]{2,}$"
)


@dataclass(frozen=True)
class LeadForm:
    """A validated marketing form. Exactly one of the name shapes is filled in."""

    email: str
    captcha_token: str
    firstname: str | None = None
    lastname: str | None = None
    name: str | None = None
    phone: str | None = None


def _field(form: Mapping[str, str], key: str) -> str:
    return (form.get(key) or "").strip()


def is_valid_email(email: str) -> bool:
    return bool(email) and len(email) <= 254 and bool(EMAIL_RE.match(email))


def validate_submission(form: Mapping[str, str], name_mode: str = NAME_MODE_SPLIT) -> LeadForm:
    """
    Check the raw form fields and return a LeadForm.
    Raises ValidationError for the first invalid field; nothing is accepted partially.
    """
    firstname = lastname = name = None
    if name_mode == NAME_MODE_FULL:
        name = _field(form, "name")
        if not name:
            raise ValidationError("Name is required", field="name")
    else:
        firstname = _field(form, "firstname")
        if not firstname:
            raise ValidationError("First name is required", field="firstname")
        lastname = _field(form, "lastname")
        if not lastname:
            raise ValidationError("Last name is required", field="lastname")

    email = _field(form, "email")
    if not is_valid_email(email):
        raise ValidationError("Invalid email address", field="email")

    # Checkbox value is compared as sent, not trimmed
    if form.get(CONSENT_FIELD) != CONSENT_VALUE:
        raise ValidationError(
            "You must consent to providing your information", field=CONSENT_FIELD
        )

    token = _field(form, CAPTCHA_FIELD)
    if not token:
        raise ValidationError("CAPTCHA verification is required", field=CAPTCHA_FIELD)

    return LeadForm(
        email=email,
        captcha_token=token,
        firstname=firstname,
        lastname=lastname,
        name=name,
        phone=_field(form, "phone") or None,
    )
