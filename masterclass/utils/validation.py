"""Data validation utilities."""
from typing import Any, Mapping, Tuple


REQUIRED_FIELDS_MESSAGE = (
    "Merci de remplir tous les champs requis et d’accepter la politique d’e‑mail."
)
INVALID_SESSION_MESSAGE = "Le créneau choisi est invalide. Merci d’en sélectionner un autre."

_FALSY_CONSENT = {"", "0", "false", "off", "no", "non"}


def is_consent_given(value: Any) -> bool:
    """
    Interpret the consent checkbox value.

    Args:
        value: Raw form value (browsers send "on" for a checked box)

    Returns:
        True for any non-empty value other than an explicit negative
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() not in _FALSY_CONSENT


def clean_field(value: Any) -> str:
    """Return a trimmed string for a form value (None -> "")."""
    if value is None:
        return ""
    return str(value).strip()


def validate_registration_form(form: Mapping[str, Any]) -> Tuple[bool, str]:
    """
    Validate a submitted registration form.

    Args:
        form: Mapping with firstName, lastName, email, session, consent

    Returns:
        Tuple of (is_valid: bool, error_message: str)
        - (True, "") if valid
        - (False, REQUIRED_FIELDS_MESSAGE) if firstName, email, session
          or consent is missing

    Behavior:
        - lastName is optional
        - The session value is only checked for presence here; parsing
          happens in the registration service
    """
    for field_name in ("firstName", "email", "session"):
        if not clean_field(form.get(field_name)):
            return False, REQUIRED_FIELDS_MESSAGE

    if not is_consent_given(form.get("consent")):
        return False, REQUIRED_FIELDS_MESSAGE

    return True, ""
