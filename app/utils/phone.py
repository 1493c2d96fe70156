"""Phone number utility functions."""

import re

from app.config import get_settings


def normalize_phone(phone: str | None, country_code: str | None = None) -> str:
    """Normalize a phone number to E.164 for messaging APIs.

    Strips spaces, dashes, dots and parentheses. National numbers (leading
    trunk "0") get the default country code, Irish unless configured
    otherwise. "00" international prefixes become "+".

    Args:
        phone: Phone number in any format (e.g., "087 123 4567", "+353-87-123-4567")
        country_code: Override for the default country code, digits only

    Returns:
        Normalized phone number with country code (e.g., "+353871234567").
        Empty string if phone is None or cannot be a valid number.

    Examples:
        >>> normalize_phone("087 123 4567")
        '+353871234567'
        >>> normalize_phone("+353 (0)87 123 4567")
        '+353871234567'
        >>> normalize_phone("00353871234567")
        '+353871234567'
        >>> normalize_phone(None)
        ''
    """
    if not phone:
        return ""

    code = country_code or get_settings().default_country_code

    # "(0)" after a country code is a trunk prefix that must be dropped
    phone = phone.replace("(0)", "")
    phone = re.sub(r"[^\d+]", "", phone)

    # Remove any + that's not at the start
    if "+" in phone:
        phone = "+" + phone.replace("+", "")

    if phone.startswith("00"):
        phone = "+" + phone[2:]
    elif phone.startswith("0"):
        # National format: drop trunk prefix
        phone = f"+{code}{phone[1:]}"
    elif not phone.startswith("+"):
        if phone.startswith(code):
            phone = f"+{phone}"
        else:
            phone = f"+{code}{phone}"

    # Same trunk-zero mistake as above, but after the country code
    if phone.startswith(f"+{code}0"):
        phone = f"+{code}{phone[len(code) + 2:]}"

    digits = phone[1:]
    # E.164: at most 15 digits; anything under 8 cannot be a mobile number
    if not digits.isdigit() or not 8 <= len(digits) <= 15:
        return ""

    return phone


def is_notifiable(phone: str | None) -> bool:
    """Whether a stored phone number can receive a message."""
    return bool(normalize_phone(phone))
