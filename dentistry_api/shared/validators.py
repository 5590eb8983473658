"""Shared validation utilities"""

import re
from typing import Optional


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize a phone number for storage.

    WhatsApp numbers arrive in many formats ("+55 (11) 99999-0000",
    "5511999990000"). Formatting characters are dropped; a leading "+"
    is kept when present.

    Args:
        phone: Phone number string in various formats

    Returns:
        Normalized phone number (digits, optionally prefixed with "+")

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    phone = phone.strip()
    prefix = "+" if phone.startswith("+") else ""
    digits = re.sub(r"\D", "", phone)

    # E.164 allows at most 15 digits; local numbers have at least 8
    if not 8 <= len(digits) <= 15:
        raise ValueError("Phone number must have between 8 and 15 digits")

    return f"{prefix}{digits}"


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_name(name: Optional[str]) -> Optional[str]:
    """Strip surrounding whitespace and reject blank names"""
    if name is None:
        return name

    name = name.strip()
    if not name:
        raise ValueError("Name must not be empty")
    return name
