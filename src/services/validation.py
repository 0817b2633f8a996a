"""
Contact form validation shared by the browser form and the relay.

Both sides enforce the same rule: a submission is relayed only when the
four required fields are non-blank, the email looks like local@domain.tld
and the honeypot is empty.
"""

import re
from typing import Any, Dict, Mapping

from domain.models import HONEYPOT_FIELD

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

# Field name -> message shown next to the field when it is blank
REQUIRED_FIELD_MESSAGES = {
    'from_name': 'Name is required.',
    'reply_to': 'Email is required.',
    'subject': 'Subject is required.',
    'message': 'Message cannot be empty.',
}

INVALID_EMAIL_MESSAGE = 'Invalid email format.'


def _text(fields: Mapping[str, Any], name: str) -> str:
    value = fields.get(name)
    return value if isinstance(value, str) else ''


def is_valid_email(value: str) -> bool:
    """
    Check an address against the basic local@domain.tld shape.

    Example:
        >>> is_valid_email("a@b.com")
        True
        >>> is_valid_email("a@b")
        False
    """
    return bool(isinstance(value, str) and EMAIL_PATTERN.match(value))


def is_honeypot_filled(fields: Mapping[str, Any]) -> bool:
    """True when the hidden bot field carries any value at all."""
    return bool(_text(fields, HONEYPOT_FIELD))


def validate(fields: Mapping[str, Any]) -> Dict[str, str]:
    """
    Validate contact form fields.

    Args:
        fields: Mapping of form field name to value

    Returns:
        Dict of field name -> error message; empty when the form is valid

    Example:
        >>> validate({'from_name': '', 'reply_to': 'x', 'subject': 'S', 'message': 'M'})
        {'from_name': 'Name is required.', 'reply_to': 'Invalid email format.'}
    """
    errors = {}
    for name, required_message in REQUIRED_FIELD_MESSAGES.items():
        value = _text(fields, name)
        if not value.strip():
            errors[name] = required_message
        elif name == 'reply_to' and not is_valid_email(value):
            errors[name] = INVALID_EMAIL_MESSAGE
    return errors
