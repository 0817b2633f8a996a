"""
Tests for contact form validation service.
"""

import pytest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from services import validation


class TestValidate:
    """Test required-field and email validation."""

    def test_valid_fields(self, valid_fields):
        """Test that a complete submission has no errors."""
        assert validation.validate(valid_fields) == {}

    @pytest.mark.parametrize("field", ['from_name', 'reply_to', 'subject', 'message'])
    @pytest.mark.parametrize("blank", ['', '   ', '\n\t'])
    def test_blank_required_field(self, valid_fields, field, blank):
        """Test that each required field rejects empty and whitespace values."""
        valid_fields[field] = blank

        errors = validation.validate(valid_fields)

        assert list(errors) == [field]

    def test_missing_keys(self):
        """Test that absent keys are reported as required."""
        errors = validation.validate({})

        assert errors == {
            'from_name': 'Name is required.',
            'reply_to': 'Email is required.',
            'subject': 'Subject is required.',
            'message': 'Message cannot be empty.',
        }

    @pytest.mark.parametrize("email", [
        'plainaddress',
        'a@b',
        '@b.com',
        'a@.com.',
        'a b@c.com',
        'a@b c.com',
        'a@@b.com',
    ])
    def test_invalid_email(self, valid_fields, email):
        """Test that malformed addresses flag the email field."""
        valid_fields['reply_to'] = email

        errors = validation.validate(valid_fields)

        assert errors == {'reply_to': 'Invalid email format.'}

    def test_honeypot_does_not_affect_validation(self, valid_fields):
        """Test that validation only looks at the four visible fields."""
        valid_fields['bot_field'] = 'filled'

        assert validation.validate(valid_fields) == {}


class TestIsValidEmail:
    """Test the basic email shape check."""

    @pytest.mark.parametrize("email", ['a@b.com', 'first.last@sub.example.co.uk', 'x+tag@y.io'])
    def test_valid(self, email):
        assert validation.is_valid_email(email) is True

    def test_non_string(self):
        assert validation.is_valid_email(None) is False


class TestIsHoneypotFilled:
    """Test honeypot detection."""

    @pytest.mark.parametrize("value", ['spam', ' ', '\t'])
    def test_filled(self, value):
        assert validation.is_honeypot_filled({'bot_field': value}) is True

    def test_empty_or_absent(self):
        assert validation.is_honeypot_filled({'bot_field': ''}) is False
        assert validation.is_honeypot_filled({}) is False


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
