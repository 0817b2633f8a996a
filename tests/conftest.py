"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys
import pytest

# Add src and hooks to Python path before any imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../hooks'))

# Set up test environment variables before importing any modules
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-west-2')
os.environ.setdefault('ENVIRONMENT', 'test')
os.environ.setdefault('LOG_LEVEL', 'INFO')

EMAILJS_ENV = {
    'EMAILJS_SERVICE_ID': 'service_test',
    'EMAILJS_TEMPLATE_ID': 'template_test',
    'EMAILJS_PUBLIC_KEY': 'public-key-test',
    'EMAILJS_PRIVATE_KEY': 'private-key-test',
}

RELAY_TUNING_ENV = (
    'EMAILJS_REQUIRE_OK_BODY',
    'RELAY_MAX_ATTEMPTS',
    'RELAY_BASE_DELAY_SECONDS',
    'RELAY_TIMEOUT_SECONDS',
)


@pytest.fixture
def emailjs_env(monkeypatch):
    """Fully configured relay (public and private key)."""
    for name, value in EMAILJS_ENV.items():
        monkeypatch.setenv(name, value)
    for name in RELAY_TUNING_ENV:
        monkeypatch.delenv(name, raising=False)
    return dict(EMAILJS_ENV)


@pytest.fixture
def no_emailjs_env(monkeypatch):
    """Relay with no EmailJS configuration at all."""
    for name in list(EMAILJS_ENV) + list(RELAY_TUNING_ENV):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def valid_fields():
    """A submission that passes validation."""
    return {
        'from_name': 'A',
        'reply_to': 'a@b.com',
        'subject': 'S',
        'message': 'M',
    }
