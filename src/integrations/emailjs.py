"""
EmailJS Send API Integration Module

This module builds the upstream payload and performs a single call to the
EmailJS REST endpoint. Retry policy lives in the relay processor; one
call here is exactly one upstream attempt.

Usage:
    from integrations import emailjs

    payload = emailjs.build_payload(config, submission.to_template_params())
    response = emailjs.send_email(payload, timeout=10)
    print(response.status_code, response.text)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict

import requests

# Configure logging
logger = logging.getLogger(__name__)

EMAILJS_SEND_URL = "https://api.emailjs.com/api/v1.0/email/send"


# ============================================================================
# Custom Exception Classes
# ============================================================================

class ServerConfigurationError(Exception):
    """Raised when the relay's deployment configuration is missing."""
    pass


class UpstreamRejection(Exception):
    """Raised when EmailJS refuses the request (4xx); never retried."""

    def __init__(self, status_code: int, detail: str = ''):
        super().__init__(f"EmailJS rejected the request: status={status_code}")
        self.status_code = status_code
        self.detail = detail


class UpstreamTransientFailure(Exception):
    """Raised on a 5xx from EmailJS or a network fault; retried up to the bound."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


# ============================================================================
# Payload and Transport
# ============================================================================

@dataclass
class UpstreamResponse:
    """
    Raw EmailJS reply, kept server-side only.

    Attributes:
        status_code: HTTP status from EmailJS
        text: Response body text (EmailJS answers "OK" on success)
    """
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def build_payload(config, template_params: Dict[str, str]) -> Dict[str, Any]:
    """
    Build the EmailJS send payload.

    With a private key configured the request is authenticated in strict
    mode: `accessToken` carries the private key and `user_id` still carries
    the public key when one is set. Otherwise the public key alone goes in
    `user_id`.

    Args:
        config: RelayConfig with service/template IDs and keys
        template_params: from_name, reply_to, subject and message

    Returns:
        Dict ready to be JSON-encoded for EmailJS
    """
    payload = {
        'service_id': config.service_id,
        'template_id': config.template_id,
        'template_params': dict(template_params),
    }

    if config.public_key:
        payload['user_id'] = config.public_key
    if config.is_strict:
        payload['accessToken'] = config.private_key

    return payload


def send_email(payload: Dict[str, Any], timeout: float = 10.0) -> UpstreamResponse:
    """
    POST one send request to EmailJS.

    Args:
        payload: Body built by build_payload()
        timeout: Seconds to wait for connect and read

    Returns:
        UpstreamResponse: status and body text, whatever the status

    Raises:
        UpstreamTransientFailure: On connection errors and timeouts
    """
    try:
        response = requests.post(
            EMAILJS_SEND_URL,
            json=payload,
            headers={'Content-Type': 'application/json'},
            timeout=timeout
        )
    except requests.RequestException as e:
        logger.error(f"EmailJS request failed: {e.__class__.__name__}: {e}")
        raise UpstreamTransientFailure(f"Network error calling EmailJS: {e.__class__.__name__}")

    return UpstreamResponse(status_code=response.status_code, text=response.text)
