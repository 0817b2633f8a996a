"""
HTTP client for the relay endpoint, as used by the contact form.

One call here is one POST to the relay; retrying is the form's job.
"""

import logging
from typing import Dict, Optional

import requests

from domain.models import RelayReply

logger = logging.getLogger(__name__)


class RelayUnavailableError(Exception):
    """Raised when the relay cannot be reached or answers with garbage."""
    pass


def post_submission(
    endpoint: str,
    fields: Dict[str, str],
    session: Optional[requests.Session] = None,
    timeout: float = 10.0
) -> RelayReply:
    """
    POST form fields to the relay and decode its JSON reply.

    Args:
        endpoint: Absolute URL of the relay function
        fields: from_name, reply_to, subject and message
        session: Optional requests.Session (connection reuse)
        timeout: Seconds to wait for connect and read

    Returns:
        RelayReply: status code, success flag and message/error text

    Raises:
        RelayUnavailableError: On network faults or a non-JSON 5xx reply
    """
    http = session or requests
    try:
        response = http.post(endpoint, json=fields, timeout=timeout)
    except requests.RequestException as e:
        logger.error(f"Relay request failed: {e.__class__.__name__}: {e}")
        raise RelayUnavailableError(f"Could not reach relay: {e.__class__.__name__}")

    try:
        data = response.json()
    except ValueError:
        logger.warning(f"Relay returned non-JSON body: status={response.status_code}")
        if response.status_code >= 500:
            raise RelayUnavailableError(f"Relay error: status={response.status_code}")
        data = {}

    if not isinstance(data, dict):
        data = {}

    return RelayReply(
        status_code=response.status_code,
        success=data.get('success') is True,
        message=str(data.get('message') or data.get('error') or '')
    )
