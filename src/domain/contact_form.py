"""
Client-side contact form submission handler.

Models the browser form: it validates input locally, drops honeypot
submissions silently, POSTs to the relay with bounded retries and keeps
the status message shown to the visitor.

State machine:
    IDLE -> VALIDATING -> INVALID (errors shown, back to editing)
                       -> SENDING -> [RETRYING]* -> SUCCESS | FAILURE
"""

import logging
import os
import threading
import time
from typing import Callable, Dict, Optional

import requests

from .models import HONEYPOT_FIELD, REQUIRED_FIELDS, FormStatus
from integrations import relay_client
from integrations.relay_client import RelayUnavailableError
from services import validation
from services.retry import DEFAULT_BASE_DELAY_SECONDS, DEFAULT_MAX_ATTEMPTS, backoff_delay

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Message sent successfully! I'll get back to you soon, thank you."
INVALID_MESSAGE = "Please correct the highlighted fields."
FAILURE_MESSAGE = "Failed to send message. Try again or email directly at {fallback_email}."


class ClientValidationError(Exception):
    """Raised by ensure_valid() when local validation fails."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__(f"Invalid fields: {', '.join(sorted(errors))}")
        self.errors = errors


class ContactForm:
    """
    A single contact form instance.

    Only one submission runs at a time; a submit() call made while
    another is in flight is refused without sending anything.
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        fallback_email: Optional[str] = None,
        session: Optional[requests.Session] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY_SECONDS,
        timeout: float = 10.0,
        sleep: Optional[Callable[[float], None]] = None
    ):
        """
        Initialize the form.

        Args:
            endpoint: Relay URL (default: CONTACT_RELAY_ENDPOINT)
            fallback_email: Direct address offered when sending fails
                (default: CONTACT_FALLBACK_EMAIL)
            session: Optional requests.Session shared across submissions
            max_attempts: POSTs per submission, including the first
            base_delay: Backoff after the first failed attempt, in seconds
            timeout: Per-request timeout, in seconds
            sleep: Wait function between attempts (default: time.sleep)

        Raises:
            ValueError: If no relay URL or fallback address is given or configured
        """
        self.endpoint = endpoint or os.environ.get('CONTACT_RELAY_ENDPOINT', '').strip()
        if not self.endpoint.startswith(('http://', 'https://')):
            raise ValueError(
                f"Relay endpoint must be an absolute http(s) URL, got: '{self.endpoint}'. "
                f"Pass endpoint or set CONTACT_RELAY_ENDPOINT."
            )
        self.fallback_email = fallback_email or os.environ.get('CONTACT_FALLBACK_EMAIL', '').strip()
        if not self.fallback_email:
            raise ValueError("Pass fallback_email or set CONTACT_FALLBACK_EMAIL.")
        self.session = session
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.timeout = timeout
        self._sleep = sleep

        self.fields: Dict[str, str] = self._blank_fields()
        self.errors: Dict[str, str] = {}
        self.status = FormStatus.IDLE
        self.status_message = ''
        self.attempts = 0
        self._lock = threading.Lock()

    @staticmethod
    def _blank_fields() -> Dict[str, str]:
        fields = {name: '' for name in REQUIRED_FIELDS}
        fields[HONEYPOT_FIELD] = ''
        return fields

    @property
    def busy(self) -> bool:
        """True while a submission (including its retries) is in flight."""
        return self._lock.locked()

    @property
    def submit_enabled(self) -> bool:
        return not self.busy

    def validate(self, fields: Dict[str, str]) -> Dict[str, str]:
        """Field name -> error message for every invalid field."""
        return validation.validate(fields)

    def ensure_valid(self, fields: Dict[str, str]) -> None:
        """
        Raises:
            ClientValidationError: If any field fails validation
        """
        errors = self.validate(fields)
        if errors:
            raise ClientValidationError(errors)

    def update_field(self, name: str, value: str) -> None:
        """Store an edit; clears that field's error and any status message."""
        self.fields[name] = value
        self.errors.pop(name, None)
        if self.status_message:
            self.status_message = ''
            self.status = FormStatus.IDLE

    def reset(self) -> None:
        """Clear all inputs and errors."""
        self.fields = self._blank_fields()
        self.errors = {}

    def submit(self, fields: Optional[Dict[str, str]] = None) -> FormStatus:
        """
        Submit the form.

        Args:
            fields: Values to submit; defaults to the values entered so far

        Returns:
            FormStatus: SUCCESS, FAILURE or INVALID; the current status when
            a submission is already in flight
        """
        if not self._lock.acquire(blocking=False):
            logger.warning("Submission already in progress, ignoring submit")
            return self.status

        try:
            if fields is not None:
                self.fields.update(fields)
            return self._submit(dict(self.fields))
        finally:
            self._lock.release()

    def _submit(self, data: Dict[str, str]) -> FormStatus:
        self.attempts = 0

        if validation.is_honeypot_filled(data):
            logger.info("Honeypot filled, reporting success without sending")
            self._succeed()
            return self.status

        self.status = FormStatus.VALIDATING
        try:
            self.ensure_valid(data)
        except ClientValidationError as e:
            self.errors = e.errors
            self.status = FormStatus.INVALID
            self.status_message = INVALID_MESSAGE
            return self.status

        self.errors = {}
        self.status_message = ''
        self.status = FormStatus.SENDING

        payload = {name: data.get(name, '') for name in REQUIRED_FIELDS}
        if self._send_with_retry(payload):
            self._succeed()
        else:
            self.status = FormStatus.FAILURE
            self.status_message = FAILURE_MESSAGE.format(fallback_email=self.fallback_email)
        return self.status

    def _send_with_retry(self, payload: Dict[str, str]) -> bool:
        """POST to the relay, retrying only transient failures."""
        for attempt in range(1, self.max_attempts + 1):
            self.attempts = attempt
            try:
                reply = relay_client.post_submission(
                    self.endpoint, payload, session=self.session, timeout=self.timeout
                )
            except RelayUnavailableError as e:
                logger.error(f"Email send error (attempt {attempt}): {e}")
                transient = True
            else:
                if reply.ok:
                    return True
                logger.error(
                    f"Email send error (attempt {attempt}): "
                    f"status={reply.status_code}, error={reply.message}"
                )
                transient = reply.is_transient

            if not transient or attempt == self.max_attempts:
                return False

            self.status = FormStatus.RETRYING
            (self._sleep or time.sleep)(backoff_delay(self.base_delay, attempt))

        return False

    def _succeed(self) -> None:
        self.status = FormStatus.SUCCESS
        self.status_message = SUCCESS_MESSAGE
        self.reset()
