"""
Contact form relay - core business logic.

This module handles one relay invocation end to end:
1. Check the HTTP method and decode the JSON body
2. Validate the submission (required fields, email format, honeypot)
3. Load EmailJS configuration
4. Call EmailJS with bounded exponential backoff
5. Return a sanitized RelayResult

All errors are caught and returned as RelayResult with success=False.
No exceptions propagate out of the public methods, and no upstream
detail reaches the caller.
"""

import base64
import binascii
import json
import logging
import time
from typing import Any, Callable, Dict, Optional

from .models import FailureKind, RelayResult, Submission
from integrations import emailjs
from integrations.emailjs import (
    ServerConfigurationError,
    UpstreamRejection,
    UpstreamTransientFailure,
)
from services import config as config_service
from services import validation
from services.config import RelayConfig
from services.retry import backoff_delay, is_retryable_status

logger = logging.getLogger(__name__)

METHOD_NOT_ALLOWED = "Method Not Allowed. Use POST."
INVALID_FORMAT = "Invalid request format."
MISSING_FIELDS = "Missing required fields."
CONFIGURATION_ERROR = "Server configuration error."
PROVIDER_REJECTED = "Email service rejected the request. Check configuration and try again."
SERVICE_UNAVAILABLE = "Email service temporarily unavailable. Please try again later."
INTERNAL_ERROR = "Internal server error. Please try again later."


class InvalidRequestError(Exception):
    """Raised when the request body cannot be decoded as a JSON object."""
    pass


class RelayProcessor:
    """
    Relays contact form submissions to EmailJS.

    Stateless between invocations: configuration is loaded per call and
    the retry counter lives on the stack of handle().
    """

    def __init__(self, sleep: Optional[Callable[[float], None]] = None):
        """
        Initialize relay processor.

        Args:
            sleep: Function used to wait between attempts (default: time.sleep)
        """
        self._sleep = sleep

    def handle(self, event: Dict[str, Any]) -> RelayResult:
        """
        Process a single relay request.

        Args:
            event: API Gateway / Lambda proxy event

        Returns:
            RelayResult with success=True or success=False (errors logged)
        """
        try:
            method = self._http_method(event)
            if method != 'POST':
                logger.warning(f"Rejected {method or 'UNKNOWN'} request")
                return RelayResult.validation_failure(METHOD_NOT_ALLOWED, status_code=405)

            try:
                body = self._parse_body(event)
            except InvalidRequestError as e:
                logger.error(f"Invalid JSON payload: {e}")
                return RelayResult.validation_failure(INVALID_FORMAT)

            submission = Submission.from_dict(body)

            if submission.is_bot:
                logger.info("Honeypot filled, discarding submission without relaying")
                return RelayResult.succeeded()

            failure = self._validate(submission)
            if failure is not None:
                return failure

            try:
                relay_config = config_service.load_relay_config()
            except ServerConfigurationError as e:
                logger.error(f"Relay not configured: {e}")
                return RelayResult.service_failure(
                    FailureKind.CONFIGURATION_ERROR, CONFIGURATION_ERROR, status_code=500
                )

            return self._relay(submission, relay_config)

        except Exception as e:
            logger.error(f"Unexpected server error in relay: {e}", exc_info=True)
            return RelayResult.service_failure(
                FailureKind.INTERNAL_ERROR, INTERNAL_ERROR, status_code=500
            )

    def _http_method(self, event: Dict[str, Any]) -> str:
        """Read the method from REST (v1) or HTTP API (v2) event shapes."""
        method = event.get('httpMethod')
        if not method:
            http = (event.get('requestContext') or {}).get('http') or {}
            method = http.get('method') or ''
        return method.upper()

    def _parse_body(self, event: Dict[str, Any]) -> Dict[str, Any]:
        """
        Decode the request body into a dict.

        Raises:
            InvalidRequestError: If the body is missing, not JSON, or not an object
        """
        raw = event.get('body')
        if raw is None:
            raise InvalidRequestError("Request body is empty")

        if event.get('isBase64Encoded'):
            try:
                raw = base64.b64decode(raw).decode('utf-8')
            except (binascii.Error, UnicodeDecodeError) as e:
                raise InvalidRequestError(f"Body is not valid base64 UTF-8: {e}")

        try:
            body = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise InvalidRequestError(f"Body is not valid JSON: {e}")

        if not isinstance(body, dict):
            raise InvalidRequestError(f"Body must be a JSON object, got {type(body).__name__}")

        return body

    def _validate(self, submission: Submission) -> Optional[RelayResult]:
        """Return a 400 result for invalid submissions, None when valid."""
        errors = validation.validate(submission.to_fields())
        if not errors:
            return None

        present = {name: bool(value.strip()) for name, value in submission.to_template_params().items()}
        if not all(present.values()):
            logger.warning(f"Missing required fields: {present}")
            return RelayResult.validation_failure(MISSING_FIELDS)

        logger.warning(f"Rejected submission with invalid fields: {sorted(errors)}")
        return RelayResult.validation_failure(errors.get('reply_to', INVALID_FORMAT))

    def _relay(self, submission: Submission, relay_config: RelayConfig) -> RelayResult:
        """
        Send to EmailJS, retrying transient failures with exponential backoff.

        Args:
            submission: Validated submission
            relay_config: Loaded RelayConfig

        Returns:
            RelayResult: success, provider rejection, or transient unavailability
        """
        payload = emailjs.build_payload(relay_config, submission.to_template_params())

        logger.info(
            f"Sending email via EmailJS: endpoint={emailjs.EMAILJS_SEND_URL}, "
            f"key_type={relay_config.key_type}, "
            f"from_name={submission.from_name}, reply_to={submission.reply_to}, "
            f"subject={submission.subject}"
        )

        max_attempts = relay_config.max_attempts
        for attempt in range(1, max_attempts + 1):
            try:
                self._attempt(payload, relay_config)
                logger.info(f"Email sent successfully (attempt {attempt}).")
                return RelayResult.succeeded(attempts=attempt)

            except UpstreamRejection as e:
                logger.error(
                    f"EmailJS rejected request (attempt {attempt}): "
                    f"status={e.status_code}, response={e.detail}"
                )
                return RelayResult.service_failure(
                    FailureKind.REJECTED_BY_PROVIDER, PROVIDER_REJECTED,
                    status_code=502, attempts=attempt
                )

            except UpstreamTransientFailure as e:
                logger.error(f"EmailJS transient failure (attempt {attempt}/{max_attempts}): {e}")
                if attempt < max_attempts:
                    delay = backoff_delay(relay_config.base_delay, attempt)
                    logger.info(f"Retrying in {delay:.2f}s...")
                    self._wait(delay)

        logger.error(f"Email failed after {max_attempts} attempt(s)")
        return RelayResult.service_failure(
            FailureKind.TRANSIENT_UNAVAILABLE, SERVICE_UNAVAILABLE,
            status_code=502, attempts=max_attempts
        )

    def _attempt(self, payload: Dict[str, Any], relay_config: RelayConfig) -> None:
        """
        Make one upstream call and classify its outcome.

        Raises:
            UpstreamRejection: On 4xx, or a 2xx without "OK" in strict body mode
            UpstreamTransientFailure: On 5xx or network faults
        """
        response = emailjs.send_email(payload, timeout=relay_config.timeout)

        if response.ok:
            if relay_config.require_ok_body and response.text.strip() != 'OK':
                raise UpstreamRejection(response.status_code, response.text)
            return

        if is_retryable_status(response.status_code):
            raise UpstreamTransientFailure(
                f"EmailJS server error: status={response.status_code}, response={response.text}",
                status_code=response.status_code
            )

        raise UpstreamRejection(response.status_code, response.text)

    def _wait(self, delay: float) -> None:
        (self._sleep or time.sleep)(delay)
