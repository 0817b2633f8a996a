"""
Data models for the contact form relay domain.

These type-safe data structures define clear contracts between the
client-side form, the relay function and the upstream email API.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

REQUIRED_FIELDS = ('from_name', 'reply_to', 'subject', 'message')
HONEYPOT_FIELD = 'bot_field'

JSON_HEADERS = {
    'Content-Type': 'application/json',
    'Access-Control-Allow-Origin': '*'
}


class FailureKind(str, Enum):
    """Reason a relay request could not be delivered upstream."""
    CONFIGURATION_ERROR = 'configuration-error'
    REJECTED_BY_PROVIDER = 'rejected-by-provider'
    TRANSIENT_UNAVAILABLE = 'transient-unavailable'
    INTERNAL_ERROR = 'internal-error'


class FormStatus(str, Enum):
    """States of the client-side contact form."""
    IDLE = 'idle'
    VALIDATING = 'validating'
    INVALID = 'invalid'
    SENDING = 'sending'
    RETRYING = 'retrying'
    SUCCESS = 'success'
    FAILURE = 'failure'


def _as_text(value: Any) -> str:
    """Coerce a raw form value to a string; anything non-string is empty."""
    return value if isinstance(value, str) else ''


@dataclass
class Submission:
    """
    One contact form submission.

    Attributes:
        from_name: Sender name
        reply_to: Sender email address
        subject: Subject line
        message: Message body
        bot_field: Hidden honeypot value (must stay empty for humans)
    """
    from_name: str
    reply_to: str
    subject: str
    message: str
    bot_field: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Submission':
        """Build a Submission from a decoded JSON body or form mapping."""
        return cls(
            from_name=_as_text(data.get('from_name')),
            reply_to=_as_text(data.get('reply_to')),
            subject=_as_text(data.get('subject')),
            message=_as_text(data.get('message')),
            bot_field=_as_text(data.get(HONEYPOT_FIELD))
        )

    @property
    def is_bot(self) -> bool:
        """True when the honeypot field was filled in."""
        return bool(self.bot_field)

    def to_fields(self) -> Dict[str, str]:
        """All fields, including the honeypot, keyed by form field name."""
        fields = self.to_template_params()
        fields[HONEYPOT_FIELD] = self.bot_field
        return fields

    def to_template_params(self) -> Dict[str, str]:
        """
        Convert to the template parameters sent upstream.

        Returns:
            Dict with from_name, reply_to, subject and message (never the honeypot)
        """
        return {
            'from_name': self.from_name,
            'reply_to': self.reply_to,
            'subject': self.subject,
            'message': self.message,
        }


@dataclass
class RelayResult:
    """
    Result of a single relay invocation.

    This explicit result type keeps upstream errors out of the response:
    only the fixed caller-facing message is ever rendered.

    Attributes:
        success: Whether the submission was accepted
        status_code: HTTP status returned to the caller
        message: Caller-facing message (success text or generic error)
        failure_kind: Service failure category (None for success/validation)
        reason: Validation failure reason (None otherwise)
        attempts: Number of upstream calls made
    """
    success: bool
    status_code: int
    message: str
    failure_kind: Optional[FailureKind] = None
    reason: Optional[str] = None
    attempts: int = 0

    @classmethod
    def succeeded(cls, attempts: int = 0,
                  message: str = 'Message sent successfully.') -> 'RelayResult':
        return cls(success=True, status_code=200, message=message, attempts=attempts)

    @classmethod
    def validation_failure(cls, reason: str, status_code: int = 400) -> 'RelayResult':
        return cls(success=False, status_code=status_code, message=reason, reason=reason)

    @classmethod
    def service_failure(cls, kind: FailureKind, message: str,
                        status_code: int, attempts: int = 0) -> 'RelayResult':
        return cls(
            success=False,
            status_code=status_code,
            message=message,
            failure_kind=kind,
            attempts=attempts
        )

    @property
    def is_validation_failure(self) -> bool:
        return not self.success and self.reason is not None

    @property
    def is_service_failure(self) -> bool:
        return not self.success and self.failure_kind is not None

    def to_response(self) -> Dict[str, Any]:
        """Render as a Lambda proxy integration response."""
        if self.success:
            body = {'success': True, 'message': self.message}
        else:
            body = {'error': self.message}

        headers = dict(JSON_HEADERS)
        if self.status_code == 405:
            headers['Allow'] = 'POST'

        return {
            'statusCode': self.status_code,
            'headers': headers,
            'body': json.dumps(body)
        }

    def __repr__(self) -> str:
        """Human-readable representation for logging."""
        if self.success:
            return f"RelayResult(success=True, attempts={self.attempts})"
        if self.failure_kind is not None:
            return (
                f"RelayResult(success=False, status={self.status_code}, "
                f"kind={self.failure_kind.value}, attempts={self.attempts})"
            )
        return f"RelayResult(success=False, status={self.status_code}, reason={self.reason})"


@dataclass
class RelayReply:
    """
    Reply from the relay endpoint as seen by the browser form.

    Attributes:
        status_code: HTTP status of the relay response
        success: The relay's `success` flag (False when absent)
        message: Success message or error text from the relay
    """
    status_code: int
    success: bool
    message: str = ''

    @property
    def is_transient(self) -> bool:
        """5xx replies may succeed on retry."""
        return self.status_code >= 500

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300 and self.success
