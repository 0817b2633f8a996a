"""
Relay configuration loaded from environment variables.

Configuration is read on every invocation so that a missing value fails
the request it belongs to instead of the whole module import.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional

from integrations.emailjs import ServerConfigurationError
from services.retry import DEFAULT_BASE_DELAY_SECONDS, DEFAULT_MAX_ATTEMPTS

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass
class RelayConfig:
    """
    EmailJS credentials and relay tuning.

    Attributes:
        service_id: EmailJS service identifier
        template_id: EmailJS template identifier
        public_key: Restricted key (EmailJS user_id), safe for browsers
        private_key: Elevated key (EmailJS accessToken), server-side only
        require_ok_body: Also require the upstream body to read "OK"
        max_attempts: Upstream calls per invocation
        base_delay: Backoff after the first failed attempt, in seconds
        timeout: Per-call request timeout, in seconds
    """
    service_id: str
    template_id: str
    public_key: Optional[str] = None
    private_key: Optional[str] = None
    require_ok_body: bool = False
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base_delay: float = DEFAULT_BASE_DELAY_SECONDS
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def is_strict(self) -> bool:
        """Strict mode: the elevated key is used when present."""
        return bool(self.private_key)

    @property
    def key_type(self) -> str:
        return 'PRIVATE' if self.is_strict else 'PUBLIC'


def _env(name: str) -> Optional[str]:
    value = os.environ.get(name, '').strip()
    return value or None


def _env_flag(name: str) -> bool:
    return os.environ.get(name, '').strip().lower() in ('1', 'true', 'yes', 'on')


def config_status() -> Dict[str, bool]:
    """
    Presence flags for each credential (values are never exposed).

    Returns:
        Dict of setting name -> whether it is set
    """
    return {
        'EMAILJS_SERVICE_ID': bool(_env('EMAILJS_SERVICE_ID')),
        'EMAILJS_TEMPLATE_ID': bool(_env('EMAILJS_TEMPLATE_ID')),
        'EMAILJS_PUBLIC_KEY': bool(_env('EMAILJS_PUBLIC_KEY')),
        'EMAILJS_PRIVATE_KEY': bool(_env('EMAILJS_PRIVATE_KEY')),
    }


def is_configured() -> bool:
    """True when a service, a template and at least one key are set."""
    status = config_status()
    return bool(
        status['EMAILJS_SERVICE_ID']
        and status['EMAILJS_TEMPLATE_ID']
        and (status['EMAILJS_PUBLIC_KEY'] or status['EMAILJS_PRIVATE_KEY'])
    )


def load_relay_config() -> RelayConfig:
    """
    Read and validate relay configuration from the environment.

    Returns:
        RelayConfig: The validated configuration

    Raises:
        ServerConfigurationError: If IDs or both keys are missing, or a
            tuning value is not a number
    """
    if not is_configured():
        status = config_status()
        logger.error(f"EmailJS env misconfiguration: {status}")
        missing = [name for name, present in status.items() if not present]
        raise ServerConfigurationError(
            f"EmailJS configuration incomplete, missing: {', '.join(missing)}"
        )

    try:
        max_attempts = int(os.environ.get('RELAY_MAX_ATTEMPTS', DEFAULT_MAX_ATTEMPTS))
        base_delay = float(os.environ.get('RELAY_BASE_DELAY_SECONDS', DEFAULT_BASE_DELAY_SECONDS))
        timeout = float(os.environ.get('RELAY_TIMEOUT_SECONDS', DEFAULT_TIMEOUT_SECONDS))
    except ValueError as e:
        raise ServerConfigurationError(f"Invalid relay tuning value: {e}")

    if max_attempts < 1:
        raise ServerConfigurationError(
            f"RELAY_MAX_ATTEMPTS must be at least 1, got: {max_attempts}"
        )

    return RelayConfig(
        service_id=_env('EMAILJS_SERVICE_ID'),
        template_id=_env('EMAILJS_TEMPLATE_ID'),
        public_key=_env('EMAILJS_PUBLIC_KEY'),
        private_key=_env('EMAILJS_PRIVATE_KEY'),
        require_ok_body=_env_flag('EMAILJS_REQUIRE_OK_BODY'),
        max_attempts=max_attempts,
        base_delay=base_delay,
        timeout=timeout
    )
