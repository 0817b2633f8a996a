"""
Retry policy shared by the contact form and the relay.

Attempts are bounded and spaced with exponential backoff; only
server-side (5xx) failures and network faults are worth retrying.
"""

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY_SECONDS = 1.0


def backoff_delay(base_delay: float, attempt: int) -> float:
    """
    Delay to wait after a failed attempt.

    Args:
        base_delay: Delay after the first failed attempt, in seconds
        attempt: 1-based number of the attempt that just failed

    Returns:
        float: base_delay * 2^(attempt - 1)

    Example:
        >>> [backoff_delay(1.0, n) for n in (1, 2, 3)]
        [1.0, 2.0, 4.0]
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")
    return base_delay * (2 ** (attempt - 1))


def is_retryable_status(status_code: int) -> bool:
    """5xx responses are transient; everything else is final."""
    return 500 <= status_code < 600
