"""Deadline handling for outbound reads."""
import time
from typing import Optional


class DeadlineExceeded(TimeoutError):
    """The caller's deadline passed before the read finished."""


def request_timeout(timeout: float, deadline: Optional[float]) -> float:
    """
    Return the timeout for the next HTTP request.

    Args:
        timeout: Per-request timeout in seconds
        deadline: Absolute time.monotonic() value the read must finish by,
            or None for no overall limit

    Returns:
        The smaller of the per-request timeout and the time left

    Raises:
        DeadlineExceeded: If the deadline has already passed
    """
    if deadline is None:
        return timeout

    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise DeadlineExceeded(f"Deadline exceeded by {-remaining:.2f} seconds")
    return min(timeout, remaining)
