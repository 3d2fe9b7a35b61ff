# src/observability.py
"""
Wide event logging for sanitizer runs.

One comprehensive event per operation with high cardinality and high
dimensionality, rather than a trail of small log lines. Events are written as
JSON through the ``content_sanitizer`` logger.

Usage:
    event = BatchRunEvent(trigger="cli", enabled_types=["post", "page"])
    # ... populate event fields during the run ...
    emit_event(event, force=True)
"""

import json
import logging
import random
import secrets
import time
from dataclasses import asdict, dataclass, field
from typing import Any

from utils import LOGGER_NAME, get_iso_timestamp

# Events go to the operational log stream, never to stdout
_logger = logging.getLogger(LOGGER_NAME)


def generate_request_id() -> str:
    """Generate a unique request ID for tracing."""
    return secrets.token_hex(8)


@dataclass
class BatchRunEvent:
    """
    Canonical log line for a bulk sanitization run.

    Emitted once per batch driver invocation.
    """

    event_type: str = field(default="batch_sanitize", init=False)
    request_id: str = ""
    timestamp: str = ""

    # Timing
    wall_time_ms: float = 0
    fetch_time_ms: float = 0

    # Configuration
    trigger: str = "cli"
    enabled_types: list[str] = field(default_factory=list)
    safelink_filtering: bool = False
    postmaster_filtering: bool = False

    # Counts
    records_examined: int = 0
    records_changed: int = 0
    records_failed: int = 0

    # Outcome
    outcome: str = "success"  # "success" | "partial" | "error"
    error_type: str | None = None
    error_message: str | None = None

    def __post_init__(self) -> None:
        if not self.timestamp:
            self.timestamp = get_iso_timestamp()
        if not self.request_id:
            self.request_id = generate_request_id()


def should_sample(event: dict[str, Any], sample_rate: float = 0.10) -> bool:
    """
    Tail sampling strategy.

    Always keep:
    - Errors and partial failures (100%)
    - Runs that changed at least one record
    - Slow runs (above 60s)

    Sample:
    - Successful no-op runs (default 10%)
    """
    if event.get("outcome") in ("error", "partial"):
        return True

    if event.get("records_changed", 0) > 0:
        return True

    if event.get("wall_time_ms", 0) > 60000:
        return True

    return random.random() < sample_rate


def emit_event(
    event: BatchRunEvent | dict[str, Any],
    sample_rate: float = 0.10,
    force: bool = False,
) -> bool:
    """
    Emit an event with optional tail sampling.

    Args:
        event: The event to emit (dataclass or dict)
        sample_rate: Sampling rate for successful no-op runs
        force: If True, skip sampling and always emit

    Returns:
        True if event was emitted, False if dropped by sampling
    """
    event_dict = event if isinstance(event, dict) else asdict(event)

    if force or should_sample(event_dict, sample_rate):
        _logger.info(json.dumps(event_dict))
        return True
    return False


class Timer:
    """Context manager for timing operations."""

    def __init__(self) -> None:
        self.start_time: float = 0
        self.end_time: float = 0
        self.elapsed_ms: float = 0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.end_time = time.perf_counter()
        self.elapsed_ms = (self.end_time - self.start_time) * 1000

    def elapsed(self) -> float:
        """Return elapsed time in milliseconds."""
        if self.end_time:
            return self.elapsed_ms
        return (time.perf_counter() - self.start_time) * 1000
