"""
Mock objects for testing the content sanitizer.

These mocks stand in for the host content repository so the batch driver
can be exercised without a database.
"""

from .repository import InMemoryRepository, RecordingProgress

__all__ = [
    "InMemoryRepository",
    "RecordingProgress",
]
