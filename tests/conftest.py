# tests/conftest.py
"""Shared fixtures for content sanitizer tests."""

import sys
from pathlib import Path
from urllib.parse import quote

import pytest

# Add src directory to path so modules import the way they are installed
_src_path = str(Path(__file__).parent.parent / "src")
if _src_path not in sys.path:
    sys.path.insert(0, _src_path)

from models import ContentRecord, FeatureFlags, RecordId  # noqa: E402

# =============================================================================
# Shared Test Constants
# =============================================================================

DESTINATION = "https://www.ucf.edu/"
SAFELINK_URL = "https://xyz.safelinks.protection.outlook.com/?url=https%3A%2F%2Fwww.ucf.edu%2F"
POSTMASTER_URL = "https://postmaster.smca.ucf.edu/?url=https%3A%2F%2Fnews.ucf.edu%2F"


def safelink_for(destination: str, data: str = "05%7C01%7Cabc") -> str:
    """Wrap a destination in an Outlook Safelinks URL."""
    return (
        "https://nam02.safelinks.protection.outlook.com/"
        f"?url={quote(destination, safe='')}&data={data}&reserved=0"
    )


def postmaster_for(destination: str) -> str:
    """Wrap a destination in a Postmaster redirect URL."""
    return f"https://postmaster.smca.ucf.edu/?url={quote(destination, safe='')}"


def anchor(href: str, text: str = "link") -> str:
    return f'<a href="{href}">{text}</a>'


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def all_filters() -> FeatureFlags:
    return FeatureFlags(safelink_filtering=True, postmaster_filtering=True)


@pytest.fixture
def no_filters() -> FeatureFlags:
    return FeatureFlags()


@pytest.fixture
def make_record():
    """Factory for ContentRecord instances with sequential ids."""
    counter = {"next": 1}

    def _make(body: str, type: str = "post", status: str = "publish") -> ContentRecord:
        record_id = RecordId(counter["next"])
        counter["next"] += 1
        return ContentRecord(id=record_id, type=type, body=body, status=status)

    return _make
