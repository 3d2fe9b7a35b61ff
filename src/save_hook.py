# src/save_hook.py
"""Save-time sanitization hook.

Invoked synchronously by the host on every record create or update. The
hook only computes the body to persist; the host's own save path writes it.
Exceptions are not caught here so a failing sanitizer aborts the save
instead of silently dropping content.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from models import FeatureFlags
from pipeline import SanitizerContext, sanitize


def sanitize_on_save(
    post_type: str,
    body: str,
    flags: FeatureFlags,
    enabled_types: Iterable[str],
) -> str:
    """Return the body to persist for a record being saved.

    Records of types outside ``enabled_types`` are returned untouched.
    """
    if post_type not in tuple(enabled_types):
        return body
    return sanitize(body, flags, SanitizerContext.POST_SAVE)


def add_post_save_content_sanitizers(
    data: Mapping[str, Any],
    flags: FeatureFlags,
    enabled_types: Iterable[str],
) -> dict[str, Any]:
    """Filter for post data immediately before it is saved.

    Args:
        data: Post data with at least ``post_type`` and ``post_content``
        flags: Feature flags resolved for the save-time context
        enabled_types: Content types eligible for sanitization

    Returns:
        A copy of ``data`` with sanitized ``post_content``.
    """
    filtered = dict(data)
    filtered["post_content"] = sanitize_on_save(
        data.get("post_type", ""),
        data.get("post_content", ""),
        flags,
        enabled_types,
    )
    return filtered
