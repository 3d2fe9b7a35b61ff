# src/redirect_rules.py
"""Redirect rules for unwrapping redirector URLs.

A redirector URL routes through a security or tracking service and carries
the real destination in a query parameter. ``unwrap`` recognizes such a URL
by prefix and returns the embedded destination.

Example:
    unwrap(
        "https://xyz.safelinks.protection.outlook.com/?url=https%3A%2F%2Fwww.ucf.edu%2F",
        SAFELINKS_RULE,
    )
    # Result: "https://www.ucf.edu/"
"""

import re
from dataclasses import dataclass
from urllib.parse import parse_qs, unquote, urlsplit


@dataclass(frozen=True, slots=True)
class RedirectRule:
    """A redirector URL pattern and the query parameter holding its target.

    Attributes:
        name: Short identifier used in logs
        match_pattern: Compiled, case-insensitive regex anchored at the URL start
        destination_param: Query parameter carrying the URL-encoded destination
    """

    name: str
    match_pattern: re.Pattern[str]
    destination_param: str

    def matches(self, url: str) -> bool:
        return self.match_pattern.match(url) is not None


SAFELINKS_RULE = RedirectRule(
    name="safelinks",
    match_pattern=re.compile(r"^https://(.*\.)safelinks\.protection\.outlook\.com/", re.IGNORECASE),
    destination_param="url",
)

POSTMASTER_RULE = RedirectRule(
    name="postmaster",
    match_pattern=re.compile(r"^https://postmaster\.smca\.ucf\.edu/", re.IGNORECASE),
    destination_param="url",
)


def _query_param(url: str, param: str) -> str | None:
    """Return the first decoded value of a query parameter, or None.

    Malformed URLs are treated as having no parameter.
    """
    try:
        query = urlsplit(url).query
    except ValueError:
        return None

    values = parse_qs(query, keep_blank_values=True).get(param)
    if not values:
        return None
    return values[0]


def unwrap(url: str, rule: RedirectRule, decode_passes: int = 1) -> str:
    """Replace a redirector URL with the destination it wraps.

    Args:
        url: The full URL to inspect
        rule: Redirect rule to apply
        decode_passes: Number of percent-decoding passes applied to the
            parameter value. Query parsing performs the first one; the editor
            paste path uses 2 to resolve values the redirector double-encoded.

    Returns:
        The destination URL, or ``url`` unchanged when it does not match the
        rule or carries no destination parameter.
    """
    if not isinstance(url, str) or not rule.matches(url):
        return url

    destination = _query_param(url, rule.destination_param)
    if destination is None:
        return url

    for _ in range(decode_passes - 1):
        destination = unquote(destination)

    return destination


def strip_outlook_safelinks(url: str, decode_passes: int = 1) -> str:
    """Replace Outlook Safelinks URLs with the wrapped destination."""
    return unwrap(url, SAFELINKS_RULE, decode_passes)


def strip_postmaster_redirects(url: str, decode_passes: int = 1) -> str:
    """Replace Postmaster redirects with the wrapped destination."""
    return unwrap(url, POSTMASTER_RULE, decode_passes)
