# src/config.py
"""Configuration management for the content sanitizer.

Environment-based configuration with type-safe getters and defaults.
These functions take an env object and return configuration values. The
host resolves options once per run or request and passes the resulting
values into the pipeline; nothing below the host boundary reads config.
"""

from collections.abc import Mapping
from types import SimpleNamespace
from typing import Any

from models import FeatureFlags
from pipeline import SanitizerContext
from utils import log_op

# =============================================================================
# Constants
# =============================================================================

# Env attributes are the option name uppercased with this prefix
ENV_PREFIX = "CONTENT_SANITIZER_"

DEFAULT_ENABLED_POST_TYPES = ("post", "page")

TRUE_VALUES = frozenset({"1", "true", "on", "yes"})
FALSE_VALUES = frozenset({"0", "false", "off", "no", ""})

# =============================================================================
# Option Registry
# =============================================================================

# Registry of boolean options: option name -> default value.
# Batch filters are on unless disabled; save-time and paste filters are opt-in.
_BOOL_OPTION_REGISTRY: dict[str, bool] = {
    "cli_enable_postmaster_filtering": True,
    "cli_enable_safelink_filtering": True,
    "post_save_enable_postmaster_filtering": False,
    "post_save_enable_safelink_filtering": False,
    "on_paste_enable_postmaster_filtering": False,
    "on_paste_enable_safelink_filtering": False,
}

# Option name prefix per execution context
_CONTEXT_OPTION_PREFIX: dict[SanitizerContext, str] = {
    SanitizerContext.CLI: "cli",
    SanitizerContext.POST_SAVE: "post_save",
    SanitizerContext.ON_PASTE: "on_paste",
}


# =============================================================================
# Configuration Getters
# =============================================================================


def env_key(option_name: str) -> str:
    """Return the env attribute name for an option."""
    return f"{ENV_PREFIX}{option_name.upper()}"


def env_from_environ(environ: Mapping[str, str]) -> SimpleNamespace:
    """Build an env object from process environment variables.

    Only variables carrying the option prefix are kept.
    """
    return SimpleNamespace(**{k: v for k, v in environ.items() if k.startswith(ENV_PREFIX)})


def parse_bool(value: Any) -> bool:
    """Parse a boolean the way settings forms submit checkbox values.

    Raises:
        ValueError: If the value is not a recognizable boolean.
    """
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ValueError(f"Not a boolean value: {value!r}")


def get_bool_option(env: Any, option_name: str) -> bool:
    """Get a boolean option from environment, falling back to its default.

    Args:
        env: Object exposing options as attributes
        option_name: Registered option name (without prefix)

    Returns:
        The configured value, or the registered default when unset or invalid.
    """
    default = _BOOL_OPTION_REGISTRY[option_name]
    value = getattr(env, env_key(option_name), None)
    if value is None:
        return default
    try:
        return parse_bool(value)
    except ValueError as e:
        log_op(
            "config_validation_error",
            config_key=env_key(option_name),
            error=str(e),
        )
        return default


def get_enabled_post_types(env: Any) -> tuple[str, ...]:
    """Get the ordered set of content types eligible for sanitization.

    Accepts a comma-separated string, a sequence of type names, or a saved
    checkbox mapping such as ``{"post": "on", "page": ""}``.
    """
    value = getattr(env, env_key("enabled_post_types"), None)
    if value is None:
        return DEFAULT_ENABLED_POST_TYPES

    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, Mapping):
        items = [k for k, v in value.items() if v == "on"]
    else:
        items = list(value)

    # Preserve first occurrence order while dropping blanks and duplicates
    types = dict.fromkeys(str(item).strip() for item in items if str(item).strip())
    return tuple(types)


def get_feature_flags(env: Any, context: SanitizerContext) -> FeatureFlags:
    """Resolve the link filter flags for one execution context."""
    prefix = _CONTEXT_OPTION_PREFIX[context]
    return FeatureFlags(
        safelink_filtering=get_bool_option(env, f"{prefix}_enable_safelink_filtering"),
        postmaster_filtering=get_bool_option(env, f"{prefix}_enable_postmaster_filtering"),
    )
