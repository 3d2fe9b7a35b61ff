# src/pipeline.py
"""Sanitizer pipeline composing link filters per execution context.

Each context (batch command, post save, editor paste) has its own ordered
list of filter stages, defined once in ``CONTEXT_STAGES``. A stage runs only
when its feature flag is enabled, and stages run strictly in sequence, each
one reading the previous stage's output.

Usage:
    flags = FeatureFlags(safelink_filtering=True)
    clean = sanitize(body, flags, SanitizerContext.POST_SAVE)
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from functools import partial

from html_sanitizer import BleachSanitizer
from link_rewriter import UrlTransform, rewrite_links
from models import ContentSanitizer, FeatureFlags, SanitizationOutcome
from redirect_rules import POSTMASTER_RULE, SAFELINKS_RULE, RedirectRule, unwrap


class SanitizerContext(Enum):
    """Calling scenario selecting flag names, stage order and decoding."""

    CLI = "cli"
    POST_SAVE = "post_save"
    ON_PASTE = "on_paste"


@dataclass(frozen=True, slots=True)
class FilterStage:
    """A redirect rule gated by a FeatureFlags attribute."""

    flag: str
    rule: RedirectRule

    def is_enabled(self, flags: FeatureFlags) -> bool:
        return bool(getattr(flags, self.flag))

    def transform(self, decode_passes: int) -> UrlTransform:
        return partial(unwrap, rule=self.rule, decode_passes=decode_passes)


SAFELINK_STAGE = FilterStage("safelink_filtering", SAFELINKS_RULE)
POSTMASTER_STAGE = FilterStage("postmaster_filtering", POSTMASTER_RULE)

CONTEXT_STAGES: dict[SanitizerContext, tuple[FilterStage, ...]] = {
    SanitizerContext.CLI: (POSTMASTER_STAGE, SAFELINK_STAGE),
    SanitizerContext.POST_SAVE: (SAFELINK_STAGE, POSTMASTER_STAGE),
    SanitizerContext.ON_PASTE: (SAFELINK_STAGE, POSTMASTER_STAGE),
}

# Host-side paths decode once; the editor paste path decodes twice
DECODE_PASSES: dict[SanitizerContext, int] = {
    SanitizerContext.CLI: 1,
    SanitizerContext.POST_SAVE: 1,
    SanitizerContext.ON_PASTE: 2,
}

SanitizerFactory = Callable[[UrlTransform | None], ContentSanitizer]


def enabled_stages(flags: FeatureFlags, context: SanitizerContext) -> list[FilterStage]:
    """Return the context's stages whose flags are enabled, in order."""
    return [stage for stage in CONTEXT_STAGES[context] if stage.is_enabled(flags)]


def build_link_transform(stages: list[FilterStage], decode_passes: int) -> UrlTransform:
    """Combine stages into a single href callback.

    The stages are re-applied until the URL stops changing, so redirectors
    nested at any depth are fully unwrapped.
    """
    transforms = [stage.transform(decode_passes) for stage in stages]

    def transform(url: str) -> str:
        # Every unwrap returns a value strictly shorter than its input
        while True:
            previous = url
            for step in transforms:
                url = step(url)
            if url == previous:
                return url

    return transform


def _run_link_stages(content: str, stages: list[FilterStage], decode_passes: int) -> str:
    # Each changed href shrinks, so the content converges
    while True:
        previous = content
        for stage in stages:
            content = rewrite_links(content, stage.transform(decode_passes))
        if content == previous:
            return content


def sanitize(
    content: str,
    flags: FeatureFlags,
    context: SanitizerContext,
    sanitizer_factory: SanitizerFactory = BleachSanitizer,
) -> str:
    """Run every sanitizer enabled for ``context`` over ``content``.

    Args:
        content: HTML content. Non-string values are returned as-is.
        flags: Feature flags resolved for this invocation
        context: Execution context selecting stage order and decoding
        sanitizer_factory: Builds the generic HTML sanitizer for the paste
            context from an optional ``a``-tag transform

    Returns:
        Sanitized content, or ``content`` unchanged when nothing applies.
    """
    if not isinstance(content, str):
        return content

    stages = enabled_stages(flags, context)
    decode_passes = DECODE_PASSES[context]

    if context is SanitizerContext.ON_PASTE:
        link_transform = build_link_transform(stages, decode_passes) if stages else None
        return sanitizer_factory(link_transform).clean(content)

    if not stages:
        return content

    return _run_link_stages(content, stages, decode_passes)


def sanitize_record_body(
    body: str, flags: FeatureFlags, context: SanitizerContext
) -> SanitizationOutcome:
    """Sanitize a record body and report whether it changed."""
    return SanitizationOutcome(original_body=body, sanitized_body=sanitize(body, flags, context))
