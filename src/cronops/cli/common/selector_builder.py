"""Selector construction utilities.

This module provides a small factory function that translates user intent
(such as CLI arguments) into concrete JobSelector instances. It centralizes
validation and composition logic for selectors, so the rest of the
application works with a single selector abstraction.
"""

from cronops.core.selectors import (
    AndSelector,
    GroupSelector,
    JobSelector,
    MatchAllSelector,
    NameRegexSelector,
    OrSelector,
    StatusSelector,
)


def build_selector(
    *,
    name: str | None,
    group: str | None,
    status: str | None = None,
    use_or: bool = False,
    allow_empty: bool = True,
) -> JobSelector:
    """
    Build a composite JobSelector from user-provided criteria.

    Args:
        name: Optional regular expression used to match job names.
        group: Optional exact job group.
        status: Optional status label (case-insensitive).
        use_or: If True, combine multiple selectors using logical OR.
                If False, combine them using logical AND.
        allow_empty: If True, no criteria selects every job.

    Returns:
        A JobSelector instance representing the composed selection logic.

    Raises:
        ValueError: If the name regex is invalid, or if no criteria are
                    given while `allow_empty` is False.
    """
    selectors: list[JobSelector] = []

    if name:
        selectors.append(NameRegexSelector(name))
    if group:
        selectors.append(GroupSelector(group))
    if status:
        selectors.append(StatusSelector(status))

    if not selectors:
        if allow_empty:
            return MatchAllSelector()
        raise ValueError("At least one selector is required (--name, --group or --status)")

    if len(selectors) == 1:
        return selectors[0]

    return OrSelector(selectors) if use_or else AndSelector(selectors)
