"""
Deduplication & Completion Merger
"""

from typing import Iterable, List, Optional

from loguru import logger

from .models import CompletionPolicy, DrawGroup


def dedupe_groups(groups: Iterable[DrawGroup]) -> List[DrawGroup]:
    """Keep the first occurrence of each identity key, preserving order."""
    seen = set()
    unique = []
    for group in groups:
        if group.key in seen:
            continue
        seen.add(group.key)
        unique.append(group)
    return unique


def complete_with_canonical(groups: List[DrawGroup], policy: CompletionPolicy) -> List[DrawGroup]:
    """
    Append canonical groups until the policy's expected total is reached.

    No-op unless the policy is enabled with an expected total. Canonical
    groups already present are skipped.
    """
    if not policy.enabled or not policy.expected_total:
        return groups
    if len(groups) >= policy.expected_total:
        return groups

    completed = list(groups)
    present = {g.key for g in completed}
    for canonical in policy.canonical_groups:
        if len(completed) >= policy.expected_total:
            break
        if canonical.key in present:
            continue
        completed.append(canonical)
        present.add(canonical.key)

    logger.warning(
        f"Recovered {len(groups)} of {policy.expected_total} expected plays; "
        f"appended {len(completed) - len(groups)} canonical group(s)"
    )
    return completed


def merge_groups(
    groups: Iterable[DrawGroup],
    max_groups: Optional[int] = None,
    policy: Optional[CompletionPolicy] = None,
) -> List[DrawGroup]:
    """
    Dedupe, optionally complete, then truncate.

    Args:
        groups: Groups in strategy invocation order
        max_groups: Cap on the result size
        policy: Canonical completion policy (disabled when None)

    Returns:
        Final ordered groups
    """
    policy = policy or CompletionPolicy.disabled()

    merged = complete_with_canonical(dedupe_groups(groups), policy)

    limits = [n for n in (max_groups, policy.expected_total if policy.enabled else None) if n]
    if limits:
        merged = merged[:min(limits)]
    return merged
