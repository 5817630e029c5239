"""
Revision diff resolution -- which commits bound this run, and what changed.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .errors import (
    ComparisonRequestError,
    ConfigurationError,
    EmptyDiffError,
    UnsupportedEventError,
)
from .github import GitHubClient
from .models import RevisionPair
from .patterns import PathMatcher

logger = logging.getLogger("diffcache.revisions")

SUPPORTED_EVENTS = ("pull_request", "push")


def resolve_diff_states(event_name: str, payload: Mapping[str, Any]) -> RevisionPair:
    """Derive the revision pair from the triggering event.

    Pull requests diff base against head; pushes diff the commit before
    the push against the one after it.

    Args:
        event_name: CI event kind, e.g. ``push``.
        payload: The event's webhook payload.

    Returns:
        RevisionPair for the run.

    Raises:
        UnsupportedEventError: For any event kind other than
            ``pull_request`` and ``push``.
        ConfigurationError: If the payload lacks the commit identifiers.
    """
    if event_name == "pull_request":
        pr = payload.get("pull_request") or {}
        source = (pr.get("base") or {}).get("sha")
        target = (pr.get("head") or {}).get("sha")
    elif event_name == "push":
        source = payload.get("before")
        target = payload.get("after")
    else:
        raise UnsupportedEventError(
            f"{event_name} event type is not supported. "
            f"Supported events: {', '.join(SUPPORTED_EVENTS)}"
        )

    if not source or not target:
        raise ConfigurationError(
            f"{event_name} payload is missing the commits to compare"
        )

    revisions = RevisionPair(source=source, target=target)
    logger.info("Comparing %s", revisions.basehead)
    return revisions


def compute_diff(
    client: GitHubClient, revisions: RevisionPair, matcher: PathMatcher
) -> list[str]:
    """List changed paths between the revisions that pass the matcher.

    Order follows the API's reporting order.

    Raises:
        ComparisonRequestError: If the comparison does not succeed.
        EmptyDiffError: If the comparison reports no files at all.
    """
    logger.info("Checking changed files using %s", matcher.describe())
    comparison = client.compare_commits(revisions.basehead)

    if comparison.status_code != 200:
        raise ComparisonRequestError(
            f"Request to compare commits failed with status {comparison.status_code}"
        )
    if not comparison.files:
        raise EmptyDiffError(f"No files changed in {revisions.basehead}")

    changed = matcher.filter(f.filename for f in comparison.files)
    for path in changed:
        if any(c.isspace() for c in path):
            logger.warning(
                "Changed path %r contains whitespace and will not survive "
                "the space-joined cache; it is cached as separate fragments",
                path,
            )
    logger.info("Changed files: %s", " ".join(changed))
    return changed
