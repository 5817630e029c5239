"""
Cache Engine -- the run, start to finish.

    resolve revisions -> diff -> load cache -> merge -> validate -> save

Nothing is written until the whole diff-and-validate sequence has
succeeded, so a failed run leaves the previous cache untouched.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

import requests

from ..actions import EventContext, set_output
from ..github import GitHubClient
from ..models import DiffCacheConfig, RunResult
from ..patterns import PathMatcher
from ..revisions import compute_diff, resolve_diff_states
from .backends import create_backend
from .store import CacheStore

logger = logging.getLogger("diffcache.cache.engine")


def merge_files(
    cached: str, staged: Iterable[str], matcher: PathMatcher
) -> tuple[str, list[str]]:
    """Union cached and staged paths, then drop what the matcher rejects.

    Cached paths keep their position ahead of newly staged ones and
    duplicates collapse to their first occurrence.

    Args:
        cached: Space-joined previously cached paths.
        staged: Paths from this run's diff.
        matcher: Current include/exclude patterns.

    Returns:
        Tuple of (space-joined surviving paths, removed paths).
    """
    union = list(dict.fromkeys([*cached.split(), *staged]))
    removed = matcher.invalid(union)
    dropped = set(removed)
    kept = [p for p in union if p not in dropped]
    return " ".join(kept), removed


class DiffCache:
    """One run's worth of diff-and-cache work.

    Build it once at the top of the run and call :meth:`run`.
    """

    def __init__(
        self,
        config: DiffCacheConfig,
        context: EventContext,
        client: GitHubClient,
        store: CacheStore,
    ):
        self.config = config
        self.context = context
        self.client = client
        self.store = store
        self.matcher = PathMatcher.compile(config.include, config.exclude)

    @classmethod
    def build(
        cls,
        config: DiffCacheConfig,
        context: EventContext,
        local_path: Optional[Path] = None,
        public_key_path: Optional[Path] = None,
        session: Optional[requests.Session] = None,
    ) -> DiffCache:
        """Wire up client, backend and store for a run.

        Args:
            config: Run inputs.
            context: Triggering event.
            local_path: Write the sealed cache here instead of a secret.
            public_key_path: Sealing key for the local store.
            session: HTTP session override.
        """
        client = GitHubClient(
            config.token,
            context.repository,
            api_url=config.api_url,
            session=session,
        )
        backend = create_backend(
            config.secret_name,
            client=client,
            local_path=local_path,
            public_key_path=public_key_path,
        )
        logger.info("Persisting cache to %s", backend.name)
        return cls(config, context, client, CacheStore(config.cache, backend))

    def run(self) -> RunResult:
        """Execute the full sequence.

        Returns:
            RunResult describing what was found and whether it was saved.

        Raises:
            DiffCacheError: Any failure; the run is aborted.
        """
        tag = self.config.tag
        revisions = resolve_diff_states(self.context.event_name, self.context.payload)
        staged = compute_diff(self.client, revisions, self.matcher)

        cached = self.store.load(tag)
        logger.info("Cached files: %s", cached)
        logger.info("Staged files: %s", " ".join(staged))

        result = RunResult(
            revisions=revisions, changed_files=staged, cached=cached, files=cached,
        )

        if staged:
            clean, removed = merge_files(cached, staged, self.matcher)
            if removed:
                logger.info(
                    "Incorrect entries: %s. Removing from cache list.",
                    " ".join(removed),
                )
            result.removed = removed
            result.files = clean

            if clean and clean != cached:
                logger.info("Files to cache: %s", clean)
                self.store.save(tag, clean)
                result.saved = True

        if not result.saved:
            logger.info("No new files to cache!")

        set_output("files", result.files)
        return result
