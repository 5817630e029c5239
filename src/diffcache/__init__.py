"""
DiffCache -- incremental changed-file tracking for CI runs.

Diffs two revisions, merges the result with the previous run's cache,
and seals the new cache into a repository secret that only its owner
can open.
"""

import os

__version__ = "0.1.0"

NO_CACHE = "none"
DEFAULT_SECRET_NAME = os.environ.get("DIFFCACHE_SECRET_NAME", "DIFF_CACHE")
DEFAULT_API_URL = os.environ.get("GITHUB_API_URL", "https://api.github.com")
