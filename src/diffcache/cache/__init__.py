"""
Diff cache -- the sealed, write-only record of files awaiting processing.

The run seals what it writes with the repository's public key. Only the
key's owner opens it; the CI host hands it back decrypted as the next
run's ``cache`` input.
"""

from .engine import DiffCache, merge_files
from .store import CacheStore

__all__ = ["CacheStore", "DiffCache", "merge_files"]
