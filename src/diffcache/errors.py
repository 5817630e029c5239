"""
Failure taxonomy for a diff-cache run.

Every error is fatal to the run. Nothing here is retried; the CLI
reports the message and exits non-zero.
"""

from __future__ import annotations


class DiffCacheError(Exception):
    """Base class for all diff-cache failures."""


class ConfigurationError(DiffCacheError):
    """A required input is missing or an input is malformed."""


class UnsupportedEventError(ConfigurationError):
    """The triggering event kind has no revision pair mapping."""


class RemoteRequestError(DiffCacheError):
    """A call to the hosting API failed or returned a non-success status."""


class ComparisonRequestError(RemoteRequestError):
    """The revision comparison endpoint did not report success."""


class EmptyDiffError(DiffCacheError):
    """The comparison reported no changed files at all."""


class CacheDecodeError(DiffCacheError):
    """The supplied cache could not be decompressed or parsed."""


class SaveBeforeLoadError(DiffCacheError):
    """A save was attempted before the cache was ever loaded."""


class RemoteWriteError(DiffCacheError):
    """The secret store did not confirm the cache write."""
