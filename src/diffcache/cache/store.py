"""
The cache store -- tag -> space-joined file list, held for one run.

The mapping is materialized lazily from the supplied ``cache`` input
on first load. A save merges one tag into the mapping and replaces the
remote secret with the sealed whole.
"""

from __future__ import annotations

import logging
from typing import Optional

from .. import NO_CACHE
from ..errors import RemoteRequestError, RemoteWriteError, SaveBeforeLoadError
from . import codec
from .backends import SecretBackend

logger = logging.getLogger("diffcache.cache.store")

SUCCESS_STATUSES = (201, 204)


class CacheStore:
    """In-memory cache mapping backed by a write-only secret.

    Args:
        encoded: The supplied cache input, or the ``none`` sentinel.
        backend: Where sealed saves go.
    """

    def __init__(self, encoded: Optional[str], backend: SecretBackend):
        self.encoded = encoded or NO_CACHE
        self.backend = backend
        self._mapping: Optional[codec.CacheMapping] = None

    @property
    def loaded(self) -> bool:
        return self._mapping is not None

    def _materialize(self) -> codec.CacheMapping:
        if self._mapping is None:
            if self.encoded == NO_CACHE:
                logger.info("No cache supplied yet, starting empty")
                self._mapping = {}
            else:
                self._mapping = codec.decode_cache(self.encoded)
                logger.info("Loaded cache with %d tag(s)", len(self._mapping))
        return self._mapping

    def load(self, tag: str) -> str:
        """Return the cached file list for ``tag``, or ``""`` if absent.

        Raises:
            CacheDecodeError: If the supplied cache is corrupt.
        """
        return self._materialize().get(tag, "")

    def save(self, tag: str, value: str) -> None:
        """Merge ``tag`` into the mapping and persist the whole mapping.

        Raises:
            SaveBeforeLoadError: If :meth:`load` has not run yet.
            RemoteWriteError: If the backend does not confirm the write.
        """
        if self._mapping is None:
            raise SaveBeforeLoadError(
                f"Cache must be loaded before saving tag {tag!r}"
            )

        merged = {**self._mapping, tag: value}
        key = self.backend.public_key()
        sealed = codec.encode_cache(merged, key.key)
        try:
            status = self.backend.write(sealed, key.key_id)
        except RemoteRequestError as exc:
            raise RemoteWriteError(f"Unable to cache {tag}: {exc}") from exc
        if status not in SUCCESS_STATUSES:
            raise RemoteWriteError(
                f"Unable to cache {tag} to {self.backend.name}: status {status}"
            )

        self._mapping = merged
        logger.info("Cached value for %s: %s", tag, value)
