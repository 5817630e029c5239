"""
Secret backends -- where the sealed cache lands.

GitHub: repository Actions secret, replaced wholesale on every save.
Local: a JSON file holding the last sealed value, for dry runs and for
owners who want to inspect what a run would have written.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from ..errors import ConfigurationError
from ..github import GitHubClient
from ..models import RepoPublicKey

logger = logging.getLogger("diffcache.cache.backends")

LOCAL_KEY_ID = "local"


class SecretBackend(ABC):
    """Write-only store for the sealed cache."""

    @abstractmethod
    def public_key(self) -> RepoPublicKey:
        """Key the value must be sealed with before :meth:`write`."""

    @abstractmethod
    def write(self, encrypted_value: str, key_id: str) -> int:
        """Replace the stored value.

        Returns:
            HTTP-style status: 201 created, 204 updated, anything else
            is a failure.
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable backend name."""


class GitHubSecretBackend(SecretBackend):
    """Stores the cache as a repository Actions secret."""

    def __init__(self, client: GitHubClient, secret_name: str):
        self.client = client
        self.secret_name = secret_name
        self._key: Optional[RepoPublicKey] = None

    @property
    def name(self) -> str:
        return f"github:{self.secret_name}"

    def public_key(self) -> RepoPublicKey:
        if self._key is None:
            self._key = self.client.get_repo_public_key()
        return self._key

    def write(self, encrypted_value: str, key_id: str) -> int:
        status = self.client.put_secret(self.secret_name, encrypted_value, key_id)
        logger.info("Secret %s write returned %s", self.secret_name, status)
        return status


class LocalSecretBackend(SecretBackend):
    """Keeps the sealed cache in a local JSON file.

    The public key comes from a file produced by ``diffcache keygen``.
    """

    def __init__(self, path: Path, public_key_path: Optional[Path] = None):
        self.path = path.expanduser()
        self.public_key_path = (
            public_key_path.expanduser() if public_key_path else None
        )

    @property
    def name(self) -> str:
        return f"local:{self.path}"

    def public_key(self) -> RepoPublicKey:
        if self.public_key_path is None or not self.public_key_path.exists():
            raise ConfigurationError(
                f"Public key not found: {self.public_key_path}. "
                "Run diffcache keygen first."
            )
        key = self.public_key_path.read_text(encoding="utf-8").strip()
        return RepoPublicKey(key_id=LOCAL_KEY_ID, key=key)

    def write(self, encrypted_value: str, key_id: str) -> int:
        existed = self.path.exists()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(
                    {"key_id": key_id, "encrypted_value": encrypted_value},
                    indent=2,
                ),
                encoding="utf-8",
            )
        except OSError as exc:
            logger.error("Local secret write failed: %s", exc)
            return 500
        logger.info("Sealed cache written to %s", self.path)
        return 204 if existed else 201

    def read(self) -> str:
        """Return the stored sealed value (owner-side inspection only)."""
        data = json.loads(self.path.read_text(encoding="utf-8"))
        return data["encrypted_value"]


def create_backend(
    secret_name: str,
    client: Optional[GitHubClient] = None,
    local_path: Optional[Path] = None,
    public_key_path: Optional[Path] = None,
) -> SecretBackend:
    """Pick the backend for a run.

    A local path selects the local backend; otherwise the GitHub client
    is required.

    Raises:
        ConfigurationError: If the chosen backend is missing its inputs.
    """
    if local_path is not None:
        if public_key_path is None:
            raise ConfigurationError("A local store needs --public-key.")
        return LocalSecretBackend(local_path, public_key_path)
    if client is None:
        raise ConfigurationError("The GitHub secret backend needs a client.")
    return GitHubSecretBackend(client, secret_name)
