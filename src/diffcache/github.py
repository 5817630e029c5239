"""
Thin GitHub REST client -- only the endpoints a diff-cache run touches.

    GET /repos/{repo}/compare/{base}...{head}        changed files
    GET /repos/{repo}/actions/secrets/public-key     sealing key
    PUT /repos/{repo}/actions/secrets/{name}         sealed cache write
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from . import DEFAULT_API_URL
from .errors import ConfigurationError, RemoteRequestError
from .models import ChangedFile, CommitComparison, RepoPublicKey

logger = logging.getLogger("diffcache.github")

API_VERSION = "2022-11-28"


class GitHubClient:
    """Authenticated client bound to a single repository.

    Args:
        token: Token with read access to contents and write access to
            Actions secrets.
        repository: Repository in ``owner/repo`` form.
        api_url: REST API root, overridable for GitHub Enterprise.
        session: Pre-built session, mainly for tests.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        token: str,
        repository: str,
        api_url: str = DEFAULT_API_URL,
        session: Optional[requests.Session] = None,
        timeout: float = 30,
    ) -> None:
        if not token:
            raise ConfigurationError("A GitHub token is required.")
        if repository.count("/") != 1:
            raise ConfigurationError(
                f"Repository must look like 'owner/repo', got {repository!r}"
            )
        self.repository = repository
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        })
        logger.debug("GitHub client ready for %s", repository)

    def _request(
        self,
        method: str,
        endpoint: str,
        step: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> requests.Response:
        url = f"{self.api_url}/repos/{self.repository}{endpoint}"
        logger.debug("%s %s", method, url)
        try:
            return self._session.request(
                method, url, json=payload, timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise RemoteRequestError(f"Unable to {step}: {exc}") from exc

    def compare_commits(self, basehead: str) -> CommitComparison:
        """Compare two commits.

        Args:
            basehead: ``source...target`` range.

        Returns:
            CommitComparison with the response status and reported files.
            A non-200 status is returned rather than raised so the caller
            can decide how to report it.
        """
        resp = self._request("GET", f"/compare/{basehead}", "compare commits")
        if resp.status_code != 200:
            logger.debug("Compare returned %s: %s", resp.status_code, resp.text)
            return CommitComparison(status_code=resp.status_code)

        try:
            data = _json_object(resp)
            files = [ChangedFile(**f) for f in (data.get("files") or [])]
        except (ValueError, TypeError) as exc:
            raise RemoteRequestError(f"Unable to compare commits: {exc}") from exc
        return CommitComparison(status_code=resp.status_code, files=files)

    def get_repo_public_key(self) -> RepoPublicKey:
        """Fetch the key repository secrets must be sealed with.

        Raises:
            RemoteRequestError: If the key cannot be retrieved.
        """
        resp = self._request(
            "GET", "/actions/secrets/public-key", "retrieve repo public key",
        )
        if resp.status_code != 200:
            raise RemoteRequestError(
                f"Unable to retrieve repo public key: "
                f"{resp.status_code} {resp.text}"
            )
        try:
            key = RepoPublicKey(**_json_object(resp))
        except (ValueError, TypeError) as exc:
            raise RemoteRequestError(
                f"Unable to retrieve repo public key: {exc}"
            ) from exc
        logger.info("Retrieved repo public key (id %s)", key.key_id)
        return key

    def put_secret(self, name: str, encrypted_value: str, key_id: str) -> int:
        """Create or replace a repository Actions secret.

        Returns:
            Response status: 201 when created, 204 when replaced.
        """
        resp = self._request(
            "PUT",
            f"/actions/secrets/{name}",
            f"write secret {name}",
            payload={"encrypted_value": encrypted_value, "key_id": key_id},
        )
        return resp.status_code


def _json_object(resp: requests.Response) -> dict[str, Any]:
    """Decode a response body that must be a JSON object.

    Raises:
        ValueError: If the body is not JSON or not an object.
    """
    data = resp.json()
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data
