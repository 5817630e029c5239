"""
Pydantic models for run configuration, API payloads, and run results.
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import DEFAULT_API_URL, DEFAULT_SECRET_NAME, NO_CACHE


class RevisionPair(BaseModel):
    """The (source, target) commits bounding a diff range."""

    model_config = ConfigDict(frozen=True)

    source: str
    target: str

    @property
    def basehead(self) -> str:
        """Three-dot range understood by the comparison endpoint."""
        return f"{self.source}...{self.target}"


class ChangedFile(BaseModel):
    """One changed-file record reported by the comparison endpoint."""

    model_config = ConfigDict(extra="ignore")

    filename: str


class CommitComparison(BaseModel):
    """Status code and file list of a revision comparison."""

    status_code: int
    files: list[ChangedFile] = Field(default_factory=list)


class RepoPublicKey(BaseModel):
    """Public key the secret store expects secrets to be sealed with."""

    key_id: str
    key: str


class DiffCacheConfig(BaseModel):
    """Inputs for a single diff-cache run."""

    include: str
    exclude: Optional[str] = None
    tag: str
    token: str = Field(repr=False)
    cache: str = NO_CACHE
    secret_name: str = DEFAULT_SECRET_NAME
    api_url: str = DEFAULT_API_URL

    @field_validator("include", "tag", "token")
    @classmethod
    def _required(cls, value: str) -> str:
        if not value:
            raise ValueError("input is required and must not be empty")
        return value

    @field_validator("include", "exclude")
    @classmethod
    def _compiles(cls, value: Optional[str]) -> Optional[str]:
        if value:
            try:
                re.compile(value)
            except re.error as exc:
                raise ValueError(f"invalid regular expression {value!r}: {exc}") from exc
        return value or None

    @field_validator("cache", mode="before")
    @classmethod
    def _blank_cache_is_sentinel(cls, value: Optional[str]) -> str:
        return value or NO_CACHE


class RunResult(BaseModel):
    """What a single run observed and did."""

    revisions: RevisionPair
    changed_files: list[str] = Field(default_factory=list)
    cached: str = ""
    removed: list[str] = Field(default_factory=list)
    files: str = ""
    saved: bool = False
