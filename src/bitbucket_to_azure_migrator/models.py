"""Data models shared by the fetch, migration, validation and analysis workflows.

These models are intentionally simple. Descriptors are read-only views of
Bitbucket listing entries; report rows are plain ordered dicts so they can be
written to a worksheet verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypeAlias

# Column name -> cell value. Insertion order is the column order.
ReportRow: TypeAlias = dict[str, str | int]


@dataclass(frozen=True)
class Credentials:
    """Credentials for one command invocation. Never persisted."""

    workspace: str
    username: str
    app_password: str = field(repr=False)
    azure_org_url: str = ""
    azure_project: str = ""
    azure_pat: str = field(default="", repr=False)

    @property
    def has_destination(self) -> bool:
        return bool(self.azure_org_url and self.azure_project and self.azure_pat)

    @property
    def secrets(self) -> list[str | None]:
        """Values that must never appear in logs or error messages."""
        return [self.app_password, self.azure_pat]


@dataclass(frozen=True)
class RepositoryDescriptor:
    """A repository as listed by Bitbucket."""

    slug: str
    name: str
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, entry: dict[str, Any]) -> RepositoryDescriptor:
        slug = entry["slug"]
        return cls(slug=slug, name=entry.get("name") or slug, raw=entry)


@dataclass(frozen=True)
class ProjectDescriptor:
    """A workspace project as listed by Bitbucket."""

    key: str
    name: str
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, entry: dict[str, Any]) -> ProjectDescriptor:
        key = entry["key"]
        return cls(key=key, name=entry.get("name") or key, raw=entry)


@dataclass
class WorkflowOutcome:
    """Result of one migrate/validate run.

    Built once by the batch loop and handed to the caller; not modified afterwards.
    """

    passed: int = 0
    failed: int = 0
    rows: list[ReportRow] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.passed + self.failed
