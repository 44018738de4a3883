"""
Custom exception classes for the Bitbucket to Azure DevOps migration tool.
"""

from __future__ import annotations


class MigrationError(Exception):
    """Base exception for migration errors."""


class FetchError(MigrationError):
    """Raised when a Bitbucket listing cannot be fetched completely."""


class RepositoryCreationError(MigrationError):
    """Raised when Azure DevOps refuses to create a repository."""

    status_code: int | None

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitCommandError(MigrationError):
    """Raised when a git subprocess fails."""
