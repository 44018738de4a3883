"""
Bitbucket to Azure DevOps Migration Tool

Mirrors Bitbucket Cloud repositories into an Azure DevOps project, validates
the result by commit count, and reports on Bitbucket workspace contents.
"""

from __future__ import annotations

from .cli import main
from .exceptions import FetchError, GitCommandError, MigrationError, RepositoryCreationError
from .migrator import BitbucketToAzureMigrator
from .models import Credentials, ProjectDescriptor, RepositoryDescriptor, WorkflowOutcome
from .report import write_report
from .utils import setup_logging

# Package version
__version__ = "0.1.0"

__all__ = [
    "BitbucketToAzureMigrator",
    "Credentials",
    "FetchError",
    "GitCommandError",
    "MigrationError",
    "ProjectDescriptor",
    "RepositoryCreationError",
    "RepositoryDescriptor",
    "WorkflowOutcome",
    "main",
    "setup_logging",
    "write_report",
]
