"""
Repository migration and validation between Bitbucket and Azure DevOps.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING

import requests

from . import azure_utils as azu
from . import bitbucket_utils as bbu
from .exceptions import MigrationError
from .git_migration import _inject_token, cleanup_git_clone, count_commits, mirror_clone, push_mirror
from .models import WorkflowOutcome
from .utils import sanitize

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from .models import Credentials, ReportRow, RepositoryDescriptor

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

AZURE_REMOTE_NAME = "azure"
STATUS_SUCCESS = "Success"
STATUS_FAILED = "Failed"
NOT_APPLICABLE = "N/A"

# Errors that are scoped to a single repository and must not stop the batch
_ITEM_ERRORS = (MigrationError, requests.RequestException, OSError)


class BitbucketToAzureMigrator:
    """Mirrors Bitbucket repositories into an Azure DevOps project.

    Usage:
        migrator = BitbucketToAzureMigrator(credentials)
        outcome = migrator.migrate(repositories)

    Scratch clones are created in ``work_dir`` under names derived from the
    repository slug and removed after each repository, whatever the result.
    A repository whose scratch path already exists fails without touching it.
    """

    credentials: Credentials
    work_dir: Path
    azure_client: requests.Session

    def __init__(
        self,
        credentials: Credentials,
        *,
        work_dir: str | Path | None = None,
        azure_client: requests.Session | None = None,
    ) -> None:
        if not credentials.has_destination:
            msg = "Azure DevOps organization URL, project and PAT are required for migration and validation"
            raise MigrationError(msg)

        self.credentials = credentials
        self.work_dir = Path(work_dir) if work_dir else Path.cwd()
        self.azure_client = azure_client or azu.get_client(credentials.azure_pat)

        logger.info(
            f"Initialized migrator for workspace {credentials.workspace} -> "
            f"{credentials.azure_org_url}/{credentials.azure_project}"
        )

    def _scratch_path(self, name: str) -> Path:
        """Path for a new scratch clone under ``work_dir``.

        Raises:
            MigrationError: If the path already exists; it is not ours to reuse or remove.
        """
        path = self.work_dir / name
        if path.exists():
            msg = f"Scratch path {path} already exists; move it away and retry"
            raise MigrationError(msg)
        return path

    def _azure_git_url(self, slug: str) -> str:
        url = azu.repo_remote_url(self.credentials.azure_org_url, self.credentials.azure_project, slug)
        return _inject_token(url, self.credentials.azure_pat, prefix=f"{azu.PAT_USER}:")

    def migrate_repository(self, slug: str) -> None:
        """Mirror one repository from Bitbucket into a new Azure DevOps repository.

        Clones the source as a mirror, creates the destination repository, pushes
        all refs and tags, then removes the local clone. A destination repository
        that was created before a failing push is left in place.

        Raises:
            MigrationError: If any step fails
        """
        secrets = self.credentials.secrets
        clone_path = self._scratch_path(f"{slug}.git")

        try:
            _ = mirror_clone(bbu.clone_url(self.credentials, slug), clone_path, secrets)
            print(f"  ✅ Cloned {slug}")

            _ = azu.create_repo(
                self.azure_client,
                self.credentials.azure_org_url,
                self.credentials.azure_project,
                slug,
            )
            print("  ✅ Created repository in Azure DevOps")

            push_mirror(clone_path, AZURE_REMOTE_NAME, self._azure_git_url(slug), secrets)
        finally:
            cleanup_git_clone(clone_path)

    def validate_repository(self, slug: str) -> bool:
        """Compare the number of commits reachable from all refs on both sides.

        Only the counts are compared; two histories of equal length are
        considered equal.

        Returns:
            True if both mirrors contain the same number of commits

        Raises:
            MigrationError: If a clone or count fails
        """
        secrets = self.credentials.secrets
        bitbucket_path = self._scratch_path(f"bitbucket_{slug}.git")
        azure_path = self._scratch_path(f"azure_{slug}.git")

        try:
            _ = mirror_clone(bbu.clone_url(self.credentials, slug), bitbucket_path, secrets)
            bitbucket_commits = count_commits(bitbucket_path)

            _ = mirror_clone(self._azure_git_url(slug), azure_path, secrets)
            azure_commits = count_commits(azure_path)
        finally:
            cleanup_git_clone(bitbucket_path)
            cleanup_git_clone(azure_path)

        logger.info(f"Commit counts for {slug}: Bitbucket={bitbucket_commits}, Azure DevOps={azure_commits}")
        return bitbucket_commits == azure_commits

    def migrate(self, repositories: Iterable[RepositoryDescriptor]) -> WorkflowOutcome:
        """Migrate every repository in order, recording one report row each."""

        def migrate_one(repo: RepositoryDescriptor) -> tuple[bool, ReportRow]:
            start = time.monotonic()
            self.migrate_repository(repo.slug)
            elapsed = time.monotonic() - start
            print(f"✅ Migration completed for {repo.slug}")
            return True, {"Repository": repo.slug, "Status": STATUS_SUCCESS, "TimeTaken": f"{round(elapsed)}s"}

        return self._run_batch(
            repositories,
            verb="Migrating",
            process=migrate_one,
            failure_row=lambda repo: {"Repository": repo.slug, "Status": STATUS_FAILED, "TimeTaken": NOT_APPLICABLE},
        )

    def validate(self, repositories: Iterable[RepositoryDescriptor]) -> WorkflowOutcome:
        """Validate every repository in order, recording one report row each."""

        def validate_one(repo: RepositoryDescriptor) -> tuple[bool, ReportRow]:
            if self.validate_repository(repo.slug):
                print(f"✅ Validation successful for {repo.slug}")
                return True, {"Repository": repo.slug, "Status": STATUS_SUCCESS}
            print(f"❌ Validation failed for {repo.slug}: commit counts differ")
            return False, {"Repository": repo.slug, "Status": STATUS_FAILED}

        return self._run_batch(
            repositories,
            verb="Validating",
            process=validate_one,
            failure_row=lambda repo: {"Repository": repo.slug, "Status": STATUS_FAILED},
        )

    def _run_batch(
        self,
        repositories: Iterable[RepositoryDescriptor],
        *,
        verb: str,
        process: Callable[[RepositoryDescriptor], tuple[bool, ReportRow]],
        failure_row: Callable[[RepositoryDescriptor], ReportRow],
    ) -> WorkflowOutcome:
        """Run *process* for each repository, isolating failures per repository."""
        outcome = WorkflowOutcome()

        for repo in repositories:
            print(f"\n{verb} repository: {repo.slug}...")
            try:
                succeeded, row = process(repo)
            except _ITEM_ERRORS as e:
                message = sanitize(str(e), self.credentials.secrets)
                print(f"❌ Error {verb.lower()} {repo.slug}: {message}")
                logger.info(f"Error {verb.lower()} {repo.slug}: {message}")
                succeeded, row = False, failure_row(repo)

            if succeeded:
                outcome.passed += 1
            else:
                outcome.failed += 1
            outcome.rows.append(row)

        return outcome
