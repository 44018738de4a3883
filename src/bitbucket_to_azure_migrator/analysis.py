"""Read-only analysis of a Bitbucket workspace.

Produces one report row per repository (collaborators and whether Pipelines
has ever run) or per project (number of repositories). Failures for a single
repository or project are recorded in its row and never stop the batch.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from . import bitbucket_utils as bbu
from .exceptions import FetchError

if TYPE_CHECKING:
    from collections.abc import Iterable

    import requests

    from .models import ProjectDescriptor, ReportRow, RepositoryDescriptor

logger: logging.Logger = logging.getLogger(__name__)

MEMBERS_ERROR = "Error fetching members"
PIPELINE_ERROR = "Error"
REPO_COUNT_ERROR = "Error fetching repositories"


def _format_member(entry: dict) -> str:
    user = entry.get("user") or {}
    name = user.get("display_name") or user.get("nickname") or "Unknown"
    return f"{name} ({entry.get('permission', 'unknown')})"


def has_pipeline(client: requests.Session, workspace: str, slug: str) -> bool:
    """Whether the repository has any pipeline runs.

    A failing request is treated as "no pipelines"; repositories without
    Pipelines enabled answer with an error status.
    """
    try:
        return bool(bbu.get_pipelines(client, workspace, slug))
    except FetchError as e:
        logger.debug(f"Pipeline lookup for {slug} failed, assuming none: {e}")
        return False


def analyze_repository(client: requests.Session, workspace: str, repo: RepositoryDescriptor) -> ReportRow:
    try:
        permissions = bbu.get_repository_permissions(client, workspace, repo.slug)
    except FetchError as e:
        logger.error(f"Error fetching details for {repo.slug}: {e}")
        return {"Repository": repo.slug, "Members": MEMBERS_ERROR, "Pipeline": PIPELINE_ERROR}

    members = ", ".join(_format_member(entry) for entry in permissions)
    pipeline = "Yes" if has_pipeline(client, workspace, repo.slug) else "No"
    return {"Repository": repo.slug, "Members": members, "Pipeline": pipeline}


def analyze_repositories(
    client: requests.Session, workspace: str, repositories: Iterable[RepositoryDescriptor]
) -> list[ReportRow]:
    rows = [analyze_repository(client, workspace, repo) for repo in repositories]
    logger.info(f"Analyzed {len(rows)} repositories")
    return rows


def analyze_project(client: requests.Session, workspace: str, project: ProjectDescriptor) -> ReportRow:
    try:
        repo_count: str | int = len(bbu.get_project_repositories(client, workspace, project.key))
    except FetchError as e:
        logger.error(f"Error fetching repos for project {project.key}: {e}")
        repo_count = REPO_COUNT_ERROR
    return {"ProjectName": project.name, "ProjectCode": project.key, "RepoCount": repo_count}


def analyze_projects(
    client: requests.Session, workspace: str, projects: Iterable[ProjectDescriptor]
) -> list[ReportRow]:
    rows = [analyze_project(client, workspace, project) for project in projects]
    logger.info(f"Analyzed {len(rows)} projects")
    return rows
