from __future__ import annotations

import logging
from typing import Any, Final

import requests
from requests.auth import HTTPBasicAuth

from .exceptions import RepositoryCreationError

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

API_VERSION: Final[str] = "6.0"
REQUEST_TIMEOUT: Final[int] = 30
# Azure DevOps ignores the user name when authenticating with a PAT
PAT_USER: Final[str] = "pat"


def get_client(pat: str) -> requests.Session:
    """Get a requests session authenticated with an Azure DevOps personal access token."""
    session = requests.Session()
    session.auth = HTTPBasicAuth("", pat)
    session.headers["Content-Type"] = "application/json"
    return session


def _project_url(org_url: str, project: str) -> str:
    return f"{org_url.rstrip('/')}/{project}"


def repo_remote_url(org_url: str, project: str, repo_name: str) -> str:
    """HTTPS git URL of a repository, without credentials."""
    return f"{_project_url(org_url, project)}/_git/{repo_name}"


def create_repo(client: requests.Session, org_url: str, project: str, repo_name: str) -> dict[str, Any]:
    """Create an empty git repository in an Azure DevOps project.

    Raises:
        RepositoryCreationError: If Azure DevOps rejects the request. A 409 status
            means a repository with that name already exists.
    """
    url = f"{_project_url(org_url, project)}/_apis/git/repositories"
    try:
        response = client.post(
            url,
            params={"api-version": API_VERSION},
            json={"name": repo_name},
            timeout=REQUEST_TIMEOUT,
        )
    except requests.RequestException as e:
        msg = f"Failed to create Azure DevOps repository '{repo_name}': {e}"
        raise RepositoryCreationError(msg) from e

    if response.status_code == 409:
        msg = f"Azure DevOps repository '{repo_name}' already exists in project '{project}'"
        raise RepositoryCreationError(msg, status_code=409)
    if not response.ok:
        msg = f"Failed to create Azure DevOps repository '{repo_name}': HTTP {response.status_code} {response.text}"
        raise RepositoryCreationError(msg, status_code=response.status_code)

    logger.info(f"Created Azure DevOps repository {project}/{repo_name}")
    return response.json() if response.content else {}
