"""Bitbucket Cloud REST API access.

All listing endpoints of the Bitbucket 2.0 API are paginated the same way:
each page is a JSON object with a ``values`` array and, unless it is the last
page, a ``next`` URL. ``fetch_all`` follows those links and returns the
concatenated values.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final
from urllib.parse import quote

import requests

from .exceptions import FetchError
from .models import ProjectDescriptor, RepositoryDescriptor
from .utils import sanitize

if TYPE_CHECKING:
    from .models import Credentials

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

API_BASE: Final[str] = "https://api.bitbucket.org/2.0"
GIT_HOST: Final[str] = "bitbucket.org"
REQUEST_TIMEOUT: Final[int] = 30


def get_client(credentials: Credentials) -> requests.Session:
    """Get a requests session authenticated with the Bitbucket username and app password."""
    session = requests.Session()
    session.auth = (credentials.username, credentials.app_password)
    session.headers["Accept"] = "application/json"
    return session


def clone_url(credentials: Credentials, slug: str) -> str:
    """Build the authenticated HTTPS clone URL for a repository."""
    user = quote(credentials.username, safe="")
    secret = quote(credentials.app_password, safe="")
    return f"https://{user}:{secret}@{GIT_HOST}/{credentials.workspace}/{slug}.git"


def _get_page(client: requests.Session, url: str, params: dict[str, str] | None) -> dict[str, Any]:
    try:
        response = client.get(url, params=params, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json()
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else "unknown"
        msg = f"GET {url} failed with HTTP {status}"
        raise FetchError(msg) from e
    except (requests.RequestException, ValueError) as e:
        secrets: list[str | None] = [client.auth[1]] if isinstance(client.auth, tuple) else []
        msg = f"GET {url} failed: {sanitize(str(e), secrets)}"
        raise FetchError(msg) from e


def fetch_all(client: requests.Session, url: str, params: dict[str, str] | None = None) -> list[dict[str, Any]]:
    """Fetch every item of a paginated listing, in page order.

    Args:
        client: Authenticated session
        url: First page URL
        params: Query parameters for the first request only; ``next`` links
            already carry them.

    Returns:
        All ``values`` entries of all pages, in the order the server returned them

    Raises:
        FetchError: If any page cannot be fetched. No partial result is returned.
    """
    items: list[dict[str, Any]] = []
    next_url: str | None = url
    page_params = params
    pages = 0

    while next_url:
        page = _get_page(client, next_url, page_params)
        items.extend(page.get("values") or [])
        next_url = page.get("next")
        page_params = None
        pages += 1

    logger.debug(f"Fetched {len(items)} items from {url} in {pages} page(s)")
    return items


def get_repositories(client: requests.Session, workspace: str) -> list[RepositoryDescriptor]:
    """List all repositories in a workspace."""
    entries = fetch_all(client, f"{API_BASE}/repositories/{workspace}")
    return [RepositoryDescriptor.from_api(entry) for entry in entries]


def get_projects(client: requests.Session, workspace: str) -> list[ProjectDescriptor]:
    """List all projects in a workspace."""
    entries = fetch_all(client, f"{API_BASE}/workspaces/{workspace}/projects")
    return [ProjectDescriptor.from_api(entry) for entry in entries]


def get_project_repositories(client: requests.Session, workspace: str, project_key: str) -> list[RepositoryDescriptor]:
    """List the repositories of a workspace that belong to the given project."""
    entries = fetch_all(
        client,
        f"{API_BASE}/repositories/{workspace}",
        params={"q": f'project.key="{project_key}"'},
    )
    return [RepositoryDescriptor.from_api(entry) for entry in entries]


def get_repository_permissions(client: requests.Session, workspace: str, slug: str) -> list[dict[str, Any]]:
    """List explicit user permissions on a repository."""
    return fetch_all(client, f"{API_BASE}/workspaces/{workspace}/permissions/repositories/{slug}")


def get_pipelines(client: requests.Session, workspace: str, slug: str) -> list[dict[str, Any]]:
    """Return the first page of pipeline runs for a repository.

    Raises:
        FetchError: If the request fails, e.g. because Pipelines is not enabled.
    """
    page = _get_page(client, f"{API_BASE}/repositories/{workspace}/{slug}/pipelines/", None)
    return page.get("values") or []
