"""Credential collection and confirmation prompts.

Every value can be supplied non-interactively through an environment
variable; secrets can also be read from the ``pass`` password store. Anything
still missing is asked for on the terminal, with secrets masked.
"""

from __future__ import annotations

import getpass
import logging
import os
from typing import Final

from . import utils
from .models import Credentials

logger: logging.Logger = logging.getLogger(__name__)

WORKSPACE_ENV_VAR: Final[str] = "BITBUCKET_WORKSPACE"
USERNAME_ENV_VAR: Final[str] = "BITBUCKET_USERNAME"
APP_PASSWORD_ENV_VAR: Final[str] = "BITBUCKET_APP_PASSWORD"  # noqa: S105
AZURE_ORG_ENV_VAR: Final[str] = "AZURE_DEVOPS_ORG_URL"
AZURE_PROJECT_ENV_VAR: Final[str] = "AZURE_DEVOPS_PROJECT"
AZURE_PAT_ENV_VAR: Final[str] = "AZURE_DEVOPS_PAT"  # noqa: S105


def _ask(message: str, env_var: str, *, secret: bool = False, pass_path: str | None = None) -> str:
    """Resolve one value from pass, the environment, or the terminal, in that order."""
    if pass_path:
        return utils.get_pass_value(pass_path)

    value = os.environ.get(env_var)
    if value:
        logger.debug(f"Using {env_var} from environment")
        return value.strip()

    while True:
        answer = getpass.getpass(f"{message} ") if secret else input(f"{message} ")
        if answer.strip():
            return answer.strip()
        print("A value is required.")


def collect_credentials(
    *,
    include_destination: bool = True,
    bitbucket_pass_path: str | None = None,
    azure_pass_path: str | None = None,
) -> Credentials:
    """Collect Bitbucket and, if requested, Azure DevOps credentials."""
    workspace = _ask("Enter your Bitbucket workspace:", WORKSPACE_ENV_VAR)
    username = _ask("Enter your Bitbucket username:", USERNAME_ENV_VAR)
    app_password = _ask(
        "Enter your Bitbucket app password:", APP_PASSWORD_ENV_VAR, secret=True, pass_path=bitbucket_pass_path
    )

    if not include_destination:
        return Credentials(workspace=workspace, username=username, app_password=app_password)

    azure_org_url = _ask("Enter your Azure DevOps organization URL:", AZURE_ORG_ENV_VAR)
    azure_project = _ask("Enter your Azure DevOps project name:", AZURE_PROJECT_ENV_VAR)
    azure_pat = _ask("Enter your Azure DevOps PAT:", AZURE_PAT_ENV_VAR, secret=True, pass_path=azure_pass_path)

    return Credentials(
        workspace=workspace,
        username=username,
        app_password=app_password,
        azure_org_url=azure_org_url.rstrip("/"),
        azure_project=azure_project,
        azure_pat=azure_pat,
    )


def confirm(message: str) -> bool:
    """Ask a yes/no question. Anything but "y" or "yes" means no."""
    try:
        answer = input(f"{message} (yes/no) ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}
