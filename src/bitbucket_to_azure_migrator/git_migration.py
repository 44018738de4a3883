"""Git repository operations using the git CLI.

Every command runs with an explicit ``cwd``; the process working directory is
never changed.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from urllib.parse import quote

from .exceptions import GitCommandError
from .utils import sanitize

logger: logging.Logger = logging.getLogger(__name__)


def _inject_token(url: str, token: str | None, prefix: str = "") -> str:
    """Inject authentication token into HTTPS URL.

    Args:
        url: The URL to modify
        token: Token to inject (if None, returns original URL)
        prefix: Prefix before token (e.g., "pat:" for Azure DevOps)

    Returns:
        URL with token injected, or original if not HTTPS or no token
    """
    if not token or not url.startswith("https://"):
        return url
    return url.replace("https://", f"https://{prefix}{quote(token, safe='')}@", 1)


def _run_git(args: list[str], *, cwd: Path | None, secrets: list[str | None]) -> str:
    """Run a git command and return its stdout.

    Raises:
        GitCommandError: If git exits non-zero or cannot be started. The message
            never contains any of *secrets*.
    """
    try:
        result = subprocess.run(  # noqa: S603
            ["git", *args],
            cwd=cwd,
            check=False,
            capture_output=True,
            text=True,
        )
    except OSError as e:
        msg = f"Failed to run git {args[0]}: {sanitize(str(e), secrets)}"
        raise GitCommandError(msg) from e

    if result.returncode != 0:
        msg = f"git {args[0]} failed: {sanitize(result.stderr.strip(), secrets)}"
        raise GitCommandError(msg)
    return result.stdout


def mirror_clone(source_url: str, dest_path: Path, secrets: list[str | None]) -> Path:
    """Clone *source_url* as a bare mirror into *dest_path*, including all refs and tags."""
    logger.debug(f"Mirror cloning into {dest_path}")
    _ = _run_git(["clone", "--mirror", source_url, str(dest_path)], cwd=None, secrets=secrets)
    return dest_path


def push_mirror(clone_path: Path, remote_name: str, remote_url: str, secrets: list[str | None]) -> None:
    """Register *remote_url* on the mirror at *clone_path* and push all refs to it."""
    _ = _run_git(["remote", "add", remote_name, remote_url], cwd=clone_path, secrets=secrets)
    _ = _run_git(["push", "--mirror", remote_name], cwd=clone_path, secrets=secrets)


def count_commits(clone_path: Path) -> int:
    """Count unique commits reachable from any ref in the repository at *clone_path*.

    Raises:
        GitCommandError: If git fails or prints something that is not a number.
    """
    output = _run_git(["rev-list", "--all", "--count"], cwd=clone_path, secrets=[])
    try:
        return int(output.strip())
    except ValueError as e:
        msg = f"Unexpected output from git rev-list in {clone_path}: {output.strip()!r}"
        raise GitCommandError(msg) from e


def cleanup_git_clone(clone_path: Path) -> None:
    """Remove a scratch clone directory if it exists.

    Args:
        clone_path: Path to the git clone directory to remove
    """
    if clone_path.exists():
        try:
            shutil.rmtree(clone_path)
            logger.debug(f"Cleaned up git clone at {clone_path}")
        except OSError as e:
            logger.warning(f"Failed to clean up git clone at {clone_path}: {e}")
