"""
Command-line interface for the Bitbucket to Azure DevOps migration tool.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from . import analysis
from . import bitbucket_utils as bbu
from .exceptions import FetchError, MigrationError
from .migrator import BitbucketToAzureMigrator
from .prompts import collect_credentials, confirm
from .report import write_report
from .utils import PassError, setup_logging

if TYPE_CHECKING:
    from collections.abc import Callable

    from .models import Credentials, ReportRow, WorkflowOutcome

logger: logging.Logger = logging.getLogger(__name__)

USAGE: Final[str] = "Usage: bitbucket-to-azure migrate | validate | analyze:repo | analyze:project"


@dataclass(frozen=True)
class Command:
    """A CLI command and the report it produces."""

    name: str
    needs_destination: bool
    report_file: str
    sheet_title: str
    columns: tuple[str, ...]
    run: Callable[[Credentials, argparse.Namespace], list[ReportRow] | None]


def _print_summary(label: str, outcome: WorkflowOutcome) -> None:
    print(f"\n{label} Summary: {outcome.passed} Passed, {outcome.failed} Failed ({outcome.total} total)")


def _run_migrate(credentials: Credentials, args: argparse.Namespace) -> list[ReportRow] | None:
    client = bbu.get_client(credentials)
    repos = bbu.get_repositories(client, credentials.workspace)
    print(f"Total repositories to migrate: {len(repos)}")

    if not args.yes and not confirm("Proceed with migration?"):
        print("Migration aborted by user.")
        return None

    migrator = BitbucketToAzureMigrator(credentials, work_dir=args.work_dir)
    outcome = migrator.migrate(repos)
    _print_summary("Migration", outcome)
    return outcome.rows


def _run_validate(credentials: Credentials, args: argparse.Namespace) -> list[ReportRow] | None:
    client = bbu.get_client(credentials)
    repos = bbu.get_repositories(client, credentials.workspace)
    print(f"Total repositories to validate: {len(repos)}")

    migrator = BitbucketToAzureMigrator(credentials, work_dir=args.work_dir)
    outcome = migrator.validate(repos)
    _print_summary("Validation", outcome)
    return outcome.rows


def _run_analyze_repo(credentials: Credentials, _args: argparse.Namespace) -> list[ReportRow] | None:
    client = bbu.get_client(credentials)
    repos = bbu.get_repositories(client, credentials.workspace)
    print(f"Found {len(repos)} repositories. Analyzing...")
    return analysis.analyze_repositories(client, credentials.workspace, repos)


def _run_analyze_project(credentials: Credentials, _args: argparse.Namespace) -> list[ReportRow] | None:
    client = bbu.get_client(credentials)
    projects = bbu.get_projects(client, credentials.workspace)
    if not projects:
        print("🚨 No projects found in the workspace.")
    else:
        print(f"Found {len(projects)} projects. Fetching repository counts...")
    return analysis.analyze_projects(client, credentials.workspace, projects)


COMMANDS: Final[dict[str, Command]] = {
    command.name: command
    for command in (
        Command(
            name="migrate",
            needs_destination=True,
            report_file="migration_report.xlsx",
            sheet_title="Migration Report",
            columns=("Repository", "Status", "TimeTaken"),
            run=_run_migrate,
        ),
        Command(
            name="validate",
            needs_destination=True,
            report_file="validation_report.xlsx",
            sheet_title="Validation Report",
            columns=("Repository", "Status"),
            run=_run_validate,
        ),
        Command(
            name="analyze:repo",
            needs_destination=False,
            report_file="bitbucket_analysis.xlsx",
            sheet_title="Bitbucket Analysis",
            columns=("Repository", "Members", "Pipeline"),
            run=_run_analyze_repo,
        ),
        Command(
            name="analyze:project",
            needs_destination=False,
            report_file="bitbucket_projects_analysis.xlsx",
            sheet_title="Bitbucket Projects Analysis",
            columns=("ProjectName", "ProjectCode", "RepoCount"),
            run=_run_analyze_project,
        ),
    )
}


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Migrate Bitbucket repositories to Azure DevOps and analyze Bitbucket workspaces",
        usage=USAGE.removeprefix("Usage: "),
    )

    # Validated by main() so that an unknown command exits with status 1
    _ = parser.add_argument("command", nargs="?", help="One of: " + ", ".join(COMMANDS))

    _ = parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation before migrating")

    _ = parser.add_argument(
        "--work-dir", default=None, help="Directory for temporary mirror clones (default: current directory)"
    )

    _ = parser.add_argument(
        "--bitbucket-pass-path", help="Path of the Bitbucket app password in the pass utility"
    )

    _ = parser.add_argument("--azure-pass-path", help="Path of the Azure DevOps PAT in the pass utility")

    _ = parser.add_argument(
        "--verbose", "-v", action="count", default=0, help="Increase console verbosity (-v: info, -vv: debug)"
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_arguments(argv)

    command = COMMANDS.get(args.command or "")
    if command is None:
        print(USAGE, file=sys.stderr)
        sys.exit(1)

    setup_logging(verbosity=args.verbose)

    try:
        credentials = collect_credentials(
            include_destination=command.needs_destination,
            bitbucket_pass_path=args.bitbucket_pass_path,
            azure_pass_path=args.azure_pass_path,
        )
        rows = command.run(credentials, args)
    except FetchError as e:
        logger.error(f"Listing failed: {e}")
        print(f"❌ Failed to fetch from Bitbucket: {e}", file=sys.stderr)
        sys.exit(1)
    except (MigrationError, PassError) as e:
        logger.error(str(e))
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)
    except Exception:
        logger.exception(f"Command {command.name} failed")
        sys.exit(1)

    if rows is None:
        sys.exit(0)

    path = write_report(rows, command.report_file, command.sheet_title, columns=command.columns)
    print(f"\n✅ Report saved as {path}")
    sys.exit(0)
