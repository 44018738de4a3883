"""Tests for repository and project analysis."""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest

from bitbucket_to_azure_migrator import analysis
from bitbucket_to_azure_migrator.exceptions import FetchError
from bitbucket_to_azure_migrator.models import ProjectDescriptor, RepositoryDescriptor

MODULE = "bitbucket_to_azure_migrator.analysis.bbu"

PERMISSIONS = [
    {"user": {"display_name": "Jane Doe"}, "permission": "admin"},
    {"user": {"display_name": "John Roe"}, "permission": "write"},
]


@pytest.mark.unit
class TestAnalyzeRepository:
    repo = RepositoryDescriptor(slug="alpha", name="Alpha")

    def test_members_and_pipeline(self) -> None:
        with (
            patch(f"{MODULE}.get_repository_permissions", return_value=PERMISSIONS),
            patch(f"{MODULE}.get_pipelines", return_value=[{"uuid": "{1}"}]),
        ):
            row = analysis.analyze_repository(Mock(), "acme", self.repo)

        assert row == {
            "Repository": "alpha",
            "Members": "Jane Doe (admin), John Roe (write)",
            "Pipeline": "Yes",
        }

    def test_no_pipeline_items(self) -> None:
        with (
            patch(f"{MODULE}.get_repository_permissions", return_value=[]),
            patch(f"{MODULE}.get_pipelines", return_value=[]),
        ):
            row = analysis.analyze_repository(Mock(), "acme", self.repo)

        assert row["Pipeline"] == "No"
        assert row["Members"] == ""

    def test_pipeline_lookup_error_means_no(self) -> None:
        with (
            patch(f"{MODULE}.get_repository_permissions", return_value=PERMISSIONS),
            patch(f"{MODULE}.get_pipelines", side_effect=FetchError("HTTP 404")),
        ):
            row = analysis.analyze_repository(Mock(), "acme", self.repo)

        assert row["Pipeline"] == "No"
        assert row["Members"].startswith("Jane Doe")

    def test_members_error_marks_row(self) -> None:
        with (
            patch(f"{MODULE}.get_repository_permissions", side_effect=FetchError("HTTP 403")),
            patch(f"{MODULE}.get_pipelines") as mock_pipelines,
        ):
            row = analysis.analyze_repository(Mock(), "acme", self.repo)

        assert row == {"Repository": "alpha", "Members": "Error fetching members", "Pipeline": "Error"}
        mock_pipelines.assert_not_called()

    def test_member_without_user_details(self) -> None:
        with (
            patch(f"{MODULE}.get_repository_permissions", return_value=[{"permission": "read"}]),
            patch(f"{MODULE}.get_pipelines", return_value=[]),
        ):
            row = analysis.analyze_repository(Mock(), "acme", self.repo)

        assert row["Members"] == "Unknown (read)"


@pytest.mark.unit
def test_analyze_repositories_keeps_order_and_isolates_errors() -> None:
    repos = [RepositoryDescriptor(slug=s, name=s) for s in ("a", "b", "c")]
    with (
        patch(
            f"{MODULE}.get_repository_permissions",
            side_effect=[PERMISSIONS, FetchError("boom"), []],
        ),
        patch(f"{MODULE}.get_pipelines", return_value=[]),
    ):
        rows = analysis.analyze_repositories(Mock(), "acme", repos)

    assert [row["Repository"] for row in rows] == ["a", "b", "c"]
    assert rows[1]["Members"] == "Error fetching members"
    assert rows[2]["Pipeline"] == "No"


@pytest.mark.unit
class TestAnalyzeProjects:
    def test_counts_repositories_per_project(self) -> None:
        projects = [ProjectDescriptor(key="PRJ", name="Project"), ProjectDescriptor(key="OPS", name="Operations")]
        repos = [RepositoryDescriptor(slug=s, name=s) for s in ("a", "b", "c")]

        with patch(f"{MODULE}.get_project_repositories", side_effect=[repos, []]) as mock_list:
            rows = analysis.analyze_projects(Mock(), "acme", projects)

        assert rows == [
            {"ProjectName": "Project", "ProjectCode": "PRJ", "RepoCount": 3},
            {"ProjectName": "Operations", "ProjectCode": "OPS", "RepoCount": 0},
        ]
        assert [c.args[2] for c in mock_list.call_args_list] == ["PRJ", "OPS"]

    def test_project_error_marks_row(self) -> None:
        project = ProjectDescriptor(key="PRJ", name="Project")

        with patch(f"{MODULE}.get_project_repositories", side_effect=FetchError("HTTP 500")):
            row = analysis.analyze_project(Mock(), "acme", project)

        assert row == {"ProjectName": "Project", "ProjectCode": "PRJ", "RepoCount": "Error fetching repositories"}

    def test_no_projects(self) -> None:
        assert analysis.analyze_projects(Mock(), "acme", []) == []
