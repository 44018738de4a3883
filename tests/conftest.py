"""
Pytest configuration and fixtures.

This module configures pytest behavior for different test types:
- Integration tests: Fail on any warnings logged by the code under test
- Unit tests: Allow warnings
"""

from __future__ import annotations

import logging
import shutil
from typing import TYPE_CHECKING, Any
from unittest.mock import Mock

import pytest
import requests
from typing_extensions import override

from bitbucket_to_azure_migrator.models import Credentials

if TYPE_CHECKING:
    from collections.abc import Generator

# Store warning records during test execution
_integration_test_warnings: dict[str, list[logging.LogRecord]] = {}


class IntegrationTestWarningHandler(logging.Handler):
    """Custom logging handler to capture warnings during integration tests."""

    test_nodeid: str

    def __init__(self, test_nodeid: str) -> None:
        super().__init__()
        self.test_nodeid = test_nodeid
        self.setLevel(logging.WARNING)

    @override
    def emit(self, record: logging.LogRecord) -> None:
        """Capture WARNING and above level logs."""
        if self.test_nodeid not in _integration_test_warnings:
            _integration_test_warnings[self.test_nodeid] = []
        _integration_test_warnings[self.test_nodeid].append(record)


@pytest.fixture(autouse=True)
def fail_on_log_warnings_for_integration_tests(
    request: pytest.FixtureRequest,
) -> Generator[None]:
    """
    Automatically fail integration tests if any WARNING level logs are emitted from the code under test.

    Integration tests drive real git repositories through the migrator; a warning
    there (for example a scratch clone that could not be removed) is treated as
    a failure even though the tool itself would carry on.
    """
    is_integration_test = request.node.get_closest_marker("integration") is not None

    if not is_integration_test:
        yield
        return

    test_nodeid = request.node.nodeid
    _integration_test_warnings[test_nodeid] = []

    handler = IntegrationTestWarningHandler(test_nodeid)
    root_logger = logging.getLogger()
    root_logger.addHandler(handler)

    try:
        yield
    finally:
        root_logger.removeHandler(handler)


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[None]
) -> Generator[None]:  # type: ignore[misc]
    """
    Hook to check for warnings after test execution and mark test as failed if warnings were detected.
    """
    outcome = yield
    report = outcome.get_result()

    if call.when == "call" and report.outcome == "passed":
        test_nodeid = item.nodeid
        warning_records = _integration_test_warnings.get(test_nodeid, [])

        if warning_records:
            warning_messages = [
                f"{record.levelname}: {record.getMessage()} (in {record.name}:{record.lineno})"
                for record in warning_records
            ]

            report.outcome = "failed"
            report.longrepr = f"Integration test failed: {len(warning_records)} warning(s) detected:\n" + "\n".join(
                f"  - {msg}" for msg in warning_messages
            )

        _integration_test_warnings.pop(test_nodeid, None)


@pytest.fixture
def git_available() -> None:
    """Skip the test when the git CLI is not installed."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(
        workspace="acme",
        username="jdoe",
        app_password="bb-secret",
        azure_org_url="https://dev.azure.com/acme",
        azure_project="Platform",
        azure_pat="ado-pat",
    )


@pytest.fixture
def source_credentials() -> Credentials:
    return Credentials(workspace="acme", username="jdoe", app_password="bb-secret")


def make_response(payload: Any = None, status: int = 200) -> Mock:
    """Build a stand-in for ``requests.Response``."""
    response = Mock()
    response.status_code = status
    response.ok = status < 400
    response.text = "" if payload is None else str(payload)
    response.content = b"" if payload is None else b"{}"
    response.json.return_value = payload
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} Error", response=response)
    else:
        response.raise_for_status.return_value = None
    return response


def make_page(values: list[dict[str, Any]], next_url: str | None = None) -> Mock:
    """Build one page of a Bitbucket paginated listing."""
    payload: dict[str, Any] = {"values": values, "pagelen": 10}
    if next_url:
        payload["next"] = next_url
    return make_response(payload)
