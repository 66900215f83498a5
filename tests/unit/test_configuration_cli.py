"""Unit tests for the Typer command line interface."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

from pytest import MonkeyPatch
from typer.testing import CliRunner

from release_sync_manager.configuration.cli import typer_app
from release_sync_manager.configuration.models import EventType
from release_sync_manager.github.results import Found
from release_sync_manager.schemas.github import IssueRecord, PullRequestRecord
from release_sync_manager.synchronize.models import SyncState
from release_sync_manager.synchronize.results import SyncWorkflowResult

runner = CliRunner()

REPO_ARGS = ["repo", "owner/repo", "--github-pat-token", "token"]


def test_init_release_notes_settings(tmp_path: Path) -> None:
    """Test that the skeleton settings file is created once."""
    path = tmp_path / "settings.json"

    result = runner.invoke(typer_app, ["init-release-notes-settings", str(path)])
    assert result.exit_code == 0
    assert path.exists()

    result = runner.invoke(typer_app, ["init-release-notes-settings", str(path)])
    assert result.exit_code == 1


def test_sync_status_exits_with_problems() -> None:
    """Test that out of sync pull requests fail the command and list every problem."""
    workflow_result = SyncWorkflowResult(
        issue_number=42,
        pull_request_number=7,
        problems=["The pr title 'WIP' does not match with the issue title 'Add export'."],
        state=SyncState.OUT_OF_SYNC,
    )
    with (
        patch("release_sync_manager.configuration.cli.GitHubKitAdapter.create", new=AsyncMock()),
        patch("release_sync_manager.configuration.cli.run_sync_status_workflow", new=AsyncMock(return_value=workflow_result)) as mock_workflow,
    ):
        result = runner.invoke(typer_app, [*REPO_ARGS, "sync-status", "7", "pr", "--default-reviewer", "reviewer"])

    assert result.exit_code == 1
    assert "The pr title 'WIP' does not match with the issue title 'Add export'." in result.output
    _, number, event_type, config = mock_workflow.await_args.args
    assert number == 7
    assert event_type == EventType.PULL_REQUEST
    assert config.default_reviewer == "reviewer"


def test_sync_status_reports_skip() -> None:
    """Test that a skipped run succeeds and says why."""
    workflow_result = SyncWorkflowResult(issue_number=42, skipped_reason="The issue '42' is not linked to a pull request.")
    with (
        patch("release_sync_manager.configuration.cli.GitHubKitAdapter.create", new=AsyncMock()),
        patch("release_sync_manager.configuration.cli.run_sync_status_workflow", new=AsyncMock(return_value=workflow_result)),
    ):
        result = runner.invoke(typer_app, [*REPO_ARGS, "sync-status", "42", "issue", "--default-reviewer", "reviewer"])

    assert result.exit_code == 0
    assert "Skipped: The issue '42' is not linked to a pull request." in result.output


def test_release_notes_requires_settings_file(tmp_path: Path) -> None:
    """Test that a missing settings file fails with a hint."""
    result = runner.invoke(typer_app, [*REPO_ARGS, "release-notes", str(tmp_path / "missing.json")])
    assert result.exit_code == 1
    assert "init-release-notes-settings" in result.output


def test_sync_pr_to_issue_reports_ambiguous_link() -> None:
    """Test that an issue with several closed-by-pr markers is reported instead of crashing the command."""
    adapter = AsyncMock()
    adapter.find_pull_request.return_value = Found(
        PullRequestRecord.model_validate({"number": 7, "title": "Add export", "head": {"ref": "feature/42-add-export"}, "base": {"ref": "main"}})
    )
    adapter.find_issue.return_value = Found(
        IssueRecord.model_validate({"number": 42, "title": "Add export", "body": "<!--closed-by-pr:1-->\n<!--closed-by-pr:2-->"})
    )
    with patch("release_sync_manager.configuration.cli.GitHubKitAdapter.create", new=AsyncMock(return_value=adapter)):
        result = runner.invoke(typer_app, [*REPO_ARGS, "sync-pr-to-issue", "7", "--default-reviewer", "reviewer"])

    assert result.exit_code == 0
    assert "Skipped: Found 2 closed-by-pr markers in the issue body, expected at most one." in result.output
    adapter.add_pull_request_to_project.assert_not_awaited()
    adapter.update_issue.assert_not_awaited()


def test_release_notes_reports_invalid_settings(tmp_path: Path) -> None:
    """Test that a settings file with a wrongly typed setting fails with the setting named."""
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"boldedVersions": "notabool"}), encoding="utf-8")

    with patch("release_sync_manager.configuration.cli.GitHubKitAdapter.create", new=AsyncMock()) as mock_create:
        result = runner.invoke(typer_app, [*REPO_ARGS, "release-notes", str(path)])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "boldedVersions" in result.output
    mock_create.assert_not_awaited()


def test_repo_commands_require_github_authentication(clean_env: MonkeyPatch) -> None:
    """Test that repository commands fail with a hint when no GitHub authentication is configured."""
    with patch("release_sync_manager.configuration.cli.run_sync_status_workflow", new=AsyncMock()) as mock_workflow:
        result = runner.invoke(typer_app, ["repo", "owner/repo", "sync-status", "7", "pr", "--default-reviewer", "reviewer"])

    assert result.exit_code == 1
    assert "No GitHub authentication configured." in result.output
    mock_workflow.assert_not_awaited()


def test_repo_commands_reject_partial_github_app(clean_env: MonkeyPatch) -> None:
    """Test that a GitHub App configuration missing its installation ID is rejected before any command runs."""
    result = runner.invoke(
        typer_app,
        ["repo", "owner/repo", "--github-app-id", "123", "--github-app-private-key-path", "app.pem", "sync-status", "7", "pr"],
    )

    assert result.exit_code == 1
    assert "--github-app-installation-id or GITHUB_APP_INSTALLATION_ID" in result.output
