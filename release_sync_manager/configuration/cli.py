"""Defines the Command Line Interface (CLI) using Typer."""

import asyncio
import sys
from pathlib import Path

import typer
from dotenv import load_dotenv
from typer import Argument, Option
from typing_extensions import Annotated

from release_sync_manager.configuration.driver import get_sync_config
from release_sync_manager.configuration.exceptions import GitHubAuthenticationConfigurationUndefinedError, RequiredConfigurationElementError
from release_sync_manager.configuration.models import EventType, GitHubAuthenticationType
from release_sync_manager.configuration.reconcile import parse_branch_list, validate_github_authentication_configuration
from release_sync_manager.github.adapter import GitHubKitAdapter
from release_sync_manager.release_notes import (
    ReleaseNotesConfigurationError,
    ReleaseNotesSettings,
    ReleaseNotesStatus,
    create_empty_settings_file,
    generate_release_notes,
    load_release_notes_settings,
    write_release_notes,
)
from release_sync_manager.synchronize.driver import run_sync_pr_to_issue_workflow, run_sync_status_workflow
from release_sync_manager.synchronize.exceptions import SyncLookupError
from release_sync_manager.synchronize.results import SyncWorkflowResult

load_dotenv()

typer_app = typer.Typer(pretty_exceptions_show_locals=False)


@typer_app.command(name="init-release-notes-settings")
def init_release_notes_settings_cli(
    settings_path: Annotated[Path, Argument(envvar="RELEASE_NOTES_SETTINGS_PATH", help="Path of the settings file to create.")],
) -> None:
    """Write a skeleton release notes settings file."""
    try:
        path = create_empty_settings_file(settings_path)
    except FileExistsError as e:
        typer.echo(str(e), err=True)
        sys.exit(1)
    typer.echo(f"Created release notes settings file at {path.absolute()}")


# --- Typer group for repository commands ---
repo_app = typer.Typer(help="Repository-related commands")


def repo_callback(
    ctx: typer.Context,
    repo: Annotated[str, Argument(help="Repository name (owner/repo).")],
    github_api_url: Annotated[str, Option(envvar="GITHUB_API_URL", help="GitHub API URL.")] = "https://api.github.com",
    github_pat_token: Annotated[str | None, Option(envvar="GITHUB_PAT_TOKEN", help="GitHub Personal Access Token.")] = None,
    github_app_id: Annotated[int | None, Option(envvar="GITHUB_APP_ID", help="GitHub App ID.")] = None,
    github_app_private_key_path: Annotated[Path | None, Option(envvar="GITHUB_APP_PRIVATE_KEY_PATH", help="Path to GitHub App private key.")] = None,
    github_app_installation_id: Annotated[int | None, Option(envvar="GITHUB_APP_INSTALLATION_ID", help="GitHub App Installation ID.")] = None,
) -> None:
    """Set the repository for the current context."""
    ctx.ensure_object(dict)
    ctx.obj["repo"] = repo
    ctx.obj["github_api_url"] = github_api_url
    ctx.obj["github_pat_token"] = github_pat_token
    ctx.obj["github_app_id"] = github_app_id
    ctx.obj["github_app_private_key_path"] = github_app_private_key_path
    ctx.obj["github_app_installation_id"] = github_app_installation_id
    try:
        github_auth_type = asyncio.run(
            validate_github_authentication_configuration(
                github_pat_token=github_pat_token,
                github_app_id=github_app_id,
                github_app_private_key_path=github_app_private_key_path,
                github_app_installation_id=github_app_installation_id,
            )
        )
    except GitHubAuthenticationConfigurationUndefinedError as e:
        typer.echo(str(e), err=True)
        sys.exit(1)
    ctx.obj["github_auth_type"] = github_auth_type


repo_app.callback()(repo_callback)


async def _create_adapter(ctx: typer.Context) -> GitHubKitAdapter:
    github_auth_type: GitHubAuthenticationType = ctx.obj["github_auth_type"]
    return await GitHubKitAdapter.create(
        repo=ctx.obj["repo"],
        github_auth_type=github_auth_type,
        github_pat_token=ctx.obj["github_pat_token"],
        github_app_id=ctx.obj["github_app_id"],
        github_app_private_key_path=ctx.obj["github_app_private_key_path"],
        github_app_installation_id=ctx.obj["github_app_installation_id"],
        github_api_url=ctx.obj["github_api_url"],
    )


def _report_sync_result(result: SyncWorkflowResult) -> None:
    if result.skipped:
        typer.echo(f"Skipped: {result.skipped_reason}")
        return
    for notice in result.notices:
        typer.echo(notice)
    if result.problems:
        typer.echo(f"Pull request '{result.pull_request_number}' is out of sync with issue '{result.issue_number}':", err=True)
        for problem in result.problems:
            typer.echo(f"  - {problem}", err=True)
        sys.exit(1)
    if result.state is not None:
        typer.echo(f"Sync state: {result.state.value}")


@repo_app.command(name="sync-status")
def sync_status_cli(
    ctx: typer.Context,
    number: Annotated[int, Argument(help="Number of the issue or pull request that triggered the run.")],
    event_type: Annotated[EventType, Argument(envvar="SYNC_EVENT_TYPE", help="Whether an issue or a pull request triggered the run.")],
    default_reviewer: Annotated[str | None, Option(help="Login of the required pull request reviewer.")] = None,
    base_branches: Annotated[str | None, Option(help="Comma separated list of allowed base branches.")] = None,
) -> None:
    """Sync a pull request with its issue (issue events) or check their sync status (pull request events)."""
    try:
        config = get_sync_config(default_reviewer=default_reviewer, base_branches=parse_branch_list(base_branches) or None)
    except RequiredConfigurationElementError as e:
        typer.echo(str(e), err=True)
        sys.exit(1)

    async def _run() -> SyncWorkflowResult:
        adapter = await _create_adapter(ctx)
        return await run_sync_status_workflow(adapter, number, event_type, config)

    try:
        result = asyncio.run(_run())
    except SyncLookupError as e:
        typer.echo(f"Error querying GitHub: {e}", err=True)
        sys.exit(1)
    _report_sync_result(result)


@repo_app.command(name="sync-pr-to-issue")
def sync_pr_to_issue_cli(
    ctx: typer.Context,
    number: Annotated[int, Argument(help="Number of the newly opened pull request.")],
    default_reviewer: Annotated[str | None, Option(help="Login of the required pull request reviewer.")] = None,
    base_branches: Annotated[str | None, Option(help="Comma separated list of allowed base branches.")] = None,
    template_repo: Annotated[str | None, Option(help="Repository (owner/repo) holding the sync template.")] = None,
    template_branch: Annotated[str | None, Option(help="Branch of the sync template repository.")] = None,
    template_path: Annotated[str | None, Option(help="Path of the sync template in its repository.")] = None,
) -> None:
    """Link a newly opened pull request to its issue and apply the sync template."""
    try:
        config = get_sync_config(
            default_reviewer=default_reviewer,
            base_branches=parse_branch_list(base_branches) or None,
            template_repo=template_repo,
            template_branch=template_branch,
            template_path=template_path,
        )
    except RequiredConfigurationElementError as e:
        typer.echo(str(e), err=True)
        sys.exit(1)

    async def _run() -> SyncWorkflowResult:
        adapter = await _create_adapter(ctx)
        return await run_sync_pr_to_issue_workflow(adapter, number, config)

    try:
        result = asyncio.run(_run())
    except SyncLookupError as e:
        typer.echo(f"Error querying GitHub: {e}", err=True)
        sys.exit(1)
    _report_sync_result(result)


@repo_app.command(name="release-notes")
def release_notes_cli(
    ctx: typer.Context,
    settings_path: Annotated[Path, Argument(envvar="RELEASE_NOTES_SETTINGS_PATH", help="Path to the release notes settings file (JSON or YAML).")],
    version: Annotated[str | None, Option(envvar="RELEASE_VERSION", help="Version to generate release notes for (vX.Y.Z).")] = None,
    release_type: Annotated[str | None, Option(envvar="RELEASE_TYPE", help="Release type, one of the configured release type names.")] = None,
    dry_run: Annotated[bool, Option(help="Print the release notes instead of writing them.")] = False,
) -> None:
    """Generate the release notes of a milestone."""
    if not settings_path.exists():
        typer.echo(f"Release notes settings file not found: {settings_path.absolute()}", err=True)
        typer.echo("Run 'init-release-notes-settings' to create one.", err=True)
        sys.exit(1)

    update: dict[str, str] = {}
    if version is not None:
        update["version"] = version
    if release_type is not None:
        update["chosen_release_type"] = release_type

    async def _run(settings: ReleaseNotesSettings):
        adapter = await _create_adapter(ctx)
        return await generate_release_notes(adapter, settings)

    try:
        settings = load_release_notes_settings(settings_path).model_copy(update=update)
        result = asyncio.run(_run(settings))
        if result.status == ReleaseNotesStatus.NO_CONTENT:
            typer.echo(f"No issues or pull requests to list in the release notes for {settings.milestone_name!r}.")
            return
        if dry_run:
            typer.echo(result.content)
            return
        path = write_release_notes(settings, result.content, Path.cwd())
    except ReleaseNotesConfigurationError as e:
        typer.echo(f"Invalid release notes configuration: {e}", err=True)
        sys.exit(1)
    typer.echo(f"Release notes written to {path}")


typer_app.add_typer(repo_app, name="repo")


if __name__ == "__main__":
    typer_app()
