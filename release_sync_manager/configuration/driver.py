"""Synchronous driver for configuration reconciliation for the CLI entry point."""

import asyncio

from release_sync_manager.configuration import reconcile
from release_sync_manager.configuration.models import SyncConfig


def get_sync_config(
    default_reviewer: str | None = None,
    base_branches: list[str] | None = None,
    template_repo: str | None = None,
    template_branch: str | None = None,
    template_path: str | None = None,
) -> SyncConfig:
    """Synchronously get the reconciled pull request sync configuration."""
    return asyncio.run(
        reconcile.reconcile_sync_configuration(
            cli_default_reviewer=default_reviewer,
            cli_base_branches=base_branches,
            cli_template_repo=template_repo,
            cli_template_branch=template_branch,
            cli_template_path=template_path,
        )
    )
