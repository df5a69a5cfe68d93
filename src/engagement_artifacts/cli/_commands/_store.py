# pyright: reportUnusedCallResult=false
"""Document store maintenance commands."""

from functools import partial
from typing import Annotated

import anyio
from cyclopts import Parameter
from rich.console import Console
from rich.table import Table

from engagement_artifacts.cli._context import CLIContext
from engagement_artifacts.cli._shared import ExitCode, exit_with_error
from engagement_artifacts.config import Config
from engagement_artifacts.exceptions import RemoteError, StoreError
from engagement_artifacts.service import RefreshResult, open_services


async def _refresh(config: Config, *, purge: bool) -> RefreshResult:
    async with open_services(config) as services:
        if purge:
            return await services.refresh.rebuild()
        return await services.refresh.refresh()


async def _purge(config: Config) -> int:
    async with open_services(config) as services:
        return await services.refresh.purge()


def refresh(
    *,
    purge: Annotated[
        bool, Parameter(help="Remove all artifacts before refreshing.")
    ] = True,
) -> None:
    """Rebuild the document store from every engagement's snapshot.

    Exits with a non-zero code if any engagement failed to refresh.

    Args:
        purge: Remove all artifacts first.
    """
    ctx = CLIContext.get_current()
    console = Console()
    try:
        result = anyio.run(partial(_refresh, ctx.config, purge=purge))
    except RemoteError as e:
        exit_with_error(f"Cannot list engagements: {e}", ExitCode.REMOTE_ERROR)
    except StoreError as e:
        exit_with_error(str(e), ExitCode.STORE_ERROR)

    if not ctx.quiet:
        console.print(
            f"Refreshed {result.refreshed} engagements, {result.total} artifacts in store"
        )
    if result.failed:
        table = Table("Engagement", "Error", title="Failed engagements")
        for engagement_uuid, message in sorted(result.failed.items()):
            table.add_row(engagement_uuid, message)
        console.print(table)
        raise SystemExit(ExitCode.PARTIAL_FAILURE)


def purge() -> None:
    """Remove every artifact from the document store."""
    ctx = CLIContext.get_current()
    try:
        removed = anyio.run(_purge, ctx.config)
    except StoreError as e:
        exit_with_error(str(e), ExitCode.STORE_ERROR)
    if not ctx.quiet:
        Console().print(f"Removed {removed} artifacts")
