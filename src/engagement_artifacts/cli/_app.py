"""The command-line interface for the artifacts service."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from engagement_artifacts.config import Config
from engagement_artifacts.exceptions import ConfigError
from engagement_artifacts.utils import create_service_logger

from ._commands import register_commands
from ._context import CLIContext
from ._shared import ExitCode, exit_with_error

_HELP = "Keep engagement artifacts in sync between a document store and git."


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name="engagement-artifacts",
        help=_HELP,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.meta.default
    def _default(  # pyright: ignore[reportUnusedFunction]
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to config file")
        ] = None,
        quiet: Annotated[bool, Parameter(help="Suppress non-essential output")] = False,
    ) -> None:
        """Launch the CLI with global options.

        Args:
            tokens: Command tokens to pass to subcommands.
            config: Explicit path to a TOML config file.
            quiet: Suppress non-essential output.
        """
        try:
            loaded_config = Config.load(config)
        except ConfigError as e:
            exit_with_error(str(e), ExitCode.LOAD_ERROR, console=error_console)

        ctx = CLIContext(
            config=loaded_config,
            quiet=quiet,
            logger=create_service_logger(loaded_config.logging, component="cli"),
        )
        CLIContext.set_current(ctx)

        try:
            app(tokens)
        finally:
            CLIContext.reset()

    register_commands(app)
    return app


app = create_app()


def main() -> None:
    """Default entrypoint for the `engagement-artifacts` CLI."""
    app.meta()


if __name__ == "__main__":
    main()
