# pyright: reportUnusedCallResult=false
"""API server command."""

from typing import Annotated, Literal

from cyclopts import App, Parameter

from engagement_artifacts.cli._context import CLIContext

app = App(name="serve", help="Run the artifacts API server", help_on_error=True)

LogLevel = Literal["critical", "error", "warning", "info", "debug", "trace"]


@app.default
def serve(
    *,
    host: Annotated[str, Parameter(help="Bind socket to this host.")] = "127.0.0.1",
    port: Annotated[int, Parameter(help="Bind socket to this port.")] = 8080,
    log_level: Annotated[LogLevel, Parameter(help="Uvicorn log level.")] = "info",
    access_log: Annotated[bool, Parameter(help="Enable access log.")] = True,
    timeout_keep_alive: Annotated[
        int,
        Parameter(
            help="Close Keep-Alive connections if no new data received in timeout."
        ),
    ] = 5,
) -> None:
    """Run the artifacts API server using uvicorn."""
    import uvicorn

    from engagement_artifacts.server import create_app

    ctx = CLIContext.get_current()
    if not ctx.quiet:
        print(f"Starting artifacts API server on {host}:{port}")  # noqa: T201
    uvicorn.run(
        create_app(ctx.config),
        host=host,
        port=port,
        log_level=log_level,
        access_log=access_log,
        timeout_keep_alive=timeout_keep_alive,
    )
