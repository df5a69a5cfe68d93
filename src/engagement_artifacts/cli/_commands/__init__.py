"""Artifacts CLI commands."""
# pyright: reportUnusedCallResult=false

from cyclopts import App

from ._serve import app as serve_app
from ._store import purge, refresh

__all__ = ["register_commands"]


def register_commands(app: App) -> None:
    app.command(serve_app)
    app.command(refresh)
    app.command(purge)
