# pyright: reportUnusedCallResult=false
"""CLI context for global state management.

The CLIContext is set once at CLI startup by the meta command and read by
every command through a context variable.
"""

import contextvars
from dataclasses import dataclass, field

from structlog.typing import FilteringBoundLogger

from engagement_artifacts.config import Config

_current_cli_context: contextvars.ContextVar["CLIContext | None"] = (
    contextvars.ContextVar("cli_context", default=None)
)


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Global CLI context with configuration and options.

    Attributes:
        config: Loaded configuration object.
        quiet: Suppress non-essential output.
        logger: Structured logger for CLI commands.
    """

    config: Config = field(repr=False)
    quiet: bool = False
    logger: FilteringBoundLogger | None = field(default=None, repr=False)

    @classmethod
    def get_current(cls) -> "CLIContext":
        """Get the active CLIContext, or one built from defaults if none is set."""
        ctx = _current_cli_context.get()
        if ctx is not None:
            return ctx
        return cls(config=Config())

    @classmethod
    def set_current(cls, ctx: "CLIContext") -> None:
        _current_cli_context.set(ctx)

    @classmethod
    def reset(cls) -> None:
        """Reset to default context (mainly for tests)."""
        _current_cli_context.set(None)
