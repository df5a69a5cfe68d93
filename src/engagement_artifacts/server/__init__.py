"""HTTP API for artifact queries, updates and refreshes.

Example:
    >>> import uvicorn
    >>> from engagement_artifacts.server import create_app
    >>> uvicorn.run(create_app(), port=8080)
"""

from ._app import create_app
from ._errors import ERROR_STATUS, install_error_handlers

__all__ = ["ERROR_STATUS", "create_app", "install_error_handlers"]
