"""Default configuration values.

This module defines the built-in default configuration values that are used
when no other configuration sources provide values.

Note: DEFAULT_CONFIG is a plain dict for type compatibility with deep_merge,
which always returns copies.
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "store": {
        "path": "artifacts.db",
    },
    "repository": {
        "kind": "gitlab",
        "base_url": "https://gitlab.com",
        "token": "",
        "local_root": "repositories",
        "default_branch": "master",
        "artifacts_file": "artifacts.json",
        "engagement_file": "engagement.json",
        "mirror_legacy": True,
        "timeout": 30.0,
    },
    "engagements": {
        "base_url": "http://localhost:8080",
        "timeout": 30.0,
    },
    "commit": {
        "message": "Artifacts updated",
        "author_name": "Artifacts Service",
        "author_email": "artifacts@localhost",
    },
    "retry": {
        "attempts": 3,
        "delay": 0.5,
    },
    "concurrency": {
        "refresh_workers": 8,
        "bulk_workers": 4,
    },
    "paging": {
        "default_page_size": 20,
    },
    "logging": {
        "level": "info",
        "format": "json",
        "file": "",
    },
}
