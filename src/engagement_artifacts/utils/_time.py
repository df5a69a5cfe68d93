"""Timestamp helpers.

Artifact timestamps are ISO-8601 strings in UTC. They are kept as strings
because snapshot files written by older services use several layouts and
must round-trip untouched.
"""

import pendulum


def utc_now() -> str:
    """Return the current time as an ISO-8601 UTC string."""
    return pendulum.now("UTC").to_iso8601_string()


def not_before(timestamp: str, previous: str | None) -> str:
    """Return ``timestamp``, or ``previous`` if that is later.

    Keeps modification times monotonic when clocks disagree. Timestamps that
    cannot be parsed are treated as older than any parsable one.

    Args:
        timestamp: Candidate timestamp.
        previous: Timestamp already recorded, if any.

    Returns:
        The later of the two timestamps.

    Example:
        >>> not_before("2024-01-01T00:00:00Z", "2025-06-01T00:00:00Z")
        '2025-06-01T00:00:00Z'
    """
    if previous is None:
        return timestamp

    try:
        candidate = pendulum.parse(timestamp)
        recorded = pendulum.parse(previous)
    except ValueError:
        return timestamp

    if not isinstance(candidate, pendulum.DateTime) or not isinstance(
        recorded, pendulum.DateTime
    ):
        return timestamp
    return previous if recorded > candidate else timestamp
