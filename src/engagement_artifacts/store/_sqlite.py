"""SQLite-backed artifact store.

Each operation opens its own connection inside an anyio worker thread, runs
in a single transaction, and closes the connection again. Column names match
the snake_case Artifact attribute names so rows validate straight into the
model.
"""

import sqlite3
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager, suppress
from pathlib import Path
from typing import Final, cast

import anyio.to_thread

from engagement_artifacts.artifacts import Artifact, ArtifactCount
from engagement_artifacts.exceptions import StoreError
from engagement_artifacts.store._models import (
    STORE_FIELDS,
    ArtifactQuery,
    SortDirection,
    SortField,
)

_SCHEMA: Final = """
CREATE TABLE IF NOT EXISTS artifacts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid TEXT NOT NULL UNIQUE,
    engagement_uuid TEXT,
    title TEXT,
    description TEXT,
    type TEXT,
    link_address TEXT,
    region TEXT,
    created TEXT,
    modified TEXT
);
CREATE INDEX IF NOT EXISTS artifacts_engagement_uuid ON artifacts (engagement_uuid);
CREATE INDEX IF NOT EXISTS artifacts_type ON artifacts (type);
CREATE INDEX IF NOT EXISTS artifacts_region ON artifacts (region);
"""

# Data columns in insertion order (id is assigned by SQLite)
_COLUMNS: Final = (
    "uuid",
    "engagement_uuid",
    "title",
    "description",
    "type",
    "link_address",
    "region",
    "created",
    "modified",
)

type SQLValue = str | int | None


def _column(name: str) -> str:
    """Quote a column name after checking it against the artifact fields.

    Raises:
        StoreError: If the name is not an artifact column.
    """
    if name not in STORE_FIELDS:
        msg = f"Unknown artifact field '{name}'"
        raise StoreError(msg)
    return f'"{name}"'


def _where(query: ArtifactQuery) -> tuple[str, list[SQLValue]]:
    clauses: list[str] = []
    params: list[SQLValue] = []
    if query.engagement_uuid is not None:
        clauses.append('"engagement_uuid" = ?')
        params.append(query.engagement_uuid)
    if query.type is not None:
        clauses.append('"type" = ?')
        params.append(query.type)
    if query.regions:
        placeholders = ", ".join("?" for _ in query.regions)
        clauses.append(f'"region" IN ({placeholders})')
        params.extend(query.regions)
    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


def _order_by(sort: Sequence[SortField]) -> str:
    if not sort:
        return ' ORDER BY "id"'
    keys = ", ".join(
        f"{_column(s.field)} {'DESC' if s.direction is SortDirection.DESC else 'ASC'}"
        for s in sort
    )
    return f" ORDER BY {keys}"


class SqliteArtifactStore:
    """Artifact store persisted in a SQLite database file.

    Attributes:
        path: Location of the database file.
    """

    __slots__: Final = ("_path", "_timeout")

    def __init__(self, path: Path | str, *, timeout: float = 30.0) -> None:
        """Initialize the store.

        Args:
            path: Database file path. Parent directories are created on
                ``initialize``.
            timeout: Seconds to wait for a database lock.
        """
        self._path: Path = Path(path)
        self._timeout: float = timeout

    @property
    def path(self) -> Path:
        """Location of the database file."""
        return self._path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection with commit-on-success, rollback-on-error.

        Yields:
            Connection with ``sqlite3.Row`` row factory.

        Raises:
            StoreError: If SQLite reports any error.
        """
        try:
            conn = sqlite3.connect(
                self._path, timeout=self._timeout, isolation_level="IMMEDIATE"
            )
        except sqlite3.Error as e:
            msg = f"Cannot open artifact database {self._path}: {e}"
            raise StoreError(msg) from e

        conn.row_factory = sqlite3.Row
        with suppress(sqlite3.OperationalError):
            _ = conn.execute("PRAGMA journal_mode=WAL")
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            with suppress(sqlite3.Error):
                conn.rollback()
            msg = f"Artifact database error: {e}"
            raise StoreError(msg) from e
        except BaseException:
            with suppress(sqlite3.Error):
                conn.rollback()
            raise
        finally:
            conn.close()

    async def _run[T](self, func: Callable[[sqlite3.Connection], T]) -> T:
        def _call() -> T:
            with self._connect() as conn:
                return func(conn)

        return await anyio.to_thread.run_sync(_call)

    def initialize(self) -> None:
        """Create the database file and schema if missing."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            _ = conn.executescript(_SCHEMA)

    # =========================================================================
    # ArtifactStoreProtocol Methods
    # =========================================================================

    async def find_by_uuid(self, uuid: str) -> Artifact | None:
        def _find(conn: sqlite3.Connection) -> Artifact | None:
            row = cast(
                "sqlite3.Row | None",
                conn.execute('SELECT * FROM artifacts WHERE "uuid" = ?', (uuid,)).fetchone(),
            )
            return None if row is None else Artifact.model_validate(dict(row))

        return await self._run(_find)

    async def list_by_engagement(self, engagement_uuid: str) -> list[Artifact]:
        return await self._select(
            'SELECT * FROM artifacts WHERE "engagement_uuid" = ? ORDER BY "id"',
            (engagement_uuid,),
        )

    async def create(self, artifact: Artifact) -> Artifact:
        if not artifact.uuid:
            msg = "Cannot store an artifact without a uuid"
            raise StoreError(msg)

        values = tuple(getattr(artifact, column) for column in _COLUMNS)
        columns = ", ".join(f'"{column}"' for column in _COLUMNS)
        placeholders = ", ".join("?" for _ in _COLUMNS)

        def _insert(conn: sqlite3.Connection) -> int:
            cursor = conn.execute(
                f"INSERT INTO artifacts ({columns}) VALUES ({placeholders})",  # noqa: S608
                values,
            )
            return cursor.lastrowid or 0

        row_id = await self._run(_insert)
        return artifact.model_copy(update={"id": row_id})

    async def update(self, artifact: Artifact) -> Artifact:
        if artifact.id is None:
            msg = f"Artifact '{artifact.uuid}' has no store id"
            raise StoreError(msg)

        assignments = ", ".join(f'"{column}" = ?' for column in _COLUMNS)
        values = (*(getattr(artifact, column) for column in _COLUMNS), artifact.id)

        def _update(conn: sqlite3.Connection) -> int:
            cursor = conn.execute(
                f'UPDATE artifacts SET {assignments} WHERE "id" = ?',  # noqa: S608
                values,
            )
            return cursor.rowcount

        if await self._run(_update) != 1:
            msg = f"No stored artifact with id {artifact.id}"
            raise StoreError(msg)
        return artifact

    async def delete_by_uuid(self, uuid: str) -> int:
        return await self._execute('DELETE FROM artifacts WHERE "uuid" = ?', (uuid,))

    async def delete_all(self) -> int:
        return await self._execute("DELETE FROM artifacts", ())

    async def find(
        self,
        query: ArtifactQuery,
        *,
        page: int,
        page_size: int,
        sort: Sequence[SortField],
    ) -> list[Artifact]:
        where, params = _where(query)
        sql = f"SELECT * FROM artifacts{where}{_order_by(sort)} LIMIT ? OFFSET ?"  # noqa: S608
        return await self._select(sql, (*params, page_size, page * page_size))

    async def count(self, query: ArtifactQuery) -> int:
        where, params = _where(query)

        def _count(conn: sqlite3.Connection) -> int:
            row = cast(
                "sqlite3.Row",
                conn.execute(f"SELECT COUNT(*) FROM artifacts{where}", params).fetchone(),  # noqa: S608
            )
            return cast("int", row[0])

        return await self._run(_count)

    async def count_by_field(
        self,
        field: str,
        *,
        regions: Sequence[str] = (),
    ) -> list[ArtifactCount]:
        column = _column(field)
        where, params = _where(ArtifactQuery(regions=tuple(regions)))
        where = f"{where} AND" if where else " WHERE"
        sql = (
            f"SELECT {column} AS group_key, COUNT(*) AS total FROM artifacts"  # noqa: S608
            f"{where} {column} IS NOT NULL GROUP BY {column} ORDER BY total DESC, group_key ASC"
        )

        def _group(conn: sqlite3.Connection) -> list[ArtifactCount]:
            rows = cast("list[sqlite3.Row]", conn.execute(sql, params).fetchall())
            return [ArtifactCount(count=row["total"], type=row["group_key"]) for row in rows]

        return await self._run(_group)

    # =========================================================================
    # Private Helper Methods
    # =========================================================================

    async def _select(self, sql: str, params: Sequence[SQLValue]) -> list[Artifact]:
        def _fetch(conn: sqlite3.Connection) -> list[Artifact]:
            rows = cast("list[sqlite3.Row]", conn.execute(sql, tuple(params)).fetchall())
            return [Artifact.model_validate(dict(row)) for row in rows]

        return await self._run(_fetch)

    async def _execute(self, sql: str, params: Sequence[SQLValue]) -> int:
        def _exec(conn: sqlite3.Connection) -> int:
            return conn.execute(sql, tuple(params)).rowcount

        return await self._run(_exec)
