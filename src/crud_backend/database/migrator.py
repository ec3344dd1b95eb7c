"""
Versioned schema migrations

Migration steps are SQL files named <14-digit timestamp>_<name>.sql with an
"-- +migrate Up" section and an optional "-- +migrate Down" section. Applied
steps are recorded in the schema_migrations ledger table. Each step runs in
its own transaction together with its ledger row, so a failing step leaves
the ledger consistent with what was committed.
"""

import logging
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import asyncpg

logger = logging.getLogger(__name__)

DEFAULT_MIGRATIONS_DIR = Path(__file__).parent / "migrations"
LEDGER_TABLE = "schema_migrations"
UP_MARKER = "-- +migrate Up"
DOWN_MARKER = "-- +migrate Down"
MIGRATION_FILE_RE = re.compile(r"^(\d{14})_([A-Za-z0-9_]+)\.sql$")

# Arbitrary constant identifying this service's migration lock
ADVISORY_LOCK_ID = 5_526_102_337

CREATE_LEDGER_SQL = f"""
CREATE TABLE IF NOT EXISTS {LEDGER_TABLE} (
    version BIGINT PRIMARY KEY,
    name VARCHAR(255) NOT NULL,
    applied_at TIMESTAMPTZ NOT NULL DEFAULT now()
)
"""


class MigrationError(Exception):
    """Raised for malformed migration files, failed steps or pending migrations"""


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    up_sql: str
    down_sql: str = ""

    @property
    def label(self) -> str:
        return f"{self.version}_{self.name}"


@dataclass
class MigrationStatus:
    applied: List[Migration] = field(default_factory=list)
    pending: List[Migration] = field(default_factory=list)
    # Versions recorded in the ledger with no matching file
    unknown: Dict[int, str] = field(default_factory=dict)

    @property
    def is_up_to_date(self) -> bool:
        return not self.pending


def parse_migration(path: Path) -> Migration:
    """Parse a single migration file into its up and down scripts"""
    match = MIGRATION_FILE_RE.match(path.name)
    if not match:
        raise MigrationError(f"Invalid migration file name: {path.name}")

    text = path.read_text(encoding="utf-8")
    up_index = text.find(UP_MARKER)
    if up_index == -1:
        raise MigrationError(f"Migration {path.name} has no '{UP_MARKER}' section")

    down_index = text.find(DOWN_MARKER)
    if down_index != -1 and down_index < up_index:
        raise MigrationError(f"Migration {path.name} has its Down section before its Up section")

    if down_index == -1:
        up_sql = text[up_index + len(UP_MARKER):]
        down_sql = ""
    else:
        up_sql = text[up_index + len(UP_MARKER):down_index]
        down_sql = text[down_index + len(DOWN_MARKER):]

    up_sql = up_sql.strip()
    if not up_sql:
        raise MigrationError(f"Migration {path.name} has an empty Up section")

    return Migration(
        version=int(match.group(1)),
        name=match.group(2),
        up_sql=up_sql,
        down_sql=down_sql.strip(),
    )


def load_migrations(directory: Union[str, Path, None] = None) -> List[Migration]:
    """Load all migration files from a directory, sorted by version"""
    directory = Path(directory) if directory is not None else DEFAULT_MIGRATIONS_DIR
    if not directory.is_dir():
        raise MigrationError(f"Migrations directory not found: {directory}")

    migrations: Dict[int, Migration] = {}
    for path in sorted(directory.glob("*.sql")):
        migration = parse_migration(path)
        if migration.version in migrations:
            raise MigrationError(
                f"Duplicate migration version {migration.version}: "
                f"{migrations[migration.version].label} and {migration.label}"
            )
        migrations[migration.version] = migration

    return [migrations[v] for v in sorted(migrations)]


class Migrator:
    """Applies and reverts migrations over a single connection"""

    def __init__(self, conn: asyncpg.Connection, migrations: Optional[List[Migration]] = None):
        self.conn = conn
        self.migrations = migrations if migrations is not None else load_migrations()

    async def ensure_ledger(self):
        await self.conn.execute(CREATE_LEDGER_SQL)

    async def ledger_exists(self) -> bool:
        return await self.conn.fetchval(f"SELECT to_regclass('{LEDGER_TABLE}')") is not None

    async def applied_versions(self) -> Dict[int, str]:
        """Read the ledger without creating it; a missing ledger means nothing is applied"""
        if not await self.ledger_exists():
            return {}
        rows = await self.conn.fetch(f"SELECT version, name FROM {LEDGER_TABLE} ORDER BY version ASC")
        return {row["version"]: row["name"] for row in rows}

    async def status(self) -> MigrationStatus:
        applied = await self.applied_versions()
        known = {m.version for m in self.migrations}
        return MigrationStatus(
            applied=[m for m in self.migrations if m.version in applied],
            pending=[m for m in self.migrations if m.version not in applied],
            unknown={v: name for v, name in applied.items() if v not in known},
        )

    async def pending(self) -> List[Migration]:
        return (await self.status()).pending

    async def ensure_up_to_date(self):
        """Raise MigrationError when any known migration has not been applied"""
        pending = await self.pending()
        if pending:
            labels = ", ".join(m.label for m in pending)
            raise MigrationError(f"{len(pending)} pending migration(s): {labels}")

    @asynccontextmanager
    async def _locked(self):
        await self.conn.execute("SELECT pg_advisory_lock($1)", ADVISORY_LOCK_ID)
        try:
            yield
        finally:
            await self.conn.execute("SELECT pg_advisory_unlock($1)", ADVISORY_LOCK_ID)

    async def upgrade(self) -> List[Migration]:
        """
        Apply all pending migrations in ascending version order

        Returns:
            The migrations applied by this run (empty when already up to date)
        """
        applied_now: List[Migration] = []
        async with self._locked():
            await self.ensure_ledger()
            for migration in await self.pending():
                logger.info(f"Applying migration {migration.label}")
                try:
                    async with self.conn.transaction():
                        await self.conn.execute(migration.up_sql)
                        await self.conn.execute(
                            f"INSERT INTO {LEDGER_TABLE} (version, name) VALUES ($1, $2)",
                            migration.version,
                            migration.name,
                        )
                except Exception as e:
                    logger.error(f"Migration {migration.label} failed: {e}")
                    raise MigrationError(f"Migration {migration.label} failed: {e}") from e
                applied_now.append(migration)

        logger.info(f"Applied {len(applied_now)} migration(s)")
        return applied_now

    async def downgrade(self, steps: int = 1) -> List[Migration]:
        """Revert the most recently applied migrations, newest first"""
        if steps < 1:
            raise MigrationError(f"steps must be >= 1, got {steps}")

        by_version = {m.version: m for m in self.migrations}
        reverted: List[Migration] = []
        async with self._locked():
            applied = await self.applied_versions()
            for version in sorted(applied, reverse=True)[:steps]:
                migration = by_version.get(version)
                if migration is None:
                    raise MigrationError(f"No migration file for applied version {version}_{applied[version]}")
                if not migration.down_sql:
                    raise MigrationError(f"Migration {migration.label} is not reversible")

                logger.info(f"Reverting migration {migration.label}")
                try:
                    async with self.conn.transaction():
                        await self.conn.execute(migration.down_sql)
                        await self.conn.execute(
                            f"DELETE FROM {LEDGER_TABLE} WHERE version = $1", migration.version
                        )
                except Exception as e:
                    logger.error(f"Reverting {migration.label} failed: {e}")
                    raise MigrationError(f"Reverting {migration.label} failed: {e}") from e
                reverted.append(migration)

        logger.info(f"Reverted {len(reverted)} migration(s)")
        return reverted


@asynccontextmanager
async def connect_migrator(database_url: str, migrations_dir: Union[str, Path, None] = None):
    """Open a dedicated connection and yield a Migrator bound to it"""
    conn = await asyncpg.connect(database_url)
    try:
        yield Migrator(conn, load_migrations(migrations_dir))
    finally:
        await conn.close()
