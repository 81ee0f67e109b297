"""
Versioned schema migrator for the inventory database.

Applies `vNNN_name.sql` files from this directory in order, records each
version and checksum in schema_migrations, and restores a file backup when a
run fails.
"""

import hashlib
import re
import shutil
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import aiosqlite

from src.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

_FILENAME = re.compile(r"v(\d+)_(.+)\.sql")

REQUIRED_TABLES = (
    "products",
    "warehouses",
    "user_profiles",
    "inventory",
    "cost_layers",
    "stock_movements",
    "stock_reservations",
    "reorder_alerts",
    "stock_transfers",
    "purchase_orders",
    "purchase_order_lines",
    "schema_migrations",
)


@dataclass
class MigrationInfo:
    """A migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME.fullmatch(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")

        digest = hashlib.sha256(path.read_bytes()).hexdigest()
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=digest[:16])


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


@dataclass
class MigrationStatus:
    exists: bool
    current_version: str | None = None
    applied: list[str] = field(default_factory=list)
    pending: list[str] = field(default_factory=list)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Map applied versions to the checksum recorded when they ran."""
    try:
        cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    except aiosqlite.OperationalError:
        # Fresh database: the first migration creates the table
        return {}
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await get_applied_migrations(conn)
    return max(applied) if applied else None


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> list[MigrationInfo]:
    """Migration files in version order; misnamed files are skipped."""
    found = []
    for path in sorted(directory.glob("v*.sql")):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return found


async def apply_migration(
    conn: aiosqlite.Connection,
    migration: MigrationInfo,
) -> MigrationResult:
    """Run one migration script and record it."""
    logger.info("applying_migration", version=migration.version, name=migration.name)
    start = time.monotonic()

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        await conn.execute(
            "INSERT OR REPLACE INTO schema_migrations "
            "(version, name, checksum, execution_time_ms) VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, _elapsed_ms(start)),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error(
            "migration_failed",
            version=migration.version,
            name=migration.name,
            error=str(e),
        )
        return MigrationResult(
            migration.version, migration.name, False, _elapsed_ms(start), error=str(e)
        )

    elapsed = _elapsed_ms(start)
    logger.info(
        "migration_applied",
        version=migration.version,
        name=migration.name,
        execution_time_ms=elapsed,
    )
    return MigrationResult(migration.version, migration.name, True, elapsed)


async def _foreign_key_violations(conn: aiosqlite.Connection) -> int:
    cursor = await conn.execute("PRAGMA foreign_key_check")
    return len(await cursor.fetchall())


def create_backup(db_path: Path) -> Path:
    """Copy the database file aside before migrating."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_suffix(f".backup_{stamp}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.warning("database_restored_from_backup", backup_path=str(backup_path))


async def _apply_pending(conn: aiosqlite.Connection) -> list[MigrationResult]:
    applied = await get_applied_migrations(conn)
    results: list[MigrationResult] = []

    for migration in discover_migrations():
        recorded = applied.get(migration.version)
        if recorded is not None:
            if recorded != migration.checksum:
                # Applied files are immutable; ship a new version instead
                logger.error("migration_checksum_changed", version=migration.version)
            continue

        result = await apply_migration(conn, migration)
        results.append(result)
        if not result.success:
            break

        violations = await _foreign_key_violations(conn)
        if violations:
            logger.error(
                "post_migration_validation_failed",
                version=migration.version,
                foreign_key_violations=violations,
            )
            result.success = False
            result.error = f"{violations} foreign key violations"
            break

    return results


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Apply all pending migrations.

    Args:
        db_path: Path to database file (default from settings)
        create_backup_before: Whether to back up an existing file first

    Returns:
        Results for the migrations attempted in this run; empty when the
        schema is already current.
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    backup_path = None
    if create_backup_before and db_path.exists():
        backup_path = create_backup(db_path)

    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")
            results = await _apply_pending(conn)
    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))
        if backup_path is not None:
            restore_backup(db_path, backup_path)
        raise

    if backup_path is not None:
        if all(r.success for r in results):
            backup_path.unlink()
        else:
            restore_backup(db_path, backup_path)

    if not results:
        logger.debug("schema_up_to_date", db_path=str(db_path))
    return results


run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> MigrationStatus:
    """Report applied and pending migration versions."""
    db_path = db_path or get_settings().storage.db_path
    versions = [m.version for m in discover_migrations()]

    if not db_path.exists():
        return MigrationStatus(exists=False, pending=versions)

    async with aiosqlite.connect(db_path) as conn:
        applied = await get_applied_migrations(conn)

    return MigrationStatus(
        exists=True,
        current_version=max(applied) if applied else None,
        applied=sorted(applied),
        pending=[v for v in versions if v not in applied],
    )


async def verify_schema_integrity(db_path: Path | None = None) -> dict[str, list[str]]:
    """
    Run SQLite's integrity checks and confirm the inventory tables exist.

    Returns a mapping of failed check name to problems; empty when healthy.
    """
    db_path = db_path or get_settings().storage.db_path
    problems: dict[str, list[str]] = {}

    async with aiosqlite.connect(db_path) as conn:
        violations = await _foreign_key_violations(conn)
        if violations:
            problems["foreign_keys"] = [f"{violations} violations"]

        cursor = await conn.execute("PRAGMA integrity_check")
        rows = [row[0] for row in await cursor.fetchall()]
        if rows != ["ok"]:
            problems["integrity"] = rows

        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        tables = {row[0] for row in await cursor.fetchall()}
        missing = [t for t in REQUIRED_TABLES if t not in tables]
        if missing:
            problems["required_tables"] = missing

    return problems
