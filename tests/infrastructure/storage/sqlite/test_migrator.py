"""Tests for the schema migrator."""

from pathlib import Path
from unittest.mock import patch

import aiosqlite
import pytest

import src.infrastructure.storage.sqlite.migrations.migrator as migrator_module
from src.infrastructure.storage.sqlite.migrations.migrator import (
    REQUIRED_TABLES,
    MigrationInfo,
    discover_migrations,
    get_migration_status,
    initialize_database,
    verify_schema_integrity,
)


@pytest.fixture
def patched_settings(storage_settings):
    with patch.object(migrator_module, "get_settings", return_value=storage_settings):
        yield storage_settings


class TestDiscovery:
    def test_discovers_packaged_migrations(self):
        migrations = discover_migrations()
        assert migrations[0].version == "001"
        assert migrations[0].name == "inventory_core"
        assert len(migrations[0].checksum) == 16

    def test_invalid_filenames_are_skipped(self, tmp_path: Path):
        (tmp_path / "v002_second.sql").write_text("SELECT 1;")
        (tmp_path / "v001_first.sql").write_text("SELECT 1;")
        (tmp_path / "vnext.sql").write_text("SELECT 1;")

        assert [m.version for m in discover_migrations(tmp_path)] == ["001", "002"]

    def test_from_file_rejects_bad_name(self, tmp_path: Path):
        path = tmp_path / "schema.sql"
        path.write_text("")
        with pytest.raises(ValueError):
            MigrationInfo.from_file(path)


class TestInitializeDatabase:
    async def test_fresh_database(self, temp_db_path: Path, patched_settings):
        results = await initialize_database(temp_db_path, create_backup_before=False)

        assert [r.version for r in results] == ["001"]
        assert all(r.success for r in results)

        assert await verify_schema_integrity(temp_db_path) == {}

    async def test_second_run_is_noop(self, temp_db_path: Path, patched_settings):
        await initialize_database(temp_db_path, create_backup_before=False)
        assert await initialize_database(temp_db_path, create_backup_before=False) == []

    async def test_changed_checksum_is_not_reapplied(self, temp_db_path: Path, patched_settings):
        await initialize_database(temp_db_path, create_backup_before=False)
        async with aiosqlite.connect(temp_db_path) as conn:
            await conn.execute("UPDATE schema_migrations SET checksum = 'stale'")
            await conn.commit()

        assert await initialize_database(temp_db_path, create_backup_before=False) == []

    async def test_backup_removed_after_success(self, temp_db_path: Path, patched_settings):
        await initialize_database(temp_db_path, create_backup_before=False)

        await initialize_database(temp_db_path, create_backup_before=True)

        assert list(temp_db_path.parent.glob("*.backup_*")) == []


class TestStatus:
    async def test_missing_database(self, tmp_path: Path, patched_settings):
        status = await get_migration_status(tmp_path / "absent.db")
        assert status.exists is False
        assert status.pending == ["001"]

    async def test_migrated_database(self, temp_db_path: Path, patched_settings):
        await initialize_database(temp_db_path, create_backup_before=False)

        status = await get_migration_status(temp_db_path)

        assert status.current_version == "001"
        assert status.pending == []


def test_required_tables_cover_inventory_core():
    for table in ("inventory", "cost_layers", "stock_movements", "stock_reservations"):
        assert table in REQUIRED_TABLES


async def test_verify_reports_missing_tables(temp_db_path: Path, patched_settings):
    async with aiosqlite.connect(temp_db_path) as conn:
        await conn.execute("CREATE TABLE products (id TEXT PRIMARY KEY)")
        await conn.commit()

    problems = await verify_schema_integrity(temp_db_path)

    assert "inventory" in problems["required_tables"]
    assert "products" not in problems["required_tables"]
