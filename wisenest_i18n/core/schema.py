"""
Schema setup and upgrades for the translation table.

Record reads and writes live in core/database.py.
"""

import sqlite3

from wisenest_i18n.core.database import TranslationStore
from wisenest_i18n.logger import get_logger

logger = get_logger(__name__)

DB_VERSION = 2  # Increment when schema changes (added updated_at and review index in v2)


def get_db_version(store: TranslationStore) -> int:
    """Schema version stamped in db_version; 0 when never stamped."""
    try:
        with store.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT version FROM db_version LIMIT 1")
            row = cursor.fetchone()
            return row[0] if row else 0
    except sqlite3.OperationalError:
        return 0


def set_db_version(store: TranslationStore, version: int):
    """Stamp the schema version."""
    with store.connection() as conn:
        cursor = conn.cursor()
        cursor.execute("CREATE TABLE IF NOT EXISTS db_version (version INTEGER)")
        cursor.execute("DELETE FROM db_version")
        cursor.execute("INSERT INTO db_version (version) VALUES (?)", (version,))


def _table_exists(store: TranslationStore, table: str) -> bool:
    with store.connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?", (table,))
        return cursor.fetchone() is not None


def initialize_database(store: TranslationStore):
    """Create the translation table on first run, or bring an existing one up to DB_VERSION."""
    if _table_exists(store, "i18n_translations"):
        current_version = get_db_version(store)
        if current_version < DB_VERSION:
            migrate_database(store, current_version, DB_VERSION)
        else:
            try:
                ensure_all_schemas(store)
            except sqlite3.Error as e:
                logger.warning(f"Failed to verify translation schema: {e}")
        return

    store.db_file.parent.mkdir(parents=True, exist_ok=True)
    with store.connection() as conn:
        cursor = conn.cursor()

        cursor.execute("""
        CREATE TABLE i18n_translations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            lang TEXT NOT NULL,
            key TEXT NOT NULL,
            value TEXT NOT NULL,
            role TEXT NOT NULL DEFAULT 'ui',
            is_override INTEGER DEFAULT 0,
            needs_review INTEGER DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """)

    ensure_translations_schema(store)
    ensure_database_indexes(store)
    set_db_version(store, DB_VERSION)
    logger.info(f"Database initialized at {store.db_file}")


# ============================================================
# Database Schema Validation
# ============================================================

def ensure_translations_schema(store: TranslationStore):
    """
    Ensure i18n_translations has all required columns and constraints.
    - Add columns introduced after the first release
    - Remove duplicate (lang, key) rows, keeping the most recent one
    - Add unique constraint on (lang, key)
    """
    try:
        with store.connection() as conn:
            cursor = conn.cursor()

            cursor.execute("PRAGMA table_info(i18n_translations)")
            existing_cols = {row[1] for row in cursor.fetchall()}

            if "needs_review" not in existing_cols:
                logger.info("Adding needs_review column to i18n_translations table")
                cursor.execute("ALTER TABLE i18n_translations ADD COLUMN needs_review INTEGER DEFAULT 0")

            if "is_override" not in existing_cols:
                logger.info("Adding is_override column to i18n_translations table")
                cursor.execute("ALTER TABLE i18n_translations ADD COLUMN is_override INTEGER DEFAULT 0")

            if "updated_at" not in existing_cols:
                logger.info("Adding updated_at column to i18n_translations table")
                # SQLite doesn't support CURRENT_TIMESTAMP as default in ALTER TABLE ADD COLUMN
                cursor.execute("ALTER TABLE i18n_translations ADD COLUMN updated_at TIMESTAMP")
                cursor.execute("""
                    UPDATE i18n_translations
                    SET updated_at = COALESCE(created_at, datetime('now'))
                """)

            cursor.execute("PRAGMA index_list(i18n_translations)")
            has_unique_index = any(idx[1] == 'idx_i18n_translations_unique' for idx in cursor.fetchall())
            if has_unique_index:
                logger.debug("Translations unique index already exists")
                return

            cursor.execute("""
                SELECT lang, key, COUNT(*) as cnt
                FROM i18n_translations
                GROUP BY lang, key
                HAVING cnt > 1
            """)
            duplicates = cursor.fetchall()

            if duplicates:
                duplicate_count = sum(row[2] - 1 for row in duplicates)
                logger.warning(f"Found {duplicate_count} duplicate translation records, cleaning up...")
                cursor.execute("""
                    DELETE FROM i18n_translations
                    WHERE rowid NOT IN (
                        SELECT MAX(rowid)
                        FROM i18n_translations
                        GROUP BY lang, key
                    )
                """)
                logger.info(f"Removed {cursor.rowcount} duplicate translation records")

            cursor.execute("""
                CREATE UNIQUE INDEX IF NOT EXISTS idx_i18n_translations_unique
                ON i18n_translations(lang, key)
            """)
            logger.info("Created unique index on i18n_translations(lang, key)")
    except sqlite3.Error as e:
        logger.error(f"Failed to ensure translations schema: {e}")
        raise


def ensure_database_indexes(store: TranslationStore):
    """Ensure all performance-critical indexes exist."""
    try:
        with store.connection() as conn:
            cursor = conn.cursor()

            # Re-seed deletes by (lang, role)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_i18n_translations_lang_role
                ON i18n_translations(lang, role)
            """)

            # Review queue
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_i18n_translations_review
                ON i18n_translations(needs_review)
            """)
            logger.debug("Database indexes created/verified successfully")
    except sqlite3.Error as e:
        logger.error(f"Failed to ensure database indexes: {e}")
        raise


def ensure_all_schemas(store: TranslationStore):
    """Ensure the table has all required columns and indexes."""
    ensure_translations_schema(store)
    ensure_database_indexes(store)


# ============================================================
# Database Migration
# ============================================================

def migrate_database(store: TranslationStore, from_version: int, to_version: int):
    """
    Migrate database from one version to another.

    Every version so far only adds columns and indexes, so migration means
    ensuring schema integrity and stamping the new version.
    """
    logger.info(f"Migrating database from version {from_version} to {to_version}")
    ensure_all_schemas(store)
    set_db_version(store, to_version)
    logger.info(f"Database migration completed: now at version {to_version}")
