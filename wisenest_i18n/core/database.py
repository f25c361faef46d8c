"""
Database CRUD Operations Module

This module handles all CRUD operations for the i18n_translations table:
- Single record lookups and per-language dictionaries
- Upserts honoring human overrides
- Atomic re-seeding of the UI dictionary

For schema management and migrations, see core/schema.py
"""

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Optional, List, Dict, Any, Iterable, Tuple, Union

from wisenest_i18n import language_codes as lc
from wisenest_i18n.logger import get_logger

logger = get_logger(__name__)

ROLE_UI = "ui"
ROLE_CONTENT = "content"
ROLES = (ROLE_UI, ROLE_CONTENT)


@dataclass
class TranslationRecord:
    """One committed translation for a (language, key) pair."""
    lang: str
    key: str
    value: str
    role: str = ROLE_UI
    is_override: bool = False
    needs_review: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "TranslationRecord":
        return cls(
            lang=row["lang"],
            key=row["key"],
            value=row["value"],
            role=row["role"],
            is_override=bool(row["is_override"]),
            needs_review=bool(row["needs_review"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def validate_record(record: TranslationRecord) -> None:
    """Reject records that must never be committed."""
    if lc.normalize_language_code(record.lang) is None:
        raise ValueError(f"Unsupported language: {record.lang}")
    if record.role not in ROLES:
        raise ValueError(f"Unsupported role: {record.role}")
    if not record.key or not record.key.strip():
        raise ValueError("key field is required and cannot be empty")
    if record.value is None or not str(record.value).strip():
        raise ValueError("value field is required and cannot be empty")


class TranslationStore:
    """SQLite-backed store of translated key/value pairs per language."""

    def __init__(self, db_file: Union[str, Path]):
        self.db_file = Path(db_file)

    def get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_file, timeout=10)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def connection(self):
        """Yield a connection that commits on success, rolls back on error and is always closed."""
        conn = self.get_connection()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    # ============================================================
    # Read Operations
    # ============================================================

    def get(self, lang: str, key: str) -> Optional[TranslationRecord]:
        """Get a single translation record, or None when absent."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT * FROM i18n_translations
                WHERE lang = ? AND key = ?
            """, (lang, key))
            row = cursor.fetchone()
            return TranslationRecord.from_row(row) if row else None

    def get_all(self, lang: str) -> Dict[str, str]:
        """Get all translations for a language as a key -> value mapping."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT key, value FROM i18n_translations
                WHERE lang = ?
                ORDER BY key
            """, (lang,))
            return {row["key"]: row["value"] for row in cursor.fetchall() if row["key"] and row["value"]}

    def list_records(self, lang: Optional[str] = None, needs_review: Optional[bool] = None,
                     role: Optional[str] = None) -> List[TranslationRecord]:
        """List records, optionally filtered by language, review flag and role."""
        conditions = []
        params: List[Any] = []

        if lang is not None:
            conditions.append("lang = ?")
            params.append(lang)
        if needs_review is not None:
            conditions.append("needs_review = ?")
            params.append(1 if needs_review else 0)
        if role is not None:
            conditions.append("role = ?")
            params.append(role)

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT * FROM i18n_translations {where} ORDER BY lang, key", params)
            return [TranslationRecord.from_row(row) for row in cursor.fetchall()]

    def count(self, lang: Optional[str] = None, role: Optional[str] = None) -> int:
        """Count committed records."""
        conditions = []
        params: List[Any] = []
        if lang is not None:
            conditions.append("lang = ?")
            params.append(lang)
        if role is not None:
            conditions.append("role = ?")
            params.append(role)

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT COUNT(*) FROM i18n_translations {where}", params)
            return cursor.fetchone()[0]

    # ============================================================
    # Write Operations
    # ============================================================

    def put(self, record: TranslationRecord) -> bool:
        """
        Create or update the record for (lang, key).

        An automatic write never replaces a human override: the stored value is
        kept, the row is flagged for review, and False is returned.

        Returns:
            True if the value was written, False if it was rejected
        """
        validate_record(record)
        lang = lc.normalize_language_code(record.lang)
        now = datetime.now().isoformat(sep=" ", timespec="seconds")

        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("BEGIN IMMEDIATE")
            cursor.execute("""
                SELECT is_override FROM i18n_translations
                WHERE lang = ? AND key = ?
            """, (lang, record.key))
            existing = cursor.fetchone()

            if existing is not None and existing["is_override"] and not record.is_override:
                cursor.execute("""
                    UPDATE i18n_translations
                    SET needs_review = 1, updated_at = ?
                    WHERE lang = ? AND key = ?
                """, (now, lang, record.key))
                conn.commit()
                logger.info(f"Kept override for {lang}:{record.key}; automatic update routed to review")
                return False

            cursor.execute("""
                INSERT INTO i18n_translations
                (lang, key, value, role, is_override, needs_review, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(lang, key) DO UPDATE SET
                    value = excluded.value,
                    role = excluded.role,
                    is_override = excluded.is_override,
                    needs_review = excluded.needs_review,
                    updated_at = excluded.updated_at
            """, (
                lang,
                record.key,
                record.value,
                record.role,
                1 if record.is_override else 0,
                1 if record.needs_review else 0,
                now,
                now,
            ))
            conn.commit()
            return True

    def mark_reviewed(self, lang: str, key: str) -> bool:
        """Clear the needs_review flag for a record."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                UPDATE i18n_translations
                SET needs_review = 0, updated_at = ?
                WHERE lang = ? AND key = ?
            """, (datetime.now().isoformat(sep=" ", timespec="seconds"), lang, key))
            conn.commit()
            return cursor.rowcount > 0

    def reinitialize(self, lang: str, items: Iterable[Union[Tuple[str, str], TranslationRecord]]) -> int:
        """
        Replace every UI-role row of a language with the given set.

        The delete and the bulk insert run in one transaction; on any error the
        transaction is rolled back and the previous rows stay visible.

        Args:
            lang: Language to re-seed
            items: (key, value) pairs or TranslationRecord objects

        Returns:
            Number of rows inserted
        """
        lang_code = lc.normalize_language_code(lang)
        if lang_code is None:
            raise ValueError(f"Unsupported language: {lang}")

        now = datetime.now().isoformat(sep=" ", timespec="seconds")
        # Later items win over earlier ones with the same key
        rows_by_key: Dict[str, tuple] = {}
        for item in items:
            if isinstance(item, TranslationRecord):
                record = TranslationRecord(
                    lang=lang_code, key=item.key, value=item.value, role=ROLE_UI,
                    is_override=item.is_override, needs_review=item.needs_review,
                )
            else:
                key, value = item
                record = TranslationRecord(lang=lang_code, key=key, value=value, role=ROLE_UI)
            validate_record(record)
            rows_by_key[record.key] = (
                record.lang, record.key, record.value, ROLE_UI,
                1 if record.is_override else 0,
                1 if record.needs_review else 0,
                now, now,
            )
        rows = list(rows_by_key.values())

        try:
            with self.connection() as conn:
                cursor = conn.cursor()
                cursor.execute("BEGIN IMMEDIATE")
                cursor.execute("""
                    DELETE FROM i18n_translations
                    WHERE lang = ? AND role = ?
                """, (lang_code, ROLE_UI))
                # A content row may share a key with a UI label; the label wins
                cursor.executemany("""
                    INSERT INTO i18n_translations
                    (lang, key, value, role, is_override, needs_review, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(lang, key) DO UPDATE SET
                        value = excluded.value,
                        role = excluded.role,
                        is_override = excluded.is_override,
                        needs_review = excluded.needs_review,
                        updated_at = excluded.updated_at
                """, rows)
        except sqlite3.Error as e:
            logger.error(f"Re-seeding {lang_code} UI translations failed, rolled back: {e}")
            raise

        logger.info(f"Re-seeded {len(rows)} {lang_code} UI translations")
        return len(rows)
