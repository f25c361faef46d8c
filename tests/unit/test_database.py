"""Tests for the SQLite translation store and its schema management."""

import sqlite3

import pytest

from wisenest_i18n.core.database import TranslationRecord, TranslationStore, ROLE_CONTENT
from wisenest_i18n.core.schema import DB_VERSION, get_db_version, initialize_database


class TestPutAndGet:
    def test_put_then_get(self, store):
        assert store.put(TranslationRecord(lang="th", key="nav.home", value="หน้าแรก"))

        record = store.get("th", "nav.home")
        assert record.value == "หน้าแรก"
        assert record.role == "ui"
        assert not record.is_override
        assert not record.needs_review
        assert record.created_at

    def test_put_updates_existing_key(self, store):
        store.put(TranslationRecord(lang="zh", key="k", value="旧"))
        store.put(TranslationRecord(lang="zh", key="k", value="新", role=ROLE_CONTENT))

        assert store.get("zh", "k").value == "新"
        assert store.count("zh") == 1
        assert store.get("zh", "k").role == ROLE_CONTENT

    def test_missing_key_is_none(self, store):
        assert store.get("th", "nope") is None

    @pytest.mark.parametrize("record", [
        TranslationRecord(lang="en", key="k", value="v"),
        TranslationRecord(lang="th", key="", value="v"),
        TranslationRecord(lang="th", key="k", value=""),
        TranslationRecord(lang="th", key="k", value="v", role="banner"),
    ])
    def test_invalid_records_are_rejected(self, store, record):
        with pytest.raises(ValueError):
            store.put(record)
        assert store.count() == 0

    def test_get_all_is_a_flat_mapping(self, store):
        store.put(TranslationRecord(lang="th", key="b", value="2"))
        store.put(TranslationRecord(lang="th", key="a", value="1"))
        store.put(TranslationRecord(lang="zh", key="a", value="一"))

        assert store.get_all("th") == {"a": "1", "b": "2"}


class TestOverrides:
    def test_automatic_write_keeps_override(self, store):
        store.put(TranslationRecord(lang="th", key="nav.home", value="หน้าหลัก", is_override=True))

        written = store.put(TranslationRecord(lang="th", key="nav.home", value="machine"))

        assert written is False
        record = store.get("th", "nav.home")
        assert record.value == "หน้าหลัก"
        assert record.is_override
        assert record.needs_review

    def test_override_replaces_override(self, store):
        store.put(TranslationRecord(lang="th", key="k", value="one", is_override=True))

        assert store.put(TranslationRecord(lang="th", key="k", value="two", is_override=True))
        assert store.get("th", "k").value == "two"

    def test_mark_reviewed(self, store):
        store.put(TranslationRecord(lang="th", key="k", value="v", needs_review=True))

        assert store.mark_reviewed("th", "k")
        assert not store.get("th", "k").needs_review
        assert store.mark_reviewed("th", "missing") is False


class TestListing:
    def test_filters(self, store):
        store.put(TranslationRecord(lang="th", key="a", value="1", needs_review=True))
        store.put(TranslationRecord(lang="th", key="b", value="2", role=ROLE_CONTENT))
        store.put(TranslationRecord(lang="zh", key="a", value="一"))

        assert [r.key for r in store.list_records(lang="th", needs_review=True)] == ["a"]
        assert [r.key for r in store.list_records(role=ROLE_CONTENT)] == ["b"]
        assert len(store.list_records()) == 3
        assert store.count("th") == 2
        assert store.count("th", role="ui") == 1
        assert store.count() == 3


class TestReinitialize:
    def test_replaces_ui_rows_and_keeps_content(self, store):
        store.put(TranslationRecord(lang="th", key="old.label", value="x"))
        store.put(TranslationRecord(lang="th", key="post.1", value="บทความ", role=ROLE_CONTENT))

        count = store.reinitialize("th", [("nav.home", "หน้าแรก"), ("nav.search", "ค้นหา")])

        assert count == 2
        assert store.get("th", "old.label") is None
        assert store.get("th", "post.1").value == "บทความ"
        assert store.count("th", role="ui") == 2

    def test_is_idempotent(self, store):
        items = [("a", "1"), ("b", "2")]
        store.reinitialize("zh", items)
        first = store.get_all("zh")

        store.reinitialize("zh", items)

        assert store.get_all("zh") == first
        assert store.count("zh") == 2

    def test_duplicate_keys_count_once_and_last_wins(self, store):
        count = store.reinitialize("zh", [("a", "1"), ("b", "2"), ("a", "3")])

        assert count == 2
        assert count == store.count("zh", role="ui")
        assert store.get_all("zh") == {"a": "3", "b": "2"}

    def test_accepts_records_with_flags(self, store):
        store.reinitialize("th", [TranslationRecord(lang="th", key="a", value="1", needs_review=True)])

        assert store.get("th", "a").needs_review

    def test_invalid_item_changes_nothing(self, store):
        store.reinitialize("th", [("a", "1")])

        with pytest.raises(ValueError):
            store.reinitialize("th", [("b", "2"), ("c", "")])

        assert store.get_all("th") == {"a": "1"}

    def test_database_error_rolls_back(self, store):
        store.reinitialize("th", [("a", "1")])
        with store.connection() as conn:
            conn.execute("""
                CREATE TRIGGER reject_boom BEFORE INSERT ON i18n_translations
                WHEN NEW.key = 'boom'
                BEGIN SELECT RAISE(ABORT, 'boom rejected'); END
            """)

        with pytest.raises(sqlite3.Error):
            store.reinitialize("th", [("b", "2"), ("boom", "3")])

        assert store.get_all("th") == {"a": "1"}

    def test_unknown_language(self, store):
        with pytest.raises(ValueError):
            store.reinitialize("en", [("a", "1")])


class TestSchema:
    def test_fresh_database_is_stamped(self, store):
        assert get_db_version(store) == DB_VERSION

    def test_initialize_twice_is_harmless(self, store):
        store.put(TranslationRecord(lang="zh", key="a", value="一"))

        initialize_database(store)

        assert store.get("zh", "a").value == "一"

    def test_legacy_table_is_migrated(self, tmp_path):
        db_file = tmp_path / "legacy.db"
        conn = sqlite3.connect(db_file)
        with conn:
            conn.execute("""
                CREATE TABLE i18n_translations (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    lang TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    role TEXT NOT NULL DEFAULT 'ui',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.execute("INSERT INTO i18n_translations (lang, key, value) VALUES ('th', 'k', 'old')")
            conn.execute("INSERT INTO i18n_translations (lang, key, value) VALUES ('th', 'k', 'new')")
        conn.close()

        store = TranslationStore(db_file)
        initialize_database(store)

        assert get_db_version(store) == DB_VERSION
        record = store.get("th", "k")
        assert record.value == "new"
        assert record.updated_at
        assert store.count("th") == 1
        assert store.put(TranslationRecord(lang="th", key="k", value="newer"))
