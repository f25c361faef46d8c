"""
Core module - Translation persistence

This module provides:
- database: TranslationStore and TranslationRecord
- schema: Database initialization and migrations
"""

from wisenest_i18n.core.database import (
    ROLE_UI,
    ROLE_CONTENT,
    ROLES,
    TranslationRecord,
    TranslationStore,
    validate_record,
)

from wisenest_i18n.core.schema import (
    DB_VERSION,
    get_db_version,
    set_db_version,
    initialize_database,
    ensure_all_schemas,
    migrate_database,
)
