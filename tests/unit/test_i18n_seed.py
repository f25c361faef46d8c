"""Tests for the bundled language packs and UI dictionary re-seeding."""

from tests.conftest import FakeAIService
from wisenest_i18n.i18n import (
    clear_cache,
    get_base_dictionary,
    initialize_ui_translations,
    load_fallback_dictionary,
    load_language,
)
from wisenest_i18n.translation.manager import TranslationManager
from wisenest_i18n.core.database import TranslationRecord, ROLE_CONTENT


BASE = {"nav.home": "首页", "nav.search": "搜索", "common.save": "保存"}
THAI = {"nav.home": "หน้าแรก"}


def test_bundled_packs_load():
    base = get_base_dictionary()
    assert base["nav.home"] == "首页"
    assert set(load_language("th")) <= set(base)
    assert load_language("en") == {}


def test_fallback_dictionary_covers_critical_strings():
    th = load_fallback_dictionary("th")
    zh = load_fallback_dictionary("zh")
    assert th["price.currency"] == "฿"
    assert set(th) == set(zh)
    assert "nav.home" in th


def test_seed_without_manager_copies_source_for_review(store):
    result = initialize_ui_translations(store, base_dictionary=BASE, target_dictionary=THAI)

    assert result["success"]
    assert result["languages"] == {"zh": 3, "th": 3}
    assert result["count"] == 6
    assert result["needs_review"] == 2
    assert store.get("th", "nav.home").value == "หน้าแรก"
    assert not store.get("th", "nav.home").needs_review
    assert store.get("th", "nav.search").value == "搜索"
    assert store.get("th", "nav.search").needs_review


def test_seed_with_manager_machine_translates_missing_labels(store, config):
    ai = FakeAIService(config, fail_markers=("保存",))
    manager = TranslationManager(ai, store, config)

    result = initialize_ui_translations(store, manager, base_dictionary=BASE, target_dictionary=THAI)

    assert result["machine_translated"] == 1
    assert result["needs_review"] == 1
    assert store.get("th", "nav.search").value == "<th>搜索"
    assert not store.get("th", "nav.search").needs_review
    assert store.get("th", "common.save").value == "保存"
    assert store.get("th", "common.save").needs_review
    assert [call[0] for call in ai.calls] == ["搜索", "保存"]


def test_seed_is_idempotent_and_leaves_content(store):
    store.put(TranslationRecord(lang="zh", key="post.1", value="文章", role=ROLE_CONTENT))

    initialize_ui_translations(store, base_dictionary=BASE, target_dictionary=THAI)
    first = (store.get_all("zh"), store.get_all("th"))
    initialize_ui_translations(store, base_dictionary=BASE, target_dictionary=THAI)

    assert (store.get_all("zh"), store.get_all("th")) == first
    assert store.get("zh", "post.1").value == "文章"


def test_seed_from_bundled_packs(store):
    result = initialize_ui_translations(store)

    assert result["languages"]["zh"] == len(get_base_dictionary())
    assert result["languages"]["th"] == result["languages"]["zh"]


def test_language_packs_are_cached_until_cleared():
    first = load_language("zh")
    assert load_language("zh") is first

    clear_cache()

    reloaded = load_language("zh")
    assert reloaded is not first
    assert reloaded == first
