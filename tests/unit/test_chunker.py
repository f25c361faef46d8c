"""Tests for sentence-boundary text chunking and content keys."""

import random
import re

import pytest

from wisenest_i18n.translation.utils import (
    SENTENCE_TERMINATORS,
    split_sentences,
    split_text,
    join_chunks,
    make_content_key,
)


def _strip_terminators(text):
    return re.sub(f"[{re.escape(SENTENCE_TERMINATORS)}]", "", text)


def _random_text(rng, length):
    alphabet = "你好世界活动门店优惠สวัสดีครับabc " + SENTENCE_TERMINATORS
    return "".join(rng.choice(alphabet) for _ in range(length))


def test_split_sentences_consumes_terminators():
    assert split_sentences("你好。再见！真的？好\n") == ["你好", "再见", "真的", "好", ""]


def test_text_without_terminators_is_one_chunk():
    text = "没有标点的一段文字" * 10
    assert split_text(text, len(text)) == [text]
    assert split_text(text, 500) == [text]


def test_empty_text_gives_no_chunks():
    assert split_text("", 100) == []


@pytest.mark.parametrize("max_length", [0, -5])
def test_non_positive_max_length_is_rejected(max_length):
    with pytest.raises(ValueError):
        split_text("你好。", max_length)


def test_sentences_are_packed_greedily():
    text = "一二三。四五六。七八九。"
    assert split_text(text, 6) == ["一二三四五六", "七八九"]


def test_oversized_sentence_is_hard_sliced():
    sentence = "长" * 25
    chunks = split_text("短句。" + sentence + "。尾巴", 10)
    assert chunks == ["短句", "长" * 10, "长" * 10, "长" * 5, "尾巴"]


def test_hard_slice_pieces_are_exactly_max_length_except_last():
    chunks = split_text("x" * 23, 5)
    assert [len(c) for c in chunks] == [5, 5, 5, 5, 3]


def test_chunks_never_exceed_max_length_and_rejoin_without_terminators():
    rng = random.Random(1234)
    for _ in range(200):
        text = _random_text(rng, rng.randint(0, 400))
        max_length = rng.randint(1, 60)
        chunks = split_text(text, max_length)

        assert all(len(chunk) <= max_length for chunk in chunks)
        assert all(chunk for chunk in chunks)
        assert join_chunks(chunks) == _strip_terminators(text)


def test_long_passage_produces_ordered_chunks():
    sentences = [f"第{i:03d}句话内容" + "测" * 40 for i in range(100)]
    text = "。".join(sentences) + "。"
    chunks = split_text(text, 2000)

    assert len(chunks) >= 3
    assert join_chunks(chunks) == "".join(sentences)


class TestMakeContentKey:
    def test_uses_given_timestamp(self):
        assert make_content_key("activity.title", 1718000000000) == "activity.title.1718000000000"

    def test_trailing_dot_is_not_doubled(self):
        assert make_content_key("activity.desc.", 1) == "activity.desc.1"

    def test_generates_millisecond_timestamp(self):
        key = make_content_key("store.name")
        prefix, _, stamp = key.rpartition(".")
        assert prefix == "store.name"
        assert stamp.isdigit() and len(stamp) >= 13

    def test_blank_prefix_is_rejected(self):
        with pytest.raises(ValueError):
            make_content_key("  ")
