"""
Translation utility functions for sentence splitting, chunking and key generation.
Provides the text chunker used before sending long content to the AI provider.
"""

import re
import time
from typing import List, Optional

# Sentence terminators; consumed by the split and not carried into chunks
SENTENCE_TERMINATORS = "。！？\n"
SENTENCE_SPLIT_PATTERN = re.compile(f"[{re.escape(SENTENCE_TERMINATORS)}]")


def split_sentences(text: str) -> List[str]:
    """
    Split text on sentence terminators.

    Example:
        >>> split_sentences("你好。再见！")
        ['你好', '再见', '']
    """
    if not text:
        return []
    return SENTENCE_SPLIT_PATTERN.split(text)


def hard_slice(sentence: str, max_length: int) -> List[str]:
    """Cut an oversized sentence into fixed-size pieces of max_length characters."""
    return [sentence[i:i + max_length] for i in range(0, len(sentence), max_length)]


def split_text(text: str, max_length: int) -> List[str]:
    """
    Split long text into ordered chunks of at most max_length characters.

    Sentences are packed greedily into a buffer. A sentence that cannot fit
    into any chunk on its own is hard-sliced into max_length pieces, which may
    cut mid-sentence. Terminator characters are dropped, so joining the chunks
    gives the original text minus its terminators.

    Args:
        text: Text to split
        max_length: Maximum characters per chunk

    Returns:
        List of chunks in input order
    """
    if max_length <= 0:
        raise ValueError("max_length must be positive")
    if not text:
        return []

    chunks: List[str] = []
    buffer = ""

    for sentence in split_sentences(text):
        if len(buffer) + len(sentence) > max_length:
            if buffer:
                chunks.append(buffer)
                buffer = ""

            if len(sentence) > max_length:
                chunks.extend(hard_slice(sentence, max_length))
            else:
                buffer = sentence
        else:
            buffer += sentence

    if buffer:
        chunks.append(buffer)

    return chunks


def join_chunks(chunks: List[str]) -> str:
    """Reassemble translated chunks in order."""
    return "".join(chunks)


def make_content_key(prefix: str, timestamp_ms: Optional[int] = None) -> str:
    """
    Build a per-content translation key such as 'activity.title.1718000000000'.

    UI labels use stable keys; dynamic content gets a fresh key per piece.
    """
    prefix = (prefix or "").strip().rstrip(".")
    if not prefix:
        raise ValueError("prefix is required")
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{prefix}.{timestamp_ms}"
