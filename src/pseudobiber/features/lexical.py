"""
Whole-document lexical statistics: type-token ratio and word length.

What this does:
    Computes f_43 (lexical diversity over ``token_tag`` keys, so that
    ``run_vb`` and ``run_nn`` count as different types) and f_44 (mean
    length of purely alphabetic tokens).

What it produces:
    One float per document for each statistic.

Why it matters:
    Plain TTR falls as texts get longer, so it is only comparable
    between documents of similar length.  MATTR averages TTR over a
    sliding window and is stable across lengths, but needs documents
    that are comfortably longer than the window; when any document in
    the batch is too short, every document falls back to TTR so the
    column stays comparable.
"""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from typing import Sequence

import numpy as np
import pandas as pd

from ..corpus import Document

logger = logging.getLogger("pseudobiber")

MEASURES = ("MATTR", "TTR", "CTTR", "MSTTR", "none")

_ALPHA_WORD = re.compile(r"[a-z]+")


def ttr(tokens: Sequence[str]) -> float:
    if not tokens:
        return 0.0
    return len(set(tokens)) / len(tokens)


def cttr(tokens: Sequence[str]) -> float:
    """Carroll's corrected TTR: types / sqrt(2 * tokens)."""
    if not tokens:
        return 0.0
    return len(set(tokens)) / math.sqrt(2 * len(tokens))


def mattr(tokens: Sequence[str], window: int = 100) -> float:
    """Moving-average TTR over every window of ``window`` tokens."""
    n = len(tokens)
    if n == 0:
        return 0.0
    if window >= n:
        return ttr(tokens)
    counts = Counter(tokens[:window])
    ratios = [len(counts) / window]
    for i in range(window, n):
        leaving = tokens[i - window]
        counts[leaving] -= 1
        if counts[leaving] == 0:
            del counts[leaving]
        counts[tokens[i]] += 1
        ratios.append(len(counts) / window)
    return float(np.mean(ratios))


def msttr(tokens: Sequence[str], segment: int = 100) -> float:
    """Mean TTR over consecutive segments; a short final segment is dropped."""
    n_segments = len(tokens) // segment
    if n_segments == 0:
        return ttr(tokens)
    return float(np.mean([
        ttr(tokens[k * segment:(k + 1) * segment]) for k in range(n_segments)
    ]))


def lexical_diversity(
    tokens: Sequence[str],
    measure: str = "MATTR",
    window: int = 100,
    segment: int = 100,
) -> float:
    if measure == "TTR":
        return ttr(tokens)
    if measure == "CTTR":
        return cttr(tokens)
    if measure == "MATTR":
        return mattr(tokens, window)
    if measure == "MSTTR":
        return msttr(tokens, segment)
    raise ValueError(f"Unknown type-token measure '{measure}'; expected one of {MEASURES}")


def batch_measure(documents: Sequence[Document], measure: str, min_tokens: int = 200) -> str:
    """The measure actually used for a batch.

    Falls back to TTR for the whole batch when its shortest document has
    fewer than ``min_tokens`` word tokens.
    """
    if measure == "none" or not documents:
        return measure
    shortest = min(doc.total_token_count for doc in documents)
    if shortest < min_tokens and measure != "TTR":
        logger.info(
            "Shortest document has %d tokens (< %d); using TTR instead of %s "
            "for f_43_type_token",
            shortest, min_tokens, measure,
        )
        return "TTR"
    return measure


def type_token_feature(
    documents: Sequence[Document],
    measure: str = "MATTR",
    mattr_window: int = 100,
    msttr_segment: int = 100,
    min_tokens: int = 200,
) -> pd.Series | None:
    """f_43_type_token per document, or None when ``measure`` is "none"."""
    measure = batch_measure(documents, measure, min_tokens)
    if measure == "none":
        return None
    values = {
        doc.doc_id: lexical_diversity(list(doc.word_keys), measure, mattr_window, msttr_segment)
        for doc in documents
    }
    return pd.Series(values, name="f_43_type_token", dtype=float)


def mean_word_length(documents: Sequence[Document]) -> pd.Series:
    """f_44_mean_word_length: mean length of all-lowercase alphabetic tokens."""
    values = {}
    for doc in documents:
        lengths = [len(t.token) for t in doc.tokens if _ALPHA_WORD.fullmatch(t.token)]
        values[doc.doc_id] = float(np.mean(lengths)) if lengths else 0.0
    return pd.Series(values, name="f_44_mean_word_length", dtype=float)
