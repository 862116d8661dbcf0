"""
Dictionary-based Biber features.

What this does:
    Matches every token's ``token_tag`` key (``said_vbd``, ``there_ex``,
    ``_punct_``) against the glob patterns of each dictionary feature and
    counts the hits per document.  Patterns with spaces match runs of
    consecutive keys, e.g. ``on_* the_* other_* hand_*``.

What it produces:
    A DataFrame indexed by ``doc_id`` with one integer column per
    dictionary feature.

Why it matters:
    About half of Biber's features are closed word classes (pronouns,
    modals, amplifiers, public/private/suasive verbs).  Running them as
    one vectorized batch keeps them consistent with each other and fast
    on large corpora.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Mapping, Sequence

import pandas as pd

from ..corpus import composite_key

logger = logging.getLogger("pseudobiber")


def glob_to_regex(pattern: str) -> str:
    """Translate a glob (``*`` and ``?`` only) into a regex body."""
    parts = []
    for ch in pattern:
        if ch == "*":
            parts.append(".*")
        elif ch == "?":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return "".join(parts)


@dataclass(frozen=True)
class PatternElement:
    regex: str
    on_key: bool  # False: match the bare token instead of token_tag


@dataclass(frozen=True)
class CompiledFeature:
    name: str
    key_regex: str | None
    token_regex: str | None
    sequences: tuple[tuple[PatternElement, ...], ...]


def _element(glob: str) -> PatternElement:
    return PatternElement(glob_to_regex(glob), on_key="_" in glob)


def _alternation(regexes: list[str]) -> str | None:
    if not regexes:
        return None
    return "(?:" + "|".join(regexes) + ")"


def compile_feature(name: str, patterns: Sequence[str]) -> CompiledFeature:
    key_parts: list[str] = []
    token_parts: list[str] = []
    sequences: list[tuple[PatternElement, ...]] = []
    for pattern in patterns:
        elements = tuple(_element(g) for g in pattern.split())
        if len(elements) > 1:
            sequences.append(elements)
        elif elements[0].on_key:
            key_parts.append(elements[0].regex)
        else:
            token_parts.append(elements[0].regex)
    return CompiledFeature(
        name=name,
        key_regex=_alternation(key_parts),
        token_regex=_alternation(token_parts),
        sequences=tuple(sequences),
    )


def key_stream(tokens: pd.DataFrame) -> pd.DataFrame:
    """Composite keys for a canonical token table, symbol-initial keys removed."""
    keys = [composite_key(tok, tag) for tok, tag in zip(tokens["token"], tokens["tag"])]
    stream = tokens[["doc_id", "token"]].assign(key=keys)
    return stream[stream["key"].notna()].reset_index(drop=True)


class DictionaryMatcher:
    """Counts dictionary-feature matches for a whole token table at once."""

    def __init__(self, dictionary: Mapping[str, Sequence[str]]):
        self.features = [compile_feature(name, pats) for name, pats in dictionary.items()]
        self.max_span = max(
            (len(seq) for f in self.features for seq in f.sequences), default=1
        )

    @property
    def feature_names(self) -> list[str]:
        return [f.name for f in self.features]

    def count(self, tokens: pd.DataFrame, doc_ids: Sequence[str]) -> pd.DataFrame:
        stream = key_stream(tokens)
        if stream.empty:
            return self._empty(doc_ids)
        stream = stream.astype({"key": object, "token": object})
        by_doc = stream.groupby("doc_id", sort=False)
        # Column values ``offset`` positions ahead within the same document.
        ahead = {
            (offset, on_key): by_doc["key" if on_key else "token"].shift(-offset)
            for offset in range(self.max_span)
            for on_key in (True, False)
        }

        counts: dict[str, pd.Series] = {}
        for feature in self.features:
            hits = pd.Series(False, index=stream.index)
            if feature.key_regex:
                hits |= stream["key"].str.fullmatch(feature.key_regex, case=False, na=False)
            if feature.token_regex:
                hits |= stream["token"].str.fullmatch(feature.token_regex, case=False, na=False)
            for seq in feature.sequences:
                matched = pd.Series(True, index=stream.index)
                for offset, element in enumerate(seq):
                    col = ahead[(offset, element.on_key)]
                    matched &= col.str.fullmatch(element.regex, case=False, na=False)
                hits |= matched
            counts[feature.name] = hits.groupby(stream["doc_id"], sort=False).sum()

        result = pd.DataFrame(counts, columns=self.feature_names)
        result = result.reindex(list(doc_ids)).fillna(0).astype(int)
        result.index.name = "doc_id"
        logger.debug("Dictionary batch: %d features over %d documents",
                     len(self.features), len(result))
        return result

    def _empty(self, doc_ids: Sequence[str]) -> pd.DataFrame:
        index = pd.Index(list(doc_ids), name="doc_id")
        return pd.DataFrame(0, index=index, columns=self.feature_names)
