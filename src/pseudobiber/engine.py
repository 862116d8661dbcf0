"""
Feature engine: annotated tokens in, Biber feature table out.

What this does:
    Runs the full pipeline on one token table: adapter, dictionary
    batch, rule features, lexical statistics, merge and normalization.

What it produces:
    A DataFrame with a ``doc_id`` column and one column per feature
    (``f_01_past_tense`` ... ``f_67_neg_analytic``), alphabetically
    ordered, one row per input document.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

import pandas as pd

from .adapter import EngineProfile, prepare_tokens
from .aggregate import TOTAL_COLUMN, finalize_table, merge_counts, normalize_counts
from .corpus import iter_documents
from .features.dictionary import DictionaryMatcher
from .features.lexical import MEASURES, mean_word_length, type_token_feature
from .features.rules import RULE_FEATURES, RuleContext, count_rule_features
from .resources import WordLists, load_dictionary, load_word_lists, parse_dictionary
from .validate import ensure_documents

logger = logging.getLogger("pseudobiber")

LEXICAL_FEATURES = ("f_43_type_token", "f_44_mean_word_length")


class FeatureEngine:
    """Extracts Biber features from spaCy or UDPipe token tables.

    The dictionary and word lists are injected once and never modified;
    by default the packaged ones are used.

    Args:
        dictionary: feature name -> glob patterns.
        word_lists: exact-match lists used by the rule features.
        measure: lexical diversity for f_43 (MATTR, TTR, CTTR, MSTTR or
            "none" to leave the column out).
        normalize: report counts per 1,000 word tokens instead of raw counts.
        mattr_window: window size for MATTR.
        msttr_segment: segment size for MSTTR.
        min_tokens_for_mattr: if the shortest document in a batch has
            fewer word tokens than this, the batch uses TTR.
        show_progress: show a progress bar over documents.
    """

    def __init__(
        self,
        dictionary: Mapping[str, Sequence[str]] | None = None,
        word_lists: WordLists | Mapping[str, Any] | None = None,
        measure: str = "MATTR",
        normalize: bool = True,
        mattr_window: int = 100,
        msttr_segment: int = 100,
        min_tokens_for_mattr: int = 200,
        show_progress: bool = False,
    ):
        if measure not in MEASURES:
            raise ValueError(f"measure must be one of {MEASURES}, got {measure!r}")
        if dictionary is None:
            dictionary = load_dictionary()
        else:
            dictionary = parse_dictionary(dictionary)
        if word_lists is None:
            word_lists = load_word_lists()
        elif not isinstance(word_lists, WordLists):
            word_lists = WordLists.from_mapping(word_lists)

        clash = set(dictionary) & (set(RULE_FEATURES) | set(LEXICAL_FEATURES))
        if clash:
            raise ValueError(f"Dictionary redefines built-in features: {sorted(clash)}")

        self.dictionary = dictionary
        self.word_lists = word_lists
        self.measure = measure
        self.normalize = normalize
        self.mattr_window = mattr_window
        self.msttr_segment = msttr_segment
        self.min_tokens_for_mattr = min_tokens_for_mattr
        self.show_progress = show_progress
        self.matcher = DictionaryMatcher(dictionary)

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> FeatureEngine:
        return cls(
            dictionary=load_dictionary(cfg.get("dictionary_path")),
            word_lists=load_word_lists(cfg.get("word_lists_path")),
            measure=cfg.get("ttr_measure", "MATTR"),
            normalize=cfg.get("normalize", True),
            mattr_window=cfg.get("mattr_window", 100),
            msttr_segment=cfg.get("msttr_segment", 100),
            min_tokens_for_mattr=cfg.get("min_tokens_for_mattr", 200),
            show_progress=cfg.get("show_progress", False),
        )

    @property
    def feature_names(self) -> list[str]:
        names = list(self.dictionary) + list(RULE_FEATURES) + list(LEXICAL_FEATURES)
        if self.measure == "none":
            names.remove("f_43_type_token")
        return sorted(names)

    def transform(
        self,
        tokens: pd.DataFrame,
        engine: str | EngineProfile | None = None,
    ) -> pd.DataFrame:
        """Compute the feature table for every document in ``tokens``.

        Raises:
            UnsupportedInputTypeError: ``tokens`` is not a DataFrame.
            MissingAnnotationError: tags or dependency relations are absent.
            NoDocumentsError: ``tokens`` has no rows.
        """
        table = prepare_tokens(tokens, engine=engine)
        doc_ids = ensure_documents(list(table.doc_ids))
        documents = list(iter_documents(table.tokens, doc_ids))
        logger.info(
            "Extracting features from %d documents (%d tokens, %s annotations)",
            len(documents), len(table.tokens), table.profile.name,
        )

        ctx = RuleContext(word_lists=self.word_lists, profile=table.profile)
        counts = merge_counts(
            [
                self.matcher.count(table.tokens, doc_ids),
                count_rule_features(documents, ctx, show_progress=self.show_progress),
            ],
            doc_ids,
        ).astype(int)

        if self.normalize:
            counts[TOTAL_COLUMN] = [doc.total_token_count for doc in documents]
            counts = normalize_counts(counts)

        statistics = [
            type_token_feature(
                documents,
                measure=self.measure,
                mattr_window=self.mattr_window,
                msttr_segment=self.msttr_segment,
                min_tokens=self.min_tokens_for_mattr,
            ),
            mean_word_length(documents),
        ]
        return finalize_table(counts, statistics)


def biber(
    tokens: pd.DataFrame,
    measure: str = "MATTR",
    normalize: bool = True,
    engine: str | EngineProfile | None = None,
    **kwargs: Any,
) -> pd.DataFrame:
    """Extract Biber features from a spaCy or UDPipe token table."""
    return FeatureEngine(measure=measure, normalize=normalize, **kwargs).transform(
        tokens, engine=engine
    )
