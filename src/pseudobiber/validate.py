"""
Input validation, error types and token-table profiling.

What this does:
    Checks that an annotated token table carries everything the feature
    rules need (document ids, tokens, lemmas, coarse and fine tags, and
    dependency relations) and fails fast with an error that names the
    missing capability.  Also summarises a token table into a JSON-ready
    profile: row counts, documents, tokens per document, missingness.

What it produces:
    Exceptions raised before any computation starts, and a profile dict
    for the run directory.

Why it matters:
    Every Biber feature is a pattern over annotations.  A table parsed
    without dependencies or without fine tags would silently produce
    zeros for a third of the features, which looks like data rather
    than a mistake.
"""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd

logger = logging.getLogger("pseudobiber")


class PseudoBiberError(Exception):
    """Base class for all errors raised by this package."""


class MissingAnnotationError(PseudoBiberError, ValueError):
    """A required annotation column is absent from the token table."""

    def __init__(self, capability: str, column: str | None = None):
        self.capability = capability
        self.column = column
        msg = capability
        if column:
            msg = f"{capability} (no '{column}' column found)"
        super().__init__(msg)


class UnsupportedInputTypeError(PseudoBiberError, TypeError):
    """The input is not an annotated token table."""


class NoDocumentsError(PseudoBiberError, ValueError):
    """The input token table contains zero documents."""


# Canonical column -> capability named in the error message.
REQUIRED_CAPABILITIES: dict[str, str] = {
    "doc_id": "document ids required",
    "token": "token text required",
    "lemma": "lemmas required",
    "pos": "coarse part-of-speech tags required",
    "tag": "fine-grained part-of-speech tags required",
    "dep_rel": "dependency parse required",
}


def ensure_dataframe(frame: Any) -> pd.DataFrame:
    """Raise UnsupportedInputTypeError unless ``frame`` is a DataFrame."""
    if not isinstance(frame, pd.DataFrame):
        raise UnsupportedInputTypeError(
            f"expected an annotated token table (pandas.DataFrame), "
            f"got {type(frame).__name__}"
        )
    return frame


def validate_schema(
    df: pd.DataFrame,
    column_map: dict[str, str | None],
) -> None:
    """Check that each canonical column resolved to a source column.

    ``column_map`` maps canonical names (``dep_rel``, ``tag`` ...) to the
    source column found for them, or None.  The dependency parse is
    checked first so the most common mistake gets the clearest message.
    """
    order = ["dep_rel", "tag", "pos", "token", "lemma", "doc_id"]
    for canonical in order:
        if column_map.get(canonical) is None:
            logger.error("Token table is missing '%s'", canonical)
            raise MissingAnnotationError(REQUIRED_CAPABILITIES[canonical], canonical)


def ensure_documents(doc_ids: list[str]) -> list[str]:
    if not doc_ids:
        raise NoDocumentsError("input token table contains no documents")
    return doc_ids


def check_missingness(df: pd.DataFrame) -> dict[str, Any]:
    """Return per-column null counts and rates."""
    null_counts = df.isnull().sum()
    total = len(df)
    result: dict[str, Any] = {}
    for col in df.columns:
        cnt = int(null_counts[col])
        result[col] = {
            "null_count": cnt,
            "null_rate": round(cnt / total, 6) if total > 0 else 0.0,
        }
    cols_with_nulls = {k: v for k, v in result.items() if v["null_count"] > 0}
    if cols_with_nulls:
        logger.warning(
            "Columns with missing values: %s",
            ", ".join(f"{k} ({v['null_count']})" for k, v in cols_with_nulls.items()),
        )
    return result


def document_lengths(tokens: pd.DataFrame, short_threshold: int = 200) -> dict[str, Any]:
    """Token counts per document from a canonical token table."""
    if len(tokens) == 0:
        return {"documents": 0}
    lengths = tokens.groupby("doc_id", sort=False).size()
    return {
        "documents": int(len(lengths)),
        "mean": round(float(lengths.mean()), 2),
        "median": round(float(lengths.median()), 2),
        "min": int(lengths.min()),
        "max": int(lengths.max()),
        "short_documents": int((lengths < short_threshold).sum()),
    }


def build_profile(
    frame: pd.DataFrame,
    engine: str | None = None,
    short_threshold: int = 200,
) -> dict[str, Any]:
    """Aggregate the structural checks of a raw token table into one dict."""
    from .adapter import prepare_tokens

    frame = ensure_dataframe(frame)
    table = prepare_tokens(frame, engine=engine)
    return {
        "row_count": len(frame),
        "column_count": len(frame.columns),
        "columns": list(frame.columns),
        "engine": table.profile.name,
        "documents": len(table.doc_ids),
        "rows_after_cleaning": len(table.tokens),
        "missingness": check_missingness(frame),
        "document_lengths": document_lengths(table.tokens, short_threshold),
    }
