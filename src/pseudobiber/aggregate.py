"""
Merge per-feature counts into one table and normalize them.

What this does:
    Outer-joins the dictionary counts, the rule counts and the lexical
    statistics on ``doc_id``, fills every missing (document, feature)
    cell with 0, and optionally rescales counts to a rate per 1,000
    word tokens.

What it produces:
    The final feature table: a ``doc_id`` column followed by the
    feature columns in alphabetical order.

Why it matters:
    A document that never uses a feature is a real observation (zero),
    not missing data.  Filling before any arithmetic keeps every row
    complete and every value finite.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

logger = logging.getLogger("pseudobiber")

TOTAL_COLUMN = "tot_counts"


def merge_counts(
    parts: Iterable[pd.DataFrame | pd.Series],
    doc_ids: Sequence[str],
) -> pd.DataFrame:
    """Outer-join feature frames on ``doc_id``; absent cells become 0."""
    frames = [
        p.to_frame() if isinstance(p, pd.Series) else p for p in parts if p is not None
    ]
    merged = pd.concat(frames, axis=1, join="outer") if frames else pd.DataFrame()
    duplicated = merged.columns[merged.columns.duplicated()].tolist()
    if duplicated:
        raise ValueError(f"Feature names must be unique; duplicated: {duplicated}")
    merged = merged.reindex(list(doc_ids)).fillna(0)
    merged.index.name = "doc_id"
    return merged


def normalize_counts(
    df: pd.DataFrame,
    total_col: str = TOTAL_COLUMN,
    per: float = 1000,
) -> pd.DataFrame:
    """Rescale numeric columns to a rate per ``per`` tokens.

    Every numeric column except ``total_col`` is divided by it and
    multiplied by ``per``; ``total_col`` is dropped.  Rows whose total is
    zero get 0.0 rather than NaN or infinity.
    """
    totals = df[total_col]
    out = df.drop(columns=total_col)
    numeric = list(out.select_dtypes(include=[np.number]).columns)
    out[numeric] = out[numeric].astype(float)

    empty = totals <= 0
    if empty.any():
        logger.warning(
            "%d documents have no countable tokens; their normalized counts are 0",
            int(empty.sum()),
        )
    out[numeric] = out[numeric].div(totals.where(~empty, 1), axis=0) * per
    out.loc[empty, numeric] = 0.0
    return out


def finalize_table(
    counts: pd.DataFrame,
    statistics: Iterable[pd.Series | None] = (),
) -> pd.DataFrame:
    """Join the lexical statistics, sort columns, and expose ``doc_id``."""
    stats = [s for s in statistics if s is not None]
    table = counts
    if stats:
        table = counts.join(pd.concat(stats, axis=1), how="left")
        table[[s.name for s in stats]] = table[[s.name for s in stats]].fillna(0.0)
    table = table[sorted(table.columns)]
    table.index.name = "doc_id"
    return table.reset_index()
