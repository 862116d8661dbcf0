"""
Tokens, documents, and the composite ``token_tag`` keys.

A canonical token table (see ``adapter.prepare_tokens``) is turned into
immutable ``Document`` objects: an ordered tuple of ``Token`` records per
``doc_id``.  The rule features index into that tuple directly; the
dictionary features and the lexical statistics work on the composite key
stream, where each token becomes ``surface_tag`` (``walked_vbd``) with
punctuation collapsed to a single ``_punct_`` marker.
"""

from __future__ import annotations

import re
import string
from dataclasses import dataclass
from functools import cached_property
from typing import Iterable, NamedTuple

import pandas as pd

PUNCT_KEY = "_punct_"

_PUNCT_CLASS = "[" + re.escape(string.punctuation) + "]"
_PUNCT_PAIR = re.compile(_PUNCT_CLASS + "_" + _PUNCT_CLASS)
_SYMBOL_START = re.compile(r"^\W_")
_DIGIT_KEY = re.compile(r"\d_")


class Token(NamedTuple):
    doc_id: str
    sentence_id: int
    position: int
    token: str
    lemma: str
    pos: str
    tag: str
    dep_rel: str


def composite_key(token: str, tag: str) -> str | None:
    """Build the lowercased ``token_tag`` key used for dictionary lookup.

    Returns None for symbol-initial keys (``%_nn``, ``-_hyph``), which are
    dropped from the key stream altogether.
    """
    key = f"{token}_{tag}".lower()
    if key == "\n__sp" or _PUNCT_PAIR.search(key):
        return PUNCT_KEY
    if key == "&_cc":
        return "and_cc"
    if _SYMBOL_START.match(key):
        return None
    return key


def is_word_key(key: str) -> bool:
    """True for keys that count as words (not punctuation, not numerals)."""
    return key != PUNCT_KEY and _DIGIT_KEY.search(key) is None


@dataclass(frozen=True)
class Document:
    doc_id: str
    tokens: tuple[Token, ...]

    def __len__(self) -> int:
        return len(self.tokens)

    @cached_property
    def keys(self) -> tuple[str, ...]:
        """Composite keys in document order, symbol-initial keys removed."""
        keys = (composite_key(t.token, t.tag) for t in self.tokens)
        return tuple(k for k in keys if k is not None)

    @cached_property
    def word_keys(self) -> tuple[str, ...]:
        return tuple(k for k in self.keys if is_word_key(k))

    @property
    def total_token_count(self) -> int:
        """Normalization denominator: word tokens, excluding punctuation and numerals."""
        return len(self.word_keys)


def iter_documents(tokens: pd.DataFrame, doc_ids: Iterable[str]) -> Iterable[Document]:
    """Yield one Document per id in ``doc_ids``, in that order.

    Ids with no rows in ``tokens`` (every token was whitespace) yield an
    empty Document so the document still reaches the output table.
    """
    columns = list(Token._fields)
    grouped = {
        doc_id: tuple(Token(*row) for row in group[columns].itertuples(index=False, name=None))
        for doc_id, group in tokens.groupby("doc_id", sort=False)
    }
    for doc_id in doc_ids:
        yield Document(doc_id, grouped.get(doc_id, ()))
