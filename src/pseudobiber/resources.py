"""
Static feature definitions: the pattern dictionary and the word lists.

Both ship as YAML under ``data/`` and are read once per process.  The
loaders return read-only structures (a ``MappingProxyType`` of tuples,
and a frozen ``WordLists`` of frozensets) so an engine can hold them
without anyone mutating a shared definition.  Alternate files can be
passed in for experiments or tests.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, fields
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

logger = logging.getLogger("pseudobiber")

DATA_DIR = Path(__file__).resolve().parent / "data"
DEFAULT_DICTIONARY = DATA_DIR / "dict.yaml"
DEFAULT_WORD_LISTS = DATA_DIR / "word_lists.yaml"

FEATURE_NAME = re.compile(r"^f_\d{2}_\w+$")

_CACHE: dict[Path, Any] = {}


@dataclass(frozen=True)
class WordLists:
    pronoun_matchlist: frozenset[str]
    verb_matchlist: frozenset[str]
    linking_matchlist: frozenset[str]
    nominalization_stoplist: frozenset[str]
    gerund_stoplist: frozenset[str]

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> WordLists:
        names = [f.name for f in fields(cls)]
        missing = [n for n in names if n not in mapping]
        if missing:
            raise ValueError(f"Word lists missing: {', '.join(missing)}")
        return cls(**{
            n: frozenset(str(w).lower() for w in (mapping[n] or [])) for n in names
        })


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def parse_dictionary(raw: Mapping[str, Any]) -> Mapping[str, tuple[str, ...]]:
    """Check a raw ``{feature: [patterns]}`` mapping and freeze it."""
    parsed: dict[str, tuple[str, ...]] = {}
    for name, patterns in raw.items():
        if not FEATURE_NAME.match(str(name)):
            raise ValueError(f"Invalid feature name '{name}' (expected f_NN_description)")
        if isinstance(patterns, str):
            patterns = [patterns]
        if not patterns or not all(isinstance(p, str) and p.strip() for p in patterns):
            raise ValueError(f"Feature '{name}' needs a non-empty list of string patterns")
        parsed[str(name)] = tuple(p.strip().lower() for p in patterns)
    return MappingProxyType(parsed)


def load_dictionary(path: str | Path | None = None) -> Mapping[str, tuple[str, ...]]:
    """Load the feature -> glob patterns dictionary."""
    path = Path(path) if path else DEFAULT_DICTIONARY
    if path not in _CACHE:
        _CACHE[path] = parse_dictionary(_read_yaml(path))
        logger.debug("Loaded %d dictionary features from %s", len(_CACHE[path]), path)
    return _CACHE[path]


def load_word_lists(path: str | Path | None = None) -> WordLists:
    """Load the exact-match word lists used by the rule features."""
    path = Path(path) if path else DEFAULT_WORD_LISTS
    if path not in _CACHE:
        _CACHE[path] = WordLists.from_mapping(_read_yaml(path))
    return _CACHE[path]
