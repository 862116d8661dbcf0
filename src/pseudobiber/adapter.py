"""
Tagger adapter: normalize spaCy and UDPipe token tables.

What this does:
    Takes the token table produced by either supported annotator and
    rewrites it into one canonical shape: ``doc_id, sentence_id,
    position, token, lemma, pos, tag, dep_rel``, lowercased, with
    whitespace tokens removed and newlines treated as punctuation.
    It also decides which annotator produced the table and returns the
    matching ``EngineProfile``.

What it produces:
    A ``TokenTable``: the canonical DataFrame, the engine profile, and
    the ordered list of every document id seen in the input.

Why it matters:
    spaCy and UDPipe label the same constructions differently (spaCy
    says ``auxpass``/``prep``/``dobj``, UDPipe says ``aux:pass``/
    ``case``/``obj``) and keep their fine tags in different columns.
    The rule features only ever ask the profile for a label, so one set
    of rules serves both annotators.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pandas as pd

from .corpus import Token
from .validate import ensure_dataframe, validate_schema

logger = logging.getLogger("pseudobiber")


@dataclass(frozen=True)
class EngineProfile:
    """Annotator-specific labels for the relations the rules care about."""

    name: str
    coarse_tag_column: str
    fine_tag_column: str
    passive_aux: str
    direct_object: str
    preposition: str
    root: str
    nominal_args: str  # regex over dep_rel for subject/object/oblique nominals


SPACY = EngineProfile(
    name="spacy",
    coarse_tag_column="pos",
    fine_tag_column="tag",
    passive_aux="auxpass",
    direct_object="dobj",
    preposition="prep",
    root="ROOT",
    nominal_args="nsub|dobj|pobj",
)

UDPIPE = EngineProfile(
    name="udpipe",
    coarse_tag_column="upos",
    fine_tag_column="xpos",
    passive_aux="aux:pass",
    direct_object="obj",
    preposition="case",
    root="root",
    nominal_args="nsub|obj|obl",
)

PROFILES: dict[str, EngineProfile] = {p.name: p for p in (SPACY, UDPIPE)}

_UDPIPE_LABELS = {"aux:pass", "obj", "case", "obl", "nsubj:pass", "root"}
_SPACY_LABELS = {"auxpass", "dobj", "prep", "pobj", "nsubjpass", "ROOT"}

# Canonical column -> accepted source names, in order of preference.
COLUMN_ALIASES: dict[str, list[str]] = {
    "doc_id": ["doc_id", "doc", "document", "docname"],
    "sentence_id": ["sentence_id", "sent_id"],
    "token_id": ["token_id", "tok_id", "id"],
    "token": ["token", "text", "word", "form"],
    "lemma": ["lemma"],
    "pos": ["pos", "upos", "coarse_tag"],
    "tag": ["tag", "xpos", "fine_tag"],
    "dep_rel": ["dep_rel", "deprel", "dep", "dependency_relation"],
}


@dataclass(frozen=True)
class TokenTable:
    tokens: pd.DataFrame
    profile: EngineProfile
    doc_ids: tuple[str, ...]


def _find_column(frame: pd.DataFrame, candidates: list[str]) -> str | None:
    for name in candidates:
        if name in frame.columns:
            return name
    return None


def detect_engine(frame: pd.DataFrame) -> EngineProfile:
    """Guess which annotator produced ``frame``.

    UDPipe tables carry ``upos``/``xpos`` columns.  Otherwise the
    dependency label vocabulary decides, defaulting to spaCy.
    """
    if "xpos" in frame.columns or "upos" in frame.columns:
        return UDPIPE
    dep_col = _find_column(frame, COLUMN_ALIASES["dep_rel"])
    if dep_col is not None:
        labels = set(frame[dep_col].dropna().astype(str).unique())
        if labels & _UDPIPE_LABELS and not labels & _SPACY_LABELS:
            return UDPIPE
    return SPACY


def resolve_profile(frame: pd.DataFrame, engine: str | EngineProfile | None = None) -> EngineProfile:
    if isinstance(engine, EngineProfile):
        return engine
    if engine is None:
        profile = detect_engine(frame)
        logger.debug("Detected %s token table", profile.name)
        return profile
    try:
        return PROFILES[engine.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown engine '{engine}'; expected one of {sorted(PROFILES)}"
        ) from None


def resolve_columns(frame: pd.DataFrame, profile: EngineProfile) -> dict[str, str | None]:
    """Map canonical column names to the columns present in ``frame``."""
    column_map: dict[str, str | None] = {}
    for canonical, aliases in COLUMN_ALIASES.items():
        if canonical == "pos":
            aliases = [profile.coarse_tag_column] + aliases
        elif canonical == "tag":
            aliases = [profile.fine_tag_column] + aliases
        column_map[canonical] = _find_column(frame, aliases)
    return column_map


def prepare_tokens(
    frame: pd.DataFrame,
    engine: str | EngineProfile | None = None,
) -> TokenTable:
    """Validate and normalize an annotated token table.

    Raises:
        UnsupportedInputTypeError: ``frame`` is not a DataFrame.
        MissingAnnotationError: a required annotation column is absent.
    """
    frame = ensure_dataframe(frame)
    profile = resolve_profile(frame, engine)
    column_map = resolve_columns(frame, profile)
    validate_schema(frame, column_map)

    out = pd.DataFrame({
        canonical: frame[source].to_numpy()
        for canonical, source in column_map.items()
        if source is not None
    })
    out["doc_id"] = out["doc_id"].astype(str)
    doc_ids = tuple(pd.unique(out["doc_id"]))

    # UDPipe emits an unannotated row for each multi-word token ("3-4")
    # and for empty nodes ("8.1"); the annotated parts follow it.  Numeric
    # ids cannot hold ranges, and float ids such as 3.0 are not empty nodes.
    if "token_id" in out.columns and not pd.api.types.is_numeric_dtype(out["token_id"]):
        ranges = out["token_id"].astype(str).str.fullmatch(r"\d+-\d+|\d+\.\d+")
        if ranges.any():
            logger.info("Dropping %d multi-word token rows", int(ranges.sum()))
            out = out[~ranges]

    if "sentence_id" not in out.columns:
        out["sentence_id"] = 0
    for col in ("lemma", "pos", "tag", "dep_rel"):
        out[col] = out[col].fillna("").astype(str)
    out["token"] = out["token"].fillna("").astype(str).str.lower()

    newline = out["token"] == "\n"
    out.loc[newline, "pos"] = "PUNCT"
    blank = (out["token"].str.strip() == "") & ~newline
    out = out[(out["pos"] != "SPACE") & ~blank]

    order = {doc_id: i for i, doc_id in enumerate(doc_ids)}
    out = (
        out.assign(_doc_order=out["doc_id"].map(order))
        .sort_values("_doc_order", kind="stable")
        .drop(columns="_doc_order")
        .reset_index(drop=True)
    )
    out["position"] = out.groupby("doc_id", sort=False).cumcount()

    return TokenTable(tokens=out[list(Token._fields)], profile=profile, doc_ids=doc_ids)
