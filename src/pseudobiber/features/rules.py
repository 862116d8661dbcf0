"""
Positional and dependency-based Biber features.

What this does:
    Evaluates one predicate per feature at every token of a document.
    A predicate looks at the current token and at neighbours a few
    positions back or ahead (``Window.lag`` / ``Window.lead``), plus the
    dependency label, and returns True when the token starts an instance
    of the feature.

What it produces:
    A DataFrame indexed by ``doc_id`` with one integer column per rule
    feature.

Why it matters:
    Passives, relative clauses, that-deletion or split infinitives have
    no closed word list.  They are approximated from the shape of the
    tag sequence and the parse, so each rule here is a small heuristic
    whose exact conditions define the feature.

Boundary behaviour:
    A neighbour outside the document makes its condition False unless
    the rule passes an explicit ``default``.  The rules that do (f_10,
    f_13, f_17, f_25, f_26, f_31, f_32, f_41, f_61) treat the document
    edge as if it were punctuation.
"""

from __future__ import annotations

import logging
import re
import string
from dataclasses import dataclass, field
from typing import Callable, Iterable

import pandas as pd
from tqdm import tqdm

from ..adapter import EngineProfile
from ..corpus import Document, Token
from ..resources import WordLists

logger = logging.getLogger("pseudobiber")

Predicate = Callable[[Token], bool]


class Window:
    """A document's token tuple viewed from one position."""

    __slots__ = ("tokens", "i")

    def __init__(self, tokens: tuple[Token, ...], i: int):
        self.tokens = tokens
        self.i = i

    @property
    def token(self) -> Token:
        return self.tokens[self.i]

    def at(self, offset: int) -> Token | None:
        j = self.i + offset
        if 0 <= j < len(self.tokens):
            return self.tokens[j]
        return None

    def lag(self, n: int, test: Predicate, default: bool = False) -> bool:
        t = self.at(-n)
        return default if t is None else test(t)

    def lead(self, n: int, test: Predicate, default: bool = False) -> bool:
        t = self.at(n)
        return default if t is None else test(t)


@dataclass(frozen=True)
class RuleContext:
    word_lists: WordLists
    profile: EngineProfile
    nominal_args: re.Pattern = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "nominal_args", re.compile(self.profile.nominal_args))


Rule = Callable[[Window, RuleContext], bool]

RULES: dict[str, Rule] = {}


def rule(name: str) -> Callable[[Rule], Rule]:
    def register(func: Rule) -> Rule:
        RULES[name] = func
        return func
    return register


# ── Token predicates ────────────────────────────────────────────────
_NOMINAL_TAG = re.compile(r"^N|^CD|DT")
_NOMINALIZATION = re.compile(r"tion$|tions$|ment$|ments$|ness$|nesses$|ity$|ities")
_GERUND = re.compile(r"ing$|ings$")
_PUNCT_CHAR = re.compile("[" + re.escape(string.punctuation) + "]")

_ADV_SUB_EXCLUDED = {"because", "if", "unless", "though", "although", "tho"}
_COORDINATED_POS = ("NOUN", "VERB", "ADJ", "ADV")


def pos_is(*values: str) -> Predicate:
    return lambda t: t.pos in values


def tag_is(value: str) -> Predicate:
    return lambda t: t.tag == value


def dep_is(value: str) -> Predicate:
    return lambda t: t.dep_rel == value


def token_is(value: str) -> Predicate:
    return lambda t: t.token == value


def nominal_tag(t: Token) -> bool:
    """Noun, numeral or determiner-like tag (NN*, CD*, DT, WDT, PDT)."""
    return _NOMINAL_TAG.search(t.tag) is not None


def is_nominalization(t: Token, ctx: RuleContext) -> bool:
    return (
        t.pos == "NOUN"
        and _NOMINALIZATION.search(t.token) is not None
        and t.token not in ctx.word_lists.nominalization_stoplist
    )


def is_gerund(t: Token, ctx: RuleContext) -> bool:
    return (
        _GERUND.search(t.token) is not None
        and ctx.nominal_args.search(t.dep_rel) is not None
        and t.token not in ctx.word_lists.gerund_stoplist
    )


# ── Tense, aspect and pronouns ──────────────────────────────────────
@rule("f_02_perfect_aspect")
def perfect_aspect(w: Window, ctx: RuleContext) -> bool:
    t = w.token
    return t.lemma == "have" and "aux" in t.dep_rel


@rule("f_10_demonstrative_pronoun")
def demonstrative_pronoun(w: Window, ctx: RuleContext) -> bool:
    """``this``/``that``/``these``/``those`` standing alone as an argument."""
    t = w.token
    return (
        "DT" in t.tag
        and w.lag(1, lambda p: not nominal_tag(p), default=True)
        and ctx.nominal_args.search(t.dep_rel) is not None
        and t.token in ctx.word_lists.pronoun_matchlist
    )


@rule("f_12_proverb_do")
def proverb_do(w: Window, ctx: RuleContext) -> bool:
    t = w.token
    return t.lemma == "do" and "aux" not in t.dep_rel


@rule("f_13_wh_question")
def wh_question(w: Window, ctx: RuleContext) -> bool:
    """A wh-word at the start of a clause followed by an auxiliary."""
    t = w.token
    return (
        t.tag.startswith("W")
        and t.pos != "DET"
        and w.lead(1, dep_is("aux"))
        and (
            w.lag(1, pos_is("PUNCT"), default=True)
            or w.lag(2, pos_is("PUNCT"), default=True)
        )
    )


# ── Nominal forms ───────────────────────────────────────────────────
@rule("f_14_nominalizations")
def nominalizations(w: Window, ctx: RuleContext) -> bool:
    return is_nominalization(w.token, ctx)


@rule("f_15_gerunds")
def gerunds(w: Window, ctx: RuleContext) -> bool:
    return is_gerund(w.token, ctx)


@rule("f_16_other_nouns")
def other_nouns(w: Window, ctx: RuleContext) -> bool:
    """Nouns that are neither nominalizations nor gerunds.

    Hyphenated nouns are left out, as are the NOUN-tagged tokens
    already counted by f_14 and f_15.
    """
    t = w.token
    if t.pos not in ("NOUN", "PROPN") or "-" in t.token:
        return False
    if is_nominalization(t, ctx):
        return False
    return not (t.pos == "NOUN" and is_gerund(t, ctx))


# ── Passives and main-verb be ───────────────────────────────────────
@rule("f_17_agentless_passives")
def agentless_passives(w: Window, ctx: RuleContext) -> bool:
    t = w.token
    return (
        t.dep_rel == ctx.profile.passive_aux
        and w.lead(2, lambda n: n.token != "by", default=True)
        and w.lead(3, lambda n: n.token != "by", default=True)
    )


@rule("f_18_by_passives")
def by_passives(w: Window, ctx: RuleContext) -> bool:
    t = w.token
    return t.dep_rel == ctx.profile.passive_aux and (
        w.lead(2, token_is("by")) or w.lead(3, token_is("by"))
    )


@rule("f_19_be_main_verb")
def be_main_verb(w: Window, ctx: RuleContext) -> bool:
    t = w.token
    return t.lemma == "be" and "aux" not in t.dep_rel


# ── Complement clauses ──────────────────────────────────────────────
@rule("f_21_that_verb_comp")
def that_verb_comp(w: Window, ctx: RuleContext) -> bool:
    t = w.token
    return t.token == "that" and t.pos == "SCONJ" and w.lag(1, pos_is("VERB"))


@rule("f_22_that_adj_comp")
def that_adj_comp(w: Window, ctx: RuleContext) -> bool:
    t = w.token
    return t.token == "that" and t.pos == "SCONJ" and w.lag(1, pos_is("ADJ"))


@rule("f_23_wh_clause")
def wh_clause(w: Window, ctx: RuleContext) -> bool:
    t = w.token
    return t.tag.startswith("W") and t.token != "which" and w.lag(1, pos_is("VERB"))


# ── Participial clauses ─────────────────────────────────────────────
def _participle_clause(w: Window, ctx: RuleContext, tag: str) -> bool:
    t = w.token
    return (
        t.tag == tag
        and t.dep_rel in ("advcl", ctx.profile.preposition)
        and w.lag(1, lambda p: p.pos != "AUX", default=True)
    )


@rule("f_25_present_participle")
def present_participle(w: Window, ctx: RuleContext) -> bool:
    return _participle_clause(w, ctx, "VBG")


@rule("f_26_past_participle")
def past_participle(w: Window, ctx: RuleContext) -> bool:
    return _participle_clause(w, ctx, "VBN")


@rule("f_27_past_participle_whiz")
def past_participle_whiz(w: Window, ctx: RuleContext) -> bool:
    """Reduced relative: ``the solution produced by this process``."""
    t = w.token
    return t.tag == "VBN" and t.dep_rel == "acl" and w.lag(1, pos_is("NOUN"))


@rule("f_28_present_participle_whiz")
def present_participle_whiz(w: Window, ctx: RuleContext) -> bool:
    """Reduced relative: ``the event causing this decline``."""
    t = w.token
    return t.tag == "VBG" and t.dep_rel == "acl" and w.lag(1, pos_is("NOUN"))


# ── Relative clauses ────────────────────────────────────────────────
@rule("f_29_that_subj")
def that_subj(w: Window, ctx: RuleContext) -> bool:
    t = w.token
    return t.token == "that" and w.lag(1, nominal_tag) and "nsubj" in t.dep_rel


@rule("f_30_that_obj")
def that_obj(w: Window, ctx: RuleContext) -> bool:
    t = w.token
    return (
        t.token == "that"
        and w.lag(1, nominal_tag)
        and t.dep_rel == ctx.profile.direct_object
    )


def _wh_relative(w: Window, who: Callable[[str], bool]) -> bool:
    """Shared head of the wh-relative rules.

    A wh-word right after a nominal, or after a comma that follows a
    nominal (``the man, who ...``), but not as the object of ask/tell.
    """
    t = w.token
    if not t.tag.startswith("W") or t.token == "that":
        return False
    if not w.lag(2, lambda p: p.lemma not in ("ask", "tell"), default=True):
        return False
    return w.lag(1, nominal_tag) or (
        w.lag(1, pos_is("PUNCT")) and w.lag(2, nominal_tag) and who(t.token)
    )


@rule("f_31_wh_subj")
def wh_subj(w: Window, ctx: RuleContext) -> bool:
    return _wh_relative(w, lambda tok: tok == "who") and "nsubj" in w.token.dep_rel


@rule("f_32_wh_obj")
def wh_obj(w: Window, ctx: RuleContext) -> bool:
    return _wh_relative(w, lambda tok: tok.startswith("who")) and "obj" in w.token.dep_rel


@rule("f_34_sentence_relatives")
def sentence_relatives(w: Window, ctx: RuleContext) -> bool:
    return w.token.token == "which" and w.lag(1, pos_is("PUNCT"))


# ── Adverbial clauses and prepositions ──────────────────────────────
@rule("f_35_because")
def because(w: Window, ctx: RuleContext) -> bool:
    return w.token.token == "because" and w.lead(1, lambda n: n.token != "of")


@rule("f_38_other_adv_sub")
def other_adv_sub(w: Window, ctx: RuleContext) -> bool:
    """Subordinators other than because/if/though.

    ``that`` only counts after an adverb (``so that``, ``now that``) and
    ``as`` never counts after an auxiliary; both are skipped at the
    start of a document.
    """
    t = w.token
    if t.pos != "SCONJ" or t.dep_rel != "mark" or t.token in _ADV_SUB_EXCLUDED:
        return False
    prev = w.at(-1)
    if t.token == "that":
        return prev is not None and prev.pos == "ADV"
    if t.token == "as":
        return prev is not None and prev.pos != "AUX"
    return True


@rule("f_39_prepositions")
def prepositions(w: Window, ctx: RuleContext) -> bool:
    return w.token.dep_rel == ctx.profile.preposition


# ── Adjectives ──────────────────────────────────────────────────────
@rule("f_40_adj_attr")
def adj_attr(w: Window, ctx: RuleContext) -> bool:
    t = w.token
    if t.pos != "ADJ" or "-" in t.token:
        return False
    return (
        w.lead(1, pos_is("NOUN"))
        or w.lead(1, pos_is("ADJ"))
        or (w.lead(1, token_is(",")) and w.lead(2, pos_is("ADJ")))
    )


@rule("f_41_adj_pred")
def adj_pred(w: Window, ctx: RuleContext) -> bool:
    """An adjective after a linking verb, not followed by a noun phrase."""
    t = w.token
    linking = ctx.word_lists.linking_matchlist
    return (
        t.pos == "ADJ"
        and w.lag(1, lambda p: p.pos == "VERB" and p.lemma in linking)
        and w.lead(1, lambda n: n.pos not in ("NOUN", "ADJ", "ADV"), default=True)
    )


@rule("f_51_demonstratives")
def demonstratives(w: Window, ctx: RuleContext) -> bool:
    t = w.token
    return t.token in ctx.word_lists.pronoun_matchlist and t.dep_rel == "det"


# ── Reduced and dispreferred forms ──────────────────────────────────
@rule("f_60_that_deletion")
def that_deletion(w: Window, ctx: RuleContext) -> bool:
    """A complement-taking verb directly followed by a clause.

    Three shapes: ``think he went``, ``think the dog went`` and
    ``think the old dog went``.
    """
    t = w.token
    if t.pos != "VERB" or t.lemma not in ctx.word_lists.verb_matchlist:
        return False
    if t.dep_rel == "amod":
        return False
    bare = (
        w.lead(1, dep_is("nsubj"))
        and w.lead(2, pos_is("VERB"))
        and w.lead(1, lambda n: n.tag != "WP")
        and w.lead(2, lambda n: n.tag != "VBG")
    )
    determiner = (
        w.lead(1, tag_is("DT"))
        and w.lead(2, dep_is("nsubj"))
        and w.lead(3, pos_is("VERB"))
    )
    determiner_adjective = (
        w.lead(1, tag_is("DT"))
        and w.lead(2, dep_is("amod"))
        and w.lead(3, dep_is("nsubj"))
        and w.lead(4, pos_is("VERB"))
    )
    return bare or determiner or determiner_adjective


@rule("f_61_stranded_preposition")
def stranded_preposition(w: Window, ctx: RuleContext) -> bool:
    t = w.token
    return (
        t.tag == "IN"
        and t.dep_rel == ctx.profile.preposition
        and w.lead(1, lambda n: _PUNCT_CHAR.search(n.tag) is not None, default=True)
    )


@rule("f_62_split_infinitve")
def split_infinitive(w: Window, ctx: RuleContext) -> bool:
    """``to`` followed by one or two adverbs and a base-form verb."""
    if w.token.tag != "TO" or not w.lead(1, tag_is("RB")):
        return False
    return w.lead(2, tag_is("VB")) or (w.lead(2, tag_is("RB")) and w.lead(3, tag_is("VB")))


@rule("f_63_split_auxiliary")
def split_auxiliary(w: Window, ctx: RuleContext) -> bool:
    if "aux" not in w.token.dep_rel or not w.lead(1, pos_is("ADV")):
        return False
    return w.lead(2, pos_is("VERB")) or (w.lead(2, pos_is("ADV")) and w.lead(3, pos_is("VERB")))


# ── Coordination ────────────────────────────────────────────────────
@rule("f_64_phrasal_coordination")
def phrasal_coordination(w: Window, ctx: RuleContext) -> bool:
    if w.token.tag != "CC":
        return False
    return any(
        w.lead(1, pos_is(pos)) and w.lag(1, pos_is(pos)) for pos in _COORDINATED_POS
    )


@rule("f_65_clausal_coordination")
def clausal_coordination(w: Window, ctx: RuleContext) -> bool:
    t = w.token
    if t.tag != "CC" or t.dep_rel == ctx.profile.root:
        return False
    return any(w.lead(n, dep_is("nsubj")) for n in (1, 2, 3))


RULE_FEATURES: tuple[str, ...] = tuple(RULES)


def evaluate_document(
    doc: Document,
    ctx: RuleContext,
    rules: dict[str, Rule] = RULES,
) -> dict[str, int]:
    """Count every rule over one document."""
    counts = dict.fromkeys(rules, 0)
    for i in range(len(doc.tokens)):
        w = Window(doc.tokens, i)
        for name, func in rules.items():
            if func(w, ctx):
                counts[name] += 1
    return counts


def count_rule_features(
    documents: Iterable[Document],
    ctx: RuleContext,
    rules: dict[str, Rule] = RULES,
    show_progress: bool = False,
) -> pd.DataFrame:
    """Rule-feature counts for each document, indexed by ``doc_id``."""
    rows: dict[str, dict[str, int]] = {}
    for doc in tqdm(documents, desc="Rule features", disable=not show_progress):
        rows[doc.doc_id] = evaluate_document(doc, ctx, rules)
    result = pd.DataFrame.from_dict(rows, orient="index", columns=list(rules))
    result = result.fillna(0).astype(int)
    result.index.name = "doc_id"
    logger.debug("Rule features: %d rules over %d documents", len(rules), len(result))
    return result
