"""Shared fixtures: small hand-annotated token tables in spaCy and UDPipe shape."""
from __future__ import annotations

import pandas as pd
import pytest

from pseudobiber.adapter import SPACY, UDPIPE
from pseudobiber.corpus import Document, Token
from pseudobiber.features.rules import RuleContext
from pseudobiber.resources import load_word_lists

SPACY_COLUMNS = ["doc_id", "sentence_id", "token_id", "token", "lemma", "pos", "tag", "dep_rel"]
UDPIPE_COLUMNS = [
    "doc_id", "paragraph_id", "sentence_id", "token_id",
    "token", "lemma", "upos", "xpos", "dep_rel",
]

# (token, lemma, pos, tag, dep_rel) per token, as spacyr::spacy_parse returns them.
SAMPLES: dict[str, list[tuple[str, str, str, str, str]]] = {
    "by_passive": [
        ("The", "the", "DET", "DT", "det"),
        ("task", "task", "NOUN", "NN", "nsubjpass"),
        ("was", "be", "AUX", "VBD", "auxpass"),
        ("done", "do", "VERB", "VBN", "ROOT"),
        ("by", "by", "ADP", "IN", "agent"),
        ("Steve", "Steve", "PROPN", "NNP", "pobj"),
        (".", ".", "PUNCT", ".", "punct"),
    ],
    "agentless_passive": [
        ("The", "the", "DET", "DT", "det"),
        ("cake", "cake", "NOUN", "NN", "nsubjpass"),
        ("was", "be", "AUX", "VBD", "auxpass"),
        ("eaten", "eat", "VERB", "VBN", "ROOT"),
        (".", ".", "PUNCT", ".", "punct"),
    ],
    "that_deletion": [
        ("I", "I", "PRON", "PRP", "nsubj"),
        ("think", "think", "VERB", "VBP", "ROOT"),
        ("he", "he", "PRON", "PRP", "nsubj"),
        ("went", "go", "VERB", "VBD", "ccomp"),
        (".", ".", "PUNCT", ".", "punct"),
    ],
    "split_infinitive": [
        ("He", "he", "PRON", "PRP", "nsubj"),
        ("wants", "want", "VERB", "VBZ", "ROOT"),
        ("to", "to", "PART", "TO", "aux"),
        ("convincingly", "convincingly", "ADV", "RB", "advmod"),
        ("prove", "prove", "VERB", "VB", "xcomp"),
        ("that", "that", "SCONJ", "IN", "mark"),
        ("it", "it", "PRON", "PRP", "nsubj"),
        ("works", "work", "VERB", "VBZ", "ccomp"),
        (".", ".", "PUNCT", ".", "punct"),
    ],
    "initial_demonstrative": [
        ("That", "that", "PRON", "DT", "nsubj"),
        ("is", "be", "AUX", "VBZ", "ROOT"),
        ("fine", "fine", "ADJ", "JJ", "acomp"),
        (".", ".", "PUNCT", ".", "punct"),
    ],
    "perfect_aspect": [
        ("She", "she", "PRON", "PRP", "nsubj"),
        ("has", "have", "AUX", "VBZ", "aux"),
        ("left", "leave", "VERB", "VBN", "ROOT"),
        (".", ".", "PUNCT", ".", "punct"),
    ],
    "existential_there": [
        ("There", "there", "PRON", "EX", "expl"),
        ("is", "be", "VERB", "VBZ", "ROOT"),
        ("a", "a", "DET", "DT", "det"),
        ("problem", "problem", "NOUN", "NN", "attr"),
        (".", ".", "PUNCT", ".", "punct"),
    ],
    "wh_question": [
        ("What", "what", "PRON", "WP", "dobj"),
        ("did", "do", "AUX", "VBD", "aux"),
        ("you", "you", "PRON", "PRP", "nsubj"),
        ("see", "see", "VERB", "VB", "ROOT"),
        ("?", "?", "PUNCT", ".", "punct"),
    ],
    "sentence_relative": [
        ("He", "he", "PRON", "PRP", "nsubj"),
        ("left", "leave", "VERB", "VBD", "ROOT"),
        (",", ",", "PUNCT", ",", "punct"),
        ("which", "which", "PRON", "WDT", "nsubj"),
        ("surprised", "surprise", "VERB", "VBD", "relcl"),
        ("us", "we", "PRON", "PRP", "dobj"),
        (".", ".", "PUNCT", ".", "punct"),
    ],
    "adj_pred": [
        ("The", "the", "DET", "DT", "det"),
        ("horse", "horse", "NOUN", "NN", "nsubj"),
        ("seems", "seem", "VERB", "VBZ", "ROOT"),
        ("big", "big", "ADJ", "JJ", "acomp"),
        (".", ".", "PUNCT", ".", "punct"),
    ],
    "that_adj_comp": [
        ("I", "I", "PRON", "PRP", "nsubj"),
        ("am", "be", "AUX", "VBP", "ROOT"),
        ("sure", "sure", "ADJ", "JJ", "acomp"),
        ("that", "that", "SCONJ", "IN", "mark"),
        ("he", "he", "PRON", "PRP", "nsubj"),
        ("left", "leave", "VERB", "VBD", "ccomp"),
        (".", ".", "PUNCT", ".", "punct"),
    ],
    "present_participle": [
        ("Walking", "walk", "VERB", "VBG", "advcl"),
        ("home", "home", "ADV", "RB", "advmod"),
        (",", ",", "PUNCT", ",", "punct"),
        ("he", "he", "PRON", "PRP", "nsubj"),
        ("sang", "sing", "VERB", "VBD", "ROOT"),
        (".", ".", "PUNCT", ".", "punct"),
    ],
    "quickbrown": [
        ("The", "the", "DET", "DT", "det"),
        ("quick", "quick", "ADJ", "JJ", "amod"),
        ("brown", "brown", "ADJ", "JJ", "amod"),
        ("fox", "fox", "NOUN", "NN", "nsubj"),
        ("jumps", "jump", "VERB", "VBZ", "ROOT"),
        ("over", "over", "ADP", "IN", "prep"),
        ("the", "the", "DET", "DT", "det"),
        ("lazy", "lazy", "ADJ", "JJ", "amod"),
        ("dog", "dog", "NOUN", "NN", "pobj"),
        (".", ".", "PUNCT", ".", "punct"),
    ],
}

# The passive sentence as UDPipe (EWT model) annotates it.
UDPIPE_PASSIVE: list[tuple[str, str, str, str, str]] = [
    ("The", "the", "DET", "DT", "det"),
    ("task", "task", "NOUN", "NN", "nsubj:pass"),
    ("was", "be", "AUX", "VBD", "aux:pass"),
    ("done", "do", "VERB", "VBN", "root"),
    ("by", "by", "ADP", "IN", "case"),
    ("Steve", "Steve", "PROPN", "NNP", "obl"),
    (".", ".", "PUNCT", ".", "punct"),
]


def spacy_frame(docs: dict[str, list[tuple[str, str, str, str, str]]]) -> pd.DataFrame:
    rows = []
    for doc_id, tokens in docs.items():
        for i, (token, lemma, pos, tag, dep) in enumerate(tokens, start=1):
            rows.append((doc_id, 1, i, token, lemma, pos, tag, dep))
    return pd.DataFrame(rows, columns=SPACY_COLUMNS)


def udpipe_frame(docs: dict[str, list[tuple[str, str, str, str, str]]]) -> pd.DataFrame:
    rows = []
    for doc_id, tokens in docs.items():
        for i, (token, lemma, upos, xpos, dep) in enumerate(tokens, start=1):
            rows.append((doc_id, 1, 1, str(i), token, lemma, upos, xpos, dep))
    return pd.DataFrame(rows, columns=UDPIPE_COLUMNS)


def make_document(
    tokens: list[tuple[str, str, str, str, str]],
    doc_id: str = "doc",
) -> Document:
    """A Document built directly from annotation tuples (tokens lowercased)."""
    return Document(doc_id, tuple(
        Token(doc_id, 0, i, token.lower(), lemma, pos, tag, dep)
        for i, (token, lemma, pos, tag, dep) in enumerate(tokens)
    ))


def _letters(n: int) -> str:
    return "w" + "".join(chr(ord("a") + int(d)) for d in str(n))


def filler_document(doc_id: str, n_tokens: int, vocabulary: int = 50) -> Document:
    """A document of ``n_tokens`` nouns cycling through ``vocabulary`` types."""
    words = [_letters(i % vocabulary) for i in range(n_tokens)]
    return Document(doc_id, tuple(
        Token(doc_id, 0, i, word, word, "NOUN", "NN", "dobj")
        for i, word in enumerate(words)
    ))


@pytest.fixture
def spacy_samples() -> pd.DataFrame:
    return spacy_frame(SAMPLES)


@pytest.fixture
def spacy_ctx() -> RuleContext:
    return RuleContext(word_lists=load_word_lists(), profile=SPACY)


@pytest.fixture
def udpipe_ctx() -> RuleContext:
    return RuleContext(word_lists=load_word_lists(), profile=UDPIPE)
