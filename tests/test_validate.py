import pandas as pd
import pytest

from conftest import SAMPLES, SPACY_COLUMNS, spacy_frame
from pseudobiber.engine import biber
from pseudobiber.validate import (
    MissingAnnotationError,
    NoDocumentsError,
    PseudoBiberError,
    UnsupportedInputTypeError,
    build_profile,
    check_missingness,
)


def test_missing_dependency_parse() -> None:
    frame = spacy_frame(SAMPLES).drop(columns="dep_rel")
    with pytest.raises(MissingAnnotationError, match="dependency parse") as exc:
        biber(frame)
    assert exc.value.column == "dep_rel"


def test_missing_fine_tags() -> None:
    frame = spacy_frame(SAMPLES).drop(columns="tag")
    with pytest.raises(MissingAnnotationError, match="fine-grained"):
        biber(frame)


def test_rejects_non_table_input() -> None:
    with pytest.raises(UnsupportedInputTypeError):
        biber(["The", "task", "was", "done"])


def test_rejects_empty_table() -> None:
    with pytest.raises(NoDocumentsError):
        biber(pd.DataFrame(columns=SPACY_COLUMNS))


def test_errors_share_a_base_class() -> None:
    for error in (MissingAnnotationError, UnsupportedInputTypeError, NoDocumentsError):
        assert issubclass(error, PseudoBiberError)


def test_check_missingness() -> None:
    df = pd.DataFrame({"token": ["a", None], "tag": ["NN", "NN"]})
    result = check_missingness(df)
    assert result["token"] == {"null_count": 1, "null_rate": 0.5}
    assert result["tag"]["null_count"] == 0


def test_build_profile() -> None:
    frame = spacy_frame({"a": SAMPLES["by_passive"], "b": SAMPLES["adj_pred"]})
    profile = build_profile(frame, short_threshold=6)
    assert profile["engine"] == "spacy"
    assert profile["documents"] == 2
    assert profile["row_count"] == 12
    assert profile["document_lengths"]["max"] == 7
    assert profile["document_lengths"]["short_documents"] == 1
