import json
from pathlib import Path

import pandas as pd
import pytest

from pseudobiber.io_utils import (
    load_parquet,
    load_token_table,
    save_csv,
    save_parquet,
    write_manifest,
)


def test_token_table_keeps_literal_null_tokens(tmp_path: Path) -> None:
    path = tmp_path / "tokens.csv"
    path.write_text(
        "doc_id,token,lemma,pos,tag,dep_rel\n"
        "d,null,null,NOUN,NN,nsubj\n"
        "d,NA,NA,PROPN,NNP,dobj\n"
        "d,,,SPACE,_SP,\n",
        encoding="utf-8",
    )
    df = load_token_table(path)
    assert df["token"].iloc[0] == "null"
    assert df["token"].iloc[1] == "NA"
    assert pd.isna(df["token"].iloc[2])


def test_tsv_and_parquet_token_tables(tmp_path: Path) -> None:
    df = pd.DataFrame({"doc_id": ["d"], "token": ["\"quoted"], "tag": ["NN"]})
    tsv = tmp_path / "tokens.tsv"
    tsv.write_text("doc_id\ttoken\ttag\nd\t\"quoted\tNN\n", encoding="utf-8")
    assert load_token_table(tsv)["token"].iloc[0] == "\"quoted"

    save_parquet(df, tmp_path / "tokens.parquet")
    pd.testing.assert_frame_equal(load_token_table(tmp_path / "tokens.parquet"), df)
    pd.testing.assert_frame_equal(load_parquet(tmp_path / "tokens.parquet"), df)


def test_unsupported_format(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Unsupported token table format"):
        load_token_table(tmp_path / "tokens.xlsx")


def test_save_csv_creates_parent(tmp_path: Path) -> None:
    out = tmp_path / "nested" / "features.csv"
    save_csv(pd.DataFrame({"doc_id": ["a"], "f_01_past_tense": [1]}), out)
    assert out.exists()


def test_write_manifest(tmp_path: Path) -> None:
    write_manifest(tmp_path, {"ttr_measure": "MATTR"}, {"stage": "features"})
    manifest = json.loads((tmp_path / "run_manifest.json").read_text())
    assert manifest["config"] == {"ttr_measure": "MATTR"}
    assert manifest["stage"] == "features"
    assert "pandas" in manifest["package_versions"]
