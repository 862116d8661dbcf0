#!/usr/bin/env python3
"""
Build the Biber feature table from an annotated token table.

WHAT THIS DOES
    Loads a token table exported from spaCy or UDPipe (CSV, TSV or
    Parquet), profiles it, and runs the feature engine over every
    document: dictionary features, rule features, lexical diversity and
    mean word length.

WHAT IT PRODUCES
    <output_dir>/data_profile.json: structural report on the input.
    <output_dir>/features.csv: one row per document, doc_id followed
    by the 67 feature columns (66 when --measure none).
    <output_dir>/features.parquet: the same table with dtypes preserved.
    <output_dir>/run_manifest.json: versions, config and row counts.

WHY IT MATTERS
    Feature rates are only comparable across corpora when they come
    from the same dictionary and settings.  The manifest records both.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from pseudobiber.config import load_config
from pseudobiber.engine import FeatureEngine
from pseudobiber.io_utils import (
    ensure_dir,
    load_token_table,
    save_csv,
    save_json,
    save_parquet,
    write_manifest,
)
from pseudobiber.utils import setup_logging
from pseudobiber.validate import build_profile


def main() -> None:
    parser = argparse.ArgumentParser(description="Extract Biber features from tagged tokens")
    parser.add_argument("--config", default="config.yaml")
    parser.add_argument("--input", help="Token table (.csv, .tsv or .parquet)")
    parser.add_argument("--output-dir", help="Directory for features.csv and reports")
    parser.add_argument("--engine", choices=["spacy", "udpipe"],
                        help="Annotation scheme (detected from the columns if omitted)")
    parser.add_argument("--measure", choices=["MATTR", "TTR", "CTTR", "MSTTR", "none"],
                        help="Lexical diversity measure for f_43")
    parser.add_argument("--raw", action="store_true",
                        help="Report raw counts instead of rates per 1,000 tokens")
    args = parser.parse_args()

    cfg = load_config(args.config, overrides={
        "input_path": args.input,
        "output_dir": args.output_dir,
        "engine": args.engine,
        "ttr_measure": args.measure,
        "normalize": False if args.raw else None,
    })
    logger = setup_logging()
    logger.info("=== Build Biber Features ===")

    tokens = load_token_table(cfg["input_path"])
    logger.info("Loaded %d token rows from %s", len(tokens), cfg["input_path"])

    out_dir = ensure_dir(cfg["output_dir"])

    profile = build_profile(
        tokens,
        engine=cfg["engine"],
        short_threshold=cfg["min_tokens_for_mattr"],
    )
    save_json(profile, out_dir / "data_profile.json")
    logger.info("Detected %s annotations across %d documents",
                profile["engine"], profile["documents"])

    engine = FeatureEngine.from_config(cfg)
    features = engine.transform(tokens, engine=cfg["engine"])

    save_csv(features, out_dir / "features.csv")
    save_parquet(features, out_dir / "features.parquet")
    logger.info("Saved %d features for %d documents to %s",
                features.shape[1] - 1, len(features), out_dir / "features.csv")

    write_manifest(out_dir, cfg, {
        "stage": "features",
        "engine": profile["engine"],
        "n_documents": len(features),
        "n_features": features.shape[1] - 1,
    })
    logger.info("Done.")


if __name__ == "__main__":
    main()
