"""
I/O helpers for reading token tables and writing feature tables.

What this does:
    Reads annotated token tables exported by spaCy or UDPipe (CSV, TSV
    or Parquet) and provides simple, consistent writers for CSV,
    Parquet and JSON.  Also writes a run_manifest.json that records the
    software versions, config and timestamp of each run.
"""

from __future__ import annotations

import json
import platform
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pandas as pd

from .utils import capture_versions, get_git_hash

# Token tables hold literal tokens such as "null", "NA" or "nan"; only
# truly empty cells are missing.
_READ_OPTIONS: dict[str, Any] = {"keep_default_na": False, "na_values": [""]}


def ensure_dir(path: str | Path) -> Path:
    """Create directory (and parents) if it doesn't exist. Returns the Path."""
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def load_parquet(path: str | Path) -> pd.DataFrame:
    return pd.read_parquet(path)


def load_token_table(path: str | Path) -> pd.DataFrame:
    """Read a token table; the format is chosen from the file extension."""
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix == ".parquet":
        return load_parquet(p)
    if suffix in (".tsv", ".tab"):
        return pd.read_csv(p, sep="\t", quoting=3, **_READ_OPTIONS)
    if suffix == ".csv":
        return pd.read_csv(p, **_READ_OPTIONS)
    raise ValueError(f"Unsupported token table format '{suffix}' ({p})")


def save_parquet(df: pd.DataFrame, path: str | Path) -> None:
    p = Path(path)
    ensure_dir(p.parent)
    df.to_parquet(p, index=False)


def save_csv(df: pd.DataFrame, path: str | Path, **kwargs: Any) -> None:
    p = Path(path)
    ensure_dir(p.parent)
    df.to_csv(p, index=False, **kwargs)


def save_json(obj: Any, path: str | Path) -> None:
    p = Path(path)
    ensure_dir(p.parent)
    with open(p, "w") as f:
        json.dump(obj, f, indent=2, default=str)


def write_manifest(
    output_dir: str | Path,
    config: dict[str, Any],
    extra_info: dict[str, Any] | None = None,
) -> None:
    """Write run_manifest.json capturing reproducibility metadata."""
    manifest: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "python_version": sys.version,
        "platform": platform.platform(),
        "git_hash": get_git_hash(),
        "package_versions": capture_versions(),
        "config": config,
    }
    if extra_info:
        manifest.update(extra_info)
    save_json(manifest, Path(output_dir) / "run_manifest.json")
