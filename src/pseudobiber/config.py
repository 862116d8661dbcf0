"""
Configuration loading.

What this does:
    Loads pipeline settings from a YAML config file and merges any
    command-line overrides on top of the built-in defaults, then checks
    the values the feature engine depends on.

Why it matters:
    The same token table must give the same feature table on every run.
    Keeping the lexical-diversity measure, the normalization switch and
    the asset paths in one place means every stage agrees on them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .features.lexical import MEASURES


# ── Defaults (used when keys are absent from the YAML file) ─────────
DEFAULTS: dict[str, Any] = {
    "ttr_measure": "MATTR",
    "normalize": True,
    "mattr_window": 100,
    "msttr_segment": 100,
    "min_tokens_for_mattr": 200,
    "engine": None,
    "dictionary_path": None,
    "word_lists_path": None,
    "input_path": "data/tokens.csv",
    "output_dir": "outputs/features",
    "show_progress": True,
}


def load_config(
    path: str | Path = "config.yaml",
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Load YAML config, fill in defaults, and apply CLI overrides."""
    cfg = dict(DEFAULTS)
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            file_cfg = yaml.safe_load(f) or {}
        cfg.update(file_cfg)
    if overrides:
        cfg.update({k: v for k, v in overrides.items() if v is not None})
    return validate_config(cfg)


def validate_config(cfg: dict[str, Any]) -> dict[str, Any]:
    """Reject values the engine cannot run with.  Returns ``cfg``."""
    if cfg["ttr_measure"] not in MEASURES:
        raise ValueError(
            f"ttr_measure must be one of {MEASURES}, got {cfg['ttr_measure']!r}"
        )
    for key in ("mattr_window", "msttr_segment", "min_tokens_for_mattr"):
        value = cfg[key]
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            raise ValueError(f"{key} must be a positive integer, got {value!r}")
    if not isinstance(cfg["normalize"], bool):
        raise ValueError(f"normalize must be true or false, got {cfg['normalize']!r}")
    return cfg
