"""
Shared utilities: logging, version capture, git hash.

What this does:
    Provides a consistent logger for the feature engine and the stage
    script, and functions to record software versions and the current
    git commit so each feature table can be traced to the code and
    dictionary that produced it.
"""

from __future__ import annotations

import importlib.metadata
import logging
import subprocess
import sys
from pathlib import Path


TRACKED_PACKAGES = [
    "pseudobiber",
    "pandas",
    "numpy",
    "pyyaml",
    "tqdm",
    "pyarrow",
]


def setup_logging(
    log_dir: str | Path | None = "logs",
    name: str = "pseudobiber",
    level: int = logging.INFO,
) -> logging.Logger:
    """Configure and return a logger that writes to the console and, optionally, a file."""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger  # already configured

    logger.setLevel(level)
    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Console handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    # File handler
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_dir / "pipeline.log")
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger


def capture_versions() -> dict[str, str]:
    """Return installed versions of key packages."""
    versions: dict[str, str] = {}
    for pkg in TRACKED_PACKAGES:
        try:
            versions[pkg] = importlib.metadata.version(pkg)
        except importlib.metadata.PackageNotFoundError:
            versions[pkg] = "not installed"
    return versions


def get_git_hash() -> str | None:
    """Return the current short git commit hash, or None if not in a repo."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except (FileNotFoundError, subprocess.TimeoutExpired):
        pass
    return None
