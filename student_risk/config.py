"""
student_risk/config.py

Runtime settings for the store, CLI and dashboard.

Defaults live here as module constants; each one can be overridden from the
environment. Entry points call `load_settings()` once and pass paths down
explicitly; library code never reads the environment itself.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DATA_DIR = Path("data")
DATASET_FILENAME = "students.json"
APPEND_STORE_FILENAME = "data.csv"
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(levelname)s | %(name)s | %(message)s"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    dataset_path: Path
    append_store_path: Path
    log_level: str


def load_settings() -> Settings:
    """Read settings from the environment, falling back to the defaults."""
    data_dir = Path(os.getenv("STUDENT_RISK_DATA_DIR", str(DEFAULT_DATA_DIR)))
    dataset = os.getenv("STUDENT_RISK_DATASET")
    append_store = os.getenv("STUDENT_RISK_APPEND_STORE")

    return Settings(
        data_dir=data_dir,
        dataset_path=Path(dataset) if dataset else data_dir / DATASET_FILENAME,
        append_store_path=(
            Path(append_store) if append_store else data_dir / APPEND_STORE_FILENAME
        ),
        log_level=os.getenv("STUDENT_RISK_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Install the root handler. Only entry points should call this."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )
