"""
student_risk/cli.py

Command line access to the intake pipeline and the dataset store.

Run (import an intake CSV or JSON file)
---------------------------------------
python -m student_risk.cli import data/intake_synthetic.csv

Run (inspect)
-------------
python -m student_risk.cli list --level High
python -m student_risk.cli summary --out data/summary.json

Run (rebuild the JSON dataset from the line-oriented store)
-----------------------------------------------------------
python -m student_risk.cli rebuild-from-rows
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .analytics import summarize
from .config import configure_logging, load_settings
from .exceptions import MalformedInputError, PersistenceError, ValidationError
from .normalize import decode_payload
from .pipeline import IntakePipeline
from .scoring import RiskLevel
from .store import StudentStore

logger = logging.getLogger(__name__)

EXIT_PERSISTENCE = 1
EXIT_BAD_INPUT = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    settings = load_settings()

    parser = argparse.ArgumentParser(description="Student risk dataset tools.")
    parser.add_argument(
        "--dataset",
        type=str,
        default=str(settings.dataset_path),
        help="Path to the whole-dataset JSON file.",
    )
    parser.add_argument(
        "--append-store",
        type=str,
        default=str(settings.append_store_path),
        help="Path to the line-oriented CSV store.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=settings.log_level,
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p_import = sub.add_parser("import", help="Import an intake CSV or JSON file.")
    p_import.add_argument("path", type=str, help="Intake file (.csv or .json).")
    p_import.add_argument(
        "--no-persist",
        action="store_true",
        help="Score and validate only; do not write the dataset or line store.",
    )

    p_list = sub.add_parser("list", help="List stored students.")
    p_list.add_argument(
        "--level",
        choices=[level.value for level in RiskLevel],
        default=None,
        help="Only show students at this risk level.",
    )

    p_summary = sub.add_parser("summary", help="Print cohort metrics.")
    p_summary.add_argument("--out", type=str, default=None, help="Also write metrics as JSON.")

    sub.add_parser("rebuild-from-rows", help="Load the line store and save it as the JSON dataset.")

    return parser.parse_args(argv)


def _import(store: StudentStore, path: Path, persist: bool) -> int:
    if not path.exists():
        print(f"Intake file not found: {path}", file=sys.stderr)
        return EXIT_BAD_INPUT

    text = decode_payload(path.read_bytes())
    pipeline = IntakePipeline(store, persist=persist)
    if path.suffix.lower() == ".json":
        added = pipeline.submit_batch(text)
    else:
        added = pipeline.submit_csv(text)

    print(f"Imported {len(added)} students (store now holds {len(store)}).")
    for student in added:
        print(f"  {student.student_id}  {student.name:<24} {student.risk_score:>4}  {student.risk_level}")
    return 0


def _list(store: StudentStore, level: Optional[str]) -> int:
    for student in store.filter_by_level(level):
        print(
            f"{student.student_id}  {student.name:<24} grade {student.grade:<3}"
            f" {student.risk_score:>4}  {student.risk_level}"
        )
    return 0


def _summary(store: StudentStore, out: Optional[str]) -> int:
    metrics = summarize(store.students)
    text = json.dumps(metrics, indent=2)
    print(text)
    if out:
        out_path = Path(out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    store = StudentStore(args.dataset, args.append_store)
    try:
        if args.command == "rebuild-from-rows":
            store.load_rows()
            store.save()
            print(f"Rebuilt {args.dataset} with {len(store)} students.")
            return 0

        store.load()
        if args.command == "import":
            return _import(store, Path(args.path), persist=not args.no_persist)
        if args.command == "list":
            return _list(store, args.level)
        return _summary(store, args.out)
    except ValidationError as exc:
        print(f"Rejected: {exc}", file=sys.stderr)
        return EXIT_BAD_INPUT
    except MalformedInputError as exc:
        print(f"Malformed input: {exc}", file=sys.stderr)
        return EXIT_BAD_INPUT
    except PersistenceError as exc:
        logger.error("Storage failure: %s", exc)
        print(f"Storage failure: {exc}", file=sys.stderr)
        return EXIT_PERSISTENCE
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
