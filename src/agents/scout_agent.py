"""
ScoutAgent
Pre-run diagnostics for the MSOA aggregation inputs.

This agent:
- Reads the dataset registry from config/datasets.yaml
- Loads each CSV as text
- Checks required columns, numeric columns and minimum row counts against
  config/validation_schemas/<dataset>.yaml
- Counts duplicate join keys (the pipeline keeps the last one)
- Writes a diagnostics JSON report next to the pipeline outputs
- Prints a summary to stdout

Safe to run anytime. Does not modify data.
"""

from __future__ import annotations

import datetime as dt
import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from ingestion.csv_table import parse_numeric
from ingestion.registry import (
    DATASETS_CONFIG,
    ROOT,
    SCHEMAS_DIR,
    dataset_path,
    load_config,
    load_schema,
    output_config,
)


# -------------------------------------------------------
# Dataclasses
# -------------------------------------------------------

@dataclass
class DatasetCheck:
    dataset_key: str
    name: str
    path: str
    exists: bool
    readable: bool
    n_rows: Optional[int]
    columns: List[str]
    schema_checked: bool
    schema_ok: Optional[bool]
    missing_columns: List[str]
    non_numeric_columns: List[str]
    duplicate_keys: Optional[int]
    errors: List[str]


@dataclass
class ScoutReport:
    timestamp_utc: str
    repo_root: str
    datasets_registry_path: str
    all_ok: bool
    datasets: List[DatasetCheck]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp_utc": self.timestamp_utc,
            "repo_root": self.repo_root,
            "datasets_registry_path": self.datasets_registry_path,
            "all_ok": self.all_ok,
            "datasets": [asdict(d) for d in self.datasets],
        }


# -------------------------------------------------------
# Validation helpers
# -------------------------------------------------------

def validate_required(df: pd.DataFrame, schema: Dict[str, Any]):
    missing = [c for c in schema.get("required_columns", []) if c not in df.columns]
    return len(missing) == 0, missing


def validate_numeric(df: pd.DataFrame, schema: Dict[str, Any], path: Path):
    non_numeric = []
    for col in schema.get("numeric_columns", []):
        if col not in df.columns:
            continue
        try:
            parse_numeric(df[col], path=path, tag="SCOUT")
        except ValueError as exc:
            non_numeric.append(f"{col}: {exc}")
    return len(non_numeric) == 0, non_numeric


def validate_row_count(df: pd.DataFrame, schema: Dict[str, Any]):
    expected = schema.get("min_rows")
    if not expected:
        return True, None
    return len(df) >= expected, expected


def count_duplicates(df: pd.DataFrame, schema: Dict[str, Any]) -> Optional[int]:
    key = schema.get("key_column")
    if not key or key not in df.columns:
        return None
    return int(df[key].duplicated().sum())


# -------------------------------------------------------
# ScoutAgent
# -------------------------------------------------------

class ScoutAgent:
    def __init__(
        self,
        registry_path: Path | None = None,
        schemas_dir: Path | None = None,
        root: Path = ROOT,
    ):
        self.registry_path = registry_path or DATASETS_CONFIG
        self.schemas_dir = schemas_dir or SCHEMAS_DIR
        self.root = root
        self.config = load_config(self.registry_path)

    def run(self) -> ScoutReport:
        results = []

        for key, meta in self.config["datasets"].items():
            result = self._check_dataset(key, meta)
            results.append(result)

        all_ok = all(r.exists and r.readable and (r.schema_ok is not False) for r in results)

        return ScoutReport(
            timestamp_utc=dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds"),
            repo_root=str(self.root),
            datasets_registry_path=str(self.registry_path),
            all_ok=all_ok,
            datasets=results,
        )

    def save(self, report: ScoutReport) -> Path:
        out_cfg = output_config(self.config)
        diag_dir = Path(out_cfg["dir"]) / out_cfg["diagnostics"]
        if not diag_dir.is_absolute():
            diag_dir = self.root / diag_dir
        diag_dir.mkdir(parents=True, exist_ok=True)

        out_path = diag_dir / "scout_report.json"
        with out_path.open("w", encoding="utf-8") as f:
            json.dump(report.to_dict(), f, indent=2)
        print(f"[ScoutAgent] Report written to {out_path}")
        return out_path

    # ----------------------------
    # Internal: dataset check
    # ----------------------------
    def _check_dataset(self, key: str, meta: Dict[str, Any]) -> DatasetCheck:
        errors = []
        name = meta.get("description", key)

        try:
            path = dataset_path(self.config["datasets"], key, root=self.root)
        except ValueError as exc:
            errors.append(str(exc))
            return self._failed(key, name, meta.get("path", ""), exists=False, errors=errors)

        if not path.exists():
            errors.append(f"File does not exist: {path}")
            return self._failed(key, name, str(path), exists=False, errors=errors)

        try:
            df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8")
            df.columns = [c.strip() if isinstance(c, str) else c for c in df.columns]
        except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
            errors.append(f"Failed to read file: {exc}")
            return self._failed(key, name, str(path), exists=True, errors=errors)

        schema = load_schema(key, self.schemas_dir)
        schema_ok = None
        missing: List[str] = []
        non_numeric: List[str] = []
        duplicates = None

        if schema is not None:
            ok_req, missing = validate_required(df, schema)
            ok_num, non_numeric = validate_numeric(df, schema, path)
            ok_rows, expected_rows = validate_row_count(df, schema)
            if not ok_rows:
                errors.append(f"Row count {len(df)} < {expected_rows}")
            duplicates = count_duplicates(df, schema)
            schema_ok = ok_req and ok_num and ok_rows

        return DatasetCheck(
            dataset_key=key,
            name=name,
            path=str(path),
            exists=True,
            readable=True,
            n_rows=len(df),
            columns=list(df.columns),
            schema_checked=schema is not None,
            schema_ok=schema_ok,
            missing_columns=missing,
            non_numeric_columns=non_numeric,
            duplicate_keys=duplicates,
            errors=errors,
        )

    @staticmethod
    def _failed(key: str, name: str, path: str, exists: bool, errors: List[str]) -> DatasetCheck:
        return DatasetCheck(
            dataset_key=key, name=name, path=path,
            exists=exists, readable=False, n_rows=None, columns=[],
            schema_checked=False, schema_ok=None,
            missing_columns=[], non_numeric_columns=[],
            duplicate_keys=None, errors=errors,
        )


# -------------------------------------------------------
# CLI entrypoint
# -------------------------------------------------------

def main() -> int:
    agent = ScoutAgent()
    report = agent.run()
    agent.save(report)
    print("=== ScoutAgent Summary ===")
    print(f"All OK: {report.all_ok}")
    for d in report.datasets:
        print(
            f"[{d.dataset_key}] {d.name} | Exists={d.exists} | Readable={d.readable} "
            f"| SchemaOK={d.schema_ok} | DuplicateKeys={d.duplicate_keys}"
        )
    return 0 if report.all_ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
