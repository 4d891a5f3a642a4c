from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd


def read_csv_table(
    path: str | Path,
    required_columns: list[str],
    numeric_columns: list[str] | None = None,
    tag: str = "CSV",
) -> pd.DataFrame:
    """
    Read one input CSV and return only the required columns.

    Every cell is read as a string so codes keep their leading zeros and an
    empty cell stays an empty string; the numeric columns are then parsed
    strictly. A value that is not a finite number aborts the run.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"[{tag}] Input file not found: {path}")

    print(f"[{tag}] Reading CSV from: {path}")
    df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8")

    # Header cells sometimes carry stray whitespace
    df.columns = [c.strip() if isinstance(c, str) else c for c in df.columns]

    missing = [c for c in required_columns if c not in df.columns]
    if missing:
        raise ValueError(f"[{tag}] Missing column(s) {missing} in {path.name}")

    df = df[required_columns].copy()

    for col in numeric_columns or []:
        df[col] = parse_numeric(df[col], path=path, tag=tag)

    print(f"[{tag}] Loaded shape: {df.shape[0]} rows x {df.shape[1]} columns")
    return df


def parse_numeric(series: pd.Series, path: str | Path = "<memory>", tag: str = "CSV") -> pd.Series:
    """Strict string -> number conversion; raises ValueError on the first bad cell."""
    values = pd.to_numeric(series.astype(str).str.strip(), errors="coerce")
    bad = values.isna() | np.isinf(values.astype(float))
    if bad.any():
        idx = bad.idxmax()
        # +2: one for the header line, one for 1-based line numbers
        raise ValueError(
            f"[{tag}] Malformed numeric value {series[idx]!r} in column "
            f"{series.name!r} of {Path(path).name} (line {idx + 2})"
        )
    return values
