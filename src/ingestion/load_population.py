from pathlib import Path

import pandas as pd

from ingestion.csv_table import read_csv_table


def load_lsoa_population(path: str | Path) -> pd.DataFrame:
    """
    Load the LSOA population table.

    Returns columns:
        lsoa_code, lsoa_total_population
    """
    return read_csv_table(
        path,
        required_columns=["lsoa_code", "lsoa_total_population"],
        numeric_columns=["lsoa_total_population"],
        tag="LSOA_POP",
    )


def load_msoa_population(path: str | Path) -> pd.DataFrame:
    """
    Load the ONS MSOA population estimates.

    This is the authoritative MSOA population used for per-capita rates. It
    is not the sum of the LSOA populations and the two will usually differ.
    """
    return read_csv_table(
        path,
        required_columns=["msoa_code", "msoa_population"],
        numeric_columns=["msoa_population"],
        tag="MSOA_POP",
    )
