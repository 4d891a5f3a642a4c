from pathlib import Path

import pandas as pd

from ingestion.csv_table import read_csv_table


def load_msoa_lookup(path: str | Path) -> pd.DataFrame:
    """
    Load the LSOA -> MSOA lookup.

    Returns columns:
        lsoa_code, msoa_code, msoa_name

    Rows are kept in file order; the MSOA display name is later taken from
    the first LSOA row of each MSOA.
    """
    return read_csv_table(
        path,
        required_columns=["lsoa_code", "msoa_code", "msoa_name"],
        tag="LOOKUP",
    )
