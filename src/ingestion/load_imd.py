from pathlib import Path

import pandas as pd

from ingestion.csv_table import read_csv_table


def load_imd_deciles(path: str | Path) -> pd.DataFrame:
    """Load IMD 2019 deciles (1 = most deprived) keyed by LSOA."""
    return read_csv_table(
        path,
        required_columns=["lsoa_code", "IMDDecil"],
        numeric_columns=["IMDDecil"],
        tag="IMD",
    )


def load_imd_scores(path: str | Path) -> pd.DataFrame:
    """Load IMD 2019 scores keyed by LSOA."""
    return read_csv_table(
        path,
        required_columns=["lsoa_code", "IMDScore"],
        numeric_columns=["IMDScore"],
        tag="IMD_SCORE",
    )
