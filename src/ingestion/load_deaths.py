from pathlib import Path

import pandas as pd

from ingestion.csv_table import read_csv_table


def load_deaths(path: str | Path) -> pd.DataFrame:
    """
    Load COVID-19 death counts by MSOA.

    The key column is ``ons_id`` and holds MSOA codes.
    """
    return read_csv_table(
        path,
        required_columns=["ons_id", "COVID-19"],
        numeric_columns=["COVID-19"],
        tag="DEATHS",
    )
