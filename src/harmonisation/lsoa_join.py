from __future__ import annotations

import pandas as pd


def build_index(df: pd.DataFrame, key: str) -> pd.DataFrame:
    """
    Turn a table into a lookup keyed by ``key``.

    Duplicate keys collapse to the last row seen in the file.
    """
    if key not in df.columns:
        raise ValueError(f"Cannot index on missing column: {key}")
    return df.drop_duplicates(subset=key, keep="last").set_index(key)


def count_duplicate_keys(df: pd.DataFrame, key: str) -> int:
    return int(df[key].duplicated(keep="last").sum())


def join_lsoa_attributes(
    df_lookup: pd.DataFrame,
    population_index: pd.DataFrame,
    decile_index: pd.DataFrame,
    score_index: pd.DataFrame,
) -> pd.DataFrame:
    """
    Left-join LSOA population, IMD decile and IMD score onto the lookup.

    Inputs (expected columns)
    -------------------------
    df_lookup:
        lsoa_code, msoa_code, msoa_name
    population_index:
        indexed by lsoa_code, lsoa_total_population
    decile_index:
        indexed by lsoa_code, IMDDecil
    score_index:
        indexed by lsoa_code, IMDScore

    Output
    ------
    The lookup rows, in their original order, with:
        total_population, IMDDecil, IMDScore (NaN where unmatched),
        no_population_match, no_imd_match, no_imd_score_match

    All three lookups run for every row; nothing is dropped here.
    """
    out = df_lookup.copy()
    codes = out["lsoa_code"]

    # --- 1. Population ---
    out["total_population"] = codes.map(population_index["lsoa_total_population"])
    out["no_population_match"] = out["total_population"].isna()

    # --- 2. IMD decile ---
    out["IMDDecil"] = codes.map(decile_index["IMDDecil"])
    out["no_imd_match"] = out["IMDDecil"].isna()

    # --- 3. IMD score ---
    out["IMDScore"] = codes.map(score_index["IMDScore"])
    out["no_imd_score_match"] = out["IMDScore"].isna()

    return out


def filter_complete(df: pd.DataFrame) -> pd.DataFrame:
    """Keep LSOAs that matched population, decile and score."""
    keep = (
        ~df["no_imd_match"]
        & ~df["no_imd_score_match"]
        & ~df["no_population_match"]
    )
    return df[keep].reset_index(drop=True)


def join_summary(df: pd.DataFrame) -> dict:
    return {
        "lsoas_in_lookup": int(df.shape[0]),
        "missing_population": int(df["no_population_match"].sum()),
        "missing_imd_decile": int(df["no_imd_match"].sum()),
        "missing_imd_score": int(df["no_imd_score_match"].sum()),
    }
