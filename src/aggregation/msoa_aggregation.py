from __future__ import annotations

import numpy as np
import pandas as pd

from aggregation.records import Availability
from harmonisation.lsoa_join import (
    build_index,
    count_duplicate_keys,
    filter_complete,
    join_lsoa_attributes,
    join_summary,
)


def weight_by_population(df: pd.DataFrame) -> pd.DataFrame:
    """Add IMD decile and score multiplied by LSOA population."""
    df = df.copy()
    df["IMDDecil_w"] = df["IMDDecil"] * df["total_population"]
    df["IMDScore_w"] = df["IMDScore"] * df["total_population"]
    return df


def aggregate_to_msoa(df: pd.DataFrame) -> pd.DataFrame:
    """
    Group weighted LSOAs by MSOA and compute population-weighted means.

    MSOAs come out in order of first appearance, and the name is the
    ``msoa_name`` of the first LSOA in each group. Names are not checked for
    agreement across the group.

    Returns columns:
        total_population, IMDDecil, IMDScore, code, name
    """
    grouped = (
        df.groupby("msoa_code", sort=False)
        .agg(
            total_population=("total_population", "sum"),
            IMDDecil_w=("IMDDecil_w", "sum"),
            IMDScore_w=("IMDScore_w", "sum"),
            name=("msoa_name", "first"),
        )
        .reset_index()
        .rename(columns={"msoa_code": "code"})
    )

    # All-zero populations give no mean rather than a division by zero
    pop = grouped["total_population"].replace({0: np.nan})
    grouped["IMDDecil"] = grouped["IMDDecil_w"] / pop
    grouped["IMDScore"] = grouped["IMDScore_w"] / pop

    return grouped[["total_population", "IMDDecil", "IMDScore", "code", "name"]]


def attach_msoa_population(df: pd.DataFrame, msoa_population_index: pd.DataFrame) -> pd.DataFrame:
    """Join the authoritative MSOA population by code."""
    df = df.copy()
    df["msoa_population"] = df["code"].map(msoa_population_index["msoa_population"])
    df["msoa_population_status"] = np.where(
        df["msoa_population"].notna(),
        Availability.PRESENT.value,
        Availability.NO_MATCH.value,
    )
    return df


def compute_death_rates(df: pd.DataFrame, deaths_index: pd.DataFrame) -> pd.DataFrame:
    """
    Deaths per person, using the authoritative MSOA population.

    Status of ``covid_death_rate``:
      - present  : death count matched and population is known and non-zero
      - no_match : no death count for the MSOA
      - filtered : death count matched but population unknown or zero
    """
    df = df.copy()
    deaths = df["code"].map(deaths_index["COVID-19"])
    pop = df["msoa_population"].replace({0: np.nan})

    computable = deaths.notna() & pop.notna()
    df["covid_death_rate"] = (deaths / pop).where(computable)
    df["covid_death_rate_status"] = np.select(
        [computable, deaths.isna()],
        [Availability.PRESENT.value, Availability.NO_MATCH.value],
        default=Availability.FILTERED.value,
    )
    return df


def build_msoa_aggregates(
    df_lookup: pd.DataFrame,
    df_lsoa_population: pd.DataFrame,
    df_imd_deciles: pd.DataFrame,
    df_imd_scores: pd.DataFrame,
    df_deaths: pd.DataFrame,
    df_msoa_population: pd.DataFrame,
) -> tuple[pd.DataFrame, pd.DataFrame, dict]:
    """
    Run the full LSOA -> MSOA pipeline on already-loaded tables.

    Returns
    -------
    final:
        total_population, IMDDecil, IMDScore, code, name
    final_with_deaths:
        final plus msoa_population, covid_death_rate and their statuses
    diagnostics:
        counts of dropped LSOAs, unmatched MSOAs and collapsed duplicate keys
    """
    # --- 1. Lookup indices (last row wins on duplicate keys) ---
    population_index = build_index(df_lsoa_population, "lsoa_code")
    decile_index = build_index(df_imd_deciles, "lsoa_code")
    score_index = build_index(df_imd_scores, "lsoa_code")
    deaths_index = build_index(df_deaths, "ons_id")
    msoa_population_index = build_index(df_msoa_population, "msoa_code")

    # --- 2. LSOA attributes, then drop incomplete rows ---
    joined = join_lsoa_attributes(df_lookup, population_index, decile_index, score_index)
    complete = filter_complete(joined)

    # --- 3. Population-weighted MSOA means ---
    final = aggregate_to_msoa(weight_by_population(complete))

    # --- 4. Authoritative population and death rate ---
    with_deaths = compute_death_rates(
        attach_msoa_population(final, msoa_population_index),
        deaths_index,
    )

    statuses = with_deaths["covid_death_rate_status"]
    diagnostics = {
        "lsoa": {
            **join_summary(joined),
            "kept": int(complete.shape[0]),
        },
        "msoa": {
            "output": int(final.shape[0]),
            "missing_msoa_population": int(
                (with_deaths["msoa_population_status"] != Availability.PRESENT.value).sum()
            ),
            "missing_deaths": int((statuses == Availability.NO_MATCH.value).sum()),
            "with_death_rate": int((statuses == Availability.PRESENT.value).sum()),
        },
        "duplicate_keys": {
            "lsoa_population": count_duplicate_keys(df_lsoa_population, "lsoa_code"),
            "lsoa_imd": count_duplicate_keys(df_imd_deciles, "lsoa_code"),
            "imd_scores": count_duplicate_keys(df_imd_scores, "lsoa_code"),
            "deaths": count_duplicate_keys(df_deaths, "ons_id"),
            "msoa_population": count_duplicate_keys(df_msoa_population, "msoa_code"),
        },
    }

    return final, with_deaths, diagnostics
