"""
Output records for the MSOA aggregates.

Optional numbers are carried as a ``Measure`` so a missing value can never be
mistaken for a number, and so the reason it is missing survives until the
JSON is written.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd


NOT_AVAILABLE = "not available"


class Availability(str, Enum):
    PRESENT = "present"
    NO_MATCH = "no_match"
    FILTERED = "filtered"


@dataclass(frozen=True)
class Measure:
    value: Optional[float]
    status: Availability

    def __post_init__(self):
        if (self.status is Availability.PRESENT) != (self.value is not None):
            raise ValueError(f"Measure value {self.value!r} inconsistent with status {self.status.value}")

    @classmethod
    def present(cls, value: float) -> "Measure":
        return cls(value, Availability.PRESENT)

    @classmethod
    def no_match(cls) -> "Measure":
        return cls(None, Availability.NO_MATCH)

    @classmethod
    def filtered(cls) -> "Measure":
        return cls(None, Availability.FILTERED)

    @property
    def available(self) -> bool:
        return self.status is Availability.PRESENT


def _plain_number(value: Any) -> Optional[float]:
    """numpy scalar -> builtin; NaN -> None; integral floats -> int."""
    if value is None or pd.isna(value):
        return None
    value = float(value)
    if math.isinf(value):
        return None
    return int(value) if value.is_integer() else value


def _plain_float(value: Any) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


@dataclass
class AggregateRecord:
    code: str
    name: str
    total_population: float
    IMDDecil: Optional[float]
    IMDScore: Optional[float]
    msoa_population: Measure
    covid_death_rate: Measure

    def to_dict(self, with_deaths: bool = False, legacy_sentinels: bool = True) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "total_population": _plain_number(self.total_population),
            "IMDDecil": _plain_float(self.IMDDecil),
            "IMDScore": _plain_float(self.IMDScore),
            "code": self.code,
            "name": self.name,
        }
        if not with_deaths:
            return out

        if self.msoa_population.available:
            out["msoa_population"] = _plain_number(self.msoa_population.value)
        else:
            out["msoa_population"] = NOT_AVAILABLE if legacy_sentinels else None

        if self.covid_death_rate.available:
            out["covid_death_rate"] = float(self.covid_death_rate.value)
        elif legacy_sentinels:
            # Historical output used a different key for the missing case
            out["covid_deaths"] = NOT_AVAILABLE
        else:
            out["covid_death_rate"] = None

        return out


def _measure(value: Any, status: str) -> Measure:
    status = Availability(status)
    if status is Availability.PRESENT:
        return Measure.present(float(value))
    return Measure(None, status)


def records_from_frame(df: pd.DataFrame) -> List[AggregateRecord]:
    """
    Build records from the output of ``compute_death_rates``.

    Expects columns code, name, total_population, IMDDecil, IMDScore,
    msoa_population, msoa_population_status, covid_death_rate,
    covid_death_rate_status.
    """
    records = []
    for row in df.itertuples(index=False):
        records.append(
            AggregateRecord(
                code=row.code,
                name=row.name,
                total_population=row.total_population,
                IMDDecil=_plain_float(row.IMDDecil),
                IMDScore=_plain_float(row.IMDScore),
                msoa_population=_measure(row.msoa_population, row.msoa_population_status),
                covid_death_rate=_measure(row.covid_death_rate, row.covid_death_rate_status),
            )
        )
    return records
