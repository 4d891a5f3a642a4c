from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from ingestion.load_deaths import load_deaths
from ingestion.load_imd import load_imd_deciles, load_imd_scores
from ingestion.load_lookup import load_msoa_lookup
from ingestion.load_population import load_lsoa_population, load_msoa_population


# M1: L1 + L2 (L1 listed twice in the population file, last row wins)
# M2: L3 kept, L4 has no IMD decile
# M3: L5 only, no death count
# M4: L6 has no population, so M4 never appears in the output
CSV_FILES = {
    "msoa_lookup.csv": (
        "lsoa_code,msoa_code,msoa_name\n"
        "L1,M1,Alpha\n"
        "L2,M1,Alpha\n"
        "L3,M2,Beta\n"
        "L4,M2,Beta\n"
        "L5,M3,Gamma\n"
        "L6,M4,Delta\n"
    ),
    "lsoa_population.csv": (
        "lsoa_code,lsoa_total_population\n"
        "L1,999\n"
        "L2,30\n"
        "L3,100\n"
        "L4,50\n"
        "L5,200\n"
        "L1,10\n"
    ),
    "lsoa_imd.csv": (
        "lsoa_code,IMDDecil\n"
        "L1,2\n"
        "L2,6\n"
        "L3,4\n"
        "L5,1\n"
        "L6,3\n"
    ),
    "imd_scores.csv": (
        "lsoa_code,IMDScore\n"
        "L1,10.0\n"
        "L2,30.0\n"
        "L3,20.5\n"
        "L4,5.0\n"
        "L5,40.0\n"
        "L6,7.0\n"
    ),
    "deaths.csv": (
        "ons_id,msoa_name,COVID-19\n"
        "M1,Alpha,20\n"
        "M2,Beta,5\n"
    ),
    "msoa_population_2018.csv": (
        "msoa_code,msoa_population\n"
        "M1,1000\n"
        "M3,500\n"
    ),
}

REGISTRY_PATHS = {
    "msoa_lookup": "data/msoa_lookup.csv",
    "lsoa_population": "data/lsoa_population.csv",
    "lsoa_imd": "data/lsoa_imd.csv",
    "imd_scores": "data/imd_scores.csv",
    "deaths": "data/deaths.csv",
    "msoa_population": "data/msoa_population_2018.csv",
}


def write_registry(root: Path, legacy_sentinels: bool = True) -> Path:
    doc = {
        "datasets": {
            key: {"description": key, "loader": "csv", "path": path}
            for key, path in REGISTRY_PATHS.items()
        },
        "output": {
            "dir": "output",
            "final": "final.json",
            "final_with_deaths": "final_with_deaths.json",
            "diagnostics": "diagnostics",
            "legacy_sentinels": legacy_sentinels,
        },
    }
    path = root / "config" / "datasets.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(doc, f)
    return path


@pytest.fixture
def project_root(tmp_path) -> Path:
    """A throwaway repo root with the six inputs under data/ and a registry."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    for name, text in CSV_FILES.items():
        (data_dir / name).write_text(text, encoding="utf-8")
    write_registry(tmp_path)
    return tmp_path


@pytest.fixture
def tables(project_root):
    data_dir = project_root / "data"
    return {
        "msoa_lookup": load_msoa_lookup(data_dir / "msoa_lookup.csv"),
        "lsoa_population": load_lsoa_population(data_dir / "lsoa_population.csv"),
        "lsoa_imd": load_imd_deciles(data_dir / "lsoa_imd.csv"),
        "imd_scores": load_imd_scores(data_dir / "imd_scores.csv"),
        "deaths": load_deaths(data_dir / "deaths.csv"),
        "msoa_population": load_msoa_population(data_dir / "msoa_population_2018.csv"),
    }
