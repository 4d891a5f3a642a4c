from __future__ import annotations

import json
import logging
from pathlib import Path

import pandas as pd

from aggregation.msoa_aggregation import build_msoa_aggregates
from aggregation.records import AggregateRecord, records_from_frame
from ingestion.load_deaths import load_deaths
from ingestion.load_imd import load_imd_deciles, load_imd_scores
from ingestion.load_lookup import load_msoa_lookup
from ingestion.load_population import load_lsoa_population, load_msoa_population
from ingestion.registry import (
    DATASETS_CONFIG,
    ROOT,
    dataset_path,
    load_config,
    output_config,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

LOADERS = {
    "msoa_lookup": load_msoa_lookup,
    "lsoa_population": load_lsoa_population,
    "lsoa_imd": load_imd_deciles,
    "imd_scores": load_imd_scores,
    "deaths": load_deaths,
    "msoa_population": load_msoa_population,
}


def load_inputs(registry: dict, root: Path = ROOT) -> dict[str, pd.DataFrame]:
    """Load every input up front so a bad file stops the run before anything is written."""
    tables = {}
    for key, loader in LOADERS.items():
        path = dataset_path(registry, key, root=root)
        logging.info(f"Loading {key}: {path.name}")
        tables[key] = loader(path)
    return tables


def write_json(records: list[dict], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(records, f)
    logging.info(f"Wrote {len(records)} records → {path}")


def compose(
    config_path: Path | None = None,
    root: Path = ROOT,
) -> tuple[list[AggregateRecord], dict]:
    logging.info("=== ComposerAgent: start composition ===")

    doc = load_config(config_path or DATASETS_CONFIG)
    out_cfg = output_config(doc)
    tables = load_inputs(doc["datasets"], root=root)

    _, with_deaths, diagnostics = build_msoa_aggregates(
        tables["msoa_lookup"],
        tables["lsoa_population"],
        tables["lsoa_imd"],
        tables["imd_scores"],
        tables["deaths"],
        tables["msoa_population"],
    )

    lsoa = diagnostics["lsoa"]
    logging.info(
        f"LSOAs: {lsoa['lsoas_in_lookup']} in lookup, {lsoa['kept']} kept "
        f"(no population: {lsoa['missing_population']}, "
        f"no IMD decile: {lsoa['missing_imd_decile']}, "
        f"no IMD score: {lsoa['missing_imd_score']})"
    )
    for name, count in diagnostics["duplicate_keys"].items():
        if count:
            logging.warning(f"{name}: {count} duplicate key(s), last row kept")
    logging.info(f"MSOA diagnostics: {diagnostics['msoa']}")

    records = records_from_frame(with_deaths)
    legacy = out_cfg["legacy_sentinels"]

    out_dir = Path(out_cfg["dir"])
    if not out_dir.is_absolute():
        out_dir = root / out_dir

    write_json(
        [r.to_dict(with_deaths=False) for r in records],
        out_dir / out_cfg["final"],
    )
    write_json(
        [r.to_dict(with_deaths=True, legacy_sentinels=legacy) for r in records],
        out_dir / out_cfg["final_with_deaths"],
    )

    diag_file = out_dir / out_cfg["diagnostics"] / "composer_report.json"
    diag_file.parent.mkdir(parents=True, exist_ok=True)
    with open(diag_file, "w", encoding="utf-8") as f:
        json.dump(diagnostics, f, indent=2)

    logging.info("=== ComposerAgent finished successfully ===")
    return records, diagnostics


def main() -> int:
    compose()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
