from __future__ import annotations

from pathlib import Path

import yaml


ROOT = Path(__file__).resolve().parents[2]
DATASETS_CONFIG = ROOT / "config" / "datasets.yaml"
SCHEMAS_DIR = ROOT / "config" / "validation_schemas"


OUTPUT_DEFAULTS = {
    "dir": "output",
    "final": "final.json",
    "final_with_deaths": "final_with_deaths.json",
    "diagnostics": "diagnostics",
    "legacy_sentinels": True,
}


def load_config(path: Path | None = None) -> dict:
    """Load the whole registry document from YAML."""
    path = Path(path) if path is not None else DATASETS_CONFIG
    if not path.exists():
        raise FileNotFoundError(f"Dataset registry not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        doc = yaml.safe_load(f) or {}
    if "datasets" not in doc:
        raise ValueError(f"{path.name} missing 'datasets:' block")
    return doc


def load_registry(path: Path | None = None) -> dict:
    return load_config(path)["datasets"]


def get_dataset_config(registry: dict, key: str) -> dict:
    try:
        return registry[key]
    except KeyError:
        raise KeyError(f"Dataset {key!r} not found in config/datasets.yaml")


def dataset_path(registry: dict, key: str, root: Path = ROOT) -> Path:
    """Resolve the raw file for one dataset; relative paths hang off the repo root."""
    cfg = get_dataset_config(registry, key)
    loader = cfg.get("loader", "csv")
    path_str = cfg.get("path")

    if not path_str:
        raise ValueError(f"{key} config must contain a 'path' field")
    if loader != "csv":
        raise ValueError(f"Expected loader='csv' for {key}, found {loader!r}")

    path = Path(path_str)
    return path if path.is_absolute() else root / path


def output_config(doc: dict) -> dict:
    out = dict(OUTPUT_DEFAULTS)
    out.update(doc.get("output") or {})
    if not isinstance(out["legacy_sentinels"], bool):
        raise ValueError(
            f"output.legacy_sentinels must be true or false, found {out['legacy_sentinels']!r}"
        )
    return out


def load_schema(key: str, schemas_dir: Path = SCHEMAS_DIR) -> dict | None:
    schema_path = Path(schemas_dir) / f"{key}.yaml"
    if not schema_path.exists():
        return None
    with schema_path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}
