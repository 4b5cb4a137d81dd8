from __future__ import annotations

import csv
import json
import platform
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .uniqueness import grid_hash, sheets_hash

GridLike = Sequence[Sequence[Optional[int]]]


def ensure_parent(path: Path, *, mkdirs: bool) -> None:
    parent = path.parent
    if not parent.exists() and mkdirs:
        parent.mkdir(parents=True, exist_ok=True)


def write_json(path: Path, data: object, *, mkdirs: bool, overwrite: bool) -> None:
    if path.exists() and not overwrite:
        raise FileExistsError(
            f"Refusing to overwrite existing file without --force: {path}"
        )
    ensure_parent(path, mkdirs=mkdirs)
    text = json.dumps(data, ensure_ascii=True, sort_keys=True, indent=2)
    path.write_text(text + "\n", encoding="utf-8")


def build_run_meta(
    *,
    app_version: str,
    params_hash: str,
    seed: int,
    seed_mode: str,
    rng_engine: str,
    parallel: bool,
    parallelism: int,
    final_tolerances: Sequence[int],
) -> Dict[str, object]:
    return {
        "app_version": app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "python_version": sys.version.split()[0],
        "platform": platform.system().lower(),
        "params_hash": params_hash,
        "seed": seed,
        "seed_mode": seed_mode,
        "rng_engine": rng_engine,
        "hash_algorithm": "sha256",
        "parallel": parallel,
        "parallelism": parallelism,
        "final_tolerances": list(final_tolerances),
    }


def emit_sheets_json(
    path: Path,
    *,
    grids: Sequence[GridLike],
    run_meta: Dict[str, object],
    mkdirs: bool,
    overwrite: bool,
) -> None:
    entries: List[Dict[str, object]] = []
    for idx, grid in enumerate(grids, start=1):
        entries.append({"id": str(idx), "grid": grid, "grid_hash": grid_hash(grid)})
    data = {
        "run_meta": run_meta,
        "sheets": entries,
        "sheets_hash": sheets_hash(grids),
    }
    write_json(path, data, mkdirs=mkdirs, overwrite=overwrite)


def load_sheets_json(path: Path) -> List[List[List[Optional[int]]]]:
    """Read grids back from a sheets file, ordered by sheet id."""
    if not path.exists():
        raise FileNotFoundError(f"Sheets file not found: {path}")
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict) or not isinstance(data.get("sheets"), list):
        raise ValueError(f"Not a sheets file: {path}")
    entries = sorted(data["sheets"], key=lambda e: int(e["id"]))
    return [e["grid"] for e in entries]


def emit_report_json(
    path: Path, *, report: Dict[str, object], mkdirs: bool, overwrite: bool
) -> None:
    write_json(path, report, mkdirs=mkdirs, overwrite=overwrite)


def emit_summary_csv(
    path: Path,
    *,
    freqs: Dict[int, int],
    columns: Sequence[Dict[str, object]] | None,
    mkdirs: bool,
    overwrite: bool,
) -> None:
    if path.exists() and not overwrite:
        raise FileExistsError(
            f"Refusing to overwrite existing file without --force: {path}"
        )
    ensure_parent(path, mkdirs=mkdirs)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["number", "total"])
        for num in sorted(freqs.keys()):
            writer.writerow([num, freqs[num]])
        if columns:
            writer.writerow([])
            writer.writerow(["column", "duplicate_arrangements", "max_pairwise_similarity"])
            for col in columns:
                writer.writerow(
                    [col["column"], col["duplicate_arrangements"], col["max_pairwise_similarity"]]
                )
