from __future__ import annotations

import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from .config import compute_params_hash, resolve_parameters
from .core import BuildParams, SheetBuilder, standard_pools
from .errors import BingoSheetsError
from .feasibility import check_pools, check_sheet_count, universe_capacity
from .logging_setup import setup_logging
from .serialize import (
    build_run_meta,
    emit_report_json,
    emit_sheets_json,
    emit_summary_csv,
    load_sheets_json,
)
from .verify import failed_checks
from .verify import verify as verify_sheets
from .version import __version__

app = typer.Typer(help="Diverse bingo sheet generator CLI")
logger = logging.getLogger("bingo_sheets")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(0)


@app.callback()
def common_options(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show application version and exit",
        is_eager=True,
        callback=_version_callback,
    ),
) -> None:
    pass


def wall_clock_seed() -> int:
    return time.time_ns() & ((1 << 63) - 1)


def _resolve_seed(resolved: Dict[str, Any]) -> Dict[str, Any]:
    seed_cfg = dict(resolved.get("seed") or {})
    mode = str(seed_cfg.get("mode", "fixed")).lower()
    if mode == "time":
        seed_cfg["value"] = wall_clock_seed()
    elif mode != "fixed":
        raise ValueError(f"seed.mode must be 'fixed' or 'time', got {mode!r}")
    seed_cfg["mode"] = mode
    seed_cfg["value"] = int(seed_cfg.get("value", 0))
    seed_cfg["engine"] = str(seed_cfg.get("engine", "py_random"))
    out = dict(resolved)
    out["seed"] = seed_cfg
    return out


INT_KEYS = ("count", "max_count", "k", "parallelism")


def _resolve_ints(resolved: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(resolved)
    for key in INT_KEYS:
        try:
            out[key] = int(resolved[key])
        except (TypeError, ValueError):
            raise ValueError(f"{key} must be an integer, got {resolved[key]!r}") from None
    return out


@app.command()
def run(
    config: str = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    count: Optional[int] = typer.Option(None, "--count", help="Number of sheets to generate"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed value (implies --seed-mode fixed)"),
    seed_mode: str = typer.Option(None, "--seed-mode", help="fixed|time"),
    rng_engine: str = typer.Option(None, "--rng-engine", help="py_random|numpy_pcg64"),
    parallel: Optional[bool] = typer.Option(
        None, "--parallel/--no-parallel", help="Sample columns in worker processes"
    ),
    parallelism: Optional[int] = typer.Option(None, "--parallelism", help="Worker process count"),
    out_sheets: str = typer.Option(None, "--out-sheets", help="sheets.json output path"),
    out_report: str = typer.Option(None, "--out-report", help="report.json output path"),
    summary_csv: str = typer.Option(None, "--summary-csv", help="Path to summary.csv (optional)"),
    log_file: str = typer.Option(None, "--log-file", help="Log file path"),
    colors: str = typer.Option(None, "--colors", help="auto|always|never"),
    log_level: str = typer.Option(None, "--log-level", help="DEBUG|INFO|WARN|ERROR"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Resolve params and exit"),
    force: bool = typer.Option(False, "--force", help="Overwrite outputs if they exist"),
    no_mkdirs: bool = typer.Option(False, "--no-mkdirs", help="Do not create parent directories"),
) -> None:
    """Generate sheets and a verification report."""

    cli_overrides: Dict[str, Any] = {}
    for key, value in (
        ("count", count),
        ("parallel", parallel),
        ("parallelism", parallelism),
        ("out_sheets", out_sheets),
        ("out_report", out_report),
        ("summary_csv", summary_csv),
        ("log_file", log_file),
        ("colors", colors),
        ("log_level", log_level),
        ("seed.mode", seed_mode),
        ("seed.engine", rng_engine),
    ):
        if value is not None:
            cli_overrides[key] = value
    if seed is not None:
        cli_overrides["seed.value"] = seed
        cli_overrides.setdefault("seed.mode", "fixed")

    try:
        resolved, _hash, _cfg_path = resolve_parameters(
            config_path_str=config, cli_overrides=cli_overrides
        )
        resolved = _resolve_ints(_resolve_seed(resolved))
    except (FileNotFoundError, ValueError, RuntimeError) as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=2)
    params_hash = compute_params_hash(resolved)

    setup_logging(
        level=str(resolved.get("log_level", "INFO")),
        log_file=resolved.get("log_file"),
        json_format=(str(resolved.get("log_format", "text")) == "json"),
        colors=str(resolved.get("colors", "auto")),
    )

    sheet_count = resolved["count"]
    k = resolved["k"]
    seed_cfg = resolved["seed"]
    try:
        pools = standard_pools(columns=k)
    except BingoSheetsError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=2)

    checks = [
        check_sheet_count(count=sheet_count, max_count=resolved["max_count"]),
        check_pools(pools=pools, k=k),
    ]
    reasons = [r for c in checks for r in c.reasons]
    if reasons:
        for reason in reasons:
            logger.error(reason)
        raise typer.Exit(code=2)
    capacity = universe_capacity(pools=pools, k=k)
    if sheet_count > capacity:
        logger.warning(
            "count %d exceeds column universe size %d; arrangements will repeat",
            sheet_count,
            capacity,
        )

    if dry_run:
        typer.echo(f"Sheets: {sheet_count}")
        typer.echo(f"Seed: {seed_cfg['value']} ({seed_cfg['mode']}, {seed_cfg['engine']})")
        typer.echo(f"Params hash: {params_hash}")
        raise typer.Exit(0)

    build_params = BuildParams(
        count=sheet_count,
        seed=seed_cfg["value"],
        rng_engine=seed_cfg["engine"],
        k=k,
        pools=pools,
        parallel=bool(resolved.get("parallel", False)),
        parallelism=resolved["parallelism"],
    )

    logger.info("Generating %d sheets (seed %d)", sheet_count, build_params.seed)
    try:
        result = SheetBuilder().build(build_params)
    except BingoSheetsError as exc:
        logger.error("Generation failed: %s", exc)
        raise typer.Exit(code=2)

    typer.echo(f"Generated {len(result.grids)} sheets in {result.metrics.total_time:.2f}s")
    typer.echo(f"Final tolerances per column: {result.metrics.final_tolerances}")

    report = verify_sheets(result.grids, pools=pools)
    run_meta = build_run_meta(
        app_version=__version__,
        params_hash=params_hash,
        seed=build_params.seed,
        seed_mode=seed_cfg["mode"],
        rng_engine=build_params.rng_engine,
        parallel=build_params.parallel,
        parallelism=build_params.parallelism,
        final_tolerances=result.metrics.final_tolerances,
    )

    out_sheets_path = Path(resolved["out_sheets"])
    out_report_path = Path(resolved["out_report"])
    try:
        emit_sheets_json(
            out_sheets_path,
            grids=result.grids,
            run_meta=run_meta,
            mkdirs=(not no_mkdirs),
            overwrite=force,
        )
        emit_report_json(
            out_report_path, report=report, mkdirs=(not no_mkdirs), overwrite=force
        )
        if resolved.get("summary_csv"):
            freqs = report["frequencies"]
            columns = report["columns"]
            emit_summary_csv(
                Path(resolved["summary_csv"]),
                freqs=freqs if isinstance(freqs, dict) else {},
                columns=columns if isinstance(columns, list) else None,
                mkdirs=(not no_mkdirs),
                overwrite=force,
            )
    except (FileExistsError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=2)

    typer.echo(f"Output files: {out_sheets_path}, {out_report_path}")
    raise typer.Exit(code=0)


@app.command()
def verify(
    sheets: str = typer.Option(..., "--sheets", help="Path to sheets.json"),
    report: str = typer.Option(None, "--report", help="Write the report to this path"),
    strict: bool = typer.Option(False, "--strict", help="Exit 1 on any failed check"),
    force: bool = typer.Option(False, "--force", help="Overwrite report if it exists"),
) -> None:
    """Re-check a saved sheets file."""
    try:
        grids = load_sheets_json(Path(sheets))
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"Cannot read sheets: {exc}", err=True)
        raise typer.Exit(code=2)

    k = len(grids[0][0]) if grids and grids[0] else 5
    rep = verify_sheets(grids, pools=standard_pools(columns=k))
    if report:
        try:
            emit_report_json(Path(report), report=rep, mkdirs=True, overwrite=force)
        except FileExistsError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(code=2)

    failed = failed_checks(rep)
    for name in failed:
        typer.echo(f"FAILED: {name}", err=True)
    for col in rep["columns"]:  # type: ignore[union-attr]
        typer.echo(
            f"column {col['column']}: duplicates={col['duplicate_arrangements']} "
            f"max_similarity={col['max_pairwise_similarity']}"
        )
    if strict and failed:
        raise typer.Exit(code=1)
    raise typer.Exit(code=0)


def main(_argv: list[str] | None = None) -> int:
    try:
        app(standalone_mode=True)
        return 0
    except SystemExit as e:
        return int(e.code) if e.code is not None else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
