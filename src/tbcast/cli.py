from __future__ import annotations

import logging
import sys
from dataclasses import replace
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .config import load_config
from .errors import AnalysisError
from .tasks import run_full_pipeline

logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
logging.getLogger("cmdstanpy").setLevel(logging.WARNING)
app = typer.Typer(add_completion=False)
console = Console()


def _strip_ipykernel_args(argv: list[str]) -> list[str]:
    """Jupyter/ipykernel injects `-f <connection_file>` into sys.argv."""
    out = [argv[0]]
    i = 1
    while i < len(argv):
        a = argv[i]
        if a in ("-f", "--f"):
            i += 2  # skip flag + value
            continue
        if a.startswith("--f="):
            i += 1
            continue
        out.append(a)
        i += 1
    return out


def _parse_month(value: Optional[str]) -> Optional[tuple[int, int]]:
    """'2012-01' -> (2012, 1); empty -> None"""
    if not value:
        return None
    try:
        year, month = value.split("-")
        parsed = (int(year), int(month))
    except ValueError:
        raise typer.BadParameter(f"expected YYYY-MM, got {value!r}")
    if not 1 <= parsed[1] <= 12:
        raise typer.BadParameter(f"month out of range in {value!r}")
    return parsed


@app.command()
def run(
    data_path: Optional[str] = None,
    start: str = "2012-01",
    end: Optional[str] = "2019-06",
    train_ratio: float = 0.85,
    month_step: str = "calendar",
    reports_dir: Optional[str] = None,
    plots: bool = True,
):
    """Run the full analysis. Pass --end "" to take the end from the data."""
    if month_step not in ("calendar", "fixed"):
        raise typer.BadParameter(
            f"expected 'calendar' or 'fixed', got {month_step!r}", param_hint="--month-step"
        )
    start_month = _parse_month(start)
    if start_month is None:
        raise typer.BadParameter("a start month is required", param_hint="--start")

    cfg = load_config(
        data_path=data_path,
        start=start_month,
        train_ratio=train_ratio,
        month_step=month_step,
        reports_dir=reports_dir,
        make_plots=plots,
    )
    # None overrides are ignored by load_config, so an open end is set here
    cfg = replace(cfg, end=_parse_month(end))

    try:
        results = run_full_pipeline(cfg)
    except AnalysisError as e:
        console.print(f"[bold red]Stage '{e.stage}' failed:[/bold red] {e.reason}")
        raise typer.Exit(code=1)

    table = Table(title="TB Incidence Analysis")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")

    for k, v in results.items():
        table.add_row(str(k), str(v))

    console.print(table)


def main() -> None:
    sys.argv = _strip_ipykernel_args(sys.argv)
    app()


if __name__ == "__main__":
    sys.argv = _strip_ipykernel_args(sys.argv)
    app(standalone_mode=False)  # <-- prevents SystemExit in Jupyter
