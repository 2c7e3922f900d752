from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import SimpleNamespace
from typing import Mapping, Optional


_BOOLEAN_TRUE = {"1", "true", "yes", "on"}

DEFAULT_INPUT_CSV = "dpwh_flood_control_projects.csv"
REGION_REPORT_CSV = "report1_regional_summary.csv"
CONTRACTOR_REPORT_CSV = "report2_contractor_ranking.csv"
TREND_REPORT_CSV = "report3_annual_trends.csv"
SUMMARY_JSON = "summary.json"
WORKBOOK_XLSX = "flood_control_reports.xlsx"


@dataclass(frozen=True)
class Config:
    """Runtime configuration assembled from environment variables and CLI options."""

    input_csv: Path
    output_dir: Path
    preview_rows: int = 2
    export_xlsx: bool = False
    interactive: bool = False
    verbose: bool = False

    @property
    def region_report(self) -> Path:
        return self.output_dir / REGION_REPORT_CSV

    @property
    def contractor_report(self) -> Path:
        return self.output_dir / CONTRACTOR_REPORT_CSV

    @property
    def trend_report(self) -> Path:
        return self.output_dir / TREND_REPORT_CSV

    @property
    def summary_json(self) -> Path:
        return self.output_dir / SUMMARY_JSON

    @property
    def workbook(self) -> Path:
        return self.output_dir / WORKBOOK_XLSX


def _to_path(value: object | None) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, Path):
        return value.expanduser().resolve()
    text = str(value).strip()
    if not text:
        return None
    return Path(text).expanduser().resolve()


def _to_int(value: object | None) -> Optional[int]:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(float(text))
    except ValueError:
        return None


def _flag(value: object | None) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _BOOLEAN_TRUE


def _namespace(cli_args: object | None) -> SimpleNamespace:
    if cli_args is None:
        return SimpleNamespace()
    if isinstance(cli_args, SimpleNamespace):
        return cli_args
    if hasattr(cli_args, "__dict__"):
        return SimpleNamespace(**{k: v for k, v in vars(cli_args).items()})
    return SimpleNamespace()


def load_config(env: Mapping[str, str], cli_args: object | None = None) -> Config:
    """Build a runtime :class:`Config` from environment variables and CLI options."""

    input_csv = _to_path(env.get("FLOOD_INPUT_CSV")) or Path(DEFAULT_INPUT_CSV).resolve()
    output_dir = _to_path(env.get("OUTPUT_DIR")) or Path.cwd().resolve()
    preview_rows = _to_int(env.get("PREVIEW_ROWS"))
    if preview_rows is None:
        preview_rows = 2
    export_xlsx = _flag(env.get("EXPORT_XLSX"))
    interactive = False
    verbose = False

    cli_ns = _namespace(cli_args)
    if getattr(cli_ns, "input_csv", None):
        input_csv = _to_path(cli_ns.input_csv) or input_csv
    if getattr(cli_ns, "output_dir", None):
        output_dir = _to_path(cli_ns.output_dir) or output_dir
    if getattr(cli_ns, "preview_rows", None) is not None:
        preview_rows = int(cli_ns.preview_rows)
    if getattr(cli_ns, "xlsx", False):
        export_xlsx = True
    if getattr(cli_ns, "interactive", False):
        interactive = True
    if getattr(cli_ns, "verbose", False):
        verbose = bool(cli_ns.verbose)

    return Config(
        input_csv=input_csv,
        output_dir=output_dir,
        preview_rows=max(0, preview_rows),
        export_xlsx=export_xlsx,
        interactive=interactive,
        verbose=verbose,
    )


__all__ = ["Config", "load_config"]
