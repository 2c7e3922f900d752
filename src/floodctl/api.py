from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from .config import load_config
from .dataset_io import read_raw_rows
from .state import DatasetState
from .cli import write_reports


@dataclass
class ReportOptions:
    input_csv: Optional[Path] = None
    output_dir: Optional[Path] = None
    export_xlsx: bool = False
    preview_rows: int = 0


def generate_reports(options: ReportOptions) -> Dict[str, Path]:
    """Programmatic interface to clean the CSV and write every report.

    Returns a dict with keys: regions, contractors, trends, summary and,
    when requested, workbook.  Raises ``NoValidDataError`` when nothing
    survives cleaning.
    """
    import os

    env = dict(os.environ)
    if options.input_csv:
        env["FLOOD_INPUT_CSV"] = str(options.input_csv)
    if options.output_dir:
        env["OUTPUT_DIR"] = str(options.output_dir)
    if options.export_xlsx:
        env["EXPORT_XLSX"] = "1"
    env["PREVIEW_ROWS"] = str(options.preview_rows)

    cfg = load_config(env, None)
    state = DatasetState()
    state.load(read_raw_rows(cfg.input_csv), source=str(cfg.input_csv))
    return write_reports(cfg, state)
