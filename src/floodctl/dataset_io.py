"""CSV/JSON/XLSX adapters around the cleaning and reporting core."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import pandas as pd

from .models import RAW_COLUMNS, SummaryRecord

logger = logging.getLogger(__name__)


class DatasetReadError(ValueError):
    """Raised when the input CSV exists but cannot be parsed into rows."""


REGION_COLUMNS = (
    "Region",
    "MainIsland",
    "TotalApprovedBudget",
    "MedianCostSavings",
    "AvgCompletionDelayDays",
    "DelayOver30Percent",
    "EfficiencyScore",
)
CONTRACTOR_COLUMNS = (
    "Rank",
    "Contractor",
    "TotalCost",
    "NumProjects",
    "AvgDelay",
    "TotalSavings",
    "ReliabilityIndex",
    "RiskFlag",
)
TREND_COLUMNS = (
    "FundingYear",
    "TypeOfWork",
    "TotalProjects",
    "AvgCostSavings",
    "OverrunRate",
    "YoYChange",
)


def read_raw_rows(path: str | Path) -> List[Dict[str, str]]:
    """
    Read the project CSV as a list of ``{header: text}`` rows.

    Every cell is kept as text (blank cells become ``""``) so that all type
    conversion happens in :mod:`floodctl.cleaning`.
    """

    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Input CSV not found: {csv_path}")
    try:
        df = pd.read_csv(csv_path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise DatasetReadError(f"Could not parse {csv_path.name}: {exc}") from exc
    df.columns = [str(col).strip() for col in df.columns]
    missing = [col for col in RAW_COLUMNS if col not in df.columns]
    if missing:
        logger.warning("Input CSV %s lacks columns %s; treating them as blank", csv_path.name, ", ".join(missing))
        for col in missing:
            df[col] = ""
    logger.debug("read %s rows x %s columns from %s", len(df), len(df.columns), csv_path)
    return df.to_dict(orient="records")


def rows_to_frame(rows: Sequence[object], columns: Sequence[str]) -> pd.DataFrame:
    """Build a DataFrame from report rows exposing ``to_record()``."""

    records = [row.to_record() for row in rows]  # type: ignore[attr-defined]
    return pd.DataFrame(records, columns=list(columns))


def write_report_csv(path: str | Path, frame: pd.DataFrame) -> Path:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(out_path, index=False)
    return out_path


def write_summary_json(path: str | Path, summary: SummaryRecord) -> Path:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as fh:
        json.dump(summary.to_record(), fh, indent=2)
    return out_path


def write_workbook(path: str | Path, sheets: Mapping[str, pd.DataFrame]) -> Path:
    """Write each frame to its own sheet of an ``.xlsx`` workbook."""

    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        for name, frame in sheets.items():
            # Excel caps sheet names at 31 characters
            frame.to_excel(writer, sheet_name=name[:31], index=False)
    return out_path


__all__ = [
    "CONTRACTOR_COLUMNS",
    "DatasetReadError",
    "REGION_COLUMNS",
    "TREND_COLUMNS",
    "read_raw_rows",
    "rows_to_frame",
    "write_report_csv",
    "write_summary_json",
    "write_workbook",
]
