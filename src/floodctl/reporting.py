import json

import pandas as pd

from .models import LoadReport, SummaryRecord
from .util import format_int


def preview_table(frame: pd.DataFrame, max_rows: int = 2) -> str:
    if frame.empty:
        return "(no rows)"
    return frame.head(max(0, max_rows)).to_string(index=False)


def make_load_text(report: LoadReport) -> str:
    lines = [
        f"Processing dataset... ({format_int(report.total_rows)} rows loaded, "
        f"{format_int(report.kept_rows)} filtered for 2021-2023)",
        f"Note: {format_int(report.rejected_rows)} rows skipped due to parse/validation errors.",
    ]
    if report.imputed_completion_dates:
        lines.append(f"Info: Imputed completion dates for {format_int(report.imputed_completion_dates)} rows.")
    if report.imputed_coordinates:
        lines.append(f"Info: Imputed coordinates for {format_int(report.imputed_coordinates)} rows.")
    return "\n".join(lines)


def make_summary_text(summary: SummaryRecord) -> str:
    return (
        f"Projects: {format_int(summary.total_projects)} | "
        f"ranked contractors: {summary.total_contractors} | regions: {summary.total_regions} | "
        f"provinces: {summary.total_provinces}\n"
        + json.dumps(
            {
                "global_avg_delay_days": summary.global_avg_delay_days,
                "total_savings": summary.total_savings,
            }
        )
        + "\n"
    )
