from __future__ import annotations

import json

import pandas as pd
import pytest

from floodctl.dataset_io import (
    REGION_COLUMNS,
    TREND_COLUMNS,
    DatasetReadError,
    read_raw_rows,
    rows_to_frame,
    write_report_csv,
    write_summary_json,
    write_workbook,
)
from floodctl.models import SummaryRecord, TrendReportRow


def test_read_raw_rows_keeps_cells_as_text(csv_factory, row_factory):
    path = csv_factory([row_factory(FundingYear="2021", ContractCost="")])

    rows = read_raw_rows(path)

    assert rows[0]["FundingYear"] == "2021"
    assert rows[0]["ContractCost"] == ""
    assert rows[0]["ApprovedBudgetForContract"] == "1,000,000.00"


def test_read_raw_rows_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_raw_rows(tmp_path / "missing.csv")


def test_read_raw_rows_wraps_empty_file(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")

    with pytest.raises(DatasetReadError, match="empty.csv"):
        read_raw_rows(path)


def test_read_raw_rows_wraps_malformed_csv(tmp_path):
    path = tmp_path / "broken.csv"
    path.write_text("FundingYear,Region\n2022,NCR\n2023,NCR,extra,cells\n", encoding="utf-8")

    with pytest.raises(DatasetReadError):
        read_raw_rows(path)


def test_empty_report_still_has_headers(tmp_path):
    path = write_report_csv(tmp_path / "regions.csv", rows_to_frame([], REGION_COLUMNS))
    assert path.read_text(encoding="utf-8").strip() == ",".join(REGION_COLUMNS)


def test_trend_rows_round_trip_through_csv(tmp_path):
    rows = [TrendReportRow(2021, "Dredging", 3, "1,500.00", "33.33", "0.00")]
    path = write_report_csv(tmp_path / "trends.csv", rows_to_frame(rows, TREND_COLUMNS))

    df = pd.read_csv(path, dtype=str)
    assert list(df.columns) == list(TREND_COLUMNS)
    assert df.loc[0, "AvgCostSavings"] == "1,500.00"
    assert df.loc[0, "YoYChange"] == "0.00"


def test_summary_json_uses_snake_case_keys(tmp_path):
    summary = SummaryRecord(10, 2, 3, 4, "12.50", "1,000.00", 3, 2, 5)
    path = write_summary_json(tmp_path / "out" / "summary.json", summary)

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["total_projects"] == 10
    assert payload["global_avg_delay_days"] == "12.50"
    assert payload["report3_entries"] == 5


def test_workbook_has_one_sheet_per_report(tmp_path):
    trends = rows_to_frame([TrendReportRow(2022, "Dredging", 1, "5.00", "0.00", "10.00")], TREND_COLUMNS)
    regions = rows_to_frame([], REGION_COLUMNS)
    path = write_workbook(tmp_path / "reports.xlsx", {"Annual Trends": trends, "Regional Efficiency": regions})

    sheets = pd.read_excel(path, sheet_name=None)
    assert set(sheets) == {"Annual Trends", "Regional Efficiency"}
    assert sheets["Annual Trends"].loc[0, "TotalProjects"] == 1
