"""
Validation and normalization of raw project rows.

Each raw row is a mapping of CSV header to string value.  Rows with a
funding year outside the analysis window or a non-positive budget/cost are
dropped; the survivors become :class:`~floodctl.models.CleanedProject`
instances with text defaults filled in and derived metrics computed.

Dropping a row is a data-quality filter, not an error: it is counted in the
:class:`~floodctl.models.LoadReport` and logged at DEBUG level only.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .models import (
    COL_APPROVED_BUDGET,
    COL_CAPITAL_LAT,
    COL_CAPITAL_LON,
    COL_COMPLETION_DATE,
    COL_CONTRACT_COST,
    COL_CONTRACTOR,
    COL_FUNDING_YEAR,
    COL_MAIN_ISLAND,
    COL_PROJECT_LAT,
    COL_PROJECT_LON,
    COL_PROVINCE,
    COL_REGION,
    COL_START_DATE,
    COL_TYPE_OF_WORK,
    CleanedProject,
    LoadReport,
    RejectReason,
)
from .util import days_between, parse_date, parse_int, parse_number, parse_optional_number

logger = logging.getLogger(__name__)

MIN_FUNDING_YEAR = 2021
MAX_FUNDING_YEAR = 2023

DEFAULT_REGION = "Unknown"
DEFAULT_MAIN_ISLAND = "Unknown"
DEFAULT_PROVINCE = "Unknown"
DEFAULT_CONTRACTOR = "Unknown Contractor"
DEFAULT_TYPE_OF_WORK = "Unspecified"

RawRow = Mapping[str, object]


class NoValidDataError(ValueError):
    """Raised when no raw row survives cleaning."""

    def __init__(self, report: LoadReport) -> None:
        super().__init__(
            f"No valid project rows after cleaning ({report.total_rows:,} rows read, "
            f"{report.rejected_rows:,} rejected)"
        )
        self.report = report


def _text(row: RawRow, column: str, default: str) -> str:
    value = row.get(column)
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return default
    return str(value).strip() or default


def _coordinates(row: RawRow) -> Tuple[Optional[float], Optional[float], bool]:
    lat = parse_optional_number(row.get(COL_PROJECT_LAT))
    lon = parse_optional_number(row.get(COL_PROJECT_LON))
    if lat is not None and lon is not None:
        return lat, lon, False
    cap_lat = parse_optional_number(row.get(COL_CAPITAL_LAT))
    cap_lon = parse_optional_number(row.get(COL_CAPITAL_LON))
    if cap_lat is None or cap_lon is None:
        return lat, lon, False
    return (
        cap_lat if lat is None else lat,
        cap_lon if lon is None else lon,
        True,
    )


def clean_row(row: RawRow, report: Optional[LoadReport] = None) -> Optional[CleanedProject]:
    """Clean a single raw row, returning ``None`` when it is rejected."""

    funding_year = parse_int(row.get(COL_FUNDING_YEAR))
    if not funding_year or not (MIN_FUNDING_YEAR <= funding_year <= MAX_FUNDING_YEAR):
        if report is not None:
            report.reject(RejectReason.FUNDING_YEAR)
        logger.debug("rejected row: funding_year=%r", row.get(COL_FUNDING_YEAR))
        return None

    approved_budget = parse_number(row.get(COL_APPROVED_BUDGET))
    if approved_budget <= 0:
        if report is not None:
            report.reject(RejectReason.APPROVED_BUDGET)
        logger.debug("rejected row: approved_budget=%r", row.get(COL_APPROVED_BUDGET))
        return None

    contract_cost = parse_number(row.get(COL_CONTRACT_COST))
    if contract_cost <= 0:
        if report is not None:
            report.reject(RejectReason.CONTRACT_COST)
        logger.debug("rejected row: contract_cost=%r", row.get(COL_CONTRACT_COST))
        return None

    start_date = parse_date(row.get(COL_START_DATE))
    completion_date = parse_date(row.get(COL_COMPLETION_DATE))
    if completion_date is None:
        completion_date = start_date
        if report is not None and start_date is not None:
            report.imputed_completion_dates += 1
    if start_date is None and report is not None:
        report.missing_start_dates += 1

    lat, lon, from_capital = _coordinates(row)
    if from_capital and report is not None:
        report.imputed_coordinates += 1

    return CleanedProject(
        funding_year=funding_year,
        approved_budget=approved_budget,
        contract_cost=contract_cost,
        start_date=start_date,
        completion_date=completion_date,
        region=_text(row, COL_REGION, DEFAULT_REGION),
        main_island=_text(row, COL_MAIN_ISLAND, DEFAULT_MAIN_ISLAND),
        contractor=_text(row, COL_CONTRACTOR, DEFAULT_CONTRACTOR),
        type_of_work=_text(row, COL_TYPE_OF_WORK, DEFAULT_TYPE_OF_WORK),
        cost_savings=approved_budget - contract_cost,
        completion_delay_days=days_between(start_date, completion_date),
        province=_text(row, COL_PROVINCE, DEFAULT_PROVINCE),
        latitude=lat,
        longitude=lon,
    )


def _impute_province_coordinates(
    projects: List[CleanedProject], report: LoadReport
) -> List[CleanedProject]:
    sums: Dict[str, Tuple[float, float, int]] = {}
    for project in projects:
        if project.latitude is None or project.longitude is None:
            continue
        lat_sum, lon_sum, count = sums.get(project.province, (0.0, 0.0, 0))
        sums[project.province] = (lat_sum + project.latitude, lon_sum + project.longitude, count + 1)

    if not sums:
        return projects

    out: List[CleanedProject] = []
    for project in projects:
        known = sums.get(project.province)
        if known is None or (project.latitude is not None and project.longitude is not None):
            out.append(project)
            continue
        lat_sum, lon_sum, count = known
        out.append(
            replace(
                project,
                latitude=project.latitude if project.latitude is not None else lat_sum / count,
                longitude=project.longitude if project.longitude is not None else lon_sum / count,
            )
        )
        report.imputed_coordinates += 1
    return out


def clean_with_report(raw_rows: Iterable[RawRow]) -> Tuple[List[CleanedProject], LoadReport]:
    """
    Clean ``raw_rows`` and return the surviving projects plus diagnostics.

    Output order follows input order minus the dropped rows.

    Raises
    ------
    NoValidDataError
        When no row survives cleaning.
    """

    report = LoadReport()
    projects: List[CleanedProject] = []
    for row in raw_rows:
        report.total_rows += 1
        project = clean_row(row, report)
        if project is not None:
            projects.append(project)

    projects = _impute_province_coordinates(projects, report)
    report.kept_rows = len(projects)
    logger.debug(
        "cleaning complete => total=%s | kept=%s | rejected=%s",
        report.total_rows,
        report.kept_rows,
        {reason.value: count for reason, count in report.rejected.items()},
    )
    if not projects:
        raise NoValidDataError(report)
    return projects, report


def clean(raw_rows: Iterable[RawRow]) -> List[CleanedProject]:
    """Pure cleaning entry point: raw rows in, validated projects out."""

    projects, _report = clean_with_report(raw_rows)
    return projects


__all__ = [
    "MAX_FUNDING_YEAR",
    "MIN_FUNDING_YEAR",
    "NoValidDataError",
    "clean",
    "clean_row",
    "clean_with_report",
]
