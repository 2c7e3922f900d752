"""
Report generation over cleaned project records.

Each analyzer groups the same cleaned set independently:

1. regions, keyed by ``(region, main_island)``
2. contractors, keyed by contractor name
3. funding year + type of work trends, keyed by ``(funding_year, type_of_work)``

Group keys are tuples, never joined strings.  Python dicts preserve
insertion order, so "grouping order" below means order of first appearance.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Sequence, Tuple

from .models import (
    CleanedProject,
    ContractorReportRow,
    RegionReportRow,
    SummaryRecord,
    TrendReportRow,
)
from .util import average, format_number, median

DELAY_THRESHOLD_DAYS = 30

MIN_CONTRACTOR_PROJECTS = 5
TOP_CONTRACTORS = 15
RELIABILITY_DELAY_HORIZON_DAYS = 90.0
RELIABILITY_CAP = 100.0
HIGH_RISK_THRESHOLD = 50.0
HIGH_RISK_LABEL = "High Risk"
LOW_RISK_LABEL = "Low Risk"

BASELINE_YEAR = 2021


def _percent(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole else 0.0


def _defined(value: float) -> float:
    return value if math.isfinite(value) else 0.0


# --- Report 1: regional efficiency -------------------------------------------------


@dataclass
class _RegionGroup:
    region: str
    main_island: str
    budgets: List[float] = field(default_factory=list)
    savings: List[float] = field(default_factory=list)
    delays: List[int] = field(default_factory=list)


def raw_efficiency(median_savings: float, avg_delay: float) -> float:
    """``median_savings / avg_delay`` with zero, negative or non-finite results as 0."""

    if avg_delay == 0:
        return 0.0
    score = median_savings / avg_delay
    if not math.isfinite(score) or score < 0:
        return 0.0
    return score


def normalize_scores(scores: Sequence[float]) -> List[float]:
    """Min-max scale ``scores`` onto [0, 100]; a flat range maps everything to 0."""

    if not scores:
        return []
    low = min(scores)
    high = max(scores)
    if high == low:
        return [0.0 for _ in scores]
    span = high - low
    return [min(100.0, max(0.0, ((score - low) / span) * 100)) for score in scores]


def analyze_regions(projects: Sequence[CleanedProject]) -> List[RegionReportRow]:
    """Regional Flood Mitigation Efficiency Summary, best efficiency first."""

    groups: Dict[Tuple[str, str], _RegionGroup] = {}
    for project in projects:
        key = (project.region, project.main_island)
        group = groups.get(key)
        if group is None:
            group = groups[key] = _RegionGroup(region=project.region, main_island=project.main_island)
        group.budgets.append(project.approved_budget)
        group.savings.append(project.cost_savings)
        group.delays.append(project.completion_delay_days)

    prepared = []
    for group in groups.values():
        avg_delay = average(group.delays)
        median_savings = median(group.savings)
        delayed = sum(1 for delay in group.delays if delay > DELAY_THRESHOLD_DAYS)
        prepared.append(
            (
                group,
                median_savings,
                avg_delay,
                _percent(delayed, len(group.delays)),
                raw_efficiency(median_savings, avg_delay),
            )
        )

    scores = normalize_scores([item[4] for item in prepared])
    rows = [
        RegionReportRow(
            region=group.region,
            main_island=group.main_island,
            total_approved_budget=format_number(sum(group.budgets)),
            median_cost_savings=format_number(median_savings),
            avg_completion_delay_days=format_number(avg_delay),
            delay_over_30_percent=format_number(delay_pct),
            efficiency_score=round(score, 2),
        )
        for (group, median_savings, avg_delay, delay_pct, _raw), score in zip(prepared, scores)
    ]
    # sorted() is stable, so equal scores keep grouping order
    return sorted(rows, key=lambda row: row.efficiency_score, reverse=True)


# --- Report 2: contractor reliability ----------------------------------------------


@dataclass
class _ContractorGroup:
    contractor: str
    delays: List[int] = field(default_factory=list)
    total_savings: float = 0.0
    total_cost: float = 0.0

    @property
    def projects(self) -> int:
        return len(self.delays)


def reliability_index(avg_delay: float, total_savings: float, total_cost: float) -> float:
    """
    ``(1 - avg_delay/90) * (savings/cost) * 100``.

    Non-finite results (including a zero total cost) become 0 and the value is
    capped at 100.  There is no lower bound: heavy overruns stay negative.
    """

    if total_cost == 0:
        return 0.0
    index = (1 - (avg_delay / RELIABILITY_DELAY_HORIZON_DAYS)) * (total_savings / total_cost) * 100
    return min(RELIABILITY_CAP, _defined(index))


def risk_flag(index: float) -> str:
    return HIGH_RISK_LABEL if index < HIGH_RISK_THRESHOLD else LOW_RISK_LABEL


def analyze_contractors(projects: Sequence[CleanedProject]) -> List[ContractorReportRow]:
    """Top Contractors Performance Ranking: top 15 by total cost, >= 5 projects each."""

    groups: Dict[str, _ContractorGroup] = {}
    for project in projects:
        if not project.contractor:
            continue
        group = groups.get(project.contractor)
        if group is None:
            group = groups[project.contractor] = _ContractorGroup(contractor=project.contractor)
        group.delays.append(project.completion_delay_days)
        group.total_savings += project.cost_savings
        group.total_cost += project.contract_cost

    qualified = [group for group in groups.values() if group.projects >= MIN_CONTRACTOR_PROJECTS]
    qualified.sort(key=lambda group: group.total_cost, reverse=True)

    rows: List[ContractorReportRow] = []
    for rank, group in enumerate(qualified[:TOP_CONTRACTORS], start=1):
        avg_delay = average(group.delays)
        index = reliability_index(avg_delay, group.total_savings, group.total_cost)
        rows.append(
            ContractorReportRow(
                rank=rank,
                contractor=group.contractor,
                total_cost=format_number(group.total_cost),
                num_projects=group.projects,
                avg_delay=format_number(avg_delay),
                total_savings=format_number(group.total_savings),
                reliability_index=format_number(index),
                risk_flag=risk_flag(index),
            )
        )
    return rows


# --- Report 3: annual cost trends --------------------------------------------------


class _TrendKey(NamedTuple):
    funding_year: int
    type_of_work: str


def yearly_weighted_savings(projects: Sequence[CleanedProject]) -> Dict[int, float]:
    """Per-year mean savings across all projects of that year (project-weighted)."""

    totals: Dict[int, float] = {}
    counts: Dict[int, int] = {}
    for project in projects:
        totals[project.funding_year] = totals.get(project.funding_year, 0.0) + project.cost_savings
        counts[project.funding_year] = counts.get(project.funding_year, 0) + 1
    return {year: totals[year] / counts[year] for year in totals}


def yoy_change(year: int, year_avg: float, baseline_avg: float) -> float:
    if year == BASELINE_YEAR:
        return 0.0
    return _defined(((year_avg - baseline_avg) / max(abs(baseline_avg), 1.0)) * 100)


def analyze_cost_trends(projects: Sequence[CleanedProject]) -> List[TrendReportRow]:
    """Annual Project Type Cost Overrun Trends, grouped by year and type of work."""

    groups: Dict[_TrendKey, List[float]] = {}
    for project in projects:
        groups.setdefault(_TrendKey(project.funding_year, project.type_of_work), []).append(
            project.cost_savings
        )

    year_avg = yearly_weighted_savings(projects)
    baseline = year_avg.get(BASELINE_YEAR, 0.0)

    prepared = []
    for key, savings in groups.items():
        avg_savings = average(savings)
        overruns = sum(1 for value in savings if value < 0)
        change = yoy_change(key.funding_year, year_avg.get(key.funding_year, 0.0), baseline)
        row = TrendReportRow(
            funding_year=key.funding_year,
            type_of_work=key.type_of_work,
            total_projects=len(savings),
            avg_cost_savings=format_number(avg_savings),
            overrun_rate=format_number(_percent(overruns, len(savings))),
            yoy_change=format_number(change).replace(",", ""),
        )
        prepared.append((key.funding_year, -avg_savings, row))

    prepared.sort(key=lambda item: (item[0], item[1]))
    return [row for _year, _neg_avg, row in prepared]


# --- Summary -----------------------------------------------------------------------


def summarize(
    projects: Sequence[CleanedProject],
    contractor_rows: Sequence[ContractorReportRow],
    region_rows: Sequence[RegionReportRow],
    trend_rows: Sequence[TrendReportRow] = (),
) -> SummaryRecord:
    """Dataset-wide totals; contractor count reflects the filtered ranking."""

    return SummaryRecord(
        total_projects=len(projects),
        total_contractors=len({row.contractor for row in contractor_rows}),
        total_regions=len({row.region for row in region_rows}),
        total_provinces=len({project.province for project in projects}),
        global_avg_delay_days=format_number(average(p.completion_delay_days for p in projects)),
        total_savings=format_number(sum(p.cost_savings for p in projects)),
        report1_regions=len(region_rows),
        report2_contractors=len(contractor_rows),
        report3_entries=len(trend_rows),
    )


@dataclass(frozen=True)
class ReportBundle:
    regions: List[RegionReportRow]
    contractors: List[ContractorReportRow]
    trends: List[TrendReportRow]
    summary: SummaryRecord


def generate_all(projects: Sequence[CleanedProject]) -> ReportBundle:
    regions = analyze_regions(projects)
    contractors = analyze_contractors(projects)
    trends = analyze_cost_trends(projects)
    summary = summarize(projects, contractors, regions, trends)
    return ReportBundle(regions=regions, contractors=contractors, trends=trends, summary=summary)


__all__ = [
    "BASELINE_YEAR",
    "ReportBundle",
    "analyze_contractors",
    "analyze_cost_trends",
    "analyze_regions",
    "generate_all",
    "normalize_scores",
    "raw_efficiency",
    "reliability_index",
    "risk_flag",
    "summarize",
    "yoy_change",
]
