from __future__ import annotations

from datetime import date, timedelta
from typing import List, Optional

import pytest

from floodctl.models import CleanedProject
from floodctl.reports import (
    analyze_contractors,
    analyze_cost_trends,
    analyze_regions,
    generate_all,
    normalize_scores,
    raw_efficiency,
    reliability_index,
    summarize,
    yoy_change,
)
from floodctl.util import parse_number


def project(
    budget: float,
    cost: float,
    delay: int = 0,
    *,
    region: str = "NCR",
    island: str = "Luzon",
    contractor: str = "ACME",
    year: int = 2022,
    work: str = "Flood Mitigation",
    province: str = "Metro Manila",
) -> CleanedProject:
    start = date(year, 1, 1)
    return CleanedProject(
        funding_year=year,
        approved_budget=budget,
        contract_cost=cost,
        start_date=start,
        completion_date=start + timedelta(days=delay),
        region=region,
        main_island=island,
        contractor=contractor,
        type_of_work=work,
        cost_savings=budget - cost,
        completion_delay_days=delay,
        province=province,
    )


# --- regions ---------------------------------------------------------------------


def test_region_metrics_for_single_group():
    rows = analyze_regions(
        [project(100, 80, 10), project(200, 150, 40), project(50, 60, 5)]
    )

    (row,) = rows
    assert row.region == "NCR"
    assert row.main_island == "Luzon"
    assert row.total_approved_budget == "350.00"
    assert row.median_cost_savings == "20.00"
    assert row.avg_completion_delay_days == "18.33"
    assert row.delay_over_30_percent == "33.33"
    # a single group normalizes to zero
    assert row.efficiency_score == 0


def test_region_scores_normalized_and_sorted_descending():
    projects = [
        project(100, 90, 10, region="A"),  # raw 10/10 = 1.0
        project(100, 50, 10, region="B"),  # raw 50/10 = 5.0
        project(100, 70, 10, region="C"),  # raw 30/10 = 3.0
    ]
    rows = analyze_regions(projects)

    assert [r.region for r in rows] == ["B", "C", "A"]
    assert [r.efficiency_score for r in rows] == [100.0, 50.0, 0.0]
    assert all(0 <= r.efficiency_score <= 100 for r in rows)


def test_region_equal_scores_are_zero_and_keep_grouping_order():
    projects = [
        project(100, 90, 10, region="Z"),
        project(100, 90, 10, region="A"),
        project(100, 90, 10, region="M"),
    ]
    rows = analyze_regions(projects)

    assert [r.region for r in rows] == ["Z", "A", "M"]
    assert {r.efficiency_score for r in rows} == {0.0}


def test_region_groups_keyed_by_region_and_island_tuple():
    projects = [
        project(100, 90, region="A|B", island="C"),
        project(100, 90, region="A", island="B|C"),
    ]
    assert len(analyze_regions(projects)) == 2


def test_region_budget_total_matches_cleaned_projects():
    projects = [
        project(1_234_567.25, 1_000_000, 3, region="A"),
        project(98_765.5, 90_000, 45, region="B"),
        project(10.75, 5, 0, region="A", island="Visayas"),
    ]
    rows = analyze_regions(projects)
    total = sum(parse_number(r.total_approved_budget) for r in rows)
    assert total == pytest.approx(sum(p.approved_budget for p in projects), abs=0.01 * len(rows))


def test_raw_efficiency_clamps_undefined_and_negative():
    assert raw_efficiency(20, 0) == 0
    assert raw_efficiency(-20, 10) == 0
    assert raw_efficiency(20, -10) == 0
    assert raw_efficiency(20, 10) == 2


def test_normalize_scores_edge_cases():
    assert normalize_scores([]) == []
    assert normalize_scores([3.0]) == [0.0]
    assert normalize_scores([2.0, 2.0]) == [0.0, 0.0]
    assert normalize_scores([0.0, 5.0, 10.0]) == [0.0, 50.0, 100.0]


# --- contractors -----------------------------------------------------------------


def _contractor_projects(name: str, count: int, cost: float, delay: int = 0, budget: Optional[float] = None) -> List[CleanedProject]:
    budget = cost * 1.1 if budget is None else budget
    return [project(budget, cost, delay, contractor=name) for _ in range(count)]


def test_contractor_with_four_projects_is_excluded_even_when_largest():
    projects = _contractor_projects("BIG", 4, 1_000_000) + _contractor_projects("SMALL", 5, 10)
    rows = analyze_contractors(projects)

    assert [r.contractor for r in rows] == ["SMALL"]
    assert rows[0].num_projects == 5
    assert rows[0].rank == 1


def test_contractor_report_top_fifteen_by_total_cost():
    projects: List[CleanedProject] = []
    for i in range(20):
        projects += _contractor_projects(f"C{i:02d}", 5, 1000 + i)
    rows = analyze_contractors(projects)

    assert len(rows) == 15
    costs = [parse_number(r.total_cost) for r in rows]
    assert costs == sorted(costs, reverse=True)
    assert rows[0].contractor == "C19"
    assert [r.rank for r in rows] == list(range(1, 16))


def test_contractor_reliability_and_risk_flag():
    # savings ratio 0.1, delay 0 => (1 - 0) * 0.1 * 100 = 10
    rows = analyze_contractors(_contractor_projects("LOW", 5, 100, delay=0, budget=110))
    assert rows[0].reliability_index == "10.00"
    assert rows[0].risk_flag == "High Risk"
    assert rows[0].total_savings == "50.00"
    assert rows[0].total_cost == "500.00"
    assert rows[0].avg_delay == "0.00"


def test_reliability_index_policy():
    assert reliability_index(0, 200, 100) == 100  # capped
    assert reliability_index(0, 60, 100) == pytest.approx(60)
    assert reliability_index(0, 10, 0) == 0
    # no lower clamp
    assert reliability_index(0, -50, 100) == -50
    assert reliability_index(180, 10, 100) == pytest.approx(-10)


def test_contractor_low_risk_when_index_at_threshold():
    rows = analyze_contractors(_contractor_projects("OK", 5, 100, delay=0, budget=150))
    assert rows[0].reliability_index == "50.00"
    assert rows[0].risk_flag == "Low Risk"


# --- cost trends -----------------------------------------------------------------


def test_trend_baseline_year_has_zero_change():
    projects = [
        project(100, 90, year=2021, work="A"),
        project(100, 80, year=2022, work="A"),
    ]
    rows = analyze_cost_trends(projects)

    assert [(r.funding_year, r.yoy_change) for r in rows] == [(2021, "0.00"), (2022, "100.00")]


def test_trend_uses_project_weighted_year_average():
    projects = [
        project(100, 90, year=2021, work="A"),  # 2021 avg = 10
        project(100, 90, year=2022, work="A"),
        project(100, 90, year=2022, work="A"),
        project(100, 90, year=2022, work="A"),
        project(100, 50, year=2022, work="B"),
    ]
    # 2022 weighted = (10*3 + 50)/4 = 20, naive group average would be 30
    rows = analyze_cost_trends(projects)

    row_2022 = [r for r in rows if r.funding_year == 2022]
    assert {r.yoy_change for r in row_2022} == {"100.00"}


def test_trend_small_or_missing_baseline_divides_by_one():
    assert yoy_change(2022, 5.0, 0.5) == pytest.approx(450.0)
    assert yoy_change(2023, 3.0, 0.0) == pytest.approx(300.0)
    assert yoy_change(2021, 99.0, 1.0) == 0.0


def test_trend_rows_sorted_by_year_then_savings_desc():
    projects = [
        project(100, 90, year=2023, work="X"),
        project(100, 50, year=2022, work="LOW"),
        project(100, 10, year=2022, work="HIGH"),
        project(100, 110, year=2021, work="Y"),
    ]
    rows = analyze_cost_trends(projects)

    assert [(r.funding_year, r.type_of_work) for r in rows] == [
        (2021, "Y"),
        (2022, "HIGH"),
        (2022, "LOW"),
        (2023, "X"),
    ]


def test_trend_overrun_rate_and_counts():
    projects = [
        project(100, 120, year=2022, work="A"),
        project(100, 80, year=2022, work="A"),
        project(100, 130, year=2022, work="A"),
        project(100, 70, year=2022, work="A"),
    ]
    (row,) = analyze_cost_trends(projects)

    assert row.total_projects == 4
    assert row.avg_cost_savings == "0.00"
    assert row.overrun_rate == "50.00"


# --- summary ---------------------------------------------------------------------


def test_summary_counts_ranked_contractors_only():
    projects = (
        _contractor_projects("RANKED", 5, 100, delay=10)
        + [project(100, 50, 20, contractor="TINY", region="CAR", province="Benguet")]
    )
    bundle = generate_all(projects)
    summary = bundle.summary

    assert summary.total_projects == 6
    assert summary.total_contractors == 1
    assert summary.total_regions == 2
    assert summary.total_provinces == 2
    assert summary.global_avg_delay_days == "11.67"
    assert summary.total_savings == "100.00"
    assert summary.report1_regions == len(bundle.regions)
    assert summary.report2_contractors == 1
    assert summary.report3_entries == len(bundle.trends)


def test_summary_of_empty_inputs_is_zeroed():
    summary = summarize([], [], [])
    assert summary.total_projects == 0
    assert summary.global_avg_delay_days == "0.00"
    assert summary.total_savings == "0.00"
