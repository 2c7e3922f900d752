from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Optional

# Raw CSV header names; the input schema is fixed.
COL_MAIN_ISLAND = "MainIsland"
COL_REGION = "Region"
COL_PROVINCE = "Province"
COL_TYPE_OF_WORK = "TypeOfWork"
COL_FUNDING_YEAR = "FundingYear"
COL_APPROVED_BUDGET = "ApprovedBudgetForContract"
COL_CONTRACT_COST = "ContractCost"
COL_START_DATE = "StartDate"
COL_COMPLETION_DATE = "ActualCompletionDate"
COL_CONTRACTOR = "Contractor"
COL_PROJECT_LAT = "ProjectLatitude"
COL_PROJECT_LON = "ProjectLongitude"
COL_CAPITAL_LAT = "ProvincialCapitalLatitude"
COL_CAPITAL_LON = "ProvincialCapitalLongitude"

RAW_COLUMNS = (
    COL_MAIN_ISLAND,
    COL_REGION,
    COL_PROVINCE,
    COL_TYPE_OF_WORK,
    COL_FUNDING_YEAR,
    COL_APPROVED_BUDGET,
    COL_CONTRACT_COST,
    COL_COMPLETION_DATE,
    COL_CONTRACTOR,
    COL_START_DATE,
    COL_PROJECT_LAT,
    COL_PROJECT_LON,
    COL_CAPITAL_LAT,
    COL_CAPITAL_LON,
)


class RejectReason(str, Enum):
    FUNDING_YEAR = "funding_year"
    APPROVED_BUDGET = "approved_budget"
    CONTRACT_COST = "contract_cost"


@dataclass(frozen=True)
class CleanedProject:
    """One validated flood-control project with its derived metrics."""

    funding_year: int
    approved_budget: float
    contract_cost: float
    start_date: Optional[date]
    completion_date: Optional[date]
    region: str
    main_island: str
    contractor: str
    type_of_work: str
    cost_savings: float
    completion_delay_days: int
    province: str = "Unknown"
    latitude: Optional[float] = None
    longitude: Optional[float] = None


@dataclass(frozen=True)
class RegionReportRow:
    region: str
    main_island: str
    total_approved_budget: str
    median_cost_savings: str
    avg_completion_delay_days: str
    delay_over_30_percent: str
    efficiency_score: float

    def to_record(self) -> dict:
        return {
            "Region": self.region,
            "MainIsland": self.main_island,
            "TotalApprovedBudget": self.total_approved_budget,
            "MedianCostSavings": self.median_cost_savings,
            "AvgCompletionDelayDays": self.avg_completion_delay_days,
            "DelayOver30Percent": self.delay_over_30_percent,
            "EfficiencyScore": self.efficiency_score,
        }


@dataclass(frozen=True)
class ContractorReportRow:
    rank: int
    contractor: str
    total_cost: str
    num_projects: int
    avg_delay: str
    total_savings: str
    reliability_index: str
    risk_flag: str

    def to_record(self) -> dict:
        return {
            "Rank": self.rank,
            "Contractor": self.contractor,
            "TotalCost": self.total_cost,
            "NumProjects": self.num_projects,
            "AvgDelay": self.avg_delay,
            "TotalSavings": self.total_savings,
            "ReliabilityIndex": self.reliability_index,
            "RiskFlag": self.risk_flag,
        }


@dataclass(frozen=True)
class TrendReportRow:
    funding_year: int
    type_of_work: str
    total_projects: int
    avg_cost_savings: str
    overrun_rate: str
    yoy_change: str

    def to_record(self) -> dict:
        return {
            "FundingYear": self.funding_year,
            "TypeOfWork": self.type_of_work,
            "TotalProjects": self.total_projects,
            "AvgCostSavings": self.avg_cost_savings,
            "OverrunRate": self.overrun_rate,
            "YoYChange": self.yoy_change,
        }


@dataclass(frozen=True)
class SummaryRecord:
    """Dataset-wide totals exported as ``summary.json``."""

    total_projects: int
    total_contractors: int
    total_regions: int
    total_provinces: int
    global_avg_delay_days: str
    total_savings: str
    report1_regions: int = 0
    report2_contractors: int = 0
    report3_entries: int = 0

    def to_record(self) -> dict:
        return asdict(self)


@dataclass
class LoadReport:
    """Counters collected while cleaning one batch of raw rows."""

    total_rows: int = 0
    kept_rows: int = 0
    rejected: Dict[RejectReason, int] = field(default_factory=dict)
    imputed_completion_dates: int = 0
    missing_start_dates: int = 0
    imputed_coordinates: int = 0

    @property
    def rejected_rows(self) -> int:
        return sum(self.rejected.values())

    def reject(self, reason: RejectReason) -> None:
        self.rejected[reason] = self.rejected.get(reason, 0) + 1


__all__ = [
    "CleanedProject",
    "ContractorReportRow",
    "LoadReport",
    "RAW_COLUMNS",
    "RegionReportRow",
    "RejectReason",
    "SummaryRecord",
    "TrendReportRow",
]
