from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List

import pandas as pd
import pytest


def make_row(**overrides: str) -> Dict[str, str]:
    row = {
        "MainIsland": "Luzon",
        "Region": "NCR",
        "Province": "Metro Manila",
        "TypeOfWork": "Construction of Flood Mitigation Structure",
        "FundingYear": "2022",
        "ApprovedBudgetForContract": "1,000,000.00",
        "ContractCost": "900,000.00",
        "StartDate": "2022-01-01",
        "ActualCompletionDate": "2022-03-02",
        "Contractor": "ACME BUILDERS",
        "ProjectLatitude": "14.60",
        "ProjectLongitude": "121.00",
        "ProvincialCapitalLatitude": "14.59",
        "ProvincialCapitalLongitude": "120.98",
    }
    row.update(overrides)
    return row


@pytest.fixture
def row_factory() -> Callable[..., Dict[str, str]]:
    return make_row


@pytest.fixture
def csv_factory(tmp_path: Path) -> Callable[[List[Dict[str, str]]], Path]:
    def _create(rows: List[Dict[str, str]], name: str = "projects.csv") -> Path:
        path = tmp_path / name
        pd.DataFrame(rows).to_csv(path, index=False)
        return path

    return _create
