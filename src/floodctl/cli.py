import argparse
import logging
import os
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence

from dotenv import load_dotenv

from .cleaning import NoValidDataError
from .config import Config
from .config import load_config as load_runtime_config
from .dataset_io import (
    CONTRACTOR_COLUMNS,
    REGION_COLUMNS,
    TREND_COLUMNS,
    DatasetReadError,
    read_raw_rows,
    rows_to_frame,
    write_report_csv,
    write_summary_json,
    write_workbook,
)
from .reporting import make_load_text, make_summary_text, preview_table
from .reports import generate_all
from .state import DatasetNotLoadedError, DatasetState, LoadedDataset

logger = logging.getLogger(__name__)

InputFn = Callable[[str], str]


def load_dataset(runtime_cfg: Config, state: DatasetState) -> LoadedDataset:
    """Read and clean the configured CSV, replacing whatever ``state`` held."""

    raw_rows = read_raw_rows(runtime_cfg.input_csv)
    dataset = state.load(raw_rows, source=str(runtime_cfg.input_csv))
    logger.info("Loaded %s at %s", dataset.source, dataset.loaded_at)
    logger.info("%s\n", make_load_text(dataset.report))
    return dataset


def write_reports(runtime_cfg: Config, state: DatasetState) -> Dict[str, Path]:
    """Generate the three reports plus summary for the loaded dataset and persist them."""

    dataset = state.require()
    bundle = generate_all(dataset.projects)

    region_df = rows_to_frame(bundle.regions, REGION_COLUMNS)
    contractor_df = rows_to_frame(bundle.contractors, CONTRACTOR_COLUMNS)
    trend_df = rows_to_frame(bundle.trends, TREND_COLUMNS)

    artifacts = {
        "regions": write_report_csv(runtime_cfg.region_report, region_df),
        "contractors": write_report_csv(runtime_cfg.contractor_report, contractor_df),
        "trends": write_report_csv(runtime_cfg.trend_report, trend_df),
        "summary": write_summary_json(runtime_cfg.summary_json, bundle.summary),
    }
    if runtime_cfg.export_xlsx:
        artifacts["workbook"] = write_workbook(
            runtime_cfg.workbook,
            {
                "Regional Efficiency": region_df,
                "Contractor Ranking": contractor_df,
                "Annual Trends": trend_df,
            },
        )

    previews = (
        (
            "Report 1: Regional Flood Mitigation Efficiency Summary",
            "(Filtered: 2021-2023 Projects)",
            region_df,
            artifacts["regions"],
        ),
        (
            "Report 2: Top Contractors Performance Ranking",
            "(Top 15 by TotalCost, >=5 Projects)",
            contractor_df,
            artifacts["contractors"],
        ),
        (
            "Report 3: Annual Project Type Cost Overrun Trends",
            "(Grouped by FundingYear and TypeOfWork)",
            trend_df,
            artifacts["trends"],
        ),
    )
    for title, note, frame, path in previews:
        logger.info("%s\n%s\n", title, note)
        logger.info("%s\n", preview_table(frame, runtime_cfg.preview_rows))
        logger.info("(Full table exported to %s)\n", path)

    logger.info("Summary Stats (%s):", artifacts["summary"].name)
    logger.info("%s", make_summary_text(bundle.summary))
    return artifacts


def run(runtime_config: Optional[Config] = None, state: Optional[DatasetState] = None) -> int:
    """Load, clean and report in one pass; returns a process exit code."""

    runtime_cfg = runtime_config or load_runtime_config(os.environ, None)
    state = state or DatasetState()
    stage_counter = 0

    def log_stage(message: str) -> None:
        nonlocal stage_counter
        stage_counter += 1
        logger.info("[pipeline:%02d] %s", stage_counter, message)

    def log_detail(message: str) -> None:
        logger.info("           %s", message)

    log_stage(f"Loading project rows from {runtime_cfg.input_csv}")
    try:
        dataset = load_dataset(runtime_cfg, state)
    except (FileNotFoundError, DatasetReadError) as exc:
        logger.error("Failed to load file: %s", exc)
        return 1
    except NoValidDataError as exc:
        logger.error("%s", exc)
        return 1
    log_detail(f"cleaned_projects={len(dataset.projects):,} | rejected={dataset.report.rejected_rows:,}")

    log_stage("Generating reports")
    artifacts = write_reports(runtime_cfg, state)

    log_stage("Outputs written")
    for path in artifacts.values():
        log_detail(str(path))
    return 0


def _ask_back_to_menu(input_fn: InputFn) -> bool:
    while True:
        answer = input_fn("Back to Report Selection (Y/N): ").strip().upper()
        if answer == "Y":
            return True
        if answer == "N":
            return False
        logger.info("Invalid choice. Please enter Y or N.")


def run_menu(
    runtime_config: Optional[Config] = None,
    state: Optional[DatasetState] = None,
    input_fn: InputFn = input,
) -> int:
    """
    Interactive driver: ``[1]`` loads the CSV, ``[2]`` generates reports.

    The loaded dataset lives in ``state`` between menu selections and is
    replaced wholesale by every successful load.
    """

    runtime_cfg = runtime_config or load_runtime_config(os.environ, None)
    state = state or DatasetState()
    try:
        while True:
            logger.info("Select an option:\n[1] Load the file\n[2] Generate Reports\n")
            choice = input_fn("Enter choice: ").strip()
            if choice == "1":
                try:
                    load_dataset(runtime_cfg, state)
                except (FileNotFoundError, DatasetReadError, NoValidDataError) as exc:
                    logger.error("Failed to load file: %s\n", exc)
            elif choice == "2":
                try:
                    write_reports(runtime_cfg, state)
                except DatasetNotLoadedError as exc:
                    logger.error("Error: %s\n", exc)
                    continue
                if not _ask_back_to_menu(input_fn):
                    logger.info("Exiting flood control data pipeline...")
                    return 0
            else:
                logger.info("Invalid choice. Please enter 1 or 2.\n")
    except (EOFError, KeyboardInterrupt):
        return 0


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Clean flood control project data and generate reports")
    parser.add_argument("--input-csv", help="Path to the flood control projects CSV")
    parser.add_argument("--output-dir", help="Directory for generated reports")
    parser.add_argument("--preview-rows", type=int, help="Rows shown per report preview")
    parser.add_argument("--xlsx", action="store_true", help="Also write all reports to one Excel workbook")
    parser.add_argument("-i", "--interactive", action="store_true", help="Drive the pipeline from a text menu")
    parser.add_argument("-v", "--verbose", action="store_true", help="Increase logging verbosity")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    runtime_cfg = load_runtime_config(os.environ, args)
    log_level = logging.DEBUG if runtime_cfg.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(message)s")
    try:
        if runtime_cfg.interactive:
            return run_menu(runtime_config=runtime_cfg)
        return run(runtime_config=runtime_cfg)
    except Exception:  # pragma: no cover - defensive
        logger.exception("Fatal error during report generation")
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
