"""Command line entry point: ``wle-report CSV_PATH [--cache CACHE_PATH]``."""

import argparse
import logging
from collections.abc import Iterable
from pathlib import Path

from wle_tlbx.errors import PipelineError
from wle_tlbx.pipeline import PipelineConfig, run_pipeline


logger = logging.getLogger("wle_tlbx")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="wle-report",
        description="Train a random forest on the Weight Lifting Exercises data and report its accuracy",
    )
    p.add_argument("csv_path", type=Path, help="Labelled sensor table (header row, label column 'classe')")
    p.add_argument("--cache", type=Path, default=None, help="Model cache file (reused when data and parameters match)")
    return p


def main(argv: Iterable[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    # seed, split fraction and forest size stay at their PipelineConfig defaults
    config = PipelineConfig(csv_path=args.csv_path, cache_path=args.cache)
    try:
        result = run_pipeline(config)
    except PipelineError as exc:
        logger.error("Run failed: %s", exc.describe())
        return 1

    print(result.summary())
    return 0


__all__ = ["build_parser", "main"]
