"""
stormimpact command line interface
==================================

Run the whole analysis and print the two ranked tables:

    python -m stormimpact.cli --report "storm_report.docx"

The dataset is downloaded once into `data/` and reused on later runs.
"""

from __future__ import annotations
import argparse
import logging
import os

import pandas as pd

from .aggregate import TOP_N
from .loader import DATASET_URL, DEFAULT_CACHE_PATH
from .pipeline import AnalysisConfig, AnalysisResult, run_analysis
from .transform import START_YEAR


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="stormimpact",
        description="Rank storm event types by health and economic impact.",
    )
    ap.add_argument("--data", default=str(DEFAULT_CACHE_PATH),
                    help="Local path of the compressed dataset (cache)")
    ap.add_argument("--url", default=DATASET_URL,
                    help="Where to download the dataset from if --data is missing")
    ap.add_argument("--offline", action="store_true",
                    help="Never download; fail if --data does not exist")
    ap.add_argument("--start-year", type=int, default=START_YEAR,
                    help="First year of events to analyse")
    ap.add_argument("--top", type=int, default=TOP_N, help="Number of event types per table")
    ap.add_argument("--report", help="Write a DOCX report to this path")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log progress")
    return ap


def print_tables(result: AnalysisResult) -> None:
    from .report import economy_table, health_table

    with pd.option_context("display.float_format", "{:,.0f}".format, "display.width", 120):
        print(f"Events analysed: {len(result.events)} of {result.total_events} "
              f"(from {result.start_year} onward)\n")
        print(f"Top {len(result.health)} by total casualties:")
        print(health_table(result.health).to_string(index=False))
        print()
        print(f"Top {len(result.economy)} by total damage:")
        print(economy_table(result.economy).to_string(index=False))


def main(argv=None) -> None:
    """Entry point for the stormimpact CLI.

    1) Load dataset (download once)
    2) Filter, normalize, aggregate
    3) Print tables and optionally write the report
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = AnalysisConfig(
        url=None if args.offline else args.url,
        cache_path=args.data,
        start_year=args.start_year,
        top_n=args.top,
    )
    print("Loading dataset...")
    result = run_analysis(config)
    print_tables(result)

    if args.report:
        from .report import DatasetCitation, ReportConfig, generate_docx_report
        cfg = ReportConfig(citation=DatasetCitation(file_name=os.path.basename(args.data)))
        generate_docx_report(result, args.report, config=cfg)
        print(f"\nReport written to {args.report}")


if __name__ == "__main__":
    main()
