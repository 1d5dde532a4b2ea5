#!/usr/bin/env python3
"""
Script to run a full analytics cycle over a JSON export and emit the report.

Usage:
    python scripts/run_analysis.py EXPORT.json [--year YEAR] [--volunteers N]
        [--budget N] [--vehicles N] [--equipment N] [--output FILE]
"""

import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from streetpaws.core.config import DEFAULT_RESOURCE_POOL, LOG_FORMAT, LOG_LEVEL
from streetpaws.data.processor import DataProcessor
from streetpaws.reports.report_generator import ReportGenerator

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Run StreetPaws analytics")
    parser.add_argument("export", type=str, help="JSON export of incident records")
    parser.add_argument("--year", type=int, default=None, help="Calendar year to aggregate (UTC)")
    for name, default in DEFAULT_RESOURCE_POOL.items():
        parser.add_argument(f"--{name}", type=float, default=default)
    parser.add_argument("--output", type=str, default=None, help="Output file for JSON report")
    args = parser.parse_args()

    records = DataProcessor().load_json_file(args.export)
    if not records:
        logger.error("No incident records found in the export.")
        sys.exit(1)

    logger.info(f"Analyzing {len(records)} records...")

    pool = {name: getattr(args, name) for name in DEFAULT_RESOURCE_POOL}
    report = ReportGenerator(records).generate_analytics_report(pool=pool, year=args.year)

    output_json = json.dumps(report, indent=2, default=str)
    if args.output:
        with open(args.output, "w") as f:
            f.write(output_json)
        logger.info(f"Report saved to {args.output}")
    else:
        print(output_json)


if __name__ == "__main__":
    main()
