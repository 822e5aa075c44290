# ==============================================
# CLI — Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Provides command-line interface to run the upload.
#   This is how users interact with the system.
#
# COMMANDS:
# ---------
# 1. Ingest a CSV and print the age report:
#    python -m user_ingest.cli upload data/users.csv
#    python -m user_ingest.cli upload            # uses CSV_FILE_PATH
#
# 2. Print the age report for what is already stored:
#    python -m user_ingest.cli report
#
# 3. Create the users table:
#    python -m user_ingest.cli init
#
# Add --json to report for a machine-readable result.
# Exit status is 0 on success, 1 on failure.
#
# ==============================================

import argparse
import json
import sys
from typing import Optional, Sequence

from user_ingest.config import get_config
from user_ingest.errors import IngestError
from user_ingest.upload_processor import UploadProcessor, print_report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="user-ingest",
        description="Load a users CSV into MySQL and report the age distribution."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    upload = subparsers.add_parser("upload", help="Ingest a CSV file")
    upload.add_argument("csv_path", nargs="?", default=None,
                        help="CSV file to ingest (default: CSV_FILE_PATH)")

    report = subparsers.add_parser("report", help="Print the age-group distribution")
    report.add_argument("--json", action="store_true", help="Print the report as JSON")

    subparsers.add_parser("init", help="Create the users table")
    return parser


def main(argv: Optional[Sequence[str]] = None, processor: Optional[UploadProcessor] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        processor = processor or UploadProcessor(get_config())

        if args.command == "upload":
            result = processor.process_upload(args.csv_path)
            return 0 if result.success else 1

        if args.command == "report":
            report = processor.age_report()
            if args.json:
                print(json.dumps(report.to_dict(), indent=2))
            else:
                print_report(report)
            return 0

        processor.init_store()
        return 0

    except IngestError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
