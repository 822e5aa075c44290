# ==============================================
# UploadProcessor — Orchestrator
# ==============================================
#
# PURPOSE:
#   This is the MAIN CLASS that ties the 4 stages together into
#   the single "process upload" operation. Users interact with this
#   class (or the CLI on top of it) only.
#
# HOW IT CONNECTS THE 4 STAGES:
#
#   ┌──────────────────────────────────────────────────────────┐
#   │                    UploadProcessor                       │
#   │                                                          │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ STAGE 1: SCHEMA DISCOVERY                    │        │
#   │  │  SchemaDiscovery → SchemaDescription         │        │
#   │  └──────────────┬───────────────────────────────┘        │
#   │                 │ role → column mapping                  │
#   │                 ▼                                        │
#   │        [ store handle acquired: with MySQLClient ]       │
#   │                 │                                        │
#   │  ┌──────────────▼───────────────────────────────┐        │
#   │  │ STAGE 2: STAGING                             │        │
#   │  │  StagingLoader → StagingArea (temp table)    │        │
#   │  └──────────────┬───────────────────────────────┘        │
#   │                 │ staged text rows                       │
#   │                 ▼                                        │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ STAGE 3: TRANSFORM AND COMMIT                │        │
#   │  │  RecordBuilder → RecordCommitter (1 txn)     │        │
#   │  └──────────────┬───────────────────────────────┘        │
#   │                 │ staging dropped                        │
#   │                 ▼                                        │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ STAGE 4: ANALYSIS                            │        │
#   │  │  AgeDistributionAggregator → report          │        │
#   │  └──────────────────────────────────────────────┘        │
#   └──────────────────────────────────────────────────────────┘
#
# CLASS: UploadProcessor
# ----------------------
#   Constructor:
#   ------------
#   - __init__(config: AppConfig | None = None, store_factory=None)
#       store_factory() must return a context manager yielding a
#       store handle; defaults to MySQLClient.from_config(...).
#
#   Public Methods:
#   ---------------
#   - process_upload(csv_path=None) -> IngestResult
#       Never raises IngestError: every failure becomes
#       IngestResult(success=False, error=..., error_kind=...).
#   - age_report() -> AgeDistributionReport
#   - init_store() -> None
#
# DATA CLASS: IngestResult
# ------------------------
#   success, csv_path, records_committed, report, error,
#   error_kind, elapsed_seconds; to_dict() for a response body.
#
# ==============================================

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from user_ingest.analysis.age_distribution import AgeDistributionAggregator, AgeDistributionReport
from user_ingest.config import AppConfig, get_config
from user_ingest.errors import IngestError, SourceReadError
from user_ingest.schema.discovery import SchemaDiscovery
from user_ingest.staging.loader import StagingLoader
from user_ingest.storage.mysql_client import MySQLClient
from user_ingest.transform.record_builder import RecordCommitter


@dataclass
class IngestResult:
    success: bool
    csv_path: Optional[str] = None
    records_committed: int = 0
    report: Optional[AgeDistributionReport] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
    elapsed_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "success" if self.success else "error",
            "csv_path": self.csv_path,
            "records_committed": self.records_committed,
            "report": self.report.to_dict() if self.report else None,
            "error": self.error,
            "error_kind": self.error_kind,
            "elapsed_seconds": self.elapsed_seconds,
        }


class UploadProcessor:
    """
    Runs discovery → staging → transform-and-commit → aggregation
    for one CSV upload.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        store_factory: Optional[Callable[[], Any]] = None
    ):
        """
        Args:
            config: Application configuration. If None, loads from environment.
            store_factory: Zero-argument callable returning a store context
                manager. If None, a new MySQLClient is opened per call.
        """
        self._config = config or get_config()
        self._store_factory = store_factory or (
            lambda: MySQLClient.from_config(self._config.mysql)
        )
        self._discovery = SchemaDiscovery()

    def process_upload(self, csv_path: Optional[str] = None) -> IngestResult:
        """
        Ingest one CSV file and report the age distribution.

        Args:
            csv_path: CSV to ingest. Defaults to CSV_FILE_PATH from config.

        Returns:
            IngestResult; success=False carries a human-readable cause.
        """
        path = csv_path or self._config.ingest.csv_file_path
        start_time = time.time()
        result = IngestResult(success=False, csv_path=path)

        try:
            if not path:
                raise SourceReadError("No CSV file path given and CSV_FILE_PATH is not set")

            schema = self._discovery.discover(path)
            print(f"✓ Discovered {len(schema.columns)} columns in {path}")
            print(f"   → address fields: {schema.address_fields}")
            print(f"   → attribute fields: {schema.attribute_fields}")

            with self._store_factory() as store:
                store.ensure_users_table()

                loader = StagingLoader(store, batch_size=self._config.ingest.staging_batch_size)
                with loader.stage(path, schema) as staging:
                    print(f"✓ Staged {staging.row_count} rows")
                    commit = RecordCommitter(store).commit(staging)
                result.records_committed = commit.records_committed
                print(f"✓ Committed {commit.records_committed} user records")

                result.report = AgeDistributionAggregator(store).compute()

        except IngestError as e:
            result.error = str(e)
            result.error_kind = e.kind
            result.elapsed_seconds = round(time.time() - start_time, 3)
            print(f"✗ Upload failed ({e.kind}): {e}")
            return result

        result.success = True
        result.elapsed_seconds = round(time.time() - start_time, 3)
        print_report(result.report)
        return result

    def age_report(self) -> AgeDistributionReport:
        with self._store_factory() as store:
            store.ensure_users_table()
            return AgeDistributionAggregator(store).compute()

    def init_store(self) -> None:
        with self._store_factory() as store:
            store.ensure_users_table()
        print("✓ Users table created or already exists")


def print_report(report: AgeDistributionReport) -> None:
    for line in report.format_lines():
        print(line)
