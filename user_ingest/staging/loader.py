# ==============================================
# StagingLoader
# ==============================================
#
# PURPOSE:
#   Bulk-load the raw CSV body into a fresh, request-scoped staging
#   table whose columns mirror the discovered headers, one TEXT
#   column per header, in header order.
#
# WHY THIS CLASS EXISTS:
#   Values are staged verbatim (no type coercion) because the record
#   builder may combine several source columns into one target field
#   (name) or spread them into a nested object (address). Staging
#   first also makes the body parse all-or-nothing: a malformed CSV
#   is rejected before a single user record is built.
#
# CLASS: StagingLoader
# --------------------
#   - __init__(store, batch_size=1000)
#   - read_rows(csv_path, schema) -> list[tuple[str, ...]]
#       Parse the body with pandas, every value as a string.
#       Every record must carry exactly one field per header;
#       ragged rows / broken quoting → LoadError.
#   - stage(csv_path, schema) -> StagingArea
#       Create the staging table and load every row into it.
#
# CLASS: StagingArea
# ------------------
#   Context manager around one staging table. Dropped on exit,
#   whether the upload succeeded or not.
#   - table_name, schema, row_count
#   - fetch_rows() -> list[tuple]
#   - drop() -> None
#
# ==============================================

import csv
import uuid
from pathlib import Path
from typing import Union

import pandas as pd

from user_ingest.errors import LoadError, SourceReadError
from user_ingest.schema.columns import SchemaDescription
from user_ingest.schema.discovery import CSV_ENCODING

STAGING_TABLE_PREFIX = "staging_users_"


class StagingArea:
    def __init__(self, store, table_name: str, schema: SchemaDescription, row_count: int):
        self.store = store
        self.table_name = table_name
        self.schema = schema
        self.row_count = row_count
        self._dropped = False

    def fetch_rows(self) -> list[tuple]:
        return self.store.fetch_staging_rows(self.table_name)

    def drop(self) -> None:
        if not self._dropped:
            self.store.drop_staging_table(self.table_name)
            self._dropped = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            self.drop()
        except Exception:
            # Never mask the error that is already propagating
            if exc_type is None:
                raise
        return False


class StagingLoader:
    """
    Loads CSV rows verbatim into a per-request staging table.
    """

    def __init__(self, store, batch_size: int = 1000):
        self.store = store
        self.batch_size = batch_size

    def read_rows(self, csv_path: Union[str, Path], schema: SchemaDescription) -> list[tuple]:
        """
        Parse every data row of the CSV as strings.

        Args:
            csv_path: Path to the uploaded CSV
            schema: Result of SchemaDiscovery for the same file

        Returns:
            One tuple per data row, values in header order

        Raises:
            SourceReadError: The file cannot be read
            LoadError: The body is malformed (ragged rows, bad quoting)
        """
        path = Path(csv_path)
        _check_field_counts(path, len(schema.headers))
        try:
            frame = pd.read_csv(
                path,
                header=0,
                dtype=str,
                keep_default_na=False,
                on_bad_lines="error",
                encoding=CSV_ENCODING,
            )
        except pd.errors.ParserError as e:
            raise LoadError(f"Malformed CSV body in {path}: {e}") from e
        except pd.errors.EmptyDataError as e:
            raise LoadError(f"CSV file {path} has no header row") from e
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError(f"Cannot read CSV file {path}: {e}") from e

        if list(frame.columns) != schema.headers or not isinstance(frame.index, pd.RangeIndex):
            raise LoadError(
                f"Malformed CSV body in {path}: data rows do not match the {len(schema.headers)} header columns"
            )

        return list(frame.itertuples(index=False, name=None))

    def stage(self, csv_path: Union[str, Path], schema: SchemaDescription) -> StagingArea:
        rows = self.read_rows(csv_path, schema)

        table_name = f"{STAGING_TABLE_PREFIX}{uuid.uuid4().hex[:16]}"
        columns = schema.staging_columns()
        self.store.create_staging_table(table_name, columns)
        staging = StagingArea(self.store, table_name, schema, row_count=0)
        try:
            staging.row_count = self.store.load_staging_rows(table_name, columns, rows, self.batch_size)
        except Exception:
            staging.drop()
            raise

        if staging.row_count != len(rows):
            staging.drop()
            raise LoadError(
                f"Staged {staging.row_count} rows but the CSV has {len(rows)} data rows"
            )
        return staging


def _check_field_counts(path: Path, expected: int) -> None:
    # pandas pads short rows with "" when NA parsing is off, so count fields per record
    try:
        with open(path, newline="", encoding=CSV_ENCODING) as handle:
            reader = csv.reader(handle, strict=True)
            next(reader, None)
            data_row = 0
            for record in reader:
                if not record:
                    # Blank lines are skipped, as pandas does
                    continue
                data_row += 1
                if len(record) != expected:
                    raise LoadError(
                        f"Malformed CSV body in {path}: data row {data_row} has "
                        f"{len(record)} fields, expected {expected}"
                    )
    except csv.Error as e:
        raise LoadError(f"Malformed CSV body in {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(f"Cannot read CSV file {path}: {e}") from e
