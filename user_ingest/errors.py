# ==============================================
# Errors
# ==============================================
#
# PURPOSE:
#   One exception type per failure kind the upload can surface.
#   Every stage raises one of these and aborts the rest of the
#   pipeline. UploadProcessor turns them into a failed IngestResult.
#
# HIERARCHY:
# ----------
#   IngestError
#   ├── ConfigError         → bad environment configuration
#   ├── SourceReadError     → CSV file missing / unreadable
#   ├── SchemaError         → malformed or unexpected header row
#   ├── LoadError           → staging bulk load rejected (malformed body)
#   ├── TypeCoercionError   → age value not an integer
#   ├── StoreError          → MySQL connectivity / commit failure
#   └── EmptyReportError    → no records to aggregate
#
# ==============================================


class IngestError(Exception):
    """Base class for every failure an upload can report."""

    kind = "ingest_error"


class ConfigError(IngestError):
    kind = "config_error"


class SourceReadError(IngestError):
    kind = "io_error"


class SchemaError(IngestError):
    kind = "schema_error"


class LoadError(IngestError):
    kind = "load_error"


class TypeCoercionError(IngestError):
    """Raised when a staged value cannot be coerced to its column type."""

    kind = "type_coercion_error"

    def __init__(self, column: str, value: str, row_number: int):
        self.column = column
        self.value = value
        self.row_number = row_number
        super().__init__(
            f"Value {value!r} in column '{column}' (data row {row_number}) is not an integer"
        )


class StoreError(IngestError):
    kind = "store_error"


class EmptyReportError(IngestError):
    kind = "empty_report"
