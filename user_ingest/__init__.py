# ==============================================
# User CSV Ingestion
# ==============================================
#
# Package Structure (4 Stages + Orchestrator):
#
# user_ingest/
# ├── schema/              # Stage 1: Discover and classify CSV headers
# ├── staging/             # Stage 2: Bulk-load raw rows into a staging table
# ├── transform/           # Stage 3: Build user records and commit them
# ├── analysis/            # Stage 4: Age distribution report
# ├── storage/             # MySQL store handle used by stages 2-4
# ├── config.py            # Configuration management
# ├── errors.py            # Error kinds surfaced to the caller
# ├── upload_processor.py  # Orchestrator ("process upload")
# └── cli.py               # Command line entry point
#
# ==============================================

__version__ = "0.1.0"
