# ==============================================
# STAGE 1: SCHEMA DISCOVERY
# ==============================================
#
# Reads the CSV header row and decides which column feeds
# which part of the user record.
#
# Modules:
# --------
# - columns.py    → ColumnRole, ColumnClassification, SchemaDescription
# - discovery.py  → SchemaDiscovery (header reading + classification)
#
# ==============================================

from .columns import (
    ADDRESS_FIELDS,
    ColumnClassification,
    ColumnRole,
    SchemaDescription,
)
from .discovery import SchemaDiscovery

__all__ = [
    "ADDRESS_FIELDS",
    "ColumnClassification",
    "ColumnRole",
    "SchemaDescription",
    "SchemaDiscovery",
]
