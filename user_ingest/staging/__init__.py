# ==============================================
# STAGE 2: STAGING
# ==============================================
#
# Bulk-loads raw CSV rows into an ephemeral, request-scoped
# staging table (all values as text).
#
# Modules:
# --------
# - loader.py  → StagingLoader, StagingArea
#
# ==============================================

from .loader import StagingArea, StagingLoader

__all__ = ["StagingArea", "StagingLoader"]
