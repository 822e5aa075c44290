# ==============================================
# STAGE 4: ANALYSIS
# ==============================================
#
# Aggregates persisted user records into the age-group
# % distribution report.
#
# Modules:
# --------
# - age_buckets.py       → AgeBucket, AGE_BUCKETS, bucket_for_age
# - age_distribution.py  → AgeDistributionAggregator, AgeDistributionReport
#
# ==============================================

from .age_buckets import AGE_BUCKETS, AgeBucket, bucket_for_age
from .age_distribution import (
    AgeDistributionAggregator,
    AgeDistributionReport,
    build_report,
)

__all__ = [
    "AGE_BUCKETS",
    "AgeBucket",
    "bucket_for_age",
    "AgeDistributionAggregator",
    "AgeDistributionReport",
    "build_report",
]
