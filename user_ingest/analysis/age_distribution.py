# ==============================================
# AgeDistributionAggregator
# ==============================================
#
# PURPOSE:
#   Compute the age-group % distribution over every user in the
#   store (not just the current upload).
#
# WHY THIS CLASS EXISTS:
#   Counting happens in MySQL (one SUM(CASE ...) query); turning
#   counts into rounded percentages and refusing to divide by zero
#   happens here, so the policy is the same for any store.
#
# CLASS: AgeDistributionAggregator
# --------------------------------
#   - __init__(store)
#   - compute() -> AgeDistributionReport
#       Raises EmptyReportError when the store holds no users.
#
# FUNCTION:
# ---------
#   - build_report(counts, total) -> AgeDistributionReport
#       percentage = count / total * 100 to 2 places, largest-remainder
#       rounding so the four values always add up to exactly 100.00
#
# DATA CLASS: AgeDistributionReport
# ---------------------------------
#   - total_users: int
#   - counts: dict[str, int]          keyed by bucket key
#   - percentages: dict[str, float]   keyed by bucket key
#   - to_dict() / format_lines()
#
# ==============================================

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List

from user_ingest.analysis.age_buckets import AGE_BUCKETS
from user_ingest.errors import EmptyReportError

REPORT_TITLE = "Age-Group % Distribution"

# Percentages are allotted in hundredths of a percent
_UNITS_PER_WHOLE = 10000


@dataclass
class AgeDistributionReport:
    total_users: int
    counts: Dict[str, int] = field(default_factory=dict)
    percentages: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_users": self.total_users,
            "counts": dict(self.counts),
            "percentages": dict(self.percentages),
        }

    def format_lines(self) -> List[str]:
        lines = [REPORT_TITLE]
        for bucket in AGE_BUCKETS:
            lines.append(f"{bucket.label}: {self.percentages[bucket.key]:.2f}%")
        return lines


def allot_percentages(counts: Dict[str, int], total: int) -> Dict[str, float]:
    """
    Largest-remainder rounding of count / total * 100 to 2 places.

    Every key is floored to a hundredth of a percent, then the
    hundredths still missing from 100.00 go one each to the keys with
    the largest remainders (earlier keys win ties). Each value stays
    within 0.01 of its exact percentage.
    """
    units = {}
    remainders = {}
    for key, count in counts.items():
        units[key], remainders[key] = divmod(count * _UNITS_PER_WHOLE, total)

    # Equals the hundredths missing from 100.00 when the counts add up to total
    leftover = sum(remainders.values()) // total
    order = list(counts)
    by_remainder = sorted(order, key=lambda key: (-remainders[key], order.index(key)))
    for key in by_remainder[:leftover]:
        units[key] += 1

    return {key: float(Decimal(value).scaleb(-2)) for key, value in units.items()}


def build_report(counts: Dict[str, int], total: int) -> AgeDistributionReport:
    """
    Turn per-bucket counts into a report.

    Args:
        counts: User count per bucket key
        total: Total user count

    Returns:
        AgeDistributionReport with one percentage per bucket

    Raises:
        EmptyReportError: If total is zero
    """
    if total <= 0:
        raise EmptyReportError("No user records to aggregate; age distribution is undefined")

    ordered_counts = {bucket.key: int(counts.get(bucket.key, 0)) for bucket in AGE_BUCKETS}
    return AgeDistributionReport(
        total_users=total,
        counts=ordered_counts,
        percentages=allot_percentages(ordered_counts, total),
    )


class AgeDistributionAggregator:
    def __init__(self, store):
        self.store = store

    def compute(self) -> AgeDistributionReport:
        counts, total = self.store.count_age_buckets(AGE_BUCKETS)
        return build_report(counts, total)
