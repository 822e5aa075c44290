# ==============================================
# Age Buckets
# ==============================================
#
# PURPOSE:
#   The four fixed, non-overlapping age ranges of the report.
#   Bounds are inclusive integers, which keeps the asymmetric
#   40/60 boundaries exact:
#
#     under_20   age <= 19
#     20_to_40   20 <= age <= 40
#     40_to_60   41 <= age <= 60
#     over_60    age >= 61
#
# ==============================================

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AgeBucket:
    key: str
    label: str
    min_age: Optional[int] = None  # inclusive, None = unbounded
    max_age: Optional[int] = None  # inclusive, None = unbounded

    def contains(self, age: int) -> bool:
        if self.min_age is not None and age < self.min_age:
            return False
        if self.max_age is not None and age > self.max_age:
            return False
        return True


AGE_BUCKETS = (
    AgeBucket(key="under_20", label="< 20", max_age=19),
    AgeBucket(key="20_to_40", label="20 to 40", min_age=20, max_age=40),
    AgeBucket(key="40_to_60", label="40 to 60", min_age=41, max_age=60),
    AgeBucket(key="over_60", label="> 60", min_age=61),
)


def bucket_for_age(age: int) -> AgeBucket:
    """Return the single bucket an age falls into."""
    for bucket in AGE_BUCKETS:
        if bucket.contains(age):
            return bucket
    # Unreachable while the buckets cover every integer
    raise ValueError(f"No age bucket for {age}")
