# ==============================================
# STAGE 3: TRANSFORM AND COMMIT
# ==============================================
#
# Turns staged rows into user records and commits them
# to the `users` table atomically.
#
# Modules:
# --------
# - user_record.py     → UserRecord (persisted shape)
# - record_builder.py  → RecordBuilder, RecordCommitter, CommitResult
#
# ==============================================

from .user_record import UserRecord
from .record_builder import CommitResult, RecordBuilder, RecordCommitter

__all__ = ["UserRecord", "CommitResult", "RecordBuilder", "RecordCommitter"]
