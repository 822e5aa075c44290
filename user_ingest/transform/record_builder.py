# ==============================================
# RecordBuilder / RecordCommitter
# ==============================================
#
# PURPOSE:
#   Map staged rows into the final user record shape and commit
#   them to the `users` table in one bulk operation.
#
# MAPPING (per staged row):
# -------------------------
#   - name            = "<name.firstName> <name.lastName>"
#   - age             = int(age), ASCII digits with an optional sign,
#                       within MySQL INT range → TypeCoercionError otherwise
#   - address         = exactly {addressLine1, addressLine2, city, state};
#                       sub-fields missing from the CSV are None
#   - additional_info = {attribute header: raw string value}
#
# CLASS: RecordBuilder
# --------------------
#   Stateless apart from the SchemaDescription it reads positions from.
#   - build(row, row_number) -> UserRecord
#   - build_all(rows) -> list[UserRecord]
#
# CLASS: RecordCommitter
# ----------------------
#   - commit(staging: StagingArea) -> CommitResult
#       Build every record first, then one store.insert_users() call.
#       A bad row aborts before anything is written; a store failure
#       rolls back the whole batch.
#
# DATA CLASS: CommitResult
# ------------------------
#   - rows_staged: int
#   - records_committed: int
#
# ==============================================

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from user_ingest.errors import TypeCoercionError
from user_ingest.schema.columns import ADDRESS_FIELDS, AGE_HEADER, ColumnRole, SchemaDescription
from user_ingest.transform.user_record import UserRecord

# Signed 32-bit, the range of the users.age INT column
AGE_MIN = -2147483648
AGE_MAX = 2147483647

_INTEGER = re.compile(r"[+-]?[0-9]+")


@dataclass
class CommitResult:
    rows_staged: int = 0
    records_committed: int = 0


class RecordBuilder:
    def __init__(self, schema: SchemaDescription):
        self.schema = schema
        self._first_name_pos = schema.position_of(ColumnRole.FIRST_NAME)
        self._last_name_pos = schema.position_of(ColumnRole.LAST_NAME)
        self._age_pos = schema.position_of(ColumnRole.AGE)
        self._address_pos = schema.address_positions()
        self._attribute_pos = schema.attribute_positions()

    def build(self, row: Sequence[Optional[str]], row_number: int) -> UserRecord:
        first_name = row[self._first_name_pos] or ""
        last_name = row[self._last_name_pos] or ""

        address = {
            sub_field: row[self._address_pos[sub_field]] if sub_field in self._address_pos else None
            for sub_field in ADDRESS_FIELDS
        }
        additional_info = {
            header: row[position]
            for header, position in self._attribute_pos.items()
        }

        return UserRecord(
            name=f"{first_name} {last_name}",
            age=self._coerce_age(row[self._age_pos], row_number),
            address=address,
            additional_info=additional_info,
        )

    def build_all(self, rows: Sequence[Sequence[Optional[str]]]) -> list[UserRecord]:
        # row_number is 1-based over data rows (header excluded)
        return [self.build(row, row_number) for row_number, row in enumerate(rows, start=1)]

    def _coerce_age(self, value: Optional[str], row_number: int) -> int:
        if value is None:
            raise TypeCoercionError(AGE_HEADER, "", row_number)
        text = value.strip()
        # int() alone would also take "1_000" and non-ASCII digits
        if not _INTEGER.fullmatch(text):
            raise TypeCoercionError(AGE_HEADER, value, row_number)
        age = int(text)
        if not AGE_MIN <= age <= AGE_MAX:
            raise TypeCoercionError(AGE_HEADER, value, row_number)
        return age


class RecordCommitter:
    def __init__(self, store):
        self.store = store

    def commit(self, staging) -> CommitResult:
        rows = staging.fetch_rows()
        records = RecordBuilder(staging.schema).build_all(rows)
        committed = self.store.insert_users(records)
        return CommitResult(rows_staged=len(rows), records_committed=committed)
