# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# Shared fixtures for all tests.
#
# FIXTURES:
# ---------
# - write_csv(text, name="users.csv") -> Path
#     Write CSV text into tmp_path.
# - users_csv -> Path
#     Four users, one per age bucket, with two attribute columns.
# - store -> InMemoryStore
#     Store double with the same methods UploadProcessor uses on
#     MySQLClient (staging tables, bulk insert, age counts).
# - failing_store -> InMemoryStore
#     Same double, but insert_users() raises StoreError.
# - app_config -> AppConfig
#     Config that never touches the environment.
#
# NOTES:
# ------
# - MySQL-backed tests live in test_integration.py and only run
#   when TEST_MYSQL_HOST is set.
# ==============================================

from pathlib import Path

import pytest

from user_ingest.config import AppConfig, IngestConfig, MySQLConfig, reset_config
from user_ingest.errors import LoadError, StoreError
from user_ingest.transform.user_record import UserRecord

USERS_CSV = (
    "name.firstName,name.lastName,age,address.addressLine1,address.addressLine2,"
    "address.city,address.state,gender,phone\n"
    "Ada,Lovelace,19,12 St James Sq,,London,LDN,female,555-0100\n"
    "Alan,Turing,40,Bletchley Park,Hut 8,Milton Keynes,BKM,male,555-0101\n"
    "Grace,Hopper,60,1 Navy Way,Apt 2,Arlington,VA,female,555-0102\n"
    "John,Neumann,61,Fuld Hall,,Princeton,NJ,male,007\n"
)


class InMemoryStore:
    """Store double mirroring MySQLClient's transactional behaviour."""

    def __init__(self, fail_on_insert: bool = False):
        self.fail_on_insert = fail_on_insert
        self.users: list[UserRecord] = []
        self.staging: dict[str, dict] = {}
        self.dropped: list[str] = []
        self.users_table_created = False
        self.enter_count = 0
        self.exit_count = 0
        self.insert_calls = 0
        self._next_id = 1

    def __enter__(self):
        self.enter_count += 1
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.exit_count += 1
        return False

    def ensure_users_table(self) -> None:
        self.users_table_created = True

    def create_staging_table(self, table_name: str, columns) -> None:
        self.staging[table_name] = {"columns": list(columns), "column_count": len(columns), "rows": []}

    def load_staging_rows(self, table_name, columns, rows, batch_size=1000) -> int:
        table = self.staging[table_name]
        if list(columns) != table["columns"]:
            raise LoadError(f"Unknown staging columns {list(columns)}")
        for row in rows:
            if len(row) != table["column_count"]:
                raise LoadError(f"Row has {len(row)} values, expected {table['column_count']}")
        table["rows"] = [tuple(row) for row in rows]
        return len(rows)

    def fetch_staging_rows(self, table_name: str) -> list[tuple]:
        return list(self.staging[table_name]["rows"])

    def drop_staging_table(self, table_name: str) -> None:
        if self.staging.pop(table_name, None) is not None:
            self.dropped.append(table_name)

    def insert_users(self, records) -> int:
        self.insert_calls += 1
        if self.fail_on_insert:
            raise StoreError("Committing user records failed: connection lost")
        for record in records:
            self.users.append(UserRecord(
                id=self._next_id,
                name=record.name,
                age=record.age,
                address=dict(record.address),
                additional_info=dict(record.additional_info),
            ))
            self._next_id += 1
        return len(records)

    def count_age_buckets(self, buckets):
        counts = {
            bucket.key: sum(1 for user in self.users if bucket.contains(user.age))
            for bucket in buckets
        }
        return counts, len(self.users)

    def fetch_users(self, limit=None) -> list[UserRecord]:
        return list(self.users if limit is None else self.users[:limit])


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def write_csv(tmp_path):
    def _write(text: str, name: str = "users.csv") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def users_csv(write_csv) -> Path:
    return write_csv(USERS_CSV)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def failing_store() -> InMemoryStore:
    return InMemoryStore(fail_on_insert=True)


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        mysql=MySQLConfig(database="user_ingest_test"),
        ingest=IngestConfig(csv_file_path=None, staging_batch_size=2),
    )
