# ==============================================
# MySQLClient
# ==============================================
#
# PURPOSE:
#   Manages the MySQL connection and every SQL operation the
#   upload needs: the users table, the per-request staging table,
#   the bulk commit of user records and the age aggregation.
#
# WHY THIS CLASS EXISTS:
#   The rest of the package never builds SQL. Stages receive this
#   client as an explicit store handle, opened per request with
#   `with MySQLClient(...) as store:` and closed on every exit path.
#   CSV header names never reach SQL text: staging columns are
#   positional (col_0 ... col_n) and all values are bound parameters.
#
# CLASS: MySQLClient
# ------------------
#   Stateful — holds connection to MySQL.
#
#   Constructor:
#   ------------
#   - __init__(host, port, user, password, database)
#       Store connection params. Don't connect yet.
#   - from_config(config: MySQLConfig)  (classmethod)
#
#   Methods:
#   --------
#   - connect() / disconnect()
#   - ensure_users_table() -> None
#   - create_staging_table(table_name, columns) -> None
#       columns come from SchemaDescription.staging_columns().
#   - load_staging_rows(table_name, columns, rows, batch_size) -> int
#       One transaction; all rows or none.
#   - fetch_staging_rows(table_name) -> list[tuple]
#   - drop_staging_table(table_name) -> None
#   - insert_users(records) -> int
#       One transaction; all records or none.
#   - count_age_buckets(buckets) -> tuple[dict[str, int], int]
#   - fetch_users(limit=None) -> list[UserRecord]
#   - execute(query, params=None, action="Statement") -> None
#   - fetch_all(query, params=None) -> list[dict]
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MySQLClient(...) as db:` usage.
#
# ERRORS:
# -------
#   Any pymysql.MySQLError surfaces as StoreError, except rejected
#   staging data which surfaces as LoadError.
#
# ==============================================

import json
import re
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence, Type

import pymysql
import pymysql.cursors

from user_ingest.analysis.age_buckets import AgeBucket
from user_ingest.config import MySQLConfig
from user_ingest.errors import IngestError, LoadError, StoreError
from user_ingest.transform.user_record import UserRecord

USERS_TABLE = "users"

CREATE_USERS_TABLE = (
    f"CREATE TABLE IF NOT EXISTS {USERS_TABLE} ("
    "id INT AUTO_INCREMENT PRIMARY KEY, "
    "name VARCHAR(255) NOT NULL, "
    "age INT NOT NULL, "
    "address JSON, "
    "additional_info JSON"
    ")"
)

INSERT_USER = (
    f"INSERT INTO {USERS_TABLE} (name, age, address, additional_info) "
    "VALUES (%s, %s, %s, %s)"
)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,63}$")


class MySQLClient:
    def __init__(self, host, port, user, password, database):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.connection = None

    @classmethod
    def from_config(cls, config: MySQLConfig) -> "MySQLClient":
        return cls(
            host=config.host,
            port=config.port,
            user=config.user,
            password=config.password,
            database=config.database
        )

    def connect(self) -> None:
        # Establish connection to MySQL, create database if it doesn't exist
        _check_identifier(self.database)
        try:
            self.connection = pymysql.connect(
                host=self.host,
                port=self.port,
                user=self.user,
                password=self.password,
                charset="utf8mb4",
                autocommit=False,
            )
            cursor = self.connection.cursor()
            cursor.execute(f"CREATE DATABASE IF NOT EXISTS `{self.database}`")
            cursor.execute(f"USE `{self.database}`")
            cursor.close()
        except pymysql.MySQLError as e:
            self.disconnect()
            raise StoreError(
                f"Cannot connect to MySQL at {self.host}:{self.port}/{self.database}: {e}"
            ) from e

    def disconnect(self) -> None:
        # Close connection cleanly
        if self.connection:
            try:
                self.connection.close()
            except pymysql.MySQLError:
                # Already closed by the server
                pass
            self.connection = None

    def ensure_users_table(self) -> None:
        self.execute(CREATE_USERS_TABLE, action="Creating users table")

    def create_staging_table(self, table_name: str, columns: Sequence[str]) -> None:
        """
        Create a TEMPORARY staging table with positional TEXT columns.

        Args:
            table_name: Generated staging table name
            columns: Positional column names, e.g. ["col_0", "col_1"]
        """
        _check_identifier(table_name)
        if not columns:
            raise LoadError("Staging table needs at least one column")
        for column in columns:
            _check_identifier(column)
        columns_def = ", ".join(f"{column} TEXT" for column in columns)
        self.execute(
            f"CREATE TEMPORARY TABLE {table_name} (row_no INT NOT NULL PRIMARY KEY, {columns_def})",
            action="Creating staging table",
        )

    def load_staging_rows(
        self,
        table_name: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[str]],
        batch_size: int = 1000
    ) -> int:
        """
        Bulk-load raw rows into a staging table inside one transaction.

        Args:
            table_name: Staging table created by create_staging_table()
            columns: The same column names the table was created with
            rows: Row values in file order, all strings
            batch_size: Rows per executemany() call

        Returns:
            Number of rows loaded
        """
        _check_identifier(table_name)
        for column in columns:
            _check_identifier(column)
        if not rows:
            return 0
        column_names = ", ".join(columns)
        placeholders = ", ".join(["%s"] * (len(columns) + 1))
        query = f"INSERT INTO {table_name} (row_no, {column_names}) VALUES ({placeholders})"

        with self._transaction("Loading staging rows", data_error=LoadError) as cursor:
            for start in range(0, len(rows), batch_size):
                batch = [
                    (start + offset, *row)
                    for offset, row in enumerate(rows[start:start + batch_size])
                ]
                cursor.executemany(query, batch)
        return len(rows)

    def fetch_staging_rows(self, table_name: str) -> list[tuple]:
        _check_identifier(table_name)
        with self._transaction("Reading staging rows") as cursor:
            cursor.execute(f"SELECT * FROM {table_name} ORDER BY row_no")
            # Drop the row_no ordering column
            return [tuple(row[1:]) for row in cursor.fetchall()]

    def drop_staging_table(self, table_name: str) -> None:
        _check_identifier(table_name)
        if self.connection is None:
            # Temporary tables die with their connection
            return
        self.execute(f"DROP TEMPORARY TABLE IF EXISTS {table_name}", action="Dropping staging table")

    def insert_users(self, records: Sequence[UserRecord]) -> int:
        # Bulk insert; one commit for the whole upload
        if not records:
            return 0
        params = [
            (
                record.name,
                record.age,
                json.dumps(record.address),
                json.dumps(record.additional_info),
            )
            for record in records
        ]
        with self._transaction("Committing user records") as cursor:
            cursor.executemany(INSERT_USER, params)
        return len(records)

    def count_age_buckets(self, buckets: Sequence[AgeBucket]) -> tuple[dict[str, int], int]:
        """
        Count users per age bucket in one query.

        Args:
            buckets: Bucket definitions; bounds are bound as parameters

        Returns:
            (counts keyed by bucket key, total user count)
        """
        select_parts = []
        params: list[Any] = []
        for bucket in buckets:
            conditions = []
            if bucket.min_age is not None:
                conditions.append("age >= %s")
                params.append(bucket.min_age)
            if bucket.max_age is not None:
                conditions.append("age <= %s")
                params.append(bucket.max_age)
            condition = " AND ".join(conditions) or "TRUE"
            select_parts.append(f"SUM(CASE WHEN {condition} THEN 1 ELSE 0 END)")
        select_parts.append("COUNT(*)")
        query = f"SELECT {', '.join(select_parts)} FROM {USERS_TABLE}"

        with self._transaction("Aggregating ages") as cursor:
            cursor.execute(query, tuple(params))
            row = cursor.fetchone()
        if row is None:
            raise StoreError("Age aggregation returned no rows")

        # SUM() over an empty table is NULL
        counts = {
            bucket.key: int(value or 0)
            for bucket, value in zip(buckets, row[:-1])
        }
        return counts, int(row[-1] or 0)

    def fetch_users(self, limit: Optional[int] = None) -> list[UserRecord]:
        query = f"SELECT id, name, age, address, additional_info FROM {USERS_TABLE} ORDER BY id"
        params: Optional[tuple] = None
        if limit is not None:
            query += " LIMIT %s"
            params = (limit,)
        rows = self.fetch_all(query, params)
        return [
            UserRecord(
                id=row["id"],
                name=row["name"],
                age=row["age"],
                address=_load_json(row["address"]),
                additional_info=_load_json(row["additional_info"]),
            )
            for row in rows
        ]

    def execute(self, query: str, params: tuple | None = None, action: str = "Statement") -> None:
        # Execute one SQL statement in its own transaction
        with self._transaction(action) as cursor:
            cursor.execute(query, params)

    def fetch_all(self, query: str, params: tuple | None = None) -> list[dict]:
        # Execute SELECT and return rows as dicts
        connection = self._require_connection()
        cursor = connection.cursor(pymysql.cursors.DictCursor)
        try:
            cursor.execute(query, params)
            results = list(cursor.fetchall())
            connection.commit()
            return results
        except pymysql.MySQLError as e:
            connection.rollback()
            raise StoreError(f"Query failed: {e}") from e
        finally:
            cursor.close()

    @contextmanager
    def _transaction(
        self,
        action: str,
        data_error: Type[IngestError] = StoreError
    ) -> Iterator[Any]:
        connection = self._require_connection()
        cursor = connection.cursor()
        try:
            yield cursor
            connection.commit()
        except (pymysql.DataError, pymysql.IntegrityError) as e:
            connection.rollback()
            raise data_error(f"{action} rejected: {e}") from e
        except pymysql.MySQLError as e:
            connection.rollback()
            raise StoreError(f"{action} failed: {e}") from e
        except Exception:
            connection.rollback()
            raise
        finally:
            cursor.close()

    def _require_connection(self):
        if self.connection is None:
            raise StoreError("Not connected to MySQL")
        return self.connection

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()


def _check_identifier(name: str) -> None:
    if not _IDENTIFIER.match(name or ""):
        raise StoreError(f"Invalid SQL identifier: {name!r}")


def _load_json(value: Any) -> dict:
    if value is None:
        return {}
    if isinstance(value, (bytes, str)):
        return json.loads(value)
    return value
