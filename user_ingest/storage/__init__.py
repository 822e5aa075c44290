# ==============================================
# STORAGE (MySQL)
# ==============================================
#
# This package handles all database operations:
# connecting, creating the users and staging tables,
# bulk inserts and the age aggregation query.
#
# Modules:
# --------
# - mysql_client.py    → MySQL connection and operations
#
# ==============================================

from .mysql_client import USERS_TABLE, MySQLClient

__all__ = [
    "MySQLClient",
    "USERS_TABLE",
]
