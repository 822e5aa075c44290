# ==============================================
# Columns (Data Classes)
# ==============================================
#
# PURPOSE:
#   Data classes that represent the OUTPUT of schema discovery:
#   the role each CSV header plays and the schema description
#   that later stages use to find their source columns.
#
# WHY THIS FILE EXISTS:
#   Separating data classes from logic keeps discovery clean.
#   The SchemaDescription is passed as DATA to the staging loader
#   and the record builder. Header names never end up inside SQL
#   text: staging columns are positional and the description maps
#   logical roles onto those positions.
#
# ENUMS:
# ------
# - ColumnRole(Enum): FIRST_NAME, LAST_NAME, AGE, ADDRESS, ATTRIBUTE
#
# CLASSES:
# --------
# - ColumnClassification (dataclass, frozen)
#     header: str       → Header exactly as read from the CSV
#     position: int     → Zero-based column position
#     role: ColumnRole  → What the column feeds in the user record
#     key: str          → Sub-field for ADDRESS ("city"), header for ATTRIBUTE
#
# - SchemaDescription (dataclass, frozen)
#     columns: tuple[ColumnClassification, ...]
#
#     Properties / Methods:
#     ---------------------
#     - headers, address_fields, reserved_fields, attribute_fields
#     - position_of(role) -> int
#     - address_positions() -> dict[str, int]
#     - attribute_positions() -> dict[str, int]
#     - staging_columns() -> list[str]
#     - to_dict() -> dict
#
# ==============================================

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Tuple

FIRST_NAME_HEADER = "name.firstName"
LAST_NAME_HEADER = "name.lastName"
AGE_HEADER = "age"
ADDRESS_PREFIX = "address."

RESERVED_HEADERS = (FIRST_NAME_HEADER, LAST_NAME_HEADER, AGE_HEADER)

# The address object always has exactly these keys, in this order
ADDRESS_FIELDS = ("addressLine1", "addressLine2", "city", "state")


class ColumnRole(Enum):
    """
    Role of a CSV column in the final user record.

    - FIRST_NAME / LAST_NAME: joined into `name`
    - AGE: coerced to integer `age`
    - ADDRESS: one sub-field of the `address` object
    - ATTRIBUTE: copied verbatim into `additional_info`
    """
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    AGE = "age"
    ADDRESS = "address"
    ATTRIBUTE = "attribute"


@dataclass(frozen=True)
class ColumnClassification:
    header: str
    position: int
    role: ColumnRole
    key: str = ""

    @property
    def is_reserved(self) -> bool:
        return self.role in (ColumnRole.FIRST_NAME, ColumnRole.LAST_NAME, ColumnRole.AGE)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "header": self.header,
            "position": self.position,
            "role": self.role.value,
            "key": self.key,
        }


@dataclass(frozen=True)
class SchemaDescription:
    """
    Mapping from logical role to source column, in header order.

    This is what SchemaDiscovery produces and what the staging
    loader and record builder consume.
    """

    columns: Tuple[ColumnClassification, ...]

    @property
    def headers(self) -> List[str]:
        return [column.header for column in self.columns]

    @property
    def address_fields(self) -> List[str]:
        return [c.header for c in self.columns if c.role is ColumnRole.ADDRESS]

    @property
    def reserved_fields(self) -> List[str]:
        return [c.header for c in self.columns if c.is_reserved]

    @property
    def attribute_fields(self) -> List[str]:
        return [c.header for c in self.columns if c.role is ColumnRole.ATTRIBUTE]

    def position_of(self, role: ColumnRole) -> int:
        """
        Position of the single column holding an identity role.

        Args:
            role: FIRST_NAME, LAST_NAME or AGE

        Returns:
            Zero-based column position

        Raises:
            KeyError: If no column has that role
        """
        for column in self.columns:
            if column.role is role:
                return column.position
        raise KeyError(role.value)

    def address_positions(self) -> Dict[str, int]:
        # Only the fixed sub-fields; unknown address.* columns are staged but unused
        return {
            c.key: c.position
            for c in self.columns
            if c.role is ColumnRole.ADDRESS and c.key in ADDRESS_FIELDS
        }

    def attribute_positions(self) -> Dict[str, int]:
        return {c.key: c.position for c in self.columns if c.role is ColumnRole.ATTRIBUTE}

    def staging_columns(self) -> List[str]:
        return [f"col_{column.position}" for column in self.columns]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": [column.to_dict() for column in self.columns],
            "address_fields": self.address_fields,
            "reserved_fields": self.reserved_fields,
            "attribute_fields": self.attribute_fields,
        }
