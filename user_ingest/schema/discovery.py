# ==============================================
# SchemaDiscovery
# ==============================================
#
# PURPOSE:
#   Read the header row of an uploaded CSV and classify every
#   header into exactly one group:
#     - reserved fields   (name.firstName, name.lastName, age)
#     - address sub-fields (anything starting with "address.")
#     - attributes        (everything else → additional_info)
#
# WHY THIS CLASS EXISTS:
#   The CSV has no fixed shape beyond the reserved headers. Every
#   unrecognised header becomes a key of `additional_info`, so the
#   set of columns has to be discovered per upload before anything
#   is staged.
#
# CLASS: SchemaDiscovery
# ----------------------
#   Stateless.
#
#   Methods:
#   --------
#   - discover(csv_path) -> SchemaDescription
#       Read the first row and classify it.
#
#   - classify(headers: list[str]) -> SchemaDescription
#       Classify an already-read header row.
#
#   - classify_header(header: str) -> tuple[ColumnRole, str]
#       Pure function from header name to (role, key).
#
# RULES:
# ------
#   1. "name.firstName" → FIRST_NAME, "name.lastName" → LAST_NAME
#   2. "age"            → AGE
#   3. "address.<sub>"  → ADDRESS with key <sub>
#   4. anything else    → ATTRIBUTE with key = header
#   5. duplicate / empty headers, "address." without a sub-field,
#      or a missing reserved header → SchemaError
#
# ==============================================

from pathlib import Path
from typing import Union

import pandas as pd

from user_ingest.errors import SchemaError, SourceReadError
from user_ingest.schema.columns import (
    ADDRESS_PREFIX,
    AGE_HEADER,
    FIRST_NAME_HEADER,
    LAST_NAME_HEADER,
    RESERVED_HEADERS,
    ColumnClassification,
    ColumnRole,
    SchemaDescription,
)

CSV_ENCODING = "utf-8-sig"

_IDENTITY_ROLES = {
    FIRST_NAME_HEADER: ColumnRole.FIRST_NAME,
    LAST_NAME_HEADER: ColumnRole.LAST_NAME,
    AGE_HEADER: ColumnRole.AGE,
}


class SchemaDiscovery:
    """
    Classifies CSV headers into reserved, address and attribute groups.
    """

    def discover(self, csv_path: Union[str, Path]) -> SchemaDescription:
        """
        Read the header row of a CSV file and classify it.

        Args:
            csv_path: Path to the uploaded CSV

        Returns:
            SchemaDescription covering every header, in file order

        Raises:
            SourceReadError: The file is missing or unreadable
            SchemaError: The header row is empty or malformed
        """
        path = Path(csv_path)
        try:
            # header=None keeps duplicate names intact (pandas would mangle them)
            header_frame = pd.read_csv(
                path,
                header=None,
                nrows=1,
                dtype=str,
                keep_default_na=False,
                encoding=CSV_ENCODING,
            )
        except pd.errors.EmptyDataError as e:
            raise SchemaError(f"CSV file has no header row: {path}") from e
        except pd.errors.ParserError as e:
            raise SchemaError(f"Could not parse header row of {path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError(f"Cannot read CSV file {path}: {e}") from e

        if header_frame.empty:
            raise SchemaError(f"CSV file has no header row: {path}")

        headers = [str(value) for value in header_frame.iloc[0].tolist()]
        return self.classify(headers)

    def classify(self, headers: list[str]) -> SchemaDescription:
        """
        Classify a header row.

        Args:
            headers: Header names in file order

        Returns:
            SchemaDescription with one ColumnClassification per header
        """
        seen: set[str] = set()
        columns = []
        for position, header in enumerate(headers):
            if header is None or header.strip() == "":
                raise SchemaError(f"Header at position {position} is empty")
            if header in seen:
                raise SchemaError(f"Duplicate header '{header}'")
            seen.add(header)

            role, key = self.classify_header(header)
            columns.append(ColumnClassification(header=header, position=position, role=role, key=key))

        missing = [name for name in RESERVED_HEADERS if name not in seen]
        if missing:
            raise SchemaError(f"Missing required header(s): {', '.join(missing)}")

        return SchemaDescription(columns=tuple(columns))

    @staticmethod
    def classify_header(header: str) -> tuple[ColumnRole, str]:
        if header in _IDENTITY_ROLES:
            return _IDENTITY_ROLES[header], header
        if header.startswith(ADDRESS_PREFIX):
            sub_field = header[len(ADDRESS_PREFIX):]
            if not sub_field:
                raise SchemaError(f"Address header '{header}' has no sub-field name")
            return ColumnRole.ADDRESS, sub_field
        return ColumnRole.ATTRIBUTE, header
