"""
Version-tolerant catalog queries.

System views change shape across DB2 releases and platforms, so column
lists are resolved at run time from the catalog itself and every value is
scanned into a canonical string before the dialect mappers see it.
"""

from __future__ import annotations

import logging
from contextlib import closing
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Dict, Iterator, List

from db2meta.errors import CatalogQueryError, ColumnDiscoveryError, RowScanError

logger = logging.getLogger(__name__)

FETCH_SIZE = 500


def _format_datetime(value: datetime) -> str:
    """RFC 3339 with up to microsecond precision and trailing zeros trimmed."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)

    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")

    offset = value.utcoffset()
    if not offset:
        return text + "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "+" if minutes >= 0 else "-"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def _format_float(value: float) -> str:
    text = repr(value)
    if text.endswith(".0"):
        text = text[:-2]
    return text


def to_column_value(value: Any) -> str:
    """
    Convert one database value of any native type into a canonical string.

    NULL becomes the empty string; the mapping layer treats that as "absent".
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    # bool is a subclass of int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return _format_datetime(value)
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)


def column_list(connection: Any, statement: str) -> List[str]:
    """
    Resolve the live column names of a catalog view.

    Args:
        connection: DB-API connection
        statement: Query returning one column name per row, in physical order

    Returns:
        Column names in the order returned by the catalog
    """
    try:
        with closing(connection.cursor()) as cursor:
            cursor.execute(statement)
            columns = [to_column_value(row[0]).strip() for row in cursor.fetchall()]
    except Exception as e:
        raise ColumnDiscoveryError(f"Column discovery failed: {e}") from e

    columns = [c for c in columns if c]
    if not columns:
        raise ColumnDiscoveryError(f"Column discovery returned no columns for: {' '.join(statement.split())}")
    return columns


class CatalogQuery:
    """
    SELECT over a catalog view whose column list was resolved at run time.

    The clause is a trusted per-dialect template (FROM/WHERE/ORDER BY).
    """

    def __init__(self, columns: List[str], clause: str, fetch_size: int = FETCH_SIZE):
        self.columns = list(columns)
        self.clause = clause
        self.fetch_size = fetch_size

    @property
    def statement(self) -> str:
        return f"SELECT {','.join(self.columns)} {self.clause.strip()}"

    def scan(self, row: Any) -> Dict[str, str]:
        """Map a result row to {column: value}, omitting empty values."""
        result = {}
        for name, value in zip(self.columns, row):
            text = to_column_value(value)
            if text != "":
                result[name] = text
        return result

    def rows(self, connection: Any) -> Iterator[Dict[str, str]]:
        """
        Execute the statement and lazily yield scanned rows.

        The cursor is closed when the generator is exhausted, closed early,
        or fails.
        """
        cursor = connection.cursor()
        try:
            logger.debug(f"Executing: {' '.join(self.statement.split())}")
            try:
                cursor.execute(self.statement)
            except Exception as e:
                raise CatalogQueryError(f"Catalog query failed: {e}") from e

            while True:
                try:
                    batch = cursor.fetchmany(self.fetch_size)
                except Exception as e:
                    raise RowScanError(f"Failed to fetch catalog rows: {e}") from e
                if not batch:
                    return
                for row in batch:
                    yield self.scan(row)
        finally:
            cursor.close()
