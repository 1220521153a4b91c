"""
Shared machinery for the DB2 catalog dialects.

A dialect knows which system views to read, how to discover their live
column lists, and how to turn a scanned row into a `Metadata` or `Column`
draft. Dialects hold no connection state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Sequence, Tuple

from db2meta.metadata.query import CatalogQuery
from db2meta.models import (
    Column,
    ColumnMode,
    Constraint,
    Metadata,
    MetaType,
    in_clause,
)

logger = logging.getLogger(__name__)


def catalog_field(column: str) -> Any:
    """Declare a draft field populated from the named catalog column."""
    return field(default=None, metadata={"column": column})


@dataclass
class CatalogRow:
    """
    Typed draft of one scanned catalog row.

    Subclasses declare their fields with `catalog_field`; a field stays
    None when the column is missing from the live view or was NULL.
    """

    @classmethod
    def from_row(cls, row: Dict[str, str]) -> CatalogRow:
        return cls(**{f.name: row.get(f.metadata["column"]) for f in fields(cls)})


def qualified_name(schema: Optional[str], name: Optional[str]) -> str:
    """Return `schema.name`; fixed-width schema columns may be space-padded."""
    return f"{(schema or '').strip()}.{name or ''}"


def parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def parse_order(value: Optional[str], what: str, start: int = 1) -> int:
    """
    Parse a positional catalog value into a 1-based order, falling back to 0.

    `start` is the position the catalog gives its first column.
    """
    number = parse_int(value)
    if number is None:
        if value is not None:
            logger.warning(f"Unparsable {what} {value!r}, using 0")
        return 0
    return number - start + 1


class CatalogDialect:
    """
    Base class for a DB2 catalog dialect.

    Subclasses set the class attributes describing their system views and
    implement `to_metadata` and `to_column`.
    """

    system_schema: str = ""
    title: str = ""

    # Metadata-about-metadata: live column names of the tables/columns views
    table_columns_sql: str = ""
    column_columns_sql: str = ""

    # FROM/WHERE/ORDER BY templates; {schemas} receives the IN list
    table_clause: str = ""
    column_clause: str = ""

    schemas_sql: str = ""

    def __init__(self, lang: str = "", remarks: Sequence[str] = ()):
        self.lang = lang
        self.remarks = list(remarks)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(system_schema={self.system_schema!r})"

    def table_query(self, columns: List[str], schemas: List[str]) -> CatalogQuery:
        return CatalogQuery(columns, self.table_clause.format(schemas=in_clause(schemas)))

    def column_query(self, columns: List[str], schemas: List[str]) -> CatalogQuery:
        return CatalogQuery(columns, self.column_clause.format(schemas=in_clause(schemas)))

    def to_metadata(self, row: Dict[str, str]) -> Metadata:
        """Build a Metadata draft (no columns) from a tables-view row."""
        raise NotImplementedError

    def to_column(self, row: Dict[str, str]) -> Tuple[Column, str]:
        """Build a Column draft and its owning table's key from a columns-view row."""
        raise NotImplementedError

    def new_metadata(self, schema: Optional[str], name: Optional[str]) -> Metadata:
        meta = Metadata(meta_type=MetaType.TABLE, lang=self.lang)
        if name is not None:
            meta.name = name
            if schema is not None:
                meta.formal_name = qualified_name(schema, name)
        return meta

    def route_remarks(self, target: Any, text: Optional[str]) -> None:
        """Copy a catalog comment into the alias and/or description."""
        if text is None:
            return
        for remark in self.remarks:
            if remark == "Alias":
                target.alias = text
            elif remark == "Description":
                target.description = text

    @staticmethod
    def mode_of(nullable: Optional[str]) -> ColumnMode:
        if nullable is None:
            return ColumnMode.NULLABLE
        return ColumnMode.NULLABLE if nullable.strip() == "Y" else ColumnMode.REQUIRED

    @staticmethod
    def mark_primary(column: Column, order: int) -> None:
        column.key_type.constraint = Constraint.PRIMARY
        column.key_type.order = order
