"""
Db2 for IBM i catalog dialect.

Reads the QSYS2 catalog views:
- QSYS2.SYSTABLES  (https://www.ibm.com/docs/en/i/7.5?topic=views-systables)
- QSYS2.SYSCOLUMNS (https://www.ibm.com/docs/en/i/7.5?topic=views-syscolumns)

IBM i has no KEYSEQ; identity columns are reported as the primary key.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from db2meta.metadata.base import (
    CatalogDialect,
    CatalogRow,
    catalog_field,
    parse_order,
    qualified_name,
)
from db2meta.models import Column, Metadata


@dataclass
class Qsys2Table(CatalogRow):
    """Row of QSYS2.SYSTABLES."""
    owner: Optional[str] = catalog_field("TABLE_OWNER")
    name: Optional[str] = catalog_field("TABLE_NAME")
    long_comment: Optional[str] = catalog_field("LONG_COMMENT")


@dataclass
class Qsys2Column(CatalogRow):
    """Row of QSYS2.SYSCOLUMNS."""
    table_owner: Optional[str] = catalog_field("TABLE_OWNER")
    table_name: Optional[str] = catalog_field("TABLE_NAME")
    name: Optional[str] = catalog_field("COLUMN_NAME")
    data_type: Optional[str] = catalog_field("DATA_TYPE")
    is_nullable: Optional[str] = catalog_field("IS_NULLABLE")
    ordinal_position: Optional[str] = catalog_field("ORDINAL_POSITION")
    is_identity: Optional[str] = catalog_field("IS_IDENTITY")
    column_text: Optional[str] = catalog_field("COLUMN_TEXT")
    column_heading: Optional[str] = catalog_field("COLUMN_HEADING")


class Db2iDialect(CatalogDialect):
    """Catalog dialect for Db2 for IBM i. Aliases (TYPE 'A') are skipped."""

    system_schema = "QSYS2"
    title = "Db2 for IBM i"

    table_columns_sql = """
        SELECT COLUMN_NAME
        FROM QSYS2.SYSCOLUMNS
        WHERE TABLE_OWNER='QSYS2'
          AND TABLE_NAME='SYSTABLES'
        ORDER BY ORDINAL_POSITION"""

    column_columns_sql = """
        SELECT COLUMN_NAME
        FROM QSYS2.SYSCOLUMNS
        WHERE TABLE_OWNER='QSYS2'
          AND TABLE_NAME='SYSCOLUMNS'
        ORDER BY ORDINAL_POSITION"""

    table_clause = """
        FROM QSYS2.SYSTABLES
        WHERE TYPE != 'A'
          AND TABLE_OWNER in {schemas}
        ORDER BY TABLE_OWNER, TABLE_NAME"""

    # Only columns of tables the table query selects
    column_clause = """
        FROM QSYS2.SYSCOLUMNS C
        WHERE TABLE_OWNER in {schemas}
          AND EXISTS (
            SELECT 1
            FROM QSYS2.SYSTABLES T
            WHERE T.TABLE_OWNER = C.TABLE_OWNER
              AND T.TABLE_NAME = C.TABLE_NAME
              AND T.TYPE != 'A')
        ORDER BY TABLE_OWNER, TABLE_NAME, ORDINAL_POSITION"""

    schemas_sql = """
        SELECT TABLE_OWNER
        FROM QSYS2.SYSTABLES
        GROUP BY TABLE_OWNER
        ORDER BY TABLE_OWNER"""

    def to_metadata(self, row: Dict[str, str]) -> Metadata:
        r = Qsys2Table.from_row(row)
        meta = self.new_metadata(r.owner, r.name)
        self.route_remarks(meta, r.long_comment)
        return meta

    def to_column(self, row: Dict[str, str]) -> Tuple[Column, str]:
        r = Qsys2Column.from_row(row)
        col = Column(name=r.name or "")

        if r.data_type is not None:
            col.type = r.data_type.strip()

        col.mode = self.mode_of(r.is_nullable)
        col.order = parse_order(r.ordinal_position, "ORDINAL_POSITION")

        if r.is_identity is not None and r.is_identity.strip() == "YES":
            self.mark_primary(col, 0)

        self.route_remarks(col, r.column_text)
        # COLUMN_HEADING wins over whatever the remarks routed into the alias
        if r.column_heading is not None:
            col.alias = r.column_heading
        return col, qualified_name(r.table_owner, r.table_name)
