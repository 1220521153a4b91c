"""
Db2 for z/OS catalog dialect.

Reads the SYSIBM catalog tables:
- SYSIBM.SYSTABLES  (https://www.ibm.com/docs/en/db2-for-zos/13?topic=tables-systables)
- SYSIBM.SYSCOLUMNS (https://www.ibm.com/docs/en/db2-for-zos/13?topic=tables-syscolumns)

CREATOR/TBCREATOR are fixed-width and space padded. KEYSEQ is 0 for
columns outside the primary key.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from db2meta.metadata.base import (
    CatalogDialect,
    CatalogRow,
    catalog_field,
    parse_int,
    parse_order,
    qualified_name,
)
from db2meta.models import Column, Metadata


@dataclass
class SysibmTable(CatalogRow):
    """Row of SYSIBM.SYSTABLES."""
    creator: Optional[str] = catalog_field("CREATOR")
    name: Optional[str] = catalog_field("NAME")
    remarks: Optional[str] = catalog_field("REMARKS")


@dataclass
class SysibmColumn(CatalogRow):
    """Row of SYSIBM.SYSCOLUMNS."""
    table_creator: Optional[str] = catalog_field("TBCREATOR")
    table_name: Optional[str] = catalog_field("TBNAME")
    name: Optional[str] = catalog_field("NAME")
    coltype: Optional[str] = catalog_field("COLTYPE")
    nulls: Optional[str] = catalog_field("NULLS")
    colno: Optional[str] = catalog_field("COLNO")
    keyseq: Optional[str] = catalog_field("KEYSEQ")
    remarks: Optional[str] = catalog_field("REMARKS")
    label: Optional[str] = catalog_field("LABEL")


class Db2zDialect(CatalogDialect):
    """Catalog dialect for Db2 for z/OS. Aliases (TYPE 'A') are skipped."""

    system_schema = "SYSIBM"
    title = "Db2 for z/OS"

    table_columns_sql = """
        SELECT NAME
        FROM SYSIBM.SYSCOLUMNS
        WHERE TBCREATOR='SYSIBM'
          AND TBNAME='SYSTABLES'
        ORDER BY COLNO"""

    column_columns_sql = """
        SELECT NAME
        FROM SYSIBM.SYSCOLUMNS
        WHERE TBCREATOR='SYSIBM'
          AND TBNAME='SYSCOLUMNS'
        ORDER BY COLNO"""

    table_clause = """
        FROM SYSIBM.SYSTABLES
        WHERE TYPE != 'A'
          AND CREATOR in {schemas}
        ORDER BY CREATOR, NAME"""

    # Only columns of tables the table query selects
    column_clause = """
        FROM SYSIBM.SYSCOLUMNS C
        WHERE TBCREATOR in {schemas}
          AND EXISTS (
            SELECT 1
            FROM SYSIBM.SYSTABLES T
            WHERE T.CREATOR = C.TBCREATOR
              AND T.NAME = C.TBNAME
              AND T.TYPE != 'A')
        ORDER BY TBCREATOR, TBNAME, COLNO"""

    schemas_sql = """
        SELECT CREATOR
        FROM SYSIBM.SYSTABLES
        GROUP BY CREATOR
        ORDER BY CREATOR"""

    def to_metadata(self, row: Dict[str, str]) -> Metadata:
        r = SysibmTable.from_row(row)
        meta = self.new_metadata(r.creator, r.name)
        self.route_remarks(meta, r.remarks)
        return meta

    def to_column(self, row: Dict[str, str]) -> Tuple[Column, str]:
        r = SysibmColumn.from_row(row)
        col = Column(name=r.name or "")

        if r.coltype is not None:
            col.type = r.coltype.strip()

        col.mode = self.mode_of(r.nulls)
        col.order = parse_order(r.colno, "COLNO")

        keyseq = parse_int(r.keyseq)
        if keyseq:
            self.mark_primary(col, keyseq)

        self.route_remarks(col, r.remarks)
        # LABEL wins over whatever the remarks routed into the alias
        if r.label is not None:
            col.alias = r.label
        return col, qualified_name(r.table_creator, r.table_name)
