"""
Db2 for Linux, UNIX and Windows catalog dialect.

Reads the SYSCAT views:
- SYSCAT.TABLES  (https://www.ibm.com/docs/en/db2/11.5?topic=views-syscattables)
- SYSCAT.COLUMNS (https://www.ibm.com/docs/en/db2/11.5?topic=views-syscatcolumns)
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
class SyscatTable(CatalogRow):
    """Row of SYSCAT.TABLES."""
    schema: Optional[str] = catalog_field("TABSCHEMA")
    name: Optional[str] = catalog_field("TABNAME")
    remarks: Optional[str] = catalog_field("REMARKS")


@dataclass
class SyscatColumn(CatalogRow):
    """Row of SYSCAT.COLUMNS."""
    table_schema: Optional[str] = catalog_field("TABSCHEMA")
    table_name: Optional[str] = catalog_field("TABNAME")
    name: Optional[str] = catalog_field("COLNAME")
    type_schema: Optional[str] = catalog_field("TYPESCHEMA")
    type_name: Optional[str] = catalog_field("TYPENAME")
    nulls: Optional[str] = catalog_field("NULLS")
    colno: Optional[str] = catalog_field("COLNO")
    keyseq: Optional[str] = catalog_field("KEYSEQ")
    remarks: Optional[str] = catalog_field("REMARKS")


class Db2Dialect(CatalogDialect):
    """
    Catalog dialect for Db2 LUW.

    Table types: S (materialized query), T (table), U (typed table),
    V (view), W (typed view).
    """

    system_schema = "SYSCAT"
    title = "Db2 for Linux, UNIX and Windows"

    table_columns_sql = """
        SELECT COLNAME
        FROM SYSCAT.COLUMNS
        WHERE TABSCHEMA='SYSCAT'
          AND TABNAME='TABLES'
        ORDER BY COLNO"""

    column_columns_sql = """
        SELECT COLNAME
        FROM SYSCAT.COLUMNS
        WHERE TABSCHEMA='SYSCAT'
          AND TABNAME='COLUMNS'
        ORDER BY COLNO"""

    table_clause = """
        FROM SYSCAT.TABLES
        WHERE TYPE in ('S', 'T', 'U', 'V', 'W')
          AND TABSCHEMA in {schemas}
        ORDER BY TABSCHEMA, TABNAME"""

    # Only columns of tables the table query selects
    column_clause = """
        FROM SYSCAT.COLUMNS C
        WHERE TABSCHEMA in {schemas}
          AND EXISTS (
            SELECT 1
            FROM SYSCAT.TABLES T
            WHERE T.TABSCHEMA = C.TABSCHEMA
              AND T.TABNAME = C.TABNAME
              AND T.TYPE in ('S', 'T', 'U', 'V', 'W'))
        ORDER BY TABSCHEMA, TABNAME, COLNO"""

    schemas_sql = """
        SELECT TABSCHEMA
        FROM SYSCAT.TABLES
        GROUP BY TABSCHEMA
        ORDER BY TABSCHEMA"""

    def to_metadata(self, row: Dict[str, str]) -> Metadata:
        r = SyscatTable.from_row(row)
        meta = self.new_metadata(r.schema, r.name)
        self.route_remarks(meta, r.remarks)
        return meta

    def to_column(self, row: Dict[str, str]) -> Tuple[Column, str]:
        r = SyscatColumn.from_row(row)
        col = Column(name=r.name or "")

        if r.type_name is not None:
            if r.type_schema is not None:
                col.type = f"{r.type_schema.strip()}.{r.type_name}"
            else:
                col.type = r.type_name

        col.mode = self.mode_of(r.nulls)
        # SYSCAT numbers columns from 0
        col.order = parse_order(r.colno, "COLNO", start=0)

        keyseq = parse_int(r.keyseq)
        if keyseq:
            self.mark_primary(col, keyseq)

        self.route_remarks(col, r.remarks)
        return col, qualified_name(r.table_schema, r.table_name)
