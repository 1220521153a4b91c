"""
Shared fixtures: SQLite stand-ins for the DB2 system catalogs.

Each catalog is a SQLite database file attached under the system schema's
name (SYSCAT, SYSIBM or QSYS2), so the dialects' SQL runs unchanged. The
columns view describes its own and the tables view's columns, the way the
real catalogs do.
"""

import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from db2meta.models import Db2DSN


LAYOUTS = {
    "SYSCAT": {
        "tables_view": "TABLES",
        "columns_view": "COLUMNS",
        # schema, table, column name, position columns of the columns view
        "describe": ("TABSCHEMA", "TABNAME", "COLNAME", "COLNO"),
        "views": {
            "TABLES": ["TABSCHEMA", "TABNAME", "TYPE", "REMARKS"],
            "COLUMNS": [
                "TABSCHEMA", "TABNAME", "COLNAME", "COLNO", "TYPESCHEMA",
                "TYPENAME", "NULLS", "KEYSEQ", "REMARKS",
            ],
        },
    },
    "SYSIBM": {
        "tables_view": "SYSTABLES",
        "columns_view": "SYSCOLUMNS",
        "describe": ("TBCREATOR", "TBNAME", "NAME", "COLNO"),
        "views": {
            "SYSTABLES": ["CREATOR", "NAME", "TYPE", "REMARKS"],
            "SYSCOLUMNS": [
                "TBCREATOR", "TBNAME", "NAME", "COLNO", "COLTYPE",
                "NULLS", "KEYSEQ", "REMARKS", "LABEL",
            ],
        },
    },
    "QSYS2": {
        "tables_view": "SYSTABLES",
        "columns_view": "SYSCOLUMNS",
        "describe": ("TABLE_OWNER", "TABLE_NAME", "COLUMN_NAME", "ORDINAL_POSITION"),
        "views": {
            "SYSTABLES": ["TABLE_OWNER", "TABLE_NAME", "TYPE", "LONG_COMMENT"],
            "SYSCOLUMNS": [
                "TABLE_OWNER", "TABLE_NAME", "COLUMN_NAME", "ORDINAL_POSITION",
                "DATA_TYPE", "IS_NULLABLE", "IS_IDENTITY", "COLUMN_TEXT",
                "COLUMN_HEADING",
            ],
        },
    },
}


class TrackedCursor:
    """DB-API cursor proxy that records whether it was closed."""

    def __init__(self, cursor: sqlite3.Cursor):
        self._cursor = cursor
        self.closed = False

    def execute(self, *args):
        return self._cursor.execute(*args)

    def fetchall(self):
        return self._cursor.fetchall()

    def fetchmany(self, size):
        return self._cursor.fetchmany(size)

    def close(self):
        self.closed = True
        self._cursor.close()


class TrackedConnection:
    """DB-API connection proxy that records whether it and its cursors were closed."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn
        self.closed = False
        self.cursors: List[TrackedCursor] = []

    def cursor(self):
        tracked = TrackedCursor(self._conn.cursor())
        self.cursors.append(tracked)
        return tracked

    def close(self):
        self.closed = True
        self._conn.close()


class SqliteCatalog:
    """A DB2 system catalog emulated in SQLite."""

    def __init__(
        self,
        directory: Path,
        system_schema: str,
        described: Optional[Dict[str, List[str]]] = None,
    ):
        """
        Args:
            directory: Where the database files are created
            system_schema: SYSCAT, SYSIBM or QSYS2
            described: Overrides the column list the catalog reports for a
                view, to emulate other catalog versions
        """
        layout = LAYOUTS[system_schema]
        self.system_schema = system_schema
        self.tables_view = layout["tables_view"]
        self.columns_view = layout["columns_view"]
        self.views = layout["views"]
        self.main_path = directory / "main.db"
        self.path = directory / f"{system_schema.lower()}.db"
        self.connections: List[TrackedConnection] = []

        with closing(sqlite3.connect(str(self.path))) as conn, conn:
            for view, columns in self.views.items():
                cols = ", ".join(f'"{c}"' for c in columns)
                conn.execute(f'CREATE TABLE "{view}" ({cols})')

        schema_col, table_col, name_col, order_col = layout["describe"]
        for view, columns in self.views.items():
            reported = (described or {}).get(view, columns)
            for position, name in enumerate(reported, 1):
                self.insert(self.columns_view, **{
                    schema_col: system_schema,
                    table_col: view,
                    name_col: name,
                    order_col: position,
                })

    def insert(self, view: str, **values) -> None:
        names = ", ".join(f'"{k}"' for k in values)
        marks = ", ".join("?" for _ in values)
        with closing(sqlite3.connect(str(self.path))) as conn, conn:
            conn.execute(f'INSERT INTO "{view}" ({names}) VALUES ({marks})', tuple(values.values()))

    def add_table(self, **values) -> None:
        self.insert(self.tables_view, **values)

    def add_column(self, **values) -> None:
        self.insert(self.columns_view, **values)

    def connect(self, dsn: Db2DSN) -> TrackedConnection:
        """Connection factory with the extractor's signature."""
        conn = sqlite3.connect(str(self.main_path))
        conn.execute(f"ATTACH DATABASE ? AS {self.system_schema}", (str(self.path),))
        tracked = TrackedConnection(conn)
        self.connections.append(tracked)
        return tracked


class RecordingSink:
    """Sink that keeps every table written to it."""

    def __init__(self):
        self.tables = []

    def write(self, meta):
        self.tables.append(meta)

    @property
    def names(self):
        return [m.formal_name for m in self.tables]


@pytest.fixture
def dsn():
    return Db2DSN(
        hostname="db2.example.com",
        database="SAMPLE",
        port=50000,
        userid="db2inst1",
        password="secret",
    )


@pytest.fixture
def make_catalog(tmp_path):
    """Factory for SqliteCatalog instances in a fresh directory."""
    def factory(system_schema: str, described=None) -> SqliteCatalog:
        return SqliteCatalog(tmp_path, system_schema, described)
    return factory


@pytest.fixture
def syscat(make_catalog):
    """Db2 LUW catalog with two tables in DB2INST1 and one in SALES."""
    catalog = make_catalog("SYSCAT")

    catalog.add_table(TABSCHEMA="DB2INST1", TABNAME="DEPT", TYPE="T", REMARKS="Departments")
    catalog.add_table(TABSCHEMA="DB2INST1", TABNAME="EMP", TYPE="T", REMARKS="Employees")
    catalog.add_table(TABSCHEMA="DB2INST1", TABNAME="EMP_ALIAS", TYPE="A")
    catalog.add_table(TABSCHEMA="SALES", TABNAME="ORDERS", TYPE="T")

    catalog.add_column(TABSCHEMA="DB2INST1", TABNAME="DEPT", COLNAME="DEPTNO", COLNO=0,
                       TYPESCHEMA="SYSIBM  ", TYPENAME="CHARACTER", NULLS="N", KEYSEQ=1)
    catalog.add_column(TABSCHEMA="DB2INST1", TABNAME="DEPT", COLNAME="DEPTNAME", COLNO=1,
                       TYPESCHEMA="SYSIBM  ", TYPENAME="VARCHAR", NULLS="Y",
                       REMARKS="Department name")
    catalog.add_column(TABSCHEMA="DB2INST1", TABNAME="EMP", COLNAME="EMPNO", COLNO=0,
                       TYPESCHEMA="SYSIBM  ", TYPENAME="INTEGER", NULLS="N", KEYSEQ=1)
    catalog.add_column(TABSCHEMA="DB2INST1", TABNAME="EMP", COLNAME="WORKDEPT", COLNO=1,
                       TYPESCHEMA="SYSIBM  ", TYPENAME="CHARACTER", NULLS="Y")
    catalog.add_column(TABSCHEMA="SALES", TABNAME="ORDERS", COLNAME="ORDER_ID", COLNO=0,
                       TYPESCHEMA="SYSIBM  ", TYPENAME="BIGINT", NULLS="N", KEYSEQ=1)
    return catalog
