"""
Tests for the catalog dialects.

Mappers receive scanned rows: string values, empty values already omitted.
"""

import logging

import pytest

from db2meta.errors import ConfigurationError
from db2meta.metadata import Dialect, get_dialect
from db2meta.metadata.db2 import Db2Dialect
from db2meta.metadata.db2i import Db2iDialect
from db2meta.metadata.db2z import Db2zDialect
from db2meta.models import ColumnMode, Constraint, MetaType


class TestGetDialect:
    """Tests for dialect selection by system schema."""

    @pytest.mark.parametrize(
        "schema,expected",
        [("SYSCAT", Db2Dialect), ("SYSIBM", Db2zDialect), ("QSYS2", Db2iDialect), ("syscat", Db2Dialect)],
    )
    def test_supported(self, schema, expected):
        dialect = get_dialect(schema, "ja", ["Alias"])
        assert isinstance(dialect, expected)
        assert dialect.lang == "ja"
        assert dialect.remarks == ["Alias"]

    def test_every_dialect_is_selectable(self):
        for d in Dialect:
            assert get_dialect(d.value).system_schema == d.value

    def test_unsupported(self):
        with pytest.raises(ConfigurationError, match="SYSDUMMY"):
            get_dialect("SYSDUMMY")


class TestDb2Dialect:
    """Tests for the SYSCAT mapper."""

    def test_table(self):
        meta = Db2Dialect("ja", ["Description"]).to_metadata(
            {"TABSCHEMA": "DB2INST1", "TABNAME": "EMP", "REMARKS": "Employees", "TYPE": "T"}
        )
        assert meta.name == "EMP"
        assert meta.formal_name == "DB2INST1.EMP"
        assert meta.description == "Employees"
        assert meta.alias == ""
        assert meta.lang == "ja"
        assert meta.meta_type is MetaType.TABLE
        assert meta.columns == []

    def test_table_schema_is_trimmed(self):
        meta = Db2Dialect().to_metadata({"TABSCHEMA": "DB2INST1  ", "TABNAME": "EMP"})
        assert meta.formal_name == "DB2INST1.EMP"

    def test_table_without_schema(self):
        meta = Db2Dialect().to_metadata({"TABNAME": "EMP"})
        assert meta.name == "EMP"
        assert meta.formal_name == ""

    def test_column(self):
        col, key = Db2Dialect().to_column({
            "TABSCHEMA": "DB2INST1 ",
            "TABNAME": "EMP",
            "COLNAME": "EMPNO",
            "TYPESCHEMA": "SYSIBM  ",
            "TYPENAME": "INTEGER",
            "NULLS": "N",
            "COLNO": "0",
            "KEYSEQ": "1",
        })
        assert key == "DB2INST1.EMP"
        assert col.name == "EMPNO"
        assert col.type == "SYSIBM.INTEGER"
        assert col.mode is ColumnMode.REQUIRED
        assert col.order == 1
        assert col.key_type.constraint is Constraint.PRIMARY
        assert col.key_type.order == 1

    def test_column_defaults(self):
        col, _ = Db2Dialect().to_column({"TABSCHEMA": "S", "TABNAME": "T", "COLNAME": "C"})
        assert col.type == ""
        assert col.mode is ColumnMode.NULLABLE
        assert col.key_type.constraint is Constraint.NONE

    def test_type_without_schema(self):
        col, _ = Db2Dialect().to_column({"COLNAME": "C", "TYPENAME": "VARCHAR"})
        assert col.type == "VARCHAR"

    def test_composite_key_order(self):
        col, _ = Db2Dialect().to_column({"COLNAME": "C", "KEYSEQ": "2"})
        assert col.key_type.constraint is Constraint.PRIMARY
        assert col.key_type.order == 2

    def test_keyseq_zero_is_not_a_key(self):
        col, _ = Db2Dialect().to_column({"COLNAME": "C", "KEYSEQ": "0"})
        assert col.key_type.constraint is Constraint.NONE

    @pytest.mark.parametrize("colno,order", [("0", 1), ("1", 2), ("9", 10)])
    def test_colno_is_shifted_to_one_based(self, colno, order):
        col, _ = Db2Dialect().to_column({"COLNAME": "C", "COLNO": colno})
        assert col.order == order

    def test_unparsable_order(self, caplog):
        with caplog.at_level(logging.WARNING):
            col, _ = Db2Dialect().to_column({"COLNAME": "C", "COLNO": "x1"})
        assert col.order == 0
        assert "COLNO" in caplog.text

    @pytest.mark.parametrize(
        "remarks,alias,description",
        [
            ([], "", ""),
            (["Alias"], "Name", ""),
            (["Description"], "", "Name"),
            (["Alias", "Description"], "Name", "Name"),
        ],
    )
    def test_remarks_routing(self, remarks, alias, description):
        col, _ = Db2Dialect("ja", remarks).to_column({"COLNAME": "C", "REMARKS": "Name"})
        assert col.alias == alias
        assert col.description == description


class TestDb2zDialect:
    """Tests for the SYSIBM mapper."""

    def test_table(self):
        meta = Db2zDialect("en", ["Alias"]).to_metadata(
            {"CREATOR": "PAYROLL ", "NAME": "EMP", "REMARKS": "Employees"}
        )
        assert meta.formal_name == "PAYROLL.EMP"
        assert meta.alias == "Employees"

    def test_column(self):
        col, key = Db2zDialect().to_column({
            "TBCREATOR": "PAYROLL ",
            "TBNAME": "EMP",
            "NAME": "EMPNO",
            "COLTYPE": "INTEGER ",
            "NULLS": "N",
            "COLNO": "1",
            "KEYSEQ": "1",
        })
        assert key == "PAYROLL.EMP"
        assert col.type == "INTEGER"
        assert col.mode is ColumnMode.REQUIRED
        assert col.order == 1
        assert col.key_type.constraint is Constraint.PRIMARY

    def test_keyseq_zero_is_not_a_key(self):
        col, _ = Db2zDialect().to_column({"NAME": "C", "KEYSEQ": "0"})
        assert col.key_type.constraint is Constraint.NONE

    def test_label_overrides_remarks_alias(self):
        dialect = Db2zDialect("ja", ["Alias", "Description"])
        col, _ = dialect.to_column({"NAME": "C", "REMARKS": "Remark", "LABEL": "Label"})
        assert col.alias == "Label"
        assert col.description == "Remark"

    def test_label_without_remarks(self):
        col, _ = Db2zDialect().to_column({"NAME": "C", "LABEL": "Label"})
        assert col.alias == "Label"


class TestDb2iDialect:
    """Tests for the QSYS2 mapper."""

    def test_table(self):
        meta = Db2iDialect("ja", ["Description"]).to_metadata(
            {"TABLE_OWNER": "MYLIB", "TABLE_NAME": "CUSTOMER", "LONG_COMMENT": "Customers"}
        )
        assert meta.formal_name == "MYLIB.CUSTOMER"
        assert meta.description == "Customers"

    def test_column(self):
        col, key = Db2iDialect().to_column({
            "TABLE_OWNER": "MYLIB",
            "TABLE_NAME": "CUSTOMER",
            "COLUMN_NAME": "CUSNUM",
            "DATA_TYPE": "DECIMAL",
            "IS_NULLABLE": "N",
            "ORDINAL_POSITION": "1",
            "IS_IDENTITY": "YES",
        })
        assert key == "MYLIB.CUSTOMER"
        assert col.type == "DECIMAL"
        assert col.mode is ColumnMode.REQUIRED
        assert col.order == 1
        assert col.key_type.constraint is Constraint.PRIMARY
        assert col.key_type.order == 0

    def test_not_identity(self):
        col, _ = Db2iDialect().to_column({"COLUMN_NAME": "C", "IS_IDENTITY": "NO", "IS_NULLABLE": "Y"})
        assert col.key_type.constraint is Constraint.NONE
        assert col.mode is ColumnMode.NULLABLE

    def test_column_text_and_heading(self):
        dialect = Db2iDialect("ja", ["Alias", "Description"])
        col, _ = dialect.to_column(
            {"COLUMN_NAME": "C", "COLUMN_TEXT": "Customer number", "COLUMN_HEADING": "Cust No"}
        )
        assert col.alias == "Cust No"
        assert col.description == "Customer number"

    def test_queries_use_target_schemas(self):
        query = Db2iDialect().table_query(["TABLE_OWNER", "TABLE_NAME"], ["MYLIB", "QGPL"])
        assert query.statement.startswith("SELECT TABLE_OWNER,TABLE_NAME FROM QSYS2.SYSTABLES")
        assert "TABLE_OWNER in ('MYLIB', 'QGPL')" in query.statement
