"""
db2meta - DB2 catalog metadata exporter

Extracts table and column metadata from the system catalog of a DB2
database and writes it in the record format of a metadata catalog importer.

Features:
- Db2 for LUW (SYSCAT), z/OS (SYSIBM) and IBM i (QSYS2) catalogs
- Column lists resolved from the catalog itself, tolerant of version drift
- Streaming table/column correlation with bounded memory
- Schema discovery with write-back into the run configuration
"""

__version__ = "0.1.0"

from db2meta.errors import Db2MetaError
from db2meta.models import (
    Column,
    ColumnMode,
    Constraint,
    Db2DSN,
    ExtractionConfig,
    KeyType,
    Metadata,
    MetaType,
)

from db2meta.metadata import (
    CatalogExtractor,
    Dialect,
    get_extractor,
)

from db2meta.output import CsvSink

__all__ = [
    # Core models
    "Column",
    "ColumnMode",
    "Constraint",
    "Db2DSN",
    "ExtractionConfig",
    "KeyType",
    "Metadata",
    "MetaType",
    # Extraction
    "CatalogExtractor",
    "Dialect",
    "get_extractor",
    # Output
    "CsvSink",
    # Errors
    "Db2MetaError",
]
