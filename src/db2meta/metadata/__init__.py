"""
Metadata extraction module for the DB2 catalog dialects.

Provides a uniform extractor over the three catalog flavours:
- SYSCAT (Db2 for Linux, UNIX and Windows)
- SYSIBM (Db2 for z/OS)
- QSYS2  (Db2 for IBM i)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Optional

from db2meta.errors import ConfigurationError
from db2meta.metadata.base import CatalogDialect
from db2meta.metadata.correlator import Correlator, correlate
from db2meta.metadata.db2 import Db2Dialect
from db2meta.metadata.db2i import Db2iDialect
from db2meta.metadata.db2z import Db2zDialect
from db2meta.metadata.extractor import CatalogExtractor
from db2meta.models import Db2DSN, ExtractionConfig


class Dialect(str, Enum):
    """Supported catalogs, keyed by their system schema."""
    SYSCAT = "SYSCAT"
    SYSIBM = "SYSIBM"
    QSYS2 = "QSYS2"


def get_dialect(system_schema: str, lang: str = "", remarks=()) -> CatalogDialect:
    """Return the dialect reading the given system schema."""
    try:
        dialect = Dialect(system_schema.strip().upper())
    except ValueError:
        supported = ", ".join(d.value for d in Dialect)
        raise ConfigurationError(
            f"Unsupported system schema {system_schema!r} (expected one of {supported})"
        ) from None

    if dialect is Dialect.SYSCAT:
        return Db2Dialect(lang, remarks)
    elif dialect is Dialect.SYSIBM:
        return Db2zDialect(lang, remarks)
    else:
        return Db2iDialect(lang, remarks)


def get_extractor(
    config: ExtractionConfig,
    connect: Optional[Callable[[Db2DSN], Any]] = None,
) -> CatalogExtractor:
    """
    Build the extractor for a run configuration.

    Args:
        config: Run configuration; `system_schema` selects the dialect
        connect: Optional connection factory (defaults to ibm_db)
    """
    dialect = get_dialect(config.system_schema, config.lang, config.remarks)
    return CatalogExtractor(dialect, config.target_schema, connect=connect)


__all__ = [
    "CatalogDialect",
    "CatalogExtractor",
    "Correlator",
    "Db2Dialect",
    "Db2iDialect",
    "Db2zDialect",
    "Dialect",
    "correlate",
    "get_dialect",
    "get_extractor",
]
