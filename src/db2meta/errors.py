"""
Exception hierarchy for db2meta.

Every failure is terminal for the run; nothing here is retried.
"""

from __future__ import annotations


class Db2MetaError(Exception):
    """Base class for all db2meta errors."""


class ConfigurationError(Db2MetaError):
    """The run configuration is unusable."""


class ConfigReadError(ConfigurationError):
    """The configuration file could not be read."""


class ConfigParseError(ConfigurationError):
    """The configuration file could not be parsed or is missing keys."""


class DatabaseConnectionError(Db2MetaError):
    """The database driver could not open a connection."""


class CatalogQueryError(Db2MetaError):
    """A catalog statement failed to execute."""


class ColumnDiscoveryError(CatalogQueryError):
    """The live column list of a catalog view could not be resolved."""


class RowScanError(CatalogQueryError):
    """Rows could not be fetched or decoded from an open result set."""


class CorrelationConsistencyError(Db2MetaError):
    """Table and column streams disagree on their qualified keys."""


class SinkWriteError(Db2MetaError):
    """A record could not be written to the output."""


class ExtractionCancelled(Db2MetaError):
    """The run was cancelled before it completed."""
