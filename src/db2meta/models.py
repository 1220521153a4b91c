"""
Core data models for the db2meta package.

Defines the extracted metadata records, the connection descriptor, the
pipeline envelope and the run configuration.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from db2meta.errors import ConfigParseError, ConfigReadError

logger = logging.getLogger(__name__)


class MetaType(int, Enum):
    """Kind of metadata record understood by the catalog importer."""
    TABLE = 1
    MODEL = 2
    STREAM = 3
    FILE = 4

    @property
    def label(self) -> str:
        return self.name.title()


class ColumnMode(int, Enum):
    """Multiplicity of a column."""
    NULLABLE = 0
    REQUIRED = 1
    REPEATED = 2

    @property
    def label(self) -> str:
        return self.name.title()


class Constraint(int, Enum):
    """Key constraint attached to a column."""
    NONE = 0
    PRIMARY = 1

    @property
    def label(self) -> str:
        # The importer expects an empty cell for unconstrained columns
        return "" if self is Constraint.NONE else self.name.title()


REMARK_TARGETS = ("Alias", "Description")


@dataclass
class KeyType:
    """Key membership of a column."""
    constraint: Constraint = Constraint.NONE
    order: int = 0  # 1-based position within a composite key


@dataclass
class Column:
    """Metadata for a single column."""
    name: str = ""
    alias: str = ""
    description: str = ""
    type: str = ""  # engine-native type name, not normalized
    mode: ColumnMode = ColumnMode.NULLABLE
    order: int = 0  # 1-based physical position, 0 when unknown
    key_type: KeyType = field(default_factory=KeyType)

    def to_record(self) -> List[str]:
        """Return the `30` record cells for this column."""
        return [
            "30",
            "",
            self.name,
            self.alias,
            self.description,
            self.type,
            self.mode.label,
            self.key_type.constraint.label,
        ]


@dataclass
class Metadata:
    """Metadata for one extracted table."""
    name: str = ""
    formal_name: str = ""  # schema-qualified, unique within a run
    alias: str = ""
    description: str = ""
    meta_type: MetaType = MetaType.TABLE
    lang: str = ""
    columns: List[Column] = field(default_factory=list)

    @property
    def column_names(self) -> List[str]:
        """Return list of column names."""
        return [c.name for c in self.columns]

    def to_records(self) -> List[List[str]]:
        """Return the `20` record followed by one `30` record per column."""
        records = [[
            "20",
            "",
            self.formal_name,
            self.alias,
            self.description,
            self.lang,
            self.meta_type.label,
        ]]
        records.extend(c.to_record() for c in self.columns)
        return records


@dataclass(frozen=True)
class Db2DSN:
    """Connection descriptor for a DB2 server."""
    hostname: str
    database: str
    port: int
    userid: str
    password: str

    def dsn(self) -> str:
        """Return the connection string expected by the ibm_db driver."""
        return (
            f"HOSTNAME={self.hostname};"
            f"DATABASE={self.database};"
            f"PORT={self.port};"
            f"PROTOCOL=TCPIP;"
            f"UID={self.userid};"
            f"PWD={self.password};"
        )

    def __repr__(self) -> str:
        return (
            f"Db2DSN(hostname={self.hostname!r}, database={self.database!r}, "
            f"port={self.port!r}, userid={self.userid!r}, password='***')"
        )


@dataclass
class InProcess:
    """
    Result-or-error envelope passed from a producer stage to the correlator.

    Consumers must check `error` before touching `data`.
    """
    data: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def in_clause(names: List[str]) -> str:
    """Render names as a quoted SQL IN list: ('A', 'B')."""
    quoted = ", ".join("'" + name.replace("'", "''") + "'" for name in names)
    return f"({quoted})"


@dataclass
class ExtractionConfig:
    """Configuration for an extraction run."""
    hostname: str
    database: str
    userid: str
    password: str
    system_schema: str
    port: int = 50000
    lang: str = "ja"
    remarks: List[str] = field(default_factory=list)
    csvfile: str = "mashu.csv"
    target_schema: List[str] = field(default_factory=list)

    # JSON key -> attribute name
    KEYS = {
        "hostname": "hostname",
        "database": "database",
        "port": "port",
        "userid": "userid",
        "password": "password",
        "lang": "lang",
        "remarks": "remarks",
        "csvfile": "csvfile",
        "systemSchema": "system_schema",
        "targetSchema": "target_schema",
    }
    REQUIRED = ("hostname", "database", "userid", "password", "systemSchema")

    def __post_init__(self):
        unknown = [r for r in self.remarks if r not in REMARK_TARGETS]
        if unknown:
            logger.warning(f"Ignoring unknown remarks targets: {', '.join(unknown)}")

    def dsn(self) -> Db2DSN:
        """Build the connection descriptor for this configuration."""
        return Db2DSN(
            hostname=self.hostname,
            database=self.database,
            port=self.port,
            userid=self.userid,
            password=self.password,
        )

    def target_schema_in_clause(self) -> str:
        """Return the target schemas as a quoted SQL IN list."""
        return in_clause(self.target_schema)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary using the configuration file's key names."""
        return {key: getattr(self, attr) for key, attr in self.KEYS.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ExtractionConfig:
        """Create from a dictionary using the configuration file's key names."""
        if not isinstance(data, dict):
            raise ConfigParseError("Configuration must be a mapping")

        missing = [key for key in cls.REQUIRED if data.get(key) is None]
        if missing:
            raise ConfigParseError(f"Missing configuration keys: {', '.join(missing)}")

        kwargs = {attr: data[key] for key, attr in cls.KEYS.items() if data.get(key) is not None}
        try:
            kwargs["port"] = int(kwargs.get("port", 50000))
        except (TypeError, ValueError) as e:
            raise ConfigParseError(f"Invalid port: {data.get('port')!r}") from e

        for key in ("remarks", "targetSchema"):
            value = data.get(key)
            if value is not None and not isinstance(value, list):
                raise ConfigParseError(f"'{key}' must be a list")

        return cls(**kwargs)

    @classmethod
    def load(cls, path: Path) -> ExtractionConfig:
        """Load configuration from a JSON or YAML file."""
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise ConfigReadError(f"Cannot read configuration {path}: {e}") from e

        try:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(text)
            else:
                data = json.loads(text)
        except (ValueError, yaml.YAMLError) as e:
            raise ConfigParseError(f"Cannot parse configuration {path}: {e}") from e

        config = cls.from_dict(data)
        logger.debug(f"Loaded configuration from {path}")
        return config

    def save(self, path: Path) -> None:
        """Save configuration back to disk, keeping the file's format."""
        path = Path(path)
        with open(path, "w", encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
            else:
                json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
                f.write("\n")
