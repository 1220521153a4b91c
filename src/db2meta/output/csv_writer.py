"""
CSV Writer - Write extracted metadata in the catalog importer's record format.

Each table becomes one group of records:

    20,,<FormalName>,<Alias>,<Description>,<Lang>,<MetaType>
    30,,<Name>,<Alias>,<Description>,<Type>,<Mode>,<Constraint>
    ...
    <blank line>
"""

from __future__ import annotations

import csv
import logging
from typing import TextIO

from db2meta.errors import SinkWriteError
from db2meta.models import Metadata

logger = logging.getLogger(__name__)


class CsvSink:
    """
    Writes one record group per table to a text stream.

    The stream is owned by the caller, which should open it with
    `newline=""` so embedded newlines in free-text fields survive.
    """

    def __init__(self, out: TextIO):
        self.out = out
        self.writer = csv.writer(out, lineterminator="\n")
        self.tables_written = 0

    def write(self, meta: Metadata) -> None:
        """Write a table record, its column records and the group terminator."""
        try:
            self.writer.writerows(meta.to_records())
            self.out.write("\n")
        except OSError as e:
            raise SinkWriteError(f"Cannot write {meta.formal_name}: {e}") from e

        self.tables_written += 1
        logger.debug(f"Wrote {meta.formal_name} ({len(meta.columns)} columns)")
