"""
Table/column correlation.

Merges the table stream and the column stream into complete `Metadata`
records. Both streams must be ordered by the same qualified key
(schema, then table name); the column stream references each table at
most once, as one contiguous run of rows.

Only the table currently being filled is held in memory.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional, Tuple

from db2meta.errors import CorrelationConsistencyError
from db2meta.models import Column, Metadata

logger = logging.getLogger(__name__)


class Correlator:
    """
    Streaming merge-join of tables (1) to columns (N).

    Usage:
        for meta in Correlator(tables).merge(columns):
            sink.write(meta)

    States: no current table (await), current table held (accumulate),
    and a final flush once the column stream ends.
    """

    def __init__(self, tables: Iterable[Metadata]):
        self._tables = iter(tables)
        self._current: Optional[Metadata] = None
        self._last_key: Optional[str] = None
        self.emitted = 0

    def _pull(self) -> Optional[Metadata]:
        """Take the next table from the table stream, or None when exhausted."""
        meta = next(self._tables, None)
        if meta is not None and meta.formal_name == self._last_key:
            raise CorrelationConsistencyError(
                f"Duplicate table {meta.formal_name} in table stream"
            )
        return meta

    def _emit(self) -> Metadata:
        meta = self._current
        self._current = None
        self._last_key = meta.formal_name
        self.emitted += 1
        logger.debug(f"Correlated {meta.formal_name} ({len(meta.columns)} columns)")
        return meta

    def _append(self, column: Column) -> None:
        columns = self._current.columns
        if columns and column.order and column.order < columns[-1].order:
            logger.warning(
                f"Column {column.name} of {self._current.formal_name} is out of order "
                f"({column.order} after {columns[-1].order})"
            )
        columns.append(column)

    def merge(self, columns: Iterable[Tuple[Column, str]]) -> Iterator[Metadata]:
        """
        Yield each table once its column set is complete.

        Args:
            columns: (Column, owning table key) pairs in catalog order

        Raises:
            CorrelationConsistencyError: a column has no owning table left in
                the table stream, or the table stream repeats a key
        """
        for column, key in columns:
            while True:
                if self._current is None:
                    self._current = self._pull()
                    if self._current is None:
                        raise CorrelationConsistencyError(
                            f"Column {column.name} references {key}, "
                            f"which is not in the table stream"
                        )
                if self._current.formal_name == key:
                    self._append(column)
                    break
                # Current table is complete; the column belongs to a later one
                yield self._emit()

        if self._current is not None:
            yield self._emit()

        # Trailing tables without any columns
        while True:
            self._current = self._pull()
            if self._current is None:
                return
            yield self._emit()


def correlate(
    tables: Iterable[Metadata],
    columns: Iterable[Tuple[Column, str]],
) -> Iterator[Metadata]:
    """Merge a table stream and a column stream into complete Metadata records."""
    return Correlator(tables).merge(columns)
