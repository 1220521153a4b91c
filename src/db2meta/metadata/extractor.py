"""
Catalog extractor: runs one dialect's extraction pipeline.

    resolve columns -> table producer  --\
                    -> column producer --+-> correlator -> sink

The two producers run in worker threads, each on its own connection, and
hand their rows to the correlator on the calling thread through bounded
queues.
"""

from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import closing
from typing import Any, Callable, Iterator, List, Optional, Tuple

from db2meta.errors import (
    CatalogQueryError,
    ConfigurationError,
    DatabaseConnectionError,
    ExtractionCancelled,
    SinkWriteError,
)
from db2meta.metadata.base import CatalogDialect
from db2meta.metadata.correlator import Correlator
from db2meta.metadata.query import CatalogQuery, column_list, to_column_value
from db2meta.models import Db2DSN, InProcess

logger = logging.getLogger(__name__)

QUEUE_SIZE = 64
POLL_INTERVAL = 0.1  # seconds between cancellation checks while blocked


def connect_ibm_db(dsn: Db2DSN) -> Any:
    """Open a DB-API connection with the IBM Db2 driver."""
    import ibm_db_dbi

    return ibm_db_dbi.connect(dsn.dsn(), "", "")


class CancelToken:
    """Cancellation signal for one run, optionally tied to a caller's event."""

    def __init__(self, parent: Optional[threading.Event] = None):
        self._parent = parent
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or (self._parent is not None and self._parent.is_set())


def _offer(channel: queue.Queue, item: Optional[InProcess], token: CancelToken) -> bool:
    """Put an item, waiting for room; False if the run was cancelled first."""
    while not token.cancelled:
        try:
            channel.put(item, timeout=POLL_INTERVAL)
            return True
        except queue.Full:
            continue
    return False


def _take(channel: queue.Queue, token: CancelToken) -> Optional[InProcess]:
    """Get the next item, waiting for one; raises if the run is cancelled."""
    while True:
        if token.cancelled:
            raise ExtractionCancelled("Extraction cancelled")
        try:
            return channel.get(timeout=POLL_INTERVAL)
        except queue.Empty:
            continue


def _drain(channel: queue.Queue, token: CancelToken) -> Iterator[Any]:
    """Iterate a producer's output; None marks the end of the stream."""
    while True:
        item = _take(channel, token)
        if item is None:
            return
        if not item.ok:
            raise item.error
        yield item.data


class CatalogExtractor:
    """
    Extracts table and column metadata from a DB2 catalog.

    Connections come from `connect` (defaults to the ibm_db driver); each
    call to `run` or `find_schemas` opens and closes its own connections.
    """

    def __init__(
        self,
        dialect: CatalogDialect,
        target_schema: Optional[List[str]] = None,
        connect: Optional[Callable[[Db2DSN], Any]] = None,
        queue_size: int = QUEUE_SIZE,
    ):
        """
        Args:
            dialect: Catalog dialect to read
            target_schema: Owning schemas to extract
            connect: Connection factory taking a Db2DSN
            queue_size: Bound of each producer queue
        """
        self.dialect = dialect
        self.target_schema = list(target_schema or [])
        self._connect = connect
        self.queue_size = queue_size

    def _open(self, dsn: Db2DSN) -> Any:
        connect = self._connect or connect_ibm_db
        try:
            conn = connect(dsn)
        except Exception as e:
            raise DatabaseConnectionError(f"Cannot connect to {dsn.hostname}/{dsn.database}: {e}") from e
        logger.debug(f"Connected to {dsn.hostname}:{dsn.port}/{dsn.database} as {dsn.userid}")
        return conn

    def find_schemas(self, dsn: Db2DSN) -> List[str]:
        """
        List the distinct owning schemas present in the catalog.

        Args:
            dsn: Connection descriptor

        Returns:
            Schema names, trimmed and ordered
        """
        with closing(self._open(dsn)) as conn, closing(conn.cursor()) as cursor:
            try:
                cursor.execute(self.dialect.schemas_sql)
                schemas = [to_column_value(row[0]).strip() for row in cursor.fetchall()]
            except Exception as e:
                raise CatalogQueryError(f"Schema discovery failed: {e}") from e

        schemas = [s for s in schemas if s]
        logger.info(f"Found {len(schemas)} schemas in {self.dialect.system_schema}")
        return schemas

    def resolve(self, dsn: Db2DSN) -> Tuple[CatalogQuery, CatalogQuery]:
        """Resolve the live tables and columns queries for this catalog."""
        with closing(self._open(dsn)) as conn:
            table_columns = column_list(conn, self.dialect.table_columns_sql)
            column_columns = column_list(conn, self.dialect.column_columns_sql)

        logger.info(
            f"Resolved {len(table_columns)} table and {len(column_columns)} column "
            f"catalog fields in {self.dialect.system_schema}"
        )
        return (
            self.dialect.table_query(table_columns, self.target_schema),
            self.dialect.column_query(column_columns, self.target_schema),
        )

    def _produce(
        self,
        dsn: Db2DSN,
        query: CatalogQuery,
        convert: Callable,
        channel: queue.Queue,
        token: CancelToken,
        stage: str,
    ) -> None:
        """Stream converted rows into the channel; failures travel as envelopes."""
        count = 0
        try:
            with closing(self._open(dsn)) as conn, closing(query.rows(conn)) as rows:
                for row in rows:
                    if not _offer(channel, InProcess(data=convert(row)), token):
                        logger.debug(f"{stage} producer cancelled after {count} rows")
                        return
                    count += 1
        except Exception as e:
            logger.debug(f"{stage} producer failed: {e}")
            _offer(channel, InProcess(error=e), token)
            return
        logger.debug(f"{stage} producer finished: {count} rows")
        _offer(channel, None, token)

    def run(self, dsn: Db2DSN, sink: Any, cancel: Optional[threading.Event] = None) -> int:
        """
        Extract the catalog and write every table to the sink as it completes.

        Args:
            dsn: Connection descriptor
            sink: Object with a `write(Metadata)` method
            cancel: Optional event; setting it stops the run

        Returns:
            Number of tables written

        Raises:
            Db2MetaError subclasses; ExtractionCancelled when cancelled
        """
        if not self.target_schema:
            raise ConfigurationError("No target schemas to extract")

        token = CancelToken(cancel)
        table_query, column_query = self.resolve(dsn)

        tables: queue.Queue = queue.Queue(maxsize=self.queue_size)
        columns: queue.Queue = queue.Queue(maxsize=self.queue_size)
        written = 0

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="catalog") as pool:
            try:
                pool.submit(self._produce, dsn, table_query, self.dialect.to_metadata,
                            tables, token, "table")
                pool.submit(self._produce, dsn, column_query, self.dialect.to_column,
                            columns, token, "column")

                correlator = Correlator(_drain(tables, token))
                for meta in correlator.merge(_drain(columns, token)):
                    if token.cancelled:
                        raise ExtractionCancelled("Extraction cancelled")
                    try:
                        sink.write(meta)
                    except OSError as e:
                        raise SinkWriteError(f"Cannot write {meta.formal_name}: {e}") from e
                    written += 1
            finally:
                # Release producers blocked on a full queue
                token.cancel()

        logger.info(f"Extracted {written} tables from {self.dialect.system_schema}")
        return written
