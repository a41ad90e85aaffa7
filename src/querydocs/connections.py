"""DuckDB connections shared per documentation directory."""

import logging
import os
import threading
from pathlib import Path
from typing import Dict, Optional

import duckdb
import pyarrow as pa

from querydocs.config import DEFAULT_ROW_LIMIT, Settings, get_settings
from querydocs.exceptions import QueryExecutionError

logger = logging.getLogger(__name__)


class DuckDBConnection:
    """
    In-memory DuckDB database bound to a directory.

    Relative data file paths in queries resolve against ``directory``. Every
    query is capped at ``row_limit`` rows unless the caller asks for another
    limit.
    """

    def __init__(self, directory: Path, row_limit: int = DEFAULT_ROW_LIMIT):
        self.directory = Path(directory)
        self.row_limit = row_limit
        self._lock = threading.Lock()
        self._connection = duckdb.connect(':memory:')
        search_path = str(self.directory).replace("'", "''")
        self._connection.execute(f"SET file_search_path = '{search_path}'")
        logger.debug(f'Opened DuckDB connection for {self.directory}')

    def run_sql(self, sql: str, row_limit: Optional[int] = None) -> pa.Table:
        """
        Execute a query and fetch at most ``row_limit`` rows.

        Raises:
            QueryExecutionError: If DuckDB rejects the query
        """
        limit = int(row_limit or self.row_limit)
        statement = sql.strip().rstrip(';')
        wrapped = f'SELECT * FROM (\n{statement}\n) AS __docs_result LIMIT {limit}'
        try:
            with self._lock:
                return self._connection.execute(wrapped).to_arrow_table()
        except duckdb.Error as e:
            raise QueryExecutionError(f'Query failed in {self.directory}: {e}') from e

    def close(self) -> None:
        with self._lock:
            self._connection.close()


class ConnectionPool:
    """One connection per documentation directory, created on first use."""

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings
        self._connections: Dict[str, DuckDBConnection] = {}
        self._lock = threading.Lock()

    def get_connection(self, document_path: str, settings: Optional[Settings] = None) -> DuckDBConnection:
        """
        Get or create the connection for the directory holding ``document_path``.

        Documents in the same directory share one connection instance.
        """
        settings = settings or self._settings or get_settings()
        directory = os.path.dirname(document_path)
        full_directory = str(Path(os.path.join(settings.docs_root, directory)).resolve())

        with self._lock:
            existing = self._connections.get(full_directory)
            if existing is not None:
                return existing
            connection = DuckDBConnection(Path(full_directory), row_limit=settings.row_limit)
            self._connections[full_directory] = connection
            return connection

    def close_all(self) -> None:
        with self._lock:
            connections = list(self._connections.values())
            self._connections.clear()
        for connection in connections:
            connection.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)


CONNECTIONS = ConnectionPool()
