"""Table operations over a MariaDB database."""

import logging
from pathlib import Path
from typing import Any, Callable, Optional, Union

import pandas as pd
from sqlalchemy import Engine

from mariadb_helper.adapters import BaseAdapter, create_adapter
from mariadb_helper.core.config_store import load_config
from mariadb_helper.core.connection import DatabaseConnection
from mariadb_helper.core.credentials import resolve_password
from mariadb_helper.core.executor import QueryExecutor, StatementLike
from mariadb_helper.exceptions import ExecutionError
from mariadb_helper.models.config import ConnectionConfig
from mariadb_helper.models.table import TableShape

logger = logging.getLogger(__name__)

ROW_COUNT_METHODS = ("count", "catalog")


def _as_text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8")
    return str(value)


class MariaDBHelper:
    """
    Session object exposing table-level operations.

    Holds the connection settings for the session. The password is resolved
    on the first operation, every operation opens its own connection and
    closes it before returning.

    Example:
        with MariaDBHelper.from_config_file() as db:
            db.write_table(frame, "iris")
            db.add_auto_id("iris")
            print(db.dim("iris"))
    """

    def __init__(
        self,
        config: ConnectionConfig,
        config_path: Optional[Union[str, Path]] = None,
        prompt: Optional[Callable[[str], str]] = None,
        interactive: Optional[bool] = None,
        engine: Optional[Engine] = None,
    ):
        """
        Initialize the helper.

        Args:
            config: Connection settings, with or without a password
            config_path: File the settings were read from
            prompt: Password prompt used when no password is configured
            interactive: Force prompting on or off
            engine: Prebuilt SQLAlchemy engine, mainly for tests
        """
        self.config = config
        self.config_path = config_path
        self.adapter: BaseAdapter = create_adapter(config)
        self._prompt = prompt
        self._interactive = interactive
        self._engine = engine
        self._connection: Optional[DatabaseConnection] = None
        self._executor: Optional[QueryExecutor] = None

    @classmethod
    def from_config_file(
        cls, path: Optional[Union[str, Path]] = None, **kwargs: Any
    ) -> "MariaDBHelper":
        """
        Create a helper from a YAML configuration file.

        Raises:
            MissingConfigFile: If the file was missing; a template is written
            InvalidConfiguration: If the file can't be used
        """
        return cls(load_config(path), config_path=path, **kwargs)

    @property
    def executor(self) -> QueryExecutor:
        """Executor for this session, resolving the password on first use."""
        if self._executor is None:
            self.config = resolve_password(
                self.config, prompt=self._prompt, interactive=self._interactive
            )
            self._connection = DatabaseConnection(self.config, engine=self._engine)
            self._executor = QueryExecutor(self._connection)
        return self._executor

    def close(self) -> None:
        """Dispose of the engine. The helper can be used again afterwards."""
        if self._connection is not None:
            self._connection.dispose()
        self._connection = None
        self._executor = None

    def __enter__(self) -> "MariaDBHelper":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ==================== Queries ====================

    def run_query(
        self, statement: StatementLike, params: Optional[dict[str, Any]] = None
    ) -> int:
        """
        Run a statement and return the number of affected rows.

        Example:
            db.run_query("DELETE FROM my_table WHERE id = :id", {"id": 1})
        """
        return self.executor.run_statement(statement, params)

    def fetch_query(
        self,
        query: StatementLike,
        params: Optional[dict[str, Any]] = None,
        row_limit: Optional[int] = None,
    ) -> pd.DataFrame:
        """Run a query and return the rows as a DataFrame."""
        return self.executor.fetch_query(query, params, row_limit=row_limit)

    # ==================== Metadata ====================

    def list_tables(self) -> list[str]:
        """Names of the tables in the database."""
        frame = self.fetch_query(self.adapter.list_tables())
        if frame.shape[1] == 0:
            return []
        return [_as_text(name) for name in frame.iloc[:, 0]]

    def column_names(self, table: str) -> list[str]:
        """Column names of a table, in declaration order."""
        return self.executor.list_fields(self.adapter.table_name(table))

    def table_sizes(self) -> pd.DataFrame:
        """Row estimates and sizes of every table, largest first."""
        return self.fetch_query(self.adapter.table_sizes(self.config.dbname))

    def structure(self, table: str) -> pd.DataFrame:
        """Columns of a table and their properties (SHOW COLUMNS)."""
        return self.fetch_query(self.adapter.show_columns(table))

    def structure_all(self) -> pd.DataFrame:
        """Columns of every table, with a Table column naming the source."""
        frames = [self.structure(name).assign(Table=name) for name in self.list_tables()]
        if not frames:
            return pd.DataFrame()
        return pd.concat(frames, ignore_index=True)

    def get_type(self, table: str, field: str) -> Optional[str]:
        """
        Declared type of a column.

        Returns:
            Type string such as "varchar(32)", or None if the column does not exist
        """
        frame = self.fetch_query(self.adapter.show_columns(table, field))
        if frame.empty:
            logger.warning(f"Column {field} not found in table {table}")
            return None
        return _as_text(frame["Type"].iloc[0])

    def row_count(self, table: str, method: str = "count") -> int:
        """
        Number of rows in a table.

        Args:
            table: Table name
            method: "count" runs SELECT COUNT(*); "catalog" reads the
                information_schema estimate, which is faster but approximate
                for InnoDB tables

        Raises:
            ValueError: If method is unknown
            ExecutionError: If the catalog has no entry for the table
        """
        if method == "count":
            frame = self.fetch_query(self.adapter.count_rows(table))
            return int(frame.iloc[0, 0])

        if method == "catalog":
            frame = self.fetch_query(
                self.adapter.catalog_row_count(table, self.config.dbname)
            )
            if frame.empty:
                raise ExecutionError(
                    f"Table {table} not found in information_schema.TABLES"
                )
            value = frame.iloc[0, 0]
            return 0 if pd.isna(value) else int(value)

        raise ValueError(
            f"Unknown row count method: {method}. "
            f"Supported: {', '.join(ROW_COUNT_METHODS)}"
        )

    def column_count(self, table: str) -> int:
        """Number of columns in a table."""
        return len(self.structure(table))

    def dim(self, table: str) -> TableShape:
        """Row and column counts of a table."""
        return TableShape(rows=self.row_count(table), columns=self.column_count(table))

    # ==================== Schema changes ====================

    def set_type(self, table: str, field: str, fieldtype: str) -> int:
        """Change the declared type of a column (ALTER TABLE ... MODIFY)."""
        return self.run_query(self.adapter.modify_column(table, field, fieldtype))

    def add_column(self, table: str, field: str, fieldtype: str) -> int:
        """Add a column to a table."""
        return self.run_query(self.adapter.add_column(table, field, fieldtype))

    def drop_column(self, table: str, field: str) -> int:
        """Remove a column from a table."""
        return self.run_query(self.adapter.drop_column(table, field))

    def add_auto_id(
        self, table: str, field: str = "id", pk: bool = True, unique: bool = True
    ) -> int:
        """
        Add an auto-increment unsigned integer column with an index.

        Args:
            table: Table receiving the column
            field: Name of the new column
            pk: Make the column the primary key
            unique: Make the index on the column unique

        Returns:
            Number of rows affected by the ALTER TABLE
        """
        return self.run_query(self.adapter.add_auto_id(table, field, pk=pk, unique=unique))

    # ==================== Table data ====================

    def write_table(
        self, frame: pd.DataFrame, table: str, overwrite: bool = False
    ) -> bool:
        """
        Store a DataFrame as a new table.

        The name is cleaned the same way the quoted statements clean it, so
        the table can be addressed by every other operation.

        Raises:
            ExecutionError: If the table exists and overwrite is False
        """
        return self.executor.write_table(
            self.adapter.table_name(table), frame, overwrite=overwrite
        )

    def append_table(self, frame: pd.DataFrame, table: str) -> int:
        """Append DataFrame rows to an existing table."""
        return self.executor.append_table(self.adapter.table_name(table), frame)

    def fetch_table(self, table: str, n: int = -1) -> pd.DataFrame:
        """
        Read a table as a DataFrame.

        Args:
            table: Table name
            n: Number of rows to return; -1 (or any n <= 0) returns all rows
        """
        limit = n if n > 0 else None
        return self.fetch_query(self.adapter.select_all(table, limit), row_limit=limit)

    def remove_table(self, table: str, fail_if_missing: bool = True) -> bool:
        """
        Drop a table.

        Raises:
            ExecutionError: If the table is missing and fail_if_missing is True
        """
        self.run_query(self.adapter.drop_table(table, if_exists=not fail_if_missing))
        logger.info(f"Removed table {table}")
        return True
