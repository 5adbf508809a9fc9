"""Statement and query execution returning row counts or DataFrames."""

import logging
from typing import Any, Optional, Union

import pandas as pd
from sqlalchemy import inspect as sa_inspect
from sqlalchemy import Connection, text
from sqlalchemy.exc import SQLAlchemyError

from mariadb_helper.core.connection import DatabaseConnection
from mariadb_helper.exceptions import ExecutionError
from mariadb_helper.models.table import Statement

logger = logging.getLogger(__name__)

StatementLike = Union[str, Statement]


def _unpack(
    statement: StatementLike, params: Optional[dict[str, Any]]
) -> tuple[str, dict[str, Any]]:
    if isinstance(statement, Statement):
        merged = dict(statement.params)
        merged.update(params or {})
        return statement.text, merged
    return statement, dict(params or {})


def _execute(conn: Connection, statement: StatementLike, sql: str, bound: dict[str, Any]):
    # Plain SQL without parameters goes to the driver as written
    if isinstance(statement, str) and not bound:
        return conn.execution_options(no_parameters=True).exec_driver_sql(sql)
    return conn.execute(text(sql), bound)


def _server_message(e: Exception) -> str:
    # DBAPIError.orig carries the driver's own message
    orig = getattr(e, "orig", None)
    return str(orig) if orig is not None else str(e)


class QueryExecutor:
    """Runs one statement per connection and disconnects afterwards."""

    def __init__(self, connection: DatabaseConnection):
        """
        Initialize query executor.

        Args:
            connection: Database connection manager
        """
        self.connection = connection

    def run_statement(
        self, statement: StatementLike, params: Optional[dict[str, Any]] = None
    ) -> int:
        """
        Execute a statement that returns no rows.

        Args:
            statement: SQL text, sent as written when no params are given,
                or a built Statement
            params: Values bound to :name placeholders

        Returns:
            Number of affected rows

        Raises:
            ExecutionError: If the server rejects the statement
        """
        sql, bound = _unpack(statement, params)
        logger.debug(f"Executing: {sql.strip()}")

        with self.connection.get_connection() as conn:
            try:
                result = _execute(conn, statement, sql, bound)
                affected = result.rowcount
                conn.commit()
            except SQLAlchemyError as e:
                message = _server_message(e)
                logger.error(f"Statement failed: {message}")
                raise ExecutionError(message, statement=sql) from e

        return int(affected) if affected is not None and affected >= 0 else 0

    def fetch_query(
        self,
        query: StatementLike,
        params: Optional[dict[str, Any]] = None,
        row_limit: Optional[int] = None,
    ) -> pd.DataFrame:
        """
        Execute a query and return its rows as a DataFrame.

        Args:
            query: SQL text, sent as written when no params are given,
                or a built Statement
            params: Values bound to :name placeholders
            row_limit: Maximum rows to fetch (None or <= 0 for all rows)

        Returns:
            DataFrame with the result columns in server order

        Raises:
            ExecutionError: If the server rejects the query
        """
        sql, bound = _unpack(query, params)
        logger.debug(f"Fetching: {sql.strip()}")

        with self.connection.get_connection() as conn:
            try:
                result = _execute(conn, query, sql, bound)
                columns = list(result.keys())
                if row_limit is not None and row_limit > 0:
                    rows = result.fetchmany(row_limit)
                else:
                    rows = result.fetchall()
            except SQLAlchemyError as e:
                message = _server_message(e)
                logger.error(f"Query failed: {message}")
                raise ExecutionError(message, statement=sql) from e

        return pd.DataFrame.from_records(
            [tuple(row) for row in rows], columns=columns
        )

    def write_table(
        self, name: str, frame: pd.DataFrame, overwrite: bool = False
    ) -> bool:
        """
        Store a DataFrame as a new table.

        Args:
            name: Table name
            frame: Rows to store; the index is not written
            overwrite: Replace an existing table instead of failing

        Returns:
            True on success

        Raises:
            ExecutionError: If the table exists and overwrite is False, or
                the server rejects the write
        """
        if_exists = "replace" if overwrite else "fail"
        with self.connection.get_connection() as conn:
            try:
                frame.to_sql(name, conn, if_exists=if_exists, index=False)
                conn.commit()
            except ValueError as e:
                # pandas reports an existing table with if_exists="fail" as ValueError
                logger.error(f"Can't write table {name}: {e}")
                raise ExecutionError(str(e), statement=f"CREATE TABLE {name}") from e
            except SQLAlchemyError as e:
                message = _server_message(e)
                logger.error(f"Can't write table {name}: {message}")
                raise ExecutionError(message, statement=f"CREATE TABLE {name}") from e

        logger.info(f"Wrote {len(frame)} rows to new table {name}")
        return True

    def append_table(self, name: str, frame: pd.DataFrame) -> int:
        """
        Append DataFrame rows to an existing table.

        Returns:
            Number of appended rows

        Raises:
            ExecutionError: If the table does not exist or the insert fails
        """
        with self.connection.get_connection() as conn:
            try:
                if not sa_inspect(conn).has_table(name):
                    raise ExecutionError(
                        f"Table {name} does not exist", statement=f"INSERT INTO {name}"
                    )
                affected = frame.to_sql(name, conn, if_exists="append", index=False)
                conn.commit()
            except SQLAlchemyError as e:
                message = _server_message(e)
                logger.error(f"Can't append to table {name}: {message}")
                raise ExecutionError(message, statement=f"INSERT INTO {name}") from e

        if affected is None or affected < 0:
            affected = len(frame)
        logger.info(f"Appended {affected} rows to table {name}")
        return int(affected)

    def list_fields(self, name: str) -> list[str]:
        """
        List the column names of a table in declaration order.

        Raises:
            ExecutionError: If the table does not exist
        """
        with self.connection.get_connection() as conn:
            try:
                columns = sa_inspect(conn).get_columns(name)
            except SQLAlchemyError as e:
                message = _server_message(e)
                logger.error(f"Can't list fields of {name}: {message}")
                raise ExecutionError(message, statement=f"DESCRIBE {name}") from e

        return [col["name"] for col in columns]
