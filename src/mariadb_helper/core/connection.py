"""Database connection management with SQLAlchemy."""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import Connection, Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from mariadb_helper.exceptions import DatabaseConnectionError
from mariadb_helper.models.config import ConnectionConfig

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """Opens one server connection per operation and closes it afterwards."""

    def __init__(self, config: ConnectionConfig, engine: Optional[Engine] = None):
        """
        Initialize database connection.

        Args:
            config: Connection configuration, password included
            engine: Prebuilt engine to use instead of one built from config
        """
        self.config = config
        self.engine: Optional[Engine] = engine
        self._owns_engine = engine is None

    def initialize(self) -> Engine:
        """Create the engine if needed. No connection is opened here."""
        if self.engine is not None:
            return self.engine

        # NullPool: every checkout is a new server connection, every release closes it
        self.engine = create_engine(
            self.config.to_url(),
            poolclass=NullPool,
            echo=self.config.echo_sql,
            connect_args=self.config.connect_args(),
        )
        logger.info(
            f"Created {self.config.dialect} engine for "
            f"{self.config.username}@{self.config.host}/{self.config.dbname}"
        )
        return self.engine

    def dispose(self) -> None:
        """Dispose of the engine and cleanup resources."""
        if self.engine is not None and self._owns_engine:
            self.engine.dispose()
            self.engine = None

    def open(self) -> Connection:
        """
        Validate the config and open a connection.

        Returns:
            An open SQLAlchemy connection; the caller must close() it

        Raises:
            InvalidConfiguration: If username or password is empty
            DatabaseConnectionError: If the driver could not connect
        """
        self.config.validate_credentials()
        engine = self.initialize()
        try:
            return engine.connect()
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to connect to {self.config.host}: {e}")
            raise DatabaseConnectionError(
                f"Can't connect to {self.config.host} as {self.config.username}: {e}"
            ) from e

    def close(self, conn: Connection) -> None:
        """Close a connection, logging instead of raising on failure."""
        try:
            conn.close()
        except Exception as e:
            logger.warning(f"Ignoring error while disconnecting: {e}")

    @contextmanager
    def get_connection(self) -> Iterator[Connection]:
        """
        Get a connection as a context manager.

        The connection is closed exactly once on every exit path. Close
        failures are logged and never replace the body's result or error.

        Yields:
            Connection for executing statements
        """
        conn = self.open()
        try:
            yield conn
        finally:
            self.close(conn)

    @property
    def is_initialized(self) -> bool:
        """Check if engine is initialized."""
        return self.engine is not None

    def test_connection(self) -> bool:
        """
        Test database connectivity.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            with self.get_connection() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"Connection test failed: {e}")
            return False

    def get_version(self) -> str:
        """
        Get database version string.

        Returns:
            Database version string
        """
        with self.get_connection() as conn:
            row = conn.execute(text("SELECT VERSION()")).fetchone()
            return str(row[0]) if row else "Unknown"

    def __enter__(self) -> "DatabaseConnection":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()
