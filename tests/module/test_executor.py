"""Module Tests for QueryExecutor

Tests the QueryExecutor against a SQLite engine standing in for the server.
Validates:
- Affected row counts from statements
- DataFrame results and row caps
- Table writes, appends and field listing
- Error wrapping and connection release
"""

import pandas as pd
import pytest
from sqlalchemy.exc import SQLAlchemyError

from mariadb_helper import ExecutionError, Statement
from mariadb_helper.core import DatabaseConnection, QueryExecutor

pytestmark = pytest.mark.unit


@pytest.fixture
def close_spy(sqlite_connection: DatabaseConnection, monkeypatch) -> list:
    """Record every connection released by the manager"""
    closed = []
    original = sqlite_connection.close

    def spy(conn):
        closed.append(conn)
        original(conn)

    monkeypatch.setattr(sqlite_connection, "close", spy)
    return closed


@pytest.fixture
def populated(executor: QueryExecutor) -> QueryExecutor:
    """Executor whose database holds a three-row table"""
    executor.run_statement("CREATE TABLE fruit (id INTEGER, name TEXT)")
    executor.run_statement(
        "INSERT INTO fruit (id, name) VALUES (1, 'apple'), (2, 'banana'), (3, 'cherry')"
    )
    return executor


class TestRunStatement:
    """Test statements that return no rows."""

    def test_affected_rows(self, executor: QueryExecutor):
        """Test that the affected row count is returned."""
        executor.run_statement("CREATE TABLE t (a INTEGER)")

        assert executor.run_statement("INSERT INTO t (a) VALUES (1), (2), (3)") == 3
        assert executor.run_statement("DELETE FROM t WHERE a > 1") == 2

    def test_bound_parameters(self, populated: QueryExecutor):
        """Test that :name placeholders are bound."""
        affected = populated.run_statement(
            "UPDATE fruit SET name = :name WHERE id = :id", {"name": "apricot", "id": 1}
        )

        assert affected == 1
        frame = populated.fetch_query("SELECT name FROM fruit WHERE id = 1")
        assert frame["name"].tolist() == ["apricot"]

    def test_statement_object(self, populated: QueryExecutor):
        """Test that built Statements carry their own parameters."""
        statement = Statement(text="DELETE FROM fruit WHERE id = :id", params={"id": 2})

        assert populated.run_statement(statement) == 1

    def test_colon_literal_sent_as_written(self, executor: QueryExecutor):
        """Test that a :word inside a literal is not read as a placeholder."""
        executor.run_statement("CREATE TABLE j (doc TEXT)")

        affected = executor.run_statement("""INSERT INTO j (doc) VALUES ('{"k":1}')""")

        assert affected == 1
        frame = executor.fetch_query("SELECT doc FROM j WHERE doc LIKE '%:1}'")
        assert frame["doc"].tolist() == ['{"k":1}']

    def test_changes_committed(self, populated: QueryExecutor):
        """Test that a statement's effect is visible to the next connection."""
        populated.run_statement("DELETE FROM fruit")

        frame = populated.fetch_query("SELECT COUNT(*) AS n FROM fruit")
        assert frame["n"].iloc[0] == 0

    def test_rejected_statement(self, executor: QueryExecutor):
        """Test that server errors become ExecutionError with the statement."""
        with pytest.raises(ExecutionError) as exc_info:
            executor.run_statement("ALTER TABLE missing ADD COLUMN x INTEGER")

        assert "missing" in str(exc_info.value)
        assert exc_info.value.statement.startswith("ALTER TABLE missing")
        assert isinstance(exc_info.value.__cause__, SQLAlchemyError)

    def test_connection_released(self, executor: QueryExecutor, close_spy: list):
        """Test that one connection is opened and closed per statement."""
        executor.run_statement("CREATE TABLE t (a INTEGER)")

        assert len(close_spy) == 1
        assert close_spy[0].closed

    def test_connection_released_on_error(self, executor: QueryExecutor, close_spy: list):
        """Test that the connection is closed when the statement fails."""
        with pytest.raises(ExecutionError):
            executor.run_statement("NOT SQL AT ALL")

        assert len(close_spy) == 1


class TestFetchQuery:
    """Test queries returning DataFrames."""

    def test_all_rows(self, populated: QueryExecutor):
        """Test that all rows come back in a DataFrame."""
        frame = populated.fetch_query("SELECT * FROM fruit ORDER BY id")

        assert isinstance(frame, pd.DataFrame)
        assert frame.shape == (3, 2)
        assert list(frame.columns) == ["id", "name"]
        assert frame["name"].tolist() == ["apple", "banana", "cherry"]

    def test_row_limit(self, populated: QueryExecutor):
        """Test that row_limit caps the rows fetched."""
        frame = populated.fetch_query("SELECT * FROM fruit ORDER BY id", row_limit=2)

        assert len(frame) == 2
        assert frame["id"].tolist() == [1, 2]

    @pytest.mark.parametrize("row_limit", [None, 0, -1])
    def test_unbounded(self, populated: QueryExecutor, row_limit):
        """Test that None or non-positive limits fetch everything."""
        frame = populated.fetch_query("SELECT * FROM fruit", row_limit=row_limit)

        assert len(frame) == 3

    def test_empty_result_keeps_columns(self, populated: QueryExecutor):
        """Test that an empty result still names its columns."""
        frame = populated.fetch_query("SELECT * FROM fruit WHERE id > 10")

        assert frame.empty
        assert list(frame.columns) == ["id", "name"]

    def test_bound_parameters(self, populated: QueryExecutor):
        frame = populated.fetch_query(
            "SELECT name FROM fruit WHERE id = :id", params={"id": 3}
        )

        assert frame["name"].tolist() == ["cherry"]

    def test_missing_table(self, executor: QueryExecutor, close_spy: list):
        """Test that a query on a missing table raises and releases."""
        with pytest.raises(ExecutionError, match="no such table"):
            executor.fetch_query("SELECT * FROM nowhere")

        assert len(close_spy) == 1


class TestTableTransfer:
    """Test DataFrame writes and appends."""

    def test_write_new_table(self, executor: QueryExecutor, sample_frame: pd.DataFrame):
        """Test that a DataFrame is stored with its columns and rows."""
        assert executor.write_table("iris", sample_frame) is True

        frame = executor.fetch_query("SELECT * FROM iris")
        assert frame.shape == (50, 5)
        assert list(frame.columns) == list(sample_frame.columns)

    def test_write_existing_fails(self, executor: QueryExecutor, sample_frame: pd.DataFrame):
        """Test that writing over an existing table needs overwrite."""
        executor.write_table("iris", sample_frame)

        with pytest.raises(ExecutionError, match="already exists"):
            executor.write_table("iris", sample_frame)

    def test_overwrite(self, executor: QueryExecutor, sample_frame: pd.DataFrame):
        """Test that overwrite replaces the table contents."""
        executor.write_table("iris", sample_frame)
        executor.write_table("iris", sample_frame.head(10), overwrite=True)

        frame = executor.fetch_query("SELECT COUNT(*) AS n FROM iris")
        assert frame["n"].iloc[0] == 10

    def test_append(self, executor: QueryExecutor, sample_frame: pd.DataFrame):
        """Test that appended rows are counted and stored."""
        executor.write_table("iris", sample_frame)

        assert executor.append_table("iris", sample_frame.head(7)) == 7

        frame = executor.fetch_query("SELECT COUNT(*) AS n FROM iris")
        assert frame["n"].iloc[0] == 57

    def test_append_missing_table(self, executor: QueryExecutor, sample_frame: pd.DataFrame):
        """Test that appending never creates a table."""
        with pytest.raises(ExecutionError, match="does not exist"):
            executor.append_table("iris", sample_frame)

        with pytest.raises(ExecutionError):
            executor.fetch_query("SELECT * FROM iris")


class TestListFields:
    """Test column name listing."""

    def test_declaration_order(self, populated: QueryExecutor):
        assert populated.list_fields("fruit") == ["id", "name"]

    def test_repeatable(self, executor: QueryExecutor, sample_frame: pd.DataFrame):
        """Test that listing twice without changes gives the same names."""
        executor.write_table("iris", sample_frame)

        first = executor.list_fields("iris")
        second = executor.list_fields("iris")

        assert first == second == list(sample_frame.columns)

    def test_missing_table(self, executor: QueryExecutor):
        with pytest.raises(ExecutionError):
            executor.list_fields("nowhere")
