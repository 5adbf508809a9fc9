"""MariaDB / MySQL adapter."""

from typing import Optional

from mariadb_helper.adapters.base import BaseAdapter
from mariadb_helper.models.table import Statement


class MariaDBAdapter(BaseAdapter):
    """Statements for MariaDB and MySQL servers."""

    def list_tables(self) -> Statement:
        return Statement(text="SHOW TABLES")

    def show_columns(self, table: str, field: Optional[str] = None) -> Statement:
        """SHOW COLUMNS, with the field name bound rather than inlined."""
        text = f"SHOW COLUMNS FROM {self.quote(table)}"
        if field is None:
            return Statement(text=text)
        return Statement(text=f"{text} WHERE Field = :field", params={"field": field})

    def table_sizes(self, schema: Optional[str]) -> Statement:
        """Row estimates and sizes of all tables, largest first."""
        schema_filter = "TABLE_SCHEMA = :schema" if schema else "TABLE_SCHEMA = DATABASE()"
        return Statement(
            text=f"""
            SELECT
                TABLE_NAME,
                TABLE_ROWS,
                DATA_LENGTH,
                INDEX_LENGTH,
                ROUND(((DATA_LENGTH + INDEX_LENGTH) / 1024 / 1024), 2) AS `Size in MB`
            FROM information_schema.TABLES
            WHERE {schema_filter}
            ORDER BY (DATA_LENGTH + INDEX_LENGTH) DESC
            """,
            params={"schema": schema} if schema else {},
        )

    def catalog_row_count(self, table: str, schema: Optional[str]) -> Statement:
        """
        Row estimate from information_schema.

        InnoDB only keeps an approximation here, so the value can differ
        from SELECT COUNT(*).
        """
        schema_filter = "TABLE_SCHEMA = :schema" if schema else "TABLE_SCHEMA = DATABASE()"
        params = {"table_name": table}
        if schema:
            params["schema"] = schema
        return Statement(
            text=f"""
            SELECT TABLE_ROWS
            FROM information_schema.TABLES
            WHERE {schema_filter}
              AND TABLE_NAME = :table_name
            """,
            params=params,
        )
