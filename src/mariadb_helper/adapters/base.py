"""Base adapter building SQL statements for table operations."""

import logging
import warnings
from abc import ABC, abstractmethod
from typing import Optional

from mariadb_helper.exceptions import PartialIdentifierSanitization
from mariadb_helper.models.table import Statement

logger = logging.getLogger(__name__)


def strip_terminator(value: str, terminator: str = ";") -> str:
    """Remove the statement terminator from a literal SQL fragment."""
    return value.replace(terminator, "")


def sanitize_identifier(name: str, quote_char: str = "`", terminator: str = ";") -> str:
    """
    Remove the quote character and the statement terminator from a name.

    Warns with PartialIdentifierSanitization when the name changes.
    """
    raw = str(name)
    cleaned = strip_terminator(raw.replace(quote_char, ""), terminator)
    if cleaned != raw:
        logger.warning(f"Stripped quote/terminator characters from identifier {name!r}")
        warnings.warn(
            f"Identifier {name!r} was sanitized to {cleaned!r}",
            PartialIdentifierSanitization,
            stacklevel=4,
        )
    return cleaned


def quote_identifier(name: str, quote_char: str = "`", terminator: str = ";") -> str:
    """
    Quote a table or column name.

    The quote character and the statement terminator are removed from the
    name before it is wrapped in quotes. This keeps reserved words and odd
    names from breaking a statement; it is not an injection defense.
    Colons are escaped so the quoted name is never read as a :name
    placeholder when the statement is bound.

    Args:
        name: Raw identifier supplied by the caller
        quote_char: Identifier quote character
        terminator: Statement terminator character

    Returns:
        Quoted identifier
    """
    cleaned = sanitize_identifier(name, quote_char, terminator).replace(":", "\\:")
    return f"{quote_char}{cleaned}{quote_char}"


class BaseAdapter(ABC):
    """Builds the statements behind each table operation."""

    quote_char = "`"
    terminator = ";"

    def quote(self, name: str) -> str:
        """Quote an identifier for this dialect."""
        return quote_identifier(name, self.quote_char, self.terminator)

    def table_name(self, name: str) -> str:
        """Unquoted table name as the quoted statements would address it."""
        return sanitize_identifier(name, self.quote_char, self.terminator)

    def index_name(self, field: str, prefix: str = "ndx_") -> str:
        """Quoted name of the index created for a field."""
        return self.quote(f"{prefix}{field}")

    @abstractmethod
    def list_tables(self) -> Statement:
        """Statement listing the tables in the current database."""
        ...

    @abstractmethod
    def show_columns(self, table: str, field: Optional[str] = None) -> Statement:
        """
        Statement describing the columns of a table.

        Args:
            table: Table name
            field: Restrict the result to this column

        Returns:
            Statement whose rows include Field and Type columns
        """
        ...

    @abstractmethod
    def table_sizes(self, schema: Optional[str]) -> Statement:
        """Statement listing row estimates and sizes for all tables."""
        ...

    @abstractmethod
    def catalog_row_count(self, table: str, schema: Optional[str]) -> Statement:
        """Statement reading the catalog's row estimate for one table."""
        ...

    def add_column(self, table: str, field: str, fieldtype: str) -> Statement:
        return Statement(
            text=f"ALTER TABLE {self.quote(table)} ADD COLUMN "
            f"{self.quote(field)} {strip_terminator(fieldtype, self.terminator)}"
        )

    def modify_column(self, table: str, field: str, fieldtype: str) -> Statement:
        return Statement(
            text=f"ALTER TABLE {self.quote(table)} MODIFY "
            f"{self.quote(field)} {strip_terminator(fieldtype, self.terminator)}"
        )

    def drop_column(self, table: str, field: str) -> Statement:
        return Statement(
            text=f"ALTER TABLE {self.quote(table)} DROP COLUMN {self.quote(field)}"
        )

    def add_auto_id(
        self, table: str, field: str = "id", pk: bool = True, unique: bool = True
    ) -> Statement:
        """
        Statement adding an auto-increment integer key with an index.

        Args:
            table: Table receiving the column
            field: Name of the new column
            pk: Make the column the primary key
            unique: Make the index unique

        Returns:
            ALTER TABLE statement
        """
        column = self.quote(field)
        parts = [
            f"ALTER TABLE {self.quote(table)}",
            f"ADD {column} INT UNSIGNED NOT NULL AUTO_INCREMENT",
        ]
        if pk:
            parts.append("PRIMARY KEY")
        text = " ".join(parts) + ", ADD " + ("UNIQUE " if unique else "")
        text += f"INDEX {self.index_name(field)} ({column})"
        return Statement(text=text)

    def count_rows(self, table: str) -> Statement:
        return Statement(text=f"SELECT COUNT(*) FROM {self.quote(table)}")

    def select_all(self, table: str, limit: Optional[int] = None) -> Statement:
        """Statement selecting every column, optionally capped at limit rows."""
        text = f"SELECT * FROM {self.quote(table)}"
        if limit is not None and limit > 0:
            text += f" LIMIT {int(limit)}"
        return Statement(text=text)

    def drop_table(self, table: str, if_exists: bool = False) -> Statement:
        clause = "DROP TABLE IF EXISTS" if if_exists else "DROP TABLE"
        return Statement(text=f"{clause} {self.quote(table)}")
