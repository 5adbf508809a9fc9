"""Statement builders for specific database dialects."""

from .base import BaseAdapter, quote_identifier, sanitize_identifier, strip_terminator
from .mariadb import MariaDBAdapter
from ..models.config import ConnectionConfig

__all__ = [
    "BaseAdapter",
    "MariaDBAdapter",
    "create_adapter",
    "quote_identifier",
    "sanitize_identifier",
    "strip_terminator",
]


def create_adapter(config: ConnectionConfig) -> BaseAdapter:
    """
    Factory function to create the statement adapter for a config.

    Args:
        config: Connection configuration

    Returns:
        Adapter instance

    Raises:
        ValueError: If the dialect is not supported
    """
    dialect = config.dialect

    adapters = {
        "mysql": MariaDBAdapter,
        "mariadb": MariaDBAdapter,
    }

    adapter_class = adapters.get(dialect)

    if adapter_class is None:
        raise ValueError(
            f"Unsupported database dialect: {dialect}. "
            f"Supported dialects: {', '.join(adapters.keys())}"
        )

    return adapter_class()
