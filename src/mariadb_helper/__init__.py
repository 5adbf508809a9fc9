"""
mariadb_helper - Table-level helpers for MariaDB

Read and write tables as pandas DataFrames, inspect and alter columns and add
auto-increment keys without managing connections by hand. Connection
settings come from a YAML file (default ~/.db_conf.yml); every operation opens
its own connection and closes it before returning.
"""

__version__ = "0.3.0"

from .core.config_store import read_config, write_config
from .exceptions import (
    ConfigurationWarning,
    CredentialUnavailable,
    DatabaseConnectionError,
    ExecutionError,
    InvalidConfiguration,
    MariaDBHelperError,
    MissingConfigFile,
    PartialIdentifierSanitization,
)
from .helper import MariaDBHelper
from .models.config import ConnectionConfig
from .models.table import Statement, TableShape

__all__ = [
    "MariaDBHelper",
    "ConnectionConfig",
    "Statement",
    "TableShape",
    "read_config",
    "write_config",
    "MariaDBHelperError",
    "MissingConfigFile",
    "InvalidConfiguration",
    "CredentialUnavailable",
    "DatabaseConnectionError",
    "ExecutionError",
    "ConfigurationWarning",
    "PartialIdentifierSanitization",
]
