"""Exception and warning types raised by mariadb-helper."""

from typing import Optional


class MariaDBHelperError(Exception):
    """Base class for all mariadb-helper errors."""


class MissingConfigFile(MariaDBHelperError):
    """Configuration file was absent; a placeholder has been written."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"Configuration file {path} did not exist. "
            f"A template was written there; edit it with your database settings."
        )


class InvalidConfiguration(MariaDBHelperError):
    """Configuration is missing a username or password."""


class CredentialUnavailable(MariaDBHelperError):
    """No password was configured and no secret source is available."""


class DatabaseConnectionError(MariaDBHelperError, ConnectionError):
    """The driver failed to open a connection to the server."""


class ExecutionError(MariaDBHelperError):
    """The server rejected a statement or query."""

    def __init__(self, message: str, statement: Optional[str] = None):
        self.statement = statement
        super().__init__(message)


class ConfigurationWarning(UserWarning):
    """The configuration file needs to be reviewed by the user."""


class PartialIdentifierSanitization(UserWarning):
    """Characters were stripped from an identifier before quoting.

    Stripping only removes the quote character and the statement terminator.
    It protects against accidental syntax breakage, not against injection.
    """
