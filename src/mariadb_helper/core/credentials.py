"""Password resolution for a session."""

import getpass
import logging
import os
import sys
from typing import Callable, Optional

from dotenv import load_dotenv

from mariadb_helper.exceptions import CredentialUnavailable
from mariadb_helper.models.config import ConnectionConfig

logger = logging.getLogger(__name__)

PASSWORD_ENV = "DB_PASSWORD"


def _stdin_is_interactive() -> bool:
    return sys.stdin is not None and sys.stdin.isatty()


def resolve_password(
    config: ConnectionConfig,
    prompt: Optional[Callable[[str], str]] = None,
    env_var: str = PASSWORD_ENV,
    interactive: Optional[bool] = None,
) -> ConnectionConfig:
    """
    Make sure a config holds a password.

    Sources, in order: the config itself, the environment variable (a .env
    file is loaded first), then an interactive non-echoing prompt. The
    password only lives on the returned in-memory copy.

    Args:
        config: Configuration that may lack a password
        prompt: Prompt function (default: getpass.getpass)
        env_var: Environment variable holding the password
        interactive: Force prompting on or off (default: stdin is a TTY)

    Returns:
        Configuration holding a password

    Raises:
        CredentialUnavailable: If no source produced a password
    """
    if config.password is not None:
        return config

    load_dotenv()
    password = os.getenv(env_var)
    if password:
        logger.debug(f"Using database password from ${env_var}")
        return config.with_password(password)

    if interactive is None:
        interactive = _stdin_is_interactive()

    if not interactive:
        logger.error("No database password configured and no terminal to prompt on")
        raise CredentialUnavailable(
            f"No password available for {config.username or 'the database user'}. "
            f"Set {env_var} or run interactively to be prompted."
        )

    ask = prompt or getpass.getpass
    label = f"Password for {config.username}@{config.host}: " if config.username else "Password: "
    return config.with_password(ask(label))
