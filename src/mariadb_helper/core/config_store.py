"""Reading and writing the YAML connection configuration file."""

import logging
import os
import warnings
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from mariadb_helper.exceptions import (
    ConfigurationWarning,
    InvalidConfiguration,
    MissingConfigFile,
)
from mariadb_helper.models.config import PERSISTED_FIELDS, ConnectionConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.db_conf.yml"
CONFIG_PATH_ENV = "DB_CONF_FILE"

PathLike = Union[str, Path]


def default_config_path() -> Path:
    """Config file location, overridable with the DB_CONF_FILE variable."""
    return Path(os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH).expanduser()


def _resolve(path: Optional[PathLike]) -> Path:
    if path is None:
        return default_config_path()
    return Path(path).expanduser()


def write_config(path: Optional[PathLike] = None, **fields: Any) -> Path:
    """
    Write connection settings to a YAML file.

    The password is never written, even when passed in. The written file is
    a template until the user fills it in, so a ConfigurationWarning is
    emitted telling them to edit it.

    Args:
        path: File to write (default: ~/.db_conf.yml)
        **fields: username, host, dbname, sslmode, sslca, sslkey, sslcert, port

    Returns:
        Path of the written file
    """
    conf_file = _resolve(path)
    fields.pop("password", None)

    data = {name: fields.get(name) for name in PERSISTED_FIELDS}
    if fields.get("port") is not None:
        data["port"] = fields["port"]

    conf_file.parent.mkdir(parents=True, exist_ok=True)
    with open(conf_file, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Wrote database configuration to {conf_file}")
    warnings.warn(
        f"Edit {conf_file} for correct database settings.",
        ConfigurationWarning,
        stacklevel=2,
    )
    return conf_file


def _parse(conf_file: Path, raw: Any) -> Optional[ConnectionConfig]:
    if not isinstance(raw, dict) or not raw:
        logger.warning(f"Configuration file {conf_file} is empty or not a mapping")
        return None

    known = set(ConnectionConfig.model_fields)
    unknown = sorted(str(k) for k in raw if k not in known)
    if unknown:
        logger.warning(f"Ignoring unknown keys in {conf_file}: {', '.join(unknown)}")

    try:
        return ConnectionConfig(**{k: v for k, v in raw.items() if k in known})
    except ValidationError as e:
        raise InvalidConfiguration(f"Invalid settings in {conf_file}: {e}") from e


def read_config(
    path: Optional[PathLike] = None, **fallback: Any
) -> Optional[ConnectionConfig]:
    """
    Read connection settings from a YAML file.

    If the file does not exist, one is created from the fallback fields and
    None is returned so the caller knows to edit it, unless the fallback
    already names a username and host.

    Args:
        path: File to read (default: ~/.db_conf.yml)
        **fallback: Fields used to create the file when it is missing

    Returns:
        The parsed configuration, or None if no usable file was found

    Raises:
        InvalidConfiguration: If the file holds values that fail validation
    """
    conf_file = _resolve(path)

    if conf_file.exists():
        with open(conf_file, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
        config = _parse(conf_file, raw)
        if config is not None:
            logger.debug(f"Read database configuration from {conf_file}")
        return config

    logger.warning(f"Configuration file {conf_file} does not exist. Creating one...")
    write_config(conf_file, **fallback)

    if fallback.get("username") and fallback.get("host"):
        return _parse(conf_file, dict(fallback))
    return None


def load_config(path: Optional[PathLike] = None, **fallback: Any) -> ConnectionConfig:
    """
    Read connection settings, raising instead of returning None.

    Raises:
        MissingConfigFile: If the file was missing and a template was written
        InvalidConfiguration: If the file exists but holds no settings
    """
    conf_file = _resolve(path)
    existed = conf_file.exists()
    config = read_config(conf_file, **fallback)
    if config is None:
        if existed:
            raise InvalidConfiguration(f"Can't read settings from {conf_file}")
        raise MissingConfigFile(str(conf_file))
    return config
