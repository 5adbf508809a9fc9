"""Connection configuration model."""

from typing import Any, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator
from sqlalchemy.engine import URL

from mariadb_helper.exceptions import InvalidConfiguration


# Keys written to the configuration file, in file order
PERSISTED_FIELDS = (
    "username",
    "host",
    "dbname",
    "sslmode",
    "sslca",
    "sslkey",
    "sslcert",
)

SSL_MODES = {"DISABLED", "PREFERRED", "REQUIRED", "VERIFY_CA", "VERIFY_IDENTITY"}


class ConnectionConfig(BaseModel):
    """Settings needed to open a MariaDB connection."""

    username: Optional[str] = Field(default=None, description="Database user name")
    host: Optional[str] = Field(default=None, description="Database server hostname")
    dbname: Optional[str] = Field(default=None, description="Database (schema) name")
    sslmode: Optional[str] = Field(
        default=None,
        description="TLS mode (DISABLED, PREFERRED, REQUIRED, VERIFY_CA, VERIFY_IDENTITY)",
    )
    sslca: Optional[str] = Field(default=None, description="TLS CA certificate path")
    sslkey: Optional[str] = Field(default=None, description="TLS client key path")
    sslcert: Optional[str] = Field(
        default=None, description="TLS client certificate path"
    )
    port: Optional[int] = Field(
        default=None, ge=1, le=65535, description="Server port (driver default if unset)"
    )
    password: Optional[SecretStr] = Field(
        default=None,
        exclude=True,
        description="Password, held in memory only and never written to disk",
    )
    connect_timeout: Optional[int] = Field(
        default=10,
        ge=1,
        le=3600,
        description="Driver connect timeout in seconds",
    )
    driver: str = Field(
        default="mysql+pymysql",
        description="SQLAlchemy driver name",
    )
    echo_sql: bool = Field(
        default=False,
        description="Echo SQL statements through the sqlalchemy.engine logger",
    )

    @field_validator("sslmode", mode="before")
    @classmethod
    def normalize_sslmode(cls, v: Any) -> Optional[str]:
        """Accept any case and treat blank values as unset."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        mode = str(v).strip().upper().replace("-", "_")
        if mode not in SSL_MODES:
            raise ValueError(
                f"Unsupported sslmode: {v}. Supported: {', '.join(sorted(SSL_MODES))}"
            )
        return mode

    @field_validator("sslca", "sslkey", "sslcert", mode="before")
    @classmethod
    def blank_path_is_unset(cls, v: Any) -> Optional[str]:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def has_password(self) -> bool:
        """Check whether a non-empty password is held in memory."""
        return self.password is not None and self.password.get_secret_value() != ""

    def with_password(self, password: str) -> "ConnectionConfig":
        """Return a copy of this config holding the given password."""
        return self.model_copy(update={"password": SecretStr(password)})

    def validate_credentials(self) -> None:
        """
        Check that the config can be used to connect.

        Raises:
            InvalidConfiguration: If the username or password is empty
        """
        missing = []
        if not self.username:
            missing.append("username")
        if not self.has_password:
            missing.append("password")
        if missing:
            raise InvalidConfiguration(
                f"Database configuration is missing {' and '.join(missing)}. "
                f"Edit your configuration file or supply a password."
            )

    def to_url(self) -> URL:
        """Build the SQLAlchemy URL for this config."""
        return URL.create(
            drivername=self.driver,
            username=self.username,
            password=self.password.get_secret_value() if self.password else None,
            host=self.host,
            port=self.port,
            database=self.dbname,
        )

    def connect_args(self) -> dict[str, Any]:
        """
        Build driver connect arguments, TLS settings included.

        PyMySQL cannot fall back to plaintext, so PREFERRED behaves like
        REQUIRED: the session is encrypted but the certificate is not checked.

        Returns:
            Keyword arguments for the DBAPI connect() call
        """
        args: dict[str, Any] = {}
        if self.connect_timeout:
            args["connect_timeout"] = self.connect_timeout

        if self.sslmode == "DISABLED":
            args["ssl_disabled"] = True
            return args

        if self.sslmode is None and not (self.sslca or self.sslcert or self.sslkey):
            return args

        ssl: dict[str, Any] = {}
        if self.sslca:
            ssl["ca"] = self.sslca
        if self.sslcert:
            ssl["cert"] = self.sslcert
        if self.sslkey:
            ssl["key"] = self.sslkey

        if self.sslmode in ("REQUIRED", "PREFERRED"):
            ssl["check_hostname"] = False
            ssl["verify_mode"] = False
        elif self.sslmode == "VERIFY_CA":
            ssl["check_hostname"] = False
            ssl["verify_mode"] = True
        elif self.sslmode == "VERIFY_IDENTITY":
            ssl["check_hostname"] = True
            ssl["verify_mode"] = True

        args["ssl"] = ssl
        return args

    def to_file_dict(self) -> dict[str, Any]:
        """Fields to persist, without the password."""
        data = {name: getattr(self, name) for name in PERSISTED_FIELDS}
        if self.port is not None:
            data["port"] = self.port
        return data

    @property
    def dialect(self) -> str:
        """Extract database dialect from the driver name."""
        return self.driver.split("+")[0]

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "username": "my_username",
                    "host": "db.server.example.com",
                    "dbname": "my_dbname",
                    "sslmode": "REQUIRED",
                    "sslca": "/etc/db-ssl/ca-cert.pem",
                    "sslkey": "/etc/db-ssl/client-key-pkcs1.pem",
                    "sslcert": "/etc/db-ssl/client-cert.pem",
                }
            ]
        }
    }
