import os
from typing import Optional

from pydantic import BaseModel, Field, model_validator

# Environment variables only provide defaults; CLI flags override them.
ENV_PREFIX = "REPORTING_"

DEFAULT_MONGO_URI = "mongodb://localhost:27017"


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(ENV_PREFIX + name)
    if value is None:
        return default
    return value.lower() in ("true", "1", "t", "yes")


class Settings(BaseModel):
    """Process configuration, built once at startup and handed to ``create_app``."""

    verbose: bool = Field(False, description="Verbose (debug) logging")
    listen_addr: str = Field(":5000", description="Address to listen on, host:port")
    mongo_uri: str = Field(DEFAULT_MONGO_URI, description="Connection string for the MongoDB server")

    tls: bool = Field(False, description="Serve over HTTPS")
    cert_file: str = Field("", description="Certificate file (e.g. cert.pem)")
    cert_key_file: str = Field("", description="Certificate private key file (e.g. key.pem)")

    database_name: str = "coffee-demo"
    orders_collection: str = "orders"
    accounts_collection: str = "employeeAccounts"

    report_order_count: int = Field(5, ge=1, description="Number of recent orders in a report")
    db_timeout_seconds: float = Field(5.0, gt=0, description="Deadline shared by all queries of one report")

    @model_validator(mode="after")
    def _check_tls_files(self) -> "Settings":
        if self.tls and not (self.cert_file and self.cert_key_file):
            raise ValueError("TLS is enabled but the certificate file and key file were not both supplied")
        return self

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        values = {
            "verbose": _env_flag("VERBOSE"),
            "listen_addr": os.getenv(ENV_PREFIX + "ADDR", ":5000"),
            "mongo_uri": os.getenv(ENV_PREFIX + "MONGO", DEFAULT_MONGO_URI),
            "tls": _env_flag("TLS"),
            "cert_file": os.getenv(ENV_PREFIX + "CERT", ""),
            "cert_key_file": os.getenv(ENV_PREFIX + "CERTKEY", ""),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    def bind(self) -> tuple[str, int]:
        """
        Splits ``listen_addr`` into a host and a port.

        An empty host (``":5000"``) listens on all interfaces.
        """
        host, sep, port = self.listen_addr.rpartition(":")
        if not sep or not port.isdigit():
            raise ValueError(f"Invalid listen address: {self.listen_addr!r}")
        return (host.strip("[]") or "0.0.0.0"), int(port)

    def certificate_files(self) -> tuple[Optional[str], Optional[str]]:
        if not self.tls:
            return None, None
        return self.cert_file, self.cert_key_file
