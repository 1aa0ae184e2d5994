import os
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9091
DEFAULT_RPC_PATH = "/transmission/rpc"


class Config:
    """Connection and logging settings for the Transmission client."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        host = os.getenv("TRANSMISSION_HOST", DEFAULT_HOST)
        if not host or not host.strip():
            raise ConfigurationError("TRANSMISSION_HOST cannot be empty")
        self.host = host.strip()

        try:
            self.port = int(os.getenv("TRANSMISSION_PORT", str(DEFAULT_PORT)))
            if self.port < 1 or self.port > 65535:
                raise ValueError("TRANSMISSION_PORT must be between 1 and 65535")
        except ValueError as e:
            raise ConfigurationError(f"Invalid TRANSMISSION_PORT value: {e}")

        username = os.getenv("TRANSMISSION_USERNAME", "")
        self.username: Optional[str] = username.strip() if username and username.strip() else None
        self.password = os.getenv("TRANSMISSION_PASSWORD", "")

        self.enable_tls = os.getenv("TRANSMISSION_TLS", "false").strip().lower() == "true"

        rpc_path = os.getenv("TRANSMISSION_RPC_PATH", DEFAULT_RPC_PATH).strip()
        if not rpc_path.startswith("/"):
            raise ConfigurationError(f"TRANSMISSION_RPC_PATH must start with '/' (got: {rpc_path})")
        self.rpc_path = rpc_path

        try:
            self.timeout = float(os.getenv("TRANSMISSION_TIMEOUT", "30"))
            if self.timeout <= 0:
                raise ValueError("TRANSMISSION_TIMEOUT must be positive")
        except ValueError as e:
            raise ConfigurationError(f"Invalid TRANSMISSION_TIMEOUT value: {e}")

        session_id = os.getenv("TRANSMISSION_SESSION_ID", "")
        self.session_id: Optional[str] = session_id.strip() or None

        log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
        if log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ConfigurationError(f"LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL (got: {log_level})")
        self.log_level = log_level

        log_file = os.getenv("LOG_FILE", "")
        self.log_file: Optional[str] = log_file.strip() or None


def load_config(env_file: Optional[str] = None) -> Config:
    """Load configuration from a .env file (if any) and the environment.

    Values already present in the process environment win over the file.
    """
    load_dotenv(dotenv_path=env_file, override=False)
    return Config()
