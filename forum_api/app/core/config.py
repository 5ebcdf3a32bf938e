"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
server can be started without any configuration at all; override them
via environment variables in a real deployment.
"""

import os
from dataclasses import dataclass
from pathlib import Path


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = "Forum API"
    api_version: str = "1.0.0"
    log_level: str = "INFO"
    log_file: str = ""

    # Raw TCP transport: one JSON request per connection.
    tcp_host: str = "127.0.0.1"
    tcp_port: int = 34567

    # HTTP bridge exposing the same actions through FastAPI.
    http_enabled: bool = True
    http_host: str = "127.0.0.1"
    http_port: int = 8000

    # Directory holding one JSON snapshot per entity type.  Relative
    # paths are resolved against the project root by ``get_data_dir``.
    data_dir: str = "data"

    # Seconds a connection may stay idle while its request is read.
    connection_timeout: float = 10.0
    max_request_bytes: int = 1024 * 1024

    password_hash_iterations: int = 100_000

    @classmethod
    def from_env(cls) -> "Settings":
        """Build a fresh ``Settings`` from the current environment."""
        return cls(
            project_name=os.getenv("PROJECT_NAME", "Forum API"),
            api_version=os.getenv("API_VERSION", "1.0.0"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE", ""),
            tcp_host=os.getenv("TCP_HOST", "127.0.0.1"),
            tcp_port=int(os.getenv("TCP_PORT", "34567")),
            http_enabled=_env_bool("HTTP_ENABLED", "true"),
            http_host=os.getenv("HTTP_HOST", "127.0.0.1"),
            http_port=int(os.getenv("HTTP_PORT", "8000")),
            data_dir=os.getenv("DATA_DIR", "data"),
            connection_timeout=float(os.getenv("CONNECTION_TIMEOUT", "10")),
            max_request_bytes=int(os.getenv("MAX_REQUEST_BYTES", str(1024 * 1024))),
            password_hash_iterations=int(os.getenv("PASSWORD_HASH_ITERATIONS", "100000")),
        )

    def get_data_dir(self) -> Path:
        """Resolve ``data_dir``; absolute paths are used as is."""
        data_dir = Path(self.data_dir)
        if data_dir.is_absolute():
            return data_dir
        base_dir = Path(__file__).resolve().parent.parent.parent.parent
        return (base_dir / data_dir).resolve()


# Instantiated once so other modules can import it without repeatedly
# reading environment variables.  Set variables before importing.
settings = Settings.from_env()
