"""
Configuration management for the logistics cart client.

This module centralizes environment variable loading from the .env file at the
project root. It should be imported early by both the core package and the
Streamlit frontend so that .env is loaded before anything reads the environment.

In deployed environments .env usually does not exist; load_dotenv() is then a
no-op and the platform's environment variables are used instead.

Environment Variables:
- BACKEND_URL: Optional, base URL of the logistics backend (defaults to http://127.0.0.1:5000 for local dev)
- REALTIME_URL: Optional, Socket.IO endpoint (defaults to BACKEND_URL)
- REQUEST_TIMEOUT: Optional, seconds for request/response calls (default: 10)
- CART_KEY_FILE: Optional, path of the file holding the persisted cart key
- LOG_LEVEL: Optional, logging level name (default: INFO)
"""

import os
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_BACKEND_URL = "http://127.0.0.1:5000"
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_KEY_FILE = Path.home() / ".logistica" / "session.json"


def load_env_file() -> None:
    """
    Load environment variables from .env file at project root.

    Safe to call multiple times. Existing environment variables take precedence
    over values from the file.
    """
    # logistica/config.py -> logistica/ -> project root
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env", override=False)


load_env_file()


class BackendConfig:
    """Configuration for the backend HTTP API and realtime endpoint."""

    @staticmethod
    def get_backend_url() -> str:
        """
        Get the backend base URL.

        Returns:
            URL string with any trailing slash removed.
        """
        return os.getenv("BACKEND_URL", DEFAULT_BACKEND_URL).rstrip("/")

    @staticmethod
    def get_realtime_url() -> str:
        """
        Get the Socket.IO endpoint URL.

        Returns:
            REALTIME_URL if set, otherwise the backend URL (the backend serves both).
        """
        url = os.getenv("REALTIME_URL")
        if not url:
            return BackendConfig.get_backend_url()
        return url.rstrip("/")

    @staticmethod
    def get_request_timeout() -> float:
        """Timeout in seconds for request/response calls."""
        raw = os.getenv("REQUEST_TIMEOUT")
        if not raw:
            return DEFAULT_REQUEST_TIMEOUT
        try:
            return float(raw)
        except ValueError:
            return DEFAULT_REQUEST_TIMEOUT


class ClientConfig:
    """Configuration for local client state."""

    @staticmethod
    def get_key_file() -> Path:
        """Path of the JSON file holding the persisted cart key."""
        raw = os.getenv("CART_KEY_FILE")
        if raw:
            return Path(raw).expanduser()
        return DEFAULT_KEY_FILE

    @staticmethod
    def get_log_level() -> str:
        return os.getenv("LOG_LEVEL", "INFO").upper()
