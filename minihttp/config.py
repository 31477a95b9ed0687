"""
minihttp/config.py — Server defaults and environment overrides.

The file-backed handlers resolve their base directories at call time, so
changing ``PUBLIC_PATH`` / ``DATA_PATH`` in the environment takes effect on
the next request without restarting anything.
"""

import os
from pathlib import Path

# Default Configuration
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
BACKLOG = 128                       # pending-connection queue depth
READ_BUFFER_SIZE = 1024             # one recv per connection, larger requests are truncated
DEFAULT_READ_TIMEOUT = 10.0         # seconds before a silent client is dropped
DRAIN_TIMEOUT = 0.1                 # seconds spent discarding unread request bytes before close
DRAIN_LIMIT = 64 * 1024             # stop discarding after this many bytes

PUBLIC_PATH_ENV = "PUBLIC_PATH"
DATA_PATH_ENV = "DATA_PATH"
ORDERS_FILE = "orders.json"

_PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_PUBLIC_PATH = str(_PACKAGE_DIR / "public")
DEFAULT_DATA_PATH = str(_PACKAGE_DIR / "data")


def public_path() -> str:
    """Directory static pages are served from."""
    return os.environ.get(PUBLIC_PATH_ENV, DEFAULT_PUBLIC_PATH)


def data_path() -> str:
    """Directory holding ``orders.json``."""
    return os.environ.get(DATA_PATH_ENV, DEFAULT_DATA_PATH)
