"""Connection configuration and management.

ConnectionConfig is a Pydantic model for type-safe connection config.
ConnectionManager uses the adapter protocol for pool-based connection
lifecycle.
"""

from __future__ import annotations

import importlib
import logging
from contextlib import contextmanager
from typing import Any

from pydantic import BaseModel

from rowdb.core.exceptions import AdapterError

logger = logging.getLogger(__name__)


class ConnectionConfig(BaseModel):
    """Configuration for database connections.

    ``database`` is passed to the driver unchanged (a file path or
    ``:memory:`` for SQLite). ``extra`` is forwarded as keyword arguments to
    the driver's connect call.
    """

    driver: str = "sqlite"
    database: str = ""
    pool_size: int = 5
    extra: dict[str, Any] = {}


# Adapter module mapping: driver name -> (module_path, class_name)
_ADAPTER_MAP: dict[str, tuple[str, str]] = {
    "sqlite": ("rowdb.adapters.sqlite", "SqliteSyncAdapter"),
}


def load_adapter(driver: str) -> Any:
    """Load an adapter by driver name."""
    driver_lower = driver.lower()
    if driver_lower not in _ADAPTER_MAP:
        raise AdapterError(f"Unsupported database driver: {driver}")

    module_path, cls_name = _ADAPTER_MAP[driver_lower]
    try:
        module = importlib.import_module(module_path)
        return getattr(module, cls_name)()
    except (ImportError, AttributeError) as e:
        raise AdapterError(f"Failed to load adapter for '{driver}': {e}") from e


class ConnectionManager:
    """Connection manager using the SyncAdapter protocol."""

    def __init__(self, config: ConnectionConfig) -> None:
        self.config = config
        self._adapter = load_adapter(config.driver)
        self._pool: Any = None

    @property
    def adapter(self) -> Any:
        return self._adapter

    def initialize_pool(self) -> Any:
        """Initialize the connection pool."""
        if self._pool is None:
            self._pool = self._adapter.create_pool(self.config)
            logger.debug(f"Opened pool for database '{self.config.database}'")
        return self._pool

    def acquire(self) -> Any:
        """Take a connection out of the pool; pair with :meth:`release`."""
        if self._pool is None:
            self.initialize_pool()
        return self._adapter.acquire_connection(self._pool)

    def release(self, connection: Any) -> None:
        """Return a connection obtained through :meth:`acquire`."""
        if self._pool is not None:
            self._adapter.release_connection(connection, self._pool)
        else:
            connection.close()

    @contextmanager
    def get_connection(self):  # type: ignore[no-untyped-def]
        """Get a connection from the pool as a context manager."""
        connection = self.acquire()
        try:
            yield connection
        finally:
            self.release(connection)

    def close_pool(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            self._adapter.close_pool(self._pool)
            self._pool = None
            logger.debug(f"Closed pool for database '{self.config.database}'")
