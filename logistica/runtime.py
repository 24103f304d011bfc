"""
Client runtime: wiring and process-wide lifecycle.

A LogisticsClient bundles everything one client instance needs (key store,
push channel, reconciler, query state, notifications).

- get_client() creates and starts a process-wide instance on first use and
  returns the same one afterwards. It keeps its key in the key file and suits
  a single-user process (scripts, a terminal).
- Multi-user frontends build one LogisticsClient per user session instead,
  passing their own KeyStorage.
- shutdown() closes every client started in this process; it is also
  registered with atexit.
"""

import atexit
import logging
import threading
import weakref
from pathlib import Path
from typing import Optional

import socketio

from .channel import PushChannel
from .config import BackendConfig, ClientConfig
from .notifications import NotificationCenter
from .reconciler import CartReconciler
from .search import MovementSearch, ProductLookup
from .session_key import KeyFileStorage, KeyStorage, SessionKeyStore

logger = logging.getLogger(__name__)

_client: Optional["LogisticsClient"] = None
_client_lock = threading.RLock()
_live_clients: "weakref.WeakSet[LogisticsClient]" = weakref.WeakSet()
_logging_configured = False


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once, using LOG_LEVEL unless a level is given."""
    global _logging_configured
    if _logging_configured:
        return
    logging.basicConfig(
        level=level or ClientConfig.get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _logging_configured = True


class LogisticsClient:
    """One client instance: a cart key, a push channel and the state built on them."""

    def __init__(
        self,
        realtime_url: Optional[str] = None,
        key_file: Optional[Path] = None,
        socket_client: Optional[socketio.Client] = None,
        storage: Optional[KeyStorage] = None,
    ):
        if storage is None:
            storage = KeyFileStorage(key_file or ClientConfig.get_key_file())
        self.notifications = NotificationCenter()
        self.store = SessionKeyStore(storage)
        self.channel = PushChannel(realtime_url or BackendConfig.get_realtime_url(), client=socket_client)
        self.reconciler = CartReconciler(self.store, self.channel, self.notifications)
        self.movements = MovementSearch(self.notifications)
        self.product = ProductLookup(self.notifications)
        self._started = False

    @property
    def session_key(self) -> str:
        return self.store.active_key

    @property
    def connected(self) -> bool:
        return self.channel.connected

    def start(self) -> None:
        """Initialise the cart key and start connecting the push channel."""
        if self._started:
            return
        self.store.get_or_create_key()
        self.channel.connect()
        self._started = True
        with _client_lock:
            _live_clients.add(self)

    def close(self) -> None:
        self.channel.close()
        with _client_lock:
            _live_clients.discard(self)

    def __enter__(self) -> "LogisticsClient":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def get_client() -> LogisticsClient:
    """Return the process-wide client, creating and starting it on first use."""
    global _client
    with _client_lock:
        if _client is None:
            configure_logging()
            client = LogisticsClient()
            client.start()
            _client = client
            logger.info("Logistics client started with cart key %s", client.session_key)
        return _client


def shutdown() -> None:
    """Close every started client, the process-wide one included. Safe to call more than once."""
    global _client
    with _client_lock:
        _client = None
        clients = list(_live_clients)
    for client in clients:
        client.close()


atexit.register(shutdown)
