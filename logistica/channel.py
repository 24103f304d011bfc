"""
Push channel to the realtime backend (Socket.IO).

The channel keeps one long-lived connection, separate from the request/response
API. It sends cart mutation commands out and turns inbound broadcasts into
typed events (see models.InboundEvent).

Threading model:
- python-socketio runs its handlers on its own background thread. Those
  handlers only update the connection flag and enqueue typed events.
- The owner drains the queue on its own thread (CartReconciler.pump), so cart
  handling runs one event at a time, in the order the server sent them.

Until the first connection succeeds the channel retries on its own, at a
fixed delay, and stops as soon as it is closed. After that, reconnection is
left to the Socket.IO client's own policy.
"""

import logging
import queue
import threading
from typing import Any, Callable, List, Optional

import socketio
from socketio.exceptions import BadNamespaceError
from socketio.exceptions import ConnectionError as SocketConnectionError

from .models import (
    EVENT_CART_UPDATED,
    EVENT_ERROR,
    AddItemCommand,
    CartUpdated,
    ChannelError,
    InboundEvent,
)

logger = logging.getLogger(__name__)

TRANSPORTS = ["websocket"]
CONNECT_RETRY_SECONDS = 1.0


class PushChannel:
    """
    One Socket.IO connection per client instance.

    Usage:
        with PushChannel(url) as channel:
            channel.connect()
            ...
            for event in channel.drain():
                ...
    """

    def __init__(
        self,
        url: str,
        client: Optional[socketio.Client] = None,
        retry_delay: float = CONNECT_RETRY_SECONDS,
    ):
        self.url = url
        self.retry_delay = retry_delay
        self._sio = client if client is not None else socketio.Client(reconnection=True)
        self._events: "queue.Queue[InboundEvent]" = queue.Queue()
        self._connected = False
        self._closed = False
        self._stop = threading.Event()
        self._status_listeners: List[Callable[[bool], None]] = []

        self._sio.on("connect", self._handle_connect)
        self._sio.on("disconnect", self._handle_disconnect)
        self._sio.on("connect_error", self._handle_connect_error)
        self._sio.on(EVENT_CART_UPDATED, self._handle_cart_updated)
        self._sio.on(EVENT_ERROR, self._handle_error)

    @property
    def connected(self) -> bool:
        return self._connected and not self._closed

    @property
    def closed(self) -> bool:
        return self._closed

    def on_status(self, callback: Callable[[bool], None]) -> None:
        """Register a callback invoked with the new state on every transition."""
        if callback not in self._status_listeners:
            self._status_listeners.append(callback)

    def connect(self) -> None:
        """Start connecting in the background and return immediately."""
        if self._closed:
            raise RuntimeError("Push channel is closed")
        logger.info("Connecting push channel to %s", self.url)
        self._sio.start_background_task(self._run_connect)

    def _run_connect(self) -> None:
        while not self._closed:
            try:
                self._sio.connect(self.url, transports=TRANSPORTS)
            except SocketConnectionError as e:
                if self._closed:
                    return
                logger.warning("Push channel could not connect to %s: %s", self.url, e)
                if self._stop.wait(self.retry_delay):
                    return
                continue
            if self._closed:
                # close() ran while the handshake was in flight
                self._sio.disconnect()
            return

    def emit(self, command: AddItemCommand) -> bool:
        """
        Send a command without waiting for any acknowledgement.

        Returns:
            True if the command was handed to the socket, False if the channel
            is closed or disconnected (nothing is sent in that case).
        """
        if not self.connected:
            logger.debug("Not emitting %s: channel disconnected", command.event)
            return False
        try:
            self._sio.emit(command.event, command.to_payload())
        except BadNamespaceError as e:
            # Connection dropped between the state check and the send
            logger.warning("Push channel dropped while emitting %s: %s", command.event, e)
            return False
        return True

    def drain(self) -> List[InboundEvent]:
        """Return every queued inbound event, oldest first. Always empty once closed."""
        if self._closed:
            return []
        return self._take_all()

    def _take_all(self) -> List[InboundEvent]:
        events: List[InboundEvent] = []
        while True:
            try:
                events.append(self._events.get_nowait())
            except queue.Empty:
                return events

    def close(self) -> None:
        """Tear down the connection. No event is delivered after this returns."""
        if self._closed:
            return
        self._closed = True
        self._stop.set()
        self._take_all()
        try:
            self._sio.disconnect()
            # Also aborts a reconnection loop the client may be running
            self._sio.shutdown()
        finally:
            self._set_connected(False)
            logger.info("Push channel closed")

    def __enter__(self) -> "PushChannel":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Socket.IO handlers (run on the client's background thread)

    def _set_connected(self, value: bool) -> None:
        if self._connected == value:
            return
        self._connected = value
        for callback in list(self._status_listeners):
            callback(value)

    def _handle_connect(self) -> None:
        if self._closed:
            # Late connection after close; disconnect off the read loop thread
            self._sio.start_background_task(self._sio.disconnect)
            return
        logger.info("Push channel connected")
        self._set_connected(True)

    def _handle_disconnect(self, *args: Any) -> None:
        if self._closed:
            return
        logger.info("Push channel disconnected")
        self._set_connected(False)

    def _handle_connect_error(self, data: Any = None) -> None:
        if self._closed:
            return
        logger.warning("Push channel connection error: %s", data)
        self._set_connected(False)

    def _handle_cart_updated(self, payload: Any = None) -> None:
        if self._closed:
            return
        self._events.put(CartUpdated.from_payload(payload))

    def _handle_error(self, payload: Any = None) -> None:
        if self._closed:
            return
        self._events.put(ChannelError.from_payload(payload))
