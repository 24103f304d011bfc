"""
Cart reconciliation against the server-held cart.

The server owns every cart. This client only keeps a read-only cached copy
for the active key and replaces it wholesale whenever the server says so:

- a carrinho_atualizado broadcast for the active key, or
- an explicit load (GET /carrinho/{key}).

Adding an item is only a request sent over the push channel; the cart changes
when the resulting broadcast comes back. Broadcasts for any other key (another
session, or a stale one after a key change) are dropped without a trace.
"""

import logging
from typing import Callable, List, Optional, Tuple

from . import api_client
from .channel import PushChannel
from .exceptions import BackendError, InvalidSessionKey
from .models import AddItemCommand, CartItem, CartUpdated, ChannelError, InboundEvent
from .notifications import (
    CART_LOADED_SECONDS,
    CART_UPDATED_SECONDS,
    ERROR_SECONDS,
    KEY_CHANGED_SECONDS,
    NotificationCenter,
)
from .session_key import SessionKeyStore

logger = logging.getLogger(__name__)

ERROR_FALLBACK = "Error processing action"


class CartReconciler:
    """Gates inbound broadcasts by session key and keeps the cached cart."""

    def __init__(
        self,
        store: SessionKeyStore,
        channel: PushChannel,
        notifications: NotificationCenter,
        fetch_cart: Callable[[str], List[CartItem]] = api_client.fetch_cart,
    ):
        self._store = store
        self._channel = channel
        self._notifications = notifications
        self._fetch_cart = fetch_cart
        self._cart: Tuple[CartItem, ...] = ()
        store.on_regenerate(self._on_key_regenerated)

    @property
    def cart(self) -> Tuple[CartItem, ...]:
        return self._cart

    @property
    def active_key(self) -> str:
        return self._store.active_key

    def handle(self, event: InboundEvent) -> None:
        if isinstance(event, CartUpdated):
            self.on_cart_updated(event)
        elif isinstance(event, ChannelError):
            self.on_error(event)
        else:
            raise TypeError(f"Unsupported inbound event: {event!r}")

    def pump(self) -> int:
        """Apply every event queued by the push channel; returns how many."""
        events = self._channel.drain()
        for event in events:
            self.handle(event)
        return len(events)

    def on_cart_updated(self, event: CartUpdated) -> bool:
        """
        Apply a cart broadcast if it belongs to the active key.

        Returns:
            True if the cart was replaced, False if the broadcast was discarded.
        """
        active = self._store.active_key
        if event.session_key != active:
            logger.debug("Discarding cart broadcast for key %r (active key is %r)", event.session_key, active)
            return False
        self._cart = tuple(event.items)
        logger.debug("Cart for key %s replaced with %d items", active, len(self._cart))
        self._notifications.notify("Cart updated!", CART_UPDATED_SECONDS)
        return True

    def on_error(self, event: ChannelError) -> None:
        message = event.message or ERROR_FALLBACK
        logger.info("Server reported error: %s", message)
        self._notifications.notify(message, ERROR_SECONDS)

    def request_add(self, item_id: Optional[int]) -> bool:
        """
        Ask the server to add a movement to the active cart.

        Invalid ids and a disconnected channel make this a silent no-op. The
        cart is not touched; it changes when the server broadcasts.

        Returns:
            True if the command was sent.
        """
        if not item_id:
            logger.debug("Ignoring add request without an item id")
            return False
        if not self._channel.connected:
            logger.debug("Ignoring add request for item %s: channel disconnected", item_id)
            return False
        command = AddItemCommand(item_id=item_id, session_key=self._store.active_key)
        return self._channel.emit(command)

    def load_cart(self) -> bool:
        """
        Replace the cached cart with the server's cart for the active key.

        Returns:
            True on success; on failure a notification is shown and the cart is
            left as it was.
        """
        key = self._store.active_key
        try:
            items = self._fetch_cart(key)
        except BackendError as e:
            logger.warning("Loading cart for key %s failed: %s", key, e.message)
            self._notifications.notify("Error loading cart", ERROR_SECONDS)
            return False
        if self._store.active_key != key:
            logger.debug("Discarding cart load for key %s: key changed meanwhile", key)
            return False
        self._cart = tuple(items)
        self._notifications.notify("Cart loaded.", CART_LOADED_SECONDS)
        return True

    def apply_key(self, raw_key: Optional[str]) -> bool:
        """Make a user-supplied key active. The cart is not reloaded."""
        try:
            self._store.set_key(raw_key)
        except InvalidSessionKey as e:
            self._notifications.notify(e.message, ERROR_SECONDS)
            return False
        self._notifications.notify("Cart key updated.", KEY_CHANGED_SECONDS)
        return True

    def regenerate_key(self) -> str:
        key = self._store.regenerate_key()
        self._notifications.notify("New key generated.", KEY_CHANGED_SECONDS)
        return key

    def _on_key_regenerated(self, key: str) -> None:
        # A fresh key names a new, empty cart until the server says otherwise
        self._cart = ()
