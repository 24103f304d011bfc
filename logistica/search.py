"""
Query state for the movement search and product lookup panels.

Both holders call the stateless api_client functions and keep the last result
for presentation. Failures never escape: they become a notification and the
previous state is kept.

Overlapping movement searches are ordered by a monotonic request sequence:
each search takes a ticket when it starts, and its rows are only applied if no
newer search has started since. A slow response to an old filter therefore
cannot overwrite the rows of a newer one.
"""

import itertools
import logging
from typing import Callable, List, Optional, Union

from . import api_client
from .exceptions import BackendError, MissingSearchValue
from .models import Movement, ProductRecord
from .notifications import ERROR_SECONDS, NotificationCenter

logger = logging.getLogger(__name__)


class MovementSearch:
    """Holds the rows of the most recent movement search."""

    def __init__(
        self,
        notifications: NotificationCenter,
        fetch: Callable[..., List[Movement]] = api_client.search_movements,
    ):
        self._notifications = notifications
        self._fetch = fetch
        self._sequence = itertools.count(1)
        self._latest = 0
        self.results: List[Movement] = []
        self.loading = False

    def begin(self) -> int:
        """Start a new search and return its ticket."""
        self._latest = next(self._sequence)
        self.loading = True
        return self._latest

    def is_current(self, ticket: int) -> bool:
        return ticket == self._latest

    def complete(self, ticket: int, rows: List[Movement]) -> bool:
        """
        Apply the rows of a finished search.

        Returns:
            True if applied, False if a newer search superseded this one.
        """
        if not self.is_current(ticket):
            logger.debug("Discarding stale movement search #%d (latest is #%d)", ticket, self._latest)
            return False
        self.results = list(rows)
        self.loading = False
        return True

    def fail(self, ticket: int, message: str) -> None:
        if not self.is_current(ticket):
            return
        self.loading = False
        self._notifications.notify(message, ERROR_SECONDS)

    def run(
        self,
        id: Optional[Union[int, str]] = None,
        ean: Optional[str] = None,
        material: Optional[str] = None,
    ) -> List[Movement]:
        """Search movements with the given filters and return the current rows."""
        ticket = self.begin()
        try:
            rows = self._fetch(id=id, ean=ean, material=material)
        except BackendError as e:
            logger.warning("Movement search failed: %s", e.message)
            self.fail(ticket, e.message)
            return self.results
        self.complete(ticket, rows)
        return self.results


class ProductLookup:
    """Holds the outcome of the most recent product lookup."""

    def __init__(
        self,
        notifications: NotificationCenter,
        fetch: Callable[[Union[str, int]], ProductRecord] = api_client.lookup_product,
    ):
        self._notifications = notifications
        self._fetch = fetch
        self.produto: Optional[ProductRecord] = None
        self.error: Optional[str] = None
        self.loading = False

    def lookup(self, valor: Optional[Union[str, int]]) -> Optional[ProductRecord]:
        """
        Look up a product by material code or EAN.

        Args:
            valor: Value typed by the user

        Returns:
            The product, or None on validation or request failure (the reason
            is kept in `error` and shown as a notification).
        """
        self.produto = None
        self.error = None
        try:
            if valor is None or (isinstance(valor, str) and not valor.strip()):
                raise MissingSearchValue("Enter a material code or EAN.")
            if isinstance(valor, str):
                valor = valor.strip()
            self.loading = True
            try:
                self.produto = self._fetch(valor)
            finally:
                self.loading = False
        except (MissingSearchValue, BackendError) as e:
            logger.info("Product lookup failed: %s", e.message)
            self.error = e.message
            self._notifications.notify(e.message, ERROR_SECONDS)
        return self.produto
