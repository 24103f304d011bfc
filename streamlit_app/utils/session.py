"""
Session management utilities for the Streamlit page.

Streamlit serves every browser session from the same process, so the client
(cart key, push channel, cart, notifications) must not be process-wide. Each
session gets its own LogisticsClient, kept in st.session_state.

The cart key lives in the page URL (?chave_carrinho=...). It survives a
reload, and a link with the key opens the same shared cart on another device.
"""

import logging
from typing import Optional

import streamlit as st

from logistica.runtime import LogisticsClient, configure_logging
from logistica.session_key import KeyStorage

logger = logging.getLogger(__name__)

CLIENT_KEY = "logistics_client"


class QueryParamKeyStorage(KeyStorage):
    """Keeps the cart key in the current page's query string."""

    def get(self, name: str) -> Optional[str]:
        value = st.query_params.get(name)
        return value if isinstance(value, str) and value else None

    def set(self, name: str, value: str) -> None:
        st.query_params[name] = value


def get_or_create_client() -> LogisticsClient:
    """
    Get or create the LogisticsClient of the current browser session.

    The first call in a session builds and starts the client; later reruns
    of the script get the same instance back.

    Returns:
        The started LogisticsClient for this session
    """
    if CLIENT_KEY not in st.session_state:
        configure_logging()
        client = LogisticsClient(storage=QueryParamKeyStorage())
        client.start()
        st.session_state[CLIENT_KEY] = client
        logger.info("Started session client with cart key %s", client.session_key)
    return st.session_state[CLIENT_KEY]
