"""
Tests for the per-browser-session client of the Streamlit page.

These tests verify that:
- each browser session gets its own client, key and cart
- reruns within a session reuse the same client
- the cart key is kept in the session's query string
- the page shows the active key in a copyable code block
"""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from streamlit.testing.v1 import AppTest

from logistica import runtime
from logistica.session_key import STORAGE_KEY
from streamlit_app.utils import session
from streamlit_app.utils.session import QueryParamKeyStorage, get_or_create_client


def browser_session(query_params=None):
    """Minimal stand-in for the streamlit module as one browser session sees it."""
    return SimpleNamespace(session_state={}, query_params=dict(query_params or {}))


@pytest.fixture(autouse=True)
def patched_socketio(socket_factory):
    with patch("logistica.channel.socketio.Client", side_effect=socket_factory):
        yield socket_factory
    runtime.shutdown()


class TestGetOrCreateClient:
    def test_reruns_reuse_the_session_client(self):
        tab = browser_session()
        with patch.object(session, "st", tab):
            first = get_or_create_client()
            second = get_or_create_client()
        assert first is second

    def test_sessions_do_not_share_state(self, socket_factory):
        tab_a, tab_b = browser_session(), browser_session()
        with patch.object(session, "st", tab_a):
            client_a = get_or_create_client()
        with patch.object(session, "st", tab_b):
            client_b = get_or_create_client()

        assert client_a is not client_b
        assert client_a.session_key != client_b.session_key
        assert client_a.notifications is not client_b.notifications
        assert len(socket_factory.created) == 2

        socket_a, socket_b = socket_factory.created
        socket_a.run_tasks()
        socket_b.run_tasks()
        socket_a.fire("carrinho_atualizado", {"chave": client_a.session_key, "produtos": [{"id": 1}]})
        client_a.reconciler.pump()
        client_b.reconciler.pump()

        assert [item.id for item in client_a.reconciler.cart] == [1]
        assert client_b.reconciler.cart == ()

    def test_key_is_written_to_query_string(self):
        tab = browser_session()
        with patch.object(session, "st", tab):
            client = get_or_create_client()
        assert tab.query_params[STORAGE_KEY] == client.session_key

    def test_key_from_query_string_is_reused(self):
        tab = browser_session({STORAGE_KEY: "a1b2c3d4"})
        with patch.object(session, "st", tab):
            client = get_or_create_client()
        assert client.session_key == "a1b2c3d4"

    def test_shutdown_closes_every_session(self):
        tab_a, tab_b = browser_session(), browser_session()
        with patch.object(session, "st", tab_a):
            client_a = get_or_create_client()
        with patch.object(session, "st", tab_b):
            client_b = get_or_create_client()

        runtime.shutdown()

        assert client_a.channel.closed
        assert client_b.channel.closed


class TestQueryParamKeyStorage:
    def test_set_then_get(self):
        tab = browser_session()
        with patch.object(session, "st", tab):
            storage = QueryParamKeyStorage()
            storage.set(STORAGE_KEY, "a1b2c3d4")
            assert storage.get(STORAGE_KEY) == "a1b2c3d4"

    def test_empty_value_counts_as_missing(self):
        with patch.object(session, "st", browser_session({STORAGE_KEY: ""})):
            assert QueryParamKeyStorage().get(STORAGE_KEY) is None


class TestPage:
    """Render the page headless and check the key panel."""

    def test_active_key_is_copyable(self):
        app_path = Path(__file__).resolve().parent.parent / "streamlit_app" / "app.py"
        at = AppTest.from_file(str(app_path), default_timeout=10)
        at.query_params[STORAGE_KEY] = "a1b2c3d4"
        at.run()

        assert not at.exception
        assert [code.value for code in at.code] == ["a1b2c3d4"]
