"""
Tests for cart key generation, persistence and replacement.
"""

import json

import pytest

from logistica.exceptions import InvalidSessionKey
from logistica.session_key import STORAGE_KEY, KeyFileStorage, SessionKeyStore, generate_key


@pytest.fixture
def key_file(tmp_path):
    return tmp_path / "state" / "session.json"


@pytest.fixture
def store(key_file):
    return SessionKeyStore(KeyFileStorage(key_file))


class TestGenerateKey:
    def test_key_is_short_and_url_safe(self):
        key = generate_key()
        assert len(key) == 8
        assert key.isalnum()

    def test_keys_differ(self):
        assert len({generate_key() for _ in range(50)}) == 50


class TestSessionKeyStore:
    """Test cases for SessionKeyStore."""

    def test_creates_and_persists_key_on_first_use(self, store, key_file):
        key = store.get_or_create_key()
        assert len(key) == 8
        assert json.loads(key_file.read_text(encoding="utf-8")) == {STORAGE_KEY: key}

    def test_get_or_create_is_idempotent(self, store):
        assert store.get_or_create_key() == store.get_or_create_key()

    def test_reuses_persisted_key(self, key_file):
        """A key written by a previous run survives restarts."""
        first = SessionKeyStore(KeyFileStorage(key_file)).get_or_create_key()
        second = SessionKeyStore(KeyFileStorage(key_file)).get_or_create_key()
        assert first == second

    def test_set_key_trims_and_persists(self, store, key_file):
        assert store.set_key("  a1b2c3d4 ") == "a1b2c3d4"
        assert store.active_key == "a1b2c3d4"
        assert SessionKeyStore(KeyFileStorage(key_file)).get_or_create_key() == "a1b2c3d4"

    @pytest.mark.parametrize("bad", ["", "   ", None])
    def test_set_key_rejects_blank(self, store, bad):
        original = store.get_or_create_key()
        with pytest.raises(InvalidSessionKey):
            store.set_key(bad)
        assert store.active_key == original

    def test_regenerate_replaces_key_and_notifies(self, store, key_file):
        store.set_key("a1b2c3d4")
        seen = []
        store.on_regenerate(seen.append)

        new_key = store.regenerate_key()

        assert new_key != "a1b2c3d4"
        assert store.active_key == new_key
        assert seen == [new_key]
        assert json.loads(key_file.read_text(encoding="utf-8"))[STORAGE_KEY] == new_key

    def test_unreadable_file_is_replaced(self, key_file):
        key_file.parent.mkdir(parents=True)
        key_file.write_text("{not json", encoding="utf-8")
        store = SessionKeyStore(KeyFileStorage(key_file))
        key = store.get_or_create_key()
        assert json.loads(key_file.read_text(encoding="utf-8")) == {STORAGE_KEY: key}
