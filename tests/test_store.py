"""Tests for the cache store and its secret backends."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from diffcache import NO_CACHE
from diffcache.cache import codec
from diffcache.cache.backends import (
    GitHubSecretBackend,
    LocalSecretBackend,
    SecretBackend,
    create_backend,
)
from diffcache.cache.store import CacheStore
from diffcache.errors import (
    CacheDecodeError,
    ConfigurationError,
    RemoteRequestError,
    RemoteWriteError,
    SaveBeforeLoadError,
)
from diffcache.github import GitHubClient
from diffcache.models import RepoPublicKey


def _encoded(mapping: dict[str, str]) -> str:
    """What the CI host hands back: the unsealed, compressed cache."""
    return codec.compress(codec.serialize(mapping))


def _backend(public_key: str, status: int = 201) -> MagicMock:
    backend = MagicMock(spec=SecretBackend)
    backend.name = "fake"
    backend.public_key.return_value = RepoPublicKey(key_id="k1", key=public_key)
    backend.write.return_value = status
    return backend


class TestLoad:
    """Tests for CacheStore.load()."""

    def test_sentinel_starts_empty_without_decoding(self, keypair, monkeypatch):
        """The no-cache sentinel never reaches the decompressor."""
        calls = []
        monkeypatch.setattr(codec, "decode_cache", lambda blob: calls.append(blob))
        store = CacheStore(NO_CACHE, _backend(keypair[0]))
        assert store.load("build") == ""
        assert store.load("anything") == ""
        assert calls == []

    def test_none_input_is_sentinel(self, keypair):
        assert CacheStore(None, _backend(keypair[0])).load("build") == ""

    def test_known_tag(self, keypair):
        store = CacheStore(_encoded({"build": "src/a.ts"}), _backend(keypair[0]))
        assert store.load("build") == "src/a.ts"

    def test_unknown_tag_in_non_empty_cache(self, keypair):
        store = CacheStore(_encoded({"build": "src/a.ts"}), _backend(keypair[0]))
        assert store.load("lint") == ""

    def test_lazy_materialization(self, keypair):
        store = CacheStore(_encoded({"build": "x"}), _backend(keypair[0]))
        assert not store.loaded
        store.load("build")
        assert store.loaded

    def test_non_ascii_cache_is_decode_error(self, keypair):
        store = CacheStore("caché-corrompu", _backend(keypair[0]))
        with pytest.raises(CacheDecodeError):
            store.load("build")

    def test_corrupt_cache_is_fatal(self, keypair):
        store = CacheStore("definitely-not-a-cache", _backend(keypair[0]))
        with pytest.raises(CacheDecodeError):
            store.load("build")


class TestSave:
    """Tests for CacheStore.save()."""

    @pytest.mark.parametrize("tag,value", [("build", "src/a.ts"), ("", ""), ("x", "y z")])
    def test_save_before_load_fails(self, keypair, tag, value):
        backend = _backend(keypair[0])
        store = CacheStore(NO_CACHE, backend)
        with pytest.raises(SaveBeforeLoadError):
            store.save(tag, value)
        backend.write.assert_not_called()

    def test_save_seals_the_whole_mapping(self, keypair):
        public, private = keypair
        backend = _backend(public)
        store = CacheStore(_encoded({"lint": "a.py"}), backend)
        store.load("build")

        store.save("build", "src/a.ts src/b.ts")

        sealed, key_id = backend.write.call_args.args
        assert key_id == "k1"
        written = codec.decode_cache(codec.unseal(sealed, private))
        assert written == {"lint": "a.py", "build": "src/a.ts src/b.ts"}
        assert store.load("build") == "src/a.ts src/b.ts"

    def test_save_replaces_tag(self, keypair):
        public, private = keypair
        backend = _backend(public, status=204)
        store = CacheStore(_encoded({"build": "old.ts"}), backend)
        store.load("build")
        store.save("build", "new.ts")
        sealed, _ = backend.write.call_args.args
        assert codec.decode_cache(codec.unseal(sealed, private)) == {"build": "new.ts"}

    def test_failed_write(self, keypair):
        store = CacheStore(NO_CACHE, _backend(keypair[0], status=422))
        store.load("build")
        with pytest.raises(RemoteWriteError, match="422"):
            store.save("build", "src/a.ts")
        assert store.load("build") == ""


class TestLocalSecretBackend:
    """Tests for the file-backed secret store."""

    def test_write_then_read(self, tmp_path: Path, public_key_file: Path):
        backend = LocalSecretBackend(tmp_path / "out" / "cache.json", public_key_file)
        assert backend.write("sealed-1", "local") == 201
        assert backend.write("sealed-2", "local") == 204
        assert backend.read() == "sealed-2"
        data = json.loads((tmp_path / "out" / "cache.json").read_text())
        assert data == {"key_id": "local", "encrypted_value": "sealed-2"}

    def test_public_key(self, tmp_path: Path, public_key_file: Path, keypair):
        key = LocalSecretBackend(tmp_path / "c.json", public_key_file).public_key()
        assert key.key == keypair[0]
        assert key.key_id == "local"

    def test_missing_public_key(self, tmp_path: Path):
        backend = LocalSecretBackend(tmp_path / "c.json", tmp_path / "missing.pub")
        with pytest.raises(ConfigurationError, match="keygen"):
            backend.public_key()


class TestGitHubSecretBackend:
    """Tests for the Actions secret store."""

    def test_public_key_fetched_once(self):
        client = MagicMock(spec=GitHubClient)
        client.get_repo_public_key.return_value = RepoPublicKey(key_id="1", key="k")
        backend = GitHubSecretBackend(client, "DIFF_CACHE")
        backend.public_key()
        backend.public_key()
        client.get_repo_public_key.assert_called_once()

    def test_write_puts_named_secret(self):
        client = MagicMock(spec=GitHubClient)
        client.put_secret.return_value = 204
        backend = GitHubSecretBackend(client, "DIFF_CACHE")
        assert backend.write("sealed", "1") == 204
        client.put_secret.assert_called_once_with("DIFF_CACHE", "sealed", "1")
        assert backend.name == "github:DIFF_CACHE"


class TestCreateBackend:
    """Tests for create_backend()."""

    def test_github_by_default(self):
        backend = create_backend("S", client=MagicMock(spec=GitHubClient))
        assert isinstance(backend, GitHubSecretBackend)

    def test_local(self, tmp_path: Path, public_key_file: Path):
        backend = create_backend("S", local_path=tmp_path / "c.json", public_key_path=public_key_file)
        assert isinstance(backend, LocalSecretBackend)

    def test_local_needs_key(self, tmp_path: Path):
        with pytest.raises(ConfigurationError, match="public-key"):
            create_backend("S", local_path=tmp_path / "c.json")

    def test_github_needs_client(self):
        with pytest.raises(ConfigurationError):
            create_backend("S")


def test_transport_failure_on_write_is_remote_write_error(keypair):
    backend = _backend(keypair[0])
    backend.write.side_effect = RemoteRequestError("Unable to write secret: timeout")
    store = CacheStore(NO_CACHE, backend)
    store.load("build")
    with pytest.raises(RemoteWriteError, match="timeout"):
        store.save("build", "a.ts")
