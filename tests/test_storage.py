"""
Tests for persistence backends.
"""

import json

import httpx
import pytest

from quiz_engine.storage import (
    CloudflareKVStore,
    JSONFileStore,
    MemoryStore,
    StorageAuthenticationError,
    StorageError,
    get_store,
)
from quiz_engine.state import session_key_for


class TestMemoryStore:
    """Tests for MemoryStore."""

    def test_get_set_remove(self):
        """Test basic operations."""
        store = MemoryStore()

        assert store.get("k") is None
        store.set("k", "v")
        assert store.get("k") == "v"
        store.remove("k")
        assert store.get("k") is None

    def test_remove_absent(self):
        """Test removing a missing key is fine."""
        MemoryStore().remove("nope")

    def test_initial_values(self):
        """Test seeding the store."""
        store = MemoryStore({"a": "1"})

        assert store.get("a") == "1"


class TestJSONFileStore:
    """Tests for JSONFileStore."""

    def test_persists_across_instances(self, tmp_path):
        """Test values survive a new store on the same file."""
        path = tmp_path / "state.json"
        JSONFileStore(path).set("k", "v")

        assert JSONFileStore(path).get("k") == "v"

    def test_keeps_other_keys(self, tmp_path):
        """Test writing one key leaves others alone."""
        store = JSONFileStore(tmp_path / "state.json")
        store.set("a", "1")
        store.set("b", "2")
        store.remove("a")

        assert store.get("a") is None
        assert store.get("b") == "2"

    def test_missing_file(self, tmp_path):
        """Test reading before anything was written."""
        assert JSONFileStore(tmp_path / "none.json").get("k") is None

    def test_creates_parent_directory(self, tmp_path):
        """Test nested paths are created on write."""
        path = tmp_path / "nested" / "dir" / "state.json"
        JSONFileStore(path).set("k", "v")

        assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}

    def test_no_temp_files_left(self, tmp_path):
        """Test writes don't leave temporary files behind."""
        store = JSONFileStore(tmp_path / "state.json")
        store.set("k", "v")
        store.set("k", "w")

        assert [p.name for p in tmp_path.iterdir()] == ["state.json"]

    def test_corrupt_file(self, tmp_path):
        """Test a corrupt file raises StorageError."""
        path = tmp_path / "state.json"
        path.write_text("{oops", encoding="utf-8")

        with pytest.raises(StorageError):
            JSONFileStore(path).get("k")

    def test_non_object_file(self, tmp_path):
        """Test a file holding something other than an object."""
        path = tmp_path / "state.json"
        path.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(StorageError):
            JSONFileStore(path).get("k")


class FakeKV:
    """In-memory stand-in for the Cloudflare KV REST API."""

    def __init__(self, status_override=None):
        self.values = {}
        self.requests = []
        self.status_override = status_override

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_override:
            return httpx.Response(self.status_override)
        key = request.url.path.rsplit("/values/", 1)[1]
        if request.method == "GET":
            if key not in self.values:
                return httpx.Response(404, json={"success": False})
            return httpx.Response(200, text=self.values[key])
        if request.method == "PUT":
            self.values[key] = request.content.decode("utf-8")
            return httpx.Response(200, json={"success": True})
        if request.method == "DELETE":
            self.values.pop(key, None)
            return httpx.Response(200, json={"success": True})
        return httpx.Response(405)


def make_kv_store(fake: FakeKV) -> CloudflareKVStore:
    return CloudflareKVStore(
        api_token="token",
        account_id="acct",
        namespace_id="ns",
        transport=httpx.MockTransport(fake),
    )


class TestCloudflareKVStore:
    """Tests for CloudflareKVStore."""

    def test_round_trip(self):
        """Test set, get and remove through the REST API."""
        fake = FakeKV()
        store = make_kv_store(fake)

        store.set("quiz-state-main", '{"index": 1}')
        assert store.get("quiz-state-main") == '{"index": 1}'
        store.remove("quiz-state-main")
        assert store.get("quiz-state-main") is None

    def test_request_shape(self):
        """Test URL and auth header."""
        fake = FakeKV()
        make_kv_store(fake).set("k", "v")

        request = fake.requests[0]
        assert request.method == "PUT"
        assert str(request.url) == (
            "https://api.cloudflare.com/client/v4/accounts/acct/storage/kv/namespaces/ns/values/k"
        )
        assert request.headers["Authorization"] == "Bearer token"

    def test_key_is_percent_encoded(self):
        """Test reserved characters in a key stay inside the key's path segment."""
        fake = FakeKV()
        store = make_kv_store(fake)

        store.set(session_key_for("shop/quiz?v=2#a%b"), "x")

        request = fake.requests[0]
        assert request.url.raw_path == (
            b"/client/v4/accounts/acct/storage/kv/namespaces/ns/values/"
            b"quiz-state-shop%2Fquiz%3Fv%3D2%23a%25b"
        )
        assert request.url.query == b""
        assert store.get("quiz-state-shop/quiz?v=2#a%b") == "x"

    def test_missing_key_is_none(self):
        """Test a 404 reads as absent."""
        assert make_kv_store(FakeKV()).get("missing") is None

    def test_auth_failure(self):
        """Test 401/403 raise StorageAuthenticationError."""
        store = make_kv_store(FakeKV(status_override=403))

        with pytest.raises(StorageAuthenticationError):
            store.get("k")

    def test_server_error(self):
        """Test 5xx raise StorageError."""
        store = make_kv_store(FakeKV(status_override=500))

        with pytest.raises(StorageError):
            store.set("k", "v")

    def test_missing_token(self, monkeypatch):
        """Test missing credentials are reported on first use."""
        monkeypatch.delenv("CLOUDFLARE_API_TOKEN", raising=False)
        store = CloudflareKVStore(account_id="acct", namespace_id="ns")

        with pytest.raises(StorageAuthenticationError, match="CLOUDFLARE_API_TOKEN"):
            store.get("k")

    def test_close(self):
        """Test closing releases the client."""
        store = make_kv_store(FakeKV())
        store.get("k")
        store.close()

        assert store._client is None


class TestGetStore:
    """Tests for the get_store factory."""

    def test_memory(self):
        """Test memory backend."""
        assert isinstance(get_store("memory"), MemoryStore)

    def test_file(self, tmp_path):
        """Test file backend."""
        store = get_store("file", path=tmp_path / "s.json")

        assert isinstance(store, JSONFileStore)

    def test_unknown(self):
        """Test unknown backends are rejected."""
        with pytest.raises(ValueError, match="Unknown storage backend"):
            get_store("redis")
