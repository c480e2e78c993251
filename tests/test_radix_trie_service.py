"""Tests for the Flask lookup service."""

import pytest

import radix_trie_service
from radix_trie_service import create_app


@pytest.fixture
def client():
    app = create_app(seed={
        "John": "person",
        "Johnny": "person",
        "Scott": "person",
        "scott": "person",
    })
    app.config["TESTING"] = True
    return app.test_client()


class TestInfo:
    """Landing page and health probe."""

    def test_index_lists_routes(self, client):
        """The landing page lists each route with its handler summary."""
        resp = client.get("/")
        assert resp.status_code == 200
        endpoints = resp.get_json()["endpoints"]
        assert endpoints["GET /fuzzy"] == "Return keys matching a search term regardless of case."
        assert "POST /insert" in endpoints
        assert "DELETE /delete" in endpoints
        assert not any("static" in route for route in endpoints)

    def test_health_reports_size(self, client):
        """The health probe reports the key count and limits."""
        body = client.get("/health").get_json()
        assert body["status"] == "ok"
        assert body["trie_size"] == 4
        assert body["max_key_length"] == radix_trie_service.MAX_KEY_LENGTH
        assert body["fuzzy_limit"] == radix_trie_service.FUZZY_LIMIT

    def test_default_seed(self):
        """Without a seed the service loads its sample names."""
        trie = create_app().config["TRIE"]
        assert len(trie) == len(radix_trie_service._SEED)
        assert trie.get("python") == "snake"
        assert trie.get("Python") == "language"
        keys = {key for key, _ in trie.fuzzy_get("PY")}
        assert {"Python", "python", "PyPI", "pytest"} <= keys


class TestSearch:
    """Exact lookup."""

    def test_found(self, client):
        """Stored keys are found with their value."""
        body = client.get("/search?q=John").get_json()
        assert body == {"key": "John", "found": True, "value": "person"}

    def test_case_sensitive(self, client):
        """Exact lookup does not fold case."""
        body = client.get("/search?q=john").get_json()
        assert body["found"] is False
        assert body["value"] is None

    def test_missing_query(self, client):
        """A blank query is a client error."""
        resp = client.get("/search?q=%20")
        assert resp.status_code == 400
        assert "error" in resp.get_json()


class TestFuzzy:
    """Case-insensitive search."""

    def test_matches_in_tree_order(self, client):
        """Matches come back in traversal order."""
        body = client.get("/fuzzy?q=john").get_json()
        assert body["count"] == 2
        assert [m["key"] for m in body["matches"]] == ["John", "Johnny"]

    def test_limit(self, client):
        """The limit parameter caps the result list."""
        body = client.get("/fuzzy?q=sc&limit=1").get_json()
        assert body["count"] == 1
        assert body["matches"] == [{"key": "Scott", "value": "person"}]

    def test_bad_limit_falls_back_to_default(self, client):
        """A non-numeric limit uses the configured default."""
        body = client.get("/fuzzy?q=sc&limit=lots").get_json()
        assert body["count"] == 2

    def test_missing_query(self, client):
        """A missing query is a client error."""
        assert client.get("/fuzzy").status_code == 400


class TestMutation:
    """Insert, delete and listing."""

    def test_insert_then_search(self, client):
        """Inserted keys are immediately visible."""
        resp = client.post("/insert", json={"key": "Sam", "value": 3})
        assert resp.status_code == 201
        assert resp.get_json() == {"inserted": "Sam", "value": 3, "trie_size": 5}
        assert client.get("/search?q=Sam").get_json()["value"] == 3

    def test_insert_defaults_value(self, client):
        """Without a value the key is stored as present."""
        client.post("/insert", json={"key": "Sarah"})
        assert client.get("/search?q=Sarah").get_json()["value"] is True

    @pytest.mark.parametrize(
        "payload",
        [{}, {"key": ""}, {"key": "   "}, {"key": 7}, {"key": "x" * 300}, {"key": "Sam", "value": None}],
        ids=["missing", "empty", "blank", "not-a-string", "too-long", "null-value"],
    )
    def test_insert_rejects_bad_payloads(self, client, payload):
        """Invalid bodies are rejected without touching the trie."""
        resp = client.post("/insert", json=payload)
        assert resp.status_code == 400
        assert client.get("/health").get_json()["trie_size"] == 4

    def test_delete(self, client):
        """Deleting a stored key succeeds once, then reports 404."""
        resp = client.delete("/delete?q=John")
        assert resp.status_code == 200
        assert resp.get_json() == {"key": "John", "deleted": True, "trie_size": 3}
        assert client.get("/search?q=Johnny").get_json()["found"] is True

        resp = client.delete("/delete?q=John")
        assert resp.status_code == 404
        assert resp.get_json()["deleted"] is False

    def test_entries(self, client):
        """The listing holds every stored key."""
        resp = client.get("/entries")
        assert resp.status_code == 200
        assert resp.mimetype == "application/json"
        assert resp.get_json() == {
            "John": "person",
            "Johnny": "person",
            "Scott": "person",
            "scott": "person",
        }
