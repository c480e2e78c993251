"""
Radix Trie Service: a REST API over one in-process radix trie.

Exposes `radix_trie.RadixTrie` as a JSON API with endpoints for inserting
keys, exact lookup, case-insensitive fuzzy search, listing and deletion.
Built with Flask.  Designed for containerized deployment.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from typing import Any

from flask import Flask, jsonify, request

from radix_trie import RadixTrie

logger = logging.getLogger("trie-service")

# ---------------------------------------------------------------------------
# Configuration (process environment)
# ---------------------------------------------------------------------------

MAX_KEY_LENGTH = int(os.environ.get("TRIE_MAX_KEY_LENGTH", 256))
FUZZY_LIMIT = int(os.environ.get("TRIE_FUZZY_LIMIT", 25))

# Default contents: names that differ only by case or share a prefix, so a
# fresh service already shows how exact and fuzzy lookups disagree.
_SEED = {
    "Python": "language",
    "python": "snake",
    "PyPI": "package index",
    "pytest": "test runner",
    "Radix": "numeral base",
    "radix tree": "data structure",
    "Trie": "data structure",
    "trie-service": "this service",
    "Flask": "web framework",
    "flask": "container",
}


def create_app(seed: Any = None) -> Flask:
    """Build the Flask application around a fresh trie.

    *seed* is anything `RadixTrie.add` accepts in bulk; `_SEED` by default.
    """
    app = Flask(__name__)

    trie: RadixTrie[Any] = RadixTrie(_SEED if seed is None else seed)
    # Flask may serve requests on several threads; the trie is not safe for
    # concurrent mutation.
    lock = threading.Lock()
    started = time.time()
    app.config["TRIE"] = trie
    logger.info("Seeded trie with %d keys", len(trie))

    def _key_arg() -> str:
        return request.args.get("q", "").strip()

    def _bad_request(message: str):
        return jsonify({"error": message}), 400

    # ── Health & Info ─────────────────────────────────────────────────────

    @app.route("/")
    def index():
        """List every route with its handler's summary."""
        endpoints = {}
        for rule in app.url_map.iter_rules():
            if rule.endpoint == "static":
                continue
            methods = ",".join(sorted(rule.methods - {"HEAD", "OPTIONS"}))
            endpoints[f"{methods} {rule.rule}"] = app.view_functions[rule.endpoint].__doc__
        return jsonify({"service": "radix-trie", "endpoints": endpoints})

    @app.route("/health")
    def health():
        """Liveness probe with key count and lookup limits."""
        return jsonify({
            "status": "ok",
            "trie_size": len(trie),
            "max_key_length": MAX_KEY_LENGTH,
            "fuzzy_limit": FUZZY_LIMIT,
            "uptime_seconds": round(time.time() - started, 2),
        })

    # ── Core API ──────────────────────────────────────────────────────────

    @app.route("/search")
    def search():
        """Exact key lookup."""
        q = _key_arg()
        if not q:
            return _bad_request("Missing query parameter 'q'")
        with lock:
            result = trie.get(q)
        return jsonify({"key": q, "found": result is not None, "value": result})

    @app.route("/fuzzy")
    def fuzzy():
        """Return keys matching a search term regardless of case."""
        q = _key_arg()
        if not q:
            return _bad_request("Missing query parameter 'q'")
        try:
            limit = int(request.args.get("limit", FUZZY_LIMIT))
        except ValueError:
            limit = FUZZY_LIMIT

        matches = []
        with lock:
            for key, value in trie.fuzzy_get(q):
                if len(matches) >= limit:
                    break
                matches.append({"key": key, "value": value})

        return jsonify({"query": q, "count": len(matches), "matches": matches})

    @app.route("/entries")
    def entries():
        """Every entry, keyed by full key."""
        with lock:
            body = trie.to_json()
        return app.response_class(body, mimetype="application/json")

    @app.route("/insert", methods=["POST"])
    def insert():
        """Insert a key into the trie."""
        body = request.get_json(silent=True) or {}
        key = body.get("key", "")
        if not isinstance(key, str) or not key.strip():
            return _bad_request("Missing 'key' in request body")
        key = key.strip()
        if len(key) > MAX_KEY_LENGTH:
            return _bad_request(f"Key too long (max {MAX_KEY_LENGTH} chars)")
        value = body.get("value", True)
        if value is None:
            return _bad_request("'value' must not be null")

        with lock:
            trie.add(key, value)
            size = len(trie)
        logger.info("Inserted key=%s", key)
        return jsonify({"inserted": key, "value": value, "trie_size": size}), 201

    @app.route("/delete", methods=["DELETE"])
    def delete():
        """Delete a key from the trie."""
        q = _key_arg()
        if not q:
            return _bad_request("Missing query parameter 'q'")

        with lock:
            deleted = q in trie
            trie.delete(q)
            size = len(trie)
        if deleted:
            logger.info("Deleted key=%s", q)
        status = 200 if deleted else 404
        return jsonify({"key": q, "deleted": deleted, "trie_size": size}), status

    return app


app = create_app()


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    port = int(os.environ.get("PORT", 8080))
    debug = os.environ.get("FLASK_DEBUG", "0") == "1"
    logger.info("Starting Radix Trie Service on port %d", port)
    app.run(host="0.0.0.0", port=port, debug=debug)
