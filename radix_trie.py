"""
Radix Trie: compressed prefix tree with exact and fuzzy lookup.

Techniques used:
  - Path compression: edges carry whole string fragments instead of single
    characters.  Deletion merges any single-child chain it leaves behind back
    into one edge, so the tree keeps its compressed shape.
  - Ownership moves: splitting an edge re-parents the existing child object
    under the new intermediate node.  Subtrees are never copied or shared.
  - Generator-based enumeration: `entries`, `keys`, `values` and `fuzzy_get`
    yield results lazily, so callers can stop early on large tries.

Complexity (n = key length, e = edges per node, m = number of matches):
  add / delete                : O(n * e)
  get                         : O(n * depth)
  entries / keys / values     : O(total key length)
  fuzzy_get                   : O(n * e) per visited node, plus O(m)
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Iterator, TypeVar

log = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass
class _TrieNode:
    """Internal node of the radix trie."""

    # Edge label -> child.  Labels are never empty and no two siblings share
    # a first character.
    edges: dict[str, _TrieNode] = field(default_factory=dict)
    # ``None`` marks a purely structural node.
    value: Any = None

    def is_redundant(self) -> bool:
        return self.value is None and len(self.edges) == 1


class RadixTrie(Generic[V]):
    """A compressed prefix tree that maps string keys to arbitrary values.

    >>> t = RadixTrie().add("foo", 5).add("faa", 3)
    >>> t.get("foo"), t.get("faa")
    (5, 3)
    >>> list(t.keys())
    ['foo', 'faa']
    >>> list(RadixTrie({"John": 1, "Johnny": 2}).fuzzy_get("john"))
    [('John', 1), ('Johnny', 2)]
    >>> t.delete("faa").has("faa")
    False

    ``None`` doubles as the absence marker: ``get`` cannot tell a missing key
    from one stored with ``None``, so ``add(key, None)`` removes *key*.
    The trie is not thread-safe, and mutating it while iterating over
    `entries`, `keys`, `values` or `fuzzy_get` has undefined ordering.
    """

    def __init__(self, seed: Any = None) -> None:
        self._root = _TrieNode()
        self._size = 0
        if seed is not None:
            self.add(seed)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, key: Any, value: Any = True) -> RadixTrie[V]:
        """Insert *key* with *value* (default ``True``) and return the trie.

        *key* may also be a mapping, an iterable of ``(key, value)`` pairs or
        an object whose attributes are the pairs; each pair is added in order
        and *value* is ignored.
        """
        if not isinstance(key, str):
            for item_key, item_value in _iter_items(key):
                if not isinstance(item_key, str):
                    raise TypeError(
                        f"trie keys must be str, not {type(item_key).__name__}"
                    )
                self.add(item_key, item_value)
            return self
        _check_key(key)
        if value is None:
            return self.delete(key)

        node = self._root
        while True:
            child = node.edges.get(key)
            if child is not None:
                # Key already has a node: only the value changes.
                if child.value is None:
                    self._size += 1
                child.value = value
                return self

            match = _longest_common_prefix(key, node.edges)
            if match is None:
                node.edges[key] = _TrieNode(value=value)
                self._size += 1
                return self

            label, length = match
            if length == len(label):
                # Continuation of an existing edge, descend.
                node = node.edges[label]
                key = key[length:]
                continue

            # Partial collision: split *label* after its first *length*
            # characters and move the old child under the new node.
            ends_here = length == len(key)
            split = _TrieNode(value=value if ends_here else None)
            split.edges[label[length:]] = node.edges[label]
            node.edges[key[:length]] = split
            del node.edges[label]
            log.debug("Split edge %r at %d", label, length)
            if ends_here:
                self._size += 1
                return self
            node = split
            key = key[length:]

    def delete(self, key: str) -> RadixTrie[V]:
        """Remove *key* if present and return the trie."""
        if not key:
            return self
        # Iterative descent with parent tracking: (parent, edge label).
        path: list[tuple[_TrieNode, str]] = []
        node = self._root
        while key not in node.edges:
            # Longest label that is a strict prefix of the key.
            longest = max(map(len, node.edges), default=0)
            for end in range(min(len(key) - 1, longest), 0, -1):
                label = key[:end]
                child = node.edges.get(label)
                if child is not None:
                    path.append((node, label))
                    node = child
                    key = key[end:]
                    break
            else:
                return self

        child = node.edges[key]
        if child.value is not None:
            child.value = None
            self._size -= 1
        if not child.edges:
            del node.edges[key]
        elif child.is_redundant():
            _compact(node, key)

        # Unwind: each frame compacts the node below it when that node was
        # left with one child and no value.  The root is never compacted.
        redundant = node.is_redundant()
        while path:
            parent, label = path.pop()
            if redundant:
                _compact(parent, label)
            redundant = parent.is_redundant()
        return self

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, key: str) -> V | None:
        """Return the value for *key*, or ``None`` if absent."""
        node = self._root
        while key:
            child = node.edges.get(key)
            if child is not None:
                return child.value
            # Grow a prefix of the key until it names an edge.
            longest = max(map(len, node.edges), default=0)
            for end in range(1, min(len(key), longest + 1)):
                child = node.edges.get(key[:end])
                if child is not None:
                    node = child
                    key = key[end:]
                    break
            else:
                return None
        return None

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def fuzzy_get(self, search_key: str) -> Iterator[tuple[str, V]]:
        """Yield ``(key, value)`` for keys matching *search_key* ignoring case.

        A key matches when it continues the search term, or when the term
        runs along one path of the tree and the key sits on that path.
        """
        if not search_key:
            return
        yield from _fuzzy(self._root, search_key, "")

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def entries(self) -> Iterator[tuple[str, V]]:
        """Yield every ``(key, value)`` pair, depth-first."""
        return _walk(self._root, "")

    def keys(self) -> Iterator[str]:
        for key, _ in _walk(self._root, ""):
            yield key

    def values(self) -> Iterator[V]:
        for _, value in _walk(self._root, ""):
            yield value

    def for_each(self, callback: Callable[[str, V], Any]) -> None:
        """Call ``callback(key, value)`` once per entry, in traversal order."""
        for key, value in self.entries():
            callback(key, value)

    def to_json(self) -> str:
        """Serialize all entries as one compact JSON object keyed by full key."""
        return json.dumps(dict(self.entries()), separators=(",", ":"))

    def __len__(self) -> int:
        return self._size

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __iter__(self) -> Iterator[str]:
        return self.keys()


def _check_key(key: str) -> None:
    if not key:
        raise ValueError("the empty string cannot be used as a trie key")


def _iter_items(data: Any) -> Iterable[tuple[str, Any]]:
    """Normalise a bulk-load collection into ``(key, value)`` pairs."""
    if isinstance(data, Mapping):
        return data.items()
    if isinstance(data, (str, bytes)):
        raise TypeError("expected a collection of key/value pairs")
    if hasattr(data, "__iter__"):
        return data
    if hasattr(data, "__dict__"):
        return vars(data).items()
    raise TypeError(f"cannot add key/value pairs from {type(data).__name__}")


def _longest_common_prefix(
    key: str, edges: dict[str, _TrieNode]
) -> tuple[str, int] | None:
    """Find the label sharing the longest prefix with *key*.

    Returns ``(label, length)`` such that ``key[:length]`` is a prefix of
    ``label``, or ``None`` when no label starts with the key's first
    character.  The first label to reach a given length wins.
    """
    best: tuple[str, int] | None = None
    for label in edges:
        limit = min(len(label), len(key))
        j = 0
        while j < limit and key[j] == label[j]:
            j += 1
        if j and (best is None or j > best[1]):
            best = (label, j)
    return best


def _compact(parent: _TrieNode, label: str) -> None:
    """Merge the redundant child at *label* into its only grandchild."""
    child = parent.edges.pop(label)
    (suffix, grandchild), = child.edges.items()
    parent.edges[label + suffix] = grandchild
    log.debug("Compacted edge %r into %r", label, label + suffix)


def _walk(node: _TrieNode, prefix: str) -> Iterator[tuple[str, Any]]:
    # DFS with explicit stack: (node, accumulated_key)
    stack: list[tuple[_TrieNode, str]] = [(node, prefix)]
    while stack:
        current, acc = stack.pop()
        if current.value is not None:
            yield acc, current.value
        for label, child in reversed(current.edges.items()):
            stack.append((child, acc + label))


def _fuzzy(node: _TrieNode, term: str, prefix: str) -> Iterator[tuple[str, Any]]:
    # DFS with explicit stack: (node, accumulated_key, folded_term).  The
    # term is None once the search has been fully matched on this path.
    stack: list[tuple[_TrieNode, str, str | None]] = [(node, prefix, term.lower())]
    while stack:
        current, acc, folded = stack.pop()
        if current.value is not None and current is not node:
            yield acc, current.value
        hits: list[tuple[_TrieNode, str, str | None]] = []
        for label, child in current.edges.items():
            key = acc + label
            if folded is None:
                hits.append((child, key, None))
                continue
            lowered = label.lower()
            if lowered == folded:
                hits.append((child, key, None))
            elif lowered[0] == folded[0]:
                for end in range(len(folded), 0, -1):
                    if lowered.startswith(folded[:end]):
                        hits.append((child, key, folded[end:] or None))
                        break
        stack.extend(reversed(hits))
