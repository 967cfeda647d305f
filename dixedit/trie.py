"""
Suffix trie for paradigm guessing.

Keys are reversed words, so "shares a suffix with" becomes "shares a prefix
with" and longest-common-suffix lookup costs O(suffix length).

Storage follows the binary dictionary layout: values live in a plain list and
the keys go into a marisa_trie.RecordTrie whose record is the value's
insertion sequence number. Inserting is append-only and never deduplicates;
the marisa trie is (re)built lazily the first time it is queried after an
insert.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, List, Optional, Tuple

import marisa_trie

# Record: insertion sequence number (uint32)
RECORD_FORMAT = "<I"


def reverse_key(word: str) -> str:
    """Trie key for a word."""
    return word[::-1]


@dataclass(frozen=True)
class TrieNode:
    """
    A position in a SuffixTrie: the key prefix walked so far.

    Nodes are cheap views; they stay valid as long as the trie isn't
    modified.
    """
    trie: "SuffixTrie" = field(compare=False, repr=False)
    prefix: str

    @property
    def depth(self) -> int:
        return len(self.prefix)


class SuffixTrie:
    """Append-only trie of (reversed key, value) pairs."""

    def __init__(self, items: Optional[Iterable[Tuple[str, Any]]] = None):
        self._keys: List[str] = []
        self._values: List[Any] = []
        self._trie: Optional[marisa_trie.RecordTrie] = None
        if items is not None:
            self.extend(items)

    # -------------------------------------------------------------------------
    # Building
    # -------------------------------------------------------------------------

    def insert(self, key: str, value: Any) -> None:
        """Add value under key. Duplicates are kept."""
        if not key:
            raise ValueError("key must be non-empty")
        self._keys.append(key)
        self._values.append(value)
        self._trie = None

    def insert_reversed(self, word: str, value: Any) -> None:
        """Add value under the reversed word."""
        self.insert(reverse_key(word), value)

    def extend(self, items: Iterable[Tuple[str, Any]]) -> None:
        for key, value in items:
            self.insert(key, value)

    def _frozen(self) -> marisa_trie.RecordTrie:
        if self._trie is None:
            self._trie = marisa_trie.RecordTrie(
                RECORD_FORMAT,
                ((key, (seq,)) for seq, key in enumerate(self._keys)),
            )
        return self._trie

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    @property
    def root(self) -> TrieNode:
        return TrieNode(self, "")

    def has_prefix(self, prefix: str) -> bool:
        """Check if any key starts with prefix."""
        if not self._keys:
            return False
        try:
            next(iter(self._frozen().iterkeys(prefix)))
            return True
        except StopIteration:
            return False

    def child(self, node: TrieNode, char: str) -> Optional[TrieNode]:
        """Node one character below node, or None if no key continues that way."""
        prefix = node.prefix + char
        if self.has_prefix(prefix):
            return TrieNode(self, prefix)
        return None

    def walk(self, key: str) -> Optional[TrieNode]:
        """Node reached by following key from the root."""
        if key and not self.has_prefix(key):
            return None
        return TrieNode(self, key)

    def values_at(self, node: TrieNode) -> List[Any]:
        """Values stored for exactly the node's key, in insertion order."""
        if not self._keys:
            return []
        records = self._frozen().get(node.prefix, [])
        return [self._values[seq] for seq in sorted(seq for (seq,) in records)]

    def completions(self, node: TrieNode) -> Iterator[str]:
        """
        Full keys at or below node, each once.

        Lazy: keys come straight off the marisa trie in its own order, so
        callers that stop early never walk the whole subtree.
        """
        if not self._keys:
            return
        seen = set()
        for key, _ in self._frozen().iteritems(node.prefix):
            if key not in seen:
                seen.add(key)
                yield key

    def items(self) -> List[Tuple[str, Any]]:
        """All (key, value) pairs in insertion order."""
        return list(zip(self._keys, self._values))

    # -------------------------------------------------------------------------
    # Protocol
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, key: str) -> bool:
        return bool(self._keys) and key in self._frozen()

    def __eq__(self, other) -> bool:
        if not isinstance(other, SuffixTrie):
            return NotImplemented
        return self.items() == other.items()

    def __repr__(self) -> str:
        return f"SuffixTrie({len(self)} values)"
