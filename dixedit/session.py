"""
Per-document editing session.

Holds the buffer, its paradigm cache entries and the default search bound,
and exposes the operations an editor front end needs. Any edit made through
the session drops the document's cached indexes.
"""

import itertools
from typing import List, Optional

from dixedit import ancestors, editing, navigation, pardefs
from dixedit.constants import DEFAULT_PARSE_BOUND
from dixedit.dictionary import IndexMode, ParadigmCache, TemplateGuess, find_best_template
from dixedit.raw_types import SearchBound
from dixedit.tokenizer import Buffer, TokenCursor
from dixedit.trie import SuffixTrie

_document_ids = itertools.count(1)


class DixSession:
    """
    An open dictionary document.

    Example:
        >>> session = DixSession(open("apertium-nno.nno.dix").read())
        >>> index = session.build_paradigm_index("n")
        >>> session.guess_template(index, "øygruppe").render()
    """

    def __init__(
        self,
        text: str = "",
        document_id: Optional[str] = None,
        cache: Optional[ParadigmCache] = None,
        max_distance: int = DEFAULT_PARSE_BOUND,
    ):
        self.buffer = Buffer(text)
        self.document_id = document_id or f"doc-{next(_document_ids)}"
        self.cache = cache if cache is not None else ParadigmCache()
        self.max_distance = max_distance

    @property
    def text(self) -> str:
        return self.buffer.text

    @property
    def cursor(self) -> TokenCursor:
        return self.buffer.cursor()

    def bound(self, barrier: Optional[str] = None) -> SearchBound:
        return SearchBound(barrier, self.max_distance)

    def _edited(self) -> None:
        self.cache.invalidate(self.document_id)

    # -------------------------------------------------------------------------
    # Structure and navigation
    # -------------------------------------------------------------------------

    def enclosing_element(self, offset: int, bound: Optional[SearchBound] = None) -> str:
        return ancestors.enclosing_element(self.cursor, offset, bound or self.bound())

    def find_enclosing(self, offset: int, target: str, barrier: Optional[str] = None) -> int:
        return ancestors.find_enclosing(self.cursor, offset, target, self.bound(barrier))

    def next_interesting_offset(self, offset: int, steps: int = 1, backward: bool = False) -> int:
        """Offset steps interesting positions away; backward flips the direction."""
        return navigation.move_by(self.cursor, offset, -steps if backward else steps)

    def pardef_at(self, offset: int) -> Optional[pardefs.PardefRegion]:
        return pardefs.pardef_at(self.cursor, offset, self.max_distance)

    def suffix_list_at(self, offset: int) -> List[str]:
        """Sorted suffixes of the pardef at offset (empty outside pardefs)."""
        region = self.pardef_at(offset)
        if region is None:
            return []
        return pardefs.compile_sorted_suffix_list(self.buffer.substring(region.start, region.end), region.start)

    # -------------------------------------------------------------------------
    # Paradigm index
    # -------------------------------------------------------------------------

    def build_paradigm_index(
        self,
        paradigm_type: str,
        mode: IndexMode = IndexMode.ENTRIES,
        force_refresh: bool = False,
        offset: Optional[int] = None,
    ) -> SuffixTrie:
        """
        Index of paradigm_type entries above offset (default: the point).

        Cached per document; pass force_refresh to rebuild.
        """
        line_start = self.buffer.line_start(self.buffer.point if offset is None else offset)
        text = self.buffer.text
        return self.cache.get(self.document_id, paradigm_type, lambda: text[:line_start], mode, force_refresh)

    def guess_template(self, index: SuffixTrie, word: str, mode: IndexMode = IndexMode.ENTRIES) -> Optional[TemplateGuess]:
        return find_best_template(index, word, mode)

    # -------------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------------

    def restriction_cycle(self, offset: int) -> Optional[str]:
        result = editing.restriction_cycle(self.buffer, offset, self.bound())
        self._edited()
        return result

    def copy_entry(self, offset: int, restrict: bool = False) -> int:
        result = editing.copy_entry(self.buffer, offset, restrict, self.bound())
        self._edited()
        return result

    def guess_entry(
        self,
        offset: int,
        word: str,
        paradigm_type: str,
        mode: IndexMode = IndexMode.ENTRIES,
        force_refresh: bool = False,
    ) -> Optional[TemplateGuess]:
        guess = editing.guess_entry(
            self.buffer, offset, word, paradigm_type, self.cache, self.document_id, mode, force_refresh,
        )
        if guess is not None:
            self._edited()
        return guess

    def sort_pardef(self, offset: int) -> int:
        version = self.buffer.version
        count = pardefs.sort_pardef(self.buffer, offset, self.max_distance)
        if self.buffer.version != version:
            self._edited()
        return count
