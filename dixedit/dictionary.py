"""
Paradigm indexing for dixedit.

Builds one SuffixTrie per paradigm type (the "__n" in "lø/e__n") from the
entries above the edit point, and guesses the best existing entry or pardef
for a new, unclassified word.

Indexing is a bulk operation over possibly tens of megabytes, so it uses
cheap regex scans rather than the token cursor. Structural navigation
elsewhere uses the cursor.

The index for each (document, paradigm type, mode) is cached in an explicit
ParadigmCache; a rebuild only happens on an explicit refresh.
"""

import logging
import re
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from dixedit.constants import BLANK_TAG, MIN_UNMATCHED_PREFIX, PARADIGM_TYPE_SEPARATOR
from dixedit.trie import SuffixTrie, TrieNode, reverse_key

logger = logging.getLogger(__name__)


# ============================================================================
# Entry Scanning
# ============================================================================

ENTRY_RE = re.compile(r'<e(?:\s[^>]*)?>.*?</e>', re.S)
LEMMA_RE = re.compile(r'<e\s[^>]*?\blm="(?P<lm>[^"]*)"')
PAR_RE = re.compile(r'<par\s+n="(?P<n>[^"]*)"\s*/>')
STEM_RE = re.compile(r'<i>(?P<i>.*?)</i>', re.S)


class IndexMode(Enum):
    """What an index stores for each lemma."""
    ENTRIES = 'entries'  # verbatim entry text, used as a fill-in template
    PARDEFS = 'pardefs'  # bare pardef name


@dataclass(slots=True)
class DixEntry:
    """
    One <e> found by the bulk scanner.

    Attributes:
        lemma: Value of lm=""
        pardefs: Names of the <par>s, in order
        stem: Contents of the first <i>, if any
        text: Verbatim entry text
        offset: Where the entry starts
    """
    lemma: str
    pardefs: Tuple[str, ...]
    stem: Optional[str]
    text: str
    offset: int

    @property
    def pardef(self) -> str:
        """The inflectional paradigm (the last <par>)."""
        return self.pardefs[-1]


def space_to_b(text: str) -> str:
    """Literal spaces to <b/>."""
    return text.replace(' ', BLANK_TAG)


def b_to_space(text: str) -> str:
    """<b/> to literal spaces."""
    return re.sub(r'<b\s*/>', ' ', text)


def paradigm_type_of(pardef_name: str) -> Optional[str]:
    """
    Paradigm type of a pardef name.

    Example:
        >>> paradigm_type_of("lik/e__vblex")
        'vblex'
    """
    if PARADIGM_TYPE_SEPARATOR not in pardef_name:
        return None
    return pardef_name.rsplit(PARADIGM_TYPE_SEPARATOR, 1)[1]


def pardef_suffix(pardef_name: str) -> str:
    """
    Suffix part of a "stem/suffix__type" pardef name.

    Example:
        >>> pardef_suffix("lø/e__n")
        'e'
        >>> pardef_suffix("tabell__n")
        ''
    """
    base = pardef_name.split(PARADIGM_TYPE_SEPARATOR, 1)[0]
    if '/' not in base:
        return ''
    return base.split('/', 1)[1]


def scan_entries(text: str) -> Iterator[DixEntry]:
    """Yield every entry with a lemma and at least one <par>."""
    for m in ENTRY_RE.finditer(text):
        entry_text = m.group(0)
        lm = LEMMA_RE.match(entry_text)
        if lm is None:
            continue
        pardefs = tuple(p.group('n') for p in PAR_RE.finditer(entry_text))
        if not pardefs:
            continue
        stem = STEM_RE.search(entry_text)
        yield DixEntry(
            lemma=lm.group('lm'),
            pardefs=pardefs,
            stem=stem.group('i') if stem else None,
            text=entry_text,
            offset=m.start(),
        )


# ============================================================================
# Index Building
# ============================================================================

def build_index(text: str, paradigm_type: str, mode: IndexMode = IndexMode.ENTRIES) -> SuffixTrie:
    """
    Index the entries of one paradigm type.

    Args:
        text: Document text above the edit point
        paradigm_type: E.g. "n" to index entries using "*__n" pardefs
        mode: Store whole entries or just pardef names

    Returns:
        SuffixTrie keyed by reversed lemma
    """
    if not paradigm_type:
        raise ValueError("paradigm_type must be non-empty")

    ending = PARADIGM_TYPE_SEPARATOR + paradigm_type
    trie = SuffixTrie()
    for entry in scan_entries(text):
        if not entry.lemma:
            continue
        matching = [p for p in entry.pardefs if p.endswith(ending)]
        if not matching:
            continue
        value = entry.text if mode is IndexMode.ENTRIES else matching[-1]
        trie.insert_reversed(entry.lemma, value)

    logger.info(f"Indexed {len(trie)} entries of type {ending} ({mode.value})")
    return trie


# ============================================================================
# Guessing
# ============================================================================

@dataclass(slots=True)
class TemplateGuess:
    """
    Best existing entry (or pardef) for a new word.

    Attributes:
        matched_suffix: Trailing part of the word found in the index
        remainder: Leading part of the word that was not matched
        template: Entry text or pardef name that matched
        template_lemma: Lemma of the matching entry
        template_prefix: Part of template_lemma before matched_suffix
        mode: What kind of template this is
    """
    matched_suffix: str
    remainder: str
    template: str
    template_lemma: str
    template_prefix: str
    mode: IndexMode = IndexMode.ENTRIES

    @property
    def matched_suffix_length(self) -> int:
        return len(self.matched_suffix)

    @property
    def word(self) -> str:
        return self.remainder + self.matched_suffix

    def render(self) -> str:
        """The new entry for word, built from the template."""
        if self.mode is IndexMode.PARDEFS:
            return render_from_pardef(self.word, self.template)
        return render_from_entry(self.word, self.template, self.remainder, self.template_prefix)


def is_usable(template: str, template_prefix: str) -> bool:
    """
    Check if a template's stem factors into template_prefix + the rest.

    Plain text comparison, so stems with regex metacharacters are safe.
    """
    stem = STEM_RE.search(template)
    if stem is None:
        return False
    return stem.group('i').startswith(space_to_b(template_prefix))


def render_from_entry(word: str, template: str, new_prefix: str, old_prefix: str) -> str:
    """Copy template with its lemma and <i> stem rewritten for word."""
    stem = STEM_RE.search(template)
    old_stem = stem.group('i')
    new_stem = space_to_b(new_prefix) + old_stem[len(space_to_b(old_prefix)):]
    result = template[:stem.start('i')] + new_stem + template[stem.end('i'):]

    lm = LEMMA_RE.match(result)
    if lm is not None:
        result = result[:lm.start('lm')] + word + result[lm.end('lm'):]
    return result


def render_from_pardef(word: str, pardef_name: str) -> str:
    """A minimal entry for word using pardef_name."""
    suffix = pardef_suffix(pardef_name)
    stem = word[:len(word) - len(suffix)] if suffix and word.endswith(suffix) else word
    return f'<e lm="{word}"><i>{space_to_b(stem)}</i><par n="{pardef_name}"/></e>'


def find_best_template(
    trie: SuffixTrie,
    word: str,
    mode: IndexMode = IndexMode.ENTRIES,
) -> Optional[TemplateGuess]:
    """
    Guess the best template for word from an index.

    Follows the reversed word down the trie as far as it goes, always leaving
    at least MIN_UNMATCHED_PREFIX characters unmatched, then takes the first
    usable key below the deepest node reached.

    Returns:
        TemplateGuess, or None when nothing in the index fits
    """
    if not word or not word.strip():
        raise ValueError("word must be non-empty and not whitespace-only")

    rev = reverse_key(word)
    node = trie.root
    depth = 0
    while depth < len(rev) and len(word) - depth > MIN_UNMATCHED_PREFIX:
        nxt = trie.child(node, rev[depth])
        if nxt is None:
            break
        node = nxt
        depth += 1

    if depth == 0:
        logger.debug(f"No indexed lemma ends like {word!r}")
        return None

    remainder = word[:len(word) - depth]
    suffix = word[len(word) - depth:]

    for key in trie.completions(node):
        template_lemma = reverse_key(key)
        template_prefix = template_lemma[:len(template_lemma) - depth]
        for value in trie.values_at(TrieNode(trie, key)):
            if mode is IndexMode.ENTRIES and not is_usable(value, template_prefix):
                continue
            return TemplateGuess(
                matched_suffix=suffix,
                remainder=remainder,
                template=value,
                template_lemma=template_lemma,
                template_prefix=template_prefix,
                mode=mode,
            )

    logger.debug(f"No usable template below {suffix!r} for {word!r}")
    return None


# ============================================================================
# Cache
# ============================================================================

CacheKey = Tuple[str, str, IndexMode]
TextSource = Union[str, Callable[[], str]]


class ParadigmCache:
    """
    Paradigm indexes per (document, paradigm type, mode).

    A refresh rebuilds and replaces a whole index; nothing is updated in
    place. Builds for one document are serialised by that document's lock.
    """

    def __init__(self):
        self._tries: Dict[CacheKey, SuffixTrie] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_lock = threading.Lock()

    def _lock_for(self, document_id: str) -> threading.Lock:
        with self._locks_lock:
            if document_id not in self._locks:
                self._locks[document_id] = threading.Lock()
            return self._locks[document_id]

    def get(
        self,
        document_id: str,
        paradigm_type: str,
        source: TextSource,
        mode: IndexMode = IndexMode.ENTRIES,
        force_refresh: bool = False,
    ) -> SuffixTrie:
        """
        Cached index, built from source on first use or when forced.

        Args:
            document_id: Which document the index belongs to
            paradigm_type: Paradigm type to index
            source: Text above the edit point, or a callable returning it
            mode: Store whole entries or just pardef names
            force_refresh: Rebuild even if cached
        """
        key = (document_id, paradigm_type, mode)
        with self._lock_for(document_id):
            if not force_refresh and key in self._tries:
                return self._tries[key]
            text = source() if callable(source) else source
            if force_refresh:
                logger.info(f"Refreshing {mode.value} index for __{paradigm_type} in {document_id}")
            trie = build_index(text, paradigm_type, mode)
            self._tries[key] = trie
            return trie

    def peek(self, document_id: str, paradigm_type: str, mode: IndexMode = IndexMode.ENTRIES) -> Optional[SuffixTrie]:
        """Cached index without building."""
        return self._tries.get((document_id, paradigm_type, mode))

    def invalidate(self, document_id: str) -> int:
        """Drop every index of a document. Returns how many were dropped."""
        with self._lock_for(document_id):
            stale = [key for key in self._tries if key[0] == document_id]
            for key in stale:
                del self._tries[key]
        return len(stale)

    def paradigm_types(self, document_id: str) -> List[str]:
        return sorted({key[1] for key in self._tries if key[0] == document_id})

    def __len__(self) -> int:
        return len(self._tries)
