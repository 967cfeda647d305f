"""
Pardef-local operations for dixedit.

Suffix lists, sorting and duplicate detection work on one <pardef> at a time.
The pardef is located with the bounded walkers (or a regex split for whole
document sweeps), and only that snippet is parsed with lxml.
"""

import logging
import re
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from lxml import etree

from dixedit.ancestors import ascend
from dixedit.constants import DEFAULT_PARSE_BOUND, PARDEF_BARRIER
from dixedit.dictionary import DixEntry, scan_entries
from dixedit.exceptions import BoundedSearchError, MalformedTokenError
from dixedit.raw_types import Found, SearchBound, TokenKind
from dixedit.tokenizer import Buffer, TokenCursor

logger = logging.getLogger(__name__)

PARDEF_RE = re.compile(r'<pardef\s[^>]*?\bn="(?P<n>[^"]*)"[^>]*>.*?</pardef>', re.S)


@dataclass(frozen=True, slots=True)
class PardefRegion:
    """Where a pardef sits in the buffer."""
    name: str
    start: int
    end: int


# ============================================================================
# Parsing Helpers
# ============================================================================

def parse_snippet(snippet: str, offset: int = 0) -> etree._Element:
    """
    Parse one locally well-formed element.

    Raises:
        MalformedTokenError: If the snippet isn't well-formed XML
    """
    try:
        return etree.fromstring(snippet)
    except etree.XMLSyntaxError as e:
        raise MalformedTokenError(f"Not well-formed near {offset}: {e}", offset) from e


def side_text(elem: Optional[etree._Element]) -> str:
    """
    Flatten an <l>, <r> or <i> into a string.

    <b/> becomes a space, <j/> a '+', <s n="x"/> becomes "<x>".
    """
    if elem is None:
        return ''
    parts = [elem.text or '']
    for child in elem:
        if not isinstance(child.tag, str):
            pass
        elif child.tag == 'b':
            parts.append(' ')
        elif child.tag == 'j':
            parts.append('+')
        elif child.tag == 's':
            parts.append(f"<{child.get('n', '')}>")
        else:
            parts.append(side_text(child))
        parts.append(child.tail or '')
    return ''.join(parts)


def entry_sides(e: etree._Element) -> Tuple[str, str]:
    """(left, right) of a pardef <e>; an <i> counts for both sides."""
    left = []
    right = []
    for child in e:
        if not isinstance(child.tag, str):
            continue
        if child.tag == 'p':
            left.append(side_text(child.find('l')))
            right.append(side_text(child.find('r')))
        elif child.tag == 'i':
            text = side_text(child)
            left.append(text)
            right.append(text)
        elif child.tag == 'par':
            right.append(f"[{child.get('n', '')}]")
    return ''.join(left), ''.join(right)


# ============================================================================
# Suffix Lists
# ============================================================================

def compile_sorted_suffix_list(pardef_text: str, offset: int = 0) -> List[str]:
    """
    Sorted, distinct left-side suffixes of one pardef.

    Example:
        >>> compile_sorted_suffix_list(
        ...     '<pardef n="lik/e__vblex"><e><p><l>ing</l><r>e</r></p></e>'
        ...     '<e><p><l>en</l><r>e</r></p></e></pardef>')
        ['en', 'ing']
    """
    pardef = parse_snippet(pardef_text, offset)
    return sorted({entry_sides(e)[0] for e in pardef.iter('e')})


def pardef_signature(pardef_text: str, compare_right: bool = False, offset: int = 0) -> Tuple:
    """What two pardefs must share to count as duplicates."""
    pardef = parse_snippet(pardef_text, offset)
    if compare_right:
        return tuple(sorted({entry_sides(e) for e in pardef.iter('e')}))
    return tuple(sorted({entry_sides(e)[0] for e in pardef.iter('e')}))


# ============================================================================
# Locating Pardefs
# ============================================================================

def iter_pardefs(text: str) -> Iterator[PardefRegion]:
    """Every pardef in the text, in order."""
    for m in PARDEF_RE.finditer(text):
        yield PardefRegion(m.group('n'), m.start(), m.end())


def goto_pardef(text: str, name: str) -> Optional[int]:
    """Offset of the pardef called name."""
    m = re.search(r'<pardef\s[^>]*?\bn="' + re.escape(name) + '"', text)
    return m.start() if m else None


def pardef_at(cursor: TokenCursor, offset: int, max_distance: int = DEFAULT_PARSE_BOUND) -> Optional[PardefRegion]:
    """
    The pardef enclosing offset.

    Returns None when offset isn't inside a pardef (the walk reached the
    <pardefs> container or the bound first, or the pardef ends out of bound).
    """
    result = ascend(cursor, offset, 'pardef', SearchBound(PARDEF_BARRIER, max_distance))
    if not isinstance(result, Found):
        return None
    # The end must also lie within max_distance of offset
    try:
        end = cursor.scan_element_forward(result.offset, SearchBound(None, max_distance + offset - result.offset))
    except BoundedSearchError:
        logger.debug(f"End of the pardef at {result.offset} is more than {max_distance} after {offset}")
        return None
    name = cursor.attribute_value(cursor.token_after(result.offset), 'n') or ''
    return PardefRegion(name, result.offset, end)


def entries_using_pardef(text: str, name: str) -> List[DixEntry]:
    """Entries with a <par n="name"/>."""
    return [entry for entry in scan_entries(text) if name in entry.pardefs]


# ============================================================================
# Duplicates
# ============================================================================

def find_duplicate_pardefs(text: str, compare_right: bool = False) -> List[List[str]]:
    """
    Groups of pardefs with identical suffix lists.

    Args:
        text: Document text
        compare_right: Require the right sides (tags) to match as well

    Returns:
        Lists of pardef names, each with more than one member, in document order
    """
    groups: Dict[Tuple, List[str]] = defaultdict(list)
    for region in iter_pardefs(text):
        signature = pardef_signature(text[region.start:region.end], compare_right, region.start)
        groups[signature].append(region.name)
    duplicates = [names for names in groups.values() if len(names) > 1]
    logger.info(f"Found {len(duplicates)} groups of possibly duplicate pardefs")
    return duplicates


# ============================================================================
# Sorting
# ============================================================================

def _child_elements(cursor: TokenCursor, start: int, end: int) -> List[Tuple[int, int]]:
    """Spans of the top-level elements between start and end."""
    spans = []
    depth = 0
    open_at = None
    for token in cursor.iter_tokens(start, end):
        if token.end > end:
            break
        if token.kind is TokenKind.NOT_WELL_FORMED:
            raise MalformedTokenError(f"Not well-formed markup at {token.start}", token.start)
        if token.kind is TokenKind.EMPTY_ELEMENT and depth == 0:
            spans.append((token.start, token.end))
        elif token.kind is TokenKind.START_TAG:
            if depth == 0:
                open_at = token.start
            depth += 1
        elif token.kind is TokenKind.END_TAG:
            depth -= 1
            if depth == 0:
                spans.append((open_at, token.end))
    return spans


def sort_pardef(buffer: Buffer, offset: int, max_distance: int = DEFAULT_PARSE_BOUND) -> int:
    """
    Sort the <e>s of the pardef at offset by right side, then left side.

    Whitespace and comments between entries stay where they are.

    Returns:
        Number of entries sorted, 0 if offset isn't in a pardef

    Raises:
        MalformedTokenError: If the pardef isn't well-formed (buffer unchanged)
    """
    cursor = buffer.cursor()
    region = pardef_at(cursor, offset, max_distance)
    if region is None:
        return 0

    open_tag = cursor.token_after(region.start)
    close_tag = cursor.token_before(region.end)
    spans = _child_elements(cursor, open_tag.end, close_tag.start)
    spans = [(s, e) for s, e in spans if cursor.token_after(s).name == 'e']
    if len(spans) < 2:
        return len(spans)

    keyed = []
    for s, e in spans:
        left, right = entry_sides(parse_snippet(buffer.substring(s, e), s))
        keyed.append(((right, left), buffer.substring(s, e)))
    ordered = [text for _, text in sorted(keyed, key=lambda k: k[0])]
    if ordered == [text for _, text in keyed]:
        logger.debug(f"Pardef {region.name!r} is already sorted")
        return len(spans)

    buffer.apply_edits([(s, e, text) for (s, e), text in zip(spans, ordered)])
    logger.info(f"Sorted {len(spans)} entries in pardef {region.name!r}")
    return len(spans)
