"""
Editing operations built on the walkers and the paradigm index.

Every operation works out all of its edits before changing the buffer, so
an error (malformed markup, bound exceeded) leaves the buffer untouched.
"""

import logging
from typing import Optional

from dixedit.ancestors import find_enclosing
from dixedit.constants import RESTRICTION_CYCLE
from dixedit.dictionary import IndexMode, ParadigmCache, TemplateGuess, find_best_template
from dixedit.raw_types import SearchBound, Token
from dixedit.tokenizer import Buffer, Edit, TokenCursor

logger = logging.getLogger(__name__)

RESTRICTION_ATTRIBUTE = 'r'


# ============================================================================
# Attribute Edits
# ============================================================================

def _attribute_span(text: str, token: Token, name: str) -> Optional[tuple]:
    """(start, end) of ` name="value"` including the leading whitespace."""
    attr = token.attribute(name)
    if attr is None:
        return None
    pos = attr.value_start - 1  # opening quote
    while text[pos - 1] in ' \t\n=':
        pos -= 1
    start = pos - len(name)
    while text[start - 1].isspace():
        start -= 1
    return start, attr.value_end + 1


def set_attribute_edit(cursor: TokenCursor, token: Token, name: str, value: Optional[str]) -> Optional[Edit]:
    """
    Edit that sets (or with value None, removes) an attribute on a tag.

    New attributes go right after the tag name. Returns None if nothing changes.
    """
    attr = token.attribute(name)
    if attr is None:
        if value is None:
            return None
        at = token.start + 1 + len(token.name)
        return at, at, f' {name}="{value}"'
    if value is None:
        start, end = _attribute_span(cursor.source, token, name)
        return start, end, ''
    return attr.value_start, attr.value_end, value


def next_restriction(current: Optional[str]) -> Optional[str]:
    """none -> LR -> RL -> none"""
    if current not in RESTRICTION_CYCLE:
        return RESTRICTION_CYCLE[1]
    i = RESTRICTION_CYCLE.index(current)
    return RESTRICTION_CYCLE[(i + 1) % len(RESTRICTION_CYCLE)]


# ============================================================================
# Restrictions and Copies
# ============================================================================

def restriction_cycle(buffer: Buffer, offset: int, bound: Optional[SearchBound] = None) -> Optional[str]:
    """
    Cycle the r="" restriction of the entry at offset.

    Returns:
        The new restriction ("LR", "RL" or None)
    """
    cursor = buffer.cursor()
    start = find_enclosing(cursor, offset, 'e', bound)
    token = cursor.token_after(start)
    new = next_restriction(cursor.attribute_value(token, RESTRICTION_ATTRIBUTE))
    edit = set_attribute_edit(cursor, token, RESTRICTION_ATTRIBUTE, new)
    if edit is not None:
        buffer.apply_edits([edit])
    return new


def copy_entry(
    buffer: Buffer,
    offset: int,
    restrict: bool = False,
    bound: Optional[SearchBound] = None,
) -> int:
    """
    Duplicate the entry at offset onto a new line below it.

    Args:
        buffer: Buffer to edit
        offset: Somewhere inside the entry
        restrict: Mark the original LR and the copy RL
        bound: Search bound for finding the entry

    Returns:
        Offset where the copy starts
    """
    cursor = buffer.cursor()
    start = find_enclosing(cursor, offset, 'e', bound)
    end = cursor.scan_element_forward(start, bound)
    entry = buffer.substring(start, end)

    line_start = buffer.line_start(start)
    indent = buffer.substring(line_start, start)
    if indent.strip():
        indent = ''

    edits = []
    delta = 0
    if restrict:
        original = set_attribute_edit(cursor, cursor.token_after(start), RESTRICTION_ATTRIBUTE, 'LR')
        if original is not None:
            edits.append(original)
            delta = len(original[2]) - (original[1] - original[0])

        copy_cursor = TokenCursor(entry)
        copied = set_attribute_edit(copy_cursor, copy_cursor.token_after(0), RESTRICTION_ATTRIBUTE, 'RL')
        if copied is not None:
            entry = entry[:copied[0]] + copied[2] + entry[copied[1]:]

    edits.append((end, end, '\n' + indent + entry))
    buffer.apply_edits(edits)
    return end + delta + 1 + len(indent)


# ============================================================================
# Guessing
# ============================================================================

def guess_entry(
    buffer: Buffer,
    offset: int,
    word: str,
    paradigm_type: str,
    cache: ParadigmCache,
    document_id: str,
    mode: IndexMode = IndexMode.ENTRIES,
    force_refresh: bool = False,
) -> Optional[TemplateGuess]:
    """
    Insert a guessed entry for word on a new line above the line at offset.

    Only entries above that line are indexed. Nothing is inserted when no
    template fits.

    Returns:
        The guess that was used, or None
    """
    line_start = buffer.line_start(offset)
    text = buffer.text
    trie = cache.get(document_id, paradigm_type, lambda: text[:line_start], mode, force_refresh)
    guess = find_best_template(trie, word, mode)
    if guess is None:
        logger.info(f"No fitting template for {word!r} among __{paradigm_type} entries")
        return None

    line = buffer.substring(line_start, buffer.line_end(offset))
    indent = line[:len(line) - len(line.lstrip())]
    buffer.insert(line_start, indent + guess.render() + '\n')
    return guess
