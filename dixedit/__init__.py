"""
dixedit: Editing assistance for Apertium dictionary XML

Bounded structural navigation, paradigm indexing and entry guessing for
.dix, .metadix, transfer and lexical selection files. Nothing here parses a
whole document; every walk is bounded so multi-megabyte dictionaries stay
responsive.

Basic Usage:
    import dixedit

    session = dixedit.DixSession(text)
    index = session.build_paradigm_index("n")
    guess = session.guess_template(index, "øygruppe")
    if guess is not None:
        print(guess.render())
"""

from typing import Optional

from dixedit.ancestors import ascend, enclosing_element as _enclosing_element, find_enclosing
from dixedit.dictionary import (
    IndexMode, ParadigmCache, TemplateGuess, build_index, find_best_template,
)
from dixedit.exceptions import BarrierError, BoundedSearchError, DixError, MalformedTokenError
from dixedit.navigation import DEFAULT_INTEREST, InterestTable, move_by, step
from dixedit.raw_types import Found, HitBarrier, HitBound, SearchBound, Token, TokenKind
from dixedit.session import DixSession
from dixedit.tokenizer import Buffer, TokenCursor
from dixedit.trie import SuffixTrie

__version__ = "0.1.0"


# =============================================================================
# Main API
# =============================================================================

def enclosing_element(text: str, offset: int, bound: Optional[SearchBound] = None) -> str:
    """
    Name of the element enclosing offset.

    Raises:
        BoundedSearchError: If no element encloses offset within the bound
        BarrierError: If the bound's barrier element is reached first

    Example:
        >>> dixedit.enclosing_element('<e lm="a"><i>a</i></e>', 14)
        'i'
    """
    return _enclosing_element(TokenCursor(text), offset, bound)


def next_interesting_offset(text: str, offset: int, steps: int = 1, backward: bool = False) -> int:
    """
    Offset steps interesting positions away from offset.

    Example:
        >>> dixedit.next_interesting_offset('<e lm="foo"><i>bar</i></e>', 0)
        7
    """
    return move_by(TokenCursor(text), offset, -steps if backward else steps)


def guess_template(index: SuffixTrie, word: str, mode: IndexMode = IndexMode.ENTRIES) -> Optional[TemplateGuess]:
    """Best template for word in a paradigm index, or None."""
    return find_best_template(index, word, mode)


def get_version() -> str:
    """Get the library version."""
    return __version__


# =============================================================================
# Module-level exports
# =============================================================================

__all__ = [
    # Data classes
    "Token",
    "TokenKind",
    "SearchBound",
    "Found",
    "HitBarrier",
    "HitBound",
    "TemplateGuess",
    "IndexMode",
    "InterestTable",
    "DEFAULT_INTEREST",
    # Core
    "TokenCursor",
    "Buffer",
    "SuffixTrie",
    "ParadigmCache",
    "DixSession",
    "ascend",
    "find_enclosing",
    "step",
    "move_by",
    "build_index",
    "find_best_template",
    # Convenience API
    "enclosing_element",
    "next_interesting_offset",
    "guess_template",
    "get_version",
    # Exceptions
    "DixError",
    "BoundedSearchError",
    "BarrierError",
    "MalformedTokenError",
    # Version
    "__version__",
]
