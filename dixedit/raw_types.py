"""
Lightweight data structures shared by the scanner and the walkers.

Tokens are snapshots of the buffer at one offset. They are re-derived on
demand and never survive an edit.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, NamedTuple, Union

from dixedit.constants import DEFAULT_PARSE_BOUND


class TokenKind(Enum):
    START_TAG = 'start-tag'
    END_TAG = 'end-tag'
    EMPTY_ELEMENT = 'empty-element'
    DATA = 'data'
    SPACE = 'space'
    COMMENT = 'comment'
    PROLOG = 'prolog'
    NOT_WELL_FORMED = 'not-well-formed'


class Attribute(NamedTuple):
    """An attribute of a tag token; value offsets exclude the quotes."""
    name: str
    value_start: int
    value_end: int


@dataclass(frozen=True, slots=True)
class Token:
    """
    A lexical token of the buffer.

    Attributes:
        kind: What sort of token this is
        start: Offset of the first character
        end: Offset just past the last character
        name: Tag name for start/end tags and empty elements
        attributes: Attributes in source order
    """
    kind: TokenKind
    start: int
    end: int
    name: Optional[str] = None
    attributes: Tuple[Attribute, ...] = ()

    @property
    def is_tag(self) -> bool:
        return self.kind in (TokenKind.START_TAG, TokenKind.EMPTY_ELEMENT, TokenKind.END_TAG)

    @property
    def opens(self) -> bool:
        """True for tokens that start an element (start tags and empty elements)."""
        return self.kind in (TokenKind.START_TAG, TokenKind.EMPTY_ELEMENT)

    def attribute(self, name: str) -> Optional[Attribute]:
        for attr in self.attributes:
            if attr.name == name:
                return attr
        return None

    def __repr__(self) -> str:
        if self.name:
            return f"Token({self.kind.value}, {self.start}-{self.end}, {self.name!r})"
        return f"Token({self.kind.value}, {self.start}-{self.end})"


@dataclass(frozen=True)
class SearchBound:
    """
    Cost limit for upward and scanning walks.

    A walk must finish within max_distance characters of where it started.
    Reaching an element named barrier stops the walk as a failure.
    """
    barrier: Optional[str] = None
    max_distance: int = DEFAULT_PARSE_BOUND


# ============================================================================
# Ascent Results
# ============================================================================

@dataclass(frozen=True, slots=True)
class Found:
    offset: int
    name: str


@dataclass(frozen=True, slots=True)
class HitBarrier:
    offset: int
    name: str


@dataclass(frozen=True, slots=True)
class HitBound:
    offset: int


AscentResult = Union[Found, HitBarrier, HitBound]
