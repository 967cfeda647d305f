"""
Bounded ancestor search for dixedit.

Answers "which element encloses this offset" by walking backwards over
balanced elements, never further than a SearchBound allows. This is the
basis of every "find the enclosing X" operation.
"""

import logging
from typing import Optional, Tuple, Union

from dixedit.exceptions import BarrierError, BoundedSearchError, MalformedTokenError
from dixedit.raw_types import (
    AscentResult, Found, HitBarrier, HitBound, SearchBound, Token, TokenKind,
)
from dixedit.tokenizer import TokenCursor

logger = logging.getLogger(__name__)


# =============================================================================
# Core Walk
# =============================================================================

def _first_candidate(cursor: TokenCursor, start: int, bound: SearchBound) -> Union[Token, HitBound, None]:
    """
    Element the offset is already at, if any.

    An offset strictly inside a start tag or empty element is at that element,
    and so is an empty element starting exactly at the offset. An offset inside
    an end tag is at the element that tag closes; HitBound if that element
    starts further than the bound allows.
    """
    token = cursor.token_after(start)
    if token is None:
        return None
    if token.kind is TokenKind.NOT_WELL_FORMED:
        raise MalformedTokenError(f"Not well-formed markup at {token.start}", token.start)
    if token.kind is TokenKind.EMPTY_ELEMENT and token.start <= start:
        return token
    if token.kind is TokenKind.START_TAG and token.start < start:
        return token
    if token.kind is TokenKind.END_TAG and token.start < start:
        # Distance counts from start, not from the end of the end tag
        inner = SearchBound(bound.barrier, bound.max_distance + token.end - start)
        try:
            open_start = cursor.scan_element_backward(token.end, inner)
        except BoundedSearchError:
            logger.debug(f"Start of <{token.name}> is more than {bound.max_distance} before {start}")
            return HitBound(start)
        return cursor.token_after(open_start)
    return None


def _open_before(cursor: TokenCursor, pos: int, start: int, bound: SearchBound) -> Optional[Token]:
    """
    Nearest start tag before pos that is still open at pos.

    Returns None when the walk reaches the buffer start or leaves the bound.
    """
    closed = []
    while True:
        token = cursor.token_before(pos)
        if token is None or start - token.start > bound.max_distance:
            return None
        if token.kind is TokenKind.NOT_WELL_FORMED:
            raise MalformedTokenError(f"Not well-formed markup at {token.start}", token.start)
        if token.kind is TokenKind.END_TAG:
            closed.append(token.name)
        elif token.kind is TokenKind.START_TAG:
            if not closed:
                return token
            expected = closed.pop()
            if token.name != expected:
                raise MalformedTokenError(
                    f"Mismatched start tag <{token.name}> at {token.start}, expected <{expected}>",
                    token.start,
                )
        pos = token.start


def ascend(
    cursor: TokenCursor,
    start: int,
    target: Optional[str] = None,
    bound: Optional[SearchBound] = None,
) -> AscentResult:
    """
    Walk up from start until an element named target encloses it.

    Args:
        cursor: Token cursor over the buffer
        start: Offset to start from
        target: Element name to look for; None accepts the nearest element
        bound: Distance limit and optional barrier element name

    Returns:
        Found with the element's start offset, HitBarrier if the barrier
        element was reached first, HitBound if the walk left the bound or
        reached the buffer start

    Raises:
        MalformedTokenError: If the walk crosses markup that is not well-formed
    """
    if bound is None:
        bound = SearchBound()

    candidate = _first_candidate(cursor, start, bound)
    if isinstance(candidate, HitBound):
        return candidate
    pos = start
    while True:
        if candidate is None:
            candidate = _open_before(cursor, pos, start, bound)
            if candidate is None:
                logger.debug(f"No <{target or '*'}> within {bound.max_distance} of {start}")
                return HitBound(pos)
        if start - candidate.start > bound.max_distance:
            return HitBound(candidate.start)
        if target is None or candidate.name == target:
            return Found(candidate.start, candidate.name)
        if bound.barrier is not None and candidate.name == bound.barrier:
            logger.debug(f"Hit barrier <{bound.barrier}> at {candidate.start} looking for <{target}>")
            return HitBarrier(candidate.start, candidate.name)
        pos = candidate.start
        candidate = None


def find_enclosing(
    cursor: TokenCursor,
    start: int,
    target: Optional[str] = None,
    bound: Optional[SearchBound] = None,
) -> int:
    """
    Start offset of the nearest enclosing element named target.

    Raises:
        BoundedSearchError: If no such element lies within the bound
        BarrierError: If the barrier element encloses start more closely
        MalformedTokenError: If the walk crosses broken markup
    """
    if bound is None:
        bound = SearchBound()
    result = ascend(cursor, start, target, bound)
    if isinstance(result, Found):
        return result.offset
    if isinstance(result, HitBarrier):
        raise BarrierError(
            f"Reached <{result.name}> at {result.offset} before finding <{target}>",
            result.name, result.offset,
        )
    raise BoundedSearchError(
        f"No enclosing <{target or '*'}> within {bound.max_distance} characters of {start}",
        start, bound.max_distance,
    )


def enclosing_element(cursor: TokenCursor, offset: int, bound: Optional[SearchBound] = None) -> str:
    """Name of the element enclosing offset."""
    start = find_enclosing(cursor, offset, None, bound)
    return cursor.token_after(start).name


# =============================================================================
# Helpers
# =============================================================================

def element_bounds(cursor: TokenCursor, tag_start: int, bound: Optional[SearchBound] = None) -> Tuple[int, int]:
    """(start, end) of the whole element whose start tag begins at tag_start."""
    return tag_start, cursor.scan_element_forward(tag_start, bound)


def enclosing_bounds(
    cursor: TokenCursor,
    offset: int,
    target: str,
    bound: Optional[SearchBound] = None,
) -> Tuple[int, int]:
    """(start, end) of the nearest enclosing element named target."""
    start = find_enclosing(cursor, offset, target, bound)
    return element_bounds(cursor, start, bound)


def enclosing_attribute(
    cursor: TokenCursor,
    offset: int,
    target: str,
    attribute: str,
    bound: Optional[SearchBound] = None,
) -> Optional[str]:
    """Value of an attribute on the nearest enclosing element named target."""
    start = find_enclosing(cursor, offset, target, bound)
    return cursor.attribute_value(cursor.token_after(start), attribute)
