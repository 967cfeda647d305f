"""
Next/previous "interesting" position for dixedit.

Dictionary entries pack several fields (lemma, stem, paradigm) onto one line.
The walker here jumps between exactly those fields, driven by a declarative
table of interesting attributes per element type instead of per-shape code.
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Mapping, Optional, Tuple

from dixedit.constants import BACKWARD_STOP_TAGS, INTERESTING, MAX_SKIPS, SKIP_EMPTY
from dixedit.exceptions import BoundedSearchError, MalformedTokenError
from dixedit.raw_types import Attribute, TokenKind
from dixedit.tokenizer import TokenCursor


# =============================================================================
# Interest Table
# =============================================================================

@dataclass(frozen=True)
class InterestTable:
    """
    Which attributes of which elements are landing spots.

    Attributes:
        interesting: Element name -> ordered attribute names
        skip: Element names passed over when they have nothing interesting
    """
    interesting: Mapping[str, Tuple[str, ...]]
    skip: FrozenSet[str]

    @classmethod
    def from_mapping(cls, interesting: Mapping[str, Iterable[str]], skip: Iterable[str] = ()) -> "InterestTable":
        return cls(
            interesting={name: tuple(attrs) for name, attrs in interesting.items()},
            skip=frozenset(skip),
        )

    def attributes_for(self, name: Optional[str]) -> Tuple[str, ...]:
        if name is None:
            return ()
        return self.interesting.get(name, ())

    def is_interesting(self, name: Optional[str]) -> bool:
        """True if the element has a non-empty interest list."""
        return bool(self.attributes_for(name))

    def is_skipped(self, name: Optional[str]) -> bool:
        return name in self.skip


DEFAULT_INTEREST = InterestTable.from_mapping(INTERESTING, SKIP_EMPTY)


# =============================================================================
# Nearest Candidate
# =============================================================================

def nearest(pivot: int, backward: bool, candidates: Iterable[Optional[int]]) -> Optional[int]:
    """
    Candidate numerically nearest pivot on one side of it.

    Backward wants the largest candidate strictly below pivot, forward the
    smallest strictly above. None entries are ignored.
    """
    if backward:
        below = [c for c in candidates if c is not None and c < pivot]
        return max(below) if below else None
    above = [c for c in candidates if c is not None and c > pivot]
    return min(above) if above else None


def nearest_interesting(
    attributes: Iterable[Attribute],
    pivot: int,
    backward: bool,
    interest: Iterable[str],
) -> Optional[int]:
    """Value start of the nearest attribute named in interest."""
    wanted = set(interest)
    return nearest(pivot, backward, (a.value_start for a in attributes if a.name in wanted))


# =============================================================================
# Stepping
# =============================================================================

def step(
    cursor: TokenCursor,
    offset: int,
    backward: bool = False,
    table: InterestTable = DEFAULT_INTEREST,
    max_skips: int = MAX_SKIPS,
) -> int:
    """
    Next interesting offset from offset.

    Args:
        cursor: Token cursor over the buffer
        offset: Where to start
        backward: Move towards the buffer start
        table: Interest table to use
        max_skips: Tokens that may be passed over before giving up

    Returns:
        The new offset; the buffer start or end if nothing interesting remains

    Raises:
        MalformedTokenError: If the walk runs into broken markup
        BoundedSearchError: If more than max_skips tokens are passed over
    """
    pos = offset
    for _ in range(max_skips):
        token = cursor.token_before(pos) if backward else cursor.token_after(pos)
        if token is None:
            return pos
        boundary = token.start if backward else token.end

        if token.kind is TokenKind.NOT_WELL_FORMED:
            raise MalformedTokenError(f"Not well-formed markup at {token.start}", token.start)

        if token.kind in (TokenKind.COMMENT, TokenKind.PROLOG):
            pos = boundary
            continue

        interest = table.attributes_for(token.name) if token.opens else ()
        if interest:
            near = nearest_interesting(token.attributes, pos, backward, interest)
            if near is not None:
                return near

        if token.opens and (interest or table.is_skipped(token.name)):
            pos = boundary
            continue

        if token.kind in (TokenKind.SPACE, TokenKind.DATA, TokenKind.END_TAG):
            pos = boundary
            if backward:
                before = cursor.token_before(pos)
                if (before is not None and before.kind is TokenKind.START_TAG
                        and before.name in BACKWARD_STOP_TAGS):
                    return pos
            continue

        # Plain start tag or empty element: forward lands after it,
        # backward passes it and keeps looking
        if not backward:
            return boundary
        pos = boundary

    raise BoundedSearchError(f"Gave up after passing {max_skips} tokens from {offset}", offset)


def move_by(
    cursor: TokenCursor,
    offset: int,
    steps: int,
    table: InterestTable = DEFAULT_INTEREST,
) -> int:
    """Apply step |steps| times; negative steps move backward."""
    backward = steps < 0
    pos = offset
    for _ in range(abs(steps)):
        new = step(cursor, pos, backward, table)
        if new == pos:
            break
        pos = new
    return pos


def interesting_offsets(
    cursor: TokenCursor,
    start: int = 0,
    end: Optional[int] = None,
    table: InterestTable = DEFAULT_INTEREST,
) -> List[int]:
    """Every forward landing spot between start and end."""
    stop = len(cursor) if end is None else end
    offsets = []
    pos = start
    while True:
        pos = step(cursor, pos, False, table)
        if pos >= stop or (offsets and pos == offsets[-1]):
            break
        offsets.append(pos)
    return offsets
