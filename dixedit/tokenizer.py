"""
Token scanner module for dixedit.

This module classifies positions of a dictionary buffer into XML-ish tokens
without parsing the whole document. Classification of an offset looks back
at most `lookback` characters, so it stays cheap on multi-megabyte files.

Two entry points:
- TokenCursor: position-addressable scanner over an immutable text snapshot
- Buffer: mutable text with a point; hands out a fresh cursor per edit
"""

import re
from typing import Iterator, List, Optional, Tuple

from dixedit.constants import DEFAULT_LOOKBACK
from dixedit.exceptions import BoundedSearchError, MalformedTokenError
from dixedit.raw_types import Attribute, SearchBound, Token, TokenKind


# =============================================================================
# Lexical Patterns
# =============================================================================

TAG_RE = re.compile(
    r'<(?P<close>/)?(?P<name>[A-Za-z_][-\w.:]*)'
    r'(?P<attrs>(?:\s+[^\s=/<>"\']+\s*=\s*(?:"[^"<]*"|\'[^\'<]*\'))*)'
    r'\s*(?P<empty>/)?>'
)

ATTR_RE = re.compile(r'(?P<name>[^\s=/<>"\']+)\s*=\s*(?:"(?P<dq>[^"<]*)"|\'(?P<sq>[^\'<]*)\')')

COMMENT_OPEN = '<!--'
COMMENT_CLOSE = '-->'
CDATA_OPEN = '<![CDATA['
CDATA_CLOSE = ']]>'


# =============================================================================
# TokenCursor
# =============================================================================

class TokenCursor:
    """
    Lazy, position-addressable token view of a text snapshot.

    Tokens are computed on demand and never cached; a cursor must not be used
    after the text it was built from has changed.
    """

    def __init__(self, text: str, lookback: int = DEFAULT_LOOKBACK):
        self._text = text
        self.lookback = lookback

    def __len__(self) -> int:
        return len(self._text)

    @property
    def source(self) -> str:
        return self._text

    def text(self, start: int, end: int) -> str:
        """Raw slice of the buffer."""
        return self._text[start:end]

    # -------------------------------------------------------------------------
    # Classification
    # -------------------------------------------------------------------------

    def token_after(self, offset: int) -> Optional[Token]:
        """Token with start <= offset < end, or None at end of buffer."""
        text = self._text
        if offset < 0 or offset >= len(text):
            return None

        floor = max(0, offset - self.lookback)

        # Comments may contain '<', so they are checked first
        c = text.rfind(COMMENT_OPEN, floor, offset + 1)
        if c != -1:
            close = text.find(COMMENT_CLOSE, c + len(COMMENT_OPEN))
            if close == -1:
                return Token(TokenKind.NOT_WELL_FORMED, c, len(text))
            if close + len(COMMENT_CLOSE) > offset:
                return Token(TokenKind.COMMENT, c, close + len(COMMENT_CLOSE))
            floor = close + len(COMMENT_CLOSE)
        elif floor > 0:
            # A comment opened before the window may still be open here
            close = text.find(COMMENT_CLOSE, floor, offset + self.lookback)
            if close != -1 and text.find(COMMENT_OPEN, floor, close) == -1:
                if close + len(COMMENT_CLOSE) > offset:
                    return Token(TokenKind.NOT_WELL_FORMED, floor, close + len(COMMENT_CLOSE))
                floor = close + len(COMMENT_CLOSE)

        lt = text.rfind('<', floor, offset + 1)
        if lt == -1:
            return self._data_token(floor)

        token = self._lex_markup(lt)
        if token.end > offset:
            return token
        return self._data_token(token.end)

    def token_before(self, offset: int) -> Optional[Token]:
        """Token with start < offset <= end, or None at buffer start."""
        if offset <= 0:
            return None
        offset = min(offset, len(self._text))
        return self.token_after(offset - 1)

    def iter_tokens(self, start: int, end: Optional[int] = None) -> Iterator[Token]:
        """
        Lex forward from a token boundary.

        Args:
            start: Offset where a token begins
            end: Stop once a token reaches past this offset (default: buffer end)
        """
        text = self._text
        stop = len(text) if end is None else min(end, len(text))
        pos = start
        while pos < stop:
            if text[pos] == '<':
                token = self._lex_markup(pos)
            else:
                token = self._data_token(pos)
            yield token
            pos = token.end

    def attributes(self, token: Token) -> Tuple[Attribute, ...]:
        return token.attributes

    def attribute_value(self, token: Token, name: str) -> Optional[str]:
        attr = token.attribute(name)
        if attr is None:
            return None
        return self._text[attr.value_start:attr.value_end]

    # -------------------------------------------------------------------------
    # Structural matching
    # -------------------------------------------------------------------------

    def scan_element_forward(self, offset: int, bound: Optional[SearchBound] = None) -> int:
        """
        Find the end of the element starting at offset.

        Returns:
            Offset just past the matching end tag (or past the empty element)

        Raises:
            MalformedTokenError: No element starts at offset, or tags don't balance
            BoundedSearchError: The end lies beyond bound.max_distance
        """
        token = self.token_after(offset)
        if token is None or not token.opens or token.start != offset:
            raise MalformedTokenError(f"No element starts at {offset}", offset)
        if token.kind is TokenKind.EMPTY_ELEMENT:
            return token.end

        limit = offset + bound.max_distance if bound is not None else None
        stack = [token.name]
        for tok in self.iter_tokens(token.end):
            if limit is not None and tok.end > limit:
                raise BoundedSearchError(
                    f"End of <{token.name}> not found within {bound.max_distance} characters",
                    offset, bound.max_distance,
                )
            if tok.kind is TokenKind.NOT_WELL_FORMED:
                raise MalformedTokenError(f"Not well-formed markup at {tok.start}", tok.start)
            if tok.kind is TokenKind.START_TAG:
                stack.append(tok.name)
            elif tok.kind is TokenKind.END_TAG:
                if tok.name != stack[-1]:
                    raise MalformedTokenError(
                        f"Mismatched end tag </{tok.name}> at {tok.start}, expected </{stack[-1]}>",
                        tok.start,
                    )
                stack.pop()
                if not stack:
                    return tok.end
        raise MalformedTokenError(f"Unclosed element <{token.name}> at {offset}", offset)

    def scan_element_backward(self, offset: int, bound: Optional[SearchBound] = None) -> int:
        """
        Find the start of the element whose end tag finishes at offset.

        Returns:
            Offset of the matching start tag

        Raises:
            MalformedTokenError: No end tag finishes at offset, or tags don't balance
            BoundedSearchError: The start lies beyond bound.max_distance
        """
        token = self.token_before(offset)
        if token is None or token.kind is not TokenKind.END_TAG or token.end != offset:
            raise MalformedTokenError(f"No end tag finishes at {offset}", offset)

        stack = [token.name]
        pos = token.start
        while stack:
            tok = self.token_before(pos)
            if tok is None:
                raise MalformedTokenError(f"No start tag for </{stack[-1]}>", offset)
            if bound is not None and offset - tok.start > bound.max_distance:
                raise BoundedSearchError(
                    f"Start of <{token.name}> not found within {bound.max_distance} characters",
                    offset, bound.max_distance,
                )
            if tok.kind is TokenKind.NOT_WELL_FORMED:
                raise MalformedTokenError(f"Not well-formed markup at {tok.start}", tok.start)
            if tok.kind is TokenKind.END_TAG:
                stack.append(tok.name)
            elif tok.kind is TokenKind.START_TAG:
                if tok.name != stack[-1]:
                    raise MalformedTokenError(
                        f"Mismatched start tag <{tok.name}> at {tok.start}, expected <{stack[-1]}>",
                        tok.start,
                    )
                stack.pop()
            pos = tok.start
        return pos

    # -------------------------------------------------------------------------
    # Lexing helpers
    # -------------------------------------------------------------------------

    def _data_token(self, start: int) -> Token:
        text = self._text
        end = text.find('<', start)
        if end == -1:
            end = len(text)
        if text[start:end].strip():
            return Token(TokenKind.DATA, start, end)
        return Token(TokenKind.SPACE, start, end)

    def _lex_markup(self, lt: int) -> Token:
        """Lex the markup token starting with the '<' at lt."""
        text = self._text

        if text.startswith(COMMENT_OPEN, lt):
            close = text.find(COMMENT_CLOSE, lt + len(COMMENT_OPEN))
            if close == -1:
                return Token(TokenKind.NOT_WELL_FORMED, lt, len(text))
            return Token(TokenKind.COMMENT, lt, close + len(COMMENT_CLOSE))

        if text.startswith(CDATA_OPEN, lt):
            close = text.find(CDATA_CLOSE, lt + len(CDATA_OPEN))
            if close == -1:
                return Token(TokenKind.NOT_WELL_FORMED, lt, len(text))
            return Token(TokenKind.DATA, lt, close + len(CDATA_CLOSE))

        if text.startswith('<?', lt):
            close = text.find('?>', lt + 2)
            if close == -1:
                return Token(TokenKind.NOT_WELL_FORMED, lt, len(text))
            return Token(TokenKind.PROLOG, lt, close + 2)

        if text.startswith('<!', lt):
            gt = text.find('>', lt + 2)
            bracket = text.find('[', lt + 2)
            if bracket != -1 and (gt == -1 or bracket < gt):
                close = text.find(']>', bracket)
                gt = close + 1 if close != -1 else -1
            if gt == -1:
                return Token(TokenKind.NOT_WELL_FORMED, lt, len(text))
            return Token(TokenKind.PROLOG, lt, gt + 1)

        m = TAG_RE.match(text, lt)
        if m is None or (m.group('close') and (m.group('attrs') or m.group('empty'))):
            return Token(TokenKind.NOT_WELL_FORMED, lt, self._recovery_end(lt))

        name = m.group('name')
        if m.group('close'):
            return Token(TokenKind.END_TAG, lt, m.end(), name)

        attributes = tuple(
            Attribute(
                a.group('name'),
                a.start('dq') if a.group('dq') is not None else a.start('sq'),
                a.end('dq') if a.group('dq') is not None else a.end('sq'),
            )
            for a in ATTR_RE.finditer(text, m.start('attrs'), m.end('attrs'))
        )
        kind = TokenKind.EMPTY_ELEMENT if m.group('empty') else TokenKind.START_TAG
        return Token(kind, lt, m.end(), name, attributes)

    def _recovery_end(self, lt: int) -> int:
        """End of a broken tag: its '>' if one comes before the next '<'."""
        text = self._text
        next_lt = text.find('<', lt + 1)
        if next_lt == -1:
            next_lt = len(text)
        gt = text.find('>', lt + 1, next_lt)
        return gt + 1 if gt != -1 else next_lt


# =============================================================================
# Buffer
# =============================================================================

Edit = Tuple[int, int, str]


class Buffer:
    """
    Mutable dictionary text with a point.

    Every edit bumps `version` and drops the cached cursor, so tokens taken
    before an edit are never reused.
    """

    def __init__(self, text: str = "", point: int = 0, lookback: int = DEFAULT_LOOKBACK):
        self._text = text
        self.point = max(0, min(point, len(text)))
        self.version = 0
        self.lookback = lookback
        self._cursor: Optional[TokenCursor] = None

    @property
    def text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def cursor(self) -> TokenCursor:
        """Cursor over the current text."""
        if self._cursor is None:
            self._cursor = TokenCursor(self._text, self.lookback)
        return self._cursor

    def substring(self, start: int, end: int) -> str:
        return self._text[start:end]

    def line_start(self, offset: int) -> int:
        return self._text.rfind('\n', 0, offset) + 1

    def line_end(self, offset: int) -> int:
        end = self._text.find('\n', offset)
        return len(self._text) if end == -1 else end

    def line_offset(self, line: int) -> int:
        """Offset of the start of a 1-based line number."""
        offset = 0
        for _ in range(line - 1):
            nl = self._text.find('\n', offset)
            if nl == -1:
                return len(self._text)
            offset = nl + 1
        return offset

    def replace(self, start: int, end: int, new: str) -> None:
        self.apply_edits([(start, end, new)])

    def insert(self, offset: int, new: str) -> None:
        self.apply_edits([(offset, offset, new)])

    def apply_edits(self, edits: List[Edit]) -> None:
        """
        Apply several replacements at once.

        Offsets refer to the text before any of the edits. Edits must not
        overlap; they are checked before anything is changed.

        Raises:
            ValueError: If edits overlap or fall outside the buffer
        """
        ordered = sorted(edits, key=lambda e: (e[0], e[1]))
        prev_end = 0
        for start, end, _ in ordered:
            if start < prev_end or start > end or end > len(self._text):
                raise ValueError(f"Invalid or overlapping edit at {start}-{end}")
            prev_end = end

        text = self._text
        point = self.point
        for start, end, new in reversed(ordered):
            text = text[:start] + new + text[end:]
            if point >= end:
                point += len(new) - (end - start)
            elif point > start:
                point = start + len(new)

        self._text = text
        self.point = point
        self.version += 1
        self._cursor = None
