"""Tests for bounded ancestor search."""
import pytest

from dixedit import (
    BarrierError, BoundedSearchError, Found, HitBarrier, HitBound, MalformedTokenError,
    SearchBound, TokenCursor, ascend, find_enclosing,
)
from dixedit.ancestors import enclosing_attribute, enclosing_bounds, enclosing_element


NESTED = '<section><e lm="a b"><p><l>a<b/>b</l><r>z<s n="n"/></r></p></e></section>'


def test_every_offset_inside_element_finds_it():
    cursor = TokenCursor(NESTED)
    e_start = NESTED.index("<e ")
    e_end = NESTED.index("</e>") + len("</e>")
    for offset in range(e_start + 1, e_end):
        assert find_enclosing(cursor, offset, "e") == e_start, offset


def test_every_offset_inside_inner_element():
    cursor = TokenCursor(NESTED)
    l_start = NESTED.index("<l>")
    l_end = NESTED.index("</l>") + len("</l>")
    for offset in range(l_start + 1, l_end):
        assert find_enclosing(cursor, offset, "l") == l_start, offset
        assert find_enclosing(cursor, offset, "section") == 0


def test_offset_at_start_tag_is_outside_it():
    cursor = TokenCursor(NESTED)
    e_start = NESTED.index("<e ")
    assert enclosing_element(cursor, e_start) == "section"


def test_empty_element_at_offset_counts_as_enclosing():
    cursor = TokenCursor(NESTED)
    s_start = NESTED.index("<s ")
    assert find_enclosing(cursor, s_start, "s") == s_start
    assert enclosing_element(cursor, s_start) == "s"


def test_nearest_enclosing_name():
    cursor = TokenCursor(NESTED)
    assert enclosing_element(cursor, NESTED.index("z")) == "r"
    assert enclosing_element(cursor, NESTED.index("<b/>") + 1) == "b"
    assert enclosing_element(cursor, NESTED.index("<b/>")) == "b"
    assert enclosing_element(cursor, NESTED.index("<b/>") + 4) == "l"


def test_bound_too_small():
    cursor = TokenCursor(NESTED)
    offset = NESTED.index("z")
    distance = offset - NESTED.index("<e ")
    with pytest.raises(BoundedSearchError):
        find_enclosing(cursor, offset, "e", SearchBound(max_distance=distance - 1))
    assert find_enclosing(cursor, offset, "e", SearchBound(max_distance=distance)) == NESTED.index("<e ")


def test_no_enclosing_element_is_bounded_failure():
    cursor = TokenCursor(NESTED)
    result = ascend(cursor, NESTED.index("z"), "pardef")
    assert isinstance(result, HitBound)
    with pytest.raises(BoundedSearchError):
        find_enclosing(cursor, NESTED.index("z"), "pardef")


def test_barrier_closer_than_target(sample_dix, cursor):
    offset = sample_dix.index("<l>er</l>")
    bound = SearchBound(barrier="pardefs")

    result = ascend(cursor, offset, "section", bound)
    assert isinstance(result, HitBarrier)
    assert result.offset == sample_dix.index("<pardefs>")

    with pytest.raises(BarrierError) as excinfo:
        find_enclosing(cursor, offset, "section", bound)
    assert excinfo.value.barrier == "pardefs"


def test_target_before_barrier(sample_dix, cursor):
    offset = sample_dix.index("<l>er</l>")
    result = ascend(cursor, offset, "pardef", SearchBound(barrier="pardefs"))
    assert result == Found(sample_dix.index('<pardef n="bobl/e__n">'), "pardef")


def test_walk_skips_closed_siblings(sample_dix, cursor):
    offset = sample_dix.index('<e lm="lik">')
    assert find_enclosing(cursor, offset, "section") == sample_dix.index("<section")


def test_mismatched_tags_raise():
    text = "<e><i>x</l></e>"
    with pytest.raises(MalformedTokenError):
        find_enclosing(TokenCursor(text), text.index("</e>"), "e")


def test_enclosing_bounds_and_attribute(sample_dix, cursor):
    offset = sample_dix.index("grupp</i>")
    start, end = enclosing_bounds(cursor, offset, "e")
    assert sample_dix[start:end] == '<e lm="gruppe"><i>grupp</i><par n="lø/e__n"/></e>'
    assert enclosing_attribute(cursor, offset, "e", "lm") == "gruppe"
    assert enclosing_attribute(cursor, offset, "section", "id") == "main"


def test_offset_in_end_tag_beyond_bound():
    text = "<e>" + "x" * 50 + "</e>"
    cursor = TokenCursor(text)
    inside = text.index("</e>") + 2
    assert isinstance(ascend(cursor, inside, "e", SearchBound(max_distance=10)), HitBound)
    assert ascend(cursor, inside, "e") == Found(0, "e")
    with pytest.raises(BoundedSearchError):
        find_enclosing(cursor, inside, "e", SearchBound(max_distance=10))


def test_offset_in_end_tag_distance_counts_from_offset():
    text = "<e>xx</e>"
    cursor = TokenCursor(text)
    inside = text.index("</e>") + 2
    assert ascend(cursor, inside, "e", SearchBound(max_distance=inside)) == Found(0, "e")
    assert isinstance(ascend(cursor, inside, "e", SearchBound(max_distance=inside - 1)), HitBound)
