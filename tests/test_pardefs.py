"""Tests for pardef suffix lists, duplicates and sorting."""
import pytest

from dixedit import Buffer, MalformedTokenError
from dixedit.pardefs import (
    compile_sorted_suffix_list, entries_using_pardef, entry_sides, find_duplicate_pardefs,
    goto_pardef, iter_pardefs, pardef_at, parse_snippet, side_text, sort_pardef,
)


LIK = (
    '<pardef n="lik/e__vblex">'
    '<e><p><l>ing</l><r>e<s n="vblex"/><s n="ger"/></r></p></e>'
    '<e><p><l>en</l><r>e<s n="vblex"/><s n="pp"/></r></p></e>'
    '<e><p><l>en</l><r>e<s n="vblex"/><s n="pp"/><s n="def"/></r></p></e>'
    '</pardef>'
)


def test_suffix_list_is_sorted_and_distinct():
    assert compile_sorted_suffix_list(LIK) == ["en", "ing"]


def test_suffix_list_keeps_empty_suffix(sample_dix):
    region = next(r for r in iter_pardefs(sample_dix) if r.name == "tabell/0__n")
    assert compile_sorted_suffix_list(sample_dix[region.start:region.end]) == ["", "ar"]


def test_suffix_list_malformed():
    with pytest.raises(MalformedTokenError):
        compile_sorted_suffix_list('<pardef n="x"><e><p><l>a</p></e></pardef>', 40)


def test_side_text():
    e = parse_snippet('<e><p><l>a<b/>b<j/>c</l><r>ab<s n="n"/><s n="sg"/></r></p></e>')
    assert side_text(e.find("p/l")) == "a b+c"
    assert side_text(e.find("p/r")) == "ab<n><sg>"
    assert side_text(None) == ""


def test_entry_sides_with_identity_and_par():
    e = parse_snippet('<e><i>ab</i><p><l>c</l><r>d</r></p><par n="x__n"/></e>')
    assert entry_sides(e) == ("abc", "abd[x__n]")


def test_iter_and_goto_pardef(sample_dix):
    names = [r.name for r in iter_pardefs(sample_dix)]
    assert names == ["bobl/e__n", "lø/e__n", "tabell/0__n"]
    assert goto_pardef(sample_dix, "lø/e__n") == sample_dix.index('<pardef n="lø/e__n">')
    assert goto_pardef(sample_dix, "missing__n") is None


def test_entries_using_pardef(sample_dix):
    assert [e.lemma for e in entries_using_pardef(sample_dix, "lø/e__n")] == ["gruppe"]
    assert entries_using_pardef(sample_dix, "missing__n") == []


# ============================================================================
# Duplicates
# ============================================================================

def test_duplicates_by_suffixes(sample_dix):
    assert find_duplicate_pardefs(sample_dix) == [["bobl/e__n", "lø/e__n"]]


def test_duplicates_comparing_right_sides():
    text = (
        '<pardefs>'
        '<pardef n="a__n"><e><p><l>e</l><r><s n="sg"/></r></p></e></pardef>'
        '<pardef n="b__n"><e><p><l>e</l><r><s n="pl"/></r></p></e></pardef>'
        '<pardef n="c__n"><e><p><l>e</l><r><s n="sg"/></r></p></e></pardef>'
        '</pardefs>'
    )
    assert find_duplicate_pardefs(text) == [["a__n", "b__n", "c__n"]]
    assert find_duplicate_pardefs(text, compare_right=True) == [["a__n", "c__n"]]


def test_no_duplicates():
    assert find_duplicate_pardefs(LIK) == []


# ============================================================================
# Locating and sorting
# ============================================================================

def test_pardef_at(sample_dix, cursor):
    region = pardef_at(cursor, sample_dix.index("<l>ar</l>"))
    assert region.name == "tabell/0__n"
    assert sample_dix[region.start:region.end].startswith('<pardef n="tabell/0__n">')
    assert sample_dix[region.start:region.end].endswith("</pardef>")


def test_pardef_at_outside_pardef(sample_dix, cursor):
    assert pardef_at(cursor, sample_dix.index('<e lm="boble">')) is None
    # Between pardefs the walk hits <pardefs> first.
    between = sample_dix.index('<pardef n="lø/e__n">') - 1
    assert pardef_at(cursor, between) is None


def test_pardef_at_in_end_tag(sample_dix, cursor):
    end_tag = sample_dix.index("</pardef>") + 3
    assert pardef_at(cursor, end_tag).name == "bobl/e__n"
    assert pardef_at(cursor, end_tag, max_distance=20) is None


def test_pardef_at_end_beyond_bound(sample_dix, cursor):
    offset = sample_dix.index("<l>e</l>")
    start = sample_dix.index('<pardef n="bobl/e__n">')
    assert offset - start < 40
    assert pardef_at(cursor, offset, max_distance=40) is None
    assert pardef_at(cursor, offset, max_distance=200).start == start


def test_sort_pardef(sample_dix):
    buffer = Buffer(sample_dix)
    offset = sample_dix.index("<l>ar</l>")
    assert sort_pardef(buffer, offset) == 2

    region = pardef_at(buffer.cursor(), offset)
    body = buffer.substring(region.start, region.end)
    assert body.index("<l>ar</l>") < body.index("<l></l>")
    # Layout between entries is untouched.
    assert len(buffer) == len(sample_dix)
    assert buffer.text.count("\n") == sample_dix.count("\n")


def test_sort_already_sorted_pardef(sample_dix):
    buffer = Buffer(sample_dix)
    assert sort_pardef(buffer, sample_dix.index("<l>er</l>", sample_dix.index("lø/e__n"))) == 2
    assert buffer.text == sample_dix
    assert buffer.version == 0


def test_sort_outside_pardef(sample_dix):
    buffer = Buffer(sample_dix)
    assert sort_pardef(buffer, sample_dix.index('<e lm="lik">')) == 0
    assert buffer.version == 0
