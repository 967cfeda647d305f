"""Tests for the per-document session."""
import pytest

from dixedit import BarrierError, BoundedSearchError, DixSession, IndexMode, ParadigmCache


def test_document_ids_are_distinct():
    a = DixSession("<e/>")
    b = DixSession("<e/>")
    assert a.document_id != b.document_id


def test_structure_queries(session, sample_dix):
    offset = sample_dix.index("grupp</i>")
    assert session.enclosing_element(offset) == "i"
    assert session.find_enclosing(offset, "section") == sample_dix.index("<section")
    with pytest.raises(BarrierError):
        session.find_enclosing(sample_dix.index("<l>er</l>"), "section", barrier="pardefs")


def test_next_interesting_offset(session, sample_dix):
    start = sample_dix.index('<e lm="boble">')
    lemma = session.next_interesting_offset(start)
    assert lemma == start + len('<e lm="')
    # Backward passes the entry tag and lands in the section attributes.
    assert session.next_interesting_offset(lemma, backward=True) == sample_dix.index("standard")


def test_suffix_list_at(session, sample_dix):
    assert session.suffix_list_at(sample_dix.index("<l>er</l>")) == ["e", "er"]
    assert session.suffix_list_at(sample_dix.index('<e lm="lik">')) == []


def test_build_paradigm_index_is_cached(session):
    first = session.build_paradigm_index("n")
    assert session.build_paradigm_index("n") is first

    refreshed = session.build_paradigm_index("n", force_refresh=True)
    assert refreshed is not first
    assert refreshed == first


def test_index_stops_at_point(session, sample_dix):
    session.buffer.point = sample_dix.index('<e lm="gruppe">')
    index = session.build_paradigm_index("n")
    assert len(index) == 2
    guess = session.guess_template(index, "øygruppe")
    assert guess.template_lemma == "boble"
    assert guess.matched_suffix == "e"


def test_guess_template(session):
    index = session.build_paradigm_index("n")
    guess = session.guess_template(index, "øygruppe")
    assert (guess.remainder, guess.matched_suffix) == ("øy", "gruppe")

    pardef_index = session.build_paradigm_index("n", IndexMode.PARDEFS)
    assert session.guess_template(pardef_index, "øygruppe", IndexMode.PARDEFS).template == "lø/e__n"


def test_edits_invalidate_cache(session, sample_dix):
    session.build_paradigm_index("n")
    assert session.cache.peek("sample.dix", "n") is not None

    session.restriction_cycle(sample_dix.index("bobl</i>"))
    assert session.cache.peek("sample.dix", "n") is None
    assert 'r="LR"' in session.text


def test_copy_and_guess_entry(session, sample_dix):
    at = session.copy_entry(sample_dix.index("lik</i>"), restrict=True)
    assert session.text[at:].startswith('<e r="RL" lm="lik">')

    guess = session.guess_entry(session.text.index("</section>"), "øygruppe", "n")
    assert guess is not None
    assert '<e lm="øygruppe">' in session.text
    assert session.cache.peek("sample.dix", "n") is None


def test_sort_pardef(session, sample_dix):
    session.build_paradigm_index("n")
    assert session.sort_pardef(sample_dix.index("<l>ar</l>")) == 2
    assert session.cache.peek("sample.dix", "n") is None
    assert session.sort_pardef(sample_dix.index('<e lm="lik">')) == 0


def test_shared_cache_between_sessions(sample_dix):
    cache = ParadigmCache()
    a = DixSession(sample_dix, document_id="a.dix", cache=cache)
    b = DixSession(sample_dix, document_id="b.dix", cache=cache)
    a.buffer.point = b.buffer.point = len(sample_dix)

    a.build_paradigm_index("n")
    b.build_paradigm_index("n")
    assert len(cache) == 2

    a.restriction_cycle(sample_dix.index("bobl</i>"))
    assert cache.peek("a.dix", "n") is None
    assert cache.peek("b.dix", "n") is not None


def test_small_bound(sample_dix):
    session = DixSession(sample_dix, max_distance=5)
    with pytest.raises(BoundedSearchError):
        session.find_enclosing(sample_dix.index("grupp</i>"), "section")


def test_sort_sorted_pardef_keeps_cache(session, sample_dix):
    session.build_paradigm_index("n")
    offset = sample_dix.index("<l>er</l>", sample_dix.index("lø/e__n"))
    assert session.sort_pardef(offset) == 2
    assert session.buffer.version == 0
    assert session.cache.peek("sample.dix", "n") is not None


def test_suffix_list_at_pardef_end_tag_with_small_bound(sample_dix):
    session = DixSession(sample_dix, max_distance=20)
    assert session.suffix_list_at(sample_dix.index("</pardef>") + 3) == []
