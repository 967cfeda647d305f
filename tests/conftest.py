"""Pytest configuration and shared fixtures."""
import pytest

from dixedit import DixSession, TokenCursor


SAMPLE_DIX = """<?xml version="1.0" encoding="UTF-8"?>
<dictionary>
  <sdefs>
    <sdef n="n" c="Noun"/>
    <sdef n="vblex"/>
    <sdef n="sg"/>
    <sdef n="pl"/>
  </sdefs>
  <pardefs>
    <pardef n="bobl/e__n">
      <e><p><l>e</l><r>e<s n="n"/><s n="sg"/></r></p></e>
      <e><p><l>er</l><r>e<s n="n"/><s n="pl"/></r></p></e>
    </pardef>
    <pardef n="lø/e__n">
      <e><p><l>er</l><r>e<s n="n"/><s n="pl"/></r></p></e>
      <e><p><l>e</l><r>e<s n="n"/><s n="sg"/></r></p></e>
    </pardef>
    <pardef n="tabell/0__n">
      <e><p><l></l><r><s n="n"/><s n="sg"/></r></p></e>
      <e><p><l>ar</l><r><s n="n"/><s n="pl"/></r></p></e>
    </pardef>
  </pardefs>
  <section id="main" type="standard">
    <e lm="boble"><i>bobl</i><par n="bobl/e__n"/></e>
    <e lm="tabell"><i>tabell</i><par n="tabell/0__n"/></e>
    <e lm="gruppe"><i>grupp</i><par n="lø/e__n"/></e>
    <e lm="lik"><i>lik</i><par n="lik/e__vblex"/></e>
  </section>
</dictionary>
"""


@pytest.fixture
def sample_dix():
    """A small monolingual dictionary."""
    return SAMPLE_DIX


@pytest.fixture
def cursor(sample_dix):
    """Token cursor over the sample dictionary."""
    return TokenCursor(sample_dix)


@pytest.fixture
def session(sample_dix):
    """Editing session on the sample dictionary, point at the end."""
    s = DixSession(sample_dix, document_id="sample.dix")
    s.buffer.point = len(sample_dix)
    return s


@pytest.fixture
def dix_file(tmp_path, sample_dix):
    """The sample dictionary written to disk."""
    path = tmp_path / "apertium-nno.nno.dix"
    path.write_text(sample_dix, encoding="utf-8")
    return path
