"""Tests for the command line interface."""
import json

import pytest

from dixedit.cli import build_parser, main


def test_guess(dix_file, capsys):
    assert main(["guess", str(dix_file), "øygruppe", "--type", "n"]) == 0
    out = capsys.readouterr().out
    assert out.strip() == '<e lm="øygruppe"><i>øygrupp</i><par n="lø/e__n"/></e>'


def test_guess_json(dix_file, capsys):
    assert main(["--json", "guess", str(dix_file), "øygruppe", "-t", "n"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["matched_suffix"] == "gruppe"
    assert data["remainder"] == "øy"
    assert data["template_lemma"] == "gruppe"


def test_guess_above_line(dix_file, sample_dix, capsys):
    # Line of the boble entry: nothing of type n above it.
    line = sample_dix[:sample_dix.index('<e lm="boble">')].count("\n") + 1
    assert main(["guess", str(dix_file), "øygruppe", "-t", "n", "--line", str(line)]) == 0
    assert capsys.readouterr().out.strip() == "No fitting template for øygruppe"


def test_guess_pardef_mode(dix_file, capsys):
    assert main(["-j", "guess", str(dix_file), "øygruppe", "-t", "n", "-m", "pardefs"]) == 0
    assert json.loads(capsys.readouterr().out)["template"] == "lø/e__n"


def test_suffixes(dix_file, capsys):
    assert main(["suffixes", str(dix_file), "bobl/e__n"]) == 0
    assert capsys.readouterr().out.splitlines() == ["e", "er"]


def test_suffixes_unknown_pardef(dix_file, capsys):
    assert main(["suffixes", str(dix_file), "nope__n"]) == 1
    assert "Error: No pardef named nope__n" in capsys.readouterr().err


def test_duplicates(dix_file, capsys):
    assert main(["--json", "duplicates", str(dix_file)]) == 0
    assert json.loads(capsys.readouterr().out) == [["bobl/e__n", "lø/e__n"]]


def test_enclosing(dix_file, sample_dix, capsys):
    offset = sample_dix.index("grupp</i>")
    assert main(["enclosing", str(dix_file), str(offset)]) == 0
    assert capsys.readouterr().out.strip() == "i"


def test_enclosing_out_of_bound(dix_file, sample_dix, capsys):
    offset = sample_dix.index("grupp</i>")
    assert main(["--bound", "2", "enclosing", str(dix_file), str(offset)]) == 1
    assert capsys.readouterr().err.startswith("Error:")


def test_next(dix_file, sample_dix, capsys):
    start = sample_dix.index('<e lm="boble">')
    assert main(["next", str(dix_file), str(start)]) == 0
    assert int(capsys.readouterr().out) == start + len('<e lm="')


def test_missing_file(tmp_path, capsys):
    assert main(["duplicates", str(tmp_path / "missing.dix")]) == 1
    assert "Error:" in capsys.readouterr().err


def test_guess_requires_type():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["guess", "x.dix", "word"])
