"""
CLI interface for dixedit.

Usage:
    dixedit guess apertium-nno.nno.dix øygruppe --type n
    dixedit suffixes apertium-nno.nno.dix "lik/e__vblex"
    dixedit duplicates apertium-nno.nno.dix --right
    dixedit enclosing apertium-nno.nno.dix 12345
    dixedit next apertium-nno.nno.dix 12345 -n 3
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dixedit import __version__
from dixedit.ancestors import enclosing_element
from dixedit.constants import DEFAULT_PARSE_BOUND
from dixedit.dictionary import IndexMode, TemplateGuess
from dixedit.navigation import move_by
from dixedit.pardefs import compile_sorted_suffix_list, find_duplicate_pardefs, iter_pardefs
from dixedit.raw_types import SearchBound
from dixedit.session import DixSession
from dixedit.tokenizer import TokenCursor


# ============================================================================
# Output Formatting
# ============================================================================

def format_guess(guess: Optional[TemplateGuess], word: str, as_json: bool) -> str:
    if as_json:
        if guess is None:
            return json.dumps({"word": word, "guess": None}, ensure_ascii=False)
        return json.dumps({
            "word": word,
            "matched_suffix": guess.matched_suffix,
            "remainder": guess.remainder,
            "template_lemma": guess.template_lemma,
            "template": guess.template,
            "entry": guess.render(),
        }, ensure_ascii=False, indent=2)
    if guess is None:
        return f"No fitting template for {word}"
    return guess.render()


def format_list(items: List[str], as_json: bool) -> str:
    if as_json:
        return json.dumps(items, ensure_ascii=False)
    return "\n".join(items)


def format_groups(groups: List[List[str]], as_json: bool) -> str:
    if as_json:
        return json.dumps(groups, ensure_ascii=False, indent=2)
    return "\n".join(" ".join(names) for names in groups)


# ============================================================================
# Commands
# ============================================================================

def read_text(path: Path) -> str:
    return path.read_text(encoding='utf-8')


def cmd_guess(args) -> str:
    session = DixSession(read_text(args.file), document_id=str(args.file), max_distance=args.bound)
    offset = session.buffer.line_offset(args.line) if args.line else len(session.text)
    mode = IndexMode(args.mode)
    index = session.build_paradigm_index(args.type, mode, offset=offset)
    guess = session.guess_template(index, args.word, mode)
    return format_guess(guess, args.word, args.json)


def cmd_suffixes(args) -> str:
    text = read_text(args.file)
    for region in iter_pardefs(text):
        if region.name == args.pardef:
            return format_list(compile_sorted_suffix_list(text[region.start:region.end], region.start), args.json)
    raise LookupError(f"No pardef named {args.pardef}")


def cmd_duplicates(args) -> str:
    return format_groups(find_duplicate_pardefs(read_text(args.file), args.right), args.json)


def cmd_enclosing(args) -> str:
    cursor = TokenCursor(read_text(args.file))
    return enclosing_element(cursor, args.offset, SearchBound(args.barrier, args.bound))


def cmd_next(args) -> str:
    cursor = TokenCursor(read_text(args.file))
    return str(move_by(cursor, args.offset, args.steps))


# ============================================================================
# Main
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dixedit",
        description="Editing assistance for Apertium dictionaries",
    )
    parser.add_argument(
        "--json", "-j",
        action="store_true",
        help="Output as JSON",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log progress to stderr",
    )
    parser.add_argument(
        "--bound",
        type=int,
        default=DEFAULT_PARSE_BOUND,
        help=f"Max characters a structural search may cover (default: {DEFAULT_PARSE_BOUND})",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"dixedit {__version__}",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    guess = sub.add_parser("guess", help="Guess an entry for a new word")
    guess.add_argument("file", type=Path)
    guess.add_argument("word")
    guess.add_argument("--type", "-t", required=True, help="Paradigm type, e.g. n or vblex")
    guess.add_argument("--mode", "-m", choices=[m.value for m in IndexMode], default=IndexMode.ENTRIES.value)
    guess.add_argument("--line", "-l", type=int, help="Only index entries above this line")
    guess.set_defaults(func=cmd_guess)

    suffixes = sub.add_parser("suffixes", help="Sorted suffix list of a pardef")
    suffixes.add_argument("file", type=Path)
    suffixes.add_argument("pardef")
    suffixes.set_defaults(func=cmd_suffixes)

    duplicates = sub.add_parser("duplicates", help="Pardefs with identical suffix lists")
    duplicates.add_argument("file", type=Path)
    duplicates.add_argument("--right", "-r", action="store_true", help="Compare right sides too")
    duplicates.set_defaults(func=cmd_duplicates)

    enclosing = sub.add_parser("enclosing", help="Name of the element enclosing an offset")
    enclosing.add_argument("file", type=Path)
    enclosing.add_argument("offset", type=int)
    enclosing.add_argument("--barrier", "-b", help="Fail when this element is reached first")
    enclosing.set_defaults(func=cmd_enclosing)

    nxt = sub.add_parser("next", help="Offset of the next interesting position")
    nxt.add_argument("file", type=Path)
    nxt.add_argument("offset", type=int)
    nxt.add_argument("--steps", "-n", type=int, default=1, help="Negative to move backward")
    nxt.set_defaults(func=cmd_next)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    try:
        print(args.func(args))
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
