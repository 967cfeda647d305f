"""
Static configuration for dixedit.

Interest tables for navigation, skip sets and default bounds. Everything here
is read-only data loaded once at import time.
"""

# ============================================================================
# Bounds
# ============================================================================

# Max characters (not lines) an upward or scanning walk may cover.
# Dictionaries get huge; lower this if "no parent element" takes too long.
DEFAULT_PARSE_BOUND = 10000

# How far back the token scanner may look to classify an offset
DEFAULT_LOOKBACK = 20000

# Hard stop for a single navigation step
MAX_SKIPS = 100000

# Unmatched leading characters the template guesser always leaves alone
MIN_UNMATCHED_PREFIX = 2


# ============================================================================
# Navigation Interest Table
# ============================================================================
# Element name -> attributes whose values are landing spots for next/previous.
# Elements mapped to () are known but carry nothing interesting.

INTERESTING = {
    # dix
    'alphabet': (),
    'sdef': ('n', 'c'),
    'section': ('id', 'type'),
    'pardef': ('n',),
    'e': ('lm', 'r', 'c', 'i', 'slr', 'srl', 'v', 'vr', 'vl'),
    'par': ('n',),
    's': ('n',),
    'i': (),
    'p': (),
    'l': (),
    'r': (),
    're': (),
    'g': (),
    'b': (),
    'j': (),
    'a': (),
    # transfer
    'def-cat': ('n',),
    'cat-item': ('lemma', 'tags', 'name'),
    'def-attr': ('n',),
    'attr-item': ('tags', 'lemma'),
    'def-var': ('n', 'v'),
    'def-list': ('n',),
    'list-item': ('v',),
    'def-macro': ('n', 'npar'),
    'rule': ('comment',),
    'pattern-item': ('n',),
    'chunk': ('name', 'namefrom', 'case'),
    'clip': ('pos', 'side', 'part', 'link-to'),
    'lit': ('v',),
    'lit-tag': ('v',),
    'var': ('n',),
    'list': ('n',),
    'in': ('caseless',),
    'equal': ('caseless',),
    'begins-with': ('caseless',),
    'ends-with': ('caseless',),
    'call-macro': ('n',),
    'with-param': ('pos',),
    'get-case-from': ('pos',),
    'modify-case': (),
    # lexical selection
    'match': ('lemma', 'tags', 'surface'),
    'select': ('lemma', 'tags'),
    'remove': ('lemma', 'tags'),
    'repeat': ('from', 'upto'),
    'or': (),
    # modes
    'mode': ('name', 'install'),
    'program': ('name',),
    'file': ('name',),
}

# Containers passed over by next/previous unless they have interesting attributes
SKIP_EMPTY = frozenset([
    'dictionary', 'alphabet', 'sdefs', 'pardefs', 'lu', 'p', 'e', 'tags',
    'chunk', 'tag', 'pattern', 'rule', 'action', 'out', 'b', 'def-macro',
    'choose', 'when', 'test', 'modes', 'mode', 'pipeline', 'program',
    'rules', 'section-def-cats', 'section-def-attrs', 'section-def-vars',
    'section-def-lists', 'section-def-macros', 'section-rules',
    'transfer', 'interchunk', 'postchunk', 'let', 'otherwise', 'and',
    'not', 'concat', 'append',
])

# Backward motion out of text stops right after these start tags
BACKWARD_STOP_TAGS = frozenset(['r', 'l', 'i'])


# ============================================================================
# Dictionary Conventions
# ============================================================================

# Separates a pardef's name from its paradigm type: "lik/e__vblex"
PARADIGM_TYPE_SEPARATOR = '__'

# The literal-space marker used inside dictionary text
BLANK_TAG = '<b/>'

# Values the r="" restriction attribute cycles through
RESTRICTION_CYCLE = (None, 'LR', 'RL')

# The outer container used as a barrier when looking for a pardef
PARDEF_BARRIER = 'pardefs'
