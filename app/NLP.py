import re
from typing import Any, Callable, Dict, FrozenSet, NamedTuple, Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError

from app.errors import ParseConflict, TypeMismatch, Unparseable
from app.filters import MAX_FILTER_VALUE, ParsedFilter, validate_filter

_NUM_WORDS = {
    'zero': 0,
    'one': 1,
    'two': 2,
    'three': 3,
    'four': 4,
    'five': 5,
    'six': 6,
    'seven': 7,
    'eight': 8,
    'nine': 9,
    'ten': 10,
    'eleven': 11,
    'twelve': 12,
    'thirteen': 13,
    'fourteen': 14,
    'fifteen': 15,
    'sixteen': 16,
    'seventeen': 17,
    'eighteen': 18,
    'nineteen': 19,
    'twenty': 20,
}

# Digits or a number word, as a whole word
_NUM = r'(\d+|' + '|'.join(sorted(_NUM_WORDS, key=len, reverse=True)) + r')\b'
_CHARS = r'(?:characters?|chars?)\b'
_MAX_DIGITS = len(str(MAX_FILTER_VALUE))

# Comparatives in front of "N words" / "N characters". Captured so that those
# occurrences are not read as exact counts.
_BOUND = r'(\b(?:longer|shorter|more|fewer|less)\s+than\s+|\bat\s+(?:least|most)\s+)?'

_PALINDROME_RE = re.compile(r'\b(non[-\s]*|not\s+(?:an?\s+)?)?palindrom(?:es?|ic)\b')
_SINGLE_WORD_RE = re.compile(r'\b(?:single|one)\s+word\b')
_WORD_COUNT_RE = re.compile(_BOUND + r'\b(?:exactly\s+)?' + _NUM + r'\s+words?\b')
_LONGER_RE = re.compile(r'\blonger\s+than\s+' + _NUM)
_SHORTER_RE = re.compile(r'\bshorter\s+than\s+' + _NUM)
_AT_LEAST_RE = re.compile(r'\bat\s+least\s+' + _NUM + r'\s*' + _CHARS)
_AT_MOST_RE = re.compile(r'\bat\s+most\s+' + _NUM + r'\s*' + _CHARS)
_EXACT_LENGTH_RE = re.compile(_BOUND + r'\b(?:exactly\s+)?' + _NUM + r'\s*' + _CHARS)
_VOWEL_RE = re.compile(r'\b(?:first|initial)\s+vowel\b')
_CONTAINS_RE = re.compile(
    r'\bcontain(?:s|ing)?\s+(?:(?:the|an?)\s+)?(?:(?:letter|character)\s+)?'
    r'(?P<q>[\'"]?)(?P<ch>\S)(?P=q)(?=$|[\s,.;:!?])'
)


def _to_int(token: str) -> int:
    if token.isdigit():
        # Longer digit runs cannot fit in MAX_FILTER_VALUE
        if len(token) > _MAX_DIGITS:
            raise OverflowError(f"{token[:12]}... is out of range")
        return int(token)
    return _NUM_WORDS[token]


class InterpretedQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    original: str
    parsed_filters: ParsedFilter


# ---------------------------------------------------------------------------
# Accumulation
# ---------------------------------------------------------------------------
class _Draft(NamedTuple):
    fields: Dict[str, Any]
    # Fields whose current value came from a heuristic and may be replaced
    overridable: FrozenSet[str] = frozenset()


def _contribute(draft: _Draft, field: str, value: Any, *, overridable: bool = False) -> _Draft:
    """Return a new draft with ``field`` set to ``value``.

    A held heuristic value is replaced silently; a held explicit value must
    agree with the new one or the phrase contradicts itself.
    """
    if field in draft.fields and field not in draft.overridable:
        existing = draft.fields[field]
        if existing != value:
            raise ParseConflict(field, existing, value)
        return draft

    fields = dict(draft.fields)
    fields[field] = value
    marks = draft.overridable | {field} if overridable else draft.overridable - {field}
    return _Draft(fields, marks)


Rule = Callable[[str, _Draft], _Draft]


def _palindrome(text: str, draft: _Draft) -> _Draft:
    for m in _PALINDROME_RE.finditer(text):
        draft = _contribute(draft, 'is_palindrome', m.group(1) is None)
    return draft


def _single_word(text: str, draft: _Draft) -> _Draft:
    if _SINGLE_WORD_RE.search(text):
        draft = _contribute(draft, 'word_count', 1)
    return draft


def _word_count(text: str, draft: _Draft) -> _Draft:
    for m in _WORD_COUNT_RE.finditer(text):
        if m.group(1):
            continue
        draft = _contribute(draft, 'word_count', _to_int(m.group(2)))
    return draft


def _longer_than(text: str, draft: _Draft) -> _Draft:
    for m in _LONGER_RE.finditer(text):
        draft = _contribute(draft, 'min_length', _to_int(m.group(1)) + 1)
    return draft


def _shorter_than(text: str, draft: _Draft) -> _Draft:
    for m in _SHORTER_RE.finditer(text):
        draft = _contribute(draft, 'max_length', _to_int(m.group(1)) - 1)
    return draft


def _at_least(text: str, draft: _Draft) -> _Draft:
    for m in _AT_LEAST_RE.finditer(text):
        draft = _contribute(draft, 'min_length', _to_int(m.group(1)))
    return draft


def _at_most(text: str, draft: _Draft) -> _Draft:
    for m in _AT_MOST_RE.finditer(text):
        draft = _contribute(draft, 'max_length', _to_int(m.group(1)))
    return draft


def _exact_length(text: str, draft: _Draft) -> _Draft:
    for m in _EXACT_LENGTH_RE.finditer(text):
        if m.group(1):
            continue
        n = _to_int(m.group(2))
        # "shorter than 10 characters, exactly 5 characters": refuse to pick one
        bounds = {k: draft.fields[k] for k in ('min_length', 'max_length') if k in draft.fields}
        if bounds and bounds != {'min_length': n, 'max_length': n}:
            raise ParseConflict('length', bounds, n)
        draft = _contribute(draft, 'min_length', n)
        draft = _contribute(draft, 'max_length', n)
    return draft


def _first_vowel(text: str, draft: _Draft) -> _Draft:
    if _VOWEL_RE.search(text):
        draft = _contribute(draft, 'contains_character', 'a', overridable=True)
    return draft


def _contains_character(text: str, draft: _Draft) -> _Draft:
    for m in _CONTAINS_RE.finditer(text):
        draft = _contribute(draft, 'contains_character', m.group('ch'))
    return draft


_RULES: Tuple[Rule, ...] = (
    _palindrome,
    _single_word,
    _word_count,
    _longer_than,
    _shorter_than,
    _at_least,
    _at_most,
    _exact_length,
    _first_vowel,
    _contains_character,
)


def parse_filters(text: str) -> Optional[ParsedFilter]:
    """Run every rule over already case-folded ``text``.

    Returns None when nothing matched.
    """
    draft = _Draft({})
    for rule in _RULES:
        draft = rule(text, draft)
    if not draft.fields:
        return None
    return ParsedFilter(**draft.fields)


def interpret_nl_query(query: str) -> InterpretedQuery:
    """Interpret natural language filter queries into structured filters."""
    if not isinstance(query, str):
        raise TypeMismatch(query)
    if not query.strip():
        raise Unparseable(query)

    try:
        parsed = parse_filters(query.casefold())
    except (OverflowError, ValidationError) as e:
        # A number too large for any length or word count
        raise Unparseable(query) from e
    if parsed is None:
        raise Unparseable(query)

    return InterpretedQuery(original=query, parsed_filters=validate_filter(parsed))
