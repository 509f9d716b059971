"""
Tokenizer — Word, term and sentence splitting

Three views of the same text:
- Words: lowercase alphanumeric runs, used for matching and counting
- Terms: sanitized whitespace tokens that keep hyphenated compounds
  ("event-driven", "ci-cd"), used by the taxonomy
- Sentences: abbreviation-aware splitting, used for readability

Stemming uses TextBlob (Porter) so "components" and "component"
meet at the same stem.

Sanitization never raises: anything that isn't a word character,
whitespace or hyphen becomes a separator.
"""

import re
from functools import lru_cache
from typing import Iterable, List, Optional

from textblob import Word

from .lexicon import Lexicon, DEFAULT_LEXICON


_WORD_RE = re.compile(r'[a-z0-9_]+')
_NON_TERM_RE = re.compile(r'[^\w\s-]')


def _as_text(text) -> str:
    if text is None:
        return ""
    return text if isinstance(text, str) else str(text)


def tokenize_words(text: str) -> List[str]:
    """
    Split text into lowercase word tokens.

    Examples:
        >>> tokenize_words("React Server-Components, v18!")
        ['react', 'server', 'components', 'v18']
    """
    return _WORD_RE.findall(_as_text(text).lower())


def sanitize_terms(text: str) -> List[str]:
    """
    Lowercase, strip punctuation except hyphens, split on whitespace.

    Examples:
        >>> sanitize_terms("Event-driven (CQRS) design.")
        ['event-driven', 'cqrs', 'design']
    """
    cleaned = _NON_TERM_RE.sub(' ', _as_text(text).lower())
    return cleaned.split()


def count_words(text: str) -> int:
    """Whitespace-delimited word count."""
    return len(_as_text(text).split())


@lru_cache(maxsize=4096)
def stem(word: str) -> str:
    """Porter stem of a single lowercase word."""
    return Word(word.lower()).stem()


def stem_all(words: Iterable[str]) -> List[str]:
    return [stem(w) for w in words]


def extract_query_terms(query: str, lexicon: Optional[Lexicon] = None) -> List[str]:
    """
    Reduce a search query to its meaningful stems.

    Tokenize, drop stop words and tokens shorter than 3 characters,
    then stem.

    Examples:
        >>> extract_query_terms("What are React Server Components")
        ['react', 'server', 'compon']
    """
    lexicon = lexicon or DEFAULT_LEXICON
    words = [w for w in tokenize_words(query) if not lexicon.is_stop_word(w)]
    stems = [stem(w) for w in words if len(w) > 2]
    return [s for s in stems if s]


# =============================================================================
# Sentence Splitting
# =============================================================================

# Abbreviations that shouldn't trigger sentence splits
ABBREVIATIONS = {
    'mr', 'mrs', 'ms', 'dr', 'prof', 'sr', 'jr',
    'vs', 'etc', 'inc', 'ltd', 'corp',
    'e.g', 'i.e', 'eg', 'ie',
    'min', 'max', 'avg',
}

_ABBREVIATION_RES = [
    re.compile(rf'\b({re.escape(abbr)})\.', re.IGNORECASE) for abbr in ABBREVIATIONS
]


def split_sentences(text: str) -> List[str]:
    """
    Split text into sentences.

    Handles common abbreviations and decimal numbers.
    Returns sentences preserving original text.
    """
    text = _as_text(text)
    if not text.strip():
        return []

    # Protect abbreviation dots temporarily
    protected = text
    for pattern in _ABBREVIATION_RES:
        protected = pattern.sub(r'\1<DOT>', protected)

    # Decimal numbers (3.14)
    protected = re.sub(r'(\d)\.(\d)', r'\1<DOT>\2', protected)

    # Sentence boundary: .!? followed by whitespace and a capital
    sentences = re.split(r'(?<=[.!?])\s+(?=[A-Z])', protected)

    sentences = [s.replace('<DOT>', '.').strip() for s in sentences]
    return [s for s in sentences if s]
