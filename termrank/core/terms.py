"""
Terms — Technical term detection and complexity assessment

Helpers built on the lexicon, optionally enhanced by a taxonomy:
- detect_technical_terms(): which technical terms a text mentions
- assess_complexity(): low / medium / high
- difficulty_terms(), platform_terms(): lexicon lookups

With a taxonomy, classification drives the answer. Without one, or when
classification is inconclusive, lexicon matching is the fallback.
"""

import logging
import re
from typing import List, Optional

from .lexicon import Lexicon, DEFAULT_LEXICON
from .tokenizer import sanitize_terms


logger = logging.getLogger(__name__)

TECHNICAL_DOMAINS = ("programming", "data-science")

# Terms shorter than this only match whole tokens ("r", "go")
MIN_SUBSTRING_LENGTH = 3


def _matches(term: str, text_lower: str, tokens: set) -> bool:
    if len(term) < MIN_SUBSTRING_LENGTH:
        return term in tokens
    return term in text_lower


def _first_position(term: str, text_lower: str) -> int:
    if len(term) < MIN_SUBSTRING_LENGTH:
        match = re.search(rf"(?<![\w-]){re.escape(term)}(?![\w-])", text_lower)
        return match.start() if match else len(text_lower)
    return text_lower.find(term)


def detect_technical_terms(text: str, taxonomy=None, lexicon: Optional[Lexicon] = None) -> List[str]:
    """
    Technical terms mentioned in text.

    Args:
        text: Text to inspect
        taxonomy: Optional TermTaxonomy; when it classifies the text as
                  programming or data-science with confidence > 0.5,
                  that domain's terms are returned
        lexicon: Word lists for the fallback (default: DEFAULT_LEXICON)

    Returns:
        Deduplicated terms (lexicon fallback: in order of first mention)
    """
    text = text or ""

    if taxonomy is not None:
        try:
            classification = taxonomy.classify_content(text)
            tech_domains = [
                c.domain for c in classification
                if c.domain in TECHNICAL_DOMAINS and c.confidence > 0.5
            ]
            found: List[str] = []
            for domain in tech_domains:
                for term in taxonomy.get_terms_for_domain(domain):
                    if term.term not in found:
                        found.append(term.term)
            if found:
                return found
        except Exception as e:
            logger.debug("Taxonomy detection failed, using lexicon: %s", e)

    lexicon = lexicon or DEFAULT_LEXICON
    text_lower = text.lower()
    tokens = set(sanitize_terms(text))

    matched = [t for t in lexicon.technical_terms() if _matches(t, text_lower, tokens)]
    return sorted(matched, key=lambda t: (_first_position(t, text_lower), t))


def assess_complexity(text: str, taxonomy=None, lexicon: Optional[Lexicon] = None) -> str:
    """
    Rate text complexity as "low", "medium" or "high".

    With a taxonomy, the mean classification confidence decides
    (> 0.8 high, > 0.5 medium, > 0.2 low). Otherwise, or when that is
    inconclusive, lexicon markers decide:
        high:   >= 3 complex terms or >= 2 advanced markers
        medium: any complex term, or no beginner markers
        low:    otherwise
    """
    text = text or ""

    if taxonomy is not None:
        try:
            classification = taxonomy.classify_content(text)
            if classification:
                mean = sum(c.confidence for c in classification) / len(classification)
                if mean > 0.8:
                    return "high"
                if mean > 0.5:
                    return "medium"
                if mean > 0.2:
                    return "low"
        except Exception as e:
            logger.debug("Taxonomy complexity failed, using lexicon: %s", e)

    lexicon = lexicon or DEFAULT_LEXICON
    text_lower = text.lower()

    complex_found = sum(1 for t in lexicon.terms("complex") if t in text_lower)
    beginner_found = sum(1 for t in difficulty_terms("beginner", lexicon) if t in text_lower)
    advanced_found = sum(1 for t in difficulty_terms("advanced", lexicon) if t in text_lower)

    if complex_found >= 3 or advanced_found >= 2:
        return "high"
    if complex_found >= 1 or beginner_found == 0:
        return "medium"
    return "low"


def difficulty_terms(level: str, lexicon: Optional[Lexicon] = None) -> List[str]:
    """Markers of a difficulty level (beginner/intermediate/advanced), sorted."""
    lexicon = lexicon or DEFAULT_LEXICON
    return sorted(lexicon.difficulty.get(level, frozenset()))


def platform_terms(platform: str, lexicon: Optional[Lexicon] = None) -> List[str]:
    """Vocabulary typical of a platform (reddit/youtube/github/web), sorted."""
    lexicon = lexicon or DEFAULT_LEXICON
    return sorted(lexicon.platforms.get(platform, frozenset()))
