"""
NLP — Text analysis services used by the relevance factors

Wraps the third-party toolkit behind one object:
- Similarity: rapidfuzz ratio over whole strings
- Sentiment: VADER compound polarity, tuned with the lexicon's
  positive/negative words
- Concepts: YAKE keyphrases (nouns/topics stand-in)
- Entities: CamelCase, ACRONYMS, mid-sentence capitalized words
- Term importance: TF-IDF as a pure function of (term, document, corpus)

TextAnalyzer holds no per-call state. Scoring a document never adds it
to a shared corpus, so one analyzer can serve concurrent callers.
"""

import math
import re
from typing import Iterable, List, Optional, Sequence, FrozenSet

import yake
from rapidfuzz import fuzz
from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from .lexicon import Lexicon, DEFAULT_LEXICON
from .tokenizer import split_sentences, stem_all, tokenize_words


# Valence assigned to lexicon sentiment words VADER doesn't already know
LEXICON_VALENCE = 2.0

_CAMEL_RE = re.compile(r'\b[A-Z][a-z]+(?:[A-Z][a-z]+)+\b')
_ACRONYM_RE = re.compile(r'\b[A-Z]{2,}\b')
_CAPITALIZED_RE = re.compile(r'^[A-Z][a-z]{2,}$')


# =============================================================================
# Term Importance
# =============================================================================

def tfidf(term: str, document: Sequence[str], corpus: Sequence[FrozenSet[str]] = ()) -> float:
    """
    TF-IDF of a term in an ephemeral document against a background corpus.

    The document counts as part of the collection:
        idf = 1 + ln(N / (1 + df)), N = len(corpus) + 1

    Args:
        term: Stemmed term
        document: Stemmed tokens of the document being scored
        corpus: Token sets of background documents (never mutated)

    Returns:
        Raw term count times idf, 0.0 when the term is absent
    """
    tf = document.count(term)
    if tf == 0:
        return 0.0

    total_docs = len(corpus) + 1
    doc_freq = 1 + sum(1 for doc in corpus if term in doc)
    idf = 1.0 + math.log(total_docs / (1 + doc_freq))
    return tf * idf


def build_corpus(documents: Iterable[str]) -> tuple:
    """Tokenize and stem background documents once, as immutable token sets."""
    return tuple(frozenset(stem_all(tokenize_words(doc))) for doc in documents)


# =============================================================================
# Analyzer
# =============================================================================

class TextAnalyzer:
    """
    Sentiment, similarity, concept and entity extraction over a fixed lexicon.
    """

    def __init__(self, lexicon: Optional[Lexicon] = None, max_concepts: int = 20):
        """
        Args:
            lexicon: Word lists (default: DEFAULT_LEXICON)
            max_concepts: Keyphrases kept per document
        """
        self.lexicon = lexicon or DEFAULT_LEXICON
        self.max_concepts = max_concepts

        self._sentiment = SentimentIntensityAnalyzer()
        for word in self.lexicon.positive_words:
            self._sentiment.lexicon.setdefault(word, LEXICON_VALENCE)
        for word in self.lexicon.negative_words:
            self._sentiment.lexicon.setdefault(word, -LEXICON_VALENCE)

        self._extractor = yake.KeywordExtractor(
            lan="en",
            n=3,                # up to 3-word phrases
            top=max_concepts,
        )

    def similarity(self, text1: str, text2: str) -> float:
        """Whole-string similarity in [0, 1]."""
        if not text1 or not text2:
            return 0.0
        return fuzz.ratio(text1.lower(), text2.lower()) / 100.0

    def sentiment(self, text: str) -> float:
        """Compound polarity in [-1, 1]; 0.0 for empty text."""
        if not text or not text.strip():
            return 0.0
        return self._sentiment.polarity_scores(text)["compound"]

    def concepts(self, text: str) -> List[str]:
        """Lowercased keyphrases, most relevant first."""
        if not text or not text.strip():
            return []
        keywords = self._extractor.extract_keywords(text)
        return [kw.lower() for kw, _score in keywords]

    def entities(self, text: str) -> List[str]:
        """
        Named-entity-like tokens, deduplicated in order of appearance.

        Sentence-initial capitalized words are skipped; they are
        capitalized by grammar, not because they name something.
        """
        if not text:
            return []

        found: List[str] = []
        found.extend(_CAMEL_RE.findall(text))
        found.extend(_ACRONYM_RE.findall(text))
        for sentence in split_sentences(text):
            for word in sentence.split()[1:]:
                word = word.strip('.,;:!?()[]{}"\'')
                if _CAPITALIZED_RE.match(word):
                    found.append(word)

        seen = set()
        unique = []
        for entity in found:
            key = entity.lower()
            if key not in seen:
                seen.add(key)
                unique.append(entity)
        return unique
