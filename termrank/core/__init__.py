"""
Core — Vocabulary and text analysis layer for termrank

Contains the foundational pieces:
- Lexicon: immutable word lists shared by scoring and taxonomy
- Tokenizer: words, terms, stems, sentences
- NLP: similarity, sentiment, concepts, entities, TF-IDF
- Models: candidates, weights, taxonomy terms
- Domains: seed domain registry and static vocabulary
- Taxonomy: classification and term learning
- Terms: technical term detection and complexity
"""

from .lexicon import Lexicon, DEFAULT_LEXICON, CATEGORY_DOMAINS
from .tokenizer import (
    tokenize_words, sanitize_terms, count_words, stem, stem_all,
    extract_query_terms, split_sentences,
)
from .nlp import TextAnalyzer, tfidf, build_corpus
from .models import (
    ContentSource, ContentCandidate, ScoringWeights, RelevanceFactors,
    ScoringOptions, RankedCandidate,
    TermSource, TaxonomyTerm, LearningContext, ValidationResult,
    DomainClassification, TaxonomyMetrics,
)
from .domains import TaxonomyDomain, SEED_DOMAINS, SEED_TERMS, seed_domains
from .taxonomy import TermTaxonomy, IMPORT_CONTEXT
from .terms import detect_technical_terms, assess_complexity, difficulty_terms, platform_terms

__all__ = [
    # Lexicon
    "Lexicon", "DEFAULT_LEXICON", "CATEGORY_DOMAINS",
    # Tokenizer
    "tokenize_words", "sanitize_terms", "count_words", "stem", "stem_all",
    "extract_query_terms", "split_sentences",
    # NLP
    "TextAnalyzer", "tfidf", "build_corpus",
    # Models
    "ContentSource", "ContentCandidate", "ScoringWeights", "RelevanceFactors",
    "ScoringOptions", "RankedCandidate",
    "TermSource", "TaxonomyTerm", "LearningContext", "ValidationResult",
    "DomainClassification", "TaxonomyMetrics",
    # Domains
    "TaxonomyDomain", "SEED_DOMAINS", "SEED_TERMS", "seed_domains",
    # Taxonomy
    "TermTaxonomy", "IMPORT_CONTEXT",
    # Terms
    "detect_technical_terms", "assess_complexity", "difficulty_terms", "platform_terms",
]
