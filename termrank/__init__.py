"""
termrank — Content relevance ranking and domain term taxonomy

Ranks discovered content against a query. Classifies text into technical
domains and learns new vocabulary from what it reads.

Usage:
    scorer = RelevanceScorer()
    ranked = await scorer.score_and_rank(candidates, "react server components")

    taxonomy = TermTaxonomy()
    await taxonomy.initialize()
    await taxonomy.learn_from_content(text, LearningContext("docs", "documentation", "web"))
    taxonomy.classify_content(text)
"""

__version__ = "0.1.0"

# Core layer (vocabulary, models)
from .core.lexicon import Lexicon, DEFAULT_LEXICON
from .core.models import (
    ContentSource, ContentCandidate, ScoringWeights, ScoringOptions,
    RelevanceFactors, RankedCandidate,
    TermSource, TaxonomyTerm, LearningContext, ValidationResult,
    DomainClassification, TaxonomyMetrics,
)
from .core.domains import TaxonomyDomain
from .core.taxonomy import TermTaxonomy
from .core.terms import detect_technical_terms, assess_complexity

# Ranking layer
from .ranking.scorer import RelevanceScorer

# Services layer
from .services.validators import ExternalValidator, LexiconValidator, FuzzyVocabularyValidator

# Config (stays at root)
from .config import Config, ConfigManager, get_config, ScoringConfig, LearningConfig, LexiconConfig

__all__ = [
    # Core
    'Lexicon', 'DEFAULT_LEXICON',
    'ContentSource', 'ContentCandidate', 'ScoringWeights', 'ScoringOptions',
    'RelevanceFactors', 'RankedCandidate',
    'TermSource', 'TaxonomyTerm', 'LearningContext', 'ValidationResult',
    'DomainClassification', 'TaxonomyMetrics',
    'TaxonomyDomain', 'TermTaxonomy',
    'detect_technical_terms', 'assess_complexity',
    # Ranking
    'RelevanceScorer',
    # Services
    'ExternalValidator', 'LexiconValidator', 'FuzzyVocabularyValidator',
    # Config
    'Config', 'ConfigManager', 'get_config', 'ScoringConfig', 'LearningConfig', 'LexiconConfig',
]
