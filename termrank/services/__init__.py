"""
Services — External integration layer for termrank

Contains integrations with sources outside the taxonomy:
- Validators: confirmation of learned terms
"""

from .validators import ExternalValidator, LexiconValidator, FuzzyVocabularyValidator

__all__ = [
    # Validators
    "ExternalValidator", "LexiconValidator", "FuzzyVocabularyValidator",
]
