"""
Validators — External confirmation of learned taxonomy terms

Abstraction over sources that can confirm a term belongs to a domain.
TermTaxonomy calls validators in registration order and promotes a
learned term when one of them confirms it.

Backends:
- LexiconValidator: lexicon category membership (offline)
- FuzzyVocabularyValidator: closest match in a curated vocabulary (rapidfuzz)
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Mapping, Optional

from rapidfuzz import fuzz, process

from ..core.lexicon import Lexicon, DEFAULT_LEXICON
from ..core.models import ValidationResult


class ExternalValidator(ABC):
    """Abstract base for term validators."""

    name: str = "external"

    @abstractmethod
    async def validate(self, term: str, domain: str) -> ValidationResult:
        """
        Check whether term belongs to domain.

        Args:
            term: Lowercase term
            domain: Domain name the term was classified into

        Returns:
            ValidationResult (is_valid False when not confirmed)
        """
        pass

    @abstractmethod
    async def is_available(self) -> bool:
        """Check if validator is configured and reachable."""
        pass

    def get_capabilities(self) -> List[str]:
        """Domains this validator can confirm terms for."""
        return []


class LexiconValidator(ExternalValidator):
    """Confirms terms listed in a lexicon category mapped to the domain."""

    name = "lexicon"
    CONFIDENCE = 0.9

    def __init__(self, lexicon: Optional[Lexicon] = None):
        self.lexicon = lexicon or DEFAULT_LEXICON

    async def is_available(self) -> bool:
        return True

    async def validate(self, term: str, domain: str) -> ValidationResult:
        categories = self.lexicon.categories_for(term)
        if domain in self.lexicon.domains_for(term):
            return ValidationResult(
                is_valid=True,
                confidence=self.CONFIDENCE,
                source=self.name,
                metadata={"categories": categories},
            )
        return ValidationResult(
            is_valid=False,
            confidence=0.0,
            source=self.name,
            metadata={"categories": categories},
        )

    def get_capabilities(self) -> List[str]:
        return sorted({d for t in self.lexicon.technical_terms() for d in self.lexicon.domains_for(t)})


class FuzzyVocabularyValidator(ExternalValidator):
    """
    Confirms terms close to an entry of a curated vocabulary.

    Vocabulary maps domain -> terms. A term is valid when its best
    match in the domain's vocabulary scores at least `threshold`
    (0-100, rapidfuzz WRatio). Otherwise the closest entries are
    returned as suggestions.
    """

    name = "fuzzy-vocabulary"

    def __init__(self, vocabulary: Mapping[str, Iterable[str]], threshold: float = 90.0, max_suggestions: int = 3):
        self.vocabulary = {domain: sorted({t.lower() for t in terms}) for domain, terms in vocabulary.items()}
        self.threshold = threshold
        self.max_suggestions = max_suggestions

    async def is_available(self) -> bool:
        return bool(self.vocabulary)

    async def validate(self, term: str, domain: str) -> ValidationResult:
        choices = self.vocabulary.get(domain)
        if not choices:
            return ValidationResult(is_valid=False, confidence=0.0, source=self.name)

        best = process.extractOne(term.lower(), choices, scorer=fuzz.WRatio)
        if best is not None and best[1] >= self.threshold:
            match, score, _index = best
            return ValidationResult(
                is_valid=True,
                confidence=score / 100.0,
                source=self.name,
                related_terms=[match] if match != term.lower() else [],
                metadata={"match": match},
            )

        suggestions = [
            match for match, _score, _index in
            process.extract(term.lower(), choices, scorer=fuzz.WRatio, limit=self.max_suggestions)
        ]
        return ValidationResult(
            is_valid=False,
            confidence=0.0,
            source=self.name,
            suggestions=suggestions,
        )

    def get_capabilities(self) -> List[str]:
        return sorted(self.vocabulary)
