"""
Taxonomy — Domain-aware vocabulary that classifies text and learns terms

Two buckets, keyed by term string:
  static   — seeded at initialize(), confidence 1.0, never changes
  learned  — discovered from content; promoted to VALIDATED when an
             external validator confirms the term

Learning is a heuristic cascade over context and lexicon membership.
Terms below LearningConfig.min_confidence are never stored.

classify_content() is pure: it reads both buckets and never mutates them.

Instances are not synchronized. Concurrent add_term/learn_from_content
calls on one taxonomy must be serialized by the caller.
"""

import copy
import logging
import re
from collections import Counter
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from ..config import LearningConfig
from .domains import TaxonomyDomain, SEED_TERMS, seed_domains
from .lexicon import Lexicon, DEFAULT_LEXICON
from .models import (
    DomainClassification,
    LearningContext,
    TaxonomyMetrics,
    TaxonomyTerm,
    TermSource,
    ValidationResult,
    utc_now,
)
from .tokenizer import sanitize_terms


logger = logging.getLogger(__name__)

MIN_TERM_LENGTH = 3
MAX_TERM_LENGTH = 25
MAX_RELATED_TERMS = 5
TOP_TERMS_LIMIT = 10

_JS_NAME_RE = re.compile(r'^[a-z]+js$')

# Context applied to terms re-added through import_taxonomy()
IMPORT_CONTEXT = LearningContext(
    content_source="import",
    content_type="reference",
    platform="web",
)


class TermTaxonomy:
    """
    Domain vocabulary with static, learned and validated terms.

    Usage:
        taxonomy = TermTaxonomy()
        await taxonomy.initialize()
        learned = await taxonomy.learn_from_content(text, context)
        domains = taxonomy.classify_content(text)
    """

    def __init__(
        self,
        config: Optional[LearningConfig] = None,
        lexicon: Optional[Lexicon] = None,
        clock: Optional[Callable[[], Any]] = None,
    ):
        """
        Args:
            config: Learning settings (default: LearningConfig())
            lexicon: Word lists for the learning cascade (default: DEFAULT_LEXICON)
            clock: Returns the current aware datetime (default: utc_now)
        """
        self.config = config or LearningConfig()
        self.lexicon = lexicon or DEFAULT_LEXICON
        self._clock = clock or utc_now

        self._static: Dict[str, TaxonomyTerm] = {}
        self._learned: Dict[str, TaxonomyTerm] = {}
        self._domains: Dict[str, TaxonomyDomain] = {}
        self._validators: List[Any] = []
        self._validation_success_rate = 0.0
        self._metrics = TaxonomyMetrics()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def initialize(self, config: Union[LearningConfig, Mapping[str, Any], None] = None):
        """
        Seed domains and static terms. Safe to call more than once.

        Args:
            config: LearningConfig replacing the current one, or a mapping
                    of settings merged onto it
        """
        if isinstance(config, LearningConfig):
            self.config = config
        elif config:
            self.config = self.config.merged(**dict(config))

        for domain in seed_domains():
            if domain.name not in self._domains:
                self._domains[domain.name] = domain

        added = 0
        for (domain, category), names in SEED_TERMS.items():
            for name in names:
                if name in self._static:
                    continue
                self._static[name] = TaxonomyTerm(
                    term=name,
                    domain=domain,
                    category=category,
                    confidence=1.0,
                    source=TermSource.STATIC,
                    frequency=0,
                    last_seen=self._clock(),
                )
                added += 1

        self._update_metrics()
        logger.info(
            "Taxonomy initialized: %d domains, %d static terms (%d new)",
            len(self._domains), len(self._static), added,
        )

    def register_validator(self, validator):
        """Append an external validator. Validators run in registration order."""
        self._validators.append(validator)
        logger.info("Registered validator: %s", getattr(validator, "name", type(validator).__name__))

    def update_config(self, **changes) -> Optional[str]:
        """
        Change learning settings.

        Returns:
            Error message or None if successful
        """
        try:
            updated = self.config.merged(**changes)
        except TypeError:
            valid = ", ".join(sorted(LearningConfig.__dataclass_fields__))
            return f"Unknown learning setting in {sorted(changes)}. Valid: {valid}"

        error = updated.validate()
        if error:
            return error

        self.config = updated
        return None

    # =========================================================================
    # Domains
    # =========================================================================

    def get_domains(self) -> List[TaxonomyDomain]:
        return [domain.copy() for domain in self._domains.values()]

    def add_domain(self, domain: TaxonomyDomain):
        """Register (or replace) a domain and link it under its parent."""
        self._domains[domain.name] = domain.copy()

        parent = self._domains.get(domain.parent_domain) if domain.parent_domain else None
        if parent is not None and domain.name not in parent.sub_domains:
            parent.sub_domains.append(domain.name)

        logger.info("Registered domain: %s", domain.name)

    # =========================================================================
    # Terms
    # =========================================================================

    async def add_term(self, term: TaxonomyTerm, context: Optional[LearningContext] = None) -> bool:
        """
        Store a term in its bucket.

        STATIC terms go to the static bucket at confidence 1.0; an
        existing static term is never replaced. Everything else goes to
        the learned bucket, unless a static term of the same name exists
        or the learned bucket is full.

        With a context and external validation enabled, a LEARNED term
        is validated first; on success its confidence is bumped and it
        becomes VALIDATED.

        Returns:
            True if the term was stored
        """
        if term.source is TermSource.STATIC:
            if term.term in self._static:
                logger.warning("Refusing to overwrite static term: %s", term.term)
                return False
            term.confidence = 1.0
            self._static[term.term] = term
            self._update_metrics()
            return True

        if term.term in self._static:
            logger.warning("Refusing to shadow static term: %s", term.term)
            return False

        if term.term not in self._learned and len(self._learned) >= self.config.max_learned_terms:
            logger.warning(
                "Learned bucket full (%d terms), dropping: %s",
                self.config.max_learned_terms, term.term,
            )
            return False

        if context is not None and self.config.enable_external_validation:
            result = await self.validate_term(term.term, term.domain)
            if result.is_valid and term.source is TermSource.LEARNED:
                term.confidence = min(1.0, round(term.confidence + self.config.validation_bump, 4))
                term.source = TermSource.VALIDATED
                logger.debug("Validated term %s via %s", term.term, result.source)

        self._learned[term.term] = term
        self._update_metrics()
        return True

    async def learn_from_content(self, text: str, context: LearningContext) -> List[TaxonomyTerm]:
        """
        Discover new terms in text.

        Already-known learned terms are refreshed (frequency, last seen,
        platform usage) instead of re-learned. Static terms are skipped.

        Returns:
            Terms stored by this call
        """
        candidates = self._candidate_tokens(text)
        excluded = {t.lower() for t in self.config.exclude_terms}
        learned: List[TaxonomyTerm] = []

        for token in candidates:
            if token in excluded or token in self._static:
                continue

            existing = self._learned.get(token)
            if existing is not None:
                self._refresh(existing, context)
                continue

            confidence, domain, category = self._analyze(token, context)
            if confidence < self.config.min_confidence:
                logger.debug("Skipping %s: confidence %.2f below threshold", token, confidence)
                continue

            term = TaxonomyTerm(
                term=token,
                domain=domain,
                category=category,
                confidence=confidence,
                source=TermSource.LEARNED,
                frequency=1,
                last_seen=self._clock(),
                related_terms=self._related_in_domain(token, domain, candidates),
                contexts=[context.content_type],
                platform_usage={context.platform: 1},
            )
            if await self.add_term(term, context):
                learned.append(term)

        self._update_metrics()
        if learned:
            logger.info("Learned %d terms from %s", len(learned), context.content_source)
        return learned

    def get_terms_for_domain(self, domain: str) -> List[TaxonomyTerm]:
        """Static and learned terms of a domain, highest confidence first."""
        terms = [t.copy() for t in self._static.values() if t.domain == domain]
        terms.extend(t.copy() for t in self._learned.values() if t.domain == domain)
        return sorted(terms, key=lambda t: t.confidence, reverse=True)

    def get_related_terms(self, term: str, limit: int = MAX_RELATED_TERMS) -> List[str]:
        found = self._static.get(term) or self._learned.get(term)
        if found is None:
            return []
        return list(found.related_terms[:limit])

    def get_term(self, term: str) -> Optional[TaxonomyTerm]:
        """Copy of a term from either bucket (static first)."""
        found = self._static.get(term) or self._learned.get(term)
        return found.copy() if found is not None else None

    # =========================================================================
    # Validation
    # =========================================================================

    async def validate_term(self, term: str, domain: str) -> ValidationResult:
        """
        Ask registered validators about a term. Never raises.

        The first valid result wins and lifts the success rate
        to (rate + 1) / 2.
        """
        if not self.config.enable_external_validation or not self._validators:
            return ValidationResult(is_valid=False, confidence=0.0, source="none")

        for validator in self._validators:
            name = getattr(validator, "name", type(validator).__name__)
            try:
                if not await validator.is_available():
                    logger.debug("Validator %s unavailable, skipping", name)
                    continue
                result = await validator.validate(term, domain)
            except Exception as e:
                logger.warning("Validator %s failed for %r: %s", name, term, e)
                continue

            if result is not None and result.is_valid:
                self._validation_success_rate = (self._validation_success_rate + 1) / 2
                self._metrics.validation_success_rate = self._validation_success_rate
                return result

        return ValidationResult(is_valid=False, confidence=0.0, source="failed")

    # =========================================================================
    # Classification
    # =========================================================================

    def classify_content(self, text: str) -> List[DomainClassification]:
        """
        Probability of text belonging to each domain.

        Confidence of every matched term is summed per domain, then
        normalized over the domains with hits.
        """
        scores: Dict[str, float] = {}
        for token in sanitize_terms(text):
            term = self._static.get(token) or self._learned.get(token)
            if term is not None:
                scores[term.domain] = scores.get(term.domain, 0.0) + term.confidence

        total = sum(scores.values())
        if total <= 0:
            return []

        results = [DomainClassification(domain=d, confidence=s / total) for d, s in scores.items()]
        return sorted(results, key=lambda c: c.confidence, reverse=True)

    # =========================================================================
    # Import / Export
    # =========================================================================

    def export_taxonomy(self) -> Dict[str, List[TaxonomyTerm]]:
        """Copies of every term, grouped by domain."""
        exported: Dict[str, List[TaxonomyTerm]] = {name: [] for name in self._domains}
        for bucket in (self._static, self._learned):
            for term in bucket.values():
                exported.setdefault(term.domain, []).append(term.copy())
        return exported

    async def import_taxonomy(
        self,
        data: Mapping[str, List[Union[TaxonomyTerm, Mapping[str, Any]]]],
        context: Optional[LearningContext] = None,
    ) -> int:
        """
        Re-add terms grouped by domain through add_term().

        Unknown domain keys are registered. Validation reruns when enabled.

        Returns:
            Number of terms stored
        """
        context = context or IMPORT_CONTEXT
        imported = 0

        for domain_name, terms in data.items():
            if domain_name not in self._domains:
                self.add_domain(TaxonomyDomain(name=domain_name))

            for item in terms:
                try:
                    if isinstance(item, TaxonomyTerm):
                        term = item.copy()
                    else:
                        term = TaxonomyTerm.from_dict(item)
                except (KeyError, TypeError, ValueError, AttributeError) as e:
                    logger.warning("Skipping malformed term in %s: %r (%s)", domain_name, item, e)
                    continue
                if await self.add_term(term, context):
                    imported += 1

        logger.info("Imported %d terms across %d domains", imported, len(data))
        return imported

    # =========================================================================
    # Metrics
    # =========================================================================

    def get_metrics(self) -> TaxonomyMetrics:
        return copy.deepcopy(self._metrics)

    def _update_metrics(self):
        all_terms = list(self._static.values()) + list(self._learned.values())

        by_source = Counter(t.source.value for t in all_terms)
        by_domain = Counter(t.domain for t in all_terms)
        validated = sum(1 for t in self._learned.values() if t.source is TermSource.VALIDATED)
        top = sorted(all_terms, key=lambda t: t.frequency, reverse=True)[:TOP_TERMS_LIMIT]

        self._metrics = TaxonomyMetrics(
            total_terms=len(all_terms),
            terms_by_source=dict(by_source),
            terms_by_domain=dict(by_domain),
            learning_accuracy=validated / len(self._learned) if self._learned else 0.0,
            validation_success_rate=self._validation_success_rate,
            top_terms=[
                {"term": t.term, "frequency": t.frequency, "domain": t.domain}
                for t in top
            ],
        )

    # =========================================================================
    # Learning internals
    # =========================================================================

    def _candidate_tokens(self, text: str) -> List[str]:
        seen = set()
        tokens = []
        for token in sanitize_terms(text):
            if not MIN_TERM_LENGTH <= len(token) <= MAX_TERM_LENGTH:
                continue
            if self.lexicon.is_stop_word(token) or token in seen:
                continue
            seen.add(token)
            tokens.append(token)
        return tokens

    def _analyze(self, token: str, context: LearningContext):
        """Confidence, domain and category for an unknown token."""
        confidence = 0.3
        domain, category = "general", "unknown"

        if context.content_type == "documentation":
            confidence += 0.2
        if context.content_type == "code":
            confidence += 0.3
        if context.platform == "github":
            confidence += 0.1

        lexicon = self.lexicon
        if lexicon.in_category(token, "languages"):
            confidence += 0.4
            domain, category = "programming", "language"
        elif lexicon.in_category(token, "frameworks") or _JS_NAME_RE.match(token):
            confidence += 0.3
            domain, category = "programming", "framework"
        elif "api" in token or "sdk" in token:
            confidence += 0.2
            domain, category = "programming", "tool"
        elif lexicon.in_category(token, "concepts"):
            confidence += 0.3
            domain, category = "software-engineering", "concept"
        elif lexicon.in_category(token, "data"):
            confidence += 0.3
            domain, category = "data-science", "data"
        elif lexicon.in_category(token, "architecture"):
            confidence += 0.4
            domain, category = "software-engineering", "architecture"

        confidence = min(round(confidence, 4), self.config.max_learned_confidence)
        return confidence, domain, category

    def _related_in_domain(self, token: str, domain: str, candidates: List[str]) -> List[str]:
        """Other tokens of the same text already known in the domain."""
        related = []
        for other in candidates:
            if other == token:
                continue
            known = self._static.get(other) or self._learned.get(other)
            if known is not None and known.domain == domain:
                related.append(other)
                if len(related) >= MAX_RELATED_TERMS:
                    break
        return related

    def _refresh(self, term: TaxonomyTerm, context: LearningContext):
        term.frequency += 1
        term.last_seen = self._clock()
        term.platform_usage[context.platform] = term.platform_usage.get(context.platform, 0) + 1
        if context.content_type not in term.contexts:
            term.contexts.append(context.content_type)
