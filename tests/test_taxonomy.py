"""
Tests for TermTaxonomy — classification, learning and validation

These tests validate:
- Initialization seeds domains and static terms (idempotent)
- Static terms are never shadowed or changed
- The learning cascade and the min_confidence threshold
- Validation promotion and success rate arithmetic
- Pure, normalized classification
- Export -> import preserves per-domain counts
"""

import logging

import pytest

from termrank.config import LearningConfig
from termrank.core.domains import TaxonomyDomain
from termrank.core.models import TermSource
from termrank.core.taxonomy import TermTaxonomy
from tests.factories import StubValidator, fixed_clock, make_context, make_term


DOCS = make_context(content_type="documentation")
CODE_ON_GITHUB = make_context(content_type="code", platform="github")


# =============================================================================
# Initialization
# =============================================================================

class TestInitialize:
    """Seeding domains and static vocabulary."""

    async def test_seeds_domains_and_terms(self, taxonomy):
        names = [d.name for d in taxonomy.get_domains()]
        metrics = taxonomy.get_metrics()

        assert names == ["programming", "software-engineering", "data-science", "web-development"]
        assert metrics.total_terms == 40
        assert metrics.terms_by_source == {"static": 40}
        assert metrics.terms_by_domain == {"programming": 30, "software-engineering": 10}

    async def test_static_terms_have_full_confidence(self, taxonomy):
        term = taxonomy.get_term("react")
        assert term.source is TermSource.STATIC
        assert term.confidence == 1.0
        assert term.category == "framework"

    async def test_reinitialize_is_safe(self, taxonomy):
        await taxonomy.learn_from_content("Redis", DOCS)
        await taxonomy.initialize()

        assert len(taxonomy.get_domains()) == 4
        assert taxonomy.get_metrics().total_terms == 41
        assert taxonomy.get_term("redis") is not None

    async def test_initialize_merges_mapping_config(self):
        taxonomy = TermTaxonomy(clock=fixed_clock())
        await taxonomy.initialize({"min_confidence": 0.5})

        assert taxonomy.config.min_confidence == 0.5
        assert taxonomy.config.max_learned_terms == 1000

    async def test_initialize_accepts_config_object(self):
        taxonomy = TermTaxonomy(clock=fixed_clock())
        await taxonomy.initialize(LearningConfig(max_learned_terms=5))
        assert taxonomy.config.max_learned_terms == 5


# =============================================================================
# Adding Terms
# =============================================================================

class TestAddTerm:
    """Bucket rules for add_term."""

    async def test_adds_learned_term(self, taxonomy):
        assert await taxonomy.add_term(make_term("graphql"))
        assert taxonomy.get_term("graphql").source is TermSource.LEARNED

    async def test_static_term_not_shadowed(self, taxonomy):
        stored = await taxonomy.add_term(make_term("react", domain="programming", confidence=0.4))

        assert stored is False
        term = taxonomy.get_term("react")
        assert term.source is TermSource.STATIC
        assert term.confidence == 1.0

    async def test_static_term_not_overwritten(self, taxonomy):
        replacement = make_term("python", domain="zoology", category="snake", confidence=0.2, source=TermSource.STATIC)

        assert await taxonomy.add_term(replacement) is False
        term = taxonomy.get_term("python")
        assert term.domain == "programming"
        assert term.confidence == 1.0

    async def test_new_static_term_pinned_to_full_confidence(self, taxonomy):
        assert await taxonomy.add_term(make_term("haskell", confidence=0.3, source=TermSource.STATIC))
        assert taxonomy.get_term("haskell").confidence == 1.0

    async def test_learned_bucket_limit(self, taxonomy):
        assert taxonomy.update_config(max_learned_terms=1) is None

        assert await taxonomy.add_term(make_term("alpha"))
        assert not await taxonomy.add_term(make_term("beta"))
        assert await taxonomy.add_term(make_term("alpha", confidence=0.9))
        assert taxonomy.get_term("beta") is None

    async def test_without_context_no_validation(self, taxonomy):
        validator = StubValidator(valid=True)
        taxonomy.register_validator(validator)

        await taxonomy.add_term(make_term("graphql"))

        assert validator.calls == []
        assert taxonomy.get_term("graphql").source is TermSource.LEARNED

    async def test_external_terms_not_promoted(self, taxonomy):
        taxonomy.register_validator(StubValidator(valid=True))

        await taxonomy.add_term(make_term("qubit", source=TermSource.EXTERNAL), DOCS)

        term = taxonomy.get_term("qubit")
        assert term.source is TermSource.EXTERNAL
        assert term.confidence == 0.8


# =============================================================================
# Learning
# =============================================================================

class TestLearning:
    """learn_from_content cascade and threshold."""

    async def test_below_threshold_never_stored(self, taxonomy):
        before = taxonomy.get_metrics()

        for _ in range(5):
            learned = await taxonomy.learn_from_content("GraphQL mutations are great", make_context())
            assert learned == []

        assert taxonomy.get_term("graphql") is None
        assert taxonomy.get_metrics() == before
        assert taxonomy.get_metrics().total_terms == 40

    async def test_lower_threshold_stores(self):
        taxonomy = TermTaxonomy(clock=fixed_clock())
        await taxonomy.initialize({"min_confidence": 0.5})

        learned = await taxonomy.learn_from_content("GraphQL", make_context())
        assert [t.term for t in learned] == ["graphql"]
        assert learned[0].confidence == pytest.approx(0.6)

    async def test_documentation_context(self, taxonomy):
        learned = await taxonomy.learn_from_content("GraphQL subscriptions with Redis", DOCS)
        by_term = {t.term: t for t in learned}

        assert set(by_term) == {"graphql", "redis"}
        assert by_term["graphql"].domain == "software-engineering"
        assert by_term["graphql"].category == "concept"
        assert by_term["graphql"].confidence == pytest.approx(0.8)
        assert by_term["redis"].domain == "data-science"
        assert by_term["redis"].category == "data"

    async def test_language_capped(self, taxonomy):
        learned = await taxonomy.learn_from_content("Elixir", CODE_ON_GITHUB)

        assert len(learned) == 1
        term = learned[0]
        assert (term.domain, term.category) == ("programming", "language")
        assert term.confidence == pytest.approx(0.95)

    async def test_js_suffix_is_framework(self, taxonomy):
        learned = await taxonomy.learn_from_content("SolidJS", DOCS)
        assert (learned[0].domain, learned[0].category) == ("programming", "framework")

    async def test_sdk_is_tool(self, taxonomy):
        learned = await taxonomy.learn_from_content("stripe-sdk", make_context(content_type="code"))
        assert (learned[0].domain, learned[0].category) == ("programming", "tool")
        assert learned[0].confidence == pytest.approx(0.8)

    async def test_architecture_term(self, taxonomy):
        learned = await taxonomy.learn_from_content("Serverless", DOCS)
        assert (learned[0].domain, learned[0].category) == ("software-engineering", "architecture")
        assert learned[0].confidence == pytest.approx(0.9)

    async def test_unknown_terms_stay_general(self, taxonomy):
        assert await taxonomy.learn_from_content("flibbertigibbet", make_context()) == []

        learned = await taxonomy.learn_from_content("flibbertigibbet", CODE_ON_GITHUB)
        assert (learned[0].domain, learned[0].category) == ("general", "unknown")
        assert learned[0].confidence == pytest.approx(0.7)

    async def test_static_terms_skipped(self, taxonomy):
        learned = await taxonomy.learn_from_content("Python and React", CODE_ON_GITHUB)

        assert learned == []
        assert taxonomy.get_term("python").frequency == 0

    async def test_known_term_refreshed(self, taxonomy):
        await taxonomy.learn_from_content("Redis", DOCS)
        again = await taxonomy.learn_from_content("Redis", make_context(content_type="code", platform="github"))

        term = taxonomy.get_term("redis")
        assert again == []
        assert term.frequency == 2
        assert term.platform_usage == {"web": 1, "github": 1}
        assert term.contexts == ["documentation", "code"]

    async def test_excluded_terms(self, taxonomy):
        assert taxonomy.update_config(exclude_terms=["redis"]) is None
        assert await taxonomy.learn_from_content("Redis", DOCS) == []

    async def test_length_bounds(self, taxonomy):
        long_term = "kafka" + "x" * 30
        assert await taxonomy.learn_from_content(f"js {long_term}", DOCS) == []

    async def test_related_terms(self, taxonomy):
        await taxonomy.learn_from_content("Redis", DOCS)
        learned = await taxonomy.learn_from_content("Kafka Redis", DOCS)

        assert [t.term for t in learned] == ["kafka"]
        assert taxonomy.get_related_terms("kafka") == ["redis"]
        assert taxonomy.get_related_terms("unknown") == []

    async def test_junk_text_absorbed(self, taxonomy):
        assert await taxonomy.learn_from_content("@@@ ### !!!", DOCS) == []
        assert await taxonomy.learn_from_content("", DOCS) == []


# =============================================================================
# Validation
# =============================================================================

class TestValidation:
    """validate_term and promotion."""

    async def test_no_validators(self, taxonomy):
        result = await taxonomy.validate_term("graphql", "software-engineering")
        assert (result.is_valid, result.confidence, result.source) == (False, 0.0, "none")

    async def test_disabled(self, taxonomy):
        taxonomy.register_validator(StubValidator(valid=True))
        assert taxonomy.update_config(enable_external_validation=False) is None

        result = await taxonomy.validate_term("graphql", "software-engineering")
        assert result.source == "none"

    async def test_promotion_on_learn(self, taxonomy):
        taxonomy.register_validator(StubValidator(valid=True))

        learned = await taxonomy.learn_from_content("GraphQL", DOCS)
        metrics = taxonomy.get_metrics()

        assert learned[0].source is TermSource.VALIDATED
        assert learned[0].confidence == pytest.approx(0.9)
        assert metrics.validation_success_rate == pytest.approx(0.5)
        assert metrics.learning_accuracy == 1.0

    async def test_promotion_capped_at_one(self, taxonomy):
        taxonomy.register_validator(StubValidator(valid=True))
        await taxonomy.learn_from_content("Elixir", CODE_ON_GITHUB)
        assert taxonomy.get_term("elixir").confidence == 1.0

    async def test_success_rate_arithmetic(self, taxonomy):
        taxonomy.register_validator(StubValidator(valid=True))

        await taxonomy.learn_from_content("GraphQL Redis", DOCS)
        assert taxonomy.get_metrics().validation_success_rate == pytest.approx(0.75)

    async def test_rejected_term_stays_learned(self, taxonomy):
        taxonomy.register_validator(StubValidator(valid=False))

        learned = await taxonomy.learn_from_content("GraphQL", DOCS)

        assert learned[0].source is TermSource.LEARNED
        assert learned[0].confidence == pytest.approx(0.8)
        assert taxonomy.get_metrics().validation_success_rate == 0.0

    async def test_failing_validator_is_skipped(self, taxonomy, caplog):
        taxonomy.register_validator(StubValidator(error=RuntimeError("down"), name="flaky"))
        taxonomy.register_validator(StubValidator(valid=True, name="good"))

        with caplog.at_level(logging.WARNING, logger="termrank.core.taxonomy"):
            result = await taxonomy.validate_term("graphql", "software-engineering")

        assert result.is_valid
        assert result.source == "good"
        assert "flaky" in caplog.text

    async def test_only_failures(self, taxonomy):
        taxonomy.register_validator(StubValidator(error=RuntimeError("down")))
        taxonomy.register_validator(StubValidator(valid=False))

        result = await taxonomy.validate_term("graphql", "software-engineering")
        assert (result.is_valid, result.confidence, result.source) == (False, 0.0, "failed")

    async def test_unavailable_validator_not_called(self, taxonomy):
        validator = StubValidator(valid=True, available=False)
        taxonomy.register_validator(validator)

        result = await taxonomy.validate_term("graphql", "software-engineering")

        assert result.source == "failed"
        assert validator.calls == []


# =============================================================================
# Classification
# =============================================================================

class TestClassification:
    """classify_content is normalized and pure."""

    async def test_empty_text(self, taxonomy):
        assert taxonomy.classify_content("") == []

    async def test_no_known_terms(self, taxonomy):
        assert taxonomy.classify_content("nothing known here") == []

    async def test_single_domain(self, taxonomy):
        result = taxonomy.classify_content("React, Python!")
        assert [(c.domain, c.confidence) for c in result] == [("programming", 1.0)]

    async def test_normalized_and_sorted(self, taxonomy):
        result = taxonomy.classify_content("react python api")

        assert [c.domain for c in result] == ["programming", "software-engineering"]
        assert result[0].confidence == pytest.approx(2 / 3)
        assert sum(c.confidence for c in result) == pytest.approx(1.0)

    async def test_learned_terms_count(self, taxonomy):
        await taxonomy.learn_from_content("Redis", DOCS)
        result = taxonomy.classify_content("redis")
        assert [c.domain for c in result] == ["data-science"]

    async def test_idempotent_and_pure(self, taxonomy):
        text = "react python api database kafka"
        before = taxonomy.get_metrics()

        first = taxonomy.classify_content(text)
        second = taxonomy.classify_content(text)

        assert first == second
        assert taxonomy.get_metrics() == before


# =============================================================================
# Queries
# =============================================================================

class TestQueries:
    """Domain term listing and domains."""

    async def test_terms_for_domain_sorted(self, taxonomy):
        await taxonomy.add_term(make_term("htmx", domain="programming", category="framework", confidence=0.8))

        terms = taxonomy.get_terms_for_domain("programming")

        assert len(terms) == 31
        assert terms[0].confidence == 1.0
        assert terms[-1].term == "htmx"

    async def test_terms_for_unknown_domain(self, taxonomy):
        assert taxonomy.get_terms_for_domain("astrology") == []

    async def test_add_domain_links_parent(self, taxonomy):
        taxonomy.add_domain(TaxonomyDomain(name="frontend-frameworks", parent_domain="web-development"))

        domains = {d.name: d for d in taxonomy.get_domains()}
        assert "frontend-frameworks" in domains["web-development"].sub_domains

    async def test_get_domains_returns_copies(self, taxonomy):
        taxonomy.get_domains()[0].sub_domains.append("mutated")
        assert "mutated" not in taxonomy.get_domains()[0].sub_domains


# =============================================================================
# Import / Export
# =============================================================================

class TestImportExport:
    """Round trips through the in-memory object graph."""

    async def test_export_groups_by_domain(self, taxonomy):
        exported = taxonomy.export_taxonomy()
        counts = {domain: len(terms) for domain, terms in exported.items()}

        assert counts == {
            "programming": 30,
            "software-engineering": 10,
            "data-science": 0,
            "web-development": 0,
        }

    async def test_export_returns_copies(self, taxonomy):
        exported = taxonomy.export_taxonomy()
        exported["programming"][0].confidence = 0.1
        assert taxonomy.get_term(exported["programming"][0].term).confidence == 1.0

    async def test_round_trip_preserves_counts(self, taxonomy):
        await taxonomy.learn_from_content("GraphQL Redis Elixir", CODE_ON_GITHUB)
        exported = taxonomy.export_taxonomy()

        restored = TermTaxonomy(clock=fixed_clock())
        await restored.initialize()
        imported = await restored.import_taxonomy(exported)

        assert imported == 3  # seeded static terms are already present
        assert {d: len(t) for d, t in restored.export_taxonomy().items()} == \
            {d: len(t) for d, t in exported.items()}

    async def test_import_registers_domains(self, taxonomy):
        data = {"quantum": [{"term": "qubit", "domain": "quantum", "category": "concept", "confidence": 0.8}]}

        assert await taxonomy.import_taxonomy(data) == 1
        assert "quantum" in [d.name for d in taxonomy.get_domains()]
        assert taxonomy.get_term("qubit").source is TermSource.LEARNED

    async def test_import_reruns_validation(self, taxonomy):
        taxonomy.register_validator(StubValidator(valid=True))

        await taxonomy.import_taxonomy({"software-engineering": [make_term("graphql")]})

        term = taxonomy.get_term("graphql")
        assert term.source is TermSource.VALIDATED
        assert term.confidence == pytest.approx(0.9)

    async def test_import_skips_malformed_entries(self, taxonomy, caplog):
        data = {"programming": [
            {"domain": "programming"},
            {"term": "x1", "source": "bogus"},
            {"term": "htmx", "domain": "programming", "category": "framework", "confidence": 0.8},
        ]}

        with caplog.at_level(logging.WARNING, logger="termrank.core.taxonomy"):
            imported = await taxonomy.import_taxonomy(data)

        assert imported == 1
        assert taxonomy.get_term("htmx") is not None
        assert taxonomy.get_term("x1") is None
        assert "Skipping malformed term" in caplog.text

    async def test_import_cannot_shadow_static(self, taxonomy):
        imported = await taxonomy.import_taxonomy({"programming": [make_term("react", domain="programming")]})
        assert imported == 0


# =============================================================================
# Config and Metrics
# =============================================================================

class TestConfigAndMetrics:
    """update_config validation and metrics snapshots."""

    async def test_unknown_setting(self, taxonomy):
        error = taxonomy.update_config(bogus=1)
        assert error is not None
        assert "Unknown" in error

    async def test_invalid_value_leaves_config(self, taxonomy):
        error = taxonomy.update_config(min_confidence=2.0)

        assert error is not None
        assert taxonomy.config.min_confidence == 0.7

    async def test_metrics_snapshot_is_copy(self, taxonomy):
        metrics = taxonomy.get_metrics()
        metrics.terms_by_source["static"] = 0
        assert taxonomy.get_metrics().terms_by_source["static"] == 40

    async def test_top_terms_by_frequency(self, taxonomy):
        for _ in range(3):
            await taxonomy.learn_from_content("Redis", DOCS)

        top = taxonomy.get_metrics().top_terms
        assert len(top) == 10
        assert top[0] == {"term": "redis", "frequency": 3, "domain": "data-science"}

    async def test_sources_counted(self, taxonomy):
        taxonomy.register_validator(StubValidator(valid=True))
        await taxonomy.learn_from_content("GraphQL", DOCS)
        await taxonomy.add_term(make_term("kafka", domain="data-science", category="data"))

        metrics = taxonomy.get_metrics()
        assert metrics.terms_by_source == {"static": 40, "validated": 1, "learned": 1}
        assert metrics.learning_accuracy == pytest.approx(0.5)
