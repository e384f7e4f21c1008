"""Tests for TriggerMatcher."""

import pytest

from skilldex.catalog.models import ContextCost, Document, DocumentKind
from skilldex.catalog.registry import Registry
from skilldex.disclosure.matcher import TriggerMatcher, normalize_text


def _make_doc(
    name: str,
    load_when: tuple[str, ...] = (),
    context_cost: ContextCost = ContextCost.MEDIUM,
    kind: DocumentKind = DocumentKind.SKILL,
) -> Document:
    return Document(
        id=f"{kind.value}:{name}",
        kind=kind,
        name=name,
        description=name,
        load_when=load_when,
        context_cost=context_cost,
    )


@pytest.fixture
def registry():
    return Registry.build(
        [
            _make_doc("python-testing-patterns", ("mocking python", "pytest fixtures")),
            _make_doc("javascript-testing-patterns", ("mock functions", "jest")),
            _make_doc("code-reviewer", kind=DocumentKind.AGENT),
        ]
    )


def test_normalize_text():
    assert normalize_text("  Mocking \t PYTHON\n ") == "mocking python"


class TestSubstringMatching:
    def test_mocking_python_scenario(self, registry):
        matches = TriggerMatcher().match("mocking python", registry)
        assert matches[0].document.name == "python-testing-patterns"
        assert matches[0].score == 1.0
        assert [m.document.name for m in matches] == ["python-testing-patterns"]

    def test_python_ranked_above_javascript_when_both_match(self):
        registry = Registry.build(
            [
                _make_doc("python-testing-patterns", ("mocking python",)),
                _make_doc("javascript-testing-patterns", ("mock functions", "mocking")),
            ]
        )
        matches = TriggerMatcher().match("mocking python", registry)
        assert [m.document.name for m in matches] == [
            "python-testing-patterns",
            "javascript-testing-patterns",
        ]
        assert matches[1].score == pytest.approx(len("mocking") / len("mocking python"))

    def test_phrase_inside_longer_query(self, registry):
        matches = TriggerMatcher().match("How do I share pytest fixtures across modules?", registry)
        assert [m.document.name for m in matches] == ["python-testing-patterns"]
        assert matches[0].phrase == "pytest fixtures"
        assert 0 < matches[0].score < 1

    def test_query_inside_longer_phrase(self, registry):
        matches = TriggerMatcher().match("mock", registry)
        assert {m.document.name for m in matches} == {
            "python-testing-patterns",
            "javascript-testing-patterns",
        }
        # Equal scores (both phrases are 14 chars) fall back to name order
        assert matches[0].document.name == "javascript-testing-patterns"

    def test_case_and_whitespace_insensitive(self, registry):
        matches = TriggerMatcher().match("  MOCKING   Python ", registry)
        assert matches[0].document.name == "python-testing-patterns"

    def test_no_match_is_empty(self, registry):
        assert TriggerMatcher().match("kubernetes helm charts", registry) == []

    def test_blank_query_is_empty(self, registry):
        assert TriggerMatcher().match("   ", registry) == []

    def test_empty_load_when_never_returned(self, registry):
        matches = TriggerMatcher().match("code-reviewer", registry)
        assert matches == []


class TestTieBreaking:
    def test_cheaper_then_name(self):
        registry = Registry.build(
            [
                _make_doc("zeta", ("redis",), ContextCost.LOW),
                _make_doc("beta", ("redis",), ContextCost.HIGH),
                _make_doc("alpha", ("redis",), ContextCost.LOW),
            ]
        )
        matches = TriggerMatcher().match("redis", registry)
        assert [m.document.name for m in matches] == ["alpha", "zeta", "beta"]

    def test_deterministic(self, registry):
        first = TriggerMatcher().match("mock", registry)
        second = TriggerMatcher().match("mock", registry)
        assert [(m.document.id, m.score) for m in first] == [
            (m.document.id, m.score) for m in second
        ]


class TestFuzzyMatching:
    def test_disabled_by_default(self, registry):
        assert TriggerMatcher().match("mocking pyton", registry) == []

    def test_fuzzy_match_scaled(self, registry):
        matcher = TriggerMatcher(fuzzy_threshold=0.8, fuzzy_weight=0.5)
        matches = matcher.match("mocking pyton", registry)
        assert matches[0].document.name == "python-testing-patterns"
        assert matches[0].fuzzy is True
        assert matches[0].score <= 0.5

    def test_invalid_settings(self):
        with pytest.raises(ValueError):
            TriggerMatcher(fuzzy_threshold=1.5)
        with pytest.raises(ValueError):
            TriggerMatcher(fuzzy_weight=1.0)
