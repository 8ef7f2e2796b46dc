"""Unit tests for QueryIntentClassifier."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from thesis_retrieval.services.query_intent import QueryIntentClassifier


@pytest.fixture
def classifier():
    return QueryIntentClassifier()


def test_factual_query(classifier):
    result = classifier.classify("What is machine learning?")

    assert result.intent == "factual"
    assert result.confidence == 0.5
    assert result.suggested_strategy == "broad"


def test_analytical_query(classifier):
    result = classifier.classify("Analyze and evaluate the impact of remote work")

    assert result.intent == "analytical"
    assert result.confidence == 1.0
    assert result.suggested_strategy == "broad"


def test_comparative_query_suggests_diverse(classifier):
    result = classifier.classify("Compare supervised versus unsupervised methods")

    assert result.intent == "comparative"
    assert result.confidence == 1.0
    assert result.suggested_strategy == "diverse"


def test_definitional_query_suggests_focused(classifier):
    result = classifier.classify("Define the concept of epistemic humility")

    assert result.intent == "definitional"
    assert result.confidence == 1.0
    assert result.suggested_strategy == "focused"


def test_no_match_defaults_to_analytical(classifier):
    result = classifier.classify("Transformer architectures for protein folding")

    assert result.intent == "analytical"
    assert result.confidence == 0.0
    assert result.suggested_strategy == "broad"


def test_tie_defaults_to_analytical(classifier):
    # One factual match ("what is") and one definitional match ("definition")
    result = classifier.classify("What is the definition of entropy?")

    assert result.intent == "analytical"
    assert result.suggested_strategy == "broad"


def test_patterns_case_insensitive(classifier):
    assert classifier.classify("HOW MANY participants were recruited").intent == "factual"


def test_confidence_capped_at_one(classifier):
    result = classifier.classify("Compare and contrast the two, how different or similar are they")

    assert result.intent == "comparative"
    assert result.confidence == 1.0


@pytest.mark.parametrize("query", ["", "   "])
def test_empty_query(classifier, query):
    result = classifier.classify(query)

    assert result.intent == "analytical"
    assert result.confidence == 0.0
