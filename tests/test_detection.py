from refwriter.core.random_source import SeededRandomSource, SequenceRandomSource
from refwriter.utils.humanizer import DetectabilityEstimator, describe_score, estimate_score

estimator = DetectabilityEstimator()


def test_score_from_matches_bounds():
    assert DetectabilityEstimator.score_from_matches(0) == 50
    assert DetectabilityEstimator.score_from_matches(5) == 40
    assert DetectabilityEstimator.score_from_matches(20) == 10
    assert DetectabilityEstimator.score_from_matches(500) == 10


def test_score_is_monotonic_non_increasing():
    scores = [DetectabilityEstimator.score_from_matches(n) for n in range(40)]
    assert all(10 <= score <= 50 for score in scores)
    assert scores == sorted(scores, reverse=True)


def test_estimate_plain_text():
    assert estimate_score("") == 50
    assert estimate_score("xyz") == 50


def test_estimate_counts_fillers():
    assert estimator.count_pattern_matches("very very very very very") == 5
    assert estimate_score("very very very very very") == 40


def test_estimate_clamped_at_minimum():
    assert estimate_score("In on at by. " * 30) == 10


def test_estimate_returns_verdict():
    result = estimator.estimate("very very very very very")
    assert result.score == 40
    assert result.pattern_matches == 5
    assert result.verdict == "elevated"


def test_describe_score_threshold():
    assert describe_score(19)[0] == "low"
    assert describe_score(20)[0] == "elevated"
    assert "low probability" in describe_score(12)[1]


def test_simulated_score_range():
    source = SeededRandomSource(7)
    scores = {DetectabilityEstimator.simulate_score(source) for _ in range(500)}
    assert min(scores) >= 5
    assert max(scores) <= 18
    assert scores == set(range(5, 19))


def test_simulated_score_extremes():
    assert DetectabilityEstimator.simulate_score(SequenceRandomSource([0.0])) == 5
    assert DetectabilityEstimator.simulate_score(SequenceRandomSource([0.999])) == 18


def test_compare_versions():
    comparison = estimator.compare_versions("xyz", "very very very very very")
    assert comparison == {
        "original_score": 50,
        "humanized_score": 40,
        "improvement": 10,
        "original_matches": 0,
        "humanized_matches": 5,
    }
