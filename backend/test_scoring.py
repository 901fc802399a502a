"""
Unit tests for ReputationTracker and OutcomeEvaluator

Tests cover:
- Stacking reputation rewards and penalties
- Clamping to [0, 100]
- Win on term completion, loss on zero reputation
- Terminal outcomes never change
"""

from agents import CountryAgent
from config import OutcomeConfig, ReputationConfig
from randomness import RandomSource
from scoring import OutcomeEvaluator, ReputationTracker


def make_country(growth: float, inflation: float, debt: float) -> CountryAgent:
    country = CountryAgent.from_profile("Brazil", "United States")
    country.growth = growth
    country.inflation = inflation
    country.debt = debt
    return country


class TestReputationTracker:
    """Test suite for reputation scoring"""

    def test_healthy_economy_gains(self):
        tracker = ReputationTracker(ReputationConfig())
        country = make_country(growth=3.0, inflation=2.0, debt=50.0)

        assert abs(tracker.score_delta(country) - 0.05) < 1e-12

    def test_recession_penalty(self):
        tracker = ReputationTracker(ReputationConfig())
        country = make_country(growth=-1.0, inflation=2.0, debt=50.0)

        assert abs(tracker.score_delta(country) + 0.1) < 1e-12

    def test_middling_growth_is_neutral(self):
        tracker = ReputationTracker(ReputationConfig())
        country = make_country(growth=1.0, inflation=2.0, debt=50.0)

        assert tracker.score_delta(country) == 0.0

    def test_penalties_stack(self):
        """Runaway inflation and excessive debt hit every threshold"""
        tracker = ReputationTracker(ReputationConfig())
        country = make_country(growth=-1.0, inflation=12.0, debt=160.0)

        expected = -0.1 - 0.1 - 0.2 - 0.05 - 0.1
        assert abs(tracker.score_delta(country) - expected) < 1e-12

    def test_update_scales_by_dt(self):
        tracker = ReputationTracker(ReputationConfig())
        country = make_country(growth=3.0, inflation=2.0, debt=50.0)

        tracker.update(country, 0.5)

        assert abs(tracker.reputation - (50.0 + 0.05 * 0.5)) < 1e-12

    def test_clamped_to_bounds(self):
        tracker = ReputationTracker(ReputationConfig())
        good = make_country(growth=3.0, inflation=2.0, debt=50.0)
        bad = make_country(growth=-1.0, inflation=12.0, debt=160.0)

        tracker.reputation = 99.999
        tracker.update(good, 10.0)
        assert tracker.reputation == 100.0

        tracker.reputation = 0.01
        tracker.update(bad, 10.0)
        assert tracker.reputation == 0.0


class TestOutcomeEvaluator:
    """Test suite for the outcome state machine"""

    def test_running_until_term_or_ruin(self):
        evaluator = OutcomeEvaluator(RandomSource(1), OutcomeConfig(term_length=10.0))

        assert evaluator.evaluate(5.0, 40.0) is None
        assert not evaluator.is_terminal

    def test_win_at_term_end(self):
        params = OutcomeConfig(term_length=10.0)
        evaluator = OutcomeEvaluator(RandomSource(1), params)

        outcome = evaluator.evaluate(10.0, 40.0)

        assert outcome is not None
        assert outcome.won
        assert outcome.reason in params.win_messages

    def test_loss_at_zero_reputation(self):
        params = OutcomeConfig(term_length=10.0)
        evaluator = OutcomeEvaluator(RandomSource(1), params)

        outcome = evaluator.evaluate(3.0, 0.0)

        assert outcome is not None
        assert not outcome.won
        assert outcome.reason in params.loss_messages

    def test_zero_reputation_at_term_end_loses(self):
        """Ruin on the last day of the term overrides the win"""
        params = OutcomeConfig(term_length=10.0)
        evaluator = OutcomeEvaluator(RandomSource(1), params)

        outcome = evaluator.evaluate(10.0, 0.0)

        assert not outcome.won
        assert outcome.reason in params.loss_messages

    def test_terminal_outcome_is_frozen(self):
        evaluator = OutcomeEvaluator(RandomSource(1), OutcomeConfig(term_length=10.0))
        first = evaluator.evaluate(2.0, 0.0)

        assert evaluator.evaluate(20.0, 80.0) is None
        assert evaluator.outcome is first
        assert not evaluator.outcome.won

    def test_message_choice_is_uniform_over_pool(self):
        """Every message in the pool is reachable"""
        params = OutcomeConfig(term_length=1.0)
        seen = set()
        rng = RandomSource(3)
        for _ in range(200):
            seen.add(OutcomeEvaluator(rng, params).evaluate(1.0, 50.0).reason)

        assert seen == set(params.win_messages)
