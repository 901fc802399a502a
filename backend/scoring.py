"""
Player reputation scoring and the win/loss state machine.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from agents import CountryAgent
from config import CONFIG, OutcomeConfig, ReputationConfig
from randomness import RandomSource

logger = logging.getLogger(__name__)


class ReputationTracker:
    """Scores the player's economy each tick; the score stays in [0, 100]."""

    def __init__(self, params: Optional[ReputationConfig] = None):
        self.params = params or CONFIG.reputation
        self.reputation = self.params.initial_reputation

    def score_delta(self, country: CountryAgent) -> float:
        """Per-day reputation change for the country's current condition."""
        p = self.params
        delta = 0.0

        if country.growth > p.strong_growth_threshold:
            delta += p.strong_growth_reward
        elif country.growth < 0:
            delta -= p.recession_penalty

        if country.inflation > p.high_inflation_threshold:
            delta -= p.high_inflation_penalty
        if country.inflation > p.runaway_inflation_threshold:
            delta -= p.runaway_inflation_penalty

        if country.debt > p.high_debt_threshold:
            delta -= p.high_debt_penalty
        if country.debt > p.excessive_debt_threshold:
            delta -= p.excessive_debt_penalty

        return delta

    def update(self, country: CountryAgent, dt: float) -> float:
        self.reputation += self.score_delta(country) * dt
        self.reputation = self.clamp(self.reputation)
        return self.reputation

    def clamp(self, value: float) -> float:
        return min(self.params.max_reputation, max(self.params.min_reputation, value))


@dataclass(slots=True)
class Outcome:
    """Terminal result of a run."""

    won: bool
    reason: str

    def to_dict(self) -> Dict[str, object]:
        return {"won": self.won, "reason": self.reason}


class OutcomeEvaluator:
    """
    running -> won | lost.

    Winning means surviving the full term; losing means reputation hit the
    floor first. Once either is reached the state never changes again.
    """

    def __init__(self, rng: RandomSource, params: Optional[OutcomeConfig] = None):
        self.rng = rng
        self.params = params or CONFIG.outcome
        self.outcome: Optional[Outcome] = None

    @property
    def is_terminal(self) -> bool:
        return self.outcome is not None

    def evaluate(self, time: float, reputation: float) -> Optional[Outcome]:
        """Return a new Outcome on the transition tick, otherwise None."""
        if self.is_terminal:
            return None

        # A ruined reputation loses even on the last day of the term
        if reputation <= 0:
            self.outcome = Outcome(won=False, reason=self._pick(self.params.loss_messages))
        elif time >= self.params.term_length:
            self.outcome = Outcome(won=True, reason=self._pick(self.params.win_messages))
        else:
            return None

        logger.info("Game over at day %.1f (won=%s): %s", time, self.outcome.won, self.outcome.reason)
        return self.outcome

    def _pick(self, pool) -> str:
        return pool[self.rng.choice_index(len(pool))]
