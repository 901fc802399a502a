"""
World Economy Simulation Engine

This module implements the simulation context that owns the global factors,
every country, the player's controls, the event scheduler, reputation,
outcome and history, and advances them through one fixed pipeline per tick.

Each WorldEconomy is independent; nothing is shared between instances except
read-only configuration.
"""

import logging
from typing import Dict, List, Optional

from agents import CountryAgent, GlobalFactors, PlayerControls
from clock import SimulationClock
from config import CONFIG, COUNTRY_PROFILES, SimulationConfig
from events import EventScheduler
from history import HistoryRecorder
from randomness import RandomSource
from scoring import Outcome, OutcomeEvaluator, ReputationTracker

logger = logging.getLogger(__name__)


class WorldEconomy:
    """
    Main simulation coordinator for the world economy.

    Per tick: global factors -> trade (no-op) -> countries in fixed order ->
    reputation -> events -> outcome -> history -> time += dt.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        rng: Optional[RandomSource] = None,
    ):
        """
        Initialize the world economy.

        Args:
            config: Simulation configuration (defaults to CONFIG)
            rng: Random source; defaults to one seeded from config.seed
        """
        self.config = config or CONFIG
        self.rng = rng or RandomSource(self.config.seed)
        self.clock = SimulationClock(self.update, self.config.clock)
        self._initialize_state()

    def _initialize_state(self) -> None:
        self.time = 0.0
        self.global_factors = GlobalFactors.from_config(self.config.global_factors)
        reference = self.config.countries.reference_country
        self.countries: Dict[str, CountryAgent] = {
            name: CountryAgent.from_profile(name, reference) for name in COUNTRY_PROFILES
        }
        self.trade_matrix = self.initialize_trade_matrix()

        self.player_country: Optional[str] = None
        self.player_controls = PlayerControls()
        self.player_controls.reset()

        self.events = EventScheduler(self.rng, self.config.events)
        self.reputation_tracker = ReputationTracker(self.config.reputation)
        self.outcome_evaluator = OutcomeEvaluator(self.rng, self.config.outcome)
        self.history = HistoryRecorder(self.countries, self.config.history)
        self.outcome_delivered = False

    def reset(self) -> None:
        """Stop the clock and rebuild every entity from configuration."""
        self.clock.pause()
        self.clock.accumulator = 0.0
        self.clock.last_frame = None
        self._initialize_state()
        logger.info("World economy reset")

    # ------------------------------------------------------------------
    # Operator interface
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self.clock.running

    @property
    def speed(self) -> float:
        return self.clock.speed

    @property
    def reputation(self) -> float:
        return self.reputation_tracker.reputation

    @reputation.setter
    def reputation(self, value: float) -> None:
        self.reputation_tracker.reputation = self.reputation_tracker.clamp(value)

    @property
    def outcome(self) -> Optional[Outcome]:
        """The terminal outcome until the operator has been shown it."""
        if self.outcome_delivered:
            return None
        return self.outcome_evaluator.outcome

    @property
    def is_finished(self) -> bool:
        return self.outcome_evaluator.is_terminal

    def start(self) -> bool:
        """Start (or resume) the clock. Refused once the run has ended."""
        if self.is_finished:
            return False
        self.clock.start()
        return True

    def pause(self) -> None:
        self.clock.pause()

    def set_speed(self, speed: float) -> float:
        return self.clock.set_speed(speed)

    def tick(self, elapsed_real_seconds: float) -> int:
        return self.clock.tick(elapsed_real_seconds)

    def select_player_country(self, name: str) -> bool:
        """
        Hand a country to the operator and reset the policy controls.

        Unknown names are rejected without touching any state.
        """
        if name not in self.countries:
            logger.warning("Ignoring unknown player country: %r", name)
            return False
        self.player_country = name
        self.player_controls.reset()
        logger.info("Player now controls %s", name)
        return True

    def set_rate_override(self, percentage_points: float) -> None:
        self.player_controls.rate_override = float(percentage_points)

    def set_fiscal_balance(self, balance: float) -> None:
        self.player_controls.fiscal_balance = float(balance)

    def set_tariff_level(self, tariff: float) -> None:
        self.player_controls.tariff_level = float(tariff)

    def apply_policy(self, overrides: Dict[str, object]) -> None:
        self.player_controls.apply_overrides(overrides)

    def pop_outcome(self) -> Optional[Outcome]:
        """Return the terminal outcome exactly once, then hide it."""
        outcome = self.outcome
        if outcome is not None:
            self.outcome_delivered = True
        return outcome

    # ------------------------------------------------------------------
    # Simulation pipeline
    # ------------------------------------------------------------------

    def initialize_trade_matrix(self) -> Dict[str, Dict[str, float]]:
        """Uniform bilateral trade weights. Kept for future trade modelling."""
        names = list(COUNTRY_PROFILES)
        return {i: {j: 0.1 for j in names if j != i} for i in names}

    def calculate_trade(self, dt: float) -> None:
        """Trade flows are not modelled; weights have no effect."""
        return None

    def update(self, dt: float) -> None:
        """
        Execute one full simulation tick.

        A no-op while the engine is not running, which includes every call
        after a terminal outcome.
        """
        if not self.running:
            return

        self.global_factors.advance(dt, self.rng)
        self.calculate_trade(dt)

        reference = self.countries.get(self.config.countries.reference_country)
        for name, country in self.countries.items():
            controls = self.player_controls if name == self.player_country else None
            country.advance(
                dt,
                self.global_factors,
                self.rng,
                reference=reference,
                controls=controls,
                params=self.config.countries,
            )

        if self.player_country is not None:
            self.reputation_tracker.update(self.countries[self.player_country], dt)

        self.events.update(self.time, self.global_factors, self.countries)
        self.check_game_over()
        self.history.record(self.time, self.countries)
        self.time += dt

    def check_game_over(self) -> Optional[Outcome]:
        if not self.running or self.player_country is None:
            return None
        outcome = self.outcome_evaluator.evaluate(self.time, self.reputation)
        if outcome is not None:
            self.clock.pause()
        return outcome

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def get_player_state(self) -> Optional[Dict[str, object]]:
        if self.player_country is None:
            return None
        return self.countries[self.player_country].to_dict()

    def get_event_log(self) -> List[Dict[str, object]]:
        return self.events.to_list()

    def snapshot(self, include_history: bool = True) -> Dict[str, object]:
        """
        Read-only view of the engine for renderers.

        Returns:
            Dictionary with time, clock state, global factors, countries,
            events, outcome, reputation and (optionally) history.
        """
        outcome = self.outcome
        state = {
            "time": self.time,
            "running": self.running,
            "speed": self.speed,
            "player_country": self.player_country,
            "player_controls": self.player_controls.to_dict(),
            "reputation": self.reputation,
            "term_length": self.config.outcome.term_length,
            "global": self.global_factors.to_dict(),
            "countries": {name: c.to_dict() for name, c in self.countries.items()},
            "events": self.get_event_log(),
            "outcome": outcome.to_dict() if outcome is not None else None,
        }
        if include_history:
            state["history"] = self.history.to_dict()
        return state
