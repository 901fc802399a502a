"""
Simulation Configuration

Centralizes all tunable parameters for the world economy simulation,
including the per-country structural profiles.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dotenv import load_dotenv


@dataclass
class GlobalFactorConfig:
    """Mean-reverting global factor processes (oil, risk aversion, world rate)."""

    # Oil price
    initial_oil_price: float = 80.0
    oil_reversion_speed: float = 0.02
    oil_long_run_mean: float = 80.0
    oil_volatility: float = 1.5
    oil_price_floor: float = 10.0

    # Global risk aversion (VIX-like)
    initial_risk_aversion: float = 0.0
    risk_reversion_speed: float = 0.1
    risk_long_run_mean: float = 0.0
    risk_volatility: float = 0.2
    risk_aversion_floor: float = 0.0

    # World risk-free rate
    initial_world_rate: float = 4.0
    world_rate_reversion_speed: float = 0.01
    world_rate_long_run_mean: float = 4.0
    world_rate_volatility: float = 0.05

    # Jump shocks decay geometrically every tick
    jump_retention: float = 0.9


@dataclass
class CountryDynamicsConfig:
    """Constants shared by every country's update equations."""

    reference_country: str = "United States"
    days_per_year: float = 365.0

    # Growth
    growth_noise_scale: float = 0.5
    trade_competitiveness_weight: float = 0.1
    neutral_tariff_level: float = 5.0
    tariff_drag_per_point: float = 0.1
    fiscal_impulse_scale: float = 0.1

    # Inflation
    inflation_noise_scale: float = 0.2
    oil_reference_price: float = 80.0

    # Debt
    default_primary_balance: float = -2.0  # % of output

    # Risk spread
    debt_excess_spread_slope: float = 0.02
    max_local_spread: float = 20.0
    spread_relaxation_speed: float = 0.2  # per day

    # FX (UIP + valuation)
    fx_valuation_pull: float = 0.5
    fx_annual_volatility: float = 0.10

    # Equity
    equity_base_return: float = 0.05
    equity_growth_loading: float = 1.0
    equity_real_rate_drag: float = 0.5
    equity_spread_drag: float = 0.5
    equity_base_volatility: float = 0.15
    equity_risk_loading: float = 0.5


@dataclass
class PlayerConfig:
    """Default settings applied when the operator takes over a country."""

    default_rate_override: float = 0.0  # percentage points
    default_fiscal_balance: float = -2.0  # % of output
    default_tariff_level: float = 5.0  # %
    default_intervention: float = 0.0

    # Operator bounds (UI contract)
    max_rate_override_bps: int = 500
    min_fiscal_balance: float = -10.0
    max_fiscal_balance: float = 5.0
    min_tariff_level: float = 0.0
    max_tariff_level: float = 50.0


@dataclass
class EventConfig:
    """Random event scheduling and magnitudes."""

    first_event_min_day: float = 10.0
    first_event_window: float = 10.0  # first event in [10, 20)
    next_event_min_gap: float = 40.0
    next_event_window: float = 40.0  # subsequent events every [40, 80) days

    major_shock_probability: float = 0.1
    country_event_probability: float = 0.2  # cumulative threshold is 0.1 + 0.2

    oil_jump_size: float = 20.0
    risk_jump_size: float = 2.0
    downgrade_volatility: float = 1.5
    downgrade_duration_days: float = 2.0
    growth_boost: float = 1.0

    max_log_entries: int = 10


@dataclass
class ReputationConfig:
    """Player reputation scoring."""

    initial_reputation: float = 50.0
    min_reputation: float = 0.0
    max_reputation: float = 100.0

    strong_growth_threshold: float = 2.0
    strong_growth_reward: float = 0.05
    recession_penalty: float = 0.1

    high_inflation_threshold: float = 5.0
    high_inflation_penalty: float = 0.1
    runaway_inflation_threshold: float = 10.0
    runaway_inflation_penalty: float = 0.2

    high_debt_threshold: float = 100.0
    high_debt_penalty: float = 0.05
    excessive_debt_threshold: float = 150.0
    excessive_debt_penalty: float = 0.1


@dataclass
class OutcomeConfig:
    """Term length and end-of-game messages."""

    term_length: float = 1200.0  # simulated days
    win_messages: List[str] = field(default_factory=lambda: [
        "Re-elected in a landslide! The people love you.",
        "Statue erected in your honor. A golden age!",
        "History will remember you as 'The Great'.",
        "Retired peacefully to a private island. Mission accomplished.",
        "Nobel Prize in Economics awarded for your stewardship.",
    ])
    loss_messages: List[str] = field(default_factory=lambda: [
        "Coup d'état! The military has seized the palace.",
        "Vote of No Confidence passed. You are out.",
        "Impeached for gross incompetence. Shame!",
        "Forced to resign amidst mass protests.",
        "The economy collapsed, and so did your government.",
    ])


@dataclass
class HistoryConfig:
    """Decimated chart history."""

    record_interval: float = 0.2  # simulated days between samples
    capacity: int = 500


@dataclass
class ClockConfig:
    """Fixed-step integrator settings."""

    dt: float = 0.05  # simulated days per update
    real_seconds_per_day: float = 2.0  # at 1x speed
    initial_speed: float = 1.0
    min_speed: float = 0.1
    max_speed: float = 10.0


@dataclass
class ServerConfig:
    """Websocket/REST service settings."""

    host: str = "127.0.0.1"
    port: int = 8000
    frame_interval: float = 0.05  # seconds between pushed snapshots


@dataclass
class SimulationConfig:
    """Master configuration for the entire simulation."""

    # Sub-configurations
    global_factors: GlobalFactorConfig = field(default_factory=GlobalFactorConfig)
    countries: CountryDynamicsConfig = field(default_factory=CountryDynamicsConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    events: EventConfig = field(default_factory=EventConfig)
    reputation: ReputationConfig = field(default_factory=ReputationConfig)
    outcome: OutcomeConfig = field(default_factory=OutcomeConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    clock: ClockConfig = field(default_factory=ClockConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    # Seed for the default random source (None = unseeded)
    seed: Optional[int] = None

    def __post_init__(self):
        """Validation and derived values."""
        if self.clock.dt <= 0:
            raise ValueError("dt must be positive")
        if self.clock.real_seconds_per_day <= 0:
            raise ValueError("real_seconds_per_day must be positive")
        if not (self.clock.min_speed <= self.clock.initial_speed <= self.clock.max_speed):
            raise ValueError("initial_speed must lie within [min_speed, max_speed]")

        if self.history.record_interval <= 0:
            raise ValueError("record_interval must be positive")
        if self.history.capacity <= 0:
            raise ValueError("history capacity must be positive")

        if self.outcome.term_length <= 0:
            raise ValueError("term_length must be positive")
        if not self.outcome.win_messages or not self.outcome.loss_messages:
            raise ValueError("win and loss message pools cannot be empty")

        if not (0.0 <= self.global_factors.jump_retention <= 1.0):
            raise ValueError("jump_retention must be in [0, 1]")

        rep = self.reputation
        if not (rep.min_reputation <= rep.initial_reputation <= rep.max_reputation):
            raise ValueError("initial_reputation must lie within the reputation bounds")

        ev = self.events
        if ev.major_shock_probability + ev.country_event_probability > 1.0:
            raise ValueError("event probabilities cannot exceed 1")
        if ev.max_log_entries <= 0:
            raise ValueError("max_log_entries must be positive")

        if self.countries.reference_country not in COUNTRY_PROFILES:
            raise ValueError(f"unknown reference country: {self.countries.reference_country}")


# Initial state and structural parameters per country.
# Y: output (trillions), g: growth, pi: inflation, i: policy rate, s: FX,
# d: debt/GDP, q: equity index, rho: spread, sigma: idiosyncratic vol.
COUNTRY_PROFILES: Dict[str, Dict[str, float]] = {
    "United States": dict(
        nominal_output=27.72, real_output=23.77, growth=2.0, inflation=2.0, policy_rate=5.25,
        fx_rate=1.0, debt=108.2, equity=100.0, spread=0.0, idiosyncratic_vol=0.0,
        potential_growth=2.0, inflation_target=2.0, neutral_rate=1.0,
        growth_reversion=0.1, rate_sensitivity=0.5, trade_sensitivity=0.1,
        inflation_persistence=0.2, phillips_slope=0.1, oil_passthrough=0.05,
        policy_smoothing=0.1, taylor_inflation=1.5, taylor_output=0.5,
        debt_limit=150.0, fiscal_multiplier=0.5,
    ),
    "China": dict(
        nominal_output=17.79, real_output=17.18, growth=5.0, inflation=2.5, policy_rate=3.0,
        fx_rate=7.2, debt=80.0, equity=100.0, spread=0.5, idiosyncratic_vol=0.1,
        potential_growth=4.5, inflation_target=3.0, neutral_rate=2.0,
        growth_reversion=0.15, rate_sensitivity=0.3, trade_sensitivity=0.2,
        inflation_persistence=0.3, phillips_slope=0.15, oil_passthrough=0.1,
        policy_smoothing=0.1, taylor_inflation=1.2, taylor_output=0.5,
        debt_limit=120.0, fiscal_multiplier=0.6,
    ),
    "Euro Area": dict(
        nominal_output=17.75, real_output=17.75, growth=1.5, inflation=2.0, policy_rate=4.5,
        fx_rate=0.9, debt=90.0, equity=100.0, spread=0.2, idiosyncratic_vol=0.05,
        potential_growth=1.2, inflation_target=2.0, neutral_rate=0.5,
        growth_reversion=0.1, rate_sensitivity=0.4, trade_sensitivity=0.15,
        inflation_persistence=0.2, phillips_slope=0.1, oil_passthrough=0.15,
        policy_smoothing=0.08, taylor_inflation=1.5, taylor_output=0.5,
        debt_limit=100.0, fiscal_multiplier=0.4,
    ),
    "India": dict(
        nominal_output=3.57, real_output=4.13, growth=6.5, inflation=5.0, policy_rate=6.5,
        fx_rate=83.0, debt=82.0, equity=100.0, spread=1.5, idiosyncratic_vol=0.2,
        potential_growth=6.5, inflation_target=4.0, neutral_rate=2.0,
        growth_reversion=0.2, rate_sensitivity=0.3, trade_sensitivity=0.1,
        inflation_persistence=0.4, phillips_slope=0.2, oil_passthrough=0.2,
        policy_smoothing=0.15, taylor_inflation=1.5, taylor_output=0.5,
        debt_limit=90.0, fiscal_multiplier=0.7,
    ),
    "Japan": dict(
        nominal_output=4.20, real_output=4.61, growth=1.0, inflation=1.0, policy_rate=0.1,
        fx_rate=150.0, debt=250.0, equity=100.0, spread=0.1, idiosyncratic_vol=0.05,
        potential_growth=0.8, inflation_target=2.0, neutral_rate=-0.5,
        growth_reversion=0.1, rate_sensitivity=0.2, trade_sensitivity=0.1,
        inflation_persistence=0.1, phillips_slope=0.05, oil_passthrough=0.15,
        policy_smoothing=0.05, taylor_inflation=1.5, taylor_output=0.5,
        debt_limit=300.0, fiscal_multiplier=0.3,
    ),
    "Brazil": dict(
        nominal_output=2.17, real_output=2.18, growth=2.0, inflation=4.5, policy_rate=10.0,
        fx_rate=5.0, debt=85.0, equity=100.0, spread=2.5, idiosyncratic_vol=0.3,
        potential_growth=2.0, inflation_target=3.25, neutral_rate=4.0,
        growth_reversion=0.2, rate_sensitivity=0.4, trade_sensitivity=0.15,
        inflation_persistence=0.5, phillips_slope=0.25, oil_passthrough=0.1,
        policy_smoothing=0.2, taylor_inflation=1.8, taylor_output=0.5,
        debt_limit=100.0, fiscal_multiplier=0.5,
    ),
    "Russia": dict(
        nominal_output=2.02, real_output=0.49, growth=1.5, inflation=6.0, policy_rate=15.0,
        fx_rate=90.0, debt=20.0, equity=100.0, spread=4.0, idiosyncratic_vol=0.5,
        potential_growth=1.0, inflation_target=4.0, neutral_rate=3.0,
        growth_reversion=0.15, rate_sensitivity=0.2, trade_sensitivity=0.1,
        inflation_persistence=0.4, phillips_slope=0.2, oil_passthrough=-0.3,
        policy_smoothing=0.2, taylor_inflation=1.5, taylor_output=0.5,
        debt_limit=50.0, fiscal_multiplier=0.4,
    ),
    "Saudi Arabia": dict(
        nominal_output=1.07, real_output=1.07, growth=3.0, inflation=2.5, policy_rate=5.0,
        fx_rate=3.75, debt=30.0, equity=100.0, spread=0.8, idiosyncratic_vol=0.1,
        potential_growth=2.5, inflation_target=2.0, neutral_rate=1.5,
        growth_reversion=0.2, rate_sensitivity=0.1, trade_sensitivity=0.3,
        inflation_persistence=0.3, phillips_slope=0.1, oil_passthrough=-0.5,
        policy_smoothing=0.1, taylor_inflation=1.2, taylor_output=0.2,
        debt_limit=60.0, fiscal_multiplier=0.6,
    ),
}


def load_config(env_file: Optional[str] = None) -> SimulationConfig:
    """
    Build a SimulationConfig, applying MACROSIM_* overrides from the
    environment (and an optional .env file).
    """
    load_dotenv(env_file)
    config = SimulationConfig()

    term_length = os.getenv("MACROSIM_TERM_LENGTH")
    if term_length:
        config.outcome.term_length = float(term_length)
    dt = os.getenv("MACROSIM_DT")
    if dt:
        config.clock.dt = float(dt)
    seconds_per_day = os.getenv("MACROSIM_REAL_SECONDS_PER_DAY")
    if seconds_per_day:
        config.clock.real_seconds_per_day = float(seconds_per_day)
    seed = os.getenv("MACROSIM_SEED")
    if seed:
        config.seed = int(seed)
    config.server.host = os.getenv("MACROSIM_HOST", config.server.host)
    port = os.getenv("MACROSIM_PORT")
    if port:
        config.server.port = int(port)

    # Re-run validation after the overrides
    config.__post_init__()
    return config


# Global configuration instance
CONFIG = SimulationConfig()
