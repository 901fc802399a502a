"""
MacroSim Agent System

This module defines the state holders that the world economy advances each
tick: the shared global factors, the per-country economies, and the policy
controls the operator applies to the player's country.

All dynamics are reduced-form stochastic difference equations; randomness is
drawn from an injected RandomSource.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Optional

from config import CONFIG, COUNTRY_PROFILES, CountryDynamicsConfig, GlobalFactorConfig
from randomness import RandomSource


@dataclass(slots=True)
class GlobalFactors:
    """
    Shared global drivers: oil price, global risk aversion and world rate.

    Each follows a mean-reverting Euler-Maruyama step. Oil and risk also carry
    a jump intensity that decays geometrically every tick.
    """

    oil_price: float
    global_risk_aversion: float
    world_rate: float
    oil_jump: float = 0.0
    risk_jump: float = 0.0
    params: GlobalFactorConfig = field(default_factory=GlobalFactorConfig)

    @classmethod
    def from_config(cls, params: Optional[GlobalFactorConfig] = None) -> "GlobalFactors":
        params = params or CONFIG.global_factors
        return cls(
            oil_price=params.initial_oil_price,
            global_risk_aversion=params.initial_risk_aversion,
            world_rate=params.initial_world_rate,
            params=params,
        )

    def advance(self, dt: float, rng: RandomSource) -> None:
        """Advance all three factors by dt days (fresh normal draw per factor)."""
        p = self.params
        sqrt_dt = math.sqrt(dt)

        # Oil price
        self.oil_price += (
            p.oil_reversion_speed * (p.oil_long_run_mean - self.oil_price) * dt
            + p.oil_volatility * rng.normal() * sqrt_dt
            + self.oil_jump * dt
        )
        self.oil_price = max(p.oil_price_floor, self.oil_price)
        self.oil_jump *= p.jump_retention

        # Global risk aversion
        self.global_risk_aversion += (
            p.risk_reversion_speed * (p.risk_long_run_mean - self.global_risk_aversion) * dt
            + p.risk_volatility * rng.normal() * sqrt_dt
            + self.risk_jump * dt
        )
        self.global_risk_aversion = max(p.risk_aversion_floor, self.global_risk_aversion)
        self.risk_jump *= p.jump_retention

        # World rate (no jump component)
        self.world_rate += (
            p.world_rate_reversion_speed * (p.world_rate_long_run_mean - self.world_rate) * dt
            + p.world_rate_volatility * rng.normal() * sqrt_dt
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "oil_price": self.oil_price,
            "global_risk_aversion": self.global_risk_aversion,
            "world_rate": self.world_rate,
            "oil_jump": self.oil_jump,
            "risk_jump": self.risk_jump,
        }


CONTROL_FIELDS = ("rate_override", "fiscal_balance", "tariff_level", "intervention")


@dataclass(slots=True)
class PlayerControls:
    """Policy levers for the player's country. Written only by the operator."""

    rate_override: float = 0.0  # percentage points added to the Taylor target
    fiscal_balance: float = -2.0  # target primary balance, % of output
    tariff_level: float = 5.0  # average tariff, %
    intervention: float = 0.0  # FX intervention intensity (not wired into the dynamics)

    def reset(self) -> None:
        defaults = CONFIG.player
        self.rate_override = defaults.default_rate_override
        self.fiscal_balance = defaults.default_fiscal_balance
        self.tariff_level = defaults.default_tariff_level
        self.intervention = defaults.default_intervention

    def to_dict(self) -> Dict[str, float]:
        return {key: getattr(self, key) for key in CONTROL_FIELDS}

    def apply_overrides(self, overrides: Dict[str, object]) -> None:
        """
        Apply external overrides to the controls.

        Args:
            overrides: Dictionary of control names to new values; None
                values are skipped

        Raises:
            ValueError: If a key is not one of the control fields
        """
        unknown = set(overrides) - set(CONTROL_FIELDS)
        if unknown:
            raise ValueError(f"Unknown policy controls: {', '.join(sorted(unknown))}")
        for key, value in overrides.items():
            if value is not None:
                setattr(self, key, float(value))


@dataclass(slots=True)
class CountryAgent:
    """
    One national economy.

    Growth, inflation, policy rate, debt, spread, FX and equity are updated
    sequentially within a tick; each step sees the values already updated
    earlier in the same tick.
    """

    name: str

    # Economic state
    nominal_output: float  # trillions, local currency units
    real_output: float
    growth: float  # %
    inflation: float  # %
    policy_rate: float  # %
    fx_rate: float  # units per reference currency
    debt: float  # % of output
    equity: float  # index level
    spread: float  # sovereign risk premium
    idiosyncratic_vol: float  # spread add-on, raised by credit events

    # Structural parameters
    potential_growth: float
    inflation_target: float
    neutral_rate: float
    growth_reversion: float  # a
    rate_sensitivity: float  # b
    trade_sensitivity: float  # c
    inflation_persistence: float  # phi
    phillips_slope: float  # kappa
    oil_passthrough: float  # eta
    policy_smoothing: float  # lambda
    taylor_inflation: float  # phi_pi
    taylor_output: float  # phi_y
    debt_limit: float
    fiscal_multiplier: float

    fx_fair_value: Optional[float] = None  # PPP-implied FX, defaults to fx_rate
    is_reference: bool = False

    def __post_init__(self):
        """Validate invariants after initialization."""
        if self.fx_rate <= 0.0:
            raise ValueError(f"fx_rate must be positive for {self.name}, got {self.fx_rate}")
        if self.fx_fair_value is None:
            self.fx_fair_value = self.fx_rate
        elif self.fx_fair_value <= 0.0:
            raise ValueError(f"fx_fair_value must be positive for {self.name}, got {self.fx_fair_value}")
        if self.equity <= 0.0:
            raise ValueError(f"equity must be positive for {self.name}, got {self.equity}")
        if self.policy_rate < 0.0:
            raise ValueError(f"policy_rate cannot be negative for {self.name}")
        if self.debt < 0.0:
            raise ValueError(f"debt cannot be negative for {self.name}")

    @classmethod
    def from_profile(cls, name: str, reference_country: Optional[str] = None) -> "CountryAgent":
        """Build a country from the COUNTRY_PROFILES table."""
        if name not in COUNTRY_PROFILES:
            raise ValueError(f"unknown country: {name}")
        reference_country = reference_country or CONFIG.countries.reference_country
        return cls(name=name, is_reference=(name == reference_country), **COUNTRY_PROFILES[name])

    def fx_competitiveness(self) -> float:
        """Log deviation of FX from fair value; zero for the reference economy."""
        if self.is_reference:
            return 0.0
        return math.log(self.fx_rate / self.fx_fair_value)

    def advance(
        self,
        dt: float,
        global_factors: GlobalFactors,
        rng: RandomSource,
        reference: Optional["CountryAgent"] = None,
        controls: Optional[PlayerControls] = None,
        params: Optional[CountryDynamicsConfig] = None,
    ) -> None:
        """
        Advance this economy by dt days.

        Args:
            dt: Step size in simulated days
            global_factors: Current global factor values
            rng: Random source for all noise terms
            reference: The reference economy (already advanced this tick)
            controls: Player controls when this is the player's country
            params: Shared dynamics constants (defaults to CONFIG.countries)
        """
        p = params or CONFIG.countries
        sqrt_dt = math.sqrt(dt)
        dt_years = dt / p.days_per_year

        # 1. Growth
        rate_gap = (self.policy_rate - self.inflation) - self.neutral_rate
        tariff_drag = 0.0
        fiscal_impulse = 0.0
        if controls is not None:
            tariff_drag = (controls.tariff_level - p.neutral_tariff_level) * p.tariff_drag_per_point
            deficit_excess = -controls.fiscal_balance + p.default_primary_balance
            fiscal_impulse = deficit_excess * self.fiscal_multiplier * p.fiscal_impulse_scale
        nx_shock = p.trade_competitiveness_weight * self.fx_competitiveness() - tariff_drag

        dg = (
            -self.growth_reversion * (self.growth - self.potential_growth)
            - self.rate_sensitivity * rate_gap
            + self.trade_sensitivity * nx_shock
        )
        growth_noise = p.growth_noise_scale * rng.normal() * sqrt_dt
        self.growth += dg * dt + growth_noise + fiscal_impulse * dt

        self.real_output *= 1 + (self.growth / 100) * dt_years
        self.nominal_output *= 1 + ((self.growth + self.inflation) / 100) * dt_years

        # 2. Inflation (Phillips curve)
        output_gap_proxy = self.growth - self.potential_growth
        oil_deviation = (global_factors.oil_price - p.oil_reference_price) / p.oil_reference_price
        dpi = (
            -self.inflation_persistence * (self.inflation - self.inflation_target)
            + self.phillips_slope * output_gap_proxy
            + self.oil_passthrough * oil_deviation
        )
        self.inflation += dpi * dt + p.inflation_noise_scale * rng.normal() * sqrt_dt

        # 3. Policy rate (smoothed Taylor rule, zero lower bound)
        self.policy_rate += -self.policy_smoothing * (self.policy_rate - self.taylor_target(controls)) * dt
        self.policy_rate = max(0.0, self.policy_rate)

        # 4. Debt
        primary_balance = controls.fiscal_balance if controls is not None else p.default_primary_balance
        snowball = ((self.policy_rate - self.inflation) - self.growth) / 100 * self.debt
        self.debt += (snowball - primary_balance) * dt
        self.debt = max(0.0, self.debt)

        # 5. Risk spread
        debt_excess = max(0.0, self.debt - self.debt_limit)
        risk_local = min(p.max_local_spread, p.debt_excess_spread_slope * debt_excess)
        risk_global = 0.0 if self.is_reference else global_factors.global_risk_aversion
        target_spread = risk_local + risk_global + self.idiosyncratic_vol
        self.spread += p.spread_relaxation_speed * (target_spread - self.spread) * dt

        # 6. FX (relative PPP fair value, UIP carry, valuation pull)
        if not self.is_reference and reference is not None:
            self.fx_fair_value *= 1 + (self.inflation - reference.inflation) / 100 * dt_years
            carry_flow = -(self.policy_rate - reference.policy_rate - self.spread) / 100
            valuation_pull = p.fx_valuation_pull * math.log(self.fx_fair_value / self.fx_rate)
            drift = carry_flow + valuation_pull
            self.fx_rate *= 1 + drift * dt_years + p.fx_annual_volatility * rng.normal() * math.sqrt(dt_years)

        # 7. Equity
        expected_return = (
            p.equity_base_return
            + p.equity_growth_loading * output_gap_proxy / 100
            - p.equity_real_rate_drag * (self.policy_rate - self.inflation) / 100
            - p.equity_spread_drag * self.spread / 100
        )
        equity_vol = p.equity_base_volatility + p.equity_risk_loading * global_factors.global_risk_aversion
        self.equity *= 1 + expected_return * dt_years + equity_vol * rng.normal() * math.sqrt(dt_years)

    def taylor_target(self, controls: Optional[PlayerControls] = None) -> float:
        """Taylor-rule policy rate target, plus the player's override if any."""
        output_gap_proxy = self.growth - self.potential_growth
        target = (
            self.neutral_rate
            + self.inflation
            + self.taylor_inflation * (self.inflation - self.inflation_target)
            + self.taylor_output * output_gap_proxy
        )
        if controls is not None:
            target += controls.rate_override
        return target

    def to_dict(self) -> Dict[str, object]:
        """
        Serialize the dynamic state to basic Python types.

        Returns:
            Dictionary representation of the country state
        """
        return {
            "name": self.name,
            "nominal_output": self.nominal_output,
            "real_output": self.real_output,
            "growth": self.growth,
            "inflation": self.inflation,
            "policy_rate": self.policy_rate,
            "fx_rate": self.fx_rate,
            "fx_fair_value": self.fx_fair_value,
            "debt": self.debt,
            "spread": self.spread,
            "idiosyncratic_vol": self.idiosyncratic_vol,
            "equity": self.equity,
            "is_reference": self.is_reference,
        }
