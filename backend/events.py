"""
Random event scheduling.

Events arrive at random simulated-time intervals and are either a global
shock (oil or risk-off), a country-specific shock (a temporary credit
downgrade or a permanent growth boost), or a flavor headline with no
economic effect.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional

from agents import CountryAgent, GlobalFactors
from config import CONFIG, EventConfig
from randomness import RandomSource

logger = logging.getLogger(__name__)


FLAVOR_HEADLINES: List[str] = [
    "G20 Summit concludes with vague promises of cooperation.",
    "IMF releases updated World Economic Outlook.",
    "Davos: Billionaires discuss inequality over canapés.",
    "Protests erupt in emerging markets over food prices.",
    "Central Bank Governors meet in Jackson Hole.",
    "New trade deal signed between regional powers.",
    "Tech sector regulation talks stall in parliament.",
    "Climate accord signed, markets react with indifference.",
    "Election season heats up in major economies.",
    "Supply chain bottlenecks reported at major ports.",
    "Youth unemployment figures spark parliamentary debate.",
    "Consumer confidence index hits a 6-month high.",
]


@dataclass(slots=True)
class Event:
    """A logged headline."""

    time: float
    text: str

    def to_dict(self) -> Dict[str, object]:
        return {"time": self.time, "text": self.text}


@dataclass(slots=True)
class TransientModifier:
    """A temporary bump to a country's idiosyncratic volatility."""

    country: str
    amount: float
    expires_at: float  # simulated days


class EventScheduler:
    """
    Draws event times, applies shocks and keeps a rolling headline log.

    Transient shocks expire in simulated time, so pausing or changing speed
    stretches them along with everything else.
    """

    def __init__(self, rng: RandomSource, params: Optional[EventConfig] = None):
        self.rng = rng
        self.params = params or CONFIG.events
        self.log: Deque[Event] = deque(maxlen=self.params.max_log_entries)
        self.active_modifiers: List[TransientModifier] = []
        self.next_event_time = self.rng.uniform_range(
            self.params.first_event_min_day,
            self.params.first_event_min_day + self.params.first_event_window,
        )

    def update(
        self,
        time: float,
        global_factors: GlobalFactors,
        countries: Dict[str, CountryAgent],
    ) -> Optional[Event]:
        """Expire finished shocks, then fire an event if one is due."""
        self.expire_modifiers(time, countries)

        if time < self.next_event_time:
            return None

        event = self.fire(time, global_factors, countries)
        self.next_event_time = time + self.rng.uniform_range(
            self.params.next_event_min_gap,
            self.params.next_event_min_gap + self.params.next_event_window,
        )
        return event

    def fire(
        self,
        time: float,
        global_factors: GlobalFactors,
        countries: Dict[str, CountryAgent],
    ) -> Event:
        """Draw and apply one random event, recording it in the log."""
        p = self.params
        roll = self.rng.uniform()

        if roll < p.major_shock_probability:
            text = self._major_shock(global_factors)
        elif roll < p.major_shock_probability + p.country_event_probability:
            text = self._country_event(time, countries)
        else:
            text = "📰 " + FLAVOR_HEADLINES[self.rng.choice_index(len(FLAVOR_HEADLINES))]

        event = Event(time=time, text=text)
        self.log.appendleft(event)
        logger.info("Day %.1f: %s", time, text)
        return event

    def _major_shock(self, global_factors: GlobalFactors) -> str:
        p = self.params
        if self.rng.uniform() > 0.5:
            shock = p.oil_jump_size if self.rng.uniform() > 0.5 else -p.oil_jump_size
            global_factors.oil_jump = shock
            return "🛢️ Oil Supply Shock! Prices Spiking." if shock > 0 else "📉 Oil Price Collapse!"

        global_factors.risk_jump = p.risk_jump_size
        return "📉 Global Market Panic! Risk-off sentiment prevails."

    def _country_event(self, time: float, countries: Dict[str, CountryAgent]) -> str:
        p = self.params
        names = list(countries)
        target = names[self.rng.choice_index(len(names))]

        if self.rng.uniform() > 0.5:
            countries[target].idiosyncratic_vol += p.downgrade_volatility
            self.active_modifiers.append(TransientModifier(
                country=target,
                amount=p.downgrade_volatility,
                expires_at=time + p.downgrade_duration_days,
            ))
            return f"⚠️ Credit Watch: {target} outlook negative."

        countries[target].growth += p.growth_boost
        return f"🚀 Tech breakthrough in {target}! Growth outlook upgraded."

    def expire_modifiers(self, time: float, countries: Dict[str, CountryAgent]) -> None:
        """Reverse every transient shock whose expiry time has passed."""
        still_active = []
        for modifier in self.active_modifiers:
            if time >= modifier.expires_at:
                country = countries.get(modifier.country)
                if country is not None:
                    country.idiosyncratic_vol -= modifier.amount
                logger.debug("Credit watch on %s lifted at day %.2f", modifier.country, time)
            else:
                still_active.append(modifier)
        self.active_modifiers = still_active

    def to_list(self) -> List[Dict[str, object]]:
        """Event log, most recent first."""
        return [event.to_dict() for event in self.log]
