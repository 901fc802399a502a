"""
Decimated chart history.

Samples every country's headline series on a fixed simulated-time grid and
keeps the most recent samples in fixed-capacity ring buffers.
"""

import math
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional

import numpy as np

from agents import CountryAgent
from config import CONFIG, HistoryConfig

# Series name -> CountryAgent attribute
TRACKED_SERIES: Dict[str, str] = {
    "growth": "growth",
    "inflation": "inflation",
    "debt": "debt",
    "fx": "fx_rate",
    "equity": "equity",
    "nominal_output": "nominal_output",
    "real_output": "real_output",
    "policy_rate": "policy_rate",
}


class HistoryRecorder:
    """
    Edge-triggered sampler with synchronized FIFO eviction.

    A sample is taken whenever the current time falls in a later recording
    bucket than the last sample. Several ticks within one bucket produce one
    sample; a jump over several buckets also produces just one.
    """

    def __init__(self, country_names: Iterable[str], params: Optional[HistoryConfig] = None):
        self.params = params or CONFIG.history
        capacity = self.params.capacity
        self.time: Deque[float] = deque(maxlen=capacity)
        self.countries: Dict[str, Dict[str, Deque[float]]] = {
            name: {series: deque(maxlen=capacity) for series in TRACKED_SERIES}
            for name in country_names
        }
        self.last_step: Optional[int] = None

    def __len__(self) -> int:
        return len(self.time)

    def record(self, time: float, countries: Dict[str, CountryAgent]) -> bool:
        """Sample all series if a new recording bucket was entered."""
        step = math.floor(time / self.params.record_interval)
        if self.last_step is not None and step <= self.last_step:
            return False

        self.last_step = step
        self.time.append(time)
        for name, buffers in self.countries.items():
            country = countries[name]
            for series, attr in TRACKED_SERIES.items():
                buffers[series].append(getattr(country, attr))
        return True

    def series(self, country: str, name: str) -> List[float]:
        return list(self.countries[country][name])

    def to_arrays(self, country: str) -> Dict[str, np.ndarray]:
        """Time axis and every series for one country as numpy arrays."""
        arrays = {"time": np.fromiter(self.time, dtype=np.float64, count=len(self.time))}
        for series, values in self.countries[country].items():
            arrays[series] = np.fromiter(values, dtype=np.float64, count=len(values))
        return arrays

    def to_dict(self, country: Optional[str] = None) -> Dict[str, object]:
        """Plain-list view for JSON snapshots (one country or all)."""
        names = [country] if country is not None else list(self.countries)
        return {
            "time": list(self.time),
            "countries": {
                name: {series: list(values) for series, values in self.countries[name].items()}
                for name in names
            },
        }
