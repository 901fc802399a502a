"""
Unit tests for HistoryRecorder

Tests cover:
- Edge-triggered decimation on the 0.2-day grid
- Coalescing of ticks within one bucket and of large gaps
- Capacity-bounded FIFO eviction kept in sync across series
"""

import numpy as np

from agents import CountryAgent
from config import COUNTRY_PROFILES, HistoryConfig
from history import TRACKED_SERIES, HistoryRecorder


def make_countries():
    return {name: CountryAgent.from_profile(name, "United States") for name in COUNTRY_PROFILES}


class TestHistoryRecorder:
    """Test suite for decimated history"""

    def test_first_call_always_records(self):
        countries = make_countries()
        history = HistoryRecorder(countries, HistoryConfig())

        assert history.record(0.0, countries)
        assert len(history) == 1

    def test_two_days_of_small_steps_gives_ten_samples(self):
        """40 ticks of 0.05 days cover ten 0.2-day buckets"""
        countries = make_countries()
        history = HistoryRecorder(countries, HistoryConfig())

        t = 0.0
        for _ in range(40):
            history.record(t, countries)
            t += 0.05

        assert len(history) == 10
        for name in countries:
            for series in TRACKED_SERIES:
                assert len(history.series(name, series)) == 10

    def test_ticks_within_bucket_are_coalesced(self):
        countries = make_countries()
        history = HistoryRecorder(countries, HistoryConfig())

        assert history.record(0.21, countries)
        assert not history.record(0.25, countries)
        assert not history.record(0.39, countries)
        assert history.record(0.41, countries)

    def test_large_gap_produces_single_sample(self):
        countries = make_countries()
        history = HistoryRecorder(countries, HistoryConfig())

        history.record(0.0, countries)
        history.record(5.0, countries)

        assert list(history.time) == [0.0, 5.0]

    def test_capacity_evicts_oldest_first(self):
        """After 1200 samples only the latest 500 remain, in order"""
        countries = make_countries()
        history = HistoryRecorder(countries, HistoryConfig())
        us = countries["United States"]

        for k in range(1200):
            us.growth = float(k)
            history.record(k * 0.2 + 0.01, countries)
            assert len(history) <= 500

        assert len(history) == 500
        growth = history.series("United States", "growth")
        assert growth[0] == 700.0
        assert growth[-1] == 1199.0
        assert abs(history.time[0] - (700 * 0.2 + 0.01)) < 1e-9
        for name in countries:
            for series in TRACKED_SERIES:
                assert len(history.series(name, series)) == 500

    def test_samples_capture_current_values(self):
        countries = make_countries()
        history = HistoryRecorder(countries, HistoryConfig())
        china = countries["China"]
        china.fx_rate = 7.5
        china.policy_rate = 2.75

        history.record(0.0, countries)

        assert history.series("China", "fx") == [7.5]
        assert history.series("China", "policy_rate") == [2.75]

    def test_to_arrays(self):
        countries = make_countries()
        history = HistoryRecorder(countries, HistoryConfig())
        for k in range(5):
            history.record(k * 0.2 + 0.01, countries)

        arrays = history.to_arrays("Japan")

        assert set(arrays) == {"time", *TRACKED_SERIES}
        assert arrays["time"].shape == (5,)
        assert np.allclose(arrays["debt"], countries["Japan"].debt)
