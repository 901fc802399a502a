"""
Tests for simulation configuration and environment overrides
"""

import pytest

from config import (
    COUNTRY_PROFILES,
    ClockConfig,
    CountryDynamicsConfig,
    EventConfig,
    OutcomeConfig,
    SimulationConfig,
    load_config,
)


class TestSimulationConfig:
    """Test suite for config validation"""

    def test_defaults_are_valid(self):
        config = SimulationConfig()

        assert config.clock.dt == 0.05
        assert config.clock.real_seconds_per_day == 2.0
        assert config.outcome.term_length == 1200.0
        assert config.history.capacity == 500
        assert config.countries.reference_country == "United States"
        assert len(COUNTRY_PROFILES) == 8

    def test_rejects_non_positive_dt(self):
        with pytest.raises(ValueError):
            SimulationConfig(clock=ClockConfig(dt=0.0))

    def test_rejects_unknown_reference_country(self):
        with pytest.raises(ValueError):
            SimulationConfig(countries=CountryDynamicsConfig(reference_country="Atlantis"))

    def test_rejects_empty_message_pool(self):
        with pytest.raises(ValueError):
            SimulationConfig(outcome=OutcomeConfig(win_messages=[]))

    def test_rejects_event_probabilities_above_one(self):
        with pytest.raises(ValueError):
            SimulationConfig(events=EventConfig(major_shock_probability=0.6, country_event_probability=0.6))


class TestLoadConfig:
    """Test suite for environment overrides"""

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MACROSIM_TERM_LENGTH", "365")
        monkeypatch.setenv("MACROSIM_SEED", "99")
        monkeypatch.setenv("MACROSIM_PORT", "9000")

        config = load_config(str(tmp_path / "missing.env"))

        assert config.outcome.term_length == 365.0
        assert config.seed == 99
        assert config.server.port == 9000

    def test_env_file(self, monkeypatch, tmp_path):
        monkeypatch.delenv("MACROSIM_REAL_SECONDS_PER_DAY", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("MACROSIM_REAL_SECONDS_PER_DAY=0.5\n")

        config = load_config(str(env_file))

        assert config.clock.real_seconds_per_day == 0.5
        monkeypatch.delenv("MACROSIM_REAL_SECONDS_PER_DAY", raising=False)

    def test_invalid_override_is_rejected(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MACROSIM_DT", "-1")

        with pytest.raises(ValueError):
            load_config(str(tmp_path / "missing.env"))
