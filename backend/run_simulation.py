"""
Run a headless MacroSim game.

This script plays one country with a fixed policy mix for a number of
simulated days, exports decimated country data and the event log to SQLite,
and writes a JSON summary. Progress is printed every few simulated days.
"""

import argparse
import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Dict, Optional

import numpy as np

from config import COUNTRY_PROFILES, load_config
from economy import WorldEconomy
from randomness import RandomSource


def init_database(db_path: str):
    """Initialize SQLite database with schema."""
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    # Per-country state
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS countries (
            day REAL,
            country TEXT,
            growth REAL,
            inflation REAL,
            policy_rate REAL,
            debt REAL,
            spread REAL,
            fx_rate REAL,
            fx_fair_value REAL,
            equity REAL,
            nominal_output REAL,
            real_output REAL,
            PRIMARY KEY (day, country)
        )
    """)

    # Global factors and player standing
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS world (
            day REAL PRIMARY KEY,
            oil_price REAL,
            global_risk_aversion REAL,
            world_rate REAL,
            reputation REAL
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS events (
            day REAL,
            text TEXT
        )
    """)

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_countries_country ON countries(country)")

    conn.commit()
    conn.close()


def export_tick_data(economy: WorldEconomy, conn: sqlite3.Connection):
    """Write the current state of every country plus global factors."""
    cursor = conn.cursor()
    day = round(economy.time, 6)

    rows = [
        (
            day, c.name, c.growth, c.inflation, c.policy_rate, c.debt, c.spread,
            c.fx_rate, c.fx_fair_value, c.equity, c.nominal_output, c.real_output,
        )
        for c in economy.countries.values()
    ]
    cursor.executemany(
        "INSERT OR REPLACE INTO countries VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)", rows
    )

    g = economy.global_factors
    cursor.execute(
        "INSERT OR REPLACE INTO world VALUES (?, ?, ?, ?, ?)",
        (day, g.oil_price, g.global_risk_aversion, g.world_rate, economy.reputation),
    )
    conn.commit()


def export_events(economy: WorldEconomy, conn: sqlite3.Connection, seen: set):
    """Append events not yet written (the in-memory log only keeps 10)."""
    new_rows = []
    for event in reversed(economy.events.log):
        key = (event.time, event.text)
        if key not in seen:
            seen.add(key)
            new_rows.append(key)
    if new_rows:
        conn.executemany("INSERT INTO events VALUES (?, ?)", new_rows)
        conn.commit()


def summarize_history(economy: WorldEconomy, country: str) -> Dict[str, Dict[str, float]]:
    """Mean/min/max/last of every recorded series for one country."""
    summary = {}
    for series, values in economy.history.to_arrays(country).items():
        if series == "time" or values.size == 0:
            continue
        summary[series] = {
            "mean": float(np.mean(values)),
            "std": float(np.std(values)),
            "min": float(np.min(values)),
            "max": float(np.max(values)),
            "last": float(values[-1]),
        }
    return summary


def main(
    country: str = "United States",
    num_days: float = 365.0,
    seed: Optional[int] = 42,
    term_length: Optional[float] = None,
    rate_override_bps: int = 0,
    fiscal_balance: float = -2.0,
    tariff_level: float = 5.0,
    export_every: float = 5.0,
    output_tag: str = "baseline"
):
    """Run one headless game with a fixed policy mix."""
    print("=" * 80)
    print(f"MACROSIM ({country}, {num_days:.0f} days, seed={seed})")
    print("=" * 80)
    print()

    config = load_config()
    if term_length is not None:
        config.outcome.term_length = term_length

    economy = WorldEconomy(config=config, rng=RandomSource(seed))
    if not economy.select_player_country(country):
        raise SystemExit(f"Unknown country: {country}. Choose from: {', '.join(COUNTRY_PROFILES)}")
    economy.set_rate_override(rate_override_bps / 100)
    economy.set_fiscal_balance(fiscal_balance)
    economy.set_tariff_level(tariff_level)
    economy.start()

    # Create output directory
    output_dir = Path("sample_data")
    output_dir.mkdir(exist_ok=True)

    db_path = output_dir / f"macrosim_{output_tag}.db"
    if db_path.exists():
        db_path.unlink()
        print(f"Removed existing database: {db_path}")
    print(f"Initializing database: {db_path}")
    init_database(str(db_path))
    print()

    db_conn = sqlite3.connect(str(db_path))
    seen_events: set = set()

    dt = config.clock.dt
    total_steps = int(round(num_days / dt))
    steps_per_export = max(1, int(round(export_every / dt)))

    print(" Day  |  Growth | Inflation |  Rate  |  Debt  |   FX    | Equity | Reputation")
    print("-" * 80)

    start_time = time.time()
    for step in range(total_steps):
        economy.update(dt)

        if step % steps_per_export == 0 or not economy.running:
            export_tick_data(economy, db_conn)
            export_events(economy, db_conn, seen_events)
            c = economy.countries[country]
            print(f"{economy.time:6.1f} | {c.growth:7.2f} | {c.inflation:9.2f} | {c.policy_rate:6.2f} | "
                  f"{c.debt:6.1f} | {c.fx_rate:7.3f} | {c.equity:6.1f} | {economy.reputation:6.2f}")

        if not economy.running:
            break

    elapsed = time.time() - start_time
    db_conn.close()

    outcome = economy.pop_outcome()
    print()
    if outcome is not None:
        print(f"{'VICTORY' if outcome.won else 'DEFEAT'}: {outcome.reason}")
    else:
        print(f"Term still running after {economy.time:.1f} days.")
    print(f"Simulation time: {elapsed:.2f} seconds")
    print()

    summary = {
        "country": country,
        "seed": seed,
        "days_simulated": economy.time,
        "reputation": economy.reputation,
        "outcome": outcome.to_dict() if outcome is not None else None,
        "policy": economy.player_controls.to_dict(),
        "final_state": economy.get_player_state(),
        "history_summary": summarize_history(economy, country),
        "recent_events": economy.get_event_log(),
    }
    summary_path = output_dir / f"macrosim_{output_tag}_summary.json"
    with open(summary_path, "w") as f:
        json.dump(summary, f, indent=2)

    print("=" * 80)
    print("FILES GENERATED")
    print("=" * 80)
    print(f"  Database:  {db_path}")
    print(f"  Summary:   {summary_path}")
    print()
    return summary


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Run a headless MacroSim game.")
    parser.add_argument("--country", type=str, default="United States", help="Player country")
    parser.add_argument("--days", type=float, default=365.0, help="Simulated days to run")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--term-length", type=float, default=None, help="Override the term length (days)")
    parser.add_argument("--rate-override-bps", type=int, default=0, help="Policy rate override in basis points")
    parser.add_argument("--fiscal-balance", type=float, default=-2.0, help="Primary balance, %% of output")
    parser.add_argument("--tariff", type=float, default=5.0, help="Average tariff level, %%")
    parser.add_argument("--export-every", type=float, default=5.0, help="Export interval (days)")
    parser.add_argument("--tag", type=str, default="baseline", help="Output tag for DB/summary filenames")
    parser.add_argument(
        "--full-term",
        action="store_true",
        help="Shortcut for running the entire default term"
    )
    args = parser.parse_args()

    if args.full_term:
        args.days = (args.term_length or load_config().outcome.term_length) + 1

    main(
        country=args.country,
        num_days=args.days,
        seed=args.seed,
        term_length=args.term_length,
        rate_override_bps=args.rate_override_bps,
        fiscal_balance=args.fiscal_balance,
        tariff_level=args.tariff,
        export_every=args.export_every,
        output_tag=args.tag
    )
