"""
Fixed-step simulation clock.

Converts real elapsed time into whole simulated steps of constant size,
carrying the fractional remainder from one frame to the next.
"""

from typing import Callable, Optional

from config import CONFIG, ClockConfig


class SimulationClock:
    """
    Accumulator-based fixed-step driver.

    The host calls tick() (or advance_to()) from its own loop; the clock runs
    the step callback zero or more times per call. While paused, elapsed time
    is dropped rather than banked, so resuming never replays the pause.
    """

    def __init__(self, step: Callable[[float], None], params: Optional[ClockConfig] = None):
        self.params = params or CONFIG.clock
        self._step = step
        self.dt = self.params.dt
        self.speed = self.params.initial_speed
        self.running = False
        self.accumulator = 0.0
        self.last_frame: Optional[float] = None

    def start(self) -> None:
        self.running = True
        self.last_frame = None

    def pause(self) -> None:
        self.running = False

    def set_speed(self, speed: float) -> float:
        """Set the speed multiplier, clamped to the configured range."""
        self.speed = min(self.params.max_speed, max(self.params.min_speed, float(speed)))
        return self.speed

    def days_for(self, elapsed_real_seconds: float) -> float:
        return elapsed_real_seconds * self.speed / self.params.real_seconds_per_day

    def tick(self, elapsed_real_seconds: float) -> int:
        """
        Reconcile elapsed real time into simulated steps.

        Args:
            elapsed_real_seconds: Wall-clock seconds since the previous frame

        Returns:
            Number of update steps executed
        """
        if not self.running or elapsed_real_seconds <= 0:
            return 0

        self.accumulator += self.days_for(elapsed_real_seconds)
        steps = 0
        while self.running and self.accumulator >= self.dt:
            self._step(self.dt)
            self.accumulator -= self.dt
            steps += 1
        return steps

    def advance_to(self, now: float) -> int:
        """Tick using an absolute timestamp (seconds); the first frame only anchors."""
        if self.last_frame is None:
            self.last_frame = now
            return 0
        elapsed = now - self.last_frame
        self.last_frame = now
        return self.tick(elapsed)
