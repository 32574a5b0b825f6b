"""
scheduler.py - Daily Cycle Scheduler
=====================================
Runs the check-in cycle, then waits a fixed interval (24 hours by default)
and runs it again, forever.

States:
-------
    RUNNING  : a cycle is in progress
    WAITING  : idle until `next_run`

    start -> RUNNING -> (cycle done) -> WAITING -> (deadline reached) -> RUNNING ...

A cycle that raises is logged and still followed by a normal wait, so a
missing credential file only costs that one cycle.

While waiting, the scheduler's Countdown prints the remaining time once per
second on a single console line. The countdown is display only; the
transition back to RUNNING depends on the clock alone.
"""

import enum
import logging
import sys
import time
from datetime import datetime, timedelta
from typing import Callable, Optional, TextIO

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = timedelta(hours=24)

# How often the countdown line is refreshed while waiting
TICK_SECONDS = 1.0


class SchedulerState(enum.Enum):
    RUNNING = "running"
    WAITING = "waiting"


def format_remaining(remaining: timedelta) -> str:
    """Format a duration as HH:MM:SS (hours may exceed 24)."""
    total = max(0, int(remaining.total_seconds()))
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


# =============================================================================
# COUNTDOWN
# =============================================================================

class Countdown:
    """
    Console countdown to the next run.

    Lifecycle: start(deadline) -> render(now) any number of times -> stop().
    render() is a no-op unless the countdown is started and enabled; stop()
    ends the line so later log output starts on a fresh one.
    """

    def __init__(self, enabled: bool = True, stream: Optional[TextIO] = None):
        self.enabled = enabled
        self.stream = stream or sys.stdout
        self.deadline: Optional[datetime] = None

    @property
    def active(self) -> bool:
        return self.deadline is not None

    def start(self, deadline: datetime):
        self.deadline = deadline

    def render(self, now: datetime):
        if not (self.enabled and self.active):
            return
        remaining = format_remaining(self.deadline - now)
        self.stream.write(
            f"\rNext run in {remaining} (at {self.deadline:%Y-%m-%d %H:%M:%S})"
        )
        self.stream.flush()

    def stop(self):
        if self.enabled and self.active:
            self.stream.write("\n")
            self.stream.flush()
        self.deadline = None


# =============================================================================
# SCHEDULER
# =============================================================================

class Scheduler:
    """
    Run `run_cycle` now and then every `interval`, sequentially.

    Usage:
        scheduler = Scheduler(lambda: run_cycle(settings, client))
        scheduler.run_forever()

    `clock` and `sleep` default to datetime.now and time.sleep and can be
    replaced in tests.
    """

    def __init__(
        self,
        run_cycle: Callable[[], object],
        interval: timedelta = DEFAULT_INTERVAL,
        countdown: Optional[Countdown] = None,
        clock: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.run_cycle = run_cycle
        self.interval = interval
        self.countdown = countdown or Countdown(enabled=False)
        self.clock = clock
        self.sleep = sleep

        self.state = SchedulerState.RUNNING
        self.next_run: Optional[datetime] = None
        self.cycles_completed = 0

    def run_cycle_once(self):
        """Run one cycle in the RUNNING state, logging (not raising) any failure."""
        self.state = SchedulerState.RUNNING
        self.next_run = None
        try:
            result = self.run_cycle()
        except Exception:
            logger.exception("Check-in cycle failed")
            result = None
        self.cycles_completed += 1
        return result

    def wait_for_next_run(self):
        """Enter WAITING, block until `next_run`, then return to RUNNING."""
        self.next_run = self.clock() + self.interval
        self.state = SchedulerState.WAITING
        logger.info(f"Next cycle scheduled at {self.next_run:%Y-%m-%d %H:%M:%S}")

        self.countdown.start(self.next_run)
        try:
            while True:
                now = self.clock()
                if now >= self.next_run:
                    break
                self.countdown.render(now)
                remaining = (self.next_run - now).total_seconds()
                self.sleep(min(TICK_SECONDS, remaining))
        finally:
            self.countdown.stop()

        self.state = SchedulerState.RUNNING

    def run_forever(self, max_cycles: Optional[int] = None):
        """
        Alternate cycles and waits.

        Args:
            max_cycles: Stop after this many cycles (no wait after the last
                one). None runs until the process is killed.
        """
        while True:
            self.run_cycle_once()
            if max_cycles is not None and self.cycles_completed >= max_cycles:
                return
            self.wait_for_next_run()
