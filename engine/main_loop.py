# engine/main_loop.py
import time
from typing import Callable, Self

import structlog

from goap.world import GoapWorld

log = structlog.get_logger()


class MainLoop:
    """
    Drives a GoapWorld tick by tick, optionally pacing ticks in real time
    and stopping early once a condition on the world holds.
    """

    def __init__(self: Self, world: GoapWorld, tick_interval: float = 0.0):
        """
        Initializes the MainLoop.

        Args:
            world: The GoapWorld to advance.
            tick_interval: Seconds to sleep between ticks (0 runs flat out).
        """
        if tick_interval < 0:
            raise ValueError("tick_interval must be >= 0")
        self.world: GoapWorld = world
        self.tick_interval: float = tick_interval
        log.info("MainLoop initialized successfully", tick_interval=tick_interval)

    def step(self: Self) -> None:
        """Advance the world by a single tick."""
        try:
            self.world.advance_tick()
        except Exception as e:
            log.error(
                "Exception during tick",
                tick=self.world.tick_count,
                error=str(e),
                exc_info=True,
            )
            raise

    def run(
        self: Self,
        max_ticks: int,
        until: Callable[[GoapWorld], bool] | None = None,
    ) -> int:
        """
        Runs up to ``max_ticks`` ticks, stopping after the first tick for
        which ``until(world)`` returns True. Returns the number of ticks run.
        """
        ticks_run = 0
        started = time.perf_counter()
        while ticks_run < max_ticks:
            self.step()
            ticks_run += 1
            if until is not None and until(self.world):
                log.info("Stop condition reached", tick=self.world.tick_count)
                break
            if self.tick_interval:
                time.sleep(self.tick_interval)
        log.info(
            "MainLoop finished",
            ticks_run=ticks_run,
            world_tick=self.world.tick_count,
            elapsed=round(time.perf_counter() - started, 4),
        )
        return ticks_run
