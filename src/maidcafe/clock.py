from __future__ import annotations

import logging
import random
from typing import Callable, List, Optional

from maidcafe.actions import Action, Tick, TogglePause
from maidcafe.config import DEFAULT_CONFIG, EngineConfig
from maidcafe.engine import reduce
from maidcafe.models import GameState


logger = logging.getLogger(__name__)


class ClockDriver:
    """Turns elapsed real time into TICK actions.

    Elapsed time is scaled by the host speed and the game speed, one TICK is dispatched per
    ``tick_interval_ms`` and no more than ``max_catch_up_ticks`` per call. Backlog beyond that
    is dropped so a stalled host cannot replay a whole day at once.
    """

    def __init__(
        self,
        state: GameState,
        tick_interval_ms: float = 2000.0,
        max_catch_up_ticks: int = 5,
        speed: float = 1.0,
        rng: Optional[random.Random] = None,
        cfg: Optional[EngineConfig] = None,
        on_state: Optional[Callable[[GameState], None]] = None,
    ) -> None:
        self.state = state
        self.tick_interval_ms = max(1.0, float(tick_interval_ms))
        self.max_catch_up_ticks = max(1, int(max_catch_up_ticks))
        self.speed = float(speed)
        self.rng = rng
        self.cfg = cfg or DEFAULT_CONFIG
        self.on_state = on_state
        self.accumulated_ms = 0.0
        self.dropped_ticks = 0

    @property
    def running(self) -> bool:
        return (not self.state.is_paused) and self.state.is_business_hours

    def dispatch(self, action: Action) -> GameState:
        self.state = reduce(self.state, action, self.rng, self.cfg)
        if self.on_state is not None:
            self.on_state(self.state)
        return self.state

    def pause(self) -> GameState:
        if not self.state.is_paused:
            self.dispatch(TogglePause())
        self.accumulated_ms = 0.0
        return self.state

    def resume(self) -> GameState:
        if self.state.is_paused:
            self.dispatch(TogglePause())
        return self.state

    def advance(self, elapsed_ms: float) -> List[GameState]:
        """Feed elapsed real time; returns the snapshots produced by the ticks it ran."""

        if not self.running:
            self.accumulated_ms = 0.0
            return []

        self.accumulated_ms += max(0.0, float(elapsed_ms)) * self.speed * float(self.state.game_speed)
        due = int(self.accumulated_ms // self.tick_interval_ms)
        if due > self.max_catch_up_ticks:
            dropped = due - self.max_catch_up_ticks
            self.dropped_ticks += dropped
            logger.debug("clock behind by %d ticks, dropping %d", due, dropped)
            due = self.max_catch_up_ticks
            self.accumulated_ms = float(due) * self.tick_interval_ms

        out: List[GameState] = []
        for _ in range(due):
            if not self.running:
                self.accumulated_ms = 0.0
                break
            self.accumulated_ms -= self.tick_interval_ms
            out.append(self.dispatch(Tick(delta_time=self.tick_interval_ms)))
        return out
