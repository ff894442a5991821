from __future__ import annotations

import copy
import random
from typing import Dict, Optional

from maidcafe.common import _clamp, _weighted_choice, notify
from maidcafe.config import EngineConfig
from maidcafe.models import EventHistoryRecord, GameEvent, GameState
from maidcafe.presets import (
    NEGATIVE_EVENTS,
    POSITIVE_EVENTS,
    SEASONAL_EVENTS,
    WEATHER_CUSTOMER_FACTOR,
    WEATHER_WEIGHTS,
    build_event,
)


MULTIPLIER_TARGETS = ("revenue", "customers", "satisfaction", "reputation")


def combine_event_multipliers(state: GameState) -> Dict[str, float]:
    """Product of multiplicative effects over the active events, per target."""

    out = {t: 1.0 for t in MULTIPLIER_TARGETS}
    for ev in state.active_events:
        for eff in ev.effects:
            if eff.is_multiplier and eff.target in out:
                out[eff.target] *= max(0.0, float(eff.modifier))
    return out


def event_multiplier(state: GameState, target: str) -> float:
    return combine_event_multipliers(state).get(target, 1.0)


def is_event_active(state: GameState, event_id: str) -> bool:
    return any(ev.event_id == event_id for ev in state.active_events)


def apply_event(state: GameState, cfg: EngineConfig, event: GameEvent, started_at: int) -> bool:
    """Activate an event: additive effects land now, multipliers are read on demand later.

    Returns False when the event is already active.
    """

    if is_event_active(state, event.event_id):
        return False

    ev = copy.deepcopy(event)
    ev.started_at = int(started_at)
    state.active_events.append(ev)

    for eff in ev.effects:
        if eff.is_multiplier:
            continue
        amount = float(eff.modifier)
        if eff.target == "reputation":
            state.reputation = _clamp(state.reputation + amount)
        elif eff.target == "revenue":
            if amount > 0:
                state.finance.gold += amount
                state.finance.daily_revenue += amount
            else:
                state.finance.gold = max(0.0, state.finance.gold + amount)
                state.finance.daily_expenses += -amount

    state.event_history.append(
        EventHistoryRecord(day=state.day, time=state.time, event_id=ev.event_id, name=ev.name, event_type=ev.event_type)
    )
    if len(state.event_history) > cfg.max_event_history:
        state.event_history = state.event_history[-cfg.max_event_history :]

    kind = "warning" if ev.event_type == "negative" else "info"
    notify(state, cfg, kind, f"事件：{ev.name}", ev.description or ev.name)
    return True


def end_event(state: GameState, event_id: str) -> bool:
    kept = [ev for ev in state.active_events if ev.event_id != event_id]
    if len(kept) == len(state.active_events):
        return False
    state.active_events = kept
    return True


def expire_events(state: GameState) -> None:
    state.active_events = [ev for ev in state.active_events if (state.time - ev.started_at) < ev.duration]


def roll_daily_event(state: GameState, cfg: EngineConfig, rng: random.Random) -> Optional[GameEvent]:
    """Trigger roll, then seasonal vs generic, then positive vs negative."""

    if rng.random() >= cfg.event_chance:
        return None
    seasonal = SEASONAL_EVENTS.get(state.season) or []
    if seasonal and rng.random() < cfg.seasonal_event_chance:
        pool, event_type = seasonal, "seasonal"
    elif rng.random() < cfg.positive_event_weight:
        pool, event_type = POSITIVE_EVENTS, "positive"
    else:
        pool, event_type = NEGATIVE_EVENTS, "negative"
    row = pool[rng.randrange(0, len(pool))]
    return build_event(row, event_type, started_at=state.time)


def roll_weather(state: GameState, rng: random.Random) -> str:
    pairs = WEATHER_WEIGHTS.get(state.season) or [("sunny", 1.0)]
    return _weighted_choice(pairs, rng)


def weather_customer_factor(weather: str) -> float:
    return float(WEATHER_CUSTOMER_FACTOR.get(weather, 1.0))
