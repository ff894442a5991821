from __future__ import annotations

import random
from typing import Dict, Iterable, List, Optional, Tuple

from maidcafe.common import _clamp, _weighted_choice, next_id, notify, now_abs, release_pair
from maidcafe.config import EngineConfig
from maidcafe.events import event_multiplier, weather_customer_factor
from maidcafe.models import Customer, GameState, Order, OrderItem
from maidcafe.presets import CUSTOMER_FIRST_NAMES, CUSTOMER_LAST_NAMES


# type -> (base weight, reputation bonus)
CUSTOMER_TYPE_WEIGHTS: Dict[str, Tuple[float, float]] = {
    "regular": (70.0, 0.0),
    "vip": (15.0, 0.2),
    "critic": (10.0, 0.1),
    "group": (5.0, 0.15),
}

PATIENCE_RANGES: Dict[str, Tuple[int, int]] = {
    "regular": (70, 120),
    "vip": (50, 90),
    "critic": (40, 80),
    "group": (80, 120),
}

# Per virtual minute, before the type factor.
PATIENCE_DECAY_BY_STATUS: Dict[str, float] = {
    "waiting_seat": 2.0,
    "waiting_order": 0.8,
    "ordering": 0.5,
    "seated": 0.5,
    "eating": 0.0,
    "paying": 0.0,
    "leaving": 0.0,
}

PATIENCE_TYPE_FACTOR: Dict[str, float] = {"critic": 1.5, "vip": 1.3, "regular": 1.0, "group": 0.8}

TIMEOUT_REPUTATION_PENALTY: Dict[str, float] = {"critic": 8.0, "vip": 5.0, "group": 4.0, "regular": 2.0}

ORDER_SIZE_RANGES: Dict[str, Tuple[int, int]] = {
    "regular": (1, 3),
    "vip": (2, 4),
    "critic": (1, 3),
    "group": (3, 6),
}

DWELL_STATUSES = ("eating", "paying", "leaving")


def pick_customer_type(reputation: float, rng: random.Random) -> str:
    rep = _clamp(reputation)
    pairs = [(t, base + rep / 100.0 * bonus * 100.0) for t, (base, bonus) in CUSTOMER_TYPE_WEIGHTS.items()]
    return _weighted_choice(pairs, rng)


def generate_order(state: GameState, customer_type: str, rng: random.Random) -> Order:
    available = [
        it
        for it in state.menu_items.values()
        if it.unlocked and (it.season is None or it.season == state.season)
    ]
    if not available:
        return Order()

    lo, hi = ORDER_SIZE_RANGES.get(customer_type, (1, 3))
    hi = min(hi, len(available))
    lo = min(lo, hi)
    count = rng.randint(lo, hi)

    pool = list(available)
    items: List[OrderItem] = []
    for _ in range(count):
        pairs = [(it.item_id, 10.0 + float(it.popularity)) for it in pool]
        picked_id = _weighted_choice(pairs, rng)
        picked = next(it for it in pool if it.item_id == picked_id)
        pool.remove(picked)
        qty = rng.randint(1, 3) if customer_type == "group" else 1
        items.append(OrderItem(menu_item_id=picked.item_id, quantity=qty, price=float(picked.current_price)))

    total = round(sum(oi.price * oi.quantity for oi in items), 2)
    return Order(items=items, total_price=total)


def generate_customer(state: GameState, rng: random.Random, customer_id: str, seat_id: str) -> Customer:
    ctype = pick_customer_type(state.reputation, rng)
    lo, hi = PATIENCE_RANGES[ctype]
    return Customer(
        customer_id=customer_id,
        name=rng.choice(CUSTOMER_LAST_NAMES) + rng.choice(CUSTOMER_FIRST_NAMES),
        customer_type=ctype,
        patience=_clamp(rng.randint(lo, hi)),
        satisfaction=50.0,
        status="seated",
        order=generate_order(state, ctype, rng),
        seat_id=seat_id,
        arrival_time=now_abs(state),
    )


def spawn_interval_ms(reputation: float, cafe_level: int, cfg: EngineConfig) -> float:
    rep_factor = 1.0 - _clamp(reputation) / 100.0 * 0.5
    level_factor = 1.0 - (max(1, int(cafe_level)) - 1) / 9.0 * 0.3
    return max(cfg.base_spawn_interval_ms * rep_factor * level_factor, cfg.min_spawn_interval_ms)


def occupied_seats(state: GameState) -> set:
    return {c.seat_id for c in state.customers.values() if c.status != "waiting_seat" and c.seat_id}


def free_seats(state: GameState) -> List[str]:
    taken = occupied_seats(state)
    return [f"seat-{i}" for i in range(1, int(state.facility.max_seats) + 1) if f"seat-{i}" not in taken]


def admit_customer(state: GameState, customer: Customer) -> bool:
    """Seat a customer. Keeps its seat if free and valid, otherwise takes the lowest free one."""

    if customer.customer_id in state.customers:
        return False
    seats = free_seats(state)
    if not seats:
        return False
    if customer.seat_id not in seats:
        customer.seat_id = seats[0]
    # Without a maid link only the dwell states can carry on as they are.
    if customer.status not in DWELL_STATUSES:
        customer.status = "seated"
    customer.patience = _clamp(customer.patience)
    customer.satisfaction = _clamp(customer.satisfaction)
    customer.serving_maid_id = None
    customer.service_progress = None
    customer.service_start_time = None
    state.customers[customer.customer_id] = customer
    return True


def spawn_customers(state: GameState, cfg: EngineConfig, rng: random.Random, delta_ms: float) -> int:
    rt = state.runtime
    rt.spawn_accumulator_ms += max(0.0, float(delta_ms))

    rate = event_multiplier(state, "customers") * weather_customer_factor(state.weather)
    interval = spawn_interval_ms(state.reputation, state.facility.cafe_level, cfg) / max(0.05, rate)

    spawned = 0
    while rt.spawn_accumulator_ms >= interval and spawned < cfg.max_spawns_per_tick:
        seats = free_seats(state)
        if not seats:
            break
        customer = generate_customer(state, rng, next_id(state, "C"), seats[0])
        state.customers[customer.customer_id] = customer
        rt.spawn_accumulator_ms -= interval
        spawned += 1
    return spawned


def patience_decay(customer: Customer, minutes: float) -> float:
    rate = PATIENCE_DECAY_BY_STATUS.get(customer.status, 0.0)
    return rate * PATIENCE_TYPE_FACTOR.get(customer.customer_type, 1.0) * float(minutes)


def time_out_customer(state: GameState, cfg: EngineConfig, customer: Customer) -> None:
    release_pair(state, customer_id=customer.customer_id)
    customer.status = "leaving"
    customer.satisfaction = 0.0
    customer.patience = 0.0
    penalty = TIMEOUT_REPUTATION_PENALTY.get(customer.customer_type, 2.0)
    state.reputation = _clamp(state.reputation - penalty)
    state.runtime.dwell_ticks[customer.customer_id] = cfg.timeout_leaving_ticks
    state.runtime.customer_streak = 0
    notify(state, cfg, "warning", "顾客离开", f"{customer.name} 等得不耐烦离开了，声望 -{penalty:g}")


def update_patience(state: GameState, cfg: EngineConfig, minutes: float) -> None:
    for customer in list(state.customers.values()):
        if customer.status in DWELL_STATUSES:
            continue
        customer.patience = _clamp(customer.patience - patience_decay(customer, minutes))
        if customer.patience <= 0:
            time_out_customer(state, cfg, customer)


def dwell_ticks_for(status: str, cfg: EngineConfig) -> int:
    return {"eating": cfg.eating_ticks, "paying": cfg.paying_ticks, "leaving": cfg.leaving_ticks}.get(status, 1)


def process_dwell(state: GameState, cfg: EngineConfig, customer_ids: Iterable[str]) -> None:
    """Count down eating/paying/leaving timers: eating -> paying -> leaving -> removed."""

    ticks = state.runtime.dwell_ticks
    for cid in customer_ids:
        customer = state.customers.get(cid)
        if customer is None or customer.status not in DWELL_STATUSES:
            continue
        left = int(ticks.get(cid, dwell_ticks_for(customer.status, cfg))) - 1
        if left > 0:
            ticks[cid] = left
            continue
        if customer.status == "eating":
            customer.status = "paying"
            ticks[cid] = dwell_ticks_for("paying", cfg)
        elif customer.status == "paying":
            customer.status = "leaving"
            ticks[cid] = dwell_ticks_for("leaving", cfg)
        else:
            remove_customer(state, cid)


def remove_customer(state: GameState, customer_id: str) -> Optional[Customer]:
    customer = state.customers.get(customer_id)
    if customer is None:
        return None
    release_pair(state, customer_id=customer_id)
    del state.customers[customer_id]
    state.runtime.dwell_ticks.pop(customer_id, None)
    return customer
