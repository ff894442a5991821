from __future__ import annotations

import random

from maidcafe.assignment import assign_maids
from maidcafe.config import EngineConfig
from maidcafe.customers import (
    PATIENCE_RANGES,
    TIMEOUT_REPUTATION_PENALTY,
    admit_customer,
    free_seats,
    generate_customer,
    generate_order,
    patience_decay,
    pick_customer_type,
    process_dwell,
    remove_customer,
    spawn_customers,
    spawn_interval_ms,
    update_patience,
)
from maidcafe.models import CUSTOMER_TYPES, Customer, GameState, Maid
from maidcafe.presets import new_game_state


def _assert(cond: bool, msg: str) -> None:
    if not cond:
        raise AssertionError(msg)


def _make_min_state(seed: int = 20260101) -> GameState:
    s = new_game_state(seed=seed)
    s.weather = "cloudy"  # neutral arrival factor
    return s


def test_timed_out_customer_leaves_and_costs_reputation() -> None:
    s = _make_min_state()
    s.customers["C1"] = Customer(customer_id="C1", customer_type="critic", patience=0.0, status="seated", seat_id="seat-1")
    update_patience(s, EngineConfig(), 5)
    c = s.customers["C1"]
    _assert(c.status == "leaving", f"expected leaving, got {c.status}")
    _assert(c.satisfaction == 0.0, "timed-out guests are unhappy")
    _assert(s.reputation == 50.0 - TIMEOUT_REPUTATION_PENALTY["critic"], f"reputation {s.reputation}")
    _assert(s.runtime.dwell_ticks["C1"] == 1, "leaves after one more tick")


def test_timeout_releases_serving_maid() -> None:
    s = _make_min_state()
    s.maids["M1"] = Maid(maid_id="M1")
    s.maids["M1"].status.is_working = True
    s.maids["M1"].status.serving_customer_id = "C1"
    s.customers["C1"] = Customer(customer_id="C1", patience=1.0, status="waiting_order", seat_id="seat-1", serving_maid_id="M1")
    update_patience(s, EngineConfig(), 5)
    _assert(s.customers["C1"].status == "leaving", "guest gave up")
    _assert(s.maids["M1"].status.serving_customer_id is None, "maid freed")


def test_patience_decay_by_status_and_type() -> None:
    c = Customer(customer_id="C", customer_type="critic", status="waiting_order")
    _assert(abs(patience_decay(c, 5) - 6.0) < 1e-9, "0.8 * 1.5 * 5")
    c.status = "eating"
    _assert(patience_decay(c, 5) == 0.0, "no decay while eating")
    g = Customer(customer_id="G", customer_type="group", status="waiting_seat")
    _assert(abs(patience_decay(g, 5) - 8.0) < 1e-9, "2.0 * 0.8 * 5")


def test_dwell_walks_eating_paying_leaving() -> None:
    cfg = EngineConfig()
    s = _make_min_state()
    s.customers["C1"] = Customer(customer_id="C1", status="eating", seat_id="seat-1")
    s.runtime.dwell_ticks["C1"] = cfg.eating_ticks
    seen = []
    for _ in range(5):
        process_dwell(s, cfg, ["C1"])
        seen.append(s.customers["C1"].status if "C1" in s.customers else "gone")
    _assert(seen == ["eating", "paying", "leaving", "gone", "gone"], f"unexpected path {seen}")
    _assert("C1" not in s.runtime.dwell_ticks, "timer cleaned up")


def test_spawn_accumulates_real_time() -> None:
    cfg = EngineConfig()
    s = _make_min_state()
    rng = random.Random(1)
    interval = spawn_interval_ms(s.reputation, s.facility.cafe_level, cfg)
    _assert(interval == 22500.0, f"30000 * 0.75, got {interval}")
    _assert(spawn_customers(s, cfg, rng, 20000.0) == 0, "not enough time yet")
    _assert(spawn_customers(s, cfg, rng, 3000.0) == 1, "one arrival once the interval is reached")
    _assert(abs(s.runtime.spawn_accumulator_ms - 500.0) < 1e-9, "remainder carried over")


def test_spawn_is_capped_per_tick_and_by_seats() -> None:
    cfg = EngineConfig()
    s = _make_min_state()
    rng = random.Random(2)
    _assert(spawn_customers(s, cfg, rng, 1e7) == cfg.max_spawns_per_tick, "per-tick cap")
    _assert(spawn_customers(s, cfg, rng, 0.0) == 1, "one seat left")
    _assert(spawn_customers(s, cfg, rng, 1e7) == 0, "cafe full")
    seats = sorted(c.seat_id for c in s.customers.values())
    _assert(seats == ["seat-1", "seat-2", "seat-3", "seat-4"], f"seats {seats}")


def test_spawn_interval_floor() -> None:
    _assert(abs(spawn_interval_ms(100.0, 10, EngineConfig()) - 10500.0) < 1e-6, "30000 * 0.5 * 0.7")
    cfg = EngineConfig(base_spawn_interval_ms=20000.0)
    _assert(spawn_interval_ms(100.0, 10, cfg) == cfg.min_spawn_interval_ms, "never faster than the floor")


def test_admit_customer_moves_to_free_seat() -> None:
    s = _make_min_state()
    _assert(admit_customer(s, Customer(customer_id="A", seat_id="seat-2")), "first guest")
    _assert(admit_customer(s, Customer(customer_id="B", seat_id="seat-2")), "second guest")
    _assert(s.customers["B"].seat_id == "seat-1", "taken seat falls back to the lowest free one")
    _assert(not admit_customer(s, Customer(customer_id="A")), "duplicate id")
    s.facility.max_seats = 2
    _assert(free_seats(s) == [], "no seats left")
    _assert(not admit_customer(s, Customer(customer_id="C")), "full cafe")


def test_generate_order_respects_unlocks_and_season() -> None:
    s = _make_min_state()
    s.season = "winter"
    s.menu_items["hot_cocoa"].unlocked = True
    s.menu_items["sakura_mochi"].unlocked = True
    rng = random.Random(3)
    for _ in range(200):
        order = generate_order(s, "group", rng)
        ids = [oi.menu_item_id for oi in order.items]
        _assert(len(ids) == len(set(ids)), "no duplicate lines")
        _assert("sakura_mochi" not in ids, "spring item sold in winter")
        _assert(all(s.menu_items[i].unlocked for i in ids), "locked item ordered")
        total = round(sum(oi.price * oi.quantity for oi in order.items), 2)
        _assert(order.total_price == total, "total is the sum of the lines")


def test_generate_order_with_empty_menu() -> None:
    s = _make_min_state()
    for it in s.menu_items.values():
        it.unlocked = False
    order = generate_order(s, "regular", random.Random(0))
    _assert(order.items == [] and order.total_price == 0.0, "nothing to order")


def test_generated_customers_are_valid() -> None:
    s = _make_min_state()
    rng = random.Random(4)
    for i in range(50):
        c = generate_customer(s, rng, f"C{i}", "seat-1")
        _assert(c.customer_type in CUSTOMER_TYPES, "known type")
        lo, hi = PATIENCE_RANGES[c.customer_type]
        _assert(lo <= c.patience <= min(hi, 100), f"patience {c.patience} for {c.customer_type}")
        _assert(c.status == "seated" and c.arrival_time == 540, "arrives seated at 09:00")


def test_pick_customer_type_is_seeded() -> None:
    a = [pick_customer_type(70.0, random.Random(9)) for _ in range(3)]
    b = [pick_customer_type(70.0, random.Random(9)) for _ in range(3)]
    _assert(a == b, "same seed, same guests")


def test_remove_customer() -> None:
    s = _make_min_state()
    s.customers["C1"] = Customer(customer_id="C1", seat_id="seat-1")
    s.runtime.dwell_ticks["C1"] = 2
    _assert(remove_customer(s, "C1") is not None, "removed")
    _assert("C1" not in s.customers and "C1" not in s.runtime.dwell_ticks, "cleaned up")
    _assert(remove_customer(s, "C1") is None, "already gone")


def test_admitted_guest_without_maid_can_be_served() -> None:
    s = _make_min_state()
    s.maids["M1"] = Maid(maid_id="M1", name="M1")
    guest = Customer(customer_id="G", status="waiting_order", serving_maid_id="M9", service_progress=40.0)
    _assert(admit_customer(s, guest), "admitted")
    _assert(s.customers["G"].status == "seated", f"reset to seated, got {s.customers['G'].status}")
    _assert(assign_maids(s, EngineConfig()) == 1, "a free maid picks the guest up")
    _assert(s.customers["G"].serving_maid_id == "M1", "paired with the real maid")

    eating = Customer(customer_id="E", status="eating")
    _assert(admit_customer(s, eating) and s.customers["E"].status == "eating", "dwell status kept")
