from __future__ import annotations

import math

import pytest

from maidcafe.actions import (
    AddExpense,
    AddMaidExperience,
    AddRevenue,
    AssignRole,
    BuyDecoration,
    ClaimTaskReward,
    ClearNotifications,
    CloseDailySummary,
    CompleteService,
    DeductGold,
    DismissNotification,
    EndDay,
    EndEvent,
    FireMaid,
    HireMaid,
    LoadGame,
    ResetGame,
    SetGameSpeed,
    SetItemPrice,
    SpawnCustomer,
    StartNewDay,
    StartService,
    Tick,
    ToggleMaidRest,
    TogglePause,
    UnlockMenuItem,
    UpgradeCafe,
    action_from_dict,
)
from maidcafe.config import EngineConfig
from maidcafe.engine import hire_random_maid, reduce, simulate_day
from maidcafe.models import Customer, GameState, Maid, MaidStats
from maidcafe.presets import new_game_state
from maidcafe.staff import max_maids
from maidcafe.storage import state_to_dict


def _make_min_state(seed: int = 20260101, maids: int = 1) -> GameState:
    s = new_game_state(seed=seed)
    for i in range(maids):
        m = Maid(
            maid_id=f"M{i + 1}",
            name=f"Maid {i + 1}",
            stats=MaidStats(charm=50.0, skill=50.0, stamina=50.0, speed=50.0),
        )
        s.maids[m.maid_id] = m
    return s


def _assert(cond: bool, msg: str) -> None:
    if not cond:
        raise AssertionError(msg)


def _check_consistency(s: GameState, cfg: EngineConfig) -> None:
    _assert(s.finance.gold >= 0, f"gold went negative: {s.finance.gold}")
    _assert(1 <= s.facility.cafe_level <= cfg.max_cafe_level, "cafe level out of range")
    _assert(len(s.maids) <= max_maids(s.facility.cafe_level, cfg), "too many maids")
    for m in s.maids.values():
        _assert(0 <= m.stamina <= 100 and 0 <= m.mood <= 100, f"maid vitals out of range: {m}")
        cid = m.status.serving_customer_id
        if cid is not None:
            c = s.customers.get(cid)
            _assert(c is not None and c.serving_maid_id == m.maid_id, f"dangling maid link {m.maid_id}->{cid}")
    seats = []
    for c in s.customers.values():
        _assert(0 <= c.patience <= 100 and 0 <= c.satisfaction <= 100, f"customer meters out of range: {c}")
        if c.serving_maid_id is not None:
            m = s.maids.get(c.serving_maid_id)
            _assert(m is not None and m.status.serving_customer_id == c.customer_id, "dangling customer link")
        if c.status != "waiting_seat":
            seats.append(c.seat_id)
    _assert(len(seats) == len(set(seats)), f"seat shared: {seats}")
    for it in s.menu_items.values():
        _assert(
            it.base_price * cfg.min_price_ratio - 1e-9 <= it.current_price <= it.base_price * cfg.max_price_ratio + 1e-9,
            f"price out of band for {it.item_id}",
        )


def _open_day(s: GameState) -> GameState:
    if not s.is_business_hours:
        s = reduce(s, StartNewDay())
    if s.is_paused:
        s = reduce(s, TogglePause())
    return s


def test_tick_while_paused_does_nothing() -> None:
    s = _make_min_state()
    _assert(s.is_paused, "new game starts paused")
    s2 = reduce(s, Tick(delta_time=1000.0))
    _assert(s2 is s, "paused tick should return the same snapshot")
    _assert(s2.time == 540, "time should not move while paused")


def test_tick_advances_five_minutes_without_touching_input() -> None:
    s = reduce(_make_min_state(), TogglePause())
    s2 = reduce(s, Tick(delta_time=2000.0))
    _assert(s2 is not s, "tick should produce a new snapshot")
    _assert(s2.time == 545, f"expected 545, got {s2.time}")
    _assert(s.time == 540, "input snapshot must not be mutated")


def test_bad_tick_delta_is_ignored() -> None:
    s = reduce(_make_min_state(), TogglePause())
    for dt in (-1.0, math.nan, math.inf):
        _assert(reduce(s, Tick(delta_time=dt)) is s, f"delta {dt} should be rejected")


def test_toggle_pause_twice_round_trips() -> None:
    s = _make_min_state()
    s2 = reduce(reduce(s, TogglePause()), TogglePause())
    _assert(s2 is not s, "toggle always produces a new snapshot")
    _assert(s2.is_paused == s.is_paused, "double toggle should restore the flag")


def test_set_game_speed() -> None:
    s = _make_min_state()
    _assert(reduce(s, SetGameSpeed(speed=2.0)).game_speed == 2.0, "expected speed 2")
    _assert(reduce(s, SetGameSpeed(speed=3.0)) is s, "3x is not an allowed speed")
    _assert(reduce(s, SetGameSpeed(speed=1.0)) is s, "same speed is a no-op")


def test_deduct_gold_clamps_at_zero() -> None:
    s = _make_min_state()
    s2 = reduce(s, DeductGold(amount=1500.0))
    _assert(s2.finance.gold == 0.0, f"expected 0, got {s2.finance.gold}")
    _assert(s.finance.gold == 1000.0, "input snapshot must keep its gold")


def test_non_positive_or_non_finite_amounts_are_rejected() -> None:
    s = _make_min_state()
    for a in (AddRevenue(amount=-5.0), AddRevenue(amount=math.nan), AddExpense(amount=0.0), DeductGold(amount=math.inf)):
        _assert(reduce(s, a) is s, f"{a} should be a no-op")


def test_upgrade_cafe_adds_seats_and_charges() -> None:
    s = _make_min_state()
    s.finance.gold = 10000.0
    cfg = EngineConfig()
    s2 = reduce(s, UpgradeCafe(), cfg=cfg)
    _assert(s2.facility.cafe_level == 2, "expected level 2")
    _assert(s2.facility.max_seats == cfg.base_seats + cfg.seats_per_level, f"seats {s2.facility.max_seats}")
    _assert(s2.finance.gold == 9500.0, f"expected 9500, got {s2.finance.gold}")
    _assert(s2.finance.daily_expenses == 500.0, "purchase should count as a daily expense")


def test_upgrade_cafe_unaffordable_is_noop() -> None:
    s = _make_min_state()
    s.finance.gold = 100.0
    _assert(reduce(s, UpgradeCafe()) is s, "cannot afford level 2")


def test_invalid_actions_return_same_object() -> None:
    s = _make_min_state()
    actions = [
        FireMaid(maid_id="nobody"),
        AssignRole(maid_id="M1", role="chef"),
        AssignRole(maid_id="M1", role="server"),
        SetItemPrice(item_id="latte_art", price=30.0),
        UnlockMenuItem(item_id="coffee"),
        BuyDecoration(decoration_id="throne"),
        ClaimTaskReward(task_id="daily_serve_5"),
        EndEvent(event_id="lucky-day"),
        DismissNotification(notification_id="N0001_000001"),
        ClearNotifications(),
        CloseDailySummary(),
        StartNewDay(),
        StartService(maid_id="M1", customer_id="ghost"),
        CompleteService(maid_id="M1", customer_id="ghost"),
        AddMaidExperience(maid_id="M1", experience=0),
    ]
    for a in actions:
        _assert(reduce(s, a) is s, f"{type(a).__name__} should be a no-op here")


def test_reduce_rejects_non_actions() -> None:
    with pytest.raises(TypeError):
        reduce(_make_min_state(), "TICK")  # type: ignore[arg-type]


def test_set_item_price_is_clamped_to_band() -> None:
    s = _make_min_state()
    hi = reduce(s, SetItemPrice(item_id="coffee", price=100.0))
    lo = reduce(s, SetItemPrice(item_id="coffee", price=1.0))
    _assert(hi.menu_items["coffee"].current_price == 36.0, "upper bound is 2x base")
    _assert(lo.menu_items["coffee"].current_price == 9.0, "lower bound is 0.5x base")


def test_unlock_menu_item_pays_and_tracks_task() -> None:
    s = reduce(_make_min_state(), UnlockMenuItem(item_id="latte_art"))
    _assert(s.menu_items["latte_art"].unlocked, "latte art should be unlocked")
    _assert(s.finance.gold == 850.0, f"expected 850, got {s.finance.gold}")
    _assert(s.tasks["growth_unlock_5"].progress == 1.0, "unlock task should progress")


def test_hire_maid_and_cap() -> None:
    s = _make_min_state(maids=0)
    recruit = Maid(maid_id="R1", name="Rin", mood=150.0)
    recruit.status.is_working = True
    s2 = reduce(s, HireMaid(maid=recruit))
    _assert("R1" in s2.maids, "recruit should join")
    _assert(s2.maids["R1"].mood == 100.0, "mood is clamped on hire")
    _assert(not s2.maids["R1"].status.is_working, "status is reset on hire")
    _assert(s2.statistics.maids_hired == 1, "hire counter")
    _assert(s2.tasks["growth_hire_3"].progress == 1.0, "hire task progress")
    _assert(reduce(s2, HireMaid(maid=Maid(maid_id="R1"))) is s2, "duplicate id is rejected")

    full = _make_min_state(maids=2)
    _assert(reduce(full, HireMaid(maid=Maid(maid_id="R9"))) is full, "level 1 cafe holds 2 maids")


def test_hire_random_maid_charges_fee() -> None:
    s = hire_random_maid(_make_min_state(maids=0))
    _assert(len(s.maids) == 1, "one recruit")
    _assert(s.finance.gold == 920.0, f"expected 920, got {s.finance.gold}")
    _assert(s.finance.daily_expenses == 80.0, "fee recorded as expense")
    again = hire_random_maid(_make_min_state(maids=0))
    _assert(state_to_dict(again) == state_to_dict(s), "recruiting is deterministic")
    full = _make_min_state(maids=2)
    _assert(hire_random_maid(full) is full, "no hire when full")


def test_manual_service_flow() -> None:
    s = _make_min_state()
    s = reduce(s, SpawnCustomer(customer=Customer(customer_id="C1", name="Guest", patience=80.0)))
    _assert(s.customers["C1"].seat_id == "seat-1", "guest takes the first seat")

    s = reduce(s, StartService(maid_id="M1", customer_id="C1"))
    _assert(s.customers["C1"].status == "waiting_order", "service started")
    _assert(s.maids["M1"].status.serving_customer_id == "C1", "maid linked to guest")
    _assert(reduce(s, StartService(maid_id="M1", customer_id="C1")) is s, "already in service")

    s = reduce(s, CompleteService(maid_id="M1", customer_id="C1"))
    c = s.customers["C1"]
    _assert(c.status == "eating", f"expected eating, got {c.status}")
    _assert(c.satisfaction == 75.0, f"expected satisfaction 75, got {c.satisfaction}")
    _assert(s.maids["M1"].status.serving_customer_id is None, "maid released")
    _assert(s.maids["M1"].experience == 20, f"expected 20 xp, got {s.maids['M1'].experience}")
    _assert(s.statistics.total_customers_served == 1, "served counter")
    _assert(s.achievements["first_customer"].unlocked, "first customer achievement")
    # 16 tip + 50 achievement reward; the order itself is empty.
    _assert(s.finance.gold == 1066.0, f"expected 1066, got {s.finance.gold}")


def test_fire_and_rest_release_the_guest() -> None:
    s = _make_min_state()
    s = reduce(s, SpawnCustomer(customer=Customer(customer_id="C1", patience=80.0)))
    s = reduce(s, StartService(maid_id="M1", customer_id="C1"))

    fired = reduce(s, FireMaid(maid_id="M1"))
    _assert("M1" not in fired.maids, "maid removed")
    _assert(fired.customers["C1"].status == "seated", "guest goes back to seated")
    _assert(fired.customers["C1"].serving_maid_id is None, "guest unlinked")

    rested = reduce(s, ToggleMaidRest(maid_id="M1"))
    _assert(rested.maids["M1"].status.is_resting, "maid resting")
    _assert(rested.customers["C1"].serving_maid_id is None, "guest unlinked on rest")
    back = reduce(rested, ToggleMaidRest(maid_id="M1"))
    _assert(not back.maids["M1"].status.is_resting, "toggle back to work")


def test_add_maid_experience_levels_up() -> None:
    s = reduce(_make_min_state(), AddMaidExperience(maid_id="M1", experience=250))
    m = s.maids["M1"]
    _assert(m.level == 2 and m.experience == 150, f"expected Lv2 150xp, got Lv{m.level} {m.experience}xp")
    _assert(m.stats.charm == 52.0, "stats grow on level up")


def test_end_day_then_start_new_day() -> None:
    s = _open_day(_make_min_state())
    closed = reduce(s, EndDay())
    _assert(not closed.is_business_hours and closed.is_paused, "closed and paused")
    _assert(closed.daily_summary_open, "summary shown")
    _assert(len(closed.finance.history) == 1 and closed.finance.history[0].day == 1, "one ledger row")
    _assert(reduce(closed, EndDay()) is closed, "cannot close twice")
    _assert(reduce(closed, Tick(delta_time=2000.0)) is closed, "no ticks after close")

    nxt = reduce(closed, StartNewDay())
    _assert(nxt.day == 2 and nxt.time == 540 and nxt.is_business_hours, "day 2 opens at 09:00")
    _assert(not nxt.daily_summary_open, "summary closed")
    _assert(nxt.customers == {}, "customers cleared overnight")
    _assert(nxt.statistics.total_days_played == 1, "day counter")
    _assert(reduce(nxt, StartNewDay()) is nxt, "already open")


def test_season_rolls_over_every_thirty_days() -> None:
    s = _make_min_state()
    s.day = 30
    s = reduce(reduce(s, EndDay()), StartNewDay())
    _assert(s.day == 31 and s.season == "summer", f"expected summer on day 31, got {s.season}")


def test_simulated_day_closes_at_2100_and_serves_guests() -> None:
    s = simulate_day(_make_min_state(maids=2))
    _assert(not s.is_business_hours and s.time == 1260, "day should end at 21:00")
    _assert(s.statistics.total_customers_served > 0, "some guests should be served")
    _assert(len(s.finance.history) == 1, "one settlement")


def test_same_seed_same_run() -> None:
    a = simulate_day(_make_min_state(seed=42, maids=2))
    b = simulate_day(_make_min_state(seed=42, maids=2))
    _assert(state_to_dict(a) == state_to_dict(b), "same seed must replay identically")


def test_state_stays_consistent_over_several_days() -> None:
    cfg = EngineConfig()
    s = _make_min_state(seed=99, maids=2)
    for _ in range(3):
        s = _open_day(s)
        while s.is_business_hours:
            s = reduce(s, Tick(delta_time=2000.0), cfg=cfg)
            _check_consistency(s, cfg)
    _assert(s.day == 3, f"expected day 3, got {s.day}")


def test_load_game_resets_runtime() -> None:
    saved = _make_min_state()
    saved.runtime.customer_streak = 5
    saved.daily_summary_open = True
    s = reduce(_make_min_state(seed=1), LoadGame(state=saved))
    _assert(s is not saved, "loaded state is a copy")
    _assert(s.runtime.customer_streak == 0, "runtime scratch reset")
    _assert(not s.daily_summary_open, "summary closed on load")
    _assert(s.rng_seed == saved.rng_seed, "seed comes from the save")


def test_reset_game_keeps_seed() -> None:
    s = _make_min_state(seed=7)
    s = reduce(s, UnlockMenuItem(item_id="latte_art"))
    fresh = reduce(s, ResetGame())
    _assert(fresh.finance.gold == 1000.0 and not fresh.maids, "fresh game")
    _assert(not fresh.menu_items["latte_art"].unlocked, "unlocks reset")
    _assert(fresh.rng_seed == 7, "seed kept")


def test_action_from_dict() -> None:
    a = action_from_dict({"type": "set_item_price", "item_id": "coffee", "price": 20})
    _assert(isinstance(a, SetItemPrice) and a.price == 20, f"unexpected {a}")
    h = action_from_dict({"type": "HIRE_MAID", "maid": {"maid_id": "X1", "stats": {"charm": 60}}})
    _assert(isinstance(h, HireMaid) and h.maid.stats.charm == 60.0, "nested maid parsed")
    with pytest.raises(ValueError):
        action_from_dict({"type": "MAKE_COFFEE"})
    with pytest.raises(ValueError):
        action_from_dict({"type": "FIRE_MAID"})
    with pytest.raises(ValueError):
        action_from_dict({"type": "HIRE_MAID", "maid": "X1"})
