from __future__ import annotations

import copy
import random
from typing import Any, Callable, Dict, Optional, get_args

from maidcafe.actions import (
    Action,
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
    RemoveCustomer,
    ResetGame,
    SetGameSpeed,
    SetItemPrice,
    SpawnCustomer,
    StartNewDay,
    StartService,
    Tick,
    ToggleMaidRest,
    TogglePause,
    TriggerEvent,
    UnlockAchievement,
    UnlockArea,
    UnlockMenuItem,
    UpgradeCafe,
    UpgradeEquipment,
)
from maidcafe.assignment import assign_maids, is_customer_waiting, is_maid_available, start_service
from maidcafe.common import _clamp, _num, _stable_u32, notify, persist_rng_state, release_pair, rng_from_state
from maidcafe.config import DEFAULT_CONFIG, EngineConfig
from maidcafe.customers import (
    DWELL_STATUSES,
    admit_customer,
    process_dwell,
    remove_customer,
    spawn_customers,
    update_patience,
)
from maidcafe.events import apply_event, end_event, expire_events, roll_daily_event, roll_weather
from maidcafe.facility import buy_decoration, unlock_area, upgrade_cafe, upgrade_equipment
from maidcafe.finance import add_expense, credit_revenue, deduct_gold, settle_day, spend
from maidcafe.models import CUSTOMER_STATUSES, CUSTOMER_TYPES, MAID_ROLES, SEASONS, GameState, MaidStatus, RuntimeScratch
from maidcafe.presets import new_game_state
from maidcafe.progress import (
    apply_task_event,
    claim_task_reward,
    evaluate_achievements,
    refresh_daily_tasks,
    unlock_achievement,
)
from maidcafe.service import advance_services, complete_service
from maidcafe.staff import add_experience, generate_maid, hire_cost, max_maids, reset_for_new_day, update_staff


Handler = Callable[[GameState, Any, EngineConfig, random.Random], GameState]


def _evolve(state: GameState) -> GameState:
    return copy.deepcopy(state)


# ---------------------------------------------------------------------------
# Tick


def close_day(state: GameState, cfg: EngineConfig) -> None:
    state.time = min(max(state.time, cfg.business_start), cfg.business_end)
    state.is_business_hours = False
    record = settle_day(state, cfg)
    state.is_paused = True
    state.daily_summary_open = True
    notify(state, cfg, "info", "今日营业结束", f"第 {record.day} 天 收入 {record.revenue:,.2f} 利润 {record.profit:,.2f}")


def simulate_tick(state: GameState, cfg: EngineConfig, rng: random.Random, delta_ms: float) -> None:
    """Run one tick against a working copy, phase by phase.

    Each phase sees what the previous ones did in this same tick.
    """

    minutes = cfg.minutes_per_tick
    expire_events(state)
    dwelling = [cid for cid, c in state.customers.items() if c.status in DWELL_STATUSES]

    update_staff(state, cfg, minutes)
    update_patience(state, cfg, minutes)
    process_dwell(state, cfg, dwelling)
    advance_services(state, cfg, minutes)
    assign_maids(state, cfg)
    spawn_customers(state, cfg, rng, delta_ms)
    evaluate_achievements(state, cfg)

    state.time = min(state.time + minutes, cfg.business_end)
    if state.time >= cfg.business_end:
        close_day(state, cfg)


def _tick(state: GameState, action: Tick, cfg: EngineConfig, rng: random.Random) -> GameState:
    dt = _num(action.delta_time)
    if dt is None or dt < 0:
        return state
    if state.is_paused or not state.is_business_hours:
        return state
    s = _evolve(state)
    simulate_tick(s, cfg, rng, dt)
    return s


# ---------------------------------------------------------------------------
# Clock & day cycle


def _toggle_pause(state: GameState, action: TogglePause, cfg: EngineConfig, rng: random.Random) -> GameState:
    s = _evolve(state)
    s.is_paused = not s.is_paused
    return s


def _set_game_speed(state: GameState, action: SetGameSpeed, cfg: EngineConfig, rng: random.Random) -> GameState:
    speed = _num(action.speed)
    if speed is None or speed not in cfg.game_speeds or speed == state.game_speed:
        return state
    s = _evolve(state)
    s.game_speed = speed
    return s


def _end_day(state: GameState, action: EndDay, cfg: EngineConfig, rng: random.Random) -> GameState:
    if not state.is_business_hours:
        return state
    s = _evolve(state)
    close_day(s, cfg)
    return s


def _start_new_day(state: GameState, action: StartNewDay, cfg: EngineConfig, rng: random.Random) -> GameState:
    if state.is_business_hours:
        return state
    s = _evolve(state)
    s.day += 1
    if s.day % cfg.days_per_season == 1 and s.day > 1:
        idx = SEASONS.index(s.season) if s.season in SEASONS else 0
        s.season = SEASONS[(idx + 1) % len(SEASONS)]
        notify(s, cfg, "info", "换季", f"进入新的季节：{s.season}")
    s.time = cfg.business_start
    s.is_business_hours = True
    s.is_paused = True
    s.daily_summary_open = False

    s.finance.daily_revenue = 0.0
    s.finance.daily_expenses = 0.0
    s.customers = {}
    s.runtime = RuntimeScratch()
    for maid in s.maids.values():
        reset_for_new_day(maid)
    refresh_daily_tasks(s)
    s.statistics.total_days_played += 1

    s.active_events = []
    s.weather = roll_weather(s, rng)
    ev = roll_daily_event(s, cfg, rng)
    if ev is not None:
        apply_event(s, cfg, ev, s.time)
    evaluate_achievements(s, cfg)
    notify(s, cfg, "info", "新的一天", f"第 {s.day} 天开始营业")
    return s


# ---------------------------------------------------------------------------
# Staff


def _hire_maid(state: GameState, action: HireMaid, cfg: EngineConfig, rng: random.Random) -> GameState:
    maid = action.maid
    if not maid.maid_id or maid.maid_id in state.maids:
        return state
    if len(state.maids) >= max_maids(state.facility.cafe_level, cfg):
        return state
    s = _evolve(state)
    m = copy.deepcopy(maid)
    m.status = MaidStatus()
    m.mood = _clamp(m.mood)
    m.stamina = _clamp(m.stamina)
    for attr in ("charm", "skill", "stamina", "speed"):
        setattr(m.stats, attr, _clamp(getattr(m.stats, attr), 1.0, 100.0))
    if m.role not in MAID_ROLES:
        m.role = "server"
    m.hired_day = s.day
    s.maids[m.maid_id] = m
    s.statistics.maids_hired += 1
    apply_task_event(s, cfg, "hire_maids", 1)
    notify(s, cfg, "success", "新女仆加入", f"{m.name} 加入了咖啡厅")
    evaluate_achievements(s, cfg)
    return s


def _fire_maid(state: GameState, action: FireMaid, cfg: EngineConfig, rng: random.Random) -> GameState:
    if action.maid_id not in state.maids:
        return state
    s = _evolve(state)
    release_pair(s, maid_id=action.maid_id)
    maid = s.maids.pop(action.maid_id)
    notify(s, cfg, "info", "女仆离职", f"{maid.name} 离开了咖啡厅")
    return s


def _assign_role(state: GameState, action: AssignRole, cfg: EngineConfig, rng: random.Random) -> GameState:
    maid = state.maids.get(action.maid_id)
    if maid is None or action.role not in MAID_ROLES or maid.role == action.role:
        return state
    s = _evolve(state)
    s.maids[action.maid_id].role = action.role
    return s


def _toggle_maid_rest(state: GameState, action: ToggleMaidRest, cfg: EngineConfig, rng: random.Random) -> GameState:
    if action.maid_id not in state.maids:
        return state
    s = _evolve(state)
    maid = s.maids[action.maid_id]
    if maid.status.is_resting:
        maid.status.is_resting = False
    else:
        release_pair(s, maid_id=maid.maid_id)
        maid.status.is_resting = True
    return s


def _add_maid_experience(state: GameState, action: AddMaidExperience, cfg: EngineConfig, rng: random.Random) -> GameState:
    amount = _num(action.experience)
    if action.maid_id not in state.maids or amount is None or amount <= 0:
        return state
    s = _evolve(state)
    maid = s.maids[action.maid_id]
    if add_experience(maid, int(amount), cfg) > 0:
        notify(s, cfg, "success", "女仆升级", f"{maid.name} 升到了 {maid.level} 级")
    return s


# ---------------------------------------------------------------------------
# Customers & service


def _spawn_customer(state: GameState, action: SpawnCustomer, cfg: EngineConfig, rng: random.Random) -> GameState:
    c = action.customer
    if c.customer_type not in CUSTOMER_TYPES or c.status not in CUSTOMER_STATUSES:
        return state
    s = _evolve(state)
    if not admit_customer(s, copy.deepcopy(c)):
        return state
    return s


def _start_service(state: GameState, action: StartService, cfg: EngineConfig, rng: random.Random) -> GameState:
    maid = state.maids.get(action.maid_id)
    customer = state.customers.get(action.customer_id)
    if maid is None or customer is None:
        return state
    if not is_maid_available(maid, cfg) or not is_customer_waiting(customer):
        return state
    s = _evolve(state)
    start_service(s, s.maids[action.maid_id], s.customers[action.customer_id])
    return s


def _complete_service(state: GameState, action: CompleteService, cfg: EngineConfig, rng: random.Random) -> GameState:
    maid = state.maids.get(action.maid_id)
    customer = state.customers.get(action.customer_id)
    if maid is None or customer is None or customer.status != "waiting_order":
        return state
    if customer.serving_maid_id != maid.maid_id or maid.status.serving_customer_id != customer.customer_id:
        return state
    s = _evolve(state)
    complete_service(s, cfg, s.maids[action.maid_id], s.customers[action.customer_id])
    evaluate_achievements(s, cfg)
    return s


def _remove_customer(state: GameState, action: RemoveCustomer, cfg: EngineConfig, rng: random.Random) -> GameState:
    if action.customer_id not in state.customers:
        return state
    s = _evolve(state)
    remove_customer(s, action.customer_id)
    return s


# ---------------------------------------------------------------------------
# Menu & facility


def _unlock_menu_item(state: GameState, action: UnlockMenuItem, cfg: EngineConfig, rng: random.Random) -> GameState:
    item = state.menu_items.get(action.item_id)
    if item is None or item.unlocked or state.finance.gold < item.unlock_cost:
        return state
    s = _evolve(state)
    it = s.menu_items[action.item_id]
    spend(s, it.unlock_cost)
    it.unlocked = True
    apply_task_event(s, cfg, "unlock_menu_items", 1)
    notify(s, cfg, "success", "解锁新菜品", f"{it.name} 已加入菜单")
    return s


def _set_item_price(state: GameState, action: SetItemPrice, cfg: EngineConfig, rng: random.Random) -> GameState:
    item = state.menu_items.get(action.item_id)
    price = _num(action.price)
    if item is None or not item.unlocked or price is None or price <= 0:
        return state
    price = round(max(item.base_price * cfg.min_price_ratio, min(item.base_price * cfg.max_price_ratio, price)), 2)
    if price == item.current_price:
        return state
    s = _evolve(state)
    s.menu_items[action.item_id].current_price = price
    return s


def _upgrade_cafe(state: GameState, action: UpgradeCafe, cfg: EngineConfig, rng: random.Random) -> GameState:
    s = _evolve(state)
    if not upgrade_cafe(s, cfg):
        return state
    apply_task_event(s, cfg, "upgrade_cafe", s.facility.cafe_level)
    notify(s, cfg, "success", "店铺升级", f"咖啡厅升级到 {s.facility.cafe_level} 级，座位 {s.facility.max_seats} 个")
    evaluate_achievements(s, cfg)
    return s


def _buy_decoration(state: GameState, action: BuyDecoration, cfg: EngineConfig, rng: random.Random) -> GameState:
    s = _evolve(state)
    if not buy_decoration(s, action.decoration_id):
        return state
    return s


def _upgrade_equipment(state: GameState, action: UpgradeEquipment, cfg: EngineConfig, rng: random.Random) -> GameState:
    s = _evolve(state)
    if not upgrade_equipment(s, cfg, action.equipment_id):
        return state
    return s


def _unlock_area(state: GameState, action: UnlockArea, cfg: EngineConfig, rng: random.Random) -> GameState:
    s = _evolve(state)
    if not unlock_area(s, cfg, action.area):
        return state
    return s


# ---------------------------------------------------------------------------
# Finance


def _add_revenue(state: GameState, action: AddRevenue, cfg: EngineConfig, rng: random.Random) -> GameState:
    amount = _num(action.amount)
    if amount is None or amount <= 0:
        return state
    s = _evolve(state)
    credit_revenue(s, amount)
    apply_task_event(s, cfg, "earn_gold", amount)
    apply_task_event(s, cfg, "total_revenue", s.statistics.total_revenue)
    return s


def _add_expense(state: GameState, action: AddExpense, cfg: EngineConfig, rng: random.Random) -> GameState:
    amount = _num(action.amount)
    if amount is None or amount <= 0:
        return state
    s = _evolve(state)
    add_expense(s, amount)
    return s


def _deduct_gold(state: GameState, action: DeductGold, cfg: EngineConfig, rng: random.Random) -> GameState:
    amount = _num(action.amount)
    if amount is None or amount <= 0:
        return state
    s = _evolve(state)
    deduct_gold(s, amount)
    return s


# ---------------------------------------------------------------------------
# Events, progress, notifications


def _trigger_event(state: GameState, action: TriggerEvent, cfg: EngineConfig, rng: random.Random) -> GameState:
    if not action.event.event_id or _num(action.event.duration) is None:
        return state
    s = _evolve(state)
    if not apply_event(s, cfg, action.event, s.time):
        return state
    return s


def _end_event(state: GameState, action: EndEvent, cfg: EngineConfig, rng: random.Random) -> GameState:
    s = _evolve(state)
    if not end_event(s, action.event_id):
        return state
    return s


def _unlock_achievement(state: GameState, action: UnlockAchievement, cfg: EngineConfig, rng: random.Random) -> GameState:
    s = _evolve(state)
    if not unlock_achievement(s, cfg, action.achievement_id):
        return state
    return s


def _claim_task_reward(state: GameState, action: ClaimTaskReward, cfg: EngineConfig, rng: random.Random) -> GameState:
    s = _evolve(state)
    if not claim_task_reward(s, cfg, action.task_id):
        return state
    return s


def _dismiss_notification(state: GameState, action: DismissNotification, cfg: EngineConfig, rng: random.Random) -> GameState:
    if not any(n.notification_id == action.notification_id for n in state.notifications):
        return state
    s = _evolve(state)
    s.notifications = [n for n in s.notifications if n.notification_id != action.notification_id]
    return s


def _clear_notifications(state: GameState, action: ClearNotifications, cfg: EngineConfig, rng: random.Random) -> GameState:
    if not state.notifications:
        return state
    s = _evolve(state)
    s.notifications = []
    return s


def _close_daily_summary(state: GameState, action: CloseDailySummary, cfg: EngineConfig, rng: random.Random) -> GameState:
    if not state.daily_summary_open:
        return state
    s = _evolve(state)
    s.daily_summary_open = False
    return s


# ---------------------------------------------------------------------------
# Whole-state replacement


def _load_game(state: GameState, action: LoadGame, cfg: EngineConfig, rng: random.Random) -> GameState:
    s = _evolve(action.state)
    s.runtime = RuntimeScratch()
    s.daily_summary_open = False
    return s


def _reset_game(state: GameState, action: ResetGame, cfg: EngineConfig, rng: random.Random) -> GameState:
    return new_game_state(seed=state.rng_seed)


_HANDLERS: Dict[type, Handler] = {
    Tick: _tick,
    TogglePause: _toggle_pause,
    SetGameSpeed: _set_game_speed,
    EndDay: _end_day,
    StartNewDay: _start_new_day,
    HireMaid: _hire_maid,
    FireMaid: _fire_maid,
    AssignRole: _assign_role,
    ToggleMaidRest: _toggle_maid_rest,
    AddMaidExperience: _add_maid_experience,
    SpawnCustomer: _spawn_customer,
    StartService: _start_service,
    CompleteService: _complete_service,
    RemoveCustomer: _remove_customer,
    UnlockMenuItem: _unlock_menu_item,
    SetItemPrice: _set_item_price,
    UpgradeCafe: _upgrade_cafe,
    BuyDecoration: _buy_decoration,
    UpgradeEquipment: _upgrade_equipment,
    UnlockArea: _unlock_area,
    AddRevenue: _add_revenue,
    AddExpense: _add_expense,
    DeductGold: _deduct_gold,
    TriggerEvent: _trigger_event,
    EndEvent: _end_event,
    UnlockAchievement: _unlock_achievement,
    ClaimTaskReward: _claim_task_reward,
    DismissNotification: _dismiss_notification,
    ClearNotifications: _clear_notifications,
    CloseDailySummary: _close_daily_summary,
    LoadGame: _load_game,
    ResetGame: _reset_game,
}

_unhandled = [cls.__name__ for cls in get_args(Action) if cls not in _HANDLERS]
if _unhandled:
    raise RuntimeError(f"actions without a handler: {', '.join(_unhandled)}")


def reduce(
    state: GameState,
    action: Action,
    rng: Optional[random.Random] = None,
    cfg: Optional[EngineConfig] = None,
) -> GameState:
    """Return the state that follows ``action``. ``state`` itself is never modified.

    Invalid actions return ``state`` unchanged (same object). Without an explicit ``rng`` the
    generator is restored from the snapshot and its advanced state is stored in the result.
    """

    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"not an action: {type(action).__name__}")
    cfg = cfg or DEFAULT_CONFIG

    if rng is not None:
        return handler(state, action, cfg, rng)

    own = rng_from_state(state)
    before = own.getstate()
    nxt = handler(state, action, cfg, own)
    if nxt is not state and own.getstate() != before:
        persist_rng_state(nxt, own)
    return nxt


def simulate_day(
    state: GameState,
    cfg: Optional[EngineConfig] = None,
    rng: Optional[random.Random] = None,
    delta_ms: float = 2000.0,
) -> GameState:
    """Unpause and tick until the cafe closes. Returns the closed-day state."""

    cfg = cfg or DEFAULT_CONFIG
    if not state.is_business_hours:
        return state
    if state.is_paused:
        state = reduce(state, TogglePause(), rng, cfg)
    max_ticks = (cfg.business_end - cfg.business_start) // cfg.minutes_per_tick + 1
    for _ in range(max_ticks):
        if not state.is_business_hours:
            break
        state = reduce(state, Tick(delta_time=delta_ms), rng, cfg)
    return state


def hire_random_maid(
    state: GameState,
    rng: Optional[random.Random] = None,
    cfg: Optional[EngineConfig] = None,
) -> GameState:
    """Recruit a random level-1 maid, paying the hiring fee. Unchanged state if unaffordable or full."""

    cfg = cfg or DEFAULT_CONFIG
    cost = hire_cost(1)
    if len(state.maids) >= max_maids(state.facility.cafe_level, cfg) or state.finance.gold < cost:
        return state
    gen = rng or random.Random(_stable_u32(f"hire:{state.rng_seed}:{state.day}:{state.serial}"))
    maid = generate_maid(gen, f"M{state.statistics.maids_hired + 1:04d}", state.day)
    nxt = reduce(state, HireMaid(maid=maid), rng, cfg)
    if nxt is state:
        return state
    nxt = reduce(nxt, DeductGold(amount=cost), rng, cfg)
    return reduce(nxt, AddExpense(amount=cost), rng, cfg)
