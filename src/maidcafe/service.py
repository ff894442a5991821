from __future__ import annotations

import math
from dataclasses import dataclass

from maidcafe.common import _clamp, notify, now_abs, release_pair
from maidcafe.config import EngineConfig
from maidcafe.events import combine_event_multipliers
from maidcafe.facility import decoration_bonus, equipment_efficiency
from maidcafe.finance import credit_revenue
from maidcafe.models import Customer, GameState, Maid
from maidcafe.progress import apply_task_event
from maidcafe.staff import add_experience, experience_for_service, role_bonus


PERFECT_SERVICE_SATISFACTION = 90.0


@dataclass
class ServiceOutcome:
    satisfaction: float
    gold: float
    tip: float
    reputation: float
    experience: int


def service_progress_delta(maid: Maid, minutes: float) -> float:
    stamina_multiplier = 0.7 if float(maid.stamina) < 50 else 1.0
    return float(maid.stats.speed) * 0.5 * float(minutes) * stamina_multiplier


def calculate_satisfaction(customer: Customer, maid: Maid, wait_minutes: float) -> float:
    charm_bonus = float(maid.stats.charm) / 100.0 * 25.0
    skill_bonus = float(maid.stats.skill) / 100.0 * 25.0
    wait_penalty = min(math.floor(max(0.0, float(wait_minutes)) / 5.0), 30)
    sat = 50.0 + charm_bonus + skill_bonus - wait_penalty

    ctype = customer.customer_type
    if ctype == "vip":
        sat = sat * 1.2 - 10.0
    elif ctype == "critic":
        sat = sat * 0.9
    elif ctype == "group":
        sat = sat * 1.1

    if maid.stamina < 50:
        sat -= (50.0 - float(maid.stamina)) / 50.0 * 10.0
    if maid.mood < 50:
        sat -= (50.0 - float(maid.mood)) / 50.0 * 10.0
    return _clamp(round(sat))


def calculate_tip(satisfaction: float, maid: Maid) -> float:
    if satisfaction < 50:
        return 0.0
    return float(round((satisfaction - 50.0) * 0.5 * (1.0 + float(maid.stats.charm) / 100.0 * 0.5)))


def reputation_delta(satisfaction: float, customer_type: str) -> float:
    if satisfaction >= 80:
        return {"critic": 5.0, "vip": 3.0}.get(customer_type, 1.0)
    if satisfaction >= 60:
        return 2.0 if customer_type == "critic" else 0.0
    if satisfaction < 40:
        return {"critic": -5.0, "vip": -3.0}.get(customer_type, -1.0)
    return 0.0


def calculate_gold(customer: Customer, satisfaction: float) -> float:
    total = float(customer.order.total_price)
    if customer.customer_type == "vip" and satisfaction >= 70:
        return float(round(total * 1.2))
    return total


def resolve_service(state: GameState, customer: Customer, maid: Maid) -> ServiceOutcome:
    """Satisfaction and rewards for a finished service, with decoration and event modifiers folded in."""

    start = customer.service_start_time if customer.service_start_time is not None else now_abs(state)
    wait = max(0, now_abs(state) - int(start))
    mults = combine_event_multipliers(state)

    sat = calculate_satisfaction(customer, maid, wait)
    sat = _clamp(round((sat + decoration_bonus(state)) * mults["satisfaction"]))
    gold = round(calculate_gold(customer, sat) * mults["revenue"], 2)
    rep = reputation_delta(sat, customer.customer_type)
    # Events amplify gains only; losses stay as they are.
    if rep > 0:
        rep = round(rep * mults["reputation"], 2)
    return ServiceOutcome(
        satisfaction=sat,
        gold=gold,
        tip=calculate_tip(sat, maid),
        reputation=rep,
        experience=experience_for_service(sat),
    )


def complete_service(state: GameState, cfg: EngineConfig, maid: Maid, customer: Customer) -> ServiceOutcome:
    out = resolve_service(state, customer, maid)

    earned = out.gold + out.tip
    credit_revenue(state, earned)
    state.reputation = _clamp(state.reputation + out.reputation)

    stats = state.statistics
    stats.total_customers_served += 1
    stats.total_tips_earned += out.tip
    if out.satisfaction >= PERFECT_SERVICE_SATISFACTION:
        stats.perfect_services_count += 1
    state.runtime.customer_streak += 1
    state.runtime.customers_served_today += 1

    if add_experience(maid, out.experience, cfg) > 0:
        notify(state, cfg, "success", "女仆升级", f"{maid.name} 升到了 {maid.level} 级")

    customer.satisfaction = out.satisfaction
    customer.status = "eating"
    customer.order.prepared_item_ids = [oi.menu_item_id for oi in customer.order.items]
    release_pair(state, maid_id=maid.maid_id)
    state.runtime.dwell_ticks[customer.customer_id] = cfg.eating_ticks

    apply_task_event(state, cfg, "serve_customers", 1)
    apply_task_event(state, cfg, "earn_gold", earned)
    if out.tip > 0:
        apply_task_event(state, cfg, "earn_tips", out.tip)
    if customer.customer_type == "vip":
        apply_task_event(state, cfg, "serve_vip", 1)
    apply_task_event(state, cfg, "maintain_satisfaction", out.satisfaction)
    apply_task_event(state, cfg, "total_revenue", stats.total_revenue)
    apply_task_event(state, cfg, "total_customers", stats.total_customers_served)
    return out


def advance_services(state: GameState, cfg: EngineConfig, minutes: float) -> int:
    """Accrue progress for every served customer; finish the ones that reach 100."""

    equip = 1.0 + equipment_efficiency(state, cfg) / 100.0
    finished = 0
    for customer in list(state.customers.values()):
        if customer.status != "waiting_order" or not customer.serving_maid_id:
            continue
        maid = state.maids.get(customer.serving_maid_id)
        if maid is None or maid.status.serving_customer_id != customer.customer_id:
            release_pair(state, customer_id=customer.customer_id)
            continue
        delta = service_progress_delta(maid, minutes) * (1.0 + role_bonus(maid.role, customer.customer_type)) * equip
        customer.service_progress = min(100.0, float(customer.service_progress or 0.0) + delta)
        if customer.service_progress >= 100.0:
            complete_service(state, cfg, maid, customer)
            finished += 1
    return finished
