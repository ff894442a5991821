from __future__ import annotations

from typing import List, Tuple

from maidcafe.common import now_abs
from maidcafe.config import EngineConfig
from maidcafe.models import Customer, GameState, Maid
from maidcafe.staff import calculate_efficiency


def is_maid_available(maid: Maid, cfg: EngineConfig) -> bool:
    st = maid.status
    return (
        not st.is_resting
        and not st.is_working
        and st.serving_customer_id is None
        and float(maid.stamina) >= cfg.min_stamina_to_serve
    )


def is_customer_waiting(customer: Customer) -> bool:
    return customer.status == "seated" and customer.serving_maid_id is None


def start_service(state: GameState, maid: Maid, customer: Customer) -> None:
    maid.status.is_working = True
    maid.status.current_task = "serving"
    maid.status.serving_customer_id = customer.customer_id
    customer.status = "waiting_order"
    customer.serving_maid_id = maid.maid_id
    customer.service_progress = 0.0
    customer.service_start_time = now_abs(state)


def plan_assignments(state: GameState, cfg: EngineConfig) -> List[Tuple[Maid, Customer]]:
    """Greedy pairing: most efficient free maid gets the least patient waiting customer.

    Both sorts are stable so ties keep insertion order.
    """

    maids = [m for m in state.maids.values() if is_maid_available(m, cfg)]
    maids.sort(key=calculate_efficiency, reverse=True)
    customers = [c for c in state.customers.values() if is_customer_waiting(c)]
    customers.sort(key=lambda c: float(c.patience))
    return list(zip(maids, customers))


def assign_maids(state: GameState, cfg: EngineConfig) -> int:
    pairs = plan_assignments(state, cfg)
    for maid, customer in pairs:
        start_service(state, maid, customer)
    return len(pairs)
