from __future__ import annotations

from typing import Dict, List

from maidcafe.config import EngineConfig
from maidcafe.models import DailyFinance, GameState, Maid


RENT_PER_LEVEL = 100.0
UTILITIES_BASE = 50.0
UTILITIES_PER_SEAT = 5.0
WAGE_BASE = 30.0
WAGE_PER_LEVEL = 5.0
MAINTENANCE_PER_EQUIPMENT_LEVEL = 5.0


def maid_daily_wage(maid: Maid) -> float:
    return WAGE_BASE + (max(1, int(maid.level)) - 1) * WAGE_PER_LEVEL


def operating_cost_breakdown(state: GameState) -> Dict[str, float]:
    fac = state.facility
    return {
        "rent": RENT_PER_LEVEL * int(fac.cafe_level),
        "utilities": UTILITIES_BASE + int(fac.max_seats) * UTILITIES_PER_SEAT,
        "wages": sum(maid_daily_wage(m) for m in state.maids.values()),
        "maintenance": sum(int(e.level) * MAINTENANCE_PER_EQUIPMENT_LEVEL for e in fac.equipment.values()),
    }


def operating_cost(state: GameState) -> float:
    return float(sum(operating_cost_breakdown(state).values()))


def credit_revenue(state: GameState, amount: float) -> None:
    state.finance.gold = round(state.finance.gold + amount, 2)
    state.finance.daily_revenue = round(state.finance.daily_revenue + amount, 2)
    state.statistics.total_revenue = round(state.statistics.total_revenue + amount, 2)


def add_expense(state: GameState, amount: float) -> None:
    state.finance.daily_expenses = round(state.finance.daily_expenses + amount, 2)


def deduct_gold(state: GameState, amount: float) -> None:
    state.finance.gold = max(0.0, round(state.finance.gold - amount, 2))


def spend(state: GameState, cost: float) -> bool:
    """Pay for a purchase. Refused (False) when gold does not cover it."""

    cost = max(0.0, float(cost))
    if state.finance.gold < cost:
        return False
    state.finance.gold = round(state.finance.gold - cost, 2)
    add_expense(state, cost)
    return True


def settle_day(state: GameState, cfg: EngineConfig) -> DailyFinance:
    fin = state.finance
    opcost = operating_cost(state)
    revenue = round(fin.daily_revenue, 2)
    expenses = round(fin.daily_expenses + opcost, 2)
    record = DailyFinance(day=int(state.day), revenue=revenue, expenses=expenses, profit=round(revenue - expenses, 2))

    fin.history.append(record)
    if len(fin.history) > cfg.history_days:
        fin.history = fin.history[-cfg.history_days :]
    fin.gold = max(0.0, fin.gold - opcost)
    fin.daily_revenue = 0.0
    fin.daily_expenses = 0.0
    return record


def profit_margin(record: DailyFinance) -> float:
    if record.revenue <= 0:
        return 0.0
    return record.profit / record.revenue * 100.0


def average_daily_profit(history: List[DailyFinance]) -> float:
    if not history:
        return 0.0
    return sum(r.profit for r in history) / len(history)


def profit_trend(history: List[DailyFinance]) -> str:
    """Compare the newer half of the retained days with the older half."""

    if len(history) < 2:
        return "flat"
    mid = len(history) // 2
    older = average_daily_profit(history[:mid])
    newer = average_daily_profit(history[mid:])
    band = abs(older) * 0.05
    if newer > older + band:
        return "up"
    if newer < older - band:
        return "down"
    return "flat"
