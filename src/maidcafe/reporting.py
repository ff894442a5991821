from __future__ import annotations

from typing import Dict

from maidcafe.finance import average_daily_profit, operating_cost, operating_cost_breakdown, profit_margin, profit_trend
from maidcafe.models import GameState
from maidcafe.staff import calculate_efficiency


SEASON_NAMES = {"spring": "春", "summer": "夏", "autumn": "秋", "winter": "冬"}
WEATHER_NAMES = {"sunny": "晴", "cloudy": "多云", "rainy": "雨", "snowy": "雪"}
TREND_NAMES = {"up": "上升", "down": "下降", "flat": "持平"}


def format_money(x: float) -> str:
    return f"{x:,.2f}"


def format_clock(minute_of_day: int) -> str:
    return f"{int(minute_of_day) // 60:02d}:{int(minute_of_day) % 60:02d}"


def average_menu_price(state: GameState) -> float:
    prices = [it.current_price for it in state.menu_items.values() if it.unlocked]
    if not prices:
        return 0.0
    return sum(prices) / len(prices)


def compute_break_even_customers(state: GameState) -> float:
    """Customers per day needed to cover operating cost at the average unlocked menu price."""

    avg = average_menu_price(state)
    if avg <= 0:
        return float("inf")
    return operating_cost(state) / avg


def status_line(state: GameState) -> str:
    return (
        f"第 {state.day} 天 {format_clock(state.time)} "
        f"{SEASON_NAMES.get(state.season, state.season)}季 {WEATHER_NAMES.get(state.weather, state.weather)} | "
        f"金币 {format_money(state.finance.gold)} 声望 {state.reputation:.0f} "
        f"店铺 Lv{state.facility.cafe_level} 座位 {state.facility.max_seats}"
    )


def print_state(state: GameState) -> None:
    print("\n------------------------------")
    print(status_line(state))
    print(f"女仆 {len(state.maids)} 人  顾客 {len(state.customers)} 人  {'营业中' if state.is_business_hours else '已打烊'}")
    for m in state.maids.values():
        if m.status.is_resting:
            st = "休息"
        elif m.status.is_working:
            st = "服务中"
        else:
            st = "空闲"
        print(
            f"- {m.maid_id} {m.name} Lv{m.level} [{m.role}] {st} "
            f"体力 {m.stamina:.0f} 心情 {m.mood:.0f} 效率 {calculate_efficiency(m):.1f}"
        )
    if state.active_events:
        print("进行中的事件: " + "、".join(ev.name for ev in state.active_events))
    print("------------------------------\n")


def print_daily_summary(state: GameState) -> None:
    hist = state.finance.history
    if not hist:
        print("暂无数据。")
        return
    rec = hist[-1]
    breakdown: Dict[str, float] = operating_cost_breakdown(state)
    print(f"\n=== 第 {rec.day} 天（日结）===")
    print(f"金币余额: {format_money(state.finance.gold)}")
    print(f"收入: {format_money(rec.revenue)}  支出: {format_money(rec.expenses)}  利润: {format_money(rec.profit)}")
    print(f"利润率: {profit_margin(rec):.1f}%")
    print(
        "运营成本: "
        f"租金 {format_money(breakdown['rent'])} / 水电 {format_money(breakdown['utilities'])} / "
        f"工资 {format_money(breakdown['wages'])} / 维护 {format_money(breakdown['maintenance'])}"
    )
    print(f"近 {len(hist)} 日平均利润: {format_money(average_daily_profit(hist))}  趋势: {TREND_NAMES[profit_trend(hist)]}")
    be = compute_break_even_customers(state)
    if be != float("inf"):
        print(f"保本客流: {be:.1f} 人/日")
    stats = state.statistics
    print(f"累计服务 {stats.total_customers_served} 人  累计收入 {format_money(stats.total_revenue)}  小费 {format_money(stats.total_tips_earned)}")
