from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from maidcafe.actions import (
    AssignRole,
    BuyDecoration,
    ClaimTaskReward,
    ClearNotifications,
    CloseDailySummary,
    FireMaid,
    SetItemPrice,
    StartNewDay,
    ToggleMaidRest,
    UnlockArea,
    UnlockMenuItem,
    UpgradeCafe,
    UpgradeEquipment,
)
from maidcafe.config import EngineConfig
from maidcafe.engine import hire_random_maid, reduce, simulate_day
from maidcafe.facility import cafe_upgrade_cost, equipment_upgrade_cost
from maidcafe.models import MAID_ROLES, GameState
from maidcafe.presets import new_game_state
from maidcafe.reporting import format_money, print_daily_summary, print_state
from maidcafe.staff import hire_cost, max_maids
from maidcafe.storage import append_ledger_csv, load_state, save_state, state_path


def _input_float(prompt: str, default: Optional[float] = None) -> Optional[float]:
    s = input(prompt).strip()
    if not s:
        return default
    try:
        return float(s)
    except ValueError:
        print("输入无效：请输入数字。")
        return None


def _pick_maid_id(state: GameState) -> Optional[str]:
    if not state.maids:
        print("暂无女仆。")
        return None
    print("女仆列表:")
    for mid, m in state.maids.items():
        print(f"- {mid}: {m.name}（Lv{m.level}，{m.role}）")
    return input("选择女仆ID: ").strip() or None


def _report_noop(before: GameState, after: GameState, msg: str) -> None:
    if after is before:
        print(msg)


def _flush_notifications(state: GameState) -> GameState:
    for n in state.notifications:
        print(f"[{n.kind}] {n.title}：{n.message}")
    return reduce(state, ClearNotifications())


def _run_day(state: GameState, cfg: EngineConfig) -> GameState:
    if not state.is_business_hours:
        state = reduce(state, StartNewDay(), cfg=cfg)
    state = simulate_day(state, cfg)
    if state.finance.history:
        try:
            append_ledger_csv(state.finance.history[-1])
        except OSError as e:
            print(f"导出ledger失败：{e}")
    state = _flush_notifications(state)
    print_daily_summary(state)
    state = reduce(state, CloseDailySummary(), cfg=cfg)
    return reduce(state, StartNewDay(), cfg=cfg)


def _cmd_hire(state: GameState, cfg: EngineConfig) -> GameState:
    cap = max_maids(state.facility.cafe_level, cfg)
    print(f"当前 {len(state.maids)}/{cap} 人，招聘费用 {format_money(hire_cost(1))}")
    nxt = hire_random_maid(state, cfg=cfg)
    _report_noop(state, nxt, "无法招聘：人数已满或金币不足。")
    return nxt


def _cmd_fire(state: GameState, cfg: EngineConfig) -> GameState:
    mid = _pick_maid_id(state)
    if not mid:
        return state
    nxt = reduce(state, FireMaid(maid_id=mid), cfg=cfg)
    _report_noop(state, nxt, "女仆不存在。")
    return nxt


def _cmd_role(state: GameState, cfg: EngineConfig) -> GameState:
    mid = _pick_maid_id(state)
    if not mid:
        return state
    role = input(f"岗位（{'/'.join(MAID_ROLES)}）: ").strip()
    nxt = reduce(state, AssignRole(maid_id=mid, role=role), cfg=cfg)
    _report_noop(state, nxt, "分配失败：女仆不存在或岗位无效。")
    return nxt


def _cmd_rest(state: GameState, cfg: EngineConfig) -> GameState:
    mid = _pick_maid_id(state)
    if not mid:
        return state
    nxt = reduce(state, ToggleMaidRest(maid_id=mid), cfg=cfg)
    _report_noop(state, nxt, "女仆不存在。")
    return nxt


def _cmd_menu(state: GameState, cfg: EngineConfig) -> GameState:
    print("菜单:")
    for iid, it in state.menu_items.items():
        flag = "已解锁" if it.unlocked else f"解锁 {format_money(it.unlock_cost)}"
        season = f"（{it.season}限定）" if it.season else ""
        print(f"- {iid}: {it.name}{season} 价格 {format_money(it.current_price)}（基准 {format_money(it.base_price)}） {flag}")
    iid = input("选择菜品ID: ").strip()
    if not iid or iid not in state.menu_items:
        print("菜品不存在。")
        return state
    if not state.menu_items[iid].unlocked:
        nxt = reduce(state, UnlockMenuItem(item_id=iid), cfg=cfg)
        _report_noop(state, nxt, "金币不足。")
        return nxt
    price = _input_float("新价格（基准价的 0.5-2 倍）: ")
    if price is None:
        return state
    nxt = reduce(state, SetItemPrice(item_id=iid, price=price), cfg=cfg)
    _report_noop(state, nxt, "价格未变化。")
    return nxt


def _cmd_facility(state: GameState, cfg: EngineConfig) -> GameState:
    fac = state.facility
    print(f"1) 升级店铺（Lv{fac.cafe_level}，费用 {format_money(cafe_upgrade_cost(fac.cafe_level, cfg))}）")
    print("2) 购买装饰")
    print("3) 升级设备")
    print("4) 解锁区域")
    choice = input("选择: ").strip()
    if choice == "1":
        nxt = reduce(state, UpgradeCafe(), cfg=cfg)
        _report_noop(state, nxt, "无法升级：已满级或金币不足。")
        return nxt
    if choice == "2":
        for did, d in fac.decorations.items():
            print(f"- {did}: {d.name} +{d.bonus:g} 满意度 {format_money(d.cost)}{' 已拥有' if d.owned else ''}")
        did = input("选择装饰ID: ").strip()
        nxt = reduce(state, BuyDecoration(decoration_id=did), cfg=cfg)
        _report_noop(state, nxt, "购买失败：不存在、已拥有或金币不足。")
        return nxt
    if choice == "3":
        for eid, e in fac.equipment.items():
            print(f"- {eid}: {e.name} Lv{e.level}/{e.max_level} 升级 {format_money(equipment_upgrade_cost(e, cfg))}")
        eid = input("选择设备ID: ").strip()
        nxt = reduce(state, UpgradeEquipment(equipment_id=eid), cfg=cfg)
        _report_noop(state, nxt, "升级失败：不存在、已满级或金币不足。")
        return nxt
    if choice == "4":
        for area, cost in cfg.area_costs.items():
            print(f"- {area}: {format_money(cost)}{' 已解锁' if area in fac.unlocked_areas else ''}")
        area = input("选择区域: ").strip()
        nxt = reduce(state, UnlockArea(area=area), cfg=cfg)
        _report_noop(state, nxt, "解锁失败：不存在、已解锁或金币不足。")
        return nxt
    print("无效选项。")
    return state


def _cmd_tasks(state: GameState, cfg: EngineConfig) -> GameState:
    print("任务:")
    for tid, t in state.tasks.items():
        if t.claimed:
            flag = "已领取"
        elif t.completed:
            flag = "可领取"
        else:
            flag = f"{t.progress:g}/{t.condition.target:g}"
        print(f"- {tid}: {t.name}（{t.description}） {flag}")
    print("成就:")
    for a in state.achievements.values():
        print(f"- {a.name}：{a.description} {'✔' if a.unlocked else ''}")
    tid = input("领取任务ID（回车跳过）: ").strip()
    if not tid:
        return state
    nxt = reduce(state, ClaimTaskReward(task_id=tid), cfg=cfg)
    _report_noop(state, nxt, "无法领取：未完成或已领取。")
    return nxt


def _autosave(state: GameState) -> None:
    try:
        save_state(state)
    except OSError as e:
        print(f"保存失败：{e}")


def _autoload_or_new(seed: int, fresh: bool) -> GameState:
    p = state_path()
    if p.exists() and not fresh:
        try:
            return load_state(p)
        except ValueError as e:
            print(f"读取存档失败：{e}。将创建新档。")
    return new_game_state(seed=seed)


def autoplay(state: GameState, days: int, cfg: EngineConfig) -> GameState:
    """Hands-off play: keep staff topped up, unlock the cheapest dish when affordable, run the days."""

    for _ in range(max(0, int(days))):
        while True:
            nxt = hire_random_maid(state, cfg=cfg)
            if nxt is state:
                break
            state = nxt
        locked = sorted((it for it in state.menu_items.values() if not it.unlocked), key=lambda it: it.unlock_cost)
        if locked and state.finance.gold >= locked[0].unlock_cost + 500:
            state = reduce(state, UnlockMenuItem(item_id=locked[0].item_id), cfg=cfg)
        for tid in [tid for tid, t in state.tasks.items() if t.completed and not t.claimed]:
            state = reduce(state, ClaimTaskReward(task_id=tid), cfg=cfg)
        state = _run_day(state, cfg)
    return state


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="女仆咖啡厅经营模拟（CLI）")
    ap.add_argument("--seed", type=int, default=20260101)
    ap.add_argument("--new", action="store_true", help="ignore the existing save")
    ap.add_argument("--autoplay", type=int, default=0, metavar="DAYS", help="run DAYS days without prompts")
    ap.add_argument("--log-level", default="WARNING")
    args = ap.parse_args(argv)

    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.WARNING))
    cfg = EngineConfig()
    state = _autoload_or_new(int(args.seed), bool(args.new))

    if args.autoplay > 0:
        state = autoplay(state, args.autoplay, cfg)
        _autosave(state)
        print_state(state)
        return 0

    print("女仆咖啡厅经营模拟（CLI）")
    print("核心：女仆排班/顾客服务/菜单定价/设施升级/日结账本。\n")

    while True:
        print_state(state)
        print("1) 营业一天（日结）")
        print("2) 招聘女仆")
        print("3) 解雇女仆")
        print("4) 分配岗位")
        print("5) 切换休息")
        print("6) 菜单：解锁/定价")
        print("7) 设施：升级/装饰/设备/区域")
        print("8) 任务与成就")
        print("9) 报表")
        print("10) 保存存档")
        print("0) 退出")

        try:
            choice = input("选择: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n再见。")
            return 0

        if choice == "1":
            state = _run_day(state, cfg)
            _autosave(state)
        elif choice == "2":
            state = _cmd_hire(state, cfg)
        elif choice == "3":
            state = _cmd_fire(state, cfg)
        elif choice == "4":
            state = _cmd_role(state, cfg)
        elif choice == "5":
            state = _cmd_rest(state, cfg)
        elif choice == "6":
            state = _cmd_menu(state, cfg)
        elif choice == "7":
            state = _cmd_facility(state, cfg)
        elif choice == "8":
            state = _cmd_tasks(state, cfg)
        elif choice == "9":
            print_daily_summary(state)
        elif choice == "10":
            _autosave(state)
        elif choice == "0":
            _autosave(state)
            print("再见。")
            return 0
        else:
            print("无效选项：请输入 0-10。")
        state = _flush_notifications(state)
