from __future__ import annotations

from typing import List

from maidcafe.common import _clamp, notify
from maidcafe.config import EngineConfig
from maidcafe.models import GameState
from maidcafe.presets import daily_tasks


# Progress grows by the event amount.
AMOUNT_CONDITIONS = {"serve_customers", "earn_gold", "earn_tips", "serve_vip", "hire_maids", "unlock_menu_items"}
# Progress tracks the highest value seen.
VALUE_CONDITIONS = {"upgrade_cafe", "maintain_satisfaction", "total_revenue", "total_customers"}


def apply_task_event(state: GameState, cfg: EngineConfig, condition_type: str, amount: float) -> List[str]:
    """Advance every open task watching ``condition_type``. Returns ids completed by this event."""

    done: List[str] = []
    for task in state.tasks.values():
        if task.completed or task.condition.condition_type != condition_type:
            continue
        target = float(task.condition.target)
        if condition_type in VALUE_CONDITIONS:
            progress = max(float(task.progress), float(amount))
        else:
            progress = float(task.progress) + max(0.0, float(amount))
        task.progress = min(progress, target)
        if task.progress >= target:
            task.completed = True
            done.append(task.task_id)
            notify(state, cfg, "success", "任务完成", f"「{task.name}」已完成，可以领取奖励")
    return done


def claim_task_reward(state: GameState, cfg: EngineConfig, task_id: str) -> bool:
    task = state.tasks.get(task_id)
    if task is None or not task.completed or task.claimed:
        return False
    task.claimed = True
    state.finance.gold += float(task.reward_gold)
    state.finance.daily_revenue += float(task.reward_gold)
    state.reputation = _clamp(state.reputation + float(task.reward_reputation))
    notify(
        state,
        cfg,
        "success",
        "领取奖励",
        f"「{task.name}」奖励 {task.reward_gold:g} 金币，声望 +{task.reward_reputation:g}",
    )
    return True


def refresh_daily_tasks(state: GameState) -> None:
    kept = {tid: t for tid, t in state.tasks.items() if t.task_type != "daily"}
    fresh = daily_tasks()
    fresh.update(kept)
    state.tasks = fresh


def achievement_value(state: GameState, key: str) -> float:
    if key == "cafe_level":
        return float(state.facility.cafe_level)
    if key == "reputation":
        return float(state.reputation)
    if key == "customer_streak":
        return float(state.runtime.customer_streak)
    if key == "maid_count":
        return float(len(state.maids))
    return float(getattr(state.statistics, key, 0) or 0)


def unlock_achievement(state: GameState, cfg: EngineConfig, achievement_id: str) -> bool:
    ach = state.achievements.get(achievement_id)
    if ach is None or ach.unlocked:
        return False
    ach.unlocked = True
    ach.unlocked_day = int(state.day)
    state.finance.gold += float(ach.reward_gold)
    notify(state, cfg, "achievement", "成就解锁", f"🏆 {ach.name}！奖励 {ach.reward_gold:g} 金币")
    return True


def evaluate_achievements(state: GameState, cfg: EngineConfig) -> List[str]:
    unlocked: List[str] = []
    for ach in state.achievements.values():
        if ach.unlocked:
            continue
        if achievement_value(state, ach.stat_key) >= float(ach.target):
            unlock_achievement(state, cfg, ach.achievement_id)
            unlocked.append(ach.achievement_id)
    return unlocked
