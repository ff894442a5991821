from __future__ import annotations

from maidcafe.actions import ClaimTaskReward, UnlockAchievement
from maidcafe.config import EngineConfig
from maidcafe.engine import reduce
from maidcafe.models import GameState, Maid
from maidcafe.presets import new_game_state
from maidcafe.progress import achievement_value, apply_task_event, evaluate_achievements, refresh_daily_tasks


def _assert(cond: bool, msg: str) -> None:
    if not cond:
        raise AssertionError(msg)


def _make_min_state() -> GameState:
    return new_game_state(seed=4)


def test_amount_tasks_accumulate_and_cap() -> None:
    cfg = EngineConfig()
    s = _make_min_state()
    apply_task_event(s, cfg, "serve_customers", 3)
    done = apply_task_event(s, cfg, "serve_customers", 4)
    _assert(done == ["daily_serve_5"], f"unexpected completions {done}")
    _assert(s.tasks["daily_serve_5"].progress == 5.0, "progress capped at target")
    _assert(s.tasks["daily_serve_10"].progress == 7.0, "bigger goal keeps counting")
    _assert(not s.tasks["daily_serve_10"].completed, "not there yet")


def test_value_tasks_track_the_best_value() -> None:
    cfg = EngineConfig()
    s = _make_min_state()
    apply_task_event(s, cfg, "maintain_satisfaction", 70)
    apply_task_event(s, cfg, "maintain_satisfaction", 60)
    _assert(s.tasks["daily_satisfaction_80"].progress == 70.0, "best value kept")
    apply_task_event(s, cfg, "maintain_satisfaction", 85)
    _assert(s.tasks["daily_satisfaction_80"].completed, "80 reached")


def test_claim_reward_once() -> None:
    s = _make_min_state()
    task = s.tasks["daily_serve_5"]
    task.progress = 5.0
    task.completed = True
    s2 = reduce(s, ClaimTaskReward(task_id="daily_serve_5"))
    _assert(s2.tasks["daily_serve_5"].claimed, "claimed")
    _assert(s2.finance.gold == 1200.0, f"reward paid, got {s2.finance.gold}")
    _assert(s2.reputation == 51.0, "reputation reward")
    _assert(reduce(s2, ClaimTaskReward(task_id="daily_serve_5")) is s2, "second claim is a no-op")


def test_reputation_reward_is_clamped() -> None:
    s = _make_min_state()
    s.reputation = 99.5
    task = s.tasks["daily_serve_vip"]
    task.completed = True
    s2 = reduce(s, ClaimTaskReward(task_id="daily_serve_vip"))
    _assert(s2.reputation == 100.0, "reputation stays within 100")


def test_refresh_daily_tasks_keeps_growth() -> None:
    cfg = EngineConfig()
    s = _make_min_state()
    apply_task_event(s, cfg, "serve_customers", 10)
    apply_task_event(s, cfg, "hire_maids", 2)
    refresh_daily_tasks(s)
    _assert(s.tasks["daily_serve_10"].progress == 0.0 and not s.tasks["daily_serve_10"].completed, "daily reset")
    _assert(s.tasks["growth_hire_3"].progress == 2.0, "growth kept")


def test_achievement_unlocks_once() -> None:
    s = _make_min_state()
    s2 = reduce(s, UnlockAchievement(achievement_id="days_7"))
    _assert(s2.achievements["days_7"].unlocked and s2.achievements["days_7"].unlocked_day == 1, "unlocked on day 1")
    _assert(s2.finance.gold == 1300.0, "reward paid")
    _assert(s2.notifications[-1].kind == "achievement", "achievement notification")
    _assert(reduce(s2, UnlockAchievement(achievement_id="days_7")) is s2, "already unlocked")
    _assert(reduce(s, UnlockAchievement(achievement_id="nope")) is s, "unknown achievement")


def test_evaluate_achievements_reads_stats_and_derived_values() -> None:
    cfg = EngineConfig()
    s = _make_min_state()
    s.statistics.total_customers_served = 50
    s.reputation = 95.0
    s.runtime.customer_streak = 3
    got = evaluate_achievements(s, cfg)
    _assert(set(got) == {"first_customer", "serve_50", "reputation_90"}, f"unexpected {got}")
    _assert(evaluate_achievements(s, cfg) == [], "nothing new on a second pass")
    s.maids["M1"] = Maid(maid_id="M1")
    _assert(achievement_value(s, "maid_count") == 1.0, "derived maid count")
    _assert(achievement_value(s, "customer_streak") == 3.0, "streak from the scheduler scratch")
    _assert(achievement_value(s, "no_such_stat") == 0.0, "unknown keys read as zero")
