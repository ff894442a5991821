from __future__ import annotations

import random
from typing import Dict, Tuple

from maidcafe.common import _clamp, notify, release_pair
from maidcafe.config import EngineConfig
from maidcafe.models import GameState, Maid, MaidStats, MaidStatus
from maidcafe.presets import MAID_FIRST_NAMES, MAID_LAST_NAMES, PERSONALITY_STAT_BONUSES


# Per virtual minute: (stamina, mood)
VITALS_RATE_RESTING = (2.0, 1.0)
VITALS_RATE_WORKING = (-0.5, -0.2)
VITALS_RATE_IDLE = (0.5, 0.5)

HIRE_COST_BY_LEVEL = (80, 150, 250, 400, 600)

# (role, customer type) -> service speed bonus
ROLE_BONUS: Dict[Tuple[str, str], float] = {
    ("greeter", "vip"): 0.15,
    ("greeter", "group"): 0.10,
    ("entertainer", "critic"): 0.15,
    ("entertainer", "group"): 0.10,
    ("barista", "regular"): 0.10,
    ("barista", "critic"): 0.05,
    ("server", "regular"): 0.05,
    ("server", "group"): 0.05,
}


def calculate_efficiency(maid: Maid) -> float:
    st = maid.stats
    base = (float(st.charm) + float(st.skill) + float(st.speed)) / 3.0
    mood_modifier = 0.5 + float(maid.mood) / 200.0
    stamina_multiplier = 0.5 if float(maid.stamina) < 20 else 1.0
    return _clamp(base * mood_modifier * stamina_multiplier)


def role_bonus(role: str, customer_type: str) -> float:
    return float(ROLE_BONUS.get((role, customer_type), 0.0))


def max_maids(cafe_level: int, cfg: EngineConfig) -> int:
    return min(2 + (int(cafe_level) - 1), int(cfg.max_maids_hard))


def hire_cost(level: int = 1) -> float:
    idx = max(0, min(len(HIRE_COST_BY_LEVEL) - 1, int(level) - 1))
    return float(HIRE_COST_BY_LEVEL[idx])


def experience_for_service(satisfaction: float) -> int:
    return int(round(5 + float(satisfaction) / 100.0 * 20))


def add_experience(maid: Maid, amount: int, cfg: EngineConfig) -> int:
    """Grant experience and apply every level-up it pays for. Returns levels gained."""

    maid.experience = int(maid.experience) + max(0, int(amount))
    gained = 0
    while maid.level < cfg.max_maid_level and maid.experience >= maid.level * 100:
        maid.experience -= maid.level * 100
        maid.level += 1
        gained += 1
        st = maid.stats
        st.charm = min(100.0, st.charm + 2)
        st.skill = min(100.0, st.skill + 2)
        st.stamina = min(100.0, st.stamina + 2)
        st.speed = min(100.0, st.speed + 2)
    return gained


def update_staff(state: GameState, cfg: EngineConfig, minutes: float) -> None:
    """Stamina/mood drift for every maid, with forced rest at 0 and return at the recovery threshold."""

    for maid in state.maids.values():
        before = float(maid.stamina)
        was_resting = bool(maid.status.is_resting)
        if was_resting:
            ds, dm = VITALS_RATE_RESTING
        elif maid.status.is_working:
            ds, dm = VITALS_RATE_WORKING
        else:
            ds, dm = VITALS_RATE_IDLE
        maid.stamina = _clamp(before + ds * minutes)
        maid.mood = _clamp(float(maid.mood) + dm * minutes)

        if not was_resting and maid.stamina <= 0:
            release_pair(state, maid_id=maid.maid_id)
            maid.status.is_resting = True
            notify(state, cfg, "warning", "女仆体力耗尽", f"{maid.name} 体力耗尽，开始休息")
        elif was_resting and before < cfg.recovery_threshold <= maid.stamina:
            maid.status.is_resting = False
            notify(state, cfg, "success", "女仆恢复", f"{maid.name} 休息完毕，回到岗位")


def reset_for_new_day(maid: Maid) -> None:
    maid.stamina = 100.0
    maid.mood = 100.0
    maid.status = MaidStatus()


def generate_maid(rng: random.Random, maid_id: str, day: int = 1) -> Maid:
    """Random recruit: base stats 20-50 plus the personality's bonus."""

    personality = rng.choice(sorted(PERSONALITY_STAT_BONUSES.keys()))
    bc, bs, bst, bsp = PERSONALITY_STAT_BONUSES[personality]

    def _stat(bonus: int) -> float:
        return _clamp(rng.randint(20, 50) + bonus, 1.0, 100.0)

    name = rng.choice(MAID_LAST_NAMES) + rng.choice(MAID_FIRST_NAMES)
    return Maid(
        maid_id=maid_id,
        name=name,
        personality=personality,
        role="server",
        stats=MaidStats(charm=_stat(bc), skill=_stat(bs), stamina=_stat(bst), speed=_stat(bsp)),
        level=1,
        experience=0,
        mood=float(rng.randint(70, 100)),
        stamina=100.0,
        hired_day=int(day),
    )
