from __future__ import annotations

import math

from maidcafe.config import EngineConfig
from maidcafe.finance import spend
from maidcafe.models import Equipment, GameState


def max_seats_for_level(level: int, cfg: EngineConfig) -> int:
    return cfg.base_seats + (int(level) - 1) * cfg.seats_per_level


def cafe_upgrade_cost(level: int, cfg: EngineConfig) -> float:
    """Cost to go from ``level`` to ``level + 1``."""

    costs = cfg.cafe_upgrade_costs
    idx = max(0, min(len(costs) - 1, int(level)))
    return float(costs[idx])


def equipment_upgrade_cost(eq: Equipment, cfg: EngineConfig) -> float:
    mults = cfg.equipment_cost_multipliers
    idx = max(0, min(len(mults) - 1, int(eq.level) - 1))
    return float(math.floor(float(eq.upgrade_cost) * mults[idx]))


def decoration_bonus(state: GameState) -> float:
    return float(sum(d.bonus for d in state.facility.decorations.values() if d.owned))


def equipment_efficiency(state: GameState, cfg: EngineConfig) -> float:
    """Average equipment bonus in percent."""

    eqs = list(state.facility.equipment.values())
    if not eqs:
        return 0.0
    return sum((int(e.level) - 1) * cfg.equipment_efficiency_per_level for e in eqs) / len(eqs)


def upgrade_cafe(state: GameState, cfg: EngineConfig) -> bool:
    fac = state.facility
    if fac.cafe_level >= cfg.max_cafe_level:
        return False
    if not spend(state, cafe_upgrade_cost(fac.cafe_level, cfg)):
        return False
    fac.cafe_level += 1
    fac.max_seats = max_seats_for_level(fac.cafe_level, cfg)
    return True


def buy_decoration(state: GameState, decoration_id: str) -> bool:
    deco = state.facility.decorations.get(decoration_id)
    if deco is None or deco.owned:
        return False
    if not spend(state, deco.cost):
        return False
    deco.owned = True
    return True


def upgrade_equipment(state: GameState, cfg: EngineConfig, equipment_id: str) -> bool:
    eq = state.facility.equipment.get(equipment_id)
    if eq is None or eq.level >= eq.max_level:
        return False
    if not spend(state, equipment_upgrade_cost(eq, cfg)):
        return False
    eq.level += 1
    return True


def unlock_area(state: GameState, cfg: EngineConfig, area: str) -> bool:
    fac = state.facility
    if area not in cfg.area_costs or area in fac.unlocked_areas:
        return False
    if not spend(state, cfg.area_costs[area]):
        return False
    fac.unlocked_areas.append(area)
    return True
