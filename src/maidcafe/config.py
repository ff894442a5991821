from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass
class EngineConfig:
    # Virtual clock
    business_start: int = 540  # 09:00
    business_end: int = 1260  # 21:00
    minutes_per_tick: int = 5
    days_per_season: int = 30
    game_speeds: Tuple[float, ...] = (0.5, 1.0, 2.0, 4.0)

    # Facility
    base_seats: int = 4
    seats_per_level: int = 2
    max_cafe_level: int = 10
    max_maids_hard: int = 11
    cafe_upgrade_costs: Tuple[float, ...] = (0, 500, 1000, 2000, 3500, 5500, 8000, 11000, 15000, 20000)
    area_costs: Dict[str, float] = field(
        default_factory=lambda: {"main": 0.0, "outdoor": 2000.0, "vip_room": 5000.0, "stage": 8000.0}
    )
    equipment_cost_multipliers: Tuple[float, ...] = (1.0, 1.5, 2.2, 3.0)
    equipment_efficiency_per_level: float = 15.0  # percent
    min_price_ratio: float = 0.5
    max_price_ratio: float = 2.0

    # Customers
    base_spawn_interval_ms: float = 30000.0
    min_spawn_interval_ms: float = 10000.0
    max_spawns_per_tick: int = 3
    eating_ticks: int = 2
    paying_ticks: int = 1
    leaving_ticks: int = 1
    timeout_leaving_ticks: int = 1

    # Staff
    min_stamina_to_serve: float = 10.0
    recovery_threshold: float = 50.0
    max_maid_level: int = 50

    # Events
    event_chance: float = 0.15
    seasonal_event_chance: float = 0.25
    positive_event_weight: float = 0.6

    # Bookkeeping
    history_days: int = 7
    max_notifications: int = 50
    max_event_history: int = 500


DEFAULT_CONFIG = EngineConfig()
