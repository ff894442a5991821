from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


CUSTOMER_TYPES = ("regular", "vip", "critic", "group")
CUSTOMER_STATUSES = ("waiting_seat", "seated", "ordering", "waiting_order", "eating", "paying", "leaving")
MAID_ROLES = ("greeter", "server", "barista", "entertainer")
SEASONS = ("spring", "summer", "autumn", "winter")
WEATHERS = ("sunny", "cloudy", "rainy", "snowy")
AREAS = ("main", "outdoor", "vip_room", "stage")


@dataclass
class OrderItem:
    menu_item_id: str
    quantity: int = 1
    price: float = 0.0  # unit price at order time


@dataclass
class Order:
    items: List[OrderItem] = field(default_factory=list)
    total_price: float = 0.0
    prepared_item_ids: List[str] = field(default_factory=list)


@dataclass
class Customer:
    customer_id: str
    name: str = ""
    customer_type: str = "regular"  # regular|vip|critic|group
    patience: float = 100.0
    satisfaction: float = 50.0
    status: str = "seated"
    order: Order = field(default_factory=Order)
    seat_id: str = ""
    arrival_time: int = 0  # absolute virtual minute

    service_progress: Optional[float] = None
    service_start_time: Optional[int] = None
    serving_maid_id: Optional[str] = None


@dataclass
class MaidStats:
    charm: float = 30.0
    skill: float = 30.0
    stamina: float = 30.0
    speed: float = 30.0


@dataclass
class MaidStatus:
    is_working: bool = False
    is_resting: bool = False
    current_task: Optional[str] = None  # serving|None
    serving_customer_id: Optional[str] = None


@dataclass
class Maid:
    maid_id: str
    name: str = ""
    personality: str = "cheerful"
    role: str = "server"  # greeter|server|barista|entertainer
    stats: MaidStats = field(default_factory=MaidStats)
    level: int = 1
    experience: int = 0
    status: MaidStatus = field(default_factory=MaidStatus)
    mood: float = 80.0
    stamina: float = 100.0
    hired_day: int = 1


@dataclass
class MenuItem:
    item_id: str
    name: str
    category: str = "drinks"  # drinks|desserts|main|special
    base_price: float = 10.0
    current_price: float = 10.0
    unlocked: bool = False
    unlock_cost: float = 0.0
    popularity: float = 50.0
    prep_time: int = 30  # seconds
    season: Optional[str] = None  # None means all year


@dataclass
class Decoration:
    decoration_id: str
    name: str
    bonus: float = 0.0  # flat satisfaction bonus
    cost: float = 0.0
    owned: bool = False


@dataclass
class Equipment:
    equipment_id: str
    name: str
    level: int = 1
    max_level: int = 3
    upgrade_cost: float = 0.0


@dataclass
class Facility:
    cafe_level: int = 1
    max_seats: int = 4
    decorations: Dict[str, Decoration] = field(default_factory=dict)
    equipment: Dict[str, Equipment] = field(default_factory=dict)
    unlocked_areas: List[str] = field(default_factory=lambda: ["main"])


@dataclass
class DailyFinance:
    day: int
    revenue: float = 0.0
    expenses: float = 0.0
    profit: float = 0.0


@dataclass
class Finance:
    gold: float = 1000.0
    daily_revenue: float = 0.0
    daily_expenses: float = 0.0
    history: List[DailyFinance] = field(default_factory=list)


@dataclass
class EventEffect:
    target: str  # revenue|customers|satisfaction|reputation
    modifier: float = 1.0
    is_multiplier: bool = True


@dataclass
class GameEvent:
    event_id: str
    name: str = ""
    event_type: str = "positive"  # positive|negative|seasonal
    description: str = ""
    effects: List[EventEffect] = field(default_factory=list)
    duration: int = 60  # virtual minutes
    started_at: int = 540  # minute of day


@dataclass
class EventHistoryRecord:
    day: int
    time: int
    event_id: str
    name: str
    event_type: str


@dataclass
class TaskCondition:
    condition_type: str  # serve_customers|earn_gold|upgrade_cafe|...
    target: float = 1.0


@dataclass
class Task:
    task_id: str
    name: str
    description: str = ""
    task_type: str = "daily"  # daily|growth
    condition: TaskCondition = field(default_factory=lambda: TaskCondition("serve_customers"))
    progress: float = 0.0
    completed: bool = False
    claimed: bool = False
    reward_gold: float = 0.0
    reward_reputation: float = 0.0


@dataclass
class Achievement:
    achievement_id: str
    name: str
    description: str = ""
    stat_key: str = "total_customers_served"
    target: float = 1.0
    reward_gold: float = 0.0
    unlocked: bool = False
    unlocked_day: Optional[int] = None


@dataclass
class Statistics:
    total_customers_served: int = 0
    total_revenue: float = 0.0
    total_days_played: int = 0
    total_tips_earned: float = 0.0
    perfect_services_count: int = 0
    maids_hired: int = 0


@dataclass
class Notification:
    notification_id: str
    kind: str = "info"  # info|success|warning|error|achievement
    title: str = ""
    message: str = ""
    timestamp: int = 0  # absolute virtual minute


@dataclass
class RuntimeScratch:
    """Scheduler scratch state. Not part of the save file."""

    spawn_accumulator_ms: float = 0.0
    dwell_ticks: Dict[str, int] = field(default_factory=dict)  # customer_id -> ticks left
    customer_streak: int = 0
    customers_served_today: int = 0


@dataclass
class GameState:
    day: int = 1
    time: int = 540  # minute of day
    season: str = "spring"
    weather: str = "sunny"
    is_paused: bool = True
    is_business_hours: bool = True
    game_speed: float = 1.0
    daily_summary_open: bool = False

    reputation: float = 50.0
    finance: Finance = field(default_factory=Finance)
    facility: Facility = field(default_factory=Facility)

    maids: Dict[str, Maid] = field(default_factory=dict)
    customers: Dict[str, Customer] = field(default_factory=dict)
    menu_items: Dict[str, MenuItem] = field(default_factory=dict)

    active_events: List[GameEvent] = field(default_factory=list)
    event_history: List[EventHistoryRecord] = field(default_factory=list)

    tasks: Dict[str, Task] = field(default_factory=dict)
    achievements: Dict[str, Achievement] = field(default_factory=dict)
    statistics: Statistics = field(default_factory=Statistics)
    notifications: List[Notification] = field(default_factory=list)

    # Deterministic randomness / id generation
    rng_seed: int = 20260101
    rng_state: Optional[Any] = None
    serial: int = 0

    runtime: RuntimeScratch = field(default_factory=RuntimeScratch)
