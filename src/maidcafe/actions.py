from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, Type, Union, get_args

from maidcafe.models import Customer, GameEvent, GameState, Maid


@dataclass(frozen=True)
class Tick:
    tag: ClassVar[str] = "TICK"
    delta_time: float = 0.0  # real milliseconds since the previous tick


@dataclass(frozen=True)
class TogglePause:
    tag: ClassVar[str] = "TOGGLE_PAUSE"


@dataclass(frozen=True)
class SetGameSpeed:
    tag: ClassVar[str] = "SET_GAME_SPEED"
    speed: float = 1.0


@dataclass(frozen=True)
class EndDay:
    tag: ClassVar[str] = "END_DAY"


@dataclass(frozen=True)
class StartNewDay:
    tag: ClassVar[str] = "START_NEW_DAY"


@dataclass(frozen=True)
class HireMaid:
    tag: ClassVar[str] = "HIRE_MAID"
    maid: Maid


@dataclass(frozen=True)
class FireMaid:
    tag: ClassVar[str] = "FIRE_MAID"
    maid_id: str


@dataclass(frozen=True)
class AssignRole:
    tag: ClassVar[str] = "ASSIGN_ROLE"
    maid_id: str
    role: str


@dataclass(frozen=True)
class ToggleMaidRest:
    tag: ClassVar[str] = "TOGGLE_MAID_REST"
    maid_id: str


@dataclass(frozen=True)
class AddMaidExperience:
    tag: ClassVar[str] = "ADD_MAID_EXPERIENCE"
    maid_id: str
    experience: int


@dataclass(frozen=True)
class SpawnCustomer:
    tag: ClassVar[str] = "SPAWN_CUSTOMER"
    customer: Customer


@dataclass(frozen=True)
class StartService:
    tag: ClassVar[str] = "START_SERVICE"
    maid_id: str
    customer_id: str


@dataclass(frozen=True)
class CompleteService:
    tag: ClassVar[str] = "COMPLETE_SERVICE"
    maid_id: str
    customer_id: str


@dataclass(frozen=True)
class RemoveCustomer:
    tag: ClassVar[str] = "REMOVE_CUSTOMER"
    customer_id: str


@dataclass(frozen=True)
class UnlockMenuItem:
    tag: ClassVar[str] = "UNLOCK_MENU_ITEM"
    item_id: str


@dataclass(frozen=True)
class SetItemPrice:
    tag: ClassVar[str] = "SET_ITEM_PRICE"
    item_id: str
    price: float


@dataclass(frozen=True)
class UpgradeCafe:
    tag: ClassVar[str] = "UPGRADE_CAFE"


@dataclass(frozen=True)
class BuyDecoration:
    tag: ClassVar[str] = "BUY_DECORATION"
    decoration_id: str


@dataclass(frozen=True)
class UpgradeEquipment:
    tag: ClassVar[str] = "UPGRADE_EQUIPMENT"
    equipment_id: str


@dataclass(frozen=True)
class UnlockArea:
    tag: ClassVar[str] = "UNLOCK_AREA"
    area: str


@dataclass(frozen=True)
class AddRevenue:
    tag: ClassVar[str] = "ADD_REVENUE"
    amount: float


@dataclass(frozen=True)
class AddExpense:
    tag: ClassVar[str] = "ADD_EXPENSE"
    amount: float


@dataclass(frozen=True)
class DeductGold:
    tag: ClassVar[str] = "DEDUCT_GOLD"
    amount: float


@dataclass(frozen=True)
class TriggerEvent:
    tag: ClassVar[str] = "TRIGGER_EVENT"
    event: GameEvent


@dataclass(frozen=True)
class EndEvent:
    tag: ClassVar[str] = "END_EVENT"
    event_id: str


@dataclass(frozen=True)
class UnlockAchievement:
    tag: ClassVar[str] = "UNLOCK_ACHIEVEMENT"
    achievement_id: str


@dataclass(frozen=True)
class ClaimTaskReward:
    tag: ClassVar[str] = "CLAIM_TASK_REWARD"
    task_id: str


@dataclass(frozen=True)
class DismissNotification:
    tag: ClassVar[str] = "DISMISS_NOTIFICATION"
    notification_id: str


@dataclass(frozen=True)
class ClearNotifications:
    tag: ClassVar[str] = "CLEAR_NOTIFICATIONS"


@dataclass(frozen=True)
class CloseDailySummary:
    tag: ClassVar[str] = "CLOSE_DAILY_SUMMARY"


@dataclass(frozen=True)
class LoadGame:
    tag: ClassVar[str] = "LOAD_GAME"
    state: GameState


@dataclass(frozen=True)
class ResetGame:
    tag: ClassVar[str] = "RESET_GAME"


Action = Union[
    Tick,
    TogglePause,
    SetGameSpeed,
    EndDay,
    StartNewDay,
    HireMaid,
    FireMaid,
    AssignRole,
    ToggleMaidRest,
    AddMaidExperience,
    SpawnCustomer,
    StartService,
    CompleteService,
    RemoveCustomer,
    UnlockMenuItem,
    SetItemPrice,
    UpgradeCafe,
    BuyDecoration,
    UpgradeEquipment,
    UnlockArea,
    AddRevenue,
    AddExpense,
    DeductGold,
    TriggerEvent,
    EndEvent,
    UnlockAchievement,
    ClaimTaskReward,
    DismissNotification,
    ClearNotifications,
    CloseDailySummary,
    LoadGame,
    ResetGame,
]

ACTION_TYPES: Dict[str, Type[Any]] = {cls.tag: cls for cls in get_args(Action)}


def _check_scalar(tag: str, name: str, annotation: Any, raw: Any) -> Any:
    kind = annotation if isinstance(annotation, str) else getattr(annotation, "__name__", "")
    if kind == "str":
        if not isinstance(raw, str):
            raise ValueError(f"{tag}.{name} must be a string")
    elif kind in ("float", "int"):
        # bool is an int subclass
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise ValueError(f"{tag}.{name} must be a number")
    return raw


def action_from_dict(d: Dict[str, Any]) -> Any:
    """Build an action from its wire shape, e.g. ``{"type": "SET_ITEM_PRICE", "item_id": "latte", "price": 20}``.

    Raises ValueError for unknown tags or missing fields. Nested maid/customer/event/state
    payloads are rebuilt with the same loaders the save file uses.
    """

    from maidcafe.storage import customer_from_dict, event_from_dict, maid_from_dict, state_from_dict

    tag = str(d.get("type") or "").strip().upper()
    cls = ACTION_TYPES.get(tag)
    if cls is None:
        raise ValueError(f"unknown action type: {tag or '<empty>'}")

    nested = {
        "maid": maid_from_dict,
        "customer": customer_from_dict,
        "event": event_from_dict,
        "state": state_from_dict,
    }
    kwargs: Dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in d:
            continue
        raw = d[f.name]
        if f.name in nested:
            if not isinstance(raw, dict):
                raise ValueError(f"{tag}.{f.name} must be an object")
            kwargs[f.name] = nested[f.name](raw)
        else:
            kwargs[f.name] = _check_scalar(tag, f.name, f.type, raw)
    try:
        return cls(**kwargs)
    except TypeError as e:
        raise ValueError(f"invalid payload for {tag}: {e}") from e
