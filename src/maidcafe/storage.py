from __future__ import annotations

import csv
import json
import logging
import os
import zlib
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from maidcafe.models import (
    Achievement,
    Customer,
    DailyFinance,
    Decoration,
    Equipment,
    EventEffect,
    EventHistoryRecord,
    Facility,
    Finance,
    GameEvent,
    GameState,
    Maid,
    MaidStats,
    MaidStatus,
    MenuItem,
    Notification,
    Order,
    OrderItem,
    Statistics,
    Task,
    TaskCondition,
)


logger = logging.getLogger(__name__)

SAVE_VERSION = "1.0.0"
REQUIRED_STATE_KEYS = ("day", "time", "finance", "facility", "maids", "menu_items")
LEDGER_COLUMNS = ["day", "revenue", "expenses", "profit"]


def project_root() -> Path:
    # .../src/maidcafe/storage.py -> parents[2] == project root
    return Path(__file__).resolve().parents[2]


def data_dir() -> Path:
    override = os.environ.get("MAIDCAFE_DATA_DIR", "").strip()
    p = Path(override) if override else project_root() / "data"
    p.mkdir(parents=True, exist_ok=True)
    return p


def state_path() -> Path:
    return data_dir() / "state.json"


def ledger_path() -> Path:
    return data_dir() / "ledger.csv"


def reset_data_files() -> None:
    """Delete persisted state and ledger."""

    for fp in [state_path(), ledger_path()]:
        fp.unlink(missing_ok=True)


def state_to_dict(state: GameState) -> Dict[str, Any]:
    """Persisted view of a state: everything except the scheduler scratch."""

    d = asdict(state)
    d.pop("runtime", None)
    return d


def _checksum(d: Dict[str, Any]) -> str:
    raw = json.dumps(d, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
    return f"{zlib.crc32(raw.encode('utf-8')) & 0xFFFFFFFF:08x}"


def save_state(state: GameState, path: Path | None = None) -> None:
    p = path or state_path()
    body = state_to_dict(state)
    payload = {
        "version": SAVE_VERSION,
        "saved_at_day": int(state.day),
        "checksum": _checksum(body),
        "state": body,
    }
    p.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("saved day %s to %s", state.day, p)


def validate_payload(payload: Any) -> Dict[str, Any]:
    """Check version, structure and checksum. Returns the state dict or raises ValueError."""

    if not isinstance(payload, dict):
        raise ValueError("save payload must be an object")
    version = str(payload.get("version") or "")
    if version.split(".")[0] != SAVE_VERSION.split(".")[0]:
        raise ValueError(f"unsupported save version: {version or '<missing>'}")
    d = payload.get("state")
    if not isinstance(d, dict):
        raise ValueError("save payload has no state")
    missing = [k for k in REQUIRED_STATE_KEYS if k not in d]
    if missing:
        raise ValueError(f"save state is missing fields: {', '.join(missing)}")
    expected = payload.get("checksum")
    if expected is not None and str(expected) != _checksum(d):
        raise ValueError("save checksum mismatch")
    return d


def load_state(path: Path | None = None) -> GameState:
    p = path or state_path()
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"save file is not valid JSON: {e}") from e
    state = state_from_dict(validate_payload(payload))
    logger.info("loaded day %s from %s", state.day, p)
    return state


def maid_from_dict(d: Dict[str, Any]) -> Maid:
    sd = d.get("stats") or {}
    st = d.get("status") or {}
    return Maid(
        maid_id=str(d.get("maid_id", "")),
        name=str(d.get("name", "")),
        personality=str(d.get("personality", "cheerful")),
        role=str(d.get("role", "server")),
        stats=MaidStats(
            charm=float(sd.get("charm", 30.0)),
            skill=float(sd.get("skill", 30.0)),
            stamina=float(sd.get("stamina", 30.0)),
            speed=float(sd.get("speed", 30.0)),
        ),
        level=int(d.get("level", 1)),
        experience=int(d.get("experience", 0)),
        status=MaidStatus(
            is_working=bool(st.get("is_working", False)),
            is_resting=bool(st.get("is_resting", False)),
            current_task=st.get("current_task"),
            serving_customer_id=st.get("serving_customer_id"),
        ),
        mood=float(d.get("mood", 80.0)),
        stamina=float(d.get("stamina", 100.0)),
        hired_day=int(d.get("hired_day", 1)),
    )


def customer_from_dict(d: Dict[str, Any]) -> Customer:
    od = d.get("order") or {}
    order = Order(
        items=[
            OrderItem(
                menu_item_id=str(it.get("menu_item_id", "")),
                quantity=int(it.get("quantity", 1)),
                price=float(it.get("price", 0.0)),
            )
            for it in (od.get("items") or [])
        ],
        total_price=float(od.get("total_price", 0.0)),
        prepared_item_ids=[str(x) for x in (od.get("prepared_item_ids") or [])],
    )
    progress = d.get("service_progress")
    start = d.get("service_start_time")
    return Customer(
        customer_id=str(d.get("customer_id", "")),
        name=str(d.get("name", "")),
        customer_type=str(d.get("customer_type", "regular")),
        patience=float(d.get("patience", 100.0)),
        satisfaction=float(d.get("satisfaction", 50.0)),
        status=str(d.get("status", "seated")),
        order=order,
        seat_id=str(d.get("seat_id", "")),
        arrival_time=int(d.get("arrival_time", 0)),
        service_progress=float(progress) if progress is not None else None,
        service_start_time=int(start) if start is not None else None,
        serving_maid_id=d.get("serving_maid_id"),
    )


def event_from_dict(d: Dict[str, Any]) -> GameEvent:
    return GameEvent(
        event_id=str(d.get("event_id", "")),
        name=str(d.get("name", "")),
        event_type=str(d.get("event_type", "positive")),
        description=str(d.get("description", "")),
        effects=[
            EventEffect(
                target=str(e.get("target", "")),
                modifier=float(e.get("modifier", 1.0)),
                is_multiplier=bool(e.get("is_multiplier", True)),
            )
            for e in (d.get("effects") or [])
        ],
        duration=int(d.get("duration", 60)),
        started_at=int(d.get("started_at", 540)),
    )


def _load_facility(d: Dict[str, Any]) -> Facility:
    return Facility(
        cafe_level=int(d.get("cafe_level", 1)),
        max_seats=int(d.get("max_seats", 4)),
        decorations={
            k: Decoration(
                decoration_id=str(v.get("decoration_id", k)),
                name=str(v.get("name", k)),
                bonus=float(v.get("bonus", 0.0)),
                cost=float(v.get("cost", 0.0)),
                owned=bool(v.get("owned", False)),
            )
            for k, v in (d.get("decorations") or {}).items()
        },
        equipment={
            k: Equipment(
                equipment_id=str(v.get("equipment_id", k)),
                name=str(v.get("name", k)),
                level=int(v.get("level", 1)),
                max_level=int(v.get("max_level", 3)),
                upgrade_cost=float(v.get("upgrade_cost", 0.0)),
            )
            for k, v in (d.get("equipment") or {}).items()
        },
        unlocked_areas=[str(a) for a in (d.get("unlocked_areas") or ["main"])],
    )


def _load_finance(d: Dict[str, Any]) -> Finance:
    return Finance(
        gold=float(d.get("gold", 0.0)),
        daily_revenue=float(d.get("daily_revenue", 0.0)),
        daily_expenses=float(d.get("daily_expenses", 0.0)),
        history=[
            DailyFinance(
                day=int(h.get("day", 0)),
                revenue=float(h.get("revenue", 0.0)),
                expenses=float(h.get("expenses", 0.0)),
                profit=float(h.get("profit", 0.0)),
            )
            for h in (d.get("history") or [])
        ],
    )


def _load_task(tid: str, v: Dict[str, Any]) -> Task:
    cd = v.get("condition") or {}
    return Task(
        task_id=str(v.get("task_id", tid)),
        name=str(v.get("name", tid)),
        description=str(v.get("description", "")),
        task_type=str(v.get("task_type", "daily")),
        condition=TaskCondition(
            condition_type=str(cd.get("condition_type", "serve_customers")),
            target=float(cd.get("target", 1.0)),
        ),
        progress=float(v.get("progress", 0.0)),
        completed=bool(v.get("completed", False)),
        claimed=bool(v.get("claimed", False)),
        reward_gold=float(v.get("reward_gold", 0.0)),
        reward_reputation=float(v.get("reward_reputation", 0.0)),
    )


def state_from_dict(d: Dict[str, Any]) -> GameState:
    state = GameState(day=int(d.get("day", 1)), time=int(d.get("time", 540)))
    state.season = str(d.get("season", "spring"))
    state.weather = str(d.get("weather", "sunny"))
    state.is_paused = bool(d.get("is_paused", True))
    state.is_business_hours = bool(d.get("is_business_hours", True))
    state.game_speed = float(d.get("game_speed", 1.0))
    state.daily_summary_open = bool(d.get("daily_summary_open", False))
    state.reputation = float(d.get("reputation", 50.0))

    state.finance = _load_finance(d.get("finance") or {})
    state.facility = _load_facility(d.get("facility") or {})

    for mid, md in (d.get("maids") or {}).items():
        state.maids[mid] = maid_from_dict(md)
    for cid, cd in (d.get("customers") or {}).items():
        state.customers[cid] = customer_from_dict(cd)
    for iid, it in (d.get("menu_items") or {}).items():
        season = it.get("season")
        state.menu_items[iid] = MenuItem(
            item_id=str(it.get("item_id", iid)),
            name=str(it.get("name", iid)),
            category=str(it.get("category", "drinks")),
            base_price=float(it.get("base_price", 10.0)),
            current_price=float(it.get("current_price", it.get("base_price", 10.0))),
            unlocked=bool(it.get("unlocked", False)),
            unlock_cost=float(it.get("unlock_cost", 0.0)),
            popularity=float(it.get("popularity", 50.0)),
            prep_time=int(it.get("prep_time", 30)),
            season=str(season) if season else None,
        )

    state.active_events = [event_from_dict(e) for e in (d.get("active_events") or [])]
    state.event_history = [
        EventHistoryRecord(
            day=int(h.get("day", 0)),
            time=int(h.get("time", 0)),
            event_id=str(h.get("event_id", "")),
            name=str(h.get("name", "")),
            event_type=str(h.get("event_type", "")),
        )
        for h in (d.get("event_history") or [])
    ]

    for tid, td in (d.get("tasks") or {}).items():
        state.tasks[tid] = _load_task(tid, td)
    for aid, ad in (d.get("achievements") or {}).items():
        ud = ad.get("unlocked_day")
        state.achievements[aid] = Achievement(
            achievement_id=str(ad.get("achievement_id", aid)),
            name=str(ad.get("name", aid)),
            description=str(ad.get("description", "")),
            stat_key=str(ad.get("stat_key", "total_customers_served")),
            target=float(ad.get("target", 1.0)),
            reward_gold=float(ad.get("reward_gold", 0.0)),
            unlocked=bool(ad.get("unlocked", False)),
            unlocked_day=int(ud) if ud is not None else None,
        )

    sd = d.get("statistics") or {}
    state.statistics = Statistics(
        total_customers_served=int(sd.get("total_customers_served", 0)),
        total_revenue=float(sd.get("total_revenue", 0.0)),
        total_days_played=int(sd.get("total_days_played", 0)),
        total_tips_earned=float(sd.get("total_tips_earned", 0.0)),
        perfect_services_count=int(sd.get("perfect_services_count", 0)),
        maids_hired=int(sd.get("maids_hired", 0)),
    )
    state.notifications = [
        Notification(
            notification_id=str(n.get("notification_id", "")),
            kind=str(n.get("kind", "info")),
            title=str(n.get("title", "")),
            message=str(n.get("message", "")),
            timestamp=int(n.get("timestamp", 0)),
        )
        for n in (d.get("notifications") or [])
    ]

    state.rng_seed = int(d.get("rng_seed", 20260101))
    state.rng_state = d.get("rng_state")
    state.serial = int(d.get("serial", 0))
    return state


def append_ledger_csv(record: DailyFinance, path: Optional[Path] = None) -> None:
    p = path or ledger_path()
    write_header = (not p.exists()) or (p.stat().st_size <= 0)
    with p.open("a", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        if write_header:
            w.writerow(LEDGER_COLUMNS)
        w.writerow([record.day, f"{record.revenue:.2f}", f"{record.expenses:.2f}", f"{record.profit:.2f}"])


def read_ledger_rows(path: Optional[Path] = None) -> List[Dict[str, str]]:
    p = path or ledger_path()
    if not p.exists():
        return []
    with p.open("r", encoding="utf-8", newline="") as f:
        return list(csv.DictReader(f))
