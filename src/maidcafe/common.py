from __future__ import annotations

import math
import random
import zlib
from typing import Any, List, Optional, Tuple, cast

from maidcafe.config import EngineConfig
from maidcafe.models import GameState, Notification


def _clamp(v: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, float(v)))


def _num(x: Any) -> Optional[float]:
    """Finite float or None; action payloads come from untrusted callers."""

    if isinstance(x, bool):
        return None
    try:
        v = float(x)
    except (TypeError, ValueError):
        return None
    if math.isnan(v) or math.isinf(v):
        return None
    return v


def _weighted_choice(pairs: List[Tuple[str, float]], rng: random.Random) -> str:
    total = sum(max(0.0, float(w)) for _, w in pairs)
    if total <= 0:
        return pairs[0][0]
    r = rng.random() * total
    acc = 0.0
    for k, w in pairs:
        acc += max(0.0, float(w))
        if r <= acc:
            return k
    return pairs[-1][0]


def now_abs(state: GameState) -> int:
    """Absolute virtual minute, used for timestamps."""

    return (int(state.day) - 1) * 1440 + int(state.time)


def next_id(state: GameState, prefix: str) -> str:
    state.serial = int(state.serial) + 1
    return f"{prefix}{state.day:04d}_{state.serial:06d}"


def notify(state: GameState, cfg: EngineConfig, kind: str, title: str, message: str) -> None:
    state.notifications.append(
        Notification(
            notification_id=next_id(state, "N"),
            kind=kind,
            title=title,
            message=message,
            timestamp=now_abs(state),
        )
    )
    if len(state.notifications) > cfg.max_notifications:
        state.notifications = state.notifications[-cfg.max_notifications :]


def _to_jsonable(x: object) -> object:
    if isinstance(x, tuple):
        return [_to_jsonable(v) for v in x]
    if isinstance(x, list):
        return [_to_jsonable(v) for v in x]
    return x


def _to_tuple(x: object) -> object:
    if isinstance(x, list):
        return tuple(_to_tuple(v) for v in x)
    return x


def rng_from_state(state: GameState) -> random.Random:
    rng = random.Random()
    seed = int(getattr(state, "rng_seed", 20260101) or 20260101)
    st = getattr(state, "rng_state", None)
    if st is not None:
        try:
            rng.setstate(cast(tuple, _to_tuple(st)))
            return rng
        except (TypeError, ValueError):
            pass
    rng.seed(seed)
    return rng


def persist_rng_state(state: GameState, rng: random.Random) -> None:
    state.rng_state = _to_jsonable(rng.getstate())


def release_pair(state: GameState, maid_id: Optional[str] = None, customer_id: Optional[str] = None) -> None:
    """Break a maid/customer service pairing from either side.

    A customer still waiting for its order goes back to ``seated`` so it can be picked up again.
    """

    maid = state.maids.get(maid_id) if maid_id else None
    customer = state.customers.get(customer_id) if customer_id else None
    # Only follow a link when the other side points back.
    if maid is not None and customer is None and maid.status.serving_customer_id:
        other = state.customers.get(maid.status.serving_customer_id)
        if other is not None and other.serving_maid_id == maid.maid_id:
            customer = other
    if customer is not None and maid is None and customer.serving_maid_id:
        partner = state.maids.get(customer.serving_maid_id)
        if partner is not None and partner.status.serving_customer_id == customer.customer_id:
            maid = partner

    if maid is not None:
        maid.status.is_working = False
        maid.status.current_task = None
        maid.status.serving_customer_id = None
    if customer is not None:
        customer.serving_maid_id = None
        customer.service_progress = None
        customer.service_start_time = None
        if customer.status == "waiting_order":
            customer.status = "seated"


def _stable_u32(s: str) -> int:
    """Stable unsigned 32-bit hash for seeding; builtin hash() is salted per process."""

    return int(zlib.crc32(s.encode("utf-8")) & 0xFFFFFFFF)
