from __future__ import annotations

import logging
import math
import threading

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from maidcafe.actions import ResetGame, LoadGame, Tick, action_from_dict
from maidcafe.clock import ClockDriver
from maidcafe.config import EngineConfig
from maidcafe.engine import hire_random_maid, reduce, simulate_day
from maidcafe.events import combine_event_multipliers
from maidcafe.finance import operating_cost, operating_cost_breakdown
from maidcafe.models import GameState
from maidcafe.presets import new_game_state
from maidcafe.reporting import compute_break_even_customers, format_clock
from maidcafe.staff import calculate_efficiency, max_maids
from maidcafe.storage import (
    SAVE_VERSION,
    append_ledger_csv,
    data_dir,
    load_state,
    read_ledger_rows,
    reset_data_files,
    save_state,
    state_from_dict,
    state_path,
    state_to_dict,
    validate_payload,
)


logger = logging.getLogger(__name__)

_lock = threading.Lock()

TICK_INTERVAL_MS = 2000.0


def _ensure_state() -> GameState:
    p = state_path()
    if p.exists():
        try:
            return load_state(p)
        except ValueError as e:
            # Corrupted save: rebuild a fresh one.
            logger.warning("discarding unreadable save %s: %s", p, e)
            p.unlink(missing_ok=True)
    s = new_game_state()
    save_state(s)
    return s


def create_app() -> FastAPI:
    app = FastAPI(title="Maid Cafe Simulator API")

    # Allow Vite dev server or other local frontends.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    data_dir()
    cfg = EngineConfig()
    pending = {"ms": 0.0}  # partial tick interval between /api/advance polls

    def _state_to_dto(state: GameState) -> dict:
        d = state_to_dict(state)
        d.pop("rng_state", None)
        d["clock"] = format_clock(state.time)
        d["max_maids"] = max_maids(state.facility.cafe_level, cfg)
        d["operating_cost"] = operating_cost(state)
        d["operating_cost_breakdown"] = operating_cost_breakdown(state)
        d["event_multipliers"] = combine_event_multipliers(state)
        be = compute_break_even_customers(state)
        d["break_even_customers"] = None if be == float("inf") else round(be, 2)
        d["maid_efficiency"] = {mid: round(calculate_efficiency(m), 2) for mid, m in state.maids.items()}
        return d

    def _record_closed_day(before: GameState, after: GameState) -> None:
        if before.is_business_hours and not after.is_business_hours and after.finance.history:
            append_ledger_csv(after.finance.history[-1])

    def _commit(before: GameState, after: GameState) -> dict:
        _record_closed_day(before, after)
        if after is not before:
            save_state(after)
        return {"changed": after is not before, "state": _state_to_dto(after)}

    @app.get("/")
    def root():
        return {"name": "maid-cafe-sim", "save_version": SAVE_VERSION, "docs": "/docs"}

    @app.get("/api/state")
    def api_state():
        with _lock:
            state = _ensure_state()
            return _state_to_dto(state)

    @app.post("/api/action")
    def api_action(payload: dict = Body(default={})):
        try:
            action = action_from_dict(payload)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        with _lock:
            state = _ensure_state()
            return _commit(state, reduce(state, action, cfg=cfg))

    @app.post("/api/advance")
    def api_advance(payload: dict = Body(default={})):
        """Advance the clock, unpausing first.

        ``{"elapsed_ms": n}`` feeds real time through the clock driver (capped catch-up, partial
        intervals carried to the next call); ``{"ticks": n}`` runs n full ticks. Either way it
        stops when the day closes.
        """

        with _lock:
            before = _ensure_state()
            clock = ClockDriver(before, tick_interval_ms=TICK_INTERVAL_MS, cfg=cfg)
            if clock.state.is_business_hours:
                clock.resume()
            if "elapsed_ms" in payload:
                try:
                    elapsed = float(payload["elapsed_ms"])
                except (TypeError, ValueError):
                    raise HTTPException(status_code=400, detail="elapsed_ms must be a number")
                if not math.isfinite(elapsed):
                    raise HTTPException(status_code=400, detail="elapsed_ms must be finite")
                clock.accumulated_ms = pending["ms"]
                clock.advance(elapsed)
                pending["ms"] = clock.accumulated_ms
            else:
                try:
                    ticks = int(payload.get("ticks", 1))
                except (TypeError, ValueError):
                    raise HTTPException(status_code=400, detail="ticks must be an integer")
                for _ in range(max(1, min(ticks, 500))):
                    if not clock.running:
                        break
                    clock.dispatch(Tick(delta_time=clock.tick_interval_ms))
            out = _commit(before, clock.state)
            out["dropped_ticks"] = clock.dropped_ticks
            return out

    @app.post("/api/simulate-day")
    def api_simulate_day():
        with _lock:
            state = _ensure_state()
            return _commit(state, simulate_day(state, cfg))

    @app.post("/api/hire")
    def api_hire():
        with _lock:
            state = _ensure_state()
            return _commit(state, hire_random_maid(state, cfg=cfg))

    @app.post("/api/save")
    def api_save():
        with _lock:
            state = _ensure_state()
            save_state(state)
            return {"saved": True, "day": state.day, "path": str(state_path())}

    @app.get("/api/ledger")
    def api_ledger():
        return {"rows": read_ledger_rows()}

    @app.get("/api/export")
    def api_export():
        with _lock:
            state = _ensure_state()
            return {"version": SAVE_VERSION, "state": state_to_dict(state)}

    @app.post("/api/load")
    def api_load(payload: dict = Body(default={})):
        try:
            loaded = state_from_dict(validate_payload(payload))
        except (ValueError, TypeError) as e:
            raise HTTPException(status_code=400, detail=f"invalid save: {e}")
        with _lock:
            state = _ensure_state()
            return _commit(state, reduce(state, LoadGame(state=loaded), cfg=cfg))

    @app.post("/api/reset")
    def api_reset():
        with _lock:
            state = _ensure_state()
            reset_data_files()
            fresh = reduce(state, ResetGame(), cfg=cfg)
            save_state(fresh)
            return {"changed": True, "state": _state_to_dto(fresh)}

    return app


app = create_app()
