from __future__ import annotations

from pathlib import Path

import pytest

from maidcafe.cli import main
from maidcafe.storage import load_state, read_ledger_rows


def _assert(cond: bool, msg: str) -> None:
    if not cond:
        raise AssertionError(msg)


def test_autoplay_runs_days_and_saves(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    monkeypatch.setenv("MAIDCAFE_DATA_DIR", str(tmp_path))
    rc = main(["--new", "--seed", "5", "--autoplay", "2"])
    _assert(rc == 0, f"exit code {rc}")

    rows = read_ledger_rows()
    _assert([r["day"] for r in rows] == ["1", "2"], f"ledger rows {rows}")

    s = load_state()
    _assert(s.day == 3 and s.is_business_hours, "day 3 is open and waiting")
    _assert(len(s.maids) == 2, "autoplay filled the staff")
    _assert(s.menu_items["latte_art"].unlocked, "cheapest dish unlocked")
    _assert("日结" in capsys.readouterr().out, "daily summary printed")


def test_menu_loop_exits_on_zero(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MAIDCAFE_DATA_DIR", str(tmp_path))
    answers = iter(["2", "0"])
    monkeypatch.setattr("builtins.input", lambda _prompt="": next(answers))
    _assert(main(["--new"]) == 0, "clean exit")
    _assert(len(load_state().maids) == 1, "hire from the menu was saved on exit")
