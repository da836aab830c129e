# healthconnect/services/aggregation.py
from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from healthconnect.db import MongoStore
from healthconnect.services import metrics, profiles
from healthconnect.services.metrics import DEFAULT_TARGETS, METRIC_TYPES

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
WINDOW_DAYS = 7


def weekday_label(day: date) -> str:
    return WEEKDAY_LABELS[day.weekday()]


def window(today: date, days: int = WINDOW_DAYS) -> List[date]:
    """Calendar days ending at today (inclusive), oldest first."""
    return [today - timedelta(days=days - 1 - i) for i in range(days)]


def _snapshot_from(records: List[dict]) -> Dict[str, Dict[str, float]]:
    snap = {t: {"value": 0, "target": DEFAULT_TARGETS[t]} for t in METRIC_TYPES}
    for r in records:
        if r["type"] in snap:
            snap[r["type"]] = {"value": r["value"], "target": r["target"]}
    return snap


def today_snapshot(store: MongoStore, user_id: str, today: Optional[date] = None) -> Dict[str, Dict[str, float]]:
    today = today or metrics.utc_today()
    return _snapshot_from(metrics.query_range(store, user_id, today, today))


def weekly_series(store: MongoStore, user_id: str, today: Optional[date] = None) -> Dict[str, List[dict]]:
    """
    Per metric, 7 points {date, day, value} covering today and the six days
    before it. Missing days are zero-filled; labels come from each date.
    """
    today = today or metrics.utc_today()
    days = window(today)
    records = metrics.query_range(store, user_id, days[0], today)
    by_key = {(r["type"], r["date"]): r["value"] for r in records}

    return {
        t: [
            {"date": d.isoformat(), "day": weekday_label(d), "value": by_key.get((t, d.isoformat()), 0)}
            for d in days
        ]
        for t in METRIC_TYPES
    }


def weekly_chart(series: Dict[str, List[dict]]) -> List[dict]:
    """Merge the three series into 7 rows {date, day, water, calories, hours}."""
    rows: Dict[str, dict] = {}
    for point in series["water"]:
        rows[point["date"]] = {"date": point["date"], "day": point["day"], "water": 0, "calories": 0, "hours": 0}
    for t, column in (("water", "water"), ("calories", "calories"), ("sleep", "hours")):
        for point in series[t]:
            rows[point["date"]][column] = point["value"]
    return [rows[k] for k in sorted(rows)]


def goal_progress(snapshot: Dict[str, Dict[str, float]]) -> Dict[str, int]:
    """Percent of today's target reached, capped at 100."""
    out = {}
    for t, pair in snapshot.items():
        target = pair.get("target") or 0
        out[t] = 0 if target <= 0 else min(100, int(round(pair["value"] / target * 100)))
    return out


def goals_met(snapshot: Dict[str, Dict[str, float]]) -> int:
    return sum(1 for pair in snapshot.values() if pair["target"] and pair["value"] >= pair["target"])


def _status(snapshot: Dict[str, Dict[str, float]]) -> str:
    if goals_met(snapshot) == len(METRIC_TYPES):
        return "Goal Met"
    if any(pair["value"] > 0 for pair in snapshot.values()):
        return "In Progress"
    return "No Activity Today"


def doctor_stats(store: MongoStore, doctor_id: str, today: Optional[date] = None) -> Dict[str, Any]:
    """Summary of a provider's assigned patients for today."""
    today = today or metrics.utc_today()
    patient_ids = profiles.assigned_patient_ids(store, doctor_id)
    patients = profiles.users_by_ids(store, patient_ids, role="patient")

    per_user: Dict[str, List[dict]] = {}
    for r in metrics.records_for_day(store, patient_ids, today):
        per_user.setdefault(r["user_id"], []).append(r)

    rows = []
    for p in patients:
        pid = str(p["_id"])
        snap = _snapshot_from(per_user.get(pid, []))
        rows.append({
            "id": pid,
            "name": p.get("name"),
            "email": p.get("email"),
            "age": p.get("age"),
            "status": _status(snap),
            "goalsMet": goals_met(snap),
            "today": snap,
        })

    return {
        "date": today.isoformat(),
        "totalPatients": len(rows),
        "activeToday": sum(1 for r in rows if r["status"] != "No Activity Today"),
        "goalsMetToday": sum(1 for r in rows if r["status"] == "Goal Met"),
        "patients": rows,
    }
