# healthconnect/services/metrics.py
"""
Daily metric log.

One document per (user_id, type, day) in ``daily_metrics``; ``day`` is the UTC
calendar day as an ISO string and a unique index backs the key. Every write is
a single ``update_one(..., upsert=True)`` so same-day logs update in place.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo.errors import DuplicateKeyError

from healthconnect.db import MongoStore
from healthconnect.errors import ValidationError

UTC = timezone.utc

METRIC_TYPES = ("water", "calories", "sleep")

# glasses / kcal / hours
DEFAULT_TARGETS = {"water": 8, "calories": 2000, "sleep": 8}


def utc_today() -> date:
    return datetime.now(UTC).date()


def day_start(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=UTC)


def _check_type(metric_type: str) -> str:
    t = (metric_type or "").strip().lower()
    if t not in METRIC_TYPES:
        raise ValidationError(f"Unknown metric type '{metric_type}'. Expected one of: {', '.join(METRIC_TYPES)}")
    return t


def _check_amount(name: str, amount: Any) -> float:
    try:
        n = float(amount)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number")
    if n < 0:
        raise ValidationError(f"{name} must not be negative")
    return n


def _public(doc: Optional[dict]) -> Optional[dict]:
    if not doc:
        return None
    return {
        "id": str(doc["_id"]),
        "type": doc["type"],
        "date": doc["day"],
        "value": doc.get("value", 0),
        "target": doc.get("target", DEFAULT_TARGETS.get(doc["type"])),
        "updatedAt": doc.get("updated_at"),
    }


def _upsert(store: MongoStore, user_id: str, metric_type: str, day: date,
            field: str, amount: float, on_insert: Dict[str, Any]) -> dict:
    key = {"user_id": str(user_id), "type": metric_type, "day": day.isoformat()}
    now = datetime.now(UTC)
    update = {
        "$set": {field: amount, "updated_at": now},
        "$setOnInsert": {"date": day_start(day), "created_at": now, **on_insert},
    }
    try:
        store.daily_metrics.update_one(key, update, upsert=True)
    except DuplicateKeyError:
        # another request inserted the same day first; last write wins
        store.daily_metrics.update_one(key, {"$set": update["$set"]})
    return _public(store.daily_metrics.find_one(key))


def log_value(store: MongoStore, user_id: str, metric_type: str, value: Any,
              day: Optional[date] = None) -> dict:
    """Set the day's reading; a new record gets the default target."""
    t = _check_type(metric_type)
    v = _check_amount("value", value)
    return _upsert(store, user_id, t, day or utc_today(), "value", v, {"target": DEFAULT_TARGETS[t]})


def set_target(store: MongoStore, user_id: str, metric_type: str, target: Any,
               day: Optional[date] = None) -> dict:
    """Set the day's goal; a new record starts at value 0."""
    t = _check_type(metric_type)
    n = _check_amount("target", target)
    if n == 0:
        raise ValidationError("target must be greater than zero")
    return _upsert(store, user_id, t, day or utc_today(), "target", n, {"value": 0})


def query_range(store: MongoStore, user_id: str, from_day: date, to_day: date,
                metric_type: Optional[str] = None) -> List[dict]:
    """Records with from_day <= day <= to_day, oldest first."""
    if from_day > to_day:
        raise ValidationError("from date must not be after to date")
    q: Dict[str, Any] = {
        "user_id": str(user_id),
        "day": {"$gte": from_day.isoformat(), "$lte": to_day.isoformat()},
    }
    if metric_type:
        q["type"] = _check_type(metric_type)
    cursor = store.daily_metrics.find(q).sort([("day", 1), ("type", 1)])
    return [_public(d) for d in cursor]


def records_for_day(store: MongoStore, user_ids: List[str], day: date) -> List[dict]:
    """Raw records of several users for one day (doctor dashboard)."""
    cursor = store.daily_metrics.find({"user_id": {"$in": [str(u) for u in user_ids]}, "day": day.isoformat()})
    return [dict(_public(d), user_id=d["user_id"]) for d in cursor]
