from datetime import date

import pytest
from pymongo.errors import DuplicateKeyError

from healthconnect.db import MongoStore
from healthconnect.errors import ValidationError
from healthconnect.services import metrics

D = date(2024, 3, 14)


def test_log_value_upserts_same_day(store):
    metrics.log_value(store, "u1", "water", 2, day=D)
    rec = metrics.log_value(store, "u1", "water", 5, day=D)
    assert rec["value"] == 5
    assert rec["target"] == 8
    assert store.daily_metrics.count_documents({"user_id": "u1"}) == 1


def test_new_day_gets_new_record(store):
    metrics.log_value(store, "u1", "sleep", 6, day=D)
    metrics.log_value(store, "u1", "sleep", 7, day=date(2024, 3, 15))
    assert store.daily_metrics.count_documents({"user_id": "u1", "type": "sleep"}) == 2


def test_target_and_value_are_independent(store):
    metrics.set_target(store, "u1", "calories", 1700, day=D)
    rec = metrics.log_value(store, "u1", "calories", 900, day=D)
    assert (rec["value"], rec["target"]) == (900, 1700)
    rec = metrics.set_target(store, "u1", "calories", 1600, day=D)
    assert (rec["value"], rec["target"]) == (900, 1600)


def test_type_is_normalized_and_checked(store):
    assert metrics.log_value(store, "u1", " Water ", 1, day=D)["type"] == "water"
    with pytest.raises(ValidationError):
        metrics.log_value(store, "u1", "steps", 1000, day=D)
    with pytest.raises(ValidationError):
        metrics.set_target(store, "u1", "water", -2, day=D)
    with pytest.raises(ValidationError):
        metrics.log_value(store, "u1", "water", "lots", day=D)


def test_query_range_inclusive_and_ordered(store):
    for day, v in ((date(2024, 3, 12), 1), (date(2024, 3, 10), 3), (date(2024, 3, 14), 2), (date(2024, 3, 9), 9)):
        metrics.log_value(store, "u1", "water", v, day=day)
    metrics.log_value(store, "u1", "sleep", 8, day=date(2024, 3, 12))
    metrics.log_value(store, "u2", "water", 4, day=date(2024, 3, 12))

    rows = metrics.query_range(store, "u1", date(2024, 3, 10), date(2024, 3, 14))
    assert [(r["date"], r["type"]) for r in rows] == [
        ("2024-03-10", "water"),
        ("2024-03-12", "sleep"),
        ("2024-03-12", "water"),
        ("2024-03-14", "water"),
    ]

    water = metrics.query_range(store, "u1", date(2024, 3, 10), date(2024, 3, 14), "water")
    assert [r["value"] for r in water] == [3, 1, 2]


def test_query_range_rejects_inverted_range(store):
    with pytest.raises(ValidationError):
        metrics.query_range(store, "u1", date(2024, 3, 14), date(2024, 3, 1))


def test_records_for_day(store):
    metrics.log_value(store, "a", "water", 1, day=D)
    metrics.log_value(store, "b", "sleep", 5, day=D)
    metrics.log_value(store, "c", "sleep", 5, day=D)
    rows = metrics.records_for_day(store, ["a", "b"], D)
    assert sorted(r["user_id"] for r in rows) == ["a", "b"]


def test_target_must_be_positive(store):
    with pytest.raises(ValidationError):
        metrics.set_target(store, "u1", "water", 0, day=D)
    assert store.daily_metrics.count_documents({}) == 0


class _RacingCollection:
    """First upsert loses to a concurrent insert of the same day."""

    def __init__(self, col):
        self._col = col
        self.raced = False

    def update_one(self, key, update, upsert=False):
        if upsert and not self.raced:
            self.raced = True
            self._col.insert_one({**key, "value": 2, "target": 8})
            raise DuplicateKeyError("E11000 duplicate key error")
        return self._col.update_one(key, update, upsert=upsert)

    def __getattr__(self, name):
        return getattr(self._col, name)


def test_lost_insert_race_updates_existing_record(store, monkeypatch):
    racing = _RacingCollection(store.daily_metrics)
    monkeypatch.setattr(MongoStore, "daily_metrics", property(lambda self: racing))

    rec = metrics.log_value(store, "u1", "water", 5, day=D)
    assert racing.raced
    assert rec["value"] == 5
    assert rec["target"] == 8
    assert store.daily_metrics.count_documents({"user_id": "u1", "type": "water"}) == 1
