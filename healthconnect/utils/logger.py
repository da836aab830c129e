from datetime import datetime, timezone

from healthconnect.db import MongoStore


def log_activity(store: MongoStore, user_id: str, action: str, metadata: dict | None = None):
    store.activity_logs.insert_one({
        "user_id": user_id,
        "action": action,
        "timestamp": datetime.now(timezone.utc),
        "metadata": metadata or {}
    })
