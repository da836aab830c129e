from healthconnect.db import MongoStore


def ensure_indexes(store: MongoStore) -> None:
    # users
    store.users.create_index("email", unique=True)
    store.users.create_index("role")

    # one record per user / metric / calendar day
    store.daily_metrics.create_index([("user_id", 1), ("type", 1), ("day", 1)], unique=True)
    store.daily_metrics.create_index([("user_id", 1), ("date", -1)])

    # doctor <-> patient relation
    store.assignments.create_index([("patient_id", 1), ("doctor_id", 1)], unique=True)
    store.assignments.create_index("doctor_id")

    # activity / audit / tokens
    store.activity_logs.create_index([("user_id", 1), ("timestamp", -1)])
    store.audit_events.create_index([("ts", 1)])
    store.audit_events.create_index([("action", 1)])
    store.revoked_tokens.create_index("jti", unique=True)
    store.revoked_tokens.create_index("exp")
